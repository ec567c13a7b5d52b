"""Input validation for the calculation engine.

Runs before any schedule is generated. Unlike the decoders, the engine never
substitutes defaults for contract terms: a bad principal, rate or count is
reported to the caller, who surfaces the message to the end user as-is.
"""

from __future__ import annotations

from collections.abc import Sequence
from decimal import Decimal
from typing import Any

from revisional.config import settings
from revisional.schemas.contract import RateBand


class CalculationValidationError(Exception):
    """Raised when calculation inputs are invalid. Never retried."""

    def __init__(self, message: str, code: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details or {}


def require_positive_amount(value: Decimal | None, field: str, code: str) -> None:
    """Reject missing, zero or negative monetary amounts."""
    if value is None or value <= 0:
        msg = f"{field} deve ser maior que zero"
        raise CalculationValidationError(msg, code, {field: str(value)})


def require_positive_count(value: int | None, field: str, code: str) -> None:
    """Reject missing or non-positive period counts."""
    if value is None or value <= 0:
        msg = f"{field} deve ser um inteiro positivo"
        raise CalculationValidationError(msg, code, {field: value})


def require_valid_rate(value: Decimal | None, field: str, code: str) -> None:
    """Reject non-positive rates and rates that are clearly not fractions."""
    if value is None or value <= 0:
        msg = f"{field} deve ser maior que zero"
        raise CalculationValidationError(msg, code, {field: str(value)})
    ceiling = settings.engine.max_monthly_rate
    if value > ceiling:
        msg = f"{field} deve estar em formato decimal (ex: 0.012 = 1,2% a.m.)"
        raise CalculationValidationError(msg, code, {field: str(value), "max": str(ceiling)})


def validate_installment_inputs(
    principal: Decimal,
    installments: int,
    contract_rate: Decimal,
    market_rate: Decimal,
    horizon: int | None = None,
) -> None:
    """Validate the terms of an installment contract (SAC/PRICE).

    Raises:
        CalculationValidationError: On the first invalid field.
    """
    require_positive_amount(principal, "Valor financiado", "PRINCIPAL_INVALIDO")
    require_positive_count(installments, "Número de parcelas", "PARCELAS_INVALIDAS")
    require_valid_rate(contract_rate, "Taxa mensal do contrato", "TAXA_CONTRATO_INVALIDA")
    require_valid_rate(market_rate, "Taxa mensal de mercado", "TAXA_MERCADO_INVALIDA")
    if horizon is not None:
        require_positive_count(horizon, "Horizonte de análise", "HORIZONTE_INVALIDO")


def validate_revolving_inputs(
    balance: Decimal,
    contract_rate: Decimal,
    market_rate: Decimal,
    months: int,
    minimum_payment_rate: Decimal,
    max_months: int | None = None,
) -> None:
    """Validate a revolving-credit analysis request.

    ``max_months``, when given, caps the horizon.

    Raises:
        CalculationValidationError: On the first invalid field.
    """
    require_positive_amount(balance, "Saldo devedor", "SALDO_INVALIDO")
    require_valid_rate(contract_rate, "Taxa do rotativo", "TAXA_CONTRATO_INVALIDA")
    require_valid_rate(market_rate, "Taxa mensal de mercado", "TAXA_MERCADO_INVALIDA")
    require_positive_count(months, "Meses de análise", "HORIZONTE_INVALIDO")
    if max_months is not None and months > max_months:
        msg = f"Meses de análise não pode exceder {max_months}"
        raise CalculationValidationError(msg, "HORIZONTE_INVALIDO", {"months": months, "max": max_months})
    if minimum_payment_rate < 0 or minimum_payment_rate >= 1:
        msg = "Pagamento mínimo deve estar entre 0 e 1 (formato decimal)"
        raise CalculationValidationError(
            msg, "PAGAMENTO_MINIMO_INVALIDO", {"minimum_payment_rate": str(minimum_payment_rate)}
        )


def validate_rate_bands(bands: Sequence[RateBand], installments: int) -> None:
    """Validate the contract's rate bands (start and end are installment numbers).

    Raises:
        CalculationValidationError: On a malformed band or an invalid rate.
    """
    for band in bands:
        if band.start_period < 1 or band.end_period < band.start_period or band.end_period > installments:
            msg = f"Faixa de taxa inválida: parcelas {band.start_period} a {band.end_period}"
            raise CalculationValidationError(
                msg,
                "FAIXA_TAXA_INVALIDA",
                {"start_period": band.start_period, "end_period": band.end_period},
            )
        require_valid_rate(band.monthly_rate, "Taxa da faixa", "TAXA_CONTRATO_INVALIDA")


def validate_correction_rates(rates: Sequence[Decimal]) -> None:
    """A monetary correction of -100% or below would wipe out the balance."""
    for period, rate in enumerate(rates, start=1):
        if rate <= -1:
            msg = f"Índice de correção inválido na parcela {period}"
            raise CalculationValidationError(msg, "CORRECAO_INVALIDA", {"period": period, "rate": str(rate)})
