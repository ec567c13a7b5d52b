"""Comparative rate analyzer: contract track vs market track.

Pure Python, Decimal arithmetic. Implements:
- Sobretaxa in percentage points: i_contract - i_market (decimal difference)
- Relative abuse: (i_contract - i_market) / i_market × 100
- Restitution, two methods over the simulated horizon:
    simple:  Σ nominal installment - Σ installment re-priced at the market
             rate on the contract's own balances
    average: Σ (J_contract - J_market) from the two-track schedule
- CET: IRR of the full payment stream against the net amount released,
  annualized by compounding, never by multiplying by 12. Computed for the
  contract track and, with the same charges, for the market track
- Gauss thesis (optional): the contract priced under simple interest,
  against the installments actually charged
"""

from __future__ import annotations

import logging
from decimal import Decimal

from revisional.calculators.charges import aggregate_charges
from revisional.calculators.rates import gauss_installment, internal_rate_of_return, monthly_to_annual
from revisional.calculators.schedule import generate_schedule
from revisional.calculators.validation import CalculationValidationError, validate_installment_inputs
from revisional.schemas.analysis import AmortizationSchedule, InstallmentAnalysisResult
from revisional.schemas.contract import AccessoryCharges, ChargeBuckets, ContractTerms, MarketRate

logger = logging.getLogger(__name__)

_ZERO = Decimal("0")
_HUNDRED = Decimal("100")


def sobretaxa_pp(contract_rate: Decimal, market_rate: Decimal) -> Decimal:
    """Rate excess as a plain decimal difference (0.006 = 0.6 p.p.)."""
    return contract_rate - market_rate


def percentual_abuso(contract_rate: Decimal, market_rate: Decimal) -> Decimal | None:
    """Relative excess over the market rate, in percent.

    Not interchangeable with sobretaxa_pp: 10.5% vs 5% a.m. is 5.5 p.p.
    but 110% above market.

    Returns:
        The percentage, or None when the market rate is zero (no abuse data).
    """
    if market_rate == 0:
        return None
    return (contract_rate - market_rate) / market_rate * _HUNDRED


def restitution_simple(schedule: AmortizationSchedule) -> Decimal:
    """Nominal-rate restitution (signed).

    Each nominal installment (charges excluded) is compared with the same
    installment re-priced at the market rate on the contract's (corrected)
    balance.
    """
    market_rate = schedule.market_rate
    charged = sum((r.amortization + r.interest_contract for r in schedule.rows), _ZERO)
    repriced = sum(
        (r.amortization + (r.opening_balance + r.monetary_correction) * market_rate for r in schedule.rows),
        _ZERO,
    )
    return charged - repriced


def restitution_average(schedule: AmortizationSchedule) -> Decimal:
    """Schedule-integral restitution (signed): Σ (J_contract - J_market)."""
    if not schedule.rows:
        return _ZERO
    return schedule.rows[-1].cumulative_restitution


def floor_restitution(value: Decimal) -> Decimal:
    """A negative gap means nothing is owed back to the debtor."""
    return max(_ZERO, value)


def annual_cost_rate(monthly: Decimal) -> Decimal:
    """Annual CET compounded from the monthly one."""
    return monthly_to_annual(monthly)


def effective_cost_rate(
    principal: Decimal,
    schedule: AmortizationSchedule,
    buckets: ChargeBuckets,
) -> tuple[Decimal, Decimal]:
    """Monthly and annual CET of the contract track, all charges included.

    The debtor receives principal minus the initial charges and pays every
    full installment (recurring charges included). When the horizon is
    shorter than the term, the remaining balance is settled with the last
    installment.

    Returns:
        Tuple of (cet_monthly, cet_annual).

    Raises:
        CalculationValidationError: If initial charges consume the whole principal.
    """
    flows = [r.installment for r in schedule.rows]
    if flows and schedule.rows[-1].closing_balance > 0:
        flows[-1] += schedule.rows[-1].closing_balance
    return _cost_rate(principal, flows, buckets)


def market_cost_rate(
    principal: Decimal,
    schedule: AmortizationSchedule,
    buckets: ChargeBuckets,
) -> tuple[Decimal, Decimal]:
    """Monthly and annual CET the debtor would bear at the market rate.

    Same net amount and recurring charges as the contract track; only the
    installments are replaced by the market-track ones.

    Raises:
        CalculationValidationError: If initial charges consume the whole principal.
    """
    flows = [r.corrected_installment + r.recurring_charges for r in schedule.rows]
    if flows and schedule.rows[-1].closing_balance_market > 0:
        flows[-1] += schedule.rows[-1].closing_balance_market
    return _cost_rate(principal, flows, buckets)


def _cost_rate(
    principal: Decimal,
    flows: list[Decimal],
    buckets: ChargeBuckets,
) -> tuple[Decimal, Decimal]:
    net_amount = principal - buckets.initial_total
    if net_amount <= 0:
        msg = "Valor líquido liberado deve ser positivo (encargos iniciais excedem o principal)"
        raise CalculationValidationError(
            msg,
            "VALOR_LIQUIDO_INVALIDO",
            {"principal": str(principal), "encargos_iniciais": str(buckets.initial_total)},
        )
    monthly = internal_rate_of_return(net_amount, flows)
    return monthly, annual_cost_rate(monthly)


def restitution_gauss(schedule: AmortizationSchedule, gauss_payment: Decimal) -> Decimal:
    """Nominal installments charged minus the simple-interest installments (signed)."""
    charged = sum((r.amortization + r.interest_contract for r in schedule.rows), _ZERO)
    return charged - gauss_payment * len(schedule.rows)


def simplified_cost_rate(
    rate: Decimal,
    principal: Decimal,
    total_charges: Decimal,
    months: int,
) -> tuple[Decimal, Decimal]:
    """CET approximation for balances without an installment plan.

    CET_m = i + charges / principal / months; CET_a = (1 + CET_m)^12 - 1.
    """
    monthly = rate + total_charges / principal / months
    return monthly, annual_cost_rate(monthly)


def analyze_comparative(
    terms: ContractTerms,
    market: MarketRate,
    charges: AccessoryCharges | None = None,
    horizon: int | None = None,
    gauss_thesis: bool = False,
) -> InstallmentAnalysisResult:
    """Compare the contract track with the market track of an installment contract.

    Composes the schedule generator, the charge aggregator and the
    comparative metrics. The result carries raw values only; analyzers
    decorate it with the formatted mirror. With ``gauss_thesis`` the result
    also carries the simple-interest installment and its restitution.

    Raises:
        CalculationValidationError: If the contract terms are invalid.
    """
    validate_installment_inputs(
        terms.principal,
        terms.installments,
        terms.contract_monthly_rate,
        market.monthly_rate,
        horizon,
    )
    if charges is None:
        charges = AccessoryCharges()

    periods = min(horizon, terms.installments) if horizon is not None else terms.installments
    buckets = aggregate_charges(charges, periods, terms.principal)
    schedule = generate_schedule(terms, market, buckets.recurring_per_period, horizon)

    total_c = schedule.total_interest_contract
    total_m = schedule.total_interest_market
    simple = floor_restitution(restitution_simple(schedule))
    average = floor_restitution(restitution_average(schedule))
    cet_monthly, cet_annual = effective_cost_rate(terms.principal, schedule, buckets)
    cet_market_monthly, cet_market_annual = market_cost_rate(terms.principal, schedule, buckets)

    installment_gauss: Decimal | None = None
    gauss: Decimal | None = None
    if gauss_thesis:
        installment_gauss = gauss_installment(
            terms.principal, terms.contract_monthly_rate, terms.installments
        )
        gauss = floor_restitution(restitution_gauss(schedule, installment_gauss))

    first = schedule.rows[0]
    logger.debug(
        "Comparative %s: juros contrato=%s mercado=%s simples=%s media=%s gauss=%s",
        terms.system, total_c, total_m, simple, average, gauss,
    )

    return InstallmentAnalysisResult(
        contract_monthly_rate=terms.contract_monthly_rate,
        contract_annual_rate=terms.contract_annual_rate or monthly_to_annual(terms.contract_monthly_rate),
        market_monthly_rate=market.monthly_rate,
        market_annual_rate=market.annual_rate or monthly_to_annual(market.monthly_rate),
        sobretaxa_pp=sobretaxa_pp(terms.contract_monthly_rate, market.monthly_rate),
        percentual_abuso=percentual_abuso(terms.contract_monthly_rate, market.monthly_rate),
        total_interest_contract=total_c,
        total_interest_market=total_m,
        interest_difference=total_c - total_m,
        restitution_simple=simple,
        restitution_average=average,
        restitution_double=2 * simple,
        cet_monthly=cet_monthly,
        cet_annual=cet_annual,
        system=terms.system,
        principal=terms.principal,
        installments=terms.installments,
        horizon=schedule.horizon,
        installment_contract=first.amortization + first.interest_contract,
        installment_market=first.corrected_installment,
        cet_market_monthly=cet_market_monthly,
        cet_market_annual=cet_market_annual,
        monetary_correction_total=schedule.total_monetary_correction,
        installment_gauss=installment_gauss,
        restitution_gauss=gauss,
        charges=buckets,
        schedule=schedule.rows,
    )
