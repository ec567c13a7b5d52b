"""Two-track amortization schedule generator (contract rate vs market rate).

Pure Python, Decimal arithmetic. Both tracks start at the financed
principal and are rolled forward period by period. The opening balance is
first corrected by the period's monetary index (TR, for SFH contracts):

  SD'_t = SD_t × (1 + c_t);  J_t = SD'_t × i_t
  SAC:    A_t = SD'_t / remaining periods
  PRICE:  A_t = PMT(SD'_t, i_t, remaining periods) - J_t

Without correction and with a single rate this is the textbook table:
constant amortization PV / n (SAC), constant installment (PRICE). Rate
bands replace the stated contract rate i_t on the periods they cover.

Each row records the divergence J_contract - J_market and its running sum,
the schedule-integral restitution.
"""

from __future__ import annotations

import calendar
import logging
from collections.abc import Sequence
from datetime import date
from decimal import Decimal

from revisional.calculators.rates import installment_amount
from revisional.calculators.validation import (
    CalculationValidationError,
    validate_correction_rates,
    validate_installment_inputs,
    validate_rate_bands,
)
from revisional.config import settings
from revisional.schemas.analysis import AmortizationRow, AmortizationSchedule
from revisional.schemas.contract import AmortizationSystem, ContractTerms, MarketRate, RateBand

logger = logging.getLogger(__name__)

_ZERO = Decimal("0")


def add_months(start: date, months: int) -> date:
    """Shift a date by whole months, clamping the day to the month's end."""
    month_index = start.month - 1 + months
    year = start.year + month_index // 12
    month = month_index % 12 + 1
    day = min(start.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


def _clamp_balance(balance: Decimal) -> Decimal:
    """Absorb rounding drift around zero instead of leaking negative cents."""
    if abs(balance) < settings.engine.balance_tolerance:
        return _ZERO
    return balance


def select_rate(bands: Sequence[RateBand], period: int, stated_rate: Decimal) -> Decimal:
    """Contract rate in force at an installment.

    Without bands the stated rate applies to every period. With bands, a
    period none of them covers is an error.

    Raises:
        CalculationValidationError: If bands exist and none covers the period.
    """
    if not bands:
        return stated_rate
    for band in bands:
        if band.start_period <= period <= band.end_period:
            return band.monthly_rate
    msg = f"Nenhuma faixa de taxa cobre a parcela {period}"
    raise CalculationValidationError(msg, "TAXA_NAO_ENCONTRADA", {"period": period})


def _correction_rate(rates: Sequence[Decimal], period: int) -> Decimal:
    if period <= len(rates):
        return rates[period - 1]
    return _ZERO


def _amortization(
    system: AmortizationSystem,
    balance: Decimal,
    remaining: int,
    rate: Decimal,
    interest: Decimal,
) -> Decimal:
    if system == AmortizationSystem.SAC:
        return balance / remaining
    return installment_amount(balance, rate, remaining) - interest


def generate_schedule(
    terms: ContractTerms,
    market: MarketRate,
    recurring_per_period: Decimal = _ZERO,
    horizon: int | None = None,
) -> AmortizationSchedule:
    """Generate the month-by-month schedule on both rate tracks.

    Args:
        terms: Contract terms (principal, count, contract rate, system,
            optional rate bands and monetary correction).
        market: Reference market rate.
        recurring_per_period: Accessory charges added to every nominal installment.
        horizon: Periods to simulate; defaults to the full term and never
            exceeds it.

    Returns:
        AmortizationSchedule with one row per simulated period.

    Raises:
        CalculationValidationError: If principal, count, rates, bands,
            correction or horizon are invalid.
    """
    validate_installment_inputs(
        terms.principal,
        terms.installments,
        terms.contract_monthly_rate,
        market.monthly_rate,
        horizon,
    )
    validate_rate_bands(terms.rate_bands, terms.installments)
    validate_correction_rates(terms.correction_rates)

    n = terms.installments
    periods = min(horizon, n) if horizon is not None else n
    principal = terms.principal
    rate_m = market.monthly_rate
    contract_rates = [
        select_rate(terms.rate_bands, t, terms.contract_monthly_rate) for t in range(1, periods + 1)
    ]

    logger.debug(
        "Schedule %s: PV=%s n=%s horizon=%s i_c=%s i_m=%s bands=%s correction=%s",
        terms.system, principal, n, periods, terms.contract_monthly_rate, rate_m,
        len(terms.rate_bands), len(terms.correction_rates),
    )

    rows: list[AmortizationRow] = []
    balance_c = principal
    balance_m = principal
    cumulative = _ZERO

    for t in range(1, periods + 1):
        rate_c = contract_rates[t - 1]
        remaining = n - t + 1

        correction = _correction_rate(terms.correction_rates, t)
        correction_c = balance_c * correction
        corrected_c = balance_c + correction_c
        corrected_m = balance_m + balance_m * correction

        interest_c = corrected_c * rate_c
        interest_m = corrected_m * rate_m
        amort_c = _amortization(terms.system, corrected_c, remaining, rate_c, interest_c)
        amort_m = _amortization(terms.system, corrected_m, remaining, rate_m, interest_m)

        closing_c = _clamp_balance(corrected_c - amort_c)
        closing_m = _clamp_balance(corrected_m - amort_m)

        divergence = interest_c - interest_m
        cumulative += divergence

        rows.append(AmortizationRow(
            period=t,
            due_date=add_months(terms.first_due_date, t - 1) if terms.first_due_date else None,
            opening_balance=balance_c,
            monetary_correction=correction_c,
            contract_rate=rate_c,
            interest_contract=interest_c,
            interest_market=interest_m,
            amortization=amort_c,
            amortization_market=amort_m,
            closing_balance=closing_c,
            closing_balance_market=closing_m,
            recurring_charges=recurring_per_period,
            installment=amort_c + interest_c + recurring_per_period,
            corrected_installment=amort_m + interest_m,
            divergence=divergence,
            cumulative_restitution=cumulative,
        ))

        balance_c = closing_c
        balance_m = closing_m

    return AmortizationSchedule(
        system=terms.system,
        principal=principal,
        installments=n,
        horizon=periods,
        contract_rate=terms.contract_monthly_rate,
        market_rate=rate_m,
        rows=rows,
    )
