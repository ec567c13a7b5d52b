"""Rate conversions, PMT and iterative rate solvers.

Pure Python, Decimal arithmetic. Implements:
- Monthly ↔ annual compounding: (1 + i_m)^12 - 1 and (1 + i_a)^(1/12) - 1
- PMT (PRICE installment): PV × i / (1 - (1 + i)^-n)
- Gauss installment (simple interest): PV × (1 + n × i) / (n + i × n(n - 1) / 2)
- IRR of a cash-flow stream (Newton-Raphson), used for CET
- Implied monthly rate from a known installment (bisection)
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from decimal import Decimal

from revisional.config import settings
from revisional.schemas.contract import AmortizationSystem

logger = logging.getLogger(__name__)

_ZERO = Decimal("0")
_ONE = Decimal("1")
_IRR_FLOOR = Decimal("-0.99")
_IRR_CEILING = Decimal("10")


def monthly_to_annual(monthly_rate: Decimal) -> Decimal:
    """Compound a monthly rate into an annual one: (1 + i)^12 - 1."""
    return (_ONE + monthly_rate) ** 12 - _ONE


def annual_to_monthly(annual_rate: Decimal) -> Decimal:
    """Equivalent monthly rate of an annual one: (1 + i)^(1/12) - 1."""
    return (_ONE + annual_rate) ** (_ONE / 12) - _ONE


def installment_amount(principal: Decimal, rate: Decimal, periods: int) -> Decimal:
    """Constant PRICE installment (principal + interest).

    A zero rate degenerates to principal / periods.
    """
    if rate == 0:
        return principal / periods
    return principal * rate / (_ONE - (_ONE + rate) ** -periods)


def gauss_installment(principal: Decimal, rate: Decimal, periods: int) -> Decimal:
    """Constant installment under simple interest (Gauss method).

    The principal and every installment are carried to the last due date
    at simple interest; the Gauss sum n(n - 1) / 2 collects the installment
    terms.
    With one period it equals PV × (1 + i), like PRICE.
    """
    gauss_sum = Decimal(periods * (periods - 1)) / 2
    return principal * (_ONE + periods * rate) / (periods + rate * gauss_sum)


def internal_rate_of_return(
    net_amount: Decimal,
    cash_flows: Sequence[Decimal],
    max_iterations: int | None = None,
    tolerance: Decimal | None = None,
) -> Decimal:
    """Periodic rate that equates net_amount with the discounted cash flows.

    Solves net_amount = Σ cf_t / (1 + r)^t, t = 1..n, with Newton-Raphson.
    The iterate is kept within [-99%, 1000%]; when the method does not
    converge the last iterate is returned.

    Args:
        net_amount: Amount actually released to the debtor at t = 0.
        cash_flows: Payments at t = 1..n.
        max_iterations: Defaults to the engine setting.
        tolerance: Absolute tolerance on the residual; defaults to the engine setting.

    Returns:
        The periodic rate as a fraction.
    """
    if max_iterations is None:
        max_iterations = settings.engine.irr_max_iterations
    if tolerance is None:
        tolerance = settings.engine.irr_tolerance
    if not cash_flows or net_amount <= 0:
        return _ZERO

    total = sum(cash_flows, _ZERO)
    rate = (total / net_amount - _ONE) / len(cash_flows)

    for iteration in range(max_iterations):
        residual = net_amount
        derivative = _ZERO
        growth = _ONE + rate
        discount = _ONE
        for t, flow in enumerate(cash_flows, start=1):
            discount *= growth
            residual -= flow / discount
            derivative += t * flow / (discount * growth)

        if abs(residual) < tolerance:
            logger.debug("IRR converged after %s iterations: %s", iteration, rate)
            break
        if derivative == 0:
            break

        rate = min(max(rate - residual / derivative, _IRR_FLOOR), _IRR_CEILING)

    return rate


def implied_monthly_rate(
    principal: Decimal,
    installment: Decimal,
    periods: int,
    system: AmortizationSystem = AmortizationSystem.PRICE,
) -> Decimal:
    """Recover the monthly rate a lender actually applied from a known installment.

    PRICE uses bisection on the PMT formula. SAC solves the first
    installment directly: installment = principal / n + principal × i.

    Returns:
        The implied rate, or zero when the installment implies no interest.
    """
    if principal <= 0 or installment <= 0 or periods <= 0:
        return _ZERO

    zero_rate_installment = principal / periods
    if installment - zero_rate_installment < Decimal("0.01"):
        return _ZERO

    if system == AmortizationSystem.SAC:
        return (installment - zero_rate_installment) / principal

    low = Decimal("0.000001")
    high = settings.engine.max_monthly_rate
    mid = _ZERO
    for _ in range(200):
        mid = (low + high) / 2
        computed = installment_amount(principal, mid, periods)
        if abs(computed - installment) < Decimal("0.000001"):
            break
        if computed < installment:
            low = mid
        else:
            high = mid
    return mid
