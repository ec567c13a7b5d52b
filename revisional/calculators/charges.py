"""Accessory charge aggregator.

Splits AccessoryCharges into:
- initial bucket: fees charged at inception (insurance, appraisal,
  registration, TAC/TEC, IOF, miscellaneous)
- recurring bucket: monthly insurance, tariffs and monthly IOF repeated
  across the horizon, plus the annuity spread evenly over that horizon

Default interest (mora) and penalty (multa) stay at zero in the on-time
baseline and are only summed for a late-payment scenario:
  mora  = principal × monthly default rate × horizon
  multa = principal × penalty rate
"""

from __future__ import annotations

from decimal import Decimal

from revisional.schemas.contract import AccessoryCharges, ChargeBuckets

_ZERO = Decimal("0")


def initial_charges(charges: AccessoryCharges) -> Decimal:
    """Sum of the one-time charges collected at inception."""
    return (
        charges.upfront_insurance
        + charges.appraisal_fee
        + charges.registration_fee
        + charges.tac
        + charges.tec
        + charges.iof
        + charges.miscellaneous
    )


def _monthly_charges(charges: AccessoryCharges) -> Decimal:
    return charges.monthly_insurance + charges.monthly_tariffs + charges.monthly_iof


def recurring_charges_per_period(charges: AccessoryCharges, horizon: int) -> Decimal:
    """Charges added to every installment, the annuity split evenly over ``horizon`` periods."""
    return _monthly_charges(charges) + charges.annuity / horizon


def aggregate_charges(
    charges: AccessoryCharges,
    horizon: int,
    principal: Decimal | None = None,
    late_payment: bool = False,
) -> ChargeBuckets:
    """Aggregate accessory charges over a simulation horizon.

    Args:
        charges: The contract's accessory charges.
        horizon: Number of periods the recurring bucket is repeated for.
        principal: Base for default interest and penalty (late scenario only).
        late_payment: Model a late-payment scenario.

    Returns:
        ChargeBuckets with per-bucket and overall totals.
    """
    initial = initial_charges(charges)
    per_period = recurring_charges_per_period(charges, horizon)
    recurring_total = _monthly_charges(charges) * horizon + charges.annuity

    default_interest = _ZERO
    penalty = _ZERO
    if late_payment and principal is not None:
        default_interest = principal * charges.default_interest_rate * horizon
        penalty = principal * charges.penalty_rate
    late_total = default_interest + penalty

    return ChargeBuckets(
        horizon=horizon,
        initial_total=initial,
        recurring_per_period=per_period,
        recurring_total=recurring_total,
        default_interest_total=default_interest,
        penalty_total=penalty,
        late_payment_total=late_total,
        total=initial + recurring_total + late_total,
    )
