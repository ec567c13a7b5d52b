"""Revisional calculators: schedules, charges, comparative metrics, rates."""

from revisional.calculators.charges import aggregate_charges
from revisional.calculators.comparative import (
    analyze_comparative,
    effective_cost_rate,
    market_cost_rate,
    percentual_abuso,
    restitution_average,
    restitution_simple,
    sobretaxa_pp,
)
from revisional.calculators.rates import (
    annual_to_monthly,
    gauss_installment,
    implied_monthly_rate,
    installment_amount,
    monthly_to_annual,
)
from revisional.calculators.schedule import generate_schedule
from revisional.calculators.validation import CalculationValidationError

__all__ = [
    "CalculationValidationError",
    "aggregate_charges",
    "analyze_comparative",
    "annual_to_monthly",
    "effective_cost_rate",
    "gauss_installment",
    "generate_schedule",
    "implied_monthly_rate",
    "installment_amount",
    "market_cost_rate",
    "monthly_to_annual",
    "percentual_abuso",
    "restitution_average",
    "restitution_simple",
    "sobretaxa_pp",
]
