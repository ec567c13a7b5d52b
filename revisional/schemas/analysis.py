"""Pydantic schemas for schedules and analysis results.

Result models are frozen: an analysis is produced once, decorated with its
formatted mirror, and handed to the caller untouched.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field

from revisional.config import settings
from revisional.schemas.contract import AmortizationSystem, ChargeBuckets

# ---------------------------------------------------------------------------
# Schedule
# ---------------------------------------------------------------------------


class AmortizationRow(BaseModel):
    """One period of the two-track (contract vs market) schedule."""

    model_config = ConfigDict(frozen=True)

    period: int
    due_date: date | None = None
    opening_balance: Decimal
    monetary_correction: Decimal = Decimal("0")  # added to the opening balance before interest
    contract_rate: Decimal
    interest_contract: Decimal
    interest_market: Decimal
    amortization: Decimal
    amortization_market: Decimal
    closing_balance: Decimal
    closing_balance_market: Decimal
    recurring_charges: Decimal
    installment: Decimal             # amortization + contract interest + recurring charges
    corrected_installment: Decimal   # market amortization + market interest
    divergence: Decimal              # interest_contract - interest_market
    cumulative_restitution: Decimal
    formatted: dict[str, str] = Field(default_factory=dict)


class AmortizationSchedule(BaseModel):
    """Month-by-month schedule under one amortization system."""

    model_config = ConfigDict(frozen=True)

    system: AmortizationSystem
    principal: Decimal
    installments: int
    horizon: int
    contract_rate: Decimal
    market_rate: Decimal
    rows: list[AmortizationRow]

    @property
    def total_interest_contract(self) -> Decimal:
        return sum((r.interest_contract for r in self.rows), Decimal("0"))

    @property
    def total_interest_market(self) -> Decimal:
        return sum((r.interest_market for r in self.rows), Decimal("0"))

    @property
    def total_amortization(self) -> Decimal:
        return sum((r.amortization for r in self.rows), Decimal("0"))

    @property
    def total_monetary_correction(self) -> Decimal:
        return sum((r.monetary_correction for r in self.rows), Decimal("0"))


# ---------------------------------------------------------------------------
# Policy
# ---------------------------------------------------------------------------


class AnalysisPolicy(BaseModel):
    """Thresholds applied by the analyzers (external policy inputs)."""

    abuse_threshold_pct: Decimal
    abuse_label_threshold_pct: Decimal
    annuity_ceiling: Decimal
    excessive_charge_fraction: Decimal
    high_sobretaxa_pp: Decimal
    revolving_months: int
    max_revolving_months: int
    minimum_payment_rate: Decimal
    tac_tec_prohibition_date: date

    @classmethod
    def from_settings(cls) -> AnalysisPolicy:
        """Build the policy from the configured defaults."""
        return cls.model_validate(settings.policy.model_dump())


# ---------------------------------------------------------------------------
# Results
# ---------------------------------------------------------------------------


class AnalysisResult(BaseModel):
    """Comparative figures shared by every analyzer.

    Every numeric field has a companion entry in ``formatted`` (pt-BR
    currency/percentage strings) filled by the presentation layer.
    """

    model_config = ConfigDict(frozen=True)

    contract_monthly_rate: Decimal
    contract_annual_rate: Decimal
    market_monthly_rate: Decimal
    market_annual_rate: Decimal
    sobretaxa_pp: Decimal
    percentual_abuso: Decimal | None  # None when the market rate is zero
    total_interest_contract: Decimal
    total_interest_market: Decimal
    interest_difference: Decimal      # signed, contract - market
    restitution_simple: Decimal
    restitution_average: Decimal
    restitution_double: Decimal       # CDC art. 42
    cet_monthly: Decimal
    cet_annual: Decimal
    formatted: dict[str, str] = Field(default_factory=dict)


class InstallmentAnalysisResult(AnalysisResult):
    """Comparative analysis of an installment contract (SAC or PRICE)."""

    system: AmortizationSystem
    principal: Decimal
    installments: int
    horizon: int
    installment_contract: Decimal
    installment_market: Decimal
    cet_market_monthly: Decimal      # CET of the market track, same charges
    cet_market_annual: Decimal
    monetary_correction_total: Decimal = Decimal("0")
    installment_gauss: Decimal | None = None   # simple-interest installment, when requested
    restitution_gauss: Decimal | None = None
    charges: ChargeBuckets
    schedule: list[AmortizationRow]


class LoanAnalysisResult(InstallmentAnalysisResult):
    """Personal-loan analysis with irregular-fee detection."""

    tac_tec_irregular: bool
    tac_tec_note: str = ""
    encargos_irregulares: list[str] = Field(default_factory=list)
    implied_monthly_rate: Decimal | None = None
    installment_divergence: bool = False


class RevolvingAnalysisResult(AnalysisResult):
    """Credit-card revolving balance analysis."""

    balance: Decimal
    months: int
    minimum_payment_rate: Decimal
    tem_abuso: bool
    abuse_threshold: Decimal
    anatocismo_detectado: bool
    capitalized_interest: Decimal
    classificacao: str
    encargos_abusivos: list[str] = Field(default_factory=list)
    total_encargos: Decimal
    total_encargos_cobrados: Decimal
    total_encargos_devidos: Decimal
    diferenca_restituicao: Decimal
    default_interest_total: Decimal
    penalty_total: Decimal
    iof_total: Decimal


class RevolvingReport(BaseModel):
    """Full credit-card report built on a SAC reference table."""

    model_config = ConfigDict(frozen=True)

    rows: list[AmortizationRow]
    principal: Decimal
    total_interest_contract: Decimal
    total_interest_market: Decimal
    total_contract: Decimal
    total_market: Decimal
    restitution_simple: Decimal
    restitution_double: Decimal
    executive_summary: str
    methodology: str
    formatted: dict[str, str] = Field(default_factory=dict)
