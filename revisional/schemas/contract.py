"""Pydantic schemas for the engine's inputs.

Pure data classes with no business logic beyond deriving an annual rate that
was not supplied. Callers run user-entered strings through the decoders
first; everything here is already a Decimal fraction or amount.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field, model_validator

_ZERO = Decimal("0")


class AmortizationSystem(StrEnum):
    """Amortization systems supported by the schedule generator."""

    SAC = "SAC"        # constant amortization, declining installment
    PRICE = "PRICE"    # constant installment (French/annuity table)


def _compound_annual(monthly: Decimal) -> Decimal:
    return (1 + monthly) ** 12 - 1


class RateBand(BaseModel):
    """Contract rate in force between two installments, both inclusive."""

    start_period: int
    end_period: int
    monthly_rate: Decimal


class ContractTerms(BaseModel):
    """Stated terms of a financing contract."""

    principal: Decimal
    installments: int
    contract_monthly_rate: Decimal
    contract_annual_rate: Decimal | None = None
    system: AmortizationSystem = AmortizationSystem.PRICE
    first_due_date: date | None = None
    contract_date: date | None = None
    contracted_installment: Decimal | None = None  # as printed on the contract, for cross-check

    # Mortgage (SFH) features; both empty for a fixed-rate, unindexed contract
    rate_bands: list[RateBand] = Field(default_factory=list)
    correction_rates: list[Decimal] = Field(default_factory=list)  # e.g. monthly TR, period 1 first
    correction_index: str | None = None  # "TR", "IPCA", ...

    @model_validator(mode="after")
    def _derive_annual_rate(self) -> ContractTerms:
        if self.contract_annual_rate is None:
            self.contract_annual_rate = _compound_annual(self.contract_monthly_rate)
        return self


class MarketRate(BaseModel):
    """Reference market rate resolved by an external lookup for a contract date."""

    monthly_rate: Decimal
    annual_rate: Decimal | None = None
    reference_date: date | None = None
    product: str | None = None  # e.g. "Crédito pessoal não consignado"

    @model_validator(mode="after")
    def _derive_annual_rate(self) -> MarketRate:
        if self.annual_rate is None:
            self.annual_rate = _compound_annual(self.monthly_rate)
        return self


class AccessoryCharges(BaseModel):
    """Closed set of accessory charges; every field defaults to zero.

    One-time amounts are charged at inception, monthly_* amounts every
    period, annuity is a yearly amount (negative = credit) and the two
    rates only apply to late-payment scenarios.
    """

    # One-time (inception) amounts
    upfront_insurance: Decimal = _ZERO
    appraisal_fee: Decimal = _ZERO
    registration_fee: Decimal = _ZERO
    tac: Decimal = _ZERO            # Tarifa de Abertura de Crédito
    tec: Decimal = _ZERO            # Tarifa de Emissão de Carnê
    iof: Decimal = _ZERO
    miscellaneous: Decimal = _ZERO

    # Recurring amounts, per period
    monthly_insurance: Decimal = _ZERO
    monthly_tariffs: Decimal = _ZERO
    monthly_iof: Decimal = _ZERO

    # Yearly amount spread across periods
    annuity: Decimal = _ZERO

    # Rates (fractions)
    default_interest_rate: Decimal = _ZERO   # juros de mora, monthly
    penalty_rate: Decimal = _ZERO            # multa, one-off


class InsuranceItem(BaseModel):
    """An insurance product bundled with a loan."""

    name: str
    amount: Decimal
    consented: bool = True


class ChargeBuckets(BaseModel):
    """Accessory charges split into inception and recurring buckets."""

    model_config = ConfigDict(frozen=True)

    horizon: int
    initial_total: Decimal
    recurring_per_period: Decimal
    recurring_total: Decimal
    default_interest_total: Decimal = _ZERO
    penalty_total: Decimal = _ZERO
    late_payment_total: Decimal = _ZERO
    total: Decimal


class LoanRequest(BaseModel):
    """Input of the general loan analyzer."""

    terms: ContractTerms
    market: MarketRate
    charges: AccessoryCharges = Field(default_factory=AccessoryCharges)
    horizon: int | None = None
    insurances: list[InsuranceItem] = Field(default_factory=list)
    comissao_permanencia: bool = False


class FinancingRequest(BaseModel):
    """Input of the financing (mortgage) analyzer."""

    terms: ContractTerms
    market: MarketRate
    charges: AccessoryCharges = Field(default_factory=AccessoryCharges)
    horizon: int | None = None
    gauss_thesis: bool = False  # also price the contract under simple interest


class RevolvingRequest(BaseModel):
    """Input of the revolving-credit (credit card) analyzer."""

    balance: Decimal
    contract_monthly_rate: Decimal
    market: MarketRate
    principal: Decimal | None = None  # original principal when known, else the balance is used
    charges: AccessoryCharges = Field(default_factory=AccessoryCharges)
    months: int | None = None
    minimum_payment_rate: Decimal | None = None
    creditor: str | None = None
    debtor: str | None = None

    @property
    def base_amount(self) -> Decimal:
        """Capital the simulation runs on."""
        return self.principal if self.principal else self.balance
