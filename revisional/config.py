"""Application configuration via pydantic-settings.

Engine tolerances and analysis policy thresholds are loaded from environment
variables (.env file). Settings are organized into logical groups and composed
into a single Settings object.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class EngineSettings(BaseSettings):
    """Numeric tolerances of the calculation engine."""

    model_config = SettingsConfigDict(env_file=".env", env_prefix="REVISIONAL_", extra="ignore")

    balance_tolerance: Decimal = Field(
        default=Decimal("0.01"),
        description="Closing balances closer to zero than this are clamped to zero",
    )
    rate_tolerance: Decimal = Field(
        default=Decimal("0.0001"),
        description="Max gap between stated and implied monthly rate before flagging",
    )
    capitalization_tolerance: Decimal = Field(
        default=Decimal("0.01"),
        description="Compound vs simple interest gap (R$) that counts as anatocism",
    )
    max_monthly_rate: Decimal = Field(
        default=Decimal("1"),
        description="Monthly rates above this are rejected as malformed input",
    )
    irr_max_iterations: int = Field(default=100, description="Newton-Raphson iterations for CET")
    irr_tolerance: Decimal = Field(default=Decimal("0.000001"), description="CET convergence tolerance")


class PolicySettings(BaseSettings):
    """Abuse and irregularity thresholds.

    These are policy inputs, not business law: every analyzer accepts an
    explicit AnalysisPolicy and only falls back to these values.
    """

    model_config = SettingsConfigDict(env_file=".env", env_prefix="REVISIONAL_", extra="ignore")

    abuse_threshold_pct: Decimal = Field(
        default=Decimal("50"),
        description="Relative excess over market (%) above which tem_abuso is set",
    )
    abuse_label_threshold_pct: Decimal = Field(
        default=Decimal("150"),
        description="Threshold quoted in report text (differs from the operative check)",
    )
    annuity_ceiling: Decimal = Field(default=Decimal("500"), description="Annuity above this is flagged")
    excessive_charge_fraction: Decimal = Field(
        default=Decimal("0.05"),
        description="Accessory charges above this fraction of principal are flagged",
    )
    high_sobretaxa_pp: Decimal = Field(
        default=Decimal("0.02"),
        description="Loan sobretaxa (decimal difference) flagged as high",
    )
    revolving_months: int = Field(default=24, description="Default revolving-credit horizon")
    max_revolving_months: int = Field(default=360, description="Longest revolving horizon accepted")
    minimum_payment_rate: Decimal = Field(
        default=Decimal("0"),
        description="Share of the revolving balance paid each month (0 = unpaid)",
    )
    tac_tec_prohibition_date: date = Field(
        default=date(2008, 4, 30),
        description="CMN Resolution 3.518/2007 effective date",
    )


class Settings(BaseSettings):
    """Root settings composing all sub-settings.

    Usage:
        settings = Settings()
        settings.engine.balance_tolerance
        settings.policy.abuse_threshold_pct
    """

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # Environment
    environment: str = Field(default="development")
    log_level: str = Field(default="INFO")

    # Composed settings (loaded from same .env)
    engine: EngineSettings = Field(default_factory=EngineSettings)
    policy: PolicySettings = Field(default_factory=PolicySettings)

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Ensure log level is valid."""
        valid = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper = v.upper()
        if upper not in valid:
            msg = f"Invalid log level: {v}. Must be one of {valid}"
            raise ValueError(msg)
        return upper

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment == "production"


# Module-level singleton; import this wherever settings are needed.
settings = Settings()
