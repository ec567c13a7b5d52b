"""Tests for settings and the analysis policy defaults."""

from __future__ import annotations

from datetime import date
from decimal import Decimal

import pytest
from pydantic import ValidationError

from revisional.config import EngineSettings, PolicySettings, Settings
from revisional.schemas.analysis import AnalysisPolicy


class TestSettings:
    def test_log_level_normalized(self) -> None:
        assert Settings(log_level="debug").log_level == "DEBUG"

    def test_invalid_log_level(self) -> None:
        with pytest.raises(ValidationError):
            Settings(log_level="verbose")

    def test_is_production(self) -> None:
        assert Settings(environment="production").is_production is True
        assert Settings(environment="development").is_production is False


class TestPolicyDefaults:
    def test_thresholds(self, monkeypatch) -> None:
        monkeypatch.delenv("REVISIONAL_ABUSE_THRESHOLD_PCT", raising=False)
        policy = PolicySettings()
        assert policy.abuse_threshold_pct == Decimal("50")
        assert policy.abuse_label_threshold_pct == Decimal("150")
        assert policy.annuity_ceiling == Decimal("500")
        assert policy.revolving_months == 24
        assert policy.max_revolving_months == 360
        assert policy.minimum_payment_rate == 0
        assert policy.tac_tec_prohibition_date == date(2008, 4, 30)

    def test_env_override(self, monkeypatch) -> None:
        monkeypatch.setenv("REVISIONAL_ABUSE_THRESHOLD_PCT", "60")
        assert PolicySettings().abuse_threshold_pct == Decimal("60")

    def test_engine_env_override(self, monkeypatch) -> None:
        monkeypatch.setenv("REVISIONAL_BALANCE_TOLERANCE", "0.001")
        assert EngineSettings().balance_tolerance == Decimal("0.001")

    def test_policy_from_settings(self) -> None:
        policy = AnalysisPolicy.from_settings()
        assert policy.excessive_charge_fraction == Decimal("0.05")
        assert policy.high_sobretaxa_pp == Decimal("0.02")
