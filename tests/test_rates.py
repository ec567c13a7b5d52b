"""Tests for rate conversions, PMT, IRR and the implied-rate solver."""

from __future__ import annotations

from decimal import Decimal

from revisional.calculators.rates import (
    annual_to_monthly,
    gauss_installment,
    implied_monthly_rate,
    installment_amount,
    internal_rate_of_return,
    monthly_to_annual,
)
from revisional.schemas.contract import AmortizationSystem

_TOL = Decimal("0.000001")


class TestConversions:
    def test_monthly_to_annual(self) -> None:
        assert abs(monthly_to_annual(Decimal("0.01")) - Decimal("0.126825030")) < _TOL

    def test_annual_to_monthly(self) -> None:
        assert abs(annual_to_monthly(Decimal("0.126825030")) - Decimal("0.01")) < _TOL

    def test_zero(self) -> None:
        assert monthly_to_annual(Decimal("0")) == 0


class TestInstallmentAmount:
    def test_price_installment(self) -> None:
        pmt = installment_amount(Decimal("100000"), Decimal("0.03"), 12)
        assert abs(pmt - Decimal("10046.2087")) < Decimal("0.0001")

    def test_zero_rate(self) -> None:
        assert installment_amount(Decimal("1200"), Decimal("0"), 12) == Decimal("100")


class TestGaussInstallment:
    """Simple-interest installment (Gauss method)."""

    def test_known_value(self) -> None:
        """12,000 over 12 months at 1%: 13,440 / 12.66."""
        pmt = gauss_installment(Decimal("12000"), Decimal("0.01"), 12)
        assert abs(pmt - Decimal("13440") / Decimal("12.66")) < _TOL
        assert abs(pmt - Decimal("1061.6114")) < Decimal("0.0001")

    def test_below_price(self) -> None:
        price = installment_amount(Decimal("100000"), Decimal("0.01"), 360)
        assert gauss_installment(Decimal("100000"), Decimal("0.01"), 360) < price

    def test_single_period_matches_price(self) -> None:
        assert gauss_installment(Decimal("1000"), Decimal("0.05"), 1) == Decimal("1050")


class TestInternalRateOfReturn:
    def test_recovers_installment_rate(self) -> None:
        pmt = installment_amount(Decimal("100000"), Decimal("0.03"), 12)
        rate = internal_rate_of_return(Decimal("100000"), [pmt] * 12)
        assert abs(rate - Decimal("0.03")) < _TOL

    def test_lower_net_amount_raises_rate(self) -> None:
        pmt = installment_amount(Decimal("100000"), Decimal("0.03"), 12)
        rate = internal_rate_of_return(Decimal("95000"), [pmt] * 12)
        assert rate > Decimal("0.03")

    def test_no_flows(self) -> None:
        assert internal_rate_of_return(Decimal("1000"), []) == 0

    def test_non_positive_net(self) -> None:
        assert internal_rate_of_return(Decimal("0"), [Decimal("100")]) == 0


class TestImpliedMonthlyRate:
    def test_price_bisection(self) -> None:
        pmt = installment_amount(Decimal("100000"), Decimal("0.03"), 12)
        rate = implied_monthly_rate(Decimal("100000"), pmt, 12)
        assert abs(rate - Decimal("0.03")) < Decimal("0.00001")

    def test_sac_direct(self) -> None:
        """First SAC installment = P/n + P × i."""
        rate = implied_monthly_rate(Decimal("12000"), Decimal("1240"), 12, AmortizationSystem.SAC)
        assert rate == Decimal("0.02")

    def test_no_interest(self) -> None:
        assert implied_monthly_rate(Decimal("1200"), Decimal("100"), 12) == 0

    def test_invalid_inputs(self) -> None:
        assert implied_monthly_rate(Decimal("0"), Decimal("100"), 12) == 0
        assert implied_monthly_rate(Decimal("1200"), Decimal("100"), 0) == 0
