"""Tests for the comparative rate analyzer and the financing entry point.

Tests cover:
- Sobretaxa (p.p.) vs relative abuse percentage
- Restitution sign, parity and the simple/average split
- CET with and without charges
- Mortgage below market (SAC) and personal loan above market (PRICE)
- Market-track CET, the Gauss thesis and per-row formatted mirrors
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal

import pytest

from revisional.analysis import analyze_financing
from revisional.calculators.charges import aggregate_charges
from revisional.calculators.comparative import (
    analyze_comparative,
    effective_cost_rate,
    percentual_abuso,
    simplified_cost_rate,
    sobretaxa_pp,
)
from revisional.calculators.schedule import generate_schedule
from revisional.calculators.validation import CalculationValidationError
from revisional.schemas.contract import (
    AccessoryCharges,
    AmortizationSystem,
    ContractTerms,
    FinancingRequest,
    MarketRate,
)


def _price_terms(rate: str = "0.03") -> ContractTerms:
    return ContractTerms(
        principal=Decimal("100000"),
        installments=12,
        contract_monthly_rate=Decimal(rate),
        system=AmortizationSystem.PRICE,
    )


class TestRateMetrics:
    def test_sobretaxa_is_difference(self) -> None:
        assert sobretaxa_pp(Decimal("0.0152"), Decimal("0.0092")) == Decimal("0.0060")

    def test_percentual_abuso_is_relative(self) -> None:
        """10.5% vs 5% a.m. is 5.5 p.p. but 110% above market."""
        assert percentual_abuso(Decimal("0.105"), Decimal("0.05")) == Decimal("110")
        assert sobretaxa_pp(Decimal("0.105"), Decimal("0.05")) == Decimal("0.055")

    def test_percentual_abuso_without_market(self) -> None:
        assert percentual_abuso(Decimal("0.105"), Decimal("0")) is None


class TestRestitution:
    """Test restitution sign, parity and method split."""

    def test_above_market_price(self) -> None:
        """PRICE 100,000/12 at 3% vs 1%: both methods positive and different."""
        result = analyze_comparative(_price_terms(), MarketRate(monthly_rate=Decimal("0.01")))
        assert result.restitution_simple > 0
        assert result.restitution_average > 0
        assert result.restitution_average != result.restitution_simple
        # Market track amortizes faster, so the schedule integral is larger
        assert result.restitution_average > result.restitution_simple
        assert abs(result.interest_difference - Decimal("13935.95")) < Decimal("0.5")
        assert abs(result.restitution_average - result.interest_difference) < Decimal("0.000001")
        assert result.restitution_double == 2 * result.restitution_simple

    def test_rate_parity(self) -> None:
        result = analyze_comparative(_price_terms("0.01"), MarketRate(monthly_rate=Decimal("0.01")))
        assert result.restitution_simple == 0
        assert result.restitution_average == 0
        assert result.sobretaxa_pp == 0

    def test_below_market_sac(self) -> None:
        """Mortgage 302,400/360 below market: negative sobretaxa, nothing owed."""
        terms = ContractTerms(
            principal=Decimal("302400"),
            installments=360,
            contract_monthly_rate=Decimal("0.005654145387"),
            system=AmortizationSystem.SAC,
        )
        result = analyze_comparative(terms, MarketRate(monthly_rate=Decimal("0.0062")))
        assert result.sobretaxa_pp < 0
        assert result.percentual_abuso < 0
        assert result.restitution_simple == 0
        assert result.restitution_average == 0
        assert result.restitution_double == 0
        assert result.interest_difference < 0

    def test_sac_methods_agree(self) -> None:
        """With SAC both tracks share balances, so both methods coincide."""
        terms = _price_terms().model_copy(update={"system": AmortizationSystem.SAC})
        result = analyze_comparative(terms, MarketRate(monthly_rate=Decimal("0.01")))
        assert abs(result.restitution_simple - result.restitution_average) < Decimal("0.000001")


class TestEffectiveCostRate:
    """Test the CET."""

    def test_no_charges_equals_contract_rate(self) -> None:
        result = analyze_comparative(_price_terms(), MarketRate(monthly_rate=Decimal("0.01")))
        assert abs(result.cet_monthly - Decimal("0.03")) < Decimal("0.00001")
        assert abs(result.cet_annual - (Decimal("1.03") ** 12 - 1)) < Decimal("0.001")

    def test_charges_raise_cet(self) -> None:
        charges = AccessoryCharges(tac=Decimal("2000"), monthly_insurance=Decimal("50"))
        result = analyze_comparative(_price_terms(), MarketRate(monthly_rate=Decimal("0.01")), charges)
        assert result.cet_monthly > Decimal("0.03")

    def test_more_charges_more_cet(self) -> None:
        market = MarketRate(monthly_rate=Decimal("0.01"))
        low = analyze_comparative(_price_terms(), market, AccessoryCharges(tac=Decimal("500")))
        high = analyze_comparative(_price_terms(), market, AccessoryCharges(tac=Decimal("5000")))
        assert high.cet_monthly > low.cet_monthly

    def test_short_horizon_settles_balance(self) -> None:
        """A partial horizon still prices the contract at its own rate."""
        result = analyze_comparative(_price_terms(), MarketRate(monthly_rate=Decimal("0.01")), horizon=6)
        assert result.horizon == 6
        assert abs(result.cet_monthly - Decimal("0.03")) < Decimal("0.00001")

    def test_charges_consume_principal(self) -> None:
        terms = _price_terms()
        market = MarketRate(monthly_rate=Decimal("0.01"))
        buckets = aggregate_charges(AccessoryCharges(miscellaneous=Decimal("100000")), 12)
        schedule = generate_schedule(terms, market)
        with pytest.raises(CalculationValidationError) as exc_info:
            effective_cost_rate(terms.principal, schedule, buckets)
        assert exc_info.value.code == "VALOR_LIQUIDO_INVALIDO"

    def test_annual_compounds_monthly(self) -> None:
        charges = AccessoryCharges(tac=Decimal("2000"), monthly_insurance=Decimal("50"))
        result = analyze_comparative(_price_terms(), MarketRate(monthly_rate=Decimal("0.01")), charges)
        assert result.cet_monthly > 0
        assert result.cet_annual >= result.cet_monthly * 12
        assert result.cet_market_annual >= result.cet_market_monthly * 12

    def test_market_track_without_charges(self) -> None:
        result = analyze_comparative(_price_terms(), MarketRate(monthly_rate=Decimal("0.01")))
        assert abs(result.cet_market_monthly - Decimal("0.01")) < Decimal("0.00001")
        assert abs(result.cet_market_annual - (Decimal("1.01") ** 12 - 1)) < Decimal("0.001")

    def test_market_track_with_charges(self) -> None:
        """Same charges on both tracks: the market CET sits above the market rate, below the contract CET."""
        charges = AccessoryCharges(tac=Decimal("2000"), monthly_insurance=Decimal("50"))
        result = analyze_comparative(
            _price_terms(), MarketRate(monthly_rate=Decimal("0.01")), charges, horizon=6
        )
        assert result.cet_market_monthly > Decimal("0.01")
        assert result.cet_market_monthly < result.cet_monthly

    def test_simplified_cost_rate(self) -> None:
        monthly, annual = simplified_cost_rate(Decimal("0.1"), Decimal("1000"), Decimal("240"), 12)
        assert monthly == Decimal("0.12")
        assert annual == Decimal("1.12") ** 12 - 1


class TestFinancing:
    """Test the financing entry point."""

    def test_result_is_decorated(self) -> None:
        request = FinancingRequest(
            terms=_price_terms(),
            market=MarketRate(monthly_rate=Decimal("0.01")),
        )
        result = analyze_financing(request)
        assert result.formatted["principal"] == "R$ 100.000,00"
        assert result.formatted["contract_monthly_rate"] == "3,0000%"
        assert result.formatted["sobretaxa_pp"] == "2,00 p.p."
        assert result.formatted["percentual_abuso"] == "200,00%"
        assert result.formatted["installments"] == "12"
        assert result.formatted["charges.total"] == "R$ 0,00"
        assert "schedule" not in result.formatted
        assert len(result.schedule) == 12

    def test_schedule_rows_are_decorated(self) -> None:
        terms = _price_terms().model_copy(update={"first_due_date": date(2024, 1, 31)})
        result = analyze_financing(FinancingRequest(terms=terms, market=MarketRate(monthly_rate=Decimal("0.01"))))
        first = result.schedule[0].formatted
        assert first["period"] == "1"
        assert first["due_date"] == "31/01/2024"
        assert first["opening_balance"] == "R$ 100.000,00"
        assert first["interest_contract"] == "R$ 3.000,00"
        assert first["installment"] == "R$ 10.046,21"
        assert first["contract_rate"] == "3,0000%"
        assert result.schedule[-1].formatted["closing_balance"] == "R$ 0,00"
        assert all(row.formatted for row in result.schedule)

    def test_gauss_thesis(self) -> None:
        request = FinancingRequest(
            terms=_price_terms(), market=MarketRate(monthly_rate=Decimal("0.01")), gauss_thesis=True
        )
        result = analyze_financing(request)
        # 136,000 / 13.98
        assert abs(result.installment_gauss - Decimal("9728.18")) < Decimal("0.01")
        expected = 12 * (result.installment_contract - result.installment_gauss)
        assert abs(result.restitution_gauss - expected) < Decimal("0.01")
        assert result.formatted["installment_gauss"] == "R$ 9.728,18"

    def test_gauss_thesis_off_by_default(self) -> None:
        request = FinancingRequest(terms=_price_terms(), market=MarketRate(monthly_rate=Decimal("0.01")))
        result = analyze_financing(request)
        assert result.installment_gauss is None
        assert result.restitution_gauss is None
        assert "installment_gauss" not in result.formatted

    def test_monetary_correction_total(self) -> None:
        terms = _price_terms().model_copy(
            update={"correction_rates": [Decimal("0.001")] * 12, "correction_index": "TR"}
        )
        result = analyze_financing(FinancingRequest(terms=terms, market=MarketRate(monthly_rate=Decimal("0.01"))))
        assert result.monetary_correction_total > 0
        assert result.formatted["monetary_correction_total"].startswith("R$ ")

    def test_annual_rates_derived(self) -> None:
        request = FinancingRequest(terms=_price_terms(), market=MarketRate(monthly_rate=Decimal("0.01")))
        result = analyze_financing(request)
        assert result.contract_annual_rate == Decimal("1.03") ** 12 - 1
        assert result.market_annual_rate == Decimal("1.01") ** 12 - 1

    def test_invalid_terms_rejected(self) -> None:
        request = FinancingRequest(
            terms=ContractTerms(principal=Decimal("-1"), installments=12, contract_monthly_rate=Decimal("0.01")),
            market=MarketRate(monthly_rate=Decimal("0.01")),
        )
        with pytest.raises(CalculationValidationError) as exc_info:
            analyze_financing(request)
        assert exc_info.value.code == "PRINCIPAL_INVALIDO"
