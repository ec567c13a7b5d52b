"""Tests for the pt-BR formatters and the formatted mirror."""

from __future__ import annotations

from datetime import date
from decimal import Decimal

from revisional.presentation.formatters import (
    format_currency,
    format_date,
    format_number,
    format_percent_value,
    format_percentage,
    format_points,
)
from revisional.presentation.mirror import formatted_mirror
from revisional.schemas.contract import ChargeBuckets


class TestFormatNumber:
    def test_thousands(self):
        assert format_number(Decimal("1234567.891")) == "1.234.567,89"

    def test_half_up(self):
        assert format_number(Decimal("0.005")) == "0,01"

    def test_places(self):
        assert format_number(Decimal("1.5"), 4) == "1,5000"

    def test_many_integer_digits(self):
        assert format_number(Decimal("123456789012345678901234567890"), 4) == (
            "123.456.789.012.345.678.901.234.567.890,0000"
        )

    def test_none(self):
        assert format_number(None) == "-"


class TestFormatCurrency:
    def test_decimal(self):
        assert format_currency(Decimal("1234.5")) == "R$ 1.234,50"

    def test_integer(self):
        assert format_currency(100000) == "R$ 100.000,00"

    def test_negative(self):
        assert format_currency(Decimal("-10")) == "-R$ 10,00"

    def test_zero(self):
        assert format_currency(Decimal("0")) == "R$ 0,00"

    def test_beyond_default_precision(self):
        value = Decimal("2840166618003794397054044123.456")
        assert format_currency(value) == "R$ 2.840.166.618.003.794.397.054.044.123,46"

    def test_large_positive_exponent(self):
        assert format_currency(Decimal("2.5E+30")) == "R$ 2.500.000.000.000.000.000.000.000.000.000,00"

    def test_large_negative(self):
        assert format_currency(Decimal("-1E+28")) == "-R$ 10.000.000.000.000.000.000.000.000.000,00"

    def test_none(self):
        assert format_currency(None) == "-"


class TestFormatPercentage:
    def test_fraction(self):
        assert format_percentage(Decimal("0.012")) == "1,20%"

    def test_four_places(self):
        assert format_percentage(Decimal("0.012"), 4) == "1,2000%"

    def test_percent_value(self):
        assert format_percent_value(Decimal("110")) == "110,00%"

    def test_points(self):
        assert format_points(Decimal("0.006")) == "0,60 p.p."

    def test_negative_points(self):
        assert format_points(Decimal("-0.000545854613")) == "-0,05 p.p."

    def test_none(self):
        assert format_percentage(None) == "-"
        assert format_percent_value(None) == "-"
        assert format_points(None) == "-"


class TestFormatDate:
    def test_date(self):
        assert format_date(date(2024, 3, 5)) == "05/03/2024"

    def test_none(self):
        assert format_date(None) == "-"


class TestFormattedMirror:
    def test_buckets_are_currency_and_counts(self):
        buckets = ChargeBuckets(
            horizon=12,
            initial_total=Decimal("300"),
            recurring_per_period=Decimal("20"),
            recurring_total=Decimal("240"),
            total=Decimal("540"),
        )
        mirror = formatted_mirror(buckets)
        assert mirror["horizon"] == "12"
        assert mirror["initial_total"] == "R$ 300,00"
        assert mirror["total"] == "R$ 540,00"
        assert mirror["penalty_total"] == "R$ 0,00"
