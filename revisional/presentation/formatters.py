"""pt-BR locale formatters for currency, rates and dates.

Used by the formatted mirror of every analysis result and registered as
Jinja2 filters by the report renderer.
"""

from __future__ import annotations

from datetime import date
from decimal import ROUND_HALF_UP, Decimal, localcontext


def _swap_separators(formatted: str) -> str:
    # US: 1,234.50 -> pt-BR: 1.234,50
    return formatted.replace(",", "X").replace(".", ",").replace("X", ".")


def _precision(value: Decimal, places: int) -> int:
    # Enough digits for the integer part plus the requested places.
    return max(28, value.adjusted() + places + 3)


def _quantize(value: Decimal, places: int) -> Decimal:
    with localcontext() as ctx:
        ctx.prec = _precision(value, places)
        return value.quantize(Decimal(1).scaleb(-places), rounding=ROUND_HALF_UP)


def format_number(value: Decimal | float | int | None, places: int = 2) -> str:
    """Format as a pt-BR number: 1234.5 -> "1.234,50"."""
    if value is None:
        return "-"
    d = _quantize(Decimal(str(value)), places)
    with localcontext() as ctx:
        ctx.prec = _precision(d, places)
        return _swap_separators(f"{d:,.{places}f}")


def format_currency(value: Decimal | float | int | None) -> str:
    """Format as Brazilian currency: 1234.50 -> "R$ 1.234,50", -10 -> "-R$ 10,00"."""
    if value is None:
        return "-"
    d = _quantize(Decimal(str(value)), 2)
    sign = "-" if d < 0 else ""
    return f"{sign}R$ {format_number(d.copy_abs())}"


def format_percentage(value: Decimal | float | int | None, places: int = 2) -> str:
    """Format a fraction as a percentage: 0.012 -> "1,20%"."""
    if value is None:
        return "-"
    return f"{format_number(Decimal(str(value)) * 100, places)}%"


def format_percent_value(value: Decimal | float | int | None, places: int = 2) -> str:
    """Format a number already in percent: 110 -> "110,00%"."""
    if value is None:
        return "-"
    return f"{format_number(value, places)}%"


def format_points(value: Decimal | float | int | None) -> str:
    """Format a rate difference in percentage points: 0.006 -> "0,60 p.p."."""
    if value is None:
        return "-"
    return f"{format_number(Decimal(str(value)) * 100)} p.p."


def format_date(value: date | None) -> str:
    """Format as DD/MM/YYYY."""
    if value is None:
        return "-"
    return value.strftime("%d/%m/%Y")
