"""Formatted mirror of analysis results.

Every numeric output ships with a pt-BR display string so downstream
consumers can read either form. The mirror is built here, in one place,
from the result's own fields and stored in its ``formatted`` dict.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import TypeVar

from pydantic import BaseModel

from revisional.presentation.formatters import (
    format_currency,
    format_date,
    format_percent_value,
    format_percentage,
    format_points,
)

# Rate fields (fractions) and the decimal places they are shown with
_RATE_FIELDS: dict[str, int] = {
    "contract_monthly_rate": 4,
    "contract_annual_rate": 2,
    "market_monthly_rate": 4,
    "market_annual_rate": 2,
    "cet_monthly": 2,
    "cet_annual": 2,
    "cet_market_monthly": 2,
    "cet_market_annual": 2,
    "contract_rate": 4,
    "implied_monthly_rate": 4,
    "minimum_payment_rate": 2,
}
_POINTS_FIELDS = {"sobretaxa_pp"}
_PERCENT_VALUE_FIELDS = {"percentual_abuso", "abuse_threshold"}
_NESTED_FIELDS = {"charges"}
_SKIPPED_FIELDS = {"formatted"}
# Lists of schedule rows; each row gets its own mirror
_ROW_FIELDS = {"schedule", "rows"}


def _format_field(name: str, value: object) -> str | None:
    if name in _POINTS_FIELDS:
        return format_points(value)  # type: ignore[arg-type]
    if name in _PERCENT_VALUE_FIELDS:
        return format_percent_value(value)  # type: ignore[arg-type]
    if name in _RATE_FIELDS:
        return format_percentage(value, _RATE_FIELDS[name])  # type: ignore[arg-type]
    if isinstance(value, bool):
        return "Sim" if value else "Não"
    if isinstance(value, Decimal):
        return format_currency(value)
    if isinstance(value, int):
        return str(value)
    if isinstance(value, date):
        return format_date(value)
    return None


def formatted_mirror(result: BaseModel) -> dict[str, str]:
    """Build the display mirror of a result's numeric and boolean fields.

    Nested charge buckets are flattened as "charges.<field>".
    """
    mirror: dict[str, str] = {}
    for name in type(result).model_fields:
        if name in _SKIPPED_FIELDS or name in _ROW_FIELDS:
            continue
        value = getattr(result, name)
        if name in _NESTED_FIELDS and isinstance(value, BaseModel):
            for sub_name, sub_value in formatted_mirror(value).items():
                mirror[f"{name}.{sub_name}"] = sub_value
            continue
        formatted = _format_field(name, value)
        if formatted is not None:
            mirror[name] = formatted
    return mirror


T = TypeVar("T", bound=BaseModel)


def decorate(result: T) -> T:
    """Return a copy of the result with its formatted mirror filled in.

    Schedule rows are decorated too, one mirror per row.
    """
    update: dict[str, object] = {"formatted": formatted_mirror(result)}
    for name in _ROW_FIELDS & set(type(result).model_fields):
        update[name] = [decorate(row) for row in getattr(result, name)]
    return result.model_copy(update=update)
