"""pt-BR currency and percentage string → Decimal normalizer.

Pure Python. Parses what the case forms collect:
  currency:   "R$ 1.234,56", "-R$ 10,00", "1.234,56-"  → Decimal("1234.56") ...
  percentage: "1,2%", "1.2", "0.012"                   → Decimal("0.012")

Malformed input (no digits) yields zero instead of raising: form values
are parsed for display and must never block the user. Contract terms are
validated later, by the calculators.
"""

from __future__ import annotations

import re
from decimal import Decimal, InvalidOperation

from revisional.presentation.formatters import format_currency

_ZERO = Decimal("0")
_HUNDRED = Decimal("100")

_NON_DIGITS = re.compile(r"\D")
_NON_NUMERIC = re.compile(r"[^\d,.\-]")


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _has_digits(raw: str) -> bool:
    return any(ch.isdigit() for ch in raw)


def _decimal_from_text(raw: str) -> Decimal | None:
    """Read a locale-formatted number; comma wins as decimal separator."""
    cleaned = _NON_NUMERIC.sub("", raw)
    if "," in cleaned:
        # "1.234,5" → "1234.5"
        cleaned = cleaned.replace(".", "").replace(",", ".")
    try:
        return Decimal(cleaned)
    except InvalidOperation:
        return None


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def parse_currency(raw: str | None) -> Decimal:
    """Parse a pt-BR currency string into a Decimal amount.

    Every non-digit is stripped and the digits are read as an integer
    number of cents, so "R$ 1.234,56" and "123456" both give 1234.56.
    A minus sign anywhere in the string makes the result negative
    (credits and refunds).

    Args:
        raw: Currency string as typed or displayed.

    Returns:
        The amount, or Decimal("0") when the string holds no digits.
    """
    if not raw:
        return _ZERO
    digits = _NON_DIGITS.sub("", raw)
    if not digits:
        return _ZERO
    # Built from text so that no context rounding applies to long amounts
    value = Decimal(f"{digits}E-2")
    if "-" in raw:
        value = value.copy_negate()
    return value


def parse_percentage(raw: str | None) -> Decimal:
    """Parse a percentage string into a decimal fraction.

    Disambiguation rules, applied in order:
        1. a literal "%" means percentage points: "1,5%" → 0.015
        2. a magnitude >= 1 is read as percentage points: "1" → 0.01,
           "-5" → -0.05
        3. anything smaller is already a fraction: "0.012" → 0.012

    Values close to 1 are inherently ambiguous ("0.99" stays 0.99, i.e.
    99%). The rule is kept as-is because changing it would silently
    change financial outputs.

    Args:
        raw: Percentage string as typed.

    Returns:
        The rate as a fraction, or Decimal("0") for malformed input.
    """
    if not raw or not _has_digits(raw):
        return _ZERO
    value = _decimal_from_text(raw)
    if value is None:
        return _ZERO
    if "%" in raw:
        return value / _HUNDRED
    if abs(value) >= 1:
        return value / _HUNDRED
    return value


def format_currency_input(raw: str | None) -> str:
    """Apply the currency input mask: "123456" → "R$ 1.234,56".

    Returns an empty string when there is nothing to format.
    """
    if not raw or not _has_digits(raw):
        return ""
    return format_currency(parse_currency(raw))
