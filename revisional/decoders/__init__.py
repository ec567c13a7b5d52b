"""Deterministic input decoders: pt-BR currency and percentage strings."""

from revisional.decoders.locale_numbers import format_currency_input, parse_currency, parse_percentage

__all__ = ["format_currency_input", "parse_currency", "parse_percentage"]
