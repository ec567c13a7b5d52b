"""Jinja2 rendering of the revolving-credit report texts.

Templates live next to this module and use the same pt-BR filters as the
formatted mirror, so numbers in the texts match the numbers in the data.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from jinja2 import Environment, FileSystemLoader, StrictUndefined

from revisional.presentation.formatters import (
    format_currency,
    format_date,
    format_percent_value,
    format_percentage,
    format_points,
)

_template_dir = Path(__file__).parent / "templates"
environment = Environment(
    loader=FileSystemLoader(str(_template_dir)),
    undefined=StrictUndefined,
    keep_trailing_newline=False,
    autoescape=False,  # plain-text reports
)

# Register custom filters
environment.filters["currency"] = format_currency
environment.filters["date"] = format_date
environment.filters["percentage"] = format_percentage
environment.filters["percent_value"] = format_percent_value
environment.filters["points"] = format_points


def render_text(template_name: str, context: dict[str, Any]) -> str:
    """Render a text template and strip surrounding whitespace."""
    return environment.get_template(template_name).render(**context).strip()


def render_executive_summary(context: dict[str, Any]) -> str:
    return render_text("executive_summary.txt", context)


def render_methodology(context: dict[str, Any]) -> str:
    return render_text("methodology.txt", context)
