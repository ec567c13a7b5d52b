"""Analyzers: one entry point per contract family."""

from revisional.analysis.financing import analyze_financing
from revisional.analysis.loan import analyze_loan
from revisional.analysis.revolving import analyze_revolving, build_revolving_report

__all__ = [
    "analyze_financing",
    "analyze_loan",
    "analyze_revolving",
    "build_revolving_report",
]
