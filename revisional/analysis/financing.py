"""Financing (mortgage/SFH) analysis: thin composition of the calculators."""

from __future__ import annotations

import logging

from revisional.calculators.comparative import analyze_comparative
from revisional.presentation.mirror import decorate
from revisional.schemas.analysis import InstallmentAnalysisResult
from revisional.schemas.contract import FinancingRequest

logger = logging.getLogger(__name__)


def analyze_financing(request: FinancingRequest) -> InstallmentAnalysisResult:
    """Compare a financing contract with the market rate over its horizon.

    Raises:
        CalculationValidationError: If the contract terms are invalid.
    """
    result = analyze_comparative(
        request.terms, request.market, request.charges, request.horizon, request.gauss_thesis
    )
    logger.info(
        "Financing analysis %s: sobretaxa=%s restituicao=%s/%s",
        result.system, result.sobretaxa_pp, result.restitution_simple, result.restitution_average,
    )
    return decorate(result)
