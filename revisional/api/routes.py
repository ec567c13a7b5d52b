"""HTTP surface of the calculation engine.

JSON in, JSON out. Every route runs the engine inline; validation failures
raised by the engine are turned into 422 responses by the handler in
revisional.main.
"""

from __future__ import annotations

import logging
from decimal import Decimal

from fastapi import APIRouter
from pydantic import BaseModel, Field

from revisional.analysis.financing import analyze_financing
from revisional.analysis.loan import analyze_loan
from revisional.analysis.revolving import analyze_revolving, build_revolving_report
from revisional.decoders.locale_numbers import format_currency_input, parse_currency, parse_percentage
from revisional.schemas.analysis import (
    InstallmentAnalysisResult,
    LoanAnalysisResult,
    RevolvingAnalysisResult,
    RevolvingReport,
)
from revisional.schemas.contract import FinancingRequest, LoanRequest, RevolvingRequest

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["revisional"])


class NormalizeRequest(BaseModel):
    """User-entered strings to normalize."""

    currency: list[str] = Field(default_factory=list)
    percentages: list[str] = Field(default_factory=list)


class NormalizedCurrency(BaseModel):
    raw: str
    value: Decimal
    display: str


class NormalizedPercentage(BaseModel):
    raw: str
    value: Decimal


class NormalizeResponse(BaseModel):
    currency: list[NormalizedCurrency]
    percentages: list[NormalizedPercentage]


@router.post("/analise-previa/financiamento")
def financing_preview(request: FinancingRequest) -> InstallmentAnalysisResult:
    """Comparative analysis of a mortgage/financing contract."""
    logger.info("API financiamento: principal=%s n=%s", request.terms.principal, request.terms.installments)
    return analyze_financing(request)


@router.post("/analise-previa/emprestimo")
def loan_preview(request: LoanRequest) -> LoanAnalysisResult:
    """Comparative analysis of a personal loan plus irregular-fee flags."""
    logger.info("API emprestimo: principal=%s n=%s", request.terms.principal, request.terms.installments)
    return analyze_loan(request)


@router.post("/analise-previa/cartao")
def revolving_preview(request: RevolvingRequest) -> RevolvingAnalysisResult:
    """Abuse and capitalization analysis of a credit-card revolving balance."""
    logger.info("API cartao: saldo=%s", request.balance)
    return analyze_revolving(request)


@router.post("/relatorio-completo/cartao")
def revolving_report(request: RevolvingRequest) -> RevolvingReport:
    """Full credit-card report: SAC reference table and explanatory texts."""
    analysis = analyze_revolving(request)
    return build_revolving_report(request, analysis)


@router.post("/normalizar")
def normalize(request: NormalizeRequest) -> NormalizeResponse:
    """Parse pt-BR currency and percentage strings into decimals."""
    return NormalizeResponse(
        currency=[
            NormalizedCurrency(raw=raw, value=parse_currency(raw), display=format_currency_input(raw))
            for raw in request.currency
        ],
        percentages=[
            NormalizedPercentage(raw=raw, value=parse_percentage(raw))
            for raw in request.percentages
        ],
    )
