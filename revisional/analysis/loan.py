"""General loan analysis: comparative figures plus irregular-fee detection.

Pure Python, deterministic. Each check returns human-readable findings
(pt-BR, as surfaced to the legal team); the analyzer only appends them.

Rules:
- TAC/TEC present at all → tacTecIrregular (categorically contestable;
  CMN Resolution 3.518/2007 cited for contracts after the prohibition date)
- other accessory charges above a fraction of principal → flagged
- insurance without express consent → tied sale (CDC art. 39, I)
- comissão de permanência cumulated with mora/multa (STJ Súmula 472)
- sobretaxa above the high-sobretaxa policy
- contracted installment implying a rate different from the stated one
"""

from __future__ import annotations

import logging
from datetime import date
from decimal import Decimal

from revisional.calculators.comparative import analyze_comparative
from revisional.calculators.rates import implied_monthly_rate
from revisional.config import settings
from revisional.presentation.formatters import (
    format_currency,
    format_date,
    format_percentage,
    format_points,
)
from revisional.presentation.mirror import decorate
from revisional.schemas.analysis import AnalysisPolicy, LoanAnalysisResult
from revisional.schemas.contract import AccessoryCharges, ChargeBuckets, InsuranceItem, LoanRequest

logger = logging.getLogger(__name__)


def check_tac_tec(
    charges: AccessoryCharges,
    contract_date: date | None,
    prohibition_date: date,
) -> tuple[bool, str]:
    """Flag any TAC or TEC, regardless of amount.

    Returns:
        Tuple of (irregular, note).
    """
    notes: list[str] = []
    for label, amount in (("TAC", charges.tac), ("TEC", charges.tec)):
        if amount <= 0:
            continue
        note = f"{label} cobrada ({format_currency(amount)})"
        if contract_date is not None and contract_date > prohibition_date:
            note += f", vedada pela Resolução CMN 3.518/2007 desde {format_date(prohibition_date)}"
        notes.append(f"{note}.")
    return bool(notes), " ".join(notes)


def check_excessive_charges(
    charges: AccessoryCharges,
    buckets: ChargeBuckets,
    principal: Decimal,
    fraction: Decimal,
) -> list[str]:
    """Flag accessory charges above a fraction of the financed principal."""
    limit = principal * fraction
    candidates = (
        ("Seguro", charges.upfront_insurance),
        ("Tarifa de avaliação", charges.appraisal_fee),
        ("Tarifa de registro", charges.registration_fee),
        ("IOF", charges.iof),
        ("Outros encargos", charges.miscellaneous),
        ("Encargos recorrentes", buckets.recurring_total),
    )
    return [
        f"{label} de {format_currency(amount)} excede {format_percentage(fraction)} do valor financiado."
        for label, amount in candidates
        if amount > limit
    ]


def check_insurance_consent(insurances: list[InsuranceItem]) -> list[str]:
    """Flag insurance charged without the consumer's express consent."""
    return [
        f"{item.name} ({format_currency(item.amount)}) cobrado sem consentimento expresso. "
        "Venda casada é proibida (CDC art. 39, I)."
        for item in insurances
        if not item.consented and item.amount > 0
    ]


def check_comissao_permanencia(comissao_permanencia: bool, charges: AccessoryCharges) -> str | None:
    """Comissão de permanência cannot be cumulated with default interest or penalty."""
    if comissao_permanencia and (charges.default_interest_rate > 0 or charges.penalty_rate > 0):
        return (
            "Comissão de permanência cumulada com juros de mora ou multa moratória "
            "(Súmula 472 STJ)."
        )
    return None


def analyze_loan(request: LoanRequest, policy: AnalysisPolicy | None = None) -> LoanAnalysisResult:
    """Analyze a personal loan or general financing contract.

    Args:
        request: Contract terms, market rate, charges and bundled insurance.
        policy: Thresholds; defaults to the configured policy.

    Returns:
        LoanAnalysisResult with comparative figures, irregularity flags and
        the formatted mirror.

    Raises:
        CalculationValidationError: If the contract terms are invalid.
    """
    if policy is None:
        policy = AnalysisPolicy.from_settings()

    terms = request.terms
    base = analyze_comparative(terms, request.market, request.charges, request.horizon)

    findings: list[str] = []

    tac_tec_irregular, tac_tec_note = check_tac_tec(
        request.charges, terms.contract_date, policy.tac_tec_prohibition_date
    )
    if tac_tec_irregular:
        findings.append(tac_tec_note)

    findings.extend(check_excessive_charges(
        request.charges, base.charges, terms.principal, policy.excessive_charge_fraction
    ))
    findings.extend(check_insurance_consent(request.insurances))

    comissao = check_comissao_permanencia(request.comissao_permanencia, request.charges)
    if comissao:
        findings.append(comissao)

    if base.sobretaxa_pp > policy.high_sobretaxa_pp:
        findings.append(f"Sobretaxa elevada: {format_points(base.sobretaxa_pp)} acima do mercado.")

    implied: Decimal | None = None
    divergence = False
    if terms.contracted_installment:
        implied = implied_monthly_rate(
            terms.principal, terms.contracted_installment, terms.installments, terms.system
        )
        divergence = abs(implied - terms.contract_monthly_rate) > settings.engine.rate_tolerance
        if divergence:
            findings.append(
                f"Parcela contratada de {format_currency(terms.contracted_installment)} implica taxa de "
                f"{format_percentage(implied, 4)} a.m., diferente da taxa declarada de "
                f"{format_percentage(terms.contract_monthly_rate, 4)} a.m."
            )

    logger.info(
        "Loan analysis: sobretaxa=%s tac_tec=%s findings=%s",
        base.sobretaxa_pp, tac_tec_irregular, len(findings),
    )

    result = LoanAnalysisResult.model_validate({
        **base.model_dump(exclude={"formatted"}),
        "tac_tec_irregular": tac_tec_irregular,
        "tac_tec_note": tac_tec_note,
        "encargos_irregulares": findings,
        "implied_monthly_rate": implied,
        "installment_divergence": divergence,
    })
    return decorate(result)
