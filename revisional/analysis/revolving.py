"""Revolving-credit (credit card) analysis.

The revolving balance has no installment plan: each month's interest is
added to the carried balance and the minimum payment, if any, goes to
interest first. Running the same simulation with interest charged on the
principal only gives the simple trajectory; the gap between the two is
the capitalized interest (anatocismo).

The abuse flag uses the operative threshold (50% above market by default).
Report texts also quote the 150% labelling threshold; both are policy
inputs kept as separate settings.
"""

from __future__ import annotations

import logging
from decimal import Decimal

from revisional.calculators.charges import aggregate_charges
from revisional.calculators.comparative import (
    floor_restitution,
    percentual_abuso,
    restitution_average,
    simplified_cost_rate,
    sobretaxa_pp,
)
from revisional.calculators.rates import monthly_to_annual
from revisional.calculators.schedule import generate_schedule
from revisional.calculators.validation import require_positive_amount, validate_revolving_inputs
from revisional.config import settings
from revisional.presentation.formatters import format_currency, format_percent_value, format_percentage
from revisional.presentation.mirror import decorate
from revisional.presentation.report import render_executive_summary, render_methodology
from revisional.schemas.analysis import (
    AmortizationSchedule,
    AnalysisPolicy,
    RevolvingAnalysisResult,
    RevolvingReport,
)
from revisional.schemas.contract import AmortizationSystem, ContractTerms, MarketRate, RevolvingRequest

logger = logging.getLogger(__name__)

_ZERO = Decimal("0")

# Classification bands on percentual_abuso
_WITHIN_MARKET_PCT = Decimal("20")
_SIGNIFICANT_PCT = Decimal("100")


def simulate_revolving_interest(
    balance: Decimal,
    rate: Decimal,
    months: int,
    minimum_payment_rate: Decimal = _ZERO,
    compound: bool = True,
) -> Decimal:
    """Total interest accrued on a revolving balance over the horizon.

    Args:
        balance: Opening balance.
        rate: Monthly rate (fraction).
        months: Number of months simulated.
        minimum_payment_rate: Share of the balance paid after interest is added.
        compound: Charge interest on unpaid interest too. When False only
            the outstanding principal bears interest.

    Returns:
        Sum of the interest of every month.
    """
    principal = balance
    unpaid_interest = _ZERO
    total = _ZERO

    for _ in range(months):
        base = principal + unpaid_interest if compound else principal
        interest = base * rate
        total += interest
        unpaid_interest += interest

        payment = (principal + unpaid_interest) * minimum_payment_rate
        to_interest = min(payment, unpaid_interest)
        unpaid_interest -= to_interest
        principal -= payment - to_interest

    return total


def classify_abuse(abuse_pct: Decimal | None) -> str:
    """Describe how far the contract rate sits above the market average."""
    if abuse_pct is None:
        return "Sem dados de mercado para classificação"
    if abuse_pct <= _WITHIN_MARKET_PCT:
        return "Dentro ou levemente acima da média de mercado"
    if abuse_pct <= _SIGNIFICANT_PCT:
        return "Significativamente acima da média de mercado"
    return "Extremamente acima da média de mercado"


def _reference_schedule(
    base: Decimal, rate: Decimal, market: MarketRate, months: int
) -> AmortizationSchedule:
    terms = ContractTerms(
        principal=base,
        installments=months,
        contract_monthly_rate=rate,
        system=AmortizationSystem.SAC,
    )
    return generate_schedule(terms, market)


def analyze_revolving(
    request: RevolvingRequest,
    policy: AnalysisPolicy | None = None,
) -> RevolvingAnalysisResult:
    """Analyze a credit-card revolving balance against the market rate.

    Args:
        request: Balance, contract rate, market rate and charges.
        policy: Thresholds; defaults to the configured policy.

    Returns:
        RevolvingAnalysisResult with abuse flags, totals and the formatted mirror.

    Raises:
        CalculationValidationError: If balance, rates, horizon or payment rate are invalid.
    """
    if policy is None:
        policy = AnalysisPolicy.from_settings()

    months = request.months if request.months is not None else policy.revolving_months
    payment_rate = (
        request.minimum_payment_rate
        if request.minimum_payment_rate is not None
        else policy.minimum_payment_rate
    )
    rate_c = request.contract_monthly_rate
    rate_m = request.market.monthly_rate

    validate_revolving_inputs(
        request.balance, rate_c, rate_m, months, payment_rate, policy.max_revolving_months
    )
    if request.principal:
        require_positive_amount(request.principal, "Valor principal", "PRINCIPAL_INVALIDO")

    base = request.base_amount
    charges = request.charges

    interest_c = simulate_revolving_interest(base, rate_c, months, payment_rate)
    interest_m = simulate_revolving_interest(base, rate_m, months, payment_rate)
    simple_c = simulate_revolving_interest(base, rate_c, months, payment_rate, compound=False)

    capitalized = interest_c - simple_c
    anatocismo = capitalized > settings.engine.capitalization_tolerance

    abuse_pct = percentual_abuso(rate_c, rate_m)
    tem_abuso = abuse_pct is not None and abuse_pct > policy.abuse_threshold_pct

    buckets = aggregate_charges(charges, months, base, late_payment=True)
    iof_total = charges.iof + charges.monthly_iof * months

    findings: list[str] = []
    if buckets.default_interest_total > 0:
        findings.append(
            f"Juros de mora: {format_currency(buckets.default_interest_total)} "
            f"({format_percentage(charges.default_interest_rate)} a.m.)"
        )
    if buckets.penalty_total > 0:
        findings.append(
            f"Multa: {format_currency(buckets.penalty_total)} ({format_percentage(charges.penalty_rate)})"
        )
    if iof_total > 0:
        findings.append(f"IOF: {format_currency(iof_total)}")
    if charges.annuity > policy.annuity_ceiling:
        findings.append(f"Anuidade elevada: {format_currency(charges.annuity)}")
    if tem_abuso:
        findings.append(f"Sobretaxa abusiva de {format_percent_value(abuse_pct)} acima da média de mercado")
    if anatocismo:
        findings.append(
            f"Anatocismo: {format_currency(capitalized)} de juros cobrados sobre juros não pagos"
        )

    # The annuity is spread over the horizon, so it enters the total once.
    total_encargos = (charges.monthly_insurance + charges.monthly_tariffs) * months + charges.annuity
    cobrados = interest_c + buckets.default_interest_total + buckets.penalty_total + iof_total
    devidos = interest_m

    simple = floor_restitution(interest_c - interest_m)
    average = floor_restitution(
        restitution_average(_reference_schedule(base, rate_c, request.market, months))
    )
    cet_monthly, cet_annual = simplified_cost_rate(rate_c, base, total_encargos, months)

    logger.info(
        "Revolving analysis: abuso=%s%% tem_abuso=%s anatocismo=%s findings=%s",
        abuse_pct, tem_abuso, anatocismo, len(findings),
    )

    result = RevolvingAnalysisResult(
        contract_monthly_rate=rate_c,
        contract_annual_rate=monthly_to_annual(rate_c),
        market_monthly_rate=rate_m,
        market_annual_rate=request.market.annual_rate or monthly_to_annual(rate_m),
        sobretaxa_pp=sobretaxa_pp(rate_c, rate_m),
        percentual_abuso=abuse_pct,
        total_interest_contract=interest_c,
        total_interest_market=interest_m,
        interest_difference=interest_c - interest_m,
        restitution_simple=simple,
        restitution_average=average,
        restitution_double=2 * simple,
        cet_monthly=cet_monthly,
        cet_annual=cet_annual,
        balance=request.balance,
        months=months,
        minimum_payment_rate=payment_rate,
        tem_abuso=tem_abuso,
        abuse_threshold=policy.abuse_threshold_pct,
        anatocismo_detectado=anatocismo,
        capitalized_interest=capitalized,
        classificacao=classify_abuse(abuse_pct),
        encargos_abusivos=findings,
        total_encargos=total_encargos,
        total_encargos_cobrados=cobrados,
        total_encargos_devidos=devidos,
        diferenca_restituicao=cobrados - devidos,
        default_interest_total=buckets.default_interest_total,
        penalty_total=buckets.penalty_total,
        iof_total=iof_total,
    )
    return decorate(result)


def build_revolving_report(
    request: RevolvingRequest,
    analysis: RevolvingAnalysisResult,
    policy: AnalysisPolicy | None = None,
) -> RevolvingReport:
    """Build the full revolving-credit report on a SAC reference table.

    The table runs over the analysis horizon at both rates; the totals,
    restitution figures and both texts are derived from it.
    """
    if policy is None:
        policy = AnalysisPolicy.from_settings()

    base = request.base_amount
    schedule = _reference_schedule(
        base, analysis.contract_monthly_rate, request.market, analysis.months
    )
    total_c = schedule.total_interest_contract
    total_m = schedule.total_interest_market
    simple = floor_restitution(total_c - total_m)

    context = {
        "analysis": analysis,
        "rows": schedule.rows,
        "principal": base,
        "creditor": request.creditor,
        "debtor": request.debtor,
        "product": request.market.product,
        "label_threshold": policy.abuse_label_threshold_pct,
        "total_interest_contract": total_c,
        "total_interest_market": total_m,
        "restitution_simple": simple,
        "restitution_double": 2 * simple,
    }

    logger.info("Revolving report: %s rows, restituicao=%s", len(schedule.rows), simple)

    report = RevolvingReport(
        rows=schedule.rows,
        principal=base,
        total_interest_contract=total_c,
        total_interest_market=total_m,
        total_contract=base + total_c,
        total_market=base + total_m,
        restitution_simple=simple,
        restitution_double=2 * simple,
        executive_summary=render_executive_summary(context),
        methodology=render_methodology(context),
    )
    return decorate(report)
