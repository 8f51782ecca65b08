"""Underwriting risk heuristic - advisory ratings shown beside the decision form"""

from typing import Dict, Optional

from mca_pipeline.domain.models import Deal, RiskAssessment, RiskRating
from mca_pipeline.utils.numbers import require_finite, round_half_up

# Numeric value of each rating (lower is better)
RATING_VALUES: Dict[RiskRating, int] = {
    RiskRating.LOW: 20,
    RiskRating.MEDIUM: 50,
    RiskRating.HIGH: 80,
}

# Percent weights; "documents" is reserved and has no rating input yet,
# so the weighted sum tops out at 90% of the nominal scale.
RISK_WEIGHTS: Dict[str, int] = {
    "credit": 30,
    "cash_flow": 25,
    "business_age": 20,
    "daily_balance": 15,
    "documents": 10,
}

LOW_RISK_MAX_SCORE = 35
MEDIUM_RISK_MAX_SCORE = 65

# Calendar days used by the debt service coverage estimate
DAYS_PER_MONTH = 30


def optional_measure(name: str, value: Optional[float]) -> Optional[float]:
    """None stays None; anything else must be a finite number"""
    if value is None:
        return None
    return require_finite(name, value)


def rate_credit(credit_score: Optional[int]) -> RiskRating:
    """750+ low, 650+ medium, below high; missing is medium"""
    if not credit_score:
        return RiskRating.MEDIUM
    if credit_score >= 750:
        return RiskRating.LOW
    if credit_score >= 650:
        return RiskRating.MEDIUM
    return RiskRating.HIGH


def rate_cash_flow(amount_requested: Optional[float], monthly_revenue: Optional[float]) -> RiskRating:
    """Request as a multiple of monthly revenue: <=1 low, <=2 medium, else high"""
    if not amount_requested or not monthly_revenue:
        return RiskRating.MEDIUM
    ratio = amount_requested / monthly_revenue
    if ratio <= 1:
        return RiskRating.LOW
    if ratio <= 2:
        return RiskRating.MEDIUM
    return RiskRating.HIGH


def rate_business_age(years_in_business: Optional[float]) -> RiskRating:
    """3+ years low, 1+ medium, under a year high; missing is medium"""
    if not years_in_business:
        return RiskRating.MEDIUM
    if years_in_business >= 3:
        return RiskRating.LOW
    if years_in_business >= 1:
        return RiskRating.MEDIUM
    return RiskRating.HIGH


def rate_daily_balance(average_daily_balance: Optional[float], amount_requested: Optional[float]) -> RiskRating:
    """Average daily balance as a share of the request: >=30% low, >=15% medium, else high"""
    if not average_daily_balance or not amount_requested:
        return RiskRating.MEDIUM
    ratio = average_daily_balance / amount_requested
    if ratio >= 0.3:
        return RiskRating.LOW
    if ratio >= 0.15:
        return RiskRating.MEDIUM
    return RiskRating.HIGH


def calculate_risk_score(
    credit_risk: RiskRating,
    cash_flow_risk: RiskRating,
    business_age_risk: RiskRating,
    daily_balance_risk: RiskRating,
) -> int:
    """Weighted composite from 0 (lowest risk) to 100"""
    weighted = (
        RATING_VALUES[credit_risk] * RISK_WEIGHTS["credit"]
        + RATING_VALUES[cash_flow_risk] * RISK_WEIGHTS["cash_flow"]
        + RATING_VALUES[business_age_risk] * RISK_WEIGHTS["business_age"]
        + RATING_VALUES[daily_balance_risk] * RISK_WEIGHTS["daily_balance"]
    )
    return round_half_up(weighted / 100)


def classify_risk_score(risk_score: int) -> RiskRating:
    if risk_score <= LOW_RISK_MAX_SCORE:
        return RiskRating.LOW
    if risk_score <= MEDIUM_RISK_MAX_SCORE:
        return RiskRating.MEDIUM
    return RiskRating.HIGH


def assess_risk(deal: Deal, years_in_business: Optional[float] = None) -> RiskAssessment:
    """
    Rate a deal on credit, cash flow, business age and daily balance.

    Each category falls back to medium when its data point is missing (or
    zero). The result informs the underwriter; it never decides the deal.

    Raises:
        InvalidInputError: amount_requested is not a finite number, or an
            optional data point is present but NaN, infinite or non-numeric
    """
    amount = require_finite("amount_requested", deal.amount_requested)
    credit_score = optional_measure("credit_score", deal.credit_score)
    monthly_revenue = optional_measure("monthly_revenue", deal.monthly_revenue)
    average_daily_balance = optional_measure("average_daily_balance", deal.average_daily_balance)
    years = optional_measure("years_in_business", years_in_business)

    credit_risk = rate_credit(credit_score)
    cash_flow_risk = rate_cash_flow(amount, monthly_revenue)
    business_age_risk = rate_business_age(years)
    daily_balance_risk = rate_daily_balance(average_daily_balance, amount)

    risk_score = calculate_risk_score(credit_risk, cash_flow_risk, business_age_risk, daily_balance_risk)

    return RiskAssessment(
        credit_risk=credit_risk,
        cash_flow_risk=cash_flow_risk,
        business_age_risk=business_age_risk,
        daily_balance_risk=daily_balance_risk,
        overall_risk=classify_risk_score(risk_score),
        risk_score=risk_score,
    )


def calculate_debt_service_coverage(deal: Deal) -> Optional[float]:
    """
    Daily revenue divided by the daily payment the deal's terms imply.

    Both sides use 30-day months. Returns None when revenue, amount,
    factor rate or term is missing.

    Raises:
        InvalidInputError: any of those inputs is NaN, infinite or non-numeric
    """
    amount = require_finite("amount_requested", deal.amount_requested)
    monthly_revenue = optional_measure("monthly_revenue", deal.monthly_revenue)
    factor_rate = optional_measure("factor_rate", deal.factor_rate)
    term_months = optional_measure("term_months", deal.term_months)
    if not monthly_revenue or not amount or not factor_rate or not term_months:
        return None

    total_payback = amount * factor_rate
    daily_payment = total_payback / (term_months * DAYS_PER_MONTH)
    daily_revenue = monthly_revenue / DAYS_PER_MONTH

    return daily_revenue / daily_payment
