"""Deal priority scoring - urgency of pipeline cards"""

from datetime import datetime
from typing import Dict, Iterable, List, Optional, Tuple

from mca_pipeline.domain.models import Deal, PriorityConfig, PriorityLevel, PriorityScore
from mca_pipeline.domain.stages import DealStage, stage_multiplier
from mca_pipeline.utils.date_utils import require_datetime, to_utc, whole_days_between
from mca_pipeline.utils.formatters import format_amount
from mca_pipeline.utils.numbers import require_finite, round_half_up

TIME_POINTS = 40
AMOUNT_POINTS = 30
STAGE_POINTS = 30

OFFER_PENDING_DAYS = 3
UNDERWRITING_OVERDUE_DAYS = 2


def calculate_priority_score(
    updated_at: datetime,
    amount_requested: float,
    stage: object,
    now: datetime,
    config: Optional[PriorityConfig] = None,
) -> PriorityScore:
    """
    Score how urgently a deal needs attention.

    Components:
    - Time in stage: up to 40 points, full at urgent.days_threshold
    - Requested amount: up to 30 points, full at urgent.amount_threshold
    - Stage: time score scaled by the stage multiplier, capped at 30

    The stage component is derived from the time component rather than being
    independent, so dwell time is counted twice for late stages. The total is
    not renormalised.

    Args:
        updated_at: Last stage transition
        amount_requested: Requested funding
        stage: Stage name or DealStage; unknown values weigh 1.0
        now: Reference time for the day count
        config: Thresholds (defaults to PriorityConfig())

    Raises:
        InvalidInputError: amount_requested is not a finite number, or updated_at or
            now is not a datetime
    """
    config = config or PriorityConfig()
    amount = require_finite("amount_requested", amount_requested)
    parsed_stage = DealStage.parse(stage)

    days_in_stage = whole_days_between(require_datetime("updated_at", updated_at), require_datetime("now", now))
    reasons: List[str] = []

    time_score = min(TIME_POINTS, (days_in_stage / config.urgent.days_threshold) * TIME_POINTS)
    if days_in_stage >= config.high.days_threshold:
        reasons.append(f"{days_in_stage} days in stage")

    # Zero or negative requests contribute nothing rather than subtracting
    amount_score = max(0.0, min(AMOUNT_POINTS, (amount / config.urgent.amount_threshold) * AMOUNT_POINTS))
    if amount >= config.urgent.amount_threshold:
        reasons.append(f"High amount: ${format_amount(amount)}")
    elif amount >= config.high.amount_threshold:
        reasons.append(f"Medium amount: ${format_amount(amount)}")

    stage_score = min(STAGE_POINTS, time_score * stage_multiplier(parsed_stage))

    if parsed_stage is DealStage.OFFER_SENT and days_in_stage > OFFER_PENDING_DAYS:
        reasons.append("Offer pending response")
    elif parsed_stage is DealStage.UNDERWRITING and days_in_stage > UNDERWRITING_OVERDUE_DAYS:
        reasons.append("Underwriting review overdue")

    score = round_half_up(time_score + amount_score + stage_score)

    if score >= config.urgent.score_threshold:
        level = PriorityLevel.URGENT
    elif score >= config.high.score_threshold:
        level = PriorityLevel.HIGH
    else:
        level = PriorityLevel.NORMAL

    return PriorityScore(level=level, score=score, reasons=reasons)


def score_deal(deal: Deal, now: datetime, config: Optional[PriorityConfig] = None) -> PriorityScore:
    """Priority score for a Deal record"""
    return calculate_priority_score(deal.updated_at, deal.amount_requested, deal.stage, now, config)


def rank_deals(
    deals: Iterable[Deal],
    now: datetime,
    config: Optional[PriorityConfig] = None,
) -> List[Tuple[Deal, PriorityScore]]:
    """
    Pair each deal with its score, highest score first.

    Ties go to the most recently updated deal; deals equal on both keep
    their input order.
    """
    scored = [(deal, score_deal(deal, now, config)) for deal in deals]
    # sorted() is stable under reverse=True
    return sorted(scored, key=lambda pair: (pair[1].score, to_utc(pair[0].updated_at)), reverse=True)


def sort_deals_by_priority(
    deals: Iterable[Deal],
    now: datetime,
    config: Optional[PriorityConfig] = None,
) -> List[Deal]:
    """Deals in priority order (see rank_deals)"""
    return [deal for deal, _ in rank_deals(deals, now, config)]


def count_priority_levels(
    deals: Iterable[Deal],
    now: datetime,
    config: Optional[PriorityConfig] = None,
) -> Dict[PriorityLevel, int]:
    """Number of deals at each priority level, used for stage header badges"""
    counts = {level: 0 for level in PriorityLevel}
    for deal in deals:
        counts[score_deal(deal, now, config).level] += 1
    return counts
