"""Deals board helpers - filtering, summary figures and stage columns"""

from datetime import datetime, timedelta
from typing import Dict, Iterable, List, Optional

from mca_pipeline.domain.models import Deal, PipelineSummary, PriorityConfig, PriorityLevel, StageColumn
from mca_pipeline.domain.priority import rank_deals
from mca_pipeline.domain.stages import PIPELINE_STAGES, stage_name
from mca_pipeline.utils.date_utils import subtract_months, to_utc, whole_days_between
from mca_pipeline.utils.numbers import round_half_up


def _matches_query(deal: Deal, query: str) -> bool:
    fields = [
        deal.company_name,
        deal.deal_number,
        deal.contact_name,
        deal.email,
        deal.phone,
        str(deal.amount_requested),
        stage_name(deal.stage),
    ]
    return any(query in field.lower() for field in fields if field)


def filter_deals(
    deals: Iterable[Deal],
    now: datetime,
    period: str = "all",
    query: str = "",
) -> List[Deal]:
    """
    Apply the board's period filter and free-text search.

    period: "week" keeps deals created in the last 7 days, "month" since the
    same day last month; any other value keeps everything. Deals without a
    created_at never pass a period filter.
    """
    filtered = list(deals)

    cutoff = None
    if period == "week":
        cutoff = to_utc(now) - timedelta(days=7)
    elif period == "month":
        cutoff = subtract_months(to_utc(now), 1)

    if cutoff is not None:
        filtered = [d for d in filtered if d.created_at is not None and to_utc(d.created_at) >= cutoff]

    query = query.strip().lower()
    if query:
        filtered = [d for d in filtered if _matches_query(d, query)]

    return filtered


def summarize_pipeline(deals: Iterable[Deal], now: datetime) -> PipelineSummary:
    """Deal count, requested total and average age in whole days"""
    deals = list(deals)
    total_value = sum(d.amount_requested for d in deals)

    ages = [whole_days_between(d.created_at, now) for d in deals if d.created_at is not None]
    avg_days = round_half_up(sum(ages) / len(ages)) if ages else 0

    return PipelineSummary(
        total_deals=len(deals),
        total_value=total_value,
        avg_days_in_pipeline=avg_days,
    )


def build_pipeline(
    deals: Iterable[Deal],
    now: datetime,
    config: Optional[PriorityConfig] = None,
) -> List[StageColumn]:
    """
    Group deals into board columns, each sorted by priority.

    Columns follow PIPELINE_STAGES; stages outside it (Approved, custom
    names) get columns after them in first-seen order.
    """
    by_stage: Dict[str, List[Deal]] = {stage.value: [] for stage in PIPELINE_STAGES}
    for deal in deals:
        by_stage.setdefault(stage_name(deal.stage), []).append(deal)

    columns = []
    for stage, stage_deals in by_stage.items():
        ranked = rank_deals(stage_deals, now, config)
        level_counts = {level: 0 for level in PriorityLevel}
        for _, score in ranked:
            level_counts[score.level] += 1

        columns.append(
            StageColumn(
                stage=stage,
                deals=[deal for deal, _ in ranked],
                scores=[score for _, score in ranked],
                level_counts=level_counts,
                total_value=sum(d.amount_requested for d in stage_deals),
            )
        )

    return columns
