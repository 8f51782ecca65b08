"""Analytics page figures - KPIs, stage breakdown, funding trend, ISO performance"""

from datetime import date, datetime, timedelta
from typing import Dict, Iterable, List, Optional

from mca_pipeline.domain.models import (
    AnalyticsKPIs,
    AnalyticsReport,
    Deal,
    FundingTrendPoint,
    IsoPartner,
    IsoPerformance,
    Offer,
    StageBreakdown,
)
from mca_pipeline.domain.payments import calculate_iso_commission_rate
from mca_pipeline.domain.stages import DealStage, stage_name
from mca_pipeline.utils.date_utils import to_utc
from mca_pipeline.utils.numbers import require_finite, round_half_up

DEFAULT_ISO_COMMISSION_RATE = 0.05
FUNDING_TREND_DAYS = 30


def _requested(deal: Deal) -> float:
    if deal.amount_requested is None:
        return 0.0
    return require_finite("amount_requested", deal.amount_requested)


def _is_funded(deal: Deal) -> bool:
    return DealStage.parse(deal.stage) is DealStage.FUNDED


def _percent(part: int, whole: int) -> int:
    return round_half_up(part / whole * 100) if whole else 0


def select_period(records: Iterable, start: Optional[datetime] = None, end: Optional[datetime] = None) -> list:
    """
    Deals or offers created within [start, end].

    Either bound may be omitted. Records without created_at are dropped once
    any bound is given.
    """
    records = list(records)
    if start is None and end is None:
        return records

    selected = []
    for record in records:
        if record.created_at is None:
            continue
        created_at = to_utc(record.created_at)
        if start is not None and created_at < to_utc(start):
            continue
        if end is not None and created_at > to_utc(end):
            continue
        selected.append(record)
    return selected


def calculate_kpis(deals: Iterable[Deal]) -> AnalyticsKPIs:
    deals = list(deals)
    total_value = sum(_requested(d) for d in deals)
    funded = [d for d in deals if _is_funded(d)]

    return AnalyticsKPIs(
        total_pipeline_value=total_value,
        funded_volume=sum(_requested(d) for d in funded),
        average_deal_size=total_value / len(deals) if deals else 0.0,
        conversion_rate=_percent(len(funded), len(deals)),
    )


def group_by_stage(deals: Iterable[Deal]) -> List[StageBreakdown]:
    """Count and requested value per stage, in the order stages first appear"""
    counts: Dict[str, int] = {}
    values: Dict[str, float] = {}
    for deal in deals:
        stage = stage_name(deal.stage) if deal.stage else DealStage.NEW.value
        counts[stage] = counts.get(stage, 0) + 1
        values[stage] = values.get(stage, 0.0) + _requested(deal)

    return [StageBreakdown(stage=stage, count=counts[stage], value=values[stage]) for stage in counts]


def funding_trend(deals: Iterable[Deal], today: date, days: int = FUNDING_TREND_DAYS) -> List[FundingTrendPoint]:
    """
    Funded deals per calendar day (UTC) for the `days` days ending today.

    Deals are placed on the day they were created; funded deals without a
    created_at are left out.
    """
    first_day = today - timedelta(days=days - 1)
    counts = {first_day + timedelta(days=i): 0 for i in range(days)}
    amounts = {day: 0.0 for day in counts}

    for deal in deals:
        if not _is_funded(deal) or deal.created_at is None:
            continue
        day = to_utc(deal.created_at).date()
        if day in counts:
            counts[day] += 1
            amounts[day] += _requested(deal)

    return [FundingTrendPoint(day=day, deals=counts[day], amount=amounts[day]) for day in counts]


def offer_commission_rate(offer: Offer, iso: IsoPartner) -> float:
    """
    Rate stored on the offer, else the spread its rates imply, else the
    ISO's agreed rate, else 5%.
    """
    stored = offer.iso_commission_rate
    if not stored:
        stored = calculate_iso_commission_rate(offer.buy_rate, offer.factor_rate)
    return stored or iso.commission_rate or DEFAULT_ISO_COMMISSION_RATE


def iso_performance(
    deals: Iterable[Deal],
    offers: Iterable[Offer],
    isos: Iterable[IsoPartner],
) -> List[IsoPerformance]:
    """
    Funded volume and commission per ISO, busiest first.

    ISOs with no funded deals are left out. Commission is accrued on every
    offer made on the ISO's deals, funded or not.
    """
    deals = list(deals)
    offers = list(offers)

    rows: List[IsoPerformance] = []
    for iso in isos:
        iso_deals = [d for d in deals if d.iso_id == iso.id]
        funded = [d for d in iso_deals if _is_funded(d)]
        if not funded:
            continue

        deal_ids = {d.id for d in iso_deals if d.id is not None}
        commission = sum(
            require_finite("offer amount", offer.amount) * offer_commission_rate(offer, iso)
            for offer in offers
            if offer.deal_id in deal_ids
        )

        rows.append(
            IsoPerformance(
                name=iso.iso_name,
                deals=len(funded),
                revenue=sum(_requested(d) for d in funded),
                commission=commission,
                conversion_rate=_percent(len(funded), len(iso_deals)),
            )
        )

    # sorted() keeps input order among equal deal counts
    return sorted(rows, key=lambda row: row.deals, reverse=True)


def build_analytics(
    deals: Iterable[Deal],
    offers: Iterable[Offer],
    isos: Iterable[IsoPartner],
    today: date,
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
) -> AnalyticsReport:
    """Everything the analytics page shows for deals and offers created in [start, end]"""
    deals = select_period(deals, start, end)
    offers = select_period(offers, start, end)

    return AnalyticsReport(
        kpis=calculate_kpis(deals),
        stages=group_by_stage(deals),
        funding_trend=funding_trend(deals, today),
        iso_performance=iso_performance(deals, offers, list(isos)),
    )
