"""POST /v1/analytics - KPI, stage, funding trend and ISO figures"""

import logging
from datetime import datetime
from fastapi import APIRouter, Depends, HTTPException, Request

from mca_pipeline.api.v1.schemas import (
    AnalyticsKPISchema,
    AnalyticsRequest,
    AnalyticsResponse,
    FundingTrendPointSchema,
    IsoPerformanceSchema,
    StageBreakdownSchema,
)
from mca_pipeline.api.dependencies import get_now, get_request_id
from mca_pipeline.domain.analytics import build_analytics
from mca_pipeline.domain.exceptions import InvalidInputError
from mca_pipeline.infrastructure.observability.logging import log_analytics_report
from mca_pipeline.infrastructure.observability.metrics import analytics_report_counter, invalid_input_counter
from mca_pipeline.utils.date_utils import to_utc

router = APIRouter()


@router.post("/analytics", response_model=AnalyticsResponse)
def get_analytics(
    request_body: AnalyticsRequest,
    request: Request,
    server_now: datetime = Depends(get_now),
):
    """
    Figures for the analytics page over deals and offers created in the date range.

    The caller supplies the records; nothing is read from a store here.
    """
    request_id = get_request_id(request)
    today = request_body.today or to_utc(server_now).date()

    try:
        report = build_analytics(
            [d.to_domain() for d in request_body.deals],
            [o.to_domain() for o in request_body.offers],
            [i.to_domain() for i in request_body.isos],
            today,
            start=request_body.date_from,
            end=request_body.date_to,
        )
    except InvalidInputError as e:
        invalid_input_counter.labels(endpoint="analytics").inc()
        logging.warning(f"Invalid analytics input: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=422, detail=str(e))

    analytics_report_counter.inc()
    log_analytics_report(
        request_id,
        deal_count=sum(stage.count for stage in report.stages),
        funded_volume=report.kpis.funded_volume,
        iso_count=len(report.iso_performance),
    )

    return AnalyticsResponse(
        kpis=AnalyticsKPISchema(
            total_pipeline_value=report.kpis.total_pipeline_value,
            funded_volume=report.kpis.funded_volume,
            average_deal_size=report.kpis.average_deal_size,
            conversion_rate=report.kpis.conversion_rate,
        ),
        stages=[
            StageBreakdownSchema(stage=s.stage, count=s.count, value=s.value)
            for s in report.stages
        ],
        funding_trend=[
            FundingTrendPointSchema(day=p.day, deals=p.deals, amount=p.amount)
            for p in report.funding_trend
        ],
        iso_performance=[
            IsoPerformanceSchema(
                name=row.name,
                deals=row.deals,
                revenue=row.revenue,
                commission=row.commission,
                conversion_rate=row.conversion_rate,
            )
            for row in report.iso_performance
        ],
    )
