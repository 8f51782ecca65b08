"""POST /v1/priority/score and POST /v1/pipeline - deal triage for the board"""

import logging
from datetime import datetime
from fastapi import APIRouter, Depends, HTTPException, Request

from mca_pipeline.api.v1.schemas import (
    PipelineDealItem,
    PipelineRequest,
    PipelineResponse,
    PipelineSummarySchema,
    PriorityScoreRequest,
    PriorityScoreResponse,
    PriorityScoreSchema,
    StageColumnSchema,
)
from mca_pipeline.api.dependencies import get_now, get_priority_config, get_request_id
from mca_pipeline.domain.exceptions import InvalidInputError
from mca_pipeline.domain.models import PriorityConfig, PriorityLevel
from mca_pipeline.domain.pipeline import build_pipeline, filter_deals, summarize_pipeline
from mca_pipeline.domain.priority import calculate_priority_score
from mca_pipeline.infrastructure.observability.logging import log_priority_evaluation
from mca_pipeline.infrastructure.observability.metrics import invalid_input_counter, record_priority_levels
from mca_pipeline.utils.date_utils import whole_days_between

router = APIRouter()


@router.post("/priority/score", response_model=PriorityScoreResponse)
def score_priority(
    request_body: PriorityScoreRequest,
    request: Request,
    config: PriorityConfig = Depends(get_priority_config),
    server_now: datetime = Depends(get_now),
):
    """Score a single deal card."""
    request_id = get_request_id(request)
    now = request_body.now or server_now

    try:
        priority = calculate_priority_score(
            request_body.updated_at,
            request_body.amount_requested,
            request_body.stage,
            now,
            config,
        )
    except InvalidInputError as e:
        invalid_input_counter.labels(endpoint="priority_score").inc()
        logging.warning(f"Invalid priority input: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=422, detail=str(e))

    record_priority_levels([priority.level])
    log_priority_evaluation(
        request_id,
        deal_count=1,
        urgent_count=int(priority.level is PriorityLevel.URGENT),
        high_count=int(priority.level is PriorityLevel.HIGH),
    )

    return PriorityScoreResponse(
        level=priority.level,
        score=priority.score,
        reasons=priority.reasons,
        days_in_stage=whole_days_between(request_body.updated_at, now),
    )


@router.post("/pipeline", response_model=PipelineResponse)
def get_pipeline(
    request_body: PipelineRequest,
    request: Request,
    config: PriorityConfig = Depends(get_priority_config),
    server_now: datetime = Depends(get_now),
):
    """
    Build the deals board.

    Flow:
    1. Apply period filter and search query
    2. Summarise the filtered deals
    3. Group by stage, sort each column by priority, count urgent/high cards
    """
    request_id = get_request_id(request)
    now = request_body.now or server_now

    deals = filter_deals(
        [d.to_domain() for d in request_body.deals],
        now,
        period=request_body.period,
        query=request_body.query,
    )

    try:
        columns = build_pipeline(deals, now, config)
    except InvalidInputError as e:
        invalid_input_counter.labels(endpoint="pipeline").inc()
        logging.warning(f"Invalid pipeline input: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=422, detail=str(e))

    summary = summarize_pipeline(deals, now)

    levels = [score.level for column in columns for score in column.scores]
    record_priority_levels(levels)
    log_priority_evaluation(
        request_id,
        deal_count=len(levels),
        urgent_count=levels.count(PriorityLevel.URGENT),
        high_count=levels.count(PriorityLevel.HIGH),
    )

    return PipelineResponse(
        summary=PipelineSummarySchema(
            total_deals=summary.total_deals,
            total_value=summary.total_value,
            avg_days_in_pipeline=summary.avg_days_in_pipeline,
        ),
        columns=[
            StageColumnSchema(
                stage=column.stage,
                total_value=column.total_value,
                urgent_count=column.level_counts[PriorityLevel.URGENT],
                high_count=column.level_counts[PriorityLevel.HIGH],
                normal_count=column.level_counts[PriorityLevel.NORMAL],
                deals=[
                    PipelineDealItem(
                        id=deal.id,
                        deal_number=deal.deal_number,
                        company_name=deal.company_name,
                        amount_requested=deal.amount_requested,
                        updated_at=deal.updated_at,
                        priority=PriorityScoreSchema(
                            level=score.level,
                            score=score.score,
                            reasons=score.reasons,
                        ),
                    )
                    for deal, score in zip(column.deals, column.scores)
                ],
            )
            for column in columns
        ],
    )
