"""POST /v1/underwriting/risk and POST /v1/underwriting/decision"""

import logging
from datetime import datetime
from fastapi import APIRouter, Depends, HTTPException, Request

from mca_pipeline.api.v1.schemas import (
    RiskAssessmentRequest,
    RiskAssessmentResponse,
    UnderwritingDecisionRequest,
    UnderwritingDecisionResponse,
)
from mca_pipeline.api.dependencies import get_now, get_request_id
from mca_pipeline.domain.exceptions import InvalidDecisionError, InvalidInputError
from mca_pipeline.domain.risk import assess_risk, calculate_debt_service_coverage
from mca_pipeline.domain.models import UnderwritingChecklist
from mca_pipeline.domain.underwriting import (
    apply_document_categories,
    missing_document_categories,
    record_underwriting_decision,
)
from mca_pipeline.infrastructure.observability.logging import log_risk_assessment, log_underwriting_decision
from mca_pipeline.infrastructure.observability.metrics import (
    invalid_input_counter,
    risk_assessment_counter,
    underwriting_decision_counter,
)

router = APIRouter()


@router.post("/underwriting/risk", response_model=RiskAssessmentResponse)
def get_risk_assessment(request_body: RiskAssessmentRequest, request: Request):
    """
    Advisory risk badges and composite score for the underwriting tab.

    Informational only; decisions go through /underwriting/decision.
    """
    request_id = get_request_id(request)
    deal = request_body.deal.to_domain()

    try:
        assessment = assess_risk(deal, request_body.years_in_business)
        debt_service_coverage = calculate_debt_service_coverage(deal)
    except InvalidInputError as e:
        invalid_input_counter.labels(endpoint="risk_assessment").inc()
        logging.warning(f"Invalid risk assessment input: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=422, detail=str(e))

    risk_assessment_counter.labels(overall_risk=assessment.overall_risk.value).inc()
    log_risk_assessment(request_id, deal.id, assessment.overall_risk.value, assessment.risk_score)

    return RiskAssessmentResponse(
        credit_risk=assessment.credit_risk,
        cash_flow_risk=assessment.cash_flow_risk,
        business_age_risk=assessment.business_age_risk,
        daily_balance_risk=assessment.daily_balance_risk,
        overall_risk=assessment.overall_risk,
        risk_score=assessment.risk_score,
        debt_service_coverage=debt_service_coverage,
    )


@router.post("/underwriting/decision", response_model=UnderwritingDecisionResponse)
def create_underwriting_decision(
    request_body: UnderwritingDecisionRequest,
    request: Request,
    server_now: datetime = Depends(get_now),
):
    """
    Validate an underwriter's decision and return the fields to write on the deal.

    Persistence stays with the caller's data store.
    """
    request_id = get_request_id(request)

    try:
        decision = record_underwriting_decision(
            status=request_body.status,
            decided_by=request_body.decided_by,
            decided_at=request_body.decided_at or server_now,
            decline_reason=request_body.decline_reason,
            notes=request_body.notes,
        )
    except InvalidDecisionError as e:
        invalid_input_counter.labels(endpoint="underwriting_decision").inc()
        logging.warning(f"Invalid underwriting decision: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=422, detail=str(e))

    underwriting_decision_counter.labels(status=decision.status.value).inc()
    log_underwriting_decision(request_id, request_body.deal_id, decision.status.value, decision.decided_by)

    checklist = request_body.checklist.to_domain() if request_body.checklist else None
    missing_documents = None
    if request_body.document_categories is not None:
        checklist = apply_document_categories(checklist or UnderwritingChecklist(), request_body.document_categories)
        missing_documents = missing_document_categories(request_body.document_categories)

    return UnderwritingDecisionResponse(
        deal_id=request_body.deal_id,
        status=decision.status,
        stage=decision.stage.value,
        decided_by=decision.decided_by,
        decided_at=decision.decided_at,
        decline_reason=decision.decline_reason,
        notes=decision.notes,
        checklist_completed=checklist.completed_count if checklist else None,
        checklist_total=checklist.total if checklist else None,
        missing_documents=missing_documents,
    )
