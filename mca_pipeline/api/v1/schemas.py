"""Pydantic schemas for API request/response validation"""

from datetime import date, datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, Field

from mca_pipeline.domain.models import (
    Deal,
    IsoPartner,
    Offer,
    PaymentFrequency,
    PriorityLevel,
    RiskRating,
    UnderwritingChecklist,
    UnderwritingStatus,
)


class DealSchema(BaseModel):
    """Deal row as sent by the CRM front end"""

    id: Optional[str] = None
    deal_number: Optional[str] = None
    company_name: Optional[str] = None
    contact_name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    stage: str = Field(default="New", description="Pipeline stage name")
    amount_requested: float
    updated_at: datetime = Field(..., description="Last stage transition")
    created_at: Optional[datetime] = None
    credit_score: Optional[int] = None
    monthly_revenue: Optional[float] = None
    average_daily_balance: Optional[float] = None
    factor_rate: Optional[float] = None
    term_months: Optional[int] = None
    iso_id: Optional[str] = None

    def to_domain(self) -> Deal:
        return Deal(**self.model_dump())


class PriorityScoreSchema(BaseModel):
    level: PriorityLevel
    score: int
    reasons: List[str]


class PriorityScoreRequest(BaseModel):
    """Request body for POST /v1/priority/score"""

    updated_at: datetime
    amount_requested: float
    stage: str = "New"
    now: Optional[datetime] = Field(default=None, description="Reference time; defaults to server time")


class PriorityScoreResponse(PriorityScoreSchema):
    """Response for POST /v1/priority/score"""

    days_in_stage: int


class PipelineRequest(BaseModel):
    """Request body for POST /v1/pipeline"""

    deals: List[DealSchema]
    period: Literal["all", "week", "month"] = "all"
    query: str = ""
    now: Optional[datetime] = None


class PipelineDealItem(BaseModel):
    """Deal card in a pipeline column"""

    id: Optional[str]
    deal_number: Optional[str]
    company_name: Optional[str]
    amount_requested: float
    updated_at: datetime
    priority: PriorityScoreSchema


class StageColumnSchema(BaseModel):
    stage: str
    total_value: float
    urgent_count: int
    high_count: int
    normal_count: int
    deals: List[PipelineDealItem]


class PipelineSummarySchema(BaseModel):
    total_deals: int
    total_value: float
    avg_days_in_pipeline: int


class PipelineResponse(BaseModel):
    """Response for POST /v1/pipeline"""

    summary: PipelineSummarySchema
    columns: List[StageColumnSchema]


class OfferCalculationRequest(BaseModel):
    """Request body for POST /v1/offers/calculate"""

    amount: float
    factor_rate: float
    buy_rate: Optional[float] = None
    term_months: float
    payment_frequency: PaymentFrequency = PaymentFrequency.DAILY
    first_payment_date: Optional[date] = Field(default=None, description="Include a debit schedule from this date")


class InstallmentSchema(BaseModel):
    """Single debit in a repayment schedule"""

    due_date: date
    amount: float


class OfferCalculationResponse(BaseModel):
    """Response for POST /v1/offers/calculate"""

    total_payback: float
    daily_payment: float
    weekly_payment: float
    iso_commission: float
    iso_commission_rate: float
    total_payback_display: str
    daily_payment_display: str
    weekly_payment_display: str
    installments: Optional[List[InstallmentSchema]] = None


class RiskAssessmentRequest(BaseModel):
    """Request body for POST /v1/underwriting/risk"""

    deal: DealSchema
    years_in_business: Optional[float] = None


class RiskAssessmentResponse(BaseModel):
    """Response for POST /v1/underwriting/risk"""

    credit_risk: RiskRating
    cash_flow_risk: RiskRating
    business_age_risk: RiskRating
    daily_balance_risk: RiskRating
    overall_risk: RiskRating
    risk_score: int
    debt_service_coverage: Optional[float] = None


class ChecklistSchema(BaseModel):
    documents_complete: bool = False
    bank_statements_reviewed: bool = False
    credit_checked: bool = False

    def to_domain(self) -> UnderwritingChecklist:
        return UnderwritingChecklist(**self.model_dump())


class UnderwritingDecisionRequest(BaseModel):
    """Request body for POST /v1/underwriting/decision"""

    deal_id: Optional[str] = None
    status: UnderwritingStatus
    decided_by: str = Field(..., min_length=1, description="Deciding user")
    decline_reason: Optional[str] = None
    notes: Optional[str] = None
    decided_at: Optional[datetime] = None
    checklist: Optional[ChecklistSchema] = None
    document_categories: Optional[List[str]] = Field(
        default=None, description="Categories of the documents on file; ticks documents_complete when all are present"
    )


class UnderwritingDecisionResponse(BaseModel):
    """Decision record for the caller to persist on the deal"""

    deal_id: Optional[str]
    status: UnderwritingStatus
    stage: str
    decided_by: str
    decided_at: datetime
    decline_reason: Optional[str] = None
    notes: Optional[str] = None
    checklist_completed: Optional[int] = None
    checklist_total: Optional[int] = None
    missing_documents: Optional[List[str]] = None


class OfferSchema(BaseModel):
    deal_id: str
    amount: float
    factor_rate: Optional[float] = None
    buy_rate: Optional[float] = None
    iso_commission_rate: Optional[float] = None
    created_at: Optional[datetime] = None

    def to_domain(self) -> Offer:
        return Offer(**self.model_dump())


class IsoSchema(BaseModel):
    id: str
    iso_name: str
    commission_rate: Optional[float] = None

    def to_domain(self) -> IsoPartner:
        return IsoPartner(**self.model_dump())


class AnalyticsRequest(BaseModel):
    """Request body for POST /v1/analytics"""

    deals: List[DealSchema]
    offers: List[OfferSchema] = Field(default_factory=list)
    isos: List[IsoSchema] = Field(default_factory=list)
    date_from: Optional[datetime] = Field(default=None, description="Earliest created_at included")
    date_to: Optional[datetime] = Field(default=None, description="Latest created_at included")
    today: Optional[date] = Field(default=None, description="Last day of the funding trend; defaults to server date")


class AnalyticsKPISchema(BaseModel):
    total_pipeline_value: float
    funded_volume: float
    average_deal_size: float
    conversion_rate: int


class StageBreakdownSchema(BaseModel):
    stage: str
    count: int
    value: float


class FundingTrendPointSchema(BaseModel):
    day: date
    deals: int
    amount: float


class IsoPerformanceSchema(BaseModel):
    name: str
    deals: int
    revenue: float
    commission: float
    conversion_rate: int


class AnalyticsResponse(BaseModel):
    """Response for POST /v1/analytics"""

    kpis: AnalyticsKPISchema
    stages: List[StageBreakdownSchema]
    funding_trend: List[FundingTrendPointSchema]
    iso_performance: List[IsoPerformanceSchema]
