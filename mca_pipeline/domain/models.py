"""Domain models - pure Python dataclasses representing business entities"""

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Dict, List, Optional

from mca_pipeline.domain.exceptions import InvalidInputError
from mca_pipeline.domain.stages import DealStage


@dataclass(frozen=True)
class Deal:
    """Deal record as read from the CRM store"""

    updated_at: datetime  # last stage transition
    amount_requested: float
    stage: str
    id: Optional[str] = None
    deal_number: Optional[str] = None
    company_name: Optional[str] = None
    contact_name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    created_at: Optional[datetime] = None
    credit_score: Optional[int] = None
    monthly_revenue: Optional[float] = None
    average_daily_balance: Optional[float] = None
    factor_rate: Optional[float] = None
    term_months: Optional[int] = None
    iso_id: Optional[str] = None  # referring ISO partner


@dataclass(frozen=True)
class PriorityThresholds:
    """Cut-offs for a single priority level"""

    days_threshold: int
    amount_threshold: float
    score_threshold: int

    def __post_init__(self):
        # Both are divisors in the scorer
        if not self.days_threshold > 0:
            raise InvalidInputError(f"days_threshold must be positive, got {self.days_threshold!r}")
        if not self.amount_threshold > 0:
            raise InvalidInputError(f"amount_threshold must be positive, got {self.amount_threshold!r}")


@dataclass(frozen=True)
class PriorityConfig:
    """Thresholds used by the priority scorer"""

    urgent: PriorityThresholds = PriorityThresholds(
        days_threshold=10, amount_threshold=150_000, score_threshold=80
    )
    high: PriorityThresholds = PriorityThresholds(
        days_threshold=5, amount_threshold=75_000, score_threshold=60
    )


class PriorityLevel(str, Enum):
    NORMAL = "normal"
    HIGH = "high"
    URGENT = "urgent"


@dataclass(frozen=True)
class PriorityScore:
    """Urgency of a deal card"""

    level: PriorityLevel
    score: int
    reasons: List[str] = field(default_factory=list)


class PaymentFrequency(str, Enum):
    DAILY = "daily"
    WEEKLY = "weekly"


@dataclass(frozen=True)
class PaymentCalculation:
    """Payback totals for an offer; amounts are unrounded"""

    total_payback: float
    daily_payment: float
    weekly_payment: float


@dataclass(frozen=True)
class Installment:
    """Single debit in a repayment schedule"""

    due_date: date
    amount: float


class RiskRating(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


@dataclass(frozen=True)
class RiskAssessment:
    """Output of the underwriting risk heuristic"""

    credit_risk: RiskRating
    cash_flow_risk: RiskRating
    business_age_risk: RiskRating
    daily_balance_risk: RiskRating
    overall_risk: RiskRating
    risk_score: int


class UnderwritingStatus(str, Enum):
    APPROVED = "approved"
    DECLINED = "declined"
    MORE_INFO_NEEDED = "more_info_needed"


@dataclass(frozen=True)
class UnderwritingChecklist:
    """Review steps an underwriter ticks off before deciding"""

    documents_complete: bool = False
    bank_statements_reviewed: bool = False
    credit_checked: bool = False

    @property
    def total(self) -> int:
        return 3

    @property
    def completed_count(self) -> int:
        return sum([self.documents_complete, self.bank_statements_reviewed, self.credit_checked])

    @property
    def is_complete(self) -> bool:
        return self.completed_count == self.total


@dataclass(frozen=True)
class UnderwritingDecision:
    """Human decision on a deal, recorded separately from the risk heuristic"""

    status: UnderwritingStatus
    stage: DealStage
    decided_by: str
    decided_at: datetime
    decline_reason: Optional[str] = None
    notes: Optional[str] = None


@dataclass(frozen=True)
class PipelineSummary:
    """Header figures for the deals board"""

    total_deals: int
    total_value: float
    avg_days_in_pipeline: int


@dataclass
class StageColumn:
    """One board column: deals in priority order with badge counts"""

    stage: str
    deals: List[Deal]
    scores: List[PriorityScore]
    level_counts: Dict[PriorityLevel, int]
    total_value: float


@dataclass(frozen=True)
class Offer:
    """Offer sent on a deal; only the fields the analytics read"""

    deal_id: str
    amount: float
    factor_rate: Optional[float] = None
    buy_rate: Optional[float] = None
    iso_commission_rate: Optional[float] = None
    created_at: Optional[datetime] = None


@dataclass(frozen=True)
class IsoPartner:
    """Broker (ISO) that refers deals for a commission"""

    id: str
    iso_name: str
    commission_rate: Optional[float] = None


@dataclass(frozen=True)
class AnalyticsKPIs:
    """Headline figures on the analytics page"""

    total_pipeline_value: float
    funded_volume: float
    average_deal_size: float
    conversion_rate: int  # percent of deals funded


@dataclass(frozen=True)
class StageBreakdown:
    stage: str
    count: int
    value: float


@dataclass(frozen=True)
class FundingTrendPoint:
    day: date
    deals: int
    amount: float


@dataclass(frozen=True)
class IsoPerformance:
    """Funded volume and commission earned through one ISO"""

    name: str
    deals: int
    revenue: float
    commission: float
    conversion_rate: int


@dataclass(frozen=True)
class AnalyticsReport:
    kpis: AnalyticsKPIs
    stages: List[StageBreakdown]
    funding_trend: List[FundingTrendPoint]
    iso_performance: List[IsoPerformance]
