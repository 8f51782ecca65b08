"""Underwriting decisions - the explicit human approve/decline record"""

from dataclasses import replace
from datetime import datetime
from typing import Iterable, List, Optional

from mca_pipeline.domain.exceptions import InvalidDecisionError
from mca_pipeline.domain.models import UnderwritingChecklist, UnderwritingDecision, UnderwritingStatus
from mca_pipeline.domain.stages import DealStage

DECLINE_REASONS = (
    "Insufficient Cash Flow",
    "Poor Credit History",
    "Inadequate Documentation",
    "High Risk Industry",
    "Debt Service Coverage Too Low",
    "Bank Statements Show NSF Activity",
    "Business Too New",
    "Other",
)

# Document categories an underwriter needs on file before deciding
REQUIRED_DOCUMENT_CATEGORIES = (
    "Bank Statements",
    "Tax Returns",
    "Application",
    "Financial Statements",
)

DECISION_STAGES = {
    UnderwritingStatus.APPROVED: DealStage.APPROVED,
    UnderwritingStatus.DECLINED: DealStage.DECLINED,
    UnderwritingStatus.MORE_INFO_NEEDED: DealStage.MORE_INFO_NEEDED,
}


def record_underwriting_decision(
    status: UnderwritingStatus | str,
    decided_by: str,
    decided_at: datetime,
    decline_reason: Optional[str] = None,
    notes: Optional[str] = None,
) -> UnderwritingDecision:
    """
    Build the decision record and the stage the deal moves to.

    The risk assessment is never an input here: the underwriter's status is
    taken as given. A decline reason is kept only on declines.

    Raises:
        InvalidDecisionError: unknown status, missing underwriter, or a
            decline reason outside DECLINE_REASONS
    """
    try:
        status = UnderwritingStatus(status)
    except ValueError:
        raise InvalidDecisionError(f"Unknown underwriting status: {status!r}") from None

    if not decided_by or not decided_by.strip():
        raise InvalidDecisionError("Decision must name the deciding user")

    reason = None
    if status is UnderwritingStatus.DECLINED and decline_reason:
        if decline_reason not in DECLINE_REASONS:
            raise InvalidDecisionError(f"Unknown decline reason: {decline_reason!r}")
        reason = decline_reason

    return UnderwritingDecision(
        status=status,
        stage=DECISION_STAGES[status],
        decided_by=decided_by.strip(),
        decided_at=decided_at,
        decline_reason=reason,
        notes=notes or None,
    )


def missing_document_categories(categories: Iterable[Optional[str]]) -> List[str]:
    """Required categories with no uploaded document, in REQUIRED_DOCUMENT_CATEGORIES order"""
    on_file = {c for c in categories if c}
    return [c for c in REQUIRED_DOCUMENT_CATEGORIES if c not in on_file]


def apply_document_categories(
    checklist: UnderwritingChecklist,
    categories: Iterable[Optional[str]],
) -> UnderwritingChecklist:
    """
    Tick documents_complete when every required category is on file.

    A box the underwriter already ticked stays ticked.
    """
    if checklist.documents_complete or missing_document_categories(categories):
        return checklist
    return replace(checklist, documents_complete=True)
