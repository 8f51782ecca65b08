"""Pipeline stages and their priority weighting"""

from enum import Enum
from typing import Optional


class DealStage(str, Enum):
    """Position of a deal in the funding pipeline"""

    NEW = "New"
    REVIEWING_DOCUMENTS = "Reviewing Documents"
    UNDERWRITING = "Underwriting"
    OFFER_SENT = "Offer Sent"
    FUNDED = "Funded"
    DECLINED = "Declined"
    # Set by underwriting decisions
    APPROVED = "Approved"
    MORE_INFO_NEEDED = "More Info Needed"

    @classmethod
    def parse(cls, value: object) -> Optional["DealStage"]:
        """Return the matching stage, or None for unknown or missing names"""
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            return None


# Board column order; decision-derived stages only appear when deals sit in them
PIPELINE_STAGES = (
    DealStage.NEW,
    DealStage.REVIEWING_DOCUMENTS,
    DealStage.UNDERWRITING,
    DealStage.OFFER_SENT,
    DealStage.FUNDED,
    DealStage.DECLINED,
)

DEFAULT_STAGE_MULTIPLIER = 1.0

STAGE_MULTIPLIERS = {
    DealStage.NEW: 1.0,
    DealStage.REVIEWING_DOCUMENTS: 1.2,
    DealStage.UNDERWRITING: 1.5,
    DealStage.OFFER_SENT: 2.0,
    DealStage.FUNDED: 0.5,
    DealStage.DECLINED: 0.1,
}


def stage_multiplier(stage: object) -> float:
    """
    Weight applied to the time score for a stage.

    Approved, More Info Needed, unknown names and None all take
    DEFAULT_STAGE_MULTIPLIER.
    """
    parsed = DealStage.parse(stage)
    if parsed is None:
        return DEFAULT_STAGE_MULTIPLIER
    return STAGE_MULTIPLIERS.get(parsed, DEFAULT_STAGE_MULTIPLIER)


def stage_name(stage: object) -> str:
    """Display name for a stage given as DealStage or free-form string"""
    if isinstance(stage, DealStage):
        return stage.value
    return str(stage)
