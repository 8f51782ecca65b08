"""Unit tests for deal priority scoring"""

import pytest
from datetime import datetime, timedelta, timezone
from mca_pipeline.domain.exceptions import InvalidInputError
from mca_pipeline.domain.models import Deal, PriorityConfig, PriorityLevel, PriorityThresholds
from mca_pipeline.domain.priority import (
    calculate_priority_score,
    count_priority_levels,
    rank_deals,
    sort_deals_by_priority,
)


def test_urgent_at_default_boundary(now):
    """10 days, $150,000, Offer Sent sits exactly on the urgent thresholds"""
    priority = calculate_priority_score(now - timedelta(days=10), 150_000, "Offer Sent", now)

    assert priority.level == PriorityLevel.URGENT
    assert priority.score == 100  # 40 time + 30 amount + 30 stage
    assert priority.reasons == [
        "10 days in stage",
        "High amount: $150,000",
        "Offer pending response",
    ]


def test_fresh_small_deal_is_normal(now):
    priority = calculate_priority_score(now - timedelta(hours=5), 10_000, "New", now)

    assert priority.level == PriorityLevel.NORMAL
    assert priority.score == 2  # 0 time + 2 amount + 0 stage
    assert priority.reasons == []


def test_high_level_with_medium_amount(now):
    """6 days in Underwriting at $80,000: 24 + 16 + 30 = 70"""
    priority = calculate_priority_score(now - timedelta(days=6), 80_000, "Underwriting", now)

    assert priority.level == PriorityLevel.HIGH
    assert priority.score == 70
    assert priority.reasons == [
        "6 days in stage",
        "Medium amount: $80,000",
        "Underwriting review overdue",
    ]


def test_components_are_individually_capped():
    """Time, amount and stage points saturate at 40, 30 and 30"""
    config = PriorityConfig(
        urgent=PriorityThresholds(days_threshold=10, amount_threshold=100_000, score_threshold=80),
        high=PriorityThresholds(days_threshold=5, amount_threshold=50_000, score_threshold=60),
    )
    now = datetime(2024, 1, 31, tzinfo=timezone.utc)
    priority = calculate_priority_score(now - timedelta(days=30), 500_000, "Offer Sent", now, config)

    assert priority.score == 100
    assert priority.level == PriorityLevel.URGENT


def test_stage_multiplier_changes_score(now):
    updated_at = now - timedelta(days=5)  # time score 20

    new = calculate_priority_score(updated_at, 0, "New", now)
    funded = calculate_priority_score(updated_at, 0, "Funded", now)
    declined = calculate_priority_score(updated_at, 0, "Declined", now)
    offer = calculate_priority_score(updated_at, 0, "Offer Sent", now)

    assert new.score == 40  # 20 + 20
    assert funded.score == 30  # 20 + 10
    assert declined.score == 22  # 20 + 2
    assert offer.score == 50  # 20 + min(30, 40)


@pytest.mark.parametrize("stage", ["Archived", "", None, "offer sent", "Approved", "More Info Needed"])
def test_unknown_stage_weighs_like_new(now, stage):
    updated_at = now - timedelta(days=7)
    baseline = calculate_priority_score(updated_at, 40_000, "New", now)

    priority = calculate_priority_score(updated_at, 40_000, stage, now)

    assert priority.score == baseline.score
    assert "Offer pending response" not in priority.reasons
    assert "Underwriting review overdue" not in priority.reasons


def test_stage_reason_thresholds(now):
    """Offer Sent needs more than 3 days, Underwriting more than 2"""
    assert calculate_priority_score(now - timedelta(days=3), 0, "Offer Sent", now).reasons == []
    assert calculate_priority_score(now - timedelta(days=4), 0, "Offer Sent", now).reasons == [
        "Offer pending response"
    ]
    assert calculate_priority_score(now - timedelta(days=2), 0, "Underwriting", now).reasons == []
    assert calculate_priority_score(now - timedelta(days=3), 0, "Underwriting", now).reasons == [
        "Underwriting review overdue"
    ]


def test_future_updated_at_counts_as_zero_days(now):
    """Clock skew must not produce negative day counts"""
    priority = calculate_priority_score(now + timedelta(days=3), 0, "Offer Sent", now)

    assert priority.score == 0
    assert priority.level == PriorityLevel.NORMAL


def test_negative_amount_contributes_nothing(now):
    updated_at = now - timedelta(days=5)
    zero = calculate_priority_score(updated_at, 0, "New", now)
    negative = calculate_priority_score(updated_at, -50_000, "New", now)

    assert negative.score == zero.score


def test_partial_days_are_floored(now):
    priority = calculate_priority_score(now - timedelta(days=4, hours=23), 0, "New", now)

    assert priority.score == 32  # 4 days → 16 + 16
    assert priority.reasons == []


def test_naive_updated_at_treated_as_utc(now):
    naive = (now - timedelta(days=10)).replace(tzinfo=None)

    priority = calculate_priority_score(naive, 150_000, "Offer Sent", now)

    assert priority.score == 100


def test_custom_config_is_respected(now):
    config = PriorityConfig(
        urgent=PriorityThresholds(days_threshold=4, amount_threshold=50_000, score_threshold=90),
        high=PriorityThresholds(days_threshold=2, amount_threshold=20_000, score_threshold=50),
    )

    priority = calculate_priority_score(now - timedelta(days=2), 30_000, "New", now, config)

    # time 20, amount 18, stage 20
    assert priority.score == 58
    assert priority.level == PriorityLevel.HIGH
    assert priority.reasons == ["2 days in stage", "Medium amount: $30,000"]


def test_fractional_amount_formatting(now):
    """Up to three decimals, trailing zeros dropped"""
    assert calculate_priority_score(now, 150_000.5, "New", now).reasons == ["High amount: $150,000.5"]
    assert calculate_priority_score(now, 80_000.125, "New", now).reasons == ["Medium amount: $80,000.125"]
    assert calculate_priority_score(now, 160_000.0, "New", now).reasons == ["High amount: $160,000"]


def test_identical_inputs_give_identical_scores(now):
    updated_at = now - timedelta(days=8, hours=3)

    first = calculate_priority_score(updated_at, 95_000, "Reviewing Documents", now)
    second = calculate_priority_score(updated_at, 95_000, "Reviewing Documents", now)

    assert first == second


@pytest.mark.parametrize("amount", [None, "150000", float("nan"), float("inf"), True])
def test_invalid_amount_rejected(now, amount):
    with pytest.raises(InvalidInputError):
        calculate_priority_score(now, amount, "New", now)


@pytest.mark.parametrize("field", ["updated_at", "now"])
@pytest.mark.parametrize("value", [None, "2024-06-01T00:00:00Z", 1717200000])
def test_non_datetime_timestamps_rejected(now, field, value):
    args = {"updated_at": now, "amount_requested": 10_000, "stage": "New", "now": now}
    args[field] = value

    with pytest.raises(InvalidInputError, match=field):
        calculate_priority_score(**args)


@pytest.mark.parametrize(
    "days,amount",
    [(0, 150_000), (-1, 150_000), (10, 0), (10, -5_000), (10, float("nan"))],
)
def test_non_positive_thresholds_rejected(days, amount):
    with pytest.raises(InvalidInputError, match="threshold must be positive"):
        PriorityThresholds(days_threshold=days, amount_threshold=amount, score_threshold=80)


def test_sort_by_score_then_most_recent(sample_deals, now):
    ordered = sort_deals_by_priority(sample_deals, now)

    assert [d.id for d in ordered] == ["d2", "d3", "d4", "d1"]


def test_sort_ties_broken_by_updated_at(now):
    older = Deal(id="older", stage="New", amount_requested=0, updated_at=now - timedelta(hours=20))
    newer = Deal(id="newer", stage="New", amount_requested=0, updated_at=now - timedelta(hours=2))

    ordered = sort_deals_by_priority([older, newer], now)

    assert [d.id for d in ordered] == ["newer", "older"]


def test_sort_is_stable_for_full_ties(now):
    updated_at = now - timedelta(days=3)
    deals = [
        Deal(id=f"deal_{i}", stage="Underwriting", amount_requested=60_000, updated_at=updated_at)
        for i in range(5)
    ]

    ordered = sort_deals_by_priority(deals, now)

    assert [d.id for d in ordered] == [f"deal_{i}" for i in range(5)]


def test_sort_does_not_mutate_input(sample_deals, now):
    original = list(sample_deals)

    sort_deals_by_priority(sample_deals, now)

    assert sample_deals == original


def test_rank_deals_pairs_scores(sample_deals, now):
    ranked = rank_deals(sample_deals, now)

    assert [(deal.id, score.score) for deal, score in ranked] == [
        ("d2", 100),
        ("d3", 70),
        ("d4", 26),
        ("d1", 13),
    ]


def test_count_priority_levels(sample_deals, now):
    counts = count_priority_levels(sample_deals, now)

    assert counts == {
        PriorityLevel.NORMAL: 2,
        PriorityLevel.HIGH: 1,
        PriorityLevel.URGENT: 1,
    }
