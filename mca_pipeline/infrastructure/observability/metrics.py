"""Prometheus metrics for priority levels, offer calculations and underwriting outcomes"""

from prometheus_client import Counter, Histogram

# Pipeline metrics
priority_level_counter = Counter(
    "mca_priority_evaluations_total",
    "Deals scored by the priority scorer",
    ["level"],  # normal | high | urgent
)

# Offer metrics
offer_calculation_counter = Counter(
    "mca_offer_calculations_total",
    "Offer payment calculations",
    ["frequency"],  # daily | weekly
)

# Underwriting metrics
risk_assessment_counter = Counter(
    "mca_risk_assessments_total",
    "Risk assessments by overall rating",
    ["overall_risk"],  # low | medium | high
)

underwriting_decision_counter = Counter(
    "mca_underwriting_decisions_total",
    "Underwriting decisions recorded",
    ["status"],  # approved | declined | more_info_needed
)

# Analytics metrics
analytics_report_counter = Counter(
    "mca_analytics_reports_total",
    "Analytics reports built",
)

invalid_input_counter = Counter(
    "mca_invalid_input_total",
    "Requests rejected by domain validation",
    ["endpoint"],
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_priority_levels(levels) -> None:
    """Count each scored deal by its level"""
    for level in levels:
        priority_level_counter.labels(level=level.value).inc()
