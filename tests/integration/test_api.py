"""Integration tests for API endpoints"""

import pytest
from fastapi.testclient import TestClient


def test_health_endpoint(client: TestClient):
    """Test health check endpoint"""
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"


def test_request_id_header(client: TestClient):
    response = client.get("/health", headers={"X-Request-ID": "trace-123"})
    assert response.headers["X-Request-ID"] == "trace-123"

    generated = client.get("/health")
    assert generated.headers["X-Request-ID"]


def test_metrics_endpoint(client: TestClient):
    """Test Prometheus metrics endpoint"""
    client.post(
        "/v1/offers/calculate",
        json={"amount": 50000, "factor_rate": 1.3, "term_months": 6, "payment_frequency": "weekly"},
    )
    response = client.get("/metrics")
    assert response.status_code == 200
    assert "mca_offer_calculations_total" in response.text


def test_priority_score_endpoint(client: TestClient):
    """Clock is pinned to 2024-06-14 12:00 UTC"""
    response = client.post(
        "/v1/priority/score",
        json={"updated_at": "2024-06-04T12:00:00Z", "amount_requested": 150000, "stage": "Offer Sent"},
    )

    assert response.status_code == 200
    data = response.json()
    assert data["level"] == "urgent"
    assert data["score"] == 100
    assert data["days_in_stage"] == 10
    assert data["reasons"] == ["10 days in stage", "High amount: $150,000", "Offer pending response"]


def test_priority_score_uses_supplied_now(client: TestClient):
    response = client.post(
        "/v1/priority/score",
        json={
            "updated_at": "2024-06-04T12:00:00Z",
            "amount_requested": 0,
            "stage": "New",
            "now": "2024-06-05T12:00:00Z",
        },
    )

    assert response.status_code == 200
    assert response.json()["days_in_stage"] == 1
    assert response.json()["score"] == 8


def test_priority_score_rejects_missing_amount(client: TestClient):
    response = client.post("/v1/priority/score", json={"updated_at": "2024-06-04T12:00:00Z"})
    assert response.status_code == 422


def test_pipeline_endpoint(client: TestClient):
    deals = [
        {
            "id": "d1",
            "deal_number": "D-1001",
            "company_name": "Harbor Diner LLC",
            "stage": "New",
            "amount_requested": 25000,
            "updated_at": "2024-06-13T12:00:00Z",
            "created_at": "2024-06-11T12:00:00Z",
        },
        {
            "id": "d2",
            "deal_number": "D-1002",
            "company_name": "Peak Auto Repair",
            "stage": "Offer Sent",
            "amount_requested": 160000,
            "updated_at": "2024-06-02T12:00:00Z",
            "created_at": "2024-05-05T12:00:00Z",
        },
        {
            "id": "d4",
            "deal_number": "D-1004",
            "company_name": "Northside Dental",
            "stage": "Offer Sent",
            "amount_requested": 10000,
            "updated_at": "2024-06-12T12:00:00Z",
            "created_at": "2024-06-09T12:00:00Z",
        },
    ]

    response = client.post("/v1/pipeline", json={"deals": deals})

    assert response.status_code == 200
    data = response.json()
    assert data["summary"] == {"total_deals": 3, "total_value": 195000, "avg_days_in_pipeline": 16}

    offer_sent = next(c for c in data["columns"] if c["stage"] == "Offer Sent")
    assert [d["id"] for d in offer_sent["deals"]] == ["d2", "d4"]
    assert offer_sent["urgent_count"] == 1
    assert offer_sent["normal_count"] == 1
    assert offer_sent["deals"][0]["priority"]["level"] == "urgent"


def test_pipeline_endpoint_filters(client: TestClient):
    deals = [
        {"id": "old", "stage": "New", "amount_requested": 1000,
         "updated_at": "2024-05-01T00:00:00Z", "created_at": "2024-05-01T00:00:00Z"},
        {"id": "fresh", "stage": "New", "amount_requested": 1000,
         "updated_at": "2024-06-13T00:00:00Z", "created_at": "2024-06-13T00:00:00Z"},
    ]

    response = client.post("/v1/pipeline", json={"deals": deals, "period": "week"})

    assert response.status_code == 200
    new_column = response.json()["columns"][0]
    assert [d["id"] for d in new_column["deals"]] == ["fresh"]


def test_pipeline_rejects_unknown_period(client: TestClient):
    response = client.post("/v1/pipeline", json={"deals": [], "period": "year"})
    assert response.status_code == 422


def test_offer_calculation_endpoint(client: TestClient):
    response = client.post(
        "/v1/offers/calculate",
        json={
            "amount": 100000,
            "factor_rate": 1.35,
            "buy_rate": 1.25,
            "term_months": 12,
            "payment_frequency": "daily",
        },
    )

    assert response.status_code == 200
    data = response.json()
    assert data["total_payback"] == pytest.approx(135000)
    assert data["daily_payment"] == pytest.approx(135000 / 264)
    assert data["iso_commission"] == pytest.approx(10000)
    assert data["iso_commission_rate"] == pytest.approx(0.1)
    assert data["total_payback_display"] == "$135,000"
    assert data["daily_payment_display"] == "$511"
    assert data["installments"] is None


def test_offer_calculation_with_schedule(client: TestClient):
    response = client.post(
        "/v1/offers/calculate",
        json={
            "amount": 50000,
            "factor_rate": 1.3,
            "term_months": 6,
            "payment_frequency": "weekly",
            "first_payment_date": "2024-06-17",
        },
    )

    assert response.status_code == 200
    installments = response.json()["installments"]
    assert len(installments) == 26
    assert installments[0]["due_date"] == "2024-06-17"
    assert installments[1]["due_date"] == "2024-06-24"
    assert sum(i["amount"] for i in installments) == pytest.approx(65000)


def test_offer_calculation_rejects_zero_term(client: TestClient):
    response = client.post(
        "/v1/offers/calculate",
        json={"amount": 50000, "factor_rate": 1.3, "term_months": 0},
    )

    assert response.status_code == 422
    assert "term_months" in response.json()["detail"]


def test_offer_calculation_rejects_unknown_frequency(client: TestClient):
    response = client.post(
        "/v1/offers/calculate",
        json={"amount": 50000, "factor_rate": 1.3, "term_months": 6, "payment_frequency": "monthly"},
    )
    assert response.status_code == 422


def test_risk_endpoint(client: TestClient):
    response = client.post(
        "/v1/underwriting/risk",
        json={
            "deal": {
                "id": "d9",
                "stage": "Underwriting",
                "amount_requested": 40000,
                "updated_at": "2024-06-10T00:00:00Z",
                "credit_score": 800,
                "monthly_revenue": 50000,
                "average_daily_balance": 20000,
            },
            "years_in_business": 5,
        },
    )

    assert response.status_code == 200
    data = response.json()
    assert data["overall_risk"] == "low"
    assert data["risk_score"] == 18
    assert {data["credit_risk"], data["cash_flow_risk"], data["business_age_risk"], data["daily_balance_risk"]} == {"low"}
    assert data["debt_service_coverage"] is None


def test_underwriting_decision_endpoint(client: TestClient):
    response = client.post(
        "/v1/underwriting/decision",
        json={
            "deal_id": "d9",
            "status": "declined",
            "decided_by": "uw_42",
            "decline_reason": "Business Too New",
            "notes": "Opened in January",
            "checklist": {"documents_complete": True, "credit_checked": True},
        },
    )

    assert response.status_code == 200
    data = response.json()
    assert data["stage"] == "Declined"
    assert data["decline_reason"] == "Business Too New"
    assert data["decided_at"].startswith("2024-06-14T12:00:00")
    assert data["checklist_completed"] == 2
    assert data["checklist_total"] == 3


def test_underwriting_decision_rejects_unknown_reason(client: TestClient):
    response = client.post(
        "/v1/underwriting/decision",
        json={"status": "declined", "decided_by": "uw_42", "decline_reason": "Gut feeling"},
    )

    assert response.status_code == 422
    assert "decline reason" in response.json()["detail"]


def test_underwriting_decision_requires_underwriter(client: TestClient):
    response = client.post(
        "/v1/underwriting/decision",
        json={"status": "approved", "decided_by": ""},
    )
    assert response.status_code == 422


def test_risk_endpoint_rejects_non_finite_values(client: TestClient):
    # Python's json module reads the NaN literal; httpx will not write it
    body = (
        '{"deal": {"stage": "Underwriting", "amount_requested": 40000, '
        '"updated_at": "2024-06-10T00:00:00Z", "monthly_revenue": NaN}}'
    )

    response = client.post(
        "/v1/underwriting/risk",
        content=body,
        headers={"Content-Type": "application/json"},
    )

    assert response.status_code == 422
    assert "monthly_revenue" in response.json()["detail"]

    metrics = client.get("/metrics").text
    assert 'mca_invalid_input_total{endpoint="risk_assessment"}' in metrics


def test_underwriting_decision_with_document_categories(client: TestClient):
    response = client.post(
        "/v1/underwriting/decision",
        json={
            "status": "more_info_needed",
            "decided_by": "uw_42",
            "checklist": {"bank_statements_reviewed": True},
            "document_categories": ["Bank Statements", "Application"],
        },
    )

    assert response.status_code == 200
    data = response.json()
    assert data["missing_documents"] == ["Tax Returns", "Financial Statements"]
    assert data["checklist_completed"] == 1

    complete = client.post(
        "/v1/underwriting/decision",
        json={
            "status": "approved",
            "decided_by": "uw_42",
            "document_categories": ["Bank Statements", "Tax Returns", "Application", "Financial Statements"],
        },
    )

    assert complete.json()["missing_documents"] == []
    assert complete.json()["checklist_completed"] == 1
    assert complete.json()["checklist_total"] == 3


def test_analytics_endpoint(client: TestClient):
    """Clock is pinned to 2024-06-14 12:00 UTC"""
    response = client.post(
        "/v1/analytics",
        json={
            "deals": [
                {"id": "a", "stage": "Funded", "amount_requested": 100000, "iso_id": "iso-1",
                 "updated_at": "2024-06-11T00:00:00Z", "created_at": "2024-06-10T09:00:00Z"},
                {"id": "b", "stage": "New", "amount_requested": 20000, "iso_id": "iso-1",
                 "updated_at": "2024-06-12T00:00:00Z", "created_at": "2024-06-12T09:00:00Z"},
                {"id": "old", "stage": "Funded", "amount_requested": 70000, "iso_id": "iso-1",
                 "updated_at": "2024-03-02T00:00:00Z", "created_at": "2024-03-01T09:00:00Z"},
            ],
            "offers": [
                {"deal_id": "a", "amount": 100000, "created_at": "2024-06-10T10:00:00Z"},
            ],
            "isos": [{"id": "iso-1", "iso_name": "Main Street Funding", "commission_rate": 0.08}],
            "date_from": "2024-06-01T00:00:00Z",
        },
    )

    assert response.status_code == 200
    data = response.json()
    assert data["kpis"] == {
        "total_pipeline_value": 120000,
        "funded_volume": 100000,
        "average_deal_size": 60000,
        "conversion_rate": 50,
    }
    assert [s["stage"] for s in data["stages"]] == ["Funded", "New"]
    assert len(data["funding_trend"]) == 30
    assert data["funding_trend"][-1]["day"] == "2024-06-14"
    assert data["iso_performance"] == [
        {"name": "Main Street Funding", "deals": 1, "revenue": 100000, "commission": 8000, "conversion_rate": 50}
    ]


def test_analytics_rejects_non_finite_offer_amount(client: TestClient):
    body = (
        '{"deals": [{"id": "a", "stage": "Funded", "amount_requested": 1000, "iso_id": "i", '
        '"updated_at": "2024-06-11T00:00:00Z"}], '
        '"offers": [{"deal_id": "a", "amount": Infinity}], '
        '"isos": [{"id": "i", "iso_name": "Main Street Funding"}]}'
    )

    response = client.post("/v1/analytics", content=body, headers={"Content-Type": "application/json"})

    assert response.status_code == 422
    assert "offer amount" in response.json()["detail"]


def test_health_reports_version(client: TestClient):
    assert client.get("/health").json() == {"status": "ok", "service": "mca-pipeline", "version": "0.1.0"}


def test_unusable_request_id_is_replaced(client: TestClient):
    response = client.get("/health", headers={"X-Request-ID": "x" * 500})

    assert response.headers["X-Request-ID"] != "x" * 500
    assert len(response.headers["X-Request-ID"]) == 36
