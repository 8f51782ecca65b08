"""Pytest fixtures for testing"""

import pytest
from datetime import datetime, timedelta, timezone
from fastapi.testclient import TestClient
from mca_pipeline.api.main import create_app
from mca_pipeline.api.dependencies import get_now
from mca_pipeline.domain.models import Deal


FIXED_NOW = datetime(2024, 6, 14, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def now() -> datetime:
    """Reference time shared by domain and API tests"""
    return FIXED_NOW


@pytest.fixture
def client() -> TestClient:
    """Create FastAPI test client with a pinned clock"""
    app = create_app()
    app.dependency_overrides[get_now] = lambda: FIXED_NOW
    return TestClient(app)


@pytest.fixture
def sample_deals(now: datetime) -> list[Deal]:
    """A small board spread across stages"""
    return [
        Deal(
            id="d1",
            deal_number="D-1001",
            company_name="Harbor Diner LLC",
            contact_name="Sam Ortiz",
            email="sam@harbordiner.com",
            stage="New",
            amount_requested=25_000,
            updated_at=now - timedelta(days=1),
            created_at=now - timedelta(days=3),
        ),
        Deal(
            id="d2",
            deal_number="D-1002",
            company_name="Peak Auto Repair",
            stage="Offer Sent",
            amount_requested=160_000,
            updated_at=now - timedelta(days=12),
            created_at=now - timedelta(days=40),
        ),
        Deal(
            id="d3",
            deal_number="D-1003",
            company_name="Bloom Florist",
            stage="Underwriting",
            amount_requested=80_000,
            updated_at=now - timedelta(days=6),
            created_at=now - timedelta(days=20),
        ),
        Deal(
            id="d4",
            deal_number="D-1004",
            company_name="Northside Dental",
            stage="Offer Sent",
            amount_requested=10_000,
            updated_at=now - timedelta(days=2),
            created_at=now - timedelta(days=5),
        ),
    ]
