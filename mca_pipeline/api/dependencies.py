"""Dependency injection for FastAPI endpoints"""

from datetime import datetime, timezone

from fastapi import Request

from mca_pipeline.config import settings
from mca_pipeline.domain.models import PriorityConfig


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


def get_priority_config() -> PriorityConfig:
    """Provide priority thresholds from settings"""
    return settings.priority_config()


def get_now() -> datetime:
    """Reference time for requests that don't supply one; the domain never reads the clock"""
    return datetime.now(timezone.utc)
