"""FastAPI application factory"""

from fastapi import FastAPI
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
from starlette.responses import Response

from mca_pipeline.api.middleware import RequestIDMiddleware, MetricsMiddleware
from mca_pipeline.api.v1 import analytics, offers, pipeline, underwriting
from mca_pipeline.infrastructure.observability.logging import setup_logging
from mca_pipeline.config import settings

API_VERSION = "0.1.0"

# (router module, OpenAPI tag); all mounted under /v1
V1_ROUTERS = (
    (pipeline, "pipeline"),
    (offers, "offers"),
    (underwriting, "underwriting"),
    (analytics, "analytics"),
)

setup_logging(settings.log_level)


def create_app() -> FastAPI:
    """Create and configure FastAPI application"""
    app = FastAPI(
        title="MCA Pipeline Scoring",
        description="Deal priority, offer payment, underwriting risk and analytics calculations",
        version=API_VERSION,
        docs_url="/docs",
        redoc_url="/redoc",
    )

    # Last added runs first, so request IDs exist before timing starts
    app.add_middleware(MetricsMiddleware)
    app.add_middleware(RequestIDMiddleware)

    @app.get("/health")
    def health_check():
        return {"status": "ok", "service": settings.service_name, "version": API_VERSION}

    @app.get("/metrics")
    def metrics():
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    for module, tag in V1_ROUTERS:
        app.include_router(module.router, prefix="/v1", tags=[tag])

    return app


app = create_app()
