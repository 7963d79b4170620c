"""FastAPI application factory"""

from fastapi import FastAPI
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
from starlette.responses import Response

from payment_scheduler.api.middleware import RequestIDMiddleware, MetricsMiddleware
from payment_scheduler.api.v1 import schedule, reschedule
from payment_scheduler.infrastructure.observability.logging import setup_logging
from payment_scheduler.config import settings

# Setup structured logging
setup_logging(settings.log_level, settings.service_name)


def create_app() -> FastAPI:
    """Create and configure FastAPI application"""
    app = FastAPI(
        title="Payment Scheduler",
        description="Budget-constrained payment scheduling and overdue rescheduling",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
    )

    # Add middleware (order matters: last added = first executed)
    app.add_middleware(MetricsMiddleware)
    app.add_middleware(RequestIDMiddleware)

    @app.get("/health")
    def health_check():
        return {"status": "ok", "service": settings.service_name}

    # Prometheus metrics endpoint
    @app.get("/metrics")
    def metrics():
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    # Register API routers
    app.include_router(reschedule.router, prefix="/v1", tags=["reschedule"])
    app.include_router(schedule.router, prefix="/v1", tags=["schedule"])

    return app


app = create_app()
