"""FastAPI application factory"""

import logging
from fastapi import Depends, FastAPI
from fastapi.responses import JSONResponse
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from starlette.responses import Response

from cerebral_finance.api.middleware import RequestIDMiddleware, MetricsMiddleware
from cerebral_finance.api.v1 import calculations, client_state, credit_cards, crypto, debts, goals, profile
from cerebral_finance.infrastructure.database.session import get_db
from cerebral_finance.infrastructure.observability.logging import setup_logging
from cerebral_finance.config import settings

# Setup structured logging
setup_logging(settings.log_level)

# (module, OpenAPI tag), all mounted under /v1
V1_ROUTERS = (
    (calculations, "calculations"),
    (credit_cards, "credit-cards"),
    (debts, "debts"),
    (crypto, "crypto-assets"),
    (goals, "goals"),
    (client_state, "client-state"),
    (profile, "financial-profile"),
)


def create_app() -> FastAPI:
    """Create and configure FastAPI application"""
    app = FastAPI(
        title="Cerebral Finance API",
        description="Credit card amortization, debt and asset tracking, and advisor-ready financial profiles",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
    )

    # Last added runs first: request IDs exist before metrics are timed
    app.add_middleware(MetricsMiddleware)
    app.add_middleware(RequestIDMiddleware)

    @app.get("/health")
    def health_check(db: Session = Depends(get_db)):
        """Liveness plus a database round trip"""
        try:
            db.execute(text("SELECT 1"))
        except SQLAlchemyError as e:
            logging.error(f"Health check database failure: {e}")
            return JSONResponse(
                status_code=503,
                content={"status": "degraded", "service": settings.service_name, "database": "unavailable"},
            )
        return {"status": "ok", "service": settings.service_name, "database": "ok"}

    @app.get("/metrics")
    def metrics():
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    for module, tag in V1_ROUTERS:
        app.include_router(module.router, prefix="/v1", tags=[tag])

    return app


app = create_app()
