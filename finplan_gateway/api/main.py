"""FastAPI application factory"""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
from starlette.responses import Response

from finplan_gateway.api.middleware import RequestIDMiddleware, MetricsMiddleware
from finplan_gateway.api.v1 import debt_plan, forecast, portfolio, strategy, tax
from finplan_gateway.infrastructure.database.models import Base
from finplan_gateway.infrastructure.database.session import engine
from finplan_gateway.infrastructure.observability.logging import setup_logging
from finplan_gateway.config import settings

# Setup structured logging
setup_logging(settings.log_level)


@asynccontextmanager
async def lifespan(app: FastAPI):
    Base.metadata.create_all(bind=engine)
    yield


def create_app() -> FastAPI:
    """Create and configure FastAPI application"""
    app = FastAPI(
        title="FinPlan Gateway",
        description="Debt planning, forecasting and financial strategy service",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    # Add middleware (order matters: last added = first executed)
    app.add_middleware(MetricsMiddleware)
    app.add_middleware(RequestIDMiddleware)

    # Health check endpoint
    @app.get("/health")
    def health_check():
        return {"status": "ok", "service": settings.service_name}

    # Prometheus metrics endpoint
    @app.get("/metrics")
    def metrics():
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    # Register API routers
    app.include_router(debt_plan.router, prefix="/v1", tags=["debt-plans"])
    app.include_router(forecast.router, prefix="/v1", tags=["forecasts"])
    app.include_router(strategy.router, prefix="/v1", tags=["strategies"])
    app.include_router(tax.router, prefix="/v1", tags=["tax"])
    app.include_router(portfolio.router, prefix="/v1", tags=["portfolio"])

    return app


app = create_app()
