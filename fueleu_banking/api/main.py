"""FastAPI application factory"""

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
from starlette.responses import Response

from fueleu_banking.api.middleware import RequestIDMiddleware, MetricsMiddleware
from fueleu_banking.api.v1 import banking
from fueleu_banking.domain.ports import BankingStore
from fueleu_banking.infrastructure.database.session import Database
from fueleu_banking.infrastructure.observability.logging import setup_logging
from fueleu_banking.config import settings

# Setup structured logging
setup_logging(settings.log_level)


def create_app(store: Optional[BankingStore] = None) -> FastAPI:
    """
    Create and configure FastAPI application.

    When `store` is given the caller owns its lifecycle; otherwise a Database
    is built from settings, opened on startup and closed on shutdown.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if store is not None:
            yield
            return

        database = Database.from_settings(settings)
        database.open()
        if settings.auto_create_schema:
            database.create_schema()
        app.state.store = database
        try:
            yield
        finally:
            database.close()

    app = FastAPI(
        title="FuelEU Banking Service",
        description="Compliance balance banking ledger for maritime vessels",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )
    if store is not None:
        app.state.store = store

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
    app.include_router(banking.router, prefix="/v1", tags=["banking"])

    return app


app = create_app()
