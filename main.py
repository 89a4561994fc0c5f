"""
Application factory.

create_app() wires already-constructed collaborators into a FastAPI app;
build_app() is the production entry point that reads Vault and owns the
connection pool for the lifetime of the process.

Serve build_app with an ASGI server in factory mode.
"""

import logging
from contextlib import asynccontextmanager
from pathlib import Path

from dotenv import load_dotenv
from fastapi import FastAPI
from starlette.middleware.cors import CORSMiddleware

from api.errors import register_error_handlers
from api.middleware import RequestIDMiddleware, OperatorMiddleware
from api.prices import create_prices_router
from api.registry import create_registry_router
from api.tickets import create_tickets_router
from clients.postgres_client import PostgresClient
from clients.vault_client import get_app_config, get_database_url
from core.audit import AuditLogger
from core.config import WeighbridgeConfig
from core.services.price_service import PriceService
from core.services.registry_service import RegistryService
from core.services.ticket_service import TicketService

logger = logging.getLogger(__name__)


def create_services(postgres: PostgresClient, config: WeighbridgeConfig) -> dict:
    """Build the service graph over one storage client."""
    audit = AuditLogger(postgres)
    registry = RegistryService(postgres)
    prices = PriceService(postgres, audit, config)
    tickets = TicketService(postgres, audit, registry, prices, config)
    return {
        "registry": registry,
        "price": prices,
        "ticket": tickets,
    }


def create_app(services: dict, config: WeighbridgeConfig, lifespan=None) -> FastAPI:
    """FastAPI app with middleware, error handlers and all routes."""
    app = FastAPI(title="Weighbridge", lifespan=lifespan)

    app.add_middleware(RequestIDMiddleware)
    app.add_middleware(OperatorMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_error_handlers(app)

    app.include_router(create_registry_router(services), prefix="/api")
    app.include_router(create_prices_router(services), prefix="/api")
    app.include_router(create_tickets_router(services), prefix="/api")

    @app.get("/health")
    async def health():
        return {"status": "ok"}

    return app


def build_app() -> FastAPI:
    """
    Production app: config and database URL from Vault.

    The connection pool is opened here and drained when the server shuts
    down.
    """
    load_dotenv(Path(__file__).parent / ".env")
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    config = WeighbridgeConfig.model_validate(get_app_config())
    postgres = PostgresClient(
        get_database_url(),
        min_connections=config.pool_min_connections,
        max_connections=config.pool_max_connections,
        connect_timeout=config.connect_timeout_seconds,
        statement_timeout_ms=config.statement_timeout_ms,
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info(f"Weighbridge started (facility timezone {config.facility_timezone})")
        try:
            yield
        finally:
            postgres.close()

    return create_app(create_services(postgres, config), config, lifespan=lifespan)
