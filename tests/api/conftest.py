"""API test fixtures - TestClient over the full app with service doubles."""

from unittest.mock import Mock

import pytest
from starlette.testclient import TestClient

from core.config import WeighbridgeConfig
from core.services.price_service import PriceService
from core.services.registry_service import RegistryService
from core.services.ticket_service import TicketService
from main import create_app


# =============================================================================
# SERVICE FIXTURES
# =============================================================================


@pytest.fixture
def registry_service():
    return Mock(spec=RegistryService)


@pytest.fixture
def price_service():
    return Mock(spec=PriceService)


@pytest.fixture
def ticket_service():
    return Mock(spec=TicketService)


@pytest.fixture
def services(registry_service, price_service, ticket_service):
    return {
        "registry": registry_service,
        "price": price_service,
        "ticket": ticket_service,
    }


# =============================================================================
# APP & CLIENT FIXTURES
# =============================================================================


@pytest.fixture
def app(services):
    """The production app shape: middleware, error handlers, all routes."""
    return create_app(services, WeighbridgeConfig())


@pytest.fixture
def client(app):
    """Test client that turns unhandled errors into 500 responses."""
    return TestClient(app, raise_server_exceptions=False)
