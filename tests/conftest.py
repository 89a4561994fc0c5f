"""Shared test fixtures for the weighbridge test suite.

Storage is the external boundary: services run for real against a
MagicMock(spec=PostgresClient) whose transaction() yields `db.tx`.
"""

from unittest.mock import MagicMock

import pytest

from clients.postgres_client import PostgresClient, PostgresTransaction
from core.config import WeighbridgeConfig
from row_factories import TEST_OPERATOR
from utils.operator_context import operator_context, clear_current_operator


# =============================================================================
# CONTEXT FIXTURES
# =============================================================================


@pytest.fixture(autouse=True)
def reset_operator_context():
    """Ensure clean operator context before and after each test."""
    clear_current_operator()
    yield
    clear_current_operator()


@pytest.fixture
def as_test_operator():
    """Run the test as the primary test operator."""
    with operator_context(TEST_OPERATOR):
        yield TEST_OPERATOR


@pytest.fixture
def config() -> WeighbridgeConfig:
    """Default configuration."""
    return WeighbridgeConfig()


# =============================================================================
# STORAGE FIXTURES
# =============================================================================


@pytest.fixture
def db():
    """PostgresClient double. `db.tx` is the transaction handed out by transaction()."""
    client = MagicMock(spec=PostgresClient)
    tx = MagicMock(spec=PostgresTransaction)
    tx.execute.return_value = []
    client.transaction.return_value.__enter__.return_value = tx
    client.transaction.return_value.__exit__.return_value = False
    client.execute.return_value = []
    client.tx = tx
    return client
