"""Fixtures for tests that run against a real PostgreSQL database.

Point WEIGHBRIDGE_TEST_DATABASE_URL (environment or .env) at a scratch
database. Every test truncates all weighbridge tables, so never point it
at a database holding real tickets. Without the variable, or when the
database is unreachable, these tests are skipped.
"""

import os
from pathlib import Path

import psycopg2
import pytest
from dotenv import load_dotenv

from clients.postgres_client import PostgresClient
from core.config import WeighbridgeConfig
from main import create_services

ROOT = Path(__file__).parent.parent.parent

load_dotenv(ROOT / ".env")


@pytest.fixture(scope="session")
def postgres():
    """Session-scoped client with db/schema.sql applied."""
    database_url = os.getenv("WEIGHBRIDGE_TEST_DATABASE_URL")
    if not database_url:
        pytest.skip("WEIGHBRIDGE_TEST_DATABASE_URL not set")

    try:
        client = PostgresClient(database_url, min_connections=1, max_connections=4)
    except psycopg2.OperationalError as e:
        pytest.skip(f"Test database unavailable: {e}")

    client.execute((ROOT / "db" / "schema.sql").read_text())
    yield client
    client.close()


@pytest.fixture
def storage(postgres):
    """Empty tables, identities restarted."""
    postgres.execute(
        "TRUNCATE audit_log, weigh_tickets, product_prices, products, vendors, vehicles "
        "RESTART IDENTITY CASCADE"
    )
    return postgres


@pytest.fixture
def live_services(storage):
    return create_services(storage, WeighbridgeConfig())


@pytest.fixture
def cement_id(storage) -> int:
    row = storage.execute_single(
        "INSERT INTO products (product_code, product_name) VALUES (%s, %s) RETURNING id",
        ("CEMENT", "Cement")
    )
    return row["id"]
