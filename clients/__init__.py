# Infrastructure clients
from clients.vault_client import (
    VaultClient,
    SecretNotFoundError,
    get_database_url,
    get_app_config,
)
from clients.postgres_client import PostgresClient, PostgresTransaction
