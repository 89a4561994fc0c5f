"""
Audit trail for price and ticket changes.

Every mutation is logged here. The audit log is:
- Append-only (entries never modified or deleted)
- Operator-attributed (opaque identity from the request context)
- Detailed (captures old and new values)

Price deletes are hard deletes; the full deleted row is kept here, so a
ticket's valuation can still be traced to the interval it was priced with.
"""

from enum import Enum
from typing import Any

from psycopg2.extras import Json

from clients.postgres_client import PostgresClient, PostgresTransaction
from utils.operator_context import get_current_operator
from utils.timezone import now_utc


class AuditAction(Enum):
    """Type of change made to an entity."""

    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"


def compute_changes(
    old: dict[str, Any],
    new: dict[str, Any],
    exclude_fields: set[str] | None = None
) -> dict[str, dict[str, Any]]:
    """
    Compute changes between two entity states.

    Args:
        old: Previous state of entity
        new: New state of entity
        exclude_fields: Fields to ignore (defaults to {"updated_at"})

    Returns:
        Dict of {field: {"old": old_val, "new": new_val}} for changed fields.
        Empty dict if no changes.
    """
    exclude = exclude_fields or {"updated_at"}
    changes = {}

    for key in set(old.keys()) | set(new.keys()):
        if key in exclude:
            continue

        old_val = old.get(key)
        new_val = new.get(key)

        if old_val != new_val:
            changes[key] = {"old": old_val, "new": new_val}

    return changes


class AuditLogger:
    """
    Append-only audit trail.

    Pass model_dump(mode="json") output so dates and decimals serialize.

    Usage:
        audit = AuditLogger(postgres)

        audit.log_change(
            entity_type="price",
            entity_id=price.id,
            action=AuditAction.CREATE,
            changes={"created": price.model_dump(mode="json")}
        )

        # Inside a transaction, log with the same connection so the entry
        # commits or rolls back with the change it describes
        with postgres.transaction() as tx:
            ...
            audit.log_change("price", price.id, AuditAction.UPDATE, changes, tx=tx)

        history = audit.get_entity_history("price", price.id)
    """

    def __init__(self, postgres: PostgresClient):
        self.postgres = postgres

    def log_change(
        self,
        entity_type: str,
        entity_id: int,
        action: AuditAction,
        changes: dict[str, Any],
        operator: str | None = None,
        tx: PostgresTransaction | None = None,
    ) -> None:
        """
        Log an entity change.

        Args:
            entity_type: "price" or "ticket"
            entity_id: ID of the entity
            action: The action performed (CREATE, UPDATE, DELETE)
            changes: The changes made (format depends on action)
            operator: Who made the change (defaults to current context)
            tx: Open transaction to write through, if any

        Changes format by action:
        - CREATE: {"created": {full entity data}}
        - UPDATE: {"field": {"old": old_val, "new": new_val}, ...}
        - DELETE: {"deleted": {full entity data at deletion}}
        """
        if operator is None:
            operator = get_current_operator()

        target = tx if tx is not None else self.postgres
        target.execute(
            """
            INSERT INTO audit_log (operator, entity_type, entity_id, action, changes, created_at)
            VALUES (%s, %s, %s, %s, %s, %s)
            """,
            (
                operator,
                entity_type,
                entity_id,
                action.value,
                Json(changes),
                now_utc()
            )
        )

    def get_entity_history(
        self,
        entity_type: str,
        entity_id: int
    ) -> list[dict[str, Any]]:
        """
        Get full audit history for an entity.

        Returns:
            List of audit entries, newest first.
        """
        return self.postgres.execute(
            """
            SELECT id, operator, entity_type, entity_id, action, changes, created_at
            FROM audit_log
            WHERE entity_type = %s AND entity_id = %s
            ORDER BY created_at DESC, id DESC
            """,
            (entity_type, entity_id)
        )
