"""
PostgreSQL client with connection pooling.

Uses psycopg2 with ThreadedConnectionPool. The pool belongs to the client
instance: create one client at startup, inject it into services, and call
close() on shutdown to drain it.

Every connection handed out has statement_timeout applied so no single
operation can block indefinitely.
"""

import logging
import threading
from contextlib import contextmanager
from typing import Any, Dict, List, Tuple

import psycopg2
import psycopg2.extras
import psycopg2.pool

logger = logging.getLogger(__name__)


class PostgresTransaction:
    """
    Query helpers bound to a single connection inside a transaction.

    Obtained from PostgresClient.transaction(). Nothing is committed until
    the with-block exits cleanly.
    """

    def __init__(self, conn):
        self._conn = conn

    def execute(self, query: str, params: Tuple | Dict | None = None) -> List[Dict[str, Any]]:
        """Execute query, return list of row dicts. Empty list if no results."""
        with self._conn.cursor(cursor_factory=psycopg2.extras.RealDictCursor) as cur:
            cur.execute(query, params)
            if cur.description:
                return [dict(row) for row in cur.fetchall()]
            return []

    def execute_single(self, query: str, params: Tuple | Dict | None = None) -> Dict[str, Any] | None:
        """Execute query, return first row or None."""
        results = self.execute(query, params)
        return results[0] if results else None


class PostgresClient:
    """
    PostgreSQL client owning its own connection pool.

    Usage:
        db = PostgresClient(database_url)

        products = db.execute("SELECT * FROM products")

        with db.transaction() as tx:
            tx.execute_single("SELECT id FROM products WHERE id = %s FOR UPDATE", (1,))
            tx.execute("UPDATE ...")

        db.close()
    """

    def __init__(
        self,
        database_url: str,
        min_connections: int = 2,
        max_connections: int = 20,
        connect_timeout: int = 30,
        statement_timeout_ms: int = 15000,
    ):
        self._database_url = database_url
        self._statement_timeout_ms = statement_timeout_ms
        self._lock = threading.RLock()
        self._pool = psycopg2.pool.ThreadedConnectionPool(
            minconn=min_connections,
            maxconn=max_connections,
            dsn=database_url,
            connect_timeout=connect_timeout,
        )
        logger.info(
            f"Connection pool created (min={min_connections}, max={max_connections})"
        )

    @property
    def closed(self) -> bool:
        return self._pool is None

    @contextmanager
    def get_connection(self):
        """Borrow a connection from the pool with statement_timeout applied."""
        with self._lock:
            if self._pool is None:
                raise RuntimeError("Connection pool is closed")
            pool = self._pool

        conn = None
        try:
            conn = pool.getconn()
            if conn is None:
                raise RuntimeError("Could not get connection from pool")

            with conn.cursor() as cur:
                cur.execute("SET statement_timeout = %s", (self._statement_timeout_ms,))

            try:
                yield conn
            except Exception:
                # Never hand an aborted transaction back to the pool
                conn.rollback()
                raise

        finally:
            if conn:
                pool.putconn(conn)

    @contextmanager
    def transaction(self):
        """
        Run several statements atomically on one connection.

        Commits when the block exits normally, rolls back on any exception
        and re-raises it.
        """
        with self.get_connection() as conn:
            yield PostgresTransaction(conn)
            conn.commit()

    def execute(self, query: str, params: Tuple | Dict | None = None) -> List[Dict[str, Any]]:
        """Execute query, return list of row dicts. Empty list if no results."""
        with self.get_connection() as conn:
            with conn.cursor(cursor_factory=psycopg2.extras.RealDictCursor) as cur:
                cur.execute(query, params)
                if cur.description:
                    rows = [dict(row) for row in cur.fetchall()]
                    conn.commit()
                    return rows
                conn.commit()
                return []

    def execute_single(self, query: str, params: Tuple | Dict | None = None) -> Dict[str, Any] | None:
        """Execute query, return first row or None."""
        results = self.execute(query, params)
        return results[0] if results else None

    def execute_scalar(self, query: str, params: Tuple | Dict | None = None) -> Any:
        """Execute query, return first value of first row or None."""
        with self.get_connection() as conn:
            with conn.cursor() as cur:
                cur.execute(query, params)
                result = cur.fetchone()
                conn.commit()
                return result[0] if result else None

    def close(self) -> None:
        """Close all pooled connections. Further queries raise RuntimeError."""
        with self._lock:
            if self._pool is not None:
                self._pool.closeall()
                self._pool = None
                logger.info("Connection pool closed")
