"""
Price service for the per-product price timeline.

Intervals are keyed naturally by (product_id, effective_date). Writes run in
a transaction that first locks the product row, so concurrent writers for
one product are serialized and the overlap check sees a stable picture.
"""

import logging
from datetime import date

from clients.postgres_client import PostgresClient, PostgresTransaction
from core.audit import AuditLogger, AuditAction, compute_changes
from core.config import WeighbridgeConfig
from core.exceptions import (
    NotFoundError,
    InvalidReferenceError,
    OverlappingIntervalError,
    InvalidPriceRangeError,
)
from core.models import PriceInterval, PriceIntervalView, PriceUpsert, PriceUpdate
from core.timeline import find_overlap, select_active
from utils.timezone import now_utc, local_today

logger = logging.getLogger(__name__)

_VIEW_SELECT = """
    SELECT pp.*, p.product_name, p.product_code
    FROM product_prices pp
    LEFT JOIN products p ON pp.product_id = p.id
"""


class PriceService:
    """Service for price timeline operations."""

    def __init__(self, postgres: PostgresClient, audit: AuditLogger, config: WeighbridgeConfig):
        self.postgres = postgres
        self.audit = audit
        self.config = config

    def list_prices(self) -> list[PriceIntervalView]:
        """
        List every interval with its product's name and code.

        Returns:
            Intervals ordered by effective_date DESC (most recent first)
        """
        rows = self.postgres.execute(
            f"{_VIEW_SELECT} ORDER BY pp.effective_date DESC, pp.id DESC"
        )
        return [PriceIntervalView.model_validate(row) for row in rows]

    def list_for_product(self, product_id: int) -> list[PriceIntervalView]:
        """One product's intervals, most recent first."""
        rows = self.postgres.execute(
            f"{_VIEW_SELECT} WHERE pp.product_id = %s ORDER BY pp.effective_date DESC, pp.id DESC",
            (product_id,)
        )
        return [PriceIntervalView.model_validate(row) for row in rows]

    def get_by_id(self, price_id: int) -> PriceIntervalView | None:
        """
        Get interval by ID.

        Returns:
            Interval if found, None otherwise.
        """
        row = self.postgres.execute_single(
            f"{_VIEW_SELECT} WHERE pp.id = %s",
            (price_id,)
        )
        return PriceIntervalView.model_validate(row) if row else None

    def resolve_active_price(
        self,
        product_id: int,
        as_of: date | None = None
    ) -> PriceIntervalView | None:
        """
        Find the price in force for a product on a date.

        Args:
            product_id: Product to price
            as_of: Pricing date, defaults to today at the facility

        Returns:
            The single applicable interval, or None when no interval covers
            the date. None is an ordinary outcome, not a failure.
        """
        if as_of is None:
            as_of = local_today(self.config.facility_timezone)

        active = select_active(self.list_for_product(product_id), as_of)
        if active is None:
            logger.info(f"No active price for product {product_id} on {as_of}")
        return active

    def upsert_price(self, data: PriceUpsert) -> tuple[PriceInterval, bool]:
        """
        Create an interval, or replace the one with the same natural key.

        An existing (product_id, effective_date) gets its unit_price and
        to_date overwritten in place; otherwise a new interval is inserted.

        Args:
            data: Interval data

        Returns:
            (interval, created) where created is False for in-place updates

        Raises:
            InvalidReferenceError: Product does not exist
            OverlappingIntervalError: Range intersects another interval
        """
        now = now_utc()

        with self.postgres.transaction() as tx:
            self._lock_product(tx, data.product_id)
            existing = self._load_intervals(tx, data.product_id)
            previous = next(
                (i for i in existing if i.effective_date == data.effective_date),
                None
            )

            self._check_overlap(
                data.product_id, data.effective_date, data.to_date, existing,
                exclude_id=previous.id if previous else None
            )

            row = tx.execute_single(
                """
                INSERT INTO product_prices (
                    product_id, effective_date, to_date, unit_price,
                    created_at, updated_at
                ) VALUES (
                    %s, %s, %s, %s,
                    %s, %s
                )
                ON CONFLICT (product_id, effective_date) DO UPDATE
                SET unit_price = EXCLUDED.unit_price,
                    to_date = EXCLUDED.to_date,
                    updated_at = EXCLUDED.updated_at
                RETURNING *
                """,
                (
                    data.product_id, data.effective_date, data.to_date, data.unit_price,
                    now, now
                )
            )

            price = PriceInterval.model_validate(row)

            if previous is None:
                self.audit.log_change(
                    entity_type="price",
                    entity_id=price.id,
                    action=AuditAction.CREATE,
                    changes={"created": price.model_dump(mode="json")},
                    tx=tx
                )
            else:
                changes = compute_changes(
                    previous.model_dump(mode="json"),
                    price.model_dump(mode="json")
                )
                if changes:
                    self.audit.log_change(
                        entity_type="price",
                        entity_id=price.id,
                        action=AuditAction.UPDATE,
                        changes=changes,
                        tx=tx
                    )

        created = previous is None
        logger.info(
            f"Price {'created' if created else 'updated'} for product {price.product_id} "
            f"from {price.effective_date}: {price.unit_price}"
        )
        return price, created

    def update_price(self, price_id: int, data: PriceUpdate) -> PriceInterval:
        """
        Partially update an interval by ID.

        product_id, effective_date and unit_price keep their stored values
        when omitted. to_date is always overwritten, so omitting it reopens
        the interval.

        Args:
            price_id: Interval ID
            data: Fields to update

        Returns:
            Updated interval

        Raises:
            NotFoundError: Interval does not exist
            InvalidReferenceError: New product does not exist
            OverlappingIntervalError: New range intersects another interval
            InvalidPriceRangeError: Resulting to_date falls before effective_date
        """
        with self.postgres.transaction() as tx:
            row = tx.execute_single(
                "SELECT * FROM product_prices WHERE id = %s",
                (price_id,)
            )
            if row is None:
                raise NotFoundError("Price", price_id)

            current = PriceInterval.model_validate(row)

            product_id = data.product_id if data.product_id is not None else current.product_id
            effective_date = data.effective_date or current.effective_date
            unit_price = data.unit_price if data.unit_price is not None else current.unit_price
            to_date = data.to_date

            if to_date is not None and to_date < effective_date:
                raise InvalidPriceRangeError(effective_date, to_date)

            # Both products, ascending id order
            for locked_id in sorted({current.product_id, product_id}):
                self._lock_product(tx, locked_id)
            self._check_overlap(
                product_id, effective_date, to_date,
                self._load_intervals(tx, product_id),
                exclude_id=price_id
            )

            row = tx.execute_single(
                """
                UPDATE product_prices
                SET product_id = %s, effective_date = %s, to_date = %s,
                    unit_price = %s, updated_at = %s
                WHERE id = %s
                RETURNING *
                """,
                (product_id, effective_date, to_date, unit_price, now_utc(), price_id)
            )

            updated = PriceInterval.model_validate(row)

            changes = compute_changes(
                current.model_dump(mode="json"),
                updated.model_dump(mode="json")
            )
            if changes:
                self.audit.log_change(
                    entity_type="price",
                    entity_id=price_id,
                    action=AuditAction.UPDATE,
                    changes=changes,
                    tx=tx
                )

        return updated

    def delete_price(self, price_id: int) -> bool:
        """
        Hard delete an interval.

        Tickets priced from it keep their copied unit_price; the deleted
        row is preserved in the audit log.

        Returns:
            True if deleted, False if not found
        """
        with self.postgres.transaction() as tx:
            row = tx.execute_single(
                "DELETE FROM product_prices WHERE id = %s RETURNING *",
                (price_id,)
            )
            if row is None:
                return False

            deleted = PriceInterval.model_validate(row)
            self.audit.log_change(
                entity_type="price",
                entity_id=price_id,
                action=AuditAction.DELETE,
                changes={"deleted": deleted.model_dump(mode="json")},
                tx=tx
            )

        logger.info(f"Price {price_id} deleted for product {deleted.product_id}")
        return True

    def _lock_product(self, tx: PostgresTransaction, product_id: int) -> None:
        """Lock the product row for the rest of the transaction."""
        row = tx.execute_single(
            "SELECT id FROM products WHERE id = %s FOR UPDATE",
            (product_id,)
        )
        if row is None:
            raise InvalidReferenceError("product", product_id)

    def _load_intervals(self, tx: PostgresTransaction, product_id: int) -> list[PriceInterval]:
        rows = tx.execute(
            "SELECT * FROM product_prices WHERE product_id = %s",
            (product_id,)
        )
        return [PriceInterval.model_validate(row) for row in rows]

    def _check_overlap(
        self,
        product_id: int,
        effective_date: date,
        to_date: date | None,
        existing: list[PriceInterval],
        exclude_id: int | None
    ) -> None:
        if not self.config.enforce_non_overlap:
            return

        conflict = find_overlap(effective_date, to_date, existing, exclude_id=exclude_id)
        if conflict is not None:
            logger.warning(
                f"Rejected price range {effective_date}..{to_date or 'open'} for product "
                f"{product_id}: overlaps interval {conflict.id}"
            )
            raise OverlappingIntervalError(product_id, conflict.id)
