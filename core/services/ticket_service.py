"""
Ticket service for the weigh ticket lifecycle.

A ticket opens as PENDING when the vehicle is weighed in, may record its
weigh-out later, and is closed by approval. Approved tickets are immutable
apart from re-approval under the idempotent approval policy.
"""

import logging
from datetime import datetime
from decimal import Decimal

from clients.postgres_client import PostgresClient
from core.audit import AuditLogger, AuditAction, compute_changes
from core.config import ApprovalPolicy, TicketPriceSource, WeighbridgeConfig
from core.exceptions import (
    NotFoundError,
    InvalidReferenceError,
    InvalidStatusTransitionError,
    PricingUnavailableError,
)
from core.models import (
    WeighTicket, WeighTicketView, TicketCreate, WeighOut,
    TicketStatus, PriceSource, can_transition, compute_value,
)
from core.services.price_service import PriceService
from core.services.registry_service import RegistryService
from utils.operator_context import get_current_operator
from utils.timezone import now_utc, to_local

logger = logging.getLogger(__name__)

_VIEW_SELECT = """
    SELECT t.*, p.product_name, v.vendor_name, vh.license_plate
    FROM weigh_tickets t
    LEFT JOIN products p ON t.product_id = p.id
    LEFT JOIN vendors v ON t.vendor_id = v.id
    LEFT JOIN vehicles vh ON t.vehicle_id = vh.id
"""


class TicketService:
    """Service for weigh ticket operations."""

    def __init__(
        self,
        postgres: PostgresClient,
        audit: AuditLogger,
        registry: RegistryService,
        prices: PriceService,
        config: WeighbridgeConfig,
    ):
        self.postgres = postgres
        self.audit = audit
        self.registry = registry
        self.prices = prices
        self.config = config

    def list_tickets(self) -> list[WeighTicketView]:
        """
        List every ticket with product, vendor and vehicle display fields.

        Returns:
            Tickets ordered by time_in DESC (newest first)
        """
        rows = self.postgres.execute(
            f"{_VIEW_SELECT} ORDER BY t.time_in DESC, t.id DESC"
        )
        return [WeighTicketView.model_validate(row) for row in rows]

    def get_by_id(self, ticket_id: int) -> WeighTicketView | None:
        """
        Get ticket by ID.

        Returns:
            Ticket if found, None otherwise.
        """
        row = self.postgres.execute_single(
            f"{_VIEW_SELECT} WHERE t.id = %s",
            (ticket_id,)
        )
        return WeighTicketView.model_validate(row) if row else None

    def create(self, data: TicketCreate) -> WeighTicket:
        """
        Open a ticket at weigh-in.

        Args:
            data: Ticket creation data

        Returns:
            Created ticket in PENDING status with time_in stamped

        Raises:
            InvalidReferenceError: Vehicle, vendor or product does not exist
            PricingUnavailableError: No price in force and none supplied
        """
        self._check_references(data)

        time_in = now_utc()
        unit_price, price_id, price_source = self._price_for(data, time_in)
        created_by = data.created_by or get_current_operator()

        with self.postgres.transaction() as tx:
            row = tx.execute_single(
                """
                INSERT INTO weigh_tickets (
                    ticket_no, vehicle_id, vendor_id, product_id,
                    process_status, payment_type, weight_in, weight_out,
                    unit_price, price_id, price_source,
                    time_in, created_by, remarks
                ) VALUES (
                    %s, %s, %s, %s,
                    %s, %s, %s, %s,
                    %s, %s, %s,
                    %s, %s, %s
                )
                RETURNING *
                """,
                (
                    data.ticket_no, data.vehicle_id, data.vendor_id, data.product_id,
                    TicketStatus.PENDING.value, data.payment_type, data.weight_in, data.weight_out,
                    unit_price, price_id, price_source.value,
                    time_in, created_by, data.remarks
                )
            )

            ticket = WeighTicket.model_validate(row)

            self.audit.log_change(
                entity_type="ticket",
                entity_id=ticket.id,
                action=AuditAction.CREATE,
                changes={"created": ticket.model_dump(mode="json")},
                tx=tx
            )

        logger.info(
            f"Ticket {ticket.id} ({ticket.ticket_no}) opened at {ticket.unit_price} "
            f"({ticket.price_source.value})"
        )
        return ticket

    def record_weigh_out(self, ticket_id: int, data: WeighOut) -> WeighTicket:
        """
        Record the outbound weight of a pending ticket.

        Args:
            ticket_id: Ticket ID
            data: Outbound weight

        Returns:
            Updated ticket, still PENDING

        Raises:
            NotFoundError: Ticket does not exist
            InvalidStatusTransitionError: Ticket is already approved
        """
        with self.postgres.transaction() as tx:
            current = self._lock_ticket(tx, ticket_id)

            if current.is_approved:
                logger.warning(f"Rejected weigh-out on approved ticket {ticket_id}")
                raise InvalidStatusTransitionError(
                    ticket_id, current.process_status.value, "record weigh-out"
                )

            row = tx.execute_single(
                """
                UPDATE weigh_tickets
                SET weight_out = %s
                WHERE id = %s
                RETURNING *
                """,
                (data.weight_out, ticket_id)
            )

            updated = WeighTicket.model_validate(row)

            self.audit.log_change(
                entity_type="ticket",
                entity_id=ticket_id,
                action=AuditAction.UPDATE,
                changes=compute_changes(
                    current.model_dump(mode="json"),
                    updated.model_dump(mode="json")
                ),
                tx=tx
            )

        return updated

    def approve(self, ticket_id: int, weight_out: Decimal | None = None) -> WeighTicket:
        """
        Approve a ticket, stamping time_out and valuing the transaction.

        net_weight = weight_in - weight_out and total_value = net_weight *
        unit_price are stored when all three inputs are known.

        Under the idempotent policy approving an approved ticket succeeds and
        re-stamps time_out. Under the strict policy it is rejected.

        Args:
            ticket_id: Ticket ID
            weight_out: Final outbound weight, if not recorded earlier

        Returns:
            Approved ticket

        Raises:
            NotFoundError: Ticket does not exist
            InvalidStatusTransitionError: Approval not allowed from current state
        """
        with self.postgres.transaction() as tx:
            current = self._lock_ticket(tx, ticket_id)

            if current.is_approved:
                self._check_reapproval(current, weight_out)
            elif not can_transition(current.process_status, TicketStatus.APPROVED):
                raise InvalidStatusTransitionError(
                    ticket_id, current.process_status.value, "be approved"
                )

            final_weight_out = weight_out if weight_out is not None else current.weight_out
            net_weight, total_value = compute_value(
                current.weight_in, final_weight_out, current.unit_price
            ) or (None, None)

            row = tx.execute_single(
                """
                UPDATE weigh_tickets
                SET process_status = %s, time_out = %s, weight_out = %s,
                    net_weight = %s, total_value = %s
                WHERE id = %s
                RETURNING *
                """,
                (
                    TicketStatus.APPROVED.value, now_utc(), final_weight_out,
                    net_weight, total_value, ticket_id
                )
            )

            updated = WeighTicket.model_validate(row)

            self.audit.log_change(
                entity_type="ticket",
                entity_id=ticket_id,
                action=AuditAction.UPDATE,
                changes=compute_changes(
                    current.model_dump(mode="json"),
                    updated.model_dump(mode="json")
                ),
                tx=tx
            )

        logger.info(f"Ticket {ticket_id} approved, value {updated.total_value}")
        return updated

    def _check_reapproval(self, current: WeighTicket, weight_out: Decimal | None) -> None:
        """Re-approval may only re-stamp time_out, never change the weighing."""
        if self.config.approval_policy == ApprovalPolicy.STRICT:
            logger.warning(f"Rejected re-approval of ticket {current.id}")
            raise InvalidStatusTransitionError(
                current.id, current.process_status.value, "be approved"
            )

        if weight_out is not None and weight_out != current.weight_out:
            raise InvalidStatusTransitionError(
                current.id, current.process_status.value, "change weigh-out"
            )

    def _lock_ticket(self, tx, ticket_id: int) -> WeighTicket:
        row = tx.execute_single(
            "SELECT * FROM weigh_tickets WHERE id = %s FOR UPDATE",
            (ticket_id,)
        )
        if row is None:
            raise NotFoundError("Ticket", ticket_id)
        return WeighTicket.model_validate(row)

    def _check_references(self, data: TicketCreate) -> None:
        """Reject tickets pointing at registry rows that don't exist."""
        if self.registry.get_vehicle(data.vehicle_id) is None:
            raise InvalidReferenceError("vehicle", data.vehicle_id)
        if self.registry.get_vendor(data.vendor_id) is None:
            raise InvalidReferenceError("vendor", data.vendor_id)
        if self.registry.get_product(data.product_id) is None:
            raise InvalidReferenceError("product", data.product_id)

    def _price_for(
        self,
        data: TicketCreate,
        time_in: datetime
    ) -> tuple[Decimal | None, int | None, PriceSource]:
        """
        Decide the ticket's unit price.

        Returns:
            (unit_price, price_id, price_source). price_id is set only when
            the price came from the timeline.
        """
        if self.config.ticket_price_source == TicketPriceSource.CALLER:
            return data.unit_price, None, PriceSource.MANUAL

        if data.unit_price is not None:
            if self.config.allow_price_override:
                return data.unit_price, None, PriceSource.MANUAL
            logger.warning(
                f"Ignoring caller unit_price on ticket {data.ticket_no}: overrides disabled"
            )

        as_of = to_local(time_in, self.config.facility_timezone).date()
        active = self.prices.resolve_active_price(data.product_id, as_of)
        if active is None:
            raise PricingUnavailableError(data.product_id, as_of)

        return active.unit_price, active.id, PriceSource.RESOLVED
