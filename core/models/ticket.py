"""Weigh ticket domain models and lifecycle rules."""

from datetime import datetime
from decimal import Decimal, ROUND_HALF_UP
from enum import Enum

from pydantic import BaseModel, Field

_CENTS = Decimal("0.01")


class TicketStatus(str, Enum):
    """Ticket lifecycle status."""

    PENDING = "pending"
    APPROVED = "approved"


class PriceSource(str, Enum):
    """Where a ticket's unit price came from."""

    RESOLVED = "resolved"  # Looked up in the price timeline
    MANUAL = "manual"      # Supplied by the caller


# Approved tickets are terminal. Re-approval is a policy decision made by
# TicketService, not a transition.
TRANSITIONS: dict[TicketStatus, frozenset[TicketStatus]] = {
    TicketStatus.PENDING: frozenset({TicketStatus.APPROVED}),
    TicketStatus.APPROVED: frozenset(),
}


def can_transition(current: TicketStatus, target: TicketStatus) -> bool:
    """Whether the lifecycle allows moving from current to target."""
    return target in TRANSITIONS[current]


def compute_value(
    weight_in: Decimal | None,
    weight_out: Decimal | None,
    unit_price: Decimal | None,
) -> tuple[Decimal, Decimal] | None:
    """
    Net weight and monetary value of a weighing.

    Returns (net_weight, total_value) with total_value rounded half-up to
    cents, or None while any input is still unknown.
    """
    if weight_in is None or weight_out is None or unit_price is None:
        return None

    net_weight = weight_in - weight_out
    total_value = (net_weight * unit_price).quantize(_CENTS, rounding=ROUND_HALF_UP)
    return net_weight, total_value


class TicketCreate(BaseModel):
    """Data required to open a ticket. Status and times are set by the service."""

    ticket_no: str = Field(..., min_length=1, max_length=50)
    vehicle_id: int = Field(..., gt=0)
    vendor_id: int = Field(..., gt=0)
    product_id: int = Field(..., gt=0)
    payment_type: str | None = Field(None, max_length=30)
    weight_in: Decimal = Field(..., ge=0, max_digits=10, decimal_places=2)
    weight_out: Decimal | None = Field(None, ge=0, max_digits=10, decimal_places=2)
    unit_price: Decimal | None = Field(None, ge=0, max_digits=10, decimal_places=2)
    created_by: str | None = Field(None, max_length=100)
    remarks: str | None = Field(None, max_length=500)


class WeighOut(BaseModel):
    """Outbound weight captured on the second pass over the bridge."""

    weight_out: Decimal = Field(..., ge=0, max_digits=10, decimal_places=2)


class TicketApproval(BaseModel):
    """Optional final weigh-out sent with the approval."""

    weight_out: Decimal | None = Field(None, ge=0, max_digits=10, decimal_places=2)


class WeighTicket(BaseModel):
    """Full ticket entity as stored."""

    id: int
    ticket_no: str
    vehicle_id: int
    vendor_id: int
    product_id: int
    process_status: TicketStatus
    payment_type: str | None
    weight_in: Decimal | None
    weight_out: Decimal | None
    unit_price: Decimal | None
    price_id: int | None = None
    price_source: PriceSource
    net_weight: Decimal | None = None
    total_value: Decimal | None = None
    time_in: datetime
    time_out: datetime | None
    created_by: str | None
    remarks: str | None

    model_config = {"from_attributes": True}

    @property
    def is_approved(self) -> bool:
        """Whether ticket reached its terminal state."""
        return self.process_status == TicketStatus.APPROVED


class WeighTicketView(WeighTicket):
    """Ticket joined with product, vendor and vehicle display fields."""

    product_name: str | None = None
    vendor_name: str | None = None
    license_plate: str | None = None
