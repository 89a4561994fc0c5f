"""Core domain models."""

from core.models.registry import Product, Vendor, Vehicle
from core.models.price import PriceUpsert, PriceUpdate, PriceInterval, PriceIntervalView
from core.models.ticket import (
    WeighTicket, WeighTicketView, TicketCreate, WeighOut, TicketApproval,
    TicketStatus, PriceSource, can_transition, compute_value,
)

__all__ = [
    # Registry
    "Product", "Vendor", "Vehicle",
    # Price
    "PriceUpsert", "PriceUpdate", "PriceInterval", "PriceIntervalView",
    # Ticket
    "WeighTicket", "WeighTicketView", "TicketCreate", "WeighOut", "TicketApproval",
    "TicketStatus", "PriceSource", "can_transition", "compute_value",
]
