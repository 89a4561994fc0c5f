"""Row builders shaped like psycopg2 RealDictCursor results."""

from datetime import date, datetime, timezone
from decimal import Decimal

TEST_OPERATOR = "gate-1"
CREATED_AT = datetime(2024, 1, 1, 9, 0, tzinfo=timezone.utc)


def price_row(
    id: int,
    effective_date: date,
    to_date: date | None,
    unit_price: str,
    product_id: int = 1,
    **extra,
) -> dict:
    """A product_prices row."""
    row = {
        "id": id,
        "product_id": product_id,
        "effective_date": effective_date,
        "to_date": to_date,
        "unit_price": Decimal(unit_price),
        "created_at": CREATED_AT,
        "updated_at": CREATED_AT,
    }
    row.update(extra)
    return row


def ticket_row(id: int = 1, **overrides) -> dict:
    """A weigh_tickets row, pending and weighed in only."""
    row = {
        "id": id,
        "ticket_no": "T-0001",
        "vehicle_id": 3,
        "vendor_id": 2,
        "product_id": 1,
        "process_status": "pending",
        "payment_type": "cash",
        "weight_in": Decimal("12000.00"),
        "weight_out": None,
        "unit_price": Decimal("50.00"),
        "price_id": 10,
        "price_source": "resolved",
        "net_weight": None,
        "total_value": None,
        "time_in": datetime(2024, 5, 15, 8, 30, tzinfo=timezone.utc),
        "time_out": None,
        "created_by": TEST_OPERATOR,
        "remarks": None,
    }
    row.update(overrides)
    return row
