"""Reference data models: products, vendors, vehicles.

Read-only from this service's point of view. Rows are maintained by
administrative tooling outside the API.
"""

from pydantic import BaseModel


class Product(BaseModel):
    """Goods that cross the weighbridge and carry a price timeline."""

    id: int
    product_code: str
    product_name: str

    model_config = {"from_attributes": True}


class Vendor(BaseModel):
    """Trading counterparty a ticket is written for."""

    id: int
    vendor_code: str
    vendor_name: str

    model_config = {"from_attributes": True}


class Vehicle(BaseModel):
    """Truck identified by its plate."""

    id: int
    license_plate: str
    description: str | None = None

    model_config = {"from_attributes": True}
