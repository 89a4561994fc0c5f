"""
Registry service for reference data: products, vendors, vehicles.

Read-only. Every call goes to storage; the tables are small and there is
no cache to go stale.
"""

from clients.postgres_client import PostgresClient
from core.models import Product, Vendor, Vehicle


class RegistryService:
    """Service for reference data lookups."""

    def __init__(self, postgres: PostgresClient):
        self.postgres = postgres

    def list_products(self) -> list[Product]:
        """All products."""
        rows = self.postgres.execute("SELECT * FROM products")
        return [Product.model_validate(row) for row in rows]

    def list_vendors(self) -> list[Vendor]:
        """All vendors."""
        rows = self.postgres.execute("SELECT * FROM vendors")
        return [Vendor.model_validate(row) for row in rows]

    def list_vehicles(self) -> list[Vehicle]:
        """All vehicles."""
        rows = self.postgres.execute("SELECT * FROM vehicles")
        return [Vehicle.model_validate(row) for row in rows]

    def get_product(self, product_id: int) -> Product | None:
        """
        Get product by ID.

        Returns:
            Product if found, None otherwise.
        """
        row = self.postgres.execute_single(
            "SELECT * FROM products WHERE id = %s",
            (product_id,)
        )
        return Product.model_validate(row) if row else None

    def get_vendor(self, vendor_id: int) -> Vendor | None:
        """Get vendor by ID, or None."""
        row = self.postgres.execute_single(
            "SELECT * FROM vendors WHERE id = %s",
            (vendor_id,)
        )
        return Vendor.model_validate(row) if row else None

    def get_vehicle(self, vehicle_id: int) -> Vehicle | None:
        """Get vehicle by ID, or None."""
        row = self.postgres.execute_single(
            "SELECT * FROM vehicles WHERE id = %s",
            (vehicle_id,)
        )
        return Vehicle.model_validate(row) if row else None
