"""Price interval domain models.

Prices are fixed-point decimals with two fractional digits. An interval
runs from effective_date to to_date, both inclusive; a null to_date means
the interval is still current.
"""

from datetime import date, datetime
from decimal import Decimal

from pydantic import BaseModel, Field, model_validator


class PriceUpsert(BaseModel):
    """
    Data for creating or replacing a price interval.

    (product_id, effective_date) is the natural key: writing an existing key
    replaces that interval's unit_price and to_date.
    """

    product_id: int = Field(..., gt=0)
    effective_date: date
    to_date: date | None = None
    unit_price: Decimal = Field(..., ge=0, max_digits=10, decimal_places=2)

    @model_validator(mode="after")
    def validate_range(self) -> "PriceUpsert":
        """Ensure the interval does not end before it starts."""
        if self.to_date is not None and self.to_date < self.effective_date:
            raise ValueError("to_date cannot be before effective_date")
        return self


class PriceUpdate(BaseModel):
    """
    Partial update of an interval by id.

    Omitted product_id, effective_date and unit_price keep their stored
    values. to_date is always written: omitting it (or sending null) makes
    the interval open-ended.
    """

    product_id: int | None = Field(None, gt=0)
    effective_date: date | None = None
    to_date: date | None = None
    unit_price: Decimal | None = Field(None, ge=0, max_digits=10, decimal_places=2)

    @model_validator(mode="after")
    def validate_range(self) -> "PriceUpdate":
        if (
            self.effective_date is not None
            and self.to_date is not None
            and self.to_date < self.effective_date
        ):
            raise ValueError("to_date cannot be before effective_date")
        return self


class PriceInterval(BaseModel):
    """Price interval as stored."""

    id: int
    product_id: int
    effective_date: date
    to_date: date | None
    unit_price: Decimal
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}

    @property
    def is_open_ended(self) -> bool:
        """Whether the interval has no end date."""
        return self.to_date is None


class PriceIntervalView(PriceInterval):
    """Price interval joined with its product's display fields."""

    product_name: str | None = None
    product_code: str | None = None
