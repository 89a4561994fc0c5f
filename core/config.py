"""Weighbridge service configuration."""

from enum import Enum
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import BaseModel, Field, field_validator, model_validator


class TicketPriceSource(str, Enum):
    """Where a new ticket's unit price comes from."""

    RESOLVE = "resolve"  # Price timeline, as of the ticket's local date
    CALLER = "caller"    # Whatever the caller sent, unchecked


class ApprovalPolicy(str, Enum):
    """What approving an already approved ticket does."""

    IDEMPOTENT = "idempotent"  # Allowed, re-stamps time_out
    STRICT = "strict"          # Rejected as an invalid transition


class WeighbridgeConfig(BaseModel):
    """
    Service configuration.

    Defaults are safe for a single-site deployment in UTC. Deployments
    override fields through the 'weighbridge/app' Vault secret.
    """

    # Pricing
    facility_timezone: str = Field(
        default="UTC",
        description="IANA time zone used to turn timestamps into pricing dates",
    )
    ticket_price_source: TicketPriceSource = Field(
        default=TicketPriceSource.RESOLVE,
        description="How new tickets get their unit price",
    )
    allow_price_override: bool = Field(
        default=True,
        description="Let a caller-supplied unit_price win over the resolved one",
    )
    enforce_non_overlap: bool = Field(
        default=True,
        description="Reject price intervals whose ranges intersect for one product",
    )

    # Ticket lifecycle
    approval_policy: ApprovalPolicy = Field(
        default=ApprovalPolicy.IDEMPOTENT,
        description="Behavior when approving an already approved ticket",
    )

    # Storage
    pool_min_connections: int = Field(default=2, ge=1, le=50)
    pool_max_connections: int = Field(default=20, ge=1, le=200)
    connect_timeout_seconds: int = Field(default=30, ge=1, le=300)
    statement_timeout_ms: int = Field(
        default=15000,
        description="Upper bound on any single storage operation",
        ge=100,
        le=600000,
    )

    # HTTP
    cors_origins: list[str] = Field(default_factory=lambda: ["*"])

    @field_validator("facility_timezone")
    @classmethod
    def validate_timezone(cls, value: str) -> str:
        try:
            ZoneInfo(value)
        except (ZoneInfoNotFoundError, ValueError):
            raise ValueError(f"Unknown timezone: {value}")
        return value

    @model_validator(mode="after")
    def validate_pool_bounds(self) -> "WeighbridgeConfig":
        if self.pool_min_connections > self.pool_max_connections:
            raise ValueError("pool_min_connections cannot exceed pool_max_connections")
        return self
