"""UTC-everywhere time handling. Eliminates timezone bugs at the source."""

from datetime import date, datetime, timezone
from zoneinfo import ZoneInfo


def now_utc() -> datetime:
    """
    Current time in UTC.

    Use this instead of datetime.now() everywhere.
    """
    return datetime.now(timezone.utc)


def to_local(dt: datetime, tz_name: str) -> datetime:
    """
    Convert UTC datetime to the facility's local time.

    ONLY use this at boundaries where the local calendar matters - deciding
    a pricing date, rendering for humans. Stored timestamps stay in UTC.

    Args:
        dt: UTC datetime
        tz_name: IANA timezone name (e.g., "Asia/Manila")

    Raises:
        ValueError: If datetime is naive or timezone name is invalid
    """
    if dt.tzinfo is None:
        raise ValueError(
            "Cannot convert naive datetime. Datetime must be timezone-aware."
        )

    try:
        local_tz = ZoneInfo(tz_name)
    except KeyError:
        raise ValueError(f"Unknown timezone: {tz_name}")

    return dt.astimezone(local_tz)


def local_today(tz_name: str) -> date:
    """
    Today's calendar date at the facility.

    Pricing dates have no time component, so "today" depends on where the
    weighbridge is. A ticket weighed at 23:30 local time must be priced
    with that local date, not the UTC one.
    """
    return to_local(now_utc(), tz_name).date()
