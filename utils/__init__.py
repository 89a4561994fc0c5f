"""Utility modules for cross-cutting concerns."""

from utils.timezone import now_utc, to_local, local_today
from utils.operator_context import (
    get_current_operator,
    set_current_operator,
    clear_current_operator,
    operator_context,
)
