"""Propagate the calling operator's identity through the call stack using contextvars.

The identity is opaque: it is recorded on written rows (ticket created_by,
audit entries) and never interpreted.
"""

from contextvars import ContextVar
from contextlib import contextmanager

_current_operator: ContextVar[str | None] = ContextVar("current_operator", default=None)


def get_current_operator() -> str | None:
    """Get current operator identity, or None when the caller sent none."""
    return _current_operator.get()


def set_current_operator(operator: str | None) -> None:
    """
    Set current operator identity.

    Called by OperatorMiddleware at the start of each request.
    """
    _current_operator.set(operator)


def clear_current_operator() -> None:
    """
    Clear operator context.

    Must be called in finally block to prevent context leakage.
    """
    _current_operator.set(None)


@contextmanager
def operator_context(operator: str):
    """
    Context manager for temporarily setting the operator identity.

    Useful for tests and batch imports run on behalf of someone.

    Example:
        with operator_context("gate-2"):
            ticket_service.create(data)  # created_by defaults to "gate-2"
    """
    previous = _current_operator.get()
    set_current_operator(operator)
    try:
        yield
    finally:
        set_current_operator(previous)
