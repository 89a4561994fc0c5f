"""Request-scoped middleware for API requests."""

from uuid import uuid4

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

from utils.operator_context import set_current_operator, clear_current_operator


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Assigns a unique request ID to every request."""

    async def dispatch(self, request: Request, call_next):
        request_id = str(uuid4())
        request.state.request_id = request_id
        response = await call_next(request)
        response.headers["X-Request-ID"] = request_id
        return response


class OperatorMiddleware(BaseHTTPMiddleware):
    """
    Carries the caller's identity from the X-Operator header into the
    operator context for the duration of the request.

    The value is opaque. Nothing is authenticated here.
    """

    HEADER = "X-Operator"

    async def dispatch(self, request: Request, call_next):
        operator = request.headers.get(self.HEADER) or None
        request.state.operator = operator
        set_current_operator(operator)
        try:
            return await call_next(request)
        finally:
            clear_current_operator()


def request_id_of(request: Request) -> str | None:
    """Request ID assigned by RequestIDMiddleware, if it ran."""
    return getattr(request.state, "request_id", None)
