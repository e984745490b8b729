"""
Per-request correlation IDs.

The ID lives in a ContextVar and is also bound into structlog's context, so
every log event emitted while serving a request carries ``request_id``.
"""

import uuid
from contextvars import ContextVar
from typing import Optional

import structlog


REQUEST_ID_HEADER = "X-Request-ID"

request_id_var: ContextVar[Optional[str]] = ContextVar("request_id", default=None)


def get_request_id() -> Optional[str]:
    """Get the current request ID."""
    return request_id_var.get()


def set_request_id(request_id: Optional[str] = None) -> str:
    """
    Start a request context.

    Args:
        request_id: ID supplied by the caller; blank or missing IDs are
            replaced with a fresh UUID4

    Returns:
        The request ID now in effect
    """
    if not request_id or not request_id.strip():
        request_id = str(uuid.uuid4())
    else:
        request_id = request_id.strip()[:128]

    request_id_var.set(request_id)

    structlog.contextvars.clear_contextvars()
    structlog.contextvars.bind_contextvars(request_id=request_id)

    return request_id


def clear_request_context() -> None:
    """End the request context."""
    request_id_var.set(None)
    structlog.contextvars.clear_contextvars()
