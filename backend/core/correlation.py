"""
Correlation ID generation and context management.

Every request gets a short ID that is echoed in the `X-Correlation-ID` header
and in error bodies, so a case handler can match a reported error with the
server log without any identifying data changing hands.
"""

import re
import uuid
from contextvars import ContextVar

# Context variable for request-scoped correlation ID
correlation_id_var: ContextVar[str] = ContextVar("correlation_id", default="")

# Incoming IDs are only trusted when they look like one of ours
_CORRELATION_ID_PATTERN = re.compile(r"[A-Za-z0-9-]{1,64}")


def generate_correlation_id() -> str:
    """
    Generate a short, unique correlation ID.

    Returns:
        8-character hexadecimal string (e.g. "abc123de").
    """
    return uuid.uuid4().hex[:8]


def get_correlation_id() -> str:
    """Return the current request's correlation ID, or '' outside a request."""
    return correlation_id_var.get()


def set_correlation_id(correlation_id: str) -> None:
    """Set correlation ID for the current request context."""
    correlation_id_var.set(correlation_id)


def accept_or_generate(candidate: str | None) -> str:
    """
    Reuse a client-supplied correlation ID when it is well-formed.

    Anything else (missing, too long, odd characters that could forge log
    lines) is replaced by a fresh ID.
    """
    if candidate and _CORRELATION_ID_PATTERN.fullmatch(candidate):
        return candidate
    return generate_correlation_id()
