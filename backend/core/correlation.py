"""
Request correlation IDs.

Every request handled by the API gets a short ID that ends up in log lines,
error responses and Sentry events so a reported failure can be traced back.
"""

import re
import uuid
from contextvars import ContextVar

# Request-scoped correlation ID ("" when no request is active)
correlation_id_var: ContextVar[str] = ContextVar("correlation_id", default="")

# Incoming IDs are accepted only if they look like something we generated
_VALID_INCOMING_ID = re.compile(r"^[A-Za-z0-9-]{6,64}$")


def generate_correlation_id() -> str:
    """
    Generate a short correlation ID.

    Returns:
        8 lowercase hex characters, short enough to read out over the phone.
    """
    return uuid.uuid4().hex[:8]


def get_correlation_id() -> str:
    """Return the correlation ID bound to the current context, or ""."""
    return correlation_id_var.get()


def set_correlation_id(correlation_id: str) -> None:
    """Bind a correlation ID to the current context."""
    correlation_id_var.set(correlation_id)


def accept_or_generate(incoming: str | None) -> str:
    """
    Reuse a client supplied correlation ID when it is well formed.

    Args:
        incoming: Value of the X-Correlation-ID header, if any.

    Returns:
        The incoming ID, or a freshly generated one.
    """
    if incoming and _VALID_INCOMING_ID.match(incoming):
        return incoming
    return generate_correlation_id()
