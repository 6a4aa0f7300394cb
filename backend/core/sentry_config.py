"""
Sentry SDK setup.

Sentry stays disabled unless SENTRY_DSN is configured. Credentials and
cookies are scrubbed from events before they leave the process.
"""

from typing import Any

import sentry_sdk
from sentry_sdk.integrations.fastapi import FastApiIntegration
from sentry_sdk.integrations.loguru import LoguruIntegration
from sentry_sdk.integrations.sqlalchemy import SqlalchemyIntegration
from sentry_sdk.types import Event, Hint

from models.config import settings

_UNTRACED_PATHS = {"/health", "/api/health"}


def _before_send(event: Event, hint: Hint) -> Event | None:
    """
    Remove credentials and personal data from an error event.

    Args:
        event: Sentry event.
        hint: Additional context about the event.

    Returns:
        The scrubbed event.
    """
    user = event.get("user")
    if user:
        # The numeric user id is enough to investigate
        user.pop("email", None)
        user.pop("username", None)
        user.pop("ip_address", None)

    request = event.get("request")
    if request and isinstance(request, dict):
        request.pop("cookies", None)
        headers = request.get("headers")
        if isinstance(headers, dict):
            for key in list(headers):
                if key.lower() == "authorization":
                    headers[key] = "[Filtered]"

    return event


def _traces_sampler(sampling_context: dict[str, Any]) -> float:
    """Sample transactions, skipping health checks."""
    if sampling_context.get("parent_sampled") is True:
        return 1.0

    path = sampling_context.get("asgi_scope", {}).get("path", "")
    if path in _UNTRACED_PATHS:
        return 0.0

    return settings.SENTRY_TRACES_SAMPLE_RATE


def init_sentry() -> bool:
    """
    Initialize Sentry if a DSN is configured.

    Call this before the FastAPI app is created.

    Returns:
        True when Sentry was initialized.
    """
    if not settings.SENTRY_DSN:
        return False

    sentry_sdk.init(
        dsn=settings.SENTRY_DSN,
        environment=settings.ENVIRONMENT,
        send_default_pii=False,
        integrations=[
            FastApiIntegration(transaction_style="endpoint"),
            SqlalchemyIntegration(),
            LoguruIntegration(),
        ],
        traces_sampler=_traces_sampler,
        before_send=_before_send,
        attach_stacktrace=True,
        max_breadcrumbs=50,
        ignore_errors=[KeyboardInterrupt, SystemExit],
    )
    return True
