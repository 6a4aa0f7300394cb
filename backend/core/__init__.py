"""Infrastructure modules: correlation IDs, logging and error tracking."""

from core.correlation import (
    accept_or_generate,
    correlation_id_var,
    generate_correlation_id,
    get_correlation_id,
    set_correlation_id,
)
from core.logging_config import configure_logging
from core.sentry_config import init_sentry

__all__ = [
    "accept_or_generate",
    "configure_logging",
    "correlation_id_var",
    "generate_correlation_id",
    "get_correlation_id",
    "init_sentry",
    "set_correlation_id",
]
