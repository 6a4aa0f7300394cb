"""
Loguru configuration.

Console output is human readable in development and JSON everywhere else.
Every record carries the correlation ID of the request that produced it.
"""

import sys
from pathlib import Path
from typing import TYPE_CHECKING

from loguru import logger

from core.correlation import get_correlation_id

if TYPE_CHECKING:
    from loguru import Record

LOG_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{extra[correlation_id]}</cyan> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | "
    "<level>{message}</level>"
)


def correlation_filter(record: "Record") -> bool:
    """
    Attach the current correlation ID to a log record.

    Args:
        record: Loguru log record.

    Returns:
        Always True; the filter only enriches records.
    """
    record["extra"]["correlation_id"] = get_correlation_id() or "-"
    return True


def configure_logging(
    environment: str = "development",
    log_to_file: bool = False,
    log_dir: str = "logs",
) -> None:
    """
    Configure Loguru sinks for the application.

    Args:
        environment: "development" for colored console output, anything else
            for JSON lines.
        log_to_file: Also write a rotating log file under ``log_dir``.
        log_dir: Directory for the log file.
    """
    logger.remove()

    is_development = environment == "development"

    if is_development:
        logger.add(
            sys.stderr,
            format=LOG_FORMAT,
            level="DEBUG",
            filter=correlation_filter,
            colorize=True,
        )
    else:
        logger.add(
            sys.stderr,
            format="{message}",
            level="INFO",
            filter=correlation_filter,
            serialize=True,
        )

    if log_to_file:
        Path(log_dir).mkdir(parents=True, exist_ok=True)
        logger.add(
            str(Path(log_dir) / "ideaboard.log"),
            format=LOG_FORMAT if is_development else "{message}",
            level="INFO",
            filter=correlation_filter,
            rotation="10 MB",
            retention="7 days",
            serialize=not is_development,
        )
