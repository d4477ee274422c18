"""Logging configuration for the SDK."""

import logging
import sys
from typing import Any

from timber.core.config import settings


def setup_logging(level: int | None = None) -> None:
    """Configure SDK logging.

    Attaches a console handler to the ``timber`` logger. The level defaults
    to DEBUG in debug mode and INFO otherwise.
    """
    log_level = level if level is not None else (
        logging.DEBUG if settings.debug else logging.INFO
    )

    formatter = logging.Formatter(
        fmt="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    sdk_logger = logging.getLogger("timber")
    sdk_logger.setLevel(log_level)

    # Remove existing handlers to avoid duplicates
    for handler in sdk_logger.handlers[:]:
        sdk_logger.removeHandler(handler)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(log_level)
    console_handler.setFormatter(formatter)
    sdk_logger.addHandler(console_handler)

    # Reduce noise from the transport
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """Get a logger under the ``timber`` namespace.

    Usage:
        logger = get_logger("services.invoice")
        logger.info("Creating invoice")
    """
    return logging.getLogger(f"timber.{name}")


class LoggerAdapter(logging.LoggerAdapter):
    """Logger adapter that appends context to log messages.

    Usage:
        logger = LoggerAdapter(get_logger("services"), {"resource": "/customer/invoice"})
        logger.info("Created")  # Logs: "Created - resource=/customer/invoice"
    """

    def process(self, msg: str, kwargs: Any) -> tuple[str, Any]:
        """Process the log message to include extra context."""
        extra = " - ".join(f"{k}={v}" for k, v in self.extra.items())
        return f"{msg} - {extra}" if extra else msg, kwargs
