"""Core SDK modules."""

from timber.core.config import Settings, settings
from timber.core.logging import LoggerAdapter, get_logger, setup_logging

__all__ = [
    "Settings",
    "settings",
    "LoggerAdapter",
    "get_logger",
    "setup_logging",
]
