"""Logging system for nipals_pls.

Usage:
    >>> from nipals_pls.core.logging import get_logger, configure_logging
    >>>
    >>> # Configure at application startup
    >>> configure_logging(verbose=2)
    >>>
    >>> # Get logger in each module
    >>> logger = get_logger(__name__)
    >>> logger.success("Model trained")
"""

from .config import (
    ROOT_LOGGER_NAME,
    TRACE,
    ConsoleFormatter,
    LoggingConfig,
    NipalsLogger,
    configure_logging,
    get_config,
    get_logger,
    is_configured,
    reset_logging,
)

__all__ = [
    # Main API
    "get_logger",
    "configure_logging",
    # Configuration
    "get_config",
    "is_configured",
    "reset_logging",
    "LoggingConfig",
    "ROOT_LOGGER_NAME",
    "TRACE",
    "NipalsLogger",
    # Formatters
    "ConsoleFormatter",
]
