"""Logging configuration for nipals_pls.

Library modules only call :func:`get_logger`; applications opt into console
or file output with :func:`configure_logging`. Until then the package logger
carries a ``NullHandler`` and stays silent.
"""

from __future__ import annotations

import logging
import sys
from dataclasses import dataclass
from pathlib import Path

ROOT_LOGGER_NAME = "nipals_pls"

TRACE = 5
logging.addLevelName(TRACE, "TRACE")

_VERBOSE_LEVELS = {
    0: logging.WARNING,
    1: logging.INFO,
    2: logging.DEBUG,
    3: TRACE,
}


class NipalsLogger(logging.Logger):
    """Logger with convenience methods for training progress."""

    def trace(self, msg: str, *args, **kwargs) -> None:
        """Log at TRACE level (below DEBUG)."""
        if self.isEnabledFor(TRACE):
            self._log(TRACE, msg, args, **kwargs)

    def starting(self, msg: str, *args, **kwargs) -> None:
        """Log the start of an operation at INFO level."""
        kwargs.setdefault("extra", {})["status"] = "starting"
        self.info(msg, *args, **kwargs)

    def success(self, msg: str, *args, **kwargs) -> None:
        """Log a successful completion at INFO level."""
        kwargs.setdefault("extra", {})["status"] = "success"
        self.info(msg, *args, **kwargs)


@dataclass
class LoggingConfig:
    """Active logging configuration.

    Attributes:
        verbose: 0 = warnings only, 1 = info, 2 = debug, 3 = trace.
        use_unicode: Allow non-ASCII symbols in console output.
        use_colors: Colorize the console level prefix.
        log_file: Optional path of a plain-text log file.
    """

    verbose: int = 1
    use_unicode: bool = True
    use_colors: bool = False
    log_file: Path | None = None

    @property
    def level(self) -> int:
        return _VERBOSE_LEVELS.get(max(0, min(self.verbose, 3)), logging.INFO)


class ConsoleFormatter(logging.Formatter):
    """Human-readable formatter with short status symbols."""

    _COLORS = {
        logging.WARNING: "\033[33m",
        logging.ERROR: "\033[31m",
        logging.CRITICAL: "\033[31m",
    }
    _RESET = "\033[0m"

    def __init__(self, use_unicode: bool = True, use_colors: bool = False) -> None:
        super().__init__()
        self.use_unicode = use_unicode
        self.use_colors = use_colors

    def _symbol(self, record: logging.LogRecord) -> str:
        status = getattr(record, "status", None)
        if status == "success":
            return "[OK]"
        if status == "starting":
            return ">"
        if record.levelno >= logging.ERROR:
            return "[X]"
        if record.levelno >= logging.WARNING:
            return "[!]"
        return ""

    def format(self, record: logging.LogRecord) -> str:
        message = record.getMessage()
        if not self.use_unicode:
            message = message.encode("ascii", "replace").decode("ascii")
        symbol = self._symbol(record)
        if symbol and self.use_colors and record.levelno in self._COLORS:
            symbol = f"{self._COLORS[record.levelno]}{symbol}{self._RESET}"
        text = f"{symbol} {message}" if symbol else message
        if record.exc_info:
            text = f"{text}\n{self.formatException(record.exc_info)}"
        return text


_config: LoggingConfig | None = None
_handlers: list[logging.Handler] = []


def get_logger(name: str) -> NipalsLogger:
    """Get a logger namespaced under ``nipals_pls``.

    Args:
        name: Usually ``__name__`` of the calling module.

    Returns:
        A NipalsLogger instance.
    """
    if name != ROOT_LOGGER_NAME and not name.startswith(ROOT_LOGGER_NAME + "."):
        name = f"{ROOT_LOGGER_NAME}.{name}"

    existing = logging.Logger.manager.loggerDict.get(name)
    if isinstance(existing, NipalsLogger):
        return existing

    previous_class = logging.getLoggerClass()
    logging.setLoggerClass(NipalsLogger)
    try:
        logger = logging.getLogger(name)
    finally:
        logging.setLoggerClass(previous_class)
    return logger  # type: ignore[return-value]


get_logger(ROOT_LOGGER_NAME).addHandler(logging.NullHandler())


def configure_logging(
    verbose: int = 1,
    use_unicode: bool = True,
    use_colors: bool = False,
    log_file: str | Path | None = None,
) -> LoggingConfig:
    """Install console (and optionally file) output for nipals_pls loggers.

    Calling it again replaces the handlers installed by the previous call.

    Args:
        verbose: 0 = warnings only, 1 = info, 2 = debug, 3 = trace.
        use_unicode: Allow non-ASCII characters in console messages.
        use_colors: Colorize warning and error symbols.
        log_file: Optional path of a log file (parent folders are created).

    Returns:
        The active LoggingConfig.
    """
    global _config

    reset_logging()
    config = LoggingConfig(
        verbose=verbose,
        use_unicode=use_unicode,
        use_colors=use_colors,
        log_file=Path(log_file) if log_file is not None else None,
    )

    root = logging.getLogger(ROOT_LOGGER_NAME)
    root.setLevel(config.level)
    root.propagate = False

    console = logging.StreamHandler(sys.stderr)
    console.setFormatter(ConsoleFormatter(use_unicode=use_unicode, use_colors=use_colors))
    _handlers.append(console)

    if config.log_file is not None:
        config.log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(config.log_file, encoding="utf-8")
        file_handler.setFormatter(
            logging.Formatter("%(asctime)s | %(levelname)-8s | %(name)s | %(message)s")
        )
        _handlers.append(file_handler)

    for handler in _handlers:
        root.addHandler(handler)

    _config = config
    return config


def get_config() -> LoggingConfig | None:
    """Return the active configuration, or None if logging is unconfigured."""
    return _config


def is_configured() -> bool:
    """Return True once :func:`configure_logging` has been called."""
    return _config is not None


def reset_logging() -> None:
    """Remove handlers installed by :func:`configure_logging`."""
    global _config

    root = logging.getLogger(ROOT_LOGGER_NAME)
    for handler in _handlers:
        root.removeHandler(handler)
        handler.close()
    _handlers.clear()
    root.setLevel(logging.NOTSET)
    root.propagate = True
    _config = None
