import logging
from typing import Optional

PACKAGE_LOGGER = "ai_debugger"
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


class LoggingConfig:
    """Process-wide switch for the debugger's log output."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._enabled = True
        return cls._instance

    @property
    def enabled(self) -> bool:
        return self._enabled

    @enabled.setter
    def enabled(self, value: bool) -> None:
        self._enabled = bool(value)


class LogFilter(logging.Filter):
    """Drops every record while logging is switched off."""

    def filter(self, record):
        return LoggingConfig().enabled


def _package_logger() -> logging.Logger:
    logger = logging.getLogger(PACKAGE_LOGGER)
    if not logger.handlers:
        logger.setLevel(logging.INFO)
        logger.propagate = False
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler.addFilter(LogFilter())
        logger.addHandler(handler)
    return logger


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """
    Get a logger under the shared ``ai_debugger`` handler.

    Args:
        name: Module name, usually ``__name__``. The package prefix is
            optional; None returns the package logger itself.

    Returns:
        Configured logger instance
    """
    logger = _package_logger()
    if name and name != PACKAGE_LOGGER:
        suffix = name[len(PACKAGE_LOGGER) + 1:] if name.startswith(PACKAGE_LOGGER + ".") else name
        return logger.getChild(suffix)
    return logger
