"""
log.py - logger setup shared by every module of the package

A single stream handler is attached to the package logger the first time
get_logger() is called; child loggers propagate to it. The level starts at
INFO and is changed only through set_level(), which the dashboard calls with
Settings.log_level.
"""

import logging

_PACKAGE_LOGGER = "expense_widget"
_FORMAT = "%(asctime)s %(levelname)s %(message)s"


def _configure_package_logger() -> logging.Logger:
    logger = logging.getLogger(_PACKAGE_LOGGER)
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(_FORMAT))
        logger.addHandler(handler)
        logger.setLevel(logging.INFO)
    return logger


def get_logger(name: str) -> logging.Logger:
    """Return a logger under the package namespace, configuring it on first use."""
    _configure_package_logger()
    if name != _PACKAGE_LOGGER and not name.startswith(_PACKAGE_LOGGER + "."):
        name = f"{_PACKAGE_LOGGER}.{name}"
    return logging.getLogger(name)


def set_level(level: str):
    """Change the package log level at runtime; unknown names mean INFO."""
    logger = _configure_package_logger()
    value = getattr(logging, (level or "INFO").strip().upper(), None)
    logger.setLevel(value if isinstance(value, int) else logging.INFO)
