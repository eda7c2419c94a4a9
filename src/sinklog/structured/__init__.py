"""
Bridge from structlog and stdlib logging into a Dispatcher.

Usage:
    from sinklog import configure_default
    from sinklog.structured import configure_logging, get_logger

    configure_default()
    configure_logging(level="DEBUG")

    logger = get_logger("app.orders")
    logger.info("order_placed", order_id=42)   # -> [INFO] (app.orders) order_placed order_id=42
"""

from .core import configure_logging, get_logger, reset_logging
from .interceptors import RedirectStdLibHandler, intercept_loggers

__all__ = [
    "RedirectStdLibHandler",
    "configure_logging",
    "get_logger",
    "intercept_loggers",
    "reset_logging",
]
