"""Logging configuration for the application.

Every record written by the stdout handler carries the id of the request
being served (``-`` outside a request), so log lines can be matched with
the X-Request-ID header and the request_id column of audit rows.
"""

import logging
import sys

from officeflow.core.config import get_settings
from officeflow.shared.context import get_request_id

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - [%(request_id)s] %(message)s"


class RequestIdFilter(logging.Filter):
    """Stamp each record with the current request id."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = get_request_id() or "-"
        return True


def resolve_log_level() -> str | int:
    """LOG_LEVEL when set, otherwise DEBUG with settings.debug and INFO without."""
    settings = get_settings()
    if settings.log_level:
        return settings.log_level.upper()
    return logging.DEBUG if settings.debug else logging.INFO


def setup_logging() -> None:
    """Configure the root logger with one stdout handler."""
    handler = logging.StreamHandler(sys.stdout)
    handler.addFilter(RequestIdFilter())
    logging.basicConfig(
        level=resolve_log_level(),
        format=LOG_FORMAT,
        handlers=[handler],
    )


def get_logger(name: str) -> logging.Logger:
    """Return a logger for the given module name (usually __name__)."""
    return logging.getLogger(name)
