"""Logging configuration for the application."""

import logging
import sys

from app.core.config import get_settings
from app.core.tenant_context import get_subdomain


class TenantContextFilter(logging.Filter):
    """Stamp each record with the current request's agency subdomain ('-' outside requests)."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.subdomain = get_subdomain() or "-"
        return True


def setup_logging() -> None:
    """Configure application-wide logging.

    Level is DEBUG when settings.debug is True, otherwise INFO.
    Output goes to stdout; every line carries the agency subdomain.
    """
    settings = get_settings()
    log_level = logging.DEBUG if settings.debug else logging.INFO
    handler = logging.StreamHandler(sys.stdout)
    handler.addFilter(TenantContextFilter())
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - [%(subdomain)s] %(message)s",
        handlers=[handler],
    )


def get_logger(name: str) -> logging.Logger:
    """Return a logger for the given module name.

    Args:
        name: Usually __name__ of the calling module.

    Returns:
        Logger instance.
    """
    return logging.getLogger(name)
