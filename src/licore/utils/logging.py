"""Logging setup."""

import logging

from ..config import settings

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def setup_logging() -> None:
    """Configure the root logger from settings (called on startup)."""
    logging.basicConfig(level=settings.log_level.upper(), format=LOG_FORMAT, force=True)

    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)
