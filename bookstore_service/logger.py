"""Shared logger for the bookstore service.

Every module logs through ``from bookstore_service.logger import logger``.
"""

import logging
import sys

from bookstore_service.config import LOG_LEVEL

LOG_FORMAT = "%(asctime)s %(levelname)-7s %(name)s — %(message)s"

logger = logging.getLogger("bookstore_service")

if not logger.handlers:
    _handler = logging.StreamHandler(sys.stderr)
    _handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(_handler)

logger.setLevel(LOG_LEVEL.upper())
logger.propagate = False
