from __future__ import annotations

import logging
from typing import Optional

from .settings import settings

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"

# Driver chatter drowns out audit lines at INFO.
_QUIET_LOGGERS = ("pymongo", "motor", "aio_pika", "aiormq")


def setup_logging(level: Optional[str] = None) -> None:
    name = (level or settings.LOG_LEVEL).upper()
    logging.basicConfig(level=getattr(logging, name, logging.INFO), format=LOG_FORMAT)
    for noisy in _QUIET_LOGGERS:
        logging.getLogger(noisy).setLevel(logging.WARNING)
