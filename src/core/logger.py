"""Logging setup. Modules only ever call logging.getLogger(__name__); the application calls configure_logging() once."""

import logging
from typing import Optional

from src.core import config

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(level: Optional[str] = None) -> None:
    logging.basicConfig(level=level or config.LOG_LEVEL, format=LOG_FORMAT)
    # SQLAlchemy is very chatty at INFO
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
