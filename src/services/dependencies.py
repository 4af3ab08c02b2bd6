"""
Wiring used by the transport layer (HTTP routes, socket handlers): one startup call, then one service per session.
"""

import logging
from collections.abc import Iterator

from sqlalchemy.orm import Session

from src.core.logger import configure_logging
from src.db.database import get_db, init_db
from src.db.sql_repository import SQLGameRepository
from src.services.game_service import GameService

logger = logging.getLogger(__name__)


def startup() -> None:
    """Call once when the application boots."""
    configure_logging()
    init_db()
    logger.info("Game service ready")


def build_game_service(db: Session) -> GameService:
    return GameService(SQLGameRepository(db))


def get_game_service() -> Iterator[GameService]:
    """A service bound to a fresh database session. The session is closed once the caller is done."""
    for db in get_db():
        yield build_game_service(db)
