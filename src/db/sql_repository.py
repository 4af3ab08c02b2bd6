"""Implementation of (Game)Repository using SQLAlchemy"""

import json
import logging
from typing import Any
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from src.core.exceptions import RepositoryError
from src.core.models import GameModel
from src.db.schema import DBGame

logger = logging.getLogger(__name__)


class SQLGameRepository:
    """Data stored using SQL / methods implemented using SQLAlchemy"""

    def __init__(self, db_session: Session) -> None:
        self.db = db_session

    def get_game(self, game_id: UUID) -> GameModel | None:
        """Get game by ID, if record exists."""
        game_db = self._fetch_game(game_id)
        if game_db:
            return self._to_model(game_db)
        return None

    def create_game(self, game_id: UUID, game: GameModel) -> GameModel:
        """Store a new game under the given ID and return the stored data."""
        game_db = DBGame(
            id=game_id,
            game_type=game.game_type,
            state=json.dumps(game.state),
            config=game.config,
            status=game.status,
            winner=game.winner,
            bots=game.bots,
        )
        self.db.add(game_db)
        try:
            self.db.commit()
        except IntegrityError as exc:
            self.db.rollback()
            raise RepositoryError(f"Game with {game_id=} already exists.") from exc
        self.db.refresh(game_db)
        return self._to_model(game_db)

    def update_game(self, game_id: UUID, game: GameModel) -> GameModel | None:
        """Overwrite the existing record."""
        game_db = self._fetch_game(game_id)
        if not game_db:
            return None
        game_db.game_type = game.game_type
        game_db.state = json.dumps(game.state)
        game_db.config = game.config
        game_db.status = game.status
        game_db.winner = game.winner
        game_db.bots = game.bots
        self.db.commit()
        self.db.refresh(game_db)
        return self._to_model(game_db)

    def delete_game(self, game_id: UUID) -> GameModel | None:
        """Remove a game's record."""
        game_db = self._fetch_game(game_id)
        if not game_db:
            return None
        game_model = self._to_model(game_db)
        self.db.delete(game_db)
        self.db.commit()
        return game_model

    def _fetch_game(self, game_id: UUID) -> DBGame | None:
        query = select(DBGame).where(DBGame.id == game_id)
        return self.db.scalar(query)

    def _to_model(self, game_db: DBGame) -> GameModel:
        """Convert SQLAlchemy model to data transfer model."""
        return GameModel(
            game_type=game_db.game_type,
            state=_load_state(game_db.id, game_db.state),
            config=dict(game_db.config or {}),
            status=game_db.status,
            winner=game_db.winner,
            bots=list(game_db.bots or []),
        )


def _load_state(game_id: UUID, blob: str) -> dict[str, Any]:
    """A corrupted blob gives an empty state: the engine restores it with its own defaults."""
    try:
        state = json.loads(blob)
    except (TypeError, json.JSONDecodeError):
        logger.warning("State of game %s is not valid JSON", game_id)
        return {}
    if not isinstance(state, dict):
        logger.warning("State of game %s is not a JSON object", game_id)
        return {}
    return state
