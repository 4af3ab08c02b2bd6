"""
Custom exceptions raised by the collaborators around the engines (service, repository, request validation).

The engines themselves never raise for a bad move: they answer with a boolean.
"""


class GameError(Exception):
    """Top-level exception. Catch this one to handle anything the application raises on purpose."""


class GameStateError(GameError):
    """The game is not in a state that allows the requested action (full, not started, already finished...)."""


class IllegalMoveError(GameError):
    """The engine rejected the submitted move."""


class NotYourTurnError(IllegalMoveError):
    """A player attempted to act while another player holds the turn."""


class UnsupportedGameError(GameError):
    """No engine is registered for the requested game type."""


class BotDecisionError(GameError):
    """The bot was asked for a decision that has no valid answer (e.g. a full scorecard)."""


class RepositoryError(GameError):
    """Persistence layer could not find / store the requested record."""


class InvalidRequestError(GameError):
    """Incoming request data does not have the expected shape."""
