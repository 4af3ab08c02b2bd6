"""
Boundary layer data model(s).

These objects are used to communicate with the Service.
Both the service (higher) and the db layer (lower) send / receive the model(s) defined here.
The engine snapshot travels as an opaque, JSON-safe dictionary: only the engines know what is inside.
"""

from dataclasses import dataclass, field
from typing import Any, Optional

PlayerId = str


@dataclass
class GameModel:
    """Transport-safe representation of any game, used between the Service and the DB layer."""

    game_type: str
    state: dict[str, Any]
    status: str
    config: dict[str, Any] = field(default_factory=dict)
    winner: Optional[PlayerId] = None
    bots: list[PlayerId] = field(default_factory=list)
