"""
Plays one full bot turn against a live Yahtzee game.

Moves are never applied here: each one is handed to `on_move`, the collaborator that submits it to the engine,
persists the result and broadcasts it. The dice are read back from the engine after every move.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Optional, Self

from src.bots.yahtzee_bot import decide_dice_to_hold, select_category, should_stop_rolling
from src.core import config
from src.core.exceptions import BotDecisionError
from src.core.shared_types import MoveType
from src.engine.primitives import Move
from src.yahtzee.game import ROLLS_PER_TURN, YahtzeeGame

logger = logging.getLogger(__name__)

OnMove = Callable[[Move], Awaitable[None]]
Sleep = Callable[[float], Awaitable[None]]


def _scaled(seconds: float) -> float:
    return seconds * config.BOT_THINK_SCALE


@dataclass(frozen=True)
class BotTiming:
    """Pauses (in seconds) that make the bot look like it is thinking"""

    before_first_roll: float = _scaled(1.0)
    before_holds: float = _scaled(0.8)
    before_reroll: float = _scaled(1.0)
    before_score: float = _scaled(1.2)

    @classmethod
    def instant(cls) -> Self:
        return cls(0.0, 0.0, 0.0, 0.0)


async def execute_bot_turn(
    engine: YahtzeeGame,
    bot_player_id: str,
    on_move: OnMove,
    timing: Optional[BotTiming] = None,
    sleep: Sleep = asyncio.sleep,
) -> None:
    """
    Bot turn
    ---

    1. roll
    2. up to two more times: stop if the hand is good enough, else (un)hold dice and roll again
    3. score the best open category

    A bot that is not part of the game does nothing.
    """
    timing = timing or BotTiming()

    if engine.player_index(bot_player_id) == -1:
        logger.error("Bot %s is not a player of game %s", bot_player_id, engine.state.id)
        return

    logger.info("Bot %s starting turn in game %s", bot_player_id, engine.state.id)

    await sleep(timing.before_first_roll)
    await on_move(Move(player_id=bot_player_id, type=MoveType.ROLL))
    rolls = 1

    while rolls < ROLLS_PER_TURN and engine.rolls_left > 0:
        if should_stop_rolling(engine.dice):
            logger.info("Bot %s stops rolling with %s", bot_player_id, engine.dice)
            break

        await sleep(timing.before_holds)
        keep = decide_dice_to_hold(engine.dice, engine.rolls_left, engine.scorecard(bot_player_id) or {})
        logger.debug("Bot %s holds dice %s", bot_player_id, keep)

        # NOTE: read the holds again after every move, the engine is the only source of truth
        for index in range(len(engine.held)):
            if engine.held[index] != (index in keep):
                await on_move(Move(player_id=bot_player_id, type=MoveType.HOLD, data={"dice_index": index}))

        await sleep(timing.before_reroll)
        await on_move(Move(player_id=bot_player_id, type=MoveType.ROLL))
        rolls += 1

    await sleep(timing.before_score)
    dice = engine.dice
    try:
        category = select_category(dice, engine.scorecard(bot_player_id) or {})
    except BotDecisionError:
        logger.exception("Bot %s has nothing left to score in game %s", bot_player_id, engine.state.id)
        return

    await on_move(Move(player_id=bot_player_id, type=MoveType.SCORE, data={"category": str(category)}))
    logger.info("Bot %s scored %s with %s", bot_player_id, category, dice)
