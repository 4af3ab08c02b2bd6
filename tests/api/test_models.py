from uuid import UUID, uuid4

import pytest
from pydantic import ValidationError

from src.api.models import (
    AddBotRequest,
    CreateGameRequest,
    GameResponse,
    JoinGameRequest,
    MoveRequest,
    PlayerResponse,
)
from src.core.exceptions import InvalidRequestError
from src.core.shared_types import CastlingMode, GameStatus, GameType, MoveType


@pytest.fixture
def mock_id() -> UUID:
    return uuid4()


# -- Validation - CreateGameRequest --
def test_create_game_request() -> None:
    request = CreateGameRequest(game_type="yahtzee", player_id="p1", player_name="don't hate the player")
    assert request.game_type == GameType.YAHTZEE
    assert request.castling is None


def test_castling_mode_is_optional() -> None:
    request = CreateGameRequest(game_type="chess", player_id="p1", player_name="Name", castling="strict")
    assert request.castling == CastlingMode.STRICT


def test_unknown_game_type() -> None:
    with pytest.raises(ValidationError):
        _ = CreateGameRequest(game_type="monopoly", player_id="p1", player_name="Name")


@pytest.mark.parametrize("player_id, player_name", [("", "Name"), ("p1", "   ")])
def test_empty_player_fields(player_id: str, player_name: str) -> None:
    with pytest.raises(InvalidRequestError):
        _ = CreateGameRequest(game_type="chess", player_id=player_id, player_name=player_name)


def test_join_request_needs_a_player(mock_id: UUID) -> None:
    with pytest.raises(InvalidRequestError):
        _ = JoinGameRequest(game_id=mock_id, player_id="p2", player_name="")


def test_bot_name_defaults(mock_id: UUID) -> None:
    assert AddBotRequest(game_id=mock_id).bot_name == "Bot"


# -- Validation - MoveRequest --
def test_valid_square_names(mock_id: UUID) -> None:
    """Test that MoveRequest accepts correctly written squares in algebraic notation."""
    request = MoveRequest(game_id=mock_id, player_id="p1", type="move", data={"from": "e2", "to": "e4"})
    assert request.type == MoveType.MOVE
    assert request.data == {"from": "e2", "to": "e4"}


def test_square_as_row_and_column(mock_id: UUID) -> None:
    request = MoveRequest(
        game_id=mock_id,
        player_id="p1",
        type="move",
        data={"from": {"row": 6, "col": 4}, "to": {"row": 4, "col": 4}},
    )
    assert request.data["to"] == {"row": 4, "col": 4}


@pytest.mark.parametrize(
    "square",
    [
        "nonsense",  # anything more than two characters.
        "11",  # First character is not a letter
        "aa",  # second character is not a number
        "i1",  # off the board
        "e\u00b2",  # a digit character that is not a rank
        None,
    ],
)
def test_invalid_square(mock_id: UUID, square: str | None) -> None:
    """Test that an exception is raised when using invalid square name."""
    with pytest.raises(InvalidRequestError):
        _ = MoveRequest(game_id=mock_id, player_id="p1", type="move", data={"from": square, "to": "e4"})
    with pytest.raises(InvalidRequestError):
        _ = MoveRequest(game_id=mock_id, player_id="p1", type="move", data={"from": "e2", "to": square})


def test_roll_needs_no_data(mock_id: UUID) -> None:
    request = MoveRequest(game_id=mock_id, player_id="p1", type="roll")
    assert request.data == {}


@pytest.mark.parametrize("data", [{"dice_index": 2}, {"diceIndex": 0}])
def test_valid_hold(mock_id: UUID, data: dict) -> None:
    request = MoveRequest(game_id=mock_id, player_id="p1", type="hold", data=data)
    assert request.type == MoveType.HOLD


@pytest.mark.parametrize("data", [{}, {"dice_index": "2"}, {"dice_index": True}])
def test_invalid_hold(mock_id: UUID, data: dict) -> None:
    with pytest.raises(InvalidRequestError):
        _ = MoveRequest(game_id=mock_id, player_id="p1", type="hold", data=data)


def test_score_category(mock_id: UUID) -> None:
    request = MoveRequest(game_id=mock_id, player_id="p1", type="score", data={"category": "fullHouse"})
    assert request.data["category"] == "fullHouse"

    with pytest.raises(InvalidRequestError):
        _ = MoveRequest(game_id=mock_id, player_id="p1", type="score", data={"category": "bonus"})


def test_unknown_move_type(mock_id: UUID) -> None:
    with pytest.raises(ValidationError):
        _ = MoveRequest(game_id=mock_id, player_id="p1", type="teleport")


def test_empty_player_id(mock_id: UUID) -> None:
    with pytest.raises(InvalidRequestError):
        _ = MoveRequest(game_id=mock_id, player_id=" ", type="roll")


# -- GameResponse --
def test_game_response(mock_id: UUID) -> None:
    response = GameResponse(
        game_id=mock_id,
        game_type="yahtzee",
        status="playing",
        current_player_id="p1",
        players=[PlayerResponse(id="p1", name="Alice"), PlayerResponse(id="bot-1", name="Bot", is_bot=True)],
        rules=["Highest total score wins"],
        state={"data": {"round": 1}},
    )
    assert response.status == GameStatus.PLAYING
    assert response.winner is None
    assert response.players[0].score is None
    assert response.players[1].is_bot
