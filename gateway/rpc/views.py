"""JSON views of backend game messages."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, List, Optional

from pydantic import BaseModel

from gateway.rpc.messages import PIECE_TYPES


class PositionView(BaseModel):
    row: int
    col: int


class PlayerView(BaseModel):
    name: str
    pawn_position: Optional[PositionView] = None
    barriers: int = 0


class PieceView(BaseModel):
    type: str  # BARRIER|PAWN
    position: Optional[PositionView] = None
    owner: int = 0


class GameView(BaseModel):
    game_id: Optional[str] = None
    players: List[PlayerView] = []
    current_turn: int = 0
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    winner: int = 0
    board: List[PieceView] = []


def _timestamp(msg: Any, field: str) -> Optional[datetime]:
    if not msg.HasField(field):
        return None
    return getattr(msg, field).ToDatetime(tzinfo=timezone.utc)


def _position(msg: Any, field: str) -> Optional[PositionView]:
    if not msg.HasField(field):
        return None
    pos = getattr(msg, field)
    return PositionView(row=pos.row, col=pos.col)


def game_view(resp: Any) -> GameView:
    """Build a GameView from a GameResponse; player and board order is kept."""
    return GameView(
        game_id=resp.game_id.value if resp.HasField("game_id") else None,
        players=[
            PlayerView(name=p.player_name, pawn_position=_position(p, "pawn_position"), barriers=p.barriers)
            for p in resp.players
        ],
        current_turn=resp.current_turn,
        start_date=_timestamp(resp, "start_date"),
        end_date=_timestamp(resp, "end_date"),
        winner=resp.winner,
        board=[
            PieceView(
                type=PIECE_TYPES.get(piece.type, str(piece.type)),
                position=_position(piece, "position"),
                owner=piece.owner,
            )
            for piece in resp.board
        ],
    )
