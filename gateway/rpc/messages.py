"""
Wire messages for the Boardbots backend service.

`boardbots.proto` beside this module is the contract. grpcio-tools compiles it
on import (`grpc.protos_and_services`), producing the `boardbots_pb2` and
`boardbots_pb2_grpc` modules protoc would emit with:

    python -m grpc_tools.protoc -I. --python_out=. --grpc_python_out=. gateway/rpc/boardbots.proto

The proto path is resolved against sys.path, so the directory holding the
`gateway` package has to be on it (it is when running from the repo root or
from an installed wheel).
"""

from __future__ import annotations

from typing import Any

import grpc

PROTO_PATH = "gateway/rpc/boardbots.proto"

boardbots_pb2, boardbots_pb2_grpc = grpc.protos_and_services(PROTO_PATH)

SERVICE_NAME = "BoardbotsService"
GET_GAMES_METHOD = f"/{SERVICE_NAME}/GetGames"
AUTHENTICATE_METHOD = f"/{SERVICE_NAME}/Authenticate"

UUID = boardbots_pb2.UUID
GameRequest = boardbots_pb2.GameRequest
Position = boardbots_pb2.Position
PlayerState = boardbots_pb2.PlayerState
Piece = boardbots_pb2.Piece
GameResponse = boardbots_pb2.GameResponse
AuthRequest = boardbots_pb2.AuthRequest
AuthResponse = boardbots_pb2.AuthResponse

BoardbotsServiceStub = boardbots_pb2_grpc.BoardbotsServiceStub

PIECE_TYPES = {v.number: v.name for v in Piece.Type.DESCRIPTOR.values}


def new_game_request(game_id: str) -> Any:
    req = GameRequest()
    req.game_id.value = game_id
    return req


def new_auth_request(username: str, password: str) -> Any:
    return AuthRequest(username=username, password=password)
