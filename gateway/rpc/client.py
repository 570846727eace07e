from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Generic, Optional, Sequence, TypeVar

import grpc

from gateway.rpc import messages
from gateway.rpc.channel import RpcChannel

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class RpcResult(Generic[T]):
    """Outcome of one RPC: exactly one of value/error is set."""

    value: Optional[T] = None
    error: Optional[str] = None
    code: Optional[str] = None  # grpc.StatusCode name when the call failed

    @property
    def ok(self) -> bool:
        return self.error is None


class BoardbotsClient:
    """Typed calls against the Boardbots service over the shared channel."""

    def __init__(self, channel: RpcChannel, *, timeout: float):
        self._channel = channel
        self._timeout = timeout

    def _stub(self, interceptors: Sequence[Any]):
        channel = self._channel.get()
        if interceptors:
            channel = grpc.intercept_channel(channel, *interceptors)
        return messages.BoardbotsServiceStub(channel)

    def _call(self, method: str, rpc: Any, request: Any) -> RpcResult:
        try:
            return RpcResult(value=rpc(request, timeout=self._timeout))
        except grpc.RpcError as e:
            code = e.code() if hasattr(e, "code") else None
            detail = e.details() if hasattr(e, "details") else str(e)
            logger.info("RPC %s failed: %s %s", method, getattr(code, "name", code), detail)
            return RpcResult(error=str(detail or "rpc error"), code=getattr(code, "name", None))

    def authenticate(self, username: str, password: str) -> RpcResult:
        stub = self._stub(())
        return self._call(messages.AUTHENTICATE_METHOD, stub.Authenticate, messages.new_auth_request(username, password))

    def get_games(self, game_id: str, *, interceptors: Sequence[Any] = ()) -> RpcResult:
        stub = self._stub(interceptors)
        return self._call(messages.GET_GAMES_METHOD, stub.GetGames, messages.new_game_request(game_id))

    async def authenticate_async(self, username: str, password: str) -> RpcResult:
        return await asyncio.to_thread(self.authenticate, username, password)

    async def get_games_async(self, game_id: str, *, interceptors: Sequence[Any] = ()) -> RpcResult:
        return await asyncio.to_thread(self.get_games, game_id, interceptors=interceptors)
