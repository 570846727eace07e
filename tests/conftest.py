"""
Pytest config.

Local imports like `import gateway` rely on the repo root being on sys.path.
When a global `pytest` entrypoint is used that doesn't always happen during
collection, so it is pinned here.
"""

from __future__ import annotations

import json
import sys
from pathlib import Path

import pytest


def _ensure_repo_root_on_syspath() -> None:
    repo_root = Path(__file__).resolve().parents[1]
    repo_root_str = str(repo_root)
    if repo_root_str not in sys.path:
        sys.path.insert(0, repo_root_str)


_ensure_repo_root_on_syspath()

from concurrent import futures  # noqa: E402

import grpc  # noqa: E402

from gateway.auth.config import load_gateway_config  # noqa: E402
from gateway.rpc import messages  # noqa: E402

_GATEWAY_ENV = (
    "BOARDBOTS_ADDRESS",
    "BACKEND",
    "CLIENT_ID",
    "DEV_USERS_FILE",
    "GATEWAY_ENV",
    "BOARDBOTS_TLS",
    "GATEWAY_SESSION_TTL_SECONDS",
    "GATEWAY_COOKIE_SECURE",
    "GATEWAY_RPC_TIMEOUT_SECONDS",
    "GATEWAY_HTTP_TIMEOUT_SECONDS",
)


@pytest.fixture(autouse=True)
def _isolated_gateway_env(monkeypatch: pytest.MonkeyPatch):
    """
    Every test starts from a clean environment and an empty config cache.

    Tests set the variables they care about and call `load_gateway_config.cache_clear()`
    again if they change them after the first load.
    """
    for name in _GATEWAY_ENV:
        monkeypatch.delenv(name, raising=False)
    load_gateway_config.cache_clear()
    yield
    load_gateway_config.cache_clear()


@pytest.fixture
def dev_users_file(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Fallback credential table with a single user, wired in via DEV_USERS_FILE."""
    path = tmp_path / "dev_users.json"
    path.write_text(json.dumps({"alice": {"password": "pw1", "token": "T1"}}), encoding="utf-8")
    monkeypatch.setenv("DEV_USERS_FILE", str(path))
    load_gateway_config.cache_clear()
    return path


class RecordingBoardbotsService(messages.boardbots_pb2_grpc.BoardbotsServiceServicer):
    """In-process Boardbots service that remembers the metadata of every call."""

    def __init__(self):
        self.calls = []

    def GetGames(self, request, context):
        self.calls.append(("GetGames", dict(context.invocation_metadata())))
        resp = messages.GameResponse()
        resp.game_id.value = request.game_id.value
        resp.players.add(player_name="red", barriers=10)
        return resp

    def Authenticate(self, request, context):
        self.calls.append(("Authenticate", dict(context.invocation_metadata())))
        if (request.username, request.password) != ("alice", "pw1"):
            context.abort(grpc.StatusCode.UNAUTHENTICATED, "bad credentials")
        return messages.AuthResponse(token="backend-token")


@pytest.fixture
def boardbots_server(monkeypatch: pytest.MonkeyPatch):
    """Serve RecordingBoardbotsService on an ephemeral local port, wired in via BOARDBOTS_ADDRESS."""
    service = RecordingBoardbotsService()
    server = grpc.server(futures.ThreadPoolExecutor(max_workers=2))
    messages.boardbots_pb2_grpc.add_BoardbotsServiceServicer_to_server(service, server)
    port = server.add_insecure_port("127.0.0.1:0")
    server.start()
    monkeypatch.setenv("BOARDBOTS_ADDRESS", f"127.0.0.1:{port}")
    monkeypatch.setenv("GATEWAY_RPC_TIMEOUT_SECONDS", "5")
    load_gateway_config.cache_clear()
    try:
        yield service
    finally:
        server.stop(None)
