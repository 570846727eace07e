from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Tuple

DEV_MODES = ("development", "dev")


@dataclass(frozen=True)
class GatewayConfig:
    # Backend endpoints
    rpc_address: str  # gRPC host:port of the Boardbots service
    backend_url: str  # HTTP base URL used for session validation
    client_id: str  # Sent as X-Client-Id on every backend HTTP call
    rpc_tls: bool  # Opt-in secure transport; insecure is the default everywhere

    # Fallback credential table (JSON file)
    dev_users_file: str

    # Deployment mode: "development"/"dev" enables the login form
    env: str

    # Session configuration
    session_ttl_seconds: int
    cookie_secure: bool

    # Timeouts (seconds)
    rpc_timeout_seconds: float
    http_timeout_seconds: float

    # Routing
    public_prefixes: Tuple[str, ...] = ("/public", "/healthz")
    auth_prefix: str = "/auth"
    login_path: str = "/auth/login"

    @property
    def dev_mode(self) -> bool:
        return self.env in DEV_MODES


def _parse_bool(value: str) -> bool | None:
    v = (value or "").strip().lower()
    if v in ("1", "true", "yes", "on"):
        return True
    if v in ("0", "false", "no", "off"):
        return False
    return None


def _parse_seconds(name: str, default: float, *, lo: float, hi: float) -> float:
    raw = (os.getenv(name, "") or "").strip()
    try:
        value = float(raw) if raw else default
    except ValueError:
        value = default
    return max(lo, min(hi, value))


@lru_cache(maxsize=1)
def load_gateway_config() -> GatewayConfig:
    """
    Load gateway configuration from environment variables.

    BOARDBOTS_ADDRESS, BACKEND and CLIENT_ID point at the backend service.
    DEV_USERS_FILE names the fallback credential table.
    """
    backend_url = (os.getenv("BACKEND", "") or "").strip().rstrip("/") or "http://localhost:8080"

    cookie_secure = _parse_bool(os.getenv("GATEWAY_COOKIE_SECURE", ""))
    if cookie_secure is None:
        # Default: secure cookies when the backend is served over https.
        cookie_secure = backend_url.startswith("https://")

    ttl = int(_parse_seconds("GATEWAY_SESSION_TTL_SECONDS", 900, lo=60, hi=86400))  # 15m default

    return GatewayConfig(
        rpc_address=(os.getenv("BOARDBOTS_ADDRESS", "") or "").strip() or "localhost:8081",
        backend_url=backend_url,
        client_id=(os.getenv("CLIENT_ID", "") or "").strip() or "IN-DEVELOPMENT",
        rpc_tls=bool(_parse_bool(os.getenv("BOARDBOTS_TLS", ""))),
        dev_users_file=(os.getenv("DEV_USERS_FILE", "") or "").strip() or "dev_users.json",
        env=(os.getenv("GATEWAY_ENV", "") or "production").strip().lower(),
        session_ttl_seconds=ttl,
        cookie_secure=cookie_secure,
        rpc_timeout_seconds=_parse_seconds("GATEWAY_RPC_TIMEOUT_SECONDS", 10.0, lo=0.5, hi=300.0),
        http_timeout_seconds=_parse_seconds("GATEWAY_HTTP_TIMEOUT_SECONDS", 10.0, lo=0.5, hi=300.0),
    )
