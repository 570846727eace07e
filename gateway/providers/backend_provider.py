"""HTTP client for the Boardbots backend (session validation)."""

from __future__ import annotations

from typing import Dict, Optional

import requests

from gateway.auth.config import GatewayConfig

VALIDATE_PATH = "/auth/validate"


def backend_headers(cfg: GatewayConfig, session_token: Optional[str]) -> Dict[str, str]:
    """Default headers for every call to the backend HTTP API."""
    return {
        "Content-Type": "application/json",
        "Authorization": f"Bearer {session_token or ''}",
        "X-Client-Id": cfg.client_id,
    }


def validate_session(cfg: GatewayConfig, session_token: str) -> int:
    """
    Ask the backend whether a session token is still valid.

    Args:
        cfg: Gateway configuration (backend URL, client id, timeout)
        session_token: Opaque token from the SESSION cookie

    Returns:
        HTTP status code of the validation response

    Raises:
        requests.RequestException: On network errors and timeouts
    """
    url = f"{cfg.backend_url}{VALIDATE_PATH}"
    r = requests.post(url, headers=backend_headers(cfg, session_token), timeout=cfg.http_timeout_seconds)
    return r.status_code
