from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Union

from gateway.auth.config import GatewayConfig

SESSION_COOKIE_NAME = "SESSION"
FALLBACK_COOKIE_NAME = "FALLBACK"


@dataclass(frozen=True)
class CookieOptions:
    """
    Every attribute the gateway sets on a cookie.

    max_age and expires are independent: browsers honour max_age when both
    are present, so at most one of them is set by the helpers below.
    """

    key: str
    value: str
    max_age: Optional[int] = None  # seconds
    expires: Optional[Union[datetime, int]] = None
    httponly: bool = True  # not readable by browser script
    secure: bool = False
    samesite: str = "lax"
    path: str = "/"

    def as_kwargs(self) -> Dict[str, Any]:
        """Keyword arguments for Starlette's Response.set_cookie."""
        return {
            "key": self.key,
            "value": self.value,
            "max_age": self.max_age,
            "expires": self.expires,
            "httponly": self.httponly,
            "secure": self.secure,
            "samesite": self.samesite,
            "path": self.path,
        }


def session_cookie(cfg: GatewayConfig, value: str) -> CookieOptions:
    return CookieOptions(
        key=SESSION_COOKIE_NAME,
        value=value,
        max_age=cfg.session_ttl_seconds,
        secure=cfg.cookie_secure,
    )


def fallback_cookie(cfg: GatewayConfig, value: str, *, now: Optional[datetime] = None) -> CookieOptions:
    """
    Marker cookie set when the fallback store issued the session.

    Its expiry is the moment of creation, so browsers drop it straight away.
    """
    issued_at = now or datetime.now(timezone.utc)
    return CookieOptions(
        key=FALLBACK_COOKIE_NAME,
        value=value,
        expires=issued_at,
        secure=cfg.cookie_secure,
    )


def session_token_from_cookies(cookies: Dict[str, str]) -> Optional[str]:
    value = (cookies.get(SESSION_COOKIE_NAME) or "").strip()
    return value or None
