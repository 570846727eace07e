from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional


@dataclass(frozen=True)
class CredentialRecord:
    """One entry of the fallback credential table."""

    username: str
    password: str  # compared verbatim (no hashing)
    token: str  # combined with FALLBACK_TOKEN_PREFIX to form the session token


@dataclass(frozen=True)
class IssuedToken:
    """Session token issued by a successful login."""

    value: str
    source: str  # rpc|fallback

    @property
    def from_fallback(self) -> bool:
        return self.source == "fallback"


class GateAction(str, Enum):
    ALLOW = "allow"
    REDIRECT = "redirect"
    DENY = "deny"


@dataclass(frozen=True)
class GateDecision:
    action: GateAction
    target: Optional[str] = None  # only set for REDIRECT

    @classmethod
    def allow(cls) -> "GateDecision":
        return cls(GateAction.ALLOW)

    @classmethod
    def redirect(cls, target: str) -> "GateDecision":
        return cls(GateAction.REDIRECT, target)

    @classmethod
    def deny(cls) -> "GateDecision":
        return cls(GateAction.DENY)
