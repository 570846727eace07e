from __future__ import annotations

import asyncio
import logging
from typing import Callable, Optional

from gateway.auth.config import GatewayConfig
from gateway.auth.models import GateDecision
from gateway.providers import backend_provider

logger = logging.getLogger(__name__)


def _under_prefix(path: str, prefix: str) -> bool:
    return path.startswith(prefix)


class SessionGate:
    """
    Per-request session check.

    Public paths pass. A missing cookie redirects to the login page unless the
    request is itself part of the auth flow. A present cookie is only trusted
    once the backend confirms it; every failure denies.
    """

    def __init__(
        self,
        cfg: GatewayConfig,
        validator: Optional[Callable[[GatewayConfig, str], int]] = None,
    ):
        self.cfg = cfg
        self._validate = validator

    def is_public(self, path: str) -> bool:
        return any(_under_prefix(path, p) for p in self.cfg.public_prefixes)

    async def evaluate(self, path: str, session_token: Optional[str]) -> GateDecision:
        if self.is_public(path):
            return GateDecision.allow()

        if not session_token:
            if _under_prefix(path, self.cfg.auth_prefix):
                # Login flow must stay reachable without a session.
                return GateDecision.allow()
            return GateDecision.redirect(self.cfg.login_path)

        try:
            validate = self._validate or backend_provider.validate_session
            status = await asyncio.to_thread(validate, self.cfg, session_token)
        except Exception as e:
            logger.warning("Session validation failed for %s: %s", path, str(e))
            return GateDecision.deny()

        if status == 200:
            return GateDecision.allow()
        logger.info("Session rejected by backend for %s (status=%s)", path, status)
        return GateDecision.deny()
