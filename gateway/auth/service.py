from __future__ import annotations

import logging
from typing import Optional

from gateway.auth.local import CredentialStore
from gateway.auth.models import IssuedToken
from gateway.rpc.client import BoardbotsClient

logger = logging.getLogger(__name__)


class CredentialService:
    """
    Issues session tokens for username/password logins.

    The backend Authenticate RPC is tried first. If it fails or hands back an
    empty token, the local credential table decides.
    """

    def __init__(self, client: BoardbotsClient, store: CredentialStore):
        self.client = client
        self.store = store

    async def authenticate(self, username: str, password: str) -> Optional[IssuedToken]:
        """
        Authenticate a user.

        Args:
            username: Username
            password: Plain text password

        Returns:
            IssuedToken on success, None if both paths reject the credentials

        Raises:
            CredentialStoreError: If the fallback table cannot be read
        """
        result = await self.client.authenticate_async(username, password)
        if result.ok and result.value is not None and result.value.token:
            return IssuedToken(value=result.value.token, source="rpc")

        if result.ok:
            logger.info("Authenticate RPC returned no token for %s; using fallback store", username)
        else:
            logger.info("Authenticate RPC unavailable (%s); using fallback store", result.code or result.error)

        # Synchronous file read on the event loop.
        record = self.store.lookup(username, password)
        if record is None:
            logger.info("Fallback authentication rejected for %s", username)
            return None
        return IssuedToken(value=self.store.fallback_token(record), source="fallback")
