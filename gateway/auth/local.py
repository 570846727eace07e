from __future__ import annotations

import base64
import hashlib
import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional

from gateway.auth.models import CredentialRecord

logger = logging.getLogger(__name__)

FALLBACK_TOKEN_PREFIX = "FAKETOKEN"


class CredentialStoreError(RuntimeError):
    """The fallback credential table is missing, unreadable or malformed."""


def insecure_dev_token(username: str, password: str) -> str:
    """
    Derive the backend's development token for a user.

    Mirrors how the backend's dev-user table issues tokens: base64 of
    sha256("<name>:<password>"). Used only for records that carry no token.
    """
    digest = hashlib.sha256(f"{username}:{password}".encode("utf-8")).digest()
    return base64.b64encode(digest).decode("ascii")


def _records_from_payload(payload: Any) -> Dict[str, CredentialRecord]:
    records: Dict[str, CredentialRecord] = {}
    if isinstance(payload, dict):
        # {"alice": {"password": "...", "token": "..."}}
        for username, entry in payload.items():
            if not isinstance(entry, dict):
                raise CredentialStoreError(f"Invalid credential entry for {username!r}")
            password = str(entry.get("password") or "")
            token = str(entry.get("token") or "") or insecure_dev_token(str(username), password)
            records[str(username)] = CredentialRecord(username=str(username), password=password, token=token)
        return records
    if isinstance(payload, list):
        # Backend dev-user format: [{"Name": "...", "Password": "..."}]
        for entry in payload:
            if not isinstance(entry, dict):
                raise CredentialStoreError("Invalid credential entry in list")
            username = str(entry.get("Name") or entry.get("name") or "")
            if not username:
                continue
            password = str(entry.get("Password") or entry.get("password") or "")
            token = str(entry.get("Token") or entry.get("token") or "") or insecure_dev_token(username, password)
            records[username] = CredentialRecord(username=username, password=password, token=token)
        return records
    raise CredentialStoreError("Credential table must be a JSON object or list")


class CredentialStore:
    """
    File-backed fallback credential table.

    The file is read on every lookup (no cache), so edits on disk apply to the
    next login attempt. The read is synchronous.
    """

    def __init__(self, path: str | Path):
        self.path = Path(path)

    def load(self) -> Dict[str, CredentialRecord]:
        """
        Read and parse the credential table.

        Raises:
            CredentialStoreError: If the file cannot be read or parsed
        """
        try:
            raw = self.path.read_text(encoding="utf-8")
        except OSError as e:
            raise CredentialStoreError(f"Cannot read credential table {self.path}: {e}") from e
        try:
            payload = json.loads(raw)
        except ValueError as e:
            raise CredentialStoreError(f"Malformed credential table {self.path}: {e}") from e
        records = _records_from_payload(payload)
        logger.debug("Loaded %d fallback credential(s) from %s", len(records), self.path)
        return records

    def lookup(self, username: str, password: str) -> Optional[CredentialRecord]:
        """
        Find the record for username if password matches exactly.

        Args:
            username: Username (table key)
            password: Plain text password

        Returns:
            CredentialRecord on match, None for unknown user or wrong password
        """
        record = self.load().get(username)
        if record is None:
            return None
        # Plain equality: the table stores plaintext passwords.
        if record.password != password:
            return None
        return record

    def fallback_token(self, record: CredentialRecord) -> str:
        return FALLBACK_TOKEN_PREFIX + record.token
