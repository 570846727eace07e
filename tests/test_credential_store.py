from __future__ import annotations

import base64
import hashlib
import json

import pytest

from gateway.auth.local import (
    FALLBACK_TOKEN_PREFIX,
    CredentialStore,
    CredentialStoreError,
    insecure_dev_token,
)


def _write(path, payload) -> None:
    path.write_text(json.dumps(payload), encoding="utf-8")


def test_lookup_exact_match(tmp_path) -> None:
    path = tmp_path / "users.json"
    _write(path, {"alice": {"password": "pw1", "token": "T1"}})
    store = CredentialStore(path)

    record = store.lookup("alice", "pw1")
    assert record is not None
    assert record.username == "alice"
    assert store.fallback_token(record) == "FAKETOKEN" + "T1"


def test_lookup_wrong_password_and_unknown_user(tmp_path) -> None:
    path = tmp_path / "users.json"
    _write(path, {"alice": {"password": "pw1", "token": "T1"}})
    store = CredentialStore(path)

    assert store.lookup("alice", "wrong") is None
    assert store.lookup("bob", "x") is None


def test_password_comparison_is_plain_equality(tmp_path) -> None:
    """Passwords are stored and compared as plaintext (no hashing, no trimming)."""
    path = tmp_path / "users.json"
    _write(path, {"alice": {"password": "pw1", "token": "T1"}})
    store = CredentialStore(path)

    assert store.lookup("alice", "pw1 ") is None
    assert store.lookup("alice", "PW1") is None


def test_table_is_reread_on_every_lookup(tmp_path) -> None:
    path = tmp_path / "users.json"
    _write(path, {"alice": {"password": "pw1", "token": "T1"}})
    store = CredentialStore(path)
    assert store.lookup("alice", "pw1") is not None

    _write(path, {"alice": {"password": "rotated", "token": "T2"}})
    assert store.lookup("alice", "pw1") is None
    record = store.lookup("alice", "rotated")
    assert record is not None
    assert store.fallback_token(record) == FALLBACK_TOKEN_PREFIX + "T2"


def test_backend_dev_user_list_format(tmp_path) -> None:
    """The backend's dev-user file ([{Name, Password}]) is accepted; tokens are derived."""
    path = tmp_path / "dev_users.json"
    _write(path, [{"Name": "carol", "Password": "secret"}])
    store = CredentialStore(path)

    record = store.lookup("carol", "secret")
    assert record is not None
    expected = base64.b64encode(hashlib.sha256(b"carol:secret").digest()).decode("ascii")
    assert record.token == expected
    assert insecure_dev_token("carol", "secret") == expected


def test_missing_table_raises(tmp_path) -> None:
    store = CredentialStore(tmp_path / "does-not-exist.json")
    with pytest.raises(CredentialStoreError):
        store.lookup("alice", "pw1")


def test_malformed_table_raises(tmp_path) -> None:
    path = tmp_path / "users.json"
    path.write_text("{not json", encoding="utf-8")
    with pytest.raises(CredentialStoreError):
        CredentialStore(path).lookup("alice", "pw1")

    _write(path, "just a string")
    with pytest.raises(CredentialStoreError):
        CredentialStore(path).lookup("alice", "pw1")
