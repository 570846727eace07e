from __future__ import annotations

import collections
from typing import Any, Callable, List, Tuple

import grpc

TOKEN_METADATA_KEY = "token"
TOKEN_PREFIX = "druid"


class _ClientCallDetails(
    collections.namedtuple(
        "_ClientCallDetails",
        ("method", "timeout", "metadata", "credentials", "wait_for_ready", "compression"),
    ),
    grpc.ClientCallDetails,
):
    pass


class MetadataInterceptor(grpc.UnaryUnaryClientInterceptor):
    """
    Adds `token: <prefix><value>` to the metadata of each call it wraps.

    Built per call site and applied with grpc.intercept_channel; it is never
    installed on the shared channel itself.
    """

    def __init__(self, token: str, *, prefix: str = TOKEN_PREFIX, key: str = TOKEN_METADATA_KEY):
        self.key = key
        self.value = f"{prefix}{token}"

    def intercept_unary_unary(self, continuation: Callable[..., Any], client_call_details, request):
        metadata: List[Tuple[str, str]] = list(client_call_details.metadata or [])
        metadata.append((self.key, self.value))
        details = _ClientCallDetails(
            client_call_details.method,
            client_call_details.timeout,
            metadata,
            client_call_details.credentials,
            getattr(client_call_details, "wait_for_ready", None),
            getattr(client_call_details, "compression", None),
        )
        return continuation(details, request)
