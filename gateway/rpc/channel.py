from __future__ import annotations

import logging
import threading
from typing import Optional

import grpc

from gateway.auth.config import GatewayConfig

logger = logging.getLogger(__name__)


def new_channel(cfg: GatewayConfig) -> grpc.Channel:
    if cfg.rpc_tls:
        return grpc.secure_channel(cfg.rpc_address, grpc.ssl_channel_credentials())
    if not cfg.dev_mode:
        # TODO: default to TLS outside development once the backend serves it.
        logger.warning("Using insecure gRPC transport to %s outside development mode", cfg.rpc_address)
    return grpc.insecure_channel(cfg.rpc_address)


class RpcChannel:
    """
    Lazily built, shared connection to the Boardbots service.

    The first get() builds the channel under a lock; every later call returns
    the same object. There is no close: the channel lives as long as the process.
    """

    def __init__(self, cfg: GatewayConfig):
        self.cfg = cfg
        self._lock = threading.Lock()
        self._channel: Optional[grpc.Channel] = None

    def get(self) -> grpc.Channel:
        channel = self._channel
        if channel is not None:
            return channel
        with self._lock:
            if self._channel is None:
                logger.info("Opening gRPC channel to %s (tls=%s)", self.cfg.rpc_address, self.cfg.rpc_tls)
                self._channel = new_channel(self.cfg)
            return self._channel
