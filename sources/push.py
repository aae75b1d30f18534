from __future__ import annotations

import logging
from typing import Any, Callable, Optional

import socketio
from socketio.exceptions import ConnectionError as SocketIOConnectionError

logger = logging.getLogger(__name__)

PushHandler = Callable[[Any], None]


class PushChannelError(RuntimeError):
    """Raised when the push channel cannot be opened."""


class PushChannel:
    """Socket.IO subscription delivering one reading per event."""

    def __init__(
        self,
        url: str,
        event_name: str,
        timeout: float = 10.0,
        client_factory: Callable[[], Any] = socketio.Client,
    ) -> None:
        self.url = url
        self.event_name = event_name
        self.timeout = timeout
        self._client_factory = client_factory
        self._client: Optional[Any] = None

    @property
    def is_open(self) -> bool:
        return self._client is not None

    def open(self, token: Optional[str], handler: PushHandler) -> None:
        if self._client is not None:
            return

        client = self._client_factory()
        client.on("connect", self._on_connect)
        client.on("disconnect", self._on_disconnect)
        client.on(self.event_name, handler)

        auth = {"token": f"Bearer {token}"} if token else None
        try:
            client.connect(self.url, auth=auth, wait_timeout=self.timeout)
        except SocketIOConnectionError as exc:
            raise PushChannelError(str(exc)) from exc
        self._client = client

    def close(self) -> None:
        client, self._client = self._client, None
        if client is not None:
            client.disconnect()

    def _on_connect(self) -> None:
        logger.info("Push channel connected", extra={"url": self.url})

    def _on_disconnect(self, *_args: Any) -> None:
        logger.info("Push channel disconnected", extra={"url": self.url})
