"""WebSocket transport for Twitch chat (IRC over WebSocket)."""

from __future__ import annotations

import asyncio
import logging
from typing import Protocol

import websockets
from websockets.exceptions import ConnectionClosed, ConnectionClosedOK, WebSocketException

from ..constants import IRC_CONNECT_TIMEOUT, TWITCH_IRC_WS_URL
from ..errors.internal import NetworkError
from ..logs.logger import logger


class ChatTransport(Protocol):
    """Text frame transport owned by the connection manager."""

    @property
    def closed(self) -> bool:
        """True once the transport is closed by either side."""
        ...

    async def connect(self) -> None:
        """Open the underlying socket."""
        ...

    async def send(self, line: str) -> None:
        """Send one protocol line."""
        ...

    async def receive(self) -> str | None:
        """Receive the next frame; None on a clean close."""
        ...

    async def close(self) -> None:
        """Close the socket."""
        ...


class WebSocketTransport:
    """Handles WebSocket connection establishment, frame I/O and cleanup.

    Attributes:
        url (str): Chat endpoint.
        ws: Active websockets connection or None.
    """

    def __init__(self, url: str = TWITCH_IRC_WS_URL, connect_timeout: float = IRC_CONNECT_TIMEOUT) -> None:
        self.url = url
        self.connect_timeout = connect_timeout
        self.ws = None
        self._closed = True

    @property
    def closed(self) -> bool:
        return self._closed

    async def connect(self) -> None:
        logger.log_event("irc", "socket_connect", level=logging.DEBUG, url=self.url)
        try:
            # IRC PING/PONG is the only keepalive; websockets pings stay off.
            self.ws = await websockets.connect(
                self.url,
                ping_interval=None,
                open_timeout=self.connect_timeout,
            )
        except (OSError, TimeoutError, asyncio.TimeoutError, WebSocketException) as e:
            raise NetworkError(
                f"WebSocket connection to {self.url} failed: {str(e)}",
                data={"url": self.url},
            ) from e
        self._closed = False

    async def send(self, line: str) -> None:
        if self.ws is None or self._closed:
            raise NetworkError("WebSocket not connected", data={"url": self.url})
        try:
            await self.ws.send(line)
        except ConnectionClosed as e:
            self._closed = True
            raise NetworkError(f"WebSocket send failed: {str(e)}") from e

    async def receive(self) -> str | None:
        if self.ws is None or self._closed:
            return None
        try:
            data = await self.ws.recv()
        except ConnectionClosedOK:
            self._closed = True
            return None
        except ConnectionClosed as e:
            self._closed = True
            raise NetworkError(f"WebSocket closed abnormally: {str(e)}") from e
        if isinstance(data, bytes):
            return data.decode("utf-8", errors="replace")
        return data

    async def close(self) -> None:
        ws, self.ws = self.ws, None
        self._closed = True
        if ws is None:
            return
        try:
            await ws.close()
        except (OSError, WebSocketException) as e:
            logger.log_event(
                "irc", "socket_close_error", level=logging.WARNING, error=str(e)
            )


__all__ = ["ChatTransport", "WebSocketTransport"]
