"""
Transport layer for CDP connections.

A transport delivers and receives text frames over one persistent socket.
The protocol client only needs four things from it: connect, send a frame,
iterate over inbound frames and close.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any, AsyncIterator, Optional

import websockets
from websockets.exceptions import ConnectionClosed, InvalidHandshake, InvalidURI

from cdp_capture.config.defaults import (
    DEFAULT_MAX_MESSAGE_SIZE,
    DEFAULT_PING_INTERVAL,
    DEFAULT_PING_TIMEOUT,
)

logger = logging.getLogger(__name__)


class TransportError(Exception):
    """Raised when a transport cannot be opened or used."""


class BaseTransport(ABC):
    """Abstract base class for text-frame transports."""

    @abstractmethod
    async def connect(self) -> None:
        """Open the connection. Returns once it is ready for traffic."""
        ...

    @abstractmethod
    async def send(self, text: str) -> None:
        """Send one text frame."""
        ...

    @abstractmethod
    def __aiter__(self) -> AsyncIterator[str]:
        """Iterate over inbound text frames until the peer closes."""
        ...

    @abstractmethod
    async def close(self) -> None:
        """Close the connection."""
        ...


class WebSocketTransport(BaseTransport):
    """WebSocket transport backed by the ``websockets`` library.

    Example:
        transport = WebSocketTransport("ws://localhost:9222/devtools/browser/xxx")
        await transport.connect()
        await transport.send('{"id": 1, "method": "Browser.getVersion", "params": {}}')
        async for frame in transport:
            print(frame)
    """

    def __init__(
        self,
        ws_url: str,
        *,
        max_size: int = DEFAULT_MAX_MESSAGE_SIZE,
        ping_interval: Optional[float] = DEFAULT_PING_INTERVAL,
        ping_timeout: Optional[float] = DEFAULT_PING_TIMEOUT,
    ) -> None:
        """Initialize WebSocket transport.

        Args:
            ws_url: WebSocket URL to connect to.
            max_size: Maximum inbound frame size in bytes.
            ping_interval: Keepalive ping interval in seconds.
            ping_timeout: Keepalive ping timeout in seconds.
        """
        self._ws_url = ws_url
        self._max_size = max_size
        self._ping_interval = ping_interval
        self._ping_timeout = ping_timeout
        self._ws: Optional[Any] = None

    @property
    def ws_url(self) -> str:
        """Get the WebSocket URL."""
        return self._ws_url

    async def connect(self) -> None:
        if self._ws is not None:
            return

        logger.debug(f"Opening WebSocket: {self._ws_url}")
        try:
            self._ws = await websockets.connect(
                self._ws_url,
                max_size=self._max_size,
                ping_interval=self._ping_interval,
                ping_timeout=self._ping_timeout,
            )
        except (OSError, InvalidURI, InvalidHandshake) as e:
            raise TransportError(f"Cannot open {self._ws_url}: {e}") from e
        logger.debug("WebSocket open")

    async def send(self, text: str) -> None:
        if self._ws is None:
            raise TransportError("WebSocket is not open")
        try:
            await self._ws.send(text)
        except ConnectionClosed as e:
            raise TransportError(f"WebSocket closed while sending: {e}") from e

    async def _frames(self) -> AsyncIterator[str]:
        if self._ws is None:
            return
        try:
            async for frame in self._ws:
                if isinstance(frame, bytes):
                    frame = frame.decode("utf-8")
                yield frame
        except ConnectionClosed as e:
            logger.debug(f"WebSocket closed: {e}")

    def __aiter__(self) -> AsyncIterator[str]:
        return self._frames()

    async def close(self) -> None:
        if self._ws is not None:
            ws, self._ws = self._ws, None
            await ws.close()
            logger.debug("WebSocket closed")
