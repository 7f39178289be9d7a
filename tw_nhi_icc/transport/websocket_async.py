# tw_nhi_icc/transport/websocket_async.py

import asyncio
import logging
from typing import Optional

import websockets

from tw_nhi_icc.core.exceptions import NetworkError, TimeoutError
from tw_nhi_icc.transport.base import BaseSocket, BaseSocketTransport, NORMAL_CLOSURE

logger = logging.getLogger(__name__)

DEFAULT_OPEN_TIMEOUT = 10.0 # Seconds allowed for the opening handshake


class WebSocketConnection(BaseSocket):
    """A BaseSocket backed by a ``websockets`` client connection."""

    def __init__(self, connection, url: str):
        self._connection = connection
        self._url = url

    @property
    def url(self) -> str:
        return self._url

    async def send(self, message: str) -> None:
        try:
            await self._connection.send(message)
        except websockets.ConnectionClosed as e:
            raise NetworkError(f"Cannot send to {self._url}: connection closed", original_exception=e) from e
        logger.debug(f"WebSocket sent to {self._url}: {message}")

    async def receive(self) -> Optional[str]:
        try:
            message = await self._connection.recv()
        except websockets.ConnectionClosed as e:
            logger.info(f"WebSocket {self._url} closed: {e}")
            return None

        if isinstance(message, bytes):
            message = message.decode("utf-8")
        return message

    async def close(self, code: int = NORMAL_CLOSURE) -> None:
        try:
            await self._connection.close(code=code)
        except Exception as e:
            # Continue anyway, the connection is unusable either way
            logger.error(f"Error closing WebSocket {self._url}: {e}")


class WebSocketTransport(BaseSocketTransport):
    """Opens WebSocket connections with the ``websockets`` library."""

    def __init__(self, open_timeout: Optional[float] = DEFAULT_OPEN_TIMEOUT):
        """
        Args:
            open_timeout: Seconds allowed for the TCP connect and opening
                          handshake. None waits indefinitely.
        """
        self._open_timeout = open_timeout

    async def connect(self, url: str) -> WebSocketConnection:
        logger.info(f"Connecting to {url}...")
        try:
            connection = await websockets.connect(url, open_timeout=self._open_timeout)
        except asyncio.TimeoutError as e:
            logger.error(f"Timeout during WebSocket handshake with {url}")
            raise TimeoutError(f"Timed out connecting to {url}") from e
        except (OSError, websockets.WebSocketException) as e:
            # OSError: refused / unreachable / DNS. WebSocketException: bad URI, rejected handshake.
            logger.error(f"Cannot connect to {url}: {e}")
            raise NetworkError(f"Cannot connect to {url}", original_exception=e) from e

        logger.info(f"WebSocket connection to {url} established.")
        return WebSocketConnection(connection, url)
