"""Transport implementations for the TW NHI IC card client."""

from .base import BaseSocket, BaseSocketTransport
from .http_async import HttpTransport
from .websocket_async import WebSocketTransport
from .mock import MockSocket, MockSocketTransport

__all__ = [
    'BaseSocket',
    'BaseSocketTransport',
    'HttpTransport',
    'WebSocketTransport',
    'MockSocket',
    'MockSocketTransport'
]
