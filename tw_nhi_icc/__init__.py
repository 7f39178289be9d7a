"""TW NHI IC Card - Asynchronous client for the TW NHI IC Card Service (Taiwan NHI smart cards)."""

from .core import (
    TWNHIICCService,
    LiveUpdateChannel,
    ServiceEndpoint,
    CardRecord,
    Sex,
    VersionInfo,
    ConnectionState,
    NhiIccError,
    NetworkError,
    TimeoutError,
    ResponseError
)
from .transport import (
    HttpTransport,
    WebSocketTransport,
    MockSocketTransport
)

__version__ = '0.1.1'

__all__ = [
    # Core components
    'TWNHIICCService',
    'LiveUpdateChannel',
    'ServiceEndpoint',
    'ConnectionState',
    # Records
    'CardRecord',
    'Sex',
    'VersionInfo',
    # Exceptions
    'NhiIccError',
    'NetworkError',
    'TimeoutError',
    'ResponseError',
    # Transport
    'HttpTransport',
    'WebSocketTransport',
    'MockSocketTransport',
]
