"""Core components of the TW NHI IC card client."""

from .service import TWNHIICCService
from .channel import LiveUpdateChannel
from .endpoint import ServiceEndpoint
from .models import CardRecord, Sex, VersionInfo
from .status import ConnectionState
from .exceptions import (
    NhiIccError,
    NetworkError,
    TimeoutError,
    ResponseError
)

__all__ = [
    'TWNHIICCService',
    'LiveUpdateChannel',
    'ServiceEndpoint',
    'CardRecord',
    'Sex',
    'VersionInfo',
    'ConnectionState',
    'NhiIccError',
    'NetworkError',
    'TimeoutError',
    'ResponseError'
]
