# tw_nhi_icc/core/service.py

import logging
from typing import Any, List, Optional, Union

import aiohttp

from tw_nhi_icc.core.channel import DEFAULT_INTERVAL, ErrorHandler, LiveUpdateChannel, RetryPolicy, UpdateCallback
from tw_nhi_icc.core.endpoint import DEFAULT_URL_PREFIX, ServiceEndpoint
from tw_nhi_icc.core.exceptions import ResponseError
from tw_nhi_icc.core.models import CardRecord, VersionInfo, map_card_list
from tw_nhi_icc.transport.base import BaseSocketTransport
from tw_nhi_icc.transport.http_async import HttpTransport
from tw_nhi_icc.transport.websocket_async import WebSocketTransport

logger = logging.getLogger(__name__)

DEFAULT_VERSION_TIMEOUT = 5000 # Milliseconds
DEFAULT_CARD_LIST_TIMEOUT = 15000 # Milliseconds


class TWNHIICCService:
    """
    Client for the TW NHI IC Card Service.

    Provides one-shot queries (version, card list) over HTTP and a live,
    auto-reconnecting card list subscription over WebSocket. Remember to call
    open_websocket() before using the WebSocket features, and
    close_websocket() (or use ``async with``) to release them.
    """

    def __init__(self, url_prefix: Union[str, ServiceEndpoint] = DEFAULT_URL_PREFIX,
                 session: Optional[aiohttp.ClientSession] = None,
                 http_transport: Optional[HttpTransport] = None,
                 socket_transport: Optional[BaseSocketTransport] = None,
                 error_handler: Optional[ErrorHandler] = None):
        """
        Initializes the service client.

        Args:
            url_prefix: Base address of the service, or a prebuilt ServiceEndpoint.
                        Default: ``http://127.0.0.1:12345``
            session: Optional aiohttp session shared by HTTP queries. Ignored when
                     `http_transport` is given.
            http_transport: HTTP request executor. Defaults to HttpTransport(session).
            socket_transport: WebSocket capability. Defaults to WebSocketTransport().
            error_handler: Receives failures raised by the WebSocket hooks.
                           Defaults to logging them.

        Raises:
            ValueError: If `url_prefix` is not an absolute URL.
        """
        if isinstance(url_prefix, ServiceEndpoint):
            self._endpoint = url_prefix
        else:
            self._endpoint = ServiceEndpoint(str(url_prefix))

        self._http = http_transport if http_transport is not None else HttpTransport(session)
        self._channel = LiveUpdateChannel(
            endpoint=self._endpoint,
            transport=socket_transport if socket_transport is not None else WebSocketTransport(),
            error_handler=error_handler,
        )

        logger.debug(f"TWNHIICCService initialized for {self._endpoint.url_prefix}")

    @property
    def url_prefix(self) -> str:
        return self._endpoint.url_prefix

    @property
    def endpoint(self) -> ServiceEndpoint:
        return self._endpoint

    @property
    def channel(self) -> LiveUpdateChannel:
        return self._channel

    # --- HTTP Queries ---

    async def get_version(self, timeout: Optional[float] = DEFAULT_VERSION_TIMEOUT) -> VersionInfo:
        """
        Gets the version of the TW NHI IC Card Service.

        Args:
            timeout: Timeout in milliseconds. Default: 5000

        Raises:
            NetworkError: The service could not be reached.
            TimeoutError: The timeout elapsed.
            ResponseError: The service answered with an error.
        """
        data = await self._http.fetch_json(self._endpoint.version_url, timeout=timeout)
        if not isinstance(data, dict):
            raise ResponseError(200, message=f"Unexpected version payload: {data!r}")
        return VersionInfo.from_wire(data)

    async def get_card_list(self, timeout: Optional[float] = DEFAULT_CARD_LIST_TIMEOUT) -> List[CardRecord]:
        """
        Gets the NHI cards currently inserted, in the order reported by the service.

        Args:
            timeout: Timeout in milliseconds. Default: 15000

        Raises:
            NetworkError: The service could not be reached.
            TimeoutError: The timeout elapsed.
            ResponseError: The service answered with an error or a malformed list.
        """
        data = await self._http.fetch_json(self._endpoint.card_list_url, timeout=timeout)
        try:
            return map_card_list(data)
        except (TypeError, ValueError, KeyError, OverflowError, OSError) as e:
            logger.error(f"Malformed card list from {self._endpoint.card_list_url}: {e}")
            raise ResponseError(200, message=f"Malformed card list: {e}") from e

    # --- WebSocket ---

    @property
    def on_websocket_retry(self) -> Optional[RetryPolicy]:
        """Called before each reconnect attempt. When it returns False, reconnecting stops."""
        return self._channel.on_retry

    @on_websocket_retry.setter
    def on_websocket_retry(self, callback: Optional[RetryPolicy]) -> None:
        self._channel.on_retry = callback

    @property
    def on_websocket_update(self) -> Optional[UpdateCallback]:
        """Called with the card list every time the service pushes one."""
        return self._channel.on_update

    @on_websocket_update.setter
    def on_websocket_update(self, callback: Optional[UpdateCallback]) -> None:
        self._channel.on_update = callback

    async def open_websocket(self, interval: Optional[float] = DEFAULT_INTERVAL) -> None:
        """
        Opens the WebSocket.

        Args:
            interval: Seconds between pushes of the card list. Default: 3

        Raises:
            NetworkError: The WebSocket could not be opened.
        """
        await self._channel.open(interval)

    def is_websocket_running(self) -> bool:
        """Returns True if the WebSocket is open."""
        return self._channel.is_running()

    async def close_websocket(self) -> None:
        """Closes the WebSocket."""
        await self._channel.close()

    async def set_websocket_interval(self, interval: Optional[float]) -> bool:
        """
        Sets the seconds between pushes of the card list.

        Returns:
            True if the setting was sent.
        """
        return await self._channel.set_interval(interval)

    async def __aenter__(self) -> "TWNHIICCService":
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close_websocket()
