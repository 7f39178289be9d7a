# tw_nhi_icc/core/channel.py

import asyncio
import inspect
import json
import logging
import time
from typing import Any, Awaitable, Callable, List, Optional, Union

from tw_nhi_icc.core.endpoint import ServiceEndpoint, clamp_interval
from tw_nhi_icc.core.exceptions import NetworkError
from tw_nhi_icc.core.models import CardRecord, map_card_list
from tw_nhi_icc.core.status import ConnectionState
from tw_nhi_icc.transport.base import BaseSocket, BaseSocketTransport, NORMAL_CLOSURE

logger = logging.getLogger(__name__)

DEFAULT_INTERVAL = 3 # Seconds between pushes requested from the service
RETRY_INTERVAL = 1.0 # Minimum seconds between two reconnect attempts

# Callback type hints. Each hook may be a plain function or a coroutine function.
RetryPolicy = Callable[[], Union[Optional[bool], Awaitable[Optional[bool]]]]
UpdateCallback = Callable[[List[CardRecord]], Union[None, Awaitable[None]]]
ErrorHandler = Callable[[str, Exception], None]


def log_error(context: str, error: Exception) -> None:
    """Default error handler: report the failure through the module logger."""
    logger.error(f"{context}: {error}", exc_info=error)


async def _call_hook(hook: Callable[..., Any], *args: Any) -> Any:
    result = hook(*args)
    if inspect.isawaitable(result):
        result = await result
    return result


class LiveUpdateChannel:
    """
    A single, auto-reconnecting WebSocket subscription to card list updates.

    State machine::

        CLOSED -> CONNECTING -> OPEN -> (RETRYING -> OPEN)* -> CLOSED

    The first connection attempt made by open() is never retried; its failure
    is raised to the caller. Once a connection has been OPEN, any drop starts
    the reconnect sequence, which runs until it succeeds, the retry policy
    returns False, or close() is called. Reconnect attempts are spaced at least
    RETRY_INTERVAL apart.

    close() does not cancel anything. It bumps a generation counter, and every
    suspension point of the reconnect sequence compares its own generation
    with the current one before acting; stale work is discarded.
    """

    def __init__(self, endpoint: ServiceEndpoint, transport: BaseSocketTransport,
                 error_handler: Optional[ErrorHandler] = None,
                 sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
                 clock: Callable[[], float] = time.monotonic):
        """
        Args:
            endpoint: Addresses of the card service.
            transport: Capability used to open WebSocket connections.
            error_handler: Receives failures raised by the hooks or caused by
                           unreadable messages. Defaults to logging them.
            sleep: Delay primitive used between reconnect attempts.
            clock: Monotonic clock (seconds) used to measure attempt spacing.
        """
        self._endpoint = endpoint
        self._transport = transport
        self._error_handler = error_handler or log_error
        self._sleep = sleep
        self._clock = clock

        self._state = ConnectionState.CLOSED
        self._socket: Optional[BaseSocket] = None
        self._interval: Optional[int] = None
        self._generation = 0
        self._supervisor_task: Optional[asyncio.Task] = None

        # Returning False (not None) from on_retry stops reconnecting
        self.on_retry: Optional[RetryPolicy] = None
        self.on_update: Optional[UpdateCallback] = None

    @property
    def state(self) -> ConnectionState:
        return self._state

    @property
    def interval(self) -> Optional[int]:
        """Push interval (seconds) used for the next (re)connection. None lets the service decide."""
        return self._interval

    def is_running(self) -> bool:
        """Returns True if the channel is currently OPEN."""
        return self._state == ConnectionState.OPEN

    def _is_stale(self, generation: int) -> bool:
        return generation != self._generation or self._state == ConnectionState.CLOSED

    def _set_state(self, new_state: ConnectionState) -> None:
        if self._state != new_state:
            logger.info(f"Live update channel state changed: {self._state.name} -> {new_state.name}")
            self._state = new_state

    async def open(self, interval: Optional[float] = DEFAULT_INTERVAL) -> None:
        """
        Opens the WebSocket. Does nothing unless the channel is CLOSED.

        Args:
            interval: Seconds between pushes. Negative values become 0, fractions
                      are floored. None omits the parameter so the service
                      default applies.

        Raises:
            NetworkError: The connection could not be established.
            TimeoutError: The opening handshake timed out.
        """
        if self._state != ConnectionState.CLOSED:
            logger.warning(f"Live update channel already {self._state.name}, open() ignored.")
            return

        self._interval = clamp_interval(interval)
        self._generation += 1
        generation = self._generation
        self._set_state(ConnectionState.CONNECTING)

        url = self._endpoint.live_update_url(self._interval)
        try:
            socket = await self._transport.connect(url)
        except NetworkError:
            if not self._is_stale(generation):
                self._set_state(ConnectionState.CLOSED)
            raise

        if self._is_stale(generation):
            logger.info(f"Channel closed while connecting to {url}, discarding the connection.")
            await socket.close(NORMAL_CLOSURE)
            return

        self._socket = socket
        self._set_state(ConnectionState.OPEN)
        self._supervisor_task = asyncio.create_task(self._supervise(socket, generation))

    async def close(self) -> None:
        """Closes the WebSocket and stops any reconnect sequence. Safe to call repeatedly."""
        if self._state == ConnectionState.CLOSED:
            return

        self._generation += 1
        self._set_state(ConnectionState.CLOSED)
        socket, self._socket = self._socket, None
        if socket is not None:
            await socket.close(NORMAL_CLOSURE)

    async def set_interval(self, interval: Optional[float]) -> bool:
        """
        Changes the push interval of the live connection.

        Args:
            interval: New interval in seconds, clamped like open(). None clears
                      the stored interval without contacting the service.

        Returns:
            True if the new interval was sent to the service. False when the
            channel is not OPEN or the send failed; the stored interval is
            then left unchanged.
        """
        if self._state != ConnectionState.OPEN or self._socket is None:
            return False

        if interval is None:
            self._interval = None
            return False

        interval = clamp_interval(interval)
        try:
            await self._socket.send(str(interval))
        except NetworkError as e:
            # The drop is picked up by the supervisor
            logger.warning(f"Cannot send push interval {interval}s: {e}")
            return False
        self._interval = interval
        logger.debug(f"Push interval set to {interval}s")
        return True

    # --- Supervisor ---

    async def _supervise(self, socket: BaseSocket, generation: int) -> None:
        """Reads the current socket; reconnects whenever it drops."""
        try:
            while True:
                await self._receive_loop(socket, generation)
                if self._is_stale(generation):
                    return

                logger.warning("Live update connection dropped.")
                self._socket = None
                self._set_state(ConnectionState.RETRYING)

                reconnected = await self._reconnect(generation)
                if reconnected is None:
                    return
                socket = reconnected
        except Exception as e:
            # A raising error handler or a state machine bug, not a network issue
            logger.exception(f"Live update supervisor crashed: {e}")
            if not self._is_stale(generation):
                self._generation += 1
                self._set_state(ConnectionState.CLOSED)
                current, self._socket = self._socket, None
                if current is not None:
                    await current.close(NORMAL_CLOSURE)

    async def _receive_loop(self, socket: BaseSocket, generation: int) -> None:
        while True:
            try:
                message = await socket.receive()
            except Exception as e:
                logger.error(f"Error receiving from live update connection: {e}")
                return

            if message is None or self._is_stale(generation):
                return
            await self._dispatch_update(message)

    async def _dispatch_update(self, message: str) -> None:
        callback = self.on_update
        if callback is None:
            return

        try:
            cards = map_card_list(json.loads(message))
        except (ValueError, TypeError, KeyError, OverflowError, OSError) as e:
            self._error_handler("Cannot parse card list update", e)
            return

        try:
            await _call_hook(callback, cards)
        except Exception as e:
            self._error_handler("Error in live update callback", e)

    async def _reconnect(self, generation: int) -> Optional[BaseSocket]:
        """
        Retries until a connection is OPEN again.

        Returns:
            The new socket, or None when the sequence was vetoed or the channel
            was closed meanwhile.
        """
        while True:
            if self._is_stale(generation):
                return None

            started = self._clock()

            policy = self.on_retry
            if policy is not None:
                try:
                    if await _call_hook(policy) is False:
                        if not self._is_stale(generation):
                            logger.warning("Reconnect vetoed by the retry policy.")
                            self._generation += 1
                            self._set_state(ConnectionState.CLOSED)
                        return None
                except Exception as e:
                    self._error_handler("Error in retry policy", e)

            elapsed = self._clock() - started
            if elapsed < RETRY_INTERVAL:
                await self._sleep(RETRY_INTERVAL - elapsed)

            if self._is_stale(generation):
                return None

            url = self._endpoint.live_update_url(self._interval)
            logger.debug(f"Trying to reconnect {url}...")
            try:
                socket = await self._transport.connect(url)
            except NetworkError as e:
                logger.debug(f"Reconnect to {url} failed: {e}")
                continue

            if self._is_stale(generation):
                logger.info(f"Channel closed while reconnecting to {url}, discarding the connection.")
                await socket.close(NORMAL_CLOSURE)
                return None

            self._socket = socket
            self._set_state(ConnectionState.OPEN)
            logger.info(f"Reconnected to {url}")
            return socket
