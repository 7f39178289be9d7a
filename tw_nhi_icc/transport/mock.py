# tw_nhi_icc/transport/mock.py

import asyncio
import logging
from collections import deque
from typing import Callable, List, Optional, Union

from tw_nhi_icc.core.exceptions import NetworkError
from tw_nhi_icc.transport.base import BaseSocket, BaseSocketTransport, NORMAL_CLOSURE

logger = logging.getLogger(__name__)

# A scripted connect() outcome: a socket to hand out, or an exception to raise.
ConnectOutcome = Union["MockSocket", Exception]


class MockSocket(BaseSocket):
    """
    In-memory socket for testing and simulation.

    Inbound messages are queued with feed(); drop() simulates the service
    going away. Messages sent by the client are kept in `sent`.
    """

    def __init__(self, name: str = "Mock"):
        self._name = name
        self._incoming: asyncio.Queue = asyncio.Queue()
        self.sent: List[str] = []
        self.close_code: Optional[int] = None
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    async def send(self, message: str) -> None:
        if self._closed:
            raise NetworkError(f"[{self._name}] Cannot send data: connection closed.")
        logger.debug(f"[{self._name}] Simulating send: {message}")
        self.sent.append(message)

    async def receive(self) -> Optional[str]:
        if self._closed:
            return None
        message = await self._incoming.get()
        if message is None:
            self._closed = True
        return message

    async def close(self, code: int = NORMAL_CLOSURE) -> None:
        if self._closed:
            return
        logger.info(f"[{self._name}] Mock connection closed (code: {code}).")
        self._closed = True
        self.close_code = code
        self._incoming.put_nowait(None) # Wake up a pending receive()

    # --- Mock Control Methods ---

    def feed(self, message: str) -> None:
        """Queues a message as if the service had pushed it."""
        logger.debug(f"[{self._name}] Adding mock message: {message}")
        self._incoming.put_nowait(message)

    def drop(self) -> None:
        """Simulates the service closing the connection."""
        logger.info(f"[{self._name}] Simulating remote disconnect.")
        self._incoming.put_nowait(None)


class MockSocketTransport(BaseSocketTransport):
    """
    A mock socket transport with scripted connect() outcomes.

    Each connect() pops the next queued outcome. When the queue is empty, a
    fresh MockSocket is handed out, unless `refuse_when_empty` is set, in which
    case a NetworkError is raised as for an unreachable service.
    """

    def __init__(self, name: str = "Mock", refuse_when_empty: bool = False,
                 clock: Optional[Callable[[], float]] = None):
        self._name = name
        self._outcomes: deque[ConnectOutcome] = deque()
        self._refuse_when_empty = refuse_when_empty
        self._clock = clock
        self.connect_urls: List[str] = []
        self.connect_times: List[float] = []
        self.sockets: List[MockSocket] = []
        self._connect_delay = 0.0

        logger.info(f"MockSocketTransport '{self._name}' initialized.")

    async def connect(self, url: str) -> MockSocket:
        self.connect_urls.append(url)
        if self._clock is not None:
            self.connect_times.append(self._clock())
        logger.info(f"[{self._name}] Simulating connection to {url}...")

        # Always suspend once, like a real handshake
        await asyncio.sleep(self._connect_delay)

        if self._outcomes:
            outcome = self._outcomes.popleft()
        elif self._refuse_when_empty:
            outcome = NetworkError(f"Cannot connect to {url}", original_exception=ConnectionRefusedError(url))
        else:
            outcome = MockSocket(name=f"{self._name}#{len(self.sockets)}")

        if isinstance(outcome, Exception):
            logger.info(f"[{self._name}] Mock connection to {url} failed: {outcome}")
            raise outcome

        self.sockets.append(outcome)
        return outcome

    def add_socket(self, socket: Optional[MockSocket] = None) -> MockSocket:
        """Queues a successful connect() outcome and returns its socket."""
        socket = socket if socket is not None else MockSocket(name=f"{self._name}#q{len(self._outcomes)}")
        self._outcomes.append(socket)
        return socket

    def add_failure(self, error: Optional[Exception] = None) -> None:
        """Queues a failed connect() outcome."""
        self._outcomes.append(error if error is not None else NetworkError("Simulated connection failure"))

    def set_refuse_when_empty(self, refuse: bool) -> None:
        self._refuse_when_empty = refuse

    def set_connect_delay(self, delay: float) -> None:
        """Sets the simulated delay (seconds) before connect() completes."""
        self._connect_delay = max(0, delay)

    @property
    def connect_count(self) -> int:
        return len(self.connect_urls)
