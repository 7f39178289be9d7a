# tw_nhi_icc/transport/base.py

from abc import ABC, abstractmethod
from typing import Optional

NORMAL_CLOSURE = 1000 # WebSocket close code


class BaseSocket(ABC):
    """
    One open, message-based, full-duplex connection to the card service.

    Instances are produced by BaseSocketTransport.connect() and owned by the
    LiveUpdateChannel until closed or dropped.
    """

    @abstractmethod
    async def send(self, message: str) -> None:
        """
        Sends a text message.

        Raises:
            NetworkError: If the connection is gone.
        """
        pass

    @abstractmethod
    async def receive(self) -> Optional[str]:
        """
        Waits for the next text message.

        Returns:
            The message, or None once the connection has been closed (by
            either side) or dropped.
        """
        pass

    @abstractmethod
    async def close(self, code: int = NORMAL_CLOSURE) -> None:
        """Closes the connection. Safe to call more than once."""
        pass


class BaseSocketTransport(ABC):
    """
    Abstract capability to open socket connections.

    Concrete implementations translate every library-specific failure into
    exactly one of NetworkError or TimeoutError, so callers never have to
    inspect foreign exception types.
    """

    @abstractmethod
    async def connect(self, url: str) -> BaseSocket:
        """
        Opens a connection to `url`.

        Raises:
            TimeoutError: If the opening handshake did not finish in time.
            NetworkError: For any other connection failure.
        """
        pass
