# tw_nhi_icc/core/status.py

from enum import Enum, auto

class ConnectionState(Enum):
    """Represents the state of the live update WebSocket channel."""
    CLOSED = auto()
    CONNECTING = auto()
    OPEN = auto()
    RETRYING = auto() # Connection dropped, reconnect sequence in progress

    def __str__(self):
        return self.name
