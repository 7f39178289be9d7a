# tw_nhi_icc/core/endpoint.py

import math
from dataclasses import dataclass, field
from typing import Optional
from urllib.parse import urlencode, urlsplit, urlunsplit

DEFAULT_URL_PREFIX = "http://127.0.0.1:12345"

# HTTP scheme -> WebSocket scheme
_WEBSOCKET_SCHEMES = {
    "http": "ws",
    "https": "wss",
}


def clamp_interval(interval: Optional[float]) -> Optional[int]:
    """
    Normalizes a push interval (seconds) to a non-negative integer.

    None is kept as None ("let the service decide"). Negative values and NaN
    become 0, anything else is floored.

    Raises:
        ValueError: The interval is infinite.
    """
    if interval is None:
        return None
    if math.isnan(interval) or interval < 0:
        return 0
    if math.isinf(interval):
        raise ValueError(f"Invalid push interval: {interval}")
    return int(math.floor(interval))


@dataclass(frozen=True)
class ServiceEndpoint:
    """
    Addresses of the TW NHI IC Card Service, derived once from a URL prefix.

    Attributes:
        url_prefix: Base address of the service, e.g. ``http://127.0.0.1:12345``.
        version_url: ``GET /version``.
        card_list_url: ``GET /``.
        websocket_url: ``/ws`` with the scheme upgraded (http -> ws, https -> wss).
    """
    url_prefix: str = DEFAULT_URL_PREFIX
    version_url: str = field(init=False)
    card_list_url: str = field(init=False)
    websocket_url: str = field(init=False)

    def __post_init__(self):
        parts = urlsplit(self.url_prefix)
        if not parts.scheme or not parts.netloc:
            raise ValueError(f"Invalid URL prefix: {self.url_prefix!r}")

        # Absolute paths on the prefix host; the prefix path, query and fragment are dropped
        base = parts._replace(query="", fragment="")
        websocket_url = base._replace(
            scheme=_WEBSOCKET_SCHEMES.get(parts.scheme, parts.scheme),
            path="/ws",
        )

        # Frozen dataclass: derived fields are set through object.__setattr__
        object.__setattr__(self, "card_list_url", urlunsplit(base._replace(path="/")))
        object.__setattr__(self, "version_url", urlunsplit(base._replace(path="/version")))
        object.__setattr__(self, "websocket_url", urlunsplit(websocket_url))

    def live_update_url(self, interval: Optional[int] = None) -> str:
        """Returns the WebSocket address, with ``?interval=<n>`` when an interval is set."""
        if interval is None:
            return self.websocket_url
        parts = urlsplit(self.websocket_url)
        return urlunsplit(parts._replace(query=urlencode({"interval": interval})))
