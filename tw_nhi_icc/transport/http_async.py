# tw_nhi_icc/transport/http_async.py

import asyncio
import logging
from typing import Any, Optional

import aiohttp

from tw_nhi_icc.core.exceptions import NetworkError, TimeoutError, ResponseError

logger = logging.getLogger(__name__)

# aiohttp's own timeouts are disabled; deadlines are enforced by fetch_json.
_NO_TIMEOUT = aiohttp.ClientTimeout(total=None)


class HttpTransport:
    """
    Asynchronous HTTP transport using aiohttp.

    Issues one bounded-time GET request per call and classifies every failure
    into the library's error taxonomy:

    - TimeoutError: the deadline elapsed before the response, or while reading its body.
    - NetworkError: the service could not be reached.
    - ResponseError: the service answered with a non-2xx status or an unusable body.
    """

    def __init__(self, session: Optional[aiohttp.ClientSession] = None):
        """
        Args:
            session: Optional shared aiohttp session. When omitted, a short-lived
                     session is opened for each request. The caller owns and
                     closes a session it passes in.
        """
        self._session = session

    async def fetch_json(self, url: str, timeout: Optional[float] = None) -> Any:
        """
        Sends ``GET url`` and returns the decoded JSON body.

        Args:
            url: Absolute address to request.
            timeout: Deadline in milliseconds covering the request and the body.
                     None (or a negative value) disables the deadline; 0 expires
                     immediately.

        Raises:
            TimeoutError: The deadline elapsed.
            NetworkError: The request could not be sent.
            ResponseError: Non-2xx status or a body that is not JSON.
        """
        if self._session is not None:
            return await self._fetch(self._session, url, timeout)

        async with aiohttp.ClientSession(timeout=_NO_TIMEOUT) as session:
            return await self._fetch(session, url, timeout)

    async def _fetch(self, session: aiohttp.ClientSession, url: str, timeout: Optional[float]) -> Any:
        loop = asyncio.get_running_loop()
        deadline: Optional[float] = None
        if timeout is not None and timeout >= 0:
            deadline = loop.time() + timeout / 1000

        def remaining() -> Optional[float]:
            if deadline is None:
                return None
            return max(0.0, deadline - loop.time())

        logger.debug(f"GET {url} (timeout: {timeout} ms)")
        try:
            response = await asyncio.wait_for(self._send(session, url), timeout=remaining())
        except asyncio.TimeoutError as e:
            logger.debug(f"Request to {url} timed out")
            raise TimeoutError("request timeout") from e
        except (aiohttp.ClientError, OSError) as e:
            logger.debug(f"Request to {url} failed: {e}")
            raise NetworkError(f"Cannot connect to {url}", original_exception=e) from e

        async with response:
            if not 200 <= response.status < 300:
                try:
                    body = await asyncio.wait_for(response.text(), timeout=remaining())
                except asyncio.TimeoutError as e:
                    raise TimeoutError("body timeout") from e
                except (aiohttp.ClientError, OSError, UnicodeDecodeError) as e:
                    logger.error(f"GET {url} returned {response.status} and the body could not be read: {e}")
                    raise ResponseError(response.status) from e

                logger.error(f"GET {url} returned status {response.status}")
                raise ResponseError(response.status, body)

            try:
                data = await asyncio.wait_for(response.json(content_type=None), timeout=remaining())
            except asyncio.TimeoutError as e:
                raise TimeoutError("body timeout") from e
            except (aiohttp.ClientError, OSError, ValueError) as e:
                # ValueError covers json.JSONDecodeError and UnicodeDecodeError
                logger.error(f"GET {url} returned an unreadable body: {e}")
                raise ResponseError(response.status) from e

        logger.debug(f"GET {url} -> {response.status}")
        return data

    @staticmethod
    async def _send(session: aiohttp.ClientSession, url: str) -> aiohttp.ClientResponse:
        return await session.get(url, timeout=_NO_TIMEOUT)
