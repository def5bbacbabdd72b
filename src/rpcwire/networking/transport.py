"""Pooled HTTP transport used to dispatch XML-RPC calls."""

from __future__ import annotations

import logging
from http.cookiejar import CookiePolicy
from typing import Any, Callable, Iterator, Mapping

import requests
from requests.adapters import HTTPAdapter

from .config import ClientConfig
from .errors import RequestTimeoutError, TransportError

logger = logging.getLogger(__name__)

POOL_CONNECTIONS = 10
POOL_MAXSIZE = 100
DEFAULT_SOCKET_TIMEOUT_MS = 3000
KEEP_ALIVE_TIMEOUT_SLACK_MS = 10000
CHUNK_SIZE = 8192


class _RejectAllCookies(CookiePolicy):
    """Keep the session jar empty; cookies belong to the header chain."""

    netscape = True
    rfc2965 = False
    hide_cookie2 = False

    def set_ok(self, cookie: Any, request: Any) -> bool:
        return False

    def return_ok(self, cookie: Any, request: Any) -> bool:
        return False

    def domain_return_ok(self, domain: str, request: Any) -> bool:
        return False

    def path_return_ok(self, path: str, request: Any) -> bool:
        return False


def map_request_exception(
    exc: requests.exceptions.RequestException,
) -> TransportError:
    """Map requests exceptions to rpcwire transport errors."""
    if isinstance(exc, requests.exceptions.Timeout):
        error: TransportError = RequestTimeoutError(str(exc))
    else:
        error = TransportError(str(exc))
    error.__cause__ = exc
    return error


def response_headers(response: requests.Response) -> dict[str, Any]:
    """Return lower-cased response headers with ``set-cookie`` as a list."""
    headers: dict[str, Any] = {
        name.lower(): value for name, value in response.headers.items()
    }
    raw_headers = getattr(response.raw, "headers", None)
    getlist = getattr(raw_headers, "getlist", None)
    if callable(getlist):
        cookies = list(getlist("Set-Cookie"))
    elif "set-cookie" in headers:
        cookies = [headers["set-cookie"]]
    else:
        cookies = []
    if cookies:
        headers["set-cookie"] = cookies
    else:
        headers.pop("set-cookie", None)
    return headers


class ResponseStream:
    """Iterates a streamed response body and reports when it has ended.

    ``on_end`` fires exactly once, after the body has been fully read.
    A failure while reading is passed to ``on_error`` and stops iteration;
    ``on_end`` is not fired in that case.
    """

    def __init__(
        self,
        response: requests.Response,
        on_end: Callable[[], None],
        on_error: Callable[[TransportError], None],
        chunk_size: int = CHUNK_SIZE,
    ) -> None:
        self._response = response
        self._on_end = on_end
        self._on_error = on_error
        self._chunks = response.iter_content(chunk_size=chunk_size)
        self._finished = False

    @property
    def finished(self) -> bool:
        return self._finished

    def __iter__(self) -> Iterator[bytes]:
        return self

    def __next__(self) -> bytes:
        if self._finished:
            raise StopIteration
        try:
            return next(self._chunks)
        except StopIteration:
            self._finished = True
            self._on_end()
            raise
        except requests.exceptions.RequestException as exc:
            self._finished = True
            self._on_error(map_request_exception(exc))
            raise StopIteration from exc

    def drain(self) -> None:
        """Read and discard whatever the consumer left unread."""
        for _ in self:
            pass


class Transport:
    """Shared ``requests.Session`` with a pooled adapter for all calls."""

    def __init__(self, config: ClientConfig) -> None:
        self._config = config
        self._session = requests.Session()
        self._session.headers.clear()
        self._session.cookies.set_policy(_RejectAllCookies())
        adapter = HTTPAdapter(
            pool_connections=POOL_CONNECTIONS,
            pool_maxsize=POOL_MAXSIZE,
            max_retries=0,
        )
        self._session.mount("http://", adapter)
        self._session.mount("https://", adapter)
        self.timeout = self._socket_timeout()

    def _socket_timeout(self) -> float:
        """Resolve the socket timeout in seconds from keep-alive settings."""
        if self._config.keep_alive > 0:
            keep_alive = self._config.keep_alive
            return (keep_alive + KEEP_ALIVE_TIMEOUT_SLACK_MS) / 1000
        return DEFAULT_SOCKET_TIMEOUT_MS / 1000

    def post(
        self, url: str, headers: Mapping[str, str], body: bytes
    ) -> requests.Response:
        """Send ``body`` and return once the response headers have arrived.

        Raises:
            TransportError: The request could not be completed.
        """
        try:
            return self._session.post(
                url,
                headers=dict(headers),
                data=body,
                timeout=self.timeout,
                allow_redirects=False,
                stream=True,
            )
        except requests.exceptions.RequestException as exc:
            raise map_request_exception(exc) from exc

    def close(self) -> None:
        self._session.close()
