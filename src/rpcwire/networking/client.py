"""Callback-style XML-RPC client for the rpcwire networking layer.

Each ``method_call`` is dispatched on a worker thread and reports exactly one
outcome through its callback. Retries, cancellation and call-level timeouts
are not provided; time bounds come from the transport's socket timeout.
"""

from __future__ import annotations

import gzip
import logging
from concurrent.futures import Future, ThreadPoolExecutor
from types import TracebackType
from typing import Any, Mapping, Sequence

from requests.structures import CaseInsensitiveDict

from .call import Callback, PendingCall
from .config import ClientConfig, normalize_options
from .cookies import CookieJar
from .deserializer import Deserializer
from .errors import ConfigurationError, EncodingError, TransportError
from .headers import HeaderProcessorChain
from .serializer import serialize_method_call
from .transport import (
    POOL_MAXSIZE,
    ResponseStream,
    Transport,
    response_headers,
)

logger = logging.getLogger(__name__)


class Client:
    """XML-RPC client bound to one server endpoint.

    The configuration and cookie jar live as long as the client. Calls may
    run concurrently; they share the pooled transport and the cookie jar but
    are otherwise independent.
    """

    def __init__(
        self,
        options: str | Mapping[str, Any] | ClientConfig | None = None,
        secure: bool = False,
    ) -> None:
        """Create a new Client.

        Args:
            options: A URI string, an options mapping (see
                ``normalize_options``) or a ready ``ClientConfig``.
            secure: True to make calls over https.
        """
        if isinstance(options, ClientConfig):
            self._config = options
        else:
            self._config = normalize_options(options, secure)
        self._processors = HeaderProcessorChain()
        self._cookies: CookieJar | None = None
        if self._config.cookies:
            self._cookies = CookieJar()
            self._processors.register(self._cookies, first=True)
        self._transport = Transport(self._config)
        self._executor = ThreadPoolExecutor(
            max_workers=POOL_MAXSIZE, thread_name_prefix="rpcwire"
        )

    @classmethod
    def secure_client(
        cls, options: str | Mapping[str, Any] | None = None
    ) -> Client:
        """Create a client that talks https."""
        return cls(options, secure=True)

    @property
    def config(self) -> ClientConfig:
        return self._config

    @property
    def cookies(self) -> CookieJar | None:
        return self._cookies

    @property
    def processors(self) -> HeaderProcessorChain:
        return self._processors

    def _compose_headers(
        self, body: bytes
    ) -> tuple[CaseInsensitiveDict[str], bytes]:
        """Build per-call headers and the body to send."""
        headers: CaseInsensitiveDict[str] = CaseInsensitiveDict(
            self._config.headers
        )
        self._processors.compose_request(headers)
        if self._config.gzip == "both":
            body = gzip.compress(body)
        headers["Content-Length"] = str(len(body))
        return headers, body

    def _dispatch(
        self, call: PendingCall, headers: Mapping[str, str], body: bytes
    ) -> None:
        """Run one HTTP exchange and feed its signals into ``call``."""
        try:
            response = self._transport.post(self._config.url, headers, body)
        except TransportError as exc:
            call.transport_failed(exc)
            return

        try:
            stream = ResponseStream(
                response,
                on_end=lambda: call.transport_completed(
                    response.status_code, response_headers(response)
                ),
                on_error=call.transport_failed,
            )
            deserializer = Deserializer(self._config.response_encoding)
            deserializer.deserialize_method_response(stream, call.deserialized)
            # A parse failure can stop reading early; the transport still
            # has to reach its end before the buffered outcome is released.
            stream.drain()
        except Exception as exc:
            logger.exception(
                "Unexpected failure while running %s", call.method
            )
            call.finish(exc)
        finally:
            response.close()

    def method_call(
        self, method: str, params: Sequence[Any], callback: Callback
    ) -> Future[None]:
        """Call ``method`` on the server.

        Args:
            method: Remote method name.
            params: Positional parameters, in order.
            callback: ``callback(error, value)``; called exactly once with
                either an error or the returned value.

        Returns:
            A future that resolves once the call has been driven to its end.
        """
        call = PendingCall(
            method, params, callback, self._processors, url=self._config.url
        )
        try:
            body = serialize_method_call(method, params, self._config.encoding)
        except EncodingError as exc:
            call.finish(exc)
            done: Future[None] = Future()
            done.set_result(None)
            return done

        headers, body = self._compose_headers(body)
        logger.debug("Dispatching %s to %s", method, self._config.url)
        return self._executor.submit(self._dispatch, call, headers, body)

    def get_cookie(self, name: str) -> str | None:
        """Return the latest value for cookie ``name``.

        Raises:
            ConfigurationError: Cookies were not enabled for this client.
        """
        if self._cookies is None:
            raise ConfigurationError(
                "Cookies support is not turned on for this client instance"
            )
        return self._cookies.get(name)

    def set_cookie(self, name: str, value: str) -> Client:
        """Set cookie ``name`` to be sent on the next calls.

        Returns the client itself so calls can be chained.

        Raises:
            ConfigurationError: Cookies were not enabled for this client.
        """
        if self._cookies is None:
            raise ConfigurationError(
                "Cookies support is not turned on for this client instance"
            )
        self._cookies.set(name, value)
        return self

    def close(self) -> None:
        """Wait for in-flight calls, then release pooled connections."""
        self._executor.shutdown(wait=True)
        self._transport.close()

    def __enter__(self) -> Client:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()
