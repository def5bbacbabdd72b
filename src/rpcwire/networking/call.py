"""Per-call reconciliation of transport and deserializer signals."""

from __future__ import annotations

import logging
import threading
from typing import Any, Callable, Mapping, Sequence

from .errors import NotFoundError
from .headers import HeaderProcessorChain

logger = logging.getLogger(__name__)

Callback = Callable[[Exception | None, Any], None]

_UNSET: Any = object()


class PendingCall:
    """State for one in-flight ``method_call``.

    Three signals may arrive, from any thread and in any order:

    * ``transport_failed`` finalizes immediately with the transport error.
    * ``transport_completed`` finalizes with ``NotFoundError`` on 404.
      Otherwise it runs the response headers through the processor chain
      and then delivers the deserializer outcome if one is already buffered.
    * ``deserialized`` buffers the outcome until the transport has completed.

    The callback fires exactly once; later signals are ignored.
    """

    def __init__(
        self,
        method: str,
        params: Sequence[Any],
        callback: Callback,
        processors: HeaderProcessorChain,
        url: str = "",
    ) -> None:
        self.method = method
        self.params = params
        self.url = url
        self._callback = callback
        self._processors = processors
        self._lock = threading.Lock()
        self._done = False
        self._transport_completed = False
        self._outcome: tuple[Exception | None, Any] | Any = _UNSET

    @property
    def done(self) -> bool:
        return self._done

    def _claim(self) -> bool:
        """Mark the call finished; return False if it already was."""
        if self._done:
            return False
        self._done = True
        return True

    def _fire(self, error: Exception | None, value: Any) -> None:
        try:
            self._callback(error, value)
        except Exception:
            logger.exception("Callback for %s raised", self.method)

    def finish(self, error: Exception | None, value: Any = None) -> None:
        """Deliver an outcome immediately, unless the call already finished."""
        with self._lock:
            if not self._claim():
                return
        self._fire(error, value)

    def transport_failed(self, error: Exception) -> None:
        logger.warning(
            "Call %s to %s failed: %s", self.method, self.url, error
        )
        self.finish(error)

    def transport_completed(
        self, status_code: int, headers: Mapping[str, Any]
    ) -> None:
        logger.debug(
            "Call %s to %s completed with status %s",
            self.method,
            self.url,
            status_code,
        )
        if status_code == 404:
            self.finish(NotFoundError(self.url))
            return
        with self._lock:
            if self._done:
                return
            self._processors.parse_response(headers)
            self._transport_completed = True
            if self._outcome is _UNSET:
                return
            error, value = self._outcome
            self._claim()
        self._fire(error, value)

    def deserialized(self, error: Exception | None, value: Any) -> None:
        with self._lock:
            if self._done:
                return
            if not self._transport_completed:
                self._outcome = (error, value)
                return
            self._claim()
        self._fire(error, value)
