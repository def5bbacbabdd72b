"""Client-side cookie storage propagated through the header chain."""

from __future__ import annotations

import logging
import threading
import time
from email.utils import parsedate_to_datetime
from typing import Any, Mapping, MutableMapping

logger = logging.getLogger(__name__)


def _set_cookie_values(headers: Mapping[str, Any]) -> list[str]:
    raw = None
    for name, value in headers.items():
        if name.lower() == "set-cookie":
            raw = value
            break
    if raw is None:
        return []
    if isinstance(raw, str):
        return [raw]
    return [str(item) for item in raw]


def _expiry(attributes: Mapping[str, str], now: float) -> float | None:
    max_age = attributes.get("max-age")
    if max_age:
        try:
            return now + int(max_age)
        except ValueError:
            pass
    expires = attributes.get("expires")
    if expires:
        try:
            return parsedate_to_datetime(expires).timestamp()
        except (TypeError, ValueError):
            return None
    return None


def _parse_set_cookie(
    raw: str, now: float
) -> tuple[str, str, float | None] | None:
    """Split one ``Set-Cookie`` value into name, value and expiry.

    Only the leading ``name=value`` pair is a cookie; everything after the
    first ``;`` is an attribute. ``Max-Age`` takes precedence over
    ``Expires``.
    """
    pair, _, rest = raw.partition(";")
    name, sep, value = pair.partition("=")
    name = name.strip()
    if not sep or not name:
        return None

    attributes: dict[str, str] = {}
    for item in rest.split(";"):
        key, _, attr_value = item.partition("=")
        attributes[key.strip().lower()] = attr_value.strip()
    return name, value.strip(), _expiry(attributes, now)


class CookieJar:
    """Stores the latest value per cookie name; last write wins.

    Registered as a header processor, the jar sends its cookies in a
    ``Cookie`` header and picks up ``Set-Cookie`` values from responses.
    """

    def __init__(self) -> None:
        self._values: dict[str, str] = {}
        self._expires: dict[str, float | None] = {}
        self._lock = threading.Lock()

    def _is_live(self, name: str, now: float) -> bool:
        expires = self._expires.get(name)
        return expires is None or expires > now

    def get(self, name: str) -> str | None:
        """Return the value of ``name``, or None if absent or expired."""
        with self._lock:
            if name not in self._values:
                return None
            if not self._is_live(name, time.time()):
                return None
            return self._values[name]

    def set(self, name: str, value: str, expires: float | None = None) -> None:
        """Store the value sent for ``name`` on subsequent calls.

        Args:
            name: Cookie name.
            value: Cookie value.
            expires: Optional POSIX timestamp after which the cookie is
                dropped.
        """
        with self._lock:
            self._values[name] = value
            self._expires[name] = expires

    def to_header(self) -> str:
        now = time.time()
        with self._lock:
            return "; ".join(
                f"{name}={value}"
                for name, value in self._values.items()
                if self._is_live(name, now)
            )

    def compose_request(self, headers: MutableMapping[str, str]) -> None:
        cookie = self.to_header()
        if cookie:
            headers["Cookie"] = cookie

    def parse_response(self, headers: Mapping[str, Any]) -> None:
        now = time.time()
        for raw in _set_cookie_values(headers):
            parsed = _parse_set_cookie(raw, now)
            if parsed is None:
                logger.debug("Ignoring unparseable Set-Cookie header %r", raw)
                continue
            name, value, expires = parsed
            self.set(name, value, expires)

    def __len__(self) -> int:
        with self._lock:
            return len(self._values)
