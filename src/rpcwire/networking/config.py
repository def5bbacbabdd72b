"""Configuration model and option normalization for the XML-RPC client."""

from __future__ import annotations

import base64
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Literal, Mapping
from urllib.parse import urlsplit

from requests.structures import CaseInsensitiveDict

from .. import __version__

GzipMode = Literal["none", "response", "both"]

DEFAULT_USER_AGENT = f"rpcwire XML-RPC Client/{__version__}"

# camelCase spellings accepted for the snake_case option keys.
OPTION_ALIASES = {
    "keepAlive": "keep_alive",
    "userAgent": "user_agent",
    "responseEncoding": "response_encoding",
    "basicAuth": "basic_auth",
}


def _default_headers() -> Mapping[str, str]:
    """Return immutable empty default headers mapping."""

    return MappingProxyType({})


@dataclass(frozen=True)
class ClientConfig:
    """Resolved, immutable settings for one client instance.

    Instances are normally produced by ``normalize_options``; building one
    directly skips URL resolution and header assembly.
    """

    host: str = "localhost"
    port: int = 80
    path: str = "/"
    url: str = "http://localhost:80/"
    secure: bool = False
    keep_alive: int = 0
    gzip: GzipMode = "none"
    user_agent: str = DEFAULT_USER_AGENT
    headers: Mapping[str, str] = field(default_factory=_default_headers)
    basic_auth: tuple[str, str] | None = None
    encoding: str = "utf-8"
    response_encoding: str | None = None
    cookies: bool = False

    def __post_init__(self) -> None:
        # Freeze copied headers to avoid post-init mutation side effects.
        # Header names compare case-insensitively, as on the wire.
        object.__setattr__(
            self,
            "headers",
            MappingProxyType(CaseInsensitiveDict(self.headers)),
        )

    @property
    def scheme(self) -> str:
        return "https" if self.secure else "http"


def _gzip_mode(value: Any) -> GzipMode:
    if not value:
        return "none"
    if value == "both":
        return "both"
    return "response"


def _port(value: Any, secure: bool) -> int:
    if value in (None, "", 0):
        return 443 if secure else 80
    try:
        return int(value)
    except (TypeError, ValueError):
        return 443 if secure else 80


def _keep_alive(value: Any) -> int:
    try:
        return max(0, int(value or 0))
    except (TypeError, ValueError):
        return 0


def _split_url(value: str) -> dict[str, Any]:
    parsed = urlsplit(value)
    try:
        port = parsed.port
    except ValueError:
        port = None
    return {"host": parsed.hostname, "port": port, "path": parsed.path}


def _basic_auth(value: Any) -> tuple[str, str] | None:
    if not isinstance(value, Mapping):
        return None
    user = value.get("user")
    password = value.get("pass")
    if user is None or password is None:
        return None
    return str(user), str(password)


def _authorization(credentials: tuple[str, str]) -> str:
    token = base64.b64encode(":".join(credentials).encode("utf-8"))
    return "Basic " + token.decode("ascii")


def _build_headers(
    user_headers: Mapping[str, str],
    user_agent: str,
    gzip: GzipMode,
    basic_auth: tuple[str, str] | None,
) -> CaseInsensitiveDict[str]:
    defaults = {
        "User-Agent": user_agent,
        "Content-Type": "text/xml",
        "Accept": "text/xml",
        "Accept-Charset": "UTF8",
        "Connection": "Keep-Alive",
    }
    if gzip != "none":
        defaults["Accept-Encoding"] = "gzip"
    if gzip == "both":
        defaults["Content-Encoding"] = "gzip"

    headers: CaseInsensitiveDict[str] = CaseInsensitiveDict(user_headers)
    if headers.get("Authorization") is None and basic_auth is not None:
        headers["Authorization"] = _authorization(basic_auth)
    for name, value in defaults.items():
        headers.setdefault(name, value)
    return headers


def normalize_options(
    options: str | Mapping[str, Any] | None = None, secure: bool = False
) -> ClientConfig:
    """Resolve constructor input into a ``ClientConfig``.

    Args:
        options: Either a URI string (``"http://example.com:9090/RPC2"``) or
            a mapping with any of ``host``, ``port``, ``url``, ``path``,
            ``cookies``, ``keep_alive``, ``gzip``, ``user_agent``,
            ``headers``, ``basic_auth`` (``{"user": ..., "pass": ...}``),
            ``encoding`` and ``response_encoding``. The camelCase spellings
            ``keepAlive``, ``userAgent``, ``responseEncoding`` and
            ``basicAuth`` are accepted as well; the snake_case key wins when
            both are given.
        secure: Whether calls go over https.

    Returns:
        The resolved configuration. Missing or unusable fields fall back to
        defaults; this function does not raise on odd input.
    """
    if options is None:
        opts: dict[str, Any] = {}
    elif isinstance(options, str):
        opts = _split_url(options)
    else:
        opts = dict(options)
        for alias, key in OPTION_ALIASES.items():
            if alias in opts:
                opts.setdefault(key, opts.pop(alias))

    if opts.get("url") is not None:
        opts.update(_split_url(str(opts["url"])))

    host = opts.get("host") or "localhost"
    port = _port(opts.get("port"), secure)
    path = str(opts.get("path") or "/")
    if not path.startswith("/"):
        path = "/" + path

    scheme = "https" if secure else "http"
    url = f"{scheme}://{host}:{port}{path}"

    gzip = _gzip_mode(opts.get("gzip"))
    user_agent = opts.get("user_agent") or DEFAULT_USER_AGENT
    basic_auth = _basic_auth(opts.get("basic_auth"))
    user_headers = opts.get("headers")
    if not isinstance(user_headers, Mapping):
        user_headers = {}

    return ClientConfig(
        host=host,
        port=port,
        path=path,
        url=url,
        secure=secure,
        keep_alive=_keep_alive(opts.get("keep_alive")),
        gzip=gzip,
        user_agent=user_agent,
        headers=_build_headers(user_headers, user_agent, gzip, basic_auth),
        basic_auth=basic_auth,
        encoding=opts.get("encoding") or "utf-8",
        response_encoding=opts.get("response_encoding"),
        cookies=bool(opts.get("cookies")),
    )
