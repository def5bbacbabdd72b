"""Error types surfaced by the rpcwire networking layer.

Every error raised while a call is in flight reaches the caller as the first
argument of that call's callback. Only ConfigurationError is raised directly.
"""

from __future__ import annotations


class RpcClientError(Exception):
    """Base class for all rpcwire client errors."""


class ConfigurationError(RpcClientError):
    """A client feature was used that was not enabled at construction."""


class TransportError(RpcClientError):
    """The HTTP exchange failed (connection, DNS, broken stream)."""


class RequestTimeoutError(TransportError):
    """The transport gave up waiting on the socket."""


class NotFoundError(RpcClientError):
    """The server answered with HTTP 404."""

    def __init__(self, url: str) -> None:
        super().__init__(f"Not Found: {url}")
        self.url = url


class ProtocolError(RpcClientError):
    """The response body is not a well-formed XML-RPC method response."""


class FaultError(ProtocolError):
    """The server answered with an explicit XML-RPC fault."""

    def __init__(self, fault_code: int, fault_string: str) -> None:
        super().__init__(f"<Fault {fault_code}: {fault_string!r}>")
        self.fault_code = fault_code
        self.fault_string = fault_string


class EncodingError(RpcClientError):
    """The call parameters cannot be serialized into a request body."""
