"""XML-RPC over HTTP with callback-style, single-result method calls."""

__version__ = "0.1.0"

from .networking import (  # noqa: E402
    Client,
    ClientConfig,
    ConfigurationError,
    EncodingError,
    FaultError,
    NotFoundError,
    ProtocolError,
    RequestTimeoutError,
    RpcClientError,
    TransportError,
    normalize_options,
)

__all__ = [
    "__version__",
    "Client",
    "ClientConfig",
    "ConfigurationError",
    "EncodingError",
    "FaultError",
    "NotFoundError",
    "ProtocolError",
    "RequestTimeoutError",
    "RpcClientError",
    "TransportError",
    "normalize_options",
]
