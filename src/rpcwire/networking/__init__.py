"""Networking layer: configuration, header processors and the call client."""

from .client import Client
from .config import ClientConfig, normalize_options
from .cookies import CookieJar
from .errors import (
    ConfigurationError,
    EncodingError,
    FaultError,
    NotFoundError,
    ProtocolError,
    RequestTimeoutError,
    RpcClientError,
    TransportError,
)
from .headers import HeaderProcessor, HeaderProcessorChain

__all__ = [
    "Client",
    "ClientConfig",
    "ConfigurationError",
    "CookieJar",
    "EncodingError",
    "FaultError",
    "HeaderProcessor",
    "HeaderProcessorChain",
    "NotFoundError",
    "ProtocolError",
    "RequestTimeoutError",
    "RpcClientError",
    "TransportError",
    "normalize_options",
]
