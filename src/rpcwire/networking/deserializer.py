"""Incremental decoding of XML-RPC method responses."""

from __future__ import annotations

import codecs
import logging
import xmlrpc.client as xmlrpclib
from typing import Any, Callable, Iterable
from xml.parsers.expat import ExpatError

from defusedxml import DefusedXmlException
from defusedxml.xmlrpc import DefusedExpatParser

from .errors import FaultError, ProtocolError

logger = logging.getLogger(__name__)

ResultCallback = Callable[[Exception | None, Any], None]


class Deserializer:
    """Turns a streamed ``methodResponse`` body into a value or an error.

    Chunks are fed to the parser as they arrive, so the body is never
    buffered in full. When ``response_encoding`` is set the bytes are decoded
    with it instead of trusting the XML declaration.
    """

    def __init__(self, response_encoding: str | None = None) -> None:
        self.response_encoding = response_encoding

    def _decoder(self) -> Callable[[bytes, bool], Any] | None:
        if not self.response_encoding:
            return None
        try:
            return codecs.getincrementaldecoder(self.response_encoding)(
                "replace"
            ).decode
        except LookupError:
            logger.warning(
                "Unknown response encoding %r, using the XML declaration",
                self.response_encoding,
            )
            return None

    def parse(self, stream: Iterable[bytes]) -> Any:
        """Consume ``stream`` and return the single response value.

        Raises:
            FaultError: The server returned an XML-RPC fault.
            ProtocolError: The body is not a valid method response.
        """
        unmarshaller = xmlrpclib.Unmarshaller()
        parser = DefusedExpatParser(unmarshaller)
        decode = self._decoder()
        try:
            for chunk in stream:
                if not chunk:
                    continue
                parser.feed(decode(chunk, False) if decode else chunk)
            if decode:
                parser.feed(decode(b"", True))
            parser.close()
            if unmarshaller.getmethodname() is not None:
                raise ProtocolError("expected methodResponse, got methodCall")
            values = unmarshaller.close()
        except xmlrpclib.Fault as fault:
            raise FaultError(fault.faultCode, fault.faultString) from fault
        except (ExpatError, DefusedXmlException) as exc:
            raise ProtocolError(f"malformed XML-RPC response: {exc}") from exc
        except xmlrpclib.ResponseError as exc:
            raise ProtocolError(
                "empty or incomplete XML-RPC response"
            ) from exc
        except (TypeError, ValueError) as exc:
            raise ProtocolError(f"invalid XML-RPC value: {exc}") from exc
        if len(values) != 1:
            raise ProtocolError(
                f"expected exactly one response value, got {len(values)}"
            )
        return values[0]

    def deserialize_method_response(
        self, stream: Iterable[bytes], callback: ResultCallback
    ) -> None:
        """Parse ``stream`` and report the outcome to ``callback`` once."""
        try:
            value = self.parse(stream)
        except ProtocolError as exc:
            callback(exc, None)
            return
        callback(None, value)
