import xmlrpc.client as xmlrpclib

import pytest

from rpcwire.networking.deserializer import Deserializer
from rpcwire.networking.errors import FaultError, ProtocolError


def _response(value, encoding=None):
    return xmlrpclib.dumps((value,), methodresponse=True, encoding=encoding)


def _chunks(data: bytes, size: int = 7):
    return [data[i : i + size] for i in range(0, len(data), size)]


def _collect(deserializer, stream):
    outcomes = []
    deserializer.deserialize_method_response(
        stream, lambda error, value: outcomes.append((error, value))
    )
    assert len(outcomes) == 1
    return outcomes[0]


def test_parses_value_fed_in_chunks():
    body = _response({"answer": 42, "items": [1, "two"]}).encode("utf-8")

    error, value = _collect(Deserializer(), _chunks(body))

    assert error is None
    assert value == {"answer": 42, "items": [1, "two"]}


def test_fault_is_reported_as_fault_error():
    body = xmlrpclib.dumps(
        xmlrpclib.Fault(4, "Too many parameters"), methodresponse=True
    ).encode("utf-8")

    error, value = _collect(Deserializer(), [body])

    assert isinstance(error, FaultError)
    assert isinstance(error, ProtocolError)
    assert error.fault_code == 4
    assert error.fault_string == "Too many parameters"
    assert value is None


def test_malformed_xml_is_protocol_error():
    error, value = _collect(Deserializer(), [b"<methodResponse><params>"])

    assert isinstance(error, ProtocolError)
    assert value is None


def test_garbage_is_protocol_error():
    error, _ = _collect(Deserializer(), [b"<html>oops</html"])

    assert isinstance(error, ProtocolError)


def test_empty_body_is_protocol_error():
    error, _ = _collect(Deserializer(), [])

    assert isinstance(error, ProtocolError)


def test_method_call_document_is_rejected():
    body = xmlrpclib.dumps((1,), methodname="add").encode("utf-8")

    error, _ = _collect(Deserializer(), [body])

    assert isinstance(error, ProtocolError)


def test_response_encoding_decodes_body():
    body = _response("café").encode("iso-8859-1")

    error, value = _collect(Deserializer("iso-8859-1"), _chunks(body, 5))

    assert error is None
    assert value == "café"


def test_parse_raises_directly():
    with pytest.raises(ProtocolError):
        Deserializer().parse([b"not xml"])
