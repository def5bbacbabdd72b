# pyright: reportUnknownParameterType=false, reportUnknownMemberType=false
import xmlrpc.client as xmlrpclib
from unittest.mock import Mock, patch

from rpcwire.networking.client import Client
from rpcwire.networking.errors import NotFoundError, ProtocolError


def _mock_response(
    *,
    body: bytes = b"",
    status: int = 200,
    set_cookies=(),
):
    response = Mock()
    response.status_code = status
    response.headers = {"Content-Type": "text/xml"}
    response.raw.headers.getlist.return_value = list(set_cookies)
    response.iter_content.return_value = iter([body])
    return response


def _valid_body() -> bytes:
    return xmlrpclib.dumps(("fine",), methodresponse=True).encode("utf-8")


def _run(client, response):
    outcomes = []
    with patch("requests.Session.post") as mock_post:
        mock_post.return_value = response
        client.method_call(
            "ping", [], lambda error, value: outcomes.append((error, value))
        ).result(timeout=5)
    return outcomes


def test_404_is_not_found_even_with_valid_body():
    with Client("http://rpc.example:8080/missing") as client:
        outcomes = _run(client, _mock_response(body=_valid_body(), status=404))

    assert len(outcomes) == 1
    error, value = outcomes[0]
    assert isinstance(error, NotFoundError)
    assert error.url == "http://rpc.example:8080/missing"
    assert value is None


def test_404_does_not_rotate_cookies():
    with Client({"cookies": True}) as client:
        client.set_cookie("a", "1")
        _run(
            client,
            _mock_response(
                body=_valid_body(), status=404, set_cookies=["a=2"]
            ),
        )

        assert client.get_cookie("a") == "1"


def test_500_with_valid_body_returns_value():
    with Client() as client:
        outcomes = _run(client, _mock_response(body=_valid_body(), status=500))

    assert outcomes == [(None, "fine")]


def test_500_with_html_body_is_protocol_error():
    with Client() as client:
        outcomes = _run(
            client,
            _mock_response(
                body=b"<html><body>error</body></html>", status=500
            ),
        )

    assert len(outcomes) == 1
    assert isinstance(outcomes[0][0], ProtocolError)


def test_error_status_still_rotates_cookies():
    with Client({"cookies": True}) as client:
        client.set_cookie("a", "1")
        _run(
            client,
            _mock_response(body=b"not xml", status=500, set_cookies=["a=2"]),
        )

        assert client.get_cookie("a") == "2"
