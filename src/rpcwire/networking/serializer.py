"""Request body encoding for XML-RPC method calls."""

from __future__ import annotations

import xmlrpc.client as xmlrpclib
from typing import Any, Sequence

from .errors import EncodingError


def serialize_method_call(
    method: str, params: Sequence[Any], encoding: str | None = "utf-8"
) -> bytes:
    """Encode ``method`` and ``params`` as a ``methodCall`` document.

    Raises:
        EncodingError: A parameter has no XML-RPC representation or the
            document cannot be represented in ``encoding``.
    """
    encoding = encoding or "utf-8"
    try:
        body = xmlrpclib.dumps(
            tuple(params),
            methodname=method,
            encoding=encoding,
            allow_none=True,
        )
        return body.encode(encoding, "xmlcharrefreplace")
    except (TypeError, OverflowError, LookupError, UnicodeError) as exc:
        raise EncodingError(str(exc)) from exc
