"""
=============================================================================
HTTP PROTOCOL LAYER
=============================================================================

Everything that knows the HTTP/1.1 wire format:

    headers.py       HeaderMap, case-insensitive header storage
    status_codes.py  HTTPStatus enum and reason phrases
    request.py       bytes → HTTPRequest (RequestParser)
    compression.py   Accept-Encoding negotiation, gzip
    response.py      HTTPResponse → bytes (render)
    router.py        HTTPRequest → handler → HTTPResponse

Nothing in this package touches a socket or the filesystem, which is what
makes it easy to unit test with plain byte strings.
=============================================================================
"""

from .headers import HeaderMap
from .status_codes import HTTPStatus, reason_phrase
from .request import HTTPRequest, HTTPParseError, RequestParser, parse_request
from .compression import accepts_gzip, gzip_body
from .response import (
    HTTPResponse,
    ResponseBuilder,
    render,
    ok,
    text,
    created,
    bad_request,
    not_found,
    method_not_allowed,
    unprocessable,
    internal_error,
)
from .router import Router, Route, RouteMatch, Handler

__all__ = [
    # Headers
    "HeaderMap",

    # Status
    "HTTPStatus",
    "reason_phrase",

    # Request
    "HTTPRequest",
    "HTTPParseError",
    "RequestParser",
    "parse_request",

    # Compression
    "accepts_gzip",
    "gzip_body",

    # Response
    "HTTPResponse",
    "ResponseBuilder",
    "render",
    "ok",
    "text",
    "created",
    "bad_request",
    "not_found",
    "method_not_allowed",
    "unprocessable",
    "internal_error",

    # Routing
    "Router",
    "Route",
    "RouteMatch",
    "Handler",
]
