"""
=============================================================================
HTTP RESPONSE MODEL & SERIALIZER
=============================================================================

Builds HTTP/1.1 responses and renders them to exact wire bytes.

=============================================================================
WIRE FORMAT
=============================================================================

    HTTP/1.1 200 OK\r\n                  ← status line
    allow: GET, POST\r\n                 ← auxiliary headers (handler's)
    content-length: 3\r\n                ← always, computed here
    content-type: text/plain\r\n         ← only when set
    content-encoding: gzip\r\n           ← only when compressed
    \r\n                                 ← exactly one blank line
    abc                                  ← body bytes, no trailing CRLF

Three headers are RESERVED. The serializer owns them and drops any copy a
handler put in the auxiliary map:

    ┌────────────────────┬────────────────────────────────────────────────┐
    │  Header            │  Source of truth                               │
    ├────────────────────┼────────────────────────────────────────────────┤
    │  content-length    │  len(final body), measured AFTER compression   │
    │  content-type      │  HTTPResponse.content_type                     │
    │  content-encoding  │  the gzip decision passed to render()          │
    └────────────────────┴────────────────────────────────────────────────┘

Header names go out lowercase. HTTP/1.1 names are case-insensitive, and
HTTP/2 made lowercase mandatory, so this is the safe spelling.

=============================================================================
ORDER OF OPERATIONS IN render()
=============================================================================

    HTTPResponse ──► compress? ──► measure ──► status line ──► headers ──► bytes
                        │             │
                 gzip_requested   content-length of the bytes
                                  actually sent

Measuring first and compressing second is the classic bug: the client
then waits for bytes that never arrive (or stops reading too early).

=============================================================================
"""

from dataclasses import dataclass, field
from typing import Mapping, Optional, Union

from .compression import DEFAULT_LEVEL, gzip_body
from .headers import HeaderMap
from .status_codes import HTTPStatus, reason_phrase


HTTP_VERSION = "HTTP/1.1"
CRLF = b"\r\n"

RESERVED_HEADERS = frozenset({"content-length", "content-type", "content-encoding"})

TEXT_PLAIN = "text/plain"
OCTET_STREAM = "application/octet-stream"


@dataclass
class HTTPResponse:
    """
    An HTTP response waiting to be serialized.

    Attributes:
        status:       Numeric status code (100-599)
        content_type: Value for the content-type header, or None to omit it
        headers:      Auxiliary headers. Reserved names are ignored on render.
        body:         Uncompressed body bytes

    A plain dict is accepted for `headers` and converted to a HeaderMap.
    """

    status: int = HTTPStatus.OK
    content_type: Optional[str] = None
    headers: HeaderMap = field(default_factory=HeaderMap)
    body: bytes = b""

    def __post_init__(self):
        if not 100 <= int(self.status) <= 599:
            raise ValueError(f"Status code out of range: {self.status}")
        if not isinstance(self.headers, HeaderMap):
            self.headers = HeaderMap(self.headers)
        if isinstance(self.body, str):
            self.body = self.body.encode("utf-8")

    @property
    def status_line(self) -> str:
        """
        "HTTP/1.1 <code> <reason>"

        The space before the reason stays even when the phrase is empty.
        """
        return f"{HTTP_VERSION} {int(self.status)} {reason_phrase(self.status)}"

    def to_bytes(self, gzip_requested: bool = False, level: int = DEFAULT_LEVEL) -> bytes:
        """Serialize this response. See render()."""
        return render(self, gzip_requested, level)


def render(
    response: HTTPResponse,
    gzip_requested: bool = False,
    level: int = DEFAULT_LEVEL,
) -> bytes:
    """
    Serialize a response to the exact bytes written on the socket.

    Args:
        response: The response to serialize. It is not modified.
        gzip_requested: Compress the body and emit content-encoding: gzip.
        level: gzip compression level (1 fastest, 9 smallest).

    Returns:
        Status line, headers, blank line and body as one bytes object.

    Compression errors propagate to the caller. The server answers with an
    uncompressed 500 in that case.
    """
    # =========================================================================
    # STEP 1: Final body (compress BEFORE measuring)
    # =========================================================================
    body = response.body
    if gzip_requested:
        body = gzip_body(body, level)

    # =========================================================================
    # STEP 2: Header lines
    # =========================================================================
    lines = [response.status_line]

    for name, value in response.headers.items():
        if name in RESERVED_HEADERS:
            continue
        lines.append(f"{name}: {value}")

    lines.append(f"content-length: {len(body)}")

    if response.content_type:
        lines.append(f"content-type: {response.content_type}")

    if gzip_requested:
        lines.append("content-encoding: gzip")

    # =========================================================================
    # STEP 3: Join
    # =========================================================================
    # Every line ends in CRLF, then one more CRLF for the blank separator.
    head = CRLF.join(line.encode("utf-8") for line in lines)
    return head + CRLF + CRLF + body


class ResponseBuilder:
    """
    Fluent builder for HTTPResponse.

        response = (ResponseBuilder()
            .status(HTTPStatus.OK)
            .text("abc")
            .header("X-Request-Id", "42")
            .build())

    Every method except build() returns self.
    """

    def __init__(self):
        self._status: int = HTTPStatus.OK
        self._content_type: Optional[str] = None
        self._headers = HeaderMap()
        self._body: bytes = b""

    def status(self, status: int) -> "ResponseBuilder":
        self._status = status
        return self

    def header(self, name: str, value: str) -> "ResponseBuilder":
        self._headers.set(name, value)
        return self

    def headers(self, headers: Mapping[str, str]) -> "ResponseBuilder":
        for name, value in headers.items():
            self._headers.set(name, value)
        return self

    def content_type(self, content_type: Optional[str]) -> "ResponseBuilder":
        self._content_type = content_type
        return self

    def body(self, body: Union[str, bytes]) -> "ResponseBuilder":
        """Set a raw body. Strings are encoded as UTF-8."""
        self._body = body.encode("utf-8") if isinstance(body, str) else body
        return self

    def text(self, text: str) -> "ResponseBuilder":
        """Set a text/plain body."""
        self._content_type = TEXT_PLAIN
        return self.body(text)

    def binary(self, data: bytes) -> "ResponseBuilder":
        """Set an application/octet-stream body."""
        self._content_type = OCTET_STREAM
        return self.body(data)

    def build(self) -> HTTPResponse:
        return HTTPResponse(
            status=self._status,
            content_type=self._content_type,
            headers=self._headers.copy(),
            body=self._body,
        )


# =============================================================================
# CONVENIENCE FUNCTIONS
# =============================================================================
#
# One-liners for the responses the handlers produce:
#
#     return text("abc")
#     return not_found()
#     return method_not_allowed(["GET", "POST"])
#
# =============================================================================

def ok(body: bytes = b"", content_type: Optional[str] = None) -> HTTPResponse:
    """200 OK with an optional body. No content-type unless given."""
    return ResponseBuilder().body(body).content_type(content_type).build()


def text(body: str, status: int = HTTPStatus.OK) -> HTTPResponse:
    """text/plain response, 200 by default."""
    return ResponseBuilder().status(status).text(body).build()


def created() -> HTTPResponse:
    """201 Created, empty text/plain body."""
    return ResponseBuilder().status(HTTPStatus.CREATED).text("").build()


def bad_request(message: str = "Bad Request") -> HTTPResponse:
    return text(message, HTTPStatus.BAD_REQUEST)


def not_found() -> HTTPResponse:
    """404 with an empty body and no content-type."""
    return HTTPResponse(status=HTTPStatus.NOT_FOUND)


def method_not_allowed(allowed_methods: list[str]) -> HTTPResponse:
    """
    405 Method Not Allowed.

    RFC 7231 requires an Allow header listing the methods that would work.
    """
    return (ResponseBuilder()
        .status(HTTPStatus.METHOD_NOT_ALLOWED)
        .header("Allow", ", ".join(allowed_methods))
        .build())


def unprocessable(message: str) -> HTTPResponse:
    """422 Unprocessable Entity, used for requests the parser rejected."""
    return text(message, HTTPStatus.UNPROCESSABLE_ENTITY)


def internal_error(message: str = "Internal Server Error") -> HTTPResponse:
    return text(message, HTTPStatus.INTERNAL_SERVER_ERROR)
