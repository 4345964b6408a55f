"""
=============================================================================
HTTP REQUEST PARSER
=============================================================================

Turns the raw bytes read from a TCP socket into a structured HTTPRequest.

=============================================================================
HTTP REQUEST ANATOMY
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                     HTTP REQUEST STRUCTURE                          │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │  ┌─ HEAD ─────────────────────────────────────────────────────────┐ │
    │  │                                                                 │ │
    │  │    POST /files/notes.txt HTTP/1.1\r\n     ← start line         │ │
    │  │    Host: localhost:4221\r\n               ┐                    │ │
    │  │    User-Agent: curl/8.0\r\n               ├ header block       │ │
    │  │    Content-Length: 5\r\n                  ┘                    │ │
    │  │                                                                 │ │
    │  └─────────────────────────────────────────────────────────────────┘ │
    │                                                                      │
    │    \r\n                                   ← blank line separator    │
    │                                                                      │
    │  ┌─ BODY ─────────────────────────────────────────────────────────┐ │
    │  │    hello                                  ← raw bytes, verbatim │ │
    │  └─────────────────────────────────────────────────────────────────┘ │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
PARSING STRATEGY
=============================================================================

The head is text, the body is NOT. We split on bytes first and only
decode the head:

    raw bytes
        │
        ├── partition(b"\\r\\n\\r\\n") ──► head bytes ──decode──► text
        │                                                          │
        │                                           partition("\\r\\n")
        │                                                 │        │
        │                                          start line   header block
        │
        └──────────────────────────────────► body bytes (never decoded)

Decoding the body would corrupt binary uploads: a PNG contains NUL bytes,
stray CR/LF pairs and invalid UTF-8 sequences.

=============================================================================
FAILURE MODES
=============================================================================

Only two things can go wrong, and both are reported as 422 Unprocessable
Entity:

    1. Malformed start line    "GET\\r\\n", "GET /a b HTTP/1.1\\r\\n"
    2. Wrong protocol version  "GET / HTTP/1.0\\r\\n"

Everything else is tolerated: header lines without a colon are skipped,
and a buffer with no blank line is treated as head-only with an empty body.
Method names are not checked here. Whether a verb is allowed is a routing
decision.

=============================================================================
"""

from dataclasses import dataclass, field
from typing import Dict

from .compression import accepts_gzip
from .headers import HeaderMap
from .status_codes import HTTPStatus


SUPPORTED_VERSION = "HTTP/1.1"

HEAD_TERMINATOR = b"\r\n\r\n"
LINE_TERMINATOR = "\r\n"


class HTTPParseError(Exception):
    """
    Raised when a request cannot be parsed.

    Carries the HTTP status the connection handler should answer with.
    The message itself becomes the response body, so keep it readable.
    """

    def __init__(self, message: str, status_code: int = HTTPStatus.UNPROCESSABLE_ENTITY):
        super().__init__(message)
        self.status_code = status_code


@dataclass(frozen=True)
class HTTPRequest:
    """
    A parsed HTTP request.

    Frozen: a request is built once per connection and never changes.
    The router attaches captured path parameters by deriving a new
    instance with dataclasses.replace().

    Attributes:
        method:         Request method token ("GET", "POST", ...)
        target:         Raw request target, query string included
        headers:        HeaderMap, names and values lowercased
        body:           Bytes after the blank line, untouched
        version:        Always "HTTP/1.1" for a successful parse
        client_address: Peer (ip, port), used for logging
        path_params:    Values captured by the router (":id", "*rest")
    """

    method: str
    target: str
    headers: HeaderMap = field(default_factory=HeaderMap)
    body: bytes = b""
    version: str = SUPPORTED_VERSION
    client_address: tuple[str, int] = ("", 0)
    path_params: Dict[str, str] = field(default_factory=dict)

    # =========================================================================
    # CONVENIENCE ACCESSORS
    # =========================================================================

    def get_header(self, name: str, default: str = "") -> str:
        """Case-insensitive header lookup with a string default."""
        value = self.headers.get(name)
        return default if value is None else value

    @property
    def user_agent(self) -> str:
        return self.get_header("user-agent")

    @property
    def accept_encoding(self) -> str:
        return self.get_header("accept-encoding")

    @property
    def accepts_gzip(self) -> bool:
        """True when the client listed gzip in Accept-Encoding."""
        return accepts_gzip(self.accept_encoding)


class RequestParser:
    """
    Parses raw HTTP request bytes into HTTPRequest objects.

    The parser holds no state between calls, so one instance can be shared
    by every connection thread.

        parser = RequestParser()
        request = parser.parse(b"GET / HTTP/1.1\\r\\n\\r\\n", ("127.0.0.1", 5000))
    """

    def parse(
        self,
        data: bytes,
        client_address: tuple[str, int] = ("", 0)
    ) -> HTTPRequest:
        """
        Parse a single HTTP message.

        Args:
            data: Exactly the bytes received for one request.
            client_address: Peer (ip, port) for logging.

        Returns:
            The parsed request.

        Raises:
            HTTPParseError: Malformed start line or unsupported version.
        """
        # ---------------------------------------------------------------------
        # STEP 1: head / body split on the first blank line
        # ---------------------------------------------------------------------
        # No separator means a partial request. We still try to serve it,
        # with an empty body.
        head, separator, body = data.partition(HEAD_TERMINATOR)
        if not separator:
            body = b""

        # HTTP/1.1 heads are ASCII in practice. Replacement keeps odd bytes
        # from turning into a hard failure.
        head_text = head.decode("utf-8", errors="replace")

        # ---------------------------------------------------------------------
        # STEP 2: start line / header block
        # ---------------------------------------------------------------------
        start_line, _, header_block = head_text.partition(LINE_TERMINATOR)

        method, target = self._parse_start_line(start_line)
        headers = self._parse_headers(header_block)

        return HTTPRequest(
            method=method,
            target=target,
            headers=headers,
            body=body,
            client_address=client_address,
        )

    def _parse_start_line(self, line: str) -> tuple[str, str]:
        """
        Parse "METHOD SP TARGET SP VERSION".

        Exactly three non-empty tokens separated by single spaces. A double
        space produces an empty token and is rejected like any other
        malformed line.
        """
        parts = line.split(" ")
        if len(parts) != 3 or not all(parts):
            raise HTTPParseError(f"Malformed request line: {line!r}")

        method, target, version = parts
        if version != SUPPORTED_VERSION:
            raise HTTPParseError(f"Only {SUPPORTED_VERSION} is supported, got {version!r}")

        return method, target

    def _parse_headers(self, block: str) -> HeaderMap:
        """
        Parse "Name: value" lines into a HeaderMap.

        Names and values are both lowercased. Lines without a colon are
        skipped, later duplicates replace earlier ones.
        """
        headers = HeaderMap()

        for line in block.split(LINE_TERMINATOR):
            if not line:
                continue

            # Split on the FIRST colon only: "Host: localhost:4221" keeps
            # the port in the value.
            name, colon, value = line.partition(":")
            if not colon or not name.strip():
                continue

            headers.set(name, value.lower())

        return headers


_default_parser = RequestParser()


def parse_request(
    data: bytes,
    client_address: tuple[str, int] = ("", 0),
) -> HTTPRequest:
    """Parse one request with a shared, stateless RequestParser."""
    return _default_parser.parse(data, client_address)

