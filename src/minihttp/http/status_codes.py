"""
=============================================================================
HTTP STATUS CODES
=============================================================================

Status codes and the reason phrases written on the status line:

    HTTP/1.1 404 Not Found
             ─┬─ ────┬────
              │      └── reason phrase (for humans, clients ignore it)
              └───────── status code  (for machines)

The table covers exactly the codes this server produces. Codes outside it
are still legal on the wire; they render with an empty reason phrase:

    HTTP/1.1 299 \\r\\n

RFC 7230 allows an empty reason-phrase, the single space after the code
stays.
=============================================================================
"""

from enum import IntEnum


class HTTPStatus(IntEnum):
    """
    HTTP status codes.

    IntEnum members compare equal to plain integers:

        >>> HTTPStatus.NOT_FOUND == 404
        True
        >>> HTTPStatus.NOT_FOUND.phrase
        'Not Found'
    """

    # 2xx SUCCESS
    OK = 200
    CREATED = 201

    # 4xx CLIENT ERRORS
    BAD_REQUEST = 400              # file path escapes the files root
    NOT_FOUND = 404
    METHOD_NOT_ALLOWED = 405
    UNPROCESSABLE_ENTITY = 422     # request could not be parsed

    # 5xx SERVER ERRORS
    INTERNAL_SERVER_ERROR = 500

    @property
    def phrase(self) -> str:
        """Reason phrase for the status line, e.g. "Not Found"."""
        return _STATUS_PHRASES[self]

    @property
    def is_success(self) -> bool:
        return 200 <= self < 300

    @property
    def is_client_error(self) -> bool:
        return 400 <= self < 500

    @property
    def is_server_error(self) -> bool:
        return 500 <= self < 600


_STATUS_PHRASES = {
    HTTPStatus.OK: "OK",
    HTTPStatus.CREATED: "Created",
    HTTPStatus.BAD_REQUEST: "Bad Request",
    HTTPStatus.NOT_FOUND: "Not Found",
    HTTPStatus.METHOD_NOT_ALLOWED: "Method Not Allowed",
    HTTPStatus.UNPROCESSABLE_ENTITY: "Unprocessable Entity",
    HTTPStatus.INTERNAL_SERVER_ERROR: "Internal Server Error",
}


def reason_phrase(code: int) -> str:
    """
    Look up the reason phrase for any integer status code.

    Unknown codes return "" rather than raising, so a handler may use a
    code this table does not list.
    """
    try:
        return HTTPStatus(code).phrase
    except ValueError:
        return ""
