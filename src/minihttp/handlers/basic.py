"""
Small built-in routes: the root check, echo and user-agent reflection.

    GET /               200, empty body
    GET /echo/abc       200, text/plain "abc"
    GET /user-agent     200, text/plain <User-Agent header>
"""

from ..http.request import HTTPRequest
from ..http.response import HTTPResponse, ok, text


def index(request: HTTPRequest) -> HTTPResponse:
    """Liveness check. Empty 200 with no content-type."""
    return ok()


def echo(request: HTTPRequest) -> HTTPResponse:
    """Echo whatever follows /echo/, byte for byte (no URL decoding)."""
    return text(request.path_params.get("rest", ""))


def user_agent(request: HTTPRequest) -> HTTPResponse:
    """Reflect the User-Agent header, empty when the client sent none."""
    return text(request.user_agent)
