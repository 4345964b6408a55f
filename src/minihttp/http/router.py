"""
=============================================================================
URL ROUTER
=============================================================================

Maps a parsed request to the handler that produces its response.

    Incoming request        Router                      Handler
    ────────────────        ──────                      ───────
    GET  /                  "/"            (any)    →   index
    GET  /echo/abc          "/echo/*rest"  (any)    →   echo       rest="abc"
    GET  /user-agent        "/user-agent"  (any)    →   user_agent
    GET  /files/a.txt       "/files/*path" GET      →   files.get  path="a.txt"
    POST /files/a.txt       "/files/*path" POST     →   files.post path="a.txt"
    PUT  /files/a.txt       (path known, verb not)  →   405 + Allow: GET, POST
    GET  /nope              (nothing)               →   404

=============================================================================
PATTERN SYNTAX
=============================================================================

    /users          static segment, exact and case-sensitive
    /users/:id      one segment (no slash), captured as "id"
    /files/*path    the rest of the target verbatim, may be empty or
                    contain slashes, captured as "path"

Patterns compile to anchored regexes once, at registration time:

    "/files/*path"  →  ^/files/(?P<path>.*)$

Matching runs against the RAW target. Nothing is decoded or normalized,
so "/echo/a%20b/" echoes "a%20b/" exactly as sent.
The whole target must match (fullmatch): a regex "$" alone would also
accept "/user-agent\\n".

=============================================================================
"""

from dataclasses import dataclass, field, replace
from typing import Callable, Dict, List, Optional
import logging
import re

from .request import HTTPRequest
from .response import HTTPResponse, method_not_allowed, not_found


logger = logging.getLogger(__name__)

# A handler takes a request and returns a response
Handler = Callable[[HTTPRequest], HTTPResponse]

ALL_METHODS = ["DELETE", "GET", "HEAD", "OPTIONS", "PATCH", "POST", "PUT"]


@dataclass
class Route:
    """
    A URL pattern bound to a handler.

    `method` of None means the route answers every verb.
    """

    path: str
    method: Optional[str]
    handler: Handler
    _pattern: Optional[re.Pattern] = field(default=None, repr=False)
    _param_names: List[str] = field(default_factory=list, repr=False)


@dataclass
class RouteMatch:
    """A matched route plus the parameters captured from the target."""

    route: Route
    params: Dict[str, str]


class Router:
    """
    Ordered list of routes. First registered, first matched.

        router = Router()

        @router.get("/hello")
        def hello(request):
            return text("hi")

        response = router.handle(request)
    """

    def __init__(self):
        self._routes: List[Route] = []

    @property
    def routes(self) -> List[Route]:
        return list(self._routes)

    # =========================================================================
    # REGISTRATION
    # =========================================================================

    def add_route(
        self,
        path: str,
        handler: Handler,
        method: Optional[str] = None,
    ) -> Route:
        """
        Register a route.

        Args:
            path: URL pattern (e.g. "/echo/*rest")
            handler: Callable taking HTTPRequest, returning HTTPResponse
            method: HTTP method, or None for any method

        Returns:
            The registered Route
        """
        pattern, param_names = self._compile_pattern(path)

        route = Route(
            path=path,
            method=method.upper() if method else None,
            handler=handler,
            _pattern=pattern,
            _param_names=param_names,
        )
        self._routes.append(route)
        return route

    def _compile_pattern(self, path: str) -> tuple[re.Pattern, List[str]]:
        """
        Compile a route pattern into an anchored regex.

            "/files/*path"  →  ^/files/(?P<path>.*)$
            "/users/:id"    →  ^/users/(?P<id>[^/]+)$
            "/"             →  ^/$

        A wildcard consumes the rest of the target, so it ends the pattern.
        """
        if path == "/":
            return re.compile(r"^/$"), []

        param_names: List[str] = []
        regex_parts = ["^"]

        for segment in path.split("/")[1:]:
            regex_parts.append("/")

            if segment.startswith(":"):
                name = segment[1:]
                param_names.append(name)
                regex_parts.append(f"(?P<{name}>[^/]+)")
            elif segment.startswith("*"):
                name = segment[1:] or "wildcard"
                param_names.append(name)
                regex_parts.append(f"(?P<{name}>.*)")
                break
            else:
                regex_parts.append(re.escape(segment))

        regex_parts.append("$")
        return re.compile("".join(regex_parts)), param_names

    # =========================================================================
    # MATCHING
    # =========================================================================

    def match(self, method: str, target: str) -> Optional[RouteMatch]:
        """Find the first route matching both method and target."""
        for route in self._routes:
            if route.method and route.method != method:
                continue

            found = route._pattern.fullmatch(target)
            if found:
                return RouteMatch(route=route, params=found.groupdict())

        return None

    def get_allowed_methods(self, target: str) -> List[str]:
        """
        Methods that some route would accept for this target.

        Feeds the Allow header of a 405. Empty means the target is unknown.
        """
        methods = set()
        for route in self._routes:
            if route._pattern.fullmatch(target):
                if route.method is None:
                    return list(ALL_METHODS)
                methods.add(route.method)
        return sorted(methods)

    def handle(self, request: HTTPRequest) -> HTTPResponse:
        """
        Dispatch a request.

            matched            → handler(request with path_params)
            target known only
            for other verbs    → 405 with Allow
            nothing            → 404
        """
        found = self.match(request.method, request.target)
        if found:
            # HTTPRequest is frozen: derive a copy carrying the captures
            routed = replace(request, path_params=found.params)
            return found.route.handler(routed)

        allowed = self.get_allowed_methods(request.target)
        if allowed:
            return method_not_allowed(allowed)

        return not_found()

    # =========================================================================
    # DECORATORS
    # =========================================================================

    def route(self, path: str, method: Optional[str] = None) -> Callable[[Handler], Handler]:
        """
        Decorator form of add_route().

            @router.route("/echo/*rest")
            def echo(request):
                ...
        """
        def decorator(handler: Handler) -> Handler:
            self.add_route(path, handler, method)
            return handler
        return decorator

    def get(self, path: str) -> Callable[[Handler], Handler]:
        """Register a GET route."""
        return self.route(path, "GET")

    def post(self, path: str) -> Callable[[Handler], Handler]:
        """Register a POST route."""
        return self.route(path, "POST")

    def log_routes(self) -> None:
        """Log the routing table at DEBUG level."""
        for route in self._routes:
            logger.debug(f"Route {route.method or '*':<6} {route.path}")
