"""
=============================================================================
HTTP SERVER
=============================================================================

Ties the pieces together:

    ┌──────────────┐  Connection  ┌──────────────────────────────────────┐
    │ SocketServer │─────────────►│ _handle_connection                   │
    │ accept loop  │              │   spawn thread "conn-<id>"           │
    └──────────────┘              └──────────────────┬───────────────────┘
                                                     ▼
                                  ┌──────────────────────────────────────┐
                                  │ _process_connection (own thread)     │
                                  │   read → parse → route → render      │
                                  │   → write → access log → close       │
                                  └──────────────────────────────────────┘

=============================================================================
REQUEST LIFECYCLE
=============================================================================

    1. READ      one recv_into() of config.buffer_size bytes
                 read error       → log, close, no response
                 nothing received → close, no response
    2. PARSE     bytes → HTTPRequest
                 HTTPParseError   → 422 text/plain <reason>
    3. ROUTE     Router.handle(request)
                 handler raises   → 500
    4. RENDER    render(response, gzip if the client asked for it)
                 render raises    → uncompressed 500
    5. WRITE     sendall(); a vanished client is logged, not raised
    6. CLOSE     always, via the Connection context manager

=============================================================================
CONCURRENCY
=============================================================================

One daemon thread per connection. Threads are never joined: each owns its
connection from spawn to close, and shares only the frozen ServerConfig
and the Router (filled in before the first accept, read-only afterwards).

Daemon threads do not keep the process alive, so a stuck client cannot
block shutdown.
=============================================================================
"""

import logging
import threading
from typing import Optional, Tuple

from .access import RequestLog, log_request
from .config import ServerConfig
from .core import Connection, ConnectionState, SocketServer
from .handlers import register_default_routes
from .http import (
    HTTPRequest, HTTPResponse, HTTPParseError, RequestParser, Router,
    internal_error, render, unprocessable,
)
from .http.request import HEAD_TERMINATOR


logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


class HTTPServer:
    """
    Raw-socket HTTP/1.1 server.

    Usage:
        server = HTTPServer(ServerConfig(port=4221))

        @server.get("/hello")
        def hello(request):
            return text("hi")

        server.run()   # blocks until SIGINT / SIGTERM / shutdown()

    Routes must be registered before run(). The router is not locked and
    is read concurrently by connection threads.
    """

    def __init__(self, config: Optional[ServerConfig] = None):
        self.config = config or ServerConfig()
        self.config.validate()

        self._socket_server = SocketServer(self.config)
        self._parser = RequestParser()
        self._router = Router()

    @property
    def router(self) -> Router:
        return self._router

    @property
    def address(self) -> Tuple[str, int]:
        """Bound (host, port); the real port once listening with port=0."""
        return self._socket_server.address

    # =========================================================================
    # ROUTE REGISTRATION
    # =========================================================================

    def route(self, path: str, method: Optional[str] = None):
        """Register a route handler for one method, or any method."""
        return self._router.route(path, method)

    def get(self, path: str):
        """Register a GET route."""
        return self._router.get(path)

    def post(self, path: str):
        """Register a POST route."""
        return self._router.post(path)

    # =========================================================================
    # LIFECYCLE
    # =========================================================================

    def run(self):
        """
        Start serving (blocking).

        Raises:
            OSError: The listening address could not be bound.
        """
        self._setup_logging()
        self._print_startup_banner()
        self._router.log_routes()

        try:
            self._socket_server.start(self._handle_connection)
        except KeyboardInterrupt:
            logger.info("Received keyboard interrupt")
            self._socket_server.shutdown()
        finally:
            logger.info("Server stopped")

    def shutdown(self):
        """Stop accepting connections. In-flight connection threads finish on their own."""
        self._socket_server.shutdown()

    def wait_until_ready(self, timeout: Optional[float] = None) -> bool:
        return self._socket_server.wait_until_ready(timeout)

    def wait_for_shutdown(self, timeout: Optional[float] = None) -> bool:
        return self._socket_server.wait_for_shutdown(timeout)

    def _setup_logging(self):
        level = getattr(logging, self.config.log_level.upper(), logging.INFO)

        # No-op if the embedding application configured logging already
        logging.basicConfig(
            level=level,
            format=LOG_FORMAT,
            datefmt="%Y-%m-%d %H:%M:%S",
        )
        logging.getLogger("minihttp").setLevel(level)

    def _print_startup_banner(self):
        files = self.config.files_root or "(disabled)"
        print()
        print("╔══════════════════════════════════════════════════════════════╗")
        print(f"  {self.config.server_name}")
        print(f"  http://{self.config.host}:{self.config.port}")
        print(f"  files: {files}")
        print("  Press Ctrl+C to stop")
        print("╚══════════════════════════════════════════════════════════════╝")
        print()

    # =========================================================================
    # REQUEST HANDLING
    # =========================================================================

    def _handle_connection(self, conn: Connection):
        """
        Hand a freshly accepted connection to its own thread.

        Called on the accept loop, so it only spawns and returns.
        """
        worker = threading.Thread(
            target=self._process_connection,
            args=(conn,),
            name=f"conn-{conn.id}",
            daemon=True,
        )
        try:
            worker.start()
        except RuntimeError as e:
            # Thread limit reached
            logger.error(f"[{conn.id}] Could not start connection thread: {e}")
            conn.close()

    def _process_connection(self, conn: Connection):
        """Serve exactly one request on `conn`, then close it."""
        with conn:
            try:
                raw_request = conn.read_request()
            except OSError as e:
                logger.error(
                    f"[{conn.id}] Could not read from TCP connection "
                    f"{conn.client_ip}:{conn.client_port}: {e}"
                )
                return

            if not raw_request:
                logger.debug(f"[{conn.id}] Client closed without sending a request")
                return

            conn.state = ConnectionState.PROCESSING

            request: Optional[HTTPRequest] = None
            try:
                request = self._parser.parse(raw_request, conn.address)
            except HTTPParseError as e:
                logger.warning(f"[{conn.id}] Unparseable request from {conn.client_ip}: {e}")
                response = unprocessable(str(e))
            else:
                response = self._dispatch(conn, request)

            gzip_requested = request.accepts_gzip if request else False
            response, payload = self._render(conn, response, gzip_requested)

            if conn.send_response(payload):
                log_request(RequestLog.create(
                    request_id=conn.id,
                    client_ip=conn.client_ip,
                    request=request,
                    status_code=int(response.status),
                    content_length=_body_length(payload),
                    duration_ms=conn.age * 1000,
                ))

    def _dispatch(self, conn: Connection, request: HTTPRequest) -> HTTPResponse:
        try:
            return self._router.handle(request)
        except Exception as e:
            logger.exception(f"[{conn.id}] Handler error for {request.method} {request.target}: {e}")
            return internal_error()

    def _render(
        self,
        conn: Connection,
        response: HTTPResponse,
        gzip_requested: bool,
    ) -> Tuple[HTTPResponse, bytes]:
        """
        Serialize `response`. If that fails, serialize a plain 500 instead.

        Returns:
            The response actually rendered and its wire bytes.
        """
        try:
            return response, render(response, gzip_requested, self.config.gzip_level)
        except Exception as e:
            logger.exception(f"[{conn.id}] Could not render response: {e}")
            fallback = internal_error(str(e))
            return fallback, render(fallback)


def _body_length(payload: bytes) -> int:
    return len(payload) - payload.index(HEAD_TERMINATOR) - len(HEAD_TERMINATOR)


def create_app(config: Optional[ServerConfig] = None) -> HTTPServer:
    """
    Create a server with the built-in routes registered.

    Example:
        app = create_app(ServerConfig(directory="/tmp/files"))
        app.run()
    """
    server = HTTPServer(config)
    register_default_routes(server.router, server.config)
    return server


# =============================================================================
# MODULE SUMMARY
# =============================================================================
#
# HTTPServer owns the SocketServer, the RequestParser and the Router.
# Every accepted connection gets a daemon thread running
# _process_connection(), which turns every failure it can see into either
# a logged close (read errors) or an HTTP error response (422, 500).
#
# create_app() is the entry point used by the CLI and the tests.
#
# =============================================================================
