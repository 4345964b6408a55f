"""
=============================================================================
TCP LISTENER
=============================================================================

Owns the listening socket: bind, listen, and the accept loop that hands
each client socket to the HTTP layer.

=============================================================================
SOCKET LIFECYCLE (server side)
=============================================================================

    1. socket()    create a TCP socket
    2. bind()      reserve host:port
    3. listen()    let the kernel queue incoming connections
    4. accept()    take the next queued connection; returns a NEW socket
                   dedicated to that client, the listener keeps listening
    5. close()     release the listener on shutdown

                    ┌───────────────────────┐
                    │   Listening socket    │ ◄── created once
                    │   0.0.0.0:4221        │     never carries request data
                    └───────────┬───────────┘
                                │ accept()
            ┌───────────────────┼───────────────────┐
            ▼                   ▼                   ▼
     ┌─────────────┐     ┌─────────────┐     ┌─────────────┐
     │ client sock │     │ client sock │     │ client sock │
     │  thread 1   │     │  thread 2   │     │  thread 3   │
     └─────────────┘     └─────────────┘     └─────────────┘

=============================================================================
INTERRUPTIBLE ACCEPT
=============================================================================

accept() blocks. To notice shutdown() we give the listener a 1 second
timeout and loop:

    while running:
        try:
            accept()          # at most 1s
        except timeout:
            continue          # re-check running

A failed accept() (EMFILE, ECONNABORTED, ...) is logged and the loop goes
on. One bad connection never stops the server.
=============================================================================
"""

import socket
import signal
import logging
import threading
from typing import Optional, Callable, Tuple

from ..config import ServerConfig
from .connection import Connection


logger = logging.getLogger(__name__)

ACCEPT_POLL_INTERVAL = 1.0


class SocketServer:
    """
    Low-level TCP socket server.

    Usage:
        def handle_connection(conn: Connection):
            ...

        server = SocketServer(config)
        server.start(handle_connection)  # blocks until shutdown()
    """

    def __init__(self, config: ServerConfig):
        self.config = config

        self._socket: Optional[socket.socket] = None
        self._running = False

        # Set when the accept loop has exited and the listener is closed
        self._stopped_event = threading.Event()
        # Set once the socket is bound and listening
        self._ready_event = threading.Event()

        self._original_handlers: dict = {}

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def address(self) -> Tuple[str, int]:
        """
        The bound (host, port).

        With port 0 the OS picks the port; this reports the real one once
        the server is listening.
        """
        if self._socket is not None:
            return self._socket.getsockname()[:2]
        return (self.config.host, self.config.port)

    def _create_socket(self) -> socket.socket:
        """Create and configure the listening socket."""
        sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)

        # Restart without waiting for TIME_WAIT to expire
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)

        # Responses are written in one sendall(); don't let Nagle hold the tail
        sock.setsockopt(socket.IPPROTO_TCP, socket.TCP_NODELAY, 1)

        sock.settimeout(ACCEPT_POLL_INTERVAL)
        return sock

    def _setup_signals(self):
        """
        Turn SIGTERM / SIGINT into a graceful shutdown.

        Python only allows signal handlers on the main thread. When the
        server runs in a background thread (tests, embedding) this is a
        no-op and the owner calls shutdown() directly.
        """
        if threading.current_thread() is not threading.main_thread():
            return

        def shutdown_handler(signum, frame):
            signal_name = signal.Signals(signum).name
            logger.info(f"Received {signal_name}, initiating shutdown...")
            self.shutdown()

        self._original_handlers[signal.SIGTERM] = signal.signal(signal.SIGTERM, shutdown_handler)
        self._original_handlers[signal.SIGINT] = signal.signal(signal.SIGINT, shutdown_handler)

    def _restore_signals(self):
        for sig, handler in self._original_handlers.items():
            signal.signal(sig, handler)
        self._original_handlers.clear()

    def start(self, connection_handler: Callable[[Connection], None]):
        """
        Bind, listen and run the accept loop. Blocks until shutdown().

        Args:
            connection_handler: Called with every accepted Connection. It
                                must return quickly (hand the connection to
                                a thread); the accept loop waits for it.

        Raises:
            OSError: The address could not be bound.
        """
        self._socket = self._create_socket()
        self._stopped_event.clear()

        try:
            self._socket.bind((self.config.host, self.config.port))
        except OSError as e:
            logger.error(f"Failed to bind to {self.config.host}:{self.config.port}: {e}")
            self._socket.close()
            self._socket = None
            self._stopped_event.set()
            raise

        self._socket.listen(self.config.backlog)

        self._running = True
        self._setup_signals()

        host, port = self.address
        logger.info(f"Listening on {host}:{port}")
        self._ready_event.set()

        try:
            self._accept_loop(connection_handler)
        finally:
            self._cleanup()

    def _accept_loop(self, connection_handler: Callable[[Connection], None]):
        """Accept connections until shutdown() clears the running flag."""
        while self._running:
            try:
                client_socket, client_address = self._socket.accept()
            except socket.timeout:
                continue
            except OSError as e:
                if not self._running:
                    break
                logger.error(f"Could not accept TCP connection: {e}")
                continue

            logger.debug(f"Accepted connection from {client_address[0]}:{client_address[1]}")

            conn = Connection(
                socket=client_socket,
                address=client_address,
                buffer_size=self.config.buffer_size,
                timeout=self.config.timeout,
            )
            connection_handler(conn)

    def shutdown(self):
        """
        Ask the accept loop to stop. Safe to call from any thread, and
        more than once.
        """
        if self._running:
            logger.info("Shutting down socket server...")
        self._running = False

    def _cleanup(self):
        self._restore_signals()

        if self._socket:
            try:
                self._socket.close()
            except OSError:
                pass
            self._socket = None

        self._ready_event.clear()
        self._stopped_event.set()
        logger.info("Socket server stopped")

    def wait_until_ready(self, timeout: Optional[float] = None) -> bool:
        """Block until the socket is listening. Returns False on timeout."""
        return self._ready_event.wait(timeout)

    def wait_for_shutdown(self, timeout: Optional[float] = None) -> bool:
        """Block until the accept loop has exited. Returns False on timeout."""
        return self._stopped_event.wait(timeout)
