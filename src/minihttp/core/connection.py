"""
=============================================================================
CONNECTION HANDLING
=============================================================================

Wraps one accepted client socket for the lifetime of one request.

=============================================================================
LIFECYCLE
=============================================================================

One connection carries exactly one request. There is no keep-alive loop:

    ┌─────────┐  accept()  ┌─────────┐ read_request() ┌────────────┐
    │   NEW   │───────────►│ READING │───────────────►│ PROCESSING │
    └─────────┘            └────┬────┘                └─────┬──────┘
                                │ error / EOF                │
                                │                            ▼
                                │                      ┌───────────┐
                                │                      │  WRITING  │
                                │                      └─────┬─────┘
                                ▼                            ▼
                          ┌───────────┐   close()      ┌───────────┐
                          │  CLOSING  │◄───────────────│   (done)  │
                          └─────┬─────┘                └───────────┘
                                ▼
                          ┌───────────┐
                          │  CLOSED   │
                          └───────────┘

=============================================================================
THE SINGLE READ
=============================================================================

read_request() performs ONE recv_into() on a fixed-size buffer and returns
exactly the bytes received:

    buffer (buffer_size bytes)
    ┌──────────────────────────────┬────────────────────────────────────┐
    │ G E T   / …  \r\n\r\n  body  │ 00 00 00 00 00 … (never filled)    │
    └──────────────────────────────┴────────────────────────────────────┘
    ◄──────────── nbytes ─────────►
               returned                  dropped

Slicing at nbytes (rather than scanning for the first zero byte) keeps NUL
bytes inside an uploaded body.

KNOWN LIMITATION: a request that does not arrive in one read, or that is
larger than buffer_size, is parsed from whatever the first read returned.
There is no Content-Length driven read loop.

=============================================================================
"""

import socket
import time
import logging
from enum import Enum
from dataclasses import dataclass, field
from typing import Optional
import uuid


logger = logging.getLogger(__name__)


class ConnectionState(Enum):
    """Connection lifecycle states, used for logging and close()."""
    NEW = "new"
    READING = "reading"
    PROCESSING = "processing"
    WRITING = "writing"
    CLOSING = "closing"
    CLOSED = "closed"


@dataclass
class Connection:
    """
    A client connection.

    Attributes:
        socket: The accepted client socket.
        address: Client's (ip, port) tuple.
        id: Short unique identifier for log lines.
        state: Current lifecycle state.
        created_at: Timestamp when the connection was accepted.
        buffer_size: Size of the single read.
        timeout: Read timeout in seconds, None to block.

    Use as a context manager so the socket is always released:

        with conn:
            data = conn.read_request()
            conn.send_response(payload)
    """

    socket: socket.socket
    address: tuple[str, int]

    id: str = field(default_factory=lambda: str(uuid.uuid4())[:8])
    state: ConnectionState = ConnectionState.NEW
    created_at: float = field(default_factory=time.time)

    buffer_size: int = 8192
    timeout: Optional[float] = None

    def __post_init__(self):
        # The listening socket polls with a timeout. Client sockets block
        # unless a read timeout was configured.
        self.socket.setblocking(True)
        if self.timeout:
            self.socket.settimeout(self.timeout)

    @property
    def client_ip(self) -> str:
        return self.address[0]

    @property
    def client_port(self) -> int:
        return self.address[1]

    @property
    def age(self) -> float:
        """Seconds since the connection was accepted."""
        return time.time() - self.created_at

    # =========================================================================
    # READING
    # =========================================================================

    def read_request(self) -> bytes:
        """
        Read one request with a single fixed-size read.

        Returns:
            The bytes received. Empty bytes mean the client closed the
            connection without sending anything.

        Raises:
            OSError: The read failed (reset, timeout, ...). The caller logs
                     it and closes the connection without responding.
        """
        self.state = ConnectionState.READING

        buffer = bytearray(self.buffer_size)
        nbytes = self.socket.recv_into(buffer)

        logger.debug(f"[{self.id}] Read {nbytes} bytes from {self.client_ip}:{self.client_port}")
        return bytes(buffer[:nbytes])

    # =========================================================================
    # WRITING
    # =========================================================================

    def send_response(self, data: bytes) -> bool:
        """
        Send the complete response.

        sendall() loops until every byte is written. Plain send() may stop
        after a partial write.

        Returns:
            True if the data was sent, False if the client went away.
        """
        self.state = ConnectionState.WRITING

        try:
            self.socket.sendall(data)
            return True
        except OSError as e:
            logger.warning(f"[{self.id}] Send failed: {e}")
            return False

    # =========================================================================
    # CLOSING
    # =========================================================================

    def close(self):
        """
        Close the connection gracefully.

        1. shutdown(SHUT_WR) sends FIN: the client sees end-of-response.
        2. Drain what the client still sends (e.g. the tail of an upload
           larger than our read) so the kernel does not answer with RST
           and discard the response we just wrote.
        3. close() releases the file descriptor.
        """
        if self.state == ConnectionState.CLOSED:
            return

        self.state = ConnectionState.CLOSING

        try:
            self.socket.shutdown(socket.SHUT_WR)
        except OSError:
            pass  # Client already gone

        try:
            self.socket.settimeout(0.5)
            while self.socket.recv(1024):
                pass
        except OSError:
            pass  # Drain timed out or peer reset; closing either way

        try:
            self.socket.close()
        except OSError:
            pass

        self.state = ConnectionState.CLOSED
        logger.debug(f"[{self.id}] Connection closed after {self.age * 1000:.1f}ms")

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False
