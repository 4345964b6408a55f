"""
pytest configuration and fixtures.
"""

import socket
import threading
from dataclasses import dataclass
from typing import Dict, Generator, Optional
import pytest

# Add src to path for imports
import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from minihttp import HTTPServer, ServerConfig, create_app


@pytest.fixture
def sample_get_request() -> bytes:
    """Sample HTTP GET request."""
    return (
        b"GET /echo/abc HTTP/1.1\r\n"
        b"Host: localhost:4221\r\n"
        b"User-Agent: pytest\r\n"
        b"Accept-Encoding: gzip\r\n"
        b"\r\n"
    )


@pytest.fixture
def sample_post_request() -> bytes:
    """Sample HTTP POST request with a binary body."""
    body = b"hello\x00\r\n\r\nworld"
    head = (
        b"POST /files/upload.bin HTTP/1.1\r\n"
        b"Host: localhost:4221\r\n"
        b"Content-Type: application/octet-stream\r\n"
        b"Content-Length: %d\r\n"
        b"\r\n"
    ) % len(body)
    return head + body


@pytest.fixture
def files_dir(tmp_path: Path) -> Path:
    """Empty directory to serve /files from."""
    root = tmp_path / "files"
    root.mkdir()
    return root


@pytest.fixture
def config(files_dir: Path) -> ServerConfig:
    """Test server configuration."""
    return ServerConfig(
        host="127.0.0.1",
        port=0,  # Let OS pick a free port
        timeout=5.0,
        directory=str(files_dir),
        log_level="WARNING",
    )


# =============================================================================
# RAW SOCKET CLIENT
# =============================================================================

@dataclass
class RawResponse:
    """A response as read off the wire, split but otherwise untouched."""

    status_line: str
    status: int
    headers: Dict[str, str]
    header_lines: list
    body: bytes
    raw: bytes


def parse_raw_response(raw: bytes) -> RawResponse:
    head, _, body = raw.partition(b"\r\n\r\n")
    lines = head.decode("utf-8").split("\r\n")

    headers = {}
    for line in lines[1:]:
        name, _, value = line.partition(": ")
        headers[name] = value

    return RawResponse(
        status_line=lines[0],
        status=int(lines[0].split(" ")[1]),
        headers=headers,
        header_lines=lines[1:],
        body=body,
        raw=raw,
    )


class TestServer:
    """Test server helper that runs in a background thread."""

    def __init__(self, server: HTTPServer):
        self.server = server
        self._thread: Optional[threading.Thread] = None

    @property
    def address(self):
        return self.server.address

    def start(self):
        """Start server in background thread."""
        self._thread = threading.Thread(target=self.server.run, daemon=True)
        self._thread.start()

        if not self.server.wait_until_ready(timeout=5.0):
            raise RuntimeError("Server failed to start")

    def stop(self):
        """Stop the server."""
        self.server.shutdown()
        self.server.wait_for_shutdown(timeout=5.0)

        if self._thread and self._thread.is_alive():
            self._thread.join(timeout=5.0)

    def send(self, data: bytes, timeout: float = 5.0) -> bytes:
        """Send raw bytes and read until the server closes the connection."""
        chunks = []
        with socket.create_connection(self.address, timeout=timeout) as sock:
            sock.sendall(data)
            while True:
                chunk = sock.recv(4096)
                if not chunk:
                    break
                chunks.append(chunk)
        return b"".join(chunks)

    def request(self, data: bytes) -> RawResponse:
        return parse_raw_response(self.send(data))


@pytest.fixture
def test_server(config: ServerConfig) -> Generator[TestServer, None, None]:
    """Running server with the built-in routes and a files directory."""
    test_srv = TestServer(create_app(config))
    test_srv.start()

    yield test_srv

    test_srv.stop()


@pytest.fixture
def server_factory() -> Generator:
    """
    Start arbitrary HTTPServer instances; every one is stopped at teardown.

        srv = server_factory(HTTPServer(config))
    """
    started = []

    def start(server: HTTPServer) -> TestServer:
        test_srv = TestServer(server)
        test_srv.start()
        started.append(test_srv)
        return test_srv

    yield start

    for test_srv in started:
        test_srv.stop()
