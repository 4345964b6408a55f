"""
=============================================================================
MINIHTTP - A minimal HTTP/1.1 server over raw sockets
=============================================================================

Parses requests straight from the bytes of one socket read and writes the
response bytes back by hand. No http.server, no socketserver.

=============================================================================
PACKAGE STRUCTURE
=============================================================================

    minihttp/
    ├── __init__.py          # Package exports
    ├── __main__.py          # CLI (python -m minihttp --directory ...)
    ├── server.py            # HTTPServer: read → parse → route → render → write
    ├── config.py            # ServerConfig (frozen dataclass)
    ├── access.py            # Access log lines
    ├── core/
    │   ├── socket_server.py # Listening socket and accept loop
    │   └── connection.py    # One client socket, one request
    ├── http/
    │   ├── headers.py       # Case-insensitive HeaderMap
    │   ├── status_codes.py  # HTTPStatus and reason phrases
    │   ├── request.py       # bytes → HTTPRequest
    │   ├── compression.py   # Accept-Encoding and gzip
    │   ├── response.py      # HTTPResponse → bytes
    │   └── router.py        # Pattern routing, 404 / 405
    └── handlers/
        ├── basic.py         # /, /echo/<rest>, /user-agent
        └── files.py         # GET / POST /files/<name>

=============================================================================
QUICK START
=============================================================================

    from minihttp import ServerConfig, create_app

    app = create_app(ServerConfig(port=4221, directory="/tmp/files"))
    app.run()

=============================================================================
"""

__version__ = "1.0.0"

from .config import ServerConfig
from .server import HTTPServer, create_app

__all__ = [
    "HTTPServer",
    "ServerConfig",
    "create_app",
    "__version__",
]
