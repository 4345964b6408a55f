"""
=============================================================================
HANDLERS
=============================================================================

The routes this server answers:

    ┌──────────────────┬──────────┬──────────────────────────────────────┐
    │ Pattern          │ Methods  │ Handler                              │
    ├──────────────────┼──────────┼──────────────────────────────────────┤
    │ /                │ any      │ basic.index       empty 200          │
    │ /user-agent      │ any      │ basic.user_agent  echo User-Agent    │
    │ /echo/*rest      │ any      │ basic.echo        echo the path tail │
    │ /files/*path     │ GET      │ FileHandler.get   read a file        │
    │ /files/*path     │ POST     │ FileHandler.post  write a file       │
    └──────────────────┴──────────┴──────────────────────────────────────┘

The /files routes exist only when the configuration names an absolute
directory. Without it, /files/... is an ordinary 404.
=============================================================================
"""

import logging

from ..config import ServerConfig
from ..http.router import Router
from .basic import echo, index, user_agent
from .files import FileHandler


logger = logging.getLogger(__name__)


def register_default_routes(router: Router, config: ServerConfig) -> Router:
    """
    Register the built-in routes on `router`.

    The files root is taken from `config` here, once, and bound into the
    FileHandler. Handlers never consult global state.
    """
    router.add_route("/", index)
    router.add_route("/user-agent", user_agent)
    router.add_route("/echo/*rest", echo)

    root = config.files_root
    if root is not None:
        files = FileHandler(root)
        router.add_route("/files/*path", files.get, "GET")
        router.add_route("/files/*path", files.post, "POST")
        logger.info(f"Serving files from {files.root_dir}")
    elif config.directory:
        logger.warning(f"Ignoring non-absolute files directory: {config.directory!r}")

    return router


__all__ = [
    "FileHandler",
    "echo",
    "index",
    "user_agent",
    "register_default_routes",
]
