"""
=============================================================================
SERVER CONFIGURATION
=============================================================================

Centralized, immutable configuration for the server.

=============================================================================
WHY FROZEN?
=============================================================================

Every connection thread reads the configuration (most importantly the
files directory). Nothing may write to it after startup:

    main thread                         connection threads
    ───────────                         ──────────────────
    config = ServerConfig(...)
    config.validate()
    routes built from config   ──────►  read config.files_root
    accept loop starts                  (no locks needed, never changes)

A frozen dataclass makes that rule enforced instead of conventional:
assigning to a field raises dataclasses.FrozenInstanceError.

=============================================================================
SOURCES
=============================================================================

    CLI flags           python -m minihttp --directory /srv/files --port 4221
    Environment         HTTP_DIRECTORY=/srv/files HTTP_PORT=4221
    Code                ServerConfig(directory="/srv/files")

=============================================================================
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional


LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass(frozen=True)
class ServerConfig:
    """
    Configuration for the HTTP server.

    =========================================================================
    CONFIGURATION GROUPS
    =========================================================================

    NETWORK     host, port, backlog, buffer_size, timeout
    FILES       directory
    ENCODING    gzip_level
    LOGGING     log_level
    IDENTITY    server_name

    =========================================================================
    """

    # ─────────────────────────────────────────────────────────────────────
    # NETWORK SETTINGS
    # ─────────────────────────────────────────────────────────────────────

    host: str = "0.0.0.0"
    """Address to bind. "0.0.0.0" listens on every interface."""

    port: int = 4221
    """TCP port to listen on. 0 asks the OS for a free port."""

    backlog: int = 128
    """Maximum number of connections queued by the kernel before accept()."""

    buffer_size: int = 8192
    """
    Size of the single read performed per connection.

    A request (head and body) larger than this is truncated. Only one read
    is made, so keep this above the largest upload you expect.
    """

    timeout: Optional[float] = None
    """
    Socket read timeout for client connections, in seconds.
    None = block until the client sends (a stalled client ties up only
    its own thread).
    """

    # ─────────────────────────────────────────────────────────────────────
    # FILES
    # ─────────────────────────────────────────────────────────────────────

    directory: Optional[str] = None
    """
    Root directory for /files/<name>.
    Must be an absolute path. Otherwise the files route stays disabled
    and /files/... answers 404 like any unknown path.
    """

    # ─────────────────────────────────────────────────────────────────────
    # ENCODING
    # ─────────────────────────────────────────────────────────────────────

    gzip_level: int = 6
    """gzip compression level, 1 (fastest) to 9 (smallest)."""

    # ─────────────────────────────────────────────────────────────────────
    # LOGGING
    # ─────────────────────────────────────────────────────────────────────

    log_level: str = "INFO"
    """DEBUG, INFO, WARNING, ERROR or CRITICAL."""

    server_name: str = "minihttp/1.0"
    """Shown in the startup banner."""

    @property
    def files_root(self) -> Optional[Path]:
        """
        The files directory as a Path, or None when the route is disabled.

        A relative path disables the route just like an unset one.
        """
        if not self.directory or not os.path.isabs(self.directory):
            return None
        return Path(self.directory)

    @classmethod
    def from_env(cls) -> "ServerConfig":
        """
        Create configuration from environment variables.

        =====================================================================
        ENVIRONMENT VARIABLES
        =====================================================================

        HTTP_HOST         Bind address (default: 0.0.0.0)
        HTTP_PORT         Port (default: 4221)
        HTTP_BUFFER_SIZE  Read buffer in bytes (default: 8192)
        HTTP_DIRECTORY    Files root (default: unset, route disabled)
        HTTP_LOG_LEVEL    Logging level (default: INFO)

        =====================================================================
        """
        return cls(
            host=os.getenv("HTTP_HOST", "0.0.0.0"),
            port=int(os.getenv("HTTP_PORT", "4221")),
            buffer_size=int(os.getenv("HTTP_BUFFER_SIZE", "8192")),
            directory=os.getenv("HTTP_DIRECTORY") or None,
            log_level=os.getenv("HTTP_LOG_LEVEL", "INFO"),
        )

    def validate(self) -> None:
        """
        Validate configuration values (fail fast, at startup).

        Raises:
            ValueError: On the first invalid value found.
        """
        if not 0 <= self.port < 65536:
            raise ValueError(f"Invalid port: {self.port}. Must be 0-65535.")

        if self.backlog < 1:
            raise ValueError("backlog must be >= 1")

        if self.buffer_size < 1024:
            raise ValueError("buffer_size must be >= 1024")

        if self.timeout is not None and self.timeout <= 0:
            raise ValueError("timeout must be > 0")

        if not 1 <= self.gzip_level <= 9:
            raise ValueError("gzip_level must be between 1 and 9")

        if self.log_level.upper() not in LOG_LEVELS:
            raise ValueError(f"Unknown log level: {self.log_level}")
