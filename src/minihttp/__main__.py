"""
=============================================================================
CLI ENTRY POINT
=============================================================================

    python -m minihttp                              # 0.0.0.0:4221, no files
    python -m minihttp --directory /tmp/files       # enable /files/<name>
    python -m minihttp --port 8080 --log-level DEBUG

Defaults come from the environment (HTTP_HOST, HTTP_PORT, HTTP_BUFFER_SIZE,
HTTP_DIRECTORY, HTTP_LOG_LEVEL); command-line flags override them.

Exit status is 1 when the configuration is invalid or the address cannot
be bound.
=============================================================================
"""

import argparse
import sys
from dataclasses import replace
from typing import List, Optional

from . import __version__
from .config import LOG_LEVELS, ServerConfig
from .server import create_app


def build_parser(defaults: ServerConfig) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="minihttp",
        description="Minimal HTTP/1.1 server over raw sockets",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m minihttp                             # Run with defaults
  python -m minihttp --directory /tmp/files      # Serve and accept files
  python -m minihttp --port 8080 -l DEBUG        # Custom port, verbose
        """
    )

    # ─────────────────────────────────────────────────────────────────────
    # NETWORK ARGUMENTS
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--host", "-H",
        default=defaults.host,
        help=f"Host to bind to (default: {defaults.host})"
    )

    parser.add_argument(
        "--port", "-p",
        type=int,
        default=defaults.port,
        help=f"Port to listen on (default: {defaults.port})"
    )

    parser.add_argument(
        "--buffer-size",
        type=int,
        default=defaults.buffer_size,
        help=f"Bytes read per request, head and body (default: {defaults.buffer_size})"
    )

    # ─────────────────────────────────────────────────────────────────────
    # FEATURE ARGUMENTS
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--directory",
        default=defaults.directory,
        help="Absolute directory for GET/POST /files/<name> (default: disabled)"
    )

    parser.add_argument(
        "--log-level", "-l",
        type=str.upper,
        choices=LOG_LEVELS,
        default=defaults.log_level.upper(),
        help=f"Logging level (default: {defaults.log_level})"
    )

    # ─────────────────────────────────────────────────────────────────────
    # META ARGUMENTS
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--version", "-v",
        action="version",
        version=f"minihttp {__version__}"
    )

    return parser


def main(argv: Optional[List[str]] = None) -> None:
    try:
        defaults = ServerConfig.from_env()
    except ValueError as e:
        print(f"Error: invalid environment configuration: {e}", file=sys.stderr)
        sys.exit(1)

    args = build_parser(defaults).parse_args(argv)

    config = replace(
        defaults,
        host=args.host,
        port=args.port,
        buffer_size=args.buffer_size,
        directory=args.directory,
        log_level=args.log_level,
    )

    try:
        server = create_app(config)
        server.run()
    except (OSError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
