"""
=============================================================================
FILES HANDLER
=============================================================================

Reads and writes whole files under one configured root directory.

    GET  /files/notes.txt   →  200 application/octet-stream <bytes>
    POST /files/notes.txt   →  201, request body written to <root>/notes.txt

=============================================================================
PATH TRAVERSAL
=============================================================================

The file name comes straight from the request target, so it is hostile
until proven otherwise:

    GET /files/../../etc/passwd
    GET /files//etc/passwd          (joins to an absolute path)
    GET /files/link-to-outside      (symlink inside root, target outside)

Every one of these is caught the same way: resolve the joined path
(collapsing "..", following symlinks) and require the result to still lie
inside the resolved root.

    root      = /srv/files                  (resolved once)
    requested = /srv/files/../../etc/passwd
    resolved  = /etc/passwd
    inside?   = /etc/passwd.relative_to(/srv/files) → ValueError → 400

=============================================================================
ERROR MAPPING
=============================================================================

    ┌──────────────────────────────────────┬──────────┬──────────────────┐
    │  Situation                           │  Status  │  Logged          │
    ├──────────────────────────────────────┼──────────┼──────────────────┤
    │  path escapes the root               │  400     │  WARNING         │
    │  symlink loop (ELOOP)                │  400     │  WARNING         │
    │  missing file / path is a directory  │  404     │  DEBUG           │
    │  any other read or write failure     │  500     │  ERROR           │
    └──────────────────────────────────────┴──────────┴──────────────────┘

500 responses carry the OS error text as a text/plain body.
=============================================================================
"""

import errno
import os
import logging
from pathlib import Path
from typing import Optional

from ..http.request import HTTPRequest
from ..http.response import (
    HTTPResponse, ResponseBuilder,
    bad_request, created, internal_error, not_found,
)


logger = logging.getLogger(__name__)

# Uploaded files are readable and writable by the server's user only
FILE_MODE = 0o600


class FileHandler:
    """
    GET/POST handler for files below `root_dir`.

    Usage:
        files = FileHandler("/srv/files")
        router.get("/files/*path")(files.get)
        router.post("/files/*path")(files.post)

    The handlers read the file name from request.path_params["path"].
    """

    def __init__(self, root_dir: os.PathLike):
        # Resolved once so the containment check compares canonical paths
        self.root_dir = Path(root_dir).resolve()

        if not self.root_dir.is_dir():
            logger.warning(f"Files directory does not exist (yet): {self.root_dir}")

    def resolve(self, name: str) -> Optional[Path]:
        """
        Map a client-supplied name to a path inside the root.

        Returns:
            The resolved path, or None if it would escape the root (or
            cannot be a filesystem path at all, e.g. contains NUL, or sits
            in a symlink loop).

        Python before 3.13 raises RuntimeError from resolve() on a symlink
        loop. Later versions return the unresolved path and the loop only
        shows up as ELOOP on open, which get() and post() map to 400 too.
        """
        try:
            candidate = (self.root_dir / name).resolve()
            candidate.relative_to(self.root_dir)
        except (ValueError, RuntimeError):
            return None
        return candidate

    def _rejected(self, request: HTTPRequest, name: str) -> HTTPResponse:
        logger.warning(f"Rejected file path from {request.client_address[0]}: {name!r}")
        return bad_request("Invalid file path")

    # =========================================================================
    # GET: send a file
    # =========================================================================

    def get(self, request: HTTPRequest) -> HTTPResponse:
        name = request.path_params.get("path", "")
        path = self.resolve(name)
        if path is None:
            return self._rejected(request, name)

        try:
            if path.is_dir():
                return not_found()
            content = path.read_bytes()
        except (FileNotFoundError, NotADirectoryError):
            logger.debug(f"File not found: {path}")
            return not_found()
        except OSError as e:
            if e.errno == errno.ELOOP:
                return self._rejected(request, name)
            logger.error(f"Error reading file {path}: {e}")
            return internal_error(str(e))

        return ResponseBuilder().binary(content).build()

    # =========================================================================
    # POST: create or replace a file
    # =========================================================================

    def post(self, request: HTTPRequest) -> HTTPResponse:
        name = request.path_params.get("path", "")
        path = self.resolve(name)
        if path is None:
            return self._rejected(request, name)

        try:
            # os.open, not open(): the mode applies when the file is created
            fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, FILE_MODE)
            with os.fdopen(fd, "wb") as f:
                f.write(request.body)
        except OSError as e:
            if e.errno == errno.ELOOP:
                return self._rejected(request, name)
            logger.error(f"Error writing file {path}: {e}")
            return internal_error(str(e))

        logger.debug(f"Wrote {len(request.body)} bytes to {path}")
        return created()
