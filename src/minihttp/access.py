"""
=============================================================================
ACCESS LOG
=============================================================================

One line per handled request, in Apache common-log style:

    127.0.0.1 - - [18/Oct/2026:10:55:36 +0000] "GET /echo/abc" 200 3 0.41ms
    ─────────     ────────────────────────────  ───────────────  ─── ─ ──────
    IP            Timestamp                     Method/Target    │   │ Duration
                                                          Status ┘   └ Size

Size is the length of the body actually sent (after gzip).

Lines go to the "minihttp.access" logger at INFO, so they can be routed or
silenced separately from the server's own diagnostics:

    logging.getLogger("minihttp.access").setLevel(logging.WARNING)
=============================================================================
"""

import time
import logging
from dataclasses import dataclass, asdict
from typing import Optional

from .http.request import HTTPRequest


logger = logging.getLogger("minihttp.access")

TIMESTAMP_FORMAT = "%d/%b/%Y:%H:%M:%S +0000"


@dataclass
class RequestLog:
    """
    Structured record of one request/response exchange.

    request_id:     Connection id, for correlating with debug lines
    method:         Request method, "-" if the request never parsed
    target:         Raw request target
    client_ip:      Peer address
    user_agent:     User-Agent header, empty if absent
    status_code:    Status sent
    content_length: Bytes of body sent
    duration_ms:    Time from accept to response written
    timestamp:      UTC, Apache format
    """

    request_id: str
    method: str
    target: str
    client_ip: str
    user_agent: str
    status_code: int
    content_length: int
    duration_ms: float
    timestamp: str

    @classmethod
    def create(
        cls,
        request_id: str,
        client_ip: str,
        request: Optional[HTTPRequest],
        status_code: int,
        content_length: int,
        duration_ms: float,
    ) -> "RequestLog":
        return cls(
            request_id=request_id,
            method=request.method if request else "-",
            target=request.target if request else "-",
            client_ip=client_ip,
            user_agent=request.user_agent if request else "",
            status_code=status_code,
            content_length=content_length,
            duration_ms=duration_ms,
            timestamp=time.strftime(TIMESTAMP_FORMAT, time.gmtime()),
        )

    def to_dict(self) -> dict:
        data = asdict(self)
        data["duration_ms"] = round(self.duration_ms, 2)
        return data

    def to_text(self) -> str:
        return (
            f'{self.client_ip} - - [{self.timestamp}] '
            f'"{self.method} {self.target}" {self.status_code} '
            f'{self.content_length} {self.duration_ms:.2f}ms'
        )


def log_request(entry: RequestLog) -> None:
    """Emit `entry` on the access logger."""
    logger.info(entry.to_text())
