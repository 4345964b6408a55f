"""
=============================================================================
CONTENT-ENCODING NEGOTIATION
=============================================================================

The client advertises which codings it can decode:

    Accept-Encoding: deflate, gzip;q=0.8, br

The server picks one it supports (only gzip here), compresses the body,
and says so in the response:

    ┌─────────┐  GET /echo/abc                 ┌─────────┐
    │ Client  │  Accept-Encoding: gzip ───────▶│ Server  │
    │         │                                │         │
    │         │◀────── HTTP/1.1 200 OK         │         │
    │         │        content-length: 23      │         │
    │         │        content-type: text/plain│         │
    │         │        content-encoding: gzip  │         │
    │         │        <23 gzip bytes>         │         │
    └─────────┘                                └─────────┘

content-length always counts the COMPRESSED bytes, which is why the
serializer compresses before it measures.

=============================================================================
TOKEN MATCHING
=============================================================================

We match whole tokens, not substrings:

    "gzip"               ✅
    "deflate, GZIP"      ✅  (codings are case-insensitive)
    "gzip;q=0.5, br"     ✅  (parameters are ignored)
    "x-gzip-custom"      ❌
    "invalid-encoding"   ❌

q-values are not weighed. A client that lists gzip gets gzip.
=============================================================================
"""

import gzip


GZIP_TOKEN = "gzip"

DEFAULT_LEVEL = 6


def parse_codings(accept_encoding: str) -> list[str]:
    """
    Split an Accept-Encoding value into lowercase coding tokens.

    Example:
        parse_codings("Deflate, gzip;q=0.8") == ["deflate", "gzip"]
    """
    codings = []
    for item in accept_encoding.split(","):
        coding = item.split(";", 1)[0].strip().lower()
        if coding:
            codings.append(coding)
    return codings


def accepts_gzip(accept_encoding: str) -> bool:
    """True when gzip is one of the listed codings."""
    return GZIP_TOKEN in parse_codings(accept_encoding)


def gzip_body(body: bytes, level: int = DEFAULT_LEVEL) -> bytes:
    """
    Compress a response body with gzip.

    mtime=0 keeps the output byte-for-byte reproducible: the gzip header
    otherwise embeds the current time.
    """
    return gzip.compress(body, compresslevel=level, mtime=0)
