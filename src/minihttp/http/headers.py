"""
=============================================================================
HEADER MAP
=============================================================================

Case-insensitive storage for HTTP header fields.

=============================================================================
WHY A DEDICATED TYPE?
=============================================================================

HTTP header names are case-insensitive (RFC 7230 section 3.2):

    User-Agent: curl/8.0        ─┐
    user-agent: curl/8.0         ├──  all the same header
    USER-AGENT: curl/8.0        ─┘

A plain dict would force every caller to remember .lower(). HeaderMap does
the normalization once, at the edge, so lookups never miss:

    ┌─────────────────────────────────────────────────────────────────────┐
    │                        NORMALIZATION                                │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   set("  Content-Type ", "  text/plain  ")                          │
    │         │                    │                                       │
    │         ▼                    ▼                                       │
    │   "content-type"   →   "text/plain"                                 │
    │   (trim + lower)       (trim only)                                  │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

The map itself keeps value case, since response headers such as
"Allow: GET, POST" go out as written. The request parser lowercases values
before storing them, so every request header value reads back lowercase.

=============================================================================
DUPLICATE HEADERS
=============================================================================

When the same name appears more than once, the LAST occurrence wins:

    X-Token: first
    X-Token: second      →   get("x-token") == "second"

=============================================================================
"""

from typing import Dict, Iterable, Iterator, Mapping, Optional, Tuple, Union


HeaderSource = Union[Mapping[str, str], Iterable[Tuple[str, str]]]


def normalize_name(name: str) -> str:
    """Return the canonical (trimmed, lowercase) form of a header name."""
    return name.strip().lower()


class HeaderMap:
    """
    Case-insensitive mapping of header name to value.

    Usage:
        headers = HeaderMap({"Content-Type": "text/plain"})
        headers.get("content-type")        # "text/plain"
        headers.set("X-Trace", "abc")
        for name, value in headers.items():
            ...

    Iteration order is insertion order, so a single render always emits
    headers in the same sequence.
    """

    def __init__(self, source: Optional[HeaderSource] = None):
        self._fields: Dict[str, str] = {}

        if source is None:
            return

        pairs = source.items() if isinstance(source, Mapping) else source
        for name, value in pairs:
            self.set(name, value)

    # =========================================================================
    # CORE OPERATIONS
    # =========================================================================

    def set(self, name: str, value: str) -> "HeaderMap":
        """
        Store a header, replacing any earlier value for the same name.

        Args:
            name: Header name (any case, surrounding whitespace ignored)
            value: Header value (surrounding whitespace trimmed)

        Returns:
            Self for method chaining
        """
        key = normalize_name(name)
        # Re-inserting moves the key to the end, matching "last one wins"
        self._fields.pop(key, None)
        self._fields[key] = value.strip()
        return self

    def get(self, name: str, default: Optional[str] = None) -> Optional[str]:
        """Case-insensitive lookup. Absent headers return `default`."""
        return self._fields.get(normalize_name(name), default)

    def remove(self, name: str) -> None:
        """Case-insensitive delete. Removing an absent header is a no-op."""
        self._fields.pop(normalize_name(name), None)

    def items(self) -> Iterator[Tuple[str, str]]:
        """Yield (name, value) pairs in insertion order."""
        return iter(list(self._fields.items()))

    def copy(self) -> "HeaderMap":
        return HeaderMap(self._fields)

    # =========================================================================
    # PYTHON PROTOCOLS
    # =========================================================================

    def __contains__(self, name: object) -> bool:
        if not isinstance(name, str):
            return False
        return normalize_name(name) in self._fields

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._fields))

    def __len__(self) -> int:
        return len(self._fields)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, HeaderMap):
            return self._fields == other._fields
        if isinstance(other, Mapping):
            return self == HeaderMap(other)
        return NotImplemented

    def __repr__(self) -> str:
        return f"HeaderMap({self._fields!r})"
