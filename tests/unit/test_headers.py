"""
Unit tests for the case-insensitive header map.
"""

from minihttp.http.headers import HeaderMap


class TestHeaderMap:
    """Tests for HeaderMap."""

    def test_get_is_case_insensitive(self):
        headers = HeaderMap({"User-Agent": "foo"})

        assert headers.get("user-agent") == "foo"
        assert headers.get("USER-AGENT") == "foo"
        assert "User-agent" in headers

    def test_names_are_stored_lowercase_and_trimmed(self):
        headers = HeaderMap()
        headers.set("  X-Trace ", "  abc  ")

        assert list(headers.items()) == [("x-trace", "abc")]

    def test_map_stores_value_as_given(self):
        """Response headers such as Allow go out exactly as set."""
        headers = HeaderMap({"Allow": "GET, POST"})

        assert headers.get("allow") == "GET, POST"

    def test_get_default(self):
        headers = HeaderMap()

        assert headers.get("missing") is None
        assert headers.get("missing", "fallback") == "fallback"

    def test_last_write_wins(self):
        headers = HeaderMap([("Accept", "text/html"), ("accept", "text/plain")])

        assert headers.get("accept") == "text/plain"
        assert len(headers) == 1

    def test_overwrite_moves_to_end(self):
        headers = HeaderMap([("a", "1"), ("b", "2")])
        headers.set("A", "3")

        assert list(headers) == ["b", "a"]

    def test_items_in_insertion_order(self):
        headers = HeaderMap()
        headers.set("Host", "x").set("Accept", "y").set("X-Z", "z")

        assert [name for name, _ in headers.items()] == ["host", "accept", "x-z"]

    def test_remove(self):
        headers = HeaderMap({"Content-Type": "text/plain"})
        headers.remove("CONTENT-TYPE")
        headers.remove("not-there")

        assert "content-type" not in headers
        assert len(headers) == 0

    def test_copy_is_independent(self):
        original = HeaderMap({"a": "1"})
        clone = original.copy()
        clone.set("b", "2")

        assert "b" not in original
        assert clone == {"A": "1", "b": "2"}

    def test_equality(self):
        assert HeaderMap({"A": "1"}) == HeaderMap({"a": "1"})
        assert HeaderMap({"A": "1"}) != HeaderMap({"a": "2"})

    def test_non_string_membership(self):
        assert 42 not in HeaderMap({"a": "1"})
