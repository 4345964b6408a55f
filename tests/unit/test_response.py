"""
Unit tests for HTTP response building and serialization.
"""

import gzip

import pytest

from minihttp.http.headers import HeaderMap
from minihttp.http.response import (
    HTTPResponse,
    ResponseBuilder,
    render,
    ok,
    text,
    created,
    bad_request,
    not_found,
    method_not_allowed,
    unprocessable,
    internal_error,
)
from minihttp.http.status_codes import HTTPStatus, reason_phrase


def split_wire(data: bytes):
    """Split rendered bytes into (status line, header lines, body)."""
    head, _, body = data.partition(b"\r\n\r\n")
    lines = head.decode().split("\r\n")
    return lines[0], lines[1:], body


class TestHTTPResponse:
    """Tests for HTTPResponse class."""

    def test_status_line(self):
        """Test status line generation."""
        assert HTTPResponse(status=200).status_line == "HTTP/1.1 200 OK"
        assert HTTPResponse(status=404).status_line == "HTTP/1.1 404 Not Found"
        assert HTTPResponse(status=422).status_line == "HTTP/1.1 422 Unprocessable Entity"

    def test_unknown_status_has_empty_reason(self):
        assert HTTPResponse(status=299).status_line == "HTTP/1.1 299 "

    @pytest.mark.parametrize("status", [0, 99, 600, 1000])
    def test_status_out_of_range(self, status: int):
        with pytest.raises(ValueError):
            HTTPResponse(status=status)

    def test_str_body_is_encoded(self):
        assert HTTPResponse(body="héllo").body == "héllo".encode("utf-8")

    def test_dict_headers_are_converted(self):
        response = HTTPResponse(headers={"X-A": "1"})

        assert isinstance(response.headers, HeaderMap)
        assert response.headers.get("x-a") == "1"

    def test_to_bytes_matches_render(self):
        response = text("abc")

        assert response.to_bytes() == render(response)
        assert response.to_bytes(True) == render(response, True)


class TestRender:
    """Tests for the wire serializer."""

    def test_empty_ok(self):
        assert render(ok()) == b"HTTP/1.1 200 OK\r\ncontent-length: 0\r\n\r\n"

    def test_text_response(self):
        assert render(text("abc")) == (
            b"HTTP/1.1 200 OK\r\n"
            b"content-length: 3\r\n"
            b"content-type: text/plain\r\n"
            b"\r\n"
            b"abc"
        )

    def test_header_order(self):
        """Auxiliary headers, then length, then type, then encoding."""
        response = HTTPResponse(
            status=200,
            content_type="text/plain",
            headers=HeaderMap([("X-First", "1"), ("X-Second", "2")]),
            body=b"hello",
        )
        _, headers, _ = split_wire(render(response, gzip_requested=True))

        names = [line.split(":")[0] for line in headers]
        assert names == ["x-first", "x-second", "content-length", "content-type", "content-encoding"]

    def test_reserved_headers_are_computed(self):
        """Caller-supplied length/type/encoding never reach the wire."""
        response = HTTPResponse(
            headers={"Content-Length": "999", "Content-Encoding": "br", "Content-Type": "x/y"},
            body=b"abc",
        )
        _, headers, _ = split_wire(render(response))

        assert headers == ["content-length: 3"]

    def test_render_does_not_mutate_response(self):
        response = HTTPResponse(headers={"Content-Length": "999", "X-A": "1"}, body=b"abc")
        render(response, gzip_requested=True)

        assert response.headers.get("content-length") == "999"
        assert response.body == b"abc"

    def test_gzip_body_and_length(self):
        _, headers, body = split_wire(render(text("abc"), gzip_requested=True))

        assert gzip.decompress(body) == b"abc"
        assert f"content-length: {len(body)}" in headers
        assert "content-encoding: gzip" in headers

    def test_gzip_is_deterministic(self):
        response = text("same bytes every time")

        assert render(response, True) == render(response, True)

    def test_gzip_applies_to_empty_body(self):
        _, headers, body = split_wire(render(ok(), gzip_requested=True))

        assert gzip.decompress(body) == b""
        assert "content-encoding: gzip" in headers
        assert headers[0] == f"content-length: {len(body)}"

    def test_binary_body_is_untouched(self):
        payload = bytes(range(256)) + b"\r\n\r\n\x00"
        _, _, body = split_wire(render(ok(payload, "application/octet-stream")))

        assert body == payload

    def test_no_content_type_line_when_unset(self):
        _, headers, _ = split_wire(render(not_found()))

        assert not any(line.startswith("content-type") for line in headers)


class TestResponseBuilder:
    """Tests for ResponseBuilder class."""

    def test_status(self):
        """Test setting status code."""
        response = ResponseBuilder().status(HTTPStatus.CREATED).build()

        assert response.status == 201

    def test_text_body(self):
        """Test text body."""
        response = ResponseBuilder().text("Hello, World!").build()

        assert response.content_type == "text/plain"
        assert response.body == b"Hello, World!"

    def test_binary_body(self):
        response = ResponseBuilder().binary(b"\x00\x01").build()

        assert response.content_type == "application/octet-stream"
        assert response.body == b"\x00\x01"

    def test_method_chaining(self):
        """Test that all methods can be chained."""
        response = (ResponseBuilder()
            .status(HTTPStatus.OK)
            .header("X-Custom", "value")
            .headers({"X-Other": "other"})
            .content_type("text/csv")
            .body("a,b")
            .build())

        assert response.headers.get("x-custom") == "value"
        assert response.headers.get("x-other") == "other"
        assert response.content_type == "text/csv"
        assert response.body == b"a,b"

    def test_build_copies_headers(self):
        builder = ResponseBuilder().header("X-A", "1")
        first = builder.build()
        builder.header("X-B", "2")

        assert "x-b" not in first.headers


class TestConvenienceFunctions:
    """Tests for convenience response functions."""

    def test_ok(self):
        response = ok()

        assert response.status == 200
        assert response.content_type is None
        assert response.body == b""

    def test_created(self):
        response = created()

        assert response.status == 201
        assert response.content_type == "text/plain"
        assert response.body == b""

    def test_not_found(self):
        response = not_found()

        assert response.status == 404
        assert response.content_type is None
        assert response.body == b""

    def test_bad_request(self):
        response = bad_request("nope")

        assert response.status == 400
        assert response.body == b"nope"

    def test_method_not_allowed(self):
        response = method_not_allowed(["GET", "POST"])

        assert response.status == 405
        assert response.headers.get("allow") == "GET, POST"
        assert response.body == b""

    def test_unprocessable(self):
        response = unprocessable("Malformed request line: 'x'")

        assert response.status == 422
        assert response.content_type == "text/plain"
        assert response.body == b"Malformed request line: 'x'"

    def test_internal_error(self):
        response = internal_error()

        assert response.status == 500
        assert response.body == b"Internal Server Error"


class TestHTTPStatus:
    """Tests for HTTPStatus enum."""

    def test_status_phrases(self):
        assert HTTPStatus.OK.phrase == "OK"
        assert HTTPStatus.CREATED.phrase == "Created"
        assert HTTPStatus.BAD_REQUEST.phrase == "Bad Request"
        assert HTTPStatus.METHOD_NOT_ALLOWED.phrase == "Method Not Allowed"
        assert HTTPStatus.INTERNAL_SERVER_ERROR.phrase == "Internal Server Error"

    def test_status_categories(self):
        assert HTTPStatus.OK.is_success
        assert HTTPStatus.NOT_FOUND.is_client_error
        assert HTTPStatus.INTERNAL_SERVER_ERROR.is_server_error
        assert not HTTPStatus.CREATED.is_client_error

    def test_reason_phrase_lookup(self):
        assert reason_phrase(404) == "Not Found"
        assert reason_phrase(299) == ""
        assert reason_phrase(503) == ""
        assert {int(s) for s in HTTPStatus} == {200, 201, 400, 404, 405, 422, 500}
