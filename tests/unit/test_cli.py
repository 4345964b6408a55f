"""
Unit tests for the command-line entry point and the access log format.
"""

import pytest

from minihttp import __version__
from minihttp.__main__ import build_parser, main
from minihttp.access import RequestLog
from minihttp.config import ServerConfig
from minihttp.http.request import parse_request


class TestArgumentParser:

    def test_defaults_follow_config(self):
        args = build_parser(ServerConfig()).parse_args([])

        assert args.host == "0.0.0.0"
        assert args.port == 4221
        assert args.directory is None
        assert args.log_level == "INFO"

    def test_directory_flag(self, tmp_path):
        args = build_parser(ServerConfig()).parse_args(["--directory", str(tmp_path)])

        assert args.directory == str(tmp_path)

    def test_log_level_is_case_insensitive(self):
        args = build_parser(ServerConfig()).parse_args(["-l", "debug"])

        assert args.log_level == "DEBUG"

    def test_version(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            build_parser(ServerConfig()).parse_args(["--version"])

        assert exc_info.value.code == 0
        assert __version__ in capsys.readouterr().out

    def test_invalid_port_exits_with_1(self, capsys, monkeypatch):
        monkeypatch.delenv("HTTP_PORT", raising=False)

        with pytest.raises(SystemExit) as exc_info:
            main(["--port", "70000"])

        assert exc_info.value.code == 1
        assert "Invalid port" in capsys.readouterr().err

    def test_invalid_environment_exits_with_1(self, monkeypatch):
        monkeypatch.setenv("HTTP_PORT", "not-a-number")

        with pytest.raises(SystemExit) as exc_info:
            main([])

        assert exc_info.value.code == 1


class TestRequestLog:

    def test_to_text(self):
        request = parse_request(b"GET /echo/abc HTTP/1.1\r\nUser-Agent: curl\r\n\r\n")
        entry = RequestLog.create(
            request_id="abcd1234",
            client_ip="127.0.0.1",
            request=request,
            status_code=200,
            content_length=3,
            duration_ms=1.234,
        )

        line = entry.to_text()

        assert line.startswith("127.0.0.1 - - [")
        assert line.endswith('] "GET /echo/abc" 200 3 1.23ms')
        assert entry.to_dict()["user_agent"] == "curl"

    def test_unparsed_request(self):
        entry = RequestLog.create("id", "10.0.0.1", None, 422, 20, 0.5)

        assert '"- -" 422 20' in entry.to_text()
