"""
Unit tests for server configuration.
"""

from pathlib import Path

import pytest

from minihttp.config import ServerConfig


class TestServerConfig:

    def test_defaults(self):
        config = ServerConfig()

        assert config.host == "0.0.0.0"
        assert config.port == 4221
        assert config.timeout is None
        assert config.directory is None
        config.validate()

    def test_frozen(self):
        config = ServerConfig()

        with pytest.raises(AttributeError):
            config.port = 80

    def test_files_root_absolute(self, tmp_path: Path):
        config = ServerConfig(directory=str(tmp_path))

        assert config.files_root == tmp_path

    @pytest.mark.parametrize("directory", [None, "", "relative/dir", "./files"])
    def test_files_root_disabled(self, directory):
        assert ServerConfig(directory=directory).files_root is None

    @pytest.mark.parametrize("overrides", [
        {"port": -1},
        {"port": 65536},
        {"backlog": 0},
        {"buffer_size": 512},
        {"timeout": 0},
        {"gzip_level": 0},
        {"gzip_level": 10},
        {"log_level": "LOUD"},
    ])
    def test_validate_rejects(self, overrides: dict):
        with pytest.raises(ValueError):
            ServerConfig(**overrides).validate()

    def test_from_env(self, monkeypatch, tmp_path: Path):
        monkeypatch.setenv("HTTP_HOST", "127.0.0.1")
        monkeypatch.setenv("HTTP_PORT", "8080")
        monkeypatch.setenv("HTTP_BUFFER_SIZE", "4096")
        monkeypatch.setenv("HTTP_DIRECTORY", str(tmp_path))
        monkeypatch.setenv("HTTP_LOG_LEVEL", "DEBUG")

        config = ServerConfig.from_env()

        assert config.host == "127.0.0.1"
        assert config.port == 8080
        assert config.buffer_size == 4096
        assert config.directory == str(tmp_path)
        assert config.log_level == "DEBUG"

    def test_from_env_defaults(self, monkeypatch):
        for name in ("HTTP_HOST", "HTTP_PORT", "HTTP_BUFFER_SIZE", "HTTP_DIRECTORY", "HTTP_LOG_LEVEL"):
            monkeypatch.delenv(name, raising=False)

        assert ServerConfig.from_env() == ServerConfig()
