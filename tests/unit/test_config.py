"""
Unit tests for server configuration and the server CLI port argument.
"""

import pytest

from echoserver.config import ServerConfig, DEFAULT_PORT
from echoserver.__main__ import parse_port


class TestServerConfig:
    """Tests for ServerConfig."""

    def test_defaults(self):
        config = ServerConfig()

        assert config.host == "0.0.0.0"
        assert config.port == 8080
        assert config.max_history == 10
        assert config.log_level == "INFO"
        config.validate()

    def test_from_env(self, monkeypatch):
        monkeypatch.setenv("ECHO_HOST", "127.0.0.1")
        monkeypatch.setenv("ECHO_PORT", "9090")
        monkeypatch.setenv("ECHO_BACKLOG", "16")
        monkeypatch.setenv("ECHO_MAX_HISTORY", "3")
        monkeypatch.setenv("ECHO_MAX_LINE_LENGTH", "512")
        monkeypatch.setenv("ECHO_LOG_LEVEL", "DEBUG")

        config = ServerConfig.from_env()

        assert config.host == "127.0.0.1"
        assert config.port == 9090
        assert config.backlog == 16
        assert config.max_history == 3
        assert config.max_line_length == 512
        assert config.log_level == "DEBUG"

    def test_from_env_defaults(self, monkeypatch):
        for name in ("ECHO_HOST", "ECHO_PORT", "ECHO_BACKLOG", "ECHO_MAX_HISTORY",
                     "ECHO_MAX_LINE_LENGTH", "ECHO_LOG_LEVEL"):
            monkeypatch.delenv(name, raising=False)

        assert ServerConfig.from_env() == ServerConfig()

    def test_from_env_rejects_garbage(self, monkeypatch):
        monkeypatch.setenv("ECHO_PORT", "not-a-port")

        with pytest.raises(ValueError):
            ServerConfig.from_env()

    @pytest.mark.parametrize("kwargs", [
        {"port": -1},
        {"port": 70000},
        {"backlog": 0},
        {"max_history": 0},
        {"max_line_length": 0},
        {"accept_timeout": 0},
    ])
    def test_validate_rejects(self, kwargs):
        with pytest.raises(ValueError):
            ServerConfig(**kwargs).validate()


class TestParsePort:
    """Tests for the server's forgiving port argument."""

    def test_missing_uses_default_silently(self, capsys):
        assert parse_port(None) == DEFAULT_PORT
        assert capsys.readouterr().err == ""

    def test_valid_port(self, capsys):
        assert parse_port("9090") == 9090
        assert capsys.readouterr().err == ""

    @pytest.mark.parametrize("value", ["abc", "80a", "", "0", "65536"])
    def test_invalid_falls_back_with_warning(self, value, capsys):
        assert parse_port(value) == DEFAULT_PORT

        err = capsys.readouterr().err
        assert "Invalid port" in err
        assert "8080" in err

    def test_custom_default(self, capsys):
        assert parse_port("nope", default=7000) == 7000
