"""Tests for config.py environment variable and YAML support."""

from pathlib import Path

import pytest

from jsonrpc_server.config import Config, _parse_auth_tokens


class TestParseAuthTokens:
    """Tests for _parse_auth_tokens function."""

    def test_empty_string(self) -> None:
        """Empty string returns empty list."""
        assert _parse_auth_tokens("") == []

    def test_multiple_tokens(self) -> None:
        """Multiple comma-separated pairs are parsed."""
        result = _parse_auth_tokens("alice:token1, bob:token2 ")
        assert [(t.user, t.token) for t in result] == [("alice", "token1"), ("bob", "token2")]

    def test_invalid_format_skipped(self) -> None:
        """Pairs without colon or with empty parts are skipped."""
        result = _parse_auth_tokens("valid:token,invalid,:token,user:")
        assert len(result) == 1
        assert result[0].user == "valid"

    def test_token_may_contain_colon(self) -> None:
        result = _parse_auth_tokens("alice:a:b")
        assert result[0].token == "a:b"


class TestConfigFromEnv:
    """Tests for Config.from_env classmethod."""

    def test_defaults_when_no_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Default values when no env vars set."""
        for var in [
            "RPC_ENV",
            "RPC_HOST",
            "RPC_PORT",
            "RPC_PREFIX",
            "RPC_WS_PATH",
            "RPC_MIRROR_ERROR_STATUS",
            "RPC_STATIC_DIR",
            "RPC_STATIC_PREFIXES",
            "RPC_AUTH_ENABLED",
            "RPC_AUTH_TOKENS",
        ]:
            monkeypatch.delenv(var, raising=False)

        config = Config.from_env()
        assert config.server.host == "0.0.0.0"
        assert config.server.port == 8080
        assert config.rpc.prefix == "rpc"
        assert config.rpc.ws_path == "/ws"
        assert config.rpc.mirror_error_status is False
        assert config.static.directory is None
        assert config.static.prefixes == ["assets", "index.html", "favicon.ico"]
        assert config.auth.enabled is False
        assert config.production is False

    def test_production_flag(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("RPC_ENV", "Production")
        assert Config.from_env().production is True

    def test_reads_rpc_config(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("RPC_PREFIX", "/api/")
        monkeypatch.setenv("RPC_WS_PATH", "/socket")
        monkeypatch.setenv("RPC_MIRROR_ERROR_STATUS", "true")
        config = Config.from_env()
        assert config.rpc.prefix == "api"
        assert config.rpc.ws_path == "/socket"
        assert config.rpc.mirror_error_status is True

    def test_reads_server_and_auth(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("RPC_HOST", "127.0.0.1")
        monkeypatch.setenv("RPC_PORT", "9000")
        monkeypatch.setenv("RPC_AUTH_ENABLED", "1")
        monkeypatch.setenv("RPC_AUTH_TOKENS", "alice:s3cret")
        config = Config.from_env()
        assert config.server.host == "127.0.0.1"
        assert config.server.port == 9000
        assert config.auth.enabled is True
        assert config.auth.validate_token("s3cret") == "alice"
        assert config.auth.validate_token("other") is None

    def test_reads_static_config(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("RPC_STATIC_DIR", "./public")
        monkeypatch.setenv("RPC_STATIC_PREFIXES", "assets, favicon.ico")
        config = Config.from_env()
        assert config.static.directory == "./public"
        assert config.static.prefixes == ["assets", "favicon.ico"]


class TestConfigFromYaml:
    """Tests for Config.from_yaml classmethod."""

    def test_missing_file_gives_defaults(self, tmp_path: Path) -> None:
        config = Config.from_yaml(tmp_path / "missing.yaml")
        assert config == Config()

    def test_empty_file_gives_defaults(self, tmp_path: Path) -> None:
        path = tmp_path / "server.yaml"
        path.write_text("")
        assert Config.from_yaml(path) == Config()

    def test_loads_sections(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("TEST_RPC_TOKEN", "from-env")
        path = tmp_path / "server.yaml"
        path.write_text(
            "environment: production\n"
            "server:\n"
            "  port: 9100\n"
            "rpc:\n"
            "  prefix: /jsonrpc\n"
            "  mirror_error_status: true\n"
            "static:\n"
            "  directory: ./www\n"
            "auth:\n"
            "  enabled: true\n"
            "  tokens:\n"
            "    - user: carol\n"
            "      token: ${TEST_RPC_TOKEN}\n"
        )
        config = Config.from_yaml(path)
        assert config.production is True
        assert config.server.port == 9100
        assert config.server.host == "0.0.0.0"
        assert config.rpc.prefix == "jsonrpc"
        assert config.rpc.ws_path == "/ws"
        assert config.rpc.mirror_error_status is True
        assert config.static.directory == "./www"
        assert config.static.prefixes == ["assets", "index.html", "favicon.ico"]
        assert config.auth.validate_token("from-env") == "carol"

    def test_example_config_loads(self) -> None:
        path = Path(__file__).parent.parent / "config" / "server.example.yaml"
        config = Config.from_yaml(path)
        assert config.rpc.prefix == "rpc"
        assert config.production is False
