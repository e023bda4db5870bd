"""Server configuration management.

Loads configuration from YAML file and environment variables.
"""

import os
import secrets
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

PRODUCTION = "production"
DEFAULT_STATIC_PREFIXES = ["assets", "index.html", "favicon.ico"]


@dataclass(slots=True)
class AuthToken:
    """Authentication token configuration.

    Attributes:
        user: User the token authenticates.
        token: Bearer token value.
    """

    user: str
    token: str


@dataclass(slots=True)
class AuthConfig:
    """Authentication configuration.

    Attributes:
        enabled: Whether a bearer token is required.
        tokens: List of valid tokens.
    """

    enabled: bool = False
    tokens: list[AuthToken] = field(default_factory=list)

    def validate_token(self, token: str) -> str | None:
        """Validate a bearer token.

        Uses constant-time comparison to prevent timing attacks.

        Args:
            token: Bearer token to validate.

        Returns:
            User name if valid, None if invalid.
        """
        if not token:
            return None
        for auth_token in self.tokens:
            if secrets.compare_digest(auth_token.token, token):
                return auth_token.user
        return None


@dataclass(slots=True)
class RpcConfig:
    """JSON-RPC endpoint configuration.

    Attributes:
        prefix: First URL path segment of the HTTP RPC route.
        ws_path: Path of the WebSocket endpoint.
        mirror_error_status: Use the error's own status for HTTP error
            responses instead of 200.
    """

    prefix: str = "rpc"
    ws_path: str = "/ws"
    mirror_error_status: bool = False


@dataclass(slots=True)
class StaticConfig:
    """Static asset configuration.

    Attributes:
        directory: Directory assets are served from (None disables).
        prefixes: Top-level names under ``directory`` exposed over HTTP.
    """

    directory: str | None = None
    prefixes: list[str] = field(default_factory=lambda: list(DEFAULT_STATIC_PREFIXES))


@dataclass(slots=True)
class ServerConfig:
    """HTTP server configuration.

    Attributes:
        host: Bind address.
        port: Bind port.
        cors_origins: Allowed CORS origins.
    """

    host: str = "0.0.0.0"
    port: int = 8080
    cors_origins: list[str] = field(default_factory=lambda: ["*"])


@dataclass(slots=True)
class Config:
    """Complete server configuration.

    Attributes:
        environment: Deployment environment name ("production" hides traces).
        server: HTTP server settings.
        rpc: JSON-RPC endpoint settings.
        static: Static asset settings.
        auth: Authentication settings.
    """

    environment: str = "development"
    server: ServerConfig = field(default_factory=ServerConfig)
    rpc: RpcConfig = field(default_factory=RpcConfig)
    static: StaticConfig = field(default_factory=StaticConfig)
    auth: AuthConfig = field(default_factory=AuthConfig)

    @property
    def production(self) -> bool:
        """True when running in production mode."""
        return self.environment.strip().lower() == PRODUCTION

    @classmethod
    def from_yaml(cls, path: Path) -> "Config":
        """Load configuration from YAML file.

        Environment variables in format ${VAR_NAME} are expanded in token
        values.

        Args:
            path: Path to YAML configuration file.

        Returns:
            Loaded configuration.
        """
        if not path.exists():
            return cls()

        content = path.read_text()
        data = yaml.safe_load(content)
        if not data:
            return cls()

        return cls._from_dict(data)

    @classmethod
    def from_env(cls) -> "Config":
        """Load configuration from environment variables.

        Environment variables:
            RPC_ENV: Environment name ("production" hides error traces)
            RPC_HOST: Server bind address
            RPC_PORT: Server bind port
            RPC_CORS_ORIGINS: Comma-separated allowed origins
            RPC_PREFIX: HTTP RPC route prefix
            RPC_WS_PATH: WebSocket endpoint path
            RPC_MIRROR_ERROR_STATUS: Use error status codes on HTTP errors
            RPC_STATIC_DIR: Static asset directory
            RPC_STATIC_PREFIXES: Comma-separated static prefixes
            RPC_AUTH_ENABLED: Require bearer tokens
            RPC_AUTH_TOKENS: Comma-separated user:token pairs

        Returns:
            Configuration from environment.
        """
        return cls(
            environment=os.getenv("RPC_ENV", "development"),
            server=ServerConfig(
                host=os.getenv("RPC_HOST", "0.0.0.0"),
                port=int(os.getenv("RPC_PORT", "8080")),
                cors_origins=_split_list(os.getenv("RPC_CORS_ORIGINS", "*")),
            ),
            rpc=RpcConfig(
                prefix=os.getenv("RPC_PREFIX", "rpc").strip("/"),
                ws_path=os.getenv("RPC_WS_PATH", "/ws"),
                mirror_error_status=_parse_bool(os.getenv("RPC_MIRROR_ERROR_STATUS", "")),
            ),
            static=StaticConfig(
                directory=os.getenv("RPC_STATIC_DIR") or None,
                prefixes=_split_list(
                    os.getenv("RPC_STATIC_PREFIXES", ",".join(DEFAULT_STATIC_PREFIXES))
                ),
            ),
            auth=AuthConfig(
                enabled=_parse_bool(os.getenv("RPC_AUTH_ENABLED", "")),
                tokens=_parse_auth_tokens(os.getenv("RPC_AUTH_TOKENS", "")),
            ),
        )

    @classmethod
    def _from_dict(cls, data: dict[str, Any]) -> "Config":
        """Create config from dictionary."""
        config = cls()
        config.environment = data.get("environment", config.environment)

        # Server config
        if "server" in data:
            srv = data["server"]
            config.server = ServerConfig(
                host=srv.get("host", config.server.host),
                port=srv.get("port", config.server.port),
                cors_origins=srv.get("cors_origins", config.server.cors_origins),
            )

        # RPC config
        if "rpc" in data:
            rpc = data["rpc"]
            config.rpc = RpcConfig(
                prefix=str(rpc.get("prefix", config.rpc.prefix)).strip("/"),
                ws_path=rpc.get("ws_path", config.rpc.ws_path),
                mirror_error_status=bool(
                    rpc.get("mirror_error_status", config.rpc.mirror_error_status)
                ),
            )

        # Static config
        if "static" in data:
            st = data["static"]
            config.static = StaticConfig(
                directory=st.get("directory"),
                prefixes=st.get("prefixes", config.static.prefixes),
            )

        # Auth config
        if "auth" in data:
            auth = data["auth"]
            tokens: list[AuthToken] = []
            for token_data in auth.get("tokens", []):
                token_value = token_data.get("token", "")
                # Expand environment variables
                if token_value.startswith("${") and token_value.endswith("}"):
                    env_var = token_value[2:-1]
                    token_value = os.environ.get(env_var, "")
                tokens.append(
                    AuthToken(
                        user=token_data.get("user", ""),
                        token=token_value,
                    )
                )
            config.auth = AuthConfig(
                enabled=auth.get("enabled", False),
                tokens=tokens,
            )

        return config


def _parse_auth_tokens(tokens_str: str) -> list[AuthToken]:
    """Parse RPC_AUTH_TOKENS environment variable.

    Format: user1:token1,user2:token2

    Args:
        tokens_str: Comma-separated user:token pairs.

    Returns:
        List of AuthToken objects.
    """
    tokens: list[AuthToken] = []
    if not tokens_str:
        return tokens

    for pair in tokens_str.split(","):
        pair = pair.strip()
        if ":" in pair:
            user, token = pair.split(":", 1)
            if user and token:
                tokens.append(AuthToken(user=user.strip(), token=token.strip()))

    return tokens


def _parse_bool(value: str) -> bool:
    return value.strip().lower() in ("1", "true", "yes", "on")


def _split_list(value: str) -> list[str]:
    return [item.strip() for item in value.split(",") if item.strip()]
