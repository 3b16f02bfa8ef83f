"""Configuration model for the Jira proxy."""

import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 3001
DEFAULT_CORS_ORIGINS = ("http://localhost:3000",)
DEFAULT_LOG_LEVEL = "INFO"


class ConfigError(Exception):
    """Configuration is missing or invalid."""

    pass


@dataclass(frozen=True)
class JiraConfig:
    """Jira connection settings."""

    url: str | None = None
    email: str | None = None
    api_token: str | None = None

    def is_configured(self) -> bool:
        """Check if Jira is fully configured."""
        return all([self.url, self.email, self.api_token])

    def missing(self) -> list[str]:
        """Names of the environment variables that are not set."""
        names = {
            "JIRA_API_URL": self.url,
            "JIRA_EMAIL": self.email,
            "JIRA_API_TOKEN": self.api_token,
        }
        return [name for name, value in names.items() if not value]

    def to_dict(self) -> dict[str, Any]:
        """Convert config to a dictionary with the token masked."""
        return {
            "url": self.url,
            "email": self.email,
            "api_token": "***" if self.api_token else None,
        }


@dataclass(frozen=True)
class ProxyConfig:
    """Process-wide settings, built once at startup."""

    jira: JiraConfig = field(default_factory=JiraConfig)
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    cors_origins: tuple[str, ...] = DEFAULT_CORS_ORIGINS
    log_level: str = DEFAULT_LOG_LEVEL
    log_dir: str | None = None

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "ProxyConfig":
        """Create a ProxyConfig from environment variables."""
        env = os.environ if environ is None else environ

        port_value = env.get("PORT", str(DEFAULT_PORT))
        try:
            port = int(port_value)
        except ValueError:
            raise ConfigError(f"PORT must be an integer, got {port_value!r}") from None

        origins = env.get("CORS_ORIGINS")
        if origins:
            cors_origins = tuple(o.strip() for o in origins.split(",") if o.strip())
        else:
            cors_origins = DEFAULT_CORS_ORIGINS

        return cls(
            jira=JiraConfig(
                url=env.get("JIRA_API_URL"),
                email=env.get("JIRA_EMAIL"),
                api_token=env.get("JIRA_API_TOKEN"),
            ),
            host=env.get("HOST", DEFAULT_HOST),
            port=port,
            cors_origins=cors_origins,
            log_level=env.get("JIRA_PROXY_LOG_LEVEL", DEFAULT_LOG_LEVEL),
            log_dir=env.get("JIRA_PROXY_LOG_DIR") or None,
        )
