"""Data models for the Jira proxy."""

from .config import ConfigError, JiraConfig, ProxyConfig

__all__ = [
    "ConfigError",
    "JiraConfig",
    "ProxyConfig",
]
