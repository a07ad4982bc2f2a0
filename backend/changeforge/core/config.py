"""
ChangeForge — Backend Configuration
Loads .env automatically, then reads all settings from environment variables.

Only the host integration (changeforge.main) reads these settings. The
changelog core receives a ChangelogConfig and credentials explicitly.
"""

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

from changeforge.errors import ConfigurationError

_env_path = Path(__file__).resolve().parent.parent.parent / ".env"
load_dotenv(_env_path)

DEFAULT_GITHUB_HOST = "github.com"


@dataclass(frozen=True)
class GitHubConfig:
    """GitHub host and API token."""
    host: str
    token: str
    timeout: float


@dataclass(frozen=True)
class AppConfig:
    """Top-level application configuration."""
    host: str
    port: int
    debug: bool
    github: GitHubConfig


def _load_config() -> AppConfig:
    return AppConfig(
        host=os.getenv("APP_HOST", "0.0.0.0"),
        port=int(os.getenv("APP_PORT", "8000")),
        debug=os.getenv("APP_DEBUG", "false").lower() == "true",
        github=GitHubConfig(
            host=os.getenv("GITHUB_HOST") or DEFAULT_GITHUB_HOST,
            token=os.getenv("GITHUB_TOKEN", ""),
            timeout=float(os.getenv("GITHUB_HTTP_TIMEOUT", "30.0")),
        ),
    )


def validate_github_config(cfg: GitHubConfig) -> None:
    """Raise ConfigurationError if the GitHub settings are incomplete."""
    missing: list[str] = []
    if not cfg.token:
        missing.append("GITHUB_TOKEN")
    if not cfg.host:
        missing.append("GITHUB_HOST")
    if missing:
        raise ConfigurationError(missing)


settings = _load_config()
