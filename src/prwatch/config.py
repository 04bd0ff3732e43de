from __future__ import annotations

import os
import re
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from dotenv import load_dotenv

CONFIG_DIR = Path.home() / ".config" / "prwatch"
CONFIG_FILE = CONFIG_DIR / "config.toml"

DEFAULT_API_URL = "https://api.github.com"
DEFAULT_TIMEOUT = 10.0
DEFAULT_REFRESH_INTERVAL = 60.0

# Checked in order; the first one set wins.
TOKEN_ENV_VARS = ("PRWATCH_TOKEN", "GITHUB_TOKEN", "AUTH_TOKEN")

DEFAULT_CONFIG = """\
[github]
# Only pull requests opened by this user are shown.
username = ""
# Repositories to watch, as "owner/name".
repos = []
# api_url = "https://api.github.com"
# Seconds before a single request is abandoned.
# timeout = 10

# The token is read from PRWATCH_TOKEN, GITHUB_TOKEN or AUTH_TOKEN
# (a .env file in the working directory is loaded first).

[refresh]
# Seconds between fetch cycles.
interval = 60
"""

_REPO_RE = re.compile(r"^[A-Za-z0-9_.-]+/[A-Za-z0-9_.-]+$")


class ConfigError(Exception):
    """Raised when the configuration is incomplete or malformed."""


def _validate_repos(repos: Any) -> list[str]:
    """Validate the repository list. Raises ConfigError on a bad entry."""
    if not isinstance(repos, list):
        raise ConfigError("github.repos must be a list of 'owner/name' strings.")
    for repo in repos:
        if not isinstance(repo, str) or not _REPO_RE.match(repo):
            raise ConfigError(f"Invalid repository '{repo}', expected 'owner/name'.")
    return list(repos)


def read_token() -> str | None:
    """Return the bearer token from the environment, loading .env first."""
    load_dotenv()
    for name in TOKEN_ENV_VARS:
        value = os.environ.get(name)
        if value:
            return value
    return None


@dataclass
class Config:
    username: str
    repos: list[str] = field(default_factory=list)
    token: str | None = None
    api_url: str = DEFAULT_API_URL
    timeout: float = DEFAULT_TIMEOUT  # seconds per request
    refresh_interval: float = DEFAULT_REFRESH_INTERVAL  # seconds between cycles

    @classmethod
    def from_dict(cls, data: dict[str, Any], token: str | None = None) -> Config:
        github = data.get("github", {})
        refresh = data.get("refresh", {})
        return cls(
            username=github.get("username", ""),
            repos=_validate_repos(github.get("repos", [])),
            token=token,
            api_url=github.get("api_url", DEFAULT_API_URL).rstrip("/"),
            timeout=float(github.get("timeout", DEFAULT_TIMEOUT)),
            refresh_interval=float(refresh.get("interval", DEFAULT_REFRESH_INTERVAL)),
        )

    @classmethod
    def load(cls, path: Path | None = None) -> Config:
        path = path or CONFIG_FILE
        if path.exists():
            with open(path, "rb") as f:
                data = tomllib.load(f)
        else:
            data = {}
        return cls.from_dict(data, token=read_token())

    def with_overrides(
        self, repos: tuple[str, ...] | list[str] = (), username: str | None = None
    ) -> Config:
        """Return a copy with CLI overrides applied."""
        return Config(
            username=username or self.username,
            repos=_validate_repos(list(repos)) if repos else list(self.repos),
            token=self.token,
            api_url=self.api_url,
            timeout=self.timeout,
            refresh_interval=self.refresh_interval,
        )

    def validate(self) -> None:
        if not self.username:
            raise ConfigError(
                f"No GitHub username configured. Set github.username in {CONFIG_FILE}."
            )
        if not self.repos:
            raise ConfigError(
                f"No repositories configured. Set github.repos in {CONFIG_FILE}."
            )


def get_config() -> Config:
    return Config.load()


def ensure_config() -> Path:
    """Create default config file if it doesn't exist. Returns config path."""
    if not CONFIG_FILE.exists():
        CONFIG_DIR.mkdir(parents=True, exist_ok=True)
        CONFIG_FILE.write_text(DEFAULT_CONFIG)
    return CONFIG_FILE
