"""Configuration loading utilities for Cloud Deployer."""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

from dotenv import load_dotenv

# Load .env file if it exists
load_dotenv()

_DEFAULT_CONFIG_PATH = Path("config/default_config.json")

_ENV_PREFIX = "CLOUD_DEPLOYER_"


@dataclass
class ApiConfig:
    """Connection settings for the hosting platform's management API."""

    endpoint: str = "https://cloudapi.acquia.com/v1"
    username: Optional[str] = None
    api_key: Optional[str] = None
    proxy: Optional[str] = None
    request_timeout: int = 60
    max_retries: int = 3


@dataclass
class TaskConfig:
    """Polling policy for asynchronous platform tasks.

    ``max_attempts`` and ``timeout`` default to ``None``: the waiter keeps
    polling until the platform reports the task complete.
    """

    poll_interval: float = 1.0
    max_attempts: Optional[int] = None
    timeout: Optional[float] = None


@dataclass
class ConfigSyncConfig:
    """Settings for the drush configuration-sync pipeline."""

    transport: str = "local"  # "local" | "ssh"
    drush_binary: str = "drush"
    overlay_module: str = "config_split"
    config_set: str = "sync"
    docroot_template: str = "/var/www/html/{site}.{env}/docroot"
    command_timeout: int = 1800
    ssh_port: int = 22
    ssh_key_path: Optional[str] = None
    extra_steps: List[str] = field(default_factory=list)


@dataclass
class DisplayConfig:
    """Formatting of dates in informational output."""

    timezone: str = "UTC"
    date_format: str = "%Y-%m-%d %H:%M:%S %Z"


@dataclass
class InteractionConfig:
    """Configuration for operator confirmation."""

    mode: str = "cli"  # "cli" | "auto"
    auto_confirm: bool = False


@dataclass
class AppConfig:
    """Top-level configuration."""

    api: ApiConfig = field(default_factory=ApiConfig)
    tasks: TaskConfig = field(default_factory=TaskConfig)
    config_sync: ConfigSyncConfig = field(default_factory=ConfigSyncConfig)
    display: DisplayConfig = field(default_factory=DisplayConfig)
    interaction: InteractionConfig = field(default_factory=InteractionConfig)

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "AppConfig":
        sections = {
            name: _strip_comments(payload.get(name, {}) or {})
            for name in ("api", "tasks", "config_sync", "display", "interaction")
        }
        return cls(
            api=ApiConfig(**{**ApiConfig().__dict__, **sections["api"]}),
            tasks=TaskConfig(**{**TaskConfig().__dict__, **sections["tasks"]}),
            config_sync=ConfigSyncConfig(
                **{**ConfigSyncConfig().__dict__, **sections["config_sync"]}
            ),
            display=DisplayConfig(**{**DisplayConfig().__dict__, **sections["display"]}),
            interaction=InteractionConfig(
                **{**InteractionConfig().__dict__, **sections["interaction"]}
            ),
        )


def _strip_comments(section: Dict[str, Any]) -> Dict[str, Any]:
    # Keys starting with an underscore are inline comments in the JSON file.
    return {k: v for k, v in section.items() if not k.startswith("_")}


def _apply_env_overrides(config: AppConfig) -> None:
    env_user = os.getenv(_ENV_PREFIX + "API_USER")
    if env_user:
        config.api.username = env_user

    env_key = os.getenv(_ENV_PREFIX + "API_KEY")
    if env_key:
        config.api.api_key = env_key

    env_endpoint = os.getenv(_ENV_PREFIX + "API_ENDPOINT")
    if env_endpoint:
        config.api.endpoint = env_endpoint

    env_proxy = os.getenv(_ENV_PREFIX + "API_PROXY")
    if env_proxy:
        config.api.proxy = env_proxy

    env_interval = os.getenv(_ENV_PREFIX + "TASK_POLL_INTERVAL")
    if env_interval:
        config.tasks.poll_interval = float(env_interval)

    env_attempts = os.getenv(_ENV_PREFIX + "TASK_MAX_ATTEMPTS")
    if env_attempts:
        config.tasks.max_attempts = int(env_attempts)

    env_timezone = os.getenv(_ENV_PREFIX + "TIMEZONE")
    if env_timezone:
        config.display.timezone = env_timezone


def load_config(path: Optional[str] = None) -> AppConfig:
    """Load configuration from `path` or the default location.

    Environment variables (higher priority than config file):
    - CLOUD_DEPLOYER_API_USER / CLOUD_DEPLOYER_API_KEY: API credentials
    - CLOUD_DEPLOYER_API_ENDPOINT: Base URL of the management API
    - CLOUD_DEPLOYER_API_PROXY: HTTP proxy for API requests
    - CLOUD_DEPLOYER_TASK_POLL_INTERVAL: Seconds between task polls
    - CLOUD_DEPLOYER_TASK_MAX_ATTEMPTS: Upper bound on task polls
    - CLOUD_DEPLOYER_TIMEZONE: Timezone used when printing dates
    """

    candidate_paths = []
    if path:
        candidate_paths.append(Path(path))
    candidate_paths.append(_DEFAULT_CONFIG_PATH)

    for candidate in candidate_paths:
        if candidate.is_file():
            with candidate.open("r", encoding="utf-8") as handle:
                data = json.load(handle)
            config = AppConfig.from_dict(data)
            _apply_env_overrides(config)
            return config

    raise FileNotFoundError(
        f"Could not find configuration file. Looked in: {', '.join(str(p) for p in candidate_paths)}"
    )
