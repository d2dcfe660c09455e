"""
Sync Settings — Load configuration from YAML and FORKSYNC_* env vars.

Precedence (lowest to highest):
1. Built-in defaults (the bolt fork this tool was written for)
2. forksync.yaml in the repository root, or the file passed via --config
3. Environment variables

## Example forksync.yaml

    origin_remote: origin
    upstream:
      url: https://github.com/bytedance/bolt.git
      remote: upstream
      commit_url: https://github.com/bytedance/bolt/commit
    internal:
      enabled: true
      path: bytedance_internal
      branch: master
    notify:
      template_id: AAqvdoOm73Z30
      template_version: 1.0.1

## Environment Variables

- FORKSYNC_UPSTREAM_URL, FORKSYNC_UPSTREAM_REMOTE, FORKSYNC_ORIGIN_REMOTE
- FORKSYNC_WEBHOOK_URL, FORKSYNC_TEMPLATE_ID, FORKSYNC_TEMPLATE_VERSION
- FORKSYNC_WEBHOOK_TIMEOUT, FORKSYNC_GIT_TIMEOUT
- FORKSYNC_INTERNAL_ENABLED, FORKSYNC_INTERNAL_PATH
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

import yaml
from pydantic import BaseModel, Field, ValidationError

from ..errors import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILE = "forksync.yaml"


class UpstreamConfig(BaseModel):
    """The canonical project the fork tracks."""

    url: str = "https://github.com/bytedance/bolt.git"
    remote: str = "upstream"
    commit_url: str = "https://github.com/bytedance/bolt/commit"


class InternalConfig(BaseModel):
    """The nested internal-mirror checkout."""

    enabled: bool = True
    path: str = "bytedance_internal"
    name: str = "bytedance-internal"  # used in notification titles
    remote: str = "origin"
    branch: str = "master"
    commit_url: str = "https://code.byted.org/dp/bolt-internal/commit"
    submodule_command: List[str] = Field(default_factory=lambda: ["make", "submodules"])


class NotifyConfig(BaseModel):
    """Chat bot webhook."""

    webhook_url: Optional[str] = None
    template_id: str = "AAqvdoOm73Z30"
    template_version: str = "1.0.1"
    timeout: Optional[float] = None

    @property
    def enabled(self) -> bool:
        return bool(self.webhook_url)

    @property
    def redacted_url(self) -> Optional[str]:
        """Webhook URL with the hook token masked."""
        if not self.webhook_url:
            return None
        head, _, tail = self.webhook_url.rpartition("/")
        if not head:
            return "***"
        return f"{head}/{tail[:4]}***"


class SyncConfig(BaseModel):
    """Complete configuration for one sync run."""

    origin_remote: str = "origin"
    upstream: UpstreamConfig = Field(default_factory=UpstreamConfig)
    internal: InternalConfig = Field(default_factory=InternalConfig)
    notify: NotifyConfig = Field(default_factory=NotifyConfig)
    git_timeout: Optional[float] = None


# env var → (section, key); section None means top level
ENV_OVERRIDES = {
    "FORKSYNC_ORIGIN_REMOTE": (None, "origin_remote"),
    "FORKSYNC_GIT_TIMEOUT": (None, "git_timeout"),
    "FORKSYNC_UPSTREAM_URL": ("upstream", "url"),
    "FORKSYNC_UPSTREAM_REMOTE": ("upstream", "remote"),
    "FORKSYNC_UPSTREAM_COMMIT_URL": ("upstream", "commit_url"),
    "FORKSYNC_INTERNAL_ENABLED": ("internal", "enabled"),
    "FORKSYNC_INTERNAL_PATH": ("internal", "path"),
    "FORKSYNC_INTERNAL_BRANCH": ("internal", "branch"),
    "FORKSYNC_WEBHOOK_URL": ("notify", "webhook_url"),
    "FORKSYNC_TEMPLATE_ID": ("notify", "template_id"),
    "FORKSYNC_TEMPLATE_VERSION": ("notify", "template_version"),
    "FORKSYNC_WEBHOOK_TIMEOUT": ("notify", "timeout"),
}


def load_yaml(path: Path) -> Dict[str, Any]:
    """Load a YAML mapping. Empty files yield an empty dict."""
    try:
        with path.open("r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except OSError as e:
        raise ConfigurationError(f"Cannot read config file {path}: {e}")
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML in {path}: {e}")

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigurationError(f"Config file {path} must contain a mapping")
    return data


def apply_env(data: Dict[str, Any], env: Mapping[str, str]) -> Dict[str, Any]:
    """Overlay FORKSYNC_* environment variables on raw config data."""
    for var, (section, key) in ENV_OVERRIDES.items():
        value = env.get(var)
        if value is None or value == "":
            continue
        if section is None:
            data[key] = value
        else:
            target = data.setdefault(section, {})
            if not isinstance(target, dict):
                raise ConfigurationError(f"Config section '{section}' must be a mapping")
            target[key] = value
    return data


def load_config(
    path: Optional[Path] = None,
    root: Optional[Path] = None,
    env: Optional[Mapping[str, str]] = None,
) -> SyncConfig:
    """
    Load sync configuration.

    Args:
        path: Explicit config file (must exist)
        root: Repository root searched for forksync.yaml when path is None
        env: Environment mapping (defaults to os.environ)

    Raises:
        ConfigurationError: If the file is unreadable or values are invalid
    """
    env = os.environ if env is None else env
    data: Dict[str, Any] = {}

    if path is not None:
        path = Path(path)
        if not path.exists():
            raise ConfigurationError(f"Config file not found: {path}")
        data = load_yaml(path)
        logger.debug(f"Loaded config from {path}")
    elif root is not None and (Path(root) / DEFAULT_CONFIG_FILE).exists():
        data = load_yaml(Path(root) / DEFAULT_CONFIG_FILE)
        logger.debug(f"Loaded config from {Path(root) / DEFAULT_CONFIG_FILE}")

    data = apply_env(data, env)

    try:
        return SyncConfig(**data)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid configuration: {e}")
