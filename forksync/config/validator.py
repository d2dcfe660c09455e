"""
Configuration Validator — Check tools and settings before a sync run.

The rebase job shells out to git (and to make for submodule resolution),
and talks to the chat bot webhook. This module reports which of those
are ready so a misconfigured CI runner is caught by `forksync check-config`
instead of halfway through a rebase.

## Usage

    from forksync.config.validator import ConfigValidator

    validator = ConfigValidator(config)
    for name, status in validator.validate_all().items():
        if not status.configured:
            print(f"{name}: {status.guidance}")
"""

from __future__ import annotations

import logging
import shutil
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from .settings import SyncConfig

logger = logging.getLogger(__name__)


@dataclass
class ConfigStatus:
    """Status of a configuration check."""

    component: str
    configured: bool
    missing: List[str] = field(default_factory=list)
    guidance: Optional[str] = None
    detail: Optional[str] = None
    required: bool = True

    def to_dict(self) -> Dict:
        """Convert to dictionary for JSON output."""
        return {
            "component": self.component,
            "configured": self.configured,
            "required": self.required,
            "missing": self.missing,
            "guidance": self.guidance,
            "detail": self.detail,
        }


class ConfigValidator:
    """Validate tool availability and sync configuration."""

    def __init__(self, config: SyncConfig):
        self.config = config

    def check_tool(self, tool: str, required: bool = True) -> ConfigStatus:
        path = shutil.which(tool)
        if path:
            return ConfigStatus(component=tool, configured=True, detail=path, required=required)
        return ConfigStatus(
            component=tool,
            configured=False,
            missing=[tool],
            required=required,
            guidance=f"Install {tool} and make sure it is on PATH",
        )

    def check_webhook(self) -> ConfigStatus:
        notify = self.config.notify
        if notify.enabled:
            return ConfigStatus(
                component="webhook",
                configured=True,
                required=False,
                detail=notify.redacted_url,
            )
        return ConfigStatus(
            component="webhook",
            configured=False,
            missing=["FORKSYNC_WEBHOOK_URL"],
            required=False,
            guidance="Set FORKSYNC_WEBHOOK_URL to the bot hook URL (messages are only logged otherwise)",
        )

    def validate_all(self) -> Dict[str, ConfigStatus]:
        """
        Run every check.

        Returns:
            Dictionary mapping component name to ConfigStatus
        """
        results = {"git": self.check_tool("git")}

        internal = self.config.internal
        if internal.enabled and internal.submodule_command:
            tool = internal.submodule_command[0]
            results[tool] = self.check_tool(tool)

        results["webhook"] = self.check_webhook()
        return results

    def is_ready(self) -> bool:
        """True when every required component is configured."""
        return all(s.configured for s in self.validate_all().values() if s.required)

    def log_status(self) -> None:
        for name, status in self.validate_all().items():
            if status.configured:
                logger.info(f"✓ {name}: {status.detail or 'ok'}")
            elif status.required:
                logger.error(f"✗ {name}: missing ({status.guidance})")
            else:
                logger.warning(f"✗ {name}: not configured ({status.guidance})")
