"""
forksync — CLI Entry Point

Usage:
    forksync rebase [BRANCH] [--repo PATH] [--config FILE] [--json]
    forksync check-config [--json]
    forksync recovery [BRANCH]
"""

from __future__ import annotations

# Load .env file FIRST, before any other imports that might read env vars
from pathlib import Path
from dotenv import load_dotenv

# Find .env in the directory the job runs from
_env_file = Path.cwd() / ".env"
if _env_file.exists():
    load_dotenv(_env_file)

from typing import Optional

import click

from .cli.config import check_config
from .cli.sync import rebase, recovery
from .logging_config import setup_logging


@click.group()
@click.option("--log-level", default=None, help="DEBUG, INFO, WARNING, ERROR (default: $LOG_LEVEL or INFO)")
@click.option("--log-format", type=click.Choice(["text", "json"]), default=None, help="Log output format")
@click.pass_context
def cli(ctx: click.Context, log_level: Optional[str], log_format: Optional[str]) -> None:
    """forksync — Rebase a fork onto its upstream and notify the team."""
    setup_logging(level=log_level, format_type=log_format)
    ctx.ensure_object(dict)


cli.add_command(rebase)
cli.add_command(recovery)
cli.add_command(check_config)


def main() -> None:
    cli(obj={})


if __name__ == "__main__":
    main()
