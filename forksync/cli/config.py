"""
CLI config commands — tool and configuration checking.

Usage:
    forksync check-config [--repo PATH] [--config FILE] [--json]
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import click

from ..errors import ConfigurationError


@click.command("check-config")
@click.option("--repo", "repo_path", type=click.Path(file_okay=False, path_type=Path), default=None, help="Repository root (default: current directory)")
@click.option("--config", "config_path", type=click.Path(dir_okay=False, path_type=Path), default=None, help="YAML config file")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def check_config(repo_path: Optional[Path], config_path: Optional[Path], as_json: bool) -> None:
    """Check tool availability and show the resolved settings."""
    import json as json_lib

    from ..config.settings import load_config
    from ..config.validator import ConfigValidator

    root = (repo_path or Path.cwd()).resolve()
    try:
        config = load_config(path=config_path, root=root)
    except ConfigurationError as e:
        click.secho(f"[ERROR] {e.message}", fg="red", err=True)
        raise SystemExit(e.exit_code)

    validator = ConfigValidator(config)
    results = validator.validate_all()

    if as_json:
        settings = config.model_dump(mode="json")
        settings["notify"]["webhook_url"] = config.notify.redacted_url
        click.echo(json_lib.dumps({
            "ready": validator.is_ready(),
            "checks": {name: s.to_dict() for name, s in results.items()},
            "settings": settings,
        }, indent=2))
    else:
        click.echo("\n📋 forksync Configuration\n")
        click.echo(f"  Upstream:   {config.upstream.remote} → {config.upstream.url}")
        click.echo(f"  Origin:     {config.origin_remote}")
        if config.internal.enabled:
            click.echo(
                f"  Internal:   {config.internal.path} "
                f"({config.internal.remote}/{config.internal.branch})"
            )
        else:
            click.echo("  Internal:   disabled")
        click.echo(f"  Webhook:    {config.notify.redacted_url or 'not configured'}")
        click.echo()

        for name, status in results.items():
            if status.configured:
                click.secho(f"  ✓ {name}", fg="green", nl=False)
                click.echo(f" — {status.detail}")
            else:
                color = "red" if status.required else "yellow"
                click.secho(f"  ✗ {name}", fg=color, nl=False)
                click.echo(f" — {status.guidance}")
        click.echo()

    if not validator.is_ready():
        raise SystemExit(1)
