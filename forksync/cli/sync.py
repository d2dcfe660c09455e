"""
CLI sync commands — rebase onto upstream and the manual recovery guide.

Usage:
    forksync rebase [BRANCH] [--repo PATH] [--config FILE] [--json]
    forksync recovery [BRANCH]
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import click

from ..config.settings import SyncConfig, load_config
from ..config.validator import ConfigValidator
from ..errors import ForkSyncError
from ..git.repo import GitRepository
from ..notify.webhook import Notifier, NullNotifier, WebhookNotifier


def build_notifier(config: SyncConfig) -> Notifier:
    """Real notifier when a webhook URL is configured, else a logging one."""
    notify = config.notify
    if notify.enabled:
        return WebhookNotifier(
            url=notify.webhook_url,
            template_id=notify.template_id,
            template_version=notify.template_version,
            timeout=notify.timeout,
        )
    return NullNotifier(notify.template_id, notify.template_version)


@click.command("rebase")
@click.argument("branch", default="main")
@click.option("--repo", "repo_path", type=click.Path(file_okay=False, path_type=Path), default=None, help="Repository to sync (default: current directory)")
@click.option("--config", "config_path", type=click.Path(dir_okay=False, path_type=Path), default=None, help="YAML config file (default: <repo>/forksync.yaml)")
@click.option("--json", "as_json", is_flag=True, help="Print the sync report as JSON")
@click.pass_context
def rebase(
    ctx: click.Context,
    branch: str,
    repo_path: Optional[Path],
    config_path: Optional[Path],
    as_json: bool,
) -> None:
    """Rebase BRANCH onto upstream, push, and notify the bot."""
    from ..sync.internal import InternalMirror
    from ..sync.rebase import RebaseSynchronizer

    root = (repo_path or Path.cwd()).resolve()

    try:
        config = load_config(path=config_path, root=root)
        ConfigValidator(config).log_status()
        repo = GitRepository(root, timeout=config.git_timeout)
        internal = None
        if config.internal.enabled:
            internal = InternalMirror(repo, config.internal, timeout=config.git_timeout)

        synchronizer = RebaseSynchronizer(
            repo=repo,
            config=config,
            notifier=build_notifier(config),
            branch=branch,
            internal=internal,
        )
        report = synchronizer.run()
    except ForkSyncError as e:
        click.secho(f"[ERROR] {e.message}", fg="red", err=True)
        raise SystemExit(e.exit_code)

    if as_json:
        click.echo(report.model_dump_json(indent=2))
    else:
        click.echo()
        click.echo("=" * 40)
        if report.exit_code != 0:
            click.secho(f"❌ Rebase of {branch} failed (exit {report.exit_code})", fg="red")
            click.echo("   Run `forksync recovery` for the manual procedure.")
        elif report.new_upstream_commits:
            click.secho(f"✅ Rebased {report.upstream_commit_count} upstream commits", fg="green")
        else:
            click.echo("  (No new upstream commits introduced)")
        if report.internal_changed:
            click.secho(
                f"✅ Internal mirror {report.internal_before} → {report.internal_after} "
                f"({report.internal_commit_count} commits)",
                fg="green",
            )
        if report.exit_code == 0:
            click.echo(f"   Pushed: {'yes' if report.pushed else 'no (already up to date)'}")
        click.echo("=" * 40)

    if report.exit_code != 0:
        raise SystemExit(report.exit_code)


@click.command("recovery")
@click.argument("branch", default="main")
@click.option("--remote", default="origin", help="Origin remote name")
def recovery(branch: str, remote: str) -> None:
    """Show the manual recovery procedure for a failed CI rebase."""
    click.echo("\n🔧 Manual recovery (when the CI rebase fails)\n")
    click.echo(f"  1. Make sure your local {branch} is up to date and matches {remote}/{branch}.")
    click.echo(f"  2. Run `forksync rebase {branch}`.")
    click.echo("     If the rebase fails, git leaves an in-progress rebase in your working tree.")
    click.echo("  3. Resolve the conflicts, then run `git rebase --continue`.")
    click.echo(f"  4. Push the result with `git push --force-with-lease {remote} {branch}`.")
    click.echo()
