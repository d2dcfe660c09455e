"""
Shared fixtures for sync tests.

Provides a default SyncConfig, a mocked git repository handle whose tips
can be moved by the test, and a recording notifier. Helpers for building
real throwaway git repositories live here too, for the end-to-end tests.
"""

from __future__ import annotations

import subprocess
from pathlib import Path
from typing import Dict
from unittest.mock import MagicMock

import pytest

from forksync.config.settings import InternalConfig, NotifyConfig, SyncConfig, UpstreamConfig
from forksync.git.repo import GitRepository
from forksync.notify.webhook import Notifier

UPSTREAM_URL = "https://github.com/example/project.git"


def completed(returncode: int = 0, stdout: str = "", stderr: str = "") -> subprocess.CompletedProcess:
    """Create a CompletedProcess like subprocess.run would return."""
    return subprocess.CompletedProcess(
        args=["git"], returncode=returncode, stdout=stdout, stderr=stderr,
    )


@pytest.fixture
def config() -> SyncConfig:
    """Config with the internal mirror disabled and a webhook set."""
    return SyncConfig(
        upstream=UpstreamConfig(
            url=UPSTREAM_URL,
            commit_url="https://github.com/example/project/commit",
        ),
        internal=InternalConfig(enabled=False),
        notify=NotifyConfig(webhook_url="https://bot.example.com/hook/abcdef"),
    )


@pytest.fixture
def tips() -> Dict[str, str]:
    """Ref → commit map backing the mocked repo's rev_parse."""
    return {"main": "aaa111", "origin/main": "aaa111"}


@pytest.fixture
def repo(tips) -> MagicMock:
    """A GitRepository mock for a clean checkout already tracking origin."""
    mock_repo = MagicMock(spec=GitRepository)
    mock_repo.path = Path("/work/project")
    mock_repo.timeout = None
    mock_repo.is_work_tree.return_value = True
    mock_repo.remotes.return_value = ["origin", "upstream"]
    mock_repo.remote_url.return_value = UPSTREAM_URL
    mock_repo.has_local_branch.return_value = True
    mock_repo.rev_parse.side_effect = lambda ref: tips[ref]
    mock_repo.merge_base.side_effect = ["base000", "base000"]
    mock_repo.rebase.return_value = completed(0, stdout="Current branch main is up to date.\n", stderr=None)
    mock_repo.push_with_lease.return_value = completed(0)
    mock_repo.last_commit_message.return_value = "fork: keep local patches"
    return mock_repo


@pytest.fixture
def notifier() -> MagicMock:
    """Notifier mock that reports every message as delivered."""
    mock_notifier = MagicMock(spec=Notifier)
    mock_notifier.send.return_value = True
    return mock_notifier


# ---------------------------------------------------------------------------
# Real git helpers
# ---------------------------------------------------------------------------


@pytest.fixture
def git_env(tmp_path, monkeypatch):
    """Isolate git from the host's global config and pin an identity."""
    gitconfig = tmp_path / "gitconfig"
    # local paths as submodule URLs
    gitconfig.write_text('[protocol "file"]\n\tallow = always\n')
    monkeypatch.setenv("GIT_CONFIG_GLOBAL", str(gitconfig))
    monkeypatch.setenv("GIT_CONFIG_NOSYSTEM", "1")
    monkeypatch.setenv("GIT_AUTHOR_NAME", "Sync Test")
    monkeypatch.setenv("GIT_AUTHOR_EMAIL", "sync@example.com")
    monkeypatch.setenv("GIT_COMMITTER_NAME", "Sync Test")
    monkeypatch.setenv("GIT_COMMITTER_EMAIL", "sync@example.com")
    return tmp_path


def git(cwd: Path, *args: str) -> str:
    """Run git in cwd, failing the test on error."""
    result = subprocess.run(
        ["git", *args],
        cwd=str(cwd),
        capture_output=True,
        text=True,
    )
    assert result.returncode == 0, f"git {' '.join(args)} failed: {result.stderr}"
    return result.stdout.strip()


def commit_file(repo: Path, name: str, content: str, message: str) -> str:
    """Write a file, commit it, and return the new commit id."""
    (repo / name).write_text(content)
    git(repo, "add", name)
    git(repo, "commit", "-q", "-m", message)
    return git(repo, "rev-parse", "HEAD")
