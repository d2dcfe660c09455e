"""
Tests for forksync.git.repo and forksync.git.commits.

All subprocess calls are mocked — no real repos needed.
"""

from __future__ import annotations

import subprocess
from pathlib import Path
from unittest import mock

import pytest

from forksync.errors import GitCommandError, GitTimeoutError
from forksync.git.commits import CommitRange, collect_range, link_format
from forksync.git.repo import GitRepository
from tests.conftest import completed


@pytest.fixture
def git_repo(tmp_path) -> GitRepository:
    return GitRepository(tmp_path)


class TestRun:

    @mock.patch("forksync.git.repo.subprocess.run")
    def test_runs_in_repository_directory(self, mock_run, git_repo, tmp_path):
        mock_run.return_value = completed(0, stdout="abc\n")

        git_repo.run("status")

        cmd = mock_run.call_args.args[0]
        kwargs = mock_run.call_args.kwargs
        assert cmd == ["git", "status"]
        assert kwargs["cwd"] == str(tmp_path)
        assert kwargs["capture_output"] is True
        assert kwargs["timeout"] is None

    @mock.patch("forksync.git.repo.subprocess.run")
    def test_timeout_passed_through(self, mock_run, tmp_path):
        mock_run.return_value = completed(0)

        GitRepository(tmp_path, timeout=30).run("fetch", "upstream")

        assert mock_run.call_args.kwargs["timeout"] == 30

    @mock.patch("forksync.git.repo.subprocess.run")
    def test_timeout_raises_git_error(self, mock_run, tmp_path):
        mock_run.side_effect = subprocess.TimeoutExpired(["git", "fetch"], 0.5)

        with pytest.raises(GitTimeoutError) as exc_info:
            GitRepository(tmp_path, timeout=0.5).run("fetch", "upstream")

        assert isinstance(exc_info.value, GitCommandError)
        assert exc_info.value.exit_code == 124
        assert str(exc_info.value) == "git fetch upstream timed out after 0.5s"

    @mock.patch("forksync.git.repo.subprocess.run")
    def test_timeout_raises_even_without_check(self, mock_run, tmp_path):
        mock_run.side_effect = subprocess.TimeoutExpired(["git", "rebase"], 2)

        with pytest.raises(GitTimeoutError):
            GitRepository(tmp_path, timeout=2).rebase("upstream/main")

    @mock.patch("forksync.git.repo.subprocess.run")
    def test_check_raises_on_failure(self, mock_run, git_repo):
        mock_run.return_value = completed(128, stderr="fatal: bad revision 'nope'\n")

        with pytest.raises(GitCommandError) as exc_info:
            git_repo.run("rev-parse", "nope", check=True)

        assert exc_info.value.returncode == 128
        assert exc_info.value.exit_code == 128
        assert "bad revision" in str(exc_info.value)

    @mock.patch("forksync.git.repo.subprocess.run")
    def test_output_strips(self, mock_run, git_repo):
        mock_run.return_value = completed(0, stdout="  deadbeef\n")

        assert git_repo.output("rev-parse", "HEAD") == "deadbeef"

    @mock.patch("forksync.git.repo.subprocess.run")
    def test_rebase_merges_stderr_and_never_raises(self, mock_run, git_repo):
        mock_run.return_value = completed(1, stdout="CONFLICT (content)\n", stderr=None)

        result = git_repo.rebase("upstream/main")

        assert result.returncode == 1
        cmd = mock_run.call_args.args[0]
        kwargs = mock_run.call_args.kwargs
        assert cmd == ["git", "rebase", "upstream/main"]
        assert kwargs["stderr"] == subprocess.STDOUT
        assert kwargs["stdout"] == subprocess.PIPE


class TestQueries:

    def test_missing_directory_is_not_work_tree(self, tmp_path):
        with mock.patch("forksync.git.repo.subprocess.run") as mock_run:
            assert GitRepository(tmp_path / "absent").is_work_tree() is False
            mock_run.assert_not_called()

    @mock.patch("forksync.git.repo.subprocess.run")
    def test_is_work_tree(self, mock_run, git_repo):
        mock_run.return_value = completed(0, stdout="true\n")
        assert git_repo.is_work_tree() is True

        mock_run.return_value = completed(128, stderr="fatal: not a git repository")
        assert git_repo.is_work_tree() is False

    @mock.patch("forksync.git.repo.subprocess.run")
    def test_remotes(self, mock_run, git_repo):
        mock_run.return_value = completed(0, stdout="origin\nupstream\n")

        assert git_repo.remotes() == ["origin", "upstream"]

    @mock.patch("forksync.git.repo.subprocess.run")
    def test_remote_url_missing(self, mock_run, git_repo):
        mock_run.return_value = completed(2, stderr="error: No such remote 'upstream'")

        assert git_repo.remote_url("upstream") is None

    @mock.patch("forksync.git.repo.subprocess.run")
    def test_has_local_branch(self, mock_run, git_repo):
        mock_run.return_value = completed(1)

        assert git_repo.has_local_branch("main") is False
        assert mock_run.call_args.args[0] == [
            "git", "show-ref", "--verify", "--quiet", "refs/heads/main",
        ]

    @mock.patch("forksync.git.repo.subprocess.run")
    def test_rev_list_count(self, mock_run, git_repo):
        mock_run.return_value = completed(0, stdout="7\n")

        assert git_repo.rev_list_count("a..b") == 7

    @mock.patch("forksync.git.repo.subprocess.run")
    def test_log_lines_reverse(self, mock_run, git_repo):
        mock_run.return_value = completed(0, stdout="- one\n- two\n")

        lines = git_repo.log_lines("a..b", "- %s", reverse=True)

        assert lines == ["- one", "- two"]
        assert mock_run.call_args.args[0] == [
            "git", "log", "--pretty=format:- %s", "--reverse", "a..b",
        ]


class TestMutations:

    @mock.patch("forksync.git.repo.subprocess.run")
    def test_fetch_with_prune(self, mock_run, git_repo):
        mock_run.return_value = completed(0)

        git_repo.fetch("upstream")

        assert mock_run.call_args.args[0] == ["git", "fetch", "upstream", "--prune"]

    @mock.patch("forksync.git.repo.subprocess.run")
    def test_fetch_failure_raises(self, mock_run, git_repo):
        mock_run.return_value = completed(128, stderr="fatal: unable to access")

        with pytest.raises(GitCommandError):
            git_repo.fetch("upstream")

    @mock.patch("forksync.git.repo.subprocess.run")
    def test_push_with_lease(self, mock_run, git_repo):
        mock_run.return_value = completed(1, stderr="rejected")

        result = git_repo.push_with_lease("origin", "main")

        assert result.returncode == 1
        assert mock_run.call_args.args[0] == [
            "git", "push", "--force-with-lease", "origin", "main",
        ]

    @mock.patch("forksync.git.repo.subprocess.run")
    def test_amend_message(self, mock_run, git_repo):
        mock_run.return_value = completed(0)

        git_repo.amend_message("subject\n\nbody")

        assert mock_run.call_args.args[0] == [
            "git", "commit", "--amend", "-m", "subject\n\nbody",
        ]


class TestCommitRange:

    def test_link_format_strips_trailing_slash(self):
        assert link_format("https://host/org/proj/commit/") == (
            "- [`%h`](https://host/org/proj/commit/%H) %s"
        )

    def test_empty_range_does_not_call_git(self):
        repo = mock.MagicMock(spec=GitRepository)

        commits = collect_range(repo, "abc", "abc", "https://host/commit")

        assert commits.is_empty
        assert commits.count == 0
        repo.log_lines.assert_not_called()

    def test_collect_range(self):
        repo = mock.MagicMock(spec=GitRepository)
        repo.log_lines.return_value = ["- [`a1`](https://host/commit/a1) first"]
        repo.rev_list_count.return_value = 1

        commits = collect_range(repo, "base1", "base2", "https://host/commit")

        assert commits.spec == "base1..base2"
        assert commits.count == 1
        assert commits.as_markdown() == "commit list:\n- [`a1`](https://host/commit/a1) first"

    def test_markdown_of_prebuilt_range(self):
        commits = CommitRange(before="a", after="b", count=2, lines=["- x", "- y"])

        assert commits.as_markdown() == "commit list:\n- x\n- y"
