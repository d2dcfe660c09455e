"""
Git Repository — Explicit handle around the git command line.

Every call runs with cwd pinned to the handle's working directory, so the
orchestration never depends on the process cwd or on whatever branch
happens to be checked out in the caller's shell.
"""

from __future__ import annotations

import logging
import subprocess
from pathlib import Path
from typing import List, Optional

from ..errors import GitCommandError, GitTimeoutError

logger = logging.getLogger(__name__)


class GitRepository:
    """A git working tree addressed by path."""

    def __init__(self, path: Path, timeout: Optional[float] = None):
        self.path = Path(path)
        self.timeout = timeout

    def __repr__(self) -> str:
        return f"GitRepository({str(self.path)!r})"

    # ------------------------------------------------------------------
    # Raw invocation
    # ------------------------------------------------------------------

    def run(
        self,
        *args: str,
        check: bool = False,
        merge_output: bool = False,
    ) -> subprocess.CompletedProcess:
        """Run a git command in the repository.

        With merge_output=True stderr is folded into stdout, which keeps the
        interleaving git prints for rebase conflicts. A call running past the
        handle's timeout raises GitTimeoutError, even where check=False.
        """
        cmd = ["git"] + list(args)
        logger.debug(f"[git] {self.path}: {' '.join(cmd)}")

        if merge_output:
            streams = {"stdout": subprocess.PIPE, "stderr": subprocess.STDOUT}
        else:
            streams = {"capture_output": True}

        try:
            result = subprocess.run(
                cmd,
                cwd=str(self.path),
                text=True,
                timeout=self.timeout,
                **streams,
            )
        except subprocess.TimeoutExpired:
            logger.error(f"[git] {' '.join(cmd)} timed out after {self.timeout}s")
            raise GitTimeoutError(args, self.timeout)

        if check and result.returncode != 0:
            output = result.stderr or result.stdout or ""
            raise GitCommandError(args, result.returncode, output)
        return result

    def output(self, *args: str) -> str:
        """Run a git command and return stripped stdout. Raises on failure."""
        return self.run(*args, check=True).stdout.strip()

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def is_work_tree(self) -> bool:
        if not self.path.is_dir():
            return False
        result = self.run("rev-parse", "--is-inside-work-tree")
        return result.returncode == 0 and result.stdout.strip() == "true"

    def remotes(self) -> List[str]:
        return [r.strip() for r in self.output("remote").splitlines() if r.strip()]

    def remote_url(self, name: str) -> Optional[str]:
        result = self.run("remote", "get-url", name)
        if result.returncode != 0:
            return None
        return result.stdout.strip()

    def has_local_branch(self, branch: str) -> bool:
        result = self.run("show-ref", "--verify", "--quiet", f"refs/heads/{branch}")
        return result.returncode == 0

    def rev_parse(self, ref: str) -> str:
        return self.output("rev-parse", ref)

    def short_head(self) -> str:
        return self.output("rev-parse", "--short", "HEAD")

    def merge_base(self, a: str, b: str) -> str:
        return self.output("merge-base", a, b)

    def last_commit_message(self) -> str:
        return self.output("log", "-1", "--pretty=%B")

    def rev_list_count(self, revision_range: str) -> int:
        return int(self.output("rev-list", "--count", revision_range))

    def log_lines(self, revision_range: str, pretty: str, reverse: bool = False) -> List[str]:
        args = ["log", f"--pretty=format:{pretty}"]
        if reverse:
            args.append("--reverse")
        args.append(revision_range)
        return [line for line in self.output(*args).splitlines() if line.strip()]

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def add_remote(self, name: str, url: str) -> None:
        self.run("remote", "add", name, url, check=True)

    def fetch(self, remote: str, prune: bool = True) -> None:
        args = ["fetch", remote]
        if prune:
            args.append("--prune")
        self.run(*args, check=True)

    def checkout(self, ref: str) -> None:
        self.run("checkout", ref, check=True)

    def checkout_tracking(self, remote_branch: str) -> None:
        self.run("checkout", "--track", remote_branch, check=True)

    def rebase(self, onto: str) -> subprocess.CompletedProcess:
        """Rebase the current branch. Returns the result; only a timeout raises."""
        return self.run("rebase", onto, merge_output=True)

    def stage(self, *paths: str) -> None:
        self.run("add", *paths, check=True)

    def amend_message(self, message: str) -> None:
        self.run("commit", "--amend", "-m", message, check=True)

    def push_with_lease(self, remote: str, branch: str) -> subprocess.CompletedProcess:
        """Force-push with lease. Returns the result; only a timeout raises."""
        return self.run("push", "--force-with-lease", remote, branch)
