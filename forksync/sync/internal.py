"""
Internal Mirror — Keep the nested internal checkout on its origin tip.

The fork references an organization-internal repository as a nested
checkout. After every upstream rebase it is moved to the tip of its own
origin's default branch, and the submodule pointer change rides along in
the rebase commit.
"""

from __future__ import annotations

import logging
import subprocess
from pathlib import Path
from typing import Optional

from ..config.settings import InternalConfig
from ..errors import InternalMirrorError
from ..git.commits import CommitRange, collect_range
from ..git.repo import GitRepository

logger = logging.getLogger(__name__)


class InternalMirror:
    """Handle on the internal-mirror checkout inside the root repository."""

    def __init__(
        self,
        root: GitRepository,
        config: InternalConfig,
        timeout: Optional[float] = None,
    ):
        self.root = root
        self.config = config
        self.repo = GitRepository(root.path / config.path, timeout=timeout)

    @property
    def path(self) -> str:
        return self.config.path

    @property
    def name(self) -> str:
        return self.config.name

    def resolve_submodules(self) -> None:
        """Run the submodule command in the root repository."""
        cmd = list(self.config.submodule_command)
        if cmd:
            logger.info(f"[internal] Resolving submodules: {' '.join(cmd)}")
            try:
                result = subprocess.run(
                    cmd,
                    cwd=str(self.root.path),
                    capture_output=True,
                    text=True,
                    timeout=self.root.timeout,
                )
            except FileNotFoundError:
                raise InternalMirrorError(f"Submodule command not found: {cmd[0]}")
            except subprocess.TimeoutExpired:
                raise InternalMirrorError(
                    f"Submodule command timed out after {self.root.timeout}s: {' '.join(cmd)}",
                    exit_code=124,
                )

            if result.returncode != 0:
                error = result.stderr.strip() or result.stdout.strip()
                raise InternalMirrorError(
                    f"Submodule command failed ({result.returncode}): {error}",
                    exit_code=result.returncode,
                )

        # .git is a file for submodules, a directory for plain clones
        if not (self.repo.path / ".git").exists():
            raise InternalMirrorError(
                f"Internal mirror is not a git checkout: {self.repo.path}"
            )

    def head(self) -> str:
        return self.repo.short_head()

    def update(self) -> str:
        """Fetch and check out the remote default branch tip. Returns new HEAD."""
        remote = self.config.remote
        target = f"{remote}/{self.config.branch}"

        logger.info(f"[internal] Fetching {remote} in {self.path}")
        self.repo.fetch(remote, prune=True)
        self.repo.checkout(target)
        return self.head()

    def commit_list(self, before: str, after: str) -> CommitRange:
        return collect_range(self.repo, before, after, self.config.commit_url)

    def provenance_line(self, before: str, after: str) -> str:
        return f"update {self.path} from {before} to {after}"
