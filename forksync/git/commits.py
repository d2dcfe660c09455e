"""
Commit Lists — Render a commit range for chat notifications.

Each commit becomes a markdown bullet linking to the hosting web UI:

    - [`1a2b3c4`](https://github.com/org/proj/commit/1a2b3c4...) Fix thing
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List

from .repo import GitRepository


@dataclass
class CommitRange:
    """Commits between two revisions, oldest first."""

    before: str
    after: str
    count: int = 0
    lines: List[str] = field(default_factory=list)

    @property
    def spec(self) -> str:
        return f"{self.before}..{self.after}"

    @property
    def is_empty(self) -> bool:
        return self.before == self.after

    def as_markdown(self) -> str:
        return "commit list:\n" + "\n".join(self.lines)


def link_format(commit_url: str) -> str:
    """git log --pretty format producing a linked markdown bullet."""
    base = commit_url.rstrip("/")
    return f"- [`%h`]({base}/%H) %s"


def collect_range(
    repo: GitRepository,
    before: str,
    after: str,
    commit_url: str,
) -> CommitRange:
    """Collect the linked commit list and count for before..after."""
    commits = CommitRange(before=before, after=after)
    if commits.is_empty:
        return commits

    commits.lines = repo.log_lines(commits.spec, link_format(commit_url), reverse=True)
    commits.count = repo.rev_list_count(commits.spec)
    return commits
