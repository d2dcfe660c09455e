"""
Rebase Synchronizer — Rebase a fork onto its upstream and report.

Flow for one run:

    check repo → register upstream → check branch vs origin → fetch upstream
    → merge-base (before) → rebase → merge-base (after)
    → internal mirror update + amend → push --force-with-lease
    → notifications

Fatal preconditions (not a repository, diverged branch) raise before the
network is touched. A failed rebase is reported to the bot and returned as a
report carrying git's exit code. A rejected push raises PushRejectedError.

Manual recovery (when a CI rebase fails):
1. Make sure your local branch is up to date and matches origin.
2. Run `forksync rebase`. On conflict git leaves the rebase in progress.
3. Resolve conflicts, then `git rebase --continue`.
4. `git push --force-with-lease origin <branch>`.
"""

from __future__ import annotations

import logging
from typing import Optional, Tuple

from ..config.settings import SyncConfig
from ..errors import BranchDivergedError, NotARepositoryError, PushRejectedError
from ..git.commits import CommitRange, collect_range
from ..git.repo import GitRepository
from ..notify.payload import failure_body
from ..notify.webhook import Notifier
from .internal import InternalMirror
from .report import STATUS_SYNCED, STATUS_UP_TO_DATE, SyncReport

logger = logging.getLogger(__name__)

TITLE_REBASE_FAILED = "Rebase failed, please handle manually"


class RebaseSynchronizer:
    """Synchronize a fork branch with upstream and the internal mirror."""

    def __init__(
        self,
        repo: GitRepository,
        config: SyncConfig,
        notifier: Notifier,
        branch: str = "main",
        internal: Optional[InternalMirror] = None,
    ):
        self.repo = repo
        self.config = config
        self.notifier = notifier
        self.branch = branch
        self.internal = internal

    @property
    def origin_ref(self) -> str:
        return f"{self.config.origin_remote}/{self.branch}"

    @property
    def upstream_ref(self) -> str:
        return f"{self.config.upstream.remote}/{self.branch}"

    # ------------------------------------------------------------------
    # Preconditions
    # ------------------------------------------------------------------

    def check_repository(self) -> None:
        if not self.repo.is_work_tree():
            raise NotARepositoryError(str(self.repo.path))

    def ensure_upstream_remote(self) -> bool:
        """Register the upstream remote if absent. Returns True if added."""
        upstream = self.config.upstream
        if upstream.remote in self.repo.remotes():
            current = self.repo.remote_url(upstream.remote)
            if current and current != upstream.url:
                logger.warning(
                    f"[rebase] Remote {upstream.remote} points at {current}, "
                    f"expected {upstream.url}; leaving it unchanged"
                )
            return False

        logger.info(f"[rebase] Adding remote: {upstream.remote} → {upstream.url}")
        self.repo.add_remote(upstream.remote, upstream.url)
        return True

    def check_branch(self) -> Optional[str]:
        """Check out the branch, refusing when it differs from origin.

        Returns the origin tip observed, which is also the lease the push
        will be made against.
        """
        if not self.repo.has_local_branch(self.branch):
            logger.info(f"[rebase] Creating {self.branch} tracking {self.origin_ref}")
            self.repo.checkout_tracking(self.origin_ref)
            return self.repo.rev_parse(self.origin_ref)

        local_tip = self.repo.rev_parse(self.branch)
        origin_tip = self.repo.rev_parse(self.origin_ref)
        if local_tip != origin_tip:
            raise BranchDivergedError(
                self.branch, self.config.origin_remote, local_tip, origin_tip
            )

        self.repo.checkout(self.branch)
        return origin_tip

    # ------------------------------------------------------------------
    # Steps
    # ------------------------------------------------------------------

    def merge_base(self) -> str:
        return self.repo.merge_base(self.branch, self.upstream_ref)

    def update_internal(self) -> Tuple[Optional[str], Optional[str]]:
        """Move the internal mirror and amend the rebase commit if it changed."""
        if self.internal is None:
            return None, None

        self.internal.resolve_submodules()
        before = self.internal.head()
        after = self.internal.update()

        if before == after:
            logger.info(f"[internal] {self.internal.path} unchanged at {after}")
            return before, after

        logger.info(f"[internal] Internal changes detected: {before} -> {after}")
        self.repo.stage(self.internal.path)
        old_message = self.repo.last_commit_message()
        self.repo.amend_message(
            f"{old_message}\n\n{self.internal.provenance_line(before, after)}"
        )
        return before, after

    def push(self, origin_tip: Optional[str]) -> bool:
        """Force-push with lease. Skipped when origin already has our tip."""
        local_tip = self.repo.rev_parse(self.branch)
        if origin_tip is not None and local_tip == origin_tip:
            logger.info(f"[rebase] {self.origin_ref} already at {local_tip[:12]}, nothing to push")
            return False

        remote = self.config.origin_remote
        logger.info(
            f"[rebase] Pushing {self.branch} to {remote} (force-with-lease)",
            extra={"branch": self.branch, "step": "push"},
        )
        result = self.repo.push_with_lease(remote, self.branch)
        if result.returncode != 0:
            output = result.stderr.strip() or result.stdout.strip()
            raise PushRejectedError(remote, self.branch, result.returncode, output)
        return True

    def notify_range(self, commits: CommitRange, title: str) -> bool:
        return self.notifier.send(title, commits.as_markdown(), "green")

    # ------------------------------------------------------------------
    # Entry point
    # ------------------------------------------------------------------

    def run(self) -> SyncReport:
        """Run the full sync. Raises ForkSyncError subclasses on fatal paths."""
        self.check_repository()
        self.ensure_upstream_remote()
        origin_tip = self.check_branch()

        logger.info(
            f"[rebase] Fetching {self.config.upstream.remote}",
            extra={"branch": self.branch, "step": "fetch"},
        )
        self.repo.fetch(self.config.upstream.remote, prune=True)

        base_before = self.merge_base()

        logger.info(
            f"[rebase] Rebasing {self.branch} onto {self.upstream_ref}",
            extra={"branch": self.branch, "step": "rebase"},
        )
        result = self.repo.rebase(self.upstream_ref)
        if result.returncode != 0:
            output = result.stdout or ""
            logger.error(
                f"[rebase] git rebase failed with exit code {result.returncode}:\n"
                f"{output.rstrip()}"
            )
            report = SyncReport.rebase_failed(
                self.branch, result.returncode, output, base_before=base_before
            )
            if self.notifier.send(TITLE_REBASE_FAILED, failure_body(output.rstrip("\n")), "red"):
                report.notifications_sent.append(TITLE_REBASE_FAILED)
            return report

        logger.info("[rebase] git rebase succeeded")
        base_after = self.merge_base()

        internal_before, internal_after = self.update_internal()
        internal_changed = internal_before != internal_after

        pushed = self.push(origin_tip)

        report = SyncReport(
            status=STATUS_SYNCED if base_before != base_after or internal_changed else STATUS_UP_TO_DATE,
            branch=self.branch,
            base_before=base_before,
            base_after=base_after,
            internal_before=internal_before,
            internal_after=internal_after,
            amended=internal_changed,
            pushed=pushed,
        )

        logger.info("Upstream commits introduced by this rebase:")
        if base_before == base_after:
            logger.info("  (No new upstream commits introduced)")
        else:
            commits = collect_range(
                self.repo, base_before, base_after, self.config.upstream.commit_url
            )
            report.upstream_commit_count = commits.count
            title = f"Successfully rebased {commits.count} commits"
            if self.notify_range(commits, title):
                report.notifications_sent.append(title)

        if internal_changed:
            commits = self.internal.commit_list(internal_before, internal_after)
            report.internal_commit_count = commits.count
            title = f"Successfully update {self.internal.name} {commits.count} commits"
            if self.notify_range(commits, title):
                report.notifications_sent.append(title)

        return report
