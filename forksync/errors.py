"""
Errors — Failure taxonomy for a sync run.

Every fatal condition is a ForkSyncError subclass carrying the exit code
the CLI should terminate with. A failed rebase is NOT an exception: it is
an expected outcome and comes back inside the SyncReport.

## Usage

    from forksync.errors import ForkSyncError

    try:
        report = synchronizer.run()
    except ForkSyncError as e:
        print(f"Sync aborted: {e}")
        raise SystemExit(e.exit_code)
"""

from __future__ import annotations

from typing import Optional, Sequence


class ForkSyncError(Exception):
    """Base class for fatal sync errors."""

    exit_code: int = 1

    def __init__(self, message: str, exit_code: Optional[int] = None):
        self.message = message
        if exit_code is not None:
            self.exit_code = exit_code
        super().__init__(message)


class ConfigurationError(ForkSyncError):
    """Raised when configuration is missing or invalid."""
    pass


class PreconditionError(ForkSyncError):
    """Raised when the repository is not in a state we may touch."""
    pass


class NotARepositoryError(PreconditionError):
    """The working directory is not inside a git work tree."""

    def __init__(self, path: str):
        self.path = path
        super().__init__(f"Not inside a git work tree: {path}")


class BranchDivergedError(PreconditionError):
    """Local branch tip differs from its origin counterpart."""

    def __init__(self, branch: str, remote: str, local_tip: str, remote_tip: str):
        self.branch = branch
        self.remote = remote
        self.local_tip = local_tip
        self.remote_tip = remote_tip
        super().__init__(
            f"Local branch {branch} does not match with remote branch "
            f"{remote}/{branch} ({local_tip[:12]} != {remote_tip[:12]})"
        )


class GitCommandError(ForkSyncError):
    """A git invocation exited non-zero where success was required."""

    def __init__(self, args: Sequence[str], returncode: int, output: str = ""):
        self.args_list = list(args)
        self.returncode = returncode
        self.output = output
        detail = f": {output.strip()}" if output and output.strip() else ""
        super().__init__(
            f"git {' '.join(self.args_list)} exited with {returncode}{detail}",
            exit_code=returncode or 1,
        )


class GitTimeoutError(GitCommandError):
    """A git invocation ran past the configured git_timeout."""

    exit_code = 124

    def __init__(self, args: Sequence[str], timeout: float):
        self.timeout = timeout
        super().__init__(args, self.exit_code, f"timed out after {timeout}s")
        self.message = f"git {' '.join(self.args_list)} timed out after {timeout}s"
        self.args = (self.message,)


class PushRejectedError(ForkSyncError):
    """Force-with-lease push refused (origin moved) or failed."""

    def __init__(self, remote: str, branch: str, returncode: int, output: str = ""):
        self.remote = remote
        self.branch = branch
        self.returncode = returncode
        self.output = output
        super().__init__(
            f"Push to {remote}/{branch} rejected (exit {returncode}): {output.strip()}",
            exit_code=returncode or 1,
        )


class InternalMirrorError(ForkSyncError):
    """The internal mirror checkout could not be prepared."""
    pass
