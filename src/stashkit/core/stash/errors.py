"""Error taxonomy for stash operations.

Engine failures surface as RuntimeError from run_subprocess_with_context; the
stash layer translates them into these types (chained with ``from``) so the
caller can tell which scope or construction stage was responsible.
"""

from collections.abc import Sequence


def _preview(paths: Sequence[str]) -> str:
    preview = ", ".join(paths[:3])
    if len(paths) > 3:
        preview += f" (+{len(paths) - 3} more)"
    return preview


class StashError(Exception):
    """Base class for all stash errors."""


class NoChangesError(StashError):
    """The requested capture scope has nothing to capture."""

    def __init__(self, scope: str) -> None:
        self.scope = scope
        super().__init__(f"No {scope} changes to stash")


class SnapshotError(StashError):
    """Writing one of the three commit layers failed.

    ``stage`` is one of "index", "untracked" or "worktree".
    """

    def __init__(self, stage: str) -> None:
        self.stage = stage
        super().__init__(f"Failed to write the {stage} layer of the snapshot")


class StagingError(StashError):
    """Working-copy files could not be staged into a scratch index."""

    def __init__(self, paths: Sequence[str]) -> None:
        self.paths = list(paths)
        super().__init__(f"Failed to stage {_preview(self.paths)}")


class UncapturedChangesError(StashError):
    """Cleaning up after a partial capture would discard changes it leaves out.

    Raised before anything is written, so the working copy and the stack are
    untouched.
    """

    def __init__(self, scope: str, paths: Sequence[str]) -> None:
        self.scope = scope
        self.paths = list(paths)
        super().__init__(
            f"Stashing only {scope} changes would discard changes that are not stashed "
            f"({_preview(self.paths)}); pick another --keep mode or stash everything"
        )


class TreeWriteError(StashError):
    """The object store rejected a tree write."""


class CommitError(StashError):
    """The object store rejected a commit write."""


class InitialCommitMissingError(CommitError):
    """There is no base commit to anchor a snapshot to."""

    def __init__(self) -> None:
        super().__init__("You do not have the initial commit yet")


class ConcurrentUpdateError(StashError):
    """The stash reference moved between observation and update."""

    def __init__(self, ref: str, expected: str | None, actual: str | None) -> None:
        self.ref = ref
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"{ref} was updated concurrently (expected {expected or 'nothing'}, "
            f"found {actual or 'nothing'}); the stash was not saved"
        )


class ApplyConflictError(StashError):
    """The stash's index layer cannot be restored on top of the current index."""

    def __init__(self, commit: str) -> None:
        self.commit = commit
        super().__init__(f"Conflicts in index while applying {commit[:7]}")


class StashApplyError(StashError):
    """Restoring a stash failed outright."""

    def __init__(self, commit: str) -> None:
        self.commit = commit
        super().__init__(f"Could not apply stash {commit[:7]}")


class StashBranchError(StashError):
    """The branch for a stash entry could not be created or checked out."""

    def __init__(self, name: str, reason: str) -> None:
        self.name = name
        super().__init__(f"Could not create branch '{name}': {reason}")


class StackUpdateError(StashError):
    """Removing entries from the stash reference failed."""

    def __init__(self, ref: str, action: str) -> None:
        self.ref = ref
        super().__init__(f"Could not {action} on {ref}")


class StashEntryNotFoundError(StashError):
    """No stack entry exists at the given position."""

    def __init__(self, index: int) -> None:
        self.index = index
        super().__init__(f"stash@{{{index}}} is not a valid stash entry")


class CleanupError(StashError):
    """Post-publish working copy reconciliation failed.

    Non-fatal: the snapshot is already durable. ``failures`` holds one message
    per failed step.
    """

    def __init__(self, failures: Sequence[str]) -> None:
        self.failures = list(failures)
        super().__init__(
            "Stash saved, but cleaning the working copy failed: " + "; ".join(self.failures)
        )
