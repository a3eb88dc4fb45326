"""Post-publish cleanup of the captured changes from the real working copy."""

import logging
from pathlib import Path

from stashkit.core.git.abc import Git
from stashkit.core.stash.errors import CleanupError
from stashkit.core.stash.types import KeepMode, Snapshot, UntrackedMode

logger = logging.getLogger(__name__)


class WorkingCopyReconciler:
    """Clears what a published snapshot captured.

    Untracked cleanup and the tracked reset are two separately sequenced
    steps; the second runs even when the first fails. Failures are returned,
    never raised, because the snapshot is already durable.
    """

    def __init__(self, git: Git, repo_root: Path) -> None:
        self._git = git
        self._repo_root = repo_root

    def cleanup(
        self, snapshot: Snapshot, keep: KeepMode, include_untracked: UntrackedMode
    ) -> CleanupError | None:
        """Remove the captured changes, leaving what ``keep`` asks for.

        Returns:
            CleanupError describing every failed step, or None on success
        """
        git, root = self._git, self._repo_root
        failures: list[str] = []

        if snapshot.untracked_paths:
            try:
                git.clean_paths(
                    root,
                    snapshot.untracked_paths,
                    include_ignored=include_untracked.include_ignored,
                )
            except RuntimeError as e:
                logger.debug("Untracked cleanup failed", exc_info=True)
                failures.append(f"removing untracked files: {e}")

        try:
            if keep is KeepMode.NONE:
                git.reset_hard(root, snapshot.base)
            elif keep is KeepMode.WORKTREE:
                git.restore_worktree(root, snapshot.tracked_paths, source=snapshot.base)
            else:
                git.restore_worktree(root, snapshot.tracked_paths, source=None)
        except RuntimeError as e:
            logger.debug("Tracked reset (keep=%s) failed", keep.value, exc_info=True)
            failures.append(f"resetting tracked files: {e}")

        if failures:
            return CleanupError(failures)
        return None
