"""Restoring, popping, dropping and branching from stash entries."""

import logging
from collections.abc import Iterable
from pathlib import Path

from stashkit.core.git.abc import Git
from stashkit.core.stash.errors import (
    ApplyConflictError,
    StashApplyError,
    StashBranchError,
    StashEntryNotFoundError,
)
from stashkit.core.stash.store import StashStore
from stashkit.core.stash.types import ApplyOutcome

logger = logging.getLogger(__name__)


class StashApplier:
    """Drives the real index and working tree from entries of a StashStore."""

    def __init__(self, git: Git, repo_root: Path, store: StashStore) -> None:
        self._git = git
        self._repo_root = repo_root
        self._store = store

    def apply(self, index: int) -> ApplyOutcome:
        """Restore ``stash@{index}``, reinstating its index layer when possible.

        When the index layer collides with what is currently staged, only the
        working tree content is restored and RESTORED_WORKTREE_ONLY is
        returned.

        Raises:
            StashEntryNotFoundError: If there is no entry at ``index``
            StashApplyError: If the working tree content cannot be restored
        """
        commit = self._store.resolve(index)
        try:
            try:
                self._git.apply_stash(self._repo_root, commit, restore_index=True)
            except ApplyConflictError:
                logger.debug("Index layer of %s conflicts; retrying without it", commit)
                self._git.apply_stash(self._repo_root, commit, restore_index=False)
                return ApplyOutcome.RESTORED_WORKTREE_ONLY
        except RuntimeError as e:
            raise StashApplyError(commit) from e

        return ApplyOutcome.RESTORED_WITH_INDEX

    def pop(self, index: int) -> ApplyOutcome:
        """Apply ``stash@{index}`` and drop it if it was fully reinstated.

        An entry restored without its index layer stays on the stack.
        """
        outcome = self.apply(index)
        if outcome is ApplyOutcome.RESTORED_WITH_INDEX:
            self._store.drop(index)
        else:
            logger.debug("Keeping stash@{%d}: index layer was not restored", index)
        return outcome

    def drop(self, selection: int | Iterable[int]) -> list[int]:
        """Remove one entry or a set of entries.

        Positions are validated against the current stack before anything is
        removed, then removed highest first so pending positions never shift.

        Returns:
            The removed positions, in removal order

        Raises:
            StashEntryNotFoundError: If any position does not exist
        """
        positions = [selection] if isinstance(selection, int) else list(selection)
        count = len(self._store.entries())
        for position in positions:
            if position < 0 or position >= count:
                raise StashEntryNotFoundError(position)

        ordered = sorted(set(positions), reverse=True)
        for position in ordered:
            self._store.drop(position)
        return ordered

    def branch(self, index: int, name: str) -> ApplyOutcome:
        """Create ``name`` at the entry's base commit, check it out and apply the entry.

        Raises:
            StashEntryNotFoundError: If there is no entry at ``index``
            StashBranchError: If the branch exists or cannot be checked out
        """
        commit = self._store.resolve(index)
        base = self._git.resolve_commit(self._repo_root, f"{commit}^1")
        if base is None:
            raise StashApplyError(commit)

        try:
            self._git.create_branch(self._repo_root, name, base)
            self._git.checkout_branch(self._repo_root, name)
        except RuntimeError as e:
            raise StashBranchError(name, str(e)) from e
        return self.apply(index)

    def clear(self) -> None:
        self._store.clear()
