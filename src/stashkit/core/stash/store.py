"""The stash stack: a reference whose history log is a LIFO list of snapshots."""

import logging
from pathlib import Path

from stashkit.core.git.abc import Git
from stashkit.core.stash.errors import (
    ConcurrentUpdateError,
    StackUpdateError,
    StashEntryNotFoundError,
)
from stashkit.core.stash.types import StashStackEntry

logger = logging.getLogger(__name__)

DEFAULT_STASH_REF = "refs/stash"


class StashStore:
    """Publishes and removes snapshots on a stack-shaped reference.

    Compare-and-swap on the reference is the only way the stack is pushed;
    there is no locking. Entry identity is positional (``stash@{n}``), so
    positions shift as entries are dropped.
    """

    def __init__(self, git: Git, repo_root: Path, ref: str = DEFAULT_STASH_REF) -> None:
        self._git = git
        self._repo_root = repo_root
        self._ref = ref

    @property
    def ref(self) -> str:
        return self._ref

    def observe(self) -> str | None:
        """Current value of the stack reference (None when the stack is empty)."""
        return self._git.read_ref(self._repo_root, self._ref)

    def publish(self, snapshot_id: str, message: str, expected_old: str | None) -> None:
        """Push ``snapshot_id`` onto the stack.

        Args:
            snapshot_id: Snapshot commit to publish
            message: Subject recorded in the history log
            expected_old: Value observed before the snapshot was built

        Raises:
            ConcurrentUpdateError: If the reference no longer holds
                ``expected_old``; the reference is left untouched
        """
        swapped = self._git.compare_and_swap_ref(
            self._repo_root, self._ref, snapshot_id, expected_old, message=message
        )
        if not swapped:
            actual = self.observe()
            logger.debug("Lost race on %s: expected=%s actual=%s", self._ref, expected_old, actual)
            raise ConcurrentUpdateError(self._ref, expected_old, actual)
        logger.debug("Published %s to %s", snapshot_id, self._ref)

    def entries(self) -> list[StashStackEntry]:
        """Stack entries, newest first. Each call re-reads the history log."""
        return [
            StashStackEntry(index=i, commit=e.commit, timestamp=e.timestamp, subject=e.subject)
            for i, e in enumerate(self._git.list_reflog(self._repo_root, self._ref))
        ]

    def resolve(self, index: int) -> str:
        """Commit id of ``stash@{index}``.

        Raises:
            StashEntryNotFoundError: If there is no entry at ``index``
        """
        entries = self.entries()
        if index < 0 or index >= len(entries):
            raise StashEntryNotFoundError(index)
        return entries[index].commit

    def drop(self, index: int) -> None:
        """Remove ``stash@{index}``; deletes the reference when the stack empties.

        Raises:
            StashEntryNotFoundError: If there is no entry at ``index``
            StackUpdateError: If the history log or reference cannot be rewritten
        """
        count = len(self.entries())
        if index < 0 or index >= count:
            raise StashEntryNotFoundError(index)

        try:
            self._git.drop_reflog_entry(self._repo_root, self._ref, index)
            if count == 1 and self.observe() is not None:
                self._git.delete_ref(self._repo_root, self._ref)
        except RuntimeError as e:
            raise StackUpdateError(self._ref, f"drop stash@{{{index}}}") from e
        logger.debug("Dropped %s@{%d}", self._ref, index)

    def clear(self) -> None:
        """Delete the reference and its whole history log.

        Raises:
            StackUpdateError: If the reference cannot be deleted
        """
        if self.observe() is None:
            logger.debug("Nothing to clear on %s", self._ref)
            return
        try:
            self._git.delete_ref(self._repo_root, self._ref)
        except RuntimeError as e:
            raise StackUpdateError(self._ref, "clear the stash entries") from e
        logger.debug("Cleared %s", self._ref)
