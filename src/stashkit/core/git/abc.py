"""Git engine interface.

This module provides a clean abstraction over the git primitives the stash
core orchestrates, making the stash logic testable without a real repository.

Architecture:
- Git: Abstract base class defining the engine primitives
- RealGit: Production implementation using subprocess
- FakeGit: In-memory implementation for tests

Methods that touch an index take ``index_file``. ``None`` means the
repository's real index; any other path names a scratch index file that the
caller owns.
"""

from abc import ABC, abstractmethod
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class ReflogEntry:
    """One record of a reference's history log."""

    commit: str
    timestamp: int  # when the entry was recorded, not the commit date
    subject: str


# ============================================================================
# Abstract Interface
# ============================================================================


class Git(ABC):
    """Abstract interface for git operations.

    All implementations (real and fake) must implement this interface.
    This interface contains ONLY runtime operations - no test setup methods.
    """

    # ------------------------------------------------------------------
    # Repository and branches
    # ------------------------------------------------------------------

    @abstractmethod
    def get_repository_root(self, cwd: Path) -> Path | None:
        """Get the top-level directory of the working copy containing cwd.

        Returns:
            Absolute path to the working copy root, or None outside a repository
        """
        ...

    @abstractmethod
    def get_current_branch(self, cwd: Path) -> str | None:
        """Get the currently checked-out branch (None when HEAD is detached)."""
        ...

    @abstractmethod
    def get_commit_message(self, repo_root: Path, commit_sha: str) -> str | None:
        """Get the first line of the commit message for a given commit SHA.

        Returns:
            Subject line, or None if commit doesn't exist.
        """
        ...

    @abstractmethod
    def create_branch(self, cwd: Path, branch_name: str, start_point: str) -> None:
        """Create a new branch without checking it out.

        Args:
            cwd: Working directory to run command in
            branch_name: Name of the branch to create
            start_point: Commit/branch to base the new branch on
        """
        ...

    @abstractmethod
    def checkout_branch(self, cwd: Path, branch: str) -> None:
        """Checkout a branch in the given directory."""
        ...

    # ------------------------------------------------------------------
    # References and history logs
    # ------------------------------------------------------------------

    @abstractmethod
    def resolve_commit(self, repo_root: Path, rev: str) -> str | None:
        """Resolve a revision expression to a full commit SHA.

        Returns:
            Commit SHA, or None if the revision does not name a commit
            (for example HEAD in a repository with no commits yet).
        """
        ...

    @abstractmethod
    def read_ref(self, repo_root: Path, ref: str) -> str | None:
        """Read the current value of a fully qualified reference.

        Returns:
            The SHA the reference points at, or None if it does not exist.
        """
        ...

    @abstractmethod
    def compare_and_swap_ref(
        self,
        repo_root: Path,
        ref: str,
        new: str,
        expected_old: str | None,
        *,
        message: str,
    ) -> bool:
        """Atomically move ``ref`` from ``expected_old`` to ``new``.

        The reference's history log is created if it does not exist yet, and
        ``message`` is recorded as the log entry's subject.

        Args:
            repo_root: Path to the repository root
            ref: Fully qualified reference name (e.g. "refs/stash")
            new: Commit SHA to store
            expected_old: Value the reference must currently hold; None means
                the reference must not exist
            message: Subject for the history log entry

        Returns:
            True if the update happened, False if the reference did not hold
            ``expected_old`` (nothing was written).
        """
        ...

    @abstractmethod
    def delete_ref(self, repo_root: Path, ref: str) -> None:
        """Delete a reference together with its history log."""
        ...

    @abstractmethod
    def list_reflog(self, repo_root: Path, ref: str) -> list[ReflogEntry]:
        """List a reference's history log, newest first.

        Returns an empty list if the reference does not exist.
        """
        ...

    @abstractmethod
    def drop_reflog_entry(self, repo_root: Path, ref: str, index: int) -> None:
        """Remove entry ``index`` (0 = newest) from a reference's history log.

        The reference itself is rewritten to the new newest entry. Callers
        are responsible for deleting the reference once the log is empty.
        """
        ...

    # ------------------------------------------------------------------
    # Object writing
    # ------------------------------------------------------------------

    @abstractmethod
    def get_tree(self, repo_root: Path, commit: str) -> str:
        """Get the tree id of a commit."""
        ...

    @abstractmethod
    def write_tree(self, repo_root: Path, *, index_file: Path | None) -> str:
        """Write the contents of an index as a tree object and return its id."""
        ...

    @abstractmethod
    def read_tree(self, repo_root: Path, tree: str | None, *, index_file: Path) -> None:
        """Replace the contents of a scratch index with ``tree`` (None empties it)."""
        ...

    @abstractmethod
    def update_index(self, repo_root: Path, paths: Sequence[str], *, index_file: Path) -> None:
        """Record the on-disk content of ``paths`` into a scratch index.

        Paths missing from the working tree are removed from the index.
        """
        ...

    @abstractmethod
    def commit_tree(
        self, repo_root: Path, tree: str, parents: Sequence[str], *, message: str
    ) -> str:
        """Write a commit object without moving any reference.

        Returns:
            The new commit's SHA. Identical inputs still produce a new write.
        """
        ...

    # ------------------------------------------------------------------
    # Working copy inspection
    # ------------------------------------------------------------------

    @abstractmethod
    def list_staged_files(self, repo_root: Path) -> list[str]:
        """List paths whose index content differs from HEAD."""
        ...

    @abstractmethod
    def list_unstaged_files(self, repo_root: Path) -> list[str]:
        """List tracked paths whose working-tree content differs from the index."""
        ...

    @abstractmethod
    def list_changed_files(self, repo_root: Path, commit: str) -> list[str]:
        """List tracked paths whose working-tree content differs from ``commit``."""
        ...

    @abstractmethod
    def list_untracked_files(self, repo_root: Path, *, include_ignored: bool) -> list[str]:
        """List untracked files.

        Args:
            repo_root: Path to the repository root
            include_ignored: If True, files matched by ignore rules are listed too
        """
        ...

    # ------------------------------------------------------------------
    # Checkout and reset
    # ------------------------------------------------------------------

    @abstractmethod
    def reset_hard(self, repo_root: Path, commit: str) -> None:
        """Reset index and working tree to ``commit``."""
        ...

    @abstractmethod
    def restore_worktree(
        self, repo_root: Path, paths: Sequence[str], *, source: str | None
    ) -> None:
        """Overwrite working-tree ``paths`` without touching the index.

        Args:
            repo_root: Path to the repository root
            paths: Tracked paths to restore
            source: Commit to restore from; None restores from the index
        """
        ...

    @abstractmethod
    def clean_paths(self, repo_root: Path, paths: Sequence[str], *, include_ignored: bool) -> None:
        """Remove untracked ``paths`` and any directory that leaves empty.

        Args:
            repo_root: Path to the repository root
            paths: Untracked paths to remove
            include_ignored: If True, ignored files among ``paths`` are removed too
        """
        ...

    @abstractmethod
    def apply_stash(self, repo_root: Path, commit: str, *, restore_index: bool) -> None:
        """Restore a stash commit onto the index and working tree.

        Args:
            repo_root: Path to the repository root
            commit: Stash commit whose parents are [base, index, untracked?]
            restore_index: If True, the stash's index layer is reinstated too

        Raises:
            ApplyConflictError: If restore_index is True and the index layer
                does not apply on top of the current index. Nothing has been
                changed when this is raised.
            RuntimeError: If the restoration fails for any other reason
        """
        ...
