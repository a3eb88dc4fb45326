"""Commit object writing with explicit parents."""

import logging
from collections.abc import Sequence
from pathlib import Path

from stashkit.core.git.abc import Git
from stashkit.core.stash.errors import CommitError, InitialCommitMissingError

logger = logging.getLogger(__name__)


class ObjectWriter:
    """Writes commit objects without moving any reference.

    Every call writes a fresh commit, even when an identical one exists.
    """

    def __init__(self, git: Git, repo_root: Path) -> None:
        self._git = git
        self._repo_root = repo_root

    def commit(self, message: str, tree: str, parents: Sequence[str]) -> str:
        """Write a commit for ``tree``; an empty ``parents`` writes an orphan.

        Raises:
            InitialCommitMissingError: If a parented commit is requested before
                the repository has any history
            CommitError: If the object store rejects the write
        """
        if parents and self._git.resolve_commit(self._repo_root, "HEAD") is None:
            raise InitialCommitMissingError()

        try:
            sha = self._git.commit_tree(self._repo_root, tree, parents, message=message)
        except RuntimeError as e:
            raise CommitError(f"Failed to write commit '{message}'") from e

        logger.debug("Wrote commit %s (tree=%s, parents=%s)", sha, tree, list(parents))
        return sha
