"""Disposable scratch index used to build trees without touching the real index."""

import logging
import shutil
import tempfile
from collections.abc import Iterator, Sequence
from contextlib import contextmanager
from pathlib import Path

from stashkit.core.git.abc import Git
from stashkit.core.stash.errors import StagingError, TreeWriteError

logger = logging.getLogger(__name__)


class EphemeralIndex:
    """Handle to a scratch index that lives for one tree-building step.

    Obtain one through ``EphemeralIndex.acquire``; the backing directory is
    removed when the ``with`` block exits, whether it succeeds or raises.
    Handles are neither reentrant nor shareable between builds.
    """

    def __init__(self, git: Git, repo_root: Path, index_file: Path) -> None:
        self._git = git
        self._repo_root = repo_root
        self._index_file = index_file
        self._released = False

    @property
    def index_file(self) -> Path:
        return self._index_file

    @classmethod
    @contextmanager
    def acquire(
        cls, git: Git, repo_root: Path, seed_tree: str | None
    ) -> Iterator["EphemeralIndex"]:
        """Create a scratch index seeded from ``seed_tree`` (empty when None)."""
        scratch_dir = Path(tempfile.mkdtemp(prefix="stashkit-index-"))
        handle = cls(git, repo_root, scratch_dir / "index")
        logger.debug("Acquired scratch index %s (seed=%s)", handle.index_file, seed_tree)
        try:
            git.read_tree(repo_root, seed_tree, index_file=handle.index_file)
            yield handle
        finally:
            handle._released = True
            shutil.rmtree(scratch_dir, ignore_errors=True)
            logger.debug("Released scratch index %s", handle.index_file)

    def _ensure_live(self) -> None:
        if self._released:
            raise RuntimeError(f"Scratch index {self._index_file} has already been released")

    def stage(self, paths: Sequence[str]) -> None:
        """Record the current on-disk content of ``paths``.

        Raises:
            StagingError: If any path cannot be read
        """
        self._ensure_live()
        if not paths:
            return
        try:
            self._git.update_index(self._repo_root, paths, index_file=self._index_file)
        except RuntimeError as e:
            raise StagingError(paths) from e

    def write_tree(self) -> str:
        """Materialize the scratch index as a tree object.

        Raises:
            TreeWriteError: If the object store rejects the write
        """
        self._ensure_live()
        try:
            return self._git.write_tree(self._repo_root, index_file=self._index_file)
        except RuntimeError as e:
            raise TreeWriteError(f"Failed to write tree from {self._index_file}") from e
