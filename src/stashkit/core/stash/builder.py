"""Snapshot construction.

A snapshot is a commit whose parents are, in order:

1. the base commit (HEAD at capture time);
2. a commit of the staged tree, parented to the base;
3. optionally, an orphan commit holding only the untracked files.

Its own tree is the staged tree with the working tree changes laid on top.
Every tree is built in a scratch index, so the real index and working tree
are never modified, and nothing is linked to the stash reference here.
"""

import logging
from pathlib import Path

from stashkit.core.git.abc import Git
from stashkit.core.stash.ephemeral_index import EphemeralIndex
from stashkit.core.stash.errors import (
    CommitError,
    InitialCommitMissingError,
    NoChangesError,
    SnapshotError,
    StagingError,
    TreeWriteError,
)
from stashkit.core.stash.object_writer import ObjectWriter
from stashkit.core.stash.types import Snapshot, SnapshotRequest, UntrackedMode, WorkingCopyState

logger = logging.getLogger(__name__)

# Failures that abort a layer of the build
_LAYER_FAILURES = (RuntimeError, StagingError, TreeWriteError, CommitError)


def describe_head(git: Git, repo_root: Path, base: str) -> str:
    """Summarize HEAD as ``<branch>: <short sha> <subject>``."""
    branch = git.get_current_branch(repo_root) or "(no branch)"
    subject = git.get_commit_message(repo_root, base) or ""
    return f"{branch}: {base[:7]} {subject}".rstrip()


class SnapshotBuilder:
    """Builds snapshot commits from the current working copy."""

    def __init__(self, git: Git, repo_root: Path) -> None:
        self._git = git
        self._repo_root = repo_root
        self._writer = ObjectWriter(git, repo_root)

    def inspect(self, request: SnapshotRequest) -> WorkingCopyState:
        """Observe only the change sets the request asks for."""
        git, root = self._git, self._repo_root
        staged = git.list_staged_files(root) if request.include_staged else []
        unstaged = git.list_unstaged_files(root) if request.include_worktree else []
        untracked: list[str] = []
        if request.include_untracked is not UntrackedMode.NONE:
            untracked = git.list_untracked_files(
                root, include_ignored=request.include_untracked.include_ignored
            )
        return WorkingCopyState(
            staged=tuple(staged), unstaged=tuple(unstaged), untracked=tuple(untracked)
        )

    def _tracked_paths(
        self, request: SnapshotRequest, base: str, state: WorkingCopyState
    ) -> list[str]:
        if not request.include_worktree:
            return list(state.staged)
        if not request.include_staged:
            return list(state.unstaged)
        changed = self._git.list_changed_files(self._repo_root, base)
        return sorted(set(changed) | set(state.staged))

    def build(self, request: SnapshotRequest) -> Snapshot | None:
        """Write the snapshot commit and its intermediate layers.

        Returns:
            The snapshot, or None when nothing was captured and the request
            allows an empty capture.

        Raises:
            InitialCommitMissingError: If HEAD does not point at a commit yet
            NoChangesError: If every requested change set is empty
            SnapshotError: If writing the index, untracked or worktree layer fails
        """
        git, root = self._git, self._repo_root

        base = git.resolve_commit(root, "HEAD")
        if base is None:
            raise InitialCommitMissingError()

        state = self.inspect(request)
        logger.debug(
            "Working copy: staged=%d, unstaged=%d, untracked=%d",
            len(state.staged),
            len(state.unstaged),
            len(state.untracked),
        )
        if not (state.staged or state.unstaged or state.untracked):
            if request.allow_empty:
                logger.debug("No %s changes; nothing captured", request.scope)
                return None
            raise NoChangesError(request.scope)

        summary = describe_head(git, root, base)
        tracked_paths = self._tracked_paths(request, base, state)

        try:
            if request.include_staged:
                staged_tree = git.write_tree(root, index_file=None)
            else:
                staged_tree = git.get_tree(root, base)
            staged_commit = self._writer.commit(f"index on {summary}", staged_tree, [base])
        except _LAYER_FAILURES as e:
            raise SnapshotError("index") from e

        untracked_commit: str | None = None
        if state.untracked:
            try:
                with EphemeralIndex.acquire(git, root, None) as scratch:
                    scratch.stage(state.untracked)
                    untracked_tree = scratch.write_tree()
                untracked_commit = self._writer.commit(
                    f"untracked files on {summary}", untracked_tree, []
                )
            except _LAYER_FAILURES as e:
                raise SnapshotError("untracked") from e

        parents = [base, staged_commit]
        if untracked_commit is not None:
            parents.append(untracked_commit)

        try:
            with EphemeralIndex.acquire(git, root, staged_tree) as scratch:
                if request.include_worktree:
                    scratch.stage(tracked_paths)
                work_tree = scratch.write_tree()
            commit = self._writer.commit(request.message, work_tree, parents)
        except _LAYER_FAILURES as e:
            raise SnapshotError("worktree") from e

        logger.debug("Built snapshot %s with parents %s", commit, parents)
        return Snapshot(
            commit=commit,
            base=base,
            staged_commit=staged_commit,
            untracked_commit=untracked_commit,
            message=request.message,
            tracked_paths=tuple(tracked_paths),
            untracked_paths=state.untracked,
        )
