"""Stash operations exposed to the CLI and other callers.

Each function takes a StashContext plus already-resolved stash positions and
wires the stash components together for the context's repository.
"""

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path

from stashkit.core.context import StashContext
from stashkit.core.git.abc import Git
from stashkit.core.repo_discovery import RepoContext
from stashkit.core.stash.applier import StashApplier
from stashkit.core.stash.builder import SnapshotBuilder, describe_head
from stashkit.core.stash.errors import (
    CleanupError,
    InitialCommitMissingError,
    StashError,
    UncapturedChangesError,
)
from stashkit.core.stash.reconciler import WorkingCopyReconciler
from stashkit.core.stash.store import StashStore
from stashkit.core.stash.types import (
    ApplyOutcome,
    KeepMode,
    Snapshot,
    SnapshotRequest,
    StashStackEntry,
)

logger = logging.getLogger(__name__)


class NotInRepositoryError(StashError):
    """The context's working directory is not inside a git repository."""


@dataclass(frozen=True)
class StashResult:
    """A published snapshot and the outcome of the best-effort cleanup."""

    snapshot: Snapshot
    cleanup_error: CleanupError | None


def _repo_root(ctx: StashContext) -> Path:
    if not isinstance(ctx.repo, RepoContext):
        raise NotInRepositoryError(ctx.repo.message)
    return ctx.repo.root


def _store(ctx: StashContext) -> StashStore:
    return StashStore(ctx.git, _repo_root(ctx), ctx.config.stash_ref)


def _applier(ctx: StashContext) -> StashApplier:
    return StashApplier(ctx.git, _repo_root(ctx), _store(ctx))


def _uncaptured_paths(
    git: Git, root: Path, request: SnapshotRequest, keep: KeepMode
) -> list[str]:
    """Paths whose current content the cleanup for ``keep`` would discard unstashed."""
    if request.include_staged and request.include_worktree:
        return []
    if not request.include_staged:
        # Only a hard reset touches the index.
        return git.list_staged_files(root) if keep is KeepMode.NONE else []

    unstaged = git.list_unstaged_files(root)
    if keep is KeepMode.NONE:
        return unstaged
    # WORKTREE and INDEX rewrite the staged paths on disk.
    staged = set(git.list_staged_files(root))
    return [path for path in unstaged if path in staged]


def default_message(ctx: StashContext) -> str:
    """Message used when the caller gives none: ``WIP on <branch>: <sha> <subject>``."""
    root = _repo_root(ctx)
    base = ctx.git.resolve_commit(root, "HEAD")
    if base is None:
        raise InitialCommitMissingError()
    return f"WIP on {describe_head(ctx.git, root, base)}"


def create_stash(ctx: StashContext, request: SnapshotRequest, keep: KeepMode) -> StashResult | None:
    """Capture, publish and then clear the requested changes.

    The stash reference is observed before the snapshot is built, so a
    concurrent writer that moves it in the meantime makes the publish fail.

    Returns:
        StashResult, or None when nothing was captured and the request allows it

    Raises:
        UncapturedChangesError: A partial capture whose cleanup would discard
            changes that are not captured; nothing is written
        NoChangesError, SnapshotError, InitialCommitMissingError: Before publish;
            nothing is published
        ConcurrentUpdateError: The stack moved during the build; nothing is published
    """
    root = _repo_root(ctx)
    store = _store(ctx)

    at_risk = _uncaptured_paths(ctx.git, root, request, keep)
    if at_risk:
        raise UncapturedChangesError(request.scope, at_risk)

    observed = store.observe()
    snapshot = SnapshotBuilder(ctx.git, root).build(request)
    if snapshot is None:
        return None

    store.publish(snapshot.commit, request.message, observed)

    cleanup_error = WorkingCopyReconciler(ctx.git, root).cleanup(
        snapshot, keep, request.include_untracked
    )
    if cleanup_error is not None:
        logger.debug("Cleanup after publishing %s failed: %s", snapshot.commit, cleanup_error)
    return StashResult(snapshot=snapshot, cleanup_error=cleanup_error)


def list_stashes(ctx: StashContext) -> list[StashStackEntry]:
    return _store(ctx).entries()


def apply_stash(ctx: StashContext, index: int) -> ApplyOutcome:
    return _applier(ctx).apply(index)


def pop_stash(ctx: StashContext, index: int) -> ApplyOutcome:
    return _applier(ctx).pop(index)


def drop_stashes(ctx: StashContext, selection: int | Iterable[int]) -> list[int]:
    return _applier(ctx).drop(selection)


def clear_stashes(ctx: StashContext) -> None:
    _applier(ctx).clear()


def branch_from_stash(ctx: StashContext, index: int, name: str) -> ApplyOutcome:
    return _applier(ctx).branch(index, name)
