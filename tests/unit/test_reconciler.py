"""Tests for WorkingCopyReconciler keep modes and failure collection."""

from stashkit.core.git.fake import FakeGit
from stashkit.core.stash.builder import SnapshotBuilder
from stashkit.core.stash.errors import CleanupError
from stashkit.core.stash.reconciler import WorkingCopyReconciler
from stashkit.core.stash.types import KeepMode, Snapshot, SnapshotRequest, UntrackedMode

HEAD_FILES = {"a.txt": "a1\n", "b.txt": "b1\n"}
INDEX = {"a.txt": "a2\n", "b.txt": "b1\n"}
WORKTREE = {"a.txt": "a3\n", "b.txt": "b2\n", "new.txt": "n\n"}


def _snapshot(git: FakeGit, untracked: UntrackedMode = UntrackedMode.NONE) -> Snapshot:
    request = SnapshotRequest(message="WIP", include_untracked=untracked)
    snapshot = SnapshotBuilder(git, git.repo_root).build(request)
    assert snapshot is not None
    return snapshot


def test_keep_none_resets_index_and_worktree_to_base() -> None:
    git = FakeGit(head_files=HEAD_FILES, index=INDEX, worktree=WORKTREE)
    snapshot = _snapshot(git)

    error = WorkingCopyReconciler(git, git.repo_root).cleanup(
        snapshot, KeepMode.NONE, UntrackedMode.NONE
    )

    assert error is None
    assert git.index == HEAD_FILES
    # Untracked files that were not captured stay in place
    assert git.worktree == {**HEAD_FILES, "new.txt": "n\n"}
    assert git.reset_calls == [snapshot.base]


def test_keep_worktree_restores_paths_from_base_and_leaves_index() -> None:
    git = FakeGit(head_files=HEAD_FILES, index=INDEX, worktree=WORKTREE)
    snapshot = _snapshot(git)

    error = WorkingCopyReconciler(git, git.repo_root).cleanup(
        snapshot, KeepMode.WORKTREE, UntrackedMode.NONE
    )

    assert error is None
    assert git.index == INDEX
    assert git.worktree == {**HEAD_FILES, "new.txt": "n\n"}
    assert git.reset_calls == []


def test_keep_index_restores_paths_from_index() -> None:
    git = FakeGit(head_files=HEAD_FILES, index=INDEX, worktree=WORKTREE)
    snapshot = _snapshot(git)

    error = WorkingCopyReconciler(git, git.repo_root).cleanup(
        snapshot, KeepMode.INDEX, UntrackedMode.NONE
    )

    assert error is None
    assert git.index == INDEX
    assert git.worktree == {**INDEX, "new.txt": "n\n"}


def test_captured_untracked_files_are_removed() -> None:
    git = FakeGit(head_files=HEAD_FILES, index=INDEX, worktree=WORKTREE)
    snapshot = _snapshot(git, UntrackedMode.TRACKED_IGNORE_EXCLUDED)

    error = WorkingCopyReconciler(git, git.repo_root).cleanup(
        snapshot, KeepMode.NONE, UntrackedMode.TRACKED_IGNORE_EXCLUDED
    )

    assert error is None
    assert git.worktree == HEAD_FILES


def test_ignored_files_removed_only_in_all_mode() -> None:
    git = FakeGit(
        head_files=HEAD_FILES,
        worktree={**HEAD_FILES, "build.log": "log\n"},
        ignored={"build.log"},
    )
    snapshot = _snapshot(git, UntrackedMode.ALL)

    error = WorkingCopyReconciler(git, git.repo_root).cleanup(
        snapshot, KeepMode.NONE, UntrackedMode.ALL
    )

    assert error is None
    assert "build.log" not in git.worktree


def test_tracked_reset_runs_after_untracked_cleanup_fails() -> None:
    git = FakeGit(
        head_files=HEAD_FILES,
        index=INDEX,
        worktree=WORKTREE,
        failing_operations={"clean_paths"},
    )
    snapshot = _snapshot(git, UntrackedMode.TRACKED_IGNORE_EXCLUDED)

    error = WorkingCopyReconciler(git, git.repo_root).cleanup(
        snapshot, KeepMode.NONE, UntrackedMode.TRACKED_IGNORE_EXCLUDED
    )

    assert isinstance(error, CleanupError)
    assert len(error.failures) == 1
    assert "untracked" in error.failures[0]
    assert git.index == HEAD_FILES
    assert git.worktree["new.txt"] == "n\n"


def test_both_failures_are_collected() -> None:
    git = FakeGit(
        head_files=HEAD_FILES,
        index=INDEX,
        worktree=WORKTREE,
        failing_operations={"clean_paths", "reset_hard"},
    )
    snapshot = _snapshot(git, UntrackedMode.TRACKED_IGNORE_EXCLUDED)

    error = WorkingCopyReconciler(git, git.repo_root).cleanup(
        snapshot, KeepMode.NONE, UntrackedMode.TRACKED_IGNORE_EXCLUDED
    )

    assert error is not None
    assert len(error.failures) == 2
    assert str(error).startswith("Stash saved, but cleaning the working copy failed")
