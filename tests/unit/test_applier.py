"""Tests for StashApplier: apply/pop fallback, bulk drop and branch."""

import pytest

from stashkit.core.git.fake import FakeGit
from stashkit.core.stash.applier import StashApplier
from stashkit.core.stash.builder import SnapshotBuilder
from stashkit.core.stash.errors import StashApplyError, StashEntryNotFoundError
from stashkit.core.stash.reconciler import WorkingCopyReconciler
from stashkit.core.stash.store import StashStore
from stashkit.core.stash.types import ApplyOutcome, KeepMode, SnapshotRequest, UntrackedMode

HEAD_FILES = {"a.txt": "a1\n", "b.txt": "b1\n"}


def _stash(git: FakeGit, store: StashStore, message: str, **request_kwargs) -> str:
    """Capture, publish and reset the working copy the way create_stash does."""
    request = SnapshotRequest(message=message, **request_kwargs)
    observed = store.observe()
    snapshot = SnapshotBuilder(git, git.repo_root).build(request)
    assert snapshot is not None
    store.publish(snapshot.commit, message, observed)
    error = WorkingCopyReconciler(git, git.repo_root).cleanup(
        snapshot, KeepMode.NONE, request.include_untracked
    )
    assert error is None
    return snapshot.commit


def _setup() -> tuple[FakeGit, StashStore, StashApplier]:
    git = FakeGit(
        head_files=HEAD_FILES,
        index={"a.txt": "a2\n", "b.txt": "b1\n"},
        worktree={"a.txt": "a3\n", "b.txt": "b2\n"},
    )
    store = StashStore(git, git.repo_root)
    return git, store, StashApplier(git, git.repo_root, store)


def test_apply_restores_index_and_worktree() -> None:
    git, store, applier = _setup()
    _stash(git, store, "WIP")
    assert git.worktree == HEAD_FILES

    outcome = applier.apply(0)

    assert outcome is ApplyOutcome.RESTORED_WITH_INDEX
    assert git.index == {"a.txt": "a2\n", "b.txt": "b1\n"}
    assert git.worktree == {"a.txt": "a3\n", "b.txt": "b2\n"}
    # apply keeps the entry
    assert len(store.entries()) == 1


def test_apply_restores_untracked_files() -> None:
    git = FakeGit(head_files=HEAD_FILES, worktree={**HEAD_FILES, "new.txt": "n\n"})
    store = StashStore(git, git.repo_root)
    _stash(git, store, "WIP", include_untracked=UntrackedMode.TRACKED_IGNORE_EXCLUDED)
    assert "new.txt" not in git.worktree

    StashApplier(git, git.repo_root, store).apply(0)

    assert git.worktree["new.txt"] == "n\n"
    assert "new.txt" not in git.index


def _stage_colliding_change(git: FakeGit) -> None:
    """Stage a different a.txt while leaving its working tree content at base."""
    git.edit_file("a.txt", "other\n")
    git.stage_file("a.txt")
    git.edit_file("a.txt", "a1\n")


def test_apply_falls_back_when_index_collides() -> None:
    git, store, applier = _setup()
    _stash(git, store, "WIP")
    _stage_colliding_change(git)

    outcome = applier.apply(0)

    assert outcome is ApplyOutcome.RESTORED_WORKTREE_ONLY
    assert git.worktree == {"a.txt": "a3\n", "b.txt": "b2\n"}
    # The colliding staged content is left alone
    assert git.index["a.txt"] == "other\n"


def test_pop_keeps_entry_after_fallback() -> None:
    git, store, applier = _setup()
    commit = _stash(git, store, "WIP")
    _stage_colliding_change(git)

    outcome = applier.pop(0)

    assert outcome is ApplyOutcome.RESTORED_WORKTREE_ONLY
    assert [e.commit for e in store.entries()] == [commit]


def test_pop_drops_entry_after_full_restore() -> None:
    git, store, applier = _setup()
    _stash(git, store, "WIP")

    outcome = applier.pop(0)

    assert outcome is ApplyOutcome.RESTORED_WITH_INDEX
    assert store.entries() == []
    assert "refs/stash" not in git.refs


def test_apply_engine_failure_raises_stash_apply_error() -> None:
    git, store, applier = _setup()
    commit = _stash(git, store, "WIP")
    # A conflicting working tree edit makes the apply fail outright
    git.edit_file("a.txt", "conflict\n")

    with pytest.raises(StashApplyError) as exc_info:
        applier.apply(0)

    assert exc_info.value.commit == commit
    assert len(store.entries()) == 1


def test_apply_missing_entry() -> None:
    _, _, applier = _setup()

    with pytest.raises(StashEntryNotFoundError):
        applier.apply(0)


def _stack_of(count: int) -> tuple[FakeGit, StashStore, StashApplier, list[str]]:
    """Build ``count`` entries; returns commits indexed by original position."""
    git = FakeGit(head_files=HEAD_FILES)
    store = StashStore(git, git.repo_root)
    commits = []
    for i in range(count):
        git.edit_file("a.txt", f"change {i}\n")
        commits.append(_stash(git, store, f"s{i}"))
    commits.reverse()
    return git, store, StashApplier(git, git.repo_root, store), commits


def test_bulk_drop_removes_exactly_selected_entries() -> None:
    _, store, applier, commits = _stack_of(6)

    removed = applier.drop({0, 2, 4})

    assert removed == [4, 2, 0]
    assert [e.commit for e in store.entries()] == [commits[1], commits[3], commits[5]]


def test_bulk_drop_deduplicates() -> None:
    _, store, applier, commits = _stack_of(3)

    removed = applier.drop([1, 1])

    assert removed == [1]
    assert [e.commit for e in store.entries()] == [commits[0], commits[2]]


def test_bulk_drop_validates_before_removing() -> None:
    _, store, applier, _ = _stack_of(3)

    with pytest.raises(StashEntryNotFoundError) as exc_info:
        applier.drop([0, 7])

    assert exc_info.value.index == 7
    assert len(store.entries()) == 3


def test_drop_single_index() -> None:
    _, store, applier, commits = _stack_of(2)

    assert applier.drop(0) == [0]
    assert [e.commit for e in store.entries()] == [commits[1]]


def test_branch_checks_out_base_and_applies() -> None:
    git, store, applier = _setup()
    commit = _stash(git, store, "WIP")
    base = git.get_commit(commit).parents[0]

    outcome = applier.branch(0, "rescue")

    assert outcome is ApplyOutcome.RESTORED_WITH_INDEX
    assert git.created_branches == [("rescue", base)]
    assert git.checked_out_branches == ["rescue"]
    assert git.worktree == {"a.txt": "a3\n", "b.txt": "b2\n"}
    # branch does not drop the entry
    assert len(store.entries()) == 1


def test_clear_empties_stack() -> None:
    _, store, applier, _ = _stack_of(2)

    applier.clear()

    assert store.entries() == []
