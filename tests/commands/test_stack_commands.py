"""CLI tests for list, apply, pop, branch, drop and clear using FakeGit."""

from click.testing import CliRunner

from tests.fakes.user_feedback import FakeUserFeedback
from stashkit.cli.cli import cli
from stashkit.core.config_store import StashConfig
from stashkit.core.context import StashContext
from stashkit.core.git.fake import FakeGit
from stashkit.core.stash.operations import create_stash
from stashkit.core.stash.types import KeepMode, SnapshotRequest

HEAD_FILES = {"a.txt": "a1\n", "b.txt": "b1\n"}


def _stacked(count: int, **kwargs) -> tuple[FakeGit, StashContext, FakeUserFeedback]:
    """Repository with ``count`` entries; stash@{i} holds a.txt = "v{count-1-i}"."""
    git = FakeGit(head_files=HEAD_FILES)
    feedback = FakeUserFeedback()
    ctx = StashContext.for_test(git=git, feedback=feedback, **kwargs)
    for i in range(count):
        git.edit_file("a.txt", f"v{i}\n")
        create_stash(ctx, SnapshotRequest(message=f"s{i}"), KeepMode.NONE)
    return git, ctx, feedback


def _subjects(git: FakeGit) -> list[str]:
    return [entry.subject for entry in git.list_reflog(git.repo_root, "refs/stash")]


def test_list_renders_table() -> None:
    _, ctx, _ = _stacked(2)

    result = CliRunner().invoke(cli, ["list"], obj=ctx)

    assert result.exit_code == 0, result.output
    assert "stash@{0}" in result.output
    assert "stash@{1}" in result.output
    assert "s1" in result.output


def test_list_porcelain_prints_to_stdout() -> None:
    _, ctx, _ = _stacked(2)

    result = CliRunner().invoke(cli, ["list", "--porcelain"], obj=ctx)

    assert result.exit_code == 0, result.output
    assert result.stdout.splitlines() == ["stash@{0}: s1", "stash@{1}: s0"]


def test_list_empty() -> None:
    _, ctx, feedback = _stacked(0)

    result = CliRunner().invoke(cli, ["list"], obj=ctx)

    assert result.exit_code == 0
    assert feedback.texts("info") == ["No stash entries"]


def test_apply_default_entry() -> None:
    git, ctx, feedback = _stacked(2)

    result = CliRunner().invoke(cli, ["apply"], obj=ctx)

    assert result.exit_code == 0, result.output
    assert git.worktree["a.txt"] == "v1\n"
    assert feedback.texts("success") == ["Applied stash@{0}"]
    assert len(_subjects(git)) == 2


def test_apply_named_entry() -> None:
    git, ctx, _ = _stacked(2)

    result = CliRunner().invoke(cli, ["apply", "stash@{1}"], obj=ctx)

    assert result.exit_code == 0, result.output
    assert git.worktree["a.txt"] == "v0\n"


def test_apply_rejects_malformed_entry() -> None:
    _, ctx, _ = _stacked(1)

    result = CliRunner().invoke(cli, ["apply", "stash@{x}"], obj=ctx)

    assert result.exit_code == 1
    assert "is not a stash reference" in result.output


def test_apply_missing_entry() -> None:
    _, ctx, _ = _stacked(1)

    result = CliRunner().invoke(cli, ["apply", "3"], obj=ctx)

    assert result.exit_code == 1
    assert "stash@{3} is not a valid stash entry" in result.output


def test_pop_drops_entry() -> None:
    git, ctx, feedback = _stacked(2)

    result = CliRunner().invoke(cli, ["pop"], obj=ctx)

    assert result.exit_code == 0, result.output
    assert _subjects(git) == ["s0"]
    assert "Dropped stash@{0}" in feedback.texts("info")


def test_pop_keeps_entry_when_index_collides() -> None:
    git = FakeGit(
        head_files=HEAD_FILES,
        index={"a.txt": "a2\n", "b.txt": "b1\n"},
        worktree={"a.txt": "a3\n", "b.txt": "b1\n"},
    )
    feedback = FakeUserFeedback()
    ctx = StashContext.for_test(git=git, feedback=feedback)
    create_stash(ctx, SnapshotRequest(message="wip"), KeepMode.NONE)
    git.edit_file("a.txt", "other\n")
    git.stage_file("a.txt")
    git.edit_file("a.txt", "a1\n")

    result = CliRunner().invoke(cli, ["pop"], obj=ctx)

    assert result.exit_code == 0, result.output
    assert _subjects(git) == ["wip"]
    warnings = feedback.texts("warning")
    assert any("without its staged changes" in w for w in warnings)
    assert any("kept" in w for w in warnings)


def test_branch_from_entry() -> None:
    git, ctx, _ = _stacked(1)

    result = CliRunner().invoke(cli, ["branch", "rescue"], obj=ctx)

    assert result.exit_code == 0, result.output
    assert git.checked_out_branches == ["rescue"]
    assert git.worktree["a.txt"] == "v0\n"
    assert _subjects(git) == ["s0"]


def test_drop_single_entry() -> None:
    git, ctx, _ = _stacked(3)

    result = CliRunner().invoke(cli, ["drop", "1"], obj=ctx)

    assert result.exit_code == 0, result.output
    assert _subjects(git) == ["s2", "s0"]


def test_bulk_drop_asks_for_confirmation() -> None:
    git, ctx, _ = _stacked(5)

    result = CliRunner().invoke(cli, ["drop", "0", "stash@{2}", "4"], obj=ctx, input="y\n")

    assert result.exit_code == 0, result.output
    assert "Drop stash@{0}, stash@{2}, stash@{4}?" in result.output
    assert _subjects(git) == ["s3", "s1"]


def test_bulk_drop_declined() -> None:
    git, ctx, feedback = _stacked(3)

    result = CliRunner().invoke(cli, ["drop", "0", "1"], obj=ctx, input="n\n")

    assert result.exit_code == 0
    assert len(_subjects(git)) == 3
    assert feedback.texts("info") == ["Aborted"]


def test_bulk_drop_without_prompt_when_disabled() -> None:
    git, ctx, _ = _stacked(3, config=StashConfig(confirm_bulk_drop=False))

    result = CliRunner().invoke(cli, ["drop", "0", "2"], obj=ctx)

    assert result.exit_code == 0, result.output
    assert _subjects(git) == ["s1"]


def test_bulk_drop_invalid_entry_removes_nothing() -> None:
    git, ctx, _ = _stacked(2)

    result = CliRunner().invoke(cli, ["drop", "--yes", "0", "5"], obj=ctx)

    assert result.exit_code == 1
    assert "stash@{5}" in result.output
    assert len(_subjects(git)) == 2


def test_clear_with_yes() -> None:
    git, ctx, feedback = _stacked(2)

    result = CliRunner().invoke(cli, ["clear", "--yes"], obj=ctx)

    assert result.exit_code == 0, result.output
    assert _subjects(git) == []
    assert feedback.texts("success") == ["Cleared 2 stash entries"]


def test_clear_declined() -> None:
    git, ctx, _ = _stacked(2)

    result = CliRunner().invoke(cli, ["clear"], obj=ctx, input="n\n")

    assert result.exit_code == 0
    assert len(_subjects(git)) == 2


def test_branch_onto_existing_name_reports_error() -> None:
    git, ctx, _ = _stacked(1)

    result = CliRunner().invoke(cli, ["branch", "main"], obj=ctx)

    assert result.exit_code == 1
    assert isinstance(result.exception, SystemExit)
    assert "Error: Could not create branch 'main'" in result.output
    assert git.checked_out_branches == []
    assert _subjects(git) == ["s0"]


def test_drop_engine_failure_reports_error() -> None:
    git = FakeGit(head_files=HEAD_FILES, failing_operations={"drop_reflog_entry"})
    ctx = StashContext.for_test(git=git)
    git.edit_file("a.txt", "v0\n")
    create_stash(ctx, SnapshotRequest(message="s0"), KeepMode.NONE)

    result = CliRunner().invoke(cli, ["drop"], obj=ctx)

    assert result.exit_code == 1
    assert "Error: Could not drop stash@{0} on refs/stash" in result.output
    assert _subjects(git) == ["s0"]
