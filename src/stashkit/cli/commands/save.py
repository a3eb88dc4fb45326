import click

from stashkit.cli.ensure import Ensure, stash_errors
from stashkit.core.context import StashContext
from stashkit.core.stash.operations import create_stash, default_message
from stashkit.core.stash.types import KeepMode, SnapshotRequest, UntrackedMode


def _untracked_mode(ctx: StashContext, include_untracked: bool, all_files: bool) -> UntrackedMode:
    if all_files:
        return UntrackedMode.ALL
    if include_untracked:
        return UntrackedMode.TRACKED_IGNORE_EXCLUDED
    return ctx.config.include_untracked


def _keep_mode(keep: str | None, keep_index: bool, unstaged_only: bool) -> KeepMode:
    """Resolve --keep / --keep-index; capturing only unstaged changes keeps the index."""
    Ensure.invariant(
        keep is None or not keep_index, "--keep and --keep-index are mutually exclusive"
    )
    if keep is not None:
        return KeepMode(keep)
    if keep_index or unstaged_only:
        return KeepMode.INDEX
    return KeepMode.NONE


@click.command("save")
@click.option("-m", "--message", help="Stash message (default: WIP on <branch>: <commit>).")
@click.option("--staged", "staged_only", is_flag=True, help="Stash only staged changes.")
@click.option("--unstaged", "unstaged_only", is_flag=True, help="Stash only unstaged changes.")
@click.option("-u", "--include-untracked", is_flag=True, help="Also stash untracked files.")
@click.option(
    "-a", "--all", "all_files", is_flag=True, help="Also stash untracked and ignored files."
)
@click.option(
    "-k", "--keep-index", is_flag=True, help="Leave staged changes in the index and on disk."
)
@click.option(
    "--keep",
    type=click.Choice([mode.value for mode in KeepMode]),
    help="What to leave in place after saving: nothing, the working tree, or the index.",
)
@click.option(
    "--allow-empty", is_flag=True, help="Succeed without saving when there is nothing to stash."
)
@click.pass_obj
def save_cmd(
    ctx: StashContext,
    message: str | None,
    staged_only: bool,
    unstaged_only: bool,
    include_untracked: bool,
    all_files: bool,
    keep_index: bool,
    keep: str | None,
    allow_empty: bool,
) -> None:
    """Save local changes to a new stash entry and clean the working copy."""
    Ensure.in_repo(ctx)
    Ensure.invariant(
        not (staged_only and unstaged_only), "--staged and --unstaged are mutually exclusive"
    )
    keep_mode = _keep_mode(keep, keep_index, unstaged_only)

    with stash_errors():
        request = SnapshotRequest(
            message=message if message is not None else default_message(ctx),
            include_staged=not unstaged_only,
            include_worktree=not staged_only,
            include_untracked=_untracked_mode(ctx, include_untracked, all_files),
            allow_empty=allow_empty,
        )
        result = create_stash(ctx, request, keep_mode)

    if result is None:
        ctx.feedback.info("No local changes to save")
        return

    ctx.feedback.success(f"Saved working directory and index state {request.message}")
    if result.cleanup_error is not None:
        ctx.feedback.warning(f"Warning: {result.cleanup_error}")
