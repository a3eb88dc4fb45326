import click

from stashkit.cli.ensure import Ensure, stash_errors
from stashkit.core.context import StashContext
from stashkit.core.stash.operations import apply_stash, branch_from_stash, pop_stash
from stashkit.core.stash.types import ApplyOutcome

_ENTRY_ARGUMENT = click.argument("entry", metavar="[STASH]", default="0", required=False)


def _report_outcome(ctx: StashContext, name: str, outcome: ApplyOutcome) -> None:
    if outcome is ApplyOutcome.RESTORED_WORKTREE_ONLY:
        ctx.feedback.warning(
            f"Applied {name} without its staged changes: they conflict with the current index"
        )
    else:
        ctx.feedback.success(f"Applied {name}")


@click.command("apply")
@_ENTRY_ARGUMENT
@click.pass_obj
def apply_cmd(ctx: StashContext, entry: str) -> None:
    """Restore a stash entry (default stash@{0}) onto the working copy."""
    Ensure.in_repo(ctx)
    index = Ensure.stash_index(entry)
    with stash_errors():
        outcome = apply_stash(ctx, index)
    _report_outcome(ctx, f"stash@{{{index}}}", outcome)


@click.command("pop")
@_ENTRY_ARGUMENT
@click.pass_obj
def pop_cmd(ctx: StashContext, entry: str) -> None:
    """Restore a stash entry and drop it from the stack.

    An entry restored without its staged changes is kept.
    """
    Ensure.in_repo(ctx)
    index = Ensure.stash_index(entry)
    name = f"stash@{{{index}}}"
    with stash_errors():
        outcome = pop_stash(ctx, index)

    _report_outcome(ctx, name, outcome)
    if outcome is ApplyOutcome.RESTORED_WITH_INDEX:
        ctx.feedback.info(f"Dropped {name}")
    else:
        ctx.feedback.warning(f"The stash entry is kept in case you need it again: {name}")


@click.command("branch")
@click.argument("name", metavar="BRANCH")
@_ENTRY_ARGUMENT
@click.pass_obj
def branch_cmd(ctx: StashContext, name: str, entry: str) -> None:
    """Create BRANCH at the commit a stash entry was saved on and apply it there."""
    Ensure.in_repo(ctx)
    index = Ensure.stash_index(entry)
    with stash_errors():
        outcome = branch_from_stash(ctx, index, name)
    ctx.feedback.info(f"Switched to a new branch '{name}'")
    _report_outcome(ctx, f"stash@{{{index}}}", outcome)
