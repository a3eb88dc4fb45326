import click

from stashkit.cli.ensure import Ensure, stash_errors
from stashkit.core.context import StashContext
from stashkit.core.stash.operations import clear_stashes, drop_stashes, list_stashes


@click.command("drop")
@click.argument("entries", nargs=-1, metavar="[STASH]...")
@click.option("-y", "--yes", is_flag=True, help="Drop several entries without asking.")
@click.pass_obj
def drop_cmd(ctx: StashContext, entries: tuple[str, ...], yes: bool) -> None:
    """Remove stash entries (default stash@{0}) permanently.

    Several entries can be named at once; they are all validated before any
    is removed.
    """
    Ensure.in_repo(ctx)
    indices = sorted({Ensure.stash_index(entry) for entry in entries or ("0",)})

    if len(indices) > 1 and ctx.config.confirm_bulk_drop and not yes:
        names = ", ".join(f"stash@{{{i}}}" for i in indices)
        if not click.confirm(f"Drop {names}?", default=False, err=True):
            ctx.feedback.info("Aborted")
            return

    with stash_errors():
        dropped = drop_stashes(ctx, indices)

    for index in dropped:
        ctx.feedback.success(f"Dropped stash@{{{index}}}")


@click.command("clear")
@click.option("-y", "--yes", is_flag=True, help="Do not ask for confirmation.")
@click.pass_obj
def clear_cmd(ctx: StashContext, yes: bool) -> None:
    """Remove every stash entry."""
    Ensure.in_repo(ctx)
    with stash_errors():
        count = len(list_stashes(ctx))
        if count == 0:
            ctx.feedback.info("No stash entries")
            return

        confirmed = yes or not ctx.config.confirm_bulk_drop
        if not confirmed and not click.confirm(f"Drop all {count} stash entries?", err=True):
            ctx.feedback.info("Aborted")
            return

        clear_stashes(ctx)
    ctx.feedback.success(f"Cleared {count} stash entries")
