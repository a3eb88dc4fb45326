import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from stashkit.cli.ensure import Ensure, stash_errors
from stashkit.cli.output import format_age, machine_output
from stashkit.core.context import StashContext
from stashkit.core.stash.operations import list_stashes
from stashkit.core.stash.types import StashStackEntry


def _render_table(entries: list[StashStackEntry]) -> None:
    table = Table(show_header=True, header_style="bold")
    table.add_column("entry", style="cyan", no_wrap=True)
    table.add_column("commit", no_wrap=True)
    table.add_column("age", no_wrap=True)
    table.add_column("message", no_wrap=True)

    for entry in entries:
        table.add_row(
            entry.name,
            f"[yellow]{entry.commit[:7]}[/yellow]",
            f"[dim]{format_age(entry.timestamp)}[/dim]",
            escape(entry.subject),
        )

    # Output table to stderr (consistent with user_output convention)
    console = Console(stderr=True, width=200)
    console.print(table)


@click.command("list")
@click.option(
    "--porcelain",
    is_flag=True,
    help="Print one 'stash@{n}: <message>' line per entry to stdout.",
)
@click.pass_obj
def list_cmd(ctx: StashContext, porcelain: bool) -> None:
    """List stash entries, newest first."""
    Ensure.in_repo(ctx)
    with stash_errors():
        entries = list_stashes(ctx)

    if porcelain:
        for entry in entries:
            machine_output(f"{entry.name}: {entry.subject}")
        return

    if not entries:
        ctx.feedback.info("No stash entries")
        return

    _render_table(entries)
