import logging
import os

import click

from stashkit.cli.commands.config import config_group, show_config_cmd
from stashkit.cli.commands.drop import clear_cmd, drop_cmd
from stashkit.cli.commands.list_cmd import list_cmd
from stashkit.cli.commands.restore import apply_cmd, branch_cmd, pop_cmd
from stashkit.cli.commands.save import save_cmd
from stashkit.core.context import create_context

CONTEXT_SETTINGS = dict(help_option_names=["-h", "--help"])  # terse help flags

if os.environ.get("STASHKIT_DEBUG"):
    logging.basicConfig(level=logging.DEBUG, format="[DEBUG %(name)s:%(lineno)d] %(message)s")


@click.group(context_settings=CONTEXT_SETTINGS)
@click.version_option(package_name="stashkit")
@click.option("-q", "--quiet", is_flag=True, help="Only print warnings and errors.")
@click.pass_context
def cli(ctx: click.Context, quiet: bool) -> None:
    """Save and restore snapshots of uncommitted work on a git stash stack."""
    # Only create context if not already provided (e.g., by tests)
    if ctx.obj is None:
        ctx.obj = create_context(quiet=quiet)


cli.add_command(save_cmd)
cli.add_command(list_cmd)
cli.add_command(apply_cmd)
cli.add_command(pop_cmd)
cli.add_command(branch_cmd)
cli.add_command(drop_cmd)
cli.add_command(clear_cmd)
cli.add_command(show_config_cmd)
cli.add_command(config_group)


def main() -> None:
    """CLI entry point used by the `stashkit` console script."""
    cli()
