import click

from stashkit.cli.output import machine_output, user_output
from stashkit.core.config_store import CONFIG_KEYS, StashConfig, with_value
from stashkit.core.context import StashContext


def _format_value(config: StashConfig, key: str) -> str:
    match key:
        case "stash_ref":
            return config.stash_ref
        case "confirm_bulk_drop":
            return str(config.confirm_bulk_drop).lower()
        case "include_untracked":
            return config.include_untracked.value
        case _:
            raise ValueError(f"Unknown config key '{key}'")


@click.command("show-config")
@click.pass_obj
def show_config_cmd(ctx: StashContext) -> None:
    """Print every configuration key and its effective value."""
    if not ctx.config_store.exists():
        ctx.feedback.info(f"No config file at {ctx.config_store.path()}; showing defaults")
    for key in CONFIG_KEYS:
        machine_output(f"{key}={_format_value(ctx.config, key)}")


@click.group("config")
def config_group() -> None:
    """Manage stashkit configuration."""


@config_group.command("set")
@click.argument("key", metavar="KEY", type=click.Choice(CONFIG_KEYS))
@click.argument("value", metavar="VALUE")
@click.pass_obj
def config_set(ctx: StashContext, key: str, value: str) -> None:
    """Update configuration with a value for the given key."""
    try:
        new_config = with_value(ctx.config, key, value)
    except ValueError as e:
        user_output(click.style("Error: ", fg="red") + str(e))
        raise SystemExit(1) from e

    ctx.config_store.save(new_config)
    ctx.feedback.success(f"Set {key}={_format_value(new_config, key)}")
