"""Output utilities for CLI commands with clear intent.

user_output goes to stderr so it never mixes with machine-readable stdout;
machine_output goes to stdout.
"""

from datetime import UTC, datetime
from typing import Any

import click


def user_output(message: Any = "", nl: bool = True) -> None:
    """Write a human-facing message to stderr."""
    click.echo(message, nl=nl, err=True)


def machine_output(message: Any = "", nl: bool = True) -> None:
    """Write data meant for scripts and pipes to stdout."""
    click.echo(message, nl=nl)


def format_age(timestamp: int, now: datetime | None = None) -> str:
    """Format a Unix timestamp as a coarse relative age (e.g. "3 hours ago").

    Example:
        >>> format_age(0, now=datetime.fromtimestamp(90, tz=UTC))
        '1 minute ago'
    """
    current = now if now is not None else datetime.now(tz=UTC)
    seconds = int((current - datetime.fromtimestamp(timestamp, tz=UTC)).total_seconds())
    if seconds < 60:
        return "just now"

    for unit, size in (("day", 86400), ("hour", 3600), ("minute", 60)):
        if seconds >= size:
            count = seconds // size
            return f"{count} {unit}{'s' if count != 1 else ''} ago"
    return "just now"
