"""CLI error handling utilities with styled output.

This module provides the Ensure class for asserting invariants in CLI commands
with consistent, user-friendly error messages. All errors use red "Error:" prefix
for visual consistency.
"""

import re
from collections.abc import Iterator
from contextlib import contextmanager
from typing import NoReturn

import click

from stashkit.cli.output import user_output
from stashkit.core.context import StashContext
from stashkit.core.repo_discovery import RepoContext
from stashkit.core.stash.errors import StashError

_ENTRY_PATTERN = re.compile(r"(\d+)|stash@\{(\d+)\}")


def _fail(error_message: str) -> NoReturn:
    user_output(click.style("Error: ", fg="red") + error_message)
    raise SystemExit(1)


class Ensure:
    """Helper class for asserting invariants with consistent error handling."""

    @staticmethod
    def invariant(condition: bool, error_message: str) -> None:
        """Ensure condition is true, otherwise output styled error and exit.

        Args:
            condition: Boolean condition to check
            error_message: Error message to display if condition is false.
                          "Error: " prefix will be added automatically in red.

        Raises:
            SystemExit: If condition is false (with exit code 1)
        """
        if not condition:
            _fail(error_message)

    @staticmethod
    def in_repo(ctx: StashContext) -> RepoContext:
        """Ensure the command runs inside a git working copy.

        Raises:
            SystemExit: If ctx.repo is a NoRepoSentinel (with exit code 1)
        """
        if not isinstance(ctx.repo, RepoContext):
            _fail(ctx.repo.message)
        return ctx.repo

    @staticmethod
    def stash_index(value: str) -> int:
        """Parse a stash entry given as ``N`` or ``stash@{N}``.

        Raises:
            SystemExit: If value names no stack position (with exit code 1)

        Example:
            >>> Ensure.stash_index("stash@{2}")
            2
        """
        match = _ENTRY_PATTERN.fullmatch(value.strip())
        if match is None:
            _fail(f"'{value}' is not a stash reference (expected N or stash@{{N}})")
        return int(match.group(1) or match.group(2))


@contextmanager
def stash_errors() -> Iterator[None]:
    """Turn stash and engine errors raised inside the block into a styled error and exit 1."""
    try:
        yield
    except (StashError, RuntimeError) as e:
        user_output(click.style("Error: ", fg="red") + str(e))
        raise SystemExit(1) from e
