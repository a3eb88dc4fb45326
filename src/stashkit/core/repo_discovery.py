"""Repository discovery functionality.

Discovers git repository information from a given path without requiring
full StashContext (enables config loading before context creation).
"""

from dataclasses import dataclass
from pathlib import Path

from stashkit.core.git.abc import Git


@dataclass(frozen=True)
class RepoContext:
    """Represents the root of the working copy the stash commands act on."""

    root: Path


@dataclass(frozen=True)
class NoRepoSentinel:
    """Sentinel value indicating execution outside a git repository.

    Commands that require repo context can check for this sentinel and fail
    fast.
    """

    message: str = "Not inside a git repository"


def discover_repo_or_sentinel(cwd: Path, git: Git) -> RepoContext | NoRepoSentinel:
    """Find the working copy containing ``cwd``.

    Linked worktrees resolve to their own top-level directory, since each
    worktree has its own index and working tree to stash.

    Returns:
        RepoContext if inside a git repository, NoRepoSentinel otherwise
    """
    root = git.get_repository_root(cwd)
    if root is None:
        return NoRepoSentinel(message=f"Not inside a git repository: {cwd}")

    return RepoContext(root=root)
