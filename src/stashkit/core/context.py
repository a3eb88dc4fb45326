"""Application context with dependency injection."""

from dataclasses import dataclass
from pathlib import Path

import click

from stashkit.cli.output import user_output
from stashkit.core.config_store import ConfigStore, RealConfigStore, StashConfig
from stashkit.core.git.abc import Git
from stashkit.core.git.real import RealGit
from stashkit.core.repo_discovery import NoRepoSentinel, RepoContext, discover_repo_or_sentinel
from stashkit.core.user_feedback import InteractiveFeedback, SuppressedFeedback, UserFeedback


@dataclass(frozen=True)
class StashContext:
    """Immutable context holding all dependencies for stash operations.

    Created at CLI entry point and threaded through the application.
    Frozen to prevent accidental modification at runtime.
    """

    git: Git
    config_store: ConfigStore
    config: StashConfig
    feedback: UserFeedback
    cwd: Path  # Current working directory at CLI invocation
    repo: RepoContext | NoRepoSentinel

    @staticmethod
    def for_test(
        git: Git | None = None,
        config_store: ConfigStore | None = None,
        config: StashConfig | None = None,
        feedback: UserFeedback | None = None,
        cwd: Path | None = None,
        repo: RepoContext | NoRepoSentinel | None = None,
    ) -> "StashContext":
        """Create test context with optional pre-configured dependencies.

        Args:
            git: Optional Git implementation. If None, creates empty FakeGit.
            config_store: Optional ConfigStore. If None, wraps ``config`` in a
                FakeConfigStore.
            config: Optional StashConfig. If None, uses defaults.
            feedback: Optional UserFeedback. If None, creates FakeUserFeedback.
            cwd: Optional current working directory. If None, uses the repo root
                of ``repo`` or Path("/test/repo").
            repo: Optional RepoContext or NoRepoSentinel. If None, discovered
                from ``cwd`` through ``git``.

        Example:
            >>> git = FakeGit(head_files={"a.txt": "one"})
            >>> ctx = StashContext.for_test(git=git)
        """
        from tests.fakes.user_feedback import FakeUserFeedback

        from stashkit.core.config_store import FakeConfigStore
        from stashkit.core.git.fake import FakeGit

        if git is None:
            git = FakeGit()

        if config is None:
            config = config_store.load() if config_store is not None else StashConfig()

        if config_store is None:
            config_store = FakeConfigStore(config=config)

        if feedback is None:
            feedback = FakeUserFeedback()

        if cwd is None:
            cwd = repo.root if isinstance(repo, RepoContext) else Path("/test/repo")

        if repo is None:
            repo = discover_repo_or_sentinel(cwd, git)

        return StashContext(
            git=git,
            config_store=config_store,
            config=config,
            feedback=feedback,
            cwd=cwd,
            repo=repo,
        )


def safe_cwd() -> tuple[Path | None, str | None]:
    """Get current working directory, detecting if it no longer exists.

    Returns:
        tuple[Path | None, str | None]: (path, error_message)
        - If successful: (Path, None)
        - If directory deleted: (None, error_message)
    """
    try:
        return (Path.cwd(), None)
    except (FileNotFoundError, OSError):
        return (None, "Current working directory no longer exists")


def create_context(*, quiet: bool = False) -> StashContext:
    """Create production context with real implementations.

    Called at CLI entry point to create the context for the entire
    command execution.

    Args:
        quiet: If True, use SuppressedFeedback to hide informational output
    """
    # 1. Capture cwd (no deps)
    cwd, error_msg = safe_cwd()
    if cwd is None:
        user_output(click.style("Error: ", fg="red") + str(error_msg))
        user_output("\nPlease change to a valid directory and try again.")
        raise SystemExit(1)

    # 2. Load config (defaults when the file does not exist)
    config_store = RealConfigStore()
    try:
        config = config_store.load()
    except ValueError as e:
        user_output(click.style("Error: ", fg="red") + str(e))
        raise SystemExit(1) from e

    # 3. Discover repo
    git: Git = RealGit()
    repo = discover_repo_or_sentinel(cwd, git)

    # 4. Choose feedback implementation based on mode
    feedback: UserFeedback = SuppressedFeedback() if quiet else InteractiveFeedback()

    return StashContext(
        git=git,
        config_store=config_store,
        config=config,
        feedback=feedback,
        cwd=cwd,
        repo=repo,
    )
