"""Data types shared by the stash components."""

from dataclasses import dataclass
from enum import Enum


class UntrackedMode(Enum):
    """Which untracked files a snapshot captures."""

    NONE = "none"
    TRACKED_IGNORE_EXCLUDED = "standard"  # untracked files, ignore rules honoured
    ALL = "all"  # ignored files too

    @property
    def include_ignored(self) -> bool:
        return self is UntrackedMode.ALL


class KeepMode(Enum):
    """What the reconciler leaves in place after a stash is published."""

    NONE = "none"
    WORKTREE = "worktree"
    INDEX = "index"


class ApplyOutcome(Enum):
    """How much of a stash was reinstated."""

    RESTORED_WITH_INDEX = "restored-with-index"
    RESTORED_WORKTREE_ONLY = "restored-worktree-only"


@dataclass(frozen=True)
class WorkingCopyState:
    """Change sets observed in the working copy at one point in time.

    Recomputed on demand; never cached across operations.
    """

    staged: tuple[str, ...]
    unstaged: tuple[str, ...]
    untracked: tuple[str, ...]


@dataclass(frozen=True)
class SnapshotRequest:
    """What to capture and under which message.

    allow_empty turns "nothing to capture" into a silent no-op instead of a
    NoChangesError.
    """

    message: str
    include_staged: bool = True
    include_worktree: bool = True
    include_untracked: UntrackedMode = UntrackedMode.NONE
    allow_empty: bool = False

    @property
    def scope(self) -> str:
        """Name of the requested scope, used in NoChangesError."""
        if self.include_staged and not self.include_worktree:
            return "staged"
        if self.include_worktree and not self.include_staged:
            return "unstaged"
        return "local"


@dataclass(frozen=True)
class Snapshot:
    """A stash commit and the layers it was built from.

    The first parent is always the base commit (HEAD at capture time).
    """

    commit: str
    base: str
    staged_commit: str
    untracked_commit: str | None
    message: str
    tracked_paths: tuple[str, ...]
    untracked_paths: tuple[str, ...]

    @property
    def parents(self) -> list[str]:
        parents = [self.base, self.staged_commit]
        if self.untracked_commit is not None:
            parents.append(self.untracked_commit)
        return parents


@dataclass(frozen=True)
class StashStackEntry:
    """One entry of the stash stack; ``index`` is its position (0 = newest)."""

    index: int
    commit: str
    timestamp: int
    subject: str

    @property
    def name(self) -> str:
        return f"stash@{{{self.index}}}"
