"""Fake Git implementation for testing.

FakeGit is an in-memory git engine: commits, trees, references, history logs,
the index and the working tree are plain dictionaries. File contents are
strings. Scratch indexes are the only state that touches the filesystem; they
are stored as JSON at the path the caller hands in, so callers that create and
remove scratch index files behave exactly as they would against real git.
"""

import hashlib
import json
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path

from stashkit.core.git.abc import Git, ReflogEntry
from stashkit.core.stash.errors import ApplyConflictError

FileMap = dict[str, str]


@dataclass(frozen=True)
class FakeCommit:
    """A commit object held by FakeGit."""

    tree: str
    parents: tuple[str, ...]
    message: str
    timestamp: int


def _changed_paths(old: FileMap, new: FileMap) -> list[str]:
    return sorted(path for path in set(old) | set(new) if old.get(path) != new.get(path))


class FakeGit(Git):
    """In-memory fake implementation - no repository on disk.

    Initial state is provided via constructor. Operations mutate the in-memory
    state exactly like the corresponding git commands mutate a repository.
    ``edit_file`` and ``stage_file`` simulate what a user does between
    operations.
    """

    def __init__(
        self,
        *,
        repo_root: Path = Path("/test/repo"),
        head_files: FileMap | None = None,
        index: FileMap | None = None,
        worktree: FileMap | None = None,
        ignored: set[str] | None = None,
        branch: str = "main",
        unreadable: set[str] | None = None,
        failing_operations: set[str] | None = None,
        failing_commit_prefixes: tuple[str, ...] = (),
    ) -> None:
        """Create FakeGit with an optional initial commit.

        Args:
            repo_root: Root of the simulated working copy
            head_files: Content of the initial commit on ``branch``. None
                simulates a repository with no commits yet.
            index: Initial index content (defaults to head_files)
            worktree: Initial working tree content (defaults to the index)
            ignored: Paths matched by ignore rules
            branch: Name of the checked-out branch
            unreadable: Paths whose content cannot be read when staging
            failing_operations: Names of Git methods that raise RuntimeError
            failing_commit_prefixes: commit_tree raises RuntimeError for
                messages starting with any of these prefixes
        """
        self._repo_root = repo_root
        self._trees: dict[str, FileMap] = {}
        self._commits: dict[str, FakeCommit] = {}
        self._refs: dict[str, str] = {}
        self._reflogs: dict[str, list[ReflogEntry]] = {}
        self._clock = 1_700_000_000
        self._branch: str | None = branch
        self._ignored = set(ignored or ())
        self._unreadable = set(unreadable or ())
        self._failing_operations = set(failing_operations or ())
        self._failing_commit_prefixes = failing_commit_prefixes
        self._created_branches: list[tuple[str, str]] = []
        self._checked_out_branches: list[str] = []
        self._reset_calls: list[str] = []

        if head_files is not None:
            tree = self._store_tree(dict(head_files))
            self._refs[f"refs/heads/{branch}"] = self._store_commit(tree, (), "Initial commit")

        base = dict(head_files or {})
        self._index: FileMap = dict(index) if index is not None else base
        self._worktree: FileMap = dict(worktree) if worktree is not None else dict(self._index)

    # ------------------------------------------------------------------
    # Read-only access for test assertions
    # ------------------------------------------------------------------

    @property
    def repo_root(self) -> Path:
        return self._repo_root

    @property
    def worktree(self) -> FileMap:
        return dict(self._worktree)

    @property
    def index(self) -> FileMap:
        return dict(self._index)

    @property
    def refs(self) -> dict[str, str]:
        return dict(self._refs)

    @property
    def created_branches(self) -> list[tuple[str, str]]:
        """(branch, start commit) pairs passed to create_branch."""
        return list(self._created_branches)

    @property
    def checked_out_branches(self) -> list[str]:
        return list(self._checked_out_branches)

    @property
    def reset_calls(self) -> list[str]:
        return list(self._reset_calls)

    def get_commit(self, sha: str) -> FakeCommit:
        return self._commits[sha]

    def tree_contents(self, tree: str) -> FileMap:
        return dict(self._trees[tree])

    def commit_contents(self, sha: str) -> FileMap:
        return self.tree_contents(self._commits[sha].tree)

    # ------------------------------------------------------------------
    # Simulated user actions
    # ------------------------------------------------------------------

    def edit_file(self, path: str, content: str | None) -> None:
        """Write (or with None, delete) a working tree file."""
        if content is None:
            self._worktree.pop(path, None)
        else:
            self._worktree[path] = content

    def stage_file(self, path: str) -> None:
        """Copy a working tree file's content into the index (git add)."""
        if path in self._worktree:
            self._index[path] = self._worktree[path]
        else:
            self._index.pop(path, None)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _tick(self) -> int:
        self._clock += 1
        return self._clock

    def _maybe_fail(self, operation: str) -> None:
        if operation in self._failing_operations:
            raise RuntimeError(f"Failed to {operation} (simulated)")

    def _store_tree(self, files: FileMap) -> str:
        digest = hashlib.sha1(json.dumps(sorted(files.items())).encode("utf-8")).hexdigest()
        self._trees[digest] = dict(files)
        return digest

    def _store_commit(self, tree: str, parents: tuple[str, ...], message: str) -> str:
        timestamp = self._tick()
        payload = json.dumps([tree, parents, message, timestamp, len(self._commits)])
        sha = hashlib.sha1(payload.encode("utf-8")).hexdigest()
        self._commits[sha] = FakeCommit(
            tree=tree, parents=parents, message=message, timestamp=timestamp
        )
        return sha

    def _head(self) -> str | None:
        if self._branch is None:
            return self._refs.get("HEAD")
        return self._refs.get(f"refs/heads/{self._branch}")

    def _set_head(self, commit: str) -> None:
        if self._branch is None:
            self._refs["HEAD"] = commit
        else:
            self._refs[f"refs/heads/{self._branch}"] = commit

    def _tree_of(self, commit: str | None) -> FileMap:
        if commit is None:
            return {}
        return self._trees[self._commits[commit].tree]

    def _load_index(self, index_file: Path | None) -> FileMap:
        if index_file is None:
            return self._index
        if not index_file.exists():
            return {}
        return json.loads(index_file.read_text(encoding="utf-8"))

    def _save_index(self, index_file: Path, files: FileMap) -> None:
        index_file.write_text(json.dumps(files, sort_keys=True), encoding="utf-8")

    # ------------------------------------------------------------------
    # Git interface
    # ------------------------------------------------------------------

    def get_repository_root(self, cwd: Path) -> Path | None:
        if cwd == self._repo_root or self._repo_root in cwd.parents:
            return self._repo_root
        return None

    def get_current_branch(self, cwd: Path) -> str | None:
        return self._branch

    def get_commit_message(self, repo_root: Path, commit_sha: str) -> str | None:
        commit = self._commits.get(commit_sha)
        if commit is None:
            return None
        return commit.message.splitlines()[0] if commit.message else ""

    def create_branch(self, cwd: Path, branch_name: str, start_point: str) -> None:
        self._maybe_fail("create_branch")
        ref = f"refs/heads/{branch_name}"
        if ref in self._refs:
            raise RuntimeError(f"Failed to create branch '{branch_name}': already exists")
        start = self.resolve_commit(cwd, start_point)
        if start is None:
            raise RuntimeError(f"Failed to create branch '{branch_name}': bad start point")
        self._refs[ref] = start
        self._created_branches.append((branch_name, start))

    def checkout_branch(self, cwd: Path, branch: str) -> None:
        self._maybe_fail("checkout_branch")
        target = self._refs.get(f"refs/heads/{branch}")
        if target is None:
            raise RuntimeError(f"Failed to checkout branch '{branch}': no such branch")

        old_tree = self._tree_of(self._head())
        new_tree = self._tree_of(target)
        for path in _changed_paths(old_tree, new_tree):
            clean = self._index.get(path) == old_tree.get(path) == self._worktree.get(path)
            if not clean:
                raise RuntimeError(
                    f"Failed to checkout branch '{branch}': local changes to {path} "
                    "would be overwritten"
                )
            for files in (self._index, self._worktree):
                if path in new_tree:
                    files[path] = new_tree[path]
                else:
                    files.pop(path, None)

        self._branch = branch
        self._checked_out_branches.append(branch)

    def resolve_commit(self, repo_root: Path, rev: str) -> str | None:
        head, caret, nth = rev.rpartition("^")
        if caret and nth.isdigit():
            commit = self.resolve_commit(repo_root, head)
            if commit is None:
                return None
            parents = self._commits[commit].parents
            return parents[int(nth) - 1] if 0 < int(nth) <= len(parents) else None
        if rev == "HEAD":
            return self._head()
        if rev in self._commits:
            return rev
        if "@{" in rev and rev.endswith("}"):
            ref, _, position = rev[:-1].partition("@{")
            entries = self._reflogs.get(ref, [])
            if position.isdigit() and int(position) < len(entries):
                return entries[int(position)].commit
            return None
        for candidate in (rev, f"refs/heads/{rev}"):
            if candidate in self._refs:
                return self._refs[candidate]
        return None

    def read_ref(self, repo_root: Path, ref: str) -> str | None:
        return self._refs.get(ref)

    def compare_and_swap_ref(
        self,
        repo_root: Path,
        ref: str,
        new: str,
        expected_old: str | None,
        *,
        message: str,
    ) -> bool:
        self._maybe_fail("compare_and_swap_ref")
        if self._refs.get(ref) != expected_old:
            return False
        self._refs[ref] = new
        entry = ReflogEntry(commit=new, timestamp=self._tick(), subject=message)
        self._reflogs.setdefault(ref, []).insert(0, entry)
        return True

    def delete_ref(self, repo_root: Path, ref: str) -> None:
        self._maybe_fail("delete_ref")
        self._refs.pop(ref, None)
        self._reflogs.pop(ref, None)

    def list_reflog(self, repo_root: Path, ref: str) -> list[ReflogEntry]:
        if ref not in self._refs:
            return []
        return list(self._reflogs.get(ref, []))

    def drop_reflog_entry(self, repo_root: Path, ref: str, index: int) -> None:
        self._maybe_fail("drop_reflog_entry")
        entries = self._reflogs.get(ref, [])
        if index < 0 or index >= len(entries):
            raise RuntimeError(f"Failed to drop '{ref}@{{{index}}}': no such entry")
        del entries[index]
        if entries:
            self._refs[ref] = entries[0].commit

    def get_tree(self, repo_root: Path, commit: str) -> str:
        return self._commits[commit].tree

    def write_tree(self, repo_root: Path, *, index_file: Path | None) -> str:
        self._maybe_fail("write_tree")
        return self._store_tree(self._load_index(index_file))

    def read_tree(self, repo_root: Path, tree: str | None, *, index_file: Path) -> None:
        self._maybe_fail("read_tree")
        files = self._trees[tree] if tree is not None else {}
        self._save_index(index_file, dict(files))

    def update_index(self, repo_root: Path, paths: Sequence[str], *, index_file: Path) -> None:
        self._maybe_fail("update_index")
        files = self._load_index(index_file)
        for path in paths:
            if path in self._unreadable:
                raise RuntimeError(f"Failed to stage {path}: permission denied (simulated)")
            if path in self._worktree:
                files[path] = self._worktree[path]
            else:
                files.pop(path, None)
        self._save_index(index_file, files)

    def commit_tree(
        self, repo_root: Path, tree: str, parents: Sequence[str], *, message: str
    ) -> str:
        self._maybe_fail("commit_tree")
        if self._failing_commit_prefixes and message.startswith(self._failing_commit_prefixes):
            raise RuntimeError(f"Failed to write commit '{message}' (simulated)")
        if tree not in self._trees:
            raise RuntimeError(f"Failed to write commit: {tree} is not a valid tree object")
        for parent in parents:
            if parent not in self._commits:
                raise RuntimeError(f"Failed to write commit: {parent} is not a valid commit")
        return self._store_commit(tree, tuple(parents), message)

    def list_staged_files(self, repo_root: Path) -> list[str]:
        return _changed_paths(self._tree_of(self._head()), self._index)

    def list_unstaged_files(self, repo_root: Path) -> list[str]:
        return sorted(
            path for path in self._index if self._worktree.get(path) != self._index[path]
        )

    def list_changed_files(self, repo_root: Path, commit: str) -> list[str]:
        tree = self._tree_of(commit)
        tracked = set(tree) | set(self._index)
        return sorted(path for path in tracked if self._worktree.get(path) != tree.get(path))

    def list_untracked_files(self, repo_root: Path, *, include_ignored: bool) -> list[str]:
        return sorted(
            path
            for path in self._worktree
            if path not in self._index and (include_ignored or path not in self._ignored)
        )

    def reset_hard(self, repo_root: Path, commit: str) -> None:
        self._maybe_fail("reset_hard")
        tree = self._tree_of(commit)
        for path in self._index:
            if path not in tree:
                self._worktree.pop(path, None)
        self._index = dict(tree)
        self._worktree.update(tree)
        self._set_head(commit)
        self._reset_calls.append(commit)

    def restore_worktree(
        self, repo_root: Path, paths: Sequence[str], *, source: str | None
    ) -> None:
        self._maybe_fail("restore_worktree")
        files = self._tree_of(source) if source is not None else self._index
        for path in paths:
            if path in files:
                self._worktree[path] = files[path]
            elif path in self._index:
                self._worktree.pop(path, None)

    def clean_paths(self, repo_root: Path, paths: Sequence[str], *, include_ignored: bool) -> None:
        self._maybe_fail("clean_paths")
        for path in paths:
            if path in self._index:
                continue
            if path in self._ignored and not include_ignored:
                continue
            self._worktree.pop(path, None)

    def apply_stash(self, repo_root: Path, commit: str, *, restore_index: bool) -> None:
        self._maybe_fail("apply_stash")
        stash = self._commits[commit]
        base_tree = self._tree_of(stash.parents[0])
        index_tree = self._tree_of(stash.parents[1])
        work_tree = self._trees[stash.tree]
        untracked_tree = self._tree_of(stash.parents[2]) if len(stash.parents) > 2 else {}

        # Index layer first; nothing is touched if it does not apply
        index_changes = _changed_paths(base_tree, index_tree)
        reinstate = restore_index and index_tree not in (base_tree, self._index)
        if reinstate:
            for path in index_changes:
                if self._index.get(path) != base_tree.get(path):
                    raise ApplyConflictError(commit)

        for path in untracked_tree:
            if path in self._worktree:
                raise RuntimeError(f"Failed to apply stash {commit}: {path} already exists")

        work_changes = _changed_paths(base_tree, work_tree)
        for path in work_changes:
            current = self._worktree.get(path)
            if current not in (base_tree.get(path), work_tree.get(path)):
                raise RuntimeError(f"Failed to apply stash {commit}: conflict in {path}")

        for path in work_changes:
            if path in work_tree:
                self._worktree[path] = work_tree[path]
            else:
                self._worktree.pop(path, None)

        if reinstate:
            for path in index_changes:
                if path in index_tree:
                    self._index[path] = index_tree[path]
                else:
                    self._index.pop(path, None)
        else:
            for path in work_changes:
                if path in work_tree and path not in base_tree and path not in self._index:
                    self._index[path] = work_tree[path]

        self._worktree.update(untracked_tree)
