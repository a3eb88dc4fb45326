"""Production Git implementation using subprocess.

This module provides the real Git implementation that executes actual git
commands via subprocess.
"""

import os
import subprocess
from collections.abc import Sequence
from pathlib import Path, PurePosixPath

from stashkit.core.git.abc import Git, ReflogEntry
from stashkit.core.stash.errors import ApplyConflictError
from stashkit.core.subprocess import run_subprocess_with_context


def _split_nul(output: str) -> list[str]:
    return [item for item in output.split("\0") if item]


def _nul_join(paths: Sequence[str]) -> str:
    return "".join(f"{path}\0" for path in paths)


def _reflog_timestamp(selector: str) -> int:
    """Unix time of a history log entry from its ``ref@{<time>}`` selector."""
    return int(selector.rsplit("@{", 1)[1].rstrip("}"))


def _prune_empty_parents(repo_root: Path, paths: Sequence[str]) -> None:
    """Remove directories that removing ``paths`` left empty, deepest first."""
    parents = {parent for path in paths for parent in PurePosixPath(path).parents if parent.parts}
    for parent in sorted(parents, key=lambda p: len(p.parts), reverse=True):
        directory = repo_root / parent
        if not directory.is_dir() or any(directory.iterdir()):
            continue
        try:
            directory.rmdir()
        except OSError as e:
            raise RuntimeError(f"Failed to remove empty directory {directory}: {e}") from e


def _index_env(index_file: Path | None) -> dict[str, str] | None:
    """Environment pointing git at a scratch index (None keeps the real one)."""
    if index_file is None:
        return None
    return {**os.environ, "GIT_INDEX_FILE": str(index_file)}


# ============================================================================
# Production Implementation
# ============================================================================


class RealGit(Git):
    """Production implementation using subprocess.

    All git operations execute actual git commands via subprocess.
    """

    def get_repository_root(self, cwd: Path) -> Path | None:
        """Get the top-level directory of the working copy containing cwd."""
        result = subprocess.run(
            ["git", "rev-parse", "--show-toplevel"],
            cwd=cwd,
            capture_output=True,
            text=True,
            check=False,
        )
        if result.returncode != 0:
            return None

        return Path(result.stdout.strip()).resolve()

    def get_current_branch(self, cwd: Path) -> str | None:
        """Get the currently checked-out branch."""
        result = subprocess.run(
            ["git", "rev-parse", "--abbrev-ref", "HEAD"],
            cwd=cwd,
            capture_output=True,
            text=True,
            check=False,
        )
        if result.returncode != 0:
            return None

        branch = result.stdout.strip()
        if branch == "HEAD":
            return None

        return branch

    def get_commit_message(self, repo_root: Path, commit_sha: str) -> str | None:
        """Get the first line of commit message for a given commit SHA."""
        result = subprocess.run(
            ["git", "log", "-1", "--format=%s", commit_sha],
            cwd=repo_root,
            capture_output=True,
            text=True,
            check=False,
        )
        if result.returncode != 0:
            return None

        return result.stdout.strip()

    def create_branch(self, cwd: Path, branch_name: str, start_point: str) -> None:
        """Create a new branch without checking it out."""
        run_subprocess_with_context(
            ["git", "branch", branch_name, start_point],
            operation_context=f"create branch '{branch_name}' from '{start_point}'",
            cwd=cwd,
        )

    def checkout_branch(self, cwd: Path, branch: str) -> None:
        """Checkout a branch in the given directory."""
        run_subprocess_with_context(
            ["git", "checkout", "--quiet", branch],
            operation_context=f"checkout branch '{branch}'",
            cwd=cwd,
        )

    def resolve_commit(self, repo_root: Path, rev: str) -> str | None:
        """Resolve a revision expression to a full commit SHA."""
        result = subprocess.run(
            ["git", "rev-parse", "--verify", "--quiet", f"{rev}^{{commit}}"],
            cwd=repo_root,
            capture_output=True,
            text=True,
            check=False,
        )
        if result.returncode != 0:
            return None

        return result.stdout.strip()

    def read_ref(self, repo_root: Path, ref: str) -> str | None:
        """Read the current value of a fully qualified reference."""
        result = subprocess.run(
            ["git", "show-ref", "--verify", "--hash", ref],
            cwd=repo_root,
            capture_output=True,
            text=True,
            check=False,
        )
        if result.returncode != 0:
            return None

        return result.stdout.strip() or None

    def compare_and_swap_ref(
        self,
        repo_root: Path,
        ref: str,
        new: str,
        expected_old: str | None,
        *,
        message: str,
    ) -> bool:
        """Atomically move ``ref`` from ``expected_old`` to ``new``."""
        # An empty old value tells git the ref must not exist yet
        cmd = ["git", "update-ref", "--create-reflog", "-m", message, ref, new, expected_old or ""]
        result = run_subprocess_with_context(
            cmd,
            operation_context=f"update '{ref}'",
            cwd=repo_root,
            check=False,
        )
        if result.returncode == 0:
            return True

        # Distinguish a lost race from any other failure
        if self.read_ref(repo_root, ref) != expected_old:
            return False

        raise RuntimeError(
            f"Failed to update '{ref}'\nCommand: {' '.join(cmd)}\n"
            f"Exit code: {result.returncode}\nstderr: {result.stderr.strip()}"
        )

    def delete_ref(self, repo_root: Path, ref: str) -> None:
        """Delete a reference together with its history log."""
        run_subprocess_with_context(
            ["git", "update-ref", "-d", ref],
            operation_context=f"delete '{ref}'",
            cwd=repo_root,
        )

    def list_reflog(self, repo_root: Path, ref: str) -> list[ReflogEntry]:
        """List a reference's history log, newest first."""
        if self.read_ref(repo_root, ref) is None:
            return []

        result = run_subprocess_with_context(
            [
                "git",
                "log",
                "--walk-reflogs",
                "--date=unix",
                "--format=%H%x00%gd%x00%gs",
                ref,
                "--",
            ],
            operation_context=f"read history log of '{ref}'",
            cwd=repo_root,
        )

        entries: list[ReflogEntry] = []
        for line in result.stdout.splitlines():
            parts = line.split("\x00")
            if len(parts) != 3:
                continue
            entries.append(
                ReflogEntry(
                    commit=parts[0], timestamp=_reflog_timestamp(parts[1]), subject=parts[2]
                )
            )

        return entries

    def drop_reflog_entry(self, repo_root: Path, ref: str, index: int) -> None:
        """Remove one entry from a reference's history log."""
        run_subprocess_with_context(
            ["git", "reflog", "delete", "--updateref", "--rewrite", f"{ref}@{{{index}}}"],
            operation_context=f"drop '{ref}@{{{index}}}'",
            cwd=repo_root,
        )

    def get_tree(self, repo_root: Path, commit: str) -> str:
        """Get the tree id of a commit."""
        result = run_subprocess_with_context(
            ["git", "rev-parse", f"{commit}^{{tree}}"],
            operation_context=f"read tree of {commit}",
            cwd=repo_root,
        )
        return result.stdout.strip()

    def write_tree(self, repo_root: Path, *, index_file: Path | None) -> str:
        """Write the contents of an index as a tree object."""
        result = run_subprocess_with_context(
            ["git", "write-tree"],
            operation_context="write tree from index",
            cwd=repo_root,
            env=_index_env(index_file),
        )
        return result.stdout.strip()

    def read_tree(self, repo_root: Path, tree: str | None, *, index_file: Path) -> None:
        """Replace the contents of a scratch index with ``tree``."""
        cmd = ["git", "read-tree"]
        cmd.append(tree if tree is not None else "--empty")
        run_subprocess_with_context(
            cmd,
            operation_context=f"seed scratch index from {tree or 'an empty tree'}",
            cwd=repo_root,
            env=_index_env(index_file),
        )

    def update_index(self, repo_root: Path, paths: Sequence[str], *, index_file: Path) -> None:
        """Record the on-disk content of ``paths`` into a scratch index."""
        run_subprocess_with_context(
            ["git", "update-index", "--add", "--remove", "-z", "--stdin"],
            operation_context=f"stage {len(paths)} path(s) into scratch index",
            cwd=repo_root,
            env=_index_env(index_file),
            input=_nul_join(paths),
        )

    def commit_tree(
        self, repo_root: Path, tree: str, parents: Sequence[str], *, message: str
    ) -> str:
        """Write a commit object without moving any reference."""
        cmd = ["git", "commit-tree", tree]
        for parent in parents:
            cmd.extend(["-p", parent])
        cmd.extend(["-m", message])
        result = run_subprocess_with_context(
            cmd,
            operation_context=f"write commit for tree {tree}",
            cwd=repo_root,
        )
        return result.stdout.strip()

    def list_staged_files(self, repo_root: Path) -> list[str]:
        """List paths whose index content differs from HEAD."""
        result = run_subprocess_with_context(
            ["git", "diff", "--cached", "--name-only", "--no-renames", "-z", "HEAD", "--"],
            operation_context="list staged files",
            cwd=repo_root,
        )
        return _split_nul(result.stdout)

    def list_unstaged_files(self, repo_root: Path) -> list[str]:
        """List tracked paths whose working-tree content differs from the index."""
        result = run_subprocess_with_context(
            ["git", "diff", "--name-only", "--no-renames", "-z", "--"],
            operation_context="list unstaged files",
            cwd=repo_root,
        )
        return _split_nul(result.stdout)

    def list_changed_files(self, repo_root: Path, commit: str) -> list[str]:
        """List tracked paths whose working-tree content differs from ``commit``."""
        result = run_subprocess_with_context(
            ["git", "diff", "--name-only", "--no-renames", "-z", commit, "--"],
            operation_context=f"list files changed since {commit}",
            cwd=repo_root,
        )
        return _split_nul(result.stdout)

    def list_untracked_files(self, repo_root: Path, *, include_ignored: bool) -> list[str]:
        """List untracked files."""
        cmd = ["git", "ls-files", "--others", "-z"]
        if not include_ignored:
            cmd.append("--exclude-standard")
        result = run_subprocess_with_context(
            cmd,
            operation_context="list untracked files",
            cwd=repo_root,
        )
        return _split_nul(result.stdout)

    def reset_hard(self, repo_root: Path, commit: str) -> None:
        """Reset index and working tree to ``commit``."""
        run_subprocess_with_context(
            ["git", "reset", "--hard", "--quiet", commit],
            operation_context=f"reset index and working tree to {commit}",
            cwd=repo_root,
        )

    def restore_worktree(
        self, repo_root: Path, paths: Sequence[str], *, source: str | None
    ) -> None:
        """Overwrite working-tree ``paths`` without touching the index."""
        if not paths:
            return

        cmd = ["git", "restore", "--worktree", "--ignore-unmatch"]
        if source is not None:
            cmd.append(f"--source={source}")
        cmd.extend(["--pathspec-from-file=-", "--pathspec-file-nul"])
        run_subprocess_with_context(
            cmd,
            operation_context=f"restore {len(paths)} path(s) from {source or 'the index'}",
            cwd=repo_root,
            input=_nul_join(paths),
        )

    def clean_paths(self, repo_root: Path, paths: Sequence[str], *, include_ignored: bool) -> None:
        """Remove untracked ``paths`` and the directories that leaves empty."""
        if not paths:
            return

        cmd = ["git", "clean", "--force", "--quiet", "-d"]
        if include_ignored:
            cmd.append("-x")
        cmd.append("--")
        cmd.extend(paths)
        run_subprocess_with_context(
            cmd,
            operation_context=f"remove {len(paths)} untracked path(s)",
            cwd=repo_root,
        )
        _prune_empty_parents(repo_root, paths)

    def apply_stash(self, repo_root: Path, commit: str, *, restore_index: bool) -> None:
        """Restore a stash commit onto the index and working tree."""
        cmd = ["git", "stash", "apply", "--quiet"]
        if restore_index:
            cmd.append("--index")
        cmd.append(commit)

        # Force untranslated messages so the index conflict can be recognised
        result = run_subprocess_with_context(
            cmd,
            operation_context=f"apply stash {commit}",
            cwd=repo_root,
            env={**os.environ, "LC_ALL": "C"},
            check=False,
        )
        if result.returncode == 0:
            return

        output = f"{result.stdout}\n{result.stderr}"
        if restore_index and "conflicts in index" in output.lower():
            raise ApplyConflictError(commit)

        raise RuntimeError(
            f"Failed to apply stash {commit}\nCommand: {' '.join(cmd)}\n"
            f"Exit code: {result.returncode}\nstderr: {result.stderr.strip()}"
        )
