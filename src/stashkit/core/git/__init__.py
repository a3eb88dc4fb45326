"""Git operations subpackage.

This subpackage provides abstractions over the git engine primitives with
support for testing via an in-memory fake.
"""

from stashkit.core.git.abc import Git, ReflogEntry
from stashkit.core.git.fake import FakeGit
from stashkit.core.git.real import RealGit

__all__ = [
    "Git",
    "ReflogEntry",
    "RealGit",
    "FakeGit",
]
