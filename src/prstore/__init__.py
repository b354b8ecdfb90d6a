"""prstore - local pull request cache with versioned schema."""

from .core import (
    Config,
    DatabaseError,
    FatalError,
    GitHubRepository,
    MigrationError,
    PRStoreError,
    PullRequest,
    PullRequestRef,
)
from .store import PullRequestDatabase

__version__ = "1.0.0"

__all__ = [
    "Config",
    "DatabaseError",
    "FatalError",
    "GitHubRepository",
    "MigrationError",
    "PRStoreError",
    "PullRequest",
    "PullRequestDatabase",
    "PullRequestRef",
]
