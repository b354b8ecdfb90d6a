"""Core types, configuration and errors for prstore."""

from .config import Config
from .exceptions import DatabaseError, FatalError, MigrationError, PRStoreError
from .fatal import fatal_error, force_unwrap
from .types import (
    GitHubRepository,
    PullRequest,
    PullRequestKey,
    PullRequestRef,
    RepositoryCount,
    StoreStatus,
)

__all__ = [
    "Config",
    "PRStoreError",
    "DatabaseError",
    "MigrationError",
    "FatalError",
    "fatal_error",
    "force_unwrap",
    "GitHubRepository",
    "PullRequest",
    "PullRequestKey",
    "PullRequestRef",
    "RepositoryCount",
    "StoreStatus",
]
