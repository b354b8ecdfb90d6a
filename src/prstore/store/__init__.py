"""Data access layer for prstore.

This package provides the persistence layer including:
- Database: SQLite connection, transactions and schema migration on connect
- MigrationRunner: versioned, forward-only collection declarations
- Repositories: typed synchronous access to each collection
- PullRequestDatabase: async facade used by the application

Example:
    from prstore.store import PullRequestDatabase

    async with PullRequestDatabase("prs.db") as store:
        await store.put_pull_requests(prs)
"""

from .database import Database
from .migrations import Migration, MigrationRunner
from .pull_requests import PullRequestDatabase, from_epoch_ms, to_epoch_ms
from .repositories import LastUpdatedRepository, PullRequestRepository
from .schema import REMOVE, CollectionSchema, Index

__all__ = [
    # Database
    "Database",
    "PullRequestDatabase",
    # Migrations
    "Migration",
    "MigrationRunner",
    "CollectionSchema",
    "Index",
    "REMOVE",
    # Repositories
    "PullRequestRepository",
    "LastUpdatedRepository",
    # Helpers
    "to_epoch_ms",
    "from_epoch_ms",
]
