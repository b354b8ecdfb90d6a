"""Repository implementations for the prstore data access layer.

- PullRequestRepository: pull requests keyed by (base repository, number)
- LastUpdatedRepository: per-repository sync high water marks

Both accept a connected Database in __init__ and are synchronous; the
PullRequestDatabase facade runs them off the event loop.

Example:
    from prstore.store.database import Database
    from prstore.store.repositories import PullRequestRepository

    db = Database(":memory:")
    db.connect()
    prs = PullRequestRepository(db)
"""

from .last_updated import LastUpdatedRepository
from .pull_requests import PullRequestRepository

__all__ = [
    "LastUpdatedRepository",
    "PullRequestRepository",
]
