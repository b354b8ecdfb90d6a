"""Async pull request store.

``PullRequestDatabase`` is what the application talks to. It owns one
``Database`` and runs every operation on a single worker thread, so the
connection is only ever used by one writer and calls are applied in the
order they were scheduled.

Example:
    async with PullRequestDatabase(config.db_path) as store:
        await store.put_pull_requests(prs)
        open_prs = await store.get_all_pull_requests_in_repository(repository)
"""

from __future__ import annotations

import asyncio
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timedelta, timezone
from functools import partial
from pathlib import Path
from typing import Callable, Iterable, TypeVar

from loguru import logger

from ..core.fatal import force_unwrap
from ..core.types import GitHubRepository, PullRequest, RepositoryCount, StoreStatus
from .database import Database
from .migrations import Migration
from .repositories import LastUpdatedRepository, PullRequestRepository

T = TypeVar("T")

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
_ONE_MS = timedelta(milliseconds=1)


def to_epoch_ms(value: datetime) -> int:
    """Convert a datetime to whole milliseconds since the epoch.

    Naive datetimes are taken to be UTC.
    """
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return (value - EPOCH) // _ONE_MS


def from_epoch_ms(value: int) -> datetime:
    """Convert milliseconds since the epoch to an aware UTC datetime."""
    return EPOCH + value * _ONE_MS


class PullRequestDatabase:
    """Pull request store for one local database file."""

    def __init__(self, path: Path | str, migrations: list[Migration] | None = None):
        """Initialize the store. Nothing is opened until ``open()``.

        Args:
            path: Database file path, or ":memory:".
            migrations: Migration history, defaults to the shipped one.
        """
        self.db = Database(path, migrations)
        self.pull_requests = PullRequestRepository(self.db)
        self.last_updated = LastUpdatedRepository(self.db)
        self._executor: ThreadPoolExecutor | None = None

    async def open(self) -> None:
        """Open the database, migrating it to the latest schema version.

        Raises:
            MigrationError: If a schema step fails to apply.
            DatabaseError: If the database cannot be opened.
        """
        if self._executor is None:
            self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="prstore")
        await self._run(self.db.connect)

    async def close(self) -> None:
        """Close the database and stop the worker thread."""
        if self._executor is None:
            return
        try:
            await self._run(self.db.close)
        finally:
            self._executor.shutdown(wait=True)
            self._executor = None

    async def __aenter__(self) -> "PullRequestDatabase":
        try:
            await self.open()
        except BaseException:
            await self.close()
            raise
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    async def _run(self, func: Callable[..., T], *args) -> T:
        if self._executor is None:
            raise RuntimeError("PullRequestDatabase is not open")
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(self._executor, partial(func, *args))

    async def put_pull_requests(self, prs: Iterable[PullRequest]) -> None:
        """Insert the given pull requests, overwriting any existing records."""
        await self._run(self.pull_requests.put_all, list(prs))

    async def delete_pull_requests(self, prs: Iterable[PullRequest]) -> None:
        """Remove the given pull requests. Unknown keys are ignored."""
        await self._run(self.pull_requests.delete_many, list(prs))

    async def delete_all_pull_requests_in_repository(self, repository: GitHubRepository) -> None:
        """Remove every pull request of a repository along with its last updated mark.

        Both deletions commit together or not at all.
        """
        db_id = force_unwrap("Can't delete PRs for repository, no dbId", repository.db_id)
        await self._run(self._delete_all, db_id)

    def _delete_all(self, repo_id: int) -> None:
        with self.db.transaction() as cursor:
            self.last_updated.clear(repo_id, cursor)
            deleted = self.pull_requests.delete_range(cursor, repo_id)
        logger.info(f"Deleted {deleted} pull request(s) for repository {repo_id}")

    async def get_all_pull_requests_in_repository(
        self, repository: GitHubRepository
    ) -> list[PullRequest]:
        """Get all pull requests of a repository, ordered by number.

        Aborts if the repository has not been persisted yet.
        """
        db_id = force_unwrap("Can't retrieve PRs for repository, no dbId", repository.db_id)
        return await self._run(self.pull_requests.get_all_for_repository, db_id)

    async def get_pull_request(
        self, repository: GitHubRepository, pr_number: int
    ) -> PullRequest | None:
        """Get a single pull request of a repository, None if not stored."""
        db_id = force_unwrap("Can't retrieve PRs for repository, no dbId", repository.db_id)
        return await self._run(self.pull_requests.get_one, db_id, pr_number)

    async def get_last_updated(self, repository: GitHubRepository) -> datetime | None:
        """Get the most recent ``updated_at`` seen while syncing a repository.

        This can be newer than any stored pull request, since the most
        recently updated one may have been closed and only open pull requests
        are kept.
        """
        db_id = force_unwrap("Can't retrieve PRs for repository, no dbId", repository.db_id)
        value = await self._run(self.last_updated.get, db_id)
        return from_epoch_ms(value) if value is not None else None

    async def set_last_updated(self, repository: GitHubRepository, last_updated: datetime) -> None:
        """Record the most recent ``updated_at`` seen while syncing a repository."""
        db_id = force_unwrap("Can't set last updated for PR, no dbId", repository.db_id)
        await self._run(self.last_updated.set, db_id, to_epoch_ms(last_updated))

    async def clear_last_updated(self, repository: GitHubRepository) -> None:
        """Forget the last updated mark of a repository."""
        db_id = force_unwrap("Can't clear last updated PR for repository, no dbId", repository.db_id)
        await self._run(self.last_updated.clear, db_id)

    async def status(self) -> StoreStatus:
        """Summarize schema version and stored pull requests per repository."""
        return await self._run(self._status)

    def _status(self) -> StoreStatus:
        migrator = self.db.migrator()
        counts = self.pull_requests.count_by_repository()
        marks = self.last_updated.list_all()
        repo_ids = sorted(set(counts) | set(marks))
        return StoreStatus(
            path=str(self.db.path),
            schema_version=migrator.get_version(),
            latest_version=migrator.get_latest_version(),
            repositories=[
                RepositoryCount(repo_id=r, pull_requests=counts.get(r, 0), last_updated=marks.get(r))
                for r in repo_ids
            ],
        )
