"""Pull request storage, partitioned by base repository."""

import sqlite3
from typing import Iterable

from loguru import logger

from ...core.types import PullRequest
from ..database import Database
from ..schema import DocumentCodec
from ..migrations.versions.v0007_composite_keys import CHANGES

TABLE = "pullRequests"

# Half-open range [repo_id, -inf] .. [repo_id + 1, -inf) over the compound key.
# Bounding the leading key column alone covers every number in between and
# lets SQLite walk the primary key index.
_RANGE_WHERE = '"base.repoId" >= ? AND "base.repoId" < ?'


def _repository_range(repo_id: int) -> tuple[int, int]:
    return (repo_id, repo_id + 1)


class PullRequestRepository:
    """Repository for the pullRequests collection.

    Records are keyed by ``[base.repoId, number]``. Since compound keys sort by
    repository first, all pull requests of one repository form a single
    contiguous key range.
    """

    def __init__(self, db: Database):
        """Initialize with database connection.

        Args:
            db: Database instance to use for operations.
        """
        self.db = db
        self._codec = DocumentCodec(TABLE, CHANGES[TABLE])

    def put_all(self, prs: Iterable[PullRequest]) -> int:
        """Insert the given pull requests, overwriting existing records.

        Args:
            prs: Pull requests to store. Later entries win on duplicate keys.

        Returns:
            Number of records written.
        """
        rows = [self._codec.to_row(pr.to_document()) for pr in prs]
        if not rows:
            return 0

        self.db.executemany(self._codec.upsert_sql, rows)
        logger.debug(f"Stored {len(rows)} pull request(s)")
        return len(rows)

    def delete_many(self, prs: Iterable[PullRequest]) -> None:
        """Delete the given pull requests by key. Missing keys are ignored."""
        keys = [pr.key for pr in prs]
        if not keys:
            return

        self.db.executemany(
            f'DELETE FROM "{TABLE}" WHERE "base.repoId" = ? AND number = ?', keys
        )
        logger.debug(f"Deleted up to {len(keys)} pull request(s)")

    def delete_range(self, cursor: sqlite3.Cursor, repo_id: int) -> int:
        """Delete every pull request of a repository using the caller's transaction.

        Args:
            cursor: Cursor of an open transaction.
            repo_id: Database id of the base repository.

        Returns:
            Number of deleted records.
        """
        cursor.execute(f'DELETE FROM "{TABLE}" WHERE {_RANGE_WHERE}', _repository_range(repo_id))
        return cursor.rowcount

    def get_all_for_repository(self, repo_id: int) -> list[PullRequest]:
        """Get all pull requests of a repository, ordered by number.

        Args:
            repo_id: Database id of the base repository.

        Returns:
            List of PullRequest objects, empty if there are none.
        """
        cursor = self.db.execute(
            f'SELECT value FROM "{TABLE}" WHERE {_RANGE_WHERE} ORDER BY "base.repoId", number',
            _repository_range(repo_id),
        )
        return [PullRequest.from_document(self._codec.from_row(row)) for row in cursor.fetchall()]

    def get_one(self, repo_id: int, number: int) -> PullRequest | None:
        """Get a single pull request by key.

        Returns:
            PullRequest if found, None otherwise.
        """
        cursor = self.db.execute(
            f'SELECT value FROM "{TABLE}" WHERE "base.repoId" = ? AND number = ?',
            (repo_id, number),
        )
        row = cursor.fetchone()
        return PullRequest.from_document(self._codec.from_row(row)) if row else None

    def count_by_repository(self) -> dict[int, int]:
        """Count stored pull requests per base repository."""
        cursor = self.db.execute(
            f'SELECT "base.repoId" AS repo_id, COUNT(*) AS n FROM "{TABLE}" '
            'GROUP BY "base.repoId" ORDER BY "base.repoId"'
        )
        return {row["repo_id"]: row["n"] for row in cursor.fetchall()}
