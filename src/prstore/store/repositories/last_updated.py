"""Per-repository sync high water marks."""

import sqlite3

from loguru import logger

from ..database import Database
from ..migrations.versions.v0007_composite_keys import CHANGES
from ..schema import DocumentCodec

TABLE = "pullRequestsLastUpdated"


class LastUpdatedRepository:
    """Repository for the pullRequestsLastUpdated collection.

    Holds, per repository, the newest ``updated_at`` seen across every pull
    request fetched for it, in milliseconds since the epoch. Closed pull
    requests are purged from the pullRequests collection but still advance
    this mark, so it can be newer than anything stored there.
    """

    def __init__(self, db: Database):
        self.db = db
        self._codec = DocumentCodec(TABLE, CHANGES[TABLE])

    def get(self, repo_id: int) -> int | None:
        """Get the mark for a repository, None if never set or cleared."""
        cursor = self.db.execute(f'SELECT value FROM "{TABLE}" WHERE "repoId" = ?', (repo_id,))
        row = cursor.fetchone()
        return self._codec.from_row(row)["lastUpdated"] if row else None

    def set(self, repo_id: int, last_updated: int) -> None:
        """Insert or replace the mark for a repository."""
        document = {"repoId": repo_id, "lastUpdated": int(last_updated)}
        with self.db.transaction() as cursor:
            cursor.execute(self._codec.upsert_sql, self._codec.to_row(document))
        logger.debug(f"Last updated mark for repository {repo_id} set to {last_updated}")

    def clear(self, repo_id: int, cursor: sqlite3.Cursor | None = None) -> None:
        """Remove the mark for a repository. No-op if there is none.

        Args:
            repo_id: Database id of the repository.
            cursor: Cursor of an open transaction to join. A transaction of
                its own is used when omitted.
        """
        sql = f'DELETE FROM "{TABLE}" WHERE "repoId" = ?'
        if cursor is not None:
            cursor.execute(sql, (repo_id,))
            return

        with self.db.transaction() as own_cursor:
            own_cursor.execute(sql, (repo_id,))

    def list_all(self) -> dict[int, int]:
        """Get every stored mark, keyed by repository id."""
        cursor = self.db.execute(f'SELECT value FROM "{TABLE}" ORDER BY "repoId"')
        marks = (self._codec.from_row(row) for row in cursor.fetchall())
        return {m["repoId"]: m["lastUpdated"] for m in marks}
