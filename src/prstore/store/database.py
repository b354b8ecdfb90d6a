"""SQLite database connection manager for prstore."""

import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Iterable, Iterator

from loguru import logger

from ..core.exceptions import DatabaseError, MigrationError
from .migrations import Migration, MigrationRunner

MEMORY = ":memory:"


class Database:
    """SQLite database connection manager.

    Connecting brings the schema up to the latest declared version.
    """

    def __init__(self, path: Path | str, migrations: list[Migration] | None = None):
        """Initialize database with path.

        Args:
            path: Path to the SQLite database file, or ":memory:".
            migrations: Migration history to apply on connect. Defaults to
                the shipped history.
        """
        self.path = path if str(path) == MEMORY else Path(path)
        self._migrations = migrations
        self._connection: sqlite3.Connection | None = None

    @property
    def is_connected(self) -> bool:
        return self._connection is not None

    def connect(self) -> None:
        """Open the connection and apply pending migrations.

        Raises:
            MigrationError: If a declared schema step cannot be applied.
            DatabaseError: If the database cannot be opened.
        """
        if self._connection:
            return

        try:
            if isinstance(self.path, Path):
                self.path.parent.mkdir(parents=True, exist_ok=True)
            # Only ever used from one thread at a time; see PullRequestDatabase.
            self._connection = sqlite3.connect(str(self.path), check_same_thread=False)
            self._connection.row_factory = sqlite3.Row
        except (OSError, sqlite3.Error) as e:
            raise DatabaseError(f"Failed to connect to database: {e}") from e

        try:
            self.migrator().run()
        except MigrationError:
            self.close()
            raise
        except sqlite3.Error as e:
            self.close()
            raise DatabaseError(f"Failed to read schema version: {e}") from e

        logger.debug(f"Connected to {self.path} at schema version {self.schema_version}")

    def close(self) -> None:
        """Close database connection."""
        if self._connection:
            try:
                self._connection.close()
            except sqlite3.Error as e:
                raise DatabaseError(f"Failed to close database: {e}") from e
            finally:
                self._connection = None

    def migrator(self) -> MigrationRunner:
        """Get a migration runner bound to this connection."""
        return MigrationRunner(self._require_connection(), self._migrations)

    @property
    def schema_version(self) -> int:
        return self.migrator().get_version()

    @contextmanager
    def transaction(self) -> Iterator[sqlite3.Cursor]:
        """Context manager for database transactions.

        Yields:
            A cursor for executing SQL statements.

        Raises:
            DatabaseError: If connection is not available or transaction fails.
        """
        connection = self._require_connection()

        cursor = connection.cursor()
        try:
            if not connection.in_transaction:
                cursor.execute("BEGIN")
            yield cursor
            connection.commit()
        except sqlite3.Error as e:
            connection.rollback()
            raise DatabaseError(f"Transaction failed: {e}") from e
        except BaseException:
            connection.rollback()
            raise
        finally:
            cursor.close()

    def execute(self, sql: str, params: tuple = ()) -> sqlite3.Cursor:
        """Execute a SQL query.

        Args:
            sql: SQL statement to execute.
            params: Parameters for the SQL statement.

        Returns:
            A cursor with the query results.

        Raises:
            DatabaseError: If connection is not available or query fails.
        """
        connection = self._require_connection()

        try:
            return connection.execute(sql, params)
        except sqlite3.Error as e:
            raise DatabaseError(f"Query execution failed: {e}") from e

    def executemany(self, sql: str, seq_of_params: Iterable[tuple]) -> None:
        """Execute a statement for each parameter tuple in one transaction.

        Args:
            sql: SQL statement to execute.
            seq_of_params: Parameter tuples.

        Raises:
            DatabaseError: If connection is not available or a statement fails.
        """
        with self.transaction() as cursor:
            cursor.executemany(sql, seq_of_params)

    def _require_connection(self) -> sqlite3.Connection:
        if not self._connection:
            raise DatabaseError("Database not connected")
        return self._connection
