"""Tests for database connection and management."""

import pytest
from pathlib import Path

from prstore.core.exceptions import DatabaseError, MigrationError
from prstore.store.database import Database
from prstore.store.migrations import Migration
from prstore.store.schema import CollectionSchema


class TestDatabaseConnection:
    """Tests for database connection lifecycle."""

    def test_connect_creates_database_file(self, test_db_path: Path):
        """Database file should be created on connect."""
        db = Database(test_db_path)
        db.connect()

        assert test_db_path.exists()
        db.close()

    def test_connect_creates_parent_directories(self, tmp_path: Path):
        """Connect should create parent directories if needed."""
        db_path = tmp_path / "subdir" / "nested" / "test.db"
        db = Database(db_path)
        db.connect()

        assert db_path.exists()
        db.close()

    def test_connect_in_memory(self):
        """An in-memory database should be migrated like a file."""
        db = Database(":memory:")
        db.connect()

        assert db.schema_version == 7
        db.close()

    def test_close_without_connect(self, test_db_path: Path):
        """Close should not raise if not connected."""
        db = Database(test_db_path)
        db.close()

    def test_double_connect(self, test_db_path: Path):
        """Connecting twice should work without error."""
        db = Database(test_db_path)
        db.connect()
        db.connect()
        assert db.is_connected
        db.close()

    def test_close_clears_connection(self, test_db_path: Path):
        """Close should clear the connection."""
        db = Database(test_db_path)
        db.connect()
        db.close()

        with pytest.raises(DatabaseError, match="not connected"):
            db.execute("SELECT 1")

    def test_connect_migrates_to_latest(self, db: Database):
        """Connecting should bring the schema to the latest version."""
        assert db.schema_version == 7
        assert db.migrator().is_up_to_date()

    def test_failed_migration_propagates_and_disconnects(self, test_db_path: Path):
        """A migration failure should surface from connect."""
        items = CollectionSchema.parse("id")
        db = Database(test_db_path, [Migration(1, "items", {"items": items})])
        db.connect()
        db.executemany(
            "INSERT INTO items (id, value) VALUES (?, ?)",
            [(1, '{"id": 1, "k": 1}'), (2, '{"id": 2, "k": 1}')],
        )
        db.close()

        broken = Database(
            test_db_path,
            [
                Migration(1, "items", {"items": items}),
                Migration(2, "unique k", {"items": CollectionSchema.parse("k")}),
            ],
        )
        with pytest.raises(MigrationError):
            broken.connect()

        assert not broken.is_connected

    def test_invalid_declaration_disconnects(self, test_db_path: Path):
        """A declaration that cannot be rendered should not leave the connection open."""
        db = Database(test_db_path, [Migration(1, "broken", {"items": "id"})])

        with pytest.raises(MigrationError):
            db.connect()

        assert not db.is_connected


class TestDatabaseTransactions:
    """Tests for transaction management."""

    def test_transaction_commits_on_success(self, db: Database):
        """Successful transaction should commit."""
        with db.transaction() as cursor:
            cursor.execute(
                'INSERT INTO "pullRequestsLastUpdated" ("repoId", value) VALUES (?, ?)',
                (1, '{"repoId": 1, "lastUpdated": 5}'),
            )

        cursor = db.execute('SELECT COUNT(*) FROM "pullRequestsLastUpdated"')
        assert cursor.fetchone()[0] == 1

    def test_transaction_rollbacks_on_error(self, db: Database):
        """Failed transaction should rollback and raise DatabaseError."""
        with pytest.raises(DatabaseError, match="Transaction failed"):
            with db.transaction() as cursor:
                cursor.execute(
                    'INSERT INTO "pullRequestsLastUpdated" ("repoId", value) VALUES (?, ?)',
                    (1, '{"repoId": 1, "lastUpdated": 5}'),
                )
                cursor.execute("INSERT INTO no_such_table VALUES (1)")

        cursor = db.execute('SELECT COUNT(*) FROM "pullRequestsLastUpdated"')
        assert cursor.fetchone()[0] == 0

    def test_execute_wraps_errors(self, db: Database):
        """Query errors should be wrapped in DatabaseError."""
        with pytest.raises(DatabaseError, match="Query execution failed"):
            db.execute("SELECT * FROM no_such_table")
