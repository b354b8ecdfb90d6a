"""Schema migration runner for prstore.

Uses SQLite PRAGMA user_version for tracking schema version.
Each migration declares collection changes for one version number and is
applied at most once, in ascending order.
"""

from __future__ import annotations

import importlib
import pkgutil
import sqlite3
from dataclasses import dataclass, field
from typing import Mapping, Optional

from loguru import logger

from ...core.exceptions import MigrationError
from ..schema import Changes, CollectionSchema, apply_changes


@dataclass
class Migration:
    """A schema migration."""

    version: int
    description: str
    changes: Mapping[str, Optional[CollectionSchema]] = field(default_factory=dict)

    def __repr__(self) -> str:
        return f"Migration({self.version}, {self.description!r})"


class MigrationRunner:
    """Applies versioned collection declarations to a SQLite database.

    Uses PRAGMA user_version to track the current schema version.
    Migrations are either declared explicitly or discovered from the
    versions subpackage.

    Example:
        runner = MigrationRunner(connection)
        applied = runner.run()
        print(f"Applied {applied} migrations, now at version {runner.get_version()}")
    """

    def __init__(self, connection: sqlite3.Connection, migrations: list[Migration] | None = None):
        """Initialize with database connection.

        Args:
            connection: SQLite connection to migrate.
            migrations: Explicit migration history. When omitted, the shipped
                history in ``prstore.store.migrations.versions`` is used.
        """
        self.conn = connection
        self._migrations: list[Migration] = []
        self._loaded = migrations is not None
        for migration in migrations or []:
            self._append(migration)

    def declare(self, version: int, changes: Changes, description: str = "") -> "MigrationRunner":
        """Declare the collection changes for a schema version.

        Versions must be declared in strictly ascending order. An empty change
        set is allowed and only reserves the version number.

        Args:
            version: Schema version number.
            changes: Collection name to declaration, or REMOVE to drop it.
            description: Human-readable description.

        Returns:
            The runner, so declarations can be chained.

        Raises:
            ValueError: If the version does not follow the last declared one.
        """
        self._loaded = True
        self._append(Migration(version, description or f"version {version}", dict(changes)))
        return self

    def _append(self, migration: Migration) -> None:
        if migration.version < 1:
            raise ValueError(f"Schema versions start at 1, got {migration.version}")
        if self._migrations and migration.version <= self._migrations[-1].version:
            raise ValueError(
                f"Version {migration.version} declared after version "
                f"{self._migrations[-1].version}; versions must be ascending"
            )
        self._migrations.append(migration)

    def get_version(self) -> int:
        """Get current schema version from user_version pragma."""
        cursor = self.conn.execute("PRAGMA user_version")
        return cursor.fetchone()[0]

    def set_version(self, version: int) -> None:
        """Set schema version.

        Args:
            version: New version number to set.
        """
        # PRAGMA doesn't support parameters; version is an int
        self.conn.execute(f"PRAGMA user_version = {int(version)}")

    def get_migrations(self) -> list[Migration]:
        """Get all available migrations, sorted by version.

        Returns:
            List of Migration objects sorted by version number.
        """
        if self._loaded:
            return self._migrations

        from prstore.store.migrations import versions

        discovered = []
        for _importer, modname, ispkg in pkgutil.iter_modules(versions.__path__):
            if ispkg:
                continue

            module = importlib.import_module(f"prstore.store.migrations.versions.{modname}")

            if not hasattr(module, "VERSION") or not hasattr(module, "CHANGES"):
                logger.warning(f"Skipping invalid migration module: {modname}")
                continue

            discovered.append(
                Migration(
                    version=module.VERSION,
                    description=getattr(module, "DESCRIPTION", modname),
                    changes=module.CHANGES,
                )
            )

        for migration in sorted(discovered, key=lambda m: m.version):
            self._append(migration)
        self._loaded = True

        return self._migrations

    def get_pending_migrations(self) -> list[Migration]:
        """Get migrations that haven't been applied yet.

        Returns:
            List of Migration objects with version > current version.
        """
        current = self.get_version()
        return [m for m in self.get_migrations() if m.version > current]

    def run(self) -> int:
        """Apply all pending migrations.

        Each migration runs in its own transaction together with its version
        bump. On failure that transaction is rolled back and the error is
        raised; migrations applied before it stay committed.

        Returns:
            Number of migrations applied.

        Raises:
            MigrationError: If any migration fails.
        """
        pending = self.get_pending_migrations()

        if not pending:
            current = self.get_version()
            logger.debug(f"Database at version {current}, no migrations to apply")
            return 0

        applied = 0

        for migration in pending:
            logger.info(f"Applying migration {migration.version}: {migration.description}")

            try:
                if self.conn.in_transaction:
                    self.conn.commit()
                self.conn.execute("BEGIN")
                apply_changes(self.conn, migration.changes)
                self.set_version(migration.version)
                self.conn.commit()

                applied += 1
                logger.debug(f"Migration {migration.version} applied successfully")

            except Exception as e:
                logger.error(f"Migration {migration.version} failed: {e}")
                self.conn.rollback()
                raise MigrationError(migration.version, str(e)) from e

        logger.info(
            f"Applied {applied} migration(s), "
            f"database now at version {self.get_version()}"
        )
        return applied

    def get_latest_version(self) -> int:
        """Get the latest available migration version.

        Returns:
            Highest version number among migrations, or 0 if none.
        """
        migrations = self.get_migrations()
        if not migrations:
            return 0
        return migrations[-1].version

    def is_up_to_date(self) -> bool:
        """Check if database is at latest version.

        Returns:
            True if current version is at or past the latest migration version.
        """
        return self.get_version() >= self.get_latest_version()
