"""Schema migrations for prstore.

This module provides versioned collection declarations using SQLite's
PRAGMA user_version for tracking.

Example:
    from prstore.store.migrations import MigrationRunner

    runner = MigrationRunner(connection)
    applied = runner.run()
"""

from .runner import Migration, MigrationRunner

__all__ = [
    "Migration",
    "MigrationRunner",
]
