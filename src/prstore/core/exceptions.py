"""Custom exceptions for prstore."""


class PRStoreError(Exception):
    """Base exception for all prstore errors."""

    pass


class DatabaseError(PRStoreError):
    """Database operation failed."""

    pass


class MigrationError(DatabaseError):
    """A declared schema step could not be applied."""

    def __init__(self, version: int, message: str):
        """Initialize exception with the failing version.

        Args:
            version: Schema version whose step failed.
            message: Description of the failure.
        """
        self.version = version
        super().__init__(f"Migration {version} failed: {message}")


class FatalError(SystemExit):
    """A caller broke an invariant this layer cannot recover from.

    Derives from SystemExit rather than Exception so that ``except Exception``
    handlers do not swallow it. Left uncaught, it terminates the process and
    prints the message.
    """

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)

    def __str__(self) -> str:
        return self.message
