"""Configuration management for prstore."""

import os
from dataclasses import dataclass, field
from pathlib import Path


def _default_db_path() -> Path:
    """Get default database path."""
    data_dir = Path(os.environ.get("XDG_DATA_HOME", Path.home() / ".local" / "share"))
    return data_dir / "prstore" / "pull-requests.db"


@dataclass
class Config:
    """Main application configuration."""

    db_path: Path = field(default_factory=_default_db_path)
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "Config":
        """Load configuration from environment variables."""
        config = cls()

        if path := os.environ.get("PRSTORE_DB_PATH"):
            config.db_path = Path(path)

        if level := os.environ.get("PRSTORE_LOG_LEVEL"):
            config.log_level = level.upper()

        return config
