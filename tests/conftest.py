"""Pytest configuration and fixtures."""

import pytest
from pathlib import Path

from prstore.core.types import GitHubRepository, PullRequest, PullRequestRef
from prstore.store.database import Database
from prstore.store.pull_requests import PullRequestDatabase
from prstore.store.repositories import LastUpdatedRepository, PullRequestRepository


def _make_pr(repo_id: int, number: int, **overrides) -> PullRequest:
    fields = dict(
        number=number,
        title=f"PR {number} in {repo_id}",
        created_at="2024-01-01T10:00:00Z",
        updated_at=f"2024-01-{number % 28 + 1:02d}T10:00:00Z",
        head=PullRequestRef(repo_id=repo_id + 100, ref=f"feature-{number}", sha=f"{number:040x}"),
        base=PullRequestRef(repo_id=repo_id, ref="main", sha="f" * 40),
        author="octocat",
    )
    fields.update(overrides)
    return PullRequest(**fields)


@pytest.fixture
def make_pr():
    """Provide a factory building a pull request that targets a repository id."""
    return _make_pr


@pytest.fixture
def test_db_path(tmp_path: Path) -> Path:
    """Provide a temporary database path for tests."""
    return tmp_path / "test.db"


@pytest.fixture
def db(test_db_path: Path) -> Database:
    """Provide a connected, fully migrated database instance."""
    database = Database(test_db_path)
    database.connect()
    yield database
    database.close()


@pytest.fixture
def pr_repo(db: Database) -> PullRequestRepository:
    """Provide a PullRequestRepository instance."""
    return PullRequestRepository(db)


@pytest.fixture
def last_updated_repo(db: Database) -> LastUpdatedRepository:
    """Provide a LastUpdatedRepository instance."""
    return LastUpdatedRepository(db)


@pytest.fixture
def store(test_db_path: Path) -> PullRequestDatabase:
    """Provide an unopened PullRequestDatabase; tests open it with ``async with``."""
    return PullRequestDatabase(test_db_path)


@pytest.fixture
def repository() -> GitHubRepository:
    """A persisted repository with db id 1."""
    return GitHubRepository(name="desktop", owner="octo-org", db_id=1)


@pytest.fixture
def other_repository() -> GitHubRepository:
    """A persisted repository with db id 2."""
    return GitHubRepository(name="cli", owner="octo-org", db_id=2)


@pytest.fixture
def unpersisted_repository() -> GitHubRepository:
    """A repository that has not been saved yet."""
    return GitHubRepository(name="new", owner="octo-org", db_id=None)
