"""Type definitions for prstore."""

from dataclasses import dataclass
from typing import Any, Optional


# Composite primary key of a stored pull request: (base repo db id, PR number).
PullRequestKey = tuple[int, int]


@dataclass(frozen=True)
class GitHubRepository:
    """A remote repository as known to the host application.

    Only ``db_id`` is consumed by the store. It is ``None`` until the
    repository itself has been persisted.
    """

    name: str
    owner: str
    db_id: Optional[int] = None


@dataclass(frozen=True)
class PullRequestRef:
    """A ref on either side of a pull request.

    ``repo_id`` is the database id of the repository the ref lives in. It can
    be ``None`` for a head ref whose repository was deleted upstream after the
    PR was opened.
    """

    repo_id: Optional[int]
    ref: str
    sha: str

    def to_document(self) -> dict[str, Any]:
        return {"repoId": self.repo_id, "ref": self.ref, "sha": self.sha}

    @classmethod
    def from_document(cls, doc: dict[str, Any]) -> "PullRequestRef":
        return cls(repo_id=doc.get("repoId"), ref=doc["ref"], sha=doc["sha"])


@dataclass(frozen=True)
class PullRequest:
    """An open pull request as last observed from the remote.

    Records are never patched field by field; an update is a whole-record
    replacement keyed on ``(base.repo_id, number)``.
    """

    number: int
    title: str
    created_at: str  # display only
    updated_at: str  # display only, not used for sync bookkeeping
    head: PullRequestRef
    base: PullRequestRef
    author: str

    def __post_init__(self) -> None:
        if self.base.repo_id is None:
            raise ValueError(f"Pull request #{self.number} has no base repository id")

    @property
    def key(self) -> PullRequestKey:
        """Composite identity, unique across the whole collection."""
        return (self.base.repo_id, self.number)  # type: ignore[return-value]

    def to_document(self) -> dict[str, Any]:
        """Serialize using the persisted field names."""
        return {
            "number": self.number,
            "title": self.title,
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
            "head": self.head.to_document(),
            "base": self.base.to_document(),
            "author": self.author,
        }

    @classmethod
    def from_document(cls, doc: dict[str, Any]) -> "PullRequest":
        return cls(
            number=doc["number"],
            title=doc["title"],
            created_at=doc["createdAt"],
            updated_at=doc["updatedAt"],
            head=PullRequestRef.from_document(doc["head"]),
            base=PullRequestRef.from_document(doc["base"]),
            author=doc["author"],
        )


@dataclass
class RepositoryCount:
    """Number of stored pull requests for one repository."""

    repo_id: int
    pull_requests: int
    last_updated: Optional[int] = None  # epoch milliseconds


@dataclass
class StoreStatus:
    """Summary of the store state, used by the status command."""

    path: str
    schema_version: int
    latest_version: int
    repositories: list[RepositoryCount]

    @property
    def total_pull_requests(self) -> int:
        return sum(r.pull_requests for r in self.repositories)
