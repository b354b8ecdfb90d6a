"""Key pull requests on (base repository, number) and track sync progress.

The composite primary key keeps every repository's pull requests in one
contiguous key range, so scoped reads and deletes are range scans.
pullRequestsLastUpdated holds one row per repository with the newest
``updated_at`` seen during sync, in epoch milliseconds.
"""

from ...schema import CollectionSchema

VERSION = 7
DESCRIPTION = "Composite pullRequests key and pullRequestsLastUpdated"

CHANGES = {
    "pullRequests": CollectionSchema.parse(
        "[base.repoId+number], base.repoId, [base.repoId+updatedAt]"
    ),
    "pullRequestsLastUpdated": CollectionSchema.parse("repoId"),
}
