"""Initial pull requests collection, keyed by a generated id."""

from ...schema import CollectionSchema

VERSION = 1
DESCRIPTION = "Create pullRequests keyed by generated id"

CHANGES = {
    "pullRequests": CollectionSchema.parse("id++, base.repoId"),
}
