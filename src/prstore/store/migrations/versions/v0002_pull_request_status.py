"""Add the pullRequestStatus collection."""

from ...schema import CollectionSchema

VERSION = 2
DESCRIPTION = "Create pullRequestStatus"

CHANGES = {
    "pullRequestStatus": CollectionSchema.parse("id++, &[sha+pullRequestId]"),
}
