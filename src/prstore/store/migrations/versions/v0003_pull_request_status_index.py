"""Index pullRequestStatus by pull request."""

from ...schema import CollectionSchema

VERSION = 3
DESCRIPTION = "Index pullRequestStatus on pullRequestId"

CHANGES = {
    "pullRequestStatus": CollectionSchema.parse("id++, &[sha+pullRequestId], pullRequestId"),
}
