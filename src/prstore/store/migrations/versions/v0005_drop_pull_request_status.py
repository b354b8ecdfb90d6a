"""Remove the pullRequestStatus collection."""

from ...schema import REMOVE

VERSION = 5
DESCRIPTION = "Drop pullRequestStatus"

CHANGES = {
    "pullRequestStatus": REMOVE,
}
