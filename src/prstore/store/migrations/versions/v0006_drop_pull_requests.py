"""Drop pullRequests so version 7 can recreate it with a new primary key."""

from ...schema import REMOVE

VERSION = 6
DESCRIPTION = "Drop pullRequests ahead of primary key change"

CHANGES = {
    "pullRequests": REMOVE,
}
