"""No schema change.

Version 4 added status fields to pullRequestStatus records. Version 5 drops
the collection altogether, so there is nothing left to migrate here, but the
number stays taken so the history reads in order.
"""

VERSION = 4
DESCRIPTION = "Reserved (pullRequestStatus fields, superseded by 5)"

CHANGES: dict = {}
