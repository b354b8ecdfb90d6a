"""Migration version modules.

Each module in this package declares the collection changes for one schema
version. Modules must define:
    VERSION: int - The version number (unique, ascending)
    DESCRIPTION: str - Human-readable description
    CHANGES: dict - Collection name to CollectionSchema, or REMOVE to drop it

A step is never edited once shipped. To change a collection, declare it again
in a new version; the new declaration replaces the previous shape.

Example migration (v0008_add_reviews.py):
    VERSION = 8
    DESCRIPTION = "Add reviews collection"

    CHANGES = {
        "reviews": CollectionSchema.parse("[pullRequestId+id], pullRequestId"),
    }
"""
