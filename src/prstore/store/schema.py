"""Collection declarations and their SQLite layout.

A collection is a table of JSON documents. Every key path named by the
collection's primary key or one of its indexes is materialized into its own
column, named after the path, so that SQLite can index and range-scan it. The
document itself lives in the ``value`` column.

Declarations use either ``CollectionSchema`` directly or the compact notation
understood by ``CollectionSchema.parse``::

    "[base.repoId+number], base.repoId, [base.repoId+updatedAt]"

The first entry is the primary key, ``id++`` marks a generated integer key,
``[a+b]`` is a compound key and a leading ``&`` makes an index unique.

DDL is built with SQLAlchemy Core and compiled for the SQLite dialect, then
executed on the raw ``sqlite3`` connection owned by the store.
"""

from __future__ import annotations

import hashlib
import json
import re
import sqlite3
from dataclasses import dataclass
from typing import Any, Mapping, Optional

from loguru import logger
from sqlalchemy import Column, Integer, MetaData, Table, Text
from sqlalchemy import Index as SAIndex
from sqlalchemy.dialects import sqlite as sqlite_dialect
from sqlalchemy.schema import CreateIndex, CreateTable, DropTable
from sqlalchemy.types import UserDefinedType

VALUE_COLUMN = "value"

# Marker for "drop this collection" in a change set.
REMOVE = None

_DIALECT = sqlite_dialect.dialect()


class _Untyped(UserDefinedType):
    """Column with no declared type.

    SQLite gives such columns no affinity, so integers and strings are stored
    and compared exactly as written.
    """

    cache_ok = True

    def get_col_spec(self, **kw) -> str:
        return ""


@dataclass(frozen=True)
class Index:
    """A secondary index over one or more key paths."""

    key_paths: tuple[str, ...]
    unique: bool = False


@dataclass(frozen=True)
class CollectionSchema:
    """Primary key and index shape of one collection."""

    primary_key: tuple[str, ...]
    indexes: tuple[Index, ...] = ()
    auto_increment: bool = False

    def __post_init__(self) -> None:
        if not self.primary_key:
            raise ValueError("A collection needs a primary key")
        if self.auto_increment and len(self.primary_key) != 1:
            raise ValueError("Only a single-path primary key can auto-increment")
        for path in self.key_paths:
            if path.lower() == VALUE_COLUMN:
                raise ValueError(f"Key path {path!r} is reserved for the stored document")

    @property
    def key_paths(self) -> tuple[str, ...]:
        """All materialized key paths, primary key first, without repeats."""
        paths: list[str] = []
        for path in self.primary_key + tuple(p for idx in self.indexes for p in idx.key_paths):
            if path not in paths:
                paths.append(path)
        return tuple(paths)

    @classmethod
    def parse(cls, text: str) -> "CollectionSchema":
        """Parse the compact declaration notation.

        Args:
            text: Comma separated entries, primary key first.

        Returns:
            The parsed CollectionSchema.

        Raises:
            ValueError: If the text declares no primary key or uses the
                reserved ``value`` key path.
        """
        entries = [e.strip() for e in text.split(",") if e.strip()]
        if not entries:
            raise ValueError(f"Empty collection declaration: {text!r}")

        primary, *rest = entries
        auto_increment = primary.startswith("++") or primary.endswith("++")
        primary_key = _parse_paths(primary.strip("+&"))

        indexes = []
        for entry in rest:
            unique = entry.startswith("&")
            indexes.append(Index(_parse_paths(entry.lstrip("&")), unique=unique))

        return cls(primary_key=primary_key, indexes=tuple(indexes), auto_increment=auto_increment)


def _parse_paths(entry: str) -> tuple[str, ...]:
    if entry.startswith("[") and entry.endswith("]"):
        return tuple(p.strip() for p in entry[1:-1].split("+"))
    return (entry,)


Changes = Mapping[str, Optional[CollectionSchema]]


def extract_key(document: Mapping[str, Any], key_path: str) -> Any:
    """Resolve a dotted key path on a document, None if any segment is missing."""
    value: Any = document
    for segment in key_path.split("."):
        if not isinstance(value, Mapping) or segment not in value:
            return None
        value = value[segment]
    return value


def quote(identifier: str) -> str:
    """Quote an identifier for SQLite."""
    return _DIALECT.identifier_preparer.quote(identifier)


def index_name(table_name: str, key_paths: tuple[str, ...]) -> str:
    """Name of the index over key_paths on table_name.

    The readable part is followed by a digest of the exact table name and
    key paths. Index names must be unique across the whole database.
    """
    slug = "_".join(re.sub(r"\W", "_", p) for p in (table_name,) + tuple(key_paths))
    digest = hashlib.sha1(json.dumps([table_name, list(key_paths)]).encode()).hexdigest()[:8]
    return f"idx_{slug}_{digest}"


def build_table(name: str, schema: CollectionSchema) -> Table:
    """Build the SQLAlchemy table for a collection declaration."""
    metadata = MetaData()
    columns = []
    for path in schema.key_paths:
        is_pk = path in schema.primary_key
        if is_pk and schema.auto_increment:
            columns.append(Column(path, Integer, primary_key=True, autoincrement=True))
        else:
            columns.append(Column(path, _Untyped(), primary_key=is_pk, nullable=not is_pk))
    columns.append(Column(VALUE_COLUMN, Text, nullable=False))

    table = Table(name, metadata, *columns, sqlite_autoincrement=schema.auto_increment)
    for index in schema.indexes:
        SAIndex(
            index_name(name, index.key_paths),
            *(table.c[p] for p in index.key_paths),
            unique=index.unique,
        )
    return table


def create_table_sql(name: str, schema: CollectionSchema) -> list[str]:
    """Compile the CREATE TABLE and CREATE INDEX statements for a collection."""
    table = build_table(name, schema)
    statements = [str(CreateTable(table).compile(dialect=_DIALECT)).strip()]
    for index in sorted(table.indexes, key=lambda i: i.name):
        statements.append(str(CreateIndex(index).compile(dialect=_DIALECT)).strip())
    return statements


def drop_table_sql(name: str) -> str:
    table = Table(name, MetaData(), Column(VALUE_COLUMN, Text))
    return str(DropTable(table, if_exists=True).compile(dialect=_DIALECT)).strip()


def table_exists(conn: sqlite3.Connection, name: str) -> bool:
    cursor = conn.execute(
        "SELECT 1 FROM sqlite_master WHERE type = 'table' AND name = ?", (name,)
    )
    return cursor.fetchone() is not None


def table_columns(conn: sqlite3.Connection, name: str) -> list[str]:
    return [row[1] for row in conn.execute(f"PRAGMA table_info({quote(name)})")]


def apply_changes(conn: sqlite3.Connection, changes: Changes) -> None:
    """Apply one version's change set to the connection.

    The caller owns the transaction. A declaration for an existing collection
    replaces its shape: stored documents are copied into a table of the new
    shape with key columns recomputed from the JSON.

    Args:
        conn: Open SQLite connection.
        changes: Collection name to declaration, or REMOVE to drop it.
    """
    for name, schema in changes.items():
        if schema is REMOVE:
            logger.debug(f"Dropping collection {name!r}")
            conn.execute(drop_table_sql(name))
        elif table_exists(conn, name):
            _rebuild_collection(conn, name, schema)
        else:
            logger.debug(f"Creating collection {name!r}: {schema}")
            for statement in create_table_sql(name, schema):
                conn.execute(statement)


def _rebuild_collection(conn: sqlite3.Connection, name: str, schema: CollectionSchema) -> None:
    logger.debug(f"Reshaping collection {name!r}: {schema}")
    staging = f"{name}__reshape"
    old_columns = set(table_columns(conn, name))

    conn.execute(drop_table_sql(staging))
    conn.execute(create_table_sql(staging, schema)[0])

    targets = []
    sources = []
    for path in schema.key_paths:
        if schema.auto_increment and path in schema.primary_key:
            # Generated keys are not part of the document.
            if path not in old_columns:
                continue
            sources.append(quote(path))
        else:
            sources.append(f"json_extract({VALUE_COLUMN}, {_json_path(path)})")
        targets.append(quote(path))
    targets.append(VALUE_COLUMN)
    sources.append(VALUE_COLUMN)

    conn.execute(
        f"INSERT INTO {quote(staging)} ({', '.join(targets)}) "
        f"SELECT {', '.join(sources)} FROM {quote(name)} ORDER BY rowid"
    )
    conn.execute(drop_table_sql(name))
    conn.execute(f"ALTER TABLE {quote(staging)} RENAME TO {quote(name)}")
    for statement in create_table_sql(name, schema)[1:]:
        conn.execute(statement)


def _json_path(key_path: str) -> str:
    segments = ".".join(f'"{s}"' for s in key_path.split("."))
    return f"'$.{segments}'"


class DocumentCodec:
    """Maps documents to rows of a collection's table."""

    def __init__(self, name: str, schema: CollectionSchema):
        self.name = name
        self.schema = schema
        self._paths = [
            p for p in schema.key_paths if not (schema.auto_increment and p in schema.primary_key)
        ]
        columns = ", ".join([quote(p) for p in self._paths] + [VALUE_COLUMN])
        placeholders = ", ".join("?" for _ in range(len(self._paths) + 1))
        self.upsert_sql = f"INSERT OR REPLACE INTO {quote(name)} ({columns}) VALUES ({placeholders})"

    def to_row(self, document: Mapping[str, Any]) -> tuple:
        keys = tuple(extract_key(document, p) for p in self._paths)
        return keys + (json.dumps(document),)

    @staticmethod
    def from_row(row) -> dict[str, Any]:
        return json.loads(row[VALUE_COLUMN])
