"""Tests for collection declarations and DDL generation."""

import sqlite3

import pytest

from prstore.store.schema import (
    REMOVE,
    CollectionSchema,
    DocumentCodec,
    Index,
    apply_changes,
    create_table_sql,
    extract_key,
    index_name,
    table_exists,
)


class TestCollectionSchemaParse:
    """Tests for the compact declaration notation."""

    def test_parse_simple_primary_key(self):
        schema = CollectionSchema.parse("repoId")

        assert schema.primary_key == ("repoId",)
        assert schema.indexes == ()
        assert schema.auto_increment is False

    def test_parse_auto_increment(self):
        schema = CollectionSchema.parse("id++, base.repoId")

        assert schema.primary_key == ("id",)
        assert schema.auto_increment is True
        assert schema.indexes == (Index(("base.repoId",)),)

    def test_parse_leading_plus_auto_increment(self):
        assert CollectionSchema.parse("++id").auto_increment is True

    def test_parse_compound_keys_and_unique_index(self):
        schema = CollectionSchema.parse("id++, &[sha+pullRequestId], pullRequestId")

        assert schema.indexes == (
            Index(("sha", "pullRequestId"), unique=True),
            Index(("pullRequestId",)),
        )

    def test_parse_compound_primary_key(self):
        schema = CollectionSchema.parse(
            "[base.repoId+number], base.repoId, [base.repoId+updatedAt]"
        )

        assert schema.primary_key == ("base.repoId", "number")
        assert schema.key_paths == ("base.repoId", "number", "updatedAt")

    def test_parse_empty_raises(self):
        with pytest.raises(ValueError):
            CollectionSchema.parse(" , ")

    def test_compound_auto_increment_rejected(self):
        with pytest.raises(ValueError):
            CollectionSchema(primary_key=("a", "b"), auto_increment=True)

    def test_value_key_path_rejected(self):
        """The document column name cannot double as a key path."""
        with pytest.raises(ValueError, match="reserved"):
            CollectionSchema.parse("name, value")
        with pytest.raises(ValueError, match="reserved"):
            CollectionSchema(primary_key=("id",), indexes=(Index(("Value",)),))


class TestExtractKey:
    """Tests for key path resolution."""

    def test_nested_path(self):
        assert extract_key({"base": {"repoId": 7}}, "base.repoId") == 7

    def test_missing_segment_is_none(self):
        assert extract_key({"base": {}}, "base.repoId") is None
        assert extract_key({"base": None}, "base.repoId") is None
        assert extract_key({}, "number") is None


class TestCreateTableSql:
    """Tests for generated DDL."""

    def test_compound_primary_key(self):
        statements = create_table_sql(
            "pullRequests", CollectionSchema.parse("[base.repoId+number], [base.repoId+updatedAt]")
        )

        assert 'CREATE TABLE "pullRequests"' in statements[0]
        assert 'PRIMARY KEY ("base.repoId", number)' in statements[0]
        name = index_name("pullRequests", ("base.repoId", "updatedAt"))
        assert statements[1].startswith(f'CREATE INDEX "{name}"')

    def test_auto_increment_primary_key(self):
        statements = create_table_sql("items", CollectionSchema.parse("id++"))

        assert "PRIMARY KEY AUTOINCREMENT" in statements[0]

    def test_unique_index(self):
        statements = create_table_sql("items", CollectionSchema.parse("id, &name"))

        assert statements[1].startswith("CREATE UNIQUE INDEX")


class TestApplyChanges:
    """Tests for applying one change set."""

    @pytest.fixture
    def conn(self):
        connection = sqlite3.connect(":memory:")
        connection.row_factory = sqlite3.Row
        yield connection
        connection.close()

    def test_create_and_remove(self, conn: sqlite3.Connection):
        apply_changes(conn, {"items": CollectionSchema.parse("id")})
        assert table_exists(conn, "items")

        apply_changes(conn, {"items": REMOVE})
        assert not table_exists(conn, "items")

    def test_remove_missing_collection_is_noop(self, conn: sqlite3.Connection):
        apply_changes(conn, {"never_created": REMOVE})

        assert not table_exists(conn, "never_created")

    def test_reshape_recomputes_keys_from_documents(self, conn: sqlite3.Connection):
        old = CollectionSchema.parse("id")
        apply_changes(conn, {"items": old})
        codec = DocumentCodec("items", old)
        conn.execute(codec.upsert_sql, codec.to_row({"id": 1, "meta": {"owner": "x"}}))

        apply_changes(conn, {"items": CollectionSchema.parse("[meta.owner+id]")})

        row = conn.execute('SELECT "meta.owner", id, value FROM items').fetchone()
        assert row["meta.owner"] == "x"
        assert row["id"] == 1
        assert DocumentCodec.from_row(row) == {"id": 1, "meta": {"owner": "x"}}

    def test_reshape_keeps_generated_ids(self, conn: sqlite3.Connection):
        old = CollectionSchema.parse("id++")
        apply_changes(conn, {"items": old})
        codec = DocumentCodec("items", old)
        conn.execute(codec.upsert_sql, codec.to_row({"sha": "abc"}))
        conn.execute(codec.upsert_sql, codec.to_row({"sha": "def"}))

        apply_changes(conn, {"items": CollectionSchema.parse("id++, sha")})

        rows = conn.execute("SELECT id, sha FROM items ORDER BY id").fetchall()
        assert [tuple(r) for r in rows] == [(1, "abc"), (2, "def")]

    def test_reshape_conflict_raises(self, conn: sqlite3.Connection):
        old = CollectionSchema.parse("id")
        apply_changes(conn, {"items": old})
        codec = DocumentCodec("items", old)
        conn.execute(codec.upsert_sql, codec.to_row({"id": 1, "kind": "a"}))
        conn.execute(codec.upsert_sql, codec.to_row({"id": 2, "kind": "a"}))

        with pytest.raises(sqlite3.IntegrityError):
            apply_changes(conn, {"items": CollectionSchema.parse("id, &kind")})

    def test_index_names_distinct_within_collection(self, conn: sqlite3.Connection):
        apply_changes(conn, {"items": CollectionSchema.parse("id, [a+b_c], [a_b+c]")})

        names = {
            row[0]
            for row in conn.execute(
                "SELECT name FROM sqlite_master WHERE type = 'index' AND tbl_name = 'items' "
                "AND name NOT LIKE 'sqlite_autoindex%'"
            )
        }
        assert names == {index_name("items", ("a", "b_c")), index_name("items", ("a_b", "c"))}
        assert len(names) == 2

    def test_index_names_distinct_across_collections(self, conn: sqlite3.Connection):
        apply_changes(
            conn,
            {"a": CollectionSchema.parse("id, b_c"), "a_b": CollectionSchema.parse("id, c")},
        )

        assert table_exists(conn, "a")
        assert table_exists(conn, "a_b")
        assert index_name("a", ("b_c",)) != index_name("a_b", ("c",))


class TestDocumentCodec:
    """Tests for document to row mapping."""

    def test_upsert_skips_generated_key(self):
        codec = DocumentCodec("items", CollectionSchema.parse("id++, sha"))

        assert codec.upsert_sql == 'INSERT OR REPLACE INTO items (sha, value) VALUES (?, ?)'
        assert codec.to_row({"sha": "abc"}) == ("abc", '{"sha": "abc"}')
