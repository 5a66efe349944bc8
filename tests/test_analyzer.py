"""Tests for the shape analyzer: table discovery, columns and widening."""

from __future__ import annotations

import pytest

from JsonToCSV.core.analyzer import JsonStructureAnalyzer
from JsonToCSV.core.identifiers import IdentifierAssigner
from JsonToCSV.core.schema import InferenceSession, TableKind, foreign_key_name, singular
from JsonToCSV.core.tree import NodeKind, build_tree


def analyze(json_data) -> InferenceSession:
    tree = build_tree(json_data)
    IdentifierAssigner(tree).assign()
    session = InferenceSession(tree)
    JsonStructureAnalyzer(session).analyze()
    return session


# ---------------------------------------------------------------------------
# Naming helpers
# ---------------------------------------------------------------------------


class TestNaming:
    @pytest.mark.parametrize(
        ("name", "expected"),
        [("items", "item"), ("tags", "tag"), ("s", "s"), ("root", "root"), ("", "")],
    )
    def test_singular(self, name: str, expected: str) -> None:
        assert singular(name) == expected

    def test_foreign_key_name(self) -> None:
        assert foreign_key_name("items") == "item_id"
        assert foreign_key_name("root") == "root_id"


# ---------------------------------------------------------------------------
# Table discovery
# ---------------------------------------------------------------------------


class TestTables:
    def test_flat_object(self) -> None:
        session = analyze({"name": "Alice", "age": 30})
        root = session.tables["root"]
        assert root.kind == TableKind.ROOT
        assert root.columns == ["id", "name", "age"]

    def test_scalar_array_becomes_junction(self) -> None:
        session = analyze({"tags": ["a", "b", "c"]})
        assert list(session.tables) == ["root", "tags"]
        tags = session.tables["tags"]
        assert tags.kind == TableKind.JUNCTION
        assert tags.columns == ["id", "root_id", "seq", "value"]

    def test_object_array_becomes_child_table(self) -> None:
        session = analyze({"items": [{"sku": "X"}, {"sku": "Y"}]})
        items = session.tables["items"]
        assert items.kind == TableKind.ARRAY
        assert items.columns == ["id", "root_id", "seq", "sku"]

    def test_nested_object_links_both_ways(self) -> None:
        session = analyze({"author": {"uid": 1, "name": "Bob"}})
        assert session.tables["root"].columns == ["id", "author_id"]
        assert session.tables["author"].columns == ["id", "root_id", "uid", "name"]

    def test_scalars_precede_foreign_keys(self) -> None:
        session = analyze({"author": {"name": "Bob"}, "title": "T"})
        assert session.tables["root"].columns == ["id", "title", "author_id"]

    def test_child_of_array_table_uses_singular_parent(self) -> None:
        session = analyze({"items": [{"tags": ["x"]}]})
        assert session.tables["tags"].columns == ["id", "item_id", "seq", "value"]

    def test_root_array(self) -> None:
        session = analyze([{"name": "x"}, {"name": "y", "age": 3}])
        root = session.tables["root"]
        assert root.kind == TableKind.ROOT
        assert root.columns == ["id", "seq", "name", "age"]

    @pytest.mark.parametrize("doc", ['"text"', "42", '["a", "b"]', "[]"])
    def test_roots_without_objects_produce_nothing(self, doc: str) -> None:
        assert analyze(doc).tables == {}

    def test_object_tables_are_recorded_on_nodes(self) -> None:
        session = analyze({"items": [{"sku": "X"}]})
        tables = {n.table_name for n in session.tree.nodes if n.kind == NodeKind.OBJECT}
        assert tables == {"root", "items"}


class TestSkippedArrays:
    def test_empty_and_mixed_arrays_are_not_decomposed(self) -> None:
        session = analyze({"name": "x", "empty": [], "mixed": [1, {"a": 1}], "grid": [[1, 2], [3]]})
        assert list(session.tables) == ["root"]
        assert session.tables["root"].columns == ["id", "name"]


# ---------------------------------------------------------------------------
# Routing and widening
# ---------------------------------------------------------------------------


class TestWidening:
    def test_heterogeneous_elements_widen_schema(self) -> None:
        session = analyze({"items": [{"sku": "X"}, {"qty": 2, "sku": "Y"}, {"note": None}]})
        assert session.tables["items"].columns == ["id", "root_id", "seq", "sku", "qty", "note"]

    def test_columns_only_grow_during_analysis(self) -> None:
        tree = build_tree({"items": [{"a": 1}, {"b": 2}, {"a": 3, "c": 4}]})
        IdentifierAssigner(tree).assign()
        session = InferenceSession(tree)
        analyzer = JsonStructureAnalyzer(session)

        snapshots = []
        original = analyzer._analyze_object

        def spy(index, table):
            original(index, table)
            snapshots.append(list(table.columns))

        analyzer._analyze_object = spy
        analyzer.analyze()

        items = [s for s in snapshots if "seq" in s]
        for before, after in zip(items, items[1:]):
            assert after[: len(before)] == before

    def test_same_position_shares_a_table(self) -> None:
        session = analyze({"posts": [{"author": {"name": "a"}}, {"author": {"name": "b", "mail": "m"}}]})
        assert list(session.tables) == ["root", "posts", "author"]
        assert session.tables["author"].columns == ["id", "post_id", "name", "mail"]

    def test_same_key_elsewhere_gets_own_table(self) -> None:
        session = analyze({"author": {"name": "a"}, "posts": [{"author": {"name": "b"}}]})
        assert list(session.tables) == ["root", "author", "posts", "author1"]
        assert session.tables["author1"].source_key == "author"
        assert session.tables["posts"].columns == ["id", "root_id", "seq", "author1_id"]

    def test_field_named_like_synthetic_column(self) -> None:
        session = analyze({"items": [{"id": 7, "seq": 9, "sku": "X"}]})
        items = session.tables["items"]
        assert items.columns == ["id", "root_id", "seq", "id_2", "seq_2", "sku"]
        assert items.field_columns == {"id": "id_2", "seq": "seq_2", "sku": "sku"}

    def test_blank_key_gets_fallback_column(self) -> None:
        session = analyze({"": 1, "  ": 2, "name": "x"})
        root = session.tables["root"]
        assert root.columns == ["id", "field", "name"]
        assert root.field_columns == {"": "field", "name": "name"}

    def test_names_differing_only_in_file_safety_or_case(self) -> None:
        session = analyze({"a/b": [{"p": 1}], "a_b": [{"q": 2}], "Tags": ["x"], "tags": ["y"]})
        assert list(session.tables) == ["root", "a/b", "a_b1", "Tags", "tags1"]

    def test_keys_are_trimmed(self) -> None:
        session = analyze({" name ": "x", " tags ": ["a"]})
        assert session.tables["root"].columns == ["id", "name"]
        assert "tags" in session.tables
