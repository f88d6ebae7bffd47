"""Tests for entity discovery, dependency graph and ordering."""
import logging
import tempfile
from pathlib import Path

import pytest

from setup_data.core.errors import SchemaError
from setup_data.graph.builder import (
    DependencyNode,
    build_dependency_graph,
    build_entities,
    list_schema_files,
)
from setup_data.graph.toposort import resolve_dependency_order, topo_sort
from setup_data.schema.types import EntityDefinition, RelationshipKind

TESTS_DIR = Path(__file__).parent
ENTITIES_DIR = TESTS_DIR / "fixtures" / "entities"


def _graph(edges):
    """Build a graph from ``{name: [dependencies]}``."""
    return {
        name: DependencyNode(entity=EntityDefinition(entity_name=name), dependencies=tuple(deps))
        for name, deps in edges.items()
    }


class TestBuildEntities:
    def test_only_eligible_files_are_listed(self):
        names = [p.name for p in list_schema_files(ENTITIES_DIR / "shop")]

        assert "README.txt" not in names
        assert names == sorted(names)

    def test_file_without_class_is_skipped(self, caplog):
        with caplog.at_level(logging.WARNING):
            entities = build_entities(ENTITIES_DIR / "shop")

        assert set(entities) == {"Category", "Order", "OrderItem", "Product", "User"}
        assert "Enums.cs" in caplog.text

    def test_enums_from_other_files_are_attached(self):
        entities = build_entities(ENTITIES_DIR / "shop")

        assert [m.value for m in entities["Order"].enums["OrderStatus"]] == [0, 5, 2]
        assert "OrderStatus" not in entities["Product"].enums

    def test_fields_classified_against_whole_batch(self):
        entities = build_entities(ENTITIES_DIR / "shop")
        product = entities["Product"]
        category = entities["Category"]

        assert product.get_field("Category").is_navigation is True
        assert category.get_field("Products").is_array_of_entities is True
        assert category.get_field("Products").target_entity == "Product"
        kinds = {r.field_name: r.kind for r in product.relationships}
        assert kinds == {"CategoryId": RelationshipKind.MANY_TO_ONE, "Category": RelationshipKind.ONE_TO_ONE}

    def test_duplicate_entity_name_keeps_first(self, caplog):
        with tempfile.TemporaryDirectory() as tmpdir:
            tmp = Path(tmpdir)
            (tmp / "A.cs").write_text("public class Widget\n{\n    public int Id { get; set; }\n}\n")
            (tmp / "B.cs").write_text("public class Widget\n{\n    public string Code { get; set; }\n}\n")

            with caplog.at_level(logging.WARNING):
                entities = build_entities(tmp)

        assert list(entities) == ["Widget"]
        assert entities["Widget"].source_path.endswith("A.cs")
        assert "already defined" in caplog.text

    def test_missing_directory_raises(self):
        with pytest.raises(SchemaError):
            build_entities(ENTITIES_DIR / "does-not-exist")


class TestDependencyGraph:
    def test_edges_follow_foreign_keys(self):
        graph = build_dependency_graph(build_entities(ENTITIES_DIR / "shop"))

        assert graph["Product"].dependencies == ("Category",)
        assert graph["Order"].dependencies == ("User",)
        assert graph["OrderItem"].dependencies == ("Order", "Product")
        assert graph["Category"].dependencies == ()

    def test_own_key_is_not_a_dependency(self):
        entities = build_entities(ENTITIES_DIR / "ef_keys")
        graph = build_dependency_graph(entities)
        result = resolve_dependency_order(graph)

        assert entities["Category"].primary_key.name == "CategoryId"
        assert graph["Category"].dependencies == ()
        assert graph["Product"].dependencies == ("Category",)
        assert result.order == ["Category", "Product"]
        assert result.cycle_members == frozenset()

    def test_graph_is_read_only(self):
        graph = build_dependency_graph(build_entities(ENTITIES_DIR / "catalog"))

        with pytest.raises(TypeError):
            graph["Extra"] = graph["Product"]


class TestTopoSort:
    def test_shop_order(self):
        graph = build_dependency_graph(build_entities(ENTITIES_DIR / "shop"))

        assert topo_sort(graph) == ["Category", "User", "Order", "Product", "OrderItem"]

    def test_parents_precede_children(self):
        graph = _graph({"C": ["B"], "B": ["A"], "A": []})

        assert topo_sort(graph) == ["A", "B", "C"]

    def test_two_node_cycle(self):
        graph = _graph({"X": ["Y"], "Y": ["X"]})

        result = resolve_dependency_order(graph)

        assert result.order == ["Y", "X"]
        assert result.cycle_members == frozenset({"X"})
        assert result.cycles == [("X", "Y", "X")]

    def test_self_reference_is_a_cycle(self):
        graph = _graph({"Employee": ["Employee"]})

        result = resolve_dependency_order(graph)

        assert result.order == ["Employee"]
        assert "Employee" in result.cycle_members

    def test_cycle_is_logged(self, caplog):
        graph = _graph({"X": ["Y"], "Y": ["X"]})

        with caplog.at_level(logging.WARNING):
            topo_sort(graph)

        assert "Cyclic dependency: X -> Y -> X" in caplog.text

    def test_every_node_appears_once(self):
        graph = _graph({"A": ["B", "C"], "B": ["C"], "C": ["A"], "D": []})

        order = topo_sort(graph)

        assert sorted(order) == ["A", "B", "C", "D"]

    def test_calls_do_not_share_state(self):
        graph = _graph({"X": ["Y"], "Y": ["X"]})

        assert topo_sort(graph) == topo_sort(graph)

    def test_cyclic_fixture(self):
        graph = build_dependency_graph(build_entities(ENTITIES_DIR / "cyclic"))

        result = resolve_dependency_order(graph)

        assert result.order == ["Book", "Author"]
        assert result.cycle_members == frozenset({"Author"})
