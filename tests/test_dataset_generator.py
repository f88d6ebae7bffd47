"""Tests for batch and single-schema mock data generation."""
import json
import tempfile
from pathlib import Path

from setup_data.generators.dataset import GenerationOptions, generate_all, generate_entities_from_directory, record_ids
from setup_data.generators.import_script import IMPORT_SCRIPT_NAME, render_import_script
from setup_data.generators.mock import generate_mock_data
from setup_data.graph.builder import build_dependency_graph, build_entities
from setup_data.graph.toposort import topo_sort
from setup_data.schema.extractor import load_schema
from setup_data.schema.types import EntityDefinition, FieldDefinition, FieldKind
from setup_data.schema.validator import validate_records

TESTS_DIR = Path(__file__).parent
FIXTURES = TESTS_DIR / "fixtures"
ENTITIES_DIR = FIXTURES / "entities"


class TestCatalogScenario:
    def test_children_reference_generated_parents(self):
        data = generate_entities_from_directory(ENTITIES_DIR / "catalog", count=3, seed=123)

        assert list(data) == ["Category", "Product"]
        assert [c["Id"] for c in data["Category"]] == [1, 2, 3]
        assert [p["Id"] for p in data["Product"]] == [1, 2, 3]
        assert all(p["CategoryId"] in (1, 2, 3) for p in data["Product"])
        assert all(isinstance(p["Name"], str) and p["Name"] for p in data["Product"])

    def test_per_entity_counts_are_reproducible(self):
        entities = build_entities(ENTITIES_DIR / "catalog")
        order = topo_sort(build_dependency_graph(entities))

        first = generate_all(entities, order, count=3, seed=123, counts={"Product": 5})
        second = generate_all(entities, order, count=3, seed=123, counts={"Product": 5})

        category_ids = {c["Id"] for c in first["Category"]}
        assert len(first["Category"]) == 3
        assert len(first["Product"]) == 5
        assert category_ids == {1, 2, 3}
        assert all(p["CategoryId"] in category_ids for p in first["Product"])
        assert second["Product"] == first["Product"]

    def test_entity_named_keys(self):
        data = generate_entities_from_directory(ENTITIES_DIR / "ef_keys", count=4, seed=123)

        assert [c["CategoryId"] for c in data["Category"]] == [1, 2, 3, 4]
        assert [p["ProductId"] for p in data["Product"]] == [1, 2, 3, 4]
        assert all(p["CategoryId"] in (1, 2, 3, 4) for p in data["Product"])


class TestShopDataset:
    def test_files_written_in_dependency_order(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            out = Path(tmpdir)
            generate_entities_from_directory(ENTITIES_DIR / "shop", out, count=5, seed=123)

            names = sorted(p.name for p in out.iterdir())
            script = (out / IMPORT_SCRIPT_NAME).read_text()
            users = json.loads((out / "user-generated.json").read_text())

        assert names == [
            "category-generated.json", "import_all.py", "order-generated.json",
            "orderitem-generated.json", "product-generated.json", "user-generated.json",
        ]
        positions = [script.index(f'"{name}"') for name in ["Category", "User", "Order", "Product", "OrderItem"]]
        assert positions == sorted(positions)
        assert len(users) == 5

    def test_foreign_keys_are_sound(self):
        data = generate_entities_from_directory(ENTITIES_DIR / "shop", count=10, seed=123)

        user_ids = {u["Id"] for u in data["User"]}
        order_ids = {o["Id"] for o in data["Order"]}
        product_ids = {p["Id"] for p in data["Product"]}
        category_ids = {c["Id"] for c in data["Category"]}

        assert all(o["UserId"] in user_ids for o in data["Order"])
        assert all(p["CategoryId"] in category_ids for p in data["Product"])
        assert all(i["OrderId"] in order_ids and i["ProductId"] in product_ids for i in data["OrderItem"])

    def test_navigation_fields_are_not_emitted(self):
        data = generate_entities_from_directory(ENTITIES_DIR / "shop", count=2, seed=123)

        assert "Products" not in data["Category"][0]
        assert "Category" not in data["Product"][0]
        assert set(data["OrderItem"][0]) == {"Id", "OrderId", "ProductId", "Quantity", "UnitPrice"}

    def test_non_nullable_fields_always_have_values(self):
        entities = build_entities(ENTITIES_DIR / "shop")
        data = generate_entities_from_directory(ENTITIES_DIR / "shop", count=10, seed=99)

        for name, records in data.items():
            for f in entities[name].fields:
                if f.is_navigation or f.is_nullable:
                    continue
                assert all(r[f.name] is not None for r in records), f"{name}.{f.name}"

    def test_enum_values_come_from_members(self):
        data = generate_entities_from_directory(ENTITIES_DIR / "shop", count=20, seed=123)

        assert {u["Role"] for u in data["User"]} <= {0, 1, 2}
        assert {o["Status"] for o in data["Order"]} <= {0, 5, 2}

    def test_values_match_declared_kinds(self):
        data = generate_entities_from_directory(ENTITIES_DIR / "shop", count=5, seed=123)
        product = data["Product"][0]

        assert isinstance(product["Price"], float)
        assert isinstance(product["StockQuantity"], int)
        assert isinstance(product["IsActive"], bool)
        assert isinstance(product["Tags"], list)
        assert len(product["Name"]) <= 80

    def test_records_not_retained_when_disabled(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            out = Path(tmpdir)
            options = GenerationOptions(retain_records=False)
            data = generate_entities_from_directory(ENTITIES_DIR / "catalog", out, count=4, seed=1, options=options)

            products = json.loads((out / "product-generated.json").read_text())

        assert data == {"Category": [], "Product": []}
        assert all(p["CategoryId"] in (1, 2, 3, 4) for p in products)


class TestDeterminism:
    def _generate(self, seed):
        with tempfile.TemporaryDirectory() as tmpdir:
            out = Path(tmpdir)
            generate_entities_from_directory(ENTITIES_DIR / "shop", out, count=5, seed=seed)
            return {p.name: p.read_text() for p in out.iterdir()}

    def test_same_seed_same_files(self):
        assert self._generate(123) == self._generate(123)

    def test_different_seed_different_data(self):
        first = self._generate(123)
        second = self._generate(124)

        assert first["user-generated.json"] != second["user-generated.json"]


class TestCycles:
    def test_foreign_key_into_cycle_member_is_empty(self):
        data = generate_entities_from_directory(ENTITIES_DIR / "cyclic", count=4, seed=123)

        assert list(data) == ["Book", "Author"]
        assert all(b["AuthorId"] is None for b in data["Book"])
        assert all(a["BookId"] in (1, 2, 3, 4) for a in data["Author"])


def test_record_ids_without_key_are_positions():
    entity = EntityDefinition(entity_name="Log", fields=[FieldDefinition("Message", "string", FieldKind.STRING)])

    assert record_ids(entity, [{"Message": "a"}, {"Message": "b"}]) == [1, 2]


def test_import_script_is_valid_python():
    script = render_import_script(["Category", "Product"])

    compile(script, IMPORT_SCRIPT_NAME, "exec")
    assert '("Category", "category-generated.json"),' in script
    assert '"-m", "setup_data", "import"' in script


class TestMockData:
    def test_json_schema_records_validate(self):
        schema_path = FIXTURES / "schemas" / "product.schema.json"

        records = generate_mock_data(schema_path, count=25, seed=42)

        assert len(records) == 25
        assert validate_records(records, load_schema(schema_path)) == []
        assert [r["id"] for r in records[:3]] == [1, 2, 3]

    def test_faker_keyword_is_used(self):
        records = generate_mock_data(FIXTURES / "schemas" / "product.schema.json", count=5, seed=42)

        assert all("@" in r["email"] for r in records)

    def test_class_source(self):
        records = generate_mock_data(ENTITIES_DIR / "shop" / "User.cs", count=10, seed=5)

        assert {r["Role"] for r in records} <= {0, 1, 2}
        assert all("@" in r["Email"] for r in records)

    def test_seeded_runs_match(self):
        path = FIXTURES / "typescript" / "customer.ts"

        assert generate_mock_data(path, count=3, seed=8) == generate_mock_data(path, count=3, seed=8)

    def test_overrides_from_options(self):
        options = GenerationOptions(overrides={"sku": "ean8"})

        records = generate_mock_data(FIXTURES / "schemas" / "product.schema.json", count=3, seed=1, options=options)

        assert all(r["sku"].isdigit() and len(r["sku"]) == 8 for r in records)
