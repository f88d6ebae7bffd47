"""End-to-end tests for the setup-data command line."""
import json
import logging
import tempfile
from pathlib import Path

import pytest
from sqlalchemy import create_engine, text

from setup_data.cli import main

TESTS_DIR = Path(__file__).parent
FIXTURES = TESTS_DIR / "fixtures"
SCHEMAS_DIR = FIXTURES / "schemas"


@pytest.fixture(autouse=True)
def restore_logging():
    """The CLI reconfigures the root logger; put it back afterwards."""
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.fixture
def workdir():
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


def _sqlite_config(workdir: Path) -> Path:
    db_path = workdir / "shop.db"
    engine = create_engine(f"sqlite:///{db_path}")
    with engine.begin() as conn:
        conn.execute(text("CREATE TABLE Product (Id INTEGER PRIMARY KEY, Name TEXT NOT NULL, CategoryId INTEGER, IsActive BOOLEAN)"))
    engine.dispose()

    config_path = workdir / "setup-data.yml"
    config_path.write_text(f"database:\n  useDirectConnection: true\n  url: sqlite:///{db_path}\n")
    return config_path


def _product_rows(workdir: Path):
    engine = create_engine(f"sqlite:///{workdir / 'shop.db'}")
    try:
        with engine.connect() as conn:
            return conn.execute(text("SELECT Id, Name, CategoryId, IsActive FROM Product ORDER BY Id")).all()
    finally:
        engine.dispose()


class TestInit:
    def test_creates_config_once(self, workdir):
        target = workdir / "conf" / "setup-data.yml"

        assert main(["--log-level", "WARNING", "init", "-p", str(target)]) == 0
        assert "useDirectConnection" in target.read_text()
        assert main(["--log-level", "WARNING", "init", "-p", str(target)]) == 1


class TestConvert:
    def test_writes_converted_keys(self, workdir):
        output = workdir / "out" / "products.json"

        code = main(["convert", "-f", str(SCHEMAS_DIR / "products.json"), "-o", str(output), "-c", "snake"])

        assert code == 0
        data = json.loads(output.read_text())
        assert set(data[0]) == {"id", "name", "price", "tags", "status"}

    def test_rejects_unknown_style(self, workdir):
        with pytest.raises(SystemExit):
            main(["convert", "-f", "in.json", "-o", "out.json", "-c", "upper"])


class TestValidate:
    def test_valid_data(self):
        args = ["validate", "-f", str(SCHEMAS_DIR / "products.json"), "-s", str(SCHEMAS_DIR / "product.schema.json")]

        assert main(args) == 0

    def test_invalid_data(self, workdir):
        data = workdir / "bad.json"
        data.write_text(json.dumps([{"id": "x"}]))

        assert main(["validate", "-f", str(data), "-s", str(SCHEMAS_DIR / "product.schema.json")]) == 1

    def test_missing_data_file(self, workdir):
        args = ["validate", "-f", str(workdir / "none.json"), "-s", str(SCHEMAS_DIR / "product.schema.json")]

        assert main(args) == 1


class TestGenerate:
    def test_single_schema(self, workdir):
        output = workdir / "mock.json"
        args = [
            "generate", "-s", str(SCHEMAS_DIR / "product.schema.json"), "-o", str(output),
            "-n", "4", "--seed", "7", "-c", str(workdir / "absent.yml"),
        ]

        assert main(args) == 0
        assert len(json.loads(output.read_text())) == 4

    def test_entity_directory(self, workdir):
        out = workdir / "generated"
        args = [
            "generate-entities", "-d", str(FIXTURES / "entities" / "catalog"), "-o", str(out),
            "-n", "3", "-c", str(workdir / "absent.yml"),
        ]

        assert main(args) == 0
        assert sorted(p.name for p in out.iterdir()) == [
            "category-generated.json", "import_all.py", "product-generated.json",
        ]

    def test_missing_directory_fails(self, workdir):
        args = ["generate-entities", "-d", str(workdir / "nope"), "-c", str(workdir / "absent.yml")]

        assert main(args) == 1


class TestImport:
    def test_imports_with_overrides(self, workdir):
        config = _sqlite_config(workdir)
        data = workdir / "products.json"
        data.write_text(json.dumps([{"Id": 1, "Name": "Lamp", "CategoryId": 4}, {"Id": 2, "Name": "Desk"}]))

        code = main([
            "import", "-f", str(data), "-t", "Product", "-c", str(config),
            "--override-category", "9", "--set", "IsActive=true",
        ])

        assert code == 0
        assert _product_rows(workdir) == [(1, "Lamp", 9, True), (2, "Desk", 9, True)]

    def test_single_index(self, workdir):
        config = _sqlite_config(workdir)
        data = workdir / "products.json"
        data.write_text(json.dumps([{"Id": 1, "Name": "Lamp"}, {"Id": 2, "Name": "Desk"}]))

        assert main(["import", "-f", str(data), "-t", "Product", "-c", str(config), "-i", "1"]) == 0
        assert [row.Name for row in _product_rows(workdir)] == ["Desk"]

    def test_schema_validation_blocks_import(self, workdir):
        config = _sqlite_config(workdir)
        data = workdir / "products.json"
        data.write_text(json.dumps([{"Id": 1}]))
        schema = workdir / "product.json"
        schema.write_text(json.dumps({"required": ["Name"], "properties": {"Name": {"type": "string"}}}))

        code = main(["import", "-f", str(data), "-t", "Product", "-c", str(config), "-s", str(schema)])

        assert code == 1
        assert _product_rows(workdir) == []

    def test_failed_transaction_exits_non_zero(self, workdir):
        config = _sqlite_config(workdir)
        data = workdir / "products.json"
        data.write_text(json.dumps([{"Id": 1, "Name": "Lamp"}, {"Id": 2}]))

        assert main(["import", "-f", str(data), "-t", "Product", "-c", str(config)]) == 1
        assert _product_rows(workdir) == []


def test_version_flag(capsys):
    with pytest.raises(SystemExit) as exc:
        main(["--version"])

    assert exc.value.code == 0
    assert capsys.readouterr().out.startswith("setup-data ")


def test_no_command_prints_help(capsys):
    assert main([]) == 0
    assert "generate-entities" in capsys.readouterr().out
