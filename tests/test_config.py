"""Tests for configuration loading."""
import tempfile
from datetime import datetime
from pathlib import Path

import pytest
import yaml

from setup_data.core.config import (
    DEFAULT_REFERENCE_DATE,
    DatabaseConfig,
    Settings,
    load_config,
    render_example_config,
)
from setup_data.core.errors import SetupDataError
from setup_data.generators.dataset import GenerationOptions


def _write(tmpdir: str, text: str) -> Path:
    path = Path(tmpdir) / "setup-data.yml"
    path.write_text(text)
    return path


class TestLoadConfig:
    def test_missing_file_uses_defaults(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            config = load_config(Path(tmpdir) / "absent.yml", settings=Settings())

        assert config.database.use_direct_connection is False
        assert config.api.base_url == "http://localhost:5000/api"
        assert config.transform.casing is None
        assert config.generation.seed == 123
        assert config.generation.reference_date == DEFAULT_REFERENCE_DATE

    def test_camel_case_keys(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = _write(tmpdir, """
database:
  useDirectConnection: true
  url: sqlite:///shop.db
api:
  baseUrl: https://example.test/api
  auth:
    type: basic
    username: admin
    password: secret
generation:
  nullProbability: 0.5
  maxItems: 2
  overrides:
    Email: company_email
defaults:
  IsActive: true
""")
            config = load_config(path, settings=Settings())

        assert config.database.use_direct_connection is True
        assert config.database.sqlalchemy_url() == "sqlite:///shop.db"
        assert config.api.auth.type == "basic"
        assert config.generation.null_probability == 0.5
        assert config.generation.overrides == {"Email": "company_email"}
        assert config.defaults == {"IsActive": True}

    def test_invalid_yaml_raises(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = _write(tmpdir, "database: [unclosed\n")

            with pytest.raises(SetupDataError):
                load_config(path, settings=Settings())

    def test_invalid_values_raise(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = _write(tmpdir, "generation:\n  nullProbability: 2\n")

            with pytest.raises(SetupDataError):
                load_config(path, settings=Settings())

    def test_top_level_must_be_mapping(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = _write(tmpdir, "- a\n- b\n")

            with pytest.raises(SetupDataError):
                load_config(path, settings=Settings())

    def test_environment_secrets_win(self):
        settings = Settings(database_url="sqlite://", api_token="env-token")
        with tempfile.TemporaryDirectory() as tmpdir:
            path = _write(tmpdir, "database:\n  url: mysql+pymysql://u@h/db\n")
            config = load_config(path, settings=settings)

        assert config.database.url == "sqlite://"
        assert config.api.auth.token == "env-token"


class TestDatabaseConfig:
    def test_url_from_parts(self):
        config = DatabaseConfig(user="app", password="p@ss", database="shop", host="db", port=3307)

        assert config.sqlalchemy_url() == "mysql+pymysql://app:p%40ss@db:3307/shop"

    def test_database_name_required_without_url(self):
        with pytest.raises(SetupDataError):
            DatabaseConfig().sqlalchemy_url()


def test_example_config_parses():
    raw = yaml.safe_load(render_example_config())

    with tempfile.TemporaryDirectory() as tmpdir:
        path = _write(tmpdir, render_example_config())
        config = load_config(path, settings=Settings())

    assert raw["transform"]["casing"] == "pascal"
    assert config.transform.casing == "pascal"
    assert config.database.database == "shop"
    assert config.generation.reference_date == datetime(2025, 1, 1)


def test_generation_options_from_config():
    with tempfile.TemporaryDirectory() as tmpdir:
        path = _write(tmpdir, "generation:\n  minItems: 1\n  locale: de_DE\n")
        config = load_config(path, settings=Settings())

    options = GenerationOptions.from_config(config.generation, retain_records=False)

    assert options.min_items == 1
    assert options.locale == "de_DE"
    assert options.retain_records is False
