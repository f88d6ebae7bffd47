"""Entry points for reading schema sources of any supported dialect."""
import logging
from pathlib import Path
from typing import Any, Dict, Optional

from setup_data.core.errors import SchemaError
from setup_data.schema.csharp import parse_csharp
from setup_data.schema.json_schema import (
    entity_to_json_schema,
    json_schema_to_entity,
    normalize_json_schema,
    parse_json_document,
    select_schema,
)
from setup_data.schema.relationships import classify_fields
from setup_data.schema.types import EntityDefinition, SchemaDialect
from setup_data.schema.typescript import parse_typescript

log = logging.getLogger(__name__)


def extract_schema(
    source_text: str,
    dialect: SchemaDialect,
    table_name: Optional[str] = None,
    source_path: str = "",
):
    """Extract a schema from source text.

    Returns a normalized JSON Schema dict for ``json_schema`` sources and an
    EntityDefinition for class-like sources.
    """
    if dialect == SchemaDialect.JSON_SCHEMA:
        return normalize_json_schema(parse_json_document(source_text, source_path), table_name)
    if dialect == SchemaDialect.CSHARP:
        return parse_csharp(source_text, source_path)
    if dialect == SchemaDialect.TYPESCRIPT:
        return parse_typescript(source_text, source_path)
    raise SchemaError(f"Unsupported schema dialect: {dialect}", path=source_path or None)


def read_source(path: str | Path) -> str:
    path = Path(path)
    if not path.is_file():
        raise SchemaError("Schema file not found", path=str(path))
    try:
        return path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise SchemaError(f"Could not read schema file: {e}", path=str(path)) from e


def default_entity_name(path: Path) -> str:
    """``category.json`` -> ``Category``."""
    stem = path.stem
    return stem[:1].upper() + stem[1:]


def parse_entity_file(path: str | Path, table_name: Optional[str] = None) -> EntityDefinition:
    """Parse one schema file into an EntityDefinition.

    Class-like files are classified against the names declared in the same
    file; callers building a whole batch reclassify later.
    """
    path = Path(path)
    dialect = SchemaDialect.from_path(path)
    text = read_source(path)
    if dialect != SchemaDialect.JSON_SCHEMA:
        return extract_schema(text, dialect, table_name, str(path))

    document = parse_json_document(text, str(path))
    schema = select_schema(document, table_name)
    name = table_name or schema.get("title") or default_entity_name(path)
    return json_schema_to_entity(schema, name, str(path))


def load_schema(path: str | Path, table_name: Optional[str] = None) -> Dict[str, Any]:
    """Load a JSON Schema dict for any supported schema file."""
    path = Path(path)
    dialect = SchemaDialect.from_path(path)
    text = read_source(path)
    if dialect == SchemaDialect.JSON_SCHEMA:
        return extract_schema(text, dialect, table_name, str(path))
    entity = extract_schema(text, dialect, table_name, str(path))
    log.debug(f"Converted {entity.entity_name} from {path} to JSON Schema")
    return entity_to_json_schema(entity)


def load_entity(path: str | Path, table_name: Optional[str] = None) -> EntityDefinition:
    """Load an EntityDefinition for any supported schema file.

    For JSON Schema documents with ``definitions`` or ``components.schemas``,
    ``$ref`` fields pointing at sibling definitions become navigation fields.
    """
    path = Path(path)
    entity = parse_entity_file(path, table_name)
    if entity.dialect == SchemaDialect.JSON_SCHEMA:
        document = parse_json_document(read_source(path), str(path))
        siblings = set(document.get("definitions") or {})
        siblings |= set(((document.get("components") or {}).get("schemas")) or {})
        classify_fields(entity, siblings | {entity.entity_name})
    return entity
