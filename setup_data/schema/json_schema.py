"""Conversion between JSON Schema documents and EntityDefinition."""
import json
import logging
from typing import Any, Dict, List, Optional

from setup_data.core.errors import SchemaError
from setup_data.schema.types import EntityDefinition, FieldDefinition, FieldKind, SchemaDialect

log = logging.getLogger(__name__)

# JSON Schema passes these through untouched when normalizing
PASSTHROUGH_KEYS = ("type", "title", "properties", "required", "description")

# Keywords copied into FieldDefinition.raw for the synthesizer and validator
RAW_KEYWORDS = (
    "minimum", "maximum", "minLength", "maxLength", "minItems", "maxItems",
    "properties", "required", "pattern", "faker", "format", "description", "enum",
)


def map_field_type(field_type: str) -> FieldKind:
    """Map a JSON Schema (or loose) type name to a FieldKind."""
    type_map = {
        "string": FieldKind.STRING,
        "number": FieldKind.NUMBER,
        "integer": FieldKind.INTEGER,
        "int": FieldKind.INTEGER,
        "boolean": FieldKind.BOOLEAN,
        "bool": FieldKind.BOOLEAN,
        "array": FieldKind.ARRAY,
        "object": FieldKind.OBJECT,
        "datetime": FieldKind.DATE_TIME,
        "date": FieldKind.DATE,
    }
    return type_map.get(field_type.lower(), FieldKind.STRING)


def parse_json_document(text: str, source_path: str = "") -> Dict[str, Any]:
    try:
        document = json.loads(text)
    except json.JSONDecodeError as e:
        raise SchemaError(f"Invalid JSON: {e}", path=source_path or None) from e
    if not isinstance(document, dict):
        raise SchemaError("JSON Schema document must be an object", path=source_path or None)
    return document


def select_schema(document: Dict[str, Any], table_name: Optional[str] = None) -> Dict[str, Any]:
    """Pick the sub-schema for ``table_name`` from ``definitions`` or ``components.schemas``.

    Falls back to the document itself when no sub-schema matches.
    """
    if table_name:
        definitions = document.get("definitions") or {}
        if table_name in definitions:
            return definitions[table_name]
        schemas = (document.get("components") or {}).get("schemas") or {}
        if table_name in schemas:
            return schemas[table_name]
    return document


def normalize_json_schema(document: Dict[str, Any], table_name: Optional[str] = None) -> Dict[str, Any]:
    schema = dict(select_schema(document, table_name))
    schema.setdefault("type", "object")
    return schema


def _ref_name(ref: str) -> str:
    return ref.rsplit("/", 1)[-1]


def _schema_type(prop: Dict[str, Any]):
    """Return ``(type_name, nullable)`` for a property fragment."""
    prop_type = prop.get("type")
    nullable = bool(prop.get("nullable", False))
    if isinstance(prop_type, list):
        nullable = nullable or "null" in prop_type
        non_null = [t for t in prop_type if t != "null"]
        prop_type = non_null[0] if non_null else "string"
    if prop_type is None:
        if "$ref" in prop:
            prop_type = "object"
        elif "properties" in prop:
            prop_type = "object"
        elif "items" in prop:
            prop_type = "array"
        elif "enum" in prop:
            prop_type = "string"
        else:
            prop_type = "string"
    return prop_type, nullable


def field_from_property(name: str, prop: Dict[str, Any], required: bool) -> FieldDefinition:
    """Convert one JSON Schema property into a FieldDefinition."""
    prop_type, nullable = _schema_type(prop)
    kind = map_field_type(prop_type)
    fmt = prop.get("format")
    if kind == FieldKind.STRING and fmt == "date-time":
        kind = FieldKind.DATE_TIME
    elif kind == FieldKind.STRING and fmt == "date":
        kind = FieldKind.DATE

    declared_type = _ref_name(prop["$ref"]) if "$ref" in prop else prop_type
    items = None
    if kind == FieldKind.ARRAY:
        item_schema = prop.get("items") or {"type": "string"}
        items = field_from_property(f"{name}Item", item_schema, True)
        declared_type = f"{items.declared_type}[]"

    max_length = prop.get("maxLength")
    return FieldDefinition(
        name=name,
        declared_type=declared_type,
        kind=kind,
        format=fmt,
        is_nullable=nullable,
        is_required=required,
        max_length=max_length if isinstance(max_length, int) else None,
        default_value=json.dumps(prop["default"]) if "default" in prop else None,
        items=items,
        enum_values=list(prop.get("enum", [])),
        raw={k: prop[k] for k in RAW_KEYWORDS if k in prop},
    )


def json_schema_to_entity(
    schema: Dict[str, Any],
    entity_name: str,
    source_path: str = "",
) -> EntityDefinition:
    """Build an EntityDefinition from an object schema.

    Raises SchemaError when the schema has no ``properties``.
    """
    properties = schema.get("properties")
    if not isinstance(properties, dict):
        raise SchemaError("JSON Schema has no properties", path=source_path or None)
    required = set(schema.get("required", []))
    fields = [field_from_property(name, prop, name in required) for name, prop in properties.items()]
    return EntityDefinition(
        entity_name=entity_name,
        fields=fields,
        source_path=source_path,
        dialect=SchemaDialect.JSON_SCHEMA,
    )


def _default_literal(text: str) -> Any:
    try:
        return json.loads(text)
    except ValueError:
        return text.strip("'\"")


def field_to_json_schema(field_def: FieldDefinition, entity: Optional[EntityDefinition] = None) -> Dict[str, Any]:
    """Convert a FieldDefinition back to a JSON Schema property."""
    schema: Dict[str, Any] = {}
    enum_members = entity.enums.get(field_def.base_type) if entity else None

    if enum_members:
        schema["type"] = "integer" if all(isinstance(m.value, int) for m in enum_members) else "string"
        schema["enum"] = [m.value for m in enum_members]
    elif field_def.kind in (FieldKind.DATE_TIME, FieldKind.DATE):
        schema["type"] = "string"
        schema["format"] = field_def.kind.value
    else:
        schema["type"] = field_def.kind.value
        if field_def.format:
            schema["format"] = field_def.format

    if field_def.enum_values:
        schema["enum"] = list(field_def.enum_values)
    if field_def.max_length is not None:
        schema["maxLength"] = field_def.max_length
    if field_def.default_value is not None and not field_def.is_navigation:
        schema["default"] = _default_literal(field_def.default_value)

    if field_def.kind == FieldKind.ARRAY:
        if field_def.items is not None:
            schema["items"] = field_to_json_schema(field_def.items, entity)
        else:
            schema["items"] = {"type": "string"}

    for key in ("minimum", "maximum", "minItems", "maxItems", "pattern", "faker", "description"):
        if key in field_def.raw:
            schema[key] = field_def.raw[key]

    if field_def.is_nullable:
        schema["nullable"] = True
    return schema


def entity_to_json_schema(entity: EntityDefinition) -> Dict[str, Any]:
    """Generate an object schema for an entity. Navigation fields are left out."""
    properties = {}
    required: List[str] = []
    for f in entity.fields:
        if f.is_navigation:
            continue
        properties[f.name] = field_to_json_schema(f, entity)
        if f.is_required:
            required.append(f.name)

    schema: Dict[str, Any] = {"type": "object", "title": entity.entity_name, "properties": properties}
    if required:
        schema["required"] = required
    return schema
