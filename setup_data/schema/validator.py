"""Validate records against a JSON Schema subset.

Supported keywords: ``required``, ``type``, ``format`` (date-time, date),
``minLength``/``maxLength``, ``pattern``, ``enum``, ``minimum``/``maximum``,
``minItems``/``maxItems``, ``items`` and nested ``properties``.
"""
import json
import logging
import re
from datetime import date, datetime
from pathlib import Path
from typing import Any, Dict, List

from setup_data.core.errors import SetupDataError
from setup_data.core.workflow import Stage
from setup_data.schema.extractor import load_schema

log = logging.getLogger(__name__)


def _type_name(value: Any) -> str:
    if value is None:
        return "null"
    return type(value).__name__


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _valid_datetime(value: str) -> bool:
    try:
        datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return False
    return True


def _valid_date(value: str) -> bool:
    try:
        date.fromisoformat(value)
    except ValueError:
        return False
    return True


def validate_record(record: Dict[str, Any], schema: Dict[str, Any]) -> List[str]:
    """Return the validation messages for one record. Empty means valid."""
    if not isinstance(record, dict):
        return [f"Record should be an object, got {_type_name(record)}"]

    errors = []
    required = schema.get("required") or []
    for name in required:
        if name not in record:
            errors.append(f"Missing required field: {name}")

    for name, prop_schema in (schema.get("properties") or {}).items():
        if name not in record:
            continue
        value = record[name]
        if value is None:
            if name in required and not prop_schema.get("nullable", False):
                errors.append(f"{name} should not be null")
            continue
        errors.extend(validate_property(value, prop_schema, name))
    return errors


def validate_property(value: Any, schema: Dict[str, Any], prop_name: str) -> List[str]:
    errors = []
    schema_type = schema.get("type")
    if isinstance(schema_type, list):
        if value is None and "null" in schema_type:
            return errors
        schema_type = next((t for t in schema_type if t != "null"), None)

    if schema_type == "string":
        if not isinstance(value, str):
            return [f"{prop_name} should be a string, got {_type_name(value)}"]
        fmt = schema.get("format")
        if fmt == "date-time" and not _valid_datetime(value):
            errors.append(f"{prop_name} should be a valid date-time string")
        elif fmt == "date" and not _valid_date(value):
            errors.append(f"{prop_name} should be a valid date string")
        if "minLength" in schema and len(value) < schema["minLength"]:
            errors.append(f"{prop_name} should be at least {schema['minLength']} characters")
        if "maxLength" in schema and len(value) > schema["maxLength"]:
            errors.append(f"{prop_name} should be at most {schema['maxLength']} characters")
        if schema.get("pattern") and not re.search(schema["pattern"], value):
            errors.append(f"{prop_name} does not match required pattern: {schema['pattern']}")

    elif schema_type in ("number", "integer"):
        if not _is_number(value):
            return [f"{prop_name} should be a number, got {_type_name(value)}"]
        if schema_type == "integer" and not float(value).is_integer():
            errors.append(f"{prop_name} should be an integer")
        if "minimum" in schema and value < schema["minimum"]:
            errors.append(f"{prop_name} should be at least {schema['minimum']}")
        if "maximum" in schema and value > schema["maximum"]:
            errors.append(f"{prop_name} should be at most {schema['maximum']}")

    elif schema_type == "boolean":
        if not isinstance(value, bool):
            return [f"{prop_name} should be a boolean, got {_type_name(value)}"]

    elif schema_type == "array":
        if not isinstance(value, list):
            return [f"{prop_name} should be an array, got {_type_name(value)}"]
        if "minItems" in schema and len(value) < schema["minItems"]:
            errors.append(f"{prop_name} should have at least {schema['minItems']} items")
        if "maxItems" in schema and len(value) > schema["maxItems"]:
            errors.append(f"{prop_name} should have at most {schema['maxItems']} items")
        if schema.get("items"):
            for i, item in enumerate(value):
                errors.extend(validate_property(item, schema["items"], f"{prop_name}[{i}]"))

    elif schema_type == "object":
        if not isinstance(value, dict):
            return [f"{prop_name} should be an object, got {_type_name(value)}"]
        if schema.get("properties"):
            errors.extend(f"{prop_name}.{err}" for err in validate_record(value, schema))

    if "enum" in schema and value not in schema["enum"]:
        allowed = ", ".join(str(v) for v in schema["enum"])
        errors.append(f"{prop_name} should be one of: {allowed}")

    return errors


def validate_records(data: Any, schema: Dict[str, Any]) -> List[Dict[str, Any]]:
    """Validate a record or a list of records; returns ``{index, errors}`` entries for failures."""
    records = data if isinstance(data, list) else [data]
    failures = []
    for index, record in enumerate(records):
        errors = validate_record(record, schema)
        if errors:
            failures.append({"index": index, "errors": errors})
    return failures


def validate_file(data: Any, schema_path: str | Path, table_name: str | None = None) -> bool:
    """Validate data against a schema file of any supported dialect.

    Failures and schema loading errors are logged; the return value tells
    whether the data is valid.
    """
    extra = {"stage": Stage.VALIDATE, "entity": table_name or "-"}
    try:
        schema = load_schema(schema_path, table_name)
    except SetupDataError as e:
        log.error(f"Schema validation error: {e}", extra=extra)
        return False

    failures = validate_records(data, schema)
    if failures:
        log.error(f"Schema validation failed:\n{json.dumps(failures, indent=2)}", extra=extra)
        return False
    log.info(f"Validated {len(data) if isinstance(data, list) else 1} record(s) against {schema_path}", extra=extra)
    return True
