"""Heuristic scanner for TypeScript classes, interfaces and object type aliases."""
import logging
import re
from typing import List, Optional

from setup_data.core.errors import SchemaError
from setup_data.schema.common import (
    build_field,
    extract_enums,
    is_comment_line,
    split_leading_markers,
    strip_inline_comment,
)
from setup_data.schema.relationships import classify_fields
from setup_data.schema.types import Attribute, EntityDefinition, FieldDefinition, SchemaDialect

log = logging.getLogger(__name__)

DECLARATION_REGEX = re.compile(
    r"^\s*(?:export\s+)?(?:default\s+)?(?:declare\s+)?(?:abstract\s+)?"
    r"(?:(?:class|interface)\s+(?P<name>\w+)|type\s+(?P<alias>\w+)\s*=\s*\{)",
    re.M,
)

FIELD_REGEX = re.compile(
    r"^(?:(?:public|private|protected|readonly|declare|static|override)\s+)*"
    r"(?P<name>[A-Za-z_$][\w$]*)(?P<marker>[?!])?\s*:\s*(?P<type>[^;=]+?)\s*"
    r"(?:=\s*(?P<default>[^;]+?))?\s*[;,]?$"
)


def find_declarations(content: str) -> List[str]:
    return [m.group("name") or m.group("alias") for m in DECLARATION_REGEX.finditer(content)]


def _build_member(match: re.Match, markers: List[Attribute]) -> FieldDefinition:
    optional = match.group("marker") == "?"
    return build_field(
        name=match.group("name"),
        declared_type=" ".join(match.group("type").split()),
        dialect=SchemaDialect.TYPESCRIPT,
        attributes=markers,
        is_required=not optional,
        is_nullable=optional,
        default_value=match.group("default"),
    )


def parse_typescript(content: str, source_path: str = "") -> EntityDefinition:
    """Extract the first class, interface or object type declared in ``content``.

    Members are only read at the top level of the declaration body, so
    method bodies and nested object literals are skipped.
    """
    names = find_declarations(content)
    if not names:
        raise SchemaError("No class, interface or type declaration found", path=source_path or None)
    entity_name = names[0]

    fields: List[FieldDefinition] = []
    pending: List[Attribute] = []
    depth = 0
    body_depth: Optional[int] = None
    opened = False

    for raw_line in content.splitlines():
        line = strip_inline_comment(raw_line).strip()
        if not line or is_comment_line(line):
            continue
        delta = line.count("{") - line.count("}")

        if body_depth is None:
            if DECLARATION_REGEX.match(line):
                body_depth = depth + 1
                opened = delta > 0
            depth += delta
            continue

        if not opened:
            depth += delta
            opened = depth >= body_depth
            continue

        if depth < body_depth:
            break

        if depth == body_depth:
            markers, rest = split_leading_markers(line, "@")
            pending.extend(markers)
            if rest:
                match = FIELD_REGEX.match(rest)
                if match and delta == 0:
                    fields.append(_build_member(match, pending))
                pending = []
        else:
            pending = []

        depth += delta
        if depth < body_depth:
            break

    entity = EntityDefinition(
        entity_name=entity_name,
        fields=fields,
        enums=extract_enums(content),
        source_path=source_path,
        dialect=SchemaDialect.TYPESCRIPT,
    )
    return classify_fields(entity, names)
