"""Heuristic scanner for C#-flavored entity classes.

Only auto-properties (``public string Name { get; set; }``) are picked up.
Attribute markers on the lines directly above a property apply to it; any
other statement in between drops them.
"""
import logging
import re
from typing import List

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

CLASS_REGEX = re.compile(
    r"^\s*(?:\[[^\]]*\]\s*)*(?:(?:public|internal|private|protected|sealed|abstract|partial|static)\s+)*"
    r"(?:class|record|interface)\s+(\w+)",
    re.M,
)

PROPERTY_REGEX = re.compile(
    r"^(?:(?:public|protected|internal|private)\s+)?"
    r"(?P<modifiers>(?:(?:virtual|override|required|new|static|sealed|abstract)\s+)*)"
    r"(?P<type>[\w.<>\[\]?,\s()]+?)\s+(?P<name>\w+)\s*"
    r"\{\s*(?:\w+\s+)?get;\s*(?:(?:\w+\s+)?(?:set|init);\s*)?\}"
    r"(?:\s*=\s*(?P<default>[^;]+);)?"
)


def find_class_names(content: str) -> List[str]:
    return CLASS_REGEX.findall(content)


def _build_property(match: re.Match, markers: List[Attribute]) -> FieldDefinition:
    modifiers = match.group("modifiers").split()
    required = "required" in modifiers or any(m.name == "Required" for m in markers)
    return build_field(
        name=match.group("name"),
        declared_type=" ".join(match.group("type").split()),
        dialect=SchemaDialect.CSHARP,
        attributes=markers,
        is_required=required,
        default_value=match.group("default"),
    )


def parse_csharp(content: str, source_path: str = "") -> EntityDefinition:
    """Extract the first class declared in ``content``.

    Raises SchemaError when the text declares no class.
    """
    class_names = find_class_names(content)
    if not class_names:
        raise SchemaError("No class declaration found", path=source_path or None)
    entity_name = class_names[0]

    fields: List[FieldDefinition] = []
    pending: List[Attribute] = []
    seen_class = False

    for raw_line in content.splitlines():
        line = strip_inline_comment(raw_line).strip()
        if not line or is_comment_line(line):
            continue

        if CLASS_REGEX.match(line):
            if seen_class:
                # One entity per file; later classes are ignored
                break
            seen_class = True
            pending = []
            continue

        markers, rest = split_leading_markers(line, "[")
        pending.extend(markers)
        if not rest:
            continue

        match = PROPERTY_REGEX.match(rest)
        if match:
            fields.append(_build_property(match, pending))
        pending = []

    if len(class_names) > 1:
        log.debug(f"{source_path or entity_name}: using {entity_name}, ignoring {class_names[1:]}")

    entity = EntityDefinition(
        entity_name=entity_name,
        fields=fields,
        enums=extract_enums(content),
        source_path=source_path,
        dialect=SchemaDialect.CSHARP,
    )
    return classify_fields(entity, class_names)
