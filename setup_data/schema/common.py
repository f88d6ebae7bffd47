"""Helpers shared by the C# and TypeScript class scanners."""
import re
from typing import Dict, List, Optional, Tuple

from setup_data.schema.type_mapping import map_type, split_top_level
from setup_data.schema.types import (
    Attribute,
    EnumMember,
    FieldDefinition,
    FieldKind,
    SchemaDialect,
)

ENUM_REGEX = re.compile(r"\benum\s+(\w+)\s*(?::\s*[\w.]+\s*)?\{([^}]*)\}")

# Markers whose first parameter is an upper bound on string length
LENGTH_MARKERS = {"MaxLength", "StringLength"}


def strip_inline_comment(line: str) -> str:
    """Remove a trailing ``//`` comment, ignoring ``//`` inside string literals."""
    quote = None
    i = 0
    while i < len(line):
        ch = line[i]
        if quote:
            if ch == "\\":
                i += 2
                continue
            if ch == quote:
                quote = None
        elif ch in "\"'`":
            quote = ch
        elif ch == "/" and line[i + 1:i + 2] == "/":
            return line[:i]
        i += 1
    return line


def is_comment_line(line: str) -> bool:
    return line.startswith(("//", "/*", "*"))


def simple_attribute_name(name: str) -> str:
    """``System.ComponentModel.DataAnnotations.RequiredAttribute`` -> ``Required``."""
    name = name.split(".")[-1]
    if name.endswith("Attribute") and len(name) > len("Attribute"):
        name = name[:-len("Attribute")]
    return name


def parse_marker(text: str) -> Optional[Attribute]:
    """Parse ``MaxLength(50)`` or ``Required`` into an Attribute."""
    match = re.match(r"^\s*([\w.]+)\s*(?:\((.*)\))?\s*$", text, re.S)
    if not match:
        return None
    params = split_top_level(match.group(2), ",") if match.group(2) else []
    return Attribute(name=simple_attribute_name(match.group(1)), parameters=params)


def max_length_from(attributes: List[Attribute]) -> Optional[int]:
    """Extract the length bound from the first length marker, if parsable."""
    for attr in attributes:
        if attr.name in LENGTH_MARKERS:
            if not attr.parameters:
                return None
            try:
                return int(attr.parameters[0].strip())
            except ValueError:
                return None
    return None


def _enum_value(text: str):
    text = text.strip()
    if len(text) >= 2 and text[0] == text[-1] and text[0] in "'\"`":
        return text[1:-1]
    try:
        return int(text)
    except ValueError:
        pass
    try:
        return int(text, 0)
    except ValueError:
        return None


def extract_enums(content: str) -> Dict[str, List[EnumMember]]:
    """Extract ``enum Name { A, B = 2 }`` blocks in declaration order.

    Members without an explicit value take their 0-based position among the
    non-empty entries.
    """
    enums = {}
    for match in ENUM_REGEX.finditer(content):
        enum_name = match.group(1)
        body_lines = [strip_inline_comment(line) for line in match.group(2).splitlines()]
        body = " ".join(body_lines)
        # Drop member attributes like [Description("...")]
        body = re.sub(r"\[[^\]]*\]", " ", body)
        entries = [entry.strip() for entry in body.split(",") if entry.strip()]

        members = []
        for position, entry in enumerate(entries):
            name, _, value_text = entry.partition("=")
            value = _enum_value(value_text) if value_text else None
            members.append(EnumMember(name=name.strip(), value=position if value is None else value))
        enums[enum_name] = members
    return enums


def element_field(owner: str, element_type: str, dialect: SchemaDialect) -> FieldDefinition:
    """Build the element definition of a collection field."""
    info = map_type(element_type, dialect)
    items = None
    if info.kind == FieldKind.ARRAY and info.element_type:
        items = element_field(f"{owner}Item", info.element_type, dialect)
    return FieldDefinition(
        name=f"{owner}Item",
        declared_type=element_type,
        kind=info.kind,
        format=info.format,
        is_nullable=info.is_nullable,
        is_required=True,
        items=items,
        enum_values=list(info.literal_values),
    )


def build_field(
    name: str,
    declared_type: str,
    dialect: SchemaDialect,
    attributes: List[Attribute],
    is_required: bool,
    is_nullable: bool = False,
    default_value: Optional[str] = None,
) -> FieldDefinition:
    info = map_type(declared_type, dialect)
    items = None
    if info.kind == FieldKind.ARRAY and info.element_type:
        items = element_field(name, info.element_type, dialect)
    return FieldDefinition(
        name=name,
        declared_type=declared_type,
        kind=info.kind,
        format=info.format,
        is_nullable=is_nullable or info.is_nullable,
        is_required=is_required,
        max_length=max_length_from(attributes),
        default_value=default_value.strip() if default_value else None,
        items=items,
        enum_values=list(info.literal_values),
        attributes=list(attributes),
    )


def split_leading_markers(line: str, opener: str) -> Tuple[List[Attribute], str]:
    """Split leading marker annotations off a line.

    ``opener`` is ``[`` for C# attributes and ``@`` for TypeScript decorators.
    Returns the markers and the remainder of the line.
    """
    markers: List[Attribute] = []
    rest = line.strip()
    while rest.startswith(opener):
        if opener == "[":
            end = _matching_bracket(rest)
            if end == -1:
                break
            for part in split_top_level(rest[1:end], ","):
                marker = parse_marker(part)
                if marker:
                    markers.append(marker)
            rest = rest[end + 1:].strip()
        else:
            match = re.match(r"^@([\w.]+)\s*(\((?:[^()]|\([^()]*\))*\))?\s*", rest)
            if not match:
                break
            marker = parse_marker(match.group(1) + (match.group(2) or ""))
            if marker:
                markers.append(marker)
            rest = rest[match.end():].strip()
    return markers, rest


def _matching_bracket(text: str) -> int:
    depth = 0
    quote = None
    for i, ch in enumerate(text):
        if quote:
            if ch == quote:
                quote = None
            continue
        if ch in "\"'":
            quote = ch
        elif ch == "[":
            depth += 1
        elif ch == "]":
            depth -= 1
            if depth == 0:
                return i
    return -1
