"""Map source-level type tokens to coarse field kinds.

C# and TypeScript declarations are mapped through fixed tables. Anything the
tables do not know maps to ``object``; extraction never fails because of a
single unknown type.
"""
from dataclasses import dataclass, field
from typing import Any, List, Optional, Tuple

from setup_data.schema.types import FieldKind, SchemaDialect

CSHARP_TYPES = {
    "string": (FieldKind.STRING, None),
    "char": (FieldKind.STRING, None),
    "guid": (FieldKind.STRING, "uuid"),
    "int": (FieldKind.INTEGER, None),
    "int16": (FieldKind.INTEGER, None),
    "int32": (FieldKind.INTEGER, None),
    "int64": (FieldKind.INTEGER, None),
    "uint": (FieldKind.INTEGER, None),
    "uint16": (FieldKind.INTEGER, None),
    "uint32": (FieldKind.INTEGER, None),
    "uint64": (FieldKind.INTEGER, None),
    "long": (FieldKind.INTEGER, None),
    "ulong": (FieldKind.INTEGER, None),
    "short": (FieldKind.INTEGER, None),
    "ushort": (FieldKind.INTEGER, None),
    "byte": (FieldKind.INTEGER, None),
    "sbyte": (FieldKind.INTEGER, None),
    "decimal": (FieldKind.NUMBER, None),
    "double": (FieldKind.NUMBER, None),
    "float": (FieldKind.NUMBER, None),
    "single": (FieldKind.NUMBER, None),
    "bool": (FieldKind.BOOLEAN, None),
    "boolean": (FieldKind.BOOLEAN, None),
    "datetime": (FieldKind.DATE_TIME, "date-time"),
    "datetimeoffset": (FieldKind.DATE_TIME, "date-time"),
    "timespan": (FieldKind.DATE_TIME, "date-time"),
    "dateonly": (FieldKind.DATE, "date"),
    "date": (FieldKind.DATE, "date"),
}

TYPESCRIPT_TYPES = {
    "string": (FieldKind.STRING, None),
    "number": (FieldKind.NUMBER, None),
    "bigint": (FieldKind.INTEGER, None),
    "boolean": (FieldKind.BOOLEAN, None),
    "date": (FieldKind.DATE_TIME, "date-time"),
}

CSHARP_COLLECTIONS = {
    "list", "ilist", "icollection", "ienumerable", "hashset", "iset",
    "collection", "ireadonlylist", "ireadonlycollection", "observablecollection",
}
TYPESCRIPT_COLLECTIONS = {"array", "readonlyarray", "set"}

# Key/value containers are stored as plain objects
MAP_WRAPPERS = {"dictionary", "idictionary", "ireadonlydictionary", "record", "map"}

# Types that can never name an entity
OPAQUE_TYPES = {"object", "dynamic", "any", "unknown", "void", "never"}

NULL_TOKENS = {"null", "undefined"}


@dataclass
class TypeInfo:
    kind: FieldKind
    base: str
    format: Optional[str] = None
    is_nullable: bool = False
    element_type: Optional[str] = None
    literal_values: List[Any] = field(default_factory=list)


def split_top_level(text: str, separator: str) -> List[str]:
    """Split on a separator, ignoring separators nested in brackets."""
    parts = []
    depth = 0
    current = []
    for ch in text:
        if ch in "<([{":
            depth += 1
        elif ch in ">)]}":
            depth -= 1
        if ch == separator and depth == 0:
            parts.append("".join(current).strip())
            current = []
            continue
        current.append(ch)
    parts.append("".join(current).strip())
    return [p for p in parts if p]


def split_generic(type_name: str) -> Tuple[str, List[str]]:
    """Split ``List<OrderItem>`` into ``("List", ["OrderItem"])``."""
    type_name = type_name.strip()
    start = type_name.find("<")
    if start == -1 or not type_name.endswith(">"):
        return type_name, []
    wrapper = type_name[:start].strip()
    args = split_top_level(type_name[start + 1:-1], ",")
    return wrapper, args


def _simple_name(type_name: str) -> str:
    """Drop namespace qualifiers: ``System.String`` -> ``String``."""
    return type_name.strip().split(".")[-1]


def _types_for(dialect: SchemaDialect) -> dict:
    return TYPESCRIPT_TYPES if dialect == SchemaDialect.TYPESCRIPT else CSHARP_TYPES


def _collections_for(dialect: SchemaDialect) -> set:
    return TYPESCRIPT_COLLECTIONS if dialect == SchemaDialect.TYPESCRIPT else CSHARP_COLLECTIONS


def is_primitive(type_name: str, dialect: SchemaDialect) -> bool:
    """Check if a (nullable-stripped) type token is a built-in scalar."""
    name = _simple_name(type_name.rstrip("?")).lower()
    return name in _types_for(dialect) or name in OPAQUE_TYPES


def collection_element(type_name: str, dialect: SchemaDialect) -> Optional[str]:
    """Return the element type of a collection type, or None for scalars."""
    type_name = type_name.strip().rstrip("?").strip()
    if type_name.endswith("[]"):
        element = type_name[:-2].strip()
        if element.startswith("(") and element.endswith(")"):
            element = element[1:-1].strip()
        return element
    wrapper, args = split_generic(type_name)
    if args and _simple_name(wrapper).lower() in _collections_for(dialect):
        return args[0]
    return None


def map_type(declared_type: str, dialect: SchemaDialect) -> TypeInfo:
    """Map a declared type token to its coarse kind."""
    text = declared_type.strip()
    if text.startswith("readonly "):
        text = text[len("readonly "):].strip()

    if dialect == SchemaDialect.TYPESCRIPT and len(split_top_level(text, "|")) > 1:
        return _map_union(text, dialect)

    nullable = text.endswith("?")
    text = text.rstrip("?").strip()

    wrapper, args = split_generic(text)
    if _simple_name(wrapper).lower() == "nullable" and args:
        info = map_type(args[0], dialect)
        info.is_nullable = True
        return info

    element = collection_element(text, dialect)
    if element is not None:
        return TypeInfo(kind=FieldKind.ARRAY, base=text, is_nullable=nullable, element_type=element)

    if args and _simple_name(wrapper).lower() in MAP_WRAPPERS:
        return TypeInfo(kind=FieldKind.OBJECT, base=text, is_nullable=nullable)

    base = _simple_name(text)
    kind, fmt = _types_for(dialect).get(base.lower(), (FieldKind.OBJECT, None))
    return TypeInfo(kind=kind, base=base, format=fmt, is_nullable=nullable)


def _map_union(text: str, dialect: SchemaDialect) -> TypeInfo:
    members = split_top_level(text, "|")
    nullable = any(m in NULL_TOKENS for m in members)
    members = [m for m in members if m not in NULL_TOKENS]

    if members and all(_is_string_literal(m) for m in members):
        return TypeInfo(
            kind=FieldKind.STRING,
            base="string",
            is_nullable=nullable,
            literal_values=[m[1:-1] for m in members],
        )
    if members and all(_is_number_literal(m) for m in members):
        return TypeInfo(
            kind=FieldKind.NUMBER,
            base="number",
            is_nullable=nullable,
            literal_values=[_number(m) for m in members],
        )
    if not members:
        return TypeInfo(kind=FieldKind.STRING, base="string", is_nullable=True)

    # Otherwise, use the first non-null member
    info = map_type(members[0], dialect)
    info.is_nullable = info.is_nullable or nullable
    return info


def _is_string_literal(token: str) -> bool:
    return len(token) >= 2 and token[0] == token[-1] and token[0] in "'\"`"


def _is_number_literal(token: str) -> bool:
    try:
        float(token)
    except ValueError:
        return False
    return True


def _number(token: str):
    value = float(token)
    return int(value) if value.is_integer() and "." not in token else value
