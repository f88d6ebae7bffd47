"""Dataclasses describing parsed entity schemas."""
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional

from setup_data.core.errors import SchemaError


class FieldKind(str, Enum):
    STRING = "string"
    INTEGER = "integer"
    NUMBER = "number"
    BOOLEAN = "boolean"
    DATE_TIME = "date-time"
    DATE = "date"
    ARRAY = "array"
    OBJECT = "object"

    def __str__(self) -> str:
        return self.value


class SchemaDialect(str, Enum):
    JSON_SCHEMA = "json_schema"
    CSHARP = "csharp"
    TYPESCRIPT = "typescript"

    @classmethod
    def from_path(cls, path: str | Path) -> "SchemaDialect":
        """Pick the dialect for a schema file from its extension."""
        suffix = Path(path).suffix.lower()
        try:
            return _EXTENSIONS[suffix]
        except KeyError:
            raise SchemaError(f"Unsupported schema file type: {suffix or '<none>'}", path=str(path)) from None


_EXTENSIONS = {
    ".json": SchemaDialect.JSON_SCHEMA,
    ".cs": SchemaDialect.CSHARP,
    ".ts": SchemaDialect.TYPESCRIPT,
    ".tsx": SchemaDialect.TYPESCRIPT,
}

SUPPORTED_EXTENSIONS = frozenset(_EXTENSIONS)


class RelationshipKind(str, Enum):
    ONE_TO_ONE = "one-to-one"
    ONE_TO_MANY = "one-to-many"
    MANY_TO_ONE = "many-to-one"

    def __str__(self) -> str:
        return self.value


@dataclass
class Attribute:
    """A marker annotation such as ``[MaxLength(50)]`` or ``@IsOptional()``."""
    name: str
    parameters: List[str] = field(default_factory=list)


@dataclass
class FieldDefinition:
    name: str
    declared_type: str
    kind: FieldKind = FieldKind.STRING
    format: Optional[str] = None
    is_nullable: bool = False
    is_required: bool = False
    max_length: Optional[int] = None
    default_value: Optional[str] = None
    is_navigation: bool = False
    is_array_of_entities: bool = False
    target_entity: Optional[str] = None
    items: Optional["FieldDefinition"] = None
    enum_values: List[Any] = field(default_factory=list)
    attributes: List[Attribute] = field(default_factory=list)
    raw: Dict[str, Any] = field(default_factory=dict)

    @property
    def base_type(self) -> str:
        """Declared type without the nullable marker."""
        return self.declared_type.strip().rstrip("?").strip()

    @property
    def classification(self) -> str:
        if self.is_navigation:
            return "navigation"
        if self.kind == FieldKind.ARRAY:
            return "array"
        return "scalar"

    def has_attribute(self, name: str) -> bool:
        return any(attr.name == name for attr in self.attributes)


@dataclass
class EnumMember:
    name: str
    value: Any


@dataclass
class Relationship:
    field_name: str
    target_entity: str
    kind: RelationshipKind


@dataclass
class EntityDefinition:
    entity_name: str
    fields: List[FieldDefinition] = field(default_factory=list)
    enums: Dict[str, List[EnumMember]] = field(default_factory=dict)
    relationships: List[Relationship] = field(default_factory=list)
    source_path: str = ""
    dialect: Optional[SchemaDialect] = None

    def get_field(self, name: str) -> Optional[FieldDefinition]:
        for f in self.fields:
            if f.name == name:
                return f
        return None

    @property
    def primary_key(self) -> Optional[FieldDefinition]:
        """The field holding the record identifier, if any."""
        for f in self.fields:
            if f.has_attribute("Key"):
                return f
        for f in self.fields:
            if f.name.lower() == "id":
                return f
        # Entity Framework convention: CategoryId on Category
        own_key = f"{self.entity_name}id".lower()
        for f in self.fields:
            if f.name.lower() == own_key:
                return f
        return None

    @property
    def many_to_one_targets(self) -> List[str]:
        return [
            rel.target_entity
            for rel in self.relationships
            if rel.kind == RelationshipKind.MANY_TO_ONE
        ]
