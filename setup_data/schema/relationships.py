"""Derive navigation properties and relationships from entity fields.

Relationships are never stored by hand: they are recomputed from the field
list and the set of entity names known to the current parse batch.
"""
from typing import Iterable, List, Optional, Set

from setup_data.schema.types import (
    EntityDefinition,
    FieldDefinition,
    FieldKind,
    Relationship,
    RelationshipKind,
)


def foreign_key_target(
    field_def: FieldDefinition,
    known_entities: Set[str],
    owner: Optional[EntityDefinition] = None,
) -> Optional[str]:
    """Return the entity a ``<Name>Id`` field points at, if it names a known entity.

    The primary key of ``owner`` is never a foreign key, so ``CategoryId`` on
    ``Category`` does not reference its own entity.
    """
    if owner is not None and owner.primary_key is field_def:
        return None
    name = field_def.name
    if len(name) <= 2 or not name.endswith("Id"):
        return None
    if field_def.kind != FieldKind.INTEGER and not (
        field_def.kind == FieldKind.NUMBER and field_def.base_type == "number"
    ):
        return None
    prefix = name[:-2]
    if prefix in known_entities:
        return prefix
    capitalized = prefix[0].upper() + prefix[1:]
    if capitalized in known_entities:
        return capitalized
    return None


def classify_field(field_def: FieldDefinition, known_entities: Set[str]) -> None:
    """Set the navigation flags of one field in place."""
    field_def.is_navigation = False
    field_def.is_array_of_entities = False
    field_def.target_entity = None

    if field_def.kind == FieldKind.ARRAY and field_def.items is not None:
        element = field_def.items
        if element.kind == FieldKind.OBJECT and element.base_type in known_entities:
            field_def.is_navigation = True
            field_def.is_array_of_entities = True
            field_def.target_entity = element.base_type
    elif field_def.kind == FieldKind.OBJECT and field_def.base_type in known_entities:
        field_def.is_navigation = True
        field_def.target_entity = field_def.base_type


def derive_relationships(entity: EntityDefinition, known_entities: Set[str]) -> List[Relationship]:
    relationships = []
    for f in entity.fields:
        if f.is_navigation:
            kind = RelationshipKind.ONE_TO_MANY if f.is_array_of_entities else RelationshipKind.ONE_TO_ONE
            relationships.append(Relationship(f.name, f.target_entity, kind))
            continue
        target = foreign_key_target(f, known_entities, entity)
        if target:
            relationships.append(Relationship(f.name, target, RelationshipKind.MANY_TO_ONE))
    return relationships


def classify_fields(entity: EntityDefinition, known_entities: Iterable[str]) -> EntityDefinition:
    """Recompute navigation flags and relationships against a set of entity names."""
    known = set(known_entities)
    for f in entity.fields:
        classify_field(f, known)
    entity.relationships = derive_relationships(entity, known)
    return entity
