"""Produce one plausible value for one field.

Resolution order: null draw, explicit override, foreign key, array, enum,
name-pattern table, type fallback.
"""
import logging
from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Optional, Set

from setup_data.core.errors import GeneratorOverrideError
from setup_data.core.workflow import Stage
from setup_data.generators.heuristics import RuleInput, match_name_rule, split_words, type_fallback
from setup_data.generators.overrides import generate_override
from setup_data.generators.random_stream import RandomStream
from setup_data.schema.json_schema import field_from_property
from setup_data.schema.relationships import foreign_key_target
from setup_data.schema.type_mapping import split_generic
from setup_data.schema.types import EnumMember, FieldDefinition, FieldKind

log = logging.getLogger(__name__)


@dataclass
class SynthesisContext:
    """What the synthesizer may know beyond the field itself."""
    entity_name: str = ""
    enums: Dict[str, List[EnumMember]] = field(default_factory=dict)
    known_entities: Set[str] = field(default_factory=set)
    # Parent entity -> identifiers of its generated records
    generated_ids: Dict[str, List[Any]] = field(default_factory=dict)
    overrides: Dict[str, str] = field(default_factory=dict)
    null_probability: float = 0.2
    min_items: int = 0
    max_items: int = 5
    assign_ids: bool = False
    # Primary key of the entity being generated
    key_field: Optional[str] = None
    record_index: int = 0
    warned: Set[str] = field(default_factory=set)

    def for_index(self, record_index: int) -> "SynthesisContext":
        return replace(self, record_index=record_index)


def _enum_name(field_def: FieldDefinition) -> str:
    wrapper, args = split_generic(field_def.base_type)
    if wrapper.lower() == "nullable" and args:
        return args[0].strip()
    return field_def.base_type


def _override_value(field_name: str, field_def: FieldDefinition, context: SynthesisContext, stream: RandomStream):
    """Return ``(True, value)`` when an override produced a value."""
    path = context.overrides.get(field_name) or field_def.raw.get("faker")
    if not path:
        return False, None
    try:
        value = generate_override(stream.faker, path, field_name)
    except GeneratorOverrideError as e:
        key = f"{context.entity_name}.{field_name}"
        if key not in context.warned:
            context.warned.add(key)
            log.warning(str(e), extra={"stage": Stage.GENERATE, "entity": context.entity_name or "-"})
        return False, None
    return True, value


def _foreign_key(field_def: FieldDefinition, context: SynthesisContext, stream: RandomStream):
    """Return ``(True, value)`` when the field references a known entity."""
    if field_def.name == context.key_field:
        return False, None
    candidates = context.known_entities | set(context.generated_ids)
    parent = foreign_key_target(field_def, candidates)
    if parent is None:
        return False, None
    parent_ids = context.generated_ids.get(parent)
    if not parent_ids:
        log.debug(
            f"No generated {parent} records for {field_def.name}, leaving it empty",
            extra={"stage": Stage.GENERATE, "entity": context.entity_name or "-"},
        )
        return True, None
    return True, stream.choice(parent_ids)


def _array(field_name: str, field_def: FieldDefinition, context: SynthesisContext, stream: RandomStream) -> list:
    if field_def.items is None:
        return []
    low = field_def.raw.get("minItems", context.min_items)
    high = field_def.raw.get("maxItems", context.max_items)
    if high < low:
        high = low
    count = stream.randint(low, high)
    base_index = context.record_index * 100
    return [
        synthesize(f"{field_name}Item", field_def.items, context.for_index(base_index + i), stream)
        for i in range(count)
    ]


def _nested_object(field_def: FieldDefinition, context: SynthesisContext, stream: RandomStream) -> Dict[str, Any]:
    properties = field_def.raw.get("properties") or {}
    required = set(field_def.raw.get("required", []))
    return {
        name: synthesize(name, field_from_property(name, prop, name in required), context, stream)
        for name, prop in properties.items()
    }


def synthesize(
    field_name: str,
    field_def: FieldDefinition,
    context: Optional[SynthesisContext] = None,
    stream: Optional[RandomStream] = None,
) -> Any:
    """Generate a value for ``field_def``.

    Required fields never come back as None, except foreign keys whose parent
    has no generated records and identifiers left to the storage engine.
    """
    context = context or SynthesisContext()
    stream = stream or RandomStream()

    if field_def.is_nullable and not field_def.is_required and stream.chance(context.null_probability):
        return None

    produced, value = _override_value(field_name, field_def, context, stream)
    if produced:
        if value is None and field_def.is_required:
            value = type_fallback(field_def, stream)
        return _finish(value, field_def)

    is_fk, value = _foreign_key(field_def, context, stream)
    if is_fk:
        return value

    if field_def.kind == FieldKind.ARRAY:
        return _array(field_name, field_def, context, stream)

    members = context.enums.get(_enum_name(field_def))
    if members:
        return stream.choice(members).value
    if field_def.enum_values:
        return stream.choice(field_def.enum_values)

    if field_def.kind == FieldKind.OBJECT and field_def.raw.get("properties"):
        return _nested_object(field_def, context, stream)

    rule_input = RuleInput(
        name=field_name,
        words=split_words(field_name),
        field=field_def,
        entity_name=context.entity_name,
        is_key=field_name == context.key_field,
    )
    rule = match_name_rule(rule_input)
    if rule is not None:
        value = rule.generate(rule_input, stream, context)
        if value is None and rule.label == "identifier":
            return None
    else:
        value = type_fallback(field_def, stream)

    if value is None and field_def.is_required:
        value = type_fallback(field_def, stream)
    return _finish(value, field_def)


def _finish(value: Any, field_def: FieldDefinition) -> Any:
    if isinstance(value, str) and field_def.max_length is not None:
        return value[:field_def.max_length]
    return value
