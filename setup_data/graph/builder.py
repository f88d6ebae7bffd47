"""Build the entity set and dependency graph for a directory of schema files."""
import logging
from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType
from typing import Dict, List, Mapping, Tuple

from setup_data.core.errors import SchemaError
from setup_data.core.workflow import Stage
from setup_data.schema.common import extract_enums
from setup_data.schema.extractor import parse_entity_file, read_source
from setup_data.schema.relationships import classify_fields
from setup_data.schema.types import (
    SUPPORTED_EXTENSIONS,
    EntityDefinition,
    EnumMember,
    FieldDefinition,
    SchemaDialect,
)

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class DependencyNode:
    entity: EntityDefinition
    dependencies: Tuple[str, ...]


DependencyGraph = Mapping[str, DependencyNode]


def list_schema_files(directory: Path) -> List[Path]:
    """Eligible schema files in a directory, sorted by name."""
    return sorted(
        p for p in directory.iterdir()
        if p.is_file() and p.suffix.lower() in SUPPORTED_EXTENSIONS
    )


def _referenced_types(field_def: FieldDefinition):
    yield field_def.base_type
    if field_def.items is not None:
        yield from _referenced_types(field_def.items)


def attach_enums(entity: EntityDefinition, batch_enums: Dict[str, List[EnumMember]]) -> None:
    """Copy enums declared anywhere in the batch into the entities that use them."""
    for f in entity.fields:
        for type_name in _referenced_types(f):
            if type_name in batch_enums and type_name not in entity.enums:
                entity.enums[type_name] = batch_enums[type_name]


def build_entities(directory: str | Path) -> Dict[str, EntityDefinition]:
    """Parse every schema file in ``directory`` into a name -> entity mapping.

    Files that fail to parse are logged and skipped. A missing directory is
    fatal.
    """
    directory = Path(directory)
    if not directory.is_dir():
        raise SchemaError("Entity directory not found", path=str(directory))

    entities: Dict[str, EntityDefinition] = {}
    batch_enums: Dict[str, List[EnumMember]] = {}

    for path in list_schema_files(directory):
        extra = {"stage": Stage.PARSE, "entity": path.name}
        try:
            if SchemaDialect.from_path(path) != SchemaDialect.JSON_SCHEMA:
                batch_enums.update(extract_enums(read_source(path)))
            entity = parse_entity_file(path)
        except SchemaError as e:
            log.warning(f"Skipping {path.name}: {e}", extra=extra)
            continue

        if entity.entity_name in entities:
            log.warning(
                f"Entity {entity.entity_name} in {path.name} already defined in "
                f"{entities[entity.entity_name].source_path}, skipping",
                extra=extra,
            )
            continue
        entities[entity.entity_name] = entity
        log.debug(f"Parsed {entity.entity_name} with {len(entity.fields)} fields", extra=extra)

    known = set(entities)
    for entity in entities.values():
        attach_enums(entity, batch_enums)
        classify_fields(entity, known)

    log.info(f"Found {len(entities)} entities in {directory}", extra={"stage": Stage.PARSE})
    return entities


def build_dependency_graph(entities: Mapping[str, EntityDefinition]) -> DependencyGraph:
    """Map each entity to the entities its many-to-one fields reference."""
    graph = {}
    for name, entity in entities.items():
        dependencies = []
        for target in entity.many_to_one_targets:
            if target in entities and target not in dependencies:
                dependencies.append(target)
        graph[name] = DependencyNode(entity=entity, dependencies=tuple(dependencies))
    return MappingProxyType(graph)
