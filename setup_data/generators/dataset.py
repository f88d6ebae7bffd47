"""Generate mock records for a whole entity batch in dependency order."""
import logging
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

from setup_data.core.config import DEFAULT_REFERENCE_DATE, GenerationConfig
from setup_data.core.workflow import Stage
from setup_data.generators.import_script import import_script_file
from setup_data.generators.random_stream import RandomStream
from setup_data.generators.synthesizer import SynthesisContext, synthesize
from setup_data.generators.writer import dataset_file, write_files
from setup_data.graph.builder import build_dependency_graph, build_entities
from setup_data.graph.toposort import topo_sort
from setup_data.schema.types import EntityDefinition

log = logging.getLogger(__name__)


@dataclass
class GenerationOptions:
    null_probability: float = 0.2
    min_items: int = 0
    max_items: int = 5
    overrides: Dict[str, str] = field(default_factory=dict)
    reference_date: datetime = DEFAULT_REFERENCE_DATE
    locale: Optional[str] = None
    # When False only parent identifiers are kept in memory
    retain_records: bool = True

    @classmethod
    def from_config(cls, config: GenerationConfig, **kwargs) -> "GenerationOptions":
        return cls(
            null_probability=config.null_probability,
            min_items=config.min_items,
            max_items=config.max_items,
            overrides=dict(config.overrides),
            reference_date=config.reference_date,
            locale=config.locale,
            **kwargs,
        )


def record_ids(entity: EntityDefinition, records: List[Dict[str, Any]]) -> List[Any]:
    """Identifiers children may reference.

    Records without an identifier field are addressed by their 1-based
    position, as an auto-increment key would number them.
    """
    key = entity.primary_key
    if key is None:
        return list(range(1, len(records) + 1))
    return [r[key.name] for r in records if r.get(key.name) is not None]


def generate_entity_records(
    entity: EntityDefinition,
    count: int,
    stream: RandomStream,
    context: SynthesisContext,
) -> List[Dict[str, Any]]:
    """Generate ``count`` records, fields in declaration order, navigation fields skipped."""
    records = []
    for index in range(count):
        record_context = context.for_index(index)
        record = {}
        for f in entity.fields:
            if f.is_navigation:
                continue
            record[f.name] = synthesize(f.name, f, record_context, stream)
        records.append(record)
    return records


def generate_all(
    entities: Mapping[str, EntityDefinition],
    dependency_order: List[str],
    count: int = 10,
    seed: Optional[int] = 123,
    output_dir: Optional[str | Path] = None,
    options: Optional[GenerationOptions] = None,
    counts: Optional[Mapping[str, int]] = None,
) -> Dict[str, List[Dict[str, Any]]]:
    """Generate records for every entity in ``dependency_order``.

    ``counts`` overrides ``count`` per entity name. One random stream serves
    the whole batch. With ``output_dir`` set, each
    entity's file is written as soon as it is complete, followed by the
    import helper script.
    """
    options = options or GenerationOptions()
    counts = counts or {}
    stream = RandomStream(seed=seed, locale=options.locale, reference_date=options.reference_date)
    out_dir = Path(output_dir) if output_dir is not None else None

    generated: Dict[str, List[Dict[str, Any]]] = {}
    generated_ids: Dict[str, List[Any]] = {}
    warned: set = set()
    completed = []

    for name in dependency_order:
        entity = entities.get(name)
        if entity is None:
            log.warning(f"No definition for {name}, skipping", extra={"stage": Stage.GENERATE, "entity": name})
            continue

        extra = {"stage": Stage.GENERATE, "entity": name}
        context = SynthesisContext(
            entity_name=name,
            key_field=entity.primary_key.name if entity.primary_key else None,
            enums=entity.enums,
            known_entities=set(entities),
            generated_ids=generated_ids,
            overrides=options.overrides,
            null_probability=options.null_probability,
            min_items=options.min_items,
            max_items=options.max_items,
            assign_ids=True,
            warned=warned,
        )
        try:
            records = generate_entity_records(entity, counts.get(name, count), stream, context)
        except Exception:
            log.exception(f"Generation failed for {name}, aborting batch", extra=extra)
            raise

        generated_ids[name] = record_ids(entity, records)
        generated[name] = records if options.retain_records else []
        completed.append(name)
        log.info(f"Generated {len(records)} {name} records", extra=extra)

        if out_dir is not None:
            path = write_files([dataset_file(name, records)], out_dir)[0]
            log.info(f"Wrote {path}", extra={"stage": Stage.WRITE, "entity": name})

    if out_dir is not None:
        script = write_files([import_script_file(completed)], out_dir)[0]
        log.info(f"Generated import script at {script}", extra={"stage": Stage.WRITE})

    return generated


def generate_entities_from_directory(
    directory: str | Path,
    output_dir: Optional[str | Path] = None,
    count: int = 10,
    seed: Optional[int] = 123,
    options: Optional[GenerationOptions] = None,
) -> Dict[str, List[Dict[str, Any]]]:
    """Parse a directory of entity classes and generate a consistent dataset for it."""
    entities = build_entities(directory)
    graph = build_dependency_graph(entities)
    order = topo_sort(graph)
    log.info(f"Generating mock data in dependency order: {', '.join(order)}", extra={"stage": Stage.GENERATE})
    return generate_all(entities, order, count=count, seed=seed, output_dir=output_dir, options=options)
