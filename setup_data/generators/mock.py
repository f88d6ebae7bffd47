"""Mock records for a single schema file."""
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

from setup_data.core.workflow import Stage
from setup_data.generators.dataset import GenerationOptions, generate_entity_records
from setup_data.generators.random_stream import RandomStream
from setup_data.generators.synthesizer import SynthesisContext
from setup_data.schema.extractor import load_entity

log = logging.getLogger(__name__)


def generate_mock_data(
    schema_path: str | Path,
    count: int = 10,
    table_name: Optional[str] = None,
    seed: Optional[int] = None,
    options: Optional[GenerationOptions] = None,
) -> List[Dict[str, Any]]:
    """Generate ``count`` records for one schema of any supported dialect.

    Without sibling entities there is nothing to reference, so ``<Name>Id``
    fields fall through to plain values.
    """
    options = options or GenerationOptions()
    entity = load_entity(schema_path, table_name)
    stream = RandomStream(seed=seed, locale=options.locale, reference_date=options.reference_date)
    context = SynthesisContext(
        entity_name=entity.entity_name,
        key_field=entity.primary_key.name if entity.primary_key else None,
        enums=entity.enums,
        overrides=options.overrides,
        null_probability=options.null_probability,
        min_items=options.min_items,
        max_items=options.max_items,
        assign_ids=True,
    )
    records = generate_entity_records(entity, count, stream, context)
    log.info(
        f"Generated {len(records)} mock records from {schema_path}",
        extra={"stage": Stage.GENERATE, "entity": entity.entity_name},
    )
    return records
