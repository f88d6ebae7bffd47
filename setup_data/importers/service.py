"""Choose an import target from configuration and push records to it."""
import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

import httpx
from sqlalchemy.engine import Engine

from setup_data.core.config import SetupDataConfig
from setup_data.core.errors import SetupDataError
from setup_data.core.workflow import Stage
from setup_data.importers.api import ApiImporter
from setup_data.importers.database import ImportResult, create_db_engine, insert_records
from setup_data.transformers.casing import transform_data

log = logging.getLogger(__name__)


def load_records(path: str | Path) -> Any:
    """Read a JSON data file (one record or a list of records)."""
    path = Path(path)
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        raise SetupDataError(f"Data file not found: {path}") from None
    except json.JSONDecodeError as e:
        raise SetupDataError(f"Invalid JSON in {path}: {e}") from e


def prepare_records(
    data: Any,
    index: Optional[int] = None,
    overrides: Optional[Dict[str, Any]] = None,
    defaults: Optional[Dict[str, Any]] = None,
    casing: Optional[str] = None,
) -> List[Dict[str, Any]]:
    """Select, recase and enrich records before import.

    Casing is applied to the incoming records first; configured defaults fill
    missing keys and overrides replace values, both using their keys as given.
    """
    records = data if isinstance(data, list) else [data]
    if index is not None:
        if not 0 <= index < len(records):
            raise SetupDataError(f"Index {index} out of range for {len(records)} record(s)")
        records = [records[index]]

    for i, record in enumerate(records):
        if not isinstance(record, dict):
            raise SetupDataError(f"Record {i} is not an object")

    records = transform_data(records, casing)
    return [{**(defaults or {}), **record, **(overrides or {})} for record in records]


def import_data(
    data: Any,
    table: str,
    config: SetupDataConfig,
    engine: Optional[Engine] = None,
    transport: Optional[httpx.BaseTransport] = None,
    index: Optional[int] = None,
    overrides: Optional[Dict[str, Any]] = None,
) -> ImportResult:
    """Import records into a database table or API endpoint.

    The database is used when ``database.useDirectConnection`` is set,
    otherwise the API. Without either a SetupDataError is raised.
    """
    extra = {"stage": Stage.IMPORT, "entity": table}
    records = prepare_records(data, index, overrides, config.defaults, config.transform.casing)

    if config.database.use_direct_connection:
        owns_engine = engine is None
        engine = engine or create_db_engine(config.database)
        log.info(f"Importing {len(records)} record(s) into table {table}", extra=extra)
        try:
            result = insert_records(engine, table, records, transactional=config.database.transactional)
        finally:
            if owns_engine:
                engine.dispose()
    elif config.api is not None:
        log.info(f"Importing data via API at {config.api.base_url}", extra=extra)
        with ApiImporter(config.api, transport=transport) as importer:
            result = importer.import_records(table, records)
    else:
        raise SetupDataError("No database or API configuration found. Please check your setup-data.yml file.")

    log.info(f"Successfully imported {result.imported} of {result.total} items to {table}", extra=extra)
    return result
