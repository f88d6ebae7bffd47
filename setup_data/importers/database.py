"""Direct database import through SQLAlchemy Core."""
import json
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, TypeVar

from sqlalchemy import column, create_engine, insert, table
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.exc import SQLAlchemyError

from setup_data.core.config import DatabaseConfig
from setup_data.core.errors import DataImportError
from setup_data.core.workflow import Stage

log = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class ImportResult:
    target: str
    total: int
    imported: int = 0
    errors: List[Dict[str, Any]] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors


def create_db_engine(config: DatabaseConfig) -> Engine:
    return create_engine(config.sqlalchemy_url(), pool_pre_ping=True)


def with_transaction(engine: Engine, operation: Callable[[Connection], T], transactional: bool = True) -> T:
    """Run ``operation`` on a connection.

    In transactional mode everything commits together and any exception
    rolls the whole operation back. Otherwise the connection is committed
    once the operation returns.
    """
    if transactional:
        with engine.begin() as conn:
            return operation(conn)
    with engine.connect() as conn:
        result = operation(conn)
        conn.commit()
        return result


def _column_names(records: List[Dict[str, Any]]) -> List[str]:
    names: List[str] = []
    for record in records:
        for key in record:
            if key not in names:
                names.append(key)
    return names


def _serialize(record: Dict[str, Any]) -> Dict[str, Any]:
    """Nested structures are stored as JSON text."""
    return {
        key: json.dumps(value) if isinstance(value, (dict, list)) else value
        for key, value in record.items()
    }


def insert_records(
    engine: Engine,
    table_name: str,
    records: List[Dict[str, Any]],
    transactional: bool = True,
) -> ImportResult:
    """Insert records into ``table_name``.

    Transactional imports stop and roll back on the first failing row, raising
    DataImportError. Otherwise each row commits on its own and failures are
    collected in the result.
    """
    extra = {"stage": Stage.IMPORT, "entity": table_name}
    target = table(table_name, *[column(name) for name in _column_names(records)])
    result = ImportResult(target=table_name, total=len(records))

    if transactional:
        def insert_all(conn: Connection) -> None:
            for index, record in enumerate(records):
                try:
                    conn.execute(insert(target).values(_serialize(record)))
                except SQLAlchemyError as e:
                    log.error(f"Error inserting item {index}: {e}", extra=extra)
                    raise DataImportError(f"Insert into {table_name} failed at item {index}; transaction rolled back") from e
                result.imported += 1

        log.info("Started database transaction", extra=extra)
        try:
            with_transaction(engine, insert_all, transactional=True)
        except DataImportError:
            result.imported = 0
            raise
        log.info("Transaction committed successfully", extra=extra)
        return result

    with engine.connect() as conn:
        for index, record in enumerate(records):
            try:
                conn.execute(insert(target).values(_serialize(record)))
                conn.commit()
            except SQLAlchemyError as e:
                conn.rollback()
                log.error(f"Error inserting item {index}: {e}", extra=extra)
                result.errors.append({"index": index, "error": str(e)})
                continue
            result.imported += 1
    return result
