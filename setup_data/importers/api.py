"""Import records by POSTing them to a REST API."""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import httpx

from setup_data.core.config import ApiConfig
from setup_data.core.errors import DataImportError
from setup_data.core.workflow import Stage
from setup_data.importers.database import ImportResult

log = logging.getLogger(__name__)

ID_KEYS = ("id", "Id", "ID")


class ApiImporter:
    """POST each record to ``{base_url}/{entity}``.

    In transactional mode a failed item deletes every record created so far
    (``DELETE {base_url}/{entity}/{id}``) and raises DataImportError.
    """

    def __init__(self, config: ApiConfig, transport: Optional[httpx.BaseTransport] = None):
        self.config = config
        self._client = httpx.Client(
            base_url=config.base_url.rstrip("/") + "/",
            headers=self._headers(),
            auth=self._auth(),
            timeout=config.timeout,
            transport=transport,
        )

    def _headers(self) -> dict:
        headers = {"Accept": "application/json"}
        auth = self.config.auth
        if auth is not None and auth.type == "bearer" and auth.token:
            headers["Authorization"] = f"Bearer {auth.token}"
        return headers

    def _auth(self) -> Optional[httpx.BasicAuth]:
        auth = self.config.auth
        if auth is not None and auth.type == "basic":
            return httpx.BasicAuth(auth.username or "", auth.password or "")
        return None

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "ApiImporter":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    @staticmethod
    def _created_id(response: httpx.Response) -> Any:
        try:
            body = response.json()
        except ValueError:
            return None
        if isinstance(body, dict):
            for key in ID_KEYS:
                if body.get(key) is not None:
                    return body[key]
        return None

    def _rollback(self, entity: str, created_ids: List[Any]) -> None:
        extra = {"stage": Stage.IMPORT, "entity": entity}
        for record_id in reversed(created_ids):
            if record_id is None:
                continue
            try:
                r = self._client.delete(f"{entity}/{record_id}")
                r.raise_for_status()
            except httpx.HTTPError as e:
                log.warning(f"Could not roll back {entity} {record_id}: {e}", extra=extra)
        log.info(f"Rolled back {len(created_ids)} created item(s)", extra=extra)

    def import_records(self, entity: str, records: List[Dict[str, Any]]) -> ImportResult:
        extra = {"stage": Stage.IMPORT, "entity": entity}
        result = ImportResult(target=entity, total=len(records))
        created_ids: List[Any] = []

        for index, record in enumerate(records):
            try:
                r = self._client.post(entity, json=record)
                r.raise_for_status()
            except httpx.HTTPStatusError as e:
                error = f"API responded with status {e.response.status_code}: {e.response.text}"
            except httpx.HTTPError as e:
                error = f"Error importing item via API: {e}"
            else:
                created_ids.append(self._created_id(r))
                result.imported += 1
                continue

            log.error(f"Item {index}: {error}", extra=extra)
            result.errors.append({"index": index, "error": error})
            if self.config.transactional:
                self._rollback(entity, created_ids)
                result.imported = 0
                raise DataImportError(f"Import into {entity} failed at item {index}; created items were rolled back")

        return result
