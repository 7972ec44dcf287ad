"""Patient record store backends.

Both backends expose the same coroutine:
    await store.update_record(record_id, table_name, {field: value})
and raise RecordStoreError (only) when the write did not happen.
"""
import asyncio
import json
import logging
import os
import shutil
import tempfile
from typing import Any, Dict, Optional

import httpx

from treatplan.infra.paths import RECORDS_FILE
from treatplan.utilities.config import RECORD_STORE_BACKEND, RECORD_STORE_TIMEOUT, RECORD_STORE_URL

logger = logging.getLogger(__name__)

UPDATE_RECORD_PATH = "/api/dashboard/update-record"


class RecordStoreError(Exception):
    """A record update failed at the storage boundary."""


class HttpRecordStore:
    def __init__(self, base_url: str = RECORD_STORE_URL, timeout: float = RECORD_STORE_TIMEOUT,
                 transport: Optional[httpx.AsyncBaseTransport] = None):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport

    async def update_record(self, record_id: str, table_name: str, fields: Dict[str, Any]) -> None:
        payload = {"recordId": record_id, "tableName": table_name, "fields": fields}
        try:
            async with httpx.AsyncClient(base_url=self.base_url, timeout=self.timeout,
                                         transport=self._transport) as client:
                response = await client.patch(UPDATE_RECORD_PATH, json=payload)
        except httpx.HTTPError as e:
            raise RecordStoreError(f"Failed to update record {record_id}: {e}") from e
        if response.status_code >= 400:
            raise RecordStoreError(
                f"Failed to update record {record_id}: HTTP {response.status_code} {response.text}"
            )
        logger.debug("Updated %s/%s via %s", table_name, record_id, self.base_url)

    def __str__(self) -> str:
        return f"HttpRecordStore({self.base_url})"


class JsonFileRecordStore:
    """Local development store: {table: {record_id: {field: value}}} in one JSON file."""

    def __init__(self, path: str = str(RECORDS_FILE)):
        self.path = str(path)
        self._lock = asyncio.Lock()

    def _safe_load(self) -> Dict[str, Dict[str, Dict[str, Any]]]:
        if not os.path.exists(self.path):
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError:
            logger.warning("Records file %s is not valid JSON; starting empty", self.path)
            return {}
        return data if isinstance(data, dict) else {}

    def _atomic_write(self, data: dict):
        directory = os.path.dirname(os.path.abspath(self.path))
        os.makedirs(directory, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(dir=directory, prefix=".records_", suffix=".json")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as tmp:
                json.dump(data, tmp, indent=2, ensure_ascii=False)
            shutil.move(tmp_path, self.path)
        finally:
            if os.path.exists(tmp_path):
                os.remove(tmp_path)

    def read_record(self, record_id: str, table_name: str) -> Dict[str, Any]:
        '''Returns {"id", "tableSource", "fields"} for the record; missing records have empty fields.'''
        fields = self._safe_load().get(table_name, {}).get(record_id, {})
        return {"id": record_id, "tableSource": table_name, "fields": dict(fields)}

    async def update_record(self, record_id: str, table_name: str, fields: Dict[str, Any]) -> None:
        async with self._lock:
            try:
                data = self._safe_load()
                record = data.setdefault(table_name, {}).setdefault(record_id, {})
                record.update(fields)
                self._atomic_write(data)
            except OSError as e:
                raise RecordStoreError(f"Failed to write {self.path}: {e}") from e
        logger.debug("Updated %s/%s in %s", table_name, record_id, self.path)

    def __str__(self) -> str:
        return f"JsonFileRecordStore({self.path})"


def build_record_store(backend: str = RECORD_STORE_BACKEND):
    """Record store selected by RECORD_STORE_BACKEND ('http' or 'file')."""
    if backend == "http":
        store = HttpRecordStore()
    elif backend == "file":
        store = JsonFileRecordStore()
    else:
        raise ValueError(f"Unknown record store backend: {backend}")
    logger.info("Using record store %s", store)
    return store


__all__ = ["RecordStoreError", "HttpRecordStore", "JsonFileRecordStore", "build_record_store"]
