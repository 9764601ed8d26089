"""Record stores: where the device collection lives between requests.

The collection is always read and written as a whole. ``JsonFileStore`` keeps
it in a single JSON document on disk; ``InMemoryStore`` keeps it in the
process and forgets it on restart. Which one runs is an explicit
``STORAGE_BACKEND`` setting, built once by ``build_store`` when the app starts.
"""

from __future__ import annotations

import json
import logging
import os
import threading
from pathlib import Path
from typing import Iterable

from pydantic import ValidationError

from ..core.config import AppSettings
from ..core.errors import StorageError
from ..models.device import DeviceRecord

logger = logging.getLogger("medinventory.store")


class RecordStore:
    """Load/save contract shared by every backend.

    ``lock`` serializes load-modify-save cycles inside one process. Separate
    worker processes sharing a document still race, last writer wins.
    """

    def __init__(self) -> None:
        self.lock = threading.RLock()

    def load(self) -> list[DeviceRecord]:
        raise NotImplementedError

    def save(self, records: Iterable[DeviceRecord]) -> None:
        raise NotImplementedError


class JsonFileStore(RecordStore):
    def __init__(self, path: Path, seed_path: Path | None = None) -> None:
        super().__init__()
        self.path = Path(path)
        self.seed_path = Path(seed_path) if seed_path else None

    def _source(self) -> Path | None:
        if self.path.exists():
            return self.path
        if self.seed_path and self.seed_path.exists():
            return self.seed_path
        return None

    def load(self) -> list[DeviceRecord]:
        src = self._source()
        if src is None:
            logger.warning(
                "store.document_missing",
                extra={"extra_data": {"path": str(self.path)}},
            )
            return []
        try:
            raw = json.loads(src.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            logger.exception("store.load_failed", extra={"extra_data": {"path": str(src)}})
            raise StorageError(f"Could not read device records from {src.name}") from exc
        if not isinstance(raw, list):
            logger.error("store.load_failed", extra={"extra_data": {"path": str(src), "reason": "not a list"}})
            raise StorageError(f"Device document {src.name} must hold a JSON array")
        try:
            return [DeviceRecord.model_validate(item) for item in raw]
        except ValidationError as exc:
            logger.error("store.load_failed", extra={"extra_data": {"path": str(src), "reason": str(exc)}})
            raise StorageError(f"Device document {src.name} contains an invalid record") from exc

    def save(self, records: Iterable[DeviceRecord]) -> None:
        payload = [record.to_document() for record in records]
        tmp_path = self.path.with_name(self.path.name + ".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path.write_text(json.dumps(payload, indent=2, ensure_ascii=False), encoding="utf-8")
            os.replace(tmp_path, self.path)
        except OSError as exc:
            logger.exception("store.save_failed", extra={"extra_data": {"path": str(self.path)}})
            raise StorageError("Failed to save device records") from exc
        logger.debug("store.saved", extra={"extra_data": {"path": str(self.path), "count": len(payload)}})


class InMemoryStore(RecordStore):
    """Process-local collection. Nothing survives a restart."""

    def __init__(self, records: Iterable[DeviceRecord] | None = None) -> None:
        super().__init__()
        self._records = [record.model_copy(deep=True) for record in records or []]
        logger.warning(
            "store.memory_backend",
            extra={"extra_data": {"detail": "device records are not persisted across restarts"}},
        )

    def load(self) -> list[DeviceRecord]:
        return [record.model_copy(deep=True) for record in self._records]

    def save(self, records: Iterable[DeviceRecord]) -> None:
        self._records = [record.model_copy(deep=True) for record in records]


def build_store(settings: AppSettings) -> RecordStore:
    if settings.STORAGE_BACKEND == "memory":
        return InMemoryStore()
    return JsonFileStore(settings.data_file, seed_path=settings.SEED_FILE)
