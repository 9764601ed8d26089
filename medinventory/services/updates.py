"""How an update payload turns into the record that replaces the stored one.

The repository only knows wholesale replacement. Clients, however, send
partial bodies (the edit form, or a script that only wants to attach photos),
so the payload is overlaid on the existing record first. Image references
are merged rather than replaced: adding one photo must not require resending
every photo already attached.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping

from ..core.errors import DeviceNotFoundError
from ..crud.devices import missing_required_fields
from ..db.store import RecordStore
from ..models.device import DeviceRecord

logger = logging.getLogger("medinventory.devices")


def merge_image_urls(existing: list[str] | None, incoming: list[str] | None) -> list[str] | None:
    """Union of both lists, existing references first, duplicates dropped.

    An empty or missing ``incoming`` keeps ``existing`` untouched.
    """
    if not existing:
        if incoming is not None:
            return list(dict.fromkeys(incoming))
        return list(existing) if existing is not None else None
    if not incoming:
        return list(existing)
    merged = list(dict.fromkeys(existing))
    for url in incoming:
        if url not in merged:
            merged.append(url)
    return merged


def build_replacement(existing: DeviceRecord, changes: Mapping[str, Any]) -> DeviceRecord:
    """Overlay PascalCase ``changes`` on ``existing`` and apply the merge rules.

    The identity always stays the existing one, whatever the payload says.
    """
    document = existing.to_document()
    document.update(changes)
    document["SequenceNumber"] = existing.sequence_number
    document["ImageUrls"] = merge_image_urls(existing.image_urls, changes.get("ImageUrls"))

    missing = missing_required_fields(document)
    if missing:
        raise ValueError(f"Missing required field(s): {', '.join(missing)}")
    return DeviceRecord.model_validate(document)


def update_device(store: RecordStore, sequence_number: int, changes: Mapping[str, Any]) -> DeviceRecord:
    """Apply ``changes`` to the stored device in a single locked load-modify-save.

    Raises ``DeviceNotFoundError`` for an unknown identity and ``ValueError``
    when the result would lose a required field.
    """
    with store.lock:
        records = store.load()
        for index, existing in enumerate(records):
            if existing.sequence_number == sequence_number:
                updated = build_replacement(existing, changes)
                records[index] = updated
                break
        else:
            raise DeviceNotFoundError(sequence_number)
        store.save(records)

    logger.info("device.updated", extra={"extra_data": {"sequence_number": sequence_number}})
    return updated
