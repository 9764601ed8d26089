# medinventory/crud/devices.py
from __future__ import annotations

import logging
from typing import Any, Mapping

from ..core.errors import DeviceNotFoundError
from ..db.store import RecordStore
from ..models.device import DISTINCT_FIELDS, REQUIRED_FIELDS, DeviceRecord

logger = logging.getLogger("medinventory.devices")


def list_devices(store: RecordStore) -> list[DeviceRecord]:
    """
    Return every device record, unfiltered, in storage order.
    """
    return store.load()


def get_device(store: RecordStore, sequence_number: int) -> DeviceRecord | None:
    """
    Fetch a single device by its sequence number.
    """
    for record in store.load():
        if record.sequence_number == sequence_number:
            return record
    return None


def next_sequence_number(records: list[DeviceRecord]) -> int:
    return max((r.sequence_number for r in records if r.sequence_number is not None), default=0) + 1


def missing_required_fields(data: Mapping[str, Any]) -> list[str]:
    missing = []
    for key in REQUIRED_FIELDS:
        value = data.get(key)
        if not isinstance(value, str) or not value.strip():
            missing.append(key)
    return missing


def _require_fields(data: Mapping[str, Any]) -> None:
    missing = missing_required_fields(data)
    if missing:
        raise ValueError(f"Missing required field(s): {', '.join(missing)}")


def create_device(store: RecordStore, payload: Mapping[str, Any]) -> DeviceRecord:
    """
    Validate and append a device built from a PascalCase payload dict.
    A sequence number is assigned when the payload carries none.
    """
    record = DeviceRecord.model_validate(dict(payload))
    _require_fields(record.to_document())

    with store.lock:
        records = store.load()
        if record.sequence_number is None:
            record.sequence_number = next_sequence_number(records)
        elif any(r.sequence_number == record.sequence_number for r in records):
            raise ValueError(f"SequenceNumber {record.sequence_number} is already in use")
        records.append(record)
        store.save(records)

    logger.info("device.created", extra={"extra_data": {"sequence_number": record.sequence_number}})
    return record


def replace_device(store: RecordStore, record: DeviceRecord) -> DeviceRecord:
    """
    Overwrite the stored record with the same sequence number wholesale.
    """
    _require_fields(record.to_document())
    with store.lock:
        records = store.load()
        for index, existing in enumerate(records):
            if existing.sequence_number == record.sequence_number:
                records[index] = record
                break
        else:
            raise DeviceNotFoundError(record.sequence_number)
        store.save(records)

    logger.info("device.replaced", extra={"extra_data": {"sequence_number": record.sequence_number}})
    return record


def delete_device(store: RecordStore, sequence_number: int) -> None:
    """
    Remove the device with the given sequence number.
    """
    with store.lock:
        records = store.load()
        remaining = [r for r in records if r.sequence_number != sequence_number]
        if len(remaining) == len(records):
            raise DeviceNotFoundError(sequence_number)
        store.save(remaining)

    logger.info("device.deleted", extra={"extra_data": {"sequence_number": sequence_number}})


def distinct_values(store: RecordStore, field: str) -> list[str]:
    """
    Sorted distinct non-empty values of a filterable field across all records.
    Accepts the PascalCase key or the attribute name.
    """
    attribute = DISTINCT_FIELDS.get(field)
    if attribute is None and field in DISTINCT_FIELDS.values():
        attribute = field
    if attribute is None:
        raise ValueError(f"Distinct values are not available for {field!r}")

    values = set()
    for record in store.load():
        value = getattr(record, attribute)
        if value:
            values.add(value)
    return sorted(values)
