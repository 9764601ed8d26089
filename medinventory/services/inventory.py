"""Read-only views over the device list used by the HTML pages."""

from __future__ import annotations

from typing import Iterable

from ..models.device import SEARCHABLE_FIELDS, DeviceRecord


def _matches_term(record: DeviceRecord, term: str) -> bool:
    for attribute in SEARCHABLE_FIELDS:
        value = getattr(record, attribute)
        if value and term in value.lower():
            return True
    return False


def search_devices(
    records: Iterable[DeviceRecord],
    term: str = "",
    category: str = "",
    location: str = "",
) -> list[DeviceRecord]:
    """Free-text search plus exact category/location filters, order preserved."""
    term = (term or "").strip().lower()
    results = []
    for record in records:
        if term and not _matches_term(record, term):
            continue
        if category and record.device_category != category:
            continue
        if location and record.device_location != location:
            continue
        results.append(record)
    return results


def summarize(records: Iterable[DeviceRecord]) -> dict[str, int]:
    records = list(records)
    manufacturers = {r.manufacturer for r in records if r.manufacturer}
    return {
        "total": len(records),
        "manufacturers": len(manufacturers),
        "with_warranty": sum(1 for r in records if r.warranty_period),
    }
