"""Update overlay and the image merge rules applied before replacement."""

import os
import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

os.environ.setdefault("DATA_DIR", str(ROOT / "data"))

from medinventory.core.errors import DeviceNotFoundError
from medinventory.db.store import InMemoryStore
from medinventory.models.device import DeviceRecord
from medinventory.services.updates import build_replacement, merge_image_urls, update_device


@pytest.fixture()
def existing():
    return DeviceRecord.model_validate(
        {
            "SequenceNumber": 4,
            "DeviceName": "Ultrasound",
            "Manufacturer": "Mindray",
            "Model": "DC-70",
            "DeviceLocation": "Radiology",
            "WarrantyPeriod": "3 years",
            "ImageUrls": ["a", "b"],
        }
    )


@pytest.mark.parametrize(
    "current, incoming, expected",
    [
        (["a", "b"], ["b", "c"], ["a", "b", "c"]),
        (["a"], None, ["a"]),
        (["a"], [], ["a"]),
        (None, ["x", "y"], ["x", "y"]),
        (None, None, None),
        ([], None, []),
        ([], ["x", "x"], ["x"]),
    ],
)
def test_merge_image_urls(current, incoming, expected):
    assert merge_image_urls(current, incoming) == expected


def test_replacement_unions_images(existing):
    updated = build_replacement(existing, {"ImageUrls": ["b", "c"]})

    assert updated.image_urls == ["a", "b", "c"]


def test_replacement_preserves_images_when_omitted(existing):
    updated = build_replacement(existing, {"DeviceLocation": "ER"})

    assert updated.image_urls == ["a", "b"]
    assert updated.device_location == "ER"
    assert updated.warranty_period == "3 years"


def test_replacement_keeps_existing_identity(existing):
    updated = build_replacement(existing, {"SequenceNumber": 99, "Model": "DC-80"})

    assert updated.sequence_number == 4
    assert updated.model == "DC-80"


def test_explicit_null_clears_optional_field(existing):
    updated = build_replacement(existing, {"WarrantyPeriod": None})

    assert updated.warranty_period is None


def test_blank_required_field_is_rejected(existing):
    with pytest.raises(ValueError, match="DeviceName"):
        build_replacement(existing, {"DeviceName": ""})


def test_update_device_overlays_and_persists(existing):
    store = InMemoryStore([existing])

    updated = update_device(store, 4, {"DeviceLocation": "Ward 2", "ImageUrls": ["c"]})

    stored = store.load()[0]
    assert updated == stored
    assert stored.device_location == "Ward 2"
    assert stored.warranty_period == "3 years"
    assert stored.image_urls == ["a", "b", "c"]


def test_update_device_rejects_unknown_identity(existing):
    store = InMemoryStore([existing])

    with pytest.raises(DeviceNotFoundError):
        update_device(store, 99, {"DeviceLocation": "Ward 2"})

    assert store.load()[0].device_location == "Radiology"


def test_update_device_leaves_record_untouched_on_invalid_change(existing):
    store = InMemoryStore([existing])

    with pytest.raises(ValueError):
        update_device(store, 4, {"Model": "  "})

    assert store.load()[0].model == "DC-70"
