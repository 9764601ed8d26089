"""HTTP contract of the /devices resource."""

import json
import os
import sys
import threading
import time
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

os.environ.setdefault("DATA_DIR", str(ROOT / "data"))

from medinventory import create_app
from medinventory.core.config import AppSettings
from medinventory.core.errors import StorageError
from medinventory.db.store import InMemoryStore
from medinventory.models.device import DeviceRecord

PUMP = {
    "DeviceName": "Infusion Pump",
    "Manufacturer": "B. Braun",
    "Model": "Infusomat Space",
    "DeviceCategory": "Infusion",
    "DeviceLocation": "ICU",
}


@pytest.fixture()
def settings(tmp_path):
    return AppSettings(DATA_DIR=tmp_path)


@pytest.fixture()
def client(settings):
    with TestClient(create_app(settings)) as c:
        yield c


def _create(client, **overrides):
    payload = dict(PUMP, **overrides)
    response = client.post("/devices", json=payload)
    assert response.status_code == 201, response.text
    return response.json()["SequenceNumber"]


def test_list_starts_empty(client):
    response = client.get("/devices")

    assert response.status_code == 200
    assert response.json() == []


def test_create_returns_message_and_persists(client, settings):
    response = client.post("/devices", json=PUMP)

    assert response.status_code == 201
    assert response.json() == {"message": "Device added successfully", "SequenceNumber": 1}
    stored = json.loads(settings.data_file.read_text(encoding="utf-8"))
    assert stored[0]["DeviceName"] == "Infusion Pump"
    assert stored[0]["SequenceNumber"] == 1


def test_create_ignores_client_identity(client):
    first = _create(client)
    second = _create(client, SequenceNumber=first, DeviceName="Syringe Pump")

    assert second == first + 1


def test_create_with_empty_name_is_rejected(client, settings):
    _create(client)
    before = settings.data_file.read_text(encoding="utf-8")

    response = client.post("/devices", json=dict(PUMP, DeviceName=""))

    assert response.status_code == 400
    assert "DeviceName" in response.json()["message"]
    assert settings.data_file.read_text(encoding="utf-8") == before


def test_create_without_model_is_rejected(client):
    payload = {k: v for k, v in PUMP.items() if k != "Model"}

    response = client.post("/devices", json=payload)

    assert response.status_code == 400
    assert client.get("/devices").json() == []


def test_malformed_body_is_bad_request(client):
    response = client.post("/devices", content="not json", headers={"Content-Type": "application/json"})

    assert response.status_code == 400
    assert response.json()["code"] == "validation_error"


def test_get_device_and_not_found(client):
    device_id = _create(client)

    found = client.get(f"/devices/{device_id}")
    missing = client.get("/devices/999")

    assert found.status_code == 200
    assert found.json()["Model"] == "Infusomat Space"
    assert missing.status_code == 404
    assert missing.json() == {"code": "not_found", "message": "Device not found"}


def test_update_forces_identity_and_keeps_other_fields(client):
    device_id = _create(client)

    response = client.put(f"/devices/{device_id}", json={"SequenceNumber": 50, "DeviceLocation": "Ward 2"})

    assert response.status_code == 200
    assert response.json()["message"] == "Device updated successfully"
    device = client.get(f"/devices/{device_id}").json()
    assert device["SequenceNumber"] == device_id
    assert device["DeviceLocation"] == "Ward 2"
    assert device["DeviceName"] == "Infusion Pump"
    assert client.get("/devices/50").status_code == 404


def test_update_unions_image_urls(client):
    device_id = _create(client, ImageUrls=["a", "b"])

    client.put(f"/devices/{device_id}", json={"ImageUrls": ["b", "c"]})

    assert client.get(f"/devices/{device_id}").json()["ImageUrls"] == ["a", "b", "c"]


def test_update_without_images_preserves_them(client):
    device_id = _create(client, ImageUrls=["a"])

    client.put(f"/devices/{device_id}", json=dict(PUMP, Details="Serviced"))

    device = client.get(f"/devices/{device_id}").json()
    assert device["ImageUrls"] == ["a"]
    assert device["Details"] == "Serviced"


def test_update_unknown_device_is_not_found(client):
    _create(client)
    before = client.get("/devices").json()

    response = client.put("/devices/77", json=PUMP)

    assert response.status_code == 404
    assert client.get("/devices").json() == before


def test_update_cannot_blank_required_field(client):
    device_id = _create(client)

    response = client.put(f"/devices/{device_id}", json={"Manufacturer": " "})

    assert response.status_code == 400
    assert client.get(f"/devices/{device_id}").json()["Manufacturer"] == "B. Braun"


def test_delete_then_get_is_not_found(client):
    device_id = _create(client)

    deleted = client.delete(f"/devices/{device_id}")
    again = client.delete(f"/devices/{device_id}")

    assert deleted.status_code == 200
    assert deleted.json() == {"message": "Device deleted successfully"}
    assert again.status_code == 404
    assert client.get(f"/devices/{device_id}").status_code == 404


def test_options_list_distinct_values(client):
    _create(client)
    _create(client, DeviceName="Monitor", Manufacturer="Philips", DeviceCategory="Monitoring", DeviceLocation="ICU")
    _create(client, DeviceName="Cart", Manufacturer="Philips", DeviceCategory=None, DeviceLocation="ER")

    response = client.get("/devices/options")

    assert response.json() == {
        "categories": ["Infusion", "Monitoring"],
        "locations": ["ER", "ICU"],
        "manufacturers": ["B. Braun", "Philips"],
    }


def test_legacy_api_prefix_is_served(client):
    _create(client)

    response = client.get("/api/devices")

    assert response.status_code == 200
    assert len(response.json()) == 1


class FailingStore(InMemoryStore):
    def save(self, records):
        raise StorageError("Failed to save device records")


def test_persistence_failure_is_server_error(settings):
    with TestClient(create_app(settings, store=FailingStore())) as client:
        response = client.post("/devices", json=PUMP)

    assert response.status_code == 500
    assert response.json() == {"code": "storage_error", "message": "Failed to save device records"}


def test_corrupt_document_is_server_error(client, settings):
    settings.data_file.write_text("[{broken", encoding="utf-8")

    response = client.get("/devices")

    assert response.status_code == 500
    assert response.json()["code"] == "storage_error"


def test_responses_carry_request_id(client):
    response = client.get("/devices", headers={"X-Request-ID": "abc-123"})

    assert response.headers["X-Request-ID"] == "abc-123"
    assert response.headers["X-Content-Type-Options"] == "nosniff"


def test_responses_are_not_cached_except_assets(client):
    page = client.get("/devices")
    asset = client.get("/static/app.css")

    assert page.headers["Cache-Control"] == "no-store"
    assert "frame-ancestors 'none'" in page.headers["Content-Security-Policy"]
    assert asset.status_code == 200
    assert "no-store" not in asset.headers.get("Cache-Control", "")


class SlowStore(InMemoryStore):
    """Widens the window between reading the collection and writing it back."""

    def load(self):
        records = super().load()
        time.sleep(0.2)
        return records


def test_concurrent_updates_keep_every_image(settings):
    store = SlowStore([DeviceRecord.model_validate(dict(PUMP, SequenceNumber=1, ImageUrls=["a"]))])
    statuses = []

    with TestClient(create_app(settings, store=store)) as client:
        def attach(url):
            statuses.append(client.put("/devices/1", json={"ImageUrls": [url]}).status_code)

        threads = [threading.Thread(target=attach, args=(url,)) for url in ("x", "y")]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

    assert statuses == [200, 200]
    images = store.load()[0].image_urls
    assert images[0] == "a"
    assert sorted(images) == ["a", "x", "y"]
