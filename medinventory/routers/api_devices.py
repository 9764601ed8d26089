from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException

from ..core.errors import DeviceNotFoundError
from ..crud.devices import create_device, delete_device, distinct_values, get_device, list_devices
from ..db.store import RecordStore
from ..deps.store import get_store
from ..models.device import DeviceRecord
from ..schemas.device import DeviceCreate, DeviceOptions, DeviceUpdate, MessageOut
from ..services.updates import update_device

router = APIRouter(prefix="/devices", tags=["devices"])
logger = logging.getLogger("medinventory.api")


@router.get("", response_model=list[DeviceRecord])
def api_list(store: RecordStore = Depends(get_store)):
    return list_devices(store)


@router.get("/options", response_model=DeviceOptions)
def api_options(store: RecordStore = Depends(get_store)):
    return DeviceOptions(
        categories=distinct_values(store, "DeviceCategory"),
        locations=distinct_values(store, "DeviceLocation"),
        manufacturers=distinct_values(store, "Manufacturer"),
    )


@router.post("", response_model=MessageOut, status_code=201)
def api_create(payload: DeviceCreate, store: RecordStore = Depends(get_store)):
    try:
        device = create_device(store, payload.changes())
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return MessageOut(message="Device added successfully", sequence_number=device.sequence_number)


@router.get("/{device_id}", response_model=DeviceRecord)
def api_get(device_id: int, store: RecordStore = Depends(get_store)):
    device = get_device(store, device_id)
    if not device:
        raise HTTPException(404, "Device not found")
    return device


@router.put("/{device_id}", response_model=MessageOut)
def api_update(device_id: int, payload: DeviceUpdate, store: RecordStore = Depends(get_store)):
    try:
        update_device(store, device_id, payload.changes())
    except DeviceNotFoundError as exc:
        raise HTTPException(404, "Device not found") from exc
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return MessageOut(message="Device updated successfully", sequence_number=device_id)


@router.delete("/{device_id}", response_model=MessageOut, response_model_exclude_none=True)
def api_delete(device_id: int, store: RecordStore = Depends(get_store)):
    try:
        delete_device(store, device_id)
    except DeviceNotFoundError as exc:
        raise HTTPException(404, "Device not found") from exc
    return MessageOut(message="Device deleted successfully")
