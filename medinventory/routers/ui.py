"""HTML pages: list/search, detail, create/edit forms and delete.

These handlers only translate between forms and the same repository and
update helpers the JSON API uses; they hold no rules of their own.
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse, RedirectResponse
from starlette.datastructures import FormData, UploadFile

from ..core.config import AppSettings
from ..core.errors import DeviceNotFoundError
from ..crud.devices import create_device, delete_device, distinct_values, get_device, list_devices
from ..db.store import RecordStore
from ..deps.store import get_app_settings, get_store
from ..models.device import FIELD_ATTRIBUTES, DeviceRecord
from ..services.inventory import search_devices, summarize
from ..services.updates import build_replacement, update_device
from ..services.uploads import save_attachment

router = APIRouter(include_in_schema=False)
logger = logging.getLogger("medinventory.ui")

# Form inputs are named after the document keys; identity and images are handled separately.
FORM_FIELDS = tuple(key for key in FIELD_ATTRIBUTES if key not in ("SequenceNumber", "ImageUrls"))

IMAGE_STORE_ERROR = "The device was saved, but its photos could not be stored. Please try uploading them again."


def _templates(request: Request):
    return request.app.state.templates


def _filter_options(store: RecordStore) -> dict[str, list[str]]:
    return {
        "categories": distinct_values(store, "DeviceCategory"),
        "locations": distinct_values(store, "DeviceLocation"),
        "manufacturers": distinct_values(store, "Manufacturer"),
    }


def _form_payload(form: FormData) -> dict[str, Any]:
    payload: dict[str, Any] = {}
    for key in FORM_FIELDS:
        value = form.get(key)
        if isinstance(value, str):
            payload[key] = value.strip() or None
    return payload


def _uploaded_files(form: FormData) -> list[UploadFile]:
    return [f for f in form.getlist("images") if isinstance(f, UploadFile) and f.filename]


async def _store_images(settings: AppSettings, device_id: int, files: list[UploadFile]) -> list[str]:
    paths = []
    for upload in files:
        content = await upload.read()
        paths.append(save_attachment(settings.uploads_dir, device_id, upload.filename, content))
    return paths


def _not_found(request: Request, device_id: int) -> HTMLResponse:
    return _templates(request).TemplateResponse(
        request, "not_found.html", {"device_id": device_id}, status_code=404
    )


def _render_form(request: Request, store: RecordStore, device: DeviceRecord | None, values: dict, error: str = "", status_code: int = 200):
    context = {
        "device": device,
        "values": values,
        "error": error,
        "options": _filter_options(store),
        "is_edit": device is not None,
    }
    return _templates(request).TemplateResponse(request, "device_form.html", context, status_code=status_code)


@router.get("/", response_class=HTMLResponse)
def index_page(
    request: Request,
    q: str = "",
    category: str = "",
    location: str = "",
    store: RecordStore = Depends(get_store),
):
    records = list_devices(store)
    context = {
        "stats": summarize(records),
        "records": search_devices(records, q, category, location),
        "filters": {"q": q, "category": category, "location": location},
        "filtered": bool(q or category or location),
        "options": _filter_options(store),
    }
    return _templates(request).TemplateResponse(request, "index.html", context)


@router.get("/ui/device_table", response_class=HTMLResponse)
def device_table_partial(
    request: Request,
    q: str = "",
    category: str = "",
    location: str = "",
    store: RecordStore = Depends(get_store),
):
    records = search_devices(list_devices(store), q, category, location)
    return _templates(request).TemplateResponse(request, "_device_rows.html", {"records": records})


@router.get("/device/new", response_class=HTMLResponse)
def new_device_page(request: Request, store: RecordStore = Depends(get_store)):
    return _render_form(request, store, None, {})


@router.post("/device/new", response_class=HTMLResponse)
async def new_device_submit(
    request: Request,
    store: RecordStore = Depends(get_store),
    settings: AppSettings = Depends(get_app_settings),
):
    form = await request.form()
    payload = _form_payload(form)
    try:
        device = create_device(store, payload)
    except ValueError as exc:
        return _render_form(request, store, None, payload, error=str(exc), status_code=400)

    files = _uploaded_files(form)
    if files:
        try:
            paths = await _store_images(settings, device.sequence_number, files)
        except OSError:
            logger.exception("ui.image_store_failed", extra={"extra_data": {"sequence_number": device.sequence_number}})
            # The device itself is saved; offer its edit form to retry the photos.
            return _render_form(
                request, store, device, device.to_document(),
                error=IMAGE_STORE_ERROR, status_code=500,
            )
        update_device(store, device.sequence_number, {"ImageUrls": paths})
    return RedirectResponse(url=f"/device/{device.sequence_number}", status_code=303)


@router.get("/device/{device_id}", response_class=HTMLResponse)
def device_detail_page(request: Request, device_id: int, store: RecordStore = Depends(get_store)):
    device = get_device(store, device_id)
    if not device:
        return _not_found(request, device_id)
    return _templates(request).TemplateResponse(request, "device_detail.html", {"device": device})


@router.get("/device/{device_id}/edit", response_class=HTMLResponse)
def edit_device_page(request: Request, device_id: int, store: RecordStore = Depends(get_store)):
    device = get_device(store, device_id)
    if not device:
        return _not_found(request, device_id)
    return _render_form(request, store, device, device.to_document())


@router.post("/device/{device_id}/edit", response_class=HTMLResponse)
async def edit_device_submit(
    request: Request,
    device_id: int,
    store: RecordStore = Depends(get_store),
    settings: AppSettings = Depends(get_app_settings),
):
    device = get_device(store, device_id)
    if not device:
        return _not_found(request, device_id)

    form = await request.form()
    changes = _form_payload(form)
    try:
        # Reject before any photo is written to disk.
        build_replacement(device, changes)
    except ValueError as exc:
        return _render_form(request, store, device, changes, error=str(exc), status_code=400)

    files = _uploaded_files(form)
    if files:
        try:
            changes["ImageUrls"] = await _store_images(settings, device_id, files)
        except OSError:
            logger.exception("ui.image_store_failed", extra={"extra_data": {"sequence_number": device_id}})
            return _render_form(
                request, store, device, changes,
                error="The photos could not be stored, so no changes were saved.", status_code=500,
            )
    try:
        update_device(store, device_id, changes)
    except DeviceNotFoundError:
        return _not_found(request, device_id)
    except ValueError as exc:
        return _render_form(request, store, device, changes, error=str(exc), status_code=400)
    return RedirectResponse(url=f"/device/{device_id}", status_code=303)


@router.post("/device/{device_id}/delete", response_class=HTMLResponse)
def delete_device_submit(request: Request, device_id: int, store: RecordStore = Depends(get_store)):
    try:
        delete_device(store, device_id)
    except DeviceNotFoundError:
        return _not_found(request, device_id)
    return RedirectResponse(url="/", status_code=303)
