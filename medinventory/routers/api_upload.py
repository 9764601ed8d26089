from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile

from ..core.config import AppSettings
from ..deps.store import get_app_settings
from ..schemas.device import UploadOut
from ..services.uploads import save_attachment

router = APIRouter(tags=["uploads"])
logger = logging.getLogger("medinventory.api")


@router.post("/upload", response_model=UploadOut)
def api_upload(
    device_id: int = Form(..., alias="deviceId"),
    file: Optional[UploadFile] = File(None),
    settings: AppSettings = Depends(get_app_settings),
):
    if file is None or not file.filename:
        raise HTTPException(status_code=400, detail="No file uploaded")
    try:
        path = save_attachment(settings.uploads_dir, device_id, file.filename, file.file.read())
    except OSError as exc:
        logger.exception("upload.failed", extra={"extra_data": {"device_id": device_id}})
        raise HTTPException(status_code=500, detail="Error uploading file") from exc
    return UploadOut(file_path=path)
