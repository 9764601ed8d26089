from __future__ import annotations

import logging
import re
import time
from pathlib import Path, PurePath

logger = logging.getLogger("medinventory.uploads")

PUBLIC_PREFIX = "/uploads"
_WHITESPACE = re.compile(r"\s+")


def sanitize_filename(name: str) -> str:
    """Drop any directory part the client sent and dash out whitespace."""
    # Browsers on Windows may send the full path; treat both separators as such.
    base = PurePath(name.replace("\\", "/")).name
    return _WHITESPACE.sub("-", base.strip()) or "upload"


def attachment_dir(upload_root: Path, device_id: int) -> Path:
    return Path(upload_root) / "devices" / str(device_id)


def save_attachment(upload_root: Path, device_id: int, filename: str, content: bytes) -> str:
    """Write ``content`` beside the device's other photos; return its public path.

    Files are prefixed with the epoch time in milliseconds so two uploads of
    ``photo.jpg`` never collide. No content-type or size checks are made.
    """
    target_dir = attachment_dir(upload_root, device_id)
    target_dir.mkdir(parents=True, exist_ok=True)
    stored_name = f"{int(time.time() * 1000)}-{sanitize_filename(filename)}"
    (target_dir / stored_name).write_bytes(content)
    logger.info(
        "upload.saved",
        extra={"extra_data": {"device_id": device_id, "file": stored_name, "bytes": len(content)}},
    )
    return f"{PUBLIC_PREFIX}/devices/{device_id}/{stored_name}"
