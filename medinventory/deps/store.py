from __future__ import annotations

from fastapi import Request

from ..core.config import AppSettings
from ..db.store import RecordStore


def get_store(request: Request) -> RecordStore:
    """FastAPI dependency returning the store created at application start."""
    return request.app.state.store


def get_app_settings(request: Request) -> AppSettings:
    return request.app.state.settings
