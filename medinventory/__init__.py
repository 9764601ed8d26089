"""Application factory and top-level wiring for the medical device inventory.

``create_app`` brings together configuration, the record store, templates,
static/upload mounts, middleware, routers and error handlers. The store is
built exactly once here and handed to request handlers through
``app.state``; nothing resets it behind the scenes.
"""

from __future__ import annotations

import logging

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException

from .core.config import AppSettings, get_settings
from .core.errors import (
    StorageError,
    http_exception_handler,
    storage_exception_handler,
    validation_exception_handler,
)
from .core.jinja import get_templates
from .db.store import RecordStore, build_store
from .middlewares import RequestIdMiddleware, SecurityHeadersMiddleware

logger = logging.getLogger("medinventory")


def create_app(settings: AppSettings | None = None, store: RecordStore | None = None) -> FastAPI:
    settings = settings or get_settings()
    app = FastAPI(title=settings.APP_NAME)

    app.state.settings = settings
    app.state.store = store if store is not None else build_store(settings)
    app.state.templates = get_templates(settings)
    logger.info(
        "app.configured",
        extra={
            "extra_data": {
                "storage_backend": settings.STORAGE_BACKEND,
                "data_file": str(settings.data_file),
                "uploads_dir": str(settings.uploads_dir),
            }
        },
    )

    # Browsers load CSS/JS from /static and device photos from /uploads.
    settings.uploads_dir.mkdir(parents=True, exist_ok=True)
    app.mount("/static", StaticFiles(directory=str(settings.static_dir)), name="static")
    app.mount("/uploads", StaticFiles(directory=str(settings.uploads_dir)), name="uploads")

    app.add_middleware(SecurityHeadersMiddleware)
    if settings.ALLOWED_ORIGINS:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=settings.ALLOWED_ORIGINS,
            allow_methods=["*"],
            allow_headers=["*"],
        )
    app.add_middleware(RequestIdMiddleware)

    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(StorageError, storage_exception_handler)

    from .routers import api_devices, api_upload, ui

    app.include_router(ui.router)
    app.include_router(api_devices.router)
    app.include_router(api_upload.router)
    # Legacy /api paths, still used by older scripts.
    app.include_router(api_devices.router, prefix="/api", include_in_schema=False)
    app.include_router(api_upload.router, prefix="/api", include_in_schema=False)

    return app


__all__ = ["create_app"]
