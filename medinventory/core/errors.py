from __future__ import annotations

import logging
from typing import Any

from fastapi import Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette import status
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger("medinventory.errors")


class StorageError(RuntimeError):
    """The device document (or an attachment) could not be read or written."""


class DeviceNotFoundError(LookupError):
    """No device record carries the requested sequence number."""

    def __init__(self, sequence_number: int | None) -> None:
        super().__init__(f"Device {sequence_number} not found")
        self.sequence_number = sequence_number


class ErrorEnvelope(JSONResponse):
    def __init__(
        self,
        *,
        status_code: int,
        code: str,
        message: str,
        details: Any | None = None,
        headers: dict[str, str] | None = None,
    ) -> None:
        payload: dict[str, Any] = {"code": code, "message": message}
        if details is not None:
            payload["details"] = details
        super().__init__(payload, status_code=status_code, headers=headers)


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    detail = exc.detail
    message = detail if isinstance(detail, str) else "Error"
    details = detail if isinstance(detail, dict) else None
    code = "not_found" if exc.status_code == status.HTTP_404_NOT_FOUND else "http_error"
    return ErrorEnvelope(
        status_code=exc.status_code,
        code=code,
        message=message,
        details=details,
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    # Malformed bodies are reported like missing fields: the client sent bad data.
    return ErrorEnvelope(
        status_code=status.HTTP_400_BAD_REQUEST,
        code="validation_error",
        message="Invalid request data",
        details={"errors": jsonable_encoder(exc.errors())},
    )


async def storage_exception_handler(request: Request, exc: StorageError):
    logger.error(
        "storage.failure",
        extra={"extra_data": {"path": request.url.path, "method": request.method, "error": str(exc)}},
    )
    return ErrorEnvelope(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        code="storage_error",
        message=str(exc) or "Storage failure",
    )
