"""Jinja2 environment for the inventory pages, with our display filters."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from fastapi.templating import Jinja2Templates

from ..models.device import DEVICE_STATUS_CHOICES
from .config import AppSettings


def _or_na(value: Any, placeholder: str = "N/A") -> Any:
    """Show a placeholder for empty optional fields instead of a blank cell."""
    if value is None or (isinstance(value, str) and not value.strip()):
        return placeholder
    return value


def _fmt_date(value: Any, fmt: str = "%Y-%m-%d") -> str:
    """Format ISO dates; anything unparseable (free text like "2019") is shown as-is."""
    if isinstance(value, datetime):
        return value.strftime(fmt)
    if isinstance(value, str) and value:
        try:
            return datetime.fromisoformat(value).strftime(fmt)
        except ValueError:
            return value
    return ""


def _status_class(value: Any) -> str:
    return {
        "Operational": "status-ok",
        "Under Maintenance": "status-warn",
        "Faulty": "status-bad",
        "Retired": "status-muted",
    }.get(value or "", "status-muted")


def get_templates(settings: AppSettings) -> Jinja2Templates:
    templates = Jinja2Templates(directory=str(settings.templates_dir))
    env = templates.env
    env.filters["or_na"] = _or_na
    env.filters["fmt_date"] = _fmt_date
    env.filters["status_class"] = _status_class
    env.globals["app_name"] = settings.APP_NAME
    env.globals["hospital_name"] = settings.HOSPITAL_NAME
    env.globals["status_choices"] = DEVICE_STATUS_CHOICES
    return templates
