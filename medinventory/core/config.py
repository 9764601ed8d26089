"""Environment-driven configuration for the inventory portal.

Every setting the service reads lives on ``AppSettings`` so an operator can
answer "what can I configure?" by reading one class. Values come from the
process environment first and ``.env`` / ``.env.local`` second.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Any, Iterable, Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

PACKAGE_DIR = Path(__file__).resolve().parent.parent


class AppSettings(BaseSettings):
    """Environment-driven application configuration."""

    model_config = SettingsConfigDict(
        env_file=(".env", ".env.local"),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    APP_NAME: str = "Medical Device Inventory"
    HOSPITAL_NAME: str = "AL NASIRIYA TEACHING HOSPITAL"

    DATA_DIR: Path = Field(default_factory=lambda: Path.cwd() / "data")
    DATA_FILE: Path | None = None
    # Read-only fallback document used until the first save creates DATA_FILE.
    SEED_FILE: Path | None = None
    # "file" persists to DATA_FILE; "memory" keeps records for the lifetime of
    # the process only.
    STORAGE_BACKEND: Literal["file", "memory"] = "file"
    UPLOADS_DIR: Path | None = None

    TEMPLATES_DIR: Path | None = None
    STATIC_DIR: Path | None = None

    HOST: str = "0.0.0.0"
    PORT: int = 8089

    LOG_LEVEL: str = "INFO"
    ALLOWED_ORIGINS: list[str] = Field(default_factory=list)

    def _resolve_path(self, base: Path | None, fallback: Path) -> Path:
        return base if base is not None else fallback

    @property
    def data_file(self) -> Path:
        return self._resolve_path(self.DATA_FILE, self.DATA_DIR / "MDDB.json")

    @property
    def uploads_dir(self) -> Path:
        return self._resolve_path(self.UPLOADS_DIR, self.DATA_DIR / "uploads")

    @property
    def templates_dir(self) -> Path:
        return self._resolve_path(self.TEMPLATES_DIR, PACKAGE_DIR / "templates")

    @property
    def static_dir(self) -> Path:
        return self._resolve_path(self.STATIC_DIR, PACKAGE_DIR / "static")

    @field_validator("ALLOWED_ORIGINS", mode="before")
    @classmethod
    def parse_allowed_origins(cls, value: Any) -> list[str]:
        if value in (None, "", []):
            return []
        if isinstance(value, str):
            return [item.strip() for item in value.split(",") if item.strip()]
        if isinstance(value, Iterable):
            return [str(item).strip() for item in value if str(item).strip()]
        raise TypeError("ALLOWED_ORIGINS must be a comma separated string or list")

    @field_validator("LOG_LEVEL")
    @classmethod
    def normalize_log_level(cls, value: str) -> str:
        return (value or "INFO").strip().upper()


@lru_cache(maxsize=1)
def get_settings() -> AppSettings:
    settings = AppSettings()
    settings.DATA_DIR.mkdir(parents=True, exist_ok=True)
    return settings
