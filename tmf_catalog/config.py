"""Configuration loading for the TMF catalog service.

Rules:
- Primary source: ``tmf_config.json`` at the project root (optional).
- Overrides: text files under ``config/``, then environment variables
  (a local ``.env`` is loaded first without overriding the real environment).
- Validation: Pydantic models enforce required fields and value constraints.
"""

from __future__ import annotations

import json
import logging
import os
import re
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field, ValidationError as PydanticValidationError, field_validator


CONFIG_DIR = Path("config")
ROOT_CONFIG_FILE = Path("tmf_config.json")
DEFAULT_DSN = "sqlite+pysqlite:///./tmf_catalog.db"
DEFAULT_COLOR = "#3B82F6"
logger = logging.getLogger(__name__)

_HEX_COLOR_RE = re.compile(r"^#[0-9A-Fa-f]{6}$")


def _read_config_file(rel_path: str) -> Optional[str]:
    path = CONFIG_DIR / rel_path
    try:
        if path.exists():
            return path.read_text(encoding="utf-8").strip()
    except (OSError, UnicodeDecodeError) as e:
        logger.warning("Failed to read override %s: %s", path, e)
        return None
    return None


def _env(key: str, default: Optional[str] = None) -> Optional[str]:
    return os.environ.get(key, default)


def _truthy(value: object) -> bool:
    return str(value).strip().lower() in {"1", "true", "yes", "on"}


class DatabaseConfig(BaseModel):
    dsn: str
    auto_migrate: bool = Field(default=True)

    @field_validator("dsn")
    @classmethod
    def dsn_must_be_non_empty(cls, v: str) -> str:
        if not isinstance(v, str) or not v.strip():
            raise ValueError("database.dsn must be a non-empty string")
        return v.strip()


class ApiConfig(BaseModel):
    cors_origins: List[str] = Field(default_factory=lambda: ["*"])


class CatalogConfig(BaseModel):
    code_prefix: str = Field(default="ARI", min_length=1, max_length=20)
    default_color: str = DEFAULT_COLOR

    @field_validator("default_color")
    @classmethod
    def color_must_be_hex(cls, v: str) -> str:
        if not _HEX_COLOR_RE.match(v or ""):
            raise ValueError("catalog.default_color must look like #RRGGBB")
        return v


class AppConfig(BaseModel):
    database: DatabaseConfig
    api: ApiConfig
    catalog: CatalogConfig


def _read_json_file(path: Path) -> dict:
    try:
        if path.exists():
            data = json.loads(path.read_text(encoding="utf-8"))
            return data if isinstance(data, dict) else {}
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
        logger.error("Failed to read JSON config %s: %s", path, e)
    return {}


def _split_origins(raw: str) -> List[str]:
    return [o.strip() for o in raw.split(",") if o.strip()]


def load_config() -> AppConfig:
    """Load configuration with validation.

    Precedence (highest first):
    1) Environment variables (``.env`` included)
    2) Text files in ``config/``
    3) ``tmf_config.json`` at the project root
    4) Development defaults
    """
    load_dotenv(override=False)
    base = _read_json_file(ROOT_CONFIG_FILE)

    def _base(path: str, default: Optional[str] = None) -> Optional[str]:
        cur: object = base
        for key in path.split("."):
            if not isinstance(cur, dict) or key not in cur:
                return default
            cur = cur[key]
        if isinstance(cur, list):
            return ",".join(str(x) for x in cur)
        return str(cur) if cur is not None else default

    dsn = (
        _env("TEST_DATABASE_URL")
        or _env("DATABASE_URL")
        or _read_config_file("database.url")
        or _base("database.dsn")
        or DEFAULT_DSN
    )
    auto_migrate_text = (
        _env("AUTO_APPLY_MIGRATIONS")
        or _read_config_file("database.auto_migrate")
        or _base("database.auto_migrate", "true")
    )
    origins_text = _env("CORS_ORIGINS") or _read_config_file("api.cors_origins") or _base("api.cors_origins", "*")
    code_prefix = (
        _env("DOCUMENT_CODE_PREFIX")
        or _read_config_file("catalog.code_prefix")
        or _base("catalog.code_prefix", "ARI")
    )
    default_color = _base("catalog.default_color", DEFAULT_COLOR)

    try:
        return AppConfig(
            database=DatabaseConfig(dsn=dsn, auto_migrate=_truthy(auto_migrate_text)),
            api=ApiConfig(cors_origins=_split_origins(str(origins_text)) or ["*"]),
            catalog=CatalogConfig(code_prefix=str(code_prefix).strip(), default_color=str(default_color)),
        )
    except PydanticValidationError as e:
        logger.error("Invalid application configuration: %s", e)
        raise


__all__ = [
    "AppConfig",
    "ApiConfig",
    "CatalogConfig",
    "DatabaseConfig",
    "DEFAULT_COLOR",
    "load_config",
]
