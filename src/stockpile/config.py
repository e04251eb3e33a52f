"""Application configuration helpers."""

from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from stockpile.constants import (
    CHILDREN_REQUIREMENT_MULTIPLIER,
    CRITICALLY_LOW_STOCK_PERCENTAGE,
    DEFAULT_KIT_ID,
    EXPIRING_SOON_ALERT_DAYS,
    LOW_STOCK_PERCENTAGE,
)

ENV_FILE_CANDIDATES = (Path(".env"), Path(".env.local"))


class Settings(BaseModel):
    """Global engine settings loaded from environment variables or .env files."""

    database_path: Path = Field(
        default=Path("./data/stockpile.db"),
        description="SQLite database holding the persisted document.",
    )
    log_level: str = Field(default="INFO", description="Logging level (DEBUG/INFO/WARNING/ERROR)")
    log_format: str = Field(
        default="plain",
        description="Logging format (plain/json).",
    )
    default_kit_id: str = Field(
        default=DEFAULT_KIT_ID,
        description="Built-in kit selected for new installations.",
    )
    expiring_soon_days: int = Field(
        default=EXPIRING_SOON_ALERT_DAYS,
        ge=0,
        description="Lookahead window in days for expiring-soon alerts.",
    )
    critically_low_percentage: float = Field(
        default=CRITICALLY_LOW_STOCK_PERCENTAGE,
        ge=0,
        le=100,
        description="Category stock percentage below which alerts are critical.",
    )
    low_stock_percentage: float = Field(
        default=LOW_STOCK_PERCENTAGE,
        ge=0,
        le=100,
        description="Category stock percentage below which alerts are warnings.",
    )
    children_multiplier: float = Field(
        default=CHILDREN_REQUIREMENT_MULTIPLIER,
        ge=0,
        description="Share of an adult's needs attributed to each child.",
    )

    model_config = ConfigDict(frozen=True)


def _parse_env_file(path: Path) -> dict[str, str]:
    payload: dict[str, str] = {}
    try:
        with path.open("r", encoding="utf-8") as handle:
            for raw_line in handle:
                line = raw_line.strip()
                if not line or line.startswith("#") or "=" not in line:
                    continue
                key, raw_value = line.split("=", 1)
                payload[key.strip()] = raw_value.strip()
    except FileNotFoundError:
        return {}
    return payload


def _load_env_file_values() -> dict[str, str]:
    values: dict[str, str] = {}
    for candidate in ENV_FILE_CANDIDATES:
        values.update(_parse_env_file(candidate))
    return values


def _load_from_env() -> dict[str, object]:
    """Load optional overrides from env vars (with .env fallbacks)."""

    file_values = _load_env_file_values()

    def _env(key: str) -> Optional[str]:
        return os.environ.get(key) or file_values.get(key)

    payload: dict[str, object] = {}
    if (db_path := _env("STOCKPILE_DATABASE_PATH")):
        payload["database_path"] = Path(db_path)
    if (log_level := _env("STOCKPILE_LOG_LEVEL")):
        payload["log_level"] = log_level
    if (log_format := _env("STOCKPILE_LOG_FORMAT")):
        payload["log_format"] = log_format
    if (kit_id := _env("STOCKPILE_DEFAULT_KIT_ID")):
        payload["default_kit_id"] = kit_id
    if (expiring_days := _env("STOCKPILE_EXPIRING_SOON_DAYS")):
        try:
            payload["expiring_soon_days"] = int(expiring_days)
        except ValueError:
            pass
    if (critical_pct := _env("STOCKPILE_CRITICALLY_LOW_PERCENTAGE")):
        try:
            payload["critically_low_percentage"] = float(critical_pct)
        except ValueError:
            pass
    if (low_pct := _env("STOCKPILE_LOW_STOCK_PERCENTAGE")):
        try:
            payload["low_stock_percentage"] = float(low_pct)
        except ValueError:
            pass
    if (children := _env("STOCKPILE_CHILDREN_MULTIPLIER")):
        try:
            payload["children_multiplier"] = float(children)
        except ValueError:
            pass
    return payload


@lru_cache
def get_settings() -> Settings:
    """Return cached application settings."""

    return Settings(**_load_from_env())
