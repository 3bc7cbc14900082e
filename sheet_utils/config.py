"""Configuration for sheet access."""
from __future__ import annotations

from dataclasses import dataclass
from datetime import timezone, tzinfo
import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from dotenv import load_dotenv
import yaml

logger = logging.getLogger(__name__)

ENV_PREFIX = "SHEET_UTILS_"
DEFAULT_SHEET_NAME = "Sheet1"
DEFAULT_TIMEZONE = "UTC"
DEFAULT_HIGHLIGHT_COLOR = "#fff59d"
DEFAULT_CLEAR_COLOR = "white"

# Keys that may come from the YAML file; credentials are env-only.
_FILE_KEYS = (
    "spreadsheet_id",
    "sheet_name",
    "timezone",
    "highlight_color",
    "clear_color",
    "environment",
)


class ConfigError(RuntimeError):
    """Raised when required configuration is missing."""


@dataclass(slots=True)
class Settings:
    """Runtime configuration for a sheet."""

    spreadsheet_id: str
    sheet_name: str = DEFAULT_SHEET_NAME
    timezone: Optional[str] = None
    highlight_color: str = DEFAULT_HIGHLIGHT_COLOR
    clear_color: str = DEFAULT_CLEAR_COLOR
    client_id: Optional[str] = None
    client_secret: Optional[str] = None
    refresh_token: Optional[str] = None
    environment: str = "local"

    @property
    def has_credentials(self) -> bool:
        return all([self.client_id, self.client_secret, self.refresh_token])


def _load_yaml(path: Path) -> Dict[str, Any]:
    if not path.exists():
        raise ConfigError(f"Config file not found at {path}")

    with path.open("r", encoding="utf-8") as handle:
        data = yaml.safe_load(handle) or {}

    if not isinstance(data, dict):
        raise ConfigError(f"Config file {path} must contain a mapping")
    return data


def load_settings(*, config_path: Optional[Path] = None) -> Settings:
    """Load settings from an optional YAML file and environment variables.

    Environment variables (``SHEET_UTILS_*``, also read from a ``.env`` file)
    override values from the file.

    Args:
        config_path: YAML file; defaults to ``$SHEET_UTILS_CONFIG`` if set.

    Returns:
        Settings with every value resolved.

    Raises:
        ConfigError: if no spreadsheet id is configured or the file is invalid.
    """

    load_dotenv()

    path_value = config_path or os.getenv(f"{ENV_PREFIX}CONFIG")
    file_values = _load_yaml(Path(path_value)) if path_value else {}

    resolved: Dict[str, Any] = {}
    for key in _FILE_KEYS:
        value = os.getenv(f"{ENV_PREFIX}{key.upper()}") or file_values.get(key)
        if value not in (None, ""):
            resolved[key] = str(value).strip()

    if not resolved.get("spreadsheet_id"):
        raise ConfigError(
            "Missing spreadsheet id. Export SHEET_UTILS_SPREADSHEET_ID or set "
            "'spreadsheet_id' in the config file."
        )

    return Settings(
        client_id=os.getenv(f"{ENV_PREFIX}CLIENT_ID"),
        client_secret=os.getenv(f"{ENV_PREFIX}CLIENT_SECRET"),
        refresh_token=os.getenv(f"{ENV_PREFIX}REFRESH_TOKEN"),
        **resolved,
    )


def resolve_timezone(name: Optional[str]) -> tzinfo:
    """Turn a configured IANA timezone name into a tzinfo.

    Unset or unknown names fall back to UTC.
    """
    if not name or name == DEFAULT_TIMEZONE:
        return timezone.utc
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        logger.warning(f"Unknown timezone {name!r}, using {DEFAULT_TIMEZONE}: {exc}")
        return timezone.utc
