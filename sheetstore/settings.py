"""Configuration helpers for sheetstore."""
from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Mapping, Optional

from sheetstore.codecs import PROFILES, CodecProfile, get_profile
from sheetstore.schema import DEFAULT_HEADER_ALIASES, HeaderAliases
from sheetstore.sheets_client import DEFAULT_READ_COLUMNS

logger = logging.getLogger(__name__)

ENV_SPREADSHEET_ID = "SHEETSTORE_SPREADSHEET_ID"
ENV_CREDENTIALS = "SHEETSTORE_CREDENTIALS"
ENV_DEFAULT_SHEET = "SHEETSTORE_DEFAULT_SHEET"
ENV_SETTINGS_PATH = "SHEETSTORE_SETTINGS"

DEFAULT_SHEET = "Sheet1"
DEFAULT_PROFILE = "yes_no"


class SettingsError(Exception):
    """Raised when the configuration is incomplete or malformed."""


@dataclass
class SheetsSettings:
    spreadsheet_id: str
    credentials: str
    default_sheet: str = DEFAULT_SHEET
    read_columns: int = DEFAULT_READ_COLUMNS
    codec_profile: str = DEFAULT_PROFILE
    serialize_writes: bool = False
    header_aliases: Dict[str, str] = field(default_factory=lambda: dict(DEFAULT_HEADER_ALIASES))
    log_level: str = "INFO"

    def profile(self) -> CodecProfile:
        return get_profile(self.codec_profile)

    def aliases(self) -> HeaderAliases:
        return HeaderAliases(self.header_aliases)

    def to_json(self) -> Dict[str, object]:
        return {
            "spreadsheet_id": self.spreadsheet_id,
            "credentials": self.credentials,
            "default_sheet": self.default_sheet,
            "read_columns": self.read_columns,
            "codec_profile": self.codec_profile,
            "serialize_writes": self.serialize_writes,
            "header_aliases": dict(self.header_aliases),
            "log_level": self.log_level,
        }


def _read_settings_file(path: Path) -> Dict[str, object]:
    try:
        with path.open("r", encoding="utf-8") as handle:
            data = json.load(handle)
    except OSError as exc:
        raise SettingsError(f"Could not read settings file {path}: {exc}") from exc
    except json.JSONDecodeError as exc:
        raise SettingsError(f"Settings file {path} is not valid JSON: {exc.msg}") from exc
    if not isinstance(data, dict):
        raise SettingsError(f"Settings file {path} must contain a JSON object")
    return data


def _as_bool(value: object) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in {"1", "true", "yes", "y", "on"}
    return bool(value)


def load_settings(
    path: Optional[str | Path] = None,
    *,
    environ: Optional[Mapping[str, str]] = None,
) -> SheetsSettings:
    """Build settings from an optional JSON file overlaid with environment variables."""

    env = os.environ if environ is None else environ
    data: Dict[str, object] = {}
    settings_path = path or env.get(ENV_SETTINGS_PATH)
    if settings_path:
        data.update(_read_settings_file(Path(settings_path).expanduser()))
        logger.debug("Loaded settings from %s", settings_path)

    overrides = {
        "spreadsheet_id": env.get(ENV_SPREADSHEET_ID),
        "credentials": env.get(ENV_CREDENTIALS),
        "default_sheet": env.get(ENV_DEFAULT_SHEET),
    }
    data.update({key: value for key, value in overrides.items() if value})

    spreadsheet_id = str(data.get("spreadsheet_id") or "").strip()
    credentials = str(data.get("credentials") or "")
    if not spreadsheet_id:
        raise SettingsError(f"A spreadsheet id is required (set {ENV_SPREADSHEET_ID}).")
    if not credentials.strip():
        raise SettingsError(f"Credentials are required (set {ENV_CREDENTIALS}).")

    profile = str(data.get("codec_profile", DEFAULT_PROFILE))
    if profile not in PROFILES:
        raise SettingsError(f"Unknown codec_profile {profile!r}; expected one of {sorted(PROFILES)}")

    aliases = dict(DEFAULT_HEADER_ALIASES)
    extra_aliases = data.get("header_aliases", {})
    if not isinstance(extra_aliases, Mapping):
        raise SettingsError("header_aliases must be an object of header text to field name")
    aliases.update({str(key): str(value) for key, value in extra_aliases.items()})

    try:
        read_columns = int(data.get("read_columns", DEFAULT_READ_COLUMNS))
    except (TypeError, ValueError) as exc:
        raise SettingsError(f"read_columns must be an integer: {exc}") from exc
    if read_columns < 1:
        raise SettingsError("read_columns must be >= 1")

    return SheetsSettings(
        spreadsheet_id=spreadsheet_id,
        credentials=credentials,
        default_sheet=str(data.get("default_sheet") or DEFAULT_SHEET),
        read_columns=read_columns,
        codec_profile=profile,
        serialize_writes=_as_bool(data.get("serialize_writes", False)),
        header_aliases=aliases,
        log_level=str(data.get("log_level", "INFO")).upper(),
    )


__all__ = ["SettingsError", "SheetsSettings", "load_settings"]
