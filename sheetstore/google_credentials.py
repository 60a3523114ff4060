"""Helpers for validating and normalising Google service account credentials.

Credential material is accepted in two shapes: the JSON document itself
(anything whose first non-blank character is ``{``) or a path to a file
holding that document.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Dict, Iterable, Mapping

__all__ = [
    "CredentialsFileInvalidError",
    "REQUIRED_FIELDS",
    "is_inline_json",
    "load_service_account_data",
    "load_service_account_info",
]


class CredentialsFileInvalidError(Exception):
    """Raised when service account JSON is missing or lacks required data."""


REQUIRED_FIELDS: Iterable[str] = (
    "type",
    "project_id",
    "private_key_id",
    "private_key",
    "client_email",
    "client_id",
    "token_uri",
)


def _normalise_private_key(key: str) -> str:
    key = key.replace("\r\n", "\n").replace("\r", "\n")
    key = key.replace("\\n", "\n")
    if not key.endswith("\n"):
        key += "\n"
    return key


def _parse_json(text: str, *, source: str) -> Mapping[str, object]:
    payload_text = text.lstrip("\ufeff").strip()
    if not payload_text:
        raise CredentialsFileInvalidError(f"Service account JSON is empty ({source}).")

    try:
        payload = json.loads(payload_text)
    except json.JSONDecodeError as exc:
        raise CredentialsFileInvalidError(f"JSON parse error in {source}: {exc.msg}") from exc
    if not isinstance(payload, dict):
        raise CredentialsFileInvalidError(f"Service account JSON in {source} must be an object.")
    return payload


def _load_json(path: Path) -> Mapping[str, object]:
    try:
        with path.open("r", encoding="utf-8-sig") as handle:
            raw = handle.read()
    except OSError as exc:
        raise CredentialsFileInvalidError(f"Could not read credentials file: {exc}") from exc
    return _parse_json(raw, source=str(path))


def _validate_payload(payload: Mapping[str, object]) -> Dict[str, object]:
    data: Dict[str, object] = dict(payload)
    missing: list[str] = []

    for field in REQUIRED_FIELDS:
        value = data.get(field)
        if not isinstance(value, str) or not value.strip():
            missing.append(field)

    if data.get("type") != "service_account":
        missing.append("type")

    if missing:
        ordered = ", ".join(sorted(dict.fromkeys(missing)))
        raise CredentialsFileInvalidError(f"JSON missing fields: {ordered}")

    data["private_key"] = _normalise_private_key(str(data["private_key"]))
    return data


def is_inline_json(credentials: str) -> bool:
    return credentials.lstrip().startswith("{")


def load_service_account_data(path: Path) -> Dict[str, object]:
    """Return validated service account data read from ``path``."""

    return _validate_payload(_load_json(path))


def load_service_account_info(credentials: str) -> Dict[str, object]:
    """Return validated service account data from inline JSON or a file path."""

    if not credentials or not credentials.strip():
        raise CredentialsFileInvalidError("No credentials were configured.")
    if is_inline_json(credentials):
        return _validate_payload(_parse_json(credentials, source="inline credentials"))
    return load_service_account_data(Path(credentials.strip()).expanduser())
