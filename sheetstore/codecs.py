"""Cell value conversion rules.

Every mapped field declares a :class:`ColumnType`.  Decoding turns the text
form of a cell into a Python value and encoding does the reverse.  Two
incompatible sheet conventions exist side by side and are captured as
:class:`CodecProfile` values:

``YES_NO_PROFILE``
    Lists are joined with ``", "`` and split on ``","``; booleans are written
    as ``Yes``/``No``.

``LITERAL_PROFILE``
    Lists are joined and split with ``"@CFD "``; booleans are written as
    ``True``/``False``.

A cell that cannot be converted never raises out of this module:
:func:`decode_cell` logs the failure and returns :data:`MISSING` so the caller
leaves the field at its current value.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, List, Optional, Type

logger = logging.getLogger(__name__)

TRUTHY_TOKENS = frozenset({"yes", "true"})
_DISPLAY_FORMATS = ("%m/%d/%Y %H:%M:%S", "%m/%d/%Y %H:%M", "%m/%d/%Y", "%Y/%m/%d")


class ColumnType(Enum):
    TEXT = "TEXT"
    TEXT_LIST = "TEXT_LIST"
    BOOLEAN = "BOOLEAN"
    INTEGER = "INTEGER"
    NUMBER = "NUMBER"
    DECIMAL = "DECIMAL"
    DATE = "DATE"
    DATETIME = "DATETIME"
    ENUM = "ENUM"


class _Missing:
    def __repr__(self) -> str:
        return "MISSING"


MISSING: Any = _Missing()


@dataclass(frozen=True, slots=True)
class CodecProfile:
    """Sheet convention for list and boolean cells."""

    name: str
    list_join: str
    list_split: str
    true_token: str
    false_token: str


YES_NO_PROFILE = CodecProfile(name="yes_no", list_join=", ", list_split=",", true_token="Yes", false_token="No")
LITERAL_PROFILE = CodecProfile(
    name="literal", list_join="@CFD ", list_split="@CFD ", true_token="True", false_token="False"
)

PROFILES = {profile.name: profile for profile in (YES_NO_PROFILE, LITERAL_PROFILE)}


def get_profile(name: str) -> CodecProfile:
    try:
        return PROFILES[name]
    except KeyError:
        raise ValueError(f"Unknown codec profile {name!r}; expected one of {sorted(PROFILES)}") from None


def cell_text(value: Any) -> Optional[str]:
    """Return the string form of a raw cell, or ``None`` for blank cells."""

    if value is None:
        return None
    if isinstance(value, bool):
        text = "TRUE" if value else "FALSE"
    else:
        text = str(value)
    return text or None


def split_list(text: str, profile: CodecProfile) -> List[str]:
    tokens = (token.strip() for token in text.split(profile.list_split))
    return [token for token in tokens if token]


def parse_bool(text: str) -> bool:
    return text.strip().lower() in TRUTHY_TOKENS


def _parse_int(text: str) -> int:
    return int(text.strip())


def _parse_float(text: str) -> float:
    return float(text.strip())


def _parse_decimal(text: str) -> Decimal:
    try:
        return Decimal(text.strip())
    except InvalidOperation as exc:
        raise ValueError(f"Cannot convert {text!r} to Decimal") from exc


def _parse_datetime(text: str) -> datetime:
    text = text.strip()
    try:
        return datetime.fromisoformat(text.replace("Z", "+00:00"))
    except ValueError:
        pass
    # USER_ENTERED dates come back in the spreadsheet's display format.
    for pattern in _DISPLAY_FORMATS:
        try:
            return datetime.strptime(text, pattern)
        except ValueError:
            continue
    raise ValueError(f"Cannot parse date/time value {text!r}")


def _parse_date(text: str) -> date:
    try:
        return date.fromisoformat(text.strip())
    except ValueError:
        return _parse_datetime(text).date()


def _parse_enum(text: str, enum_type: Optional[Type[Enum]]) -> Enum:
    if enum_type is None:
        raise TypeError("ENUM columns require an enum type")
    text = text.strip()
    for member in enum_type:
        if str(member.value) == text:
            return member
    lowered = text.lower()
    for member in enum_type:
        if member.name.lower() == lowered:
            return member
    raise ValueError(f"{text!r} is not a valid {enum_type.__name__}")


_PARSERS = {
    ColumnType.INTEGER: _parse_int,
    ColumnType.NUMBER: _parse_float,
    ColumnType.DECIMAL: _parse_decimal,
    ColumnType.DATE: _parse_date,
    ColumnType.DATETIME: _parse_datetime,
}


def decode_cell(
    column_type: ColumnType,
    raw: Any,
    profile: CodecProfile,
    *,
    enum_type: Optional[Type[Enum]] = None,
    field_name: str = "",
) -> Any:
    """Return the decoded value of ``raw`` or :data:`MISSING`.

    ``MISSING`` is returned for blank cells and for values that cannot be
    converted; the latter is logged with the field name.  Boolean cells never
    fail: anything other than a truthy token decodes to ``False``.
    """

    text = cell_text(raw)
    if text is None:
        return MISSING
    if column_type is ColumnType.TEXT:
        return text
    if column_type is ColumnType.TEXT_LIST:
        return split_list(text, profile)
    if column_type is ColumnType.BOOLEAN:
        return parse_bool(text)
    try:
        if column_type is ColumnType.ENUM:
            return _parse_enum(text, enum_type)
        return _PARSERS[column_type](text)
    except (TypeError, ValueError, OverflowError) as exc:
        logger.warning("Could not set field %r from value %r: %s", field_name, text, exc)
        return MISSING


def encode_value(column_type: ColumnType, value: Any, profile: CodecProfile) -> str:
    """Return the cell text written for ``value``."""

    if value is None:
        return ""
    if column_type is ColumnType.TEXT_LIST or isinstance(value, (list, tuple)):
        return profile.list_join.join(str(item) for item in value)
    if column_type is ColumnType.BOOLEAN or isinstance(value, bool):
        return profile.true_token if value else profile.false_token
    if isinstance(value, Enum):
        return str(value.value)
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    return str(value)


__all__ = [
    "CodecProfile",
    "ColumnType",
    "LITERAL_PROFILE",
    "MISSING",
    "PROFILES",
    "TRUTHY_TOKENS",
    "YES_NO_PROFILE",
    "cell_text",
    "decode_cell",
    "encode_value",
    "get_profile",
    "parse_bool",
    "split_list",
]
