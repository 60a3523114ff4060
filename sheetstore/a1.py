"""A1 notation helpers shared by the Sheets gateway and the repository."""
from __future__ import annotations

from typing import List


def column_letter(index: int) -> str:
    """Return the spreadsheet column letter for a 1-indexed column index."""

    if index < 1:
        raise ValueError("Column index must be >= 1")
    letters: List[str] = []
    while index:
        index, remainder = divmod(index - 1, 26)
        letters.append(chr(65 + remainder))
    return "".join(reversed(letters))


def quote_title(title: str) -> str:
    """Return a worksheet title quoted according to A1 notation rules."""

    safe = (title or "").strip()
    if len(safe) >= 2 and safe[0] == safe[-1] and safe[0] in {"'", '"'}:
        safe = safe[1:-1].replace("''", "'")
    if not safe:
        raise ValueError("Worksheet title must not be empty")
    return "'" + safe.replace("'", "''") + "'"


def a1_range(title: str, range_spec: str) -> str:
    return f"{quote_title(title)}!{range_spec}"


def full_range(title: str, *, columns: int = 26) -> str:
    """Return an A1 range spanning every row of the first ``columns`` columns."""

    return a1_range(title, f"A1:{column_letter(max(1, columns))}")


def anchor_range(title: str) -> str:
    """Return the ``A1`` anchor used for appends."""

    return a1_range(title, "A1")


def row_range(title: str, row_number: int, *, columns: int) -> str:
    """Return an A1 range covering one 1-based ``row_number``."""

    if row_number < 1:
        raise ValueError("Row number must be >= 1")
    last_column = column_letter(max(1, columns))
    return a1_range(title, f"A{row_number}:{last_column}{row_number}")


__all__ = ["a1_range", "anchor_range", "column_letter", "full_range", "quote_title", "row_range"]
