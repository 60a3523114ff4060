"""Header discovery for sheet-backed tables.

The first row of a worksheet is its schema.  :class:`SchemaResolver` reads
the used range and turns that row into a mapping of canonical field name to
zero-based column index; every following row is returned untouched.  Nothing
is cached: each call reflects the sheet as it is at that moment.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional

from sheetstore.codecs import cell_text
from sheetstore.sheets_client import DEFAULT_READ_COLUMNS, GoogleSheetsClient

logger = logging.getLogger(__name__)

DEFAULT_HEADER_ALIASES: Mapping[str, str] = {
    "Cluster Name": "ClusterName",
    "Primary Keyword": "PrimaryKeyword",
}

HeaderColumnMap = Dict[str, int]
Row = List[Any]


class HeaderAliases:
    """Case-insensitive translation of header text to canonical field names."""

    def __init__(self, aliases: Optional[Mapping[str, str]] = None) -> None:
        source = DEFAULT_HEADER_ALIASES if aliases is None else aliases
        self._aliases: Dict[str, str] = {header.strip().casefold(): name for header, name in source.items()}

    def canonical(self, header: str) -> str:
        """Return the field name for ``header``; unknown headers pass through."""

        return self._aliases.get(header.casefold(), header)

    def extended(self, extra: Mapping[str, str]) -> "HeaderAliases":
        merged = HeaderAliases({})
        merged._aliases = dict(self._aliases)
        merged._aliases.update({header.strip().casefold(): name for header, name in extra.items()})
        return merged


def build_header_map(header_row: List[Any], aliases: HeaderAliases) -> HeaderColumnMap:
    """Map canonical names to column indexes, skipping blank header cells.

    When two headers resolve to the same name the later column wins.
    """

    header_map: HeaderColumnMap = {}
    for index, cell in enumerate(header_row):
        text = (cell_text(cell) or "").strip()
        if not text:
            continue
        name = aliases.canonical(text)
        if name in header_map:
            logger.debug("Header %r at column %s shadows column %s", name, index, header_map[name])
        header_map[name] = index
    return header_map


@dataclass(slots=True)
class SheetSnapshot:
    """Header map and raw data rows read in a single request."""

    header_map: HeaderColumnMap = field(default_factory=dict)
    rows: List[Row] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.header_map

    @property
    def width(self) -> int:
        """Number of cells an encoded row must have to cover every mapped column."""

        if not self.header_map:
            return 0
        return max(len(self.header_map), max(self.header_map.values()) + 1)


class SchemaResolver:
    def __init__(
        self,
        client: GoogleSheetsClient,
        aliases: Optional[HeaderAliases] = None,
        *,
        columns: int = DEFAULT_READ_COLUMNS,
    ) -> None:
        self._client = client
        self._aliases = aliases if aliases is not None else HeaderAliases()
        self._columns = columns

    @property
    def aliases(self) -> HeaderAliases:
        return self._aliases

    async def resolve(self, sheet_name: str) -> SheetSnapshot:
        """Read ``sheet_name`` and split it into header map and data rows.

        An empty worksheet produces an empty snapshot rather than an error.
        """

        values = await self._client.get_values(sheet_name, columns=self._columns)
        if not values:
            return SheetSnapshot()
        return SheetSnapshot(header_map=build_header_map(values[0], self._aliases), rows=values[1:])


__all__ = [
    "DEFAULT_HEADER_ALIASES",
    "HeaderAliases",
    "HeaderColumnMap",
    "Row",
    "SchemaResolver",
    "SheetSnapshot",
    "build_header_map",
]
