"""Resolve an entity id to its current position in a worksheet."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from sheetstore.codecs import cell_text
from sheetstore.entities import ID_FIELD
from sheetstore.schema import SchemaResolver
from sheetstore.sheets_client import GoogleSheetsClient

logger = logging.getLogger(__name__)

# 1 for 1-based row numbers plus 1 for the header row.
ROW_OFFSET = 2


@dataclass(frozen=True, slots=True)
class RowLocation:
    """Position of a matched row.

    ``row_number`` is the 1-based sheet row.  ``sheet_id`` is ``None`` when
    the worksheet title could not be found in the spreadsheet metadata; an
    update can still proceed, a structural delete cannot.
    """

    row_number: int
    sheet_id: Optional[int]


class RowLocator:
    def __init__(self, client: GoogleSheetsClient, resolver: SchemaResolver) -> None:
        self._client = client
        self._resolver = resolver

    async def locate(self, entity_id: str, sheet_name: str) -> Optional[RowLocation]:
        """Return the location of the first row whose Id equals ``entity_id``.

        The sheet is re-read on every call.  Returns ``None`` when the sheet
        has no ``Id`` column or no row matches.
        """

        snapshot = await self._resolver.resolve(sheet_name)
        id_column = snapshot.header_map.get(ID_FIELD)
        if id_column is None:
            logger.debug("Sheet %r has no %s column", sheet_name, ID_FIELD)
            return None

        for position, row in enumerate(snapshot.rows):
            if id_column < len(row) and cell_text(row[id_column]) == entity_id:
                sheet_ids = await self._client.sheet_ids()
                sheet_id = sheet_ids.get(sheet_name)
                if sheet_id is None:
                    logger.warning("Sheet %r not present in spreadsheet metadata", sheet_name)
                return RowLocation(row_number=position + ROW_OFFSET, sheet_id=sheet_id)

        logger.debug("Id %r not found in sheet %r", entity_id, sheet_name)
        return None


__all__ = ["ROW_OFFSET", "RowLocation", "RowLocator"]
