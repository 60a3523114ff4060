"""Generic create/read/update/delete over worksheet tabs.

:class:`SheetRepository` composes the schema resolver, the entity mapper and
the row locator.  It keeps no data between calls; the spreadsheet is the only
state.  Update and delete are two remote steps (locate, then mutate) and are
not atomic: a row deleted in between shifts every later row up, so a
concurrent write can land on the wrong row.

Passing ``serialize_writes=True`` holds an :class:`asyncio.Lock` per
``(spreadsheet, sheet)`` across those steps.  This only orders writers going
through the same repository instance.  Locks are kept per running event loop,
so one repository can be reused across separate :func:`asyncio.run` calls.
It changes the concurrent behaviour, so it is off by default.
"""
from __future__ import annotations

import asyncio
import contextlib
import logging
import uuid
import weakref
from typing import AsyncIterator, Callable, List, Optional, Type, TypeVar

from sheetstore.a1 import row_range
from sheetstore.codecs import YES_NO_PROFILE, CodecProfile
from sheetstore.entities import SheetEntity
from sheetstore.locator import RowLocator
from sheetstore.mapper import EntityMapper
from sheetstore.schema import HeaderAliases, SchemaResolver
from sheetstore.sheets_client import DEFAULT_READ_COLUMNS, GoogleSheetsClient

logger = logging.getLogger(__name__)

E = TypeVar("E", bound=SheetEntity)

DEFAULT_SHEET_NAME = "Sheet1"


def new_id() -> str:
    return str(uuid.uuid4())


class SheetRepository:
    def __init__(
        self,
        client: GoogleSheetsClient,
        *,
        aliases: Optional[HeaderAliases] = None,
        profile: CodecProfile = YES_NO_PROFILE,
        columns: int = DEFAULT_READ_COLUMNS,
        serialize_writes: bool = False,
        id_factory: Callable[[], str] = new_id,
    ) -> None:
        self._client = client
        self._resolver = SchemaResolver(client, aliases, columns=columns)
        self._mapper = EntityMapper(profile)
        self._locator = RowLocator(client, self._resolver)
        self._id_factory = id_factory
        self._serialize_writes = serialize_writes
        self._locks: weakref.WeakKeyDictionary = weakref.WeakKeyDictionary()

    @property
    def locator(self) -> RowLocator:
        return self._locator

    @contextlib.asynccontextmanager
    async def _write_guard(self, sheet_name: str) -> AsyncIterator[None]:
        if not self._serialize_writes:
            yield
            return
        loop_locks = self._locks.setdefault(asyncio.get_running_loop(), {})
        lock = loop_locks.setdefault((self._client.spreadsheet_id, sheet_name), asyncio.Lock())
        async with lock:
            yield

    async def get_all(self, entity_type: Type[E], sheet_name: str = DEFAULT_SHEET_NAME) -> List[E]:
        """Return every data row of ``sheet_name`` decoded as ``entity_type``, in sheet order."""

        snapshot = await self._resolver.resolve(sheet_name)
        if not snapshot.rows:
            return []
        return self._mapper.decode_all(entity_type, snapshot.rows, snapshot.header_map)

    async def get_by_id(
        self, entity_type: Type[E], entity_id: str, sheet_name: str = DEFAULT_SHEET_NAME
    ) -> Optional[E]:
        for entity in await self.get_all(entity_type, sheet_name):
            if entity.id == entity_id:
                return entity
        return None

    async def add(self, entity: E, sheet_name: str = DEFAULT_SHEET_NAME) -> E:
        """Append ``entity`` as a new row and return it with a freshly generated id.

        Any id already set on ``entity`` is replaced.
        """

        entity.id = self._id_factory()
        async with self._write_guard(sheet_name):
            snapshot = await self._resolver.resolve(sheet_name)
            row = self._mapper.encode(entity, snapshot.header_map, width=snapshot.width)
            await self._client.append_rows(sheet_name, [row])
        logger.info("Appended %s %s to sheet %r", type(entity).__name__, entity.id, sheet_name)
        return entity

    async def update(self, entity: SheetEntity, sheet_name: str = DEFAULT_SHEET_NAME) -> bool:
        """Overwrite the row holding ``entity.id``; ``False`` when no row matches."""

        async with self._write_guard(sheet_name):
            location = await self._locator.locate(entity.id, sheet_name)
            if location is None:
                return False

            snapshot = await self._resolver.resolve(sheet_name)
            row = self._mapper.encode(entity, snapshot.header_map, width=snapshot.width)
            target = row_range(sheet_name, location.row_number, columns=len(row))
            await self._client.update_rows(target, [row])
        logger.info(
            "Updated %s %s at row %s of sheet %r",
            type(entity).__name__,
            entity.id,
            location.row_number,
            sheet_name,
        )
        return True

    async def delete(self, entity_id: str, sheet_name: str = DEFAULT_SHEET_NAME) -> bool:
        """Remove the row holding ``entity_id``; ``False`` when it cannot be located."""

        async with self._write_guard(sheet_name):
            location = await self._locator.locate(entity_id, sheet_name)
            if location is None or location.sheet_id is None:
                return False
            await self._client.delete_rows(location.sheet_id, location.row_number - 1, location.row_number)
        logger.info("Deleted row %s (id %s) from sheet %r", location.row_number, entity_id, sheet_name)
        return True


__all__ = ["DEFAULT_SHEET_NAME", "SheetRepository", "new_id"]
