"""Conversion between entities and positional sheet rows."""
from __future__ import annotations

from typing import Any, List, Type, TypeVar

from sheetstore.codecs import MISSING, YES_NO_PROFILE, CodecProfile, decode_cell, encode_value
from sheetstore.entities import SheetEntity
from sheetstore.schema import HeaderColumnMap, Row

E = TypeVar("E", bound=SheetEntity)


class EntityMapper:
    """Encode and decode entities using a header map and a codec profile.

    Decoding is best effort per field: a cell that is blank, out of range or
    cannot be converted leaves that field at its default and the rest of the
    row is still mapped.  Encoding drops fields that have no header column and
    leaves columns without a field as ``None`` so an update does not touch them.
    """

    def __init__(self, profile: CodecProfile = YES_NO_PROFILE) -> None:
        self.profile = profile

    def decode(self, entity_type: Type[E], row: Row, header_map: HeaderColumnMap) -> E:
        table = entity_type.field_table()
        entity = entity_type()
        for name, column in header_map.items():
            spec = table.get(name)
            if spec is None or column >= len(row):
                continue
            value = decode_cell(
                spec.column_type,
                row[column],
                self.profile,
                enum_type=spec.enum_type,
                field_name=name,
            )
            if value is not MISSING:
                spec.set(entity, value)
        return entity

    def decode_all(self, entity_type: Type[E], rows: List[Row], header_map: HeaderColumnMap) -> List[E]:
        return [self.decode(entity_type, row, header_map) for row in rows]

    def encode(self, entity: SheetEntity, header_map: HeaderColumnMap, *, width: int | None = None) -> List[Any]:
        if width is None:
            width = max(len(header_map), max(header_map.values(), default=-1) + 1)
        cells: List[Any] = [None] * width
        for name, spec in type(entity).field_table().items():
            column = header_map.get(name)
            if column is None:
                continue
            cells[column] = encode_value(spec.column_type, spec.get(entity), self.profile)
        return cells


__all__ = ["EntityMapper"]
