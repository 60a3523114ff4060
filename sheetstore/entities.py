"""Entity declarations for sheet-backed records.

An entity is a dataclass deriving from :class:`SheetEntity`.  Its column
mapping is declared once in ``sheet_fields`` and used for both reading and
writing: each :class:`SheetField` names the canonical header, the attribute
it is stored on and the :class:`~sheetstore.codecs.ColumnType` used to
convert it.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, ClassVar, Dict, List, Optional, Tuple, Type

from sheetstore.codecs import ColumnType

ID_FIELD = "Id"


class EntityDefinitionError(TypeError):
    """Raised when an entity type declares an unusable field table."""


@dataclass(frozen=True, slots=True)
class SheetField:
    name: str
    attribute: str
    column_type: ColumnType = ColumnType.TEXT
    enum_type: Optional[Type[Enum]] = None

    def get(self, entity: Any) -> Any:
        return getattr(entity, self.attribute)

    def set(self, entity: Any, value: Any) -> None:
        setattr(entity, self.attribute, value)


@dataclass
class SheetEntity:
    """Base class for records stored one per sheet row."""

    sheet_fields: ClassVar[Tuple[SheetField, ...]] = ()

    id: str = ""

    @classmethod
    def field_table(cls) -> Dict[str, SheetField]:
        """Return the declared fields keyed by canonical header name."""

        table = {entry.name: entry for entry in cls.sheet_fields}
        id_entry = table.get(ID_FIELD)
        if id_entry is None or id_entry.attribute != "id":
            raise EntityDefinitionError(f"{cls.__name__} must map an {ID_FIELD!r} field to the 'id' attribute")
        for entry in cls.sheet_fields:
            if entry.column_type is ColumnType.ENUM and entry.enum_type is None:
                raise EntityDefinitionError(f"{cls.__name__}.{entry.attribute} is an ENUM field without enum_type")
        return table


@dataclass
class Blog(SheetEntity):
    cluster_name: str = ""
    intent: str = ""
    keywords: List[str] = field(default_factory=list)
    primary_keyword: str = ""
    completed: bool = False
    url: str = ""

    sheet_fields: ClassVar[Tuple[SheetField, ...]] = (
        SheetField("Id", "id"),
        SheetField("ClusterName", "cluster_name"),
        SheetField("Intent", "intent"),
        SheetField("Keywords", "keywords", ColumnType.TEXT_LIST),
        SheetField("PrimaryKeyword", "primary_keyword"),
        SheetField("Completed", "completed", ColumnType.BOOLEAN),
        SheetField("Url", "url"),
    )


__all__ = ["Blog", "EntityDefinitionError", "ID_FIELD", "SheetEntity", "SheetField"]
