"""Generic entity storage on Google Sheets tabs."""

from sheetstore.codecs import LITERAL_PROFILE, YES_NO_PROFILE, CodecProfile, ColumnType
from sheetstore.entities import Blog, EntityDefinitionError, SheetEntity, SheetField
from sheetstore.locator import RowLocation, RowLocator
from sheetstore.mapper import EntityMapper
from sheetstore.repository import SheetRepository
from sheetstore.schema import HeaderAliases, SchemaResolver, SheetSnapshot
from sheetstore.sheets_client import (
    GoogleSheetsClient,
    SheetsApiResponseError,
    SheetsClientError,
    SheetsCredentialsError,
    build_client,
)

__version__ = "0.1.0"

__all__ = [
    "Blog",
    "CodecProfile",
    "ColumnType",
    "EntityDefinitionError",
    "EntityMapper",
    "GoogleSheetsClient",
    "HeaderAliases",
    "LITERAL_PROFILE",
    "RowLocation",
    "RowLocator",
    "SchemaResolver",
    "SheetEntity",
    "SheetField",
    "SheetRepository",
    "SheetSnapshot",
    "SheetsApiResponseError",
    "SheetsClientError",
    "SheetsCredentialsError",
    "YES_NO_PROFILE",
    "build_client",
]
