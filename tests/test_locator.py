from __future__ import annotations

import asyncio

from sheetstore.locator import RowLocation, RowLocator
from sheetstore.schema import SchemaResolver


def _locator(client) -> RowLocator:
    return RowLocator(client, SchemaResolver(client))


def test_locate_offsets_for_header_and_one_based_rows(client, blog_sheet):
    locator = _locator(client)

    assert asyncio.run(locator.locate("b-1", "Blogs")) == RowLocation(row_number=2, sheet_id=7)
    assert asyncio.run(locator.locate("b-3", "Blogs")) == RowLocation(row_number=4, sheet_id=7)


def test_locate_reads_metadata_only_on_match(client, blog_sheet):
    locator = _locator(client)

    assert asyncio.run(locator.locate("missing", "Blogs")) is None
    assert blog_sheet.calls == ["values.get"]

    asyncio.run(locator.locate("b-2", "Blogs"))
    assert blog_sheet.calls[-2:] == ["values.get", "get"]


def test_locate_uses_exact_string_equality(client, blog_sheet):
    locator = _locator(client)

    assert asyncio.run(locator.locate("B-1", "Blogs")) is None
    assert asyncio.run(locator.locate("b-1 ", "Blogs")) is None


def test_first_duplicate_wins(client, fake_service):
    fake_service.add_sheet("Dupes", [["Id", "Url"], ["x", "first"], ["x", "second"]], sheet_id=3)

    assert asyncio.run(_locator(client).locate("x", "Dupes")) == RowLocation(row_number=2, sheet_id=3)


def test_missing_id_column_is_never_found(client, fake_service):
    fake_service.add_sheet("NoIds", [["Url", "Intent"], ["b-1", "info"]])

    assert asyncio.run(_locator(client).locate("b-1", "NoIds")) is None


def test_short_rows_are_skipped(client, fake_service):
    fake_service.add_sheet("Sparse", [["Url", "Id"], ["only-url"], ["u", "id-2"]], sheet_id=4)

    assert asyncio.run(_locator(client).locate("id-2", "Sparse")) == RowLocation(row_number=3, sheet_id=4)


def test_numeric_cells_compare_by_text(client, fake_service):
    fake_service.add_sheet("Numbers", [["Id"], [101], [102]], sheet_id=0)

    assert asyncio.run(_locator(client).locate("102", "Numbers")) == RowLocation(row_number=3, sheet_id=0)


def test_unresolvable_sheet_id_is_reported_as_none(client, blog_sheet):
    blog_sheet.hidden_titles.add("Blogs")

    assert asyncio.run(_locator(client).locate("b-2", "Blogs")) == RowLocation(row_number=3, sheet_id=None)
