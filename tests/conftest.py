from __future__ import annotations

import json
import re
import sys
import threading
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

import httplib2
import pytest
from googleapiclient.errors import HttpError

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from sheetstore.sheets_client import GoogleSheetsClient

_CELL_RANGE = re.compile(r"^([A-Z]+)(\d+)(?::([A-Z]+)(\d*))?$")


def _column_number(letters: str) -> int:
    number = 0
    for char in letters:
        number = number * 26 + (ord(char) - 64)
    return number


def make_http_error(status: int = 500, message: str = "backend error") -> HttpError:
    content = json.dumps({"error": {"code": status, "message": message}}).encode("utf-8")
    return HttpError(httplib2.Response({"status": status}), content)


class _FakeRequest:
    def __init__(self, service: "FakeSheetsService", action: str, callback: Callable[[], Dict[str, Any]]) -> None:
        self._service = service
        self._action = action
        self._callback = callback

    def execute(self, http=None):  # noqa: D401 - API compatibility
        error = self._service.failures.get(self._action)
        if error is not None:
            raise error
        with self._service.lock:
            self._service.calls.append(self._action)
            return self._callback()


class _FakeValues:
    def __init__(self, service: "FakeSheetsService") -> None:
        self._service = service

    def get(self, spreadsheetId: str, range: str, majorDimension: str = "ROWS"):  # noqa: N802,N803
        return _FakeRequest(self._service, "values.get", lambda: self._service._handle_get(range))

    def append(self, spreadsheetId: str, range: str, valueInputOption: str, body: Dict[str, Any]):  # noqa: N803
        self._service.requests.append(("append", range, valueInputOption, body))
        return _FakeRequest(self._service, "values.append", lambda: self._service._handle_append(range, body))

    def update(self, spreadsheetId: str, range: str, valueInputOption: str, body: Dict[str, Any]):  # noqa: N803
        self._service.requests.append(("update", range, valueInputOption, body))
        return _FakeRequest(self._service, "values.update", lambda: self._service._handle_update(range, body))


class _FakeSpreadsheets:
    def __init__(self, service: "FakeSheetsService") -> None:
        self._service = service

    def values(self) -> _FakeValues:
        return _FakeValues(self._service)

    def get(self, spreadsheetId: str, includeGridData: bool = False, fields: str = "", ranges=None):  # noqa: N803
        return _FakeRequest(self._service, "get", self._service._handle_metadata)

    def batchUpdate(self, spreadsheetId: str, body: Dict[str, Any]):  # noqa: N802,N803
        self._service.requests.append(("batchUpdate", body))
        return _FakeRequest(self._service, "batchUpdate", lambda: self._service._handle_batch_update(body))


class FakeSheetsService:
    """In-memory stand-in for ``build("sheets", "v4")``."""

    def __init__(self) -> None:
        self.sheets: Dict[str, Dict[str, Any]] = {}
        self.calls: List[str] = []
        self.requests: List[tuple] = []
        self.failures: Dict[str, Exception] = {}
        self.hidden_titles: set[str] = set()
        self.lock = threading.Lock()

    def add_sheet(self, title: str, rows: Optional[List[List[Any]]] = None, *, sheet_id: int = 0) -> None:
        self.sheets[title] = {"sheet_id": sheet_id, "rows": [list(row) for row in rows or []]}

    def rows(self, title: str) -> List[List[Any]]:
        return self.sheets[title]["rows"]

    def spreadsheets(self) -> _FakeSpreadsheets:
        return _FakeSpreadsheets(self)

    # Internal helpers -------------------------------------------------
    def _split_range(self, range_spec: str) -> tuple[str, str]:
        title, cell_range = range_spec.split("!", 1)
        if title.startswith("'") and title.endswith("'"):
            title = title[1:-1].replace("''", "'")
        if title not in self.sheets:
            raise make_http_error(400, f"Unable to parse range: {range_spec}")
        return title, cell_range

    def _handle_get(self, range_spec: str) -> Dict[str, Any]:
        title, cell_range = self._split_range(range_spec)
        match = _CELL_RANGE.match(cell_range)
        assert match, cell_range
        start = int(match.group(2)) - 1
        width = _column_number(match.group(3)) if match.group(3) else None
        values: List[List[Any]] = []
        for row in self.rows(title)[start:]:
            cells = list(row[:width] if width else row)
            while cells and cells[-1] in ("", None):
                cells.pop()
            values.append(cells)
        while values and not values[-1]:
            values.pop()
        response: Dict[str, Any] = {"range": range_spec, "majorDimension": "ROWS"}
        if values:
            response["values"] = values
        return response

    def _handle_append(self, range_spec: str, body: Dict[str, Any]) -> Dict[str, Any]:
        title, _ = self._split_range(range_spec)
        rows = self.rows(title)
        while rows and not any(cell not in ("", None) for cell in rows[-1]):
            rows.pop()
        first = len(rows) + 1
        for row in body.get("values", []):
            rows.append(list(row))
        return {"updates": {"updatedRange": f"{title}!A{first}", "updatedRows": len(body.get("values", []))}}

    def _handle_update(self, range_spec: str, body: Dict[str, Any]) -> Dict[str, Any]:
        title, cell_range = self._split_range(range_spec)
        match = _CELL_RANGE.match(cell_range)
        assert match, cell_range
        start = int(match.group(2)) - 1
        rows = self.rows(title)
        for offset, values in enumerate(body.get("values", [])):
            index = start + offset
            while len(rows) <= index:
                rows.append([])
            row = rows[index]
            # null cells are skipped by the API, empty strings clear the cell.
            for column, value in enumerate(values):
                if value is None:
                    continue
                while len(row) <= column:
                    row.append("")
                row[column] = value
        return {"updatedRange": range_spec}

    def _handle_metadata(self) -> Dict[str, Any]:
        return {
            "sheets": [
                {"properties": {"sheetId": data["sheet_id"], "title": title}}
                for title, data in self.sheets.items()
                if title not in self.hidden_titles
            ]
        }

    def _handle_batch_update(self, body: Dict[str, Any]) -> Dict[str, Any]:
        for request in body.get("requests", []):
            spec = request["deleteDimension"]["range"]
            assert spec["dimension"] == "ROWS"
            for data in self.sheets.values():
                if data["sheet_id"] == spec["sheetId"]:
                    del data["rows"][spec["startIndex"] : spec["endIndex"]]
                    break
            else:
                raise make_http_error(400, f"No grid with id: {spec['sheetId']}")
        return {"replies": [{}]}


BLOG_HEADERS = ["Id", "Cluster Name", "Intent", "Keywords", "Primary Keyword", "Completed", "Url"]


@pytest.fixture
def fake_service() -> FakeSheetsService:
    return FakeSheetsService()


@pytest.fixture
def client(fake_service: FakeSheetsService) -> GoogleSheetsClient:
    return GoogleSheetsClient("SPREADSHEET", service=fake_service)


@pytest.fixture
def blog_sheet(fake_service: FakeSheetsService) -> FakeSheetsService:
    fake_service.add_sheet(
        "Blogs",
        [
            BLOG_HEADERS,
            ["b-1", "Rugs", "info", "wool, silk", "wool rugs", "Yes", "https://example.com/1"],
            ["b-2", "Lamps", "buy", "brass", "brass lamps", "No", "https://example.com/2"],
            ["b-3", "Chairs", "info", "", "", "yes"],
        ],
        sheet_id=7,
    )
    return fake_service


@pytest.fixture
def http_error() -> Callable[..., HttpError]:
    return make_http_error
