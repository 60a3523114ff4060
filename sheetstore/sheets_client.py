"""Async gateway to the Google Sheets v4 API.

This module centralises all direct interactions with the Google Sheets API.
It exposes the five primitives the repository layer is built on and nothing
else:

* ``get_values`` reads the used range of a worksheet.
* ``append_rows`` appends after existing data, interpreting values as if they
  had been typed by a user (``USER_ENTERED``).
* ``update_rows`` overwrites a rectangular range in place.
* ``delete_rows`` structurally removes a half-open interval of rows.
* ``sheet_ids`` maps worksheet titles to their numeric sheet ids.

The discovery client is blocking, so each request runs through
:func:`asyncio.to_thread`.  ``httplib2.Http`` is not thread safe; when the
client owns its credentials every request therefore gets a fresh authorised
transport.  API failures are raised as :class:`SheetsApiResponseError` and are
never retried here.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, List, Optional, Sequence

import google_auth_httplib2
import httplib2
from google.oauth2 import service_account
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError

from sheetstore.a1 import anchor_range, full_range
from sheetstore.google_credentials import CredentialsFileInvalidError, load_service_account_info

logger = logging.getLogger(__name__)

SCOPES: Sequence[str] = ("https://www.googleapis.com/auth/spreadsheets",)
USER_ENTERED = "USER_ENTERED"
DEFAULT_READ_COLUMNS = 26


class SheetsClientError(RuntimeError):
    """Base error raised for Sheets API failures."""


class SheetsCredentialsError(SheetsClientError):
    """Raised when the provided credential material is invalid or missing."""


class SheetsApiResponseError(SheetsClientError):
    """Raised when the Google API returns an error response."""


def load_credentials(credentials: str) -> service_account.Credentials:
    """Return scoped service account credentials from inline JSON or a path."""

    try:
        payload = load_service_account_info(credentials)
    except CredentialsFileInvalidError as exc:
        raise SheetsCredentialsError(str(exc)) from exc

    try:
        return service_account.Credentials.from_service_account_info(payload, scopes=list(SCOPES))
    except ValueError as exc:
        raise SheetsCredentialsError(str(exc)) from exc


def _build_service(credentials: service_account.Credentials):
    return build("sheets", "v4", credentials=credentials, cache_discovery=False)


class GoogleSheetsClient:
    """Concrete helper that speaks to one spreadsheet using the REST API."""

    def __init__(
        self,
        spreadsheet_id: str,
        *,
        credentials: Optional[service_account.Credentials] = None,
        service=None,
    ) -> None:
        if service is None and credentials is None:
            raise SheetsCredentialsError("Either credentials or a service object is required.")
        self._spreadsheet_id = spreadsheet_id
        self._credentials = credentials
        self._service = service if service is not None else _build_service(credentials)

    @property
    def spreadsheet_id(self) -> str:
        return self._spreadsheet_id

    # ------------------------------------------------------------------
    # Transport
    # ------------------------------------------------------------------
    def _execute_blocking(self, request) -> Dict[str, Any]:
        if self._credentials is None:
            return request.execute()
        http = google_auth_httplib2.AuthorizedHttp(self._credentials, http=httplib2.Http())
        return request.execute(http=http)

    async def _execute(self, request, *, action: str) -> Dict[str, Any]:
        try:
            response = await asyncio.to_thread(self._execute_blocking, request)
        except HttpError as exc:
            logger.error("Sheets %s failed for %s: %s", action, self._spreadsheet_id, exc)
            raise SheetsApiResponseError(str(exc)) from exc
        return response if isinstance(response, dict) else {}

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    async def health_check(self) -> None:
        """Perform a lightweight check to confirm the spreadsheet is reachable."""

        request = self._service.spreadsheets().get(
            spreadsheetId=self._spreadsheet_id,
            includeGridData=False,
            fields="spreadsheetId",
        )
        await self._execute(request, action="health check")

    async def get_values(self, sheet_name: str, *, columns: int = DEFAULT_READ_COLUMNS) -> List[List[Any]]:
        """Return the used range of ``sheet_name`` as a list of rows.

        Trailing empty cells are omitted by the API, so rows can be shorter
        than the header row.  An empty worksheet yields an empty list.
        """

        request = (
            self._service.spreadsheets()
            .values()
            .get(
                spreadsheetId=self._spreadsheet_id,
                range=full_range(sheet_name, columns=columns),
                majorDimension="ROWS",
            )
        )
        response = await self._execute(request, action="read")
        return [list(row) for row in response.get("values", [])]

    async def append_rows(
        self,
        sheet_name: str,
        rows: Sequence[Sequence[Any]],
        *,
        value_input_option: str = USER_ENTERED,
    ) -> Dict[str, Any]:
        """Append ``rows`` after the existing data of ``sheet_name``."""

        request = (
            self._service.spreadsheets()
            .values()
            .append(
                spreadsheetId=self._spreadsheet_id,
                range=anchor_range(sheet_name),
                valueInputOption=value_input_option,
                body={"values": [list(row) for row in rows]},
            )
        )
        return await self._execute(request, action="append")

    async def update_rows(
        self,
        range_a1: str,
        rows: Sequence[Sequence[Any]],
        *,
        value_input_option: str = USER_ENTERED,
    ) -> Dict[str, Any]:
        """Overwrite the rectangular region ``range_a1`` with ``rows``."""

        request = (
            self._service.spreadsheets()
            .values()
            .update(
                spreadsheetId=self._spreadsheet_id,
                range=range_a1,
                valueInputOption=value_input_option,
                body={"values": [list(row) for row in rows]},
            )
        )
        return await self._execute(request, action="update")

    async def delete_rows(self, sheet_id: int, start_index: int, end_index: int) -> Dict[str, Any]:
        """Remove rows ``[start_index, end_index)`` (0-based) from ``sheet_id``."""

        body = {
            "requests": [
                {
                    "deleteDimension": {
                        "range": {
                            "sheetId": sheet_id,
                            "dimension": "ROWS",
                            "startIndex": start_index,
                            "endIndex": end_index,
                        }
                    }
                }
            ]
        }
        request = self._service.spreadsheets().batchUpdate(spreadsheetId=self._spreadsheet_id, body=body)
        return await self._execute(request, action="row delete")

    async def sheet_ids(self) -> Dict[str, int]:
        """Return a mapping of worksheet title to numeric sheet id."""

        request = self._service.spreadsheets().get(
            spreadsheetId=self._spreadsheet_id,
            includeGridData=False,
            fields="sheets.properties(sheetId,title)",
        )
        response = await self._execute(request, action="metadata read")
        result: Dict[str, int] = {}
        for sheet in response.get("sheets", []):
            properties = sheet.get("properties", {})
            title = properties.get("title")
            if title is None or title in result:
                continue
            result[title] = int(properties.get("sheetId", 0))
        return result


def build_client(spreadsheet_id: str, credentials: str) -> GoogleSheetsClient:
    """Factory helper used by higher level modules to construct a client."""

    return GoogleSheetsClient(spreadsheet_id, credentials=load_credentials(credentials))


__all__ = [
    "DEFAULT_READ_COLUMNS",
    "GoogleSheetsClient",
    "SCOPES",
    "SheetsApiResponseError",
    "SheetsClientError",
    "SheetsCredentialsError",
    "USER_ENTERED",
    "build_client",
    "load_credentials",
]
