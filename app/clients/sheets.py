from __future__ import annotations

import asyncio
from collections.abc import Callable, Sequence
import logging

from google.auth.exceptions import GoogleAuthError
from google.auth.transport.requests import Request
from google.oauth2.service_account import Credentials as ServiceAccountCredentials
import gspread
from gspread.exceptions import APIError, GSpreadException, SpreadsheetNotFound, WorksheetNotFound
from gspread.utils import rowcol_to_a1
from requests import RequestException

from app.domain.credentials import Credentials
from app.domain.errors import SinkAuthError, SinkLoadError, SinkWriteError, TabNotFoundError
from app.domain.legacy import CellUpdate
from app.domain.normalization import RowRecord, row_values

SCOPES = (
    "https://www.googleapis.com/auth/spreadsheets",
    "https://www.googleapis.com/auth/drive",
)
TOKEN_URI = "https://oauth2.googleapis.com/token"
NEW_TAB_ROWS = 1000
NEW_TAB_MIN_COLS = 26
# Form submissions are stored as typed; "+1 555..." or "=..." must not become formulas.
SUBMISSION_INPUT_OPTION = "RAW"
# Legacy callers write spreadsheet values and rely on Sheets parsing them.
LEGACY_INPUT_OPTION = "USER_ENTERED"

logger = logging.getLogger("sheets")


class GspreadSheetSink:
    """SheetSink backed by the Google Sheets API through gspread.

    gspread is blocking, so every operation runs in a worker thread.
    """

    def __init__(
        self,
        *,
        client_factory: Callable[[ServiceAccountCredentials], gspread.Client] = gspread.authorize,
    ) -> None:
        self._client_factory = client_factory

    async def append_row(
        self,
        *,
        credentials: Credentials,
        sheet_id: str,
        tab_name: str,
        row: RowRecord,
        headers: Sequence[str],
    ) -> None:
        await asyncio.to_thread(self._append_row_sync, credentials, sheet_id, tab_name, row, tuple(headers))

    async def append_rows(
        self,
        *,
        credentials: Credentials,
        sheet_id: str,
        tab_name: str,
        rows: Sequence[RowRecord],
    ) -> None:
        await asyncio.to_thread(self._append_rows_sync, credentials, sheet_id, tab_name, tuple(rows))

    async def update_cells(
        self,
        *,
        credentials: Credentials,
        sheet_id: str,
        tab_name: str,
        cells: Sequence[CellUpdate],
    ) -> None:
        await asyncio.to_thread(self._update_cells_sync, credentials, sheet_id, tab_name, tuple(cells))

    def _append_row_sync(
        self,
        credentials: Credentials,
        sheet_id: str,
        tab_name: str,
        row: RowRecord,
        headers: tuple[str, ...],
    ) -> None:
        spreadsheet = self._open(credentials, sheet_id)
        worksheet = self._worksheet(spreadsheet, tab_name, create=True, width=len(headers))
        try:
            header_row = self._ensure_header_row(worksheet, headers)
            worksheet.append_row(row_values(row, header_row), value_input_option=SUBMISSION_INPUT_OPTION)
        except (GSpreadException, RequestException) as exc:
            raise SinkWriteError(str(exc)) from exc
        logger.info("row appended", extra={"sheet_id": sheet_id, "tab_name": tab_name})

    def _append_rows_sync(
        self,
        credentials: Credentials,
        sheet_id: str,
        tab_name: str,
        rows: tuple[RowRecord, ...],
    ) -> None:
        spreadsheet = self._open(credentials, sheet_id)
        width = len(rows[0]) if rows else 0
        worksheet = self._worksheet(spreadsheet, tab_name, create=True, width=width)
        if not rows:
            return
        try:
            header_row = self._ensure_header_row(worksheet, tuple(rows[0].keys()))
            worksheet.append_rows(
                [row_values(row, header_row) for row in rows],
                value_input_option=LEGACY_INPUT_OPTION,
            )
        except (GSpreadException, RequestException) as exc:
            raise SinkWriteError(str(exc)) from exc
        logger.info("rows appended", extra={"sheet_id": sheet_id, "tab_name": tab_name, "rows": len(rows)})

    def _update_cells_sync(
        self,
        credentials: Credentials,
        sheet_id: str,
        tab_name: str,
        cells: tuple[CellUpdate, ...],
    ) -> None:
        spreadsheet = self._open(credentials, sheet_id)
        worksheet = self._worksheet(spreadsheet, tab_name, create=False, width=0)
        if not cells:
            return
        # Incoming coordinates are zero-based; gspread cells are one-based.
        updates = [
            gspread.Cell(cell.row + 1, cell.col + 1, "" if cell.value is None else cell.value)
            for cell in cells
        ]
        try:
            worksheet.update_cells(updates, value_input_option=LEGACY_INPUT_OPTION)
        except (GSpreadException, RequestException) as exc:
            raise SinkWriteError(str(exc)) from exc
        logger.info("cells updated", extra={"sheet_id": sheet_id, "tab_name": tab_name, "cells": len(cells)})

    def _open(self, credentials: Credentials, sheet_id: str) -> gspread.Spreadsheet:
        try:
            service_credentials = ServiceAccountCredentials.from_service_account_info(
                {
                    "type": "service_account",
                    "client_email": credentials.client_email,
                    "private_key": credentials.private_key,
                    "token_uri": TOKEN_URI,
                },
                scopes=SCOPES,
            )
            # Fetch a token now so bad keys fail as auth errors, not load errors.
            service_credentials.refresh(Request())
            client = self._client_factory(service_credentials)
        except (GoogleAuthError, ValueError, RequestException) as exc:
            raise SinkAuthError(str(exc)) from exc

        try:
            spreadsheet = client.open_by_key(sheet_id)
            spreadsheet.fetch_sheet_metadata()
        except SpreadsheetNotFound as exc:
            raise SinkLoadError(f"Spreadsheet not found: {sheet_id}") from exc
        except (APIError, GSpreadException, RequestException) as exc:
            raise SinkLoadError(str(exc)) from exc
        logger.info("spreadsheet loaded", extra={"sheet_id": sheet_id})
        return spreadsheet

    def _worksheet(
        self,
        spreadsheet: gspread.Spreadsheet,
        tab_name: str,
        *,
        create: bool,
        width: int,
    ) -> gspread.Worksheet:
        try:
            return spreadsheet.worksheet(tab_name)
        except WorksheetNotFound:
            if not create:
                raise TabNotFoundError(
                    f'Error accessing sheet: Sheet "{tab_name}" not found',
                    details={"availableTabs": [ws.title for ws in spreadsheet.worksheets()]},
                ) from None
        except (GSpreadException, RequestException) as exc:
            raise SinkLoadError(str(exc)) from exc

        logger.info("creating missing tab", extra={"tab_name": tab_name})
        try:
            return spreadsheet.add_worksheet(
                title=tab_name,
                rows=NEW_TAB_ROWS,
                cols=max(NEW_TAB_MIN_COLS, width),
            )
        except (GSpreadException, RequestException) as exc:
            raise SinkWriteError(f"Could not create tab {tab_name!r}: {exc}") from exc

    def _ensure_header_row(self, worksheet: gspread.Worksheet, headers: tuple[str, ...]) -> list[str]:
        if worksheet.acell("A1").value:
            return [str(value) for value in worksheet.row_values(1)]
        if headers:
            header_range = f"A1:{rowcol_to_a1(1, len(headers))}"
            worksheet.update([list(headers)], range_name=header_range)
            logger.info("header row written", extra={"tab_name": worksheet.title})
        return list(headers)
