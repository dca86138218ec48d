from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field

from app.domain.credentials import Credentials
from app.domain.errors import SinkAuthError, SinkLoadError, SinkWriteError, TabNotFoundError
from app.domain.legacy import CellUpdate
from app.domain.normalization import RowRecord, row_values
from app.domain.payloads import Scalar

Grid = list[list[Scalar]]


@dataclass
class InMemorySheetSink:
    """Spreadsheet double with the same tab and header semantics as the gspread sink.

    ``spreadsheets`` maps sheet id -> tab title -> grid of rows. When
    ``known_sheet_ids`` is set, other ids fail to load.
    """

    spreadsheets: dict[str, dict[str, Grid]] = field(default_factory=dict)
    known_sheet_ids: set[str] | None = None
    fail_auth: str | None = None
    fail_write: str | None = None
    authenticated_as: list[str] = field(default_factory=list)

    def tab(self, sheet_id: str, tab_name: str) -> Grid:
        return self.spreadsheets[sheet_id][tab_name]

    async def append_row(
        self,
        *,
        credentials: Credentials,
        sheet_id: str,
        tab_name: str,
        row: RowRecord,
        headers: Sequence[str],
    ) -> None:
        tabs = self._open(credentials, sheet_id)
        grid = tabs.setdefault(tab_name, [])
        self._check_write()
        if _header_missing(grid):
            grid[:1] = [list(headers)]
        grid.append(row_values(row, [str(value) for value in grid[0]]))

    async def append_rows(
        self,
        *,
        credentials: Credentials,
        sheet_id: str,
        tab_name: str,
        rows: Sequence[RowRecord],
    ) -> None:
        tabs = self._open(credentials, sheet_id)
        grid = tabs.setdefault(tab_name, [])
        self._check_write()
        if not rows:
            return
        if _header_missing(grid):
            grid[:1] = [list(rows[0].keys())]
        header_row = [str(value) for value in grid[0]]
        for row in rows:
            grid.append(row_values(row, header_row))

    async def update_cells(
        self,
        *,
        credentials: Credentials,
        sheet_id: str,
        tab_name: str,
        cells: Sequence[CellUpdate],
    ) -> None:
        tabs = self._open(credentials, sheet_id)
        if tab_name not in tabs:
            raise TabNotFoundError(
                f'Error accessing sheet: Sheet "{tab_name}" not found',
                details={"availableTabs": sorted(tabs)},
            )
        self._check_write()
        grid = tabs[tab_name]
        for cell in cells:
            while len(grid) <= cell.row:
                grid.append([])
            line = grid[cell.row]
            while len(line) <= cell.col:
                line.append("")
            line[cell.col] = "" if cell.value is None else cell.value

    def _open(self, credentials: Credentials, sheet_id: str) -> dict[str, Grid]:
        if self.fail_auth is not None:
            raise SinkAuthError(self.fail_auth)
        self.authenticated_as.append(credentials.client_email)
        if self.known_sheet_ids is not None and sheet_id not in self.known_sheet_ids:
            raise SinkLoadError(f"Requested entity was not found: {sheet_id}")
        return self.spreadsheets.setdefault(sheet_id, {})

    def _check_write(self) -> None:
        if self.fail_write is not None:
            raise SinkWriteError(self.fail_write)


@dataclass
class RecordingNotifier:
    messages: list[str] = field(default_factory=list)

    async def send(self, message: str) -> None:
        self.messages.append(message)


def _header_missing(grid: Grid) -> bool:
    return not grid or not grid[0] or grid[0][0] in (None, "")
