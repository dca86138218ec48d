from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol, runtime_checkable

from app.domain.credentials import Credentials
from app.domain.legacy import CellUpdate
from app.domain.normalization import RowRecord


@runtime_checkable
class SheetSink(Protocol):
    """Append target backed by a spreadsheet.

    Implementations raise SinkAuthError, SinkLoadError or SinkWriteError
    (and TabNotFoundError for update-mode writes to a missing tab). Tabs are
    created on demand for appends.
    """

    async def append_row(
        self,
        *,
        credentials: Credentials,
        sheet_id: str,
        tab_name: str,
        row: RowRecord,
        headers: Sequence[str],
    ) -> None: ...

    async def append_rows(
        self,
        *,
        credentials: Credentials,
        sheet_id: str,
        tab_name: str,
        rows: Sequence[RowRecord],
    ) -> None: ...

    async def update_cells(
        self,
        *,
        credentials: Credentials,
        sheet_id: str,
        tab_name: str,
        cells: Sequence[CellUpdate],
    ) -> None: ...


@runtime_checkable
class Notifier(Protocol):
    """Outbound operations channel. ``send`` must not raise."""

    async def send(self, message: str) -> None: ...
