from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
import json

from app.domain.errors import ValidationError
from app.domain.normalization import RowRecord, resolve_sheet_id
from app.domain.payloads import Scalar

# Raw-values request shape kept for callers that predate the tagged payloads.
# Append mode takes row objects; update mode takes zero-based
# [row, col, value] triples.

_PREVIEW_LIMIT = 100


@dataclass(frozen=True)
class CellUpdate:
    row: int
    col: int
    value: Scalar


@dataclass(frozen=True)
class LegacySheetRequest:
    sheet_id: str
    tab_name: str
    append: bool
    rows: tuple[RowRecord, ...] = field(default_factory=tuple)
    cells: tuple[CellUpdate, ...] = field(default_factory=tuple)


def is_legacy_body(body: Mapping[str, object]) -> bool:
    return "data" not in body and ("tabName" in body or "values" in body)


def parse_legacy_request(body: Mapping[str, object], *, default_sheet_id: str | None) -> LegacySheetRequest:
    received = sorted(body.keys())
    sheet_id = resolve_sheet_id(body.get("sheetId"), default_sheet_id=default_sheet_id)

    tab_name = body.get("tabName")
    if not isinstance(tab_name, str) or not tab_name.strip():
        raise ValidationError("Missing required parameter: tabName", details={"receivedParams": received})

    values = body.get("values")
    if values is None:
        raise ValidationError("Missing required parameter: values", details={"receivedParams": received})
    if not isinstance(values, list):
        preview = json.dumps(values)
        if len(preview) > _PREVIEW_LIMIT:
            preview = preview[:_PREVIEW_LIMIT] + "..."
        raise ValidationError(
            "Invalid parameter: values should be an array",
            details={"valueType": type(values).__name__, "valuePreview": preview},
        )

    append = body.get("append") is True
    if append:
        return LegacySheetRequest(
            sheet_id=sheet_id,
            tab_name=tab_name,
            append=True,
            rows=tuple(_row_object(item, index) for index, item in enumerate(values)),
        )
    return LegacySheetRequest(
        sheet_id=sheet_id,
        tab_name=tab_name,
        append=False,
        cells=tuple(_cell_update(item, index) for index, item in enumerate(values)),
    )


def _row_object(item: object, index: int) -> RowRecord:
    if not isinstance(item, Mapping):
        raise ValidationError(f"Each value must be an object in append mode (index {index})")
    row: RowRecord = {}
    for key, value in item.items():
        if value is not None and not isinstance(value, (str, int, float, bool)):
            value = json.dumps(value)
        row[str(key)] = value
    return row


def _cell_update(item: object, index: int) -> CellUpdate:
    if not isinstance(item, list) or len(item) != 3:
        raise ValidationError(f"Each value must be an array with [row, col, value] format (index {index})")
    row, col, value = item
    if not _is_index(row) or not _is_index(col):
        raise ValidationError(f"Row and column must be non-negative integers (index {index})")
    if value is not None and not isinstance(value, (str, int, float, bool)):
        raise ValidationError(f"Cell value must be a scalar (index {index})")
    return CellUpdate(row=row, col=col, value=value)


def _is_index(value: object) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value >= 0
