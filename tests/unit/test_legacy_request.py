import pytest

from app.domain.errors import ValidationError
from app.domain.legacy import CellUpdate, is_legacy_body, parse_legacy_request


@pytest.mark.unit
def test_legacy_shape_is_detected_only_without_data() -> None:
    assert is_legacy_body({"tabName": "Sheet1", "values": []}) is True
    assert is_legacy_body({"values": []}) is True
    assert is_legacy_body({"data": {}, "tabName": "Sheet1"}) is False
    assert is_legacy_body({"sheetId": "s"}) is False


@pytest.mark.unit
def test_append_mode_parses_row_objects() -> None:
    request = parse_legacy_request(
        {
            "sheetId": "sheet-1",
            "tabName": "Sheet1",
            "append": True,
            "values": [{"name": "Test User", "email": "test@example.com", "tags": ["a", "b"]}],
        },
        default_sheet_id=None,
    )

    assert request.append is True
    assert request.sheet_id == "sheet-1"
    assert request.rows == ({"name": "Test User", "email": "test@example.com", "tags": '["a", "b"]'},)
    assert request.cells == ()


@pytest.mark.unit
def test_update_mode_parses_cell_triples() -> None:
    request = parse_legacy_request(
        {"tabName": "Sheet1", "values": [[0, 0, "Last Updated"], [0, 1, 42]]},
        default_sheet_id="default",
    )

    assert request.append is False
    assert request.sheet_id == "default"
    assert request.cells == (CellUpdate(row=0, col=0, value="Last Updated"), CellUpdate(row=0, col=1, value=42))


@pytest.mark.unit
@pytest.mark.parametrize(
    ("body", "message"),
    [
        ({"sheetId": "s", "values": []}, "Missing required parameter: tabName"),
        ({"sheetId": "s", "tabName": "Sheet1"}, "Missing required parameter: values"),
        ({"sheetId": "s", "tabName": "Sheet1", "values": {"a": 1}}, "Invalid parameter: values should be an array"),
        ({"tabName": "Sheet1", "values": []}, "No sheet ID provided and no default sheet ID configured"),
    ],
)
def test_invalid_legacy_requests_are_rejected(body: dict[str, object], message: str) -> None:
    with pytest.raises(ValidationError) as exc_info:
        parse_legacy_request(body, default_sheet_id=None)

    assert exc_info.value.message == message
    assert exc_info.value.status_code == 400


@pytest.mark.unit
@pytest.mark.parametrize(
    "item",
    [[0, 0], [0, 0, "a", "b"], [-1, 0, "a"], [0, "B", "a"], [True, 0, "a"], [0, 0, {"nested": 1}], "A1"],
)
def test_malformed_cell_updates_are_rejected(item: object) -> None:
    with pytest.raises(ValidationError):
        parse_legacy_request({"sheetId": "s", "tabName": "Sheet1", "values": [item]}, default_sheet_id=None)


@pytest.mark.unit
def test_append_mode_rejects_non_object_rows() -> None:
    with pytest.raises(ValidationError):
        parse_legacy_request(
            {"sheetId": "s", "tabName": "Sheet1", "append": True, "values": [[0, 0, "a"]]},
            default_sheet_id=None,
        )


@pytest.mark.unit
def test_missing_params_report_received_keys() -> None:
    with pytest.raises(ValidationError) as exc_info:
        parse_legacy_request({"sheetId": "s", "values": []}, default_sheet_id=None)

    assert exc_info.value.details == {"receivedParams": ["sheetId", "values"]}
