import pytest

from app.domain.error_taxonomy import (
    http_status_for,
    is_canonical_error_code,
    notification_message,
    response_message,
    should_notify,
)
from app.domain.errors import (
    AuthError,
    CredentialError,
    MethodNotAllowedError,
    RateLimitError,
    SinkAuthError,
    SinkLoadError,
    SinkWriteError,
    TabNotFoundError,
    UnexpectedError,
    ValidationError,
)


@pytest.mark.unit
def test_canonical_error_codes_are_enforced() -> None:
    assert is_canonical_error_code("sink_load_failed") is True
    assert is_canonical_error_code("unknown_error") is False


@pytest.mark.unit
@pytest.mark.parametrize(
    ("error", "status_code"),
    [
        (ValidationError("x"), 400),
        (TabNotFoundError("x"), 400),
        (AuthError("x"), 401),
        (MethodNotAllowedError("x"), 405),
        (RateLimitError("x"), 429),
        (CredentialError("x"), 500),
        (SinkAuthError("x"), 500),
        (SinkLoadError("x"), 500),
        (SinkWriteError("x"), 500),
        (UnexpectedError("x"), 500),
    ],
)
def test_errors_map_to_http_status(error: Exception, status_code: int) -> None:
    assert getattr(error, "status_code") == status_code


@pytest.mark.unit
def test_only_server_side_failures_notify() -> None:
    assert should_notify("validation_error") is False
    assert should_notify("auth_error") is False
    assert should_notify("rate_limited") is False
    assert should_notify("sink_write_failed") is True
    assert should_notify("credential_error") is True
    assert should_notify("something_new") is True
    assert http_status_for("something_new") == 500


@pytest.mark.unit
def test_notification_and_response_wording() -> None:
    assert notification_message(code="sink_auth_failed", message="invalid_grant") == (
        "Google Sheets authentication error: invalid_grant"
    )
    assert notification_message(code="internal_error", message="boom") == "Unexpected error in sheets intake: boom"
    assert response_message(code="sink_load_failed", message="404") == "Failed to load spreadsheet"
    assert response_message(code="validation_error", message="Unknown data type") == "Unknown data type"
