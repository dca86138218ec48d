from __future__ import annotations

from collections.abc import Mapping
from typing import Literal

# Canonical error vocabulary for the intake pipeline.
ErrorCode = Literal[
    "validation_error",
    "tab_not_found",
    "auth_error",
    "method_not_allowed",
    "rate_limited",
    "credential_error",
    "sink_auth_failed",
    "sink_load_failed",
    "sink_write_failed",
    "internal_error",
]

CANONICAL_ERROR_CODES: tuple[ErrorCode, ...] = (
    "validation_error",
    "tab_not_found",
    "auth_error",
    "method_not_allowed",
    "rate_limited",
    "credential_error",
    "sink_auth_failed",
    "sink_load_failed",
    "sink_write_failed",
    "internal_error",
)

HTTP_STATUS_BY_CODE: Mapping[str, int] = {
    "validation_error": 400,
    "tab_not_found": 400,
    "auth_error": 401,
    "method_not_allowed": 405,
    "rate_limited": 429,
    "credential_error": 500,
    "sink_auth_failed": 500,
    "sink_load_failed": 500,
    "sink_write_failed": 500,
    "internal_error": 500,
}

# Server-side failures are pushed to the operations channel; caller
# mistakes are answered directly and never notified.
NOTIFY_ERROR_CODES: frozenset[ErrorCode] = frozenset(
    {
        "credential_error",
        "sink_auth_failed",
        "sink_load_failed",
        "sink_write_failed",
        "internal_error",
    }
)

NOTIFICATION_PREFIX_BY_CODE: Mapping[str, str] = {
    "credential_error": "Google Sheets credential error",
    "sink_auth_failed": "Google Sheets authentication error",
    "sink_load_failed": "Failed to load Google Sheet",
    "sink_write_failed": "Error updating Google Sheet",
    "internal_error": "Unexpected error in sheets intake",
}


def is_canonical_error_code(code: str) -> bool:
    return code in CANONICAL_ERROR_CODES


def http_status_for(code: str) -> int:
    if is_canonical_error_code(code):
        return HTTP_STATUS_BY_CODE[code]
    # Unknown codes are treated as server faults.
    return 500


def should_notify(code: str) -> bool:
    return code in NOTIFY_ERROR_CODES or not is_canonical_error_code(code)


def notification_message(*, code: str, message: str) -> str:
    prefix = NOTIFICATION_PREFIX_BY_CODE.get(code, "Unexpected error in sheets intake")
    return f"{prefix}: {message}"


# Public wording for server-side failures; the underlying reason goes into
# the response details.
RESPONSE_MESSAGE_BY_CODE: Mapping[str, str] = {
    "credential_error": "Google Sheets credentials are not configured correctly",
    "sink_auth_failed": "Authentication with Google Sheets failed",
    "sink_load_failed": "Failed to load spreadsheet",
    "sink_write_failed": "Error updating sheet",
    "internal_error": "Unexpected error",
}


def response_message(*, code: str, message: str) -> str:
    return RESPONSE_MESSAGE_BY_CODE.get(code, message)
