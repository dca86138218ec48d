from __future__ import annotations

from dataclasses import dataclass
import os
from typing import Literal

SheetsBackend = Literal["gspread", "memory"]
SUPPORTED_BACKENDS: tuple[SheetsBackend, ...] = ("gspread", "memory")


@dataclass(frozen=True)
class AppSettings:
    google_service_account_key_base64: str | None = None
    google_service_account_key: str | None = None
    default_sheet_id: str | None = None
    bearer_token: str | None = None
    slack_webhook_url: str | None = None
    rate_limit_requests: int = 10
    rate_limit_window_seconds: int = 60
    rate_limit_max_clients: int = 10_000
    slack_timeout_seconds: int = 10
    notify_in_background: bool = True
    sheets_backend: SheetsBackend = "gspread"


def settings_from_env() -> AppSettings:
    return AppSettings(
        google_service_account_key_base64=_env_str("GOOGLE_SERVICE_ACCOUNT_KEY_BASE64"),
        google_service_account_key=_env_str("GOOGLE_SERVICE_ACCOUNT_KEY"),
        default_sheet_id=_env_str("GOOGLE_SHEET_ID"),
        bearer_token=_env_str("INTAKE_BEARER_TOKEN"),
        slack_webhook_url=_env_str("SLACK_WEBHOOK_URL"),
        rate_limit_requests=_env_int("RATE_LIMIT_REQUESTS", 10),
        rate_limit_window_seconds=_env_int("RATE_LIMIT_WINDOW_SECONDS", 60),
        rate_limit_max_clients=_env_int("RATE_LIMIT_MAX_CLIENTS", 10_000),
        slack_timeout_seconds=_env_int("SLACK_TIMEOUT_SECONDS", 10),
        notify_in_background=_env_bool("NOTIFY_IN_BACKGROUND", True),
        sheets_backend=validate_backend(os.getenv("SHEETS_BACKEND", "gspread")),
    )


def validate_backend(backend: str) -> SheetsBackend:
    if backend == "gspread":
        return "gspread"
    if backend == "memory":
        return "memory"
    supported = ", ".join(SUPPORTED_BACKENDS)
    raise ValueError(f"Unsupported sheets backend '{backend}'. Supported backends: {supported}.")


def _env_str(name: str) -> str | None:
    value = os.getenv(name)
    if value is None:
        return None
    value = value.strip()
    return value or None


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None:
        return default

    try:
        parsed = int(value)
    except ValueError:
        return default

    return parsed if parsed > 0 else default


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in ("1", "true", "yes", "on"):
        return True
    if normalized in ("0", "false", "no", "off"):
        return False
    return default
