from __future__ import annotations

import argparse
import logging
import os
import sys
import uuid

import uvicorn

from app.api.http_app import build_app
from app.logging_setup import configure_logging
from app.services.bootstrap import build_runtime_container
from app.settings import AppSettings, settings_from_env

SERVICE_NAME = "sheets-intake"
DEFAULT_PORT = 8000


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Spreadsheet intake webhook")
    parser.add_argument("--host", default=os.getenv("APP_HOST", "0.0.0.0"))
    parser.add_argument("--port", type=int, default=None)
    parser.add_argument(
        "--dry-run-startup",
        action="store_true",
        help="Validate configuration and exit",
    )
    parser.add_argument(
        "--reload",
        action="store_true",
        help="Enable code reload (dev mode)",
    )
    return parser.parse_args(argv)


def create_runtime_app() -> object:
    configure_logging()
    settings = settings_from_env()
    container = build_runtime_container(settings)
    return build_app(
        service=SERVICE_NAME,
        run_id=str(uuid.uuid4()),
        api_deps=container.api_deps,
    )


def configuration_warnings(settings: AppSettings) -> list[str]:
    warnings: list[str] = []
    if not settings.bearer_token:
        warnings.append("INTAKE_BEARER_TOKEN is not set; every request will be rejected")
    if settings.sheets_backend == "gspread" and not (
        settings.google_service_account_key_base64 or settings.google_service_account_key
    ):
        warnings.append("no Google service account key configured")
    if not settings.default_sheet_id:
        warnings.append("GOOGLE_SHEET_ID is not set; requests must carry sheetId")
    if not settings.slack_webhook_url:
        warnings.append("SLACK_WEBHOOK_URL is not set; failure notifications are disabled")
    return warnings


def run(argv: list[str] | None = None) -> int:
    args = parse_args(argv)

    try:
        settings = settings_from_env()
    except ValueError as exc:
        sys.stderr.write(f"ERROR: {exc}\n")
        return 2

    configure_logging()
    run_id = str(uuid.uuid4())
    logger = logging.getLogger("runtime")

    logger.info(
        "runtime initialized",
        extra={"service": SERVICE_NAME, "run_id": run_id},
    )
    for warning in configuration_warnings(settings):
        logger.warning(warning, extra={"service": SERVICE_NAME, "run_id": run_id})

    if args.dry_run_startup:
        logger.info(
            "dry-run startup complete",
            extra={"service": SERVICE_NAME, "run_id": run_id},
        )
        return 0

    port = args.port if args.port is not None else int(os.getenv("APP_PORT", DEFAULT_PORT))
    if args.reload:
        uvicorn.run(
            "app.main:create_runtime_app",
            host=args.host,
            port=port,
            log_level="warning",
            reload=True,
            factory=True,
        )
    else:
        container = build_runtime_container(settings)
        app = build_app(
            service=SERVICE_NAME,
            run_id=run_id,
            api_deps=container.api_deps,
        )
        uvicorn.run(app, host=args.host, port=port, log_level="warning")
    return 0


if __name__ == "__main__":
    raise SystemExit(run())
