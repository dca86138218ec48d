from __future__ import annotations

from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI, Request
from fastapi.responses import Response

from app.api.handlers.deps import ApiDeps
from app.api.handlers.intake import handle_intake
from app.api.handlers.validation import IncomingRequest
from app.api.responses import json_response, preflight_response
from app.api.schemas import ErrorResponse, HealthResponse, ReadyResponse, SuccessResponse

INTAKE_PATH = "/"
# Every method reaches the handler so non-POST calls get the validator's answer.
INTAKE_METHODS = ["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]


def build_app(
    service: str,
    run_id: str,
    api_deps: ApiDeps,
) -> FastAPI:
    logger = logging.getLogger("runtime")

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        del app
        logger.info("service started", extra={"service": service, "run_id": run_id})

        yield

        # Let detached failure notifications finish before the loop closes.
        await api_deps.reporter.drain()

        logger.info("service stopped", extra={"service": service, "run_id": run_id})

    app = FastAPI(title="sheets-intake", version="0.1.0", lifespan=lifespan)

    @app.get("/health", response_model=HealthResponse, tags=["System"])
    async def health() -> HealthResponse:
        return HealthResponse(status="ok", service=service)

    @app.get("/ready", response_model=ReadyResponse, tags=["System"])
    async def ready() -> ReadyResponse:
        settings = api_deps.settings
        return ReadyResponse(
            status="ready",
            service=service,
            sheets_backend=settings.sheets_backend,
            credentials_configured=bool(
                settings.google_service_account_key_base64 or settings.google_service_account_key
            ),
            default_sheet_configured=bool(settings.default_sheet_id),
            bearer_token_configured=bool(settings.bearer_token),
            notifications_enabled=bool(settings.slack_webhook_url),
            pending_notifications=api_deps.reporter.pending,
            rate_limited_clients=len(api_deps.rate_limiter),
        )

    @app.api_route(
        INTAKE_PATH,
        methods=INTAKE_METHODS,
        responses={
            200: {"model": SuccessResponse},
            400: {"model": ErrorResponse},
            401: {"model": ErrorResponse},
            405: {"model": ErrorResponse},
            429: {"model": ErrorResponse},
            500: {"model": ErrorResponse},
        },
        tags=["Intake"],
    )
    async def intake(request: Request) -> Response:
        if request.method == "OPTIONS":
            return preflight_response()

        incoming = IncomingRequest(
            method=request.method,
            headers={key.lower(): value for key, value in request.headers.items()},
            body=await request.body(),
        )
        result = await handle_intake(incoming, api_deps)
        return json_response(status_code=result.status_code, body=result.body)

    return app
