from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime
import json
import logging

from app.api.handlers.deps import ApiDeps
from app.api.handlers.validation import IncomingRequest, validate_request
from app.api.schemas import APPEND_SUCCESS_MESSAGE, UPDATE_SUCCESS_MESSAGE, ErrorResponse, SuccessResponse
from app.domain.error_taxonomy import notification_message, response_message, should_notify
from app.domain.errors import IntakeError, UnexpectedError, ValidationError
from app.domain.legacy import is_legacy_body, parse_legacy_request
from app.domain.normalization import normalize
from app.domain.rate_limit import client_id_from_forwarded_for

COMPONENT_ID = "api.sheets_intake"

logger = logging.getLogger("intake")


@dataclass(frozen=True)
class IntakeResult:
    status_code: int
    body: SuccessResponse | ErrorResponse


async def handle_intake(
    request: IncomingRequest,
    deps: ApiDeps,
    *,
    now: datetime | None = None,
) -> IntakeResult:
    """Rate limit, validate, normalize and write one submission to the sheet."""
    client_id = client_id_from_forwarded_for(request.header("x-forwarded-for"))
    logger.info("request received", extra={"client_id": client_id})

    try:
        deps.rate_limiter.hit(client_id)
        validate_request(request, expected_token=deps.settings.bearer_token)
        body = parse_json_body(request.body)
        if is_legacy_body(body):
            message = await _write_legacy(body, deps)
        else:
            message = await _write_submission(body, deps, now=now)
    except IntakeError as exc:
        return await _error_result(exc, deps, client_id=client_id)
    except Exception as exc:
        logger.exception("unexpected intake failure", extra={"client_id": client_id})
        return await _error_result(UnexpectedError(str(exc)), deps, client_id=client_id)

    logger.info("request completed", extra={"client_id": client_id, "status_code": 200})
    return IntakeResult(status_code=200, body=SuccessResponse(message=message))


def parse_json_body(raw: bytes) -> Mapping[str, object]:
    try:
        body = json.loads(raw, parse_constant=_reject_constant)
    except ValueError as exc:
        raise ValidationError("Invalid JSON in request body", details={"reason": str(exc)}) from exc
    if not isinstance(body, dict):
        raise ValidationError("Request body must be a JSON object")
    return body


def _reject_constant(token: str) -> object:
    # NaN and Infinity are Python extensions, not JSON.
    raise ValueError(f"Unexpected token {token}")


async def _write_submission(body: Mapping[str, object], deps: ApiDeps, *, now: datetime | None) -> str:
    submission = normalize(body, default_sheet_id=deps.settings.default_sheet_id, now=now)
    logger.info(
        "submission normalized",
        extra={"data_type": submission.data_type, "tab_name": submission.tab_name, "sheet_id": submission.sheet_id},
    )
    credentials = deps.credentials.resolve()
    await deps.sink.append_row(
        credentials=credentials,
        sheet_id=submission.sheet_id,
        tab_name=submission.tab_name,
        row=submission.row,
        headers=submission.headers,
    )
    return APPEND_SUCCESS_MESSAGE


async def _write_legacy(body: Mapping[str, object], deps: ApiDeps) -> str:
    legacy = parse_legacy_request(body, default_sheet_id=deps.settings.default_sheet_id)
    logger.info(
        "legacy request parsed",
        extra={"tab_name": legacy.tab_name, "sheet_id": legacy.sheet_id},
    )
    credentials = deps.credentials.resolve()
    if legacy.append:
        await deps.sink.append_rows(
            credentials=credentials,
            sheet_id=legacy.sheet_id,
            tab_name=legacy.tab_name,
            rows=legacy.rows,
        )
        return APPEND_SUCCESS_MESSAGE

    await deps.sink.update_cells(
        credentials=credentials,
        sheet_id=legacy.sheet_id,
        tab_name=legacy.tab_name,
        cells=legacy.cells,
    )
    return UPDATE_SUCCESS_MESSAGE


async def _error_result(exc: IntakeError, deps: ApiDeps, *, client_id: str) -> IntakeResult:
    status_code = exc.status_code
    extra = {"client_id": client_id, "status_code": status_code, "error_code": exc.code}
    if status_code >= 500:
        logger.error("request failed: %s", exc.message, extra=extra)
    else:
        logger.warning("request rejected: %s", exc.message, extra=extra)

    if should_notify(exc.code):
        await deps.reporter.report(notification_message(code=exc.code, message=exc.message))

    if status_code >= 500:
        body = ErrorResponse(
            error=response_message(code=exc.code, message=exc.message),
            details={"reason": exc.message, **(exc.details or {})},
        )
    else:
        body = ErrorResponse(error=exc.message, details=exc.details)
    return IntakeResult(status_code=status_code, body=body)
