from __future__ import annotations

from fastapi.responses import JSONResponse, PlainTextResponse
from pydantic import BaseModel

CORS_HEADERS: dict[str, str] = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "authorization, x-client-info, apikey, content-type",
    "Access-Control-Allow-Methods": "POST, OPTIONS",
}


def json_response(*, status_code: int, body: BaseModel) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=body.model_dump(mode="json", exclude_none=True),
        headers=CORS_HEADERS,
    )


def preflight_response() -> PlainTextResponse:
    return PlainTextResponse("ok", status_code=200, headers=CORS_HEADERS)
