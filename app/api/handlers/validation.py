from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
import secrets

from app.domain.errors import AuthError, MethodNotAllowedError, ValidationError

COMPONENT_ID = "api.validate_request"

JSON_CONTENT_TYPE = "application/json"


@dataclass(frozen=True)
class IncomingRequest:
    method: str
    # Header names are lower-cased by the HTTP layer.
    headers: Mapping[str, str] = field(default_factory=dict)
    body: bytes = b""

    def header(self, name: str) -> str | None:
        return self.headers.get(name.lower())


def validate_request(request: IncomingRequest, *, expected_token: str | None) -> None:
    """Transport and bearer-token checks, run before the body is read."""
    content_type = request.header("content-type") or ""
    if JSON_CONTENT_TYPE not in content_type.lower():
        raise ValidationError("Content-Type must be application/json")

    if request.method.upper() != "POST":
        raise MethodNotAllowedError("Method not allowed")

    auth_header = request.header("authorization")
    if not auth_header:
        raise AuthError("Missing authorization header")

    parts = auth_header.split(" ")
    if len(parts) != 2 or parts[0] != "Bearer":
        raise AuthError("Invalid authorization format")

    # An unset secret rejects every token.
    if not expected_token or not secrets.compare_digest(parts[1].encode(), expected_token.encode()):
        raise AuthError("Invalid authorization token")
