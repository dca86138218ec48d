from __future__ import annotations

from app.domain.error_taxonomy import ErrorCode, http_status_for


class IntakeError(Exception):
    code: ErrorCode = "internal_error"

    def __init__(self, message: str, *, details: dict[str, object] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details

    @property
    def status_code(self) -> int:
        return http_status_for(self.code)


class ValidationError(IntakeError):
    code: ErrorCode = "validation_error"


class TabNotFoundError(ValidationError):
    code: ErrorCode = "tab_not_found"


class AuthError(IntakeError):
    code: ErrorCode = "auth_error"


class MethodNotAllowedError(IntakeError):
    code: ErrorCode = "method_not_allowed"


class RateLimitError(IntakeError):
    code: ErrorCode = "rate_limited"


class CredentialError(IntakeError):
    code: ErrorCode = "credential_error"


class SinkError(IntakeError):
    code: ErrorCode = "sink_write_failed"


class SinkAuthError(SinkError):
    code: ErrorCode = "sink_auth_failed"


class SinkLoadError(SinkError):
    code: ErrorCode = "sink_load_failed"


class SinkWriteError(SinkError):
    code: ErrorCode = "sink_write_failed"


class UnexpectedError(IntakeError):
    code: ErrorCode = "internal_error"
