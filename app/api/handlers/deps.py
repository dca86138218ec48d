from __future__ import annotations

from dataclasses import dataclass

from app.domain.contracts import SheetSink
from app.domain.credentials import CredentialResolver
from app.domain.rate_limit import FixedWindowRateLimiter
from app.services.reporter import FailureReporter
from app.settings import AppSettings


@dataclass(frozen=True)
class ApiDeps:
    settings: AppSettings
    rate_limiter: FixedWindowRateLimiter
    credentials: CredentialResolver
    sink: SheetSink
    reporter: FailureReporter
