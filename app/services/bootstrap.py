from __future__ import annotations

from dataclasses import dataclass

from app.api.handlers.deps import ApiDeps
from app.clients.slack import SlackNotifier
from app.clients.stub import InMemorySheetSink
from app.domain.contracts import Notifier, SheetSink
from app.domain.credentials import CredentialResolver, CredentialSources
from app.domain.rate_limit import FixedWindowRateLimiter
from app.services.reporter import FailureReporter
from app.settings import AppSettings


@dataclass
class RuntimeContainer:
    settings: AppSettings
    sink: SheetSink
    notifier: Notifier
    api_deps: ApiDeps


def build_runtime_container(
    settings: AppSettings,
    *,
    sink: SheetSink | None = None,
    notifier: Notifier | None = None,
) -> RuntimeContainer:
    if sink is None:
        sink = _build_sink(settings)
    if notifier is None:
        notifier = SlackNotifier(
            webhook_url=settings.slack_webhook_url,
            timeout_seconds=settings.slack_timeout_seconds,
        )

    rate_limiter = FixedWindowRateLimiter(
        limit=settings.rate_limit_requests,
        window_seconds=settings.rate_limit_window_seconds,
        max_clients=settings.rate_limit_max_clients,
    )
    credentials = CredentialResolver(
        CredentialSources(
            base64_json=settings.google_service_account_key_base64,
            raw_json=settings.google_service_account_key,
        )
    )
    reporter = FailureReporter(notifier, background=settings.notify_in_background)
    api_deps = ApiDeps(
        settings=settings,
        rate_limiter=rate_limiter,
        credentials=credentials,
        sink=sink,
        reporter=reporter,
    )
    return RuntimeContainer(settings=settings, sink=sink, notifier=notifier, api_deps=api_deps)


def _build_sink(settings: AppSettings) -> SheetSink:
    if settings.sheets_backend == "memory":
        return InMemorySheetSink()
    # Imported lazily so the memory backend runs without Google client libraries loaded.
    from app.clients.sheets import GspreadSheetSink

    return GspreadSheetSink()
