import asyncio
import json

import httpx
import pytest

from app.clients.slack import SLACK_MESSAGE_PREFIX, SlackNotifier
from app.clients.stub import RecordingNotifier
from app.services.reporter import FailureReporter


class _ExplodingNotifier:
    async def send(self, message: str) -> None:
        raise RuntimeError(f"cannot deliver {message}")


class _SlowNotifier:
    def __init__(self) -> None:
        self.release = asyncio.Event()
        self.messages: list[str] = []

    async def send(self, message: str) -> None:
        await self.release.wait()
        self.messages.append(message)


@pytest.mark.unit
def test_inline_reporter_delivers_before_returning() -> None:
    notifier = RecordingNotifier()
    reporter = FailureReporter(notifier, background=False)

    asyncio.run(reporter.report("sheet exploded"))

    assert notifier.messages == ["sheet exploded"]


@pytest.mark.unit
def test_background_reporter_does_not_block_caller() -> None:
    async def _scenario() -> tuple[int, list[str], list[str], int]:
        notifier = _SlowNotifier()
        reporter = FailureReporter(notifier, background=True)
        await reporter.report("first")
        pending_after_report = reporter.pending
        delivered_before_release = list(notifier.messages)
        notifier.release.set()
        await reporter.drain()
        return pending_after_report, delivered_before_release, notifier.messages, reporter.pending

    pending, before, after, pending_after_drain = asyncio.run(_scenario())

    assert pending == 1
    assert before == []
    assert after == ["first"]
    assert pending_after_drain == 0


@pytest.mark.unit
@pytest.mark.parametrize("background", [True, False])
def test_notifier_failures_are_swallowed(background: bool) -> None:
    async def _scenario() -> None:
        reporter = FailureReporter(_ExplodingNotifier(), background=background)
        await reporter.report("boom")
        await reporter.drain()

    asyncio.run(_scenario())


@pytest.mark.unit
def test_slack_notifier_posts_prefixed_text() -> None:
    seen: list[httpx.Request] = []

    def _handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, text="ok")

    notifier = SlackNotifier(webhook_url="https://hooks.slack.test/T000", transport=httpx.MockTransport(_handler))
    asyncio.run(notifier.send("Error updating Google Sheet: quota"))

    assert len(seen) == 1
    assert seen[0].method == "POST"
    assert json.loads(seen[0].content) == {"text": f"{SLACK_MESSAGE_PREFIX}Error updating Google Sheet: quota"}


@pytest.mark.unit
def test_slack_notifier_without_url_skips_delivery() -> None:
    notifier = SlackNotifier(webhook_url=None)

    assert notifier.enabled is False
    asyncio.run(notifier.send("ignored"))


@pytest.mark.unit
def test_slack_notifier_swallows_transport_and_http_errors() -> None:
    def _failing(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    def _rejecting(request: httpx.Request) -> httpx.Response:
        del request
        return httpx.Response(403, text="invalid_token")

    for handler in (_failing, _rejecting):
        notifier = SlackNotifier(webhook_url="https://hooks.slack.test/T000", transport=httpx.MockTransport(handler))
        asyncio.run(notifier.send("boom"))
