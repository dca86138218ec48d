from __future__ import annotations

import logging

import httpx

SLACK_MESSAGE_PREFIX = "\U0001f6a8 *Google Sheets API Error:* "

logger = logging.getLogger("notify")


class SlackNotifier:
    """Posts failure messages to a Slack incoming webhook.

    Delivery is best-effort: a missing webhook URL, transport errors and
    non-2xx answers are logged and swallowed.
    """

    def __init__(
        self,
        *,
        webhook_url: str | None,
        timeout_seconds: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._webhook_url = webhook_url
        self._timeout_seconds = timeout_seconds
        self._transport = transport

    @property
    def enabled(self) -> bool:
        return bool(self._webhook_url)

    async def send(self, message: str) -> None:
        if not self._webhook_url:
            logger.error("slack webhook url not configured, skipping notification")
            return

        payload = {"text": f"{SLACK_MESSAGE_PREFIX}{message}"}
        try:
            async with httpx.AsyncClient(timeout=self._timeout_seconds, transport=self._transport) as client:
                response = await client.post(self._webhook_url, json=payload)
        except httpx.HTTPError as exc:
            logger.error("error sending slack notification: %s", exc)
            return

        if response.is_error:
            logger.error(
                "failed to send slack notification: %s",
                response.text,
                extra={"status_code": response.status_code},
            )
