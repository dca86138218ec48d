from __future__ import annotations

import asyncio
import logging

from app.domain.contracts import Notifier

logger = logging.getLogger("notify")


class FailureReporter:
    """Fire-and-forget front for the operations notifier.

    In background mode ``report`` schedules delivery as a detached task and
    returns at once; the task is only referenced here so it is not garbage
    collected mid-flight. In inline mode delivery is awaited. Either way
    ``report`` never raises.
    """

    def __init__(self, notifier: Notifier, *, background: bool = True) -> None:
        self._notifier = notifier
        self._background = background
        self._pending: set[asyncio.Task[None]] = set()

    @property
    def pending(self) -> int:
        return len(self._pending)

    async def report(self, message: str) -> None:
        logger.warning("reporting failure", extra={"notify_message": message})
        if not self._background:
            await self._deliver(message)
            return

        task = asyncio.create_task(self._deliver(message))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def drain(self) -> None:
        """Wait for in-flight deliveries, e.g. before shutdown."""
        if self._pending:
            await asyncio.gather(*tuple(self._pending), return_exceptions=True)

    async def _deliver(self, message: str) -> None:
        try:
            await self._notifier.send(message)
        except Exception:
            logger.exception("failure notification raised")
