from __future__ import annotations

from collections import OrderedDict
from collections.abc import Callable
from dataclasses import dataclass
import threading
import time

from app.domain.errors import RateLimitError

UNKNOWN_CLIENT_ID = "unknown"


@dataclass
class ClientRateState:
    count: int
    reset_at: float


def client_id_from_forwarded_for(header_value: str | None) -> str:
    if not header_value:
        return UNKNOWN_CLIENT_ID
    first_hop = header_value.split(",")[0].strip()
    return first_hop or UNKNOWN_CLIENT_ID


class FixedWindowRateLimiter:
    """Per-client fixed-window counter.

    Windows reset wholesale once the clock passes ``reset_at``; they do not
    slide. The table is an LRU bounded by ``max_clients`` and periodically
    swept of expired windows, so idle clients do not accumulate forever.
    """

    def __init__(
        self,
        *,
        limit: int = 10,
        window_seconds: float = 60.0,
        max_clients: int = 10_000,
        sweep_every: int = 1_000,
        clock: Callable[[], float] = time.time,
    ) -> None:
        if limit < 1:
            raise ValueError("limit must be positive")
        if window_seconds <= 0:
            raise ValueError("window_seconds must be positive")
        if max_clients < 1:
            raise ValueError("max_clients must be positive")
        self.limit = limit
        self.window_seconds = window_seconds
        self.max_clients = max_clients
        self.sweep_every = max(1, sweep_every)
        self._clock = clock
        self._states: OrderedDict[str, ClientRateState] = OrderedDict()
        self._hits_since_sweep = 0
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._states)

    def hit(self, client_id: str) -> ClientRateState:
        """Count one request for ``client_id``; raise once the window is exhausted."""
        with self._lock:
            now = self._clock()
            state = self._states.get(client_id)
            if state is None:
                state = ClientRateState(count=1, reset_at=now + self.window_seconds)
                self._states[client_id] = state
            elif now > state.reset_at:
                state.count = 1
                state.reset_at = now + self.window_seconds
            else:
                state.count += 1
            self._states.move_to_end(client_id)

            self._hits_since_sweep += 1
            if self._hits_since_sweep >= self.sweep_every:
                self._sweep_expired(now)
            while len(self._states) > self.max_clients:
                self._states.popitem(last=False)

            snapshot = ClientRateState(count=state.count, reset_at=state.reset_at)

        if snapshot.count > self.limit:
            raise RateLimitError(
                "Too many requests, please try again later",
                details={"retryAfterSeconds": max(0, int(snapshot.reset_at - now))},
            )
        return snapshot

    def _sweep_expired(self, now: float) -> None:
        self._hits_since_sweep = 0
        expired = [key for key, state in self._states.items() if now > state.reset_at]
        for key in expired:
            del self._states[key]
