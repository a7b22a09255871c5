"""Quota-aware request pacing for the GitLab API.

GitLab reports the caller's budget on every response (`RateLimit-Limit`,
`RateLimit-Observed`, `RateLimit-Remaining`, `RateLimit-Reset`). Once more
than half of the window is used up, the remaining requests are spread evenly
until the window resets instead of being spent as one burst and then refused.
Refusals themselves (403/429) are retried by core.rate_limiter.
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Mapping, Optional

logger = logging.getLogger(__name__)


def _int_header(headers: Mapping[str, str], name: str) -> Optional[int]:
    value = (headers.get(name) or "").strip()
    return int(value) if value.isdigit() else None


class QuotaPacer:
    """Keeps request starts apart by the configured floor or the quota interval."""

    # Fraction of the window that may be used before spreading kicks in.
    SPREAD_THRESHOLD = 0.5

    def __init__(self, *, rate_per_sec: float) -> None:
        rate = float(rate_per_sec)
        self._floor = 0.0 if rate <= 0 else 1.0 / rate

        self._quota_interval = 0.0
        self._quota_until = 0.0  # monotonic end of the current window
        self._last_slot: Optional[float] = None
        self._lock = asyncio.Lock()

    @property
    def interval(self) -> float:
        if time.monotonic() < self._quota_until:
            return max(self._floor, self._quota_interval)
        return self._floor

    def observe(self, headers: Mapping[str, str]) -> None:
        """Update the quota interval from a GitLab response's RateLimit headers."""
        limit = _int_header(headers, "RateLimit-Limit")
        remaining = _int_header(headers, "RateLimit-Remaining")
        if remaining is None and limit is not None:
            observed = _int_header(headers, "RateLimit-Observed")
            if observed is not None:
                remaining = max(0, limit - observed)
        reset = _int_header(headers, "RateLimit-Reset")

        if limit is None or remaining is None or reset is None or limit <= 0:
            return

        window = reset - time.time()
        if window <= 0 or remaining <= 0 or remaining / limit > self.SPREAD_THRESHOLD:
            self._quota_interval = 0.0
            self._quota_until = 0.0
            return

        spread = window / remaining
        if spread > self._quota_interval:
            logger.debug("GitLab quota at %s/%s, spacing requests by %.2fs", remaining, limit, spread)
        self._quota_interval = spread
        self._quota_until = time.monotonic() + window

    async def wait(self) -> None:
        async with self._lock:
            now = time.monotonic()
            slot = now
            if self._last_slot is not None:
                slot = max(now, self._last_slot + self.interval)
            self._last_slot = slot
            delay = slot - now

        if delay > 0:
            await asyncio.sleep(delay)
