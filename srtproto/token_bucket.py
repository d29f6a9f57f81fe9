"""Token bucket shaper for retransmission bandwidth."""

from __future__ import annotations

import math
import time
from typing import Callable


def _burst_for(rate_bytes_per_sec: int, mss: int) -> float:
    # At least two MSS, or 10 ms worth of bandwidth, whichever is larger.
    return max(rate_bytes_per_sec * 0.01, mss * 2.0)


class TokenBucket:
    """Limits retransmission bandwidth; tokens are bytes.

    A rate of zero or less means unlimited.
    """

    def __init__(
        self,
        rate_bytes_per_sec: int,
        mss: int,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._clock = clock
        self._rate = rate_bytes_per_sec
        self._burst = _burst_for(rate_bytes_per_sec, mss) if rate_bytes_per_sec > 0 else math.inf
        self._tokens = self._burst
        self._last_refill = clock()

    def try_consume(self, pkt_size: int) -> bool:
        """Take ``pkt_size`` tokens if available; returns whether sending is allowed."""
        if self._rate <= 0:
            return True
        self._refill()
        if self._tokens >= pkt_size:
            self._tokens -= pkt_size
            return True
        return False

    def is_unlimited(self) -> bool:
        """Whether no shaping is applied."""
        return self._rate <= 0

    def set_rate(self, rate_bytes_per_sec: int, mss: int) -> None:
        """Change the rate at once; tokens are clamped to the new burst size."""
        self._refill()
        self._rate = rate_bytes_per_sec
        if rate_bytes_per_sec > 0:
            self._burst = _burst_for(rate_bytes_per_sec, mss)
            self._tokens = min(self._tokens, self._burst)
        else:
            self._burst = math.inf
            self._tokens = math.inf

    def _refill(self) -> None:
        now = self._clock()
        elapsed = now - self._last_refill
        self._last_refill = now
        self._tokens = min(self._tokens + self._rate * elapsed, self._burst)