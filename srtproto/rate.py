"""Rate estimation and average payload size tracking."""

from __future__ import annotations

import time
from typing import Callable


class RateEstimator:
    """Measures incoming byte and packet rates over one-second periods."""

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._bytes_in_period = 0
        self._pkts_in_period = 0
        self._period_start = clock()
        self._period_duration = 1.0
        self._rate_bps = 0
        self._rate_pps = 0
        self._avg_payload_size = 0

    def on_packet(self, payload_size: int) -> None:
        """Record the arrival of a packet carrying ``payload_size`` bytes."""
        self._bytes_in_period += payload_size
        self._pkts_in_period += 1

        if self._avg_payload_size == 0:
            self._avg_payload_size = payload_size
        else:
            self._avg_payload_size = (self._avg_payload_size * 7 + payload_size) // 8

        now = self._clock()
        elapsed = now - self._period_start
        if elapsed >= self._period_duration:
            if elapsed > 0:
                self._rate_bps = int(self._bytes_in_period / elapsed)
                self._rate_pps = int(self._pkts_in_period / elapsed)
            self._bytes_in_period = 0
            self._pkts_in_period = 0
            self._period_start = self._clock()

    def rate_bps(self) -> int:
        """Current rate in bytes per second."""
        return self._rate_bps

    def rate_pps(self) -> int:
        """Current rate in packets per second."""
        return self._rate_pps

    def avg_payload_size(self) -> int:
        """Current smoothed average payload size."""
        return self._avg_payload_size