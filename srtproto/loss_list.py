"""Send and receive loss lists for ARQ, plus sequence number arithmetic."""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Tuple

# SRT sequence numbers are 31-bit and wrap around.
SEQ_MAX = 0x7FFFFFFF
_SEQ_THRESHOLD = 0x3FFFFFFF


def seq_add(seq: int, count: int) -> int:
    """Advance ``seq`` by ``count`` (which may be negative), wrapping at 31 bits."""
    return (seq + count) & SEQ_MAX


def seq_offset(first: int, second: int) -> int:
    """Signed distance from ``first`` to ``second``, taking wrap-around into account."""
    diff = second - first
    if abs(diff) < _SEQ_THRESHOLD:
        return diff
    if first < second:
        return diff - SEQ_MAX - 1
    return diff + SEQ_MAX + 1


def seq_is_before(seq: int, other: int) -> bool:
    """Whether ``seq`` comes before ``other``."""
    return seq_offset(seq, other) > 0


def seq_is_after(seq: int, other: int) -> bool:
    """Whether ``seq`` comes after ``other``."""
    return seq_offset(seq, other) < 0


def _seq_range(first: int, last: int):
    """Sequence numbers from ``first`` to ``last`` inclusive."""
    for i in range(seq_offset(first, last) + 1):
        yield seq_add(first, i)


class SendLossList:
    """Packets the receiver reported lost (via NAK) that need retransmission."""

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._losses: Dict[int, float] = {}

    def insert(self, seq: int) -> None:
        """Record a single lost sequence number."""
        self._losses[seq] = self._clock()

    def insert_range(self, first: int, last: int) -> None:
        """Record every sequence number from ``first`` to ``last`` inclusive."""
        for seq in _seq_range(first, last):
            self._losses[seq] = self._clock()

    def remove(self, seq: int) -> None:
        """Forget a sequence number (retransmitted or acknowledged)."""
        self._losses.pop(seq, None)

    def acknowledge(self, ack_seq: int) -> None:
        """Forget every sequence number before ``ack_seq``."""
        self._losses = {
            seq: stamp
            for seq, stamp in self._losses.items()
            if not seq_is_before(seq, ack_seq)
        }

    def pop_front(self) -> Optional[int]:
        """Remove and return the lowest recorded sequence number, if any."""
        seq = self.peek_front()
        if seq is not None:
            del self._losses[seq]
        return seq

    def peek_front(self) -> Optional[int]:
        """The lowest recorded sequence number, if any."""
        return min(self._losses, default=None)

    def clear(self) -> None:
        """Forget all entries."""
        self._losses.clear()

    def __len__(self) -> int:
        return len(self._losses)

    def __contains__(self, seq: object) -> bool:
        return seq in self._losses


@dataclass
class _LossEntry:
    detected: float
    last_nak: float
    nak_count: int = 0


class ReceiveLossList:
    """Gaps detected in the received sequence, used to build NAK reports."""

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._losses: Dict[int, _LossEntry] = {}

    def insert_range(self, first: int, last: int) -> None:
        """Record a gap; entries already present keep their NAK history."""
        now = self._clock()
        for seq in _seq_range(first, last):
            self._losses.setdefault(seq, _LossEntry(detected=now, last_nak=now))

    def remove(self, seq: int) -> None:
        """Forget a sequence number (the packet arrived)."""
        self._losses.pop(seq, None)

    def acknowledge(self, ack_seq: int) -> None:
        """Forget every sequence number before ``ack_seq``."""
        self._losses = {
            seq: entry
            for seq, entry in self._losses.items()
            if not seq_is_before(seq, ack_seq)
        }

    def get_loss_ranges(self, min_nak_interval: float) -> List[Tuple[int, int]]:
        """Inclusive loss ranges due for a NAK.

        A loss is included if it was never NAK'd or its last NAK is at least
        ``min_nak_interval`` seconds old. Included entries are marked as NAK'd.
        """
        if not self._losses:
            return []

        now = self._clock()
        eligible = [
            seq
            for seq in sorted(self._losses)
            if self._losses[seq].nak_count == 0
            or now - self._losses[seq].last_nak >= min_nak_interval
        ]

        for seq in eligible:
            entry = self._losses[seq]
            entry.last_nak = now
            entry.nak_count += 1

        ranges: List[Tuple[int, int]] = []
        for seq in eligible:
            if ranges and seq_offset(ranges[-1][1], seq) == 1:
                ranges[-1] = (ranges[-1][0], seq)
            else:
                ranges.append((seq, seq))
        return ranges

    def clear(self) -> None:
        """Forget all entries."""
        self._losses.clear()

    def __len__(self) -> int:
        return len(self._losses)

    def __contains__(self, seq: object) -> bool:
        return seq in self._losses