"""Receive buffer: packet reordering and TSBPD-paced delivery."""

from __future__ import annotations

import enum
import time
from dataclasses import dataclass
from typing import Callable, List, Optional, Protocol, Tuple

from srtproto.loss_list import seq_add, seq_is_after, seq_offset
from srtproto.send_buffer import PacketBoundary


class _Tsbpd(Protocol):
    """Delivery timing: whether a packet timestamp is due, or already too late."""

    def is_ready(self, timestamp: int) -> bool: ...

    def is_too_late(self, timestamp: int) -> bool: ...


class SlotState(enum.Enum):
    """State of a slot in the receive buffer."""

    EMPTY = "empty"
    VALID = "valid"
    READ = "read"
    DROPPED = "dropped"
    # Occupies a sequence slot for ACK continuity but is never delivered.
    FEC_PLACEHOLDER = "fec-placeholder"


@dataclass
class ReceiveEntry:
    """One packet held in the receive buffer."""

    data: bytes
    seq_no: int
    msg_no: int
    boundary: PacketBoundary
    timestamp: int
    in_order: bool
    state: SlotState
    arrival_time: float


class ReceiveBuffer:
    """Circular buffer of received packets indexed by sequence number.

    Packets are delivered to the application in order; when a TSBPD
    timer is given, only once their delivery time has come.
    """

    def __init__(
        self,
        capacity: int,
        initial_seq: int,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if capacity <= 0:
            raise ValueError("capacity must be positive")
        self._clock = clock
        self._entries: List[Optional[ReceiveEntry]] = [None] * capacity
        self._capacity = capacity
        self._start_pos = 0
        self._start_seq = initial_seq
        self._valid_count = 0
        self._highest_recv_seq: Optional[int] = None

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def start_seq(self) -> int:
        return self._start_seq

    def __len__(self) -> int:
        return self._valid_count

    def set_start_seq(self, seq: int) -> None:
        """Reset the sequence number mapped to the head of the buffer."""
        self._start_seq = seq

    def _position(self, seq: int) -> Optional[int]:
        offset = seq_offset(self._start_seq, seq)
        if offset < 0 or offset >= self._capacity:
            return None
        return (self._start_pos + offset) % self._capacity

    def _slot(self, index: int) -> int:
        return (self._start_pos + index) % self._capacity

    def insert(
        self,
        seq_no: int,
        msg_no: int,
        boundary: PacketBoundary,
        timestamp: int,
        in_order: bool,
        data: bytes,
    ) -> bool:
        """Store a received packet; ``False`` if out of range or a duplicate."""
        pos = self._position(seq_no)
        if pos is None:
            return False
        existing = self._entries[pos]
        if existing is not None and existing.state is not SlotState.FEC_PLACEHOLDER:
            return False
        self._entries[pos] = ReceiveEntry(
            data=bytes(data),
            seq_no=seq_no,
            msg_no=msg_no,
            boundary=boundary,
            timestamp=timestamp,
            in_order=in_order,
            state=SlotState.VALID,
            arrival_time=self._clock(),
        )
        self._valid_count += 1
        return True

    def insert_fec_placeholder(self, seq_no: int, timestamp: int) -> bool:
        """Occupy the slot of an FEC packet; ``False`` if out of range or taken."""
        pos = self._position(seq_no)
        if pos is None or self._entries[pos] is not None:
            return False
        self._entries[pos] = ReceiveEntry(
            data=b"",
            seq_no=seq_no,
            msg_no=0,
            boundary=PacketBoundary.SOLO,
            timestamp=timestamp,
            in_order=False,
            state=SlotState.FEC_PLACEHOLDER,
            arrival_time=self._clock(),
        )
        return True

    def _skip_placeholders(self) -> None:
        while True:
            entry = self._entries[self._start_pos]
            if entry is None or entry.state is not SlotState.FEC_PLACEHOLDER:
                return
            self._entries[self._start_pos] = None
            self._advance_start(1)

    def read_message(self, tsbpd: Optional[_Tsbpd] = None) -> Optional[bytes]:
        """Remove and return the next complete message, or ``None``.

        With ``tsbpd`` given, a message is returned only once it is ready.
        A stray middle or last packet at the head is dropped.
        """
        self._skip_placeholders()
        first = self._entries[self._start_pos]
        if first is None:
            return None
        if tsbpd is not None and not tsbpd.is_ready(first.timestamp):
            return None

        if first.boundary is PacketBoundary.SOLO:
            self._entries[self._start_pos] = None
            self._advance_start(1)
            self._valid_count -= 1
            return first.data

        if first.boundary is PacketBoundary.FIRST:
            parts: List[bytes] = []
            for count in range(1, self._capacity + 1):
                entry = self._entries[self._slot(count - 1)]
                if entry is None or entry.msg_no != first.msg_no:
                    return None
                parts.append(entry.data)
                if entry.boundary in (PacketBoundary.LAST, PacketBoundary.SOLO):
                    break
            else:
                return None
            for i in range(count):
                self._entries[self._slot(i)] = None
                self._valid_count -= 1
            self._advance_start(count)
            return b"".join(parts)

        self._entries[self._start_pos] = None
        self._valid_count -= 1
        self._advance_start(1)
        return None

    def read_stream(self, max_len: int) -> bytes:
        """Remove and return up to ``max_len`` bytes of contiguous data."""
        self._skip_placeholders()
        result = bytearray()
        count = 0
        while len(result) < max_len and count < self._capacity:
            entry = self._entries[self._slot(count)]
            if entry is None or entry.state is not SlotState.VALID:
                break
            result += entry.data[: max_len - len(result)]
            count += 1
        for i in range(count):
            self._entries[self._slot(i)] = None
            self._valid_count -= 1
        if count:
            self._advance_start(count)
        return bytes(result)

    def drop_too_late(self, tsbpd: _Tsbpd) -> int:
        """Drop head packets (and gaps before them) that are too late; returns how many."""
        dropped = 0
        while True:
            entry = self._entries[self._start_pos]
            if entry is not None:
                if not tsbpd.is_too_late(entry.timestamp):
                    break
                self._entries[self._start_pos] = None
                if entry.state is not SlotState.FEC_PLACEHOLDER:
                    self._valid_count -= 1
                self._advance_start(1)
                dropped += 1
                continue

            following = next(
                (
                    e
                    for e in (self._entries[self._slot(i)] for i in range(1, self._capacity))
                    if e is not None
                ),
                None,
            )
            if following is None or not tsbpd.is_too_late(following.timestamp):
                break
            self._advance_start(1)
            dropped += 1
        return dropped

    def drop_range(self, first: int, last: int) -> int:
        """Drop held packets from ``first`` to ``last`` inclusive; returns how many."""
        dropped = 0
        for i in range(seq_offset(first, last) + 1):
            pos = self._position(seq_add(first, i))
            if pos is None:
                continue
            entry = self._entries[pos]
            if entry is None:
                continue
            self._entries[pos] = None
            if entry.state is not SlotState.FEC_PLACEHOLDER:
                self._valid_count -= 1
            dropped += 1
        return dropped

    def _advance_start(self, count: int) -> None:
        self._start_pos = (self._start_pos + count) % self._capacity
        self._start_seq = seq_add(self._start_seq, count)

    def update_highest_recv(self, seq: int) -> None:
        """Record a sequence number seen on the network (not FEC-recovered)."""
        if self._highest_recv_seq is None or seq_is_after(seq, self._highest_recv_seq):
            self._highest_recv_seq = seq

    def ack_seq(self) -> int:
        """First sequence number not yet received contiguously.

        Capped at one past the highest sequence seen on the network.
        """
        offset = 0
        while offset < self._capacity and self._entries[self._slot(offset)] is not None:
            offset += 1
        raw_ack = seq_add(self._start_seq, offset)
        if self._highest_recv_seq is not None:
            max_ack = seq_add(self._highest_recv_seq, 1)
            if seq_is_after(raw_ack, max_ack):
                return max_ack
        return raw_ack

    def get_loss_list(self) -> List[Tuple[int, int]]:
        """Inclusive ranges of missing sequence numbers across the whole window."""
        losses: List[Tuple[int, int]] = []
        for i in range(self._capacity):
            if self._entries[self._slot(i)] is not None:
                continue
            seq = seq_add(self._start_seq, i)
            if losses and seq_offset(losses[-1][1], seq) == 1 and self._entries[self._slot(i - 1)] is None:
                losses[-1] = (losses[-1][0], seq)
            else:
                losses.append((seq, seq))
        return losses

    def is_empty(self) -> bool:
        """Whether no deliverable packets are held."""
        return self._valid_count == 0

    def available(self) -> int:
        """Free space in packets."""
        return self._capacity - self._valid_count

    def has_packet(self, seq: int) -> bool:
        """Whether the slot for ``seq`` is occupied."""
        pos = self._position(seq)
        return pos is not None and self._entries[pos] is not None