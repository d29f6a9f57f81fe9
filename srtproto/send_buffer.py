"""Send buffer: message segmentation and retransmission storage."""

from __future__ import annotations

import dataclasses
import enum
import time
from collections import deque
from dataclasses import dataclass
from typing import Callable, Deque, Iterable, List, Optional, Tuple

from srtproto.loss_list import seq_add, seq_is_after, seq_is_before

# Message numbers are 26-bit; zero is never assigned.
MSGNO_MAX = 0x03FFFFFF


def _next_msg_no(msg_no: int) -> int:
    return 1 if msg_no >= MSGNO_MAX else msg_no + 1


class PacketBoundary(enum.IntEnum):
    """Position of a packet within its message (wire PP field)."""

    SUBSEQUENT = 0b00
    LAST = 0b01
    FIRST = 0b10
    SOLO = 0b11


@dataclass
class SendBufferEntry:
    """One packet held in the send buffer.

    ``queue_time`` is when the packet was queued; ``origin_time`` is
    stamped on first dispatch and kept for every retransmission.
    """

    data: bytes
    seq_no: int
    msg_no: int
    boundary: PacketBoundary
    queue_time: float
    origin_time: float
    in_order: bool
    msg_ttl: int
    send_count: int = 0
    acked: bool = False

    def expired(self, now: float) -> bool:
        """Whether the message TTL (milliseconds, negative = unlimited) has passed."""
        if self.msg_ttl < 0:
            return False
        return int((now - self.queue_time) * 1000) > self.msg_ttl


class SendBuffer:
    """Outgoing packets awaiting acknowledgement.

    A send cursor marks the next packet never sent; packets before it
    stay until acknowledged so they can be retransmitted.
    """

    def __init__(
        self,
        max_packets: int,
        max_payload_size: int,
        initial_seq: int,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._clock = clock
        self._entries: Deque[SendBufferEntry] = deque()
        self._max_packets = max_packets
        self._max_payload_size = max_payload_size
        self._next_seq = initial_seq
        self._next_msg = 1
        self._first_unacked = initial_seq
        self._send_cursor = 0

    @property
    def max_packets(self) -> int:
        return self._max_packets

    @property
    def next_seq_no(self) -> int:
        return self._next_seq

    @property
    def first_unacked(self) -> int:
        return self._first_unacked

    def __len__(self) -> int:
        return len(self._entries)

    def add_message(self, data: bytes, ttl: int = -1, in_order: bool = False) -> Optional[int]:
        """Segment ``data`` into packets and queue them.

        Returns the number of packets created, or ``None`` if they do not fit.
        """
        data = bytes(data)
        payload_size = self._max_payload_size if self._max_payload_size > 0 else len(data)
        if data:
            chunks = [data[i:i + payload_size] for i in range(0, len(data), payload_size)]
        else:
            chunks = [b""]

        if len(self._entries) + len(chunks) > self._max_packets:
            return None

        msg_no = self._next_msg
        self._next_msg = _next_msg_no(msg_no)
        now = self._clock()
        last = len(chunks) - 1

        for i, chunk in enumerate(chunks):
            if last == 0:
                boundary = PacketBoundary.SOLO
            elif i == 0:
                boundary = PacketBoundary.FIRST
            elif i == last:
                boundary = PacketBoundary.LAST
            else:
                boundary = PacketBoundary.SUBSEQUENT
            self._entries.append(
                SendBufferEntry(
                    data=chunk,
                    seq_no=self._next_seq,
                    msg_no=msg_no,
                    boundary=boundary,
                    queue_time=now,
                    origin_time=now,
                    in_order=in_order,
                    msg_ttl=ttl,
                )
            )
            self._next_seq = seq_add(self._next_seq, 1)

        return len(chunks)

    def next_packet(self) -> Optional[SendBufferEntry]:
        """A copy of the next unsent packet, stamped as sent; ``None`` if none."""
        if self._send_cursor >= len(self._entries):
            return None
        entry = self._entries[self._send_cursor]
        entry.send_count += 1
        entry.origin_time = self._clock()
        self._send_cursor += 1
        return dataclasses.replace(entry)

    def has_unsent(self) -> bool:
        """Whether packets wait to be sent for the first time."""
        return self._send_cursor < len(self._entries)

    def get_packet_for_retransmit(self, seq: int) -> Optional[SendBufferEntry]:
        """A copy of the packet ``seq`` with its send count bumped, if held."""
        entry = self.get_packet(seq)
        if entry is None:
            return None
        entry.send_count += 1
        return dataclasses.replace(entry)

    def get_packet(self, seq: int) -> Optional[SendBufferEntry]:
        """The stored packet ``seq`` itself, if held."""
        return next((e for e in self._entries if e.seq_no == seq), None)

    def acknowledge(self, ack_seq: int) -> int:
        """Drop every packet before ``ack_seq``; returns how many were removed."""
        removed = 0
        while self._entries and seq_is_before(self._entries[0].seq_no, ack_seq):
            self._entries.popleft()
            removed += 1
        self._send_cursor = max(0, self._send_cursor - removed)
        if seq_is_after(ack_seq, self._first_unacked):
            self._first_unacked = ack_seq
        return removed

    def get_retransmit_packets(self, loss_list: Iterable[int]) -> List[SendBufferEntry]:
        """Stored packets for the given lost sequence numbers, skipping unknown ones."""
        found = (self.get_packet(seq) for seq in loss_list)
        return [entry for entry in found if entry is not None]

    def is_full(self) -> bool:
        """Whether no more packets fit."""
        return len(self._entries) >= self._max_packets

    def in_flight(self) -> int:
        """Packets sent at least once and not acknowledged."""
        return sum(1 for e in self._entries if not e.acked and e.send_count > 0)

    def peek_next_data(self) -> Optional[bytes]:
        """Payload of the next unsent packet, if any."""
        if self._send_cursor < len(self._entries):
            return self._entries[self._send_cursor].data
        return None

    def _remove_expired(self, now: float) -> None:
        sent = list(self._entries)[: self._send_cursor]
        cursor_adjust = sum(1 for e in sent if e.expired(now))
        self._entries = deque(e for e in self._entries if not e.expired(now))
        self._send_cursor = max(0, self._send_cursor - cursor_adjust)

    def drop_expired(self) -> int:
        """Drop packets whose message TTL has passed; returns how many."""
        before = len(self._entries)
        self._remove_expired(self._clock())
        return before - len(self._entries)

    def drop_expired_with_info(self) -> List[Tuple[int, int, int]]:
        """Drop expired packets and describe them as ``(msg_no, first_seq, last_seq)``."""
        now = self._clock()
        dropped: List[Tuple[int, int, int]] = []
        for entry in self._entries:
            if not entry.expired(now):
                continue
            if dropped and dropped[-1][0] == entry.msg_no:
                dropped[-1] = (entry.msg_no, dropped[-1][1], entry.seq_no)
            else:
                dropped.append((entry.msg_no, entry.seq_no, entry.seq_no))
        if dropped:
            self._remove_expired(now)
        return dropped