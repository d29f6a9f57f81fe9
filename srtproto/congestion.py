"""Pluggable congestion control interface."""

from __future__ import annotations

import enum
from abc import ABC, abstractmethod
from typing import Sequence, Tuple


class RexmitMethod(enum.Enum):
    """Retransmission method."""

    LATE_REXMIT = "late"
    FAST_REXMIT = "fast"


class CongestionControl(ABC):
    """Base class for congestion controllers.

    Implementations control the packet sending period and the
    congestion window size.
    """

    @abstractmethod
    def on_ack(self, ack_seq: int, rtt_us: int) -> None:
        """Handle a received ACK."""

    @abstractmethod
    def on_loss(self, loss_list: Sequence[Tuple[int, int]]) -> None:
        """Handle a loss report given as inclusive sequence ranges."""

    @abstractmethod
    def on_timer(self) -> None:
        """Periodic rate adjustment."""

    @abstractmethod
    def pkt_send_period_us(self) -> float:
        """Packet sending period in microseconds."""

    @abstractmethod
    def congestion_window(self) -> float:
        """Congestion window size in packets."""

    @abstractmethod
    def max_congestion_window(self) -> float:
        """Maximum congestion window size."""

    @abstractmethod
    def set_bandwidth(self, bandwidth_pkts_per_sec: int) -> None:
        """Update the bandwidth estimate."""

    @abstractmethod
    def set_max_bandwidth(self, max_bw_bytes_per_sec: int) -> None:
        """Update the maximum send bandwidth."""

    def bandwidth(self) -> int:
        """Estimated link bandwidth in packets per second."""
        return 0

    def rexmit_method(self) -> RexmitMethod:
        """Retransmission method used by this controller."""
        return RexmitMethod.LATE_REXMIT