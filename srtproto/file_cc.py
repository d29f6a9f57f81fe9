"""File mode congestion control: AIMD with slow start."""

from __future__ import annotations

from typing import Optional, Sequence, Tuple

from srtproto.congestion import CongestionControl, RexmitMethod


class FileCC(CongestionControl):
    """Additive-increase, multiplicative-decrease control for file transfer."""

    def __init__(self) -> None:
        self._pkt_send_period = 1.0
        self._cwnd = 16.0
        self._max_cwnd = 8192.0
        self._ss_thresh = 8192.0
        self._slow_start = True
        self._bandwidth = 0
        self._avg_payload_size = 1456.0
        self._max_bw = 0
        self._last_ack: Optional[int] = None
        self._loss_in_rtt = False

    def on_ack(self, ack_seq: int, rtt_us: int) -> None:
        if self._slow_start:
            self._cwnd += 1.0
            if self._cwnd >= self._ss_thresh:
                self._slow_start = False
        else:
            self._cwnd += 1.0 / self._cwnd

        self._cwnd = min(self._cwnd, self._max_cwnd)

        if self._bandwidth > 0:
            self._pkt_send_period = 1_000_000.0 / self._bandwidth

        self._last_ack = ack_seq
        self._loss_in_rtt = False

    def on_loss(self, loss_list: Sequence[Tuple[int, int]]) -> None:
        if not self._loss_in_rtt:
            self._loss_in_rtt = True
            self._cwnd = max(self._cwnd / 2.0, 2.0)
            self._ss_thresh = self._cwnd
            self._slow_start = False

    def on_timer(self) -> None:
        """No timer action in file mode."""

    def pkt_send_period_us(self) -> float:
        return self._pkt_send_period

    def congestion_window(self) -> float:
        return self._cwnd

    def max_congestion_window(self) -> float:
        return self._max_cwnd

    def set_bandwidth(self, bandwidth_pkts_per_sec: int) -> None:
        self._bandwidth = bandwidth_pkts_per_sec

    def set_max_bandwidth(self, max_bw_bytes_per_sec: int) -> None:
        self._max_bw = max_bw_bytes_per_sec

    def bandwidth(self) -> int:
        return self._bandwidth

    def rexmit_method(self) -> RexmitMethod:
        return RexmitMethod.FAST_REXMIT