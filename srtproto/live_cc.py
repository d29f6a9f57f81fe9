"""Live mode congestion control: constant-rate sending for real-time streams."""

from __future__ import annotations

from typing import Sequence, Tuple

from srtproto.congestion import CongestionControl, RexmitMethod


class LiveCC(CongestionControl):
    """Congestion control for live streaming.

    The rate is limited only when a maximum bandwidth or an input
    bandwidth is configured; otherwise packets are sent at an unlimited
    rate and late packets are left to TSBPD dropping.
    """

    def __init__(self) -> None:
        self._pkt_send_period = 1.0
        self._cwnd = 1000.0
        self._max_cwnd = 1000.0
        self._max_bw = 0
        self._input_bw = 0
        self._overhead_pct = 25
        self._avg_payload_size = 1316.0
        self._bandwidth = 0

    def set_input_bw(self, input_bw: int) -> None:
        """Set the estimated input bandwidth in bytes per second."""
        self._input_bw = input_bw
        self._update_send_period()

    def set_overhead_pct(self, pct: int) -> None:
        """Set the overhead added on top of the input bandwidth, in percent."""
        self._overhead_pct = pct
        self._update_send_period()

    def _update_send_period(self) -> None:
        if self._max_bw > 0:
            max_bw = self._max_bw
        elif self._input_bw > 0:
            max_bw = self._input_bw * (100 + self._overhead_pct) // 100
        else:
            # No explicit limit: the peer's bandwidth estimate is not used as one.
            self._pkt_send_period = 1.0
            return

        if max_bw > 0 and self._avg_payload_size > 0.0:
            self._pkt_send_period = self._avg_payload_size / max_bw * 1_000_000.0

    def on_ack(self, ack_seq: int, rtt_us: int) -> None:
        """Live mode does not adjust the rate on ACK."""

    def on_loss(self, loss_list: Sequence[Tuple[int, int]]) -> None:
        """Live mode does not reduce the rate on loss."""

    def on_timer(self) -> None:
        """No periodic adjustment in live mode."""

    def pkt_send_period_us(self) -> float:
        return self._pkt_send_period

    def congestion_window(self) -> float:
        return self._cwnd

    def max_congestion_window(self) -> float:
        return self._max_cwnd

    def set_bandwidth(self, bandwidth_pkts_per_sec: int) -> None:
        self._bandwidth = bandwidth_pkts_per_sec
        self._update_send_period()

    def set_max_bandwidth(self, max_bw_bytes_per_sec: int) -> None:
        self._max_bw = max_bw_bytes_per_sec
        self._update_send_period()

    def bandwidth(self) -> int:
        return self._bandwidth

    def rexmit_method(self) -> RexmitMethod:
        return RexmitMethod.LATE_REXMIT