"""SRT socket configuration, option enums and protocol constants."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Optional

# Default SRT live payload size (MPEG-TS: 188 * 7).
SRT_LIVE_DEF_PLSIZE = 1316

# Maximum payload for live mode.
SRT_LIVE_MAX_PLSIZE = 1456

# Default live latency in milliseconds.
SRT_LIVE_DEF_LATENCY_MS = 120

# SRT protocol version, encoded as 0xMMNNPP (v1.5.5).
SRT_VERSION = 0x01_05_05

# Per-packet overhead subtracted from the MSS: IP + UDP headers, then the SRT header.
UDP_HEADER_SIZE = 28
HEADER_SIZE = 16


class TransType(enum.Enum):
    """SRT transmission mode."""

    LIVE = "live"
    FILE = "file"


class CryptoModeConfig(enum.Enum):
    """Encryption cipher mode selection."""

    AES_CTR = "aes-ctr"
    AES_GCM = "aes-gcm"


class KeySize(enum.IntEnum):
    """Encryption key length in bytes."""

    AES128 = 16
    AES192 = 24
    AES256 = 32

    @classmethod
    def from_bytes(cls, length: int) -> "KeySize":  # type: ignore[override]
        """Return the key size for a key of ``length`` bytes."""
        try:
            return cls(length)
        except ValueError:
            raise ValueError(f"unsupported key length: {length}") from None

    def to_km_field(self) -> int:
        """Encode the key size into the KM Klen/4 field."""
        return int(self) // 4

    @classmethod
    def from_km_field(cls, field: int) -> "KeySize":
        """Decode a KM Klen/4 field into a key size."""
        return cls.from_bytes(field * 4)


class RetransmitAlgo(enum.IntEnum):
    """Retransmission algorithm selection."""

    DEFAULT = 0
    REDUCED = 1


class KmState(enum.IntEnum):
    """Key material state."""

    UNSECURED = 0
    SECURING = 1
    SECURED = 2
    NO_SECRET = 3
    BAD_SECRET = 4
    BAD_CRYPTO_MODE = 5

    @classmethod
    def from_value(cls, value: int) -> "KmState":
        """Map an integer to a state; unknown values mean unsecured."""
        try:
            return cls(value)
        except ValueError:
            return cls.UNSECURED


class SocketStatus(enum.IntEnum):
    """SRT socket status."""

    INIT = 1
    OPENED = 2
    LISTENING = 3
    CONNECTING = 4
    CONNECTED = 5
    BROKEN = 6
    CLOSING = 7
    CLOSED = 8
    NON_EXIST = 9


class SrtFlags(enum.IntFlag):
    """SRT option flags exchanged during the handshake."""

    TSBPD_SND = 1 << 0
    TSBPD_RCV = 1 << 1
    HAICRYPT = 1 << 2
    TLPKT_DROP = 1 << 3
    NAK_REPORT = 1 << 4
    REXMIT_FLG = 1 << 5
    STREAM = 1 << 6
    FILTER_CAP = 1 << 7


def version_capabilities() -> SrtFlags:
    """Capability flags always reported by this implementation."""
    return SrtFlags.HAICRYPT | SrtFlags.FILTER_CAP


@dataclass
class SrtConfig:
    """All configurable parameters of an SRT connection.

    Durations are in seconds; ``None`` means no limit where allowed.
    """

    # Transport
    mss: int = 1500
    flight_flag_size: int = 25600
    send_buffer_size: int = 8192 * SRT_LIVE_DEF_PLSIZE
    recv_buffer_size: int = 8192 * SRT_LIVE_DEF_PLSIZE
    udp_send_buffer_size: int = 65536
    udp_recv_buffer_size: int = 65536
    send_sync: bool = True
    recv_sync: bool = True
    send_timeout: Optional[float] = None
    recv_timeout: Optional[float] = None
    reuse_addr: bool = True
    linger: Optional[float] = 180.0

    # Connection
    connect_timeout: float = 3.0
    rendezvous: bool = False
    ipv6_only: bool = False
    ip_ttl: int = 64
    ip_tos: int = 0
    bind_to_device: Optional[str] = None
    peer_idle_timeout: float = 5.0

    # Transmission
    trans_type: TransType = TransType.LIVE
    message_api: bool = True
    payload_size: int = SRT_LIVE_DEF_PLSIZE
    max_bw: int = 0
    input_bw: int = 0
    min_input_bw: int = 0
    overhead_bw: int = 25
    max_rexmit_bw: int = -1

    # Live mode
    tsbpd_mode: bool = True
    recv_latency: int = SRT_LIVE_DEF_LATENCY_MS
    peer_latency: int = 0
    tlpkt_drop: bool = True
    send_drop_delay: int = -1
    nak_report: bool = True
    drift_tracer: bool = True
    loss_max_ttl: int = 0

    # Encryption
    passphrase: str = ""
    key_size: KeySize = KeySize.AES128
    crypto_mode: CryptoModeConfig = CryptoModeConfig.AES_CTR
    enforced_encryption: bool = True
    km_refresh_rate: int = 0x0100_0000
    km_pre_announce: int = 0x1000

    sender: bool = False
    stream_id: str = ""
    congestion: str = "live"
    packet_filter: str = ""
    retransmit_algo: RetransmitAlgo = RetransmitAlgo.DEFAULT
    min_version: int = 0

    # Bonding
    group_connect: bool = False
    group_min_stable_timeout: float = 0.060

    def live_defaults(self) -> None:
        """Apply live transmission type defaults."""
        self.trans_type = TransType.LIVE
        self.message_api = True
        self.tsbpd_mode = True
        self.tlpkt_drop = True
        self.nak_report = True
        self.payload_size = SRT_LIVE_DEF_PLSIZE
        self.congestion = "live"

    def file_defaults(self) -> None:
        """Apply file transmission type defaults."""
        self.trans_type = TransType.FILE
        self.message_api = True
        self.tsbpd_mode = False
        self.tlpkt_drop = False
        self.nak_report = False
        self.payload_size = 0
        self.congestion = "file"

    def max_payload_size(self) -> int:
        """Largest payload that fits in one SRT packet."""
        mtu_payload = max(0, self.mss - (UDP_HEADER_SIZE + HEADER_SIZE))
        if self.payload_size > 0:
            return min(self.payload_size, mtu_payload)
        return mtu_payload

    def encryption_enabled(self) -> bool:
        """Whether a passphrase is set."""
        return bool(self.passphrase)