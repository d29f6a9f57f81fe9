"""Stream encrypting key pairs and key rotation control."""

from __future__ import annotations

import enum
from typing import Optional

from srtproto.config import CryptoModeConfig, KeySize


class KeyIndex(enum.IntEnum):
    """Crypto key index (even or odd)."""

    EVEN = 0
    ODD = 1

    def toggle(self) -> "KeyIndex":
        """Return the other index."""
        return KeyIndex.ODD if self is KeyIndex.EVEN else KeyIndex.EVEN


class CryptoMode(enum.Enum):
    """Cipher algorithm."""

    AES_CTR = "aes-ctr"
    AES_GCM = "aes-gcm"

    @classmethod
    def from_config(cls, config: CryptoModeConfig) -> "CryptoMode":
        """Map the configured cipher mode to a crypto mode."""
        if config is CryptoModeConfig.AES_GCM:
            return cls.AES_GCM
        return cls.AES_CTR


class KeyPair:
    """Even/odd stream encrypting keys used for seamless rotation."""

    def __init__(self, key_size: KeySize) -> None:
        self.even: Optional[bytes] = None
        self.odd: Optional[bytes] = None
        self.key_size = key_size
        self.active = KeyIndex.EVEN

    def active_key(self) -> Optional[bytes]:
        """The key currently in use, if set."""
        return self.key(self.active)

    def key(self, index: KeyIndex) -> Optional[bytes]:
        """The key stored under ``index``, if set."""
        return self.even if index is KeyIndex.EVEN else self.odd

    def set_key(self, index: KeyIndex, key: bytes) -> None:
        """Store ``key`` under ``index``."""
        if index is KeyIndex.EVEN:
            self.even = bytes(key)
        else:
            self.odd = bytes(key)

    def toggle_active(self) -> None:
        """Switch to the other key."""
        self.active = self.active.toggle()


class CryptoControl:
    """Key material state for one connection: keys, KEK and rotation schedule."""

    def __init__(self, key_size: KeySize, mode: CryptoMode) -> None:
        self.keys = KeyPair(key_size)
        self.mode = mode
        self.kek: Optional[bytes] = None
        self.salt = bytes(16)
        self.pkt_count = 0
        self.km_refresh_rate = 0x0100_0000
        self.km_pre_announce = 0x1000
        self.is_initiator = False
        self.km_exchanged = False

    def should_pre_announce(self) -> bool:
        """Whether the next key should be announced now."""
        if self.km_refresh_rate == 0:
            return False
        refresh = self.km_refresh_rate
        return self.pkt_count > 0 and self.pkt_count % refresh == refresh - self.km_pre_announce

    def should_switch_key(self) -> bool:
        """Whether the active key should be switched now."""
        if self.km_refresh_rate == 0:
            return False
        return self.pkt_count > 0 and self.pkt_count % self.km_refresh_rate == 0

    def on_packet_sent(self) -> None:
        """Count one more sent packet."""
        self.pkt_count += 1