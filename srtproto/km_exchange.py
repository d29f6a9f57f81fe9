"""Key Material messages exchanged in KMREQ/KMRSP."""

from __future__ import annotations

import enum
import struct
from dataclasses import dataclass

from srtproto.config import KeySize
from srtproto.crypto import KeyIndex

KM_FLAG_EVEN = 0x01
KM_FLAG_ODD = 0x02

KM_VERSION = 1
KM_PT = 2
KM_SIGN = 0x2029

SALT_SIZE = 16
_HEADER = struct.Struct(">IIII")


class CipherType(enum.IntEnum):
    """Cipher type identifier."""

    NONE = 0
    AES_ECB = 1
    AES_CTR = 2
    AES_GCM = 3

    @classmethod
    def from_value(cls, value: int) -> "CipherType":
        """Map a wire value; unknown values mean no cipher."""
        try:
            return cls(value)
        except ValueError:
            return cls.NONE


class AuthType(enum.IntEnum):
    """Authentication type."""

    NONE = 0

    @classmethod
    def from_value(cls, value: int) -> "AuthType":
        """Map a wire value; only ``NONE`` is known."""
        return cls.NONE


class StreamEncap(enum.IntEnum):
    """Stream encapsulation type."""

    SRT = 2

    @classmethod
    def from_value(cls, value: int) -> "StreamEncap":
        """Map a wire value; only ``SRT`` is known."""
        return cls.SRT


@dataclass
class KeyMaterialMessage:
    """Payload of a KMREQ/KMRSP: crypto parameters, salt and wrapped SEK(s)."""

    key_flags: int
    keki: int
    cipher: CipherType
    auth: AuthType
    se: StreamEncap
    salt: bytes
    wrapped_keys: bytes
    key_size: KeySize

    def has_even_key(self) -> bool:
        """Whether the even key is included."""
        return bool(self.key_flags & KM_FLAG_EVEN)

    def has_odd_key(self) -> bool:
        """Whether the odd key is included."""
        return bool(self.key_flags & KM_FLAG_ODD)

    def key_count(self) -> int:
        """Number of keys included."""
        return int(self.has_even_key()) + int(self.has_odd_key())

    @classmethod
    def new_single(
        cls,
        index: KeyIndex,
        key_size: KeySize,
        cipher: CipherType,
        salt: bytes,
        wrapped_key: bytes,
    ) -> "KeyMaterialMessage":
        """A message carrying one wrapped key."""
        flags = KM_FLAG_EVEN if index is KeyIndex.EVEN else KM_FLAG_ODD
        return cls(
            key_flags=flags,
            keki=0,
            cipher=cipher,
            auth=AuthType.NONE,
            se=StreamEncap.SRT,
            salt=bytes(salt),
            wrapped_keys=bytes(wrapped_key),
            key_size=key_size,
        )

    @classmethod
    def new_both(
        cls,
        key_size: KeySize,
        cipher: CipherType,
        salt: bytes,
        wrapped_even: bytes,
        wrapped_odd: bytes,
    ) -> "KeyMaterialMessage":
        """A message carrying both wrapped keys, even first."""
        return cls(
            key_flags=KM_FLAG_EVEN | KM_FLAG_ODD,
            keki=0,
            cipher=cipher,
            auth=AuthType.NONE,
            se=StreamEncap.SRT,
            salt=bytes(salt),
            wrapped_keys=bytes(wrapped_even) + bytes(wrapped_odd),
            key_size=key_size,
        )

    def serialize(self) -> bytes:
        """Encode to the wire format: four header rows, salt, wrapped keys."""
        row0 = (KM_VERSION << 28) | (KM_PT << 24) | (KM_SIGN << 8) | (self.key_flags & 0x03)
        row2 = (int(self.cipher) << 24) | (int(self.auth) << 16) | (int(self.se) << 8)
        row3 = ((len(self.salt) // 4) << 8) | self.key_size.to_km_field()
        header = _HEADER.pack(row0, self.keki & 0xFFFFFFFF, row2, row3)
        return header + bytes(self.salt) + bytes(self.wrapped_keys)

    @classmethod
    def deserialize(cls, data: bytes) -> "KeyMaterialMessage":
        """Decode the wire format; raises ``ValueError`` on malformed input."""
        data = bytes(data)
        if len(data) < _HEADER.size:
            raise ValueError("key material message too short")
        row0, keki, row2, row3 = _HEADER.unpack_from(data)

        if (row0 >> 24) & 0x0F != KM_PT:
            raise ValueError("not a key material message")
        if (row0 >> 8) & 0xFFFF != KM_SIGN:
            raise ValueError("bad key material signature")
        key_flags = row0 & 0x03

        cipher = CipherType.from_value((row2 >> 24) & 0xFF)
        auth = AuthType.from_value((row2 >> 16) & 0xFF)
        se = StreamEncap.from_value((row2 >> 8) & 0xFF)

        slen = ((row3 >> 8) & 0xFF) * 4
        klen = (row3 & 0xFF) * 4
        key_size = KeySize.from_bytes(klen)

        rest = data[_HEADER.size:]
        if slen > SALT_SIZE or len(rest) < slen:
            raise ValueError("bad salt length")
        salt = rest[:slen].ljust(SALT_SIZE, b"\x00")

        wrapped = rest[slen:]
        if not wrapped:
            raise ValueError("no wrapped keys")

        return cls(
            key_flags=key_flags,
            keki=keki,
            cipher=cipher,
            auth=auth,
            se=se,
            salt=salt,
            wrapped_keys=wrapped,
            key_size=key_size,
        )