"""AES-CTR encryption of SRT data packet payloads."""

from __future__ import annotations

from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

from srtproto.config import KeySize

SALT_SIZE = 16


class AesCtrCipher:
    """AES in counter mode with 128, 192 or 256-bit keys.

    The IV is the first 14 bytes of the salt with the packet index XORed
    into bytes 10-13, followed by a 16-bit block counter starting at zero.
    """

    def __init__(self, key: bytes) -> None:
        self.key_size = KeySize.from_bytes(len(key))
        self._key = bytes(key)

    @staticmethod
    def _build_iv(salt: bytes, pkt_index: int) -> bytes:
        if len(salt) != SALT_SIZE:
            raise ValueError(f"salt must be {SALT_SIZE} bytes, got {len(salt)}")
        iv = bytearray(salt[:14])
        for offset, byte in enumerate((pkt_index & 0xFFFFFFFF).to_bytes(4, "big")):
            iv[10 + offset] ^= byte
        iv += b"\x00\x00"
        return bytes(iv)

    def encrypt(self, salt: bytes, pkt_index: int, data: bytes) -> bytes:
        """Encrypt ``data`` for the packet with index ``pkt_index``."""
        iv = self._build_iv(salt, pkt_index)
        encryptor = Cipher(algorithms.AES(self._key), modes.CTR(iv)).encryptor()
        return encryptor.update(bytes(data)) + encryptor.finalize()

    def decrypt(self, salt: bytes, pkt_index: int, data: bytes) -> bytes:
        """Decrypt ``data``; in counter mode this is the same as encrypting."""
        return self.encrypt(salt, pkt_index, data)