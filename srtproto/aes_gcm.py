"""AES-GCM authenticated encryption of SRT data packet payloads."""

from __future__ import annotations

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from srtproto.config import KeySize

SALT_SIZE = 16
NONCE_SIZE = 12
TAG_SIZE = 16


class AesGcmCipher:
    """AES in Galois/Counter mode with 128 or 256-bit keys.

    The 12-byte nonce is the first 12 bytes of the salt with the packet
    index XORed into bytes 8-11. Ciphertexts carry a 16-byte tag at the end.
    """

    def __init__(self, key: bytes) -> None:
        key_size = KeySize.from_bytes(len(key))
        if key_size is KeySize.AES192:
            raise ValueError("AES-GCM supports only 128 and 256-bit keys")
        self.key_size = key_size
        self._aead = AESGCM(bytes(key))

    @staticmethod
    def _build_nonce(salt: bytes, pkt_index: int) -> bytes:
        if len(salt) != SALT_SIZE:
            raise ValueError(f"salt must be {SALT_SIZE} bytes, got {len(salt)}")
        nonce = bytearray(salt[:NONCE_SIZE])
        for offset, byte in enumerate((pkt_index & 0xFFFFFFFF).to_bytes(4, "big")):
            nonce[8 + offset] ^= byte
        return bytes(nonce)

    def encrypt(self, salt: bytes, pkt_index: int, plaintext: bytes) -> bytes:
        """Encrypt ``plaintext``; the result ends with the authentication tag."""
        nonce = self._build_nonce(salt, pkt_index)
        return self._aead.encrypt(nonce, bytes(plaintext), None)

    def decrypt(self, salt: bytes, pkt_index: int, ciphertext: bytes) -> bytes:
        """Decrypt and authenticate ``ciphertext``; raises ``ValueError`` if it fails."""
        nonce = self._build_nonce(salt, pkt_index)
        try:
            return self._aead.decrypt(nonce, bytes(ciphertext), None)
        except InvalidTag:
            raise ValueError("decryption failed") from None