import pytest

from srtproto.aes_ctr import AesCtrCipher
from srtproto.config import KeySize


def test_encrypt_decrypt_roundtrip():
    key = bytes([0x42] * 16)
    salt = bytes([0x01] * 16)
    pkt_index = 1234
    cipher = AesCtrCipher(key)

    original = b"Hello, SRT world! This is a test payload."
    data = cipher.encrypt(salt, pkt_index, original)
    assert data != original
    assert len(data) == len(original)

    assert cipher.decrypt(salt, pkt_index, data) == original


@pytest.mark.parametrize("size", [16, 24, 32])
def test_all_key_sizes_roundtrip(size):
    cipher = AesCtrCipher(bytes([0x42] * size))
    assert cipher.key_size == KeySize.from_bytes(size)
    salt = bytes(range(16))
    payload = bytes(range(200))
    encrypted = cipher.encrypt(salt, 7, payload)
    assert encrypted != payload
    assert cipher.decrypt(salt, 7, encrypted) == payload


def test_invalid_key_length_rejected():
    with pytest.raises(ValueError):
        AesCtrCipher(bytes(15))


def test_invalid_salt_length_rejected():
    cipher = AesCtrCipher(bytes(16))
    with pytest.raises(ValueError):
        cipher.encrypt(bytes(8), 0, b"data")


def test_packet_index_changes_keystream():
    cipher = AesCtrCipher(bytes([0x42] * 16))
    salt = bytes([0x01] * 16)
    payload = b"\x00" * 32
    assert cipher.encrypt(salt, 1, payload) != cipher.encrypt(salt, 2, payload)


def test_salt_bytes_past_fourteen_are_ignored():
    cipher = AesCtrCipher(bytes([0x42] * 16))
    payload = b"same payload bytes"
    salt_a = bytes([0x05] * 14) + b"\x00\x00"
    salt_b = bytes([0x05] * 14) + b"\xff\xff"
    assert cipher.encrypt(salt_a, 9, payload) == cipher.encrypt(salt_b, 9, payload)


def test_keystream_is_xor():
    cipher = AesCtrCipher(bytes([0x11] * 32))
    salt = bytes([0x22] * 16)
    a = b"first message of sixteen+ bytes"
    b = b"other message, same length here!"[: len(a)]
    ea = cipher.encrypt(salt, 3, a)
    eb = cipher.encrypt(salt, 3, b)
    assert bytes(x ^ y for x, y in zip(ea, eb)) == bytes(x ^ y for x, y in zip(a, b))


def test_empty_payload():
    cipher = AesCtrCipher(bytes(16))
    assert cipher.encrypt(bytes(16), 0, b"") == b""