import struct

import pytest

from srtproto.config import KeySize
from srtproto.crypto import KeyIndex
from srtproto.km_exchange import (
    KM_FLAG_EVEN,
    KM_FLAG_ODD,
    AuthType,
    CipherType,
    KeyMaterialMessage,
    StreamEncap,
)


def _single(index=KeyIndex.EVEN, key_size=KeySize.AES128, cipher=CipherType.AES_CTR,
            salt=bytes(16), wrapped=bytes(24)):
    return KeyMaterialMessage.new_single(index, key_size, cipher, salt, wrapped)


def _raw(row0, row2=0x02000200, row3=0x00000404, salt=bytes(16), wrapped=bytes(24)):
    return struct.pack(">IIII", row0, 0, row2, row3) + salt + wrapped


def test_serialize_roundtrip():
    salt = bytes([0x42] * 16)
    wrapped = bytes([0xAA] * 24)
    parsed = KeyMaterialMessage.deserialize(_single(salt=salt, wrapped=wrapped).serialize())
    assert parsed.key_flags == KM_FLAG_EVEN
    assert parsed.keki == 0
    assert parsed.cipher is CipherType.AES_CTR
    assert parsed.auth is AuthType.NONE
    assert parsed.se is StreamEncap.SRT
    assert parsed.salt == salt
    assert parsed.wrapped_keys == wrapped
    assert parsed.key_size is KeySize.AES128


def test_serialize_roundtrip_aes256():
    wrapped = bytes([0xBB] * 40)
    msg = _single(KeyIndex.ODD, KeySize.AES256, CipherType.AES_GCM, bytes([0x13] * 16), wrapped)
    parsed = KeyMaterialMessage.deserialize(msg.serialize())
    assert parsed.key_flags == KM_FLAG_ODD
    assert parsed.key_size is KeySize.AES256
    assert parsed.cipher is CipherType.AES_GCM
    assert parsed.wrapped_keys == wrapped


def test_wire_format_row0():
    buf = _single().serialize()
    assert list(buf[:4]) == [0x12, 0x20, 0x29, 0x01]


def test_wire_format_row0_both_keys():
    msg = KeyMaterialMessage.new_both(KeySize.AES128, CipherType.AES_CTR, bytes(16), bytes(24), bytes(24))
    buf = msg.serialize()
    assert buf[3] == 0x03
    assert msg.key_count() == 2
    assert msg.has_even_key() and msg.has_odd_key()


def test_wire_format_row2_cipher():
    buf = _single().serialize()
    assert list(buf[8:12]) == [2, 0, 2, 0]


def test_wire_format_row3_key_size_aes128():
    buf = _single().serialize()
    assert list(buf[12:16]) == [0, 0, 4, 4]


def test_wire_format_row3_key_size_aes256():
    buf = _single(key_size=KeySize.AES256, wrapped=bytes(40)).serialize()
    assert buf[15] == 8


def test_wire_format_salt_position():
    salt = bytes([0x42] * 16)
    buf = _single(salt=salt, wrapped=bytes([0xAA] * 24)).serialize()
    assert buf[16:32] == salt
    assert buf[32:56] == bytes([0xAA] * 24)


def test_deserialize_rejects_wrong_pt():
    row0 = (1 << 28) | (3 << 24) | (0x2029 << 8) | 0x01
    with pytest.raises(ValueError):
        KeyMaterialMessage.deserialize(_raw(row0))


def test_deserialize_rejects_wrong_sign():
    row0 = (1 << 28) | (2 << 24) | (0x1234 << 8) | 0x01
    with pytest.raises(ValueError):
        KeyMaterialMessage.deserialize(_raw(row0))


def test_deserialize_rejects_short_input():
    with pytest.raises(ValueError):
        KeyMaterialMessage.deserialize(bytes(10))


def test_deserialize_rejects_missing_wrapped_keys():
    with pytest.raises(ValueError):
        KeyMaterialMessage.deserialize(_raw(0x12202901, wrapped=b""))


def test_deserialize_rejects_bad_key_length():
    with pytest.raises(ValueError):
        KeyMaterialMessage.deserialize(_raw(0x12202901, row3=0x00000405))


def test_interop_libsrt_format():
    salt = bytes([0x55] * 16)
    wrapped = bytes([0xDD] * 24)
    msg = KeyMaterialMessage.deserialize(_raw(0x12202901, salt=salt, wrapped=wrapped))
    assert msg.key_flags == KM_FLAG_EVEN
    assert msg.keki == 0
    assert msg.cipher is CipherType.AES_CTR
    assert msg.auth is AuthType.NONE
    assert msg.se is StreamEncap.SRT
    assert msg.salt == salt
    assert msg.wrapped_keys == wrapped
    assert msg.key_size is KeySize.AES128
    assert msg.key_count() == 1


def test_total_message_size():
    assert len(_single().serialize()) == 56
    assert len(_single(key_size=KeySize.AES256, wrapped=bytes(40)).serialize()) == 72


def test_from_value_defaults():
    assert CipherType.from_value(3) is CipherType.AES_GCM
    assert CipherType.from_value(99) is CipherType.NONE
    assert AuthType.from_value(7) is AuthType.NONE
    assert StreamEncap.from_value(0) is StreamEncap.SRT