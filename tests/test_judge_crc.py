import pytest

from radarstation.judge_crc import (
    CRC8_INIT,
    CRC16_INIT,
    append_crc8,
    append_crc16,
    crc8,
    crc16,
    verify_crc8,
    verify_crc16,
)

MESSAGES = [
    bytes([0xA5, 14, 0, 0, 0]),
    bytes([0xA5, 54, 0, 0, 0, 1, 3, 0, 0]),
    bytes(range(40)),
    b"radar frame payload\x00\x00",
]


def test_crc8_matches_table_entries():
    assert crc8(b"\x01", 0) == 0x5E
    assert crc8(b"\x80", 0) == 0x8C
    assert crc8(b"\xff", 0) == 0x35


def test_crc16_matches_table_entries():
    assert crc16(b"\x01", 0) == 0x1189
    assert crc16(b"\xff", 0) == 0x0F78


def test_standard_check_values():
    assert crc8(b"123456789", 0) == 0xA1
    assert crc16(b"123456789", 0xFFFF) == 0x6F91


def test_empty_data_returns_init():
    assert crc8(b"") == CRC8_INIT
    assert crc16(b"") == CRC16_INIT
    assert crc8(b"", 0x12) == 0x12


@pytest.mark.parametrize("message", MESSAGES)
def test_crc8_round_trip(message):
    framed = append_crc8(message)
    assert len(framed) == len(message)
    assert framed[:-1] == message[:-1]
    assert verify_crc8(framed)


@pytest.mark.parametrize("message", MESSAGES)
def test_crc16_round_trip(message):
    framed = append_crc16(message)
    assert len(framed) == len(message)
    assert framed[:-2] == message[:-2]
    assert verify_crc16(framed)


@pytest.mark.parametrize("message", MESSAGES)
def test_corruption_is_detected(message):
    framed = bytearray(append_crc16(append_crc8(message)))
    framed[0] ^= 0x01
    assert not verify_crc16(bytes(framed))
    framed8 = bytearray(append_crc8(message))
    framed8[1] ^= 0x40
    assert not verify_crc8(bytes(framed8))


def test_short_messages():
    assert verify_crc8(b"\x00\x00") is False
    assert verify_crc16(b"\x00\x00") is False
    assert append_crc8(b"\x01\x02") == b"\x01\x02"
    assert append_crc16(b"\x01") == b"\x01"


def test_crc16_stored_low_byte_first():
    body = bytes([0xA5, 1, 2, 3])
    framed = append_crc16(body + b"\x00\x00")
    value = crc16(body)
    assert framed[-2] == value & 0xFF
    assert framed[-1] == value >> 8