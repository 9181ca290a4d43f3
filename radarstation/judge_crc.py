"""CRC-8 and CRC-16 checksums used by the referee-system serial protocol."""

from __future__ import annotations

from collections.abc import Iterable

CRC8_INIT = 0xFF
CRC16_INIT = 0xFFFF


def _reflected_table(poly: int) -> tuple[int, ...]:
    """Build a byte-wise lookup table for a reflected CRC polynomial."""
    table = []
    for value in range(256):
        for _ in range(8):
            value = (value >> 1) ^ poly if value & 1 else value >> 1
        table.append(value)
    return tuple(table)


_CRC8_TABLE = _reflected_table(0x8C)
_CRC16_TABLE = _reflected_table(0x8408)


def crc8(data: Iterable[int], init: int = CRC8_INIT) -> int:
    """Return the CRC-8 of ``data`` starting from ``init``."""
    crc = init & 0xFF
    for byte in data:
        crc = _CRC8_TABLE[crc ^ (byte & 0xFF)]
    return crc


def verify_crc8(message: bytes) -> bool:
    """Check that the last byte of ``message`` is the CRC-8 of the rest."""
    if len(message) <= 2:
        return False
    return crc8(message[:-1]) == message[-1]


def append_crc8(message: bytes) -> bytes:
    """Return ``message`` with its last byte replaced by the CRC-8 of the rest.

    Messages of two bytes or fewer are returned unchanged.
    """
    message = bytes(message)
    if len(message) <= 2:
        return message
    return message[:-1] + bytes([crc8(message[:-1])])


def crc16(data: Iterable[int], init: int = CRC16_INIT) -> int:
    """Return the CRC-16 of ``data`` starting from ``init``."""
    crc = init & 0xFFFF
    for byte in data:
        crc = (crc >> 8) ^ _CRC16_TABLE[(crc ^ byte) & 0xFF]
    return crc


def verify_crc16(message: bytes) -> bool:
    """Check that the last two bytes of ``message`` hold its CRC-16, low byte first."""
    if len(message) <= 2:
        return False
    expected = crc16(message[:-2])
    return expected == int.from_bytes(bytes(message[-2:]), "little")


def append_crc16(message: bytes) -> bytes:
    """Return ``message`` with its last two bytes replaced by the CRC-16 of the rest.

    Messages of two bytes or fewer are returned unchanged.
    """
    message = bytes(message)
    if len(message) <= 2:
        return message
    return message[:-2] + crc16(message[:-2]).to_bytes(2, "little")