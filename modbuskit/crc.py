"""Modbus RTU CRC16 helpers and inter-frame timing."""

from __future__ import annotations

from collections.abc import Iterable

_MIN_INTERVAL_US = 1750


def _make_table() -> tuple[int, ...]:
    table = []
    for value in range(256):
        crc = value
        for _ in range(8):
            crc = (crc >> 1) ^ 0xA001 if crc & 1 else crc >> 1
        table.append(crc)
    return tuple(table)


_TABLE = _make_table()


def calc_crc(data: Iterable[int]) -> int:
    """Return the Modbus CRC16 of ``data``."""
    crc = 0xFFFF
    for byte in bytes(data):
        crc = (crc >> 8) ^ _TABLE[(crc ^ byte) & 0xFF]
    return crc


def valid_crc(data: Iterable[int], crc: int | None = None) -> bool:
    """Check a CRC.

    With ``crc`` given, compare it with the CRC of all of ``data``. Without,
    treat the last two bytes of ``data`` as the CRC, low byte first.
    """
    raw = bytes(data)
    if crc is None:
        if len(raw) < 2:
            raise ValueError("data too short to hold a CRC")
        crc = raw[-2] | (raw[-1] << 8)
        raw = raw[:-2]
    return calc_crc(raw) == crc


def add_crc(data: Iterable[int]) -> bytes:
    """Return ``data`` with its CRC appended, low byte first."""
    raw = bytes(data)
    crc = calc_crc(raw)
    return raw + bytes((crc & 0xFF, (crc >> 8) & 0xFF))


def calculate_interval(baud_rate: int, overwrite: int = 0) -> int:
    """Return the minimal silent gap between frames in microseconds.

    At least 3.5 character times, never below 1750 µs; a larger
    ``overwrite`` replaces the computed value.
    """
    if baud_rate <= 0:
        raise ValueError("baud rate must be positive")
    interval = max(35_000_000 // baud_rate, _MIN_INTERVAL_US)
    return max(interval, overwrite)


def rts_auto(level: bool) -> bool:
    """RTS callback for boards that switch RS485 direction by themselves.

    No line is driven; the requested level is returned as a plain bool.
    """
    return bool(level)