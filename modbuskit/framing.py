"""Serial framing for Modbus RTU and Modbus ASCII."""

from __future__ import annotations

import time
from collections.abc import Callable, Iterable
from enum import Enum, auto
from typing import Protocol

from .crc import add_crc, rts_auto, valid_crc
from .errors import ErrorCode, ModbusError

BUFFER_SIZE = 512
"""Largest frame, in bytes, that a receive will collect before giving up."""

_LEAD_IN = 0xF0
_CARRIAGE_RETURN = 0xF1
_LINE_FEED = 0xF2


def _build_ascii_table() -> dict[int, int]:
    table = {ord(ch): value for value, ch in enumerate("0123456789ABCDEF")}
    table.update({ord(ch): value for value, ch in enumerate("abcdef", start=10)})
    table[ord(":")] = _LEAD_IN
    table[0x0D] = _CARRIAGE_RETURN
    table[0x0A] = _LINE_FEED
    return table


_ASCII_READ = _build_ascii_table()


class SerialPort(Protocol):
    """The part of a serial port interface the channel relies on.

    ``read`` must not block when no data is waiting; it returns ``b""`` then.
    """

    @property
    def in_waiting(self) -> int: ...

    def read(self, size: int = 1) -> bytes: ...

    def write(self, data: bytes) -> int | None: ...

    def flush(self) -> None: ...


class _AsciiState(Enum):
    WAIT_DATA = auto()
    DATA = auto()
    WAIT_LEAD_OUT = auto()


def _now_us() -> int:
    return time.monotonic_ns() // 1000


def ascii_lrc(data: Iterable[int]) -> int:
    """Return the Modbus ASCII LRC: the two's complement of the byte sum."""
    return -sum(bytes(data)) & 0xFF


def encode_ascii_frame(data: Iterable[int]) -> bytes:
    """Return ``data`` as a complete Modbus ASCII frame, LRC included."""
    raw = bytes(data)
    body = raw.hex().upper() + f"{ascii_lrc(raw):02X}"
    return b":" + body.encode("ascii") + b"\r\n"


class RTUChannel:
    """Sends and receives Modbus frames over a serial port.

    ``interval`` is the silent gap between RTU frames in microseconds;
    ``rts`` is called with ``True`` before and ``False`` after each send.
    """

    def __init__(
        self,
        serial: SerialPort,
        interval: int,
        rts: Callable[[bool], None] = rts_auto,
        ascii_mode: bool = False,
    ) -> None:
        if interval < 0:
            raise ValueError("interval must not be negative")
        self.serial = serial
        self.interval = interval
        self.rts = rts
        self.ascii_mode = ascii_mode
        self.last_micros = 0

    def _drain(self) -> None:
        while self.serial.in_waiting:
            self.serial.read(self.serial.in_waiting)

    def _read_byte(self) -> int | None:
        chunk = self.serial.read(1)
        return chunk[0] if chunk else None

    def send(self, data: Iterable[int]) -> None:
        """Send ``data`` as one frame, adding the CRC or LRC."""
        raw = bytes(data)
        self._drain()
        if self.ascii_mode:
            frame = encode_ascii_frame(raw)
        else:
            frame = add_crc(raw)
            elapsed = _now_us() - self.last_micros
            if elapsed < self.interval:
                time.sleep((self.interval - elapsed) / 1_000_000)
        self.rts(True)
        self.serial.write(frame)
        self.serial.flush()
        self.rts(False)
        self.last_micros = _now_us()

    def receive(self, timeout: int, skip_leading_zero_bytes: bool = False) -> bytes:
        """Receive one frame and return its payload without CRC or LRC.

        ``timeout`` is in milliseconds. Raises :class:`ModbusError` on
        timeout or on a malformed frame.
        """
        if self.ascii_mode:
            return self._receive_ascii(timeout)
        return self._receive_rtu(timeout, skip_leading_zero_bytes)

    def _receive_rtu(self, timeout: int, skip_leading_zero_bytes: bool) -> bytes:
        limit = timeout / 1000
        started = time.monotonic()
        self.last_micros = _now_us()

        while True:
            byte = self._read_byte()
            if byte is not None:
                self.last_micros = _now_us()
                if byte or not skip_leading_zero_bytes:
                    break
            else:
                if time.monotonic() - started >= limit:
                    raise ModbusError(ErrorCode.TIMEOUT)
                time.sleep(0.001)

        buffer = bytearray()
        while _now_us() - self.last_micros < self.interval:
            if byte is not None:
                buffer.append(byte)
                self.last_micros = _now_us()
                if len(buffer) >= BUFFER_SIZE:
                    raise ModbusError(ErrorCode.PACKET_LENGTH_ERROR)
            byte = self._read_byte()

        if len(buffer) < 4:
            raise ModbusError(ErrorCode.PACKET_LENGTH_ERROR)
        if not valid_crc(buffer):
            raise ModbusError(ErrorCode.CRC_ERROR)
        return bytes(buffer[:-2])

    def _receive_ascii(self, timeout: int) -> bytes:
        limit = timeout / 1000
        last_seen = time.monotonic()
        state = _AsciiState.WAIT_DATA
        buffer = bytearray()
        high_nibble: int | None = None

        while True:
            if time.monotonic() - last_seen >= limit:
                raise ModbusError(ErrorCode.TIMEOUT)
            byte = self._read_byte() if self.serial.in_waiting else None
            if byte is None:
                time.sleep(0.001)
                continue
            last_seen = time.monotonic()

            value = _ASCII_READ.get(byte)
            if value is None:
                raise ModbusError(ErrorCode.ASCII_INVALID_CHAR)

            if state is _AsciiState.WAIT_DATA:
                if value == _LEAD_IN:
                    state = _AsciiState.DATA
            elif state is _AsciiState.DATA:
                if value == _CARRIAGE_RETURN:
                    if high_nibble is not None:
                        raise ModbusError(ErrorCode.PACKET_LENGTH_ERROR)
                    state = _AsciiState.WAIT_LEAD_OUT
                elif value < _LEAD_IN:
                    if high_nibble is None:
                        high_nibble = value
                    else:
                        buffer.append((high_nibble << 4) | value)
                        high_nibble = None
                        if len(buffer) >= BUFFER_SIZE:
                            raise ModbusError(ErrorCode.PACKET_LENGTH_ERROR)
                else:
                    raise ModbusError(ErrorCode.ASCII_INVALID_CHAR)
            else:
                if value != _LINE_FEED:
                    raise ModbusError(ErrorCode.ASCII_FRAME_ERR)
                if len(buffer) < 3:
                    raise ModbusError(ErrorCode.PACKET_LENGTH_ERROR)
                if sum(buffer) & 0xFF:
                    raise ModbusError(ErrorCode.ASCII_CRC_ERR)
                return bytes(buffer[:-1])