"""Modbus error codes and the exception that carries them."""

from __future__ import annotations

from enum import IntEnum


class ErrorCode(IntEnum):
    """Error codes: the standard Modbus exceptions plus library-defined ones."""

    SUCCESS = 0x00
    ILLEGAL_FUNCTION = 0x01
    ILLEGAL_DATA_ADDRESS = 0x02
    ILLEGAL_DATA_VALUE = 0x03
    SERVER_DEVICE_FAILURE = 0x04
    ACKNOWLEDGE = 0x05
    SERVER_DEVICE_BUSY = 0x06
    NEGATIVE_ACKNOWLEDGE = 0x07
    MEMORY_PARITY_ERROR = 0x08
    GATEWAY_PATH_UNAVAIL = 0x0A
    GATEWAY_TARGET_NO_RESP = 0x0B
    TIMEOUT = 0xE0
    INVALID_SERVER = 0xE1
    CRC_ERROR = 0xE2
    FC_MISMATCH = 0xE3
    SERVER_ID_MISMATCH = 0xE4
    PACKET_LENGTH_ERROR = 0xE5
    PARAMETER_COUNT_ERROR = 0xE6
    PARAMETER_LIMIT_ERROR = 0xE7
    REQUEST_QUEUE_FULL = 0xE8
    ILLEGAL_IP_OR_PORT = 0xE9
    IP_CONNECTION_FAILED = 0xEA
    TCP_HEAD_MISMATCH = 0xEB
    EMPTY_MESSAGE = 0xEC
    ASCII_FRAME_ERR = 0xED
    ASCII_CRC_ERR = 0xEE
    ASCII_INVALID_CHAR = 0xEF
    UNDEFINED_ERROR = 0xFF


_MESSAGES = {
    ErrorCode.SUCCESS: "Success",
    ErrorCode.ILLEGAL_FUNCTION: "Illegal function code",
    ErrorCode.ILLEGAL_DATA_ADDRESS: "Illegal data address",
    ErrorCode.ILLEGAL_DATA_VALUE: "Illegal data value",
    ErrorCode.SERVER_DEVICE_FAILURE: "Server device failure",
    ErrorCode.ACKNOWLEDGE: "Acknowledge",
    ErrorCode.SERVER_DEVICE_BUSY: "Server device busy",
    ErrorCode.NEGATIVE_ACKNOWLEDGE: "Negative acknowledge",
    ErrorCode.MEMORY_PARITY_ERROR: "Memory parity error",
    ErrorCode.GATEWAY_PATH_UNAVAIL: "Gateway path unavailable",
    ErrorCode.GATEWAY_TARGET_NO_RESP: "Gateway target did not respond",
    ErrorCode.TIMEOUT: "Timeout",
    ErrorCode.INVALID_SERVER: "Invalid server",
    ErrorCode.CRC_ERROR: "CRC check error",
    ErrorCode.FC_MISMATCH: "Function code mismatch",
    ErrorCode.SERVER_ID_MISMATCH: "Server ID mismatch",
    ErrorCode.PACKET_LENGTH_ERROR: "Packet length error",
    ErrorCode.PARAMETER_COUNT_ERROR: "Wrong number of parameters",
    ErrorCode.PARAMETER_LIMIT_ERROR: "Parameter out of limits",
    ErrorCode.REQUEST_QUEUE_FULL: "Request queue full",
    ErrorCode.ILLEGAL_IP_OR_PORT: "Illegal IP address or port",
    ErrorCode.IP_CONNECTION_FAILED: "IP connection failed",
    ErrorCode.TCP_HEAD_MISMATCH: "TCP header mismatch",
    ErrorCode.EMPTY_MESSAGE: "Incomplete request",
    ErrorCode.ASCII_FRAME_ERR: "Invalid ASCII frame",
    ErrorCode.ASCII_CRC_ERR: "Invalid ASCII CRC",
    ErrorCode.ASCII_INVALID_CHAR: "Invalid ASCII character",
    ErrorCode.UNDEFINED_ERROR: "Unspecified error",
}


class ModbusError(Exception):
    """An error carrying a one-byte Modbus error code.

    Codes outside the known set are kept as plain integers.
    """

    def __init__(self, code: int) -> None:
        value = int(code)
        if not 0 <= value <= 0xFF:
            raise ValueError(f"error code out of range: {value}")
        self.code = value
        try:
            self.error: ErrorCode | None = ErrorCode(value)
        except ValueError:
            self.error = None
        if self.error is not None:
            text = _MESSAGES[self.error]
        else:
            text = f"Unknown error 0x{value:02X}"
        self.message = text
        super().__init__(text)

    def __int__(self) -> int:
        return self.code

    def __repr__(self) -> str:
        return f"ModbusError(0x{self.code:02X})"