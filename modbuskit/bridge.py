"""A Modbus bridge routing requests for alias server IDs to external servers."""

from __future__ import annotations

import ipaddress
import logging
import time
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum, auto
from typing import Any

from .errors import ErrorCode, ModbusError

ANY_FUNCTION_CODE = 0x00
"""Function code under which a worker catches every otherwise unhandled code."""

_log = logging.getLogger(__name__)

Worker = Callable[[bytes], bytes]
IPAddress = ipaddress.IPv4Address | ipaddress.IPv6Address


class ServerType(Enum):
    """How an external server is reached."""

    TCP_SERVER = auto()
    RTU_SERVER = auto()


@dataclass(frozen=True)
class ServerData:
    """Everything needed to address one external server."""

    server_id: int
    client: Any
    server_type: ServerType = ServerType.RTU_SERVER
    host: IPAddress = ipaddress.IPv4Address("0.0.0.0")
    port: int = 0


def _check_byte(name: str, value: int) -> int:
    value = int(value)
    if not 0 <= value <= 0xFF:
        raise ValueError(f"{name} out of range: {value}")
    return value


def error_response(server_id: int, function_code: int, error: int) -> bytes:
    """Return a Modbus error response: server ID, FC with bit 7 set, code."""
    return bytes(
        (
            _check_byte("server_id", server_id),
            _check_byte("function_code", function_code) | 0x80,
            _check_byte("error", error),
        )
    )


def _millis() -> int:
    return int(time.monotonic() * 1000) & 0xFFFFFFFF


class ModbusBridge:
    """Answers requests for alias server IDs by forwarding them to real servers.

    RTU clients are called as ``client.sync_request(message, token)``; TCP
    clients as ``client.sync_request(message, token, host, port)``. Both
    return the response message as bytes.
    """

    def __init__(self) -> None:
        self.servers: dict[int, ServerData] = {}
        self._workers: dict[tuple[int, int], Worker] = {}

    def attach_server(
        self,
        alias_id: int,
        server_id: int,
        function_code: int,
        client: Any,
        host: str | IPAddress | None = None,
        port: int = 0,
    ) -> None:
        """Make ``server_id`` behind ``client`` reachable as ``alias_id``.

        A non-zero ``port`` marks a TCP server at ``host``. An alias already
        attached keeps its server; only ``function_code`` is added.
        """
        alias_id = _check_byte("alias_id", alias_id)
        server_id = _check_byte("server_id", server_id)
        if alias_id not in self.servers:
            if port:
                address = ipaddress.ip_address(host if host is not None else "0.0.0.0")
                self.servers[alias_id] = ServerData(
                    server_id, client, ServerType.TCP_SERVER, address, int(port)
                )
                _log.debug("(TCP): %02X->%02X %s:%d", alias_id, server_id, address, port)
            else:
                self.servers[alias_id] = ServerData(server_id, client)
                _log.debug("(RTU): %02X->%02X", alias_id, server_id)
        self.add_function_code(alias_id, function_code)

    def _require(self, alias_id: int) -> int:
        alias_id = _check_byte("alias_id", alias_id)
        if alias_id not in self.servers:
            _log.error("Server %d not attached to bridge!", alias_id)
            raise ModbusError(ErrorCode.INVALID_SERVER)
        return alias_id

    def add_function_code(self, alias_id: int, function_code: int) -> None:
        """Forward ``function_code`` for an attached alias."""
        alias_id = self._require(alias_id)
        function_code = _check_byte("function_code", function_code)
        self._workers[(alias_id, function_code)] = self._bridge_worker
        _log.debug("FC %02X added for server %02X", function_code, alias_id)

    def deny_function_code(self, alias_id: int, function_code: int) -> None:
        """Answer ``function_code`` for an attached alias with ILLEGAL_FUNCTION."""
        alias_id = self._require(alias_id)
        function_code = _check_byte("function_code", function_code)
        self._workers[(alias_id, function_code)] = self._deny_worker
        _log.debug("FC %02X blocked for server %02X", function_code, alias_id)

    def local_request(self, request: bytes) -> bytes:
        """Process a request as if it had arrived at the bridge."""
        raw = bytes(request)
        if len(raw) < 2:
            raise ModbusError(ErrorCode.EMPTY_MESSAGE)
        server_id, function_code = raw[0], raw[1]
        worker = self._workers.get((server_id, function_code)) or self._workers.get(
            (server_id, ANY_FUNCTION_CODE)
        )
        if worker is None:
            known = any(key[0] == server_id for key in self._workers)
            error = ErrorCode.ILLEGAL_FUNCTION if known else ErrorCode.INVALID_SERVER
            return error_response(server_id, function_code, error)
        return worker(raw)

    def _bridge_worker(self, request: bytes) -> bytes:
        alias_id, function_code = request[0], request[1]
        target = self.servers.get(alias_id)
        if target is None:
            return error_response(alias_id, function_code, ErrorCode.INVALID_SERVER)

        forwarded = bytes((target.server_id,)) + request[1:]
        _log.debug("Request (%02X/%02X) sent", target.server_id, function_code)
        if target.server_type is ServerType.TCP_SERVER:
            response = target.client.sync_request(
                forwarded, _millis(), target.host, target.port
            )
        else:
            response = target.client.sync_request(forwarded, _millis())

        response = bytes(response)
        if response:
            response = bytes((alias_id,)) + response[1:]
        return response

    def _deny_worker(self, request: bytes) -> bytes:
        return error_response(request[0], request[1], ErrorCode.ILLEGAL_FUNCTION)