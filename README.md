# modbuskit

Building blocks for Modbus serial communication and request bridging:

- **CRC and timing** (`modbuskit.crc`): Modbus CRC16 calculation and checking,
  appending a CRC to a frame, and working out the silent interval between RTU
  frames from the baud rate.
- **Framing** (`modbuskit.framing`): `RTUChannel` sends and receives frames over
  a serial-port-like object in RTU or ASCII mode. `encode_ascii_frame` and
  `ascii_lrc` build Modbus ASCII frames.
- **Bridge** (`modbuskit.bridge`): `ModbusBridge` maps local alias server IDs to
  real servers behind Modbus clients, reached over TCP or RTU. It forwards
  requests, rewrites the server ID in both directions, and can block chosen
  function codes.
- **Errors** (`modbuskit.errors`): the `ErrorCode` enumeration and the
  `ModbusError` exception.

## Installation

```
pip install .
```

The package needs only the Python standard library. It runs on Python 3.10 and later.

## Examples

### CRC

```python
from modbuskit.crc import add_crc, calc_crc, calculate_interval, valid_crc

frame = add_crc(bytes([0x01, 0x03, 0x00, 0x00, 0x00, 0x01]))

# With one argument the last two bytes are taken as the CRC, low byte first
assert valid_crc(frame)
# With two, the CRC of all the data is compared with the one given
assert valid_crc(frame[:-2], calc_crc(frame[:-2]))

# Silent interval in microseconds: 3.5 character times, at least 1750 µs;
# a larger second argument replaces the computed value
print(calculate_interval(9600))
```

`rts_auto` is a ready-made RTS callback for RS485 boards that switch direction
by themselves; it drives nothing.

### Sending and receiving frames

`RTUChannel` works with any object that has an `in_waiting` count of bytes
waiting, a `read(size)` that returns `b""` instead of blocking when nothing is
there, `write(data)` and `flush()`.

```python
from modbuskit.crc import calculate_interval, rts_auto
from modbuskit.framing import RTUChannel

channel = RTUChannel(serial, calculate_interval(19200), rts_auto, False)
channel.send(bytes([0x01, 0x03, 0x00, 0x10, 0x00, 0x01]))
reply = channel.receive(2000)   # timeout in milliseconds
```

`send` appends the CRC (RTU) or wraps the data in a `:`…`\r\n` frame with its
LRC (ASCII), calling the RTS callback with `True` before and `False` after
writing. In RTU mode it first waits out the silent interval since the last
frame. `receive` returns the payload without CRC or LRC. On a timeout, a bad
CRC or LRC, a frame that is too short or too long (512 bytes), or an invalid
ASCII character it raises `ModbusError`, which carries the matching
`ErrorCode` in its `error` attribute and the raw value in `code`.

### Bridging

```python
from modbuskit.bridge import ANY_FUNCTION_CODE, ModbusBridge

bridge = ModbusBridge()
# Alias 3 on the bridge forwards any function code to server 1 via a TCP client
bridge.attach_server(3, 1, ANY_FUNCTION_CODE, tcp_client, "192.0.2.10", 502)
# Alias 2 forwards function code 0x03 to server 1 via an RTU client
bridge.attach_server(2, 1, 0x03, rtu_client)
bridge.deny_function_code(3, 0x04)

response = bridge.local_request(bytes([3, 0x03, 0x00, 0x03, 0x00, 0x02]))
```

The bridge calls `client.sync_request(message, token, host, port)` for TCP
servers and `client.sync_request(message, token)` for RTU servers, and expects
the response message back as bytes. The server ID is replaced by the real one
on the way out and by the alias on the way back.

`local_request` answers with a Modbus error response (built by
`error_response`) when the alias is not attached (`INVALID_SERVER`), when the
function code is not registered for it (`ILLEGAL_FUNCTION`), or when the code
has been blocked (`ILLEGAL_FUNCTION`). A request shorter than two bytes raises
`ModbusError` with `EMPTY_MESSAGE`. `add_function_code` and
`deny_function_code` raise `ModbusError` with `INVALID_SERVER` for an alias
that has not been attached.

## What the package does not do

It contains no Modbus client and no Modbus server: the bridge relies on client
objects supplied by the caller, and it does not listen on a network or serial
port itself. There is no TCP framing, no serial port driver and no command-line
tool.

## Running the tests

```
pip install .[test]
pytest
```