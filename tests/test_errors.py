import pytest

from modbuskit.errors import ErrorCode, ModbusError


def test_known_code_is_resolved():
    err = ModbusError(ErrorCode.TIMEOUT)
    assert err.code == 0xE0
    assert err.error is ErrorCode.TIMEOUT


def test_int_conversion():
    assert int(ModbusError(ErrorCode.INVALID_SERVER)) == 0xE1


def test_plain_int_code_maps_to_enum():
    err = ModbusError(0x02)
    assert err.error is ErrorCode.ILLEGAL_DATA_ADDRESS


def test_unknown_code_kept():
    err = ModbusError(0x73)
    assert err.code == 0x73
    assert err.error is None
    assert "73" in str(err)


def test_distinct_messages_for_distinct_codes():
    a = ModbusError(ErrorCode.CRC_ERROR)
    b = ModbusError(ErrorCode.TIMEOUT)
    assert str(a) != str(b)
    assert a.message == str(a)


def test_code_survives_raise():
    err = ModbusError(ErrorCode.ASCII_CRC_ERR)
    assert isinstance(err, Exception)
    with pytest.raises(ModbusError) as info:
        raise err
    assert info.value.code == int(ErrorCode.ASCII_CRC_ERR)
    assert info.value.error is ErrorCode.ASCII_CRC_ERR
    assert str(info.value) == ModbusError(ErrorCode.ASCII_CRC_ERR).message


@pytest.mark.parametrize("bad", [-1, 0x100])
def test_out_of_range_code(bad):
    with pytest.raises(ValueError):
        ModbusError(bad)


def test_repr_shows_hex_code():
    assert repr(ModbusError(ErrorCode.PACKET_LENGTH_ERROR)) == "ModbusError(0xE5)"