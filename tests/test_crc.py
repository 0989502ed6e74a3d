import pytest

from modbuskit.crc import add_crc, calc_crc, calculate_interval, valid_crc


def test_check_value():
    assert calc_crc(b"123456789") == 0x4B37


def test_empty_data_is_initial_value():
    assert calc_crc(b"") == 0xFFFF


def test_wire_example():
    assert add_crc(bytes([0x01, 0x03, 0x00, 0x00, 0x00, 0x01])) == bytes(
        [0x01, 0x03, 0x00, 0x00, 0x00, 0x01, 0x84, 0x0A]
    )


def test_accepts_list_of_ints():
    data = [0x11, 0x22, 0x33]
    assert calc_crc(data) == calc_crc(bytes(data))


@pytest.mark.parametrize("payload", [b"\x01", b"\x01\x03\x10\x20\x00\x7d", bytes(range(200))])
def test_add_then_valid_round_trip(payload):
    framed = add_crc(payload)
    assert framed[:-2] == payload
    assert valid_crc(framed)


def test_crc_of_framed_data_is_zero():
    assert calc_crc(add_crc(b"\x02\x03\x08")) == 0


def test_corrupted_frame_is_invalid():
    framed = bytearray(add_crc(b"\x01\x03\x02\x1e\x1f"))
    framed[2] ^= 0x01
    assert valid_crc(framed) is False


def test_explicit_crc_compare():
    payload = b"\x01\x06\x00\x10\xbe\xef"
    crc = calc_crc(payload)
    assert valid_crc(payload, crc) is True
    assert valid_crc(payload, crc ^ 0xFFFF) is False


def test_valid_crc_too_short():
    with pytest.raises(ValueError):
        valid_crc(b"\x01")


def test_interval_lower_limit_at_high_baud():
    assert calculate_interval(4000000, 0) == 1750


def test_interval_overwrite_wins_when_larger():
    assert calculate_interval(4000000, 20000) == 20000


def test_interval_overwrite_ignored_when_smaller():
    assert calculate_interval(1200, 5) == calculate_interval(1200, 0)


def test_interval_grows_with_lower_baud():
    assert calculate_interval(1200) > calculate_interval(9600) >= 1750


def test_interval_rejects_zero_baud():
    with pytest.raises(ValueError):
        calculate_interval(0)