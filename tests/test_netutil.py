import ipaddress
import string

import pytest

from picolan import netutil


def test_c2d_hex_digits():
    for char in string.hexdigits:
        assert netutil.c2d(char) == int(char, 16)


def test_c2d_other_characters_give_code_point():
    assert netutil.c2d("z") == ord("z")
    assert netutil.c2d(".") == ord(".")


def test_c2d_rejects_multiple_characters():
    with pytest.raises(ValueError):
        netutil.c2d("ab")


@pytest.mark.parametrize("value", [0, 1, 1234, 3121, 65535])
def test_atoi_decimal_round_trip(value):
    assert netutil.atoi(str(value), 10) == value


@pytest.mark.parametrize("value", [0, 0xAB, 0x1F2E, 0xFFFF])
def test_atoi_hex_round_trip(value):
    assert netutil.atoi(format(value, "x"), 16) == value
    assert netutil.atoi(format(value, "X"), 16) == value


@pytest.mark.parametrize("text", ["65536", "70000", "123456789"])
def test_atoi_is_atoi32_truncated(text):
    assert netutil.atoi(text, 10) == netutil.atoi32(text, 10) & 0xFFFF
    assert netutil.atoi32(text, 10) == int(text)


def test_valid_atoi():
    assert netutil.valid_atoi("12", 10) == 12
    assert netutil.valid_atoi("ff", 16) == int("ff", 16)
    assert netutil.valid_atoi("1z", 10) is None
    assert netutil.valid_atoi("9", 8) is None
    assert netutil.valid_atoi("", 10) is None


def test_itoa2_right_aligns():
    text = netutil.itoa2(42, 5)
    assert len(text) == 5
    assert text.strip() == "42"
    assert text.endswith("42")
    assert netutil.itoa2(0, 3).strip() == "0"


def test_itoa2_overflow():
    with pytest.raises(ValueError):
        netutil.itoa2(12345, 3)


def test_swaps():
    assert netutil.swaps(0x1234) == 0x3412
    for value in (0, 0xFF, 0xABCD, 0xFFFF):
        assert netutil.swaps(netutil.swaps(value)) == value


def test_swapl():
    assert netutil.swapl(0x12345678) == 0x78563412
    for value in (0, 0xFF, 0xDEADBEEF, 0xFFFFFFFF):
        assert netutil.swapl(netutil.swapl(value)) == value


def test_mid():
    message = "HTTP/1.1 200 OK\r\nLOCATION: http://192.168.0.1:3121/etc/linuxigd/gatedesc.xml\r\n"
    assert (
        netutil.mid(message, "LOCATION: ", "\r\n")
        == "http://192.168.0.1:3121/etc/linuxigd/gatedesc.xml"
    )
    with pytest.raises(ValueError):
        netutil.mid(message, "MISSING", "\r\n")
    with pytest.raises(ValueError):
        netutil.mid(message, "LOCATION: ", "<none>")


@pytest.mark.parametrize("text", ["192.168.0.1", "192.168.11.2", "0.0.0.0", "255.255.255.255"])
def test_inet_addr_matches_ipaddress(text):
    assert netutil.inet_addr(text) == int(ipaddress.IPv4Address(text))


@pytest.mark.parametrize("text", ["192.168.0.1", "10.0.0.254", "8.8.8.8"])
def test_inet_ntoa_round_trip(text):
    assert netutil.inet_ntoa(netutil.inet_addr(text)) == text


def test_inet_addr_hex_and_empty_tokens():
    assert netutil.inet_addr("0xc0.168.0.1") == netutil.inet_addr("192.168.0.1")
    assert netutil.inet_addr("192..168.0.1") == netutil.inet_addr("192.168.0.1")


def test_inet_addr_too_few_octets():
    with pytest.raises(ValueError):
        netutil.inet_addr("1.2.3")
    with pytest.raises(ValueError):
        netutil.inet_addr_bytes("1.2")


def test_inet_addr_bytes():
    assert netutil.inet_addr_bytes("192.168.11.2") == bytes([192, 168, 11, 2])
    packed = netutil.inet_addr_bytes("10.1.2.3")
    assert int.from_bytes(packed, "big") == netutil.inet_addr("10.1.2.3")


def test_verify_ip_address_valid():
    assert netutil.verify_ip_address("192.168.11.4") == bytes([192, 168, 11, 4])
    assert netutil.verify_ip_address("0x10.0.0.1") == netutil.inet_addr_bytes("16.0.0.1")


@pytest.mark.parametrize("text", ["256.1.1.1", "1.2.3", "a.b.c.d", "1.2.3.-4", "0x.1.1.1"])
def test_verify_ip_address_invalid(text):
    with pytest.raises(ValueError):
        netutil.verify_ip_address(text)


@pytest.mark.parametrize("data", [b"\x00\x01", b"\x12\x34\x56\x78", b"\x01\x02\x03\x04\x05\x06"])
def test_checksum_of_data_with_its_checksum_is_zero(data):
    value = netutil.checksum(data)
    assert netutil.checksum(data + value.to_bytes(2, "big")) == 0


def test_checksum_odd_length_pads_with_zero():
    assert netutil.checksum(b"\x12") == netutil.checksum(b"\x12\x00")
    assert netutil.checksum(b"\xab\xcd\xef") == netutil.checksum(b"\xab\xcd\xef\x00")


def test_checksum_ignores_word_order():
    assert netutil.checksum(b"\x01\x02\x03\x04") == netutil.checksum(b"\x03\x04\x01\x02")


def test_check_dest_in_local():
    mask = bytes([255, 255, 255, 0])
    assert netutil.check_dest_in_local(bytes([192, 168, 11, 4]), mask) is False
    assert netutil.check_dest_in_local(bytes([255, 1, 1, 1]), mask) is True
    assert netutil.check_dest_in_local(bytes([1, 1, 1, 0]), mask) is True


def test_check_dest_in_local_rejects_bad_length():
    with pytest.raises(ValueError):
        netutil.check_dest_in_local(bytes([1, 2, 3]), bytes([255, 255, 255, 0]))