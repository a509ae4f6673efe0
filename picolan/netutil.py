"""Small numeric, string and IPv4 address helpers."""

from __future__ import annotations

import struct

_MASK16 = 0xFFFF
_MASK32 = 0xFFFFFFFF


def c2d(char: str) -> int:
    """Return the digit value of a hex character, or its code point otherwise."""
    if len(char) != 1:
        raise ValueError(f"expected a single character, got {char!r}")
    if "0" <= char <= "9":
        return ord(char) - ord("0")
    if "a" <= char <= "f":
        return 10 + ord(char) - ord("a")
    if "A" <= char <= "F":
        return 10 + ord(char) - ord("A")
    return ord(char)


def _accumulate(text: str, base: int) -> int:
    value = 0
    for char in text:
        value = value * base + c2d(char)
    return value


def atoi(text: str, base: int = 10) -> int:
    """Convert ``text`` in ``base`` to a 16-bit unsigned integer."""
    return _accumulate(text, base) & _MASK16


def atoi32(text: str, base: int = 10) -> int:
    """Convert ``text`` in ``base`` to a 32-bit unsigned integer."""
    return _accumulate(text, base) & _MASK32


def valid_atoi(text: str, base: int = 10) -> int | None:
    """Convert ``text`` like :func:`atoi`, or return None if any digit is invalid."""
    if not text:
        return None
    if any(not 0 <= c2d(char) < base for char in text):
        return None
    return atoi(text, base)


def itoa2(value: int, length: int) -> str:
    """Format a 16-bit value as decimal, right-aligned with spaces to ``length``."""
    digits = str(value & _MASK16)
    if len(digits) > length:
        raise ValueError(f"{digits} does not fit in {length} characters")
    return digits.rjust(length)


def swaps(value: int) -> int:
    """Swap the two bytes of a 16-bit value."""
    value &= _MASK16
    return ((value & 0xFF) << 8) | ((value >> 8) & 0xFF)


def swapl(value: int) -> int:
    """Reverse the four bytes of a 32-bit value."""
    value &= _MASK32
    return (
        ((value & 0xFF) << 24)
        | (((value >> 8) & 0xFF) << 16)
        | (((value >> 16) & 0xFF) << 8)
        | ((value >> 24) & 0xFF)
    )


def mid(src: str, start: str, end: str) -> str:
    """Return the text between the first ``start`` and the next ``end`` after it."""
    begin = src.find(start)
    if begin < 0:
        raise ValueError(f"{start!r} not found")
    begin += len(start)
    finish = src.find(end, begin)
    if finish < 0:
        raise ValueError(f"{end!r} not found after {start!r}")
    return src[begin:finish]


def _octet_tokens(text: str) -> list[str]:
    tokens = [token for token in text.split(".") if token]
    if len(tokens) < 4:
        raise ValueError(f"not a dotted IPv4 address: {text!r}")
    return tokens[:4]


def _octet_value(token: str) -> int:
    if token.startswith("0x"):
        return atoi(token[2:], 16)
    return atoi(token, 10)


def inet_addr(text: str) -> int:
    """Convert a dotted address (decimal or 0x-hex octets) to a 32-bit integer."""
    address = 0
    for token in _octet_tokens(text):
        address = (address << 8) | (_octet_value(token) & 0xFF)
    return address


def inet_addr_bytes(text: str) -> bytes:
    """Convert a dotted address to its four octets in network order."""
    return bytes(_octet_value(token) & 0xFF for token in _octet_tokens(text))


def inet_ntoa(addr: int) -> str:
    """Format a 32-bit address (host order) in dotted decimal notation."""
    return ".".join(str(octet) for octet in (addr & _MASK32).to_bytes(4, "big"))


def inet_ntoa_pad(addr: int) -> str:
    """Format a 32-bit address with each octet zero-padded to three digits."""
    return ".".join(f"{octet:03d}" for octet in (addr & _MASK32).to_bytes(4, "big"))


def verify_ip_address(text: str) -> bytes:
    """Validate a dotted address and return its four octets.

    Raises ValueError when there are fewer than four octets, an octet has an
    invalid digit, or an octet is outside 0..255.
    """
    octets = []
    for token in _octet_tokens(text):
        if token.startswith("0x"):
            value = valid_atoi(token[2:], 16)
        else:
            value = valid_atoi(token, 10)
        if value is None or not 0 <= value <= 255:
            raise ValueError(f"invalid octet {token!r} in {text!r}")
        octets.append(value)
    return bytes(octets)


def checksum(data) -> int:
    """Return the 16-bit ones'-complement style checksum of ``data``."""
    raw = memoryview(data).tobytes()
    if len(raw) % 2:
        raw += b"\x00"
    total = sum(struct.unpack(f">{len(raw) // 2}H", raw)) & _MASK32
    return ~(total + (total >> 16)) & _MASK16


def check_dest_in_local(dest_ip, mask) -> bool:
    """Return True when any octet of ``dest_ip`` equals the same octet of ``mask``."""
    dest = memoryview(dest_ip).tobytes()
    subnet = memoryview(mask).tobytes()
    if len(dest) != 4 or len(subnet) != 4:
        raise ValueError("addresses must be four octets long")
    return any(a == b for a, b in zip(dest, subnet))