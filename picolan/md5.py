"""Pure-Python MD5 message digest as described in RFC 1321.

Used for computing CHAP responses during PPPoE authentication.
"""

from __future__ import annotations

import struct

_MASK32 = 0xFFFFFFFF
_MASK64 = 0xFFFFFFFFFFFFFFFF

_INITIAL_STATE = (0x67452301, 0xEFCDAB89, 0x98BADCFE, 0x10325476)

_SHIFTS = (
    (7, 12, 17, 22) * 4
    + (5, 9, 14, 20) * 4
    + (4, 11, 16, 23) * 4
    + (6, 10, 15, 21) * 4
)

_CONSTANTS = (
    # Round 1
    0xD76AA478, 0xE8C7B756, 0x242070DB, 0xC1BDCEEE,
    0xF57C0FAF, 0x4787C62A, 0xA8304613, 0xFD469501,
    0x698098D8, 0x8B44F7AF, 0xFFFF5BB1, 0x895CD7BE,
    0x6B901122, 0xFD987193, 0xA679438E, 0x49B40821,
    # Round 2
    0xF61E2562, 0xC040B340, 0x265E5A51, 0xE9B6C7AA,
    0xD62F105D, 0x02441453, 0xD8A1E681, 0xE7D3FBC8,
    0x21E1CDE6, 0xC33707D6, 0xF4D50D87, 0x455A14ED,
    0xA9E3E905, 0xFCEFA3F8, 0x676F02D9, 0x8D2A4C8A,
    # Round 3
    0xFFFA3942, 0x8771F681, 0x6D9D6122, 0xFDE5380C,
    0xA4BEEA44, 0x4BDECFA9, 0xF6BB4B60, 0xBEBFBC70,
    0x289B7EC6, 0xEAA127FA, 0xD4EF3085, 0x04881D05,
    0xD9D4D039, 0xE6DB99E5, 0x1FA27CF8, 0xC4AC5665,
    # Round 4
    0xF4292244, 0x432AFF97, 0xAB9423A7, 0xFC93A039,
    0x655B59C3, 0x8F0CCC92, 0xFFEFF47D, 0x85845DD1,
    0x6FA87E4F, 0xFE2CE6E0, 0xA3014314, 0x4E0811A1,
    0xF7537E82, 0xBD3AF235, 0x2AD7D2BB, 0xEB86D391,
)

_BLOCK_SIZE = 64


def _rotate_left(value: int, count: int) -> int:
    return ((value << count) | (value >> (32 - count))) & _MASK32


def _transform(state: tuple[int, int, int, int], block: bytes) -> tuple[int, int, int, int]:
    """Run the MD5 compression function over one 64-byte block."""
    words = struct.unpack("<16I", block)
    a, b, c, d = state
    for step, (constant, shift) in enumerate(zip(_CONSTANTS, _SHIFTS)):
        if step < 16:
            mixed = (b & c) | (~b & _MASK32 & d)
            index = step
        elif step < 32:
            mixed = (b & d) | (c & ~d & _MASK32)
            index = (5 * step + 1) % 16
        elif step < 48:
            mixed = b ^ c ^ d
            index = (3 * step + 5) % 16
        else:
            mixed = c ^ (b | (~d & _MASK32))
            index = (7 * step) % 16
        rotated = _rotate_left((a + mixed + constant + words[index]) & _MASK32, shift)
        a, b, c, d = d, (b + rotated) & _MASK32, b, c
    return tuple(
        (old + new) & _MASK32 for old, new in zip(state, (a, b, c, d))
    )  # type: ignore[return-value]


class MD5:
    """Incremental MD5 hash with a hashlib-like interface."""

    name = "md5"
    digest_size = 16
    block_size = _BLOCK_SIZE

    def __init__(self, data=b"") -> None:
        self._state = _INITIAL_STATE
        self._buffer = b""
        self._length = 0
        self.update(data)

    def update(self, data) -> None:
        """Feed more bytes into the hash."""
        chunk = memoryview(data).tobytes()
        self._length += len(chunk)
        buffer = self._buffer + chunk
        whole = len(buffer) - len(buffer) % _BLOCK_SIZE
        state = self._state
        for offset in range(0, whole, _BLOCK_SIZE):
            state = _transform(state, buffer[offset:offset + _BLOCK_SIZE])
        self._state = state
        self._buffer = buffer[whole:]

    def copy(self) -> "MD5":
        """Return an independent copy of the current hash state."""
        clone = type(self)()
        clone._state = self._state
        clone._buffer = self._buffer
        clone._length = self._length
        return clone

    def digest(self) -> bytes:
        """Return the 16-byte digest of everything fed so far."""
        bit_length = (self._length * 8) & _MASK64
        padding = b"\x80" + b"\x00" * ((55 - len(self._buffer)) % _BLOCK_SIZE)
        tail = self._buffer + padding + struct.pack("<Q", bit_length)
        state = self._state
        for offset in range(0, len(tail), _BLOCK_SIZE):
            state = _transform(state, tail[offset:offset + _BLOCK_SIZE])
        return struct.pack("<4I", *state)

    def hexdigest(self) -> str:
        """Return the digest as a lower-case hexadecimal string."""
        return self.digest().hex()


def md5(data=b"") -> MD5:
    """Create an MD5 hash object primed with ``data``."""
    return MD5(data)