import hashlib

import pytest

from picolan.md5 import MD5, md5


@pytest.mark.parametrize("length", [0, 1, 3, 55, 56, 57, 63, 64, 65, 119, 120, 128, 1000])
def test_matches_reference_for_various_lengths(length):
    data = bytes((i * 7 + 3) & 0xFF for i in range(length))
    assert md5(data).digest() == hashlib.md5(data).digest()


def test_known_vector_abc():
    assert md5(b"abc").hexdigest() == "900150983cd24fb0d6963f7d28e17f72"


def test_incremental_equals_one_shot():
    data = b"The quick brown fox jumps over the lazy dog" * 5
    hasher = MD5()
    for start in range(0, len(data), 13):
        hasher.update(data[start:start + 13])
    assert hasher.digest() == MD5(data).digest()


def test_hexdigest_is_hex_of_digest():
    hasher = md5(b"picolan")
    assert hasher.hexdigest() == hasher.digest().hex()
    assert len(hasher.digest()) == hasher.digest_size


def test_digest_does_not_finalize():
    hasher = MD5(b"part one ")
    first = hasher.digest()
    assert hasher.digest() == first
    hasher.update(b"part two")
    assert hasher.digest() == hashlib.md5(b"part one part two").digest()


def test_copy_is_independent():
    original = MD5(b"shared prefix ")
    clone = original.copy()
    clone.update(b"clone suffix")
    original.update(b"original suffix")
    assert clone.digest() == hashlib.md5(b"shared prefix clone suffix").digest()
    assert original.digest() == hashlib.md5(b"shared prefix original suffix").digest()


def test_accepts_bytearray_and_memoryview():
    payload = b"\x00\x01\x02chap-challenge"
    assert md5(bytearray(payload)).digest() == md5(memoryview(payload)).digest()
    assert md5(bytearray(payload)).digest() == hashlib.md5(payload).digest()


def test_rejects_text():
    with pytest.raises(TypeError):
        MD5("not bytes")
    with pytest.raises(TypeError):
        MD5().update("still not bytes")