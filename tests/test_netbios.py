import struct
from unittest import mock

import pytest

from picolan import netbios
from picolan.netbios import (
    NetbiosResponder,
    build_response,
    decode_name,
    encode_name,
    main,
    parse_query,
)


def _query(name="W55RP20", flags=0x0110, questions=1, trans_id=0x1234):
    header = struct.pack(">6H", trans_id, flags, questions, 0, 0, 0)
    question = struct.pack(
        ">B33sHH", 0x20, encode_name(name).encode("ascii") + b"\0", 0x20, 1
    )
    return header + question


class _FakeSocket:
    def __init__(self, packets):
        self.packets = list(packets)
        self.sent = []
        self.bound = None
        self.options = []

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False

    def setsockopt(self, *args):
        self.options.append(args)

    def bind(self, address):
        self.bound = address

    def recvfrom(self, size):
        if not self.packets:
            raise OSError("closed")
        return self.packets.pop(0)

    def sendto(self, data, peer):
        self.sent.append((data, peer))


def test_encode_name_wire_format():
    encoded = encode_name("W55RP20")
    assert len(encoded) == 32
    assert encoded[:2] == "FH"
    assert encoded.endswith("CA" * 9)


@pytest.mark.parametrize("name", ["W55RP20", "A", "WORKGROUP", "X" * 15])
def test_name_round_trip(name):
    assert decode_name(encode_name(name)) == name


def test_encode_name_too_long():
    with pytest.raises(ValueError):
        encode_name("N" * 17)


def test_decode_stops_at_scope():
    assert decode_name(encode_name("ABC") + ".scope") == "ABC"


def test_decode_bytes_with_terminator():
    assert decode_name(encode_name("HOST").encode("ascii") + b"\0junk") == "HOST"


def test_decode_keeps_only_sixteen_characters():
    assert decode_name(encode_name("X" * 16) + "FI") == "X" * 16


def test_parse_query_fields():
    query = parse_query(_query(trans_id=0x1234))
    assert query.transaction_id == 0x1234
    assert query.name == "W55RP20"
    assert query.query_type == 0x20
    assert query.query_class == 1
    assert query.name_type == 0x20


@pytest.mark.parametrize(
    "flags,questions",
    [(0x8000, 1), (0x2800, 1), (0x0110, 2), (0x0110, 0)],
)
def test_parse_query_ignores_non_queries(flags, questions):
    assert parse_query(_query(flags=flags, questions=questions)) is None


def test_parse_query_short_packet():
    with pytest.raises(ValueError):
        parse_query(_query()[:20])


def test_build_response_layout():
    query = parse_query(_query(trans_id=0xBEEF))
    reply = build_response(query, "192.168.11.2")
    assert len(reply) == 62
    fields = struct.unpack(">6HB33sHHIHH4s", reply)
    assert fields[0] == 0xBEEF
    assert fields[1] == 0x8500
    assert fields[2:6] == (0, 1, 0, 0)
    assert fields[7] == query.encoded_name
    assert fields[8:10] == (query.query_type, query.query_class)
    assert fields[10] == netbios.NAME_TTL
    assert fields[11] == 6
    assert fields[12] == netbios.NFLAG_NODETYPE_BNODE
    assert fields[13] == bytes([192, 168, 11, 2])


def test_responder_answers_own_name():
    responder = NetbiosResponder("W55RP20", "10.0.0.7")
    reply = responder.respond(_query("W55RP20"))
    assert reply[-4:] == bytes([10, 0, 0, 7])


def test_responder_ignores_other_names_and_garbage():
    responder = NetbiosResponder("W55RP20", "10.0.0.7")
    assert responder.respond(_query("OTHER")) is None
    assert responder.respond(b"\x00\x01") is None
    assert responder.respond(_query(flags=0x8500)) is None


def test_responder_rejects_bad_address():
    with pytest.raises(ValueError):
        NetbiosResponder("W55RP20", "300.1.1.1")


def test_serve_forever_replies_to_sender():
    peer = ("192.168.11.9", 137)
    sock = _FakeSocket([(b"junk", peer), (_query("OTHER"), peer), (_query("W55RP20"), peer)])
    NetbiosResponder("W55RP20", "192.168.11.2").serve_forever(sock)
    assert len(sock.sent) == 1
    data, destination = sock.sent[0]
    assert destination == peer
    assert parse_query(_query("W55RP20")).encoded_name in data


def test_main_binds_and_serves():
    fake = _FakeSocket([(_query("HOST"), ("10.1.1.1", 5000))])
    with mock.patch("socket.socket", return_value=fake):
        result = main(["--name", "HOST", "--address", "10.1.1.2", "--port", "1137"])
    assert result == 0
    assert fake.bound == ("0.0.0.0", 1137)
    assert fake.sent[0][0][-4:] == bytes([10, 1, 1, 2])


def test_main_rejects_bad_address():
    with pytest.raises(SystemExit) as info:
        main(["--address", "not-an-ip"])
    assert info.value.code == 2