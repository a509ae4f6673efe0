"""NetBIOS name service responder.

Answers broadcast name queries for a single NetBIOS name with the IPv4
address of this host, as a B-node.
"""

from __future__ import annotations

import argparse
import ipaddress
import logging
import socket
import struct
from dataclasses import dataclass

logger = logging.getLogger(__name__)

DEFAULT_NAME = "W55RP20"
DEFAULT_ADDRESS = "192.168.11.2"
NETBIOS_PORT = 137
NAME_LEN = 16
MSG_MAX_LEN = 512
NAME_TTL = 10

# Header flags
HFLAG_RESPONSE = 0x8000
HFLAG_OPCODE = 0x7800
HFLAG_OPCODE_NAME_QUERY = 0x0000
HFLAG_AUTHORITATIVE = 0x0400
HFLAG_TRUNCATED = 0x0200
HFLAG_RECURSION_DESIRED = 0x0100
HFLAG_RECURSION_AVAILABLE = 0x0080
HFLAG_BROADCAST = 0x0010
HFLAG_REPLYCODE = 0x0008

# Name flags
NFLAG_UNIQUE = 0x8000
NFLAG_NODETYPE = 0x6000
NFLAG_NODETYPE_HNODE = 0x6000
NFLAG_NODETYPE_MNODE = 0x4000
NFLAG_NODETYPE_PNODE = 0x2000
NFLAG_NODETYPE_BNODE = 0x0000

_ENCODED_FIELD_LEN = NAME_LEN * 2 + 1

_HEADER = struct.Struct(">6H")
_QUESTION = struct.Struct(f">B{_ENCODED_FIELD_LEN}sHH")
_RESPONSE = struct.Struct(f">6HB{_ENCODED_FIELD_LEN}sHHIHH4s")

_RESPONSE_FLAGS = (
    HFLAG_RESPONSE
    | HFLAG_OPCODE_NAME_QUERY
    | HFLAG_AUTHORITATIVE
    | HFLAG_RECURSION_DESIRED
)
_RDATA_LEN = 2 + 4  # name flags + IPv4 address


def decode_name(encoded) -> str:
    """Decode a first-level encoded NetBIOS name.

    Decoding stops at a NUL or at a '.' that introduces a scope ID. At most
    16 characters are kept, and the result ends at the first space or NUL.
    Raises ValueError for characters outside 'A'..'Z' or an unpaired half.
    """
    if isinstance(encoded, (bytes, bytearray, memoryview)):
        encoded = bytes(encoded).decode("latin-1")
    pairs = encoded.split("\0", 1)[0].split(".", 1)[0]
    chars = []
    for position in range(0, len(pairs), 2):
        high = pairs[position]
        if not "A" <= high <= "Z":
            raise ValueError(f"illegal character {high!r} in encoded name")
        if position + 1 >= len(pairs):
            raise ValueError("encoded name ends in the middle of a pair")
        low = pairs[position + 1]
        if not "A" <= low <= "Z":
            raise ValueError(f"illegal character {low!r} in encoded name")
        value = (((ord(high) - ord("A")) << 4) | (ord(low) - ord("A"))) & 0xFF
        if len(chars) < NAME_LEN:
            chars.append(chr(value))
    name = "".join(chars)
    for terminator in (" ", "\0"):
        name = name.split(terminator, 1)[0]
    return name


def encode_name(name: str) -> str:
    """First-level encode ``name``, padded with spaces to 16 characters."""
    raw = name.encode("latin-1")
    if len(raw) > NAME_LEN:
        raise ValueError(f"NetBIOS name longer than {NAME_LEN} characters: {name!r}")
    raw = raw.ljust(NAME_LEN, b" ")
    return "".join(
        chr(ord("A") + (byte >> 4)) + chr(ord("A") + (byte & 0x0F)) for byte in raw
    )


@dataclass(frozen=True)
class NameQuery:
    """A parsed NetBIOS name query."""

    transaction_id: int
    flags: int
    name_type: int
    encoded_name: bytes
    name: str
    query_type: int
    query_class: int


def parse_query(packet) -> NameQuery | None:
    """Parse a name query packet.

    Returns None when the packet is not a name query with exactly one
    question. Raises ValueError when the packet is too short or the name is
    not validly encoded.
    """
    data = memoryview(packet).tobytes()
    if len(data) < _HEADER.size + _QUESTION.size:
        raise ValueError(f"NetBIOS packet too short: {len(data)} bytes")
    trans_id, flags, questions, _answers, _authority, _additional = _HEADER.unpack_from(data)
    if (
        (flags & HFLAG_OPCODE) != HFLAG_OPCODE_NAME_QUERY
        or flags & HFLAG_RESPONSE
        or questions != 1
    ):
        return None
    name_type, encoded, query_type, query_class = _QUESTION.unpack_from(data, _HEADER.size)
    return NameQuery(
        transaction_id=trans_id,
        flags=flags,
        name_type=name_type,
        encoded_name=encoded,
        name=decode_name(encoded),
        query_type=query_type,
        query_class=query_class,
    )


def _pack_address(address) -> bytes:
    if isinstance(address, (bytearray, memoryview)):
        address = bytes(address)
    return ipaddress.IPv4Address(address).packed


def build_response(query: NameQuery, address) -> bytes:
    """Build the positive name query response for ``query`` carrying ``address``."""
    return _RESPONSE.pack(
        query.transaction_id,
        _RESPONSE_FLAGS,
        0,
        1,
        0,
        0,
        query.name_type,
        query.encoded_name,
        query.query_type,
        query.query_class,
        NAME_TTL,
        _RDATA_LEN,
        NFLAG_NODETYPE_BNODE,
        _pack_address(address),
    )


class NetbiosResponder:
    """Answers name queries for one NetBIOS name."""

    def __init__(self, name: str = DEFAULT_NAME, address=DEFAULT_ADDRESS) -> None:
        if len(name.encode("latin-1")) > NAME_LEN:
            raise ValueError(f"NetBIOS name longer than {NAME_LEN} characters: {name!r}")
        self.name = name
        self.address = _pack_address(address)

    def respond(self, packet) -> bytes | None:
        """Return the response to ``packet``, or None if it needs no answer."""
        try:
            query = parse_query(packet)
        except ValueError as error:
            logger.debug("ignoring malformed packet: %s", error)
            return None
        if query is None:
            return None
        logger.info("name query for %r", query.name)
        if query.name != self.name:
            return None
        return build_response(query, self.address)

    def serve_forever(self, sock) -> None:
        """Answer queries arriving on a UDP socket until it fails or closes."""
        while True:
            try:
                packet, peer = sock.recvfrom(MSG_MAX_LEN)
            except OSError as error:
                logger.info("stopping: %s", error)
                return
            logger.debug("packet from %s:%d", peer[0], peer[1])
            reply = self.respond(packet)
            if reply is not None:
                sock.sendto(reply, peer)
                logger.info("sent response to %s:%d", peer[0], peer[1])


def main(argv=None) -> int:
    """Run the responder on a UDP socket."""
    parser = argparse.ArgumentParser(description="Answer NetBIOS name queries.")
    parser.add_argument("--name", default=DEFAULT_NAME, help="NetBIOS name to answer for")
    parser.add_argument("--address", default=DEFAULT_ADDRESS, help="IPv4 address to announce")
    parser.add_argument("--bind", default="0.0.0.0", help="local address to listen on")
    parser.add_argument("--port", type=int, default=NETBIOS_PORT, help="UDP port")
    args = parser.parse_args(argv)

    try:
        responder = NetbiosResponder(args.name, args.address)
    except ValueError as error:
        parser.error(str(error))

    logging.basicConfig(level=logging.INFO)
    with socket.socket(socket.AF_INET, socket.SOCK_DGRAM) as sock:
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        sock.bind((args.bind, args.port))
        logger.info("listening on %s:%d", args.bind, args.port)
        try:
            responder.serve_forever(sock)
        except KeyboardInterrupt:
            pass
    return 0