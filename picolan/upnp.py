"""Client for port mapping on a UPnP Internet Gateway Device."""

from __future__ import annotations

import ipaddress
import logging
import re
import socket
import time

from picolan.netutil import atoi, inet_addr, inet_ntoa
from picolan.soap import (
    GatewayInfo,
    PortAction,
    make_get_header,
    make_post_header,
    make_soap_add_control,
    make_soap_delete_control,
    make_subscribe,
)
from picolan.upnp_parse import (
    parse_add_port,
    parse_delete_port,
    parse_description,
    parse_eventing,
    parse_http,
    parse_ssdp,
)

logger = logging.getLogger(__name__)

SSDP_ADDRESS = ("239.255.255.250", 1900)
SSDP_LOCAL_PORT = 1901
EVENTING_PORT = 5002
DEFAULT_TIMEOUT = 3.0
RECV_BUFFER_SIZE = 4096

SSDP_REQUEST = (
    "M-SEARCH * HTTP/1.1\r\n"
    "Host:239.255.255.250:1900\r\n"
    "ST:urn:schemas-upnp-org:device:InternetGatewayDevice:1\r\n"
    'Man:"ssdp:discover"\r\n'
    "MX:3\r\n"
    "\r\n"
)
HTTP_OK = b"HTTP/1.1 200 OK\r\n\r\n"

_STEP_DISCOVERED = 1
_STEP_DESCRIBED = 2

_CONTENT_LENGTH = re.compile(rb"^content-length:\s*(\d+)\s*$", re.IGNORECASE | re.MULTILINE)


class UpnpStepError(RuntimeError):
    """An operation was attempted before the steps it depends on."""


class UpnpTimeout(TimeoutError):
    """The gateway did not reply in time."""


def _message_complete(data: bytes) -> bool:
    header_end = data.find(b"\r\n\r\n")
    if header_end < 0:
        return False
    match = _CONTENT_LENGTH.search(data[:header_end])
    if match is None:
        return False
    return len(data) - (header_end + 4) >= int(match.group(1))


class UpnpClient:
    """Discovers a gateway and manages port mappings on it.

    Discovery, fetching the description and the control requests must
    happen in that order; ``step`` records how far the client has got.
    """

    ssdp_address = SSDP_ADDRESS
    ssdp_local_port = SSDP_LOCAL_PORT

    def __init__(self, local_ip, timeout: float = DEFAULT_TIMEOUT) -> None:
        if isinstance(local_ip, (bytearray, memoryview)):
            local_ip = bytes(local_ip)
        self.local_ip = str(ipaddress.IPv4Address(local_ip))
        self.timeout = timeout
        self.gateway = GatewayInfo()
        self.step = 0

    def _require(self, step: int, what: str) -> None:
        if self.step < step:
            raise UpnpStepError(f"cannot {what} yet (step {self.step}, need {step})")

    def discover(self) -> GatewayInfo:
        """Search for a gateway with SSDP and record where its description is."""
        with socket.socket(socket.AF_INET, socket.SOCK_DGRAM) as sock:
            sock.bind(("", self.ssdp_local_port))
            sock.settimeout(self.timeout)
            logger.debug("%s", SSDP_REQUEST)
            sock.sendto(SSDP_REQUEST.encode("ascii"), self.ssdp_address)
            try:
                data, _peer = sock.recvfrom(RECV_BUFFER_SIZE)
            except TimeoutError as error:
                raise UpnpTimeout("no SSDP reply from a gateway") from error
        reply = data.decode("latin-1")
        logger.debug("ReceiveData\r\n%s", reply)
        self.gateway = parse_ssdp(reply)
        self.step = _STEP_DISCOVERED
        return self.gateway

    def _read_reply(self, conn: socket.socket) -> bytes:
        deadline = time.monotonic() + self.timeout
        received = b""
        while True:
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                break
            conn.settimeout(remaining)
            try:
                chunk = conn.recv(RECV_BUFFER_SIZE)
            except TimeoutError:
                break
            if not chunk:
                break
            received += chunk
            if _message_complete(received):
                break
        if not received:
            raise UpnpTimeout("no reply from the gateway")
        return received

    def _exchange(self, request: str) -> str:
        host = inet_ntoa(inet_addr(self.gateway.ip))
        port = atoi(self.gateway.port, 10)
        logger.debug("%s", request)
        with socket.create_connection((host, port), timeout=self.timeout) as conn:
            conn.sendall(request.encode("utf-8"))
            reply = self._read_reply(conn).decode("latin-1")
        logger.debug("ReceiveData\r\n%s", reply)
        return reply

    def get_description(self) -> GatewayInfo:
        """Fetch the gateway's description and record its control URLs."""
        self._require(_STEP_DISCOVERED, "get the description")
        reply = self._exchange(make_get_header(self.gateway))
        self.gateway = parse_description(reply, self.gateway)
        self.step = _STEP_DESCRIBED
        return self.gateway

    def set_eventing(self, listen_port: int = EVENTING_PORT) -> None:
        """Subscribe to the gateway's events, delivered to ``listen_port`` here."""
        self._require(_STEP_DESCRIBED, "subscribe to events")
        reply = self._exchange(make_subscribe(self.gateway, self.local_ip, listen_port))
        parse_http(reply)

    def _post(self, content: str, action: PortAction) -> str:
        length = len(content.encode("utf-8"))
        return self._exchange(make_post_header(self.gateway, length, action) + content)

    def add_port(
        self,
        protocol: str,
        external_port: int,
        internal_ip: str,
        internal_port: int,
        description: str,
    ) -> None:
        """Ask the gateway to forward ``external_port`` to ``internal_ip:internal_port``."""
        self._require(_STEP_DESCRIBED, "add a port mapping")
        content = make_soap_add_control(
            protocol, external_port, internal_ip, internal_port, description
        )
        parse_add_port(self._post(content, PortAction.ADD_PORT))

    def delete_port(self, protocol: str, external_port: int) -> None:
        """Ask the gateway to remove the mapping for ``external_port``."""
        self._require(_STEP_DESCRIBED, "delete a port mapping")
        content = make_soap_delete_control(protocol, external_port)
        parse_delete_port(self._post(content, PortAction.DELETE_PORT))

    def handle_event(self, conn) -> dict[str, str]:
        """Read one event notification from ``conn``, acknowledge it and return its variables."""
        data = conn.recv(RECV_BUFFER_SIZE)
        if not data:
            return {}
        conn.sendall(HTTP_OK)
        return parse_eventing(data.decode("latin-1"))