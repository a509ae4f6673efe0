"""HTTP and SOAP messages for talking to a UPnP Internet Gateway Device."""

from __future__ import annotations

import ipaddress
from dataclasses import dataclass
from enum import IntEnum

WANIP_SERVICE = "urn:schemas-upnp-org:service:WANIPConnection:1"

_SOAP_START = (
    '<?xml version="1.0"?>\r\n'
    '<SOAP-ENV:Envelope xmlns:SOAP-ENV="http://schemas.xmlsoap.org/soap/envelope/" '
    'SOAP-ENV:encodingStyle="http://schemas.xmlsoap.org/soap/encoding/"><SOAP-ENV:Body>'
)
_SOAP_END = "</SOAP-ENV:Body></SOAP-ENV:Envelope>\r\n"

_DT_NS = 'xmlns:dt="urn:schemas-microsoft-com:datatypes"'

_DELETE_PORT_MAPPING_OPEN = f'<m:DeletePortMapping xmlns:m="{WANIP_SERVICE}">'
_DELETE_PORT_MAPPING_CLOSE = "</m:DeletePortMapping>"
_ADD_PORT_MAPPING_OPEN = f'<m:AddPortMapping xmlns:m="{WANIP_SERVICE}">'
_ADD_PORT_MAPPING_CLOSE = "</m:AddPortMapping>"

_NEW_ENABLED = f'<NewEnabled {_DT_NS} dt:dt="boolean">1</NewEnabled>'
_NEW_LEASE_DURATION = f'<NewLeaseDuration {_DT_NS} dt:dt="ui4">0</NewLeaseDuration>'

_KEEP_ALIVE_TAIL = (
    "\r\nConnection: Keep-Alive\r\nCache-Control: no-cache\r\nPragma: no-cache\r\n\r\n"
)
_USER_AGENT = "User-Agent: Mozilla/4.0 (compatible; UPnP/1.0; Windows NT/5.1)"


class PortAction(IntEnum):
    """The SOAP action a POST request carries."""

    DELETE_PORT = 0
    ADD_PORT = 1


_ACTION_NAMES = {
    PortAction.DELETE_PORT: "DeletePortMapping",
    PortAction.ADD_PORT: "AddPortMapping",
}


@dataclass(frozen=True)
class GatewayInfo:
    """What is known about a discovered Internet Gateway Device."""

    description_url: str = ""
    ip: str = ""
    port: str = ""
    location: str = ""
    control_url: str = ""
    event_sub_url: str = ""

    @property
    def host(self) -> str:
        """The value of the Host header for requests to the gateway."""
        return f"{self.ip}:{self.port}"


def _element(name: str, datatype: str, value) -> str:
    return f'<{name} {_DT_NS} dt:dt="{datatype}">{value}</{name}>'


def make_post_header(gateway: GatewayInfo, content_length: int, action: PortAction) -> str:
    """Build the HTTP POST header for a SOAP control request."""
    action = PortAction(action)
    return (
        f"POST {gateway.control_url} HTTP/1.1\r\n"
        'Content-Type: text/xml; charset="utf-8"\r\n'
        f'SOAPAction: "{WANIP_SERVICE}#{_ACTION_NAMES[action]}"'
        f"\r\n{_USER_AGENT}\r\n"
        f"Host: {gateway.host}"
        f"\r\nContent-Length: {content_length}"
        f"{_KEEP_ALIVE_TAIL}"
    )


def make_get_header(gateway: GatewayInfo) -> str:
    """Build the HTTP GET request for the gateway's device description."""
    return (
        f"GET {gateway.location} HTTP/1.1\r\n"
        "Accept: text/xml, application/xml\r\n"
        f"{_USER_AGENT}\r\n"
        f"Host: {gateway.host}"
        f"{_KEEP_ALIVE_TAIL}"
    )


def _format_ip(address) -> str:
    if isinstance(address, (bytearray, memoryview)):
        address = bytes(address)
    return str(ipaddress.IPv4Address(address))


def make_subscribe(gateway: GatewayInfo, callback_ip, listen_port: int) -> str:
    """Build the SUBSCRIBE request for gateway events delivered to ``callback_ip``."""
    return (
        f"SUBSCRIBE {gateway.event_sub_url} HTTP/1.1\r\n"
        f"Host: {gateway.host}"
        "\r\nUSER-AGENT: Mozilla/4.0 (compatible; UPnP/1.1; Windows NT/5.1)\r\n"
        f"CALLBACK: <http://{_format_ip(callback_ip)}:{listen_port}/>"
        "\r\nNT: upnp:event\r\nTIMEOUT: Second-1800\r\n\r\n"
    )


def make_soap_add_control(
    protocol: str,
    external_port: int,
    internal_ip: str,
    internal_port: int,
    description: str,
) -> str:
    """Build the SOAP body of an AddPortMapping request."""
    return "".join(
        (
            _SOAP_START,
            _ADD_PORT_MAPPING_OPEN,
            _element("NewRemoteHost", "string", ""),
            _element("NewExternalPort", "ui2", external_port),
            _element("NewProtocol", "string", protocol),
            _element("NewInternalPort", "ui2", internal_port),
            _element("NewInternalClient", "string", internal_ip),
            _NEW_ENABLED,
            _element("NewPortMappingDescription", "string", description),
            _NEW_LEASE_DURATION,
            _ADD_PORT_MAPPING_CLOSE,
            _SOAP_END,
        )
    )


def make_soap_delete_control(protocol: str, external_port: int) -> str:
    """Build the SOAP body of a DeletePortMapping request."""
    return "".join(
        (
            _SOAP_START,
            _DELETE_PORT_MAPPING_OPEN,
            _element("NewRemoteHost", "string", ""),
            _element("NewExternalPort", "ui2", external_port),
            _element("NewProtocol", "string", protocol),
            _DELETE_PORT_MAPPING_CLOSE,
            _SOAP_END,
        )
    )