"""Parsers for the replies of a UPnP Internet Gateway Device."""

from __future__ import annotations

import dataclasses
import logging

from picolan.netutil import atoi
from picolan.soap import WANIP_SERVICE, GatewayInfo

logger = logging.getLogger(__name__)

_LOCATION = "LOCATION: "
_HTTP_SCHEME = "http://"
_EVENT_VARIABLES = (
    "PossibleConnectionTypes",
    "ConnectionStatus",
    "ExternalIPAddress",
    "PortMappingNumberOfEntries",
)
_DELETE_RESPONSE = f'u:DeletePortMappingResponse xmlns:u="{WANIP_SERVICE}"'
_ADD_RESPONSE = f'u:AddPortMappingResponse xmlns:u="{WANIP_SERVICE}"'


class UpnpParseError(ValueError):
    """A reply from the gateway could not be parsed."""


class HttpStatusError(UpnpParseError):
    """The gateway answered with an HTTP status other than 200 OK."""

    def __init__(self, status_line: str) -> None:
        super().__init__(f"HTTP error: {status_line}")
        self.status_line = status_line


class UpnpFault(Exception):
    """A SOAP fault reported by the gateway."""

    def __init__(self, fault_string: str, error_code: int, description: str) -> None:
        super().__init__(f"{fault_string} {error_code}: {description}")
        self.fault_string = fault_string
        self.error_code = error_code
        self.description = description


def _find(text: str, needle: str, start: int = 0) -> int:
    index = text.find(needle, start)
    if index < 0:
        raise UpnpParseError(f"{needle!r} not found")
    return index


def _tag_text(text: str, tag: str, start: int = 0) -> str:
    opening = f"<{tag}>"
    begin = _find(text, opening, start) + len(opening)
    end = _find(text, f"</{tag}>", begin)
    return text[begin:end]


def parse_http(text: str) -> None:
    """Check that ``text`` is a 200 OK reply; raise HttpStatusError otherwise."""
    if "200 OK" in text:
        return
    end = text.find("\r\n")
    raise HttpStatusError(text if end < 0 else text[:end])


def parse_ssdp(text: str) -> GatewayInfo:
    """Extract the gateway's description URL, address, port and path from an SSDP reply."""
    parse_http(text)
    begin = _find(text, _LOCATION) + len(_LOCATION)
    url = text[begin:_find(text, "\r\n", begin)]

    host_start = _find(url, _HTTP_SCHEME) + len(_HTTP_SCHEME)
    colon = _find(url, ":", host_start)
    slash = _find(url, "/", colon + 1)
    return GatewayInfo(
        description_url=url,
        ip=url[host_start:colon],
        port=url[colon + 1:slash],
        location=url[slash:],
    )


def parse_description(text: str, gateway: GatewayInfo) -> GatewayInfo:
    """Return ``gateway`` with the WANIPConnection control and event URLs filled in."""
    parse_http(text)
    service = _find(text, WANIP_SERVICE)
    return dataclasses.replace(
        gateway,
        control_url=_tag_text(text, "controlURL", service),
        event_sub_url=_tag_text(text, "eventSubURL", service),
    )


def parse_eventing(text: str) -> dict[str, str]:
    """Return the state variables found in an event notification."""
    found = {}
    for name in _EVENT_VARIABLES:
        try:
            value = _tag_text(text, name)
        except UpnpParseError:
            continue
        logger.info("Receive Eventing(%s): %s", name, value)
        found[name] = value
    return found


def parse_error(text: str) -> UpnpFault:
    """Extract the SOAP fault from an error reply.

    Raises UpnpParseError when the fault string, error code or error
    description is missing.
    """
    fault_string = _tag_text(text, "faultstring")
    error_code = atoi(_tag_text(text, "errorCode"), 10)
    description = _tag_text(text, "errorDescription")
    logger.info("faultstring: %s errorCode: %d errorDescription: %s",
                fault_string, error_code, description)
    return UpnpFault(fault_string, error_code, description)


def _parse_action_reply(text: str, marker: str) -> None:
    try:
        parse_http(text)
    except HttpStatusError as error:
        logger.info("%s", error)
    if marker not in text:
        raise parse_error(text)


def parse_delete_port(text: str) -> None:
    """Check a DeletePortMapping reply; raise UpnpFault or UpnpParseError on failure."""
    _parse_action_reply(text, _DELETE_RESPONSE)


def parse_add_port(text: str) -> None:
    """Check an AddPortMapping reply; raise UpnpFault or UpnpParseError on failure."""
    _parse_action_reply(text, _ADD_RESPONSE)