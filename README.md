# picolan

Small, dependency-free helpers for talking to the other machines on a local
network:

- `picolan.netbios`: a NetBIOS name service responder that answers name
  queries for one name with one IPv4 address, as a B-node;
- `picolan.upnp`: a UPnP client that finds an Internet Gateway Device over
  SSDP, reads its description, subscribes to its events, and adds or deletes
  port mappings;
- `picolan.soap` and `picolan.upnp_parse`: builders for the HTTP and SOAP
  messages that client sends, and parsers for the replies it gets back;
- `picolan.md5`: a pure-Python MD5 implementation with a hashlib-like
  interface;
- `picolan.netutil`: address, byte-order and checksum utilities.

## Installation

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## NetBIOS name responder

`picolan.netbios` decodes and encodes first-level NetBIOS names, parses name
query packets and builds the matching positive responses.

```python
from picolan.netbios import encode_name, decode_name, parse_query, NetbiosResponder

encoded = encode_name("W55RP20")        # 32 letters, name padded with spaces to 16
assert decode_name(encoded) == "W55RP20"

responder = NetbiosResponder("W55RP20", "192.168.11.2")
reply = responder.respond(packet)       # response bytes, or None
```

`respond` returns `None` for packets that are malformed, are not a name query
with exactly one question, or ask for a different name. `parse_query` raises
`ValueError` for a packet that is too short or carries a badly encoded name,
and returns `None` for packets that are not name queries. `build_response`
builds the answer for a `NameQuery` with a TTL of 10 seconds.

`NetbiosResponder.serve_forever(sock)` answers queries arriving on a bound UDP
socket until receiving from it fails. The same service is available from the
command line:

```
picolan-netbios --name W55RP20 --address 192.168.11.2 --bind 0.0.0.0 --port 137
```

All four options have those values as defaults. Listening on port 137
usually needs elevated privileges; Ctrl-C stops the responder.

## UPnP port mapping

`picolan.upnp.UpnpClient` walks the steps a gateway expects: discovery,
description, then eventing and port mapping.

```python
from picolan.upnp import UpnpClient, UpnpTimeout, UpnpStepError

client = UpnpClient("192.168.11.2", 3.0)   # local address, timeout in seconds
client.discover()           # SSDP M-SEARCH from UDP port 1901 for an InternetGatewayDevice
client.get_description()    # finds the WANIPConnection control and event URLs
client.set_eventing(5002)   # subscribe; events will be sent to 192.168.11.2:5002

client.add_port("TCP", 8000, "192.168.11.2", 8000, "picolan")
client.delete_port("TCP", 8000)
```

`discover` and `get_description` return the `picolan.soap.GatewayInfo`
gathered so far, which is also kept in `client.gateway`.

Calling a step before the one it depends on raises `UpnpStepError`; a gateway
that does not answer in time raises `UpnpTimeout`. A gateway that answers a
port mapping request with a SOAP fault raises `picolan.upnp_parse.UpnpFault`
(with `fault_string`, `error_code` and `description`); a reply that cannot be
parsed raises `picolan.upnp_parse.UpnpParseError`, and a non-200 reply to the
description or subscription request raises
`picolan.upnp_parse.HttpStatusError`.

`UpnpClient.handle_event(conn)` reads one event notification from a connected
socket, answers it with `HTTP/1.1 200 OK`, and returns the state variables it
found (`PossibleConnectionTypes`, `ConnectionStatus`, `ExternalIPAddress`,
`PortMappingNumberOfEntries`) as a dict.

The message builders in `picolan.soap` (`make_get_header`, `make_post_header`,
`make_subscribe`, `make_soap_add_control`, `make_soap_delete_control`, with
`PortAction` choosing the SOAP action) and the parsers in `picolan.upnp_parse`
(`parse_http`, `parse_ssdp`, `parse_description`, `parse_eventing`,
`parse_add_port`, `parse_delete_port`, and `parse_error`, which returns an
`UpnpFault` rather than raising it) can be used on their own, for example to
drive a gateway over your own transport.

## MD5

```python
from picolan.md5 import MD5, md5

h = MD5(b"a")
h.update(b"bc")
assert h.hexdigest() == "900150983cd24fb0d6963f7d28e17f72"
assert md5(b"abc").digest() == h.digest()
```

`copy()` returns an independent hash object with the same state.

## Network utilities

`picolan.netutil` holds the small conversions the protocols above rely on:

```python
from picolan import netutil

netutil.inet_addr("192.168.11.2")       # 3232238338
netutil.inet_ntoa(3232238338)           # "192.168.11.2"
netutil.swaps(0x1234)                   # 0x3412
netutil.checksum(b"\x45\x00\x00\x1c")   # 16-bit ones'-complement style checksum
```

Also available: `atoi`, `atoi32`, `valid_atoi`, `c2d`, `itoa2`, `swapl`, `mid`,
`inet_addr_bytes`, `inet_ntoa_pad`, `verify_ip_address` (raises `ValueError`
for an invalid address) and `check_dest_in_local`.

## What this package does not do

- There is no PPPoE client: `picolan.md5` supplies the digest a CHAP
  exchange needs, but nothing here sends or receives PPPoE frames.
- There is no event server: `UpnpClient.handle_event` handles one connection
  you have already accepted; listening on the eventing port is up to you.
- There is no command for UPnP port mapping; `picolan-netbios` is the only
  command, and the UPnP client is used from Python.