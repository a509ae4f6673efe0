"""LAN protocol helpers: NetBIOS name responder, UPnP port mapping, MD5 and address utilities."""

__version__ = "2.0.0"

__all__ = ["md5", "netutil", "netbios", "soap", "upnp_parse", "upnp"]