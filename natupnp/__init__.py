"""
UPnP Internet Gateway Device control point.

Finds the gateway on the LAN, maps and unmaps ports through it, lists the
existing mappings and asks it for the WAN ip address. Everything returns
twisted deferreds.
"""

__version__ = "1.0.0"

from natupnp.client import Client
from natupnp.device import Device
from natupnp.errors import UPnPError, DiscoveryTimeout, MalformedResponse, SoapError
from natupnp.ssdp import Ssdp
