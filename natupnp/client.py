"""
The public entry point. A L{Client} owns one SSDP socket; every operation
searches for the gateway again before talking to it.

    client = Client()
    d = client.add_mapping(public=8080, private=8080, ttl=0)
    d.addBoth(lambda _: client.close())
"""

from twisted.internet import defer

from natupnp import gateway, ipdiscover, portmapper
from natupnp.device import Device
from natupnp.ssdp import Ssdp

DEFAULT_TIMEOUT = 20

class Client:
    def __init__(self, timeout=DEFAULT_TIMEOUT, ssdp=None, device_factory=Device, clock=None):
        """
        @param timeout: seconds to wait for the gateway to answer a search
        @param ssdp: the L{Ssdp} to search with, a new one by default
        @param device_factory: builds the device from its location url
        @param clock: an L{twisted.internet.interfaces.IReactorTime}, for the
            search timeout
        """
        if ssdp is None:
            ssdp = Ssdp()
        self._ssdp = ssdp
        self._device_factory = device_factory
        self._clock = clock
        self.timeout = timeout

    def find_gateway(self):
        """
        @return: A deferred called with a L{gateway.GatewaySession}
        @raise natupnp.errors.DiscoveryTimeout: When no gateway answered
        """
        return defer.maybeDeferred(gateway.find_gateway, self._ssdp,
            self.timeout, self._device_factory, self._clock)

    @defer.inlineCallbacks
    def add_mapping(self, public, private, protocol=None, description=None, ttl=None):
        """
        @see: L{portmapper.add_port_mapping}
        """
        session = yield self.find_gateway()
        result = yield portmapper.add_port_mapping(session, public, private,
            protocol, description, ttl)
        return result

    @defer.inlineCallbacks
    def remove_mapping(self, public, protocol=None):
        """
        @see: L{portmapper.remove_port_mapping}
        """
        session = yield self.find_gateway()
        result = yield portmapper.remove_port_mapping(session, public, protocol)
        return result

    @defer.inlineCallbacks
    def list_mappings(self, local=False, description=None):
        """
        @see: L{portmapper.get_port_mappings}
        """
        session = yield self.find_gateway()
        mappings = yield portmapper.get_port_mappings(session, local, description)
        return mappings

    @defer.inlineCallbacks
    def external_ip(self):
        """
        @see: L{ipdiscover.get_external_ip}
        """
        session = yield self.find_gateway()
        ip = yield ipdiscover.get_external_ip(session)
        return ip

    def close(self):
        """Release the SSDP socket."""
        self._ssdp.close()
