import ipaddress

from twisted.trial import unittest

from natupnp import ipdiscover
from natupnp.errors import MalformedResponse, SoapError
from natupnp.gateway import GatewaySession
from natupnp.soap import SoapResponse
from natupnp.test import fakes

class Test(unittest.TestCase):
    def session(self, *replies):
        return GatewaySession(fakes.ScriptedDevice(replies), fakes.LOCAL_IP)

    def test_external_ip(self):
        router = fakes.FakeRouter(external_ip='203.0.113.7')
        session = GatewaySession(router.device(fakes.LOCATION), fakes.LOCAL_IP)
        ip = self.successResultOf(ipdiscover.get_external_ip(session))
        assert ip == '203.0.113.7'
        ipaddress.ip_address(ip)
        assert router.calls == [('GetExternalIPAddress', [])]

    def test_ipv6(self):
        session = self.session(SoapResponse({'m:GetExternalIPAddressResponse': {'NewExternalIPAddress': '2001:db8::1'}}))
        assert ipaddress.ip_address(self.successResultOf(ipdiscover.get_external_ip(session))).version == 6

    def test_missing_response_element(self):
        session = self.session(SoapResponse({'u:AddPortMappingResponse': {}}))
        self.failureResultOf(ipdiscover.get_external_ip(session), MalformedResponse)

    def test_missing_address(self):
        session = self.session(SoapResponse({'u:GetExternalIPAddressResponse': {}}))
        self.failureResultOf(ipdiscover.get_external_ip(session), MalformedResponse)

    def test_failure_propagates(self):
        session = self.session(SoapError(501, 'ActionFailed'))
        self.failureResultOf(ipdiscover.get_external_ip(session), SoapError)
