from twisted.internet import address, defer

from natupnp.errors import SoapError
from natupnp.gateway import IGD_DEVICE_TYPE
from natupnp.soap import SoapResponse

LOCAL_IP = '192.168.1.10'
GATEWAY_IP = '192.168.1.1'
LOCATION = 'http://192.168.1.1:5431/dyndev/uuid:0000e068-20a0-00e0-20a0-48a8000808e0'

def igd_answer(location=LOCATION, st=IGD_DEVICE_TYPE, status='200 OK'):
    return ('HTTP/1.1 %s\r\n'
        'CACHE-CONTROL: max-age=1800\r\n'
        'EXT:\r\n'
        'LOCATION: %s\r\n'
        'SERVER: Linux/2.6 UPnP/1.0 miniupnpd/1.0\r\n'
        'ST: %s\r\n'
        'USN: uuid:0000e068-20a0-00e0-20a0-48a8000808e0::%s\r\n'
        '\r\n' % (status, location, st, st)).encode('ascii')

class FakeUDPTransport:
    def __init__(self):
        self.written = []
        self.connected_to = None
        self.write_error = None

    def write(self, data, addr=None):
        if self.write_error is not None:
            raise self.write_error
        self.written.append((data, addr))

    def connect(self, host, port):
        self.connected_to = (host, port)

    def getHost(self):
        return address.IPv4Address('UDP', LOCAL_IP, 40000)

class FakePort:
    def __init__(self, protocol):
        self.protocol = protocol
        self.listening = True
        protocol.transport = FakeUDPTransport()

    def stopListening(self):
        self.listening = False

class FakeReactor:
    '''
    Just enough of IReactorUDP and IReactorMulticast for Ssdp.
    '''
    def __init__(self):
        self.multicast_ports = []
        self.udp_ports = []

    def listenMulticast(self, port, protocol, interface='', maxPacketSize=8192, listenMultiple=False):
        p = FakePort(protocol)
        self.multicast_ports.append(p)
        return p

    def listenUDP(self, port, protocol, interface='', maxPacketSize=8192):
        p = FakePort(protocol)
        self.udp_ports.append(p)
        return p

class FakeRouter:
    '''
    An in-memory WANIPConnection service. device() is used as the
    device_factory of the code under test.
    '''
    def __init__(self, external_ip='203.0.113.7', first_index=0):
        self.external_ip = external_ip
        self.first_index = first_index
        self.table = []
        self.calls = []
        self.locations = []

    def device(self, location):
        self.locations.append(location)
        return FakeDevice(self)

    def run(self, action, args=()):
        self.calls.append((action, list(args)))
        return defer.maybeDeferred(getattr(self, 'do_' + action), **dict(args))

    def do_AddPortMapping(self, NewRemoteHost, NewExternalPort, NewProtocol,
            NewInternalPort, NewInternalClient, NewEnabled,
            NewPortMappingDescription, NewLeaseDuration):
        self.table = [entry for entry in self.table
            if (entry['NewExternalPort'], entry['NewProtocol']) != (NewExternalPort, NewProtocol)]
        self.table.append(dict(
            NewRemoteHost=NewRemoteHost,
            NewExternalPort=NewExternalPort,
            NewProtocol=NewProtocol,
            NewInternalPort=NewInternalPort,
            NewInternalClient=NewInternalClient,
            NewEnabled=NewEnabled,
            NewPortMappingDescription=NewPortMappingDescription,
            NewLeaseDuration=NewLeaseDuration,
        ))
        return SoapResponse({'u:AddPortMappingResponse': {}})

    def do_DeletePortMapping(self, NewRemoteHost, NewExternalPort, NewProtocol):
        remaining = [entry for entry in self.table
            if (entry['NewExternalPort'], entry['NewProtocol']) != (NewExternalPort, NewProtocol)]
        if len(remaining) == len(self.table):
            raise SoapError(714, 'NoSuchEntryInArray')
        self.table = remaining
        return SoapResponse({'u:DeletePortMappingResponse': {}})

    def do_GetGenericPortMappingEntry(self, NewPortMappingIndex):
        i = NewPortMappingIndex - self.first_index
        if not 0 <= i < len(self.table):
            raise SoapError(713, 'SpecifiedArrayIndexInvalid')
        return SoapResponse({'u:GetGenericPortMappingEntryResponse': dict(self.table[i])})

    def do_GetExternalIPAddress(self):
        return SoapResponse({'u:GetExternalIPAddressResponse': {
            'NewExternalIPAddress': self.external_ip}})

class FakeDevice:
    def __init__(self, router):
        self.router = router

    def run(self, action, args=()):
        return self.router.run(action, args)

class ScriptedDevice:
    '''
    Answers each call with the next item of replies: an exception to fail
    with, or a response to succeed with. Fails with IndexError once they
    run out.
    '''
    def __init__(self, replies):
        self.replies = list(replies)
        self.calls = []

    def run(self, action, args=()):
        self.calls.append((action, list(args)))
        reply = self.replies.pop(0)
        if isinstance(reply, Exception):
            return defer.fail(reply)
        return defer.succeed(reply)
