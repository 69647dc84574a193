"""
SSDP device search over UDP multicast.

One L{Ssdp} owns a single listening socket for its whole lifetime. Each
L{Ssdp.search} returns a L{Subscription} whose C{device} event fires with
(info, address) for every matching answer, until the subscription is ended.

@author: Raphael Slinckx
@author: Anthony Baxter
@copyright: Copyright 2005
@license: LGPL
"""

import logging

from twisted.internet.protocol import DatagramProtocol

from natupnp.util import variable

# UPNP multicast address and port
SSDP_MCAST = '239.255.255.250'
SSDP_PORT = 1900
SEARCH_MX = 3
SEARCH_REPEAT = 3

def build_search_request(st, mx=SEARCH_MX):
    return ('M-SEARCH * HTTP/1.1\r\n'
        'HOST: %s:%d\r\n'
        'ST: %s\r\n'
        'MAN: "ssdp:discover"\r\n'
        'MX: %d\r\n'
        '\r\n' % (SSDP_MCAST, SSDP_PORT, st, mx)).encode('ascii')

def parse_search_response(dgram):
    """
    Parse the HTTP-over-UDP answer to an M-SEARCH.

    @param dgram: the raw datagram
    @return: a dictionary of lower cased header names to values, or None if
        this is not a successful HTTP response
    """
    text = dgram.decode('utf-8', 'replace')
    status, _, message = text.partition('\r\n')

    parts = status.split(None, 2)
    if len(parts) < 2 or not parts[0].startswith('HTTP') or parts[1] != '200':
        return None

    headers = {}
    for line in message.split('\r\n'):
        line = line.strip()
        if not line:
            break
        key, sep, val = line.partition(':')
        if not sep:
            continue
        headers.setdefault(key.strip().lower(), val.strip())
    return headers

class Subscription:
    """
    A running search for one search target. C{device} happens with
    (info, address): info being the answer's headers, address the local ip
    the answer was received on.
    """
    def __init__(self, ssdp, st):
        self.st = st
        self.device = variable.Event()
        self.ended = False
        self._ssdp = ssdp

    def end(self):
        """Stop delivering answers. Safe to call more than once."""
        if self.ended:
            return
        self.ended = True
        self._ssdp._unsubscribe(self)

class SsdpProtocol(DatagramProtocol):
    def __init__(self, ssdp):
        self._ssdp = ssdp

    def datagramReceived(self, dgram, address):
        self._ssdp.response_received(dgram, address)

class Ssdp:
    def __init__(self, reactor=None):
        if reactor is None:
            from twisted.internet import reactor
        self._reactor = reactor
        self._protocol = SsdpProtocol(self)
        self._port = None
        self._subscriptions = []
        self.closed = False

    def search(self, st):
        """
        Multicast an M-SEARCH for the given search target.

        @param st: the search target, eg.
            'urn:schemas-upnp-org:device:InternetGatewayDevice:1'
        @rtype: L{Subscription}
        """
        if self.closed:
            raise ValueError('search on a closed Ssdp')
        if self._port is None:
            self._port = self._reactor.listenMulticast(0, self._protocol)

        request = build_search_request(st)
        for i in range(SEARCH_REPEAT):
            self._protocol.transport.write(request, (SSDP_MCAST, SSDP_PORT))

        # only registered once the requests are out
        subscription = Subscription(self, st)
        self._subscriptions.append(subscription)
        return subscription

    def response_received(self, dgram, address):
        logging.debug("Got UPNP multicast search answer from %r:\n%s", address, dgram)

        headers = parse_search_response(dgram)
        if headers is None:
            return
        if 'location' not in headers:
            logging.debug("No location header in response to M-SEARCH!: %r", headers)
            return

        matching = [s for s in self._subscriptions if s.st == headers.get('st')]
        if not matching:
            return

        local = self.local_address(address[0])
        for subscription in matching:
            # an observer of an earlier subscription may have ended this one
            if not subscription.ended:
                subscription.device.happened(headers, local)

    def local_address(self, host):
        """
        The ip address of the local interface that routes to host, found by
        connecting a throwaway udp socket to it.
        """
        udpprot = DatagramProtocol()
        port = self._reactor.listenUDP(0, udpprot)
        try:
            udpprot.transport.connect(host, SSDP_PORT)
            return udpprot.transport.getHost().host
        finally:
            port.stopListening()

    def _unsubscribe(self, subscription):
        if subscription in self._subscriptions:
            self._subscriptions.remove(subscription)

    def close(self):
        """Release the listening socket. Later calls do nothing."""
        if self.closed:
            return
        self.closed = True
        for subscription in list(self._subscriptions):
            subscription.end()
        if self._port is not None:
            self._port.stopListening()
            self._port = None
