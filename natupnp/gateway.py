"""
Finding the gateway: an SSDP search raced against a timeout, settled by the
first answer.

@author: Raphael Slinckx
@author: Anthony Baxter
@copyright: Copyright 2005
@license: LGPL
"""

import logging
from collections import namedtuple

from twisted.internet import defer

from natupnp.device import Device
from natupnp.errors import DiscoveryTimeout

IGD_DEVICE_TYPE = 'urn:schemas-upnp-org:device:InternetGatewayDevice:1'

# gateway: the Device to run actions on
# address: the local ip the gateway's answer came in on
GatewaySession = namedtuple('GatewaySession', ['gateway', 'address'])

def find_gateway(ssdp, timeout, device_factory=Device, clock=None):
    """
    Search the LAN for an Internet Gateway Device. Only the first device to
    answer is used; the search is ended as soon as the outcome is known,
    so later answers are dropped.

    @param ssdp: the L{natupnp.ssdp.Ssdp} to search with
    @param timeout: seconds to wait for an answer
    @param device_factory: called with the announced location url
    @return: A deferred called with a L{GatewaySession}
    @rtype: L{twisted.internet.defer.Deferred}
    @raise DiscoveryTimeout: When nothing answered in time.
    """
    subscription = ssdp.search(IGD_DEVICE_TYPE)

    def search_done(result):
        subscription.end()
        return result

    def got_device(event):
        info, address = event
        logging.debug("Gateway at %s answered on %s", info['location'], address)
        return GatewaySession(device_factory(info['location']), address)

    def timed_out(fail):
        fail.trap(defer.TimeoutError)
        raise DiscoveryTimeout('no gateway answered within %s seconds' % (timeout,))

    df = subscription.device.get_deferred(timeout, clock)
    df.addBoth(search_done)
    df.addCallbacks(got_device, timed_out)
    return df
