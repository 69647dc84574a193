"""
Asking the gateway for the WAN ip address of this host.

@author: Raphael Slinckx
@copyright: Copyright 2005
@license: LGPL
"""

import logging

from twisted.internet import defer

from natupnp.errors import MalformedResponse

@defer.inlineCallbacks
def get_external_ip(session):
    """
    Triggers an external ip discovery on the upnp device. Returns
    a deferred called with the external ip of this host.

    @param session: the L{natupnp.gateway.GatewaySession} to ask
    @return: A deferred called with the ip address, as "x.x.x.x"
    @rtype: L{twisted.internet.defer.Deferred}
    @raise MalformedResponse: When the device's answer holds no
        GetExternalIPAddressResponse.
    """
    response = yield session.gateway.run('GetExternalIPAddress')
    result = response.result('GetExternalIPAddress')
    if result is None or 'NewExternalIPAddress' not in result:
        raise MalformedResponse('Incorrect response: %r' % (response,))
    logging.debug("Got external ip struct: %r", result)
    return result['NewExternalIPAddress']
