"""
The control point side of a single UPnP gateway: fetches its description
document, finds the WAN connection service and runs actions on it.

@author: Raphael Slinckx
@author: Anthony Baxter
@copyright: Copyright 2005
@license: LGPL
"""

import logging
from urllib.parse import urljoin

from twisted.internet import defer

from natupnp.errors import UPnPError
from natupnp.soap import SoapProxy
from natupnp.upnpxml import UPnPXml
from natupnp.util import web

class Device:
    """
    Represents an UPnP device, built from the location url announced in its
    SSDP answer. The description is fetched on the first L{run}.
    """
    def __init__(self, location, agent=None, timeout=web.HTTP_TIMEOUT):
        """
        @param location: url of the device's XML description
        @param agent: the L{twisted.web.iweb.IAgent} used for all requests
        @param timeout: seconds allowed for each HTTP request
        """
        self.location = location
        self._agent = agent
        self._timeout = timeout
        self._proxy = None
        self.info = {}

    @defer.inlineCallbacks
    def _get_service(self):
        """
        Returns a deferred called with the L{SoapProxy} to the WAN connection
        service of the device.

        @raise UPnPError: When no suitable service is in the description.
        """
        if self._proxy is not None:
            return self._proxy

        body = yield web.get_page(self.location, agent=self._agent,
            timeout=self._timeout)
        upnpinfo = UPnPXml(body)

        # Check if we have a base url, if not consider location as base url
        urlbase = upnpinfo.urlbase
        if urlbase is None:
            urlbase = self.location

        # Check the control url, if None, then the device cannot do what we want
        if upnpinfo.controlurl is None:
            raise UPnPError("upnp response showed no WANConnections")

        control_url = urljoin(urlbase, upnpinfo.controlurl)
        self.info = upnpinfo.deviceinfos
        self._proxy = SoapProxy(control_url, upnpinfo.wanservice,
            agent=self._agent, timeout=self._timeout)
        return self._proxy

    @defer.inlineCallbacks
    def run(self, action, args=()):
        """
        Run an action on the device's WAN connection service.

        @param action: the action name, eg. 'AddPortMapping'
        @param args: ordered (name, value) pairs
        @return: A deferred called with the L{natupnp.soap.SoapResponse}
        @rtype: L{twisted.internet.defer.Deferred}
        """
        proxy = yield self._get_service()
        logging.debug("Running %s%r on %s", action, tuple(args), self.location)
        response = yield proxy.call(action, args)
        return response

    def __repr__(self):
        return '<Device %s>' % (self.location,)
