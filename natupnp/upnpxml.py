"""
This module parses an UPnP device's XML description into an object.

@author: Raphael Slinckx
@copyright: Copyright 2005
@license: LGPL
"""

from xml.dom import minidom
from xml.parsers.expat import ExpatError
import logging

from natupnp.errors import UPnPError

# Allowed UPnP services to use when mapping ports/external addresses
WANSERVICES = ['urn:schemas-upnp-org:service:WANIPConnection:1',
    'urn:schemas-upnp-org:service:WANPPPConnection:1']

def _text(node, tag):
    """Text of the first descendant named tag, or None."""
    elements = node.getElementsByTagName(tag)
    if not elements or elements[0].firstChild is None:
        return None
    return elements[0].firstChild.data.strip()

class UPnPXml:
    """
    This object parses the XML description, and stores the useful
    results in attributes.

    The device infos dictionary may contain the following keys:
        - friendlyname: A friendly name to call the device.
        - manufacturer: A manufacturer name for the device.
        - devicetype: The UPnP device type urn of the root device.

    Here are the different attributes:
        - deviceinfos: A dictionary of device infos as defined above.
        - controlurl: The control url, this is the url to use when sending SOAP
            requests to the device, relative to the base url.
        - wanservice: The WAN service to be used, one of the L{WANSERVICES}
        - urlbase: The base url to use when talking in SOAP to the device.

    The full url to use is obtained by urljoin(urlbase, controlurl)
    """

    def __init__(self, xml):
        """
        Parse the given XML document for UPnP infos. This creates the
        attributes when they are found, or None if no value was found.

        @param xml: the xml document, as bytes or string
        @raise UPnPError: when the document is not well-formed XML
        """
        logging.debug("Got UPNP Xml description:\n%s", xml)
        try:
            doc = minidom.parseString(xml)
        except ExpatError as e:
            raise UPnPError("unparseable device description: %s" % (e,))

        # Fetch various device info
        self.deviceinfos = {}
        devices = doc.getElementsByTagName('device')
        if devices:
            attributes = {
                'friendlyname': 'friendlyName',
                'manufacturer': 'manufacturer',
                'devicetype': 'deviceType',
            }
            for name, tag in attributes.items():
                value = _text(devices[0], tag)
                if value is not None:
                    self.deviceinfos[name] = value

        # Fetch device control url
        self.controlurl = None
        self.wanservice = None

        for service in doc.getElementsByTagName('service'):
            stype = _text(service, 'serviceType')
            if stype in WANSERVICES:
                controlurl = _text(service, 'controlURL')
                if controlurl is None:
                    continue
                self.controlurl = controlurl
                self.wanservice = stype
                break

        # Find base url
        self.urlbase = _text(doc, 'URLBase') or None
