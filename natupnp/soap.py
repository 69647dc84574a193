"""
This module is a SOAP client using twisted's deferreds.

Only the small subset of SOAP 1.1 that UPnP control uses is handled: one
action element in the body, flat string arguments, and the UPnPError fault
detail.

@author: Raphael Slinckx
@copyright: Copyright 2005
@license: LGPL
"""

import logging
from xml.dom import minidom
from xml.parsers.expat import ExpatError
from xml.sax.saxutils import escape

from twisted.web import error

from natupnp.errors import SoapError
from natupnp.util import web

ENVELOPE_NS = 'http://schemas.xmlsoap.org/soap/envelope/'
ENCODING_NS = 'http://schemas.xmlsoap.org/soap/encoding/'

# Arguments declared ui2/ui4/boolean by the WANIPConnection service
INTEGER_ARGUMENTS = set(['NewExternalPort', 'NewInternalPort', 'NewEnabled',
    'NewLeaseDuration', 'NewPortMappingNumberOfEntries'])

_ENVELOPE = ('<?xml version="1.0"?>\r\n'
    '<s:Envelope xmlns:s="%s" s:encodingStyle="%s">'
    '<s:Body><u:%s xmlns:u="%s">%s</u:%s></s:Body></s:Envelope>\r\n')

def build_envelope(method, namespace, args=()):
    """
    Build the request document for a call.

    @param method: The action name, eg. 'AddPortMapping'
    @param namespace: The service type urn the action belongs to
    @param args: ordered (name, value) pairs, None values are sent empty
    @return: the envelope, utf-8 encoded
    """
    arguments = ''.join('<%s>%s</%s>' % (
        name, escape('' if value is None else str(value)), name)
        for name, value in args)
    return (_ENVELOPE % (ENVELOPE_NS, ENCODING_NS,
        method, namespace, arguments, method)).encode('utf-8')

def _elements(node):
    return [child for child in node.childNodes
        if child.nodeType == child.ELEMENT_NODE]

def _text(node):
    return ''.join(child.data for child in node.childNodes
        if child.nodeType in (child.TEXT_NODE, child.CDATA_SECTION_NODE)).strip()

def _body(doc):
    for child in _elements(doc.documentElement):
        if child.localName == 'Body':
            return child
    return None

class SoapResponse(dict):
    """
    The parsed answer to an action: maps each element found in the SOAP
    body, under its qualified name (eg. 'u:GetExternalIPAddressResponse'),
    to a dictionary of its arguments.
    """

    def result(self, method):
        """
        Return the arguments of the response element for the given action,
        whatever namespace prefix the device used, or None if the device did
        not answer with one.
        """
        suffix = method + 'Response'
        for key, value in self.items():
            if key == suffix or key.endswith(':' + suffix):
                return value
        return None

def parse_response(xml):
    """
    Parse a SOAP response document into a L{SoapResponse}.

    Arguments listed in L{INTEGER_ARGUMENTS} are converted to int when they
    hold a decimal number, everything else stays a string.
    """
    doc = minidom.parseString(xml)
    result = SoapResponse()
    body = _body(doc)
    if body is None:
        return result
    for element in _elements(body):
        fields = {}
        for argument in _elements(element):
            name, value = argument.localName, _text(argument)
            if name in INTEGER_ARGUMENTS and value.isdecimal():
                value = int(value)
            fields[name] = value
        result[element.tagName] = fields
    return result

def parse_fault(xml):
    """
    Extract the UPnPError from a SOAP fault document.

    @return: a L{SoapError}, or None when the document holds no UPnP fault
    """
    try:
        doc = minidom.parseString(xml)
    except ExpatError:
        return None
    codes = doc.getElementsByTagNameNS('*', 'errorCode')
    descriptions = doc.getElementsByTagNameNS('*', 'errorDescription')
    if not codes and not descriptions:
        return None
    code = _text(codes[0]) if codes else ''
    description = _text(descriptions[0]) if descriptions else ''
    return SoapError(int(code) if code.isdecimal() else None, description)

class SoapProxy:
    """
    Proxy for an url to which we send SOAP rpc calls.
    """
    def __init__(self, url, prefix, agent=None, timeout=web.HTTP_TIMEOUT):
        """
        Init the proxy, it will connect to the given url, using the
        given soap namespace.

        @param url: The url of the remote host to call
        @param prefix: The namespace prefix to use, eg.
            'urn:schemas-upnp-org:service:WANIPConnection:1'
        @param agent: the L{twisted.web.iweb.IAgent} to post with
        """
        logging.debug("Soap Proxy: '%s', prefix: '%s'", url, prefix)
        self._url = url
        self._prefix = prefix
        self._agent = agent
        self._timeout = timeout

    def call(self, method, args=()):
        """
        Call the given remote method with the given arguments.

        Returns a deferred, called with the L{SoapResponse} of the device.

        @param method: The method name to call, eg. 'GetExternalIPAddress'
        @param args: The parameters of the call, as ordered (name, value) pairs
        @rtype: L{twisted.internet.defer.Deferred}
        """
        payload = build_envelope(method, self._prefix, args)
        logging.debug("SOAP Payload:\n%s", payload)

        return web.get_page(self._url, method=b'POST', postdata=payload,
            headers={
                'Content-Type': 'text/xml; charset="utf-8"',
                'SOAPAction': '"%s#%s"' % (self._prefix, method),
            }, agent=self._agent, timeout=self._timeout,
        ).addCallbacks(self._got_page, self._got_error)

    def _got_page(self, result):
        """
        The http POST command was successful, we parse the SOAP
        answer, and return it.

        @param result: the xml content
        """
        parsed = parse_response(result)

        logging.debug("SOAP Answer:\n%s", result)
        logging.debug("SOAP Parsed Answer: %r", parsed)

        return parsed

    def _got_error(self, res):
        """
        The HTTP POST command did not succeed, depending on the error type:
            - it's a SOAP fault, we parse it and raise a L{SoapError}.
            - it's another type of error (http, other), we pass it on as is
        """
        logging.debug("SOAP Error:\n%s", res)

        if res.check(error.Error):
            logging.debug("SOAP Error content:\n%s", res.value.response)
            fault = parse_fault(res.value.response or b'')
            if fault is not None:
                raise fault
        return res
