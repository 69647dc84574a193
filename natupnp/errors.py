"""
Errors raised by the natupnp package.
"""

class UPnPError(Exception):
    """
    A generic UPnP error, with a descriptive message as content.
    """
    pass

class DiscoveryTimeout(UPnPError):
    """No gateway answered the M-SEARCH within the configured window."""
    pass

class MalformedResponse(UPnPError):
    """The device answered, but without the expected response element."""
    pass

class SoapError(UPnPError):
    """
    This is a SOAP fault returned by the device, not an HTTP error message.
    
    @ivar code: the UPnP error code, as an int (None if the fault had none)
    @ivar description: the UPnP errorDescription string
    """
    def __init__(self, code, description):
        UPnPError.__init__(self, code, description)
        self.code, self.description = code, description
    
    def __str__(self):
        return '%s %s' % (self.code, self.description)
