"""
Turns whatever the caller gave as a public/private address into a canonical
L{EndpointSpec}.

Accepted forms for each side:
    - an int: the port
    - a string holding a base-10 integer: the port
    - a mapping, or an object with host/port attributes (an L{EndpointSpec},
      a L{natupnp.portmapper.Endpoint}...): both fields read when present
    - anything else: an empty spec

Nothing here raises. Unknown shapes quietly become empty specs.
"""

from collections import namedtuple
from collections.abc import Mapping

DEFAULT_TTL = 60 * 30

EndpointSpec = namedtuple('EndpointSpec', ['host', 'port'], defaults=[None, None])

def _to_int(value):
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    if isinstance(value, str):
        value = value.strip()
        if value.lstrip('+-').isdecimal() and value.count('-') + value.count('+') <= 1:
            return int(value, 10)
    return None

def normalize_endpoint(raw):
    port = _to_int(raw)
    if port is not None:
        return EndpointSpec(port=port)
    if isinstance(raw, Mapping):
        return EndpointSpec(host=raw.get('host'), port=raw.get('port'))
    if hasattr(raw, 'host') or hasattr(raw, 'port'):
        return EndpointSpec(host=getattr(raw, 'host', None), port=getattr(raw, 'port', None))
    return EndpointSpec()

def normalize_options(public=None, private=None):
    """
    @return: the (remote, internal) L{EndpointSpec} pair
    """
    return normalize_endpoint(public), normalize_endpoint(private)

def resolve_ttl(raw):
    """Lease duration in seconds, L{DEFAULT_TTL} unless given as a number."""
    ttl = _to_int(raw)
    if ttl is None:
        return DEFAULT_TTL
    return ttl
