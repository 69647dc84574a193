"""
Port mapping actions on a found gateway: add, delete, and walking the
gateway's mapping table.

Every function takes the L{natupnp.gateway.GatewaySession} to work on and
returns a deferred.

@author: Raphael Slinckx
@copyright: Copyright 2005
@license: LGPL
"""

import logging
from collections import namedtuple

from twisted.internet import defer

from natupnp import options

DEFAULT_PROTOCOL = 'TCP'
DEFAULT_DESCRIPTION = 'node:nat:upnp'

Endpoint = namedtuple('Endpoint', ['host', 'port'])

class PortMapping(namedtuple('PortMapping', ['public', 'private', 'protocol',
        'enabled', 'description', 'ttl', 'local'])):
    """
    One entry of the gateway's mapping table.

        - public, private: L{Endpoint}s of the WAN and LAN sides
        - protocol: 'tcp' or 'udp', lower cased
        - enabled: whether the gateway reports the entry as active
        - description: as stored in the gateway
        - ttl: remaining lease, in seconds
        - local: True when the private side is this host
    """
    __slots__ = ()

def _protocol(protocol):
    return protocol.upper() if protocol else DEFAULT_PROTOCOL

def add_port_mapping(session, public, private, protocol=None, description=None, ttl=None):
    """
    Map the public (WAN) side to the private (LAN) side. Without a private
    host, the mapping points at this host.

    @param public: public port, see L{options.normalize_endpoint}
    @param private: private port or host/port, same forms
    @param protocol: "TCP" or "UDP", defaults to TCP
    @param description: shown in the router's table
    @param ttl: lease in seconds, defaults to L{options.DEFAULT_TTL}
    @return: A deferred called with the device's answer
    @rtype: L{twisted.internet.defer.Deferred}
    """
    remote, internal = options.normalize_options(public, private)

    return session.gateway.run('AddPortMapping', [
        ('NewRemoteHost', remote.host or ''),
        ('NewExternalPort', remote.port),
        ('NewProtocol', _protocol(protocol)),
        ('NewInternalPort', internal.port),
        ('NewInternalClient', internal.host or session.address),
        ('NewEnabled', 1),
        ('NewPortMappingDescription', description or DEFAULT_DESCRIPTION),
        ('NewLeaseDuration', options.resolve_ttl(ttl)),
    ])

def remove_port_mapping(session, public, protocol=None):
    """
    Remove the mapping of the given public port.

    @return: A deferred called with the device's answer
    @rtype: L{twisted.internet.defer.Deferred}
    """
    remote = options.normalize_endpoint(public)

    return session.gateway.run('DeletePortMapping', [
        ('NewRemoteHost', remote.host or ''),
        ('NewExternalPort', remote.port),
        ('NewProtocol', _protocol(protocol)),
    ])

def _parse_int(value):
    if isinstance(value, bool):
        raise ValueError('not a number: %r' % (value,))
    if not isinstance(value, int):
        value = str(value).strip()
        if not value.isdecimal():
            raise ValueError('not a number: %r' % (value,))
    value = int(value)
    if value < 0:
        raise ValueError('negative: %r' % (value,))
    return value

def parse_port_mapping(entry, address):
    """
    Build a L{PortMapping} out of a GetGenericPortMappingEntry answer.

    @param entry: the arguments of the answer
    @param address: the local ip of this host, to compute the local flag
    @raise ValueError: When the entry's numbers or protocol are unusable.
    """
    remote_host = entry.get('NewRemoteHost')
    enabled = entry.get('NewEnabled')
    protocol = entry.get('NewProtocol')
    if not isinstance(protocol, str):
        raise ValueError('no protocol in %r' % (entry,))

    private = Endpoint(entry.get('NewInternalClient'),
        _parse_int(entry.get('NewInternalPort')))
    return PortMapping(
        public=Endpoint(remote_host if isinstance(remote_host, str) else '',
            _parse_int(entry.get('NewExternalPort'))),
        private=private,
        protocol=protocol.lower(),
        # a string '1' does not count
        enabled=type(enabled) is int and enabled == 1,
        description=entry.get('NewPortMappingDescription'),
        ttl=_parse_int(entry.get('NewLeaseDuration')),
        local=private.host == address,
    )

def filter_port_mappings(mappings, local=False, description=None):
    """
    @param local: keep only the mappings pointing at this host
    @param description: keep only the mappings whose description matches
        this compiled pattern, or contains this string
    """
    if local:
        mappings = [m for m in mappings if m.local]
    if description:
        def matches(m):
            if not isinstance(m.description, str):
                return False
            if isinstance(description, str):
                return description in m.description
            return description.search(m.description) is not None
        mappings = [m for m in mappings if matches(m)]
    return mappings

@defer.inlineCallbacks
def get_port_mappings(session, local=False, description=None):
    """
    Retrieve the gateway's port mappings, by asking for entry 0, 1, 2...
    until the gateway refuses or answers nonsense.

    Some routers number their table from 1, so a failure on entry 0 is
    skipped; any other failure is taken as the end of the table.

    @see: L{filter_port_mappings} for local and description
    @return: A deferred called with a list of L{PortMapping}
    @rtype: L{twisted.internet.defer.Deferred}
    """
    results = []
    index = 0
    while True:
        try:
            response = yield session.gateway.run('GetGenericPortMappingEntry', [
                ('NewPortMappingIndex', index),
            ])
        except defer.CancelledError:
            raise
        except Exception as e:
            index += 1
            if index != 1:
                logging.debug("End of mapping table at %d: %s", index - 1, e)
                break
            logging.debug("No mapping at index 0, trying 1: %s", e)
            continue
        index += 1

        entry = response.result('GetGenericPortMappingEntry')
        if entry is None:
            break

        try:
            results.append(parse_port_mapping(entry, session.address))
        except ValueError as e:
            logging.debug("Skipping malformed mapping %r: %s", entry, e)

    return filter_port_mappings(results, local, description)
