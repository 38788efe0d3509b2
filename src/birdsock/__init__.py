"""
birdsock - BIRD routing daemon control socket client

Talks to BIRD's line-oriented control protocol and decodes the CLI
output into typed results: route totals, peer counts, origin ASN
statistics, prefix lists, AS paths and RPKI validation states.

Copyright (c) 2025 DNS Science.io, an After Dark Systems, LLC company.
All rights reserved.
"""

__version__ = "0.1.0"
__author__ = "DNS Science.io"
__copyright__ = "Copyright (c) 2025 DNS Science.io, an After Dark Systems, LLC company"

from birdsock.client import BirdClient
from birdsock.exceptions import (
    BirdError,
    BirdConnectionError,
    ProtocolError,
    TransportError,
    TransportTimeout,
    DaemonError,
    DecodeError,
)
from birdsock.models import (
    AddressFamily,
    ROAStatus,
    RouteTotals,
    PeerCounts,
    ASNStatistics,
    ROACounts,
    LargeCommunityCounts,
    MaskDistribution,
    ASPath,
    VRP,
)
from birdsock.session import query_socket

__all__ = [
    # Client
    "BirdClient",
    "query_socket",
    # Exceptions
    "BirdError",
    "BirdConnectionError",
    "ProtocolError",
    "TransportError",
    "TransportTimeout",
    "DaemonError",
    "DecodeError",
    # Models
    "AddressFamily",
    "ROAStatus",
    "RouteTotals",
    "PeerCounts",
    "ASNStatistics",
    "ROACounts",
    "LargeCommunityCounts",
    "MaskDistribution",
    "ASPath",
    "VRP",
]
