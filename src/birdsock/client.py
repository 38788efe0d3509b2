"""
Client facade for the BIRD control socket.

Copyright (c) 2025 DNS Science.io, an After Dark Systems, LLC company.
All rights reserved.
"""

from netaddr import IPNetwork

from birdsock import decoders
from birdsock.config import BIRD2_SOCKET, BIRD3_SOCKET
from birdsock.decoders import Querier
from birdsock.models import (
    ASNStatistics,
    ASPath,
    LargeCommunityCounts,
    MaskDistribution,
    PeerCounts,
    ROACounts,
    ROAStatus,
    RouteTotals,
    VRP,
)
from birdsock.session import DEFAULT_TIMEOUT, query_socket


class BirdClient:
    """
    Typed client for a BIRD daemon's control socket.

    Every method opens a fresh connection per command; nothing is
    cached or retried.

    Usage:
        client = BirdClient("/run/bird.ctl")
        totals = client.get_bgp_total()
        print(totals.v4_rib, totals.v6_rib)
    """

    def __init__(
        self,
        socket_path: str,
        timeout: float = DEFAULT_TIMEOUT,
        querier: Querier | None = None,
    ):
        """Initialize the client.

        Args:
            socket_path: Filesystem path of the control socket
            timeout: Deadline in seconds for each exchange
            querier: Replacement for the socket transport, mainly for tests
        """
        self.socket_path = socket_path
        self.timeout = timeout
        self._querier = querier

    @classmethod
    def bird2(cls, **kwargs) -> "BirdClient":
        """Client bound to the default BIRD 2 socket path."""
        return cls(BIRD2_SOCKET, **kwargs)

    @classmethod
    def bird3(cls, **kwargs) -> "BirdClient":
        """Client bound to the default BIRD 3 socket path."""
        return cls(BIRD3_SOCKET, **kwargs)

    def __repr__(self) -> str:
        return f"BirdClient(socket_path={self.socket_path!r}, timeout={self.timeout})"

    def _query(self, command: str) -> str:
        if self._querier is not None:
            return self._querier(command)
        return query_socket(self.socket_path, command, timeout=self.timeout)

    def run_command(self, command: str) -> str:
        """Run an arbitrary command and return its raw output."""
        return self._query(command)

    def get_version(self) -> str:
        return decoders.get_version(self._query)

    def get_bgp_total(self) -> RouteTotals:
        return decoders.get_bgp_total(self._query)

    def get_peers(self) -> PeerCounts:
        return decoders.get_peers(self._query)

    def get_total_source_asns(self) -> ASNStatistics:
        return decoders.get_total_source_asns(self._query)

    def get_masks(self) -> MaskDistribution:
        return decoders.get_masks(self._query)

    def get_roas(self) -> ROACounts:
        return decoders.get_roas(self._query)

    def get_large_communities(self) -> LargeCommunityCounts:
        return decoders.get_large_communities(self._query)

    def get_ipv4_from_source(self, asn: int) -> list[IPNetwork]:
        return decoders.get_ipv4_from_source(self._query, asn)

    def get_ipv6_from_source(self, asn: int) -> list[IPNetwork]:
        return decoders.get_ipv6_from_source(self._query, asn)

    def get_as_path_from_ip(self, ip: str) -> ASPath | None:
        return decoders.get_as_path_from_ip(self._query, ip)

    def get_origin_from_ip(self, ip: str) -> int | None:
        return decoders.get_origin_from_ip(self._query, ip)

    def get_route(self, ip: str) -> IPNetwork | None:
        return decoders.get_route(self._query, ip)

    def get_roa(self, prefix: str | IPNetwork, asn: int) -> ROAStatus | None:
        return decoders.get_roa(self._query, prefix, asn)

    def get_vrps(self, asn: int) -> list[VRP]:
        return decoders.get_vrps(self._query, asn)

    def get_invalids(self) -> dict[str, list[str]]:
        return decoders.get_invalids(self._query)
