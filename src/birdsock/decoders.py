"""
Query decoders for the BIRD control socket.

Each decoder issues one or more commands through a query callable and
parses the replies into a model value. Decoders hold no state; a
daemon error from any sub-query aborts the whole call.

Decoders that issue several queries run them one after another with no
atomicity, so their counts may mix daemon states.

Copyright (c) 2025 DNS Science.io, an After Dark Systems, LLC company.
All rights reserved.
"""

import logging
from typing import Callable

from netaddr import AddrFormatError, IPAddress, IPNetwork

from birdsock import parsers
from birdsock.models import (
    AddressFamily,
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

logger = logging.getLogger(__name__)

# Takes a BIRD CLI command, returns the framed response text
Querier = Callable[[str], str]

CMD_STATUS = "show status"
CMD_ROUTE_COUNT = "show route count"
CMD_PROTOCOLS = "show protocols"
CMD_PRIMARY_TABLE = "show route primary table {table}"
CMD_ROA_FILTER = "show route primary table {table} where roa_check({roa_table}) = {state}"
CMD_LARGE_COMMUNITIES = "show route primary table {table} where bgp_large_community ~ [(*,*,*)]"
CMD_FROM_SOURCE = "show route primary table {table} where bgp_path ~ [= * {asn} =]"
CMD_ROUTE_ALL_FOR = "show route primary all for {ip}"
CMD_ROUTE_FOR = "show route primary for {ip}"
CMD_ROA_CHECK = "eval roa_check({roa_table}, {prefix}, {asn})"
CMD_VRPS = "show route all table {roa_table} where net.asn={asn}"

FAMILIES = (AddressFamily.IPV4, AddressFamily.IPV6)


def _normalise_ip(ip: str) -> str:
    """Canonical text form of an address, so the daemon sees one spelling."""
    try:
        return str(IPAddress(str(ip).strip()))
    except (AddrFormatError, ValueError) as e:
        raise ValueError(f"invalid IP address: {ip}") from e


def _normalise_prefix(prefix: str | IPNetwork) -> IPNetwork:
    try:
        return IPNetwork(str(prefix).strip()).cidr
    except (AddrFormatError, ValueError) as e:
        raise ValueError(f"invalid prefix: {prefix}") from e


def _roa_filter(family: AddressFamily, status: ROAStatus, count: bool = False) -> str:
    command = CMD_ROA_FILTER.format(
        table=family.table,
        roa_table=family.roa_table,
        state=status.filter_name,
    )
    return f"{command} count" if count else command


def get_version(query: Querier) -> str:
    """Return the daemon version line from 'show status'."""
    return parsers.parse_version(query(CMD_STATUS))


def get_bgp_total(query: Querier) -> RouteTotals:
    """Return RIB and FIB sizes for both families."""
    return parsers.parse_route_totals(query(CMD_ROUTE_COUNT))


def get_peers(query: Querier) -> PeerCounts:
    """Return configured and established BGP session counts."""
    return parsers.parse_peer_counts(query(CMD_PROTOCOLS))


def get_total_source_asns(query: Querier) -> ASNStatistics:
    """Return unique origin ASN counts and their overlap across families."""
    v4 = parsers.extract_source_asns(query(CMD_PRIMARY_TABLE.format(table="master4")))
    v6 = parsers.extract_source_asns(query(CMD_PRIMARY_TABLE.format(table="master6")))
    return ASNStatistics.from_sets(v4, v6)


def get_masks(query: Querier) -> MaskDistribution:
    """Return prefix-length histograms for both families."""
    v4 = parsers.parse_mask_histogram(query(CMD_PRIMARY_TABLE.format(table="master4")))
    v6 = parsers.parse_mask_histogram(query(CMD_PRIMARY_TABLE.format(table="master6")))
    return MaskDistribution(v4=v4, v6=v6)


def get_roas(query: Querier) -> ROACounts:
    """Return route counts per RPKI state and family.

    Issues six count queries in sequence.
    """
    counts = {}
    for family in FAMILIES:
        prefix = "v4" if family is AddressFamily.IPV4 else "v6"
        for status in (ROAStatus.VALID, ROAStatus.INVALID, ROAStatus.UNKNOWN):
            output = query(_roa_filter(family, status, count=True))
            counts[f"{prefix}_{status.name.lower()}"] = parsers.parse_count(output)
    return ROACounts(**counts)


def get_large_communities(query: Querier) -> LargeCommunityCounts:
    """Return the number of prefixes carrying large communities (RFC 8092)."""
    v4 = parsers.count_route_lines(query(CMD_LARGE_COMMUNITIES.format(table="master4")))
    v6 = parsers.count_route_lines(query(CMD_LARGE_COMMUNITIES.format(table="master6")))
    return LargeCommunityCounts(v4=v4, v6=v6)


def get_prefixes_from_source(
    query: Querier,
    asn: int,
    family: AddressFamily,
) -> list[IPNetwork]:
    """Return the networks originated by an ASN in one family."""
    command = CMD_FROM_SOURCE.format(table=family.table, asn=asn)
    return parsers.parse_prefixes(query(command))


def get_ipv4_from_source(query: Querier, asn: int) -> list[IPNetwork]:
    """Return all IPv4 networks originated by an ASN."""
    return get_prefixes_from_source(query, asn, AddressFamily.IPV4)


def get_ipv6_from_source(query: Querier, asn: int) -> list[IPNetwork]:
    """Return all IPv6 networks originated by an ASN."""
    return get_prefixes_from_source(query, asn, AddressFamily.IPV6)


def _as_path_text(query: Querier, ip: str) -> str | None:
    output = query(CMD_ROUTE_ALL_FOR.format(ip=ip))
    if not output:
        return None
    return parsers.extract_as_path_text(output)


def get_as_path_from_ip(query: Querier, ip: str) -> ASPath | None:
    """Return the AS path (and AS-SET) towards an IP, or None if unrouted."""
    text = _as_path_text(query, _normalise_ip(ip))
    if text is None:
        return None
    return parsers.decode_as_path(text)


def get_origin_from_ip(query: Querier, ip: str) -> int | None:
    """Return the origin ASN for an IP, or None if unrouted."""
    text = _as_path_text(query, _normalise_ip(ip))
    if text is None:
        return None
    return parsers.parse_origin_asn(text)


def get_route(query: Querier, ip: str) -> IPNetwork | None:
    """Return the FIB entry covering an IP, or None."""
    output = query(CMD_ROUTE_FOR.format(ip=_normalise_ip(ip)))
    if not output:
        return None
    return parsers.parse_route(output)


def get_roa(query: Querier, prefix: str | IPNetwork, asn: int) -> ROAStatus | None:
    """Evaluate the RPKI state of a (prefix, origin ASN) pair.

    Returns None when the daemon's answer is not a known state.
    """
    network = _normalise_prefix(prefix)
    family = AddressFamily.IPV6 if network.version == 6 else AddressFamily.IPV4
    command = CMD_ROA_CHECK.format(roa_table=family.roa_table, prefix=network, asn=asn)
    return parsers.parse_roa_status(query(command))


def get_vrps(query: Querier, asn: int) -> list[VRP]:
    """Return all Validated ROA Payloads for an ASN, IPv4 first."""
    vrps: list[VRP] = []
    for family in FAMILIES:
        output = query(CMD_VRPS.format(roa_table=family.roa_table, asn=asn))
        if output:
            vrps.extend(parsers.parse_vrps(output))
    return vrps


def get_invalids(query: Querier) -> dict[str, list[str]]:
    """Return ASNs advertising RPKI-invalid prefixes, with those prefixes."""
    inventory: dict[str, list[str]] = {}
    for family in FAMILIES:
        output = query(_roa_filter(family, ROAStatus.INVALID))
        parsers.collect_invalids(output, inventory)
    logger.debug("Found %d ASNs with invalid prefixes", len(inventory))
    return inventory
