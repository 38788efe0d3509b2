"""
Parsers for BIRD command output.

BIRD prints whatever its human-facing CLI prints, so each output shape
gets a small regex or field-splitting parser that turns text into a
model value. The parsers are pure: they never talk to the daemon.

Copyright (c) 2025 DNS Science.io, an After Dark Systems, LLC company.
All rights reserved.
"""

import logging
import re

from netaddr import AddrFormatError, IPNetwork

from birdsock.exceptions import DecodeError
from birdsock.models import (
    ASPath,
    PeerCounts,
    ROAStatus,
    RouteTotals,
    VRP,
)

logger = logging.getLogger(__name__)

# Example: "2076414 of 2076414 routes for 1038207 networks in table master4"
ROUTE_COUNT_PATTERN = re.compile(r"(\d+)\s+of\s+\d+\s+routes\s+for\s+(\d+)\s+networks")

# Trailing path annotation on route lines, e.g. "[AS15169i]"
SOURCE_ASN_PATTERN = re.compile(r"\[AS(\d+)[ie?]?\]")

AS_SET_PATTERN = re.compile(r"\{([^{}]*)\}")
# Set and confederation delimiters around AS path members, e.g. "(65001"
AS_PATH_DELIMITERS = "{}()[],"
DIGITS_PATTERN = re.compile(r"\d+")

AS_PATH_LABEL = "BGP.as_path:"
ESTABLISHED = "Established"

# Non-BGP protocols that can still carry a _v4/_v6 style name
SYSTEM_PROTOCOLS = ("device1", "kernel1")

ROA_STATUS_CODES = {
    "0": ROAStatus.UNKNOWN,
    "1": ROAStatus.VALID,
    "2": ROAStatus.INVALID,
}


def _first_field(line: str) -> str | None:
    fields = line.split()
    return fields[0] if fields else None


def _to_network(text: str) -> IPNetwork | None:
    try:
        return IPNetwork(text).cidr
    except (AddrFormatError, ValueError):
        return None


# =============================================================================
# Status
# =============================================================================

def parse_version(output: str) -> str:
    """Parse 'show status' output into the daemon version line.

    Output format:
        BIRD 2.0.8
        Router ID is 192.0.2.1
    """
    lines = output.split("\n")
    if not lines or not lines[0].strip():
        raise DecodeError("empty status output")
    return lines[0]


def parse_route_totals(output: str) -> RouteTotals:
    """Parse 'show route count' output.

    The first number of the count phrase is the RIB size, the number
    before 'networks' is the FIB size. The table name on the same line
    selects the family.
    """
    v4_rib = v4_fib = v6_rib = v6_fib = 0

    for line in output.split("\n"):
        match = ROUTE_COUNT_PATTERN.search(line)
        if not match:
            continue
        rib, fib = int(match.group(1)), int(match.group(2))
        if "master4" in line:
            v4_rib, v4_fib = rib, fib
        elif "master6" in line:
            v6_rib, v6_fib = rib, fib

    return RouteTotals(v4_rib=v4_rib, v4_fib=v4_fib, v6_rib=v6_rib, v6_fib=v6_fib)


def parse_peer_counts(output: str) -> PeerCounts:
    """Parse 'show protocols' output into session counts.

    Example:
        name     proto    table    state  since       info
        bgp1_v4  BGP      master4  up     10:00:00    Established
    """
    v4_configured = v4_established = 0
    v6_configured = v6_established = 0

    for line in output.split("\n"):
        fields = line.split()
        if len(fields) < 6:
            continue

        name = fields[0]
        established = fields[5] == ESTABLISHED

        if "_v4" not in name and "_v6" not in name:
            continue
        if any(proto in line for proto in SYSTEM_PROTOCOLS):
            continue

        if "_v4" in name:
            v4_configured += 1
            v4_established += established
        else:
            v6_configured += 1
            v6_established += established

    return PeerCounts(
        v4_configured=v4_configured,
        v4_established=v4_established,
        v6_configured=v6_configured,
        v6_established=v6_established,
    )


# =============================================================================
# Route table scans
# =============================================================================

def extract_source_asns(output: str) -> set[int]:
    """Collect the unique origin ASNs annotated on route lines."""
    asns = set()
    for line in output.split("\n"):
        match = SOURCE_ASN_PATTERN.search(line)
        if match:
            asns.add(int(match.group(1)))
    return asns


def parse_mask_histogram(output: str) -> dict[str, int]:
    """Count route lines per prefix length.

    Keys are the mask lengths exactly as printed ("24", "48", ...).
    """
    histogram: dict[str, int] = {}
    for line in output.split("\n"):
        first = _first_field(line)
        if not first or "/" not in first:
            continue
        parts = first.split("/")
        if len(parts) == 2:
            histogram[parts[1]] = histogram.get(parts[1], 0) + 1
    return histogram


def parse_count(output: str) -> int:
    """Parse the result of a '... count' query (first token)."""
    first = _first_field(output)
    if first is None:
        return 0
    if not first.isdigit():
        logger.debug("Count output does not start with a number: %r", first)
        return 0
    return int(first)


def count_route_lines(output: str) -> int:
    """Count lines that begin with an IP literal.

    This is a heuristic: a prose line that starts with a digit is
    counted as a route too.
    """
    count = 0
    for line in output.strip().split("\n"):
        if line and (line[0].isdigit() or line[0] == ":"):
            count += 1
    return count


def parse_prefixes(output: str) -> list[IPNetwork]:
    """Collect the prefixes that start route lines, in output order."""
    prefixes = []
    for line in output.split("\n"):
        first = _first_field(line)
        if not first or "/" not in first:
            continue
        network = _to_network(first)
        if network is None:
            logger.debug("Skipping unparsable prefix %r", first)
            continue
        prefixes.append(network)
    return prefixes


def parse_route(output: str) -> IPNetwork | None:
    """Return the first prefix in 'show route for' output, if any."""
    for line in output.split("\n"):
        first = _first_field(line)
        if first and "/" in first:
            network = _to_network(first)
            if network is not None:
                return network
    return None


# =============================================================================
# AS paths
# =============================================================================

def extract_as_path_text(output: str) -> str | None:
    """Return the text after the BGP.as_path attribute label, if present."""
    for line in output.split("\n"):
        if AS_PATH_LABEL in line:
            return line.split(AS_PATH_LABEL, 1)[1].strip()
    return None


def _parse_asn_token(token: str) -> int:
    token = token.strip(AS_PATH_DELIMITERS)
    if not token.isdigit():
        raise DecodeError(f"invalid ASN in AS path: {token!r}")
    return int(token)


def decode_as_path(text: str) -> ASPath:
    """Split an AS path string into the sequence and an AS-SET.

    Examples:
        "3356 12345"             -> path [3356, 12345], set []
        "3356 12345 9876 {1212}" -> path [3356, 12345, 9876], set [1212]

    Only a single AS-SET block is reported; with several blocks the set
    is left empty and the blocks are dropped from the path. Confederation
    segments such as "(65001 65002)" stay in the path in order.
    """
    blocks = AS_SET_PATTERN.findall(text)

    as_set = []
    if len(blocks) == 1:
        as_set = [_parse_asn_token(token) for token in blocks[0].replace(",", " ").split()]

    sequence = AS_SET_PATTERN.sub(" ", text)
    path = [
        _parse_asn_token(token)
        for token in sequence.split()
        if token.strip(AS_PATH_DELIMITERS)
    ]

    return ASPath(path=path, as_set=as_set)


def parse_origin_asn(as_path_text: str) -> int | None:
    """Return the origin ASN (last path element, AS-SETs removed)."""
    fields = AS_SET_PATTERN.sub("", as_path_text).split()
    if not fields:
        return None
    match = DIGITS_PATTERN.search(fields[-1])
    if not match:
        return None
    return int(match.group(0))


# =============================================================================
# RPKI
# =============================================================================

def parse_roa_status(output: str) -> ROAStatus | None:
    """Parse 'eval roa_check(...)' output such as '(enum 35)1'."""
    if not output:
        return None
    return ROA_STATUS_CODES.get(output[-1])


def parse_vrps(output: str) -> list[VRP]:
    """Parse ROA table lines such as '192.0.2.0/24-24 AS64496 [...]'.

    Raises:
        DecodeError: A prefix or maximum length does not parse
    """
    vrps = []
    for line in output.split("\n"):
        first = _first_field(line)
        if not first or "-" not in first:
            continue
        parts = first.split("-")
        if len(parts) != 2:
            continue

        network = _to_network(parts[0])
        if network is None:
            raise DecodeError(f"invalid VRP prefix: {parts[0]!r}")
        try:
            max_length = int(parts[1])
        except ValueError as e:
            raise DecodeError(f"invalid VRP max length: {parts[1]!r}") from e

        vrps.append(VRP(prefix=network, max_length=max_length))
    return vrps


def parse_invalid_line(line: str) -> tuple[str, str] | None:
    """Extract (prefix, origin ASN) from an RPKI-invalid route line.

    Example:
        192.0.2.0/24  unreachable [bgp1 2025-11-19 from 192.0.2.1] * (100) [AS64496i]

    The ASN is the first number after the first '['. On lines shaped
    like the example that is the protocol name's digit run ('1'), not
    the path annotation.
    """
    fields = line.split()
    if len(fields) < 2:
        return None

    start = line.find("[")
    if start == -1:
        return None

    number = DIGITS_PATTERN.search(line, start)
    if not number:
        return None
    return fields[0], number.group(0)


def collect_invalids(output: str, inventory: dict[str, list[str]]) -> dict[str, list[str]]:
    """Add the invalid prefixes found in output to an ASN-keyed inventory."""
    for line in output.split("\n"):
        parsed = parse_invalid_line(line)
        if parsed is None:
            continue
        prefix, asn = parsed
        inventory.setdefault(asn, []).append(prefix)
    return inventory
