"""
Data models for BIRD query results.

Every result is an immutable value built from a single decoder call and
holds no reference back to the connection that produced it.

Copyright (c) 2025 DNS Science.io, an After Dark Systems, LLC company.
All rights reserved.
"""

from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import Any

from netaddr import IPNetwork


# =============================================================================
# Enumerations
# =============================================================================

class AddressFamily(str, Enum):
    """Address families and the BIRD tables that hold them."""
    IPV4 = "ipv4"
    IPV6 = "ipv6"

    @property
    def table(self) -> str:
        """Main routing table name."""
        return "master4" if self is AddressFamily.IPV4 else "master6"

    @property
    def roa_table(self) -> str:
        """ROA table name."""
        return "roa_v4" if self is AddressFamily.IPV4 else "roa_v6"


class ROAStatus(IntEnum):
    """RPKI validation verdict, numbered as BIRD's roa_check() enum."""
    UNKNOWN = 0
    VALID = 1
    INVALID = 2

    @property
    def filter_name(self) -> str:
        """Name used in BIRD filter expressions (ROA_VALID etc.)."""
        return f"ROA_{self.name}"


# =============================================================================
# Count results
# =============================================================================

@dataclass(frozen=True)
class RouteTotals:
    """RIB and FIB sizes per address family."""
    v4_rib: int = 0
    v4_fib: int = 0
    v6_rib: int = 0
    v6_fib: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "v4_rib": self.v4_rib,
            "v4_fib": self.v4_fib,
            "v6_rib": self.v6_rib,
            "v6_fib": self.v6_fib,
        }


@dataclass(frozen=True)
class PeerCounts:
    """Configured and established BGP sessions per address family."""
    v4_configured: int = 0
    v4_established: int = 0
    v6_configured: int = 0
    v6_established: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "v4_configured": self.v4_configured,
            "v4_established": self.v4_established,
            "v6_configured": self.v6_configured,
            "v6_established": self.v6_established,
        }


@dataclass(frozen=True)
class ASNStatistics:
    """Unique origin ASN counts across address families.

    as4_only + as_both == as4, as6_only + as_both == as6 and
    as_union == as4_only + as6_only + as_both.
    """
    as4: int = 0
    as6: int = 0
    as_union: int = 0
    as4_only: int = 0
    as6_only: int = 0
    as_both: int = 0

    @classmethod
    def from_sets(cls, v4: set[int], v6: set[int]) -> "ASNStatistics":
        """Build statistics from the per-family origin ASN sets."""
        return cls(
            as4=len(v4),
            as6=len(v6),
            as_union=len(v4 | v6),
            as4_only=len(v4 - v6),
            as6_only=len(v6 - v4),
            as_both=len(v4 & v6),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "as4": self.as4,
            "as6": self.as6,
            "as_union": self.as_union,
            "as4_only": self.as4_only,
            "as6_only": self.as6_only,
            "as_both": self.as_both,
        }


@dataclass(frozen=True)
class ROACounts:
    """RPKI validation outcome tally per address family.

    The six counts come from separate queries, so they need not add up
    to the table size.
    """
    v4_valid: int = 0
    v4_invalid: int = 0
    v4_unknown: int = 0
    v6_valid: int = 0
    v6_invalid: int = 0
    v6_unknown: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "v4_valid": self.v4_valid,
            "v4_invalid": self.v4_invalid,
            "v4_unknown": self.v4_unknown,
            "v6_valid": self.v6_valid,
            "v6_invalid": self.v6_invalid,
            "v6_unknown": self.v6_unknown,
        }


@dataclass(frozen=True)
class LargeCommunityCounts:
    """Prefixes carrying RFC 8092 large communities."""
    v4: int = 0
    v6: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {"v4": self.v4, "v6": self.v6}


@dataclass(frozen=True)
class MaskDistribution:
    """Prefix-length histograms, keyed by the mask length as printed."""
    v4: dict[str, int] = field(default_factory=dict)
    v6: dict[str, int] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {"v4": dict(self.v4), "v6": dict(self.v6)}


# =============================================================================
# Lookup results
# =============================================================================

@dataclass(frozen=True)
class ASPath:
    """AS path for a destination.

    ``path`` keeps path order. ``as_set`` holds the members of a single
    AS-SET block and is empty otherwise.
    """
    path: list[int] = field(default_factory=list)
    as_set: list[int] = field(default_factory=list)

    @property
    def origin(self) -> int | None:
        """Last ASN of the path, if any."""
        return self.path[-1] if self.path else None

    def to_dict(self) -> dict[str, Any]:
        return {"path": list(self.path), "as_set": list(self.as_set)}


@dataclass(frozen=True)
class VRP:
    """Validated ROA Payload.

    max_length is taken from the daemon as-is.
    """
    prefix: IPNetwork
    max_length: int

    def to_dict(self) -> dict[str, Any]:
        return {"prefix": str(self.prefix), "max_length": self.max_length}
