"""
Command line front end for birdsock.

Provides one command per query plus raw command passthrough, rendering
results as rich tables or JSON.

Copyright (c) 2025 DNS Science.io, an After Dark Systems, LLC company.
All rights reserved.
"""

import json
from dataclasses import replace
from typing import Any, Callable

import click
from netaddr import AddrFormatError, IPAddress, IPNetwork
from rich.console import Console
from rich.table import Table

from birdsock.client import BirdClient
from birdsock.config import discover_socket, get_config
from birdsock.exceptions import BirdError
from birdsock.logging_config import configure_logging, get_logger
from birdsock.models import AddressFamily, ROAStatus

console = Console()
logger = get_logger(__name__)

MAX_ASN = 2**32 - 1

ROA_STYLES = {
    ROAStatus.VALID: "green",
    ROAStatus.INVALID: "red",
    ROAStatus.UNKNOWN: "yellow",
}


class ASNParamType(click.ParamType):
    """ASN argument, accepts '15169' or 'AS15169'."""
    name = "asn"

    def convert(self, value, param, ctx):
        if isinstance(value, int):
            return value
        text = str(value).strip().upper()
        if text.startswith("AS"):
            text = text[2:]
        if not text.isdigit() or int(text) > MAX_ASN:
            self.fail(f"Invalid ASN: {value}", param, ctx)
        return int(text)


class IPParamType(click.ParamType):
    """IPv4 or IPv6 address argument."""
    name = "ip"

    def convert(self, value, param, ctx):
        try:
            return IPAddress(str(value).strip())
        except (AddrFormatError, ValueError):
            self.fail(f"Invalid IP address: {value}", param, ctx)


class PrefixParamType(click.ParamType):
    """IPv4 or IPv6 prefix argument."""
    name = "prefix"

    def convert(self, value, param, ctx):
        try:
            return IPNetwork(str(value).strip()).cidr
        except (AddrFormatError, ValueError):
            self.fail(f"Invalid prefix: {value}", param, ctx)


ASN = ASNParamType()
IP = IPParamType()
PREFIX = PrefixParamType()


def _call(ctx: click.Context, func: Callable[[BirdClient], Any]) -> Any:
    """Run a client call, turning BIRD errors into a clean exit."""
    client: BirdClient = ctx.obj["client"]
    try:
        return func(client)
    except BirdError as e:
        logger.debug("Query against %s failed", client.socket_path, exc_info=e)
        console.print(f"[red]Error:[/red] {e}")
        raise SystemExit(1)


def _emit_json(data: Any) -> None:
    click.echo(json.dumps(data, indent=2))


def _family_table(title: str, columns: list[str], rows: list[tuple]) -> Table:
    table = Table(title=title)
    table.add_column("Family", style="cyan")
    for column in columns:
        table.add_column(column, justify="right")
    for row in rows:
        table.add_row(*[str(value) for value in row])
    return table


# =============================================================================
# Main command group
# =============================================================================

@click.group()
@click.option("--socket", "socket_path", help="BIRD control socket path")
@click.option(
    "--daemon",
    type=click.Choice(["bird2", "bird3"]),
    help="Daemon version, selects the default socket path",
)
@click.option("--timeout", type=float, help="Deadline in seconds per query")
@click.option("--json", "as_json", is_flag=True, help="Output results as JSON")
@click.option("--debug", is_flag=True, help="Enable debug logging")
@click.option("--log-file", is_flag=True, help="Also log to ~/.birdsock/logs")
@click.pass_context
def main(ctx, socket_path, daemon, timeout, as_json, debug, log_file):
    """Query a BIRD routing daemon over its control socket.

    Examples:
        birdsock totals
        birdsock --socket /run/bird3.ctl peers
        birdsock --json prefixes AS13335
    """
    configure_logging(debug=debug, log_to_file=log_file)

    config = get_config()
    if daemon:
        config = replace(config, daemon=daemon)

    if not socket_path:
        # A configured path or daemon wins over probing
        if config.socket_path or daemon or config.daemon != "bird2":
            socket_path = config.resolved_socket_path
        else:
            socket_path = discover_socket() or config.resolved_socket_path

    logger.debug("Using BIRD socket %s", socket_path)

    ctx.ensure_object(dict)
    ctx.obj["client"] = BirdClient(
        socket_path,
        timeout=timeout if timeout is not None else config.timeout,
    )
    ctx.obj["json"] = as_json


# =============================================================================
# Summary commands
# =============================================================================

@main.command()
@click.pass_context
def version(ctx):
    """Show the daemon version."""
    result = _call(ctx, lambda c: c.get_version())
    if ctx.obj["json"]:
        _emit_json({"version": result})
        return
    console.print(f"[cyan]Daemon:[/cyan] {result}")


@main.command()
@click.pass_context
def totals(ctx):
    """Show RIB and FIB sizes."""
    result = _call(ctx, lambda c: c.get_bgp_total())
    if ctx.obj["json"]:
        _emit_json(result.to_dict())
        return
    console.print(_family_table(
        "Route Totals",
        ["RIB", "FIB"],
        [("IPv4", result.v4_rib, result.v4_fib), ("IPv6", result.v6_rib, result.v6_fib)],
    ))


@main.command()
@click.pass_context
def peers(ctx):
    """Show configured and established BGP sessions."""
    result = _call(ctx, lambda c: c.get_peers())
    if ctx.obj["json"]:
        _emit_json(result.to_dict())
        return
    console.print(_family_table(
        "BGP Peers",
        ["Configured", "Established"],
        [
            ("IPv4", result.v4_configured, result.v4_established),
            ("IPv6", result.v6_configured, result.v6_established),
        ],
    ))


@main.command()
@click.pass_context
def asns(ctx):
    """Show unique origin ASN counts."""
    result = _call(ctx, lambda c: c.get_total_source_asns())
    if ctx.obj["json"]:
        _emit_json(result.to_dict())
        return

    table = Table(title="Origin ASNs", show_header=False, box=None)
    table.add_column("Property", style="cyan")
    table.add_column("Value", justify="right")
    table.add_row("IPv4", str(result.as4))
    table.add_row("IPv6", str(result.as6))
    table.add_row("Total unique", str(result.as_union))
    table.add_row("IPv4 only", str(result.as4_only))
    table.add_row("IPv6 only", str(result.as6_only))
    table.add_row("Both", str(result.as_both))
    console.print(table)


@main.command()
@click.pass_context
def masks(ctx):
    """Show the prefix-length distribution."""
    result = _call(ctx, lambda c: c.get_masks())
    if ctx.obj["json"]:
        _emit_json(result.to_dict())
        return

    for title, histogram in (("IPv4 Masks", result.v4), ("IPv6 Masks", result.v6)):
        table = Table(title=title)
        table.add_column("Mask", style="cyan")
        table.add_column("Prefixes", justify="right")
        for mask, count in sorted(histogram.items(), key=lambda kv: kv[1], reverse=True):
            table.add_row(f"/{mask}", str(count))
        console.print(table)


@main.command()
@click.pass_context
def roas(ctx):
    """Show route counts per RPKI state."""
    result = _call(ctx, lambda c: c.get_roas())
    if ctx.obj["json"]:
        _emit_json(result.to_dict())
        return
    console.print(_family_table(
        "RPKI States",
        ["Valid", "Invalid", "Unknown"],
        [
            ("IPv4", result.v4_valid, result.v4_invalid, result.v4_unknown),
            ("IPv6", result.v6_valid, result.v6_invalid, result.v6_unknown),
        ],
    ))


@main.command()
@click.pass_context
def large(ctx):
    """Show prefixes carrying large communities."""
    result = _call(ctx, lambda c: c.get_large_communities())
    if ctx.obj["json"]:
        _emit_json(result.to_dict())
        return
    console.print(_family_table(
        "Large Communities",
        ["Prefixes"],
        [("IPv4", result.v4), ("IPv6", result.v6)],
    ))


# =============================================================================
# Lookup commands
# =============================================================================

@main.command()
@click.argument("asn", type=ASN)
@click.option(
    "--family",
    type=click.Choice(["4", "6", "all"]),
    default="all",
    show_default=True,
    help="Address family to list",
)
@click.pass_context
def prefixes(ctx, asn, family):
    """List prefixes originated by an ASN.

    Examples:
        birdsock prefixes 15169
        birdsock prefixes AS13335 --family 6
    """
    families = {
        "4": [AddressFamily.IPV4],
        "6": [AddressFamily.IPV6],
        "all": [AddressFamily.IPV4, AddressFamily.IPV6],
    }[family]

    found = []
    for fam in families:
        if fam is AddressFamily.IPV4:
            found.extend(_call(ctx, lambda c: c.get_ipv4_from_source(asn)))
        else:
            found.extend(_call(ctx, lambda c: c.get_ipv6_from_source(asn)))

    if ctx.obj["json"]:
        _emit_json({"asn": asn, "prefixes": [str(p) for p in found]})
        return

    console.print(f"[cyan]Found {len(found)} prefixes for AS{asn}[/cyan]")
    for prefix in found:
        console.print(f"  {prefix}")


@main.command()
@click.argument("ip", type=IP)
@click.pass_context
def origin(ctx, ip):
    """Show the origin ASN for an IP."""
    result = _call(ctx, lambda c: c.get_origin_from_ip(str(ip)))
    if ctx.obj["json"]:
        _emit_json({"ip": str(ip), "origin": result})
        return
    if result is None:
        console.print("[yellow]Origin not found[/yellow]")
    else:
        console.print(f"[cyan]Origin ASN:[/cyan] AS{result}")


@main.command()
@click.argument("ip", type=IP)
@click.pass_context
def aspath(ctx, ip):
    """Show the AS path towards an IP."""
    result = _call(ctx, lambda c: c.get_as_path_from_ip(str(ip)))
    if ctx.obj["json"]:
        _emit_json({"ip": str(ip), "as_path": result.to_dict() if result else None})
        return
    if result is None:
        console.print("[yellow]AS path not found[/yellow]")
        return
    console.print(f"[cyan]AS Path:[/cyan] {' '.join(str(a) for a in result.path)}")
    if result.as_set:
        console.print(f"[cyan]AS Set:[/cyan] {{{' '.join(str(a) for a in result.as_set)}}}")


@main.command()
@click.argument("ip", type=IP)
@click.pass_context
def route(ctx, ip):
    """Show the FIB entry covering an IP."""
    result = _call(ctx, lambda c: c.get_route(str(ip)))
    if ctx.obj["json"]:
        _emit_json({"ip": str(ip), "route": str(result) if result else None})
        return
    if result is None:
        console.print("[yellow]Route not found[/yellow]")
    else:
        console.print(f"[cyan]Route:[/cyan] {result}")


@main.command()
@click.argument("prefix", type=PREFIX)
@click.argument("asn", type=ASN)
@click.pass_context
def roa(ctx, prefix, asn):
    """Evaluate the RPKI state of a prefix and origin ASN.

    Examples:
        birdsock roa 1.1.1.0/24 13335
    """
    result = _call(ctx, lambda c: c.get_roa(prefix, asn))
    if ctx.obj["json"]:
        _emit_json({
            "prefix": str(prefix),
            "asn": asn,
            "status": result.name.lower() if result is not None else None,
        })
        return
    if result is None:
        console.print("[yellow]ROA status not found[/yellow]")
    else:
        style = ROA_STYLES[result]
        console.print(f"[cyan]ROA Status:[/cyan] [{style}]{result.name.capitalize()}[/{style}]")


@main.command()
@click.argument("asn", type=ASN)
@click.pass_context
def vrps(ctx, asn):
    """List Validated ROA Payloads for an ASN."""
    result = _call(ctx, lambda c: c.get_vrps(asn))
    if ctx.obj["json"]:
        _emit_json({"asn": asn, "vrps": [v.to_dict() for v in result]})
        return

    table = Table(title=f"VRPs for AS{asn}")
    table.add_column("Prefix", style="cyan")
    table.add_column("Max Length", justify="right")
    for vrp in result:
        table.add_row(str(vrp.prefix), str(vrp.max_length))
    console.print(table)


@main.command()
@click.option("--limit", type=int, default=0, help="Show at most this many ASNs (0 = all)")
@click.pass_context
def invalids(ctx, limit):
    """List ASNs advertising RPKI-invalid prefixes."""
    result = _call(ctx, lambda c: c.get_invalids())
    if ctx.obj["json"]:
        _emit_json(result)
        return

    console.print(f"[cyan]Found {len(result)} ASNs with invalid prefixes[/cyan]")
    table = Table()
    table.add_column("ASN", style="cyan")
    table.add_column("Count", justify="right")
    table.add_column("Prefixes")

    items = list(result.items())
    shown = items[:limit] if limit > 0 else items
    for asn, nets in shown:
        table.add_row(f"AS{asn}", str(len(nets)), ", ".join(nets))
    console.print(table)

    if len(items) > len(shown):
        console.print(f"[dim]... and {len(items) - len(shown)} more ASNs[/dim]")


@main.command("run")
@click.argument("command", nargs=-1, required=True)
@click.pass_context
def run_command(ctx, command):
    """Run a raw BIRD command.

    Examples:
        birdsock run show protocols all
    """
    text = " ".join(command)
    result = _call(ctx, lambda c: c.run_command(text))
    if ctx.obj["json"]:
        _emit_json({"command": text, "output": result})
        return
    click.echo(result)


if __name__ == "__main__":
    main()
