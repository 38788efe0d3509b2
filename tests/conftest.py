"""Pytest configuration and fixtures."""

import shutil
import socket
import tempfile
import threading
from pathlib import Path

import pytest

from birdsock.client import BirdClient


class FakeQuerier:
    """Stands in for the socket transport with canned daemon output."""

    def __init__(self, responses: dict[str, str]):
        self.responses = responses
        self.commands: list[str] = []

    def __call__(self, command: str) -> str:
        self.commands.append(command)
        if command not in self.responses:
            raise AssertionError(f"unexpected command: {command}")
        response = self.responses[command]
        if isinstance(response, Exception):
            raise response
        return response


class FakeBirdDaemon:
    """Minimal BIRD control socket served from a background thread.

    Each connection gets the greeting, one command is read and the
    scripted response for it is written back verbatim. A response of
    None makes the daemon stall until it is closed.
    """

    def __init__(self, path: str, greeting: str = "0001 BIRD 2.0.8 ready.\n"):
        self.path = path
        self.greeting = greeting
        self.responses: dict[str, str | None] = {}
        self.received: list[bytes] = []
        self._stop = threading.Event()

        self._sock = socket.socket(socket.AF_UNIX, socket.SOCK_STREAM)
        self._sock.bind(path)
        self._sock.listen(5)
        self._sock.settimeout(0.1)
        self._thread = threading.Thread(target=self._serve, daemon=True)
        self._thread.start()

    def _serve(self) -> None:
        while not self._stop.is_set():
            try:
                conn, _ = self._sock.accept()
            except socket.timeout:
                continue
            except OSError:
                return
            conn.settimeout(5)
            with conn:
                try:
                    self._handle(conn)
                except OSError:
                    pass

    def _handle(self, conn: socket.socket) -> None:
        conn.sendall(self.greeting.encode())
        if not self.greeting.startswith("0001"):
            return

        with conn.makefile("rb") as reader:
            line = reader.readline()
        if not line:
            return
        self.received.append(line)

        command = line.decode().rstrip("\r\n")
        response = self.responses.get(command, "9001 syntax error, unexpected CF_SYM_UNDEFINED\n")
        if response is None:
            self._stop.wait(5)
            return
        conn.sendall(response.encode())

    def close(self) -> None:
        self._stop.set()
        self._sock.close()
        self._thread.join(timeout=2)


@pytest.fixture
def fake_querier():
    """Factory for FakeQuerier instances."""
    return FakeQuerier


@pytest.fixture
def make_client():
    """Build a BirdClient backed by canned responses.

    Returns (client, querier) so tests can inspect issued commands.
    """
    def _make(responses: dict[str, str]) -> tuple[BirdClient, FakeQuerier]:
        querier = FakeQuerier(responses)
        return BirdClient("/nonexistent/bird.ctl", querier=querier), querier
    return _make


@pytest.fixture
def socket_dir():
    """Short temporary directory for Unix socket paths."""
    path = tempfile.mkdtemp(prefix="bird")
    yield Path(path)
    shutil.rmtree(path, ignore_errors=True)


@pytest.fixture
def fake_bird(socket_dir):
    """Running fake BIRD daemon."""
    daemon = FakeBirdDaemon(str(socket_dir / "bird.ctl"))
    yield daemon
    daemon.close()


@pytest.fixture
def make_bird(socket_dir):
    """Factory for fake daemons with a custom greeting."""
    daemons = []

    def _make(greeting: str) -> FakeBirdDaemon:
        daemon = FakeBirdDaemon(str(socket_dir / f"bird{len(daemons)}.ctl"), greeting=greeting)
        daemons.append(daemon)
        return daemon

    yield _make
    for daemon in daemons:
        daemon.close()


@pytest.fixture
def route_count_output() -> str:
    """'show route count' output as returned by the transport."""
    return (
        "1007-2076414 of 2076414 routes for 1038207 networks in table master4\n"
        "471160 of 471160 routes for 235580 networks in table master6\n"
        "Total: 2547574 of 2547574 routes for 1273787 networks in 2 tables"
    )


@pytest.fixture
def protocols_output() -> str:
    """'show protocols' output with two IPv4 and one IPv6 session."""
    return (
        "BIRD 2.0.8 ready.\n"
        "name     proto    table    state  since       info\n"
        "device1  Device   ---      up     10:00:00\n"
        "kernel1  Kernel   master4  up     10:00:00\n"
        "bgp1_v4  BGP      master4  up     10:00:00    Established\n"
        "  BGP state:          Established\n"
        "  Neighbor address:   192.0.2.1\n"
        "  Neighbor AS:        65001\n"
        "bgp2_v4  BGP      master4  start  10:00:00    Connect\n"
        "  BGP state:          Connect\n"
        "  Neighbor address:   192.0.2.2\n"
        "  Neighbor AS:        65002\n"
        "bgp3_v6  BGP      master6  up     10:00:00    Established\n"
        "  BGP state:          Established\n"
        "  Neighbor address:   2001:db8::1\n"
        "  Neighbor AS:        65003"
    )


@pytest.fixture
def master4_output() -> str:
    """'show route primary table master4' output."""
    return (
        "Table master4:\n"
        "1.0.0.0/24           unicast [bgp1_v4 2025-11-19 from 192.0.2.1] * (100) [AS13335i]\n"
        "\tvia 192.0.2.1 on eth0\n"
        "8.8.8.0/24           unicast [bgp1_v4 2025-11-19 from 192.0.2.1] * (100) [AS15169i]\n"
        "\tvia 192.0.2.1 on eth0\n"
        "8.8.4.0/24           unicast [bgp1_v4 2025-11-19 from 192.0.2.1] * (100) [AS15169i]\n"
        "\tvia 192.0.2.1 on eth0\n"
        "3.0.0.0/16           unicast [bgp1_v4 2025-11-19 from 192.0.2.1] * (100) [AS16509?]\n"
        "\tvia 192.0.2.1 on eth0"
    )


@pytest.fixture
def master6_output() -> str:
    """'show route primary table master6' output."""
    return (
        "Table master6:\n"
        "2606:4700::/32       unicast [bgp3_v6 2025-11-19 from 2001:db8::1] * (100) [AS13335i]\n"
        "\tvia 2001:db8::1 on eth0\n"
        "2001:4860::/32       unicast [bgp3_v6 2025-11-19 from 2001:db8::1] * (100) [AS15169i]\n"
        "\tvia 2001:db8::1 on eth0\n"
        "2a00:1450::/29       unicast [bgp3_v6 2025-11-19 from 2001:db8::1] * (100) [AS64500e]\n"
        "\tvia 2001:db8::1 on eth0"
    )


@pytest.fixture
def route_all_output() -> str:
    """'show route primary all for 8.8.8.8' output."""
    return (
        "Table master4:\n"
        "8.8.8.0/24           unicast [bgp1_v4 2025-11-19 from 192.0.2.1] * (100) [AS15169i]\n"
        "\tvia 192.0.2.1 on eth0\n"
        "\tType: BGP univ\n"
        "\tBGP.origin: IGP\n"
        "\tBGP.as_path: 3356 15169\n"
        "\tBGP.next_hop: 192.0.2.1\n"
        "\tBGP.local_pref: 100"
    )
