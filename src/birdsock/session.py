"""
BIRD control socket session transport.

Handles one request/response exchange with the daemon:

1. Connect to the Unix socket
2. Read the greeting (must start with '0001')
3. Send the command, CRLF terminated
4. Read response lines until a terminal status code

Response codes:
- 0xxx: success, terminates the response
- 1xxx-7xxx: data lines, the response continues
- 8xxx: runtime errors
- 9xxx: parse errors

Lines starting with a single space continue the previous coded line.
Anything else is raw payload (e.g. a route line such as '8.8.8.0/24').

Copyright (c) 2025 DNS Science.io, an After Dark Systems, LLC company.
All rights reserved.
"""

import logging
import re
import socket
import time
from dataclasses import dataclass
from enum import Enum
from typing import BinaryIO, Iterable, Iterator

from birdsock.exceptions import (
    BirdConnectionError,
    DaemonError,
    ProtocolError,
    TransportError,
    TransportTimeout,
)

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 10.0
GREETING_CODE = "0001"
COMPLETION_CODE = "0000"

_CODE_RE = re.compile(r"^[0-9]{4}")


class LineKind(str, Enum):
    """Classification of a single response line."""
    CONTINUATION = "continuation"
    DATA = "data"
    SUCCESS = "success"
    ERROR = "error"
    RAW = "raw"
    EMPTY = "empty"


@dataclass(frozen=True)
class ResponseLine:
    """A classified response line and the payload it contributes."""
    kind: LineKind
    payload: str | None = None

    @property
    def terminal(self) -> bool:
        return self.kind in (LineKind.SUCCESS, LineKind.ERROR)


def _coded_payload(line: str) -> str | None:
    if len(line) > 4 and line[4] in (" ", "-"):
        return line[5:]
    return None


def classify_line(line: str) -> ResponseLine:
    """Classify one response line (without its line terminator).

    Args:
        line: Raw response line

    Returns:
        ResponseLine with its kind and payload (None if it adds nothing)
    """
    if line.startswith(" "):
        return ResponseLine(LineKind.CONTINUATION, line[1:])

    if _CODE_RE.match(line):
        lead = line[0]
        if lead == "0":
            # The bare completion code carries no data
            payload = None if line[:4] == COMPLETION_CODE else _coded_payload(line)
            return ResponseLine(LineKind.SUCCESS, payload)
        if lead in ("8", "9"):
            return ResponseLine(LineKind.ERROR)
        return ResponseLine(LineKind.DATA, _coded_payload(line))

    if not line:
        return ResponseLine(LineKind.EMPTY)

    return ResponseLine(LineKind.RAW, line)


def frame_response(lines: Iterable[str]) -> str:
    """Assemble a response from lines read after the command was sent.

    Reading stops at the first terminal line; lines after it are not
    consumed.

    Args:
        lines: Response lines without terminators

    Returns:
        Accumulated payload with surrounding whitespace trimmed

    Raises:
        DaemonError: An 8xxx/9xxx line was received
        TransportError: The lines ran out before a terminal line
    """
    output: list[str] = []

    for line in lines:
        classified = classify_line(line)

        if classified.kind is LineKind.ERROR:
            raise DaemonError(line)

        if classified.payload is not None:
            output.append(classified.payload)
            output.append("\n")

        if classified.kind is LineKind.SUCCESS:
            return "".join(output).strip()

    raise TransportError("failed to read response: connection closed before completion")


class BirdSession:
    """
    A single exchange with the BIRD control socket.

    The timeout is an absolute deadline starting at connect time and
    covering the handshake, the command and the full response.

    Usage:
        with BirdSession("/run/bird.ctl") as session:
            output = session.query("show status")
    """

    def __init__(self, socket_path: str, timeout: float = DEFAULT_TIMEOUT):
        self.socket_path = socket_path
        self.timeout = timeout
        self._socket: socket.socket | None = None
        self._reader: BinaryIO | None = None
        self._deadline = 0.0

    def __enter__(self) -> "BirdSession":
        self.connect()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def _remaining(self) -> float:
        remaining = self._deadline - time.monotonic()
        if remaining <= 0:
            raise TransportTimeout(
                f"deadline of {self.timeout}s exceeded talking to {self.socket_path}"
            )
        return remaining

    def connect(self) -> None:
        """Connect to the socket and validate the greeting.

        Raises:
            BirdConnectionError: The socket could not be reached
            ProtocolError: The greeting is not a ready (0001) line
            TransportError: The greeting could not be read
        """
        self._deadline = time.monotonic() + self.timeout
        logger.debug("Connecting to BIRD socket %s", self.socket_path)

        remaining = self._remaining()
        sock = socket.socket(socket.AF_UNIX, socket.SOCK_STREAM)
        try:
            sock.settimeout(remaining)
            sock.connect(self.socket_path)
        except OSError as e:
            sock.close()
            raise BirdConnectionError(
                f"failed to connect to socket {self.socket_path}: {e}"
            ) from e

        self._socket = sock
        self._reader = sock.makefile("rb")

        try:
            greeting = self._read_line()
        except TransportError:
            self.close()
            raise
        if greeting is None:
            self.close()
            raise TransportError("failed to read greeting: connection closed")

        if not greeting.startswith(GREETING_CODE):
            self.close()
            raise ProtocolError(f"unexpected greeting: {greeting}")

        logger.debug("BIRD greeting: %s", greeting)

    def close(self) -> None:
        """Close the connection."""
        if self._reader:
            try:
                self._reader.close()
            except OSError:
                pass
            self._reader = None
        if self._socket:
            try:
                self._socket.close()
            except OSError:
                pass
            self._socket = None

    def _read_line(self) -> str | None:
        """Read one line, or None at end of stream."""
        try:
            self._socket.settimeout(self._remaining())
            raw = self._reader.readline()
        except socket.timeout as e:
            raise TransportTimeout(
                f"deadline of {self.timeout}s exceeded talking to {self.socket_path}"
            ) from e
        except OSError as e:
            raise TransportError(f"failed to read response: {e}") from e

        if not raw:
            return None
        return raw.decode("utf-8", errors="replace").rstrip("\r\n")

    def _lines(self) -> Iterator[str]:
        while True:
            line = self._read_line()
            if line is None:
                return
            yield line

    def send(self, command: str) -> None:
        """Write a command to the daemon.

        Raises:
            TransportError: The write failed
        """
        if self._socket is None:
            raise TransportError("not connected")
        logger.debug("Sending command: %s", command)
        try:
            self._socket.settimeout(self._remaining())
            self._socket.sendall(f"{command}\r\n".encode("utf-8"))
        except socket.timeout as e:
            raise TransportTimeout(
                f"deadline of {self.timeout}s exceeded talking to {self.socket_path}"
            ) from e
        except OSError as e:
            raise TransportError(f"failed to send command: {e}") from e

    def query(self, command: str) -> str:
        """Send a command and return its framed response.

        Args:
            command: BIRD CLI command, sent verbatim

        Returns:
            Response payload with surrounding whitespace trimmed
        """
        self.send(command)
        output = frame_response(self._lines())
        logger.debug("Command %r returned %d bytes", command, len(output))
        return output


def query_socket(socket_path: str, command: str, timeout: float = DEFAULT_TIMEOUT) -> str:
    """Run one command over a fresh connection to the BIRD socket.

    Args:
        socket_path: Filesystem path of the control socket
        command: BIRD CLI command
        timeout: Deadline in seconds for the whole exchange

    Returns:
        Response payload

    Raises:
        BirdConnectionError, ProtocolError, TransportError, DaemonError
    """
    with BirdSession(socket_path, timeout=timeout) as session:
        return session.query(command)
