"""
Exceptions raised by the BIRD control socket client.

Copyright (c) 2025 DNS Science.io, an After Dark Systems, LLC company.
All rights reserved.
"""


class BirdError(Exception):
    """Base exception for BIRD client errors."""
    pass


class BirdConnectionError(BirdError):
    """The control socket could not be reached."""
    pass


class ProtocolError(BirdError):
    """The daemon did not greet with a ready (0001) line."""
    pass


class TransportError(BirdError):
    """Writing the command or reading the response failed."""
    pass


class TransportTimeout(TransportError):
    """The exchange did not complete before its deadline."""
    pass


class DaemonError(BirdError):
    """The daemon answered with a runtime (8xxx) or parse (9xxx) error.

    The offending line is kept verbatim in ``line``.
    """

    def __init__(self, line: str):
        self.line = line
        self.code = line[:4]
        super().__init__(f"BIRD error: {line}")

    @property
    def is_parse_error(self) -> bool:
        """True for 9xxx codes (command parse errors)."""
        return self.code.startswith("9")


class DecodeError(BirdError):
    """Daemon output could not be turned into a typed value."""
    pass
