"""
Configuration management for birdsock.

Loads the socket path and timeout from environment variables or a
.env file. The library itself takes these as constructor arguments;
the module-level instance is only used by the command line front end.
"""

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

# Check common locations for .env
env_locations = [
    Path.home() / ".birdsock" / ".env",
    Path.home() / ".config" / "birdsock" / ".env",
    Path.cwd() / ".env",
]
for env_path in env_locations:
    if env_path.exists():
        load_dotenv(env_path)
        break


BIRD2_SOCKET = "/run/bird.ctl"
BIRD3_SOCKET = "/run/bird3.ctl"

DEFAULT_SOCKETS = {
    "bird2": BIRD2_SOCKET,
    "bird3": BIRD3_SOCKET,
}

# Probed in order by discover_socket()
SOCKET_SEARCH_PATHS = [
    "/run/bird.ctl",
    "/run/bird/bird.ctl",
    "/run/bird3.ctl",
    "/var/run/bird.ctl",
    "/var/run/bird3.ctl",
]


@dataclass
class BirdConfig:
    """Connection settings for the BIRD control socket."""

    # Daemon major version, selects the default socket
    daemon: str = "bird2"

    # Explicit socket path, overrides the per-daemon default
    socket_path: str = ""

    # Deadline for one connect/query/close exchange
    timeout: float = 10.0

    @property
    def resolved_socket_path(self) -> str:
        """Configured socket path, or the default for the daemon version."""
        return self.socket_path or DEFAULT_SOCKETS.get(self.daemon, BIRD2_SOCKET)

    @classmethod
    def from_env(cls) -> "BirdConfig":
        """Load configuration from environment variables."""
        daemon = os.getenv("BIRDSOCK_DAEMON", "bird2").lower()
        if daemon not in DEFAULT_SOCKETS:
            raise ValueError(f"BIRDSOCK_DAEMON must be one of {sorted(DEFAULT_SOCKETS)}, got {daemon!r}")

        timeout = os.getenv("BIRDSOCK_TIMEOUT", "10")
        try:
            timeout_value = float(timeout)
        except ValueError:
            raise ValueError(f"BIRDSOCK_TIMEOUT must be a number, got {timeout!r}") from None

        return cls(
            daemon=daemon,
            socket_path=os.getenv("BIRDSOCK_SOCKET", ""),
            timeout=timeout_value,
        )


def discover_socket(candidates: list[str] | None = None) -> str | None:
    """Return the first existing socket path from the search list."""
    for path in candidates or SOCKET_SEARCH_PATHS:
        if Path(path).exists():
            return path
    return None


# Global config instance
_config: BirdConfig | None = None


def get_config() -> BirdConfig:
    """Get the global configuration instance."""
    global _config
    if _config is None:
        _config = BirdConfig.from_env()
    return _config


def set_config(config: BirdConfig | None) -> None:
    """Set (or with None, reset) the global configuration instance."""
    global _config
    _config = config
