"""
Configuration management for apcups-exporter.

This module uses Pydantic's BaseSettings to manage configuration
through environment variables. Settings are loaded once at startup
and treated as immutable afterwards.
"""
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_NIS_PORT = 3551


class Settings(BaseSettings):
    """
    Application settings.

    These settings are loaded from environment variables prefixed with
    ``APCUPS_`` (or a ``.env`` file).
    """

    # apcupsd Network Information Server
    UPS_HOST: str = "localhost"
    UPS_PORT: int = DEFAULT_NIS_PORT
    TIMEOUT: float = 10.0  # seconds, bounds a whole status exchange

    # Metrics listener
    LISTEN_HOST: str = "0.0.0.0"
    LISTEN_PORT: int = 8080

    # Polling configuration
    POLL_INTERVAL: int = 10  # seconds

    # Parsing behaviour
    STRICT_MEASUREMENTS: bool = False
    REQUIRED_FIELDS: list[str] = ["STATUS", "BCHARGE", "TONBATT", "TIMELEFT"]
    PUBLISH_UNKNOWN_STATUS: bool = False

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        env_prefix="APCUPS_",
        frozen=True,
    )

    @property
    def ups_address(self) -> str:
        return f"{self.UPS_HOST}:{self.UPS_PORT}"


def parse_address(address: str, default_port: int = DEFAULT_NIS_PORT) -> tuple[str, int]:
    """
    Split a ``host:port`` string.

    An empty host (``":3551"``) means localhost; a missing port falls back
    to ``default_port``. Bracketed IPv6 literals (``[::1]:3551``) are accepted.
    """
    address = address.strip()
    if not address:
        raise ValueError("Address must not be empty")

    if address.startswith("["):
        host, sep, rest = address[1:].partition("]")
        if not sep:
            raise ValueError(f"Invalid address '{address}': unterminated '['")
        port_str = rest[1:] if rest.startswith(":") else ""
        if rest and not rest.startswith(":"):
            raise ValueError(f"Invalid address '{address}'")
    elif address.count(":") == 1:
        host, _, port_str = address.partition(":")
    else:
        host, port_str = address, ""

    if not port_str:
        port = default_port
    else:
        try:
            port = int(port_str)
        except ValueError:
            raise ValueError(f"Invalid port in address '{address}'") from None
    if not 0 < port < 65536:
        raise ValueError(f"Port out of range in address '{address}'")

    return host or "localhost", port


settings = Settings()
