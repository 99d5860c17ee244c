# Application Configuration
"""
Configuration module for IPby.
Defines the listener address, trusted proxy list, CORS origin and log level.
"""

import logging
import os
from typing import FrozenSet, Optional


VERSION = "1.0.0"

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def parse_proxy_list(raw: str) -> FrozenSet[str]:
    """
    Parse a comma-separated list of trusted proxy addresses.

    Blank entries are dropped, so an unset variable gives an empty set.
    """
    return frozenset(entry.strip() for entry in raw.split(",") if entry.strip())


def parse_log_level(name: str) -> int:
    """Turn a level name such as "info" into its logging constant."""
    level = logging.getLevelName(name.strip().upper())
    if not isinstance(level, int):
        raise ValueError(f"Unknown log level: {name!r}")
    return level


def parse_port(raw: str, variable: str = "IPBY_PORT") -> int:
    """Parse a TCP port, naming the offending variable on failure."""
    try:
        port = int(raw)
    except ValueError:
        raise ValueError(f"{variable} must be an integer, got {raw!r}") from None
    if not 0 <= port <= 65535:
        raise ValueError(f"{variable} must be between 0 and 65535, got {port}")
    return port


def env_log_level(variable: str = "IPBY_LOG_LEVEL", default: str = "INFO") -> str:
    """Read a log level name from the environment, rejecting unknown names."""
    name = os.getenv(variable, default)
    try:
        parse_log_level(name)
    except ValueError as exc:
        raise ValueError(f"{variable}: {exc}") from None
    return name


class Config:
    """Application configuration with environment variable support."""

    # Listener (standalone server only)
    HOST: str = os.getenv("IPBY_HOST", "0.0.0.0")
    PORT: int = parse_port(os.getenv("IPBY_PORT", "3000"))

    # Logging
    LOG_LEVEL: str = env_log_level()

    # Forwarding chain
    # Addresses whose X-Forwarded-For entries are skipped, e.g. "127.0.0.1,10.10.10.10"
    TRUSTED_PROXIES: FrozenSet[str] = parse_proxy_list(
        os.getenv("IPBY_TRUSTED_PROXIES", "")
    )

    # CORS
    # Value for Access-Control-Allow-Origin; unset disables the header
    CORS_ALLOW_ORIGIN: Optional[str] = os.getenv("IPBY_CORS_ALLOW_ORIGIN") or None


def configure_logging(level: str = None) -> None:
    """
    Set up root logging for the standalone server and CLI.

    Args:
        level: Level name, defaults to Config.LOG_LEVEL
    """
    logging.basicConfig(
        level=parse_log_level(level or config.LOG_LEVEL),
        format=LOG_FORMAT,
    )


config = Config()
