"""Server configuration and CLI argument parsing."""

import argparse
import os
from dataclasses import dataclass


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    return int(value) if value is not None else default


def _env_str(name: str, default: str) -> str:
    value = os.getenv(name)
    return value if value else default


DEFAULT_HOST = "localhost"
DEFAULT_PORT = 4221
DEFAULT_SHUTDOWN_GRACE_SECONDS = 30
LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
LOG_FORMATS = ["json", "text"]

# Bytes peeked from a new connection; the whole request must fit in one chunk.
READ_CHUNK_SIZE = 4096


@dataclass(frozen=True)
class ServerConfig:
    """Startup settings, fixed for the lifetime of the process."""

    directory: str
    host: str
    port: int
    shutdown_grace_seconds: int = DEFAULT_SHUTDOWN_GRACE_SECONDS

    @classmethod
    def from_args(cls, args: argparse.Namespace) -> "ServerConfig":
        return cls(
            directory=args.directory,
            host=args.host,
            port=args.port,
            shutdown_grace_seconds=args.shutdown_grace_seconds,
        )


def parse_cli_args(argv: list[str]) -> argparse.Namespace:
    """Return parsed CLI arguments for server configuration."""
    parser = argparse.ArgumentParser(description="Minimal HTTP/1.1 file server")
    parser.add_argument(
        "--directory",
        default=".",
        help="Root directory for the /files endpoint",
    )
    parser.add_argument("--host", default=_env_str("TINYHTTP_HOST", DEFAULT_HOST))
    parser.add_argument(
        "--port", type=int, default=_env_int("TINYHTTP_PORT", DEFAULT_PORT)
    )
    parser.add_argument(
        "--log-level",
        default=_env_str("TINYHTTP_LOG_LEVEL", "INFO").upper(),
        choices=LOG_LEVELS,
        type=str.upper,
    )
    parser.add_argument(
        "--log-destination",
        default=_env_str("TINYHTTP_LOG_DESTINATION", "stdout"),
        help="stdout or a file path",
    )
    parser.add_argument(
        "--log-format",
        default=_env_str("TINYHTTP_LOG_FORMAT", "json").lower(),
        choices=LOG_FORMATS,
        type=str.lower,
    )
    parser.add_argument(
        "--shutdown-grace-seconds",
        type=int,
        default=_env_int(
            "TINYHTTP_SHUTDOWN_GRACE_SECONDS", DEFAULT_SHUTDOWN_GRACE_SECONDS
        ),
        help="Seconds to wait for in-flight connections on shutdown",
    )
    return parser.parse_args(argv)
