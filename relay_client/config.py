"""
Client Configuration

Defaults, the Endpoint type and command-line parsing for the relay client.
"""

import argparse
import logging
import sys
from dataclasses import dataclass
from typing import List, Optional, Tuple

from relay_client.errors import ArgumentError

DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 6666

# Wire text encoding; the relay speaks UTF-8
ENCODING = "utf-8"
PROMPT = "> "

LOG_FORMAT = '%(asctime)s - %(levelname)s - %(message)s'
LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR"]


@dataclass(frozen=True)
class Endpoint:
    """
    Address of the remote chat relay.

    Attributes:
        host: Host name or IP address of the relay
        port: TCP port of the relay, in [1, 65535]
    """
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT

    def __str__(self) -> str:
        return f"{self.host}:{self.port}"


def parse_port(value: str) -> int:
    """
    Convert a port argument to an integer.

    Args:
        value: Port text from the command line

    Returns:
        int: The port number

    Raises:
        ArgumentError: If the value is not an integer or is out of range
    """
    try:
        port = int(value)
    except ValueError:
        raise ArgumentError(f"invalid port # '{value}'", value) from None
    if not 1 <= port <= 65535:
        raise ArgumentError(f"invalid port # '{value}' (must be 1-65535)", value)
    return port


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="relay-client",
        description="Interactive client for a line-based chat relay"
    )
    parser.add_argument("host", nargs="?", default=DEFAULT_HOST, help="Relay host")
    # Kept as text so a bad port falls back to the default instead of exiting
    parser.add_argument("port", nargs="?", default=str(DEFAULT_PORT), help="Relay port")
    parser.add_argument(
        "--log-level",
        choices=LOG_LEVELS,
        default="WARNING",
        help="Diagnostic logging level (written to stderr)"
    )
    return parser


def parse_args(argv: Optional[List[str]] = None, stderr=None) -> Tuple[Endpoint, str]:
    """
    Resolve the endpoint and log level from command-line arguments.

    A malformed port is reported on stderr and replaced by DEFAULT_PORT;
    it never stops the client from starting.

    Args:
        argv: Arguments without the program name (defaults to sys.argv[1:])
        stderr: Stream for the diagnostic (defaults to sys.stderr)

    Returns:
        Tuple of (Endpoint, log level name)
    """
    stderr = stderr if stderr is not None else sys.stderr
    args = build_parser().parse_args(argv)

    try:
        port = parse_port(args.port)
    except ArgumentError as e:
        print(f"{e}, using default port {DEFAULT_PORT}", file=stderr)
        port = DEFAULT_PORT

    return Endpoint(args.host, port), args.log_level


def setup_logging(level: str = "WARNING"):
    """Configure the root logger on stderr."""
    logging.basicConfig(
        level=getattr(logging, level),
        format=LOG_FORMAT,
        stream=sys.stderr
    )
