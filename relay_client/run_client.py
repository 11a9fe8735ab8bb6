"""
Chat Client Runner

Connects to a chat relay and runs an interactive session on the terminal.

Usage: relay-client [host] [port] [--log-level LEVEL]
"""

import logging
import sys

from relay_client.config import parse_args, setup_logging
from relay_client.errors import ConnectError, TransportReadError, TransportWriteError
from relay_client.session import connect


def main(argv=None) -> int:
    """
    Main entry point for the chat client.

    Returns:
        int: Process exit status, 0 when the session ended normally
    """
    endpoint, log_level = parse_args(argv)
    setup_logging(log_level)

    try:
        session = connect(endpoint)
        session.run()
    except ConnectError as e:
        print(f"Error connecting to server: {e}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        print("\nShutting down client...")
    except (TransportReadError, TransportWriteError) as e:
        logging.debug("Session failed", exc_info=True)
        print(f"Error: {e}", file=sys.stderr)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
