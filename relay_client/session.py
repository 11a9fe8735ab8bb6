"""
Chat Relay Session

Owns the single TCP connection to a line-based chat relay. Lines typed
locally are sent from the calling thread while a background daemon thread
prints every line the relay sends back.
"""

import logging
import socket
import sys
import threading
from enum import Enum, auto
from typing import Optional

from relay_client.config import ENCODING, PROMPT, Endpoint
from relay_client.errors import ConnectError, TransportReadError, TransportWriteError


class SessionState(Enum):
    """Lifecycle of a chat session"""
    DISCONNECTED = auto()
    CONNECTING = auto()
    CONNECTED = auto()
    CLOSED = auto()


class ChatSession:
    """
    One connection to a chat relay plus its inbound relay thread.

    The receive side of the socket is only read by the inbound relay
    thread and the send side is only written by the thread calling run(),
    so no locking is needed between them. When the relay closes the
    connection the inbound thread prints a notice and stops, but the
    outbound loop keeps reading local input until it runs out or a send
    fails.

    Attributes:
        endpoint: Relay address
        state: Current SessionState
        socket: Connected socket, None before connect
        server_in: Text reader over the receive side
        server_out: Text writer over the send side
        inbound_thread: Daemon thread running the inbound relay
    """

    def __init__(self, endpoint: Endpoint, stdin=None, stdout=None):
        """
        Initialize an unconnected session.

        Args:
            endpoint: Relay address to connect to
            stdin: Local input stream (defaults to sys.stdin)
            stdout: Local output stream (defaults to sys.stdout)
        """
        self.endpoint = endpoint
        self.stdin = stdin if stdin is not None else sys.stdin
        self.stdout = stdout if stdout is not None else sys.stdout
        self.state = SessionState.DISCONNECTED
        self.socket: Optional[socket.socket] = None
        self.server_in = None
        self.server_out = None
        self.inbound_thread: Optional[threading.Thread] = None
        self._closing = threading.Event()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    def connect(self) -> "ChatSession":
        """
        Open the connection to the relay.

        Returns:
            The session itself, now CONNECTED

        Raises:
            ConnectError: If the relay cannot be reached. Not retried.
        """
        if self.state is not SessionState.DISCONNECTED:
            raise RuntimeError(f"Cannot connect a session in state {self.state.name}")

        self.state = SessionState.CONNECTING
        logging.info(f"Connecting to chat relay at {self.endpoint}")
        try:
            self.socket = socket.create_connection((self.endpoint.host, self.endpoint.port))
        except OSError as e:
            self.state = SessionState.CLOSED
            logging.error(f"Connection to {self.endpoint} failed: {e}")
            raise ConnectError(self.endpoint, str(e)) from e

        self.server_in = self.socket.makefile('r', encoding=ENCODING, errors='replace', newline='\n')
        self.server_out = self.socket.makefile('w', encoding=ENCODING, newline='\n')
        self.state = SessionState.CONNECTED
        logging.info(f"Connected to chat relay at {self.endpoint}")
        return self

    def run(self):
        """
        Print the banner, start the inbound relay and drive the outbound loop.

        Returns once local input is exhausted. The connection is closed on
        every way out, including errors and KeyboardInterrupt.

        Raises:
            TransportReadError: If reading local input fails
            TransportWriteError: If sending a line fails
        """
        if self.state is not SessionState.CONNECTED or self.inbound_thread is not None:
            raise RuntimeError(f"Cannot run a session in state {self.state.name}")

        try:
            self._print(f"Welcome to chat server {self.endpoint}")

            # Never joined; it dies with the process if still blocked on the socket
            self.inbound_thread = threading.Thread(
                target=self._relay_inbound,
                name="inbound-relay",
                daemon=True
            )
            self.inbound_thread.start()

            self._relay_outbound()
            self._print("Client terminated.")
        finally:
            self.close()

    def send_line(self, line: str):
        """
        Send one line to the relay followed by a single newline.

        Args:
            line: Text without a line terminator

        Raises:
            TransportWriteError: If the connection cannot take the line
        """
        try:
            self.server_out.write(line + "\n")
            self.server_out.flush()
        except (OSError, ValueError) as e:
            raise TransportWriteError(f"Failed to send to {self.endpoint}: {e}") from e

    def close(self):
        """Release the connection. Safe to call more than once."""
        if self.state is SessionState.CLOSED:
            return
        self._closing.set()

        if self.server_out is not None:
            try:
                self.server_out.close()
            except OSError as e:
                logging.debug(f"Discarding unsent output: {e}")
            self.server_out = None

        if self.socket is not None:
            try:
                # Wakes the inbound relay if it is blocked in a read
                self.socket.shutdown(socket.SHUT_RDWR)
            except OSError as e:
                logging.debug(f"Socket already disconnected: {e}")
            self.socket.close()

        # The inbound relay closes its own reader
        if self.inbound_thread is None and self.server_in is not None:
            self.server_in.close()

        self.state = SessionState.CLOSED
        logging.info(f"Session with {self.endpoint} closed")

    def _relay_outbound(self):
        """Send local input lines until end of input."""
        while True:
            self.stdout.write(PROMPT)
            self.stdout.flush()
            try:
                line = self.stdin.readline()
            except (OSError, ValueError) as e:
                raise TransportReadError(f"Failed to read input: {e}") from e

            if not line:
                logging.debug("Local input exhausted")
                return

            self.send_line(strip_terminator(line))

    def _relay_inbound(self):
        """Print relay lines in arrival order until the stream ends."""
        reason = "end of stream"
        try:
            while True:
                try:
                    line = self.server_in.readline()
                except (OSError, ValueError) as e:
                    reason = str(e)
                    break
                if not line:
                    break
                self._print(strip_terminator(line))
        except (OSError, ValueError) as e:
            # Local output failed; there is nowhere left to print to
            logging.error(f"Inbound relay cannot write to local output: {e}")
            return
        finally:
            try:
                self.server_in.close()
            except OSError as e:
                logging.debug(f"Error closing relay reader: {e}")

        logging.debug(f"Inbound relay stopped: {reason}")
        if not self._closing.is_set():
            try:
                self._print("Connection closed by server")
            except (OSError, ValueError) as e:
                logging.error(f"Inbound relay cannot write to local output: {e}")

    def _print(self, text: str):
        # Single write so lines from the two threads do not split
        self.stdout.write(text + "\n")
        self.stdout.flush()


def strip_terminator(line: str) -> str:
    """Remove one trailing line terminator (CRLF or LF) from line."""
    if line.endswith("\r\n"):
        return line[:-2]
    if line.endswith("\n"):
        return line[:-1]
    return line


def connect(endpoint: Endpoint, stdin=None, stdout=None) -> ChatSession:
    """
    Open a session to the relay at endpoint.

    Raises:
        ConnectError: If the relay cannot be reached
    """
    return ChatSession(endpoint, stdin=stdin, stdout=stdout).connect()


def run(session: ChatSession):
    """Run a connected session until local input ends."""
    session.run()
