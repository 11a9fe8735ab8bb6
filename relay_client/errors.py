"""
Chat Client Errors

Exceptions raised by the relay client. Each failure is handled at the
boundary where it occurs; these classes only name what went wrong.
"""


class ChatClientError(Exception):
    """Base class for failures raised by the relay client."""


class ArgumentError(ChatClientError, ValueError):
    """
    A command-line argument could not be used.

    Attributes:
        value: The rejected argument text
    """

    def __init__(self, message: str, value: str):
        super().__init__(message)
        self.value = value


class ConnectError(ChatClientError, ConnectionError):
    """
    The initial connection to the relay could not be established.

    The underlying OSError (refused, unreachable, timed out, name
    resolution) is chained as __cause__.

    Attributes:
        endpoint: The Endpoint that was being dialled
    """

    def __init__(self, endpoint, reason: str):
        super().__init__(reason)
        self.endpoint = endpoint


class TransportReadError(ChatClientError):
    """Reading a line failed on the outbound side of the session."""


class TransportWriteError(ChatClientError):
    """Sending a line on the connection failed."""
