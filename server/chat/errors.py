"""
Exceptions raised by the chat server core.

Only ListenerBindError is fatal to the process. Everything else is contained
within a single session, a single delivery or the shutdown path.
"""


class ChatServerError(Exception):
    """Base class for chat server errors."""


class NameTakenError(ChatServerError):
    """A display name is already registered."""

    def __init__(self, name: str):
        super().__init__(f"Username '{name}' already taken")
        self.name = name


class PeerWriteError(ChatServerError):
    """Writing a line to one client failed or timed out."""


class PeerDisconnected(ChatServerError):
    """The client closed its end of the connection or the read failed."""


class PersistenceError(ChatServerError):
    """Appending a line to the history file failed."""


class ListenerBindError(ChatServerError):
    """The listening socket could not be bound."""

    def __init__(self, host: str, port: int, reason: Exception):
        super().__init__(f"Cannot listen on {host}:{port}: {reason}")
        self.host = host
        self.port = port
        self.reason = reason


class QueueClosedError(ChatServerError):
    """The delivery queue was closed for shutdown."""
