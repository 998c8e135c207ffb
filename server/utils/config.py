"""
Server configuration module.

This module handles server-side configuration settings.
"""

from common.constants import (
    DEFAULT_SERVER_HOST, DEFAULT_PORT, DEFAULT_QUEUE_CAPACITY, CHAT_HISTORY_FILE,
    WRITE_TIMEOUT, ACCEPT_TIMEOUT, LISTEN_BACKLOG
)


class ServerConfig:
    """Server configuration class."""

    def __init__(self, host: str = DEFAULT_SERVER_HOST, port: int = DEFAULT_PORT,
                 history_file: str = CHAT_HISTORY_FILE,
                 queue_capacity: int = DEFAULT_QUEUE_CAPACITY):
        if queue_capacity < 1:
            raise ValueError(f"queue_capacity must be at least 1, got {queue_capacity}")

        self.host = host
        self.port = port

        # Persistence settings
        self.history_file = history_file
        self.queue_capacity = queue_capacity

        # Connection settings
        self.backlog = LISTEN_BACKLOG
        self.write_timeout = WRITE_TIMEOUT
        self.accept_timeout = ACCEPT_TIMEOUT

    def get_connection_info(self):
        """Get connection information."""
        return {
            'host': self.host,
            'port': self.port
        }

    def get_history_settings(self):
        """Get history persistence settings."""
        return {
            'history_file': self.history_file,
            'queue_capacity': self.queue_capacity
        }
