"""
Client configuration module.

This module handles client-side configuration settings.
"""

import os

from common.constants import DEFAULT_HOST, DEFAULT_PORT, CHAT_HISTORY_FILE, CONNECT_TIMEOUT


class ClientConfig:
    """Client configuration class."""

    def __init__(self, host: str = DEFAULT_HOST, port: int = DEFAULT_PORT, username: str = None,
                 history_file: str = CHAT_HISTORY_FILE):
        self.host = host
        self.port = port
        self.username = username
        self.history_file = history_file

        # Connection settings
        self.connect_timeout = CONNECT_TIMEOUT

    @classmethod
    def from_env(cls, **overrides):
        """Build a config from SERVER_IP / SERVER_PORT, letting explicit values win."""
        settings = {
            'host': os.environ.get('SERVER_IP', DEFAULT_HOST),
            'port': int(os.environ.get('SERVER_PORT', str(DEFAULT_PORT))),
        }
        settings.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**settings)

    def get_connection_info(self):
        """Get connection information."""
        return {
            'host': self.host,
            'port': self.port,
            'username': self.username
        }
