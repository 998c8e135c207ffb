"""
Client logging module.

Diagnostics go to stdout next to the console client's own output, so the
default level keeps them to connection events only.
"""

import logging
import sys
from typing import List


class ClientLogger:
    """Client logging class."""

    def __init__(self, log_level: int = logging.INFO):
        self.logger = logging.getLogger('chat_client')
        self.logger.setLevel(log_level)
        self.logger.propagate = False

        for handler in self.logger.handlers[:]:
            self.logger.removeHandler(handler)

        self.handler = logging.StreamHandler(sys.stdout)
        self.handler.setLevel(log_level)
        self.handler.setFormatter(logging.Formatter(
            '%(asctime)s [%(levelname)s] %(message)s',
            datefmt='%H:%M:%S'
        ))
        self.logger.addHandler(self.handler)

    def set_level(self, log_level: int):
        self.logger.setLevel(log_level)
        self.handler.setLevel(log_level)

    def info(self, message: str):
        self.logger.info(message)

    def error(self, message: str):
        self.logger.error(message)

    def warning(self, message: str):
        self.logger.warning(message)

    def debug(self, message: str):
        self.logger.debug(message)

    def log_connection(self, host: str, port: int, success: bool):
        """Log the outcome of opening the TCP connection."""
        if success:
            self.info(f"Connected to {host}:{port}")
        else:
            self.warning(f"Could not reach chat server at {host}:{port}")

    def log_login(self, username: str, success: bool):
        """Log whether the server accepted the display name."""
        if success:
            self.info(f"Joined the chat as '{username}'")
        else:
            self.warning(f"Server refused the name '{username}'")

    def log_roster(self, users: List[str]):
        self.debug(f"Roster update: {len(users)} user(s)")

    def log_disconnect(self, username: str):
        self.info(f"'{username}' left the chat")

    def log_error(self, operation: str, error: Exception):
        """Log error with operation context."""
        self.error(f"Error in {operation}: {error}")


# Global logger instance
logger = ClientLogger()
