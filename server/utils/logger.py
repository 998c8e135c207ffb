"""
Server logging module.

This module handles server-side logging functionality.
"""

import logging
from pathlib import Path
from typing import Optional


class ServerLogger:
    """Server logging class."""

    def __init__(self, log_level: int = logging.INFO):
        self.logger = logging.getLogger('chat_server')
        self.logger.setLevel(log_level)
        self.file_handler: Optional[logging.FileHandler] = None

        # Remove existing handlers
        for handler in self.logger.handlers[:]:
            self.logger.removeHandler(handler)

        # Create console handler
        console_handler = logging.StreamHandler()
        console_handler.setLevel(log_level)

        # Create formatter
        self.formatter = logging.Formatter(
            '%(asctime)s [%(levelname)s] %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )
        console_handler.setFormatter(self.formatter)

        # Add handler to logger
        self.logger.addHandler(console_handler)

    def set_level(self, log_level: int):
        """Change the level of the logger and all its handlers."""
        self.logger.setLevel(log_level)
        for handler in self.logger.handlers:
            handler.setLevel(log_level)

    def set_log_file(self, log_path: str):
        """Mirror log output into a file, creating its directory if needed."""
        path = Path(log_path)
        path.parent.mkdir(parents=True, exist_ok=True)

        if self.file_handler is not None:
            self.logger.removeHandler(self.file_handler)
            self.file_handler.close()

        self.file_handler = logging.FileHandler(path, encoding='utf-8')
        self.file_handler.setLevel(self.logger.level)
        self.file_handler.setFormatter(self.formatter)
        self.logger.addHandler(self.file_handler)

    def info(self, message: str):
        """Log info message."""
        self.logger.info(message)

    def error(self, message: str):
        """Log error message."""
        self.logger.error(message)

    def warning(self, message: str):
        """Log warning message."""
        self.logger.warning(message)

    def debug(self, message: str):
        """Log debug message."""
        self.logger.debug(message)

    def log_connection(self, addr: tuple):
        """Log client connection."""
        self.info(f"New client connection from {addr}")

    def log_join(self, username: str, addr: tuple):
        """Log successful name registration."""
        self.info(f"{username} joined the chat from {addr}")

    def log_rejected(self, username: str, addr: tuple):
        """Log a duplicate-name rejection."""
        self.warning(f"Rejected {addr}: username '{username}' already taken")

    def log_departure(self, username: str):
        """Log user departure."""
        self.info(f"{username} left the chat")

    def log_peer_write_failure(self, username: str, error: Exception):
        """Log a failed delivery to one recipient."""
        self.warning(f"Failed to deliver to '{username}': {error}")

    def log_error(self, operation: str, error: Exception):
        """Log error with operation context."""
        self.error(f"Error in {operation}: {error}")


# Global logger instance
logger = ServerLogger()
