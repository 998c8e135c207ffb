#!/usr/bin/env python3
"""
LAN Chat Relay Client - Console Mode

Line-based client: incoming chat lines are printed as they arrive and
every typed line is sent to the server. Type /quit to leave.
"""

import os
import sys
from typing import Callable, List, Optional

sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from client.chat.chat_client import ChatClient
from client.utils.config import ClientConfig
from client.utils.history import sort_names
from client.utils.logger import logger
from common.protocol_definitions import is_quit_command


class ConsoleClient:
    """Interactive console front end for ChatClient."""

    def __init__(self, config: ClientConfig, output: Callable[[str], None] = print):
        self.config = config
        self.output = output
        self.chat_client = ChatClient(config)

        self.chat_client.set_message_handler(self.on_message_received)
        self.chat_client.set_user_list_handler(self.on_user_list_received)
        self.chat_client.set_status_handler(self.on_connection_status_changed)

    def on_message_received(self, message: str):
        self.output(message)

    def on_user_list_received(self, users: List[str]):
        names = sort_names(users)
        self.output(f"Active users: {', '.join(names)}")

    def on_connection_status_changed(self, connected: bool):
        self.output(f"Connection status: {'Connected' if connected else 'Disconnected'}")

    def run(self, read_line: Callable[[], Optional[str]] = None) -> bool:
        """
        Connect and pump typed lines to the server until /quit or end of input.

        Returns False if the connection could not be made.
        """
        read_line = read_line or _read_stdin_line

        username = self.config.username
        if not username:
            self.output("Enter your username: ")
            username = (read_line() or '').strip()

        if not self.chat_client.connect(username):
            self.output("Failed to connect to server.")
            return False

        self.output("Connected! Type messages (or /quit to exit):")
        try:
            while self.chat_client.is_connected:
                message = read_line()
                if message is None or is_quit_command(message):
                    break
                self.chat_client.send_message(message)
        finally:
            self.chat_client.disconnect()
        return True


def _read_stdin_line() -> Optional[str]:
    try:
        return input()
    except EOFError:
        return None


def run_console(username: str = None, server_host: str = None, server_port: int = None) -> bool:
    """Run the console client."""
    config = ClientConfig.from_env(host=server_host, port=server_port, username=username)
    client = ConsoleClient(config)
    try:
        return client.run()
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        client.chat_client.disconnect()
        return True
