"""
Chat client module.

This module handles client-side chat messaging functionality: it negotiates
a display name, receives chat lines and roster updates on a background
thread and sends typed lines to the server.
"""

import socket
import threading
from typing import Callable, List, Optional

from common.constants import ENCODING, QUIT_COMMAND
from common.protocol_definitions import (
    encode_line, is_name_rejection, is_quit_command, is_userlist_line, strip_line_ending
)
from client.utils.config import ClientConfig
from client.utils.history import parse_user_list
from client.utils.logger import logger


class ChatClient:
    """Client-side chat functionality."""

    def __init__(self, config: Optional[ClientConfig] = None):
        self.config = config or ClientConfig()
        self.username: Optional[str] = None
        self.sock: Optional[socket.socket] = None
        self.reader = None
        self.receiver_thread: Optional[threading.Thread] = None

        self.message_handler: Optional[Callable[[str], None]] = None
        self.user_list_handler: Optional[Callable[[List[str]], None]] = None
        self.status_handler: Optional[Callable[[bool], None]] = None

        self._connected = False
        self._state_lock = threading.Lock()
        self._send_lock = threading.Lock()

    @property
    def is_connected(self) -> bool:
        return self._connected

    def set_message_handler(self, handler: Callable[[str], None]):
        """Set the handler for chat and system lines."""
        self.message_handler = handler

    def set_user_list_handler(self, handler: Callable[[List[str]], None]):
        """Set the handler for roster updates."""
        self.user_list_handler = handler

    def set_status_handler(self, handler: Callable[[bool], None]):
        """Set the handler for connection status changes."""
        self.status_handler = handler

    def connect(self, username: str) -> bool:
        """
        Connect and register ``username``.

        Returns False when the server is unreachable or the name is taken.
        """
        info = self.config.get_connection_info()
        host, port = info['host'], info['port']
        try:
            self.sock = socket.create_connection((host, port), timeout=self.config.connect_timeout)
            self.reader = self.sock.makefile('r', encoding=ENCODING, errors='replace', newline='\n')

            greeting = self.reader.readline()
            logger.debug(f"Server greeting: {strip_line_ending(greeting)}")

            self.sock.sendall(encode_line(username))
            response = self.reader.readline()
        except OSError as e:
            logger.log_connection(host, port, False)
            logger.log_error("connection", e)
            self._close_socket()
            self._notify_status(False)
            return False

        logger.log_connection(host, port, True)
        if not response or is_name_rejection(response):
            logger.log_login(username, False)
            self._close_socket()
            return False

        self.username = username
        self.sock.settimeout(None)
        with self._state_lock:
            self._connected = True
        logger.log_login(username, True)
        self._notify_status(True)

        # The first line after the name is already regular traffic
        self._dispatch(strip_line_ending(response))

        self.receiver_thread = threading.Thread(target=self._receive_loop, name='chat-receiver', daemon=True)
        self.receiver_thread.start()
        return True

    def send_message(self, message: str) -> bool:
        """Send one line to the server."""
        if not self._connected or self.sock is None:
            return False
        try:
            with self._send_lock:
                self.sock.sendall(encode_line(message))
            return True
        except OSError as e:
            logger.log_error("send", e)
            return False

    def disconnect(self):
        """Say /quit and close the connection."""
        if self._mark_disconnected():
            try:
                with self._send_lock:
                    self.sock.sendall(encode_line(QUIT_COMMAND))
            except OSError:
                # server already gone
                pass
            self._close_socket()
            logger.log_disconnect(self.username)
            self._notify_status(False)
        else:
            self._close_socket()

        if self.receiver_thread and self.receiver_thread is not threading.current_thread():
            self.receiver_thread.join(timeout=1.0)

    def _receive_loop(self):
        try:
            while self._connected:
                raw = self.reader.readline()
                if not raw:
                    break
                line = strip_line_ending(raw)
                if is_quit_command(line):
                    break
                self._dispatch(line)
        except (OSError, ValueError) as e:
            if self._connected:
                logger.log_error("receiving message", e)
        finally:
            if self._mark_disconnected():
                self._close_socket()
                self._notify_status(False)

    def _dispatch(self, line: str):
        if is_userlist_line(line):
            users = parse_user_list(line)
            logger.log_roster(users)
            if self.user_list_handler:
                self.user_list_handler(users)
        elif self.message_handler:
            self.message_handler(line)

    def _mark_disconnected(self) -> bool:
        """Flip to disconnected; True only for the caller that did the flip."""
        with self._state_lock:
            was_connected = self._connected
            self._connected = False
            return was_connected

    def _notify_status(self, connected: bool):
        if self.status_handler:
            self.status_handler(connected)

    def _close_socket(self):
        if self.sock is None:
            return
        try:
            self.sock.shutdown(socket.SHUT_RDWR)
        except OSError:
            pass
        try:
            if self.reader:
                self.reader.close()
            self.sock.close()
        except OSError:
            pass
