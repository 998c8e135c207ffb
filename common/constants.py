"""
Shared constants for the LAN Chat Relay.

This module contains all constants used across client and server components.
"""

# Network Configuration
DEFAULT_HOST = 'localhost'
DEFAULT_SERVER_HOST = '0.0.0.0'
DEFAULT_PORT = 12345
LISTEN_BACKLOG = 50

# Timeouts
WRITE_TIMEOUT = 2.0  # seconds a single peer write may take during fan-out
ACCEPT_TIMEOUT = 1.0  # accept loop re-checks the stop flag this often
ACCEPT_ERROR_BACKOFF = 0.1  # pause after a failed accept (e.g. out of file descriptors)
CONNECT_TIMEOUT = 10.0
THREAD_JOIN_TIMEOUT = 2.0

# Delivery queue
DEFAULT_QUEUE_CAPACITY = 1000

# History
CHAT_HISTORY_FILE = 'chat_history.txt'

# Wire protocol
ENCODING = 'utf-8'
TIMESTAMP_FORMAT = '%Y-%m-%d %H:%M:%S'
QUIT_COMMAND = '/quit'
USERLIST_PREFIX = 'USERLIST:'
USERLIST_SEPARATOR = ','
SERVER_SENDER = 'SERVER'


class ServerLines:
    # Server to Client, fixed lines
    GREETING = 'Enter your username:'
    NAME_TAKEN = 'Username already taken. Disconnecting.'
    NAME_TAKEN_MARKER = 'already taken'

    # System notices, formatted with the display name
    JOINED = '{name} has joined the chat.'
    LEFT = '{name} has left the chat.'
