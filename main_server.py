#!/usr/bin/env python3
"""
LAN Chat Relay Server - Main Entry Point

Multi-client chat server: clients register a unique display name and every
line they send is broadcast to all connected clients, appended to the chat
history file, and accompanied by a live USERLIST roster.

Usage:
    python main_server.py

Optional arguments:
    --host HOST             Bind address (default: 0.0.0.0)
    --port PORT             TCP port (default: 12345)
    --history-file FILE     Chat history file (default: chat_history.txt)
    --queue-capacity N      Delivery queue capacity (default: 1000)
    --log-level LEVEL       DEBUG, INFO, WARNING or ERROR (default: INFO)
    --log-file FILE         Also write server logs to FILE
"""

import sys

from server.main_server import main


if __name__ == "__main__":
    sys.exit(main())
