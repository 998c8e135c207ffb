#!/usr/bin/env python3
"""
LAN Chat Relay Client - Main Entry Point

Usage:
    python main_client.py [--username NAME] [--server-ip HOST] [--port PORT] [--cli] [--log-level LEVEL]

Modes:
    (default)    Launch the PyQt6 GUI
    --cli        Launch the console client
"""

import argparse
import logging
import sys

from client.utils.logger import logger
from common.constants import DEFAULT_HOST, DEFAULT_PORT, CHAT_HISTORY_FILE


def run_gui_client(username: str = None, server_host: str = DEFAULT_HOST, server_port: int = DEFAULT_PORT,
                   history_file: str = CHAT_HISTORY_FILE) -> int:
    """Run the GUI client."""
    try:
        from PyQt6.QtWidgets import QApplication
        from client.ui.client_gui import ChatClientGUI
    except ImportError:
        print("[ERROR] PyQt6 not installed. Install with: pip install PyQt6")
        return 1

    app = QApplication(sys.argv)
    window = ChatClientGUI(server_host, server_port, history_file)
    if username:
        window.username_field.setText(username)
    window.show()
    return app.exec()


def run_cli_client(username: str = None, server_host: str = DEFAULT_HOST, server_port: int = DEFAULT_PORT) -> int:
    """Run the console client."""
    from client.main_client import run_console
    return 0 if run_console(username, server_host, server_port) else 1


def main(argv=None) -> int:
    """Main entry point."""
    parser = argparse.ArgumentParser(description='LAN Chat Relay Client')
    parser.add_argument('--username', type=str, default=None,
                        help='Username for chat (default: asked interactively)')
    parser.add_argument('--server-ip', type=str, default=DEFAULT_HOST,
                        help=f'Server IP address (default: {DEFAULT_HOST})')
    parser.add_argument('--port', type=int, default=DEFAULT_PORT,
                        help=f'Server port (default: {DEFAULT_PORT})')
    parser.add_argument('--history-file', type=str, default=CHAT_HISTORY_FILE,
                        help=f'History file shown on GUI startup (default: {CHAT_HISTORY_FILE})')
    parser.add_argument('--cli', action='store_true',
                        help='Run in command-line mode (GUI is default)')
    parser.add_argument('--log-level', type=str, default='INFO',
                        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'],
                        help='Logging level (default: INFO)')

    args = parser.parse_args(argv)
    logger.set_level(getattr(logging, args.log_level))

    if args.cli:
        return run_cli_client(args.username, args.server_ip, args.port)
    return run_gui_client(args.username, args.server_ip, args.port, args.history_file)


if __name__ == "__main__":
    sys.exit(main())
