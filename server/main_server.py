#!/usr/bin/env python3
"""
LAN Chat Relay Server - Main Entry Point

This module wires the chat core together: it accepts connections, runs one
session worker thread per client and a single history writer thread that
persists broadcast lines in delivery order.
"""

import argparse
import logging
import os
import signal
import socket
import sys
import threading
import time
from typing import Optional, Tuple

sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from common.constants import DEFAULT_PORT, DEFAULT_SERVER_HOST, CHAT_HISTORY_FILE, \
    DEFAULT_QUEUE_CAPACITY, THREAD_JOIN_TIMEOUT, ACCEPT_ERROR_BACKOFF
from server.chat.broadcaster import Broadcaster
from server.chat.delivery_queue import DeliveryQueue
from server.chat.errors import ListenerBindError
from server.chat.history_store import HistoryStore, PersistenceWorker
from server.chat.registry import ClientRegistry
from server.chat.session import Session
from server.chat.session_worker import SessionWorker
from server.utils.config import ServerConfig
from server.utils.logger import logger


class ChatServer:
    """Connection acceptor and owner of the shared chat state."""

    def __init__(self, config: Optional[ServerConfig] = None):
        self.config = config or ServerConfig()

        self.registry = ClientRegistry()
        history = self.config.get_history_settings()
        self.queue = DeliveryQueue(history['queue_capacity'])
        self.history = HistoryStore(history['history_file'])
        self.broadcaster = Broadcaster(self.registry, self.queue)
        self.persistence = PersistenceWorker(self.queue, self.history)

        self.server_socket: Optional[socket.socket] = None
        self.accept_thread: Optional[threading.Thread] = None
        self.running = False
        self._stopped = threading.Event()

    @property
    def address(self) -> Tuple[str, int]:
        """Actual bound address; differs from the config when port 0 was requested."""
        if self.server_socket is None:
            return self.config.host, self.config.port
        return self.server_socket.getsockname()[:2]

    def bind(self):
        """Open the listening socket. Raises ListenerBindError on failure."""
        sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        try:
            sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
            info = self.config.get_connection_info()
            sock.bind((info['host'], info['port']))
            sock.listen(self.config.backlog)
        except OSError as e:
            sock.close()
            raise ListenerBindError(self.config.host, self.config.port, e) from e

        sock.settimeout(self.config.accept_timeout)
        self.server_socket = sock

    def start(self):
        """Bind and start the acceptor and history writer threads."""
        self.bind()
        self.running = True
        self._stopped.clear()

        self.persistence.start()
        self.accept_thread = threading.Thread(target=self._accept_loop, name='acceptor', daemon=True)
        self.accept_thread.start()

        host, port = self.address
        logger.info(f"Chat Server started on {host}:{port}")
        logger.info(f"History file: {self.history.path}")

    def serve_forever(self):
        """Start and block until stop() is called."""
        self.start()
        # Wait in short slices so KeyboardInterrupt is delivered promptly
        while not self._stopped.wait(0.5):
            pass

    def stop(self):
        """
        Stop accepting connections and flush pending history.

        Connected sessions are left to finish on their own: their next read
        fails once the client goes away, or they quit.
        """
        if not self.running:
            return
        logger.info("Shutting down server...")
        self.running = False

        if self.server_socket:
            try:
                self.server_socket.close()
            except OSError as e:
                logger.log_error("closing listener", e)

        self.queue.close()

        if self.accept_thread and self.accept_thread is not threading.current_thread():
            self.accept_thread.join(timeout=THREAD_JOIN_TIMEOUT)
        self.persistence.join(timeout=THREAD_JOIN_TIMEOUT)

        self._stopped.set()
        logger.info("Server stopped")

    def _accept_loop(self):
        while self.running:
            try:
                client_sock, addr = self.server_socket.accept()
            except socket.timeout:
                continue
            except OSError as e:
                if self.running:
                    logger.log_error("accepting client connection", e)
                    time.sleep(ACCEPT_ERROR_BACKOFF)
                    continue
                # Listener closed by stop()
                break

            client_sock.settimeout(None)
            logger.log_connection(addr)
            self._spawn_worker(client_sock, addr)

    def _spawn_worker(self, client_sock: socket.socket, addr):
        session = Session(client_sock, addr, self.config.write_timeout)
        worker = SessionWorker(session, self.registry, self.broadcaster)
        thread = threading.Thread(
            target=worker.run,
            name=f"session-{addr[0]}:{addr[1]}",
            daemon=True,
        )
        thread.start()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description='LAN Chat Relay Server')
    parser.add_argument('--host', type=str, default=DEFAULT_SERVER_HOST,
                        help=f'Host to bind to (default: {DEFAULT_SERVER_HOST})')
    parser.add_argument('--port', type=int, default=DEFAULT_PORT,
                        help=f'TCP port (default: {DEFAULT_PORT})')
    parser.add_argument('--history-file', type=str, default=CHAT_HISTORY_FILE,
                        help=f'Chat history file (default: {CHAT_HISTORY_FILE})')
    parser.add_argument('--queue-capacity', type=int, default=DEFAULT_QUEUE_CAPACITY,
                        help=f'Delivery queue capacity (default: {DEFAULT_QUEUE_CAPACITY})')
    parser.add_argument('--log-level', type=str, default='INFO',
                        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'],
                        help='Logging level (default: INFO)')
    parser.add_argument('--log-file', type=str, default=None,
                        help='Also write server logs to this file')
    return parser


def main(argv=None) -> int:
    """Main entry point."""
    args = build_parser().parse_args(argv)

    logger.set_level(getattr(logging, args.log_level))
    if args.log_file:
        logger.set_log_file(args.log_file)

    try:
        config = ServerConfig(
            host=args.host,
            port=args.port,
            history_file=args.history_file,
            queue_capacity=args.queue_capacity
        )
    except ValueError as e:
        logger.error(f"Invalid configuration: {e}")
        return 2

    server = ChatServer(config)
    signal.signal(signal.SIGTERM, lambda signum, frame: server.stop())

    try:
        server.serve_forever()
    except ListenerBindError as e:
        logger.error(f"Server failed to start: {e}")
        return 1
    except KeyboardInterrupt:
        logger.info("Interrupted")
    finally:
        server.stop()
    return 0


if __name__ == "__main__":
    sys.exit(main())
