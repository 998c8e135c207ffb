#!/usr/bin/env python3
"""
Unit tests for server/chat/session.py and server/chat/session_worker.py

Each test drives a Session over a connected socket pair, so the worker sees
real reads, writes and disconnects.
"""

import socket
import threading
import time
import unittest
from datetime import datetime

import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent))

from server.chat.broadcaster import Broadcaster
from server.chat.delivery_queue import DeliveryQueue
from server.chat.errors import PeerDisconnected, PeerWriteError
from server.chat.registry import ClientRegistry
from server.chat.session import Session
from server.chat.session_worker import SessionState, SessionWorker


FIXED_TIME = datetime(2024, 5, 6, 7, 8, 9)
TIMEOUT = 5.0


class PeerEnd:
    """The client side of a socket pair, read line by line."""

    def __init__(self, sock: socket.socket):
        self.sock = sock
        self.sock.settimeout(TIMEOUT)
        self.reader = sock.makefile('r', encoding='utf-8', newline='\n')

    def send(self, text: str):
        self.sock.sendall(text.encode('utf-8'))

    def read_line(self) -> str:
        return self.reader.readline().rstrip('\n')

    def read_all(self):
        lines = []
        while True:
            raw = self.reader.readline()
            if not raw:
                return lines
            lines.append(raw.rstrip('\n'))

    def close(self):
        self.reader.close()
        self.sock.close()


class TestSession(unittest.TestCase):
    """Test cases for Session I/O."""

    def setUp(self):
        server_sock, client_sock = socket.socketpair()
        self.session = Session(server_sock, ('test', 1), write_timeout=0.5)
        self.peer = PeerEnd(client_sock)

    def tearDown(self):
        self.session.close()
        self.peer.close()

    def test_read_lines_strips_endings(self):
        self.peer.send("hello\r\nworld\n")
        self.assertEqual(self.session.read_line(), "hello")
        self.assertEqual(self.session.read_line(), "world")

    def test_read_after_peer_close(self):
        self.peer.send("last\n")
        self.peer.close()
        self.assertEqual(self.session.read_line(), "last")
        with self.assertRaises(PeerDisconnected):
            self.session.read_line()

    def test_send_line(self):
        self.session.send_line("[2024-05-06 07:08:09] alice: hi")
        self.assertEqual(self.peer.read_line(), "[2024-05-06 07:08:09] alice: hi")

    def test_send_after_close_fails(self):
        self.session.close()
        self.assertFalse(self.session.alive)
        with self.assertRaises(PeerWriteError):
            self.session.send_line("anyone?")

    def test_name_is_assigned_once(self):
        self.session.assign_name("alice")
        with self.assertRaises(RuntimeError):
            self.session.assign_name("bob")
        self.assertEqual(self.session.name, "alice")

    def test_abort_unblocks_reader(self):
        errors = []

        def read():
            try:
                self.session.read_line()
            except PeerDisconnected as e:
                errors.append(e)

        reader = threading.Thread(target=read)
        reader.start()
        reader.join(0.2)
        self.session.abort()
        reader.join(TIMEOUT)

        self.assertFalse(reader.is_alive())
        self.assertEqual(len(errors), 1)

    def test_concurrent_writes_do_not_interleave(self):
        writers = 8
        per_writer = 50

        def write(wid):
            for i in range(per_writer):
                self.session.send_line(f"{wid}-{i}-" + "y" * 200)

        self.session.write_timeout = TIMEOUT
        collected = []
        collector = threading.Thread(
            target=lambda: collected.extend(self.peer.read_line() for _ in range(writers * per_writer))
        )
        collector.start()
        threads = [threading.Thread(target=write, args=(w,)) for w in range(writers)]
        for t in threads:
            t.start()
        for t in threads:
            t.join(TIMEOUT)
        collector.join(TIMEOUT)

        self.assertEqual(len(collected), writers * per_writer)
        for line in collected:
            self.assertRegex(line, r"^\d+-\d+-y{200}$")


def tcp_pair():
    """Accepted and connecting ends of a loopback TCP connection.

    The accepted end is left blocking, exactly as the acceptor hands it over.
    """
    listener = socket.create_server(('127.0.0.1', 0))
    try:
        client = socket.create_connection(listener.getsockname(), timeout=TIMEOUT)
        conn, _ = listener.accept()
    finally:
        listener.close()
    conn.settimeout(None)
    return conn, client


class TestSessionOverTcp(unittest.TestCase):
    """Write timeouts on a real TCP connection."""

    def setUp(self):
        conn, client = tcp_pair()
        self.session = Session(conn, conn.getpeername(), write_timeout=0.5)
        self.peer = PeerEnd(client)

    def tearDown(self):
        self.session.close()
        self.peer.close()

    def send_with_deadline(self, line: str):
        """Run send_line on a thread; returns (elapsed, errors) once it finishes."""
        errors = []

        def write():
            try:
                self.session.send_line(line)
            except PeerWriteError as e:
                errors.append(e)

        started = time.monotonic()
        writer = threading.Thread(target=write, daemon=True)
        writer.start()
        writer.join(TIMEOUT)
        self.assertFalse(writer.is_alive(), "send_line blocked past its write timeout")
        return time.monotonic() - started, errors

    def test_slow_peer_write_times_out(self):
        # The peer never reads, so the send buffers fill up
        elapsed, errors = self.send_with_deadline("x" * 20_000_000)
        self.assertEqual(len(errors), 1)
        self.assertLess(elapsed, 0.5 + 2.0)

    def test_write_lock_released_after_timeout(self):
        _, errors = self.send_with_deadline("x" * 20_000_000)
        self.assertEqual(len(errors), 1)

        # Buffers are still full, but the lock is free again
        elapsed, errors = self.send_with_deadline("y")
        self.assertEqual(len(errors), 1)
        self.assertLess(elapsed, 0.5 + 1.0)

    def test_small_line_is_delivered(self):
        self.session.send_line("hello over tcp")
        self.assertEqual(self.peer.read_line(), "hello over tcp")


class TestSessionWorker(unittest.TestCase):
    """Test cases for the per-connection state machine."""

    def setUp(self):
        self.registry = ClientRegistry()
        self.queue = DeliveryQueue(100)
        self.broadcaster = Broadcaster(self.registry, self.queue, clock=lambda: FIXED_TIME)
        self.peers = []

    def tearDown(self):
        for peer in self.peers:
            peer.close()

    def start_worker(self):
        server_sock, client_sock = socket.socketpair()
        session = Session(server_sock, ('test', len(self.peers)))
        worker = SessionWorker(session, self.registry, self.broadcaster)
        thread = threading.Thread(target=worker.run, daemon=True)
        thread.start()
        peer = PeerEnd(client_sock)
        self.peers.append(peer)
        return worker, thread, peer

    def test_full_lifecycle(self):
        worker, thread, peer = self.start_worker()
        self.assertEqual(peer.read_line(), "Enter your username:")

        peer.send("  alice  \n")
        self.assertEqual(peer.read_line(), "[2024-05-06 07:08:09] alice has joined the chat.")
        self.assertEqual(peer.read_line(), "USERLIST:alice")
        self.assertEqual(worker.session.name, "alice")
        self.assertIs(worker.state, SessionState.ACTIVE)

        peer.send("hello there\n   \n/QUIT\n")
        self.assertEqual(peer.read_line(), "[2024-05-06 07:08:09] alice: hello there")
        self.assertEqual(peer.read_all(), ["/quit"])

        thread.join(TIMEOUT)
        self.assertIs(worker.state, SessionState.CLOSED)
        self.assertNotIn("alice", self.registry)
        self.assertEqual(self.queue.drain(), [
            "[2024-05-06 07:08:09] alice has joined the chat.",
            "[2024-05-06 07:08:09] alice: hello there",
            "[2024-05-06 07:08:09] alice has left the chat.",
        ])

    def test_empty_name_closes_without_registering(self):
        worker, thread, peer = self.start_worker()
        peer.read_line()
        peer.send("   \n")

        self.assertEqual(peer.read_all(), [])
        thread.join(TIMEOUT)
        self.assertIs(worker.state, SessionState.CLOSED)
        self.assertEqual(len(self.registry), 0)
        self.assertTrue(self.queue.is_empty())

    def test_disconnect_before_name(self):
        worker, thread, peer = self.start_worker()
        peer.read_line()
        peer.close()

        thread.join(TIMEOUT)
        self.assertIs(worker.state, SessionState.CLOSED)
        self.assertEqual(len(self.registry), 0)

    def test_duplicate_name_rejected(self):
        first, _, first_peer = self.start_worker()
        first_peer.read_line()
        first_peer.send("alice\n")
        first_peer.read_line()
        first_peer.read_line()

        second, second_thread, second_peer = self.start_worker()
        second_peer.read_line()
        second_peer.send("alice\n")

        self.assertEqual(second_peer.read_all(), ["Username already taken. Disconnecting."])
        second_thread.join(TIMEOUT)
        self.assertIs(second.state, SessionState.CLOSED)
        self.assertIs(self.registry.lookup("alice"), first.session)

    def test_abrupt_disconnect_cleans_up(self):
        worker, thread, peer = self.start_worker()
        peer.read_line()
        peer.send("bob\n")
        peer.read_line()
        peer.read_line()
        peer.close()

        thread.join(TIMEOUT)
        self.assertIs(worker.state, SessionState.CLOSED)
        self.assertNotIn("bob", self.registry)
        self.assertIn("[2024-05-06 07:08:09] bob has left the chat.", self.queue.drain())

    def test_worker_runs_only_once(self):
        worker, thread, peer = self.start_worker()
        peer.read_line()
        peer.close()
        thread.join(TIMEOUT)

        with self.assertRaises(RuntimeError):
            worker.run()


if __name__ == '__main__':
    unittest.main()
