#!/usr/bin/env python3
"""
Tests for client/chat/chat_client.py and the console client, run against a
real server on an ephemeral port.
"""

import queue
import tempfile
import threading
import unittest

import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent))

from client.chat.chat_client import ChatClient
from client.main_client import ConsoleClient
from client.utils.config import ClientConfig
from server.main_server import ChatServer
from server.utils.config import ServerConfig


TIMEOUT = 5.0


class RecordingListener:
    """Collects ChatClient callbacks into thread-safe queues."""

    def __init__(self, client: ChatClient):
        self.messages = queue.Queue()
        self.user_lists = queue.Queue()
        self.statuses = queue.Queue()
        client.set_message_handler(self.messages.put)
        client.set_user_list_handler(self.user_lists.put)
        client.set_status_handler(self.statuses.put)

    def next_message_containing(self, text: str) -> str:
        while True:
            message = self.messages.get(timeout=TIMEOUT)
            if text in message:
                return message

    def next_user_list_with(self, names) -> list:
        while True:
            users = self.user_lists.get(timeout=TIMEOUT)
            if set(users) == set(names):
                return users


class TestChatClient(unittest.TestCase):
    """Test cases for ChatClient."""

    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        config = ServerConfig(host='127.0.0.1', port=0,
                              history_file=str(Path(self.tmp.name) / "history.txt"))
        self.server = ChatServer(config)
        self.server.start()
        self.host, self.port = self.server.address
        self.clients = []

    def tearDown(self):
        for client in self.clients:
            client.disconnect()
        self.server.stop()
        self.tmp.cleanup()

    def make_client(self):
        client = ChatClient(ClientConfig(self.host, self.port))
        listener = RecordingListener(client)
        self.clients.append(client)
        return client, listener

    def test_connect_and_receive_own_messages(self):
        client, listener = self.make_client()

        self.assertTrue(client.connect("alice"))
        self.assertTrue(client.is_connected)
        self.assertEqual(listener.statuses.get(timeout=TIMEOUT), True)
        listener.next_message_containing("alice has joined the chat.")
        self.assertEqual(listener.next_user_list_with(["alice"]), ["alice"])

        self.assertTrue(client.send_message("hi all"))
        self.assertRegex(listener.next_message_containing("alice: hi all"),
                         r"^\[\d{4}-\d{2}-\d{2} \d{2}:\d{2}:\d{2}\] alice: hi all$")

    def test_duplicate_name_is_refused(self):
        first, _ = self.make_client()
        self.assertTrue(first.connect("alice"))

        second, _ = self.make_client()
        self.assertFalse(second.connect("alice"))
        self.assertFalse(second.is_connected)
        self.assertFalse(second.send_message("should not send"))

    def test_roster_and_departure_seen_by_others(self):
        alice, alice_events = self.make_client()
        bob, _ = self.make_client()
        self.assertTrue(alice.connect("alice"))
        self.assertTrue(bob.connect("bob"))
        alice_events.next_user_list_with(["alice", "bob"])

        bob.disconnect()
        self.assertFalse(bob.is_connected)
        alice_events.next_message_containing("bob has left the chat.")
        self.assertEqual(alice_events.next_user_list_with(["alice"]), ["alice"])

    def test_disconnect_notifies_once(self):
        client, listener = self.make_client()
        self.assertTrue(client.connect("solo"))
        self.assertEqual(listener.statuses.get(timeout=TIMEOUT), True)

        client.disconnect()
        client.disconnect()
        self.assertEqual(listener.statuses.get(timeout=TIMEOUT), False)
        client.receiver_thread.join(TIMEOUT)
        self.assertTrue(listener.statuses.empty())

    def test_connect_to_closed_port(self):
        host, port = self.host, self.port
        self.server.stop()

        client = ChatClient(ClientConfig(host, port))
        statuses = []
        client.set_status_handler(statuses.append)
        self.assertFalse(client.connect("late"))
        self.assertEqual(statuses, [False])


class TestRosterDispatch(unittest.TestCase):
    """Roster lines reach handlers without blank names."""

    def test_blank_names_dropped(self):
        client = ChatClient(ClientConfig('127.0.0.1', 1))
        listener = RecordingListener(client)

        client._dispatch("USERLIST:bob,, ,alice")
        client._dispatch("USERLIST:")

        self.assertEqual(listener.user_lists.get_nowait(), ["bob", "alice"])
        self.assertEqual(listener.user_lists.get_nowait(), [])
        self.assertTrue(listener.messages.empty())

    def test_console_prints_sorted_roster(self):
        lines = []
        console = ConsoleClient(ClientConfig('127.0.0.1', 1, username="x"), output=lines.append)
        console.chat_client._dispatch("USERLIST:carol,,Bob,alice")
        self.assertEqual(lines, ["Active users: alice, Bob, carol"])


class TestConsoleClient(unittest.TestCase):
    """Test cases for the console front end."""

    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        config = ServerConfig(host='127.0.0.1', port=0,
                              history_file=str(Path(self.tmp.name) / "history.txt"))
        self.server = ChatServer(config)
        self.server.start()
        self.host, self.port = self.server.address

    def tearDown(self):
        self.server.stop()
        self.tmp.cleanup()

    def test_console_session(self):
        output = queue.Queue()
        typed = queue.Queue()
        console = ConsoleClient(ClientConfig(self.host, self.port, username="dave"), output=output.put)

        runner = threading.Thread(target=lambda: output.put(("done", console.run(lambda: typed.get(timeout=TIMEOUT)))))
        runner.start()

        seen = []

        def wait_for(text):
            # Receiver-thread output may arrive before the main loop's own lines
            for item in seen:
                if isinstance(item, str) and text in item:
                    return item
            while True:
                item = output.get(timeout=TIMEOUT)
                seen.append(item)
                if isinstance(item, str) and text in item:
                    return item

        wait_for("Connected! Type messages")
        wait_for("Active users: dave")
        typed.put("hello from the console")
        wait_for("dave: hello from the console")
        typed.put("/quit")

        runner.join(TIMEOUT)
        self.assertFalse(runner.is_alive())
        remaining = []
        while not output.empty():
            remaining.append(output.get())
        self.assertIn(("done", True), remaining)

    def test_console_reports_rejection(self):
        holder = ChatClient(ClientConfig(self.host, self.port))
        self.assertTrue(holder.connect("erin"))
        try:
            lines = []
            console = ConsoleClient(ClientConfig(self.host, self.port, username="erin"), output=lines.append)
            self.assertFalse(console.run(lambda: None))
            self.assertIn("Failed to connect to server.", lines)
        finally:
            holder.disconnect()


if __name__ == '__main__':
    unittest.main()
