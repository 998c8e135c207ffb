"""
Broadcaster module.

Stamps chat and system lines, queues them for ordered persistence and fans
them out to every registered session.
"""

from datetime import datetime
from typing import Callable, List

from common.constants import SERVER_SENDER
from common.protocol_definitions import create_chat_line, create_userlist_line
from server.chat.delivery_queue import DeliveryQueue
from server.chat.errors import PeerWriteError, QueueClosedError
from server.chat.registry import ClientRegistry
from server.utils.logger import logger


class Broadcaster:
    """Server-side message distribution."""

    def __init__(self, registry: ClientRegistry, queue: DeliveryQueue,
                 clock: Callable[[], datetime] = datetime.now):
        self.registry = registry
        self.queue = queue
        self.clock = clock

    def broadcast(self, text: str, sender: str = SERVER_SENDER) -> str:
        """
        Send ``text`` to everyone and queue it for the history file.

        Returns the formatted line. May block while the delivery queue is
        full; a failing recipient never prevents delivery to the others.
        """
        formatted = create_chat_line(text, self.clock())

        try:
            self.queue.push(formatted)
        except QueueClosedError:
            logger.warning(f"Server shutting down, not persisting: {formatted}")

        delivered = self._fan_out(formatted)
        logger.debug(f"Broadcast from {sender} delivered to {delivered} client(s)")
        return formatted

    def broadcast_roster(self) -> str:
        """Push the current ``USERLIST:`` line to everyone. Not persisted."""
        roster = create_userlist_line(self.registry.snapshot_names())
        self._fan_out(roster)
        return roster

    def _fan_out(self, line: str) -> int:
        names: List[str] = self.registry.snapshot_names()
        delivered = 0

        for name in names:
            session = self.registry.lookup(name)
            if session is None:
                # Left between snapshot and lookup
                continue
            try:
                session.send_line(line)
                delivered += 1
            except PeerWriteError as e:
                logger.log_peer_write_failure(name, e)
                self.registry.evict(name, session)

        return delivered
