"""
History persistence module.

Every broadcast line is appended to a plain-text file, one line per message.
Only the PersistenceWorker writes to the store, so appends follow delivery
queue order and never interleave.
"""

import threading
from pathlib import Path
from typing import List

from common.constants import CHAT_HISTORY_FILE, ENCODING
from server.chat.delivery_queue import DeliveryQueue
from server.chat.errors import PersistenceError, QueueClosedError
from server.utils.logger import logger


class HistoryStore:
    """Append-only chat transcript on disk."""

    def __init__(self, path: str = CHAT_HISTORY_FILE):
        self.path = Path(path)

    def append(self, line: str):
        """Append one line. Raises PersistenceError if the file cannot be written."""
        try:
            with open(self.path, 'a', encoding=ENCODING) as f:
                f.write(line + '\n')
        except OSError as e:
            raise PersistenceError(f"Failed to write to history file {self.path}: {e}") from e

    def read_lines(self) -> List[str]:
        """All persisted lines, oldest first. A missing file reads as empty."""
        if not self.path.exists():
            return []
        with open(self.path, 'r', encoding=ENCODING, errors='replace') as f:
            return [line.rstrip('\r\n') for line in f]


class PersistenceWorker:
    """Single consumer that drains the delivery queue into the history store."""

    def __init__(self, queue: DeliveryQueue, store: HistoryStore):
        self.queue = queue
        self.store = store
        self.thread = None
        self.persisted = 0

    def start(self):
        self.thread = threading.Thread(target=self.run, name='history-writer', daemon=True)
        self.thread.start()

    def run(self):
        logger.info("Message processor thread started")
        while True:
            try:
                line = self.queue.pop()
            except QueueClosedError:
                break

            try:
                self.store.append(line)
                self.persisted += 1
            except PersistenceError as e:
                logger.log_error("history", e)
        logger.info("Message processor thread stopped")

    def join(self, timeout: float = None):
        if self.thread:
            self.thread.join(timeout=timeout)
