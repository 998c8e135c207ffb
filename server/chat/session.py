"""
Per-connection session state.

A Session owns one client socket. Reads happen only on the owning worker
thread; writes may arrive from any broadcasting thread and are serialized by
a per-session lock so lines never interleave.
"""

import select
import socket
import threading
import time
from typing import Optional, Tuple

from common.constants import ENCODING, WRITE_TIMEOUT
from common.protocol_definitions import encode_line, strip_line_ending
from server.chat.errors import PeerDisconnected, PeerWriteError


class Session:
    """Server-side state for one connected client."""

    def __init__(self, sock: socket.socket, address: Tuple, write_timeout: float = WRITE_TIMEOUT):
        self.sock = sock
        self.address = address
        self.write_timeout = write_timeout
        self.name: Optional[str] = None
        self.alive = True

        self._write_lock = threading.Lock()
        self._reader = sock.makefile('r', encoding=ENCODING, errors='replace', newline='\n')

    def __repr__(self):
        return f"Session(name={self.name!r}, address={self.address!r}, alive={self.alive})"

    def assign_name(self, name: str):
        """Set the display name; a session is named exactly once."""
        if self.name is not None:
            raise RuntimeError(f"Session already named '{self.name}'")
        self.name = name

    def read_line(self) -> str:
        """
        Block until the client sends a full line and return it without its
        line ending.

        Raises PeerDisconnected on end of stream or on any socket error.
        """
        try:
            raw = self._reader.readline()
        except (OSError, ValueError) as e:
            # ValueError: the reader was closed underneath us
            raise PeerDisconnected(str(e)) from e

        if not raw:
            raise PeerDisconnected("end of stream")
        return strip_line_ending(raw)

    def send_line(self, line: str):
        """
        Write one line, giving up after ``write_timeout`` seconds.

        Raises PeerWriteError if the session is dead, the peer is too slow or
        the socket fails.
        """
        if not self.alive:
            raise PeerWriteError(f"session {self.address} is closed")

        data = encode_line(line)
        deadline = time.monotonic() + self.write_timeout

        if not self._write_lock.acquire(timeout=self.write_timeout):
            raise PeerWriteError(f"write lock for {self.address} timed out")
        try:
            view = memoryview(data)
            while view:
                remaining = deadline - time.monotonic()
                if remaining <= 0:
                    raise PeerWriteError(f"write to {self.address} timed out")
                _, writable, _ = select.select([], [self.sock], [], remaining)
                if not writable:
                    raise PeerWriteError(f"write to {self.address} timed out")
                # The socket stays blocking for the reader, so each send must not block
                try:
                    sent = self.sock.send(view, socket.MSG_DONTWAIT)
                except BlockingIOError:
                    continue
                view = view[sent:]
        except (OSError, ValueError) as e:
            raise PeerWriteError(f"write to {self.address} failed: {e}") from e
        finally:
            self._write_lock.release()

    def abort(self):
        """Mark the session dead and shut the socket so a blocked read returns."""
        self.alive = False
        try:
            self.sock.shutdown(socket.SHUT_RDWR)
        except OSError:
            # already disconnected
            pass

    def close(self):
        """Release the stream. Safe to call more than once."""
        self.alive = False
        try:
            self._reader.close()
        except OSError:
            pass
        try:
            self.sock.close()
        except OSError:
            pass
