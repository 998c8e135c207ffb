"""
Client registry module.

Maps display names to live sessions. Every read and write goes through a
single lock so a reader never observes a half-applied join or departure.
"""

import threading
from typing import Dict, List, Optional

from server.chat.errors import NameTakenError
from server.chat.session import Session


class ClientRegistry:
    """Concurrent, unique-name directory of connected sessions."""

    def __init__(self):
        self._sessions: Dict[str, Session] = {}  # name -> session
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)

    def __contains__(self, name: str) -> bool:
        with self._lock:
            return name in self._sessions

    def register(self, name: str, session: Session):
        """
        Insert ``name`` if nobody holds it yet.

        Names are compared exactly (case-sensitive). Raises NameTakenError and
        leaves the registry untouched when the name is in use.
        """
        with self._lock:
            if name in self._sessions:
                raise NameTakenError(name)
            self._sessions[name] = session

    def unregister(self, name: str, session: Optional[Session] = None) -> bool:
        """
        Remove ``name``. Returns False if there was nothing to remove.

        When ``session`` is given the entry is only removed if it still belongs
        to that session, so a late cleanup cannot drop a newer owner of the name.
        """
        with self._lock:
            current = self._sessions.get(name)
            if current is None:
                return False
            if session is not None and current is not session:
                return False
            del self._sessions[name]
            return True

    def lookup(self, name: str) -> Optional[Session]:
        """Return the session for ``name``; it may disconnect at any time after."""
        with self._lock:
            return self._sessions.get(name)

    def snapshot_names(self) -> List[str]:
        """Names registered at this instant. Order is unspecified."""
        with self._lock:
            return list(self._sessions.keys())

    def evict(self, name: str, session: Session) -> bool:
        """Drop a session whose stream has failed and wake its worker."""
        removed = self.unregister(name, session)
        session.abort()
        return removed
