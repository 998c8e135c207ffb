"""
Session worker module.

One worker runs per accepted connection and drives it through
NEGOTIATING -> ACTIVE -> CLOSING -> CLOSED.
"""

from enum import Enum

from common.constants import QUIT_COMMAND, ServerLines
from common.protocol_definitions import (
    create_join_notice, create_leave_notice, create_user_message, is_quit_command
)
from server.chat.broadcaster import Broadcaster
from server.chat.errors import NameTakenError, PeerDisconnected, PeerWriteError
from server.chat.registry import ClientRegistry
from server.chat.session import Session
from server.utils.logger import logger


class SessionState(Enum):
    NEGOTIATING = 'negotiating'
    ACTIVE = 'active'
    CLOSING = 'closing'
    CLOSED = 'closed'


class SessionWorker:
    """Per-connection control loop."""

    def __init__(self, session: Session, registry: ClientRegistry, broadcaster: Broadcaster):
        self.session = session
        self.registry = registry
        self.broadcaster = broadcaster
        self.state = SessionState.NEGOTIATING

    def run(self):
        """Serve the connection until it ends; failures stay inside this session."""
        if self.state is not SessionState.NEGOTIATING:
            raise RuntimeError(f"Session worker already {self.state.value}")

        try:
            if self._negotiate():
                self._serve()
        except Exception as e:
            logger.log_error(f"client handler {self.session.address}", e)
        finally:
            if self.state is SessionState.ACTIVE:
                self.state = SessionState.CLOSING
                self._cleanup()
            else:
                self.session.close()
            self.state = SessionState.CLOSED

    def _negotiate(self) -> bool:
        """Ask for a name and register it. False means the connection is done."""
        session = self.session
        try:
            session.send_line(ServerLines.GREETING)
            proposed = session.read_line().strip()
        except (PeerDisconnected, PeerWriteError) as e:
            logger.debug(f"{session.address} disconnected before choosing a name: {e}")
            return False

        if not proposed:
            logger.debug(f"{session.address} sent an empty username")
            return False

        try:
            self.registry.register(proposed, session)
        except NameTakenError:
            logger.log_rejected(proposed, session.address)
            try:
                session.send_line(ServerLines.NAME_TAKEN)
            except PeerWriteError:
                pass
            return False

        session.assign_name(proposed)
        self.state = SessionState.ACTIVE
        logger.log_join(proposed, session.address)
        self.broadcaster.broadcast(create_join_notice(proposed), proposed)
        self.broadcaster.broadcast_roster()
        return True

    def _serve(self):
        name = self.session.name
        while True:
            try:
                line = self.session.read_line()
            except PeerDisconnected as e:
                logger.debug(f"{name} connection ended: {e}")
                return

            if is_quit_command(line):
                return
            if not line.strip():
                continue
            self.broadcaster.broadcast(create_user_message(name, line), name)

    def _cleanup(self):
        session = self.session
        name = session.name

        self.registry.unregister(name, session)
        logger.log_departure(name)
        try:
            self.broadcaster.broadcast(create_leave_notice(name), name)
            self.broadcaster.broadcast_roster()
        finally:
            try:
                session.send_line(QUIT_COMMAND)
            except PeerWriteError:
                pass
            session.close()
