"""
Protocol definitions for the LAN Chat Relay.

The wire format is plain text, one logical message per newline-terminated
line. This module builds and recognises every kind of line exchanged between
client and server.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional

from common.constants import (
    ENCODING, TIMESTAMP_FORMAT, QUIT_COMMAND, USERLIST_PREFIX,
    USERLIST_SEPARATOR, ServerLines
)


@dataclass(frozen=True)
class HistoryLine:
    """A timestamped chat or system line, as broadcast and persisted."""
    timestamp: datetime
    text: str

    def format(self) -> str:
        return f"[{format_timestamp(self.timestamp)}] {self.text}"


def format_timestamp(moment: datetime) -> str:
    """Render a timestamp the way chat lines carry it."""
    return moment.strftime(TIMESTAMP_FORMAT)


def create_chat_line(text: str, moment: Optional[datetime] = None) -> str:
    """Stamp text with the server-local time: ``[yyyy-MM-dd HH:mm:ss] text``."""
    return HistoryLine(moment or datetime.now(), text).format()


def create_user_message(name: str, message: str) -> str:
    """Chat content as seen by everyone: ``name: message``."""
    return f"{name}: {message}"


def create_join_notice(name: str) -> str:
    return ServerLines.JOINED.format(name=name)


def create_leave_notice(name: str) -> str:
    return ServerLines.LEFT.format(name=name)


def create_userlist_line(names: List[str]) -> str:
    """
    Build the roster control line.

    Names are joined with commas and nothing is escaped, so a name that
    itself contains a comma cannot be told apart on the receiving side.
    """
    return USERLIST_PREFIX + USERLIST_SEPARATOR.join(names)


def is_userlist_line(line: str) -> bool:
    return line.startswith(USERLIST_PREFIX)


def parse_userlist_line(line: str) -> List[str]:
    """Split a ``USERLIST:`` line back into names (empty roster -> [''])."""
    return line[len(USERLIST_PREFIX):].split(USERLIST_SEPARATOR)


def is_quit_command(line: str) -> bool:
    """True for ``/quit`` in any letter case."""
    return line.lower() == QUIT_COMMAND


def is_name_rejection(line: Optional[str]) -> bool:
    return line is not None and ServerLines.NAME_TAKEN_MARKER in line


def encode_line(line: str) -> bytes:
    """Terminate and encode a single protocol line."""
    return (line + '\n').encode(ENCODING)


def strip_line_ending(raw: str) -> str:
    return raw.rstrip('\r\n')
