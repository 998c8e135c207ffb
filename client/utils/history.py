"""
Roster and history helpers for the display layer.

Sorting and searching are case-insensitive, matching what users expect
from the roster and the search box.
"""

from bisect import bisect_left
from pathlib import Path
from typing import Iterable, List, Optional

from common.constants import ENCODING
from common.protocol_definitions import is_userlist_line, parse_userlist_line


def sort_names(names: Iterable[str]) -> List[str]:
    """Case-insensitive, stable sort of display names."""
    return sorted(names, key=str.lower)


def find_name(sorted_names: List[str], target: Optional[str]) -> int:
    """
    Binary search a list produced by sort_names().

    Returns the index of a case-insensitive match, or -1.
    """
    if sorted_names is None or target is None:
        return -1
    keys = [name.lower() for name in sorted_names]
    wanted = target.lower()
    index = bisect_left(keys, wanted)
    if index < len(keys) and keys[index] == wanted:
        return index
    return -1


def _search(items: Optional[Iterable[Optional[str]]], keyword: Optional[str]) -> List[str]:
    if items is None or keyword is None:
        return []
    needle = keyword.lower()
    return [item for item in items if item is not None and needle in item.lower()]


def search_messages(messages: Optional[Iterable[Optional[str]]], keyword: Optional[str]) -> List[str]:
    """Messages containing ``keyword``, ignoring case, in their original order."""
    return _search(messages, keyword)


def search_users(users: Optional[Iterable[Optional[str]]], keyword: Optional[str]) -> List[str]:
    """Users whose name contains ``keyword``, ignoring case."""
    return _search(users, keyword)


def parse_user_list(line: str) -> List[str]:
    """Names from a USERLIST line with blanks dropped; [] for any other line."""
    if not is_userlist_line(line):
        return []
    return [name for name in parse_userlist_line(line) if name.strip()]


def load_history(path: str) -> List[str]:
    """Read a chat history file. A missing file yields an empty history."""
    history_path = Path(path)
    if not history_path.is_file():
        return []
    with open(history_path, 'r', encoding=ENCODING, errors='replace') as f:
        return [line.rstrip('\r\n') for line in f if line.strip()]
