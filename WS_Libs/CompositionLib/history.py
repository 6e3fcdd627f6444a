"""
Undo/redo history of composition snapshots.

Entries are stored by value (deep copies), so later changes to a snapshot
dict held by the caller never leak into the history.
"""

import copy
import logging
from typing import Any, List, Optional

from WS_Libs.constants import HISTORY_MAX_SIZE

logger = logging.getLogger(__name__)


class HistoryStack:
    """
    Bounded, pointer-indexed snapshot history.

    Pushing after an undo discards the redo tail. When the stack is full the
    oldest entry is dropped.

    Example:
        >>> history = HistoryStack(max_size=3)
        >>> history.push({"step": 1})
        >>> history.push({"step": 2})
        >>> history.undo()
        {'step': 1}
    """

    def __init__(self, max_size: int = HISTORY_MAX_SIZE):
        if max_size < 1:
            raise ValueError(f"max_size must be at least 1, got {max_size}")
        self.max_size = int(max_size)
        self._entries: List[Any] = []
        self._index = -1

    def push(self, entry: Any) -> None:
        """Append a snapshot after the current position."""
        del self._entries[self._index + 1:]
        self._entries.append(copy.deepcopy(entry))

        if len(self._entries) > self.max_size:
            overflow = len(self._entries) - self.max_size
            del self._entries[:overflow]
            logger.debug(f"History full, dropped {overflow} oldest entr{'y' if overflow == 1 else 'ies'}")

        self._index = len(self._entries) - 1

    def undo(self) -> Optional[Any]:
        """Step back one entry and return it, or None at the oldest entry."""
        if not self.can_undo():
            return None
        self._index -= 1
        return copy.deepcopy(self._entries[self._index])

    def redo(self) -> Optional[Any]:
        """Step forward one entry and return it, or None at the newest entry."""
        if not self.can_redo():
            return None
        self._index += 1
        return copy.deepcopy(self._entries[self._index])

    def can_undo(self) -> bool:
        return self._index > 0

    def can_redo(self) -> bool:
        return self._index < len(self._entries) - 1

    def current(self) -> Optional[Any]:
        if self._index < 0:
            return None
        return copy.deepcopy(self._entries[self._index])

    def clear(self) -> None:
        self._entries.clear()
        self._index = -1

    def __len__(self) -> int:
        return len(self._entries)
