"""
undo history: a bounded stack of board snapshots
"""
from collections import deque, namedtuple

from config import HISTORY_DEPTH


HistoryEntry = namedtuple('HistoryEntry', ['grid', 'score', 'move_count'])


class History:
    """
    last few pre-move snapshots, newest on top

    the oldest snapshot is dropped once depth is exceeded. grids are copied
    on the way in and on the way out so the live board is never aliased.
    """

    def __init__(self, depth=HISTORY_DEPTH):
        self._entries = deque(maxlen=depth)

    def push(self, grid, score, move_count):
        self._entries.append(HistoryEntry(grid.copy(), score, move_count))

    def peek(self):
        """most recent entry (with a private grid copy), or None"""
        if not self._entries:
            return None
        entry = self._entries[-1]
        return entry._replace(grid=entry.grid.copy())

    def pop(self):
        entry = self.peek()
        if entry is not None:
            self._entries.pop()
        return entry

    def clear(self):
        self._entries.clear()

    @property
    def depth(self):
        return self._entries.maxlen

    def __len__(self):
        return len(self._entries)

    def __bool__(self):
        return bool(self._entries)
