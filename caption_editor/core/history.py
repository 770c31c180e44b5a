"""Bounded linear undo/redo history of caption collection snapshots.

WHY: Every edit must be undoable, but an editing session can run for
hours. The history keeps full deep copies (so later in-place mutation of
the live collection can never corrupt the past) and caps memory by
evicting the oldest snapshot first.

HOW: A collections.deque of snapshots plus an integer cursor. record()
drops the redo branch, appends, and evicts from the left when the
capacity is exceeded. undo()/redo() only move the cursor and hand back a
fresh copy of the snapshot under it.

RULES:
- Starts with exactly one snapshot (the initial collection) at cursor 0
- The snapshot under the cursor equals the live collection after any mutation
- Recording while the cursor is not at the newest snapshot destroys the redo branch
- On overflow the oldest snapshot is evicted and the cursor shifts down by one,
  so it keeps pointing at the same logical snapshot
- Snapshots are deep copies in both directions (in and out)
"""

from __future__ import annotations

import copy
from collections import deque
from typing import Deque, List, Optional

from caption_editor.config import HISTORY_CAPACITY
from caption_editor.core.ir import Caption


class History:
    """Snapshot history with a cursor and FIFO eviction.

    RULES:
    - capacity must be at least 1
    - len(history) never exceeds capacity
    - undo()/redo() return None when the cursor cannot move
    """

    def __init__(
        self,
        initial: Optional[List[Caption]] = None,
        capacity: int = HISTORY_CAPACITY,
    ) -> None:
        if capacity < 1:
            raise ValueError("History capacity must be at least 1, got {}".format(capacity))
        self._capacity = capacity
        self._snapshots: Deque[List[Caption]] = deque([copy.deepcopy(initial or [])])
        self._cursor = 0

    def __len__(self) -> int:
        return len(self._snapshots)

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def cursor(self) -> int:
        return self._cursor

    @property
    def can_undo(self) -> bool:
        return self._cursor > 0

    @property
    def can_redo(self) -> bool:
        return self._cursor < len(self._snapshots) - 1

    def current(self) -> List[Caption]:
        """Return a copy of the snapshot under the cursor."""
        return copy.deepcopy(self._snapshots[self._cursor])

    def record(self, captions: List[Caption]) -> None:
        """Append a snapshot of ``captions`` after the cursor.

        Any snapshots after the cursor (the redo branch) are discarded first.
        """
        while len(self._snapshots) > self._cursor + 1:
            self._snapshots.pop()

        self._snapshots.append(copy.deepcopy(captions))
        self._cursor += 1

        while len(self._snapshots) > self._capacity:
            self._snapshots.popleft()
            self._cursor -= 1

    def undo(self) -> Optional[List[Caption]]:
        if not self.can_undo:
            return None
        self._cursor -= 1
        return self.current()

    def redo(self) -> Optional[List[Caption]]:
        if not self.can_redo:
            return None
        self._cursor += 1
        return self.current()
