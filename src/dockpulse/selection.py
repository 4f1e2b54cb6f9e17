"""
List/detail mode and cursor handling.

The detail view is tracked by container id, never by a reference into the
current row list: rows are replaced wholesale on every refresh, so the id is
re-resolved against each new snapshot.

Transitions:
  LIST --open (snapshot non-empty, cursor in range)--> DETAIL
  DETAIL --back--> LIST
"""

import logging
from typing import FrozenSet, Optional

from .messages import Intent
from .model import ContainerRecord, SelectionState, Snapshot, ViewMode

logger = logging.getLogger(__name__)

ALLOWED_INTENTS = {
    ViewMode.LIST: frozenset({
        Intent.UP, Intent.DOWN, Intent.OPEN, Intent.REFRESH, Intent.RESTART,
        Intent.START, Intent.STOP, Intent.HELP, Intent.QUIT,
    }),
    ViewMode.DETAIL: frozenset({
        Intent.BACK, Intent.REFRESH, Intent.RESTART,
        Intent.START, Intent.STOP, Intent.HELP, Intent.QUIT,
    }),
}


def allowed_intents(mode: ViewMode) -> FrozenSet[Intent]:
    return ALLOWED_INTENTS[mode]


def clamp_cursor(index: int, length: int) -> int:
    if length <= 0:
        return 0
    return max(0, min(index, length - 1))


class ViewModeMachine:
    """Owns a SelectionState and applies the mode transitions to it."""

    def __init__(self, selection: Optional[SelectionState] = None):
        self.selection = selection or SelectionState()

    @property
    def mode(self) -> ViewMode:
        return self.selection.mode

    @property
    def in_detail(self) -> bool:
        return self.selection.mode is ViewMode.DETAIL

    def allows(self, intent: Intent) -> bool:
        return intent in ALLOWED_INTENTS[self.selection.mode]

    def move(self, delta: int, snapshot: Snapshot) -> bool:
        if self.in_detail:
            return False
        new_index = clamp_cursor(self.selection.cursor_index + delta, len(snapshot))
        if new_index == self.selection.cursor_index:
            return False
        self.selection.cursor_index = new_index
        return True

    def open(self, snapshot: Snapshot) -> Optional[ContainerRecord]:
        """Enter detail mode on the cursor row; None when nothing to open."""
        if self.in_detail:
            return None
        record = snapshot.at(self.selection.cursor_index)
        if record is None:
            return None
        self.selection.mode = ViewMode.DETAIL
        self.selection.detail_id = record.id
        logger.debug(f"Detail opened for {record.name} ({record.short_id})")
        return record

    def back(self) -> bool:
        if not self.in_detail:
            return False
        self.selection.mode = ViewMode.LIST
        self.selection.detail_id = None
        return True

    def cursor_record(self, snapshot: Snapshot) -> Optional[ContainerRecord]:
        return snapshot.at(self.selection.cursor_index)


def reconcile(selection: SelectionState, snapshot: Snapshot) -> Optional[ContainerRecord]:
    """Re-validate a selection against a freshly applied snapshot.

    The cursor is clamped into the new row range. In detail mode the detail id
    is re-resolved and the matching record returned; a missing id is kept as
    is (the container went away) and None is returned. The mode never changes.
    """
    selection.cursor_index = clamp_cursor(selection.cursor_index, len(snapshot))
    if selection.mode is not ViewMode.DETAIL or selection.detail_id is None:
        return None
    return snapshot.get(selection.detail_id)
