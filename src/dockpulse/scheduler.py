"""
Refresh scheduling.

Two triggers ask for a container fetch: the periodic timer and an explicit
refresh from the user. At most one fetch is outstanding at a time:

  - a timer tick while a fetch is in flight is dropped (the next tick will
    catch up anyway);
  - an explicit refresh while a fetch is in flight queues exactly one
    follow-up, issued as soon as the outstanding fetch completes, so the
    user always gets data fetched after the key press.

Every fetch gets a monotonically increasing sequence number. A completion
older than the last applied one is stale and must be discarded, which keeps
the store from ever reverting to an older fetch's content.
"""

import enum
import logging
from typing import Optional

logger = logging.getLogger(__name__)


class RefreshReason(enum.Enum):
    STARTUP = "startup"
    TIMER = "timer"
    USER = "user"
    FOLLOW_UP = "follow-up"


class RefreshScheduler:
    def __init__(self, interval: float = 0.5):
        if interval <= 0:
            raise ValueError("refresh interval must be positive")
        self.interval = interval
        self._next_sequence = 0
        self._outstanding: Optional[int] = None
        self._follow_up = False
        self._last_applied = 0

    @property
    def outstanding(self) -> Optional[int]:
        return self._outstanding

    @property
    def follow_up_pending(self) -> bool:
        return self._follow_up

    @property
    def last_applied(self) -> int:
        return self._last_applied

    def _issue(self, reason: RefreshReason) -> int:
        self._next_sequence += 1
        self._outstanding = self._next_sequence
        logger.debug(f"Fetch #{self._outstanding} issued ({reason.value})")
        return self._outstanding

    def begin(self, reason: RefreshReason) -> Optional[int]:
        """Return the sequence number of a fetch to issue, or None."""
        if self._outstanding is not None:
            if reason is RefreshReason.USER:
                self._follow_up = True
            return None
        return self._issue(reason)

    def complete(self, sequence: int) -> Optional[int]:
        """Mark a fetch finished; returns a queued follow-up to issue, if any."""
        if sequence != self._outstanding:
            return None
        self._outstanding = None
        if self._follow_up:
            self._follow_up = False
            return self._issue(RefreshReason.FOLLOW_UP)
        return None

    def accept(self, sequence: int) -> bool:
        """Whether a completed fetch may be applied to the store."""
        if sequence < self._last_applied:
            logger.debug(
                f"Discarding stale fetch #{sequence} (already applied #{self._last_applied})"
            )
            return False
        self._last_applied = sequence
        return True
