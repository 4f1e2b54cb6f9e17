"""
Snapshot store: the one place the current container list lives.

The store holds a single reference to an immutable `Snapshot`. `replace`
swaps that reference in one assignment, so a reader sees either the old row
set or the new one, never a mix. A failed refresh simply never calls
`replace` and the previous snapshot stays current.
"""

import logging
from typing import Optional

from .model import EMPTY_SNAPSHOT, ContainerRecord, ResourceSample, Snapshot

logger = logging.getLogger(__name__)


class SnapshotStore:
    def __init__(self, initial: Snapshot = EMPTY_SNAPSHOT):
        self._snapshot = initial
        self._generation = 0

    @property
    def generation(self) -> int:
        """Number of successful replacements so far."""
        return self._generation

    @property
    def loaded(self) -> bool:
        return self._generation > 0

    def replace(self, snapshot: Snapshot) -> None:
        self._snapshot = snapshot
        self._generation += 1
        logger.debug(
            f"Snapshot #{snapshot.sequence} applied ({len(snapshot)} containers)"
        )

    def current(self) -> Snapshot:
        return self._snapshot

    def lookup_by_id(self, container_id: Optional[str]) -> Optional[ContainerRecord]:
        if container_id is None:
            return None
        return self._snapshot.get(container_id)

    def sample_for(self, container_id: str) -> ResourceSample:
        return self._snapshot.sample_for(container_id)
