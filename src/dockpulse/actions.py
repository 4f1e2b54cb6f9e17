"""
Lifecycle command dispatch (start / stop / restart).

A command never changes state directly: it becomes a `RunCommand` effect the
driver executes in the background, and the next refresh shows the new
lifecycle state. Commands need a resolved identity: the detail container in
detail mode, the cursor row in list mode. Without one the call is a no-op.
"""

import logging
from typing import Optional

from .messages import Command, RunCommand
from .model import ContainerRecord
from .selection import ViewModeMachine
from .store import SnapshotStore

logger = logging.getLogger(__name__)


class CommandDispatcher:
    def __init__(self, store: SnapshotStore, machine: ViewModeMachine):
        self.store = store
        self.machine = machine

    def resolve_target(self) -> Optional[ContainerRecord]:
        if self.machine.in_detail:
            return self.store.lookup_by_id(self.machine.selection.detail_id)
        return self.machine.cursor_record(self.store.current())

    def dispatch(self, command: Command, container_id: Optional[str]) -> Optional[RunCommand]:
        record = self.store.lookup_by_id(container_id)
        if record is None:
            logger.debug(f"Ignoring {command.value}: no resolved container ({container_id})")
            return None
        logger.info(f"{command.progressive} container {record.name} ({record.short_id})")
        return RunCommand(command=command, container_id=record.id, name=record.name)

    def start(self, container_id: Optional[str]) -> Optional[RunCommand]:
        return self.dispatch(Command.START, container_id)

    def stop(self, container_id: Optional[str]) -> Optional[RunCommand]:
        return self.dispatch(Command.STOP, container_id)

    def restart(self, container_id: Optional[str]) -> Optional[RunCommand]:
        return self.dispatch(Command.RESTART, container_id)

    def on_selection(self, command: Command) -> Optional[RunCommand]:
        target = self.resolve_target()
        return self.dispatch(command, target.id if target else None)
