"""
Application state owner.

`DashboardState` holds every piece of mutable state in the program: the
snapshot store, the selection, the refresh bookkeeping and the status-line
errors. It is only ever touched from the driver's event loop, through a
single entry point:

    effects = state.dispatch(message)

Messages come from the timer, the keyboard (as intents) and the background
workers. `dispatch` applies the message and returns the effects the driver
must carry out (fetch containers, run a command, quit). It never raises for
runtime problems: those arrive as failure messages and end up as status-line
errors.

Error kinds:
  - fatal: no connection at startup; quit is the only accepted intent
  - refresh: shown until the next successful refresh
  - transient: command failures, cleared after `error_timeout` seconds
"""

import logging
import time
from dataclasses import dataclass
from typing import Callable, List, Optional, Tuple

from .actions import CommandDispatcher
from .messages import (
    BackendFailed, BackendReady, Command, CommandCompleted, ContainersLoaded,
    Effect, FetchContainers, Intent, Message, Quit, RefreshFailed,
    Tick, UserIntent,
)
from .model import ContainerRecord, ResourceSample
from .scheduler import RefreshReason, RefreshScheduler
from .selection import ViewModeMachine, reconcile
from .store import SnapshotStore

logger = logging.getLogger(__name__)

INTENT_COMMANDS = {
    Intent.START: Command.START,
    Intent.STOP: Command.STOP,
    Intent.RESTART: Command.RESTART,
}


@dataclass(frozen=True)
class Notice:
    text: str
    timestamp: float
    is_error: bool = False


class DashboardState:
    def __init__(
        self,
        refresh_interval: float = 0.5,
        error_timeout: float = 3.0,
        clock: Callable[[], float] = time.time,
    ):
        self.store = SnapshotStore()
        self.scheduler = RefreshScheduler(refresh_interval)
        self.machine = ViewModeMachine()
        self.commands = CommandDispatcher(self.store, self.machine)
        self.error_timeout = error_timeout
        self.clock = clock

        self.connected = False
        self.fatal_error: Optional[str] = None
        self.refresh_error: Optional[str] = None
        self.notice: Optional[Notice] = None
        self.show_help = False

        self._detail_record: Optional[ContainerRecord] = None
        self._detail_sample: Optional[ResourceSample] = None
        self._version = 0

    # --- read side ---

    @property
    def version(self) -> int:
        return self._version

    @property
    def selection(self):
        return self.machine.selection

    @property
    def loading(self) -> bool:
        return not self.store.loaded and not self.fatal_error

    def detail(self) -> Optional[Tuple[ContainerRecord, ResourceSample, bool]]:
        """Resolve the detail container: (record, sample, stale).

        `stale` is True when the runtime no longer reports the container; the
        last known record is returned unchanged in that case.
        """
        if not self.machine.in_detail:
            return None
        record = self.store.lookup_by_id(self.selection.detail_id)
        if record is not None:
            return record, self.store.sample_for(record.id), False
        if self._detail_record is None:
            return None
        return self._detail_record, self._detail_sample or ResourceSample(), True

    # --- write side ---

    def _touch(self) -> None:
        self._version += 1

    def set_notice(self, text: str) -> None:
        self.notice = Notice(text, self.clock())
        self._touch()

    def set_error(self, text: str) -> None:
        """Transient error; cleared after `error_timeout` seconds."""
        self.notice = Notice(text, self.clock(), is_error=True)
        self._touch()

    def clear_notice(self) -> None:
        if self.notice is not None:
            self.notice = None
            self._touch()

    def _expire_notice(self) -> None:
        if self.notice and self.clock() - self.notice.timestamp > self.error_timeout:
            self.clear_notice()

    def _fetch(self, sequence: Optional[int]) -> List[Effect]:
        return [FetchContainers(sequence)] if sequence is not None else []

    def dispatch(self, message: Message) -> List[Effect]:
        if isinstance(message, Tick):
            return self._on_tick()
        if isinstance(message, UserIntent):
            return self._on_intent(message.intent)
        if isinstance(message, ContainersLoaded):
            return self._on_loaded(message)
        if isinstance(message, RefreshFailed):
            return self._on_refresh_failed(message)
        if isinstance(message, CommandCompleted):
            return self._on_command_completed(message)
        if isinstance(message, BackendReady):
            self.connected = True
            self._touch()
            return self._fetch(self.scheduler.begin(RefreshReason.STARTUP))
        if isinstance(message, BackendFailed):
            logger.error(f"Docker unavailable: {message.error}")
            self.fatal_error = message.error
            self._touch()
            return []
        logger.warning(f"Unhandled message: {message!r}")
        return []

    def _on_tick(self) -> List[Effect]:
        self._expire_notice()
        if not self.connected or self.fatal_error:
            return []
        return self._fetch(self.scheduler.begin(RefreshReason.TIMER))

    def _on_intent(self, intent: Intent) -> List[Effect]:
        if self.fatal_error:
            return [Quit(return_code=1)] if intent is Intent.QUIT else []
        if not self.machine.allows(intent):
            return []

        snapshot = self.store.current()
        if intent is Intent.QUIT:
            return [Quit()]
        if intent is Intent.HELP:
            self.show_help = not self.show_help
            self._touch()
        elif intent is Intent.UP:
            if self.machine.move(-1, snapshot):
                self._touch()
        elif intent is Intent.DOWN:
            if self.machine.move(1, snapshot):
                self._touch()
        elif intent is Intent.OPEN:
            record = self.machine.open(snapshot)
            if record is not None:
                self._detail_record = record
                self._detail_sample = snapshot.sample_for(record.id)
                self._touch()
        elif intent is Intent.BACK:
            if self.machine.back():
                self._detail_record = None
                self._detail_sample = None
                self._touch()
        elif intent is Intent.REFRESH:
            if not self.connected:
                return []
            return self._fetch(self.scheduler.begin(RefreshReason.USER))
        elif intent in INTENT_COMMANDS:
            effect = self.commands.on_selection(INTENT_COMMANDS[intent])
            if effect is None:
                return []
            self.set_notice(f"{effect.command.progressive} {effect.name}...")
            return [effect]
        return []

    def _on_loaded(self, message: ContainersLoaded) -> List[Effect]:
        follow_up = self.scheduler.complete(message.sequence)
        if self.scheduler.accept(message.sequence):
            self.store.replace(message.snapshot)
            self.refresh_error = None
            record = reconcile(self.selection, message.snapshot)
            if record is not None:
                self._detail_record = record
                self._detail_sample = message.snapshot.sample_for(record.id)
            self._touch()
        return self._fetch(follow_up)

    def _on_refresh_failed(self, message: RefreshFailed) -> List[Effect]:
        follow_up = self.scheduler.complete(message.sequence)
        if self.refresh_error != message.error:
            logger.warning(f"Refresh #{message.sequence} failed: {message.error}")
        self.refresh_error = message.error
        self._touch()
        return self._fetch(follow_up)

    def _on_command_completed(self, message: CommandCompleted) -> List[Effect]:
        if message.ok:
            logger.info(f"{message.command.value} {message.name}: ok")
            self.clear_notice()
        else:
            logger.warning(f"{message.command.value} {message.name} failed: {message.error}")
            self.set_error(f"Failed to {message.command.value} {message.name}: {message.error}")
        return []
