"""
Message protocol between the workers, the driver and the state owner.

Messages flow into `DashboardState.dispatch`; effects flow out of it and are
carried out by the driver. Both are immutable so a message can cross the
thread boundary without copying.
"""

import enum
from dataclasses import dataclass
from typing import Optional, Union

from .model import Snapshot


class Intent(enum.Enum):
    UP = "up"
    DOWN = "down"
    OPEN = "open"
    BACK = "back"
    REFRESH = "refresh"
    RESTART = "restart"
    START = "start"
    STOP = "stop"
    HELP = "help"
    QUIT = "quit"


class Command(enum.Enum):
    START = "start"
    STOP = "stop"
    RESTART = "restart"

    @property
    def progressive(self) -> str:
        return {"start": "Starting", "stop": "Stopping", "restart": "Restarting"}[self.value]


# --- messages (into the state owner) ---

@dataclass(frozen=True)
class BackendReady:
    pass


@dataclass(frozen=True)
class BackendFailed:
    error: str


@dataclass(frozen=True)
class Tick:
    pass


@dataclass(frozen=True)
class UserIntent:
    intent: Intent


@dataclass(frozen=True)
class ContainersLoaded:
    sequence: int
    snapshot: Snapshot


@dataclass(frozen=True)
class RefreshFailed:
    sequence: int
    error: str


@dataclass(frozen=True)
class CommandCompleted:
    command: Command
    container_id: str
    name: str
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


Message = Union[
    BackendReady, BackendFailed, Tick, UserIntent,
    ContainersLoaded, RefreshFailed, CommandCompleted,
]


# --- effects (out of the state owner) ---

@dataclass(frozen=True)
class FetchContainers:
    sequence: int


@dataclass(frozen=True)
class RunCommand:
    command: Command
    container_id: str
    name: str


@dataclass(frozen=True)
class Quit:
    return_code: int = 0


Effect = Union[FetchContainers, RunCommand, Quit]
