"""
Data models for dockpulse.

Every record here is an immutable dataclass (frozen=True). A refresh cycle
builds a whole new set of records from the Docker listing; nothing is ever
patched in place, so a record handed to the renderer can never change under
its feet.

Data Classes:
  - ContainerRecord: one container from the runtime listing
  - PortBinding / MountPoint / NetworkAttachment: detail-view attributes
  - RawCounters: one instantaneous reading of cumulative CPU/RAM counters
  - ResourceSample: derived CPU/RAM percentages
  - Snapshot: ordered records plus their samples, unique by id
  - SelectionState: list/detail mode, cursor and detail identity
"""

import enum
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Dict, Mapping, Optional, Tuple


class Lifecycle(enum.Enum):
    RUNNING = "running"
    EXITED = "exited"
    PAUSED = "paused"
    OTHER = "other"

    @classmethod
    def from_state(cls, state: str) -> "Lifecycle":
        try:
            return cls(state.lower())
        except ValueError:
            return cls.OTHER


class ViewMode(enum.Enum):
    LIST = "list"
    DETAIL = "detail"


@dataclass(frozen=True)
class PortBinding:
    container_port: int
    protocol: str = "tcp"
    host_ip: Optional[str] = None
    host_port: Optional[int] = None


@dataclass(frozen=True)
class MountPoint:
    source: str
    destination: str
    type: str
    read_write: bool = True
    propagation: Optional[str] = None


@dataclass(frozen=True)
class NetworkAttachment:
    name: str
    ip_address: str = ""


@dataclass(frozen=True)
class ContainerRecord:
    id: str
    name: str
    image: str
    status: str
    state: str
    created: int = 0
    ports: Tuple[PortBinding, ...] = ()
    mounts: Tuple[MountPoint, ...] = ()
    networks: Tuple[NetworkAttachment, ...] = ()

    @property
    def short_id(self) -> str:
        return self.id[:12]

    @property
    def lifecycle(self) -> Lifecycle:
        return Lifecycle.from_state(self.state)

    @property
    def is_running(self) -> bool:
        return self.lifecycle is Lifecycle.RUNNING


@dataclass(frozen=True)
class RawCounters:
    cpu_usage: int = 0
    system_usage: int = 0
    online_cpus: int = 1
    memory_usage: int = 0
    memory_limit: int = 0


@dataclass(frozen=True)
class ResourceSample:
    cpu_percent: float = 0.0
    memory_percent: float = 0.0

    @property
    def cpu_text(self) -> str:
        return f"{self.cpu_percent:.1f}%"

    @property
    def memory_text(self) -> str:
        return f"{self.memory_percent:.1f}%"


IDLE_SAMPLE = ResourceSample()


@dataclass(frozen=True)
class Snapshot:
    """Point-in-time ordered container list; row order is the runtime's."""
    records: Tuple[ContainerRecord, ...] = ()
    samples: Mapping[str, ResourceSample] = field(default_factory=dict)
    sequence: int = 0
    taken_at: float = 0.0
    _index: Mapping[str, int] = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        index: Dict[str, int] = {}
        for position, record in enumerate(self.records):
            if record.id in index:
                raise ValueError(f"Duplicate container id in snapshot: {record.id}")
            index[record.id] = position
        object.__setattr__(self, "records", tuple(self.records))
        object.__setattr__(self, "samples", MappingProxyType(dict(self.samples)))
        object.__setattr__(self, "_index", MappingProxyType(index))

    def __len__(self) -> int:
        return len(self.records)

    def __iter__(self):
        return iter(self.records)

    def get(self, container_id: str) -> Optional[ContainerRecord]:
        position = self._index.get(container_id)
        if position is None:
            return None
        return self.records[position]

    def at(self, index: int) -> Optional[ContainerRecord]:
        if 0 <= index < len(self.records):
            return self.records[index]
        return None

    def sample_for(self, container_id: str) -> ResourceSample:
        return self.samples.get(container_id, IDLE_SAMPLE)


EMPTY_SNAPSHOT = Snapshot()


@dataclass
class SelectionState:
    mode: ViewMode = ViewMode.LIST
    cursor_index: int = 0
    detail_id: Optional[str] = None
