"""
Background Docker work.

Each coroutine here performs blocking Docker calls in worker threads
(`asyncio.to_thread`) and returns exactly one message describing the outcome.
They never touch DashboardState and never raise for Docker failures: the
driver posts whatever they return to the state owner.

Per-container stats failures are isolated. The container is left out of
that cycle's snapshot and the rest of the table is still applied.
"""

import asyncio
import logging
import time
from typing import Dict, List, Union

from .backend import BackendError, DockerBackend
from .messages import Command, CommandCompleted, ContainersLoaded, RefreshFailed
from .model import IDLE_SAMPLE, ContainerRecord, ResourceSample, Snapshot
from .stats import compute_sample

logger = logging.getLogger(__name__)


async def _sample(backend: DockerBackend, record: ContainerRecord) -> ResourceSample:
    # Stopped containers report nothing worth a round trip
    if not record.is_running:
        return IDLE_SAMPLE
    previous, current = await asyncio.to_thread(backend.fetch_raw_stats, record.id)
    return compute_sample(previous, current)


async def fetch_containers(
    backend: DockerBackend, sequence: int, include_stopped: bool = True
) -> Union[ContainersLoaded, RefreshFailed]:
    try:
        records = await asyncio.to_thread(backend.list_containers, include_stopped)
    except BackendError as e:
        return RefreshFailed(sequence=sequence, error=str(e))

    results = await asyncio.gather(
        *[_sample(backend, record) for record in records],
        return_exceptions=True,
    )

    kept: List[ContainerRecord] = []
    samples: Dict[str, ResourceSample] = {}
    for record, result in zip(records, results):
        if isinstance(result, BaseException):
            logger.debug(f"Stats unavailable for {record.name}: {result}")
            continue
        kept.append(record)
        samples[record.id] = result

    try:
        snapshot = Snapshot(records=tuple(kept), samples=samples,
                            sequence=sequence, taken_at=time.time())
    except ValueError as e:
        return RefreshFailed(sequence=sequence, error=str(e))
    return ContainersLoaded(sequence=sequence, snapshot=snapshot)


async def run_command(
    backend: DockerBackend, command: Command, container_id: str, name: str
) -> CommandCompleted:
    call = getattr(backend, command.value)
    try:
        await asyncio.to_thread(call, container_id)
    except BackendError as e:
        return CommandCompleted(command=command, container_id=container_id, name=name, error=str(e))
    return CommandCompleted(command=command, container_id=container_id, name=name)
