"""
Resource statistics for dockpulse.

Docker reports CPU time as cumulative counters, so a percentage only exists
between two readings. A `stats(stream=False)` payload carries both the
current reading (`cpu_stats`) and the one before it (`precpu_stats`);
`counters_from_stats` splits it into that pair and `compute_sample` turns the
pair into percentages.

Everything in this module is pure and can be tested without a daemon.
"""

import logging
from typing import Any, Dict, Iterable, Tuple

from .model import ContainerRecord, RawCounters, ResourceSample

logger = logging.getLogger(__name__)


def compute_sample(previous: RawCounters, current: RawCounters) -> ResourceSample:
    """Derive CPU and memory utilization from two counter readings.

    CPU is ``cpu_delta / system_delta * online_cpus * 100`` and is exactly 0.0
    unless both deltas are positive. Memory is usage over limit, 0.0 without
    a limit. Neither value is clamped: a container above its memory limit
    reports more than 100%.
    """
    cpu_delta = current.cpu_usage - previous.cpu_usage
    system_delta = current.system_usage - previous.system_usage

    cpu_percent = 0.0
    if system_delta > 0 and cpu_delta > 0:
        cpu_percent = (cpu_delta / system_delta) * current.online_cpus * 100.0

    memory_percent = 0.0
    if current.memory_limit > 0:
        memory_percent = (current.memory_usage / current.memory_limit) * 100.0

    return ResourceSample(cpu_percent=cpu_percent, memory_percent=memory_percent)


def _read_cpu_section(section: Dict[str, Any]) -> Tuple[int, int, int]:
    cpu_usage = section.get('cpu_usage') or {}
    total_usage = cpu_usage.get('total_usage') or 0
    system_usage = section.get('system_cpu_usage') or 0
    online_cpus = section.get('online_cpus') or len(cpu_usage.get('percpu_usage') or []) or 1
    return total_usage, system_usage, online_cpus


def counters_from_stats(payload: Dict[str, Any]) -> Tuple[RawCounters, RawCounters]:
    """Split a Docker stats payload into (previous, current) readings.

    Missing sections read as zero. Memory is only meaningful for the current
    reading; the previous one carries zeros.
    """
    memory = payload.get('memory_stats') or {}

    cpu, system, online = _read_cpu_section(payload.get('cpu_stats') or {})
    current = RawCounters(
        cpu_usage=cpu,
        system_usage=system,
        online_cpus=online,
        memory_usage=memory.get('usage') or 0,
        memory_limit=memory.get('limit') or 0,
    )

    pre_cpu, pre_system, pre_online = _read_cpu_section(payload.get('precpu_stats') or {})
    previous = RawCounters(cpu_usage=pre_cpu, system_usage=pre_system, online_cpus=pre_online)
    return previous, current


def count_by_lifecycle(records: Iterable[ContainerRecord]) -> Tuple[int, int]:
    """Return (running, not running) counts for the status bar."""
    running = 0
    total = 0
    for record in records:
        total += 1
        if record.is_running:
            running += 1
    return running, total - running
