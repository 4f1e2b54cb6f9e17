"""
Docker API wrapper.

This module is the only place that talks to the Docker daemon, via the
docker-py library. It provides:
  - connecting (and verifying the connection) at startup
  - listing containers as immutable ContainerRecord values
  - one non-streaming stats read per container
  - start / stop / restart
  - closing the client on exit

Error Handling:
  Every call goes through the `docker_call` decorator, which logs the
  failure and re-raises it as BackendError. Callers (the async workers)
  catch BackendError at the boundary and turn it into a failure message;
  nothing here returns a silent default.

Dependencies:
  - docker>=7.0.0 (docker-py client)
"""

import functools
import logging
from typing import Any, Callable, Dict, List, Optional, Tuple

import docker

from .model import ContainerRecord, MountPoint, NetworkAttachment, PortBinding, RawCounters
from .stats import counters_from_stats

logger = logging.getLogger(__name__)


class BackendError(Exception):
    """A Docker call failed."""


class BackendUnavailable(BackendError):
    """The Docker daemon cannot be reached."""


def docker_call(operation: str) -> Callable:
    """
    Decorator for Docker API methods that turns any failure into BackendError.

    Args:
        operation: Human readable name used in logs and in the error message

    Usage:
        @docker_call("list containers")
        def list_containers(self, include_stopped: bool = True):
            ...
    """
    def decorator(func: Callable) -> Callable:
        @functools.wraps(func)
        def wrapper(*args, **kwargs) -> Any:
            try:
                return func(*args, **kwargs)
            except BackendError:
                raise
            except Exception as e:
                logger.error(f"Docker operation '{operation}' failed: {e}", exc_info=True)
                raise BackendError(f"{operation}: {e}") from e
        return wrapper
    return decorator


def container_name(names: Optional[List[str]]) -> str:
    if not names:
        return "unnamed"
    return names[0].lstrip('/') or "unnamed"


def _ports_from_summary(raw_ports: Optional[List[Dict[str, Any]]]) -> Tuple[PortBinding, ...]:
    ports = []
    for p in raw_ports or []:
        ports.append(PortBinding(
            container_port=p.get('PrivatePort', 0),
            protocol=p.get('Type', 'tcp'),
            host_ip=p.get('IP') or None,
            host_port=p.get('PublicPort') or None,
        ))
    return tuple(ports)


def _mounts_from_summary(raw_mounts: Optional[List[Dict[str, Any]]]) -> Tuple[MountPoint, ...]:
    mounts = []
    for m in raw_mounts or []:
        mounts.append(MountPoint(
            source=m.get('Source', ''),
            destination=m.get('Destination', ''),
            type=m.get('Type', ''),
            read_write=bool(m.get('RW', True)),
            propagation=m.get('Propagation') or None,
        ))
    return tuple(mounts)


def _networks_from_summary(settings: Optional[Dict[str, Any]]) -> Tuple[NetworkAttachment, ...]:
    networks = (settings or {}).get('Networks') or {}
    return tuple(
        NetworkAttachment(name=name, ip_address=(net or {}).get('IPAddress', ''))
        for name, net in sorted(networks.items())
    )


def record_from_summary(summary: Dict[str, Any]) -> ContainerRecord:
    """Build a ContainerRecord from one entry of the container list endpoint."""
    return ContainerRecord(
        id=summary['Id'],
        name=container_name(summary.get('Names')),
        image=summary.get('Image', ''),
        status=summary.get('Status', ''),
        state=summary.get('State', ''),
        created=summary.get('Created') or 0,
        ports=_ports_from_summary(summary.get('Ports')),
        mounts=_mounts_from_summary(summary.get('Mounts')),
        networks=_networks_from_summary(summary.get('NetworkSettings')),
    )


class DockerBackend:
    def __init__(self, client: Optional[docker.DockerClient] = None):
        self.client = client

    def connect(self) -> None:
        """Create the client from the environment and check the daemon answers."""
        if self.client is not None:
            return
        client = None
        try:
            client = docker.from_env()
            client.ping()
        except Exception as e:
            if client is not None:
                client.close()
            logger.error(f"Cannot connect to Docker: {e}", exc_info=True)
            raise BackendUnavailable(str(e)) from e
        self.client = client
        logger.info("Connected to Docker daemon")

    def _require_client(self) -> docker.DockerClient:
        if self.client is None:
            raise BackendUnavailable("Docker client is not connected")
        return self.client

    @docker_call("list containers")
    def list_containers(self, include_stopped: bool = True) -> List[ContainerRecord]:
        client = self._require_client()
        # sparse=True keeps the list-endpoint summary instead of inspecting each one
        raw = client.containers.list(all=include_stopped, sparse=True)
        return [record_from_summary(c.attrs) for c in raw]

    @docker_call("fetch stats")
    def fetch_raw_stats(self, container_id: str) -> Tuple[RawCounters, RawCounters]:
        client = self._require_client()
        payload = client.api.stats(container_id, stream=False)
        return counters_from_stats(payload)

    # Actions
    @docker_call("start container")
    def start(self, container_id: str) -> None:
        self._require_client().containers.get(container_id).start()

    @docker_call("stop container")
    def stop(self, container_id: str) -> None:
        self._require_client().containers.get(container_id).stop()

    @docker_call("restart container")
    def restart(self, container_id: str) -> None:
        self._require_client().containers.get(container_id).restart()

    def close(self) -> None:
        if self.client is None:
            return
        client, self.client = self.client, None
        try:
            client.close()
            logger.info("Docker client closed")
        except Exception as e:
            logger.warning(f"Error while closing Docker client: {e}")
