import pytest

from dockpulse.model import ContainerRecord, ResourceSample, Snapshot


def record(cid, name=None, state="running", **kwargs):
    return ContainerRecord(
        id=cid,
        name=name or f"c{cid}",
        image=kwargs.pop("image", "nginx:latest"),
        status=kwargs.pop("status", "Up 2 minutes" if state == "running" else "Exited (0)"),
        state=state,
        **kwargs,
    )


def snapshot(*records, sequence=1, samples=None):
    if samples is None:
        samples = {r.id: ResourceSample(1.0, 2.0) for r in records}
    return Snapshot(records=tuple(records), samples=samples, sequence=sequence)


@pytest.fixture
def make_record():
    return record


@pytest.fixture
def make_snapshot():
    return snapshot


class FakeClock:
    def __init__(self, now=1000.0):
        self.now = now

    def __call__(self):
        return self.now


@pytest.fixture
def clock():
    return FakeClock()
