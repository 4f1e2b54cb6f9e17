import pytest

from dockpulse.model import RawCounters, ResourceSample
from dockpulse.stats import compute_sample, count_by_lifecycle, counters_from_stats


def test_cpu_percent_scales_with_online_cpus():
    previous = RawCounters(cpu_usage=100, system_usage=1000, online_cpus=4)
    current = RawCounters(cpu_usage=150, system_usage=1100, online_cpus=4)

    sample = compute_sample(previous, current)

    assert sample.cpu_percent == pytest.approx(200.0)


@pytest.mark.parametrize("cpu, system", [
    (1000, 10000),   # no change at all
    (1500, 10000),   # system delta zero
    (900, 11000),    # counter went backwards
    (1500, 9000),    # system counter went backwards
])
def test_cpu_percent_is_zero_without_positive_deltas(cpu, system):
    previous = RawCounters(cpu_usage=1000, system_usage=10000, online_cpus=2)
    current = RawCounters(cpu_usage=cpu, system_usage=system, online_cpus=2)

    assert compute_sample(previous, current).cpu_percent == 0.0


def test_memory_percent_without_limit_is_zero():
    current = RawCounters(memory_usage=512, memory_limit=0)
    assert compute_sample(RawCounters(), current).memory_percent == 0.0


def test_memory_percent_is_not_clamped():
    current = RawCounters(memory_usage=300, memory_limit=200)
    assert compute_sample(RawCounters(), current).memory_percent == pytest.approx(150.0)


def test_memory_percent_regular():
    current = RawCounters(memory_usage=256 * 1024 * 1024, memory_limit=1024 * 1024 * 1024)
    assert compute_sample(RawCounters(), current).memory_percent == pytest.approx(25.0)


def test_sample_text_formatting():
    sample = ResourceSample(cpu_percent=12.345, memory_percent=150.0)
    assert sample.cpu_text == "12.3%"
    assert sample.memory_text == "150.0%"


def test_counters_from_full_payload():
    payload = {
        "cpu_stats": {
            "cpu_usage": {"total_usage": 1500},
            "system_cpu_usage": 11000,
            "online_cpus": 4,
        },
        "precpu_stats": {
            "cpu_usage": {"total_usage": 1000},
            "system_cpu_usage": 10000,
            "online_cpus": 4,
        },
        "memory_stats": {"usage": 100, "limit": 400},
    }

    previous, current = counters_from_stats(payload)

    assert previous == RawCounters(cpu_usage=1000, system_usage=10000, online_cpus=4)
    assert current == RawCounters(cpu_usage=1500, system_usage=11000, online_cpus=4,
                                  memory_usage=100, memory_limit=400)
    sample = compute_sample(previous, current)
    assert sample.cpu_percent == pytest.approx(200.0)
    assert sample.memory_percent == pytest.approx(25.0)


def test_counters_fall_back_to_percpu_length():
    payload = {"cpu_stats": {"cpu_usage": {"total_usage": 5, "percpu_usage": [1, 2, 2]}}}
    _, current = counters_from_stats(payload)
    assert current.online_cpus == 3


def test_counters_from_empty_payload():
    previous, current = counters_from_stats({})
    assert previous == RawCounters()
    assert current == RawCounters()
    assert compute_sample(previous, current) == ResourceSample(0.0, 0.0)


def test_count_by_lifecycle(make_record):
    records = [
        make_record("1"),
        make_record("2", state="exited"),
        make_record("3", state="paused"),
        make_record("4", state="Running"),
    ]
    assert count_by_lifecycle(records) == (2, 2)
