import pytest

from potator.components import LaunchingParams
from potator.timing import FixedStep, FixedStepTracker, FrameClock


def fake_clock(*ticks):
    values = iter(ticks)
    return FrameClock(now=lambda: next(values))


class Counter(FixedStep):
    def __init__(self):
        self.rate = None
        self.count = 0

    def set_tick_rate(self, tick_rate):
        self.rate = tick_rate

    def update(self):
        self.count += 1


def test_frame_clock_first_update_gives_no_frame_time():
    clock = fake_clock(1000)
    clock.update()
    assert clock.frame_time_ns == 0


def test_frame_clock_measures_difference():
    clock = fake_clock(1_000, 5_000, 12_000)
    clock.update()
    clock.update()
    assert clock.frame_time_ns == 5_000 - 1_000
    clock.update()
    assert clock.frame_time_ns == 12_000 - 5_000
    assert clock.frame_time == pytest.approx((12_000 - 5_000) / 1e9)


def test_frame_clock_default_is_monotonic():
    clock = FrameClock()
    clock.update()
    clock.update()
    assert clock.frame_time_ns >= 0


def test_subscribe_passes_tick_rate():
    tracker = FixedStepTracker(LaunchingParams(fixed_step_rate=100), FrameClock())
    counter = Counter()
    tracker.subscribe(counter)
    assert counter.rate == 100
    assert tracker.fixed_step_ns * 100 == 1_000_000_000


def test_tracker_runs_whole_steps_and_keeps_remainder():
    step = 10_000_000
    clock = fake_clock(0, 25_000_000, 30_000_000)
    tracker = FixedStepTracker(LaunchingParams(fixed_step_rate=100), clock)
    counter = Counter()
    tracker.subscribe(counter)
    clock.update()
    tracker.update()
    assert counter.count == 0
    clock.update()
    tracker.update()
    assert counter.count == 25_000_000 // step
    clock.update()
    tracker.update()
    assert counter.count == 30_000_000 // step


def test_tracker_updates_every_subscriber_each_step():
    clock = fake_clock(0, 10_000_000)
    tracker = FixedStepTracker(LaunchingParams(fixed_step_rate=100), clock)
    a, b = Counter(), Counter()
    tracker.subscribe(a)
    tracker.subscribe(b)
    clock.update()
    clock.update()
    tracker.update()
    assert a.count == b.count == 1


def test_tracker_rejects_zero_rate():
    with pytest.raises(ValueError):
        FixedStepTracker(LaunchingParams(fixed_step_rate=0), FrameClock())