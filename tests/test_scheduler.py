"""
Unit tests for scheduler.py.
"""

import pytest

from spancollector.scheduler import FlushScheduler


class FakeClock:
    def __init__(self, now: float = 100.0):
        self.now = now

    def __call__(self) -> float:
        return self.now


class TestFlushScheduler:
    """Tests for FlushScheduler."""

    def test_first_deadline_set_at_construction(self):
        clock = FakeClock(100.0)
        scheduler = FlushScheduler(batch_size=10, batch_interval=2.0, clock=clock)
        assert scheduler.next_deadline == 102.0

    def test_is_due_at_deadline(self):
        clock = FakeClock(100.0)
        scheduler = FlushScheduler(batch_size=10, batch_interval=2.0, clock=clock)
        assert scheduler.is_due() is False
        clock.now = 101.99
        assert scheduler.is_due() is False
        clock.now = 102.0
        assert scheduler.is_due() is True

    def test_reschedule_moves_deadline_from_now(self):
        clock = FakeClock(100.0)
        scheduler = FlushScheduler(batch_size=10, batch_interval=2.0, clock=clock)
        clock.now = 105.0
        assert scheduler.is_due() is True
        assert scheduler.reschedule() == 107.0
        assert scheduler.is_due() is False

    def test_explicit_now(self):
        scheduler = FlushScheduler(batch_size=10, batch_interval=1.0, clock=FakeClock(0.0))
        scheduler.reschedule(now=50.0)
        assert scheduler.next_deadline == 51.0
        assert scheduler.is_due(now=50.5) is False
        assert scheduler.is_due(now=51.0) is True

    def test_count_reached(self):
        scheduler = FlushScheduler(batch_size=3, batch_interval=1.0)
        assert scheduler.count_reached(2) is False
        assert scheduler.count_reached(3) is True
        assert scheduler.count_reached(4) is True

    def test_tick_interval_is_tenth_of_batch_interval(self):
        scheduler = FlushScheduler(batch_size=3, batch_interval=1.0)
        assert scheduler.tick_interval == pytest.approx(0.1)
