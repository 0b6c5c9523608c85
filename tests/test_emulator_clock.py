"""
Timer Clock Unit Tests
======================

Copyright (c) 2025-2026 Hugo José Pinto & Contributors
"""

import pytest

from chip8vm.emulator import TimerClock
from chip8vm.emulator.clock import decrement_timer


class TestTimerClock:
    """Test elapsed-time to timer-tick conversion."""

    def test_default_period(self):
        assert TimerClock().period_ms == 16

    def test_whole_periods(self):
        clock = TimerClock()
        assert clock.advance(48) == 3
        assert clock.leftover == 0

    def test_remainder_carried(self):
        clock = TimerClock()
        assert clock.advance(20) == 1
        assert clock.leftover == 4
        assert clock.advance(12) == 1
        assert clock.leftover == 0

    def test_five_small_equal_one_large(self):
        """Five advance(4) produce the same result as one advance(20)."""
        small = TimerClock(16)
        ticks = sum(small.advance(4) for _ in range(5))
        large = TimerClock(16)
        assert ticks == large.advance(20) == 1
        assert small.leftover == large.leftover == 4

    def test_zero_delta(self):
        clock = TimerClock()
        assert clock.advance(0) == 0

    def test_negative_delta_rejected(self):
        with pytest.raises(ValueError):
            TimerClock().advance(-5)

    def test_bad_period_rejected(self):
        with pytest.raises(ValueError):
            TimerClock(0)

    def test_reset(self):
        clock = TimerClock()
        clock.advance(15)
        clock.reset()
        assert clock.leftover == 0
        assert clock.advance(1) == 0


class TestDecrementTimer:
    """Test saturating decrement."""

    @pytest.mark.parametrize("value,ticks,expected", [
        (10, 1, 9),
        (10, 10, 0),
        (3, 100, 0),
        (0, 1, 0),
        (5, 0, 5),
    ])
    def test_decrement(self, value, ticks, expected):
        assert decrement_timer(value, ticks) == expected
