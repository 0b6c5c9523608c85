"""
Timer Clock
===========

Converts elapsed wall-clock milliseconds into 60 Hz timer ticks.

Hosts call the machine at irregular intervals, so each delta is added to
the milliseconds left over from earlier calls before dividing by the tick
period. The remainder is carried forward, which makes the result exact:
five deltas of 4ms produce the same single tick (remainder 4) as one delta
of 20ms.

Copyright (c) 2025-2026 Hugo José Pinto & Contributors
"""

DEFAULT_TICK_PERIOD_MS = 16


class TimerClock:
    """
    Millisecond accumulator for the delay and sound timers.

    Attributes:
        period_ms: Milliseconds per timer tick (default 16, about 60 Hz)
    """

    def __init__(self, period_ms: int = DEFAULT_TICK_PERIOD_MS):
        if period_ms <= 0:
            raise ValueError(f"Tick period must be positive, got {period_ms}")
        self.period_ms = period_ms
        self._leftover = 0

    @property
    def leftover(self) -> int:
        """Milliseconds not yet turned into a tick."""
        return self._leftover

    def advance(self, delta_ms: int) -> int:
        """
        Consume elapsed time.

        Args:
            delta_ms: Milliseconds since the previous call

        Returns:
            Number of whole timer ticks that elapsed

        Raises:
            ValueError: If delta_ms is negative
        """
        if delta_ms < 0:
            raise ValueError(f"Elapsed time must be non-negative, got {delta_ms}")
        total = delta_ms + self._leftover
        ticks, self._leftover = divmod(total, self.period_ms)
        return ticks

    def reset(self) -> None:
        """Drop any carried milliseconds."""
        self._leftover = 0


def decrement_timer(value: int, ticks: int) -> int:
    """Saturating timer decrement: never goes below zero."""
    return max(0, value - ticks)
