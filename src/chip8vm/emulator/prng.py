"""
Xorshift Random Byte Generator
==============================

Deterministic 32-bit xorshift generator (Marsaglia, "Xorshift RNGs",
J. Stat. Soft. 8(14), 2003) with the (13, 17, 5) shift triple.

Only the low byte of each new state is handed out. No entropy is read from
the environment: the same seed always yields the same byte sequence, which
keeps whole-program runs reproducible.

Copyright (c) 2025-2026 Hugo José Pinto & Contributors
"""

DEFAULT_SEED = 0x0BADF00D


class XorShift32:
    """
    32-bit xorshift PRNG.

    Example:
        >>> rng = XorShift32(1)
        >>> rng.next_byte()
        33
    """

    def __init__(self, seed: int = DEFAULT_SEED):
        self.seed(seed)

    def seed(self, value: int) -> None:
        """
        Reset the generator state.

        Raises:
            ValueError: If value is zero (xorshift never leaves state 0)
                or does not fit in 32 bits
        """
        if not 0 < value <= 0xFFFFFFFF:
            raise ValueError(f"Seed must be 1-0xFFFFFFFF, got {value:#x}")
        self._state = value

    @property
    def state(self) -> int:
        """Current 32-bit state."""
        return self._state

    def next_word(self) -> int:
        """Advance the generator and return the full 32-bit state."""
        x = self._state
        x ^= (x << 13) & 0xFFFFFFFF
        x ^= x >> 17
        x ^= (x << 5) & 0xFFFFFFFF
        self._state = x
        return x

    def next_byte(self) -> int:
        """Advance the generator and return the low 8 bits of the new state."""
        return self.next_word() & 0xFF
