"""
Display Collaborator
====================

The CPU never draws pixels itself. It hands clear requests and sprite
draws to a display object and writes the returned collision flag to VF.

Any object with ``clear()`` and ``draw_sprite(x, y, sprite) -> bool``
works. ``NullDisplay`` is the headless default: it records what it was
asked to do and never reports a collision.

Copyright (c) 2025-2026 Hugo José Pinto & Contributors
"""

from typing import List, Optional, Protocol, Tuple


class DisplayProtocol(Protocol):
    """Interface the CPU expects from a display."""

    def clear(self) -> None:
        """Blank the screen (00E0)."""
        ...

    def draw_sprite(self, x: int, y: int, sprite: bytes) -> bool:
        """
        Draw a sprite at (x, y) (Dxyn).

        Args:
            x: Column from Vx
            y: Row from Vy
            sprite: n bytes read from memory at I, one row per byte

        Returns:
            True if any lit pixel was turned off (collision)
        """
        ...


class NullDisplay:
    """
    Headless display that records requests.

    Attributes:
        clear_count: Number of clear() calls
        draws: (x, y, sprite) for every draw_sprite() call, oldest first
    """

    def __init__(self, max_history: int = 256):
        self.max_history = max_history
        self.clear_count = 0
        self.draws: List[Tuple[int, int, bytes]] = []

    def clear(self) -> None:
        self.clear_count += 1

    def draw_sprite(self, x: int, y: int, sprite: bytes) -> bool:
        self.draws.append((x, y, bytes(sprite)))
        if len(self.draws) > self.max_history:
            del self.draws[0]
        return False

    @property
    def last_draw(self) -> Optional[Tuple[int, int, bytes]]:
        """The most recent draw request, or None."""
        return self.draws[-1] if self.draws else None
