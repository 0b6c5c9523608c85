"""
Keypad Collaborator
===================

Sixteen-key hexadecimal keypad state.

COSMAC VIP layout:      Common host mapping:
    1 2 3 C                 1 2 3 4
    4 5 6 D                 Q W E R
    7 8 9 E                 A S D F
    A 0 B F                 Z X C V

The CPU asks two things of a keypad:
- ``is_down(key)`` for Ex9E / ExA1
- ``take_pressed()`` for Fx0A: the oldest key press not yet consumed,
  or None when no key has been pressed since the last call

The emulator also calls ``release_all()`` on reset.

Keys can be given as integers 0-15, hex digit names ("A", "f"), or host
key names from the mapping above (prefixed "host:", e.g. "host:Q").

Copyright (c) 2025-2026 Hugo José Pinto & Contributors
"""

from collections import deque
from typing import Deque, Optional, Protocol, Set, Union

NUM_KEYS = 16

# Host keyboard layout, row by row, matching the keypad layout above
HOST_LAYOUT = {
    "1": 0x1, "2": 0x2, "3": 0x3, "4": 0xC,
    "Q": 0x4, "W": 0x5, "E": 0x6, "R": 0xD,
    "A": 0x7, "S": 0x8, "D": 0x9, "F": 0xE,
    "Z": 0xA, "X": 0x0, "C": 0xB, "V": 0xF,
}

Key = Union[int, str]


class KeypadProtocol(Protocol):
    """Interface the CPU expects from a keypad."""

    def is_down(self, key: int) -> bool:
        """True if key (0-15) is currently held."""
        ...

    def take_pressed(self) -> Optional[int]:
        """Consume and return the oldest pending key press, or None."""
        ...

    def release_all(self) -> None:
        """Release every key and drop pending presses (machine reset)."""
        ...


def key_number(key: Key) -> int:
    """
    Resolve a key to its number.

    Args:
        key: 0-15, a hex digit name, or "host:<name>"

    Returns:
        Key number 0-15

    Raises:
        ValueError: If the key is not recognised
    """
    if isinstance(key, int):
        if not 0 <= key < NUM_KEYS:
            raise ValueError(f"Key must be 0-15, got {key}")
        return key

    name = key.strip().upper()
    if name.startswith("HOST:"):
        host = name[5:]
        if host not in HOST_LAYOUT:
            raise ValueError(f"Unknown host key '{key}'")
        return HOST_LAYOUT[host]
    try:
        value = int(name, 16)
    except ValueError:
        raise ValueError(f"Unknown key '{key}'") from None
    if not 0 <= value < NUM_KEYS or len(name) != 1:
        raise ValueError(f"Unknown key '{key}'")
    return value


class Keypad:
    """
    Keypad state driven by the host.

    Example:
        >>> pad = Keypad()
        >>> pad.key_down("A")
        >>> pad.is_down(0xA)
        True
        >>> pad.take_pressed()
        10
        >>> pad.take_pressed() is None
        True
    """

    def __init__(self) -> None:
        self._down: Set[int] = set()
        self._pressed: Deque[int] = deque()

    def key_down(self, key: Key) -> None:
        """
        Press a key.

        The key stays down until key_up(). A press event is queued for
        take_pressed() unless the key was already down.
        """
        number = key_number(key)
        if number not in self._down:
            self._down.add(number)
            self._pressed.append(number)

    def key_up(self, key: Key) -> None:
        """Release a key."""
        self._down.discard(key_number(key))

    def tap(self, key: Key) -> None:
        """Press and immediately release: queues a press event only."""
        self.key_down(key)
        self.key_up(key)

    def release_all(self) -> None:
        """Release every key and drop pending press events."""
        self._down.clear()
        self._pressed.clear()

    def is_down(self, key: int) -> bool:
        return key_number(key) in self._down

    def take_pressed(self) -> Optional[int]:
        if self._pressed:
            return self._pressed.popleft()
        return None

    @property
    def keys_down(self) -> Set[int]:
        """Copy of the set of held keys."""
        return set(self._down)
