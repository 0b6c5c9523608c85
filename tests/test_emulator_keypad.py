"""
Keypad and Display Collaborator Tests
=====================================

Tests for the Keypad state object, key name parsing, NullDisplay and the
built-in font.

Copyright (c) 2025-2026 Hugo José Pinto & Contributors
"""

import pytest

from chip8vm.emulator import FONT, FONT_BASE, Keypad, NullDisplay, font_address
from chip8vm.emulator.keypad import key_number


# =============================================================================
# Key Names
# =============================================================================

class TestKeyNumber:
    """Test key name resolution."""

    @pytest.mark.parametrize("key,expected", [
        (0, 0),
        (15, 15),
        ("0", 0),
        ("a", 0xA),
        ("F", 0xF),
        ("host:q", 0x4),
        ("HOST:V", 0xF),
        ("host:X", 0x0),
    ])
    def test_valid(self, key, expected):
        assert key_number(key) == expected

    @pytest.mark.parametrize("key", [16, -1, "G", "10", "", "host:P"])
    def test_invalid(self, key):
        with pytest.raises(ValueError):
            key_number(key)


# =============================================================================
# Keypad
# =============================================================================

@pytest.fixture
def pad():
    return Keypad()


class TestKeypad:
    """Test key state and the press queue."""

    def test_idle(self, pad):
        assert not pad.is_down(0)
        assert pad.take_pressed() is None
        assert pad.keys_down == set()

    def test_down_up(self, pad):
        pad.key_down(3)
        assert pad.is_down(3)
        pad.key_up(3)
        assert not pad.is_down(3)

    def test_presses_are_fifo(self, pad):
        pad.key_down(1)
        pad.key_down(2)
        pad.key_down(3)
        assert [pad.take_pressed() for _ in range(4)] == [1, 2, 3, None]

    def test_repeat_down_queues_once(self, pad):
        pad.key_down(5)
        pad.key_down(5)
        assert pad.take_pressed() == 5
        assert pad.take_pressed() is None

    def test_press_after_release_queues_again(self, pad):
        pad.key_down(5)
        pad.key_up(5)
        pad.key_down(5)
        assert [pad.take_pressed(), pad.take_pressed()] == [5, 5]

    def test_tap(self, pad):
        pad.tap("C")
        assert not pad.is_down(0xC)
        assert pad.take_pressed() == 0xC

    def test_release_all(self, pad):
        pad.key_down(1)
        pad.key_down(2)
        pad.release_all()
        assert pad.keys_down == set()
        assert pad.take_pressed() is None

    def test_is_down_rejects_bad_key(self, pad):
        with pytest.raises(ValueError):
            pad.is_down(16)

    def test_keys_down_is_a_copy(self, pad):
        pad.key_down(1)
        pad.keys_down.add(2)
        assert not pad.is_down(2)


# =============================================================================
# Display and Font
# =============================================================================

class TestNullDisplay:
    """Test the headless display."""

    def test_records_requests(self):
        display = NullDisplay()
        display.clear()
        assert display.draw_sprite(1, 2, b"\x80") is False
        assert display.clear_count == 1
        assert display.last_draw == (1, 2, b"\x80")

    def test_history_is_bounded(self):
        display = NullDisplay(max_history=3)
        for n in range(5):
            display.draw_sprite(n, 0, b"")
        assert [d[0] for d in display.draws] == [2, 3, 4]

    def test_last_draw_empty(self):
        assert NullDisplay().last_draw is None


class TestFont:
    """Test the built-in digit sprites."""

    def test_size(self):
        assert len(FONT) == 80

    def test_digit_zero(self):
        assert FONT[0:5] == bytes([0xF0, 0x90, 0x90, 0x90, 0xF0])

    def test_font_address(self):
        assert FONT_BASE == 0
        assert font_address(0) == 0
        assert font_address(0xF) == 75
        assert font_address(1, base=0x50) == 0x55
