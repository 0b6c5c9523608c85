"""
CHIP-8 Virtual Machine
======================

Execution core for the CHIP-8 virtual machine: 16 byte registers, a 4KB
address space, an in-memory call stack and two 60 Hz countdown timers.

Quick Start
-----------

Basic usage::

    >>> from chip8vm.emulator import Emulator
    >>> emu = Emulator()
    >>> emu.load_program(rom_bytes)
    >>> while True:
    ...     result = emu.tick(elapsed_ms)

With debugging::

    >>> emu.add_breakpoint(0x20A)
    >>> event = emu.run(max_ticks=10_000)
    >>> if event.reason == BreakReason.PC_BREAKPOINT:
    ...     print(f"Stopped at ${event.address:04X}")

Module Structure
----------------

- `emulator.py`: Emulator facade and EmulatorConfig
- `cpu.py`: fetch/decode/execute core and TickResult
- `decoder.py`: instruction word decoding
- `registers.py`: register file and call stack
- `memory.py`: bounds-checked 4KB memory
- `clock.py`: elapsed time to timer ticks
- `prng.py`: xorshift random bytes
- `font.py`: built-in digit sprites
- `display.py`, `keypad.py`: collaborator interfaces
- `breakpoints.py`: debugging support

Copyright (c) 2025-2026 Hugo José Pinto & Contributors
"""

# Main entry point
from .emulator import Emulator, EmulatorConfig

# CPU components
from .cpu import CPU, Mode, TickResult, TickStatus
from .decoder import Instruction, Op, decode
from .registers import Registers, RegisterState

# Memory and timing
from .memory import Memory, MEMORY_SIZE
from .clock import TimerClock
from .prng import XorShift32
from .font import FONT, FONT_BASE, font_address

# Collaborators
from .display import DisplayProtocol, NullDisplay
from .keypad import Keypad, KeypadProtocol

# Debugging support
from .breakpoints import (
    BreakpointManager,
    BreakEvent,
    BreakReason,
    RegisterCondition,
)

__all__ = [
    # Main API
    "Emulator",
    "EmulatorConfig",

    # CPU
    "CPU",
    "Mode",
    "TickResult",
    "TickStatus",
    "Instruction",
    "Op",
    "decode",
    "Registers",
    "RegisterState",

    # Memory and timing
    "Memory",
    "MEMORY_SIZE",
    "TimerClock",
    "XorShift32",
    "FONT",
    "FONT_BASE",
    "font_address",

    # Collaborators
    "DisplayProtocol",
    "NullDisplay",
    "Keypad",
    "KeypadProtocol",

    # Debugging
    "BreakpointManager",
    "BreakEvent",
    "BreakReason",
    "RegisterCondition",
]
