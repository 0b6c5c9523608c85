"""
chip8vm - CHIP-8 Virtual Machine Core and Tools
===============================================

This package provides an interpreter core for the CHIP-8 virtual machine
together with small host-side tools around it.

Main Components
---------------
- **emulator**: the machine core
    Memory, registers, decoder, CPU, timer clock, and an Emulator facade
    driven one tick at a time by a host loop

- **disassembler**: instruction listing
    Turns program bytes into readable mnemonics

- **cli**: command-line tools
    chip8run (headless runner) and chip8dis (disassembler)

Quick Start
-----------
Run a program a tick at a time:
    >>> from chip8vm import Emulator
    >>> emu = Emulator()
    >>> emu.load_program(open("pong.ch8", "rb").read())
    >>> result = emu.tick(16)

Disassemble:
    >>> from chip8vm import Chip8Disassembler
    >>> for ins in Chip8Disassembler().disassemble(rom, start_address=0x200):
    ...     print(ins)

Or use the command-line tools:
    $ chip8run pong.ch8 --ticks 1000
    $ chip8dis pong.ch8
"""

__version__ = "1.0.0"
__author__ = "Hugo José Pinto & Contributors"

# =============================================================================
# Public API Exports
# =============================================================================

from chip8vm.emulator import (
    Emulator,
    EmulatorConfig,
    CPU,
    TickResult,
    TickStatus,
    Memory,
    Keypad,
    NullDisplay,
    BreakEvent,
    BreakReason,
)
from chip8vm.disassembler import Chip8Disassembler, DisassembledInstruction
from chip8vm.errors import (
    Chip8Error,
    MachineError,
    AddressOutOfRangeError,
    StackFaultError,
    MisalignedFetchError,
    UnknownOpcodeError,
    InvalidKeyError,
    ConfigError,
)

__all__ = [
    # Version info
    "__version__",
    "__author__",
    # Emulator
    "Emulator",
    "EmulatorConfig",
    "CPU",
    "TickResult",
    "TickStatus",
    "Memory",
    "Keypad",
    "NullDisplay",
    "BreakEvent",
    "BreakReason",
    # Disassembler
    "Chip8Disassembler",
    "DisassembledInstruction",
    # Exception hierarchy
    "Chip8Error",
    "MachineError",
    "AddressOutOfRangeError",
    "StackFaultError",
    "MisalignedFetchError",
    "UnknownOpcodeError",
    "InvalidKeyError",
    "ConfigError",
]
