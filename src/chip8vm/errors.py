"""
CHIP-8 VM Error Hierarchy
=========================

This module defines the exception hierarchy for the whole package.
All exceptions inherit from Chip8Error, allowing callers to catch every
VM-related error with a single except clause if desired.

Exception Hierarchy
-------------------
Chip8Error (base)
├── MachineError (faults raised while executing an instruction)
│   ├── AddressOutOfRangeError - memory access outside [0, 4096)
│   ├── StackFaultError - push/pop leaves the stack region
│   ├── MisalignedFetchError - instruction fetch at an odd PC
│   ├── UnknownOpcodeError - fetched word matches no instruction
│   └── InvalidKeyError - Ex9E/ExA1 operand is not a key number
└── ConfigError - invalid emulator configuration

Design Philosophy
-----------------
Machine errors carry the address of the instruction that was executing
when the fault happened (``pc``), when known. The CPU fills it in before
the exception leaves ``tick()``, so hosts can report exactly which
instruction failed:

    $0204: stack fault: pop with SP=$0200 would leave the stack region
"""

from typing import Optional


# =============================================================================
# Base Exception Class
# =============================================================================

class Chip8Error(Exception):
    """
    Base exception for all CHIP-8 VM errors.

    All exceptions in the package inherit from this class, allowing callers
    to catch every VM-related error with a single except clause:

        try:
            emu.tick(16)
        except Chip8Error as e:
            print(f"Error: {e}")
    """
    pass


# =============================================================================
# Machine Exceptions
# =============================================================================

class MachineError(Chip8Error):
    """
    Base exception for faults raised while the machine executes.

    Attributes:
        message: The error description
        pc: Address of the instruction being executed (optional). Memory
            and stack helpers do not know it; the CPU attaches it as the
            exception propagates out of ``tick()``.
    """

    def __init__(self, message: str, pc: Optional[int] = None):
        self.message = message
        self.pc = pc
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format as '$PPPP: message' when the PC is known."""
        if self.pc is None:
            return self.message
        return f"${self.pc:04X}: {self.message}"

    def at(self, pc: int) -> "MachineError":
        """Attach the faulting instruction address and return self."""
        self.pc = pc
        self.args = (self._format_message(),)
        return self

    def __str__(self) -> str:
        return self._format_message()


class AddressOutOfRangeError(MachineError):
    """
    Memory access outside the 4096-byte address space.

    Raised for any byte, word or block access where the first or last
    address touched falls outside [0, 4096). Accesses are never wrapped
    or truncated.

    Attributes:
        address: First address of the access
        length: Number of bytes the access spans
    """

    def __init__(self, address: int, length: int = 1, pc: Optional[int] = None):
        self.address = address
        self.length = length
        if length == 1:
            message = f"address ${address:04X} is out of range"
        else:
            message = (
                f"access of {length} bytes at ${address:04X} is out of range"
            )
        super().__init__(message, pc=pc)


class StackFaultError(MachineError):
    """
    Stack pointer would leave the stack region.

    The stack grows downward from its base (0x200 by default) towards 0.
    A push below address 0 is an overflow; a pop above the base is an
    underflow (a return with nothing on the stack). SP is left unchanged.

    Attributes:
        sp: Stack pointer value at the time of the fault
        operation: "push" or "pop"
    """

    def __init__(self, sp: int, operation: str, pc: Optional[int] = None):
        self.sp = sp
        self.operation = operation
        super().__init__(
            f"stack fault: {operation} with SP=${sp:04X} "
            f"would leave the stack region",
            pc=pc,
        )


class MisalignedFetchError(MachineError):
    """
    Instruction fetch at an odd program counter.

    Instructions are two bytes long and must start at even addresses.
    """

    def __init__(self, pc: int):
        super().__init__(f"instruction fetch at odd address ${pc:04X}", pc=pc)


class UnknownOpcodeError(MachineError):
    """
    Fetched word matches no defined instruction.

    Normally reported through ``TickResult`` rather than raised, so a host
    can decide whether to halt, log, or skip the word. Raised by the CPU
    only in strict mode.

    Attributes:
        word: The undefined 16-bit instruction word
    """

    def __init__(self, word: int, pc: Optional[int] = None):
        self.word = word
        super().__init__(f"unknown opcode ${word:04X}", pc=pc)


class InvalidKeyError(MachineError):
    """
    Key test instruction names a key outside 0-15.

    Ex9E and ExA1 take the key number from Vx. The value is not masked.

    Attributes:
        key: The offending Vx value
    """

    def __init__(self, key: int, pc: Optional[int] = None):
        self.key = key
        super().__init__(f"key ${key:02X} is not a keypad key (0-F)", pc=pc)


# =============================================================================
# Configuration Exceptions
# =============================================================================

class ConfigError(Chip8Error):
    """
    Invalid emulator configuration.

    Raised when an EmulatorConfig field is out of range, or when an
    environment override cannot be parsed.
    """
    pass
