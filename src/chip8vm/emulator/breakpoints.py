"""
Breakpoint System for CHIP-8 Emulator
=====================================

Provides debugging support for run loops:
- PC breakpoints (break before the instruction at an address executes)
- Register conditions (break when a register matches)
- Break events describing why a run stopped

The manager is attached to the CPU through its ``on_instruction`` hook and
is consulted before every fetch.

Example usage:

    >>> from chip8vm.emulator import Emulator, BreakReason
    >>> emu = Emulator()
    >>> emu.breakpoints.add_breakpoint(0x20A)
    >>> event = emu.run(max_ticks=1000)
    >>> if event.reason == BreakReason.PC_BREAKPOINT:
    ...     print(f"Hit breakpoint at ${event.address:04X}")

Copyright (c) 2025-2026 Hugo José Pinto & Contributors
"""

from dataclasses import dataclass
from enum import Enum, auto
from typing import List, Optional, Set, TYPE_CHECKING

if TYPE_CHECKING:
    from .registers import Registers


class BreakReason(Enum):
    """
    Enumeration of reasons why execution stopped.

    Used in BreakEvent to indicate what triggered the break.
    """
    NONE = auto()                # No specific reason
    PC_BREAKPOINT = auto()       # PC reached a breakpoint address
    REGISTER_CONDITION = auto()  # Register condition met
    KEY_WAIT = auto()            # Fx0A is waiting for a key
    UNKNOWN_OPCODE = auto()      # Undefined instruction word fetched
    MAX_TICKS = auto()           # Tick budget exhausted
    ERROR = auto()               # Machine fault raised


@dataclass
class BreakEvent:
    """
    Information about why execution stopped.

    Attributes:
        reason: Why execution stopped
        address: PC address involved (if applicable)
        value: Instruction word or register value involved (if applicable)
        message: Human-readable description
    """
    reason: BreakReason
    address: Optional[int] = None
    value: Optional[int] = None
    message: str = ""

    def __str__(self) -> str:
        """Return human-readable description."""
        if self.message:
            return self.message
        match self.reason:
            case BreakReason.PC_BREAKPOINT:
                return f"Breakpoint at ${self.address:04X}" if self.address is not None else "Breakpoint"
            case BreakReason.REGISTER_CONDITION:
                return "Register condition met"
            case BreakReason.KEY_WAIT:
                return "Waiting for key"
            case BreakReason.UNKNOWN_OPCODE:
                return f"Unknown opcode ${self.value:04X}" if self.value is not None else "Unknown opcode"
            case BreakReason.MAX_TICKS:
                return "Maximum ticks reached"
            case BreakReason.ERROR:
                return "Machine fault"
            case _:
                return "Unknown"


class RegisterCondition:
    """
    Condition on machine registers.

    Supported registers: v0..vf, i, pc, sp, dt, st

    Supported operators: ==, !=, <, <=, >, >=, & (bitwise test)

    Examples:
        >>> cond = RegisterCondition('v3', '==', 0x42)
        >>> cond = RegisterCondition('i', '>', 0x300)
        >>> cond = RegisterCondition('vf', '&', 0x01)
    """

    VALID_REGISTERS = {f"v{n:x}" for n in range(16)} | {"i", "pc", "sp", "dt", "st"}
    VALID_OPERATORS = {'==', '!=', '<', '<=', '>', '>=', '&'}

    def __init__(self, register: str, operator: str, value: int, description: str = ""):
        self.register = register.lower()
        self.operator = operator
        self.value = value
        self.description = description or f"{register} {operator} {value}"

        if self.register not in self.VALID_REGISTERS:
            raise ValueError(
                f"Unknown register '{register}'. Valid registers: "
                f"{', '.join(sorted(self.VALID_REGISTERS))}"
            )
        if self.operator not in self.VALID_OPERATORS:
            raise ValueError(
                f"Unknown operator '{operator}'. Valid operators: "
                f"{', '.join(sorted(self.VALID_OPERATORS))}"
            )

    def check(self, registers: "Registers") -> bool:
        """Evaluate the condition against the current registers."""
        current = registers.to_dict()[self.register]
        match self.operator:
            case '==':
                return current == self.value
            case '!=':
                return current != self.value
            case '<':
                return current < self.value
            case '<=':
                return current <= self.value
            case '>':
                return current > self.value
            case '>=':
                return current >= self.value
            case '&':
                return (current & self.value) != 0
        return False

    def __repr__(self) -> str:
        return f"RegisterCondition({self.description!r})"


class BreakpointManager:
    """
    Manages PC breakpoints and register conditions.

    Example:
        >>> mgr = BreakpointManager()
        >>> mgr.add_breakpoint(0x200)
        >>> mgr.check_instruction(regs, 0x200, 0x00E0)
        False
    """

    def __init__(self):
        self._pc_breakpoints: Set[int] = set()
        self._register_conditions: List[RegisterCondition] = []
        self._last_event: Optional[BreakEvent] = None
        # Address allowed through once so a run can resume from a breakpoint
        self._resume_address: Optional[int] = None

    # =========================================================================
    # Properties
    # =========================================================================

    @property
    def last_event(self) -> Optional[BreakEvent]:
        """Get the last break event that occurred."""
        return self._last_event

    @property
    def breakpoint_count(self) -> int:
        """Number of active PC breakpoints."""
        return len(self._pc_breakpoints)

    # =========================================================================
    # PC Breakpoints
    # =========================================================================

    def add_breakpoint(self, address: int) -> None:
        """
        Add PC breakpoint at address.

        Execution will stop when PC reaches this address, before the
        instruction at that address is executed.
        """
        self._pc_breakpoints.add(address & 0xFFFF)

    def remove_breakpoint(self, address: int) -> None:
        """Remove PC breakpoint at address."""
        self._pc_breakpoints.discard(address & 0xFFFF)

    def has_breakpoint(self, address: int) -> bool:
        """Check whether a breakpoint is set at address."""
        return (address & 0xFFFF) in self._pc_breakpoints

    def list_breakpoints(self) -> List[int]:
        """Get all PC breakpoint addresses, sorted."""
        return sorted(self._pc_breakpoints)

    # =========================================================================
    # Register Conditions
    # =========================================================================

    def add_condition(self, register: str, operator: str, value: int) -> RegisterCondition:
        """Create and add a register condition."""
        condition = RegisterCondition(register, operator, value)
        self._register_conditions.append(condition)
        return condition

    def clear_conditions(self) -> None:
        """Remove all register conditions."""
        self._register_conditions.clear()

    # =========================================================================
    # State
    # =========================================================================

    def resume_from(self, address: int) -> None:
        """Let the next check at address pass even if a breakpoint is set."""
        self._resume_address = address & 0xFFFF

    def record(self, event: BreakEvent) -> None:
        """Store an event produced outside the hook (faults, key waits)."""
        self._last_event = event

    def clear_last_event(self) -> None:
        self._last_event = None

    def clear_all(self) -> None:
        """Remove all breakpoints and conditions and forget the last event."""
        self._pc_breakpoints.clear()
        self._register_conditions.clear()
        self._last_event = None
        self._resume_address = None

    # =========================================================================
    # Check Function (called by the CPU hook)
    # =========================================================================

    def check_instruction(self, registers: "Registers", pc: int, word: int) -> bool:
        """
        Check if we should break before executing an instruction.

        Args:
            registers: Register file to evaluate conditions against
            pc: Address of the instruction
            word: Instruction word about to be executed

        Returns:
            True to continue execution, False to break
        """
        resuming = self._resume_address == pc
        self._resume_address = None
        if resuming:
            return True

        if pc in self._pc_breakpoints:
            self._last_event = BreakEvent(
                BreakReason.PC_BREAKPOINT,
                address=pc,
                value=word,
                message=f"Breakpoint at ${pc:04X}",
            )
            return False

        for cond in self._register_conditions:
            if cond.check(registers):
                self._last_event = BreakEvent(
                    BreakReason.REGISTER_CONDITION,
                    address=pc,
                    value=word,
                    message=f"Condition: {cond.description}",
                )
                return False

        return True
