"""
Register File and Call Stack
============================

Holds the machine registers and implements the in-memory call stack.

Registers:
- V0..VF: 8-bit general purpose. VF doubles as the flag register and is
  overwritten by carry/borrow/shift/collision reporting instructions.
- I: 16-bit index register (only the low 12 bits address memory)
- PC: 16-bit program counter
- SP: stack pointer, a byte address into memory
- DT, ST: 8-bit delay and sound timers

Stack discipline:
    SP starts at the stack base ($200) and the stack grows downward.
    push_word: SP -= 2, then store the word at SP (big-endian)
    pop_word:  load the word at SP, then SP += 2

    A push that would move SP below 0, or a pop that would move SP above
    the base, raises StackFaultError and leaves SP unchanged.

Copyright (c) 2025-2026 Hugo José Pinto & Contributors
"""

from dataclasses import dataclass, field
from typing import List

from ..errors import StackFaultError
from .memory import Memory


NUM_REGISTERS = 16
FLAG_REGISTER = 0xF
STACK_BASE = 0x200


@dataclass
class RegisterState:
    """
    Complete register state.

    All values stored as Python ints but represent:
    - v: sixteen 8-bit unsigned values
    - i, pc, sp: 16-bit unsigned
    - delay_timer, sound_timer: 8-bit unsigned
    """
    v: List[int] = field(default_factory=lambda: [0] * NUM_REGISTERS)
    i: int = 0
    pc: int = 0
    sp: int = STACK_BASE
    delay_timer: int = 0
    sound_timer: int = 0


class Registers:
    """
    Register file with stack helpers bound to a Memory.

    Example:
        >>> regs = Registers(Memory())
        >>> regs.push_word(0x0202)
        >>> hex(regs.sp)
        '0x1fe'
        >>> hex(regs.pop_word())
        '0x202'
    """

    def __init__(self, memory: Memory, stack_base: int = STACK_BASE):
        self.memory = memory
        self.stack_base = stack_base
        self.state = RegisterState(sp=stack_base)

    def reset(self) -> None:
        """Zero all registers and timers, move SP back to the stack base."""
        self.state = RegisterState(sp=self.stack_base)

    # ========================================
    # General purpose registers
    # ========================================

    @property
    def v(self) -> List[int]:
        """The V0..VF list (read it, write through set())."""
        return self.state.v

    def get(self, index: int) -> int:
        """Read register Vindex."""
        return self.state.v[index]

    def set(self, index: int, value: int) -> None:
        """
        Write register Vindex.

        Raises:
            IndexError: If index is not 0-15
            ValueError: If value is not a byte
        """
        if not 0 <= index < NUM_REGISTERS:
            raise IndexError(f"Register index must be 0-15, got {index}")
        if not 0 <= value <= 0xFF:
            raise ValueError(f"Register value must be 0-255, got {value}")
        self.state.v[index] = value

    # ========================================
    # Flag register helpers
    # ========================================

    @property
    def flag(self) -> int:
        """Current value of VF."""
        return self.state.v[FLAG_REGISTER]

    def set_flag(self) -> None:
        """VF = 1."""
        self.state.v[FLAG_REGISTER] = 1

    def clear_flag(self) -> None:
        """VF = 0."""
        self.state.v[FLAG_REGISTER] = 0

    def set_flag_if(self, condition: bool) -> None:
        """VF = 1 if condition else 0."""
        self.state.v[FLAG_REGISTER] = 1 if condition else 0

    # ========================================
    # Special registers
    # ========================================

    @property
    def i(self) -> int:
        """Index register (16-bit)."""
        return self.state.i

    @i.setter
    def i(self, value: int) -> None:
        self.state.i = value & 0xFFFF

    @property
    def pc(self) -> int:
        """Program counter (16-bit)."""
        return self.state.pc

    @pc.setter
    def pc(self, value: int) -> None:
        self.state.pc = value & 0xFFFF

    @property
    def sp(self) -> int:
        """Stack pointer."""
        return self.state.sp

    @property
    def delay_timer(self) -> int:
        """Delay timer (8-bit)."""
        return self.state.delay_timer

    @delay_timer.setter
    def delay_timer(self, value: int) -> None:
        if not 0 <= value <= 0xFF:
            raise ValueError(f"Timer value must be 0-255, got {value}")
        self.state.delay_timer = value

    @property
    def sound_timer(self) -> int:
        """Sound timer (8-bit)."""
        return self.state.sound_timer

    @sound_timer.setter
    def sound_timer(self, value: int) -> None:
        if not 0 <= value <= 0xFF:
            raise ValueError(f"Timer value must be 0-255, got {value}")
        self.state.sound_timer = value

    def go(self, address: int) -> None:
        """Set PC to the program entry address."""
        self.pc = address

    # ========================================
    # Stack Operations
    # ========================================

    @property
    def stack_depth(self) -> int:
        """Number of words currently on the stack."""
        return (self.stack_base - self.state.sp) // 2

    def push_word(self, value: int) -> None:
        """Push word onto stack (pre-decrement, high byte at lower address)."""
        new_sp = self.state.sp - 2
        if new_sp < 0:
            raise StackFaultError(self.state.sp, "push")
        self.memory.write_word(new_sp, value)
        self.state.sp = new_sp

    def pop_word(self) -> int:
        """Pop word from stack (post-increment)."""
        if self.state.sp + 2 > self.stack_base:
            raise StackFaultError(self.state.sp, "pop")
        value = self.memory.read_word(self.state.sp)
        self.state.sp += 2
        return value

    # ========================================
    # Inspection
    # ========================================

    def to_dict(self) -> dict:
        """
        Get register values as a dictionary.

        Returns:
            Dictionary with keys v0..vf, i, pc, sp, dt, st
        """
        result = {f"v{n:x}": value for n, value in enumerate(self.state.v)}
        result.update({
            "i": self.state.i,
            "pc": self.state.pc,
            "sp": self.state.sp,
            "dt": self.state.delay_timer,
            "st": self.state.sound_timer,
        })
        return result
