"""
CHIP-8 CPU
==========

Fetch/decode/execute core with a per-tick entry point.

One call to ``tick(elapsed_ms)``:
    1. The timer clock consumes elapsed_ms; both timers drop by the number
       of whole 16ms periods that passed (never below zero).
    2. If the machine is waiting for a key (Fx0A), the keypad is polled and
       the tick ends; PC stays on the Fx0A instruction until a key arrives.
    3. Otherwise the word at PC is fetched and decoded, PC advances by 2,
       and the instruction executes. Jumps and calls overwrite the advanced
       PC; skips add another 2.

Flag register (VF) side effects:
    8xy4 ADD   VF = carry (sum > 255)
    8xy5 SUB   VF = no borrow (Vx >= Vy before)
    8xy6 SHR   VF = bit 0 of Vx before the shift
    8xy7 SUBN  VF = no borrow (Vy >= Vx before)
    8xyE SHL   VF = bit 7 of Vx before the shift
    Dxyn DRW   VF = collision reported by the display
    VF is written after the result, so when x == F the flag wins.

Faults:
    Memory, stack and alignment faults raise out of tick() with PC restored
    to the faulting instruction. Undefined words are reported in the
    TickResult with PC already past them, unless ``strict`` is set.

Copyright (c) 2025-2026 Hugo José Pinto & Contributors
"""

import logging
from dataclasses import dataclass
from enum import Enum, auto
from typing import Callable, Optional

from ..errors import (
    InvalidKeyError,
    MachineError,
    MisalignedFetchError,
    UnknownOpcodeError,
)
from .clock import DEFAULT_TICK_PERIOD_MS, TimerClock, decrement_timer
from .decoder import Instruction, Op, decode
from .display import DisplayProtocol, NullDisplay
from .font import FONT_BASE, font_address
from .keypad import NUM_KEYS, Keypad, KeypadProtocol
from .memory import Memory
from .prng import DEFAULT_SEED, XorShift32
from .registers import STACK_BASE, Registers

logger = logging.getLogger(__name__)


class Mode(Enum):
    """Machine execution mode."""
    RUNNING = auto()
    WAITING_FOR_KEY = auto()


class TickStatus(Enum):
    """Outcome of one tick."""
    EXECUTED = auto()          # An instruction ran to completion
    WAITING_FOR_KEY = auto()   # Fx0A is still waiting; nothing executed
    UNKNOWN_OPCODE = auto()    # The fetched word is undefined; it was skipped
    SKIPPED = auto()           # The instruction hook vetoed execution


@dataclass
class TickResult:
    """
    What happened during one tick.

    Attributes:
        status: Outcome of the tick
        address: Address of the instruction involved
        word: The instruction word (None if nothing was fetched)
        instruction: The decoded instruction (None if nothing was fetched)
        timer_ticks: Timer decrements applied at the start of the tick
        error: The UnknownOpcodeError for UNKNOWN_OPCODE results
    """
    status: TickStatus
    address: int
    word: Optional[int] = None
    instruction: Optional[Instruction] = None
    timer_ticks: int = 0
    error: Optional[UnknownOpcodeError] = None

    @property
    def ok(self) -> bool:
        """True unless the tick hit an undefined word."""
        return self.status is not TickStatus.UNKNOWN_OPCODE


class CPU:
    """
    CHIP-8 interpreter core.

    Instrumentation hook:
        on_instruction(pc, word) -> bool is called before each fetch.
        Returning False leaves the instruction unexecuted and PC unchanged
        (used for breakpoints).

    Example:
        >>> cpu = CPU()
        >>> cpu.memory.write_bytes(0x200, bytes([0x6A, 0x42]))  # LD VA, $42
        >>> cpu.registers.go(0x200)
        >>> cpu.tick(0).status
        <TickStatus.EXECUTED: 1>
        >>> hex(cpu.registers.get(0xA))
        '0x42'
    """

    def __init__(
        self,
        memory: Optional[Memory] = None,
        display: Optional[DisplayProtocol] = None,
        keypad: Optional[KeypadProtocol] = None,
        seed: int = DEFAULT_SEED,
        tick_period_ms: int = DEFAULT_TICK_PERIOD_MS,
        stack_base: int = STACK_BASE,
        font_base: int = FONT_BASE,
        strict: bool = False,
    ):
        """
        Initialize CPU.

        Args:
            memory: Memory to execute from (a fresh zeroed one by default)
            display: Display collaborator (NullDisplay by default)
            keypad: Keypad collaborator (an idle Keypad by default)
            seed: PRNG seed for Cxkk
            tick_period_ms: Milliseconds per timer tick
            stack_base: Initial SP; the stack grows down from here
            font_base: Address of the digit sprites used by Fx29
            strict: Raise UnknownOpcodeError instead of reporting it
        """
        self.memory = memory if memory is not None else Memory()
        self.display = display if display is not None else NullDisplay()
        self.keypad = keypad if keypad is not None else Keypad()
        self.registers = Registers(self.memory, stack_base)
        self.clock = TimerClock(tick_period_ms)
        self.rng = XorShift32(seed)
        self.font_base = font_base
        self.strict = strict

        self._seed = seed
        self.mode = Mode.RUNNING
        self._wait_register: Optional[int] = None

        self.on_instruction: Optional[Callable[[int, int], bool]] = None

        self._handlers = {
            Op.CLS: self._op_cls,
            Op.RET: self._op_ret,
            Op.JP: self._op_jp,
            Op.CALL: self._op_call,
            Op.SE_BYTE: self._op_se_byte,
            Op.SNE_BYTE: self._op_sne_byte,
            Op.SE_REG: self._op_se_reg,
            Op.LD_BYTE: self._op_ld_byte,
            Op.ADD_BYTE: self._op_add_byte,
            Op.LD_REG: self._op_ld_reg,
            Op.OR: self._op_or,
            Op.AND: self._op_and,
            Op.XOR: self._op_xor,
            Op.ADD_REG: self._op_add_reg,
            Op.SUB: self._op_sub,
            Op.SHR: self._op_shr,
            Op.SUBN: self._op_subn,
            Op.SHL: self._op_shl,
            Op.SNE_REG: self._op_sne_reg,
            Op.LD_I: self._op_ld_i,
            Op.JP_V0: self._op_jp_v0,
            Op.RND: self._op_rnd,
            Op.DRW: self._op_drw,
            Op.SKP: self._op_skp,
            Op.SKNP: self._op_sknp,
            Op.LD_VX_DT: self._op_ld_vx_dt,
            Op.LD_VX_K: self._op_ld_vx_k,
            Op.LD_DT: self._op_ld_dt,
            Op.LD_ST: self._op_ld_st,
            Op.ADD_I: self._op_add_i,
            Op.LD_F: self._op_ld_f,
            Op.LD_B: self._op_ld_b,
            Op.LD_MEM_REGS: self._op_ld_mem_regs,
            Op.LD_REGS_MEM: self._op_ld_regs_mem,
        }

    # ========================================
    # Convenience accessors
    # ========================================

    @property
    def pc(self) -> int:
        return self.registers.pc

    @pc.setter
    def pc(self, value: int) -> None:
        self.registers.pc = value

    @property
    def v(self):
        return self.registers.v

    @property
    def waiting_for_key(self) -> bool:
        return self.mode is Mode.WAITING_FOR_KEY

    def reset(self) -> None:
        """
        Return to power-on state.

        Registers, timers, clock remainder, PRNG and mode are reset.
        Memory is left alone; the caller decides what to reload.
        """
        self.registers.reset()
        self.clock.reset()
        self.rng.seed(self._seed)
        self.mode = Mode.RUNNING
        self._wait_register = None

    # ========================================
    # Main entry point
    # ========================================

    def tick(self, elapsed_ms: int) -> TickResult:
        """
        Advance timers by elapsed_ms and execute at most one instruction.

        Args:
            elapsed_ms: Milliseconds since the previous tick

        Returns:
            TickResult describing the tick

        Raises:
            AddressOutOfRangeError: Memory access outside [0, 4096)
            StackFaultError: Call/return left the stack region
            MisalignedFetchError: PC was odd at fetch time
            InvalidKeyError: Ex9E/ExA1 with Vx above 15
            UnknownOpcodeError: Undefined word, only when strict
        """
        timer_ticks = self._update_timers(elapsed_ms)

        if self.mode is Mode.WAITING_FOR_KEY:
            return self._poll_key_wait(timer_ticks)

        address = self.pc
        try:
            word = self._fetch(address)
            if self.on_instruction is not None:
                if not self.on_instruction(address, word):
                    return TickResult(
                        TickStatus.SKIPPED, address, word=word,
                        timer_ticks=timer_ticks,
                    )

            instruction = decode(word)
            self.pc = address + 2

            if instruction.op is Op.UNKNOWN:
                return self._unknown(instruction, address, timer_ticks)

            logger.debug(
                f"executing: ${word:04X} at ${address:04X} ({instruction.op.value})"
            )
            self._handlers[instruction.op](instruction)
        except MachineError as e:
            self.pc = address
            if e.pc is None:
                e.at(address)
            raise
        except Exception:
            self.pc = address
            raise

        status = (
            TickStatus.WAITING_FOR_KEY if self.mode is Mode.WAITING_FOR_KEY
            else TickStatus.EXECUTED
        )
        return TickResult(
            status, address, word=word, instruction=instruction,
            timer_ticks=timer_ticks,
        )

    def step(self) -> TickResult:
        """Execute one instruction without advancing time."""
        return self.tick(0)

    def _update_timers(self, elapsed_ms: int) -> int:
        ticks = self.clock.advance(elapsed_ms)
        if ticks:
            state = self.registers.state
            state.delay_timer = decrement_timer(state.delay_timer, ticks)
            state.sound_timer = decrement_timer(state.sound_timer, ticks)
        return ticks

    def _fetch(self, address: int) -> int:
        if address & 1:
            raise MisalignedFetchError(address)
        return self.memory.read_word(address)

    def _unknown(
        self, instruction: Instruction, address: int, timer_ticks: int
    ) -> TickResult:
        error = UnknownOpcodeError(instruction.word, pc=address)
        if self.strict:
            raise error
        logger.warning(f"{error}")
        return TickResult(
            TickStatus.UNKNOWN_OPCODE, address, word=instruction.word,
            instruction=instruction, timer_ticks=timer_ticks, error=error,
        )

    def _poll_key_wait(self, timer_ticks: int) -> TickResult:
        """Complete a pending Fx0A if a key became available."""
        address = self.pc
        key = self.keypad.take_pressed()
        if key is None:
            return TickResult(
                TickStatus.WAITING_FOR_KEY, address, timer_ticks=timer_ticks
            )

        word = self._fetch(address)
        self._complete_key_wait(key)
        self.pc = address + 2
        return TickResult(
            TickStatus.EXECUTED, address, word=word, instruction=decode(word),
            timer_ticks=timer_ticks,
        )

    def _complete_key_wait(self, key: int) -> None:
        logger.debug(f"key ${key:X} pressed, V{self._wait_register:X} loaded")
        self.registers.set(self._wait_register, key)
        self.mode = Mode.RUNNING
        self._wait_register = None

    def _skip_if(self, condition: bool) -> None:
        if condition:
            self.pc = self.pc + 2

    # ========================================
    # Flow control
    # ========================================

    def _op_cls(self, ins: Instruction) -> None:
        self.display.clear()

    def _op_ret(self, ins: Instruction) -> None:
        self.pc = self.registers.pop_word()

    def _op_jp(self, ins: Instruction) -> None:
        self.pc = ins.nnn

    def _op_call(self, ins: Instruction) -> None:
        # PC already points past the CALL
        self.registers.push_word(self.pc)
        self.pc = ins.nnn

    def _op_jp_v0(self, ins: Instruction) -> None:
        self.pc = ins.nnn + self.v[0]

    def _op_se_byte(self, ins: Instruction) -> None:
        self._skip_if(self.v[ins.x] == ins.kk)

    def _op_sne_byte(self, ins: Instruction) -> None:
        self._skip_if(self.v[ins.x] != ins.kk)

    def _op_se_reg(self, ins: Instruction) -> None:
        self._skip_if(self.v[ins.x] == self.v[ins.y])

    def _op_sne_reg(self, ins: Instruction) -> None:
        self._skip_if(self.v[ins.x] != self.v[ins.y])

    # ========================================
    # Loads and ALU
    # ========================================

    def _op_ld_byte(self, ins: Instruction) -> None:
        self.registers.set(ins.x, ins.kk)

    def _op_add_byte(self, ins: Instruction) -> None:
        # No carry flag
        self.registers.set(ins.x, (self.v[ins.x] + ins.kk) & 0xFF)

    def _op_ld_reg(self, ins: Instruction) -> None:
        self.registers.set(ins.x, self.v[ins.y])

    def _op_or(self, ins: Instruction) -> None:
        self.registers.set(ins.x, self.v[ins.x] | self.v[ins.y])

    def _op_and(self, ins: Instruction) -> None:
        self.registers.set(ins.x, self.v[ins.x] & self.v[ins.y])

    def _op_xor(self, ins: Instruction) -> None:
        self.registers.set(ins.x, self.v[ins.x] ^ self.v[ins.y])

    def _op_add_reg(self, ins: Instruction) -> None:
        """Vx += Vy; writes VF = carry."""
        total = self.v[ins.x] + self.v[ins.y]
        self.registers.set(ins.x, total & 0xFF)
        self.registers.set_flag_if(total > 0xFF)

    def _op_sub(self, ins: Instruction) -> None:
        """Vx -= Vy; writes VF = no borrow."""
        x, y = self.v[ins.x], self.v[ins.y]
        self.registers.set(ins.x, (x - y) & 0xFF)
        self.registers.set_flag_if(x >= y)

    def _op_subn(self, ins: Instruction) -> None:
        """Vx = Vy - Vx; writes VF = no borrow."""
        x, y = self.v[ins.x], self.v[ins.y]
        self.registers.set(ins.x, (y - x) & 0xFF)
        self.registers.set_flag_if(y >= x)

    def _op_shr(self, ins: Instruction) -> None:
        """Vx >>= 1; writes VF = shifted-out bit 0."""
        x = self.v[ins.x]
        self.registers.set(ins.x, x >> 1)
        self.registers.set_flag_if(x & 0x01)

    def _op_shl(self, ins: Instruction) -> None:
        """Vx <<= 1; writes VF = shifted-out bit 7."""
        x = self.v[ins.x]
        self.registers.set(ins.x, (x << 1) & 0xFF)
        self.registers.set_flag_if(x & 0x80)

    def _op_rnd(self, ins: Instruction) -> None:
        self.registers.set(ins.x, self.rng.next_byte() & ins.kk)

    # ========================================
    # Index register and memory
    # ========================================

    def _op_ld_i(self, ins: Instruction) -> None:
        self.registers.i = ins.nnn

    def _op_add_i(self, ins: Instruction) -> None:
        self.registers.i = self.registers.i + self.v[ins.x]

    def _op_ld_f(self, ins: Instruction) -> None:
        self.registers.i = font_address(self.v[ins.x], self.font_base)

    def _op_ld_b(self, ins: Instruction) -> None:
        value = self.v[ins.x]
        digits = bytes([value // 100, (value // 10) % 10, value % 10])
        self.memory.write_bytes(self.registers.i, digits)

    def _op_ld_mem_regs(self, ins: Instruction) -> None:
        self.memory.write_bytes(self.registers.i, self.v[:ins.x + 1])

    def _op_ld_regs_mem(self, ins: Instruction) -> None:
        data = self.memory.read_bytes(self.registers.i, ins.x + 1)
        for index, value in enumerate(data):
            self.registers.set(index, value)

    # ========================================
    # Timers
    # ========================================

    def _op_ld_vx_dt(self, ins: Instruction) -> None:
        self.registers.set(ins.x, self.registers.delay_timer)

    def _op_ld_dt(self, ins: Instruction) -> None:
        self.registers.delay_timer = self.v[ins.x]

    def _op_ld_st(self, ins: Instruction) -> None:
        self.registers.sound_timer = self.v[ins.x]

    # ========================================
    # Display and keypad
    # ========================================

    def _op_drw(self, ins: Instruction) -> None:
        """Draw n-byte sprite at I; writes VF = collision."""
        sprite = self.memory.read_bytes(self.registers.i, ins.n)
        collided = self.display.draw_sprite(self.v[ins.x], self.v[ins.y], sprite)
        self.registers.set_flag_if(collided)

    def _key_down(self, key: int) -> bool:
        if not 0 <= key < NUM_KEYS:
            raise InvalidKeyError(key)
        return self.keypad.is_down(key)

    def _op_skp(self, ins: Instruction) -> None:
        self._skip_if(self._key_down(self.v[ins.x]))

    def _op_sknp(self, ins: Instruction) -> None:
        self._skip_if(not self._key_down(self.v[ins.x]))

    def _op_ld_vx_k(self, ins: Instruction) -> None:
        self._wait_register = ins.x
        key = self.keypad.take_pressed()
        if key is not None:
            self._complete_key_wait(key)
            return
        logger.debug(f"waiting for key into V{ins.x:X}")
        self.mode = Mode.WAITING_FOR_KEY
        # Hold PC on the Fx0A until a key arrives
        self.pc = self.pc - 2
