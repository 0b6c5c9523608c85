"""
CHIP-8 Emulator - Main Orchestrator
===================================

This module provides the main `Emulator` class that wires the CPU, memory,
display, keypad and breakpoint manager together behind a small API.

The Emulator class:
- Initializes all components from an EmulatorConfig
- Loads the font and program bytes into memory
- Supports execution control (tick, step, run, run_until_pc)
- Integrates breakpoints via the CPU instruction hook
- Offers register and memory inspection

Example usage:
    >>> from chip8vm.emulator import Emulator
    >>> emu = Emulator()
    >>> emu.load_program(bytes([0x60, 0x05, 0x70, 0x03]))
    >>> emu.step().status
    <TickStatus.EXECUTED: 1>
    >>> emu.step().status
    <TickStatus.EXECUTED: 1>
    >>> emu.registers["v0"]
    8

Copyright (c) 2025-2026 Hugo José Pinto & Contributors
"""

import logging
import os
from dataclasses import dataclass, fields
from typing import List, Optional

from ..errors import ConfigError, MachineError
from .breakpoints import BreakEvent, BreakpointManager, BreakReason
from .clock import DEFAULT_TICK_PERIOD_MS
from .cpu import CPU, TickResult, TickStatus
from .display import DisplayProtocol
from .font import FONT, FONT_BASE
from .keypad import KeypadProtocol
from .memory import MEMORY_SIZE, Memory
from .prng import DEFAULT_SEED
from .registers import STACK_BASE

logger = logging.getLogger(__name__)

PROGRAM_START = 0x200


def parse_int(text: str) -> int:
    """Parse a decimal, 0x-prefixed or $-prefixed hex integer."""
    text = text.strip()
    if text.lower().startswith("0x"):
        return int(text, 16)
    if text.startswith("$"):
        return int(text[1:], 16)
    return int(text)


@dataclass(frozen=True)
class EmulatorConfig:
    """
    Configuration for emulator initialization.

    Attributes:
        tick_period_ms: Milliseconds per timer tick (16 ~ 60 Hz)
        seed: PRNG seed for Cxkk (non-zero, 32-bit)
        load_address: Where programs are loaded and execution starts
        font_address: Where the digit sprites are placed
        stack_base: Initial stack pointer; the stack grows down from here
        strict_opcodes: Raise on undefined instruction words instead of
            reporting them in the TickResult

    Example:
        >>> config = EmulatorConfig(seed=1234)
        >>> config = EmulatorConfig.from_env()
    """
    tick_period_ms: int = DEFAULT_TICK_PERIOD_MS
    seed: int = DEFAULT_SEED
    load_address: int = PROGRAM_START
    font_address: int = FONT_BASE
    stack_base: int = STACK_BASE
    strict_opcodes: bool = False

    def __post_init__(self) -> None:
        if self.tick_period_ms <= 0:
            raise ConfigError(f"tick_period_ms must be positive, got {self.tick_period_ms}")
        if not 0 < self.seed <= 0xFFFFFFFF:
            raise ConfigError(f"seed must be 1-0xFFFFFFFF, got {self.seed:#x}")
        if not 0 <= self.load_address < MEMORY_SIZE or self.load_address & 1:
            raise ConfigError(
                f"load_address must be an even address below ${MEMORY_SIZE:04X}, "
                f"got ${self.load_address:04X}"
            )
        if not 0 <= self.font_address <= MEMORY_SIZE - len(FONT):
            raise ConfigError(f"font_address ${self.font_address:04X} leaves no room for the font")
        if not 0 < self.stack_base <= MEMORY_SIZE or self.stack_base & 1:
            raise ConfigError(f"stack_base must be an even address up to ${MEMORY_SIZE:04X}")

    @classmethod
    def from_env(cls) -> "EmulatorConfig":
        """
        Create EmulatorConfig from environment variables.

        Environment variables (all optional):
            CHIP8_TICK_PERIOD_MS: Timer tick period in ms
            CHIP8_SEED: PRNG seed (decimal or 0x hex)
            CHIP8_LOAD_ADDRESS: Program load address (decimal or 0x hex)
            CHIP8_STRICT: "1"/"true"/"yes" to raise on undefined opcodes

        Returns:
            EmulatorConfig with values from environment variables

        Raises:
            ConfigError: If a variable cannot be parsed
        """
        overrides = {}
        int_vars = {
            "CHIP8_TICK_PERIOD_MS": "tick_period_ms",
            "CHIP8_SEED": "seed",
            "CHIP8_LOAD_ADDRESS": "load_address",
        }
        for var, name in int_vars.items():
            if raw := os.environ.get(var):
                try:
                    overrides[name] = parse_int(raw)
                except ValueError:
                    raise ConfigError(f"{var} is not an integer: {raw!r}") from None

        if strict := os.environ.get("CHIP8_STRICT"):
            overrides["strict_opcodes"] = strict.strip().lower() in ("1", "true", "yes", "on")

        return cls(**overrides)

    def to_dict(self) -> dict:
        return {f.name: getattr(self, f.name) for f in fields(self)}


class Emulator:
    """
    CHIP-8 emulator with breakpoint support.

    Attributes:
        config: The EmulatorConfig used to initialize this instance
        cpu: The CPU (accessible for low-level control)
        memory: The 4KB memory
        display: The display collaborator
        keypad: The keypad collaborator
        breakpoints: The breakpoint manager
    """

    def __init__(
        self,
        config: Optional[EmulatorConfig] = None,
        display: Optional[DisplayProtocol] = None,
        keypad: Optional[KeypadProtocol] = None,
    ):
        """
        Initialize the emulator and reset it to power-on state.

        Args:
            config: EmulatorConfig; defaults to EmulatorConfig()
            display: Display collaborator; headless NullDisplay by default
            keypad: Keypad collaborator; an idle Keypad by default
        """
        self.config = config or EmulatorConfig()
        self.memory = Memory()
        self.cpu = CPU(
            memory=self.memory,
            display=display,
            keypad=keypad,
            seed=self.config.seed,
            tick_period_ms=self.config.tick_period_ms,
            stack_base=self.config.stack_base,
            font_base=self.config.font_address,
            strict=self.config.strict_opcodes,
        )
        self.display = self.cpu.display
        self.keypad = self.cpu.keypad

        self.breakpoints = BreakpointManager()
        self.cpu.on_instruction = self._instruction_hook

        self._total_ticks = 0
        self.reset()

    def _instruction_hook(self, pc: int, word: int) -> bool:
        """Connect the CPU's fetch to the breakpoint manager."""
        return self.breakpoints.check_instruction(self.cpu.registers, pc, word)

    # =========================================================================
    # Program Loading
    # =========================================================================

    def reset(self) -> None:
        """
        Reset emulator to power-on state.

        Memory is zeroed, the font is reloaded, registers, timers and PRNG
        return to their initial values, held keys and queued presses are
        dropped, and PC is set to the load address. Breakpoints survive a
        reset.
        """
        self.memory.clear()
        self.memory.write_bytes(self.config.font_address, FONT)
        self.cpu.reset()
        self.keypad.release_all()
        self.cpu.registers.go(self.config.load_address)
        self.breakpoints.clear_last_event()
        self._total_ticks = 0
        logger.debug("emulator reset")

    def load_bytes(self, data: bytes, address: Optional[int] = None) -> None:
        """
        Load raw bytes into memory.

        Args:
            data: Bytes to load
            address: Starting address (default: the configured load address)

        Raises:
            AddressOutOfRangeError: If the data does not fit in memory
        """
        if address is None:
            address = self.config.load_address
        self.memory.write_bytes(address, data)
        logger.info(f"loaded {len(data)} bytes at ${address:04X}")

    def load_program(self, code: bytes, entry_point: Optional[int] = None) -> None:
        """
        Load a program and point PC at it.

        Args:
            code: Program bytes
            entry_point: Load address and entry (default: configured load address)
        """
        if entry_point is None:
            entry_point = self.config.load_address
        self.load_bytes(code, entry_point)
        self.go(entry_point)

    def go(self, address: int) -> None:
        """Set PC to the start address."""
        self.cpu.registers.go(address)

    # =========================================================================
    # Execution Control
    # =========================================================================

    def tick(self, elapsed_ms: int) -> TickResult:
        """
        Advance timers by elapsed_ms and execute one instruction.

        Breakpoints are honoured: a tick that stops on one returns a
        SKIPPED result with PC unchanged.
        """
        result = self.cpu.tick(elapsed_ms)
        self._total_ticks += 1
        return result

    def step(self) -> TickResult:
        """
        Execute a single instruction, ignoring any breakpoint at PC.

        Returns:
            TickResult of the executed instruction
        """
        self._resume_here()
        return self.tick(0)

    def _resume_here(self) -> None:
        # A key wait tick never reaches the hook, so no pass is armed for it
        if not self.cpu.waiting_for_key:
            self.breakpoints.resume_from(self.cpu.pc)

    def run(self, max_ticks: int = 100_000, elapsed_ms: int = 0) -> BreakEvent:
        """
        Run until something interesting happens or max_ticks is reached.

        Execution stops when:
        - A breakpoint or register condition triggers
        - Fx0A starts waiting for a key that has not been pressed
        - An undefined word is fetched
        - A machine fault is raised (the event carries the message; the
          exception is not re-raised)
        - max_ticks ticks have run

        Args:
            max_ticks: Maximum number of ticks
            elapsed_ms: Milliseconds to report per tick

        Returns:
            BreakEvent describing why execution stopped
        """
        self.breakpoints.clear_last_event()
        self._resume_here()

        for _ in range(max_ticks):
            try:
                result = self.tick(elapsed_ms)
            except MachineError as e:
                event = BreakEvent(BreakReason.ERROR, address=e.pc, message=str(e))
                self.breakpoints.record(event)
                logger.error(f"machine fault: {e}")
                return event

            if result.status is TickStatus.SKIPPED:
                return self.breakpoints.last_event
            if result.status is TickStatus.WAITING_FOR_KEY:
                event = BreakEvent(
                    BreakReason.KEY_WAIT,
                    address=result.address,
                    message=f"Waiting for key at ${result.address:04X}",
                )
                self.breakpoints.record(event)
                return event
            if result.status is TickStatus.UNKNOWN_OPCODE:
                event = BreakEvent(
                    BreakReason.UNKNOWN_OPCODE,
                    address=result.address,
                    value=result.word,
                    message=str(result.error),
                )
                self.breakpoints.record(event)
                return event

        return BreakEvent(
            BreakReason.MAX_TICKS,
            address=self.cpu.pc,
            message=f"Reached max ticks ({max_ticks})",
        )

    def run_until_pc(self, address: int, max_ticks: int = 100_000) -> bool:
        """
        Run until PC reaches a specific address.

        Creates a temporary breakpoint at the address and runs until hit.

        Returns:
            True if address was reached, False otherwise
        """
        was_set = self.breakpoints.has_breakpoint(address)
        if not was_set:
            self.breakpoints.add_breakpoint(address)

        try:
            event = self.run(max_ticks)
            return (event.reason == BreakReason.PC_BREAKPOINT and
                    event.address == address)
        finally:
            if not was_set:
                self.breakpoints.remove_breakpoint(address)

    def add_breakpoint(self, address: int) -> None:
        """Add a PC breakpoint at the specified address."""
        self.breakpoints.add_breakpoint(address)

    def remove_breakpoint(self, address: int) -> None:
        """Remove a PC breakpoint at the specified address."""
        self.breakpoints.remove_breakpoint(address)

    # =========================================================================
    # Keypad Input
    # =========================================================================

    def press_key(self, key) -> None:
        """Press a key (0-15 or a key name) on the built-in keypad."""
        self.keypad.key_down(key)

    def release_key(self, key) -> None:
        """Release a key on the built-in keypad."""
        self.keypad.key_up(key)

    # =========================================================================
    # State Inspection
    # =========================================================================

    @property
    def registers(self) -> dict:
        """
        Get current register values as a dictionary.

        Returns:
            Dictionary with keys v0..vf, i, pc, sp, dt, st
        """
        return self.cpu.registers.to_dict()

    @property
    def pc(self) -> int:
        return self.cpu.pc

    @property
    def waiting_for_key(self) -> bool:
        return self.cpu.waiting_for_key

    @property
    def total_ticks(self) -> int:
        """Ticks executed since the last reset."""
        return self._total_ticks

    def memory_snapshot(self) -> bytes:
        """Return a copy of the whole 4KB address space."""
        return self.memory.snapshot()

    def read_bytes(self, address: int, count: int) -> bytes:
        return self.memory.read_bytes(address, count)

    def format_registers(self) -> List[str]:
        """Render registers as lines for terminal output."""
        regs = self.cpu.registers
        v = regs.v
        return [
            " ".join(f"V{n:X}={v[n]:02X}" for n in range(8)),
            " ".join(f"V{n:X}={v[n]:02X}" for n in range(8, 16)),
            f"PC=${regs.pc:04X} I=${regs.i:04X} SP=${regs.sp:04X} "
            f"DT={regs.delay_timer:02X} ST={regs.sound_timer:02X}",
        ]

    def __repr__(self) -> str:
        return f"Emulator(pc=${self.cpu.pc:04X}, ticks={self._total_ticks})"
