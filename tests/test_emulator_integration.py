"""
Emulator Integration Tests
==========================

Tests for the complete emulator system, verifying that all components
work together correctly.

These tests ensure:
- Configuration validation and environment overrides
- Font and program loading
- Execution control (tick, step, run, run_until_pc)
- Breakpoint and key-wait integration
- Fault reporting through break events

Copyright (c) 2025-2026 Hugo José Pinto & Contributors
"""

import logging

import pytest

from chip8vm.emulator import (
    FONT,
    BreakReason,
    Emulator,
    EmulatorConfig,
    TickStatus,
)
from chip8vm.errors import ConfigError, UnknownOpcodeError


def words(*values: int) -> bytes:
    """Big-endian program bytes from instruction words."""
    return b"".join(v.to_bytes(2, "big") for v in values)


# Counts V0 up three times, then spins at $0206
COUNTER = words(0x6001, 0x7001, 0x7001, 0x1206)

ENV_VARS = ("CHIP8_TICK_PERIOD_MS", "CHIP8_SEED", "CHIP8_LOAD_ADDRESS", "CHIP8_STRICT")


@pytest.fixture
def clean_env(monkeypatch):
    for var in ENV_VARS:
        monkeypatch.delenv(var, raising=False)
    return monkeypatch


@pytest.fixture
def emu():
    return Emulator()


# =============================================================================
# Configuration
# =============================================================================

class TestConfig:
    """Test EmulatorConfig validation and environment overrides."""

    def test_defaults(self):
        config = EmulatorConfig()
        assert config.tick_period_ms == 16
        assert config.seed == 0x0BADF00D
        assert config.load_address == 0x200
        assert config.font_address == 0x000
        assert config.stack_base == 0x200
        assert config.strict_opcodes is False

    @pytest.mark.parametrize("kwargs", [
        {"tick_period_ms": 0},
        {"seed": 0},
        {"seed": 0x100000000},
        {"load_address": 0x201},
        {"load_address": 0x1000},
        {"font_address": 0xFC0},
        {"stack_base": 0},
        {"stack_base": 0x1FF},
    ])
    def test_invalid_values(self, kwargs):
        with pytest.raises(ConfigError):
            EmulatorConfig(**kwargs)

    def test_frozen(self):
        config = EmulatorConfig()
        with pytest.raises(AttributeError):
            config.seed = 5

    def test_to_dict_round_trip(self):
        config = EmulatorConfig(seed=7, strict_opcodes=True)
        assert EmulatorConfig(**config.to_dict()) == config

    def test_from_env_defaults(self, clean_env):
        assert EmulatorConfig.from_env() == EmulatorConfig()

    def test_from_env(self, clean_env):
        clean_env.setenv("CHIP8_TICK_PERIOD_MS", "20")
        clean_env.setenv("CHIP8_SEED", "0x1234")
        clean_env.setenv("CHIP8_LOAD_ADDRESS", "$300")
        clean_env.setenv("CHIP8_STRICT", "yes")
        config = EmulatorConfig.from_env()
        assert config.tick_period_ms == 20
        assert config.seed == 0x1234
        assert config.load_address == 0x300
        assert config.strict_opcodes is True

    def test_from_env_strict_off(self, clean_env):
        clean_env.setenv("CHIP8_STRICT", "0")
        assert EmulatorConfig.from_env().strict_opcodes is False

    def test_from_env_unparseable(self, clean_env):
        clean_env.setenv("CHIP8_SEED", "lots")
        with pytest.raises(ConfigError, match="CHIP8_SEED"):
            EmulatorConfig.from_env()

    def test_from_env_out_of_range(self, clean_env):
        clean_env.setenv("CHIP8_LOAD_ADDRESS", "0x2001")
        with pytest.raises(ConfigError):
            EmulatorConfig.from_env()


# =============================================================================
# Loading and Reset
# =============================================================================

class TestLoading:
    """Test font and program loading."""

    def test_font_loaded_at_base(self, emu):
        assert emu.read_bytes(0x000, 80) == FONT

    def test_font_at_custom_address(self):
        emu = Emulator(EmulatorConfig(font_address=0x050))
        assert emu.read_bytes(0x050, 80) == FONT
        assert emu.read_bytes(0x000, 5) == bytes(5)

    def test_load_program(self, emu):
        emu.load_program(COUNTER)
        assert emu.pc == 0x200
        assert emu.read_bytes(0x200, len(COUNTER)) == COUNTER

    def test_load_at_custom_address(self):
        emu = Emulator(EmulatorConfig(load_address=0x600))
        emu.load_program(words(0x6007))
        assert emu.pc == 0x600
        emu.step()
        assert emu.registers["v0"] == 7

    def test_load_bytes_does_not_move_pc(self, emu):
        emu.load_bytes(b"\x01\x02", 0x300)
        assert emu.pc == 0x200
        assert emu.read_bytes(0x300, 2) == b"\x01\x02"

    def test_load_logged(self, emu, caplog):
        with caplog.at_level(logging.INFO, logger="chip8vm.emulator.emulator"):
            emu.load_program(COUNTER)
        assert "loaded 8 bytes at $0200" in caplog.text

    def test_oversized_program(self, emu):
        from chip8vm.errors import AddressOutOfRangeError
        with pytest.raises(AddressOutOfRangeError):
            emu.load_program(bytes(0xE01))

    def test_reset(self, emu):
        emu.load_program(COUNTER)
        emu.add_breakpoint(0x204)
        emu.run(10)
        emu.reset()
        assert emu.pc == 0x200
        assert emu.registers["v0"] == 0
        assert emu.total_ticks == 0
        assert emu.read_bytes(0x200, 2) == b"\x00\x00"
        assert emu.read_bytes(0x000, 80) == FONT
        assert emu.breakpoints.has_breakpoint(0x204)

    def test_reset_drops_key_presses(self, emu):
        """A press queued before reset does not satisfy a later Fx0A."""
        emu.press_key(7)
        emu.reset()
        assert not emu.keypad.is_down(7)
        emu.load_program(words(0xF30A))
        result = emu.step()
        assert result.status is TickStatus.WAITING_FOR_KEY
        assert emu.registers["v3"] == 0

    def test_memory_snapshot(self, emu):
        snap = emu.memory_snapshot()
        assert len(snap) == 4096
        assert snap[:80] == FONT


# =============================================================================
# Execution
# =============================================================================

class TestExecution:
    """Test tick, step and run."""

    def test_tick(self, emu):
        emu.load_program(COUNTER)
        result = emu.tick(16)
        assert result.status is TickStatus.EXECUTED
        assert result.timer_ticks == 1
        assert emu.total_ticks == 1

    def test_run_max_ticks(self, emu):
        emu.load_program(COUNTER)
        event = emu.run(max_ticks=10)
        assert event.reason is BreakReason.MAX_TICKS
        assert emu.registers["v0"] == 3
        assert emu.pc == 0x206
        assert emu.total_ticks == 10

    def test_run_with_elapsed_time(self, emu):
        emu.load_program(words(0x6005, 0xF015, 0x1204))
        emu.run(max_ticks=2)
        emu.run(max_ticks=32, elapsed_ms=16)
        assert emu.registers["dt"] == 0

    def test_breakpoint_and_resume(self, emu):
        emu.load_program(COUNTER)
        emu.add_breakpoint(0x204)
        event = emu.run(max_ticks=100)
        assert event.reason is BreakReason.PC_BREAKPOINT
        assert event.address == 0x204
        assert emu.pc == 0x204
        assert emu.registers["v0"] == 2

        event = emu.run(max_ticks=10)
        assert event.reason is BreakReason.MAX_TICKS
        assert emu.registers["v0"] == 3

    def test_step_ignores_breakpoint(self, emu):
        emu.load_program(COUNTER)
        emu.add_breakpoint(0x200)
        result = emu.step()
        assert result.status is TickStatus.EXECUTED
        assert emu.pc == 0x202

    def test_tick_honours_breakpoint(self, emu):
        emu.load_program(COUNTER)
        emu.add_breakpoint(0x202)
        emu.tick(0)
        result = emu.tick(0)
        assert result.status is TickStatus.SKIPPED
        assert emu.pc == 0x202

    def test_key_wait_step_does_not_pass_breakpoint_later(self, emu):
        """Stepping during a key wait leaves no pass for the next check."""
        emu.load_program(words(0xF00A))
        assert emu.run(max_ticks=10).reason is BreakReason.KEY_WAIT
        emu.add_breakpoint(0x200)
        assert emu.step().status is TickStatus.WAITING_FOR_KEY

        emu.reset()
        emu.load_program(words(0x6001))
        result = emu.tick(0)
        assert result.status is TickStatus.SKIPPED
        assert emu.pc == 0x200
        assert emu.registers["v0"] == 0

    def test_remove_breakpoint(self, emu):
        emu.load_program(COUNTER)
        emu.add_breakpoint(0x204)
        emu.remove_breakpoint(0x204)
        assert emu.run(max_ticks=10).reason is BreakReason.MAX_TICKS

    def test_register_condition(self, emu):
        emu.load_program(COUNTER)
        emu.breakpoints.add_condition("v0", "==", 2)
        event = emu.run(max_ticks=100)
        assert event.reason is BreakReason.REGISTER_CONDITION
        assert event.address == 0x204

    def test_run_until_pc(self, emu):
        emu.load_program(COUNTER)
        assert emu.run_until_pc(0x206, max_ticks=100) is True
        assert emu.pc == 0x206
        assert not emu.breakpoints.has_breakpoint(0x206)

    def test_run_until_pc_unreached(self, emu):
        emu.load_program(COUNTER)
        assert emu.run_until_pc(0x300, max_ticks=20) is False
        assert not emu.breakpoints.has_breakpoint(0x300)

    def test_run_until_pc_keeps_existing_breakpoint(self, emu):
        emu.load_program(COUNTER)
        emu.add_breakpoint(0x206)
        assert emu.run_until_pc(0x206, max_ticks=100)
        assert emu.breakpoints.has_breakpoint(0x206)

    def test_subroutine_program(self, emu):
        """CALL then RET leaves PC after the CALL with SP restored."""
        emu.load_program(words(0x2206, 0x6101, 0x1204, 0x6242, 0x00EE))
        emu.run(max_ticks=20)
        regs = emu.registers
        assert regs["v2"] == 0x42
        assert regs["v1"] == 0x01
        assert regs["sp"] == 0x200
        assert regs["pc"] == 0x204


# =============================================================================
# Stop Conditions
# =============================================================================

class TestStopConditions:
    """Test key waits, unknown opcodes and faults during run()."""

    def test_key_wait(self, emu):
        emu.load_program(words(0xF50A, 0x1202))
        event = emu.run(max_ticks=100)
        assert event.reason is BreakReason.KEY_WAIT
        assert event.address == 0x200
        assert emu.waiting_for_key

        emu.press_key(0xB)
        event = emu.run(max_ticks=5)
        assert event.reason is BreakReason.MAX_TICKS
        assert emu.registers["v5"] == 0xB
        assert not emu.waiting_for_key
        emu.release_key(0xB)
        assert not emu.keypad.is_down(0xB)

    def test_unknown_opcode(self, emu):
        emu.load_program(words(0x6001, 0xFFFF))
        before = emu.memory_snapshot()
        event = emu.run(max_ticks=100)
        assert event.reason is BreakReason.UNKNOWN_OPCODE
        assert event.address == 0x202
        assert event.value == 0xFFFF
        assert emu.pc == 0x204
        assert emu.memory_snapshot() == before
        assert emu.breakpoints.last_event is event

    def test_strict_unknown_opcode_is_error(self):
        emu = Emulator(EmulatorConfig(strict_opcodes=True))
        emu.load_program(words(0xFFFF))
        event = emu.run(max_ticks=10)
        assert event.reason is BreakReason.ERROR
        assert "unknown opcode $FFFF" in event.message
        assert emu.pc == 0x200

    def test_strict_tick_raises(self):
        emu = Emulator(EmulatorConfig(strict_opcodes=True))
        emu.load_program(words(0xFFFF))
        with pytest.raises(UnknownOpcodeError):
            emu.tick(0)

    def test_fault_becomes_error_event(self, emu, caplog):
        emu.load_program(words(0x6001, 0x00EE))
        with caplog.at_level(logging.ERROR):
            event = emu.run(max_ticks=10)
        assert event.reason is BreakReason.ERROR
        assert event.address == 0x202
        assert event.message.startswith("$0202: stack fault")
        assert emu.pc == 0x202
        assert "machine fault" in caplog.text

    def test_bad_key_number_becomes_error_event(self, emu):
        emu.load_program(words(0x6010, 0xE09E))
        event = emu.run(max_ticks=5)
        assert event.reason is BreakReason.ERROR
        assert event.address == 0x202
        assert "is not a keypad key" in event.message
        assert emu.pc == 0x202


# =============================================================================
# Inspection
# =============================================================================

class TestInspection:
    """Test register formatting and repr."""

    def test_format_registers(self, emu):
        emu.load_program(words(0x6A0B))
        emu.step()
        lines = emu.format_registers()
        assert len(lines) == 3
        assert "V0=00" in lines[0]
        assert "VA=0B" in lines[1]
        assert lines[2].startswith("PC=$0202 I=$0000 SP=$0200")

    def test_repr(self, emu):
        assert repr(emu) == "Emulator(pc=$0200, ticks=0)"
