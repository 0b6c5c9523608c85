#!/usr/bin/env python3
"""
CHIP-8 Emulator Demo
====================

This script demonstrates how to use the chip8vm emulator to:
1. Create a machine and load a program
2. Drive it from a host loop with elapsed time
3. Stop on a breakpoint and inspect registers
4. Feed a key press to an Fx0A wait
5. Disassemble what was run

Usage:
    python examples/emulator_demo.py

Copyright (c) 2025-2026 Hugo José Pinto & Contributors
"""

from chip8vm.disassembler import Chip8Disassembler
from chip8vm.emulator import BreakReason, Emulator, EmulatorConfig, TickStatus


# Draws the digit in V0, waits for a key into V0, draws it, then spins
PROGRAM = bytes([
    0x60, 0x07,  # LD V0, $07
    0xF0, 0x29,  # LD F, V0
    0xD1, 0x25,  # DRW V1, V2, 5
    0xF0, 0x0A,  # LD V0, K
    0xF0, 0x29,  # LD F, V0
    0xD1, 0x25,  # DRW V1, V2, 5
    0x12, 0x0C,  # JP $20C
])


def main():
    # ==========================================================================
    # 1. Create an emulator and load the program at $200
    # ==========================================================================
    emu = Emulator(EmulatorConfig(seed=1234))
    emu.load_program(PROGRAM)
    print(emu)

    # ==========================================================================
    # 2. Host loop: one tick per frame, 16ms apart
    # ==========================================================================
    for _ in range(3):
        result = emu.tick(16)
        print(f"  ${result.address:04X} {result.status.name}")

    print(f"  Last sprite: {emu.display.last_draw}")

    # ==========================================================================
    # 3. Run to the key wait
    # ==========================================================================
    event = emu.run(max_ticks=100)
    print(f"\nStopped: {event}")
    if event.reason == BreakReason.KEY_WAIT:
        emu.press_key("host:W")  # keypad 5
        result = emu.tick(16)
        assert result.status is TickStatus.EXECUTED
        emu.release_key("host:W")

    # ==========================================================================
    # 4. Breakpoint on the spin loop
    # ==========================================================================
    if emu.run_until_pc(0x20C, max_ticks=100):
        print("\nReached spin loop:")
        for line in emu.format_registers():
            print(f"  {line}")
        print(f"  Last sprite: {emu.display.last_draw}")

    # ==========================================================================
    # 5. Disassemble
    # ==========================================================================
    print("\nListing:")
    print(Chip8Disassembler().format_listing(PROGRAM))


if __name__ == "__main__":
    main()
