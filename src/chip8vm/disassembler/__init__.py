"""
CHIP-8 Disassembler Module
==========================

Disassembly of CHIP-8 program bytes into readable mnemonics, for listings
and for execution traces.

Usage:
    from chip8vm.disassembler import Chip8Disassembler

    disasm = Chip8Disassembler()
    instructions = disasm.disassemble(rom_bytes, start_address=0x200)

Copyright (c) 2025-2026 Hugo José Pinto & Contributors
"""

from .chip8 import Chip8Disassembler, DisassembledInstruction

__all__ = [
    "Chip8Disassembler",
    "DisassembledInstruction",
]
