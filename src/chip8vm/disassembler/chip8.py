"""
CHIP-8 Disassembler
===================

Turns CHIP-8 program bytes into a readable listing using the same decoder
the CPU executes with, so the listing always agrees with execution.

Mnemonics follow the common CHIP-8 reference syntax:

    $0200: 00E0  CLS
    $0202: 6A02  LD VA, $02
    $0204: A21E  LD I, $21E
    $0206: D015  DRW V0, V1, 5
    $0208: 1208  JP $208
    $020A: 5121  DW $5121          ; undefined

Usage:
    disasm = Chip8Disassembler()
    for ins in disasm.disassemble(rom, start_address=0x200, count=10):
        print(ins)

Copyright (c) 2025-2026 Hugo José Pinto & Contributors
"""

from dataclasses import dataclass
from typing import Callable, Dict, List, Optional

from ..emulator.decoder import Instruction, Op, decode


# =============================================================================
# Data Structures
# =============================================================================

@dataclass
class DisassembledInstruction:
    """
    A single disassembled word (or trailing byte).

    Attributes:
        address: Memory address of the instruction
        word: The 16-bit word (a single byte for a trailing odd byte)
        op: Decoded instruction tag (None for a trailing byte)
        mnemonic: The instruction mnemonic (e.g. "LD", "DRW", "DW")
        operand_str: Formatted operands
        size: Bytes covered (2, or 1 for a trailing byte)
        comment: Optional annotation
    """
    address: int
    word: int
    op: Optional[Op]
    mnemonic: str
    operand_str: str
    size: int = 2
    comment: str = ""

    def __str__(self) -> str:
        """Format as assembly line: ADDRESS: WORD  MNEMONIC OPERANDS"""
        raw = f"{self.word:04X}" if self.size == 2 else f"{self.word:02X}  "
        asm = f"{self.mnemonic} {self.operand_str}" if self.operand_str else self.mnemonic
        if self.comment:
            return f"${self.address:04X}: {raw}  {asm:<18} ; {self.comment}"
        return f"${self.address:04X}: {raw}  {asm}"

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "address": f"${self.address:04X}",
            "address_int": self.address,
            "word": f"${self.word:04X}" if self.size == 2 else f"${self.word:02X}",
            "op": self.op.value if self.op is not None else None,
            "mnemonic": self.mnemonic,
            "operand": self.operand_str,
            "size": self.size,
            "comment": self.comment,
        }


def _vx(ins: Instruction) -> str:
    return f"V{ins.x:X}"


def _vy(ins: Instruction) -> str:
    return f"V{ins.y:X}"


# Op -> (mnemonic, operand formatter)
_FORMATS: Dict[Op, tuple] = {
    Op.CLS: ("CLS", lambda i: ""),
    Op.RET: ("RET", lambda i: ""),
    Op.JP: ("JP", lambda i: f"${i.nnn:03X}"),
    Op.CALL: ("CALL", lambda i: f"${i.nnn:03X}"),
    Op.SE_BYTE: ("SE", lambda i: f"{_vx(i)}, ${i.kk:02X}"),
    Op.SNE_BYTE: ("SNE", lambda i: f"{_vx(i)}, ${i.kk:02X}"),
    Op.SE_REG: ("SE", lambda i: f"{_vx(i)}, {_vy(i)}"),
    Op.LD_BYTE: ("LD", lambda i: f"{_vx(i)}, ${i.kk:02X}"),
    Op.ADD_BYTE: ("ADD", lambda i: f"{_vx(i)}, ${i.kk:02X}"),
    Op.LD_REG: ("LD", lambda i: f"{_vx(i)}, {_vy(i)}"),
    Op.OR: ("OR", lambda i: f"{_vx(i)}, {_vy(i)}"),
    Op.AND: ("AND", lambda i: f"{_vx(i)}, {_vy(i)}"),
    Op.XOR: ("XOR", lambda i: f"{_vx(i)}, {_vy(i)}"),
    Op.ADD_REG: ("ADD", lambda i: f"{_vx(i)}, {_vy(i)}"),
    Op.SUB: ("SUB", lambda i: f"{_vx(i)}, {_vy(i)}"),
    Op.SHR: ("SHR", lambda i: _vx(i)),
    Op.SUBN: ("SUBN", lambda i: f"{_vx(i)}, {_vy(i)}"),
    Op.SHL: ("SHL", lambda i: _vx(i)),
    Op.SNE_REG: ("SNE", lambda i: f"{_vx(i)}, {_vy(i)}"),
    Op.LD_I: ("LD", lambda i: f"I, ${i.nnn:03X}"),
    Op.JP_V0: ("JP", lambda i: f"V0, ${i.nnn:03X}"),
    Op.RND: ("RND", lambda i: f"{_vx(i)}, ${i.kk:02X}"),
    Op.DRW: ("DRW", lambda i: f"{_vx(i)}, {_vy(i)}, {i.n}"),
    Op.SKP: ("SKP", lambda i: _vx(i)),
    Op.SKNP: ("SKNP", lambda i: _vx(i)),
    Op.LD_VX_DT: ("LD", lambda i: f"{_vx(i)}, DT"),
    Op.LD_VX_K: ("LD", lambda i: f"{_vx(i)}, K"),
    Op.LD_DT: ("LD", lambda i: f"DT, {_vx(i)}"),
    Op.LD_ST: ("LD", lambda i: f"ST, {_vx(i)}"),
    Op.ADD_I: ("ADD", lambda i: f"I, {_vx(i)}"),
    Op.LD_F: ("LD", lambda i: f"F, {_vx(i)}"),
    Op.LD_B: ("LD", lambda i: f"B, {_vx(i)}"),
    Op.LD_MEM_REGS: ("LD", lambda i: f"[I], {_vx(i)}"),
    Op.LD_REGS_MEM: ("LD", lambda i: f"{_vx(i)}, [I]"),
}


# =============================================================================
# CHIP-8 Disassembler
# =============================================================================

class Chip8Disassembler:
    """
    Disassembler for CHIP-8 programs.

    Attributes:
        _symbol_table: Optional address -> label map used to annotate
            jump and call targets
    """

    def __init__(self, symbol_table: Optional[Dict[int, str]] = None):
        self._symbol_table = symbol_table or {}

    def disassemble_word(self, word: int, address: int = 0) -> DisassembledInstruction:
        """Disassemble a single instruction word."""
        ins = decode(word)
        if ins.op is Op.UNKNOWN:
            return DisassembledInstruction(
                address, word, ins.op, "DW", f"${word:04X}", comment="undefined"
            )

        mnemonic, formatter = _FORMATS[ins.op]
        comment = ""
        if ins.op in (Op.JP, Op.CALL, Op.LD_I) and ins.nnn in self._symbol_table:
            comment = self._symbol_table[ins.nnn]
        return DisassembledInstruction(
            address, word, ins.op, mnemonic, formatter(ins), comment=comment
        )

    def disassemble(
        self,
        data: bytes,
        start_address: int = 0x200,
        count: Optional[int] = None,
    ) -> List[DisassembledInstruction]:
        """
        Disassemble a block of program bytes.

        Args:
            data: Program bytes, starting at start_address
            start_address: Address of data[0]
            count: Maximum number of entries (default: all)

        Returns:
            One entry per word; an odd trailing byte becomes a DB entry
        """
        result: List[DisassembledInstruction] = []
        offset = 0
        while offset < len(data):
            if count is not None and len(result) >= count:
                break
            address = start_address + offset
            if offset + 1 >= len(data):
                byte = data[offset]
                result.append(DisassembledInstruction(
                    address, byte, None, "DB", f"${byte:02X}", size=1
                ))
                break
            word = (data[offset] << 8) | data[offset + 1]
            result.append(self.disassemble_word(word, address))
            offset += 2
        return result

    def format_listing(
        self,
        data: bytes,
        start_address: int = 0x200,
        count: Optional[int] = None,
        formatter: Callable[[DisassembledInstruction], str] = str,
    ) -> str:
        """Disassemble and join the entries into one listing."""
        return "\n".join(
            formatter(ins) for ins in self.disassemble(data, start_address, count)
        )
