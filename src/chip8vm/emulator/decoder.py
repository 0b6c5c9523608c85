"""
Instruction Decoder
===================

Splits a 16-bit instruction word into its operand fields and tags it with
the instruction it encodes.

Field layout (word = 0xABCD):
    n0..n3  A, B, C, D    four nibbles, n0 most significant
    hi, lo  0xAB, 0xCD    the two bytes
    x       B             first register operand (n1)
    y       C             second register operand (n2)
    n       D             4-bit immediate (n3)
    kk      0xCD          8-bit immediate (lo)
    nnn     0xBCD         12-bit address

Decoding is pure: no state, no side effects. The executor dispatches on
the ``Op`` tag, never on raw numeric ranges.

Copyright (c) 2025-2026 Hugo José Pinto & Contributors
"""

from dataclasses import dataclass
from enum import Enum
from typing import Tuple

Nibbles = Tuple[int, int, int, int]


class Op(Enum):
    """Enumerated instruction tags."""
    CLS = "CLS"                  # 00E0
    RET = "RET"                  # 00EE
    JP = "JP"                    # 1nnn
    CALL = "CALL"                # 2nnn
    SE_BYTE = "SE_BYTE"          # 3xkk
    SNE_BYTE = "SNE_BYTE"        # 4xkk
    SE_REG = "SE_REG"            # 5xy0
    LD_BYTE = "LD_BYTE"          # 6xkk
    ADD_BYTE = "ADD_BYTE"        # 7xkk
    LD_REG = "LD_REG"            # 8xy0
    OR = "OR"                    # 8xy1
    AND = "AND"                  # 8xy2
    XOR = "XOR"                  # 8xy3
    ADD_REG = "ADD_REG"          # 8xy4
    SUB = "SUB"                  # 8xy5
    SHR = "SHR"                  # 8xy6
    SUBN = "SUBN"                # 8xy7
    SHL = "SHL"                  # 8xyE
    SNE_REG = "SNE_REG"          # 9xy0
    LD_I = "LD_I"                # Annn
    JP_V0 = "JP_V0"              # Bnnn
    RND = "RND"                  # Cxkk
    DRW = "DRW"                  # Dxyn
    SKP = "SKP"                  # Ex9E
    SKNP = "SKNP"                # ExA1
    LD_VX_DT = "LD_VX_DT"        # Fx07
    LD_VX_K = "LD_VX_K"          # Fx0A
    LD_DT = "LD_DT"              # Fx15
    LD_ST = "LD_ST"              # Fx18
    ADD_I = "ADD_I"              # Fx1E
    LD_F = "LD_F"                # Fx29
    LD_B = "LD_B"                # Fx33
    LD_MEM_REGS = "LD_MEM_REGS"  # Fx55
    LD_REGS_MEM = "LD_REGS_MEM"  # Fx65
    UNKNOWN = "UNKNOWN"


# High nibbles whose instruction is fully determined by the nibble alone
_BY_HIGH_NIBBLE = {
    0x1: Op.JP,
    0x2: Op.CALL,
    0x3: Op.SE_BYTE,
    0x4: Op.SNE_BYTE,
    0x6: Op.LD_BYTE,
    0x7: Op.ADD_BYTE,
    0xA: Op.LD_I,
    0xB: Op.JP_V0,
    0xC: Op.RND,
    0xD: Op.DRW,
}

# 8xyN register ALU group, keyed by the low nibble
_ALU_OPS = {
    0x0: Op.LD_REG,
    0x1: Op.OR,
    0x2: Op.AND,
    0x3: Op.XOR,
    0x4: Op.ADD_REG,
    0x5: Op.SUB,
    0x6: Op.SHR,
    0x7: Op.SUBN,
    0xE: Op.SHL,
}

# 0nnn system group, keyed by the whole word
_SYSTEM_OPS = {
    0x00E0: Op.CLS,
    0x00EE: Op.RET,
}

# ExKK key group, keyed by the low byte
_KEY_OPS = {
    0x9E: Op.SKP,
    0xA1: Op.SKNP,
}

# FxKK misc group, keyed by the low byte
_MISC_OPS = {
    0x07: Op.LD_VX_DT,
    0x0A: Op.LD_VX_K,
    0x15: Op.LD_DT,
    0x18: Op.LD_ST,
    0x1E: Op.ADD_I,
    0x29: Op.LD_F,
    0x33: Op.LD_B,
    0x55: Op.LD_MEM_REGS,
    0x65: Op.LD_REGS_MEM,
}


@dataclass(frozen=True)
class Instruction:
    """
    A decoded instruction word.

    Attributes:
        word: The raw 16-bit word
        op: Instruction tag (Op.UNKNOWN if the word is undefined)
        nibbles: (n0, n1, n2, n3), n0 most significant
        hi: High byte
        lo: Low byte
    """
    word: int
    op: Op
    nibbles: Nibbles
    hi: int
    lo: int

    @property
    def x(self) -> int:
        return self.nibbles[1]

    @property
    def y(self) -> int:
        return self.nibbles[2]

    @property
    def n(self) -> int:
        return self.nibbles[3]

    @property
    def kk(self) -> int:
        return self.lo

    @property
    def nnn(self) -> int:
        return self.word & 0x0FFF


def split_word(word: int) -> Tuple[Nibbles, Tuple[int, int]]:
    """
    Split a word into its nibbles and bytes.

    Returns:
        ((n0, n1, n2, n3), (hi, lo))
    """
    hi = (word >> 8) & 0xFF
    lo = word & 0xFF
    nibbles = (hi >> 4, hi & 0x0F, lo >> 4, lo & 0x0F)
    return nibbles, (hi, lo)


def _classify(word: int, nibbles: Nibbles, lo: int) -> Op:
    """Pick the instruction tag for a word."""
    n0 = nibbles[0]

    if n0 in _BY_HIGH_NIBBLE:
        return _BY_HIGH_NIBBLE[n0]
    if n0 == 0x0:
        return _SYSTEM_OPS.get(word, Op.UNKNOWN)
    if n0 == 0x5:
        return Op.SE_REG if nibbles[3] == 0 else Op.UNKNOWN
    if n0 == 0x8:
        return _ALU_OPS.get(nibbles[3], Op.UNKNOWN)
    if n0 == 0x9:
        return Op.SNE_REG if nibbles[3] == 0 else Op.UNKNOWN
    if n0 == 0xE:
        return _KEY_OPS.get(lo, Op.UNKNOWN)
    # n0 == 0xF
    return _MISC_OPS.get(lo, Op.UNKNOWN)


def decode(word: int) -> Instruction:
    """
    Decode a 16-bit instruction word.

    Args:
        word: Instruction word (0-0xFFFF)

    Returns:
        Instruction with fields and tag filled in

    Raises:
        ValueError: If word does not fit in 16 bits

    Example:
        >>> ins = decode(0x8AB4)
        >>> ins.op, ins.x, ins.y
        (<Op.ADD_REG: 'ADD_REG'>, 10, 11)
    """
    if not 0 <= word <= 0xFFFF:
        raise ValueError(f"Instruction word must be 0-0xFFFF, got {word:#x}")
    nibbles, (hi, lo) = split_word(word)
    return Instruction(
        word=word,
        op=_classify(word, nibbles, lo),
        nibbles=nibbles,
        hi=hi,
        lo=lo,
    )
