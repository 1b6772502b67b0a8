"""CHIP-8 instruction decoding."""

from enum import IntEnum

import jax.numpy as jnp
from chex import dataclass


@dataclass(frozen=True)
class DecodedInstruction:
    """Decoded CHIP-8 instruction with extracted operands."""
    raw: int
    opcode: int  # First nibble
    x: int       # Second nibble (VX register)
    y: int       # Third nibble (VY register)
    n: int       # Fourth nibble (4-bit immediate)
    nn: int      # Last byte (8-bit immediate)
    nnn: int     # Last 12 bits (12-bit address)


class Instruction(IntEnum):
    """Every instruction kind the machine executes, in handler-table order."""
    CLS = 0          # 00E0
    RET = 1          # 00EE
    JP = 2           # 1NNN
    CALL = 3         # 2NNN
    SE_BYTE = 4      # 3XKK
    SNE_BYTE = 5     # 4XKK
    SE_REG = 6       # 5XY0
    LD_BYTE = 7      # 6XKK
    ADD_BYTE = 8     # 7XKK
    LD_REG = 9       # 8XY0
    OR = 10          # 8XY1
    AND = 11         # 8XY2
    XOR = 12         # 8XY3
    ADD_REG = 13     # 8XY4
    SUB = 14         # 8XY5
    SHR = 15         # 8XY6
    SUBN = 16        # 8XY7
    SHL = 17         # 8XYE
    SNE_REG = 18     # 9XY0
    LD_I = 19        # ANNN
    JP_V0 = 20       # BNNN
    RND = 21         # CXKK
    DRW = 22         # DXYN
    SKP = 23         # EX9E
    SKNP = 24        # EXA1
    LD_VX_DT = 25    # FX07
    LD_VX_K = 26     # FX0A
    LD_DT_VX = 27    # FX15
    LD_ST_VX = 28    # FX18
    ADD_I_VX = 29    # FX1E
    LD_F_VX = 30     # FX29
    LD_B_VX = 31     # FX33
    LD_MEM_VX = 32   # FX55
    LD_VX_MEM = 33   # FX65
    INVALID = 34


# (mask, pattern, kind): a word is of ``kind`` when ``word & mask == pattern``.
# Patterns are disjoint, so at most one row matches any 16-bit word.
INSTRUCTION_PATTERNS = (
    (0xFFFF, 0x00E0, Instruction.CLS),
    (0xFFFF, 0x00EE, Instruction.RET),
    (0xF000, 0x1000, Instruction.JP),
    (0xF000, 0x2000, Instruction.CALL),
    (0xF000, 0x3000, Instruction.SE_BYTE),
    (0xF000, 0x4000, Instruction.SNE_BYTE),
    (0xF00F, 0x5000, Instruction.SE_REG),
    (0xF000, 0x6000, Instruction.LD_BYTE),
    (0xF000, 0x7000, Instruction.ADD_BYTE),
    (0xF00F, 0x8000, Instruction.LD_REG),
    (0xF00F, 0x8001, Instruction.OR),
    (0xF00F, 0x8002, Instruction.AND),
    (0xF00F, 0x8003, Instruction.XOR),
    (0xF00F, 0x8004, Instruction.ADD_REG),
    (0xF00F, 0x8005, Instruction.SUB),
    (0xF00F, 0x8006, Instruction.SHR),
    (0xF00F, 0x8007, Instruction.SUBN),
    (0xF00F, 0x800E, Instruction.SHL),
    (0xF00F, 0x9000, Instruction.SNE_REG),
    (0xF000, 0xA000, Instruction.LD_I),
    (0xF000, 0xB000, Instruction.JP_V0),
    (0xF000, 0xC000, Instruction.RND),
    (0xF000, 0xD000, Instruction.DRW),
    (0xF0FF, 0xE09E, Instruction.SKP),
    (0xF0FF, 0xE0A1, Instruction.SKNP),
    (0xF0FF, 0xF007, Instruction.LD_VX_DT),
    (0xF0FF, 0xF00A, Instruction.LD_VX_K),
    (0xF0FF, 0xF015, Instruction.LD_DT_VX),
    (0xF0FF, 0xF018, Instruction.LD_ST_VX),
    (0xF0FF, 0xF01E, Instruction.ADD_I_VX),
    (0xF0FF, 0xF029, Instruction.LD_F_VX),
    (0xF0FF, 0xF033, Instruction.LD_B_VX),
    (0xF0FF, 0xF055, Instruction.LD_MEM_VX),
    (0xF0FF, 0xF065, Instruction.LD_VX_MEM),
)

_MASKS = jnp.array([mask for mask, _, _ in INSTRUCTION_PATTERNS], dtype=jnp.int32)
_PATTERNS = jnp.array([pattern for _, pattern, _ in INSTRUCTION_PATTERNS], dtype=jnp.int32)
_KINDS = jnp.array([int(kind) for _, _, kind in INSTRUCTION_PATTERNS], dtype=jnp.int32)


def decode(instruction: int) -> DecodedInstruction:
    """Decode 16-bit instruction into components."""
    return DecodedInstruction(
        raw=instruction,
        opcode=(instruction & 0xF000) >> 12,
        x=(instruction & 0x0F00) >> 8,
        y=(instruction & 0x00F0) >> 4,
        n=instruction & 0x000F,
        nn=instruction & 0x00FF,
        nnn=instruction & 0x0FFF
    )


def classify(instruction: int) -> jnp.ndarray:
    """Map a 16-bit word to its :class:`Instruction` kind (traceable).

    Returns ``Instruction.INVALID`` for words that match no pattern,
    including ``0NNN`` machine-code calls.
    """
    word = jnp.astype(instruction, jnp.int32) & 0xFFFF
    matches = (word & _MASKS) == _PATTERNS
    return jnp.where(jnp.any(matches), _KINDS[jnp.argmax(matches)], int(Instruction.INVALID))


def instruction_name(instruction: int) -> str:
    """Mnemonic of a concrete instruction word, e.g. ``"ADD_REG"``."""
    return Instruction(int(classify(instruction))).name
