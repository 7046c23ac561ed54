"""
CHIP-8 Instruction Set Definition
=================================

This module defines the CHIP-8 instruction set: register names, the closed
set of instruction kinds the parser can produce, and the encoding table the
code generator uses to pack each kind into its opcode.

Every CHIP-8 instruction is two bytes, stored big-endian (most significant
byte first). Programs are loaded by the interpreter at address $200.

Operand Layouts
---------------
Each encoding ORs a fixed base opcode with operand fields shifted into place:

| Layout  | Pattern | Fields                              |
|---------|---------|-------------------------------------|
| NONE    | 00E0    | (none)                              |
| ADDR    | 1nnn    | 12-bit address                      |
| X_NN    | 3xnn    | register x, byte immediate          |
| X_Y     | 8xy4    | registers x and y                   |
| X_Y_N   | Dxyn    | registers x and y, nibble immediate |
| X       | Fx1E    | register x                          |
| BYTE    | nn      | one raw data byte (.byte)           |
| WORD    | nnnn    | one raw data word (.word)           |

Reference
---------
- Cowgod's CHIP-8 Technical Reference: http://devernay.free.fr/hacks/chip8/C8TECH10.HTM
"""

from dataclasses import dataclass
from enum import Enum, IntEnum, auto
from typing import Optional


# =============================================================================
# Memory Layout Constants
# =============================================================================

# Address where CHIP-8 interpreters load programs
LOAD_ADDRESS = 0x0200

# Largest address reachable by the 12-bit address field
MAX_ADDRESS = 0x0FFF

# Largest value accepted by .org and .word
MAX_WORD = 0xFFFF

MAX_BYTE = 0xFF
MAX_NIBBLE = 0xF

# Source files ending in one of these have it replaced by OUTPUT_SUFFIX
SOURCE_SUFFIXES = (".s", ".S")
OUTPUT_SUFFIX = ".ch8"


# =============================================================================
# Registers
# =============================================================================

class Register(IntEnum):
    """
    Register names accepted as operands.

    V0-VF are the sixteen general purpose registers and keep their index
    as value so they can be shifted straight into an opcode. The others
    are pseudo-registers that only select an instruction form.
    """
    V0 = 0
    V1 = 1
    V2 = 2
    V3 = 3
    V4 = 4
    V5 = 5
    V6 = 6
    V7 = 7
    V8 = 8
    V9 = 9
    VA = 10
    VB = 11
    VC = 12
    VD = 13
    VE = 14
    VF = 15
    B = 16            # BCD store target (ld b, vx)
    DT = 17           # Delay timer
    F = 18            # Font sprite address (ld f, vx)
    I = 19            # Index register
    I_INDIRECT = 20   # Memory at I ([i])
    K = 21            # Key press wait (ld vx, k)
    ST = 22           # Sound timer

    @property
    def is_general(self) -> bool:
        """True for V0-VF."""
        return self <= Register.VF


# Lowercase source spelling -> register
REGISTER_NAMES: dict[str, Register] = {
    **{f"v{index:x}": Register(index) for index in range(16)},
    "b": Register.B,
    "dt": Register.DT,
    "f": Register.F,
    "i": Register.I,
    "[i]": Register.I_INDIRECT,
    "k": Register.K,
    "st": Register.ST,
}


# =============================================================================
# Instruction Kinds
# =============================================================================

class Layout(Enum):
    """How operand fields are packed around the base opcode."""
    NONE = auto()
    ADDR = auto()
    X_NN = auto()
    X_Y = auto()
    X_Y_N = auto()
    X = auto()
    BYTE = auto()
    WORD = auto()


class InstructionKind(Enum):
    """
    Every instruction form and data directive the parser can emit.

    One member per encoding: mnemonics with several operand shapes
    (ld, add, se, sne, jp) map to several kinds.
    """
    DEFINE_BYTE = auto()
    DEFINE_WORD = auto()

    CLS = auto()
    RET = auto()
    JP_ADDR = auto()
    CALL_ADDR = auto()
    SE_VX_NN = auto()
    SNE_VX_NN = auto()
    SE_VX_VY = auto()
    LD_VX_NN = auto()
    ADD_VX_NN = auto()
    LD_VX_VY = auto()
    OR_VX_VY = auto()
    AND_VX_VY = auto()
    XOR_VX_VY = auto()
    ADD_VX_VY = auto()
    SUB_VX_VY = auto()
    SHR_VX_VY = auto()
    SUBN_VX_VY = auto()
    SHL_VX_VY = auto()
    SNE_VX_VY = auto()
    LD_I_ADDR = auto()
    JP_V0_ADDR = auto()
    RND_VX_NN = auto()
    DRW_VX_VY_N = auto()
    SKP_VX = auto()
    SKNP_VX = auto()
    LD_VX_DT = auto()
    LD_VX_K = auto()
    LD_DT_VX = auto()
    LD_ST_VX = auto()
    ADD_I_VX = auto()
    LD_F_VX = auto()
    LD_B_VX = auto()
    LD_I_VX = auto()
    LD_VX_I = auto()


@dataclass(frozen=True)
class InstructionInfo:
    """
    Encoding of one instruction kind.

    Attributes:
        opcode: Base opcode with all operand fields zero
        layout: Which operand fields are ORed into the opcode
        size: Encoded size in bytes
        syntax: Source form, used in listings and error hints
    """
    opcode: int
    layout: Layout
    size: int
    syntax: str

    def __repr__(self) -> str:
        return f"InstructionInfo(opcode=${self.opcode:04X}, {self.layout.name}, size={self.size})"


# =============================================================================
# Encoding Table
# =============================================================================
# Key: InstructionKind
# Value: InstructionInfo(base opcode, operand layout, size, syntax)
# =============================================================================

ENCODING_TABLE: dict[InstructionKind, InstructionInfo] = {
    # Data directives
    InstructionKind.DEFINE_BYTE: InstructionInfo(0x00, Layout.BYTE, 1, ".byte nn"),
    InstructionKind.DEFINE_WORD: InstructionInfo(0x0000, Layout.WORD, 2, ".word nnnn"),

    # Flow control
    InstructionKind.CLS: InstructionInfo(0x00E0, Layout.NONE, 2, "cls"),
    InstructionKind.RET: InstructionInfo(0x00EE, Layout.NONE, 2, "ret"),
    InstructionKind.JP_ADDR: InstructionInfo(0x1000, Layout.ADDR, 2, "jp addr"),
    InstructionKind.CALL_ADDR: InstructionInfo(0x2000, Layout.ADDR, 2, "call addr"),
    InstructionKind.JP_V0_ADDR: InstructionInfo(0xB000, Layout.ADDR, 2, "jp v0, addr"),

    # Conditional skips
    InstructionKind.SE_VX_NN: InstructionInfo(0x3000, Layout.X_NN, 2, "se vx, nn"),
    InstructionKind.SNE_VX_NN: InstructionInfo(0x4000, Layout.X_NN, 2, "sne vx, nn"),
    InstructionKind.SE_VX_VY: InstructionInfo(0x5000, Layout.X_Y, 2, "se vx, vy"),
    InstructionKind.SNE_VX_VY: InstructionInfo(0x9000, Layout.X_Y, 2, "sne vx, vy"),
    InstructionKind.SKP_VX: InstructionInfo(0xE09E, Layout.X, 2, "skp vx"),
    InstructionKind.SKNP_VX: InstructionInfo(0xE0A1, Layout.X, 2, "sknp vx"),

    # Immediate arithmetic
    InstructionKind.LD_VX_NN: InstructionInfo(0x6000, Layout.X_NN, 2, "ld vx, nn"),
    InstructionKind.ADD_VX_NN: InstructionInfo(0x7000, Layout.X_NN, 2, "add vx, nn"),
    InstructionKind.RND_VX_NN: InstructionInfo(0xC000, Layout.X_NN, 2, "rnd vx, nn"),

    # Register arithmetic and logic
    InstructionKind.LD_VX_VY: InstructionInfo(0x8000, Layout.X_Y, 2, "ld vx, vy"),
    InstructionKind.OR_VX_VY: InstructionInfo(0x8001, Layout.X_Y, 2, "or vx, vy"),
    InstructionKind.AND_VX_VY: InstructionInfo(0x8002, Layout.X_Y, 2, "and vx, vy"),
    InstructionKind.XOR_VX_VY: InstructionInfo(0x8003, Layout.X_Y, 2, "xor vx, vy"),
    InstructionKind.ADD_VX_VY: InstructionInfo(0x8004, Layout.X_Y, 2, "add vx, vy"),
    InstructionKind.SUB_VX_VY: InstructionInfo(0x8005, Layout.X_Y, 2, "sub vx, vy"),
    InstructionKind.SHR_VX_VY: InstructionInfo(0x8006, Layout.X_Y, 2, "shr vx"),
    InstructionKind.SUBN_VX_VY: InstructionInfo(0x8007, Layout.X_Y, 2, "subn vx, vy"),
    InstructionKind.SHL_VX_VY: InstructionInfo(0x800E, Layout.X_Y, 2, "shl vx"),

    # Index register, display
    InstructionKind.LD_I_ADDR: InstructionInfo(0xA000, Layout.ADDR, 2, "ld i, addr"),
    InstructionKind.DRW_VX_VY_N: InstructionInfo(0xD000, Layout.X_Y_N, 2, "drw vx, vy, n"),

    # Timers, keyboard and memory
    InstructionKind.LD_VX_DT: InstructionInfo(0xF007, Layout.X, 2, "ld vx, dt"),
    InstructionKind.LD_VX_K: InstructionInfo(0xF00A, Layout.X, 2, "ld vx, k"),
    InstructionKind.LD_DT_VX: InstructionInfo(0xF015, Layout.X, 2, "ld dt, vx"),
    InstructionKind.LD_ST_VX: InstructionInfo(0xF018, Layout.X, 2, "ld st, vx"),
    InstructionKind.ADD_I_VX: InstructionInfo(0xF01E, Layout.X, 2, "add i, vx"),
    InstructionKind.LD_F_VX: InstructionInfo(0xF029, Layout.X, 2, "ld f, vx"),
    InstructionKind.LD_B_VX: InstructionInfo(0xF033, Layout.X, 2, "ld b, vx"),
    InstructionKind.LD_I_VX: InstructionInfo(0xF055, Layout.X, 2, "ld [i], vx"),
    InstructionKind.LD_VX_I: InstructionInfo(0xF065, Layout.X, 2, "ld vx, [i]"),
}


# =============================================================================
# Lookup Functions
# =============================================================================

def get_instruction_info(kind: InstructionKind) -> Optional[InstructionInfo]:
    """Return the encoding of an instruction kind, or None if it has none."""
    return ENCODING_TABLE.get(kind)


def usage_for(mnemonic: str) -> list[str]:
    """
    List the accepted source forms of a mnemonic.

    Used for "expected: ..." hints in operand errors.
    """
    forms = [
        info.syntax for info in ENCODING_TABLE.values()
        if info.syntax.split()[0] == mnemonic
    ]
    if mnemonic in ("shl", "shr"):
        forms.append(f"{mnemonic} vx, vy")
    return forms
