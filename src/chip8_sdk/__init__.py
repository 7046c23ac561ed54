"""
CHIP-8 SDK - Cross-Development Toolchain for the CHIP-8 Virtual Machine
=======================================================================

This package provides an assembler for CHIP-8, the interpreted 8-bit
virtual machine of the COSMAC VIP and its many modern interpreters.

Programs are loaded by the interpreter at address $200 and every
instruction is two bytes, stored big-endian.

Main Components
---------------
- **assembler**: CHIP-8 assembler (c8asm)
    Converts assembly source files (.s) to binary images (.ch8)

Quick Start
-----------
Assemble a program:
    >>> from chip8_sdk.assembler import Assembler
    >>> asm = Assembler()
    >>> code = asm.assemble_file("pong.s")
    >>> asm.write_binary("pong.ch8")

Or use the command-line tool:
    $ c8asm pong.s

Reference Documentation
-----------------------
- Cowgod's CHIP-8 Technical Reference: http://devernay.free.fr/hacks/chip8/C8TECH10.HTM

Version History
---------------
1.0.0 - Initial release with two-pass assembler, listings and symbol files
"""

__version__ = "1.0.0"
__author__ = "CHIP-8 SDK Contributors"

# =============================================================================
# Public API Exports
# =============================================================================

from chip8_sdk.assembler import Assembler, assemble, assemble_file
from chip8_sdk.errors import (
    Chip8Error,
    AssemblerError,
    AssemblySyntaxError,
    UnknownMnemonicError,
    OperandError,
    OperandRangeError,
    DirectiveError,
    UndefinedSymbolError,
    InternalError,
)

__all__ = [
    # Version info
    "__version__",
    "__author__",
    # Assembler
    "Assembler",
    "assemble",
    "assemble_file",
    # Exception hierarchy
    "Chip8Error",
    "AssemblerError",
    "AssemblySyntaxError",
    "UnknownMnemonicError",
    "OperandError",
    "OperandRangeError",
    "DirectiveError",
    "UndefinedSymbolError",
    "InternalError",
]
