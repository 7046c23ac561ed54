"""
CHIP-8 Assembler
================

This package provides a two-pass assembler for the CHIP-8 virtual machine.
It converts CHIP-8 assembly source into a flat binary image (.ch8) that any
CHIP-8 interpreter can load at address $200.

Main Components
---------------
- **Assembler**: Main assembler class that runs both passes
- **Lexer**: Splits a source line into tokens
- **Parser**: Pass 1, recognizes instructions and builds the symbol table
- **CodeGenerator**: Pass 2, resolves addresses and emits opcodes
- **parse_integer / parse_register**: Operand parsers

Assembly Process
----------------
1. **Parsing (Lexer + Parser)**:
   - Tokenize each line, strip comments
   - Record labels at the current program counter
   - Validate operands, append Statements, advance the program counter

2. **Code Generation (CodeGenerator)**:
   - Resolve address operands through the symbol table
   - Pack each Statement into its big-endian opcode

Example Usage
-------------
>>> from chip8_sdk.assembler import Assembler
>>> asm = Assembler()
>>> asm.assemble_string('''
...         ld   i, digit
...         drw  v0, v1, 5
... loop:   jp   loop
... digit:  .byte $F0, $90, $90, $90, $F0
... ''').hex()
'a206d0151204f0909090f0'

Supported Features
------------------
- Full CHIP-8 instruction set (34 opcodes)
- Labels with forward references
- Directives: .org, .byte, .word
- Decimal, hex ($, 0x), binary (%) and octal (0) numbers
- Listing file generation
- Symbol table output
"""

from chip8_sdk.assembler.assembler import (
    Assembler,
    assemble,
    assemble_file,
    derive_output_path,
)
from chip8_sdk.assembler.lexer import Lexer, Token, tokenize_line
from chip8_sdk.assembler.parser import Parser, ParseResult, Statement, parse_source
from chip8_sdk.assembler.codegen import CodeGenerator, generate
from chip8_sdk.assembler.operands import (
    is_numeric_literal,
    parse_general_register,
    parse_integer,
    parse_register,
)
from chip8_sdk.assembler.opcodes import (
    ENCODING_TABLE,
    LOAD_ADDRESS,
    InstructionInfo,
    InstructionKind,
    Layout,
    Register,
)

__all__ = [
    # Main class and functions
    "Assembler",
    "assemble",
    "assemble_file",
    "derive_output_path",
    # Lexer
    "Lexer",
    "Token",
    "tokenize_line",
    # Parser
    "Parser",
    "ParseResult",
    "Statement",
    "parse_source",
    # Code generator
    "CodeGenerator",
    "generate",
    # Operand parsers
    "is_numeric_literal",
    "parse_general_register",
    "parse_integer",
    "parse_register",
    # Opcodes
    "ENCODING_TABLE",
    "LOAD_ADDRESS",
    "InstructionInfo",
    "InstructionKind",
    "Layout",
    "Register",
]
