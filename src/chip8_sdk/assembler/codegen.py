"""
CHIP-8 Code Generator (Pass 2)
==============================

This module turns the statements produced by the parser into the binary
load image. It is the second of the two assembly passes:

- Resolve every address operand (label lookup, then numeric literal)
- Pack each statement into its opcode using the encoding table
- Emit 2-byte units big-endian, .byte values as single bytes

The statement list and symbol table are only read here. Nothing is written
until the whole program has been encoded, so a failing run never produces
partial output.

Output Format
-------------
A flat byte stream with no header, statements in source order. Gaps left by
.org are NOT padded: the image is the plain concatenation of the encoded
statements, so a program using .org to skip forward loads its later bytes at
lower addresses than the listing shows.

Address Resolution
------------------
1. Exact match in the symbol table
2. Numeric literal up to $FFF
3. Otherwise:
   - strict (default): UndefinedSymbolError
   - lenient: the text is converted like any other number (garbage gives 0,
     out-of-range gives 0) and a warning is logged
"""

from difflib import get_close_matches
from typing import Optional
import logging

from chip8_sdk.errors import InternalError, UndefinedSymbolError
from chip8_sdk.assembler.opcodes import (
    MAX_ADDRESS,
    InstructionInfo,
    Layout,
    get_instruction_info,
)
from chip8_sdk.assembler.operands import is_numeric_literal, parse_integer
from chip8_sdk.assembler.parser import Statement

logger = logging.getLogger(__name__)


class CodeGenerator:
    """
    Generates CHIP-8 machine code from parsed statements.

    Usage:
        codegen = CodeGenerator(symbols, strict=True)
        code = codegen.generate(statements)
    """

    def __init__(self, symbols: dict[str, int], strict: bool = True):
        """
        Initialize the code generator.

        Args:
            symbols: Label table from the first pass
            strict: If True, an address that is neither a label nor a
                    numeric literal is an error. If False it silently
                    becomes a number, as older versions of the assembler did.
        """
        self._symbols = symbols
        self._strict = strict
        self._code = bytearray()
        self._warnings: list[str] = []

    # =========================================================================
    # Public Interface
    # =========================================================================

    def generate(self, statements: list[Statement]) -> bytes:
        """
        Encode all statements.

        Args:
            statements: Statements from the first pass, in program order

        Returns:
            The complete binary image

        Raises:
            UndefinedSymbolError: Unresolvable address in strict mode
            InternalError: Statement kind without an encoding
        """
        self._code = bytearray()
        self._warnings = []

        for stmt in statements:
            self._generate_statement(stmt)

        logger.debug(f"generated {len(self._code)} bytes from {len(statements)} statements")
        return bytes(self._code)

    @property
    def warnings(self) -> list[str]:
        """Warnings from lenient address resolution during the last run."""
        return list(self._warnings)

    # =========================================================================
    # Encoding
    # =========================================================================

    def _generate_statement(self, stmt: Statement) -> None:
        info = self._lookup(stmt)
        value = self._pack(stmt, info)
        if info.size == 1:
            self._emit_byte(value)
        else:
            self._emit_word(value)

    def _lookup(self, stmt: Statement) -> InstructionInfo:
        info = get_instruction_info(stmt.kind)
        if info is None:
            raise InternalError(
                f"unexpected instruction kind {stmt.kind!r}",
                location=stmt.location,
                source_line=stmt.source_line,
            )
        return info

    def _pack(self, stmt: Statement, info: InstructionInfo) -> int:
        """OR the operand fields of a statement into its base opcode."""
        layout = info.layout

        if layout == Layout.NONE:
            return info.opcode
        if layout == Layout.ADDR:
            return info.opcode | self._resolve_address(stmt)
        if layout == Layout.X_NN:
            return info.opcode | ((stmt.x & 0xF) << 8) | (stmt.nn & 0xFF)
        if layout == Layout.X_Y:
            return info.opcode | ((stmt.x & 0xF) << 8) | ((stmt.y & 0xF) << 4)
        if layout == Layout.X_Y_N:
            return (
                info.opcode
                | ((stmt.x & 0xF) << 8)
                | ((stmt.y & 0xF) << 4)
                | (stmt.n & 0xF)
            )
        if layout == Layout.X:
            return info.opcode | ((stmt.x & 0xF) << 8)
        if layout == Layout.BYTE:
            return stmt.value & 0xFF
        if layout == Layout.WORD:
            return stmt.value & 0xFFFF

        raise InternalError(
            f"unexpected operand layout {layout!r} for {stmt.kind.name}",
            location=stmt.location,
            source_line=stmt.source_line,
        )

    # =========================================================================
    # Address Resolution
    # =========================================================================

    def _resolve_address(self, stmt: Statement) -> int:
        text = stmt.address or ""

        address = self._symbols.get(text)
        if address is not None:
            return address & MAX_ADDRESS

        hint = None
        if is_numeric_literal(text):
            address = parse_integer(text, MAX_ADDRESS)
            if address is not None:
                return address & MAX_ADDRESS
            hint = f"addresses must be between $000 and ${MAX_ADDRESS:03X}"

        if self._strict:
            raise UndefinedSymbolError(
                text,
                location=stmt.address_location or stmt.location,
                hint=hint,
                source_line=stmt.source_line,
                similar_symbols=self._similar_symbols(text),
            )

        return self._lenient_address(stmt, text)

    def _lenient_address(self, stmt: Statement, text: str) -> int:
        address: Optional[int] = parse_integer(text, MAX_ADDRESS)
        if address is None:
            address = 0
        message = (
            f"{stmt.address_location or stmt.location}: "
            f"'{text}' is not a label or address, using ${address:03X}"
        )
        self._warnings.append(message)
        logger.warning(message)
        return address & MAX_ADDRESS

    def _similar_symbols(self, name: str) -> list[str]:
        return get_close_matches(name, list(self._symbols), n=3, cutoff=0.6)

    # =========================================================================
    # Code Emission Helpers
    # =========================================================================

    def _emit_byte(self, value: int) -> None:
        """Emit a single byte to the output."""
        self._code.append(value & 0xFF)

    def _emit_word(self, value: int) -> None:
        """Emit a 16-bit word to the output (big-endian)."""
        self._code.append((value >> 8) & 0xFF)
        self._code.append(value & 0xFF)


# =============================================================================
# Convenience Function
# =============================================================================

def generate(statements: list[Statement], symbols: dict[str, int], strict: bool = True) -> bytes:
    """
    Run the second pass.

    Args:
        statements: Statements from the first pass
        symbols: Symbol table from the first pass
        strict: Reject addresses that are neither labels nor literals

    Returns:
        The binary image
    """
    return CodeGenerator(symbols, strict=strict).generate(statements)
