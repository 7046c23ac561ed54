"""
CHIP-8 SDK Error Hierarchy
==========================

This module defines the exception hierarchy for the CHIP-8 SDK.
All exceptions inherit from Chip8Error, allowing callers to catch all
SDK-related errors with a single except clause if desired.

Exception Hierarchy
-------------------
Chip8Error (base)
└── AssemblerError (assembler-related)
    ├── AssemblySyntaxError - lexical errors (label marker without a name)
    ├── UnknownMnemonicError - instruction name not in the instruction set
    ├── OperandError - wrong number or kind of operands
    ├── OperandRangeError - immediate value wider than its field
    ├── DirectiveError - bad arguments to .org, .byte or .word
    ├── UndefinedSymbolError - address operand is neither label nor literal
    └── InternalError - statement kind without an encoding

Error messages follow this format:
    filename:line:column: error: description
        source_line_text
            ^ (pointer to error location)
    hint: suggestion for fixing (when available)
"""

from dataclasses import dataclass
from typing import Optional


# =============================================================================
# Base Exception Class
# =============================================================================

class Chip8Error(Exception):
    """
    Base exception for all CHIP-8 SDK errors.

        try:
            assembler.assemble_file("game.s")
        except Chip8Error as e:
            print(f"Error: {e}")
    """
    pass


# =============================================================================
# Source Location Tracking
# =============================================================================

@dataclass(frozen=True)
class SourceLocation:
    """
    Represents a location in source code for error reporting.

    Attributes:
        filename: Name of the source file (or "<input>" for string input)
        line: Line number (1-indexed)
        column: Column number (1-indexed, 0 when the whole line is at fault)
    """
    filename: str
    line: int
    column: int = 0

    def __str__(self) -> str:
        """Format as 'filename:line:column' (or 'filename:line') for messages."""
        if self.column > 0:
            return f"{self.filename}:{self.line}:{self.column}"
        return f"{self.filename}:{self.line}"


# =============================================================================
# Assembler Exceptions
# =============================================================================

class AssemblerError(Chip8Error):
    """
    Base exception for all assembler-related errors.

    Attributes:
        message: The error description
        location: Where in the source the error occurred (optional)
        hint: A suggestion for fixing the error (optional)
        source_line: The actual source text at the error location (optional)
    """

    def __init__(
        self,
        message: str,
        location: Optional[SourceLocation] = None,
        hint: Optional[str] = None,
        source_line: Optional[str] = None,
    ):
        self.message = message
        self.location = location
        self.hint = hint
        self.source_line = source_line
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """
        Format the error message with location, source context, and hint.

        Example output:
            game.s:15:9: error: undefined symbol 'drwa_sprite'
                call    drwa_sprite
                        ^
            hint: did you mean 'draw_sprite'?
        """
        parts = []

        if self.location:
            parts.append(f"{self.location}: error: {self.message}")
        else:
            parts.append(f"error: {self.message}")

        if self.source_line is not None and self.location is not None:
            parts.append(f"    {self.source_line}")
            if self.location.column > 0:
                padding = " " * (4 + self.location.column - 1)
                parts.append(f"{padding}^")

        if self.hint:
            parts.append(f"hint: {self.hint}")

        return "\n".join(parts)


class AssemblySyntaxError(AssemblerError):
    """
    Lexical error in assembly source.

    Raised by the lexer, for example when a ':' label marker appears
    with no label name in front of it.
    """
    pass


class UnknownMnemonicError(AssemblerError):
    """Instruction name is not part of the CHIP-8 instruction set."""

    def __init__(
        self,
        mnemonic: str,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        self.mnemonic = mnemonic
        super().__init__(
            f"unknown instruction '{mnemonic}'",
            location=location,
            source_line=source_line,
        )


class OperandError(AssemblerError):
    """
    Wrong number or kind of operands for an instruction.

    Example:
        cls v0          ; Error: 'cls' takes no operands
        and v0, dt      ; Error: 'and' needs two V registers
    """

    def __init__(
        self,
        mnemonic: str,
        reason: str,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
        usage: Optional[str] = None,
    ):
        self.mnemonic = mnemonic
        self.reason = reason
        hint = f"expected: {usage}" if usage else None
        super().__init__(
            f"{reason} to '{mnemonic}'",
            location=location,
            hint=hint,
            source_line=source_line,
        )


class OperandRangeError(AssemblerError):
    """
    Immediate operand does not fit its instruction field.

    Example:
        ld v0, 256      ; Error: byte immediate must be <= $FF
    """

    def __init__(
        self,
        mnemonic: str,
        text: str,
        max_value: int,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        self.mnemonic = mnemonic
        self.text = text
        self.max_value = max_value
        super().__init__(
            f"value '{text}' out of range for '{mnemonic}' (maximum ${max_value:X})",
            location=location,
            source_line=source_line,
        )


class DirectiveError(AssemblerError):
    """
    Error in an assembler directive.

    Examples:
        - .org without an address
        - .byte with value > 255
        - .word with no arguments
    """
    pass


class UndefinedSymbolError(AssemblerError):
    """
    Address operand that is neither a defined label nor a valid literal.

    Raised during the second pass. Similarly-named labels are offered
    as a hint to catch typos.
    """

    def __init__(
        self,
        symbol: str,
        location: Optional[SourceLocation] = None,
        hint: Optional[str] = None,
        source_line: Optional[str] = None,
        similar_symbols: Optional[list[str]] = None,
    ):
        self.symbol = symbol
        self.similar_symbols = similar_symbols or []

        if not hint and self.similar_symbols:
            suggestions = ", ".join(f"'{s}'" for s in self.similar_symbols[:3])
            hint = f"did you mean {suggestions}?"

        super().__init__(
            f"undefined symbol '{symbol}'",
            location=location,
            hint=hint,
            source_line=source_line,
        )


class InternalError(AssemblerError):
    """
    Internal consistency error in the code generator.

    Raised when a statement reaches the second pass with an instruction
    kind that has no encoding. The parser never produces one, so seeing
    this means a bug in the assembler itself.
    """
    pass
