"""
CHIP-8 Assembly Language Lexer
==============================

This module splits one line of CHIP-8 assembly source into tokens.

The CHIP-8 grammar is line oriented and every operand is a single word,
so the lexer does not classify tokens. It only separates them:

- Characters from ';' to the end of the line are a comment and dropped.
- Whitespace and ',' separate tokens. Runs of separators never produce
  empty tokens.
- ':' ends the current token and is kept on it, marking a label
  definition. A ':' with nothing in front of it is an error.
- Everything else is part of a token and is lowercased.

Example
-------
>>> from chip8_sdk.assembler.lexer import Lexer
>>> for token in Lexer("start: LD v0, $1F  ; load").tokenize():
...     print(token)
Token('start:', 1:0)
Token('ld', 1:7)
Token('v0', 1:10)
Token('$1f', 1:14)
"""

from dataclasses import dataclass
from typing import Iterator

from chip8_sdk.errors import AssemblySyntaxError, SourceLocation


COMMENT_CHAR = ";"
LABEL_MARKER = ":"
SEPARATORS = frozenset(" \t\r\n\f\v,")


# =============================================================================
# Token Data Class
# =============================================================================

@dataclass(frozen=True)
class Token:
    """
    A single word of source text.

    Attributes:
        text: Lowercased token text, ending in ':' for label definitions
        column: Column of the first character (0-based)
        line: Line number in source (1-indexed)
        filename: Name of the source file
    """
    text: str
    column: int
    line: int = 1
    filename: str = "<input>"

    def __repr__(self) -> str:
        return f"Token({self.text!r}, {self.line}:{self.column})"

    @property
    def is_label(self) -> bool:
        """True if this token defines a label."""
        return self.text.endswith(LABEL_MARKER)

    @property
    def location(self) -> SourceLocation:
        """Return a 1-indexed SourceLocation for error reporting."""
        return SourceLocation(self.filename, self.line, self.column + 1)


# =============================================================================
# Lexer Implementation
# =============================================================================

class Lexer:
    """
    Tokenizes a single line of CHIP-8 assembly source.

    Usage:
        tokens = Lexer(line, "game.s", line_number=12).tokenize_line()

    Attributes:
        line: The source line being tokenized
        filename: Name of the source file (for error reporting)
        line_number: Line number of this line (for error reporting)
    """

    def __init__(self, line: str, filename: str = "<input>", line_number: int = 1):
        self.line = line
        self.filename = filename
        self.line_number = line_number

    def tokenize(self) -> Iterator[Token]:
        """
        Generate the tokens of the line in order.

        Raises:
            AssemblySyntaxError: If a label marker has no name
        """
        text: list[str] = []
        start = -1

        for column, char in enumerate(self.line):
            if char == COMMENT_CHAR:
                break

            if char == LABEL_MARKER:
                if not text:
                    raise AssemblySyntaxError(
                        "label name must precede colon",
                        location=SourceLocation(self.filename, self.line_number, column + 1),
                        source_line=self.line.rstrip("\r\n"),
                    )
                text.append(LABEL_MARKER)
                yield self._make_token(text, start)
                text, start = [], -1

            elif char in SEPARATORS or char.isspace():
                if text:
                    yield self._make_token(text, start)
                    text, start = [], -1

            else:
                if start < 0:
                    start = column
                text.append(char.lower())

        if text:
            yield self._make_token(text, start)

    def tokenize_line(self) -> list[Token]:
        """Return all tokens of the line as a list."""
        return list(self.tokenize())

    def _make_token(self, text: list[str], column: int) -> Token:
        return Token("".join(text), column, self.line_number, self.filename)


def tokenize_line(line: str, filename: str = "<input>", line_number: int = 1) -> list[Token]:
    """
    Convenience function to tokenize one source line.

    Args:
        line: Source line (trailing newline allowed)
        filename: Name of the source file for error messages
        line_number: Line number for error messages

    Returns:
        List of tokens, empty for blank and comment-only lines
    """
    return Lexer(line, filename, line_number).tokenize_line()
