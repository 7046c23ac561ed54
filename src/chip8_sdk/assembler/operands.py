"""
Operand Parsers
===============

Two small parsers used by the instruction recognizer to decode operand text.

Number Formats
--------------
| Format      | Prefix | Example     | Value |
|-------------|--------|-------------|-------|
| Decimal     | (none) | 123         | 123   |
| Hexadecimal | $ / 0x | $7F, 0x7F   | 127   |
| Binary      | %      | %1010       | 10    |
| Octal       | 0      | 017         | 15    |

Numbers are converted the way C's strtol() does: the longest valid prefix
is used and text with no digits at all converts to 0. The assembler has
always accepted `ld v0, foo` as `ld v0, 0`, and sources rely on it.

Register Names
--------------
v0-v9, va-vf, and the pseudo-registers b, dt, f, i, [i], k, st.
A failed register parse is not an error by itself: callers use it to
tell register operands from immediates.
"""

import re
from typing import Optional

from chip8_sdk.assembler.opcodes import Register, REGISTER_NAMES


# Leading whitespace, optional sign, remainder
_SIGN_PATTERN = re.compile(r"\s*([+-]?)(.*)", re.DOTALL)

_DIGITS = "0123456789abcdefghijklmnopqrstuvwxyz"


def _strtol(text: str, base: int) -> int:
    """
    Convert text to an integer with C strtol() semantics.

    Args:
        text: Text to convert
        base: 2, 8, 10 or 16, or 0 to detect the base from the prefix

    Returns:
        The value of the longest valid numeric prefix, 0 if there is none
    """
    sign, rest = _SIGN_PATTERN.match(text).groups()
    lowered = rest.lower()

    if base in (0, 16) and lowered.startswith("0x") and lowered[2:3] and lowered[2] in _DIGITS[:16]:
        rest = rest[2:]
        base = 16
    elif base == 0:
        base = 8 if lowered.startswith("0") else 10

    valid = _DIGITS[:base]
    count = 0
    while count < len(rest) and rest[count].lower() in valid:
        count += 1

    if count == 0:
        return 0

    value = int(rest[:count], base)
    return -value if sign == "-" else value


def parse_integer(text: str, max_value: int = 0) -> Optional[int]:
    """
    Parse an integer literal.

    A leading '$' selects hexadecimal and a leading '%' binary for the
    rest of the text. Otherwise the base follows C conventions ('0x' hex,
    leading '0' octal, decimal).

    Args:
        text: Operand text
        max_value: If nonzero, values above it are rejected

    Returns:
        The parsed value, or None if it exceeds max_value
    """
    text = text.strip()

    if text.startswith("$"):
        value = _strtol(text[1:], 16)
    elif text.startswith("%"):
        value = _strtol(text[1:], 2)
    else:
        value = _strtol(text, 0)

    if max_value and value > max_value:
        return None

    return value


_LITERAL_PATTERN = re.compile(
    r"[+-]?(\$[0-9a-f]+|%[01]+|0x[0-9a-f]+|0[0-7]*|[1-9][0-9]*)",
    re.IGNORECASE,
)


def is_numeric_literal(text: str) -> bool:
    """
    Check whether text is a well-formed number in one of the accepted formats.

    parse_integer() converts anything, so this is how the code generator
    tells a numeric address from a misspelled label. A leading 0 means
    octal, so "09" is not a number.
    """
    return _LITERAL_PATTERN.fullmatch(text.strip()) is not None


def parse_register(text: str) -> Optional[Register]:
    """
    Parse a register name.

    Args:
        text: Operand text (already lowercased by the lexer)

    Returns:
        The matching Register, or None if the text is not a register name
    """
    return REGISTER_NAMES.get(text.strip())


def parse_general_register(text: str) -> Optional[Register]:
    """Parse a register name, accepting only V0-VF."""
    register = parse_register(text)
    if register is None or not register.is_general:
        return None
    return register
