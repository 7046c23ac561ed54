# =============================================================================
# test_operands.py - Operand Parser Unit Tests
# =============================================================================
# Tests for the integer literal and register name parsers.
#
# Test coverage includes:
#   - Number formats: decimal, hexadecimal ($, 0x), binary (%), octal (0)
#   - strtol-style handling of partial and non-numeric text
#   - Upper bounds
#   - Register name table
# =============================================================================

import pytest

from chip8_sdk.assembler.opcodes import Register
from chip8_sdk.assembler.operands import (
    is_numeric_literal,
    parse_general_register,
    parse_integer,
    parse_register,
)


# =============================================================================
# Integer Literal Tests
# =============================================================================

class TestIntegerFormats:
    """Test the accepted number formats."""

    @pytest.mark.parametrize("text,expected", [
        ("0", 0),
        ("42", 42),
        ("255", 255),
        ("$ff", 255),
        ("$1F", 31),
        ("0x1f", 31),
        ("0X20", 32),
        ("%1010", 10),
        ("%11111111", 255),
        ("017", 15),
        ("-1", -1),
    ])
    def test_formats(self, text, expected):
        assert parse_integer(text) == expected

    def test_surrounding_whitespace(self):
        assert parse_integer("  $10 \t") == 16

    def test_hex_prefix_after_dollar(self):
        """strtol base 16 also accepts a 0x prefix."""
        assert parse_integer("$0x10") == 16


class TestIntegerGarbage:
    """Malformed text converts like C strtol() would."""

    def test_no_digits_is_zero(self):
        assert parse_integer("start") == 0

    def test_empty_hex_is_zero(self):
        assert parse_integer("$") == 0

    def test_longest_valid_prefix(self):
        assert parse_integer("12abc") == 12

    def test_binary_stops_at_invalid_digit(self):
        assert parse_integer("%1012") == 5

    def test_bare_hex_prefix(self):
        """'0x' with no hex digit after it is just the number 0."""
        assert parse_integer("0xg") == 0


class TestIntegerBounds:
    """Test the optional maximum value."""

    def test_within_bound(self):
        assert parse_integer("$ff", 0xFF) == 0xFF

    def test_above_bound_fails(self):
        assert parse_integer("256", 0xFF) is None

    def test_nibble_bound(self):
        assert parse_integer("15", 0xF) == 15
        assert parse_integer("16", 0xF) is None

    def test_word_bound(self):
        assert parse_integer("$ffff", 0xFFFF) == 0xFFFF
        assert parse_integer("$10000", 0xFFFF) is None

    def test_zero_bound_means_unbounded(self):
        assert parse_integer("$123456", 0) == 0x123456


class TestNumericLiteral:
    """Test detection of well-formed numbers."""

    @pytest.mark.parametrize("text", ["0", "123", "$2a0", "0x2A0", "%101", "-4", "017"])
    def test_literals(self, text):
        assert is_numeric_literal(text)

    @pytest.mark.parametrize("text", ["main", "12abc", "$", "%", "0xg", "v0", "", "09", "08", "0129"])
    def test_not_literals(self, text):
        assert not is_numeric_literal(text)


# =============================================================================
# Register Name Tests
# =============================================================================

class TestRegisters:
    """Test register name parsing."""

    @pytest.mark.parametrize("index", range(16))
    def test_general_registers(self, index):
        name = f"v{index:x}"
        assert parse_register(name) == Register(index)
        assert int(parse_register(name)) == index

    @pytest.mark.parametrize("name,expected", [
        ("b", Register.B),
        ("dt", Register.DT),
        ("f", Register.F),
        ("i", Register.I),
        ("[i]", Register.I_INDIRECT),
        ("k", Register.K),
        ("st", Register.ST),
    ])
    def test_special_registers(self, name, expected):
        assert parse_register(name) == expected

    @pytest.mark.parametrize("name", ["vg", "v10", "x", "", "[i", "$5", "start"])
    def test_not_registers(self, name):
        assert parse_register(name) is None

    def test_whitespace_trimmed(self):
        assert parse_register(" v3 ") == Register.V3

    def test_is_general(self):
        assert Register.VF.is_general
        assert not Register.DT.is_general

    def test_parse_general_register(self):
        assert parse_general_register("va") == Register.VA
        assert parse_general_register("dt") is None
        assert parse_general_register("foo") is None
