# =============================================================================
# test_assembler.py - Full Assembler Integration Tests
# =============================================================================
# End-to-end tests for the CHIP-8 assembler.
# These tests verify the full pipeline from source text to .ch8 image.
#
# Test coverage includes:
#   - Complete program assembly
#   - Error reporting with line numbers
#   - Listing and symbol file output
#   - Output path derivation
# =============================================================================

from pathlib import Path

import pytest

from chip8_sdk import assemble, assemble_file
from chip8_sdk.assembler import Assembler, derive_output_path
from chip8_sdk.errors import (
    AssemblerError,
    OperandError,
    OperandRangeError,
    UndefinedSymbolError,
)


PONG_FRAGMENT = """
; bounce a dot across the screen
        .org  $200
start:  cls
        ld    v0, 0         ; x
        ld    v1, 10        ; y
        ld    i, dot
loop:   drw   v0, v1, 1
        add   v0, 1
        jp    loop
dot:    .byte %10000000
"""


# =============================================================================
# Full Assembly Pipeline Tests
# =============================================================================

class TestFullPipeline:
    """Test the complete assembly pipeline."""

    def test_minimal_program(self):
        """A single instruction gives a two byte image."""
        assert Assembler().assemble("cls") == bytes([0x00, 0xE0])

    def test_complete_program(self):
        code = assemble(PONG_FRAGMENT)
        assert code.hex().upper() == "00E06000610AA20ED0117001120880"
        assert len(code) == 15

    def test_symbols(self):
        asm = Assembler()
        asm.assemble_string(PONG_FRAGMENT)
        assert asm.get_symbols() == {"start": 0x200, "loop": 0x208, "dot": 0x20E}

    def test_statements(self):
        asm = Assembler()
        asm.assemble_string("cls\n.byte 1, 2")
        statements = asm.get_statements()
        assert len(statements) == 3
        assert statements[-1].offset == 0x203

    def test_register_add(self):
        assert assemble("add v0, v1") == bytes([0x80, 0x14])

    def test_forward_label(self):
        source = "ld i, main\ncls\ncls\ncls\nmain: ret"
        assert assemble(source)[:2] == bytes([0xA2, 0x08])

    def test_data_directives(self):
        assert assemble(".byte $12, $34\n.word $5678") == bytes([0x12, 0x34, 0x56, 0x78])

    def test_org_sets_label_address(self):
        asm = Assembler()
        asm.assemble_string("cls\n.org $300\nhere: ret")
        assert asm.get_statements()[1].offset == 0x300
        assert asm.get_symbols()["here"] == 0x300
        # 0x100 past the load address, but the image has no padding
        assert asm.get_code() == bytes([0x00, 0xE0, 0x00, 0xEE])

    def test_duplicate_label_last_wins(self):
        code = assemble("dup: cls\ndup: ret\njp dup")
        assert code[-2:] == bytes([0x12, 0x02])

    def test_label_only_lines(self):
        asm = Assembler()
        asm.assemble_string("first:\nsecond:\n  cls")
        assert asm.get_symbols() == {"first": 0x200, "second": 0x200}

    def test_crlf_source(self):
        assert assemble("cls\r\nret\r\n") == bytes([0x00, 0xE0, 0x00, 0xEE])

    def test_form_feed_inside_line(self):
        assert assemble("ld v0,\f5") == bytes([0x60, 0x05])

    def test_page_break_keeps_line_numbers(self):
        with pytest.raises(AssemblerError) as exc_info:
            assemble("cls\n\f\nld v0, 300", "game.s")
        assert "game.s:3:" in str(exc_info.value)

    def test_assembler_reusable(self):
        asm = Assembler()
        asm.assemble_string("a: cls")
        asm.assemble_string("b: ret")
        assert asm.get_symbols() == {"b": 0x200}
        assert asm.get_code() == bytes([0x00, 0xEE])


# =============================================================================
# Error Handling Tests
# =============================================================================

class TestErrorHandling:
    """Test error detection and reporting."""

    def test_operand_count_error(self):
        with pytest.raises(OperandError):
            assemble("cls v0")

    def test_range_error(self):
        with pytest.raises(OperandRangeError):
            assemble("ld v0, 256")

    def test_error_line_number(self):
        """Errors name the source and line."""
        with pytest.raises(AssemblerError) as exc_info:
            assemble("cls\nret\nld v0, 300", "game.s")
        assert exc_info.value.location.line == 3
        assert "game.s:3:" in str(exc_info.value)

    def test_undefined_symbol(self):
        with pytest.raises(UndefinedSymbolError):
            assemble("jp nowhere")

    def test_lenient_symbols(self):
        asm = Assembler(strict_symbols=False)
        assert not asm.is_strict()
        assert asm.assemble_string("jp nowhere") == bytes([0x10, 0x00])
        assert len(asm.get_warnings()) == 1

    def test_failure_clears_previous_result(self):
        """A failed run leaves no code or symbols behind."""
        asm = Assembler()
        asm.assemble_string("ok: cls")
        with pytest.raises(AssemblerError):
            asm.assemble_string("good: cls\njp bad")
        assert asm.get_code() == b""
        assert asm.get_symbols() == {}
        assert asm.get_statements() == []


# =============================================================================
# File I/O Tests
# =============================================================================

class TestFileIO:
    """Test reading sources and writing outputs."""

    def test_assemble_file(self, tmp_path):
        source = tmp_path / "game.s"
        source.write_text("start: jp start\n")
        assert assemble_file(source) == bytes([0x12, 0x00])

    def test_file_error_uses_path(self, tmp_path):
        source = tmp_path / "bad.s"
        source.write_text("bogus\n")
        with pytest.raises(AssemblerError) as exc_info:
            Assembler().assemble_file(source)
        assert exc_info.value.location.filename == str(source)

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            assemble_file(tmp_path / "missing.s")

    def test_assemble_with_output_path(self, tmp_path):
        output = tmp_path / "out.ch8"
        Assembler().assemble("cls\nret", output_path=output)
        assert output.read_bytes() == bytes([0x00, 0xE0, 0x00, 0xEE])

    def test_write_binary(self, tmp_path):
        asm = Assembler()
        asm.assemble_string(".word $BEEF")
        output = tmp_path / "beef.ch8"
        asm.write_binary(output)
        assert output.read_bytes() == b"\xbe\xef"

    def test_write_listing(self, tmp_path):
        asm = Assembler()
        asm.assemble_string("; demo\nstart: cls\n        jp start\n")
        listing = tmp_path / "demo.lst"
        asm.write_listing(listing)
        text = listing.read_text()
        assert "CHIP-8 Assembler Listing" in text
        assert "0200  00 E0" in text
        assert "0202  12 00" in text
        assert "; demo" in text
        assert "start                = $0200" in text

    def test_listing_long_data_truncated(self):
        asm = Assembler()
        asm.assemble_string(".byte 1, 2, 3, 4, 5, 6")
        row = [line for line in asm.get_listing().splitlines() if line.startswith("0200")][0]
        assert "01 02 03 04+" in row

    def test_write_symbols(self, tmp_path):
        asm = Assembler()
        asm.assemble_string("zeta: cls\nalpha: ret\n")
        symbols = tmp_path / "demo.sym"
        asm.write_symbols(symbols)
        lines = symbols.read_text().splitlines()
        assert lines[0] == "# Symbol table"
        assert lines[2:] == ["alpha $0202", "zeta $0200"]

    def test_verbose_progress(self, capsys):
        Assembler(verbose=True).assemble_string("cls")
        out = capsys.readouterr().out
        assert "Parsed 1 statements" in out
        assert "Generated 2 bytes" in out


class TestOutputPath:
    """Test the default image name."""

    @pytest.mark.parametrize("source,expected", [
        ("game.s", "game.ch8"),
        ("GAME.S", "GAME.ch8"),
        ("dir/pong.s", "dir/pong.ch8"),
        ("game.asm", "game.asm.ch8"),
        ("game", "game.ch8"),
    ])
    def test_derive_output_path(self, source, expected):
        assert derive_output_path(source) == Path(expected)


class TestExamples:
    """The bundled example programs assemble cleanly."""

    EXAMPLES = Path(__file__).parent.parent / "examples"

    def test_bounce(self):
        asm = Assembler()
        code = asm.assemble_file(self.EXAMPLES / "bounce.s")
        symbols = asm.get_symbols()
        assert code[:2] == bytes([0x00, 0xE0])
        assert symbols["dot"] == 0x200 + len(code) - 1
        assert asm.get_warnings() == []
