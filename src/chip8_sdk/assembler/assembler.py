"""
CHIP-8 Assembler - Main Interface
=================================

This module provides the main Assembler class, which is the primary interface
for assembling CHIP-8 source code. It runs the parser (pass 1) and the code
generator (pass 2) and keeps the results of the run for output.

Example Usage
-------------
>>> from chip8_sdk.assembler import Assembler
>>>
>>> asm = Assembler()
>>> code = asm.assemble_string('''
... start:  cls
...         ld   v0, 1
...         jp   start
... ''')
>>> code.hex()
'00e060011200'
>>> asm.get_symbols()
{'start': 512}
>>> asm.write_binary("loop.ch8")

Command-Line Usage
------------------
    $ c8asm game.s                  # writes game.ch8
    $ c8asm game.s -l game.lst -s game.sym
"""

from pathlib import Path
from typing import Optional
import logging

from chip8_sdk.assembler.codegen import CodeGenerator
from chip8_sdk.assembler.opcodes import OUTPUT_SUFFIX, SOURCE_SUFFIXES
from chip8_sdk.assembler.parser import ParseResult, Statement, parse_source

logger = logging.getLogger(__name__)


class Assembler:
    """
    Main CHIP-8 assembler class.

    One Assembler holds the state of the most recent assembly run: the
    statements and symbol table from pass 1 and the image from pass 2.
    Every assemble call starts from scratch, so an instance can be reused.

    Attributes:
        verbose: If True, print progress messages
        strict_symbols: If True (default), an address operand that is neither
                        a label nor a numeric literal is an error
    """

    def __init__(self, verbose: bool = False, strict_symbols: bool = True):
        """
        Initialize the assembler.

        Args:
            verbose: Enable verbose output
            strict_symbols: Reject unresolvable address operands (default).
                            When False they assemble as address 0 with a
                            warning.
        """
        self._verbose = verbose
        self._strict_symbols = strict_symbols
        self._result: Optional[ParseResult] = None
        self._code = b""
        self._warnings: list[str] = []

    # =========================================================================
    # Assembly Methods
    # =========================================================================

    def assemble(self, source: str, filename: str = "<input>",
                 output_path: str | Path | None = None) -> bytes:
        """
        Assemble source code, optionally writing the image.

        Args:
            source: Assembly source code
            filename: Virtual filename for error messages
            output_path: Optional output file path

        Returns:
            Binary image as bytes
        """
        code = self.assemble_string(source, filename)

        if output_path:
            self.write_binary(output_path)

        return code

    def assemble_string(self, source: str, filename: str = "<input>") -> bytes:
        """
        Assemble source code from a string.

        The assembly pipeline is:
        1. Parse lines into statements and symbols (pass 1)
        2. Resolve addresses and encode statements (pass 2)

        Args:
            source: Assembly source code
            filename: Virtual filename for error messages

        Returns:
            Binary image as bytes

        Raises:
            AssemblerError: If assembly fails
        """
        self._result = None
        self._code = b""
        self._warnings = []

        result = parse_source(source, filename)

        if self._verbose:
            print(f"Parsed {len(result.statements)} statements, "
                  f"{len(result.symbols)} symbols")

        codegen = CodeGenerator(result.symbols, strict=self._strict_symbols)
        code = codegen.generate(result.statements)

        # Only keep results of a run that finished both passes
        self._result = result
        self._code = code
        self._warnings = codegen.warnings

        if self._verbose:
            print(f"Generated {len(code)} bytes of code")

        return code

    def assemble_file(self, filepath: str | Path) -> bytes:
        """
        Assemble source code from a file.

        Args:
            filepath: Path to assembly source file

        Returns:
            Binary image as bytes

        Raises:
            AssemblerError: If assembly fails
            FileNotFoundError: If source file not found
        """
        filepath = Path(filepath)

        if self._verbose:
            print(f"Assembling {filepath}...")

        source = filepath.read_text()
        logger.debug(f"read {len(source)} characters from {filepath}")

        return self.assemble_string(source, str(filepath))

    # =========================================================================
    # Results
    # =========================================================================

    def get_code(self) -> bytes:
        """Get the binary image of the last successful run."""
        return self._code

    def get_symbols(self) -> dict[str, int]:
        """Get the symbol table (label -> address) of the last run."""
        if self._result is None:
            return {}
        return dict(self._result.symbols)

    def get_statements(self) -> list[Statement]:
        """Get the statements of the last run in program order."""
        if self._result is None:
            return []
        return list(self._result.statements)

    def get_warnings(self) -> list[str]:
        """Get warnings from lenient symbol resolution."""
        return list(self._warnings)

    def is_strict(self) -> bool:
        """Check whether unresolvable addresses are rejected."""
        return self._strict_symbols

    def get_listing(self) -> str:
        """
        Get the assembly listing as a string.

        Each source line is shown with the address of its first statement
        and the bytes it produced, followed by the symbol table.
        """
        lines = []
        lines.append("CHIP-8 Assembler Listing")
        lines.append("=" * 60)
        lines.append("")
        lines.append("Addr  Code          Line  Source")
        lines.append("-" * 60)

        if self._result is not None:
            # The image is the statements' bytes back to back
            chunks: dict[int, bytearray] = {}
            first: dict[int, Statement] = {}
            position = 0
            for stmt in self._result.statements:
                line = stmt.location.line
                first.setdefault(line, stmt)
                chunks.setdefault(line, bytearray()).extend(
                    self._code[position:position + stmt.size]
                )
                position += stmt.size

            for number, text in enumerate(self._result.lines, start=1):
                if number in first:
                    hex_bytes = " ".join(f"{b:02X}" for b in chunks[number])
                    # Long .byte/.word rows are cut to keep columns aligned
                    if len(hex_bytes) > 12:
                        hex_bytes = hex_bytes[:11] + "+"
                    lines.append(f"{first[number].offset:04X}  {hex_bytes:12s}  {number:4d}  {text}")
                else:
                    lines.append(f"{'':4s}  {'':12s}  {number:4d}  {text}")

        lines.append("")
        lines.append("Symbol Table")
        lines.append("-" * 30)
        for name, value in sorted(self.get_symbols().items()):
            lines.append(f"{name:20s} = ${value:04X}")
        return "\n".join(lines)

    # =========================================================================
    # Output Methods
    # =========================================================================

    def write_binary(self, filepath: str | Path) -> None:
        """
        Write the raw binary image (.ch8).

        Args:
            filepath: Output file path
        """
        Path(filepath).write_bytes(self._code)

        if self._verbose:
            print(f"Wrote {len(self._code)} bytes to {filepath}")

    def write_listing(self, filepath: str | Path) -> None:
        """
        Write assembly listing file.

        Args:
            filepath: Output file path
        """
        with open(filepath, "w") as f:
            f.write(self.get_listing())
            f.write("\n")

        if self._verbose:
            print(f"Wrote listing to {filepath}")

    def write_symbols(self, filepath: str | Path) -> None:
        """
        Write symbol table file.

        Format: name address (one per line)
        """
        with open(filepath, "w") as f:
            f.write("# Symbol table\n")
            f.write("# Generated by c8asm\n")
            for name, value in sorted(self.get_symbols().items()):
                f.write(f"{name} ${value:04X}\n")

        if self._verbose:
            print(f"Wrote symbols to {filepath}")


# =============================================================================
# Convenience Functions
# =============================================================================

def derive_output_path(input_path: str | Path) -> Path:
    """
    Work out the image path for a source path.

    A trailing '.s' or '.S' is removed, then '.ch8' is appended:
    'game.s' -> 'game.ch8', 'game.asm' -> 'game.asm.ch8'.
    """
    name = str(input_path)
    if name.endswith(SOURCE_SUFFIXES):
        name = name[:-2]
    return Path(name + OUTPUT_SUFFIX)


def assemble(source: str, filename: str = "<input>", strict_symbols: bool = True) -> bytes:
    """
    Convenience function to assemble source code.

    Args:
        source: Assembly source code
        filename: Virtual filename for errors
        strict_symbols: Reject unresolvable address operands

    Returns:
        Binary image

    Raises:
        AssemblerError: If assembly fails
    """
    asm = Assembler(strict_symbols=strict_symbols)
    return asm.assemble_string(source, filename)


def assemble_file(filepath: str | Path, strict_symbols: bool = True) -> bytes:
    """
    Convenience function to assemble a file.

    Args:
        filepath: Path to source file
        strict_symbols: Reject unresolvable address operands

    Returns:
        Binary image

    Raises:
        AssemblerError: If assembly fails
    """
    asm = Assembler(strict_symbols=strict_symbols)
    return asm.assemble_file(filepath)
