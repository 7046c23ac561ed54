"""
c8asm - CHIP-8 Assembler Command-Line Interface
===============================================

This module implements the command-line interface for the CHIP-8 assembler.

Usage Examples
--------------
Basic assembly (writes pong.ch8):
    $ c8asm pong.s

With output file:
    $ c8asm pong.s -o roms/pong.ch8

Generate all output files:
    $ c8asm pong.s -l pong.lst -s pong.sym

Verbose mode:
    $ c8asm -v pong.s

Exit status is 0 on success and 1 on any error. Diagnostics are written
to stderr. No output file is written unless the whole source assembles.
"""

from pathlib import Path
from typing import Optional
import logging

import click

from chip8_sdk import __version__
from chip8_sdk.assembler import Assembler, derive_output_path
from chip8_sdk.cli.errors import ToolCommand, handle_cli_exception


def setup_logging(verbose: bool) -> None:
    """Configure logging based on verbosity."""
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(levelname)s: %(message)s",
    )


# =============================================================================
# CLI Definition
# =============================================================================

@click.command(cls=ToolCommand)
@click.argument(
    "input_file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
@click.option(
    "-o", "--output",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Output image file (default: input with .s replaced by .ch8)",
)
@click.option(
    "-l", "--listing",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Generate listing file",
)
@click.option(
    "-s", "--symbols",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Generate symbol file",
)
@click.option(
    "--lenient-symbols",
    is_flag=True,
    help="Assemble unknown address labels as $000 with a warning "
         "instead of failing.",
)
@click.option(
    "-v", "--verbose",
    is_flag=True,
    help="Verbose output",
)
@click.version_option(version=__version__, prog_name="c8asm")
def main(
    input_file: Path,
    output: Optional[Path],
    listing: Optional[Path],
    symbols: Optional[Path],
    lenient_symbols: bool,
    verbose: bool,
) -> None:
    """
    Assemble CHIP-8 source code into a binary image.

    INPUT_FILE is the assembly source file (.s) to assemble.

    The output is a flat .ch8 image, loaded by CHIP-8 interpreters at
    address $200.

    \b
    Examples:
        c8asm pong.s                 # Outputs pong.ch8
        c8asm pong.s -o out.ch8      # Specify output file
        c8asm pong.s -l pong.lst     # Also write a listing
    """
    setup_logging(verbose)

    output_file = output if output is not None else derive_output_path(input_file)

    asm = Assembler(verbose=verbose, strict_symbols=not lenient_symbols)

    try:
        asm.assemble_file(input_file)

        asm.write_binary(output_file)

        if listing:
            asm.write_listing(listing)

        if symbols:
            asm.write_symbols(symbols)

        if verbose:
            code = asm.get_code()
            sym_count = len(asm.get_symbols())
            click.echo(f"Assembly complete: {len(code)} bytes")
            click.echo(f"Defined {sym_count} symbols")

    except Exception as e:
        handle_cli_exception(e, verbose=verbose, error_type="Assembly")


if __name__ == "__main__":
    main()
