"""
Unified CLI Error Handling
==========================

Provides consistent error handling and exit codes across all CLI tools.

Every failure exits with status 1: usage errors, unreadable input,
unwritable output and assembly errors alike. Scripts only need to test
for a non-zero status.
"""

import sys
import traceback
from enum import IntEnum
from typing import NoReturn

import click


class ExitCode(IntEnum):
    """Standard exit codes for CLI tools."""
    SUCCESS = 0
    ERROR = 1


class ToolCommand(click.Command):
    """
    Click command whose usage errors exit with ExitCode.ERROR.

    Click reports bad or missing arguments with status 2 by default.
    """

    def parse_args(self, ctx: click.Context, args: list[str]) -> list[str]:
        try:
            return super().parse_args(ctx, args)
        except click.UsageError as e:
            e.exit_code = ExitCode.ERROR
            raise


def handle_cli_exception(
    error: Exception,
    verbose: bool = False,
    error_type: str | None = None
) -> NoReturn:
    """
    Unified exception handler for all CLI tools.

    Formats the error message appropriately, optionally prints traceback
    in verbose mode, and exits with the correct exit code.

    Args:
        error: The exception that was raised
        verbose: If True, print full traceback for internal errors
        error_type: Optional prefix for the error message (e.g., "Assembly")

    Raises:
        SystemExit: Always exits with ExitCode.ERROR
    """
    from chip8_sdk.errors import Chip8Error, InternalError

    if isinstance(error, InternalError):
        # Assembler bug rather than a problem in the source
        click.echo(f"Internal error: {error}", err=True)
        if verbose:
            traceback.print_exc()

    elif isinstance(error, Chip8Error):
        # Assembly errors already carry "file:line: error:" formatting
        prefix = f"{error_type} failed\n" if error_type else ""
        click.echo(f"{prefix}{error}", err=True)

    elif isinstance(error, click.ClickException):
        error.show()

    elif isinstance(error, (FileNotFoundError, PermissionError, IsADirectoryError)):
        click.echo(f"Error: {error}", err=True)

    elif isinstance(error, OSError):
        click.echo(f"I/O error: {error}", err=True)

    else:
        # Unexpected internal error
        click.echo(f"Internal error: {error}", err=True)
        if verbose:
            traceback.print_exc()

    sys.exit(ExitCode.ERROR)
