"""
CHIP-8 SDK Command-Line Interface
=================================

This package provides the command-line tools of the CHIP-8 SDK:

- **c8asm**: CHIP-8 assembler

Each tool is implemented as a Click-based CLI application with
comprehensive help and error reporting.
"""

__all__ = ["c8asm"]
