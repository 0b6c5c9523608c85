"""
chip8vm Command-Line Interface
==============================

This package provides command-line tools around the VM core:

- **chip8run**: headless runner with breakpoints and register dumps
- **chip8dis**: program disassembler

Each tool is implemented as a Click-based CLI application with
comprehensive help and error reporting.
"""

__all__ = ["chip8run", "chip8dis"]
