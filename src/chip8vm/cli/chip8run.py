"""
chip8run - Headless CHIP-8 Runner
=================================

Loads a program into a fresh machine, runs it for a fixed number of ticks
without a screen, and prints why it stopped along with the registers.
Useful for smoke-testing ROMs and for tracing with -v.

Usage Examples
--------------
Run 1000 ticks:
    $ chip8run pong.ch8

Stop at an address:
    $ chip8run game.ch8 --break 0x2A0

Queue key presses for Fx0A:
    $ chip8run game.ch8 --key 5 --key A

Dump memory after the run:
    $ chip8run game.ch8 --ticks 500 --dump

Trace every instruction:
    $ chip8run game.ch8 -v

Copyright (c) 2025-2026 Hugo José Pinto & Contributors
"""

import logging
import sys
from pathlib import Path
from typing import Optional, Tuple

import click

from chip8vm import __version__
from chip8vm.cli.errors import ExitCode, handle_cli_exception, parse_address
from chip8vm.emulator import BreakReason, Emulator, EmulatorConfig
from chip8vm.emulator.emulator import parse_int


def setup_logging(verbose: bool) -> None:
    """Configure logging based on verbosity."""
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(levelname)s: %(message)s" if verbose else "%(message)s",
    )


# =============================================================================
# CLI Definition
# =============================================================================

@click.command()
@click.argument(
    "rom_file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
@click.option(
    "-n", "--ticks",
    type=click.IntRange(min=1),
    default=1000,
    show_default=True,
    help="Maximum number of ticks (instructions) to run",
)
@click.option(
    "-e", "--elapsed",
    type=click.IntRange(min=0),
    default=2,
    show_default=True,
    help="Milliseconds of simulated time per tick",
)
@click.option(
    "-a", "--address",
    type=str,
    default=None,
    help="Load and start address (hex with 0x prefix or decimal). Default: 0x200",
)
@click.option(
    "--seed",
    type=str,
    default=None,
    help="PRNG seed (hex with 0x prefix or decimal)",
)
@click.option(
    "-b", "--break", "breaks",
    multiple=True,
    help="Stop before executing the instruction at this address (repeatable)",
)
@click.option(
    "-k", "--key", "keys",
    multiple=True,
    help="Queue a key press (0-F) before running (repeatable)",
)
@click.option(
    "--strict",
    is_flag=True,
    help="Treat undefined opcodes as fatal errors",
)
@click.option(
    "--dump",
    is_flag=True,
    help="Print a hex dump of memory after the run",
)
@click.option(
    "-v", "--verbose",
    is_flag=True,
    help="Verbose output (logs every executed instruction)",
)
@click.version_option(version=__version__, prog_name="chip8run")
def main(
    rom_file: Path,
    ticks: int,
    elapsed: int,
    address: Optional[str],
    seed: Optional[str],
    breaks: Tuple[str, ...],
    keys: Tuple[str, ...],
    strict: bool,
    dump: bool,
    verbose: bool,
) -> None:
    """
    Run a CHIP-8 program headlessly.

    ROM_FILE is the raw program image, loaded at 0x200 unless --address
    says otherwise.

    Exits with status 1 if the machine faults or hits an undefined opcode.
    """
    setup_logging(verbose)

    try:
        overrides = {"strict_opcodes": strict}
        if address is not None:
            overrides["load_address"] = parse_address(address)
        if seed is not None:
            try:
                overrides["seed"] = parse_int(seed)
            except ValueError:
                raise click.BadParameter(f"invalid seed '{seed}'") from None
        base = EmulatorConfig.from_env()
        config = EmulatorConfig(**{**base.to_dict(), **overrides})

        data = rom_file.read_bytes()
        if not data:
            raise click.BadParameter(f"{rom_file} is empty")

        emu = Emulator(config)
        emu.load_program(data)
        for addr in breaks:
            emu.add_breakpoint(parse_address(addr))
        for key in keys:
            try:
                emu.keypad.tap(key)
            except ValueError as e:
                raise click.BadParameter(str(e)) from None

        if verbose:
            click.echo(f"Loaded {rom_file} ({len(data)} bytes) at ${config.load_address:04X}", err=True)

        event = emu.run(max_ticks=ticks, elapsed_ms=elapsed)

        click.echo(f"Stopped: {event}")
        click.echo(f"Ticks: {emu.total_ticks}")
        for line in emu.format_registers():
            click.echo(line)

        if dump:
            click.echo()
            click.echo(emu.memory.hexdump())

    except Exception as e:
        handle_cli_exception(e, verbose=verbose, error_type="Run")

    if event.reason in (BreakReason.ERROR, BreakReason.UNKNOWN_OPCODE):
        sys.exit(ExitCode.MACHINE_ERROR)


# =============================================================================
# Entry Point
# =============================================================================

if __name__ == "__main__":
    main()
