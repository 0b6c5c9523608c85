"""
chip8dis - CHIP-8 Disassembler Command-Line Interface
=====================================================

Produces a listing of a CHIP-8 program image using the same decoder the
CPU executes with.

Usage Examples
--------------
Disassemble a ROM:
    $ chip8dis pong.ch8

With a different load address:
    $ chip8dis code.bin --address 0x600

Limit number of instructions:
    $ chip8dis pong.ch8 --count 20

Output to file:
    $ chip8dis pong.ch8 -o pong.lst

Hex dump with disassembly:
    $ chip8dis pong.ch8 --hex

Copyright (c) 2025-2026 Hugo José Pinto & Contributors
"""

from pathlib import Path
from typing import Optional

import click

from chip8vm import __version__
from chip8vm.cli.errors import handle_cli_exception, parse_address
from chip8vm.disassembler import Chip8Disassembler


def _hex_lines(data: bytes, base_address: int) -> list:
    lines = ["; Hex dump:", "; " + "-" * 60]
    for i in range(0, len(data), 16):
        chunk = data[i:i + 16]
        hex_str = " ".join(f"{b:02X}" for b in chunk)
        ascii_str = "".join(chr(b) if 0x20 <= b < 0x7F else "." for b in chunk)
        lines.append(f"; ${base_address + i:04X}: {hex_str:<48} {ascii_str}")
    lines.append("; " + "-" * 60)
    lines.append("")
    return lines


# =============================================================================
# CLI Definition
# =============================================================================

@click.command()
@click.argument(
    "input_file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
@click.option(
    "-o", "--output",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Output file (default: stdout)",
)
@click.option(
    "-a", "--address",
    type=str,
    default="0x200",
    help="Load address of the first byte (hex with 0x prefix or decimal). Default: 0x200",
)
@click.option(
    "-c", "--count",
    type=click.IntRange(min=1),
    default=None,
    help="Maximum number of instructions to disassemble (default: all)",
)
@click.option(
    "--hex",
    "show_hex",
    is_flag=True,
    help="Include hex dump before disassembly",
)
@click.option(
    "--no-bytes",
    is_flag=True,
    help="Omit raw words from output (show only mnemonic and operands)",
)
@click.option(
    "-v", "--verbose",
    is_flag=True,
    help="Verbose output",
)
@click.version_option(version=__version__, prog_name="chip8dis")
def main(
    input_file: Path,
    output: Optional[Path],
    address: str,
    count: Optional[int],
    show_hex: bool,
    no_bytes: bool,
    verbose: bool,
) -> None:
    """
    Disassemble a CHIP-8 program.

    INPUT_FILE is the raw program image.

    Examples:

        # Disassemble the first 20 instructions
        chip8dis pong.ch8 --count 20 -o pong.lst

        # Program loaded somewhere other than 0x200
        chip8dis code.bin --address 0x600
    """
    try:
        base_address = parse_address(address)

        data = input_file.read_bytes()
        if not data:
            raise click.BadParameter(f"{input_file} is empty")

        if verbose:
            click.echo(f"Input file: {input_file} ({len(data)} bytes)", err=True)
            click.echo(f"Base address: ${base_address:04X}", err=True)

        output_lines = [
            f"; Disassembly of {input_file.name}",
            f"; Size: {len(data)} bytes",
            f"; Base address: ${base_address:04X}",
            "",
        ]
        if show_hex:
            output_lines.extend(_hex_lines(data, base_address))

        instructions = Chip8Disassembler().disassemble(
            data, start_address=base_address, count=count
        )
        for instr in instructions:
            if no_bytes:
                line = f"${instr.address:04X}: {instr.mnemonic}"
                if instr.operand_str:
                    line += f" {instr.operand_str}"
                if instr.comment:
                    line += f"  ; {instr.comment}"
                output_lines.append(line)
            else:
                output_lines.append(str(instr))

        result = "\n".join(output_lines) + "\n"
        if output:
            output.write_text(result, encoding="utf-8")
            if verbose:
                click.echo(f"Output written to: {output}", err=True)
        else:
            click.echo(result, nl=False)

        if verbose:
            click.echo(f"Disassembled {len(instructions)} instructions", err=True)

    except Exception as e:
        handle_cli_exception(e, verbose=verbose, error_type="Disassembly")


# =============================================================================
# Entry Point
# =============================================================================

if __name__ == "__main__":
    main()
