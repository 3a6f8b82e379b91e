"""
tracsasm - TRACS Assembler Command-Line Interface
=================================================

This module implements the command-line interface for the TRACS assembler.

Usage Examples
--------------
Basic assembly (reads script.asm, writes translation.txt):
    $ tracsasm

With input and output files:
    $ tracsasm program.asm -o program.txt

Generate all output files:
    $ tracsasm program.asm -o program.txt -s program.sym -b program.bin

Verbose mode:
    $ tracsasm -v program.asm
"""

import logging
from pathlib import Path
from typing import Optional

import click

from tracs_asm import __version__
from tracs_asm.assembler import Assembler
from tracs_asm.cli.errors import handle_cli_exception
from tracs_asm.config import AssemblerConfig

logger = logging.getLogger(__name__)


def setup_logging(verbose: bool) -> None:
    """Configure logging based on verbosity."""
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(levelname)s: %(message)s" if verbose else "%(message)s",
        force=True,
    )


# =============================================================================
# CLI Definition
# =============================================================================

@click.command()
@click.argument(
    "input_file",
    required=False,
    type=click.Path(dir_okay=False, path_type=Path),
)
@click.option(
    "-o", "--output",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Output listing file (default: translation.txt)",
)
@click.option(
    "-s", "--symbols",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Generate label table file",
)
@click.option(
    "-b", "--binary",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Generate raw binary output (two bytes per instruction)",
)
@click.option(
    "--strict/--no-strict",
    default=None,
    help="Reject operand values wider than 8 bits instead of truncating them.",
)
@click.option(
    "--max-errors",
    type=click.IntRange(min=1),
    default=None,
    help="Stop after this many errors (default: 100)",
)
@click.option(
    "--dump-lines",
    is_flag=True,
    help="Print the normalized label/operation/operand table",
)
@click.option(
    "-v", "--verbose",
    is_flag=True,
    help="Verbose output",
)
@click.version_option(version=__version__, prog_name="tracsasm")
def main(
    input_file: Optional[Path],
    output: Optional[Path],
    symbols: Optional[Path],
    binary: Optional[Path],
    strict: Optional[bool],
    max_errors: Optional[int],
    dump_lines: bool,
    verbose: bool,
) -> None:
    """
    Assemble TRACS source code into a machine-code listing.

    INPUT_FILE is the assembly source file (default: script.asm).

    Each instruction produces one listing line of the form

        0xAA 0xBB<TAB>0xCC 0xDD

    where AA/CC are addresses and BB/DD the encoded bytes.

    \b
    Examples:
        tracsasm                     # script.asm -> translation.txt
        tracsasm prog.asm -o out.txt # Specify input and output
        tracsasm -s prog.sym prog.asm
    """
    setup_logging(verbose)

    config = AssemblerConfig.from_env()
    if strict is not None:
        config.strict_operand_range = strict
    if max_errors is not None:
        config.max_errors = max_errors

    input_file = input_file or config.default_source
    output_file = output or config.output_filename

    asm = Assembler(config)

    try:
        if verbose:
            click.echo(f"Assembling {input_file}...")

        try:
            asm.assemble_file(input_file)
        finally:
            if dump_lines:
                click.echo(asm.get_line_report(), nl=False)

        asm.write_outputs(output_file, symbols=symbols, binary=binary)
        if verbose:
            click.echo(f"Wrote {len(asm.get_instructions())} lines to {output_file}")
            if symbols:
                click.echo(f"Wrote labels to {symbols}")
            if binary:
                click.echo(f"Wrote {len(asm.get_code())} bytes raw binary to {binary}")

        if verbose:
            click.echo(
                f"Assembly complete: {len(asm.get_instructions())} instructions "
                f"at 0x{asm.get_origin():03X}"
            )
            click.echo(f"Defined {len(asm.get_symbols())} labels")

    except Exception as e:
        handle_cli_exception(e, verbose=verbose, error_type="Assembly")


if __name__ == "__main__":
    main()
