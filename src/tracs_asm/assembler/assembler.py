"""
TRACS Assembler - Main Interface
================================

This module provides the main Assembler class, the primary interface for
assembling TRACS source code. It runs the pipeline stages in order:

    normalize -> resolve (pass 1) -> validate -> encode (pass 2)

Each stage fully completes before the next begins. Any error aborts the
run before output is produced, and output files are only ever written
whole.

Example Usage
-------------
>>> from tracs_asm.assembler import Assembler
>>>
>>> asm = Assembler()
>>> asm.assemble_string('''
... ORG 0x000
... START WB 0x05
...       BR END
... END   EOP
... ''')
>>> print(asm.get_listing(), end="")
0x00 0x30	0x01 0x05
0x02 0x18	0x03 0x04
0x04 0xf8	0x05 0x00
>>>
>>> asm.write_output("translation.txt")

Command-Line Usage
------------------
    $ tracsasm script.asm -o translation.txt -s script.sym
"""

import logging
import os
import tempfile
from dataclasses import replace
from pathlib import Path
from typing import Optional

from tracs_asm.assembler.encoder import EncodedInstruction, Encoder, format_listing
from tracs_asm.assembler.normalizer import SourceLine, normalize_source, read_source
from tracs_asm.assembler.resolver import Program, resolve
from tracs_asm.assembler.validator import Validator
from tracs_asm.config import AssemblerConfig
from tracs_asm.errors import AssemblerError, OutputWriteError

logger = logging.getLogger(__name__)


class Assembler:
    """
    Main TRACS assembler class.

    One Assembler can run any number of assemblies; each run starts from
    a clean state and replaces the results of the previous one.

    Attributes:
        config: Settings for the run (strict range checking, error limit)
    """

    def __init__(self, config: Optional[AssemblerConfig] = None,
                 strict: Optional[bool] = None):
        """
        Initialize the assembler.

        Args:
            config: Assembler configuration (default: AssemblerConfig())
            strict: Override config.strict_operand_range if not None
        """
        self.config = config or AssemblerConfig()
        if strict is not None:
            self.config = replace(self.config, strict_operand_range=strict)

        self._lines: list[SourceLine] = []
        self._program: Optional[Program] = None
        self._instructions: list[EncodedInstruction] = []
        self._source_file: Optional[Path] = None

    # =========================================================================
    # Assembly Methods
    # =========================================================================

    def assemble_string(self, source: str,
                        filename: str = "<input>") -> list[EncodedInstruction]:
        """
        Assemble source code from a string.

        Args:
            source: Assembly source code
            filename: Virtual filename for error messages

        Returns:
            Encoded instructions in program order

        Raises:
            AssemblerError: If assembly fails
        """
        self._reset()

        lines = normalize_source(source, filename)
        self._lines = lines
        program = resolve(lines, filename, max_errors=self.config.max_errors)

        Validator(
            program,
            strict=self.config.strict_operand_range,
            max_errors=self.config.max_errors,
        ).validate()

        encoder = Encoder(program)
        instructions = encoder.encode()
        if encoder.problems:
            logger.warning(f"{len(encoder.problems)} lines could not be encoded")

        self._program = program
        self._instructions = instructions

        logger.info(
            f"Assembled {len(instructions)} instructions at 0x{program.origin:03X}"
        )
        return list(instructions)

    def assemble_file(self, filepath: str | Path) -> list[EncodedInstruction]:
        """
        Assemble source code from a file.

        Args:
            filepath: Path to assembly source file

        Returns:
            Encoded instructions in program order

        Raises:
            SourceReadError: If the file cannot be read
            AssemblerError: If assembly fails
        """
        filepath = Path(filepath)
        self._source_file = filepath
        logger.debug(f"Assembling {filepath}")

        source = read_source(filepath)
        return self.assemble_string(source, str(filepath))

    def _reset(self) -> None:
        self._lines = []
        self._program = None
        self._instructions = []

    # =========================================================================
    # Results
    # =========================================================================

    def get_lines(self) -> list[SourceLine]:
        """
        Normalized source lines of the last run (ORG line included).

        Kept even when a later stage of that run failed.
        """
        return list(self._lines)

    def get_program(self) -> Optional[Program]:
        """The resolved Program of the last successful run."""
        return self._program

    def get_instructions(self) -> list[EncodedInstruction]:
        """Encoded instructions of the last successful run."""
        return list(self._instructions)

    def get_listing(self) -> str:
        """
        Get the machine-code listing as a string.

        Returns:
            One "0xAA 0xBB<TAB>0xCC 0xDD" line per instruction
        """
        return format_listing(self._instructions)

    def get_code(self) -> bytes:
        """
        Get the generated machine code.

        Returns:
            byte0, byte1 of every instruction, in program order
        """
        return b"".join(inst.to_bytes() for inst in self._instructions)

    def get_origin(self) -> int:
        """Origin address of the last run (0 if none)."""
        return self._program.origin if self._program else 0

    def get_symbols(self) -> dict[str, int]:
        """
        Get the label table.

        Returns:
            Dictionary mapping label names to addresses
        """
        return self._program.symbols() if self._program else {}

    def get_symbol_report(self) -> str:
        """Label table as text, one 'Label: NAME, Address: xx' line per label."""
        return "".join(
            f"Label: {name}, Address: {address:x}\n"
            for name, address in self.get_symbols().items()
        )

    def get_line_report(self) -> str:
        """Normalized line table as text, one line per source line."""
        return "".join(f"{line}\n" for line in self._lines)

    # =========================================================================
    # Output Methods
    # =========================================================================

    def write_output(self, filepath: str | Path) -> None:
        """
        Write the listing file.

        Raises:
            OutputWriteError: If the file cannot be written
        """
        self._require_result()
        write_file_atomic(filepath, self.get_listing().encode("ascii"))
        logger.info(f"Wrote {len(self._instructions)} lines to {filepath}")

    def write_symbols(self, filepath: str | Path) -> None:
        """
        Write the label table file.

        Raises:
            OutputWriteError: If the file cannot be written
        """
        self._require_result()
        write_file_atomic(filepath, self.get_symbol_report().encode("utf-8"))
        logger.info(f"Wrote symbols to {filepath}")

    def write_binary(self, filepath: str | Path) -> None:
        """
        Write raw machine code (two bytes per instruction, no addresses).

        Raises:
            OutputWriteError: If the file cannot be written
        """
        self._require_result()
        code = self.get_code()
        write_file_atomic(filepath, code)
        logger.info(f"Wrote {len(code)} bytes to {filepath}")

    def write_outputs(self, output: str | Path,
                      symbols: Optional[str | Path] = None,
                      binary: Optional[str | Path] = None) -> None:
        """
        Write the listing plus optional label table and raw binary together.

        Either every requested file is written or none is.

        Raises:
            OutputWriteError: If any file cannot be written
        """
        self._require_result()
        files: list[tuple[str | Path, bytes]] = [
            (output, self.get_listing().encode("ascii")),
        ]
        if symbols is not None:
            files.append((symbols, self.get_symbol_report().encode("utf-8")))
        if binary is not None:
            files.append((binary, self.get_code()))
        write_files_atomic(files)
        logger.info(f"Wrote {', '.join(str(name) for name, _ in files)}")

    def _require_result(self) -> None:
        if self._program is None:
            raise AssemblerError("nothing to write: no successful assembly")


# =============================================================================
# File Output
# =============================================================================

def _output_mode(filepath: Path) -> int:
    """Permission bits for a new output: the existing file's, else the umask's."""
    try:
        return filepath.stat().st_mode & 0o777
    except OSError:
        umask = os.umask(0)
        os.umask(umask)
        return 0o666 & ~umask


def _stage_file(filepath: Path, data: bytes) -> str:
    """Write data to a temporary file beside filepath and return its name."""
    tmp = tempfile.NamedTemporaryFile(
        "wb", dir=filepath.parent, prefix=f".{filepath.name}.", delete=False
    )
    try:
        with tmp:
            tmp.write(data)
        os.chmod(tmp.name, _output_mode(filepath))
    except OSError:
        os.unlink(tmp.name)
        raise
    return tmp.name


def write_files_atomic(files: list[tuple[str | Path, bytes]]) -> None:
    """
    Write several files so that either all of them appear or none do.

    Every file is first written to a temporary file in its destination
    directory. Only when all of them have been written are they renamed
    over their destinations.

    Raises:
        OutputWriteError: If any file cannot be written
    """
    staged: list[tuple[Path, str]] = []
    committed: list[Path] = []
    filepath = None
    try:
        for name, data in files:
            filepath = Path(name)
            staged.append((filepath, _stage_file(filepath, data)))
        for filepath, tmp_name in staged:
            os.replace(tmp_name, filepath)
            committed.append(filepath)
    except OSError as e:
        for path, tmp_name in staged:
            if path not in committed and os.path.exists(tmp_name):
                os.unlink(tmp_name)
        for path in committed:
            logger.debug(f"Removing {path} after failed write")
            path.unlink(missing_ok=True)
        raise OutputWriteError(str(filepath), e.strerror or str(e)) from e


def write_file_atomic(filepath: str | Path, data: bytes) -> None:
    """
    Write data to filepath without ever leaving a partial file behind.

    Raises:
        OutputWriteError: If the file cannot be written
    """
    write_files_atomic([(filepath, data)])


# =============================================================================
# Convenience Functions
# =============================================================================

def assemble(source: str, filename: str = "<input>", strict: bool = False) -> str:
    """
    Convenience function to assemble source code.

    Returns:
        The listing text

    Raises:
        AssemblerError: If assembly fails
    """
    asm = Assembler(strict=strict)
    asm.assemble_string(source, filename)
    return asm.get_listing()


def assemble_file(filepath: str | Path, strict: bool = False) -> str:
    """
    Convenience function to assemble a file.

    Returns:
        The listing text

    Raises:
        AssemblerError: If assembly fails
    """
    asm = Assembler(strict=strict)
    asm.assemble_file(filepath)
    return asm.get_listing()
