"""
TRACS Assembler - Toolchain for the TRACS 8-bit CPU
===================================================

This package assembles programs for the TRACS 8-bit CPU, a small teaching
machine with a fixed 23-instruction set and 2-byte instructions.

Main Components
---------------
- **assembler**: Two-pass assembler (tracsasm)
    Converts assembly source files (.asm) to a machine-code listing

- **config**: Assembler configuration and environment overrides

- **errors**: Exception hierarchy shared by all components

Quick Start
-----------
Assemble a program:
    >>> from tracs_asm import Assembler
    >>> asm = Assembler()
    >>> asm.assemble_file("script.asm")
    >>> asm.write_output("translation.txt")

Or use the command-line tool:
    $ tracsasm script.asm -o translation.txt

Source Format
-------------
    ORG 0x000          ; optional origin, first line only
    START WB 0x05      ; [LABEL] OPERATION [OPERAND]
          BR END       ; branches may take a label
    END   EOP          ; EOP is required

Version History
---------------
1.0.0 - Initial release
"""

__version__ = "1.0.0"

# =============================================================================
# Public API Exports
# =============================================================================

from tracs_asm.assembler import Assembler, assemble, assemble_file
from tracs_asm.config import AssemblerConfig
from tracs_asm.errors import (
    TracsError,
    AssemblerError,
    AssemblyFailedError,
    SourceReadError,
    OutputWriteError,
    MissingTerminatorError,
    UndefinedLabelError,
    IllegalLabelOperandError,
    UnknownMnemonicError,
    DuplicateLabelError,
    MalformedLiteralError,
    OriginError,
    OperandRangeError,
)

__all__ = [
    # Version info
    "__version__",
    # Assembler
    "Assembler",
    "assemble",
    "assemble_file",
    "AssemblerConfig",
    # Exception hierarchy
    "TracsError",
    "AssemblerError",
    "AssemblyFailedError",
    "SourceReadError",
    "OutputWriteError",
    "MissingTerminatorError",
    "UndefinedLabelError",
    "IllegalLabelOperandError",
    "UnknownMnemonicError",
    "DuplicateLabelError",
    "MalformedLiteralError",
    "OriginError",
    "OperandRangeError",
]
