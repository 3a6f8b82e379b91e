"""
TRACS Assembler
===============

This package provides a two-pass assembler for the TRACS 8-bit CPU. It
converts assembly source into a textual machine-code listing with one
line of two addressed bytes per instruction.

Main Components
---------------
- **Assembler**: Main assembler class that orchestrates the assembly process
- **normalizer**: Strips comments and splits lines into label/operation/operand
- **opcodes**: The fixed instruction table
- **resolver**: Pass 1, origin handling and label addresses
- **Validator**: Operand, mnemonic and branch-label checks
- **Encoder**: Pass 2, byte encoding and label resolution

Assembly Process
----------------
1. **Normalize**: comments and blank lines removed, fields assigned
2. **Resolve (pass 1)**: origin read from ORG, labels bound to addresses,
   EOP presence checked
3. **Validate**: every line checked, all errors collected
4. **Encode (pass 2)**: two bytes per instruction, forward references
   resolved from the label table

Example Usage
-------------
>>> from tracs_asm.assembler import assemble
>>> print(assemble("WB 0x05\\nEOP"), end="")
0x00 0x30	0x01 0x05
0x02 0xf8	0x03 0x00
"""

from tracs_asm.assembler.assembler import (
    Assembler,
    assemble,
    assemble_file,
    write_file_atomic,
    write_files_atomic,
)
from tracs_asm.assembler.encoder import (
    EncodedInstruction,
    Encoder,
    encode,
    format_listing,
)
from tracs_asm.assembler.normalizer import (
    SourceLine,
    normalize_source,
    parse_line,
    read_source,
)
from tracs_asm.assembler.opcodes import (
    BRANCH_INSTRUCTIONS,
    INSTRUCTION_TABLE,
    MNEMONICS,
    InstructionSpec,
    lookup,
)
from tracs_asm.assembler.resolver import LabelEntry, Program, resolve
from tracs_asm.assembler.validator import (
    OperandKind,
    Validator,
    classify_operand,
    validate,
)

__all__ = [
    # Main class and functions
    "Assembler",
    "assemble",
    "assemble_file",
    "write_file_atomic",
    "write_files_atomic",
    # Normalizer
    "SourceLine",
    "normalize_source",
    "parse_line",
    "read_source",
    # Opcodes
    "InstructionSpec",
    "INSTRUCTION_TABLE",
    "MNEMONICS",
    "BRANCH_INSTRUCTIONS",
    "lookup",
    # Pass 1
    "LabelEntry",
    "Program",
    "resolve",
    # Validation
    "OperandKind",
    "Validator",
    "classify_operand",
    "validate",
    # Pass 2
    "EncodedInstruction",
    "Encoder",
    "encode",
    "format_listing",
]
