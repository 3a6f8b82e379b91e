"""
TRACS Address Resolver (Pass 1)
===============================

Pass 1 assigns an address to every instruction line and builds the label
table used by validation and encoding.

Addressing Model
----------------
Every instruction occupies one 2-unit slot, whatever its encoding, so the
n-th instruction line (0-indexed) lives at ``origin + 2 * n``. A label
declared on a line is bound to that line's address.

Origin
------
If the first normalized line is ``ORG <value>`` it sets the origin and is
not itself an instruction. ``<value>`` is decimal (``256``) or hex with a
``0x`` prefix (``0x100``). Without an ORG line the origin is 0.

Termination
-----------
At least one instruction line must carry ``EOP`` as its label or
operation. A program without it is rejected before anything else is
checked.
"""

import logging
from dataclasses import dataclass, field
from typing import Optional

from tracs_asm.assembler.normalizer import SourceLine
from tracs_asm.assembler.opcodes import EOP_MNEMONIC
from tracs_asm.errors import (
    AssemblerError,
    DuplicateLabelError,
    ErrorCollector,
    MissingTerminatorError,
    OriginError,
    TooManyErrors,
)

logger = logging.getLogger(__name__)

# Address units consumed by one instruction
INSTRUCTION_SIZE = 2

# Highest address in the 16-bit address space
MAX_ADDRESS = 0xFFFF


# =============================================================================
# Data Model
# =============================================================================

@dataclass(frozen=True)
class LabelEntry:
    """
    Label table entry.

    Attributes:
        name: Label name as declared
        address: Address of the line that declares it
        line: The declaring line, for diagnostics
    """
    name: str
    address: int
    line: Optional[SourceLine] = None


@dataclass
class Program:
    """
    A normalized, address-resolved program.

    Attributes:
        lines: Instruction lines in program order (ORG line excluded)
        labels: Label table, keyed by name
        origin: Base address of the first instruction
        origin_line: The ORG line, if the program has one
        filename: Source filename for diagnostics
    """
    lines: list[SourceLine]
    labels: dict[str, LabelEntry] = field(default_factory=dict)
    origin: int = 0
    origin_line: Optional[SourceLine] = None
    filename: str = "<input>"

    def address_of(self, index: int) -> int:
        """Address of the instruction at position index."""
        return self.origin + INSTRUCTION_SIZE * index

    def label_address(self, name: str) -> Optional[int]:
        """Resolved address of a label, or None if it is not declared."""
        entry = self.labels.get(name)
        return entry.address if entry is not None else None

    def has_label(self, name: Optional[str]) -> bool:
        """Check if name is a declared label."""
        return name is not None and name in self.labels

    def symbols(self) -> dict[str, int]:
        """Label table as a plain name -> address mapping."""
        return {name: entry.address for name, entry in self.labels.items()}


# =============================================================================
# Origin Handling
# =============================================================================

def parse_number(text: str) -> int:
    """
    Parse a decimal or 0x-prefixed hex number.

    Raises:
        ValueError: If text is not a non-negative number in either form
    """
    if text[:2].lower() == "0x":
        digits, base = text[2:], 16
    else:
        digits, base = text, 10
    if not digits or not digits.isalnum():
        raise ValueError(f"not a number: {text!r}")
    return int(digits, base)


def parse_origin(line: SourceLine) -> int:
    """
    Parse the address of an ORG line.

    Raises:
        OriginError: If the value is missing, malformed, or out of range
    """
    value = line.operation
    try:
        origin = parse_number(value)
    except ValueError:
        raise OriginError(value, line.location(line.operation_column), line.text) from None
    if origin > MAX_ADDRESS:
        raise OriginError(value, line.location(line.operation_column), line.text)
    return origin


# =============================================================================
# Pass 1
# =============================================================================

def has_terminator(lines: list[SourceLine]) -> bool:
    """True if any line carries EOP as its label or operation."""
    return any(
        line.label == EOP_MNEMONIC or line.operation == EOP_MNEMONIC
        for line in lines
    )


def resolve(lines: list[SourceLine], filename: str = "<input>",
            max_errors: int = 100) -> Program:
    """
    Run pass 1 over normalized lines.

    Args:
        lines: Output of the normalizer, in program order
        filename: Source filename for diagnostics
        max_errors: Limit for batch-collected duplicate label errors

    Returns:
        The resolved Program

    Raises:
        OriginError: If the ORG value cannot be parsed
        MissingTerminatorError: If no line carries EOP
        AssemblyFailedError: If any label is declared more than once
    """
    origin = 0
    origin_line = None
    if lines and lines[0].is_origin:
        origin_line = lines[0]
        origin = parse_origin(origin_line)
        lines = lines[1:]

    if not has_terminator(lines):
        raise MissingTerminatorError(filename)

    program = Program(
        lines=list(lines),
        origin=origin,
        origin_line=origin_line,
        filename=filename,
    )

    last_address = program.address_of(len(lines)) - 1
    if lines and last_address > MAX_ADDRESS:
        raise AssemblerError(
            f"program does not fit in the address space "
            f"(ends at 0x{last_address:X}, limit 0x{MAX_ADDRESS:X})"
        )

    errors = ErrorCollector(max_errors=max_errors)
    try:
        for index, line in enumerate(program.lines):
            if not line.label:
                continue
            address = program.address_of(index)
            existing = program.labels.get(line.label)
            if existing is not None:
                errors.add(DuplicateLabelError(
                    line.label,
                    location=line.location(line.label_column),
                    original_location=existing.line.location(existing.line.label_column),
                    source_line=line.text,
                ))
                continue
            program.labels[line.label] = LabelEntry(line.label, address, line)
    except TooManyErrors:
        pass
    errors.raise_if_errors()

    logger.debug(f"Origin 0x{origin:03X}, {len(program.lines)} instructions")
    for entry in program.labels.values():
        logger.debug(f"Label: {entry.name}, Address: {entry.address:x}")

    return program
