"""
TRACS Operand Validator
=======================

Checks every instruction line of a resolved Program before any byte is
encoded. All checks run over the whole program and every failure is
collected, so a single run reports every offending line.

Operand Classes
---------------
| Operand      | Class     | Allowed on          |
|--------------|-----------|---------------------|
| (none)       | NONE      | any mnemonic        |
| 0x1F         | LITERAL   | any mnemonic        |
| END          | LABEL     | BR BRE BRNE BRGT BRLT only |
| 0x1G, 0x     | MALFORMED | never               |
| EDN          | UNKNOWN   | never               |

Checks, in reporting order:

1. Operand check: unknown labels and malformed literals
2. Instruction check: unknown mnemonics and label operands on non-branch
   mnemonics
3. Range check (strict mode only): operand values wider than 8 bits
"""

import logging
import string
from difflib import get_close_matches
from enum import Enum, auto
from typing import Optional

from tracs_asm.assembler.normalizer import SourceLine
from tracs_asm.assembler.opcodes import is_branch, lookup, suggest_mnemonics
from tracs_asm.assembler.resolver import Program
from tracs_asm.errors import (
    ErrorCollector,
    IllegalLabelOperandError,
    MalformedLiteralError,
    OperandRangeError,
    TooManyErrors,
    UndefinedLabelError,
    UnknownMnemonicError,
)

logger = logging.getLogger(__name__)

HEX_PREFIX = "0x"

_HEX_DIGITS = frozenset(string.hexdigits)


class OperandKind(Enum):
    """Classification of an operand field."""
    NONE = auto()       # No operand
    LITERAL = auto()    # Well-formed 0xHH literal
    LABEL = auto()      # Declared label
    MALFORMED = auto()  # 0x prefix without valid hex digits
    UNKNOWN = auto()    # Anything else: undeclared label

    def __str__(self) -> str:
        return self.name.lower()


# =============================================================================
# Operand Classification
# =============================================================================

def is_hex_literal(text: Optional[str]) -> bool:
    """True if text is "0x" followed by one or more hex digits."""
    if not text or not text.startswith(HEX_PREFIX):
        return False
    digits = text[len(HEX_PREFIX):]
    return bool(digits) and all(c in _HEX_DIGITS for c in digits)


def literal_value(text: str) -> int:
    """Numeric value of a well-formed hex literal."""
    return int(text[len(HEX_PREFIX):], 16)


def classify_operand(operand: Optional[str], program: Program) -> OperandKind:
    """
    Classify an operand against the program's label table.

    Anything carrying the "0x" prefix is a literal (or a malformed one),
    even when a label of the same name has been declared.
    """
    if not operand:
        return OperandKind.NONE
    if operand.startswith(HEX_PREFIX):
        return OperandKind.LITERAL if is_hex_literal(operand) else OperandKind.MALFORMED
    if program.has_label(operand):
        return OperandKind.LABEL
    return OperandKind.UNKNOWN


# =============================================================================
# Validator
# =============================================================================

class Validator:
    """
    Validates a resolved Program.

    Usage:
        validator = Validator(program)
        validator.validate()   # raises AssemblyFailedError on any error
    """

    def __init__(self, program: Program, strict: bool = False,
                 max_errors: int = 100):
        """
        Args:
            program: Output of pass 1
            strict: Reject operand values that do not fit in 8 bits
            max_errors: Stop collecting after this many errors
        """
        self._program = program
        self._strict = strict
        self._errors = ErrorCollector(max_errors=max_errors)

    @property
    def errors(self) -> ErrorCollector:
        return self._errors

    def validate(self) -> None:
        """
        Run every check over every line.

        Raises:
            AssemblyFailedError: If any check failed on any line
        """
        self._errors.clear()
        try:
            for line in self._program.lines:
                self._check_operand(line)
            for line in self._program.lines:
                self._check_instruction(line)
            if self._strict:
                for line in self._program.lines:
                    self._check_range(line)
        except TooManyErrors:
            pass

        if self._errors.has_errors():
            logger.debug(f"Validation found {self._errors.error_count()} errors")
        self._errors.raise_if_errors()

    def _check_operand(self, line: SourceLine) -> None:
        kind = classify_operand(line.operand, self._program)
        location = line.location(line.operand_column)

        if kind is OperandKind.UNKNOWN:
            similar = get_close_matches(
                line.operand, list(self._program.labels), n=3, cutoff=0.6
            )
            self._errors.add(UndefinedLabelError(
                line.operand, location, line.text, similar_labels=similar
            ))
        elif kind is OperandKind.MALFORMED:
            self._errors.add(MalformedLiteralError(line.operand, location, line.text))

    def _check_instruction(self, line: SourceLine) -> None:
        if lookup(line.operation) is None:
            column = line.operation_column or line.label_column
            self._errors.add(UnknownMnemonicError(
                line.operation,
                line.location(column),
                line.text,
                similar_mnemonics=suggest_mnemonics(line.operation) if line.operation else None,
            ))
            return

        kind = classify_operand(line.operand, self._program)
        if kind is OperandKind.LABEL and not is_branch(line.operation):
            self._errors.add(IllegalLabelOperandError(
                line.operation,
                line.operand,
                line.location(line.operand_column),
                line.text,
            ))

    def _check_range(self, line: SourceLine) -> None:
        kind = classify_operand(line.operand, self._program)
        if kind is OperandKind.LITERAL:
            value = literal_value(line.operand)
        elif kind is OperandKind.LABEL:
            value = self._program.label_address(line.operand)
        else:
            return

        if value > 0xFF:
            self._errors.add(OperandRangeError(
                line.operand, value, line.location(line.operand_column), line.text
            ))


def validate(program: Program, strict: bool = False, max_errors: int = 100) -> None:
    """
    Convenience function to validate a Program.

    Raises:
        AssemblyFailedError: If any check failed
    """
    Validator(program, strict=strict, max_errors=max_errors).validate()
