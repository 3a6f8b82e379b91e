"""
TRACS Assembler Error Hierarchy
===============================

This module defines the exception hierarchy for the TRACS assembler.
All exceptions inherit from TracsError, allowing callers to catch every
assembler-related failure with a single except clause if desired.

Exception Hierarchy
-------------------
TracsError (base)
└── AssemblerError (assembler-related)
    ├── SourceReadError - source file cannot be opened or read
    ├── OutputWriteError - output file cannot be written
    ├── MissingTerminatorError - no EOP marker in the program
    ├── UndefinedLabelError - operand names a label that was never declared
    ├── IllegalLabelOperandError - label operand on a non-branch mnemonic
    ├── UnknownMnemonicError - operation is not in the instruction table
    ├── DuplicateLabelError - label declared more than once
    ├── MalformedLiteralError - "0x" operand with non-hex digits
    ├── OriginError - ORG value is not a number
    ├── OperandRangeError - operand wider than 8 bits (strict mode)
    ├── AssemblyFailedError - batch of collected errors
    └── TooManyErrors - error collector limit reached

Error messages follow this format:
    filename:line:column: error: description
        source_line_text
        ^
    hint: suggestion for fixing (when available)
"""

from dataclasses import dataclass
from typing import Optional


# =============================================================================
# Base Exception Class
# =============================================================================

class TracsError(Exception):
    """
    Base exception for all TRACS assembler errors.

        try:
            assembler.assemble_file("script.asm")
        except TracsError as e:
            print(f"Error: {e}")
    """
    pass


# =============================================================================
# Source Location Tracking
# =============================================================================

@dataclass(frozen=True)
class SourceLocation:
    """
    Represents a location in source code for error reporting.

    Attributes:
        filename: Name of the source file (or "<input>" for string input)
        line: Line number (1-indexed)
        column: Column number (1-indexed, 0 when unknown)
    """
    filename: str
    line: int
    column: int = 0

    def __str__(self) -> str:
        """Format as 'filename:line:column' for error messages."""
        if self.column:
            return f"{self.filename}:{self.line}:{self.column}"
        return f"{self.filename}:{self.line}"


# =============================================================================
# Assembler Exceptions
# =============================================================================

class AssemblerError(TracsError):
    """
    Base exception for all assembler-related errors.

    Attributes:
        message: The error description
        location: Where in the source the error occurred (optional)
        hint: A suggestion for fixing the error (optional)
        source_line: The actual source text at the error location (optional)
    """

    def __init__(
        self,
        message: str,
        location: Optional[SourceLocation] = None,
        hint: Optional[str] = None,
        source_line: Optional[str] = None,
    ):
        self.message = message
        self.location = location
        self.hint = hint
        self.source_line = source_line
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """
        Format the error message with location, source context, and hint.

        Example output:
            script.asm:3:12: error: unknown label 'EDN'
                BR EDN
                   ^
            hint: did you mean 'END'?
        """
        parts = []

        if self.location:
            parts.append(f"{self.location}: error: {self.message}")
        else:
            parts.append(f"error: {self.message}")

        if self.source_line is not None and self.location is not None:
            parts.append(f"    {self.source_line}")
            if self.location.column > 0:
                padding = " " * (4 + self.location.column - 1)
                parts.append(f"{padding}^")

        if self.hint:
            parts.append(f"hint: {self.hint}")

        return "\n".join(parts)


class SourceReadError(AssemblerError):
    """
    The assembly source cannot be opened or read.

    Raised before any pass runs; no output is produced.
    """

    def __init__(self, filename: str, reason: str):
        self.filename = filename
        self.reason = reason
        super().__init__(f"cannot read source '{filename}': {reason}")


class OutputWriteError(AssemblerError):
    """
    The destination output cannot be opened for writing.

    The assembler never leaves a partially written output file behind
    when this is raised.
    """

    def __init__(self, filename: str, reason: str):
        self.filename = filename
        self.reason = reason
        super().__init__(f"cannot write output '{filename}': {reason}")


class MissingTerminatorError(AssemblerError):
    """
    No line of the program carries the EOP end-of-program marker.

    EOP must appear as either the label or the operation of at least one
    instruction line. Assembly aborts immediately.
    """

    def __init__(self, filename: str = "<input>"):
        self.filename = filename
        super().__init__(
            f"{filename}: missing end-of-program marker 'EOP'",
            hint="terminate the program with an EOP instruction",
        )


class UndefinedLabelError(AssemblerError):
    """
    An operand is neither empty, a hex literal, nor a declared label.

    Close matches from the label table are offered as a hint, which
    catches most typos.
    """

    def __init__(
        self,
        label: str,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
        similar_labels: Optional[list[str]] = None,
    ):
        self.label = label
        self.similar_labels = similar_labels or []

        hint = None
        if self.similar_labels:
            suggestions = ", ".join(f"'{s}'" for s in self.similar_labels[:3])
            hint = f"did you mean {suggestions}?"

        super().__init__(
            f"unknown label '{label}'",
            location=location,
            hint=hint,
            source_line=source_line,
        )


class IllegalLabelOperandError(AssemblerError):
    """
    A label is used as the operand of a mnemonic that cannot take one.

    Only the branch mnemonics (BR, BRE, BRNE, BRGT, BRLT) accept a label
    operand. Everything else takes a hex literal or nothing.

    Example:
        ADD myLabel   ; Error: ADD is not a branch instruction
    """

    def __init__(
        self,
        mnemonic: str,
        label: str,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        self.mnemonic = mnemonic
        self.label = label
        super().__init__(
            f"invalid operand for instruction '{mnemonic}': "
            f"label '{label}' is only allowed on branch instructions",
            location=location,
            hint="use a 0xHH literal, or a branch mnemonic (BR, BRE, BRNE, BRGT, BRLT)",
            source_line=source_line,
        )


class UnknownMnemonicError(AssemblerError):
    """The operation field does not match any entry in the instruction table."""

    def __init__(
        self,
        mnemonic: str,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
        similar_mnemonics: Optional[list[str]] = None,
    ):
        self.mnemonic = mnemonic
        self.similar_mnemonics = similar_mnemonics or []

        hint = None
        if self.similar_mnemonics:
            suggestions = ", ".join(f"'{s}'" for s in self.similar_mnemonics[:3])
            hint = f"did you mean {suggestions}?"

        if mnemonic:
            message = f"invalid instruction '{mnemonic}'"
        else:
            message = "missing instruction"
            hint = hint or "a label must be followed by an instruction on the same line"

        super().__init__(
            message,
            location=location,
            hint=hint,
            source_line=source_line,
        )


class DuplicateLabelError(AssemblerError):
    """
    Label declared more than once.

    Includes the location of the first declaration in the hint.
    """

    def __init__(
        self,
        label: str,
        location: Optional[SourceLocation] = None,
        original_location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        self.label = label
        self.original_location = original_location

        hint = None
        if original_location:
            hint = f"'{label}' was first defined at {original_location}"

        super().__init__(
            f"duplicate label '{label}'",
            location=location,
            hint=hint,
            source_line=source_line,
        )


class MalformedLiteralError(AssemblerError):
    """
    Operand starts with the "0x" prefix but is not a valid hex literal.

    Examples:
        WB 0x       ; no digits
        WB 0x1G     ; 'G' is not a hex digit
    """

    def __init__(
        self,
        literal: str,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        self.literal = literal
        super().__init__(
            f"malformed hex literal '{literal}'",
            location=location,
            hint="hex literals are written as 0x followed by hex digits, e.g. 0x1F",
            source_line=source_line,
        )


class OriginError(AssemblerError):
    """The value given to the ORG directive is not a decimal or 0x-hex number."""

    def __init__(
        self,
        value: str,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        self.value = value
        super().__init__(
            f"invalid ORG address '{value}'",
            location=location,
            hint="use a decimal value (256) or a hex value (0x100)",
            source_line=source_line,
        )


class OperandRangeError(AssemblerError):
    """
    Operand value does not fit in the 8-bit second byte.

    Only raised in strict mode; otherwise the value is truncated to its
    low byte and a warning is logged.
    """

    def __init__(
        self,
        operand: str,
        value: int,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        self.operand = operand
        self.value = value
        super().__init__(
            f"operand '{operand}' (0x{value:X}) does not fit in 8 bits",
            location=location,
            source_line=source_line,
        )


class AssemblyFailedError(AssemblerError):
    """
    One or more errors were collected during a batch pass.

    Attributes:
        errors: The individual errors, in the order they were found
    """

    def __init__(self, errors: list[AssemblerError], report: str):
        self.errors = list(errors)
        count = len(self.errors)
        word = "error" if count == 1 else "errors"
        super().__init__(f"assembly failed with {count} {word}:\n\n{report}")


# =============================================================================
# Error Collection for Multiple Error Reporting
# =============================================================================

class ErrorCollector:
    """
    Collects multiple errors for batch reporting.

    The resolver and validator use this to keep scanning after an error
    so every offending line is reported in one run.

    Example:
        collector = ErrorCollector(max_errors=100)
        collector.add(UndefinedLabelError(...))
        collector.raise_if_errors()
    """

    def __init__(self, max_errors: int = 100):
        """
        Initialize the error collector.

        Args:
            max_errors: Maximum errors to collect before raising TooManyErrors
        """
        self.errors: list[AssemblerError] = []
        self.max_errors = max_errors

    def add(self, error: AssemblerError) -> None:
        """
        Add an error to the collection.

        Raises:
            TooManyErrors: If max_errors has been reached
        """
        self.errors.append(error)
        if len(self.errors) >= self.max_errors:
            raise TooManyErrors(f"too many errors ({self.max_errors}), stopping")

    def has_errors(self) -> bool:
        """Return True if any errors have been collected."""
        return len(self.errors) > 0

    def error_count(self) -> int:
        """Return the number of collected errors."""
        return len(self.errors)

    def report(self) -> str:
        """Format all errors for display, followed by a count."""
        lines = []
        for error in self.errors:
            lines.append(str(error))
            lines.append("")

        error_word = "error" if len(self.errors) == 1 else "errors"
        lines.append(f"{len(self.errors)} {error_word}")
        return "\n".join(lines)

    def raise_if_errors(self) -> None:
        """
        Raise AssemblyFailedError if anything was collected.

        Raises:
            AssemblyFailedError: Carrying every collected error
        """
        if self.has_errors():
            raise AssemblyFailedError(self.errors, self.report())

    def clear(self) -> None:
        """Clear all collected errors."""
        self.errors.clear()


class TooManyErrors(AssemblerError):
    """
    Raised when too many errors have been encountered.

    This prevents a badly broken source from flooding the console.
    """

    def __init__(self, message: str = "too many errors"):
        super().__init__(message)
