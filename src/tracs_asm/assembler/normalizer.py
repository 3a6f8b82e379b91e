"""
TRACS Assembly Line Normalizer
==============================

This module turns raw assembly text into an ordered list of SourceLine
records, one per instruction line. It is the first stage of the pipeline:

    normalizer -> resolver (pass 1) -> validator -> encoder (pass 2)

Line Grammar
------------
    [LABEL] OPERATION [OPERAND]    ; optional comment

Fields are separated by any horizontal whitespace. A line is parsed with a
one-token lookahead:

- If the first token is a known mnemonic, it is the operation and the line
  has no label:  ``BR END``  ->  (None, "BR", "END")
- Otherwise the first token is a label and the following tokens are the
  operation and operand:  ``START WB 0x05``  ->  ("START", "WB", "0x05")

The origin directive parses as an ordinary labelled line whose label is
``ORG``:  ``ORG 0x100``  ->  ("ORG", "0x100", None)

Comments start at ``;`` and run to end of line. Blank and comment-only
lines are dropped.
"""

import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, Optional

from tracs_asm.assembler.opcodes import is_mnemonic
from tracs_asm.errors import SourceLocation, SourceReadError

logger = logging.getLogger(__name__)

COMMENT_CHAR = ";"

_TOKEN_RE = re.compile(r"\S+")


# =============================================================================
# Source Line
# =============================================================================

@dataclass(frozen=True)
class SourceLine:
    """
    One logical instruction line.

    Attributes:
        label: Label declared on this line, or None
        operation: Mnemonic (or the ORG value on an origin line)
        operand: Label name, "0xHH" literal, or None
        line_number: Physical line number in the source (1-indexed)
        text: Source text with the comment removed, for diagnostics
        filename: Source filename for diagnostics
        label_column: Column of the label token (0 if absent)
        operation_column: Column of the operation token (0 if absent)
        operand_column: Column of the operand token (0 if absent)
    """
    label: Optional[str]
    operation: str
    operand: Optional[str] = None
    line_number: int = 0
    text: str = ""
    filename: str = "<input>"
    label_column: int = 0
    operation_column: int = 0
    operand_column: int = 0

    @property
    def is_origin(self) -> bool:
        """True if this line is an ORG directive."""
        return self.label == "ORG"

    def location(self, column: int = 0) -> SourceLocation:
        """Build a SourceLocation pointing into this line."""
        return SourceLocation(self.filename, self.line_number, column)

    def __str__(self) -> str:
        return (
            f"Label: {self.label or ''}, Operation: {self.operation}, "
            f"Operand: {self.operand or ''}"
        )


# =============================================================================
# Line Processing
# =============================================================================

def strip_comment(line: str) -> str:
    """Remove everything from the comment marker to end of line."""
    index = line.find(COMMENT_CHAR)
    if index >= 0:
        return line[:index]
    return line


def parse_line(text: str, line_number: int = 0,
               filename: str = "<input>") -> Optional[SourceLine]:
    """
    Parse one physical line into a SourceLine.

    Args:
        text: Raw line text (may include a comment and line terminator)
        line_number: Physical line number for diagnostics
        filename: Source filename for diagnostics

    Returns:
        The parsed line, or None if the line is blank after stripping
    """
    body = strip_comment(text).rstrip()
    tokens = [(m.group(), m.start() + 1) for m in _TOKEN_RE.finditer(body)]
    if not tokens:
        return None

    label = None
    label_column = 0
    first, first_column = tokens[0]
    if is_mnemonic(first):
        fields = tokens
    else:
        label, label_column = first, first_column
        fields = tokens[1:]

    operation, operation_column = fields[0] if fields else ("", 0)
    operand, operand_column = fields[1] if len(fields) > 1 else (None, 0)

    if len(fields) > 2:
        extra = " ".join(token for token, _ in fields[2:])
        logger.warning(f"{filename}:{line_number}: ignoring extra tokens '{extra}'")

    return SourceLine(
        label=label,
        operation=operation,
        operand=operand,
        line_number=line_number,
        text=body,
        filename=filename,
        label_column=label_column,
        operation_column=operation_column,
        operand_column=operand_column,
    )


def iter_lines(source: str, filename: str = "<input>") -> Iterator[SourceLine]:
    """Yield a SourceLine for every non-blank line of source."""
    for line_number, text in enumerate(source.splitlines(), start=1):
        line = parse_line(text, line_number, filename)
        if line is not None:
            yield line


def normalize_source(source: str, filename: str = "<input>") -> list[SourceLine]:
    """
    Normalize assembly source into an ordered list of SourceLine.

    Args:
        source: Complete assembly source text
        filename: Source filename for diagnostics

    Returns:
        Lines in program order, blank and comment-only lines removed
    """
    lines = list(iter_lines(source, filename))
    logger.debug(f"Normalized {len(lines)} lines from {filename}")
    for line in lines:
        logger.debug(f"  {line}")
    return lines


def read_source(filepath: str | Path) -> str:
    """
    Read an assembly source file.

    Raises:
        SourceReadError: If the file cannot be opened or decoded
    """
    filepath = Path(filepath)
    try:
        return filepath.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise SourceReadError(str(filepath), getattr(e, "strerror", None) or str(e)) from e
