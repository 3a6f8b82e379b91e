"""
TRACS Encoder (Pass 2)
======================

Pass 2 turns a validated Program into machine code. Every instruction
line produces exactly one EncodedInstruction of two bytes, starting at the
program origin and advancing by 2 per instruction.

Encoding Rules
--------------
Encoded-operand mnemonics (WM, RM, WIO and the branches) pack the opcode
into the high byte of a 16-bit word and the operand into the low byte:

    word  = (opcode << 8) | (operand & 0xFF)
    byte0 = word >> 8
    byte1 = word & 0xFF

For a branch whose operand is a label, the low byte is the label's
address, which is how forward and backward references are resolved.

Plain mnemonics emit the opcode as byte0, and byte1 is the label address,
the literal value, or 0 when there is no operand.

Operand values are 8 bits wide. Wider values are truncated to the low byte
with a warning (strict mode rejects them during validation instead).

Listing Format
--------------
One line per instruction, addresses and bytes in two-digit lowercase hex:

    0x00 0x30	0x01 0x05
"""

import logging
from dataclasses import dataclass
from typing import Optional

from tracs_asm.assembler.normalizer import SourceLine
from tracs_asm.assembler.opcodes import is_branch, lookup
from tracs_asm.assembler.resolver import Program
from tracs_asm.assembler.validator import OperandKind, classify_operand, literal_value

logger = logging.getLogger(__name__)


# =============================================================================
# Encoded Instruction
# =============================================================================

@dataclass(frozen=True)
class EncodedInstruction:
    """
    Two bytes of machine code at a fixed address.

    Attributes:
        address: Address of byte0 (byte1 lives at address + 1)
        byte0: Opcode byte (high byte of the instruction word)
        byte1: Operand byte (low byte of the instruction word)
        line: Source line this was assembled from
    """
    address: int
    byte0: int
    byte1: int
    line: Optional[SourceLine] = None

    @property
    def word(self) -> int:
        """The instruction as a 16-bit word (byte0 high)."""
        return (self.byte0 << 8) | self.byte1

    def to_bytes(self) -> bytes:
        return bytes((self.byte0, self.byte1))

    def format(self) -> str:
        """Format as a listing line (without the trailing newline)."""
        return (
            f"0x{self.address:02x} 0x{self.byte0:02x}\t"
            f"0x{self.address + 1:02x} 0x{self.byte1:02x}"
        )

    def __str__(self) -> str:
        return self.format()


# =============================================================================
# Encoder
# =============================================================================

class Encoder:
    """
    Generates machine code from a validated Program.

    Usage:
        encoder = Encoder(program)
        instructions = encoder.encode()
    """

    def __init__(self, program: Program):
        self._program = program
        self._output: list[EncodedInstruction] = []
        self._problems: list[str] = []

    @property
    def problems(self) -> list[str]:
        """Lines that could not be encoded, as human-readable messages."""
        return list(self._problems)

    def encode(self) -> list[EncodedInstruction]:
        """
        Encode every instruction line in program order.

        Returns:
            One EncodedInstruction per encodable line
        """
        self._output.clear()
        self._problems.clear()

        for index, line in enumerate(self._program.lines):
            address = self._program.address_of(index)
            encoded = self._encode_line(line, address)
            if encoded is not None:
                self._output.append(encoded)
                logger.debug(f"{encoded.format()}    {line.text}")

        return list(self._output)

    def _encode_line(self, line: SourceLine, address: int) -> Optional[EncodedInstruction]:
        spec = lookup(line.operation)
        if spec is None:
            self._report(line, f"Invalid instruction: {line.operation}")
            return None

        kind = classify_operand(line.operand, self._program)

        if spec.has_encoded_operand:
            if is_branch(line.operation) and kind is OperandKind.LABEL:
                target = self._program.label_address(line.operand)
                return EncodedInstruction(
                    address, spec.opcode, self._low_byte(target, line), line
                )

            value = literal_value(line.operand) if kind is OperandKind.LITERAL else 0
            word = (spec.opcode << 8) | self._low_byte(value, line)
            return EncodedInstruction(address, (word >> 8) & 0xFF, word & 0xFF, line)

        if kind is OperandKind.LABEL:
            operand = self._program.label_address(line.operand)
        elif kind is OperandKind.NONE:
            operand = 0
        elif kind is OperandKind.LITERAL:
            operand = literal_value(line.operand)
        else:
            self._report(
                line, f"Unknown Label: {line.operand} Writing opcode {line.operation}"
            )
            return None

        return EncodedInstruction(address, spec.opcode, self._low_byte(operand, line), line)

    def _low_byte(self, value: int, line: SourceLine) -> int:
        if value > 0xFF:
            logger.warning(
                f"{line.location(line.operand_column)}: operand '{line.operand}' "
                f"(0x{value:X}) truncated to 0x{value & 0xFF:02X}"
            )
        return value & 0xFF

    def _report(self, line: SourceLine, message: str) -> None:
        logger.error(f"{line.location()}: {message}")
        self._problems.append(message)


def encode(program: Program) -> list[EncodedInstruction]:
    """Convenience function to encode a validated Program."""
    return Encoder(program).encode()


def format_listing(instructions: list[EncodedInstruction]) -> str:
    """Format encoded instructions as listing text, one newline-terminated line each."""
    return "".join(f"{inst.format()}\n" for inst in instructions)
