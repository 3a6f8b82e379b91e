"""
TRACS Instruction Set Definition
================================

This module defines the fixed instruction set of the TRACS 8-bit CPU.
Every instruction occupies one 2-address slot and assembles to exactly two
bytes: the opcode byte and a second byte carrying the operand.

Encoding Classes
----------------
Each mnemonic belongs to one of two encoding classes, selected by the
``has_encoded_operand`` flag:

1. **Encoded operand** (WM, RM, WIO, BR, BRE, BRNE, BRGT, BRLT):
   The opcode is shifted into the high byte of a 16-bit word and the
   operand value is OR-ed into the low byte. Branches replace the low
   byte with the target label's address.

   Example: WM 0x05 -> word $0805 -> bytes $08 $05

2. **Plain** (all other mnemonics):
   The opcode is emitted as-is and the second byte is resolved from the
   operand field (label address, literal value, or zero when empty).

   Example: WB 0x05 -> bytes $30 $05

Opcode Table
------------
| Mnemonic | Opcode | Encoded | Mnemonic | Opcode | Encoded |
|----------|--------|---------|----------|--------|---------|
| WB       | $30    | no      | SHL      | $B0    | no      |
| WM       | $08    | yes     | SHR      | $A8    | no      |
| RM       | $10    | yes     | BR       | $18    | yes     |
| WACC     | $48    | no      | BRE      | $A0    | yes     |
| WIB      | $38    | no      | BRNE     | $98    | yes     |
| WIO      | $28    | yes     | BRGT     | $90    | yes     |
| RACC     | $58    | no      | BRLT     | $88    | yes     |
| ADD      | $F0    | no      | EOP      | $F8    | no      |
| SUB      | $E8    | no      | SWAP     | $70    | no      |
| MUL      | $D8    | no      |          |        |         |
| AND      | $D0    | no      |          |        |         |
| OR       | $C8    | no      |          |        |         |
| NOT      | $C0    | no      |          |        |         |
| XOR      | $B8    | no      |          |        |         |
"""

from dataclasses import dataclass
from difflib import get_close_matches
from typing import Optional


# =============================================================================
# Instruction Information
# =============================================================================

@dataclass(frozen=True)
class InstructionSpec:
    """
    Static description of one mnemonic.

    Frozen so the shared table cannot be modified at runtime.

    Attributes:
        mnemonic: Instruction name as written in source (uppercase)
        opcode: The opcode byte
        has_encoded_operand: True if the operand is packed into the
                             low byte of an opcode-high 16-bit word
    """
    mnemonic: str
    opcode: int
    has_encoded_operand: bool

    def __repr__(self) -> str:
        return (
            f"InstructionSpec({self.mnemonic}, opcode=${self.opcode:02X}, "
            f"encoded={self.has_encoded_operand})"
        )


# =============================================================================
# Opcode Table
# =============================================================================
# Key: mnemonic
# Value: InstructionSpec(mnemonic, opcode, has_encoded_operand)
# =============================================================================

INSTRUCTION_TABLE: dict[str, InstructionSpec] = {
    spec.mnemonic: spec
    for spec in (
        # Memory and I/O
        InstructionSpec("WB", 0x30, False),     # Write byte
        InstructionSpec("WM", 0x08, True),      # Write memory
        InstructionSpec("RM", 0x10, True),      # Read memory
        InstructionSpec("WACC", 0x48, False),   # Write accumulator
        InstructionSpec("WIB", 0x38, False),    # Write input buffer
        InstructionSpec("WIO", 0x28, True),     # Write I/O
        InstructionSpec("RACC", 0x58, False),   # Read accumulator

        # Arithmetic and logic
        InstructionSpec("ADD", 0xF0, False),
        InstructionSpec("SUB", 0xE8, False),
        InstructionSpec("MUL", 0xD8, False),
        InstructionSpec("AND", 0xD0, False),
        InstructionSpec("OR", 0xC8, False),
        InstructionSpec("NOT", 0xC0, False),
        InstructionSpec("XOR", 0xB8, False),
        InstructionSpec("SHL", 0xB0, False),
        InstructionSpec("SHR", 0xA8, False),

        # Branches
        InstructionSpec("BR", 0x18, True),      # Unconditional
        InstructionSpec("BRE", 0xA0, True),     # Equal
        InstructionSpec("BRNE", 0x98, True),    # Not equal
        InstructionSpec("BRGT", 0x90, True),    # Greater than
        InstructionSpec("BRLT", 0x88, True),    # Less than

        # Control
        InstructionSpec("EOP", 0xF8, False),    # End of program
        InstructionSpec("SWAP", 0x70, False),
    )
}

# All valid mnemonics
MNEMONICS: frozenset[str] = frozenset(INSTRUCTION_TABLE)

# The only mnemonics that may take a label operand
BRANCH_INSTRUCTIONS: frozenset[str] = frozenset({"BR", "BRE", "BRNE", "BRGT", "BRLT"})

# End-of-program marker
EOP_MNEMONIC = "EOP"


# =============================================================================
# Lookup Functions
# =============================================================================

def lookup(mnemonic: str) -> Optional[InstructionSpec]:
    """
    Look up a mnemonic in the instruction table.

    Args:
        mnemonic: Instruction name (case-sensitive)

    Returns:
        The InstructionSpec, or None if the mnemonic is unknown
    """
    return INSTRUCTION_TABLE.get(mnemonic)


def is_mnemonic(token: str) -> bool:
    """Check if a token is a known mnemonic."""
    return token in INSTRUCTION_TABLE


def is_branch(mnemonic: str) -> bool:
    """Check if a mnemonic is one of the label-taking branch forms."""
    return mnemonic in BRANCH_INSTRUCTIONS


def suggest_mnemonics(token: str) -> list[str]:
    """Return known mnemonics that look like a misspelling of token."""
    return get_close_matches(token.upper(), sorted(MNEMONICS), n=3, cutoff=0.6)
