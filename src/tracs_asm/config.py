"""
TRACS Assembler - Configuration
===============================

Assembler settings. Configuration can come from:
- Default values (defined here)
- Environment variables
- Command-line options (which take precedence over both)
"""

from dataclasses import dataclass
from pathlib import Path
import os


TRUE_VALUES = ("1", "true", "yes", "on")


@dataclass
class AssemblerConfig:
    """
    Configuration for an assembly run.

    Attributes:
        default_source: Source file used when none is given (default: script.asm)
        output_filename: Listing file written when none is given
                         (default: translation.txt)
        strict_operand_range: Reject operand values wider than 8 bits
                              instead of truncating them (default: False)
        max_errors: Stop collecting errors after this many (default: 100)
    """

    default_source: Path = Path("script.asm")
    output_filename: Path = Path("translation.txt")
    strict_operand_range: bool = False
    max_errors: int = 100

    @classmethod
    def from_env(cls) -> "AssemblerConfig":
        """
        Create AssemblerConfig from environment variables.

        Environment variables (all optional):
            TRACSASM_SOURCE: Default source file
            TRACSASM_OUTPUT: Default listing file
            TRACSASM_STRICT: Strict operand range (1/true/yes/on)
            TRACSASM_MAX_ERRORS: Error limit (positive integer)

        Returns:
            AssemblerConfig with values from environment variables
        """
        config = cls()

        if source := os.environ.get("TRACSASM_SOURCE"):
            config.default_source = Path(source)

        if output := os.environ.get("TRACSASM_OUTPUT"):
            config.output_filename = Path(output)

        if strict := os.environ.get("TRACSASM_STRICT"):
            config.strict_operand_range = strict.strip().lower() in TRUE_VALUES

        if max_errors := os.environ.get("TRACSASM_MAX_ERRORS"):
            try:
                value = int(max_errors)
            except ValueError:
                value = 0  # Ignore invalid values
            if value > 0:
                config.max_errors = value

        return config
