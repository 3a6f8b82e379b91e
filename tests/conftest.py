"""
TRACS Assembler - Test Configuration
====================================

Shared fixtures for the assembler test suite.
"""

import logging

import pytest

from tracs_asm.assembler import Assembler


EXAMPLE_PROGRAM = """\
ORG 0x000
START WB 0x05
      BR END
END   EOP
"""


@pytest.fixture
def assembler():
    """A fresh assembler with default configuration."""
    return Assembler()


@pytest.fixture
def example_source():
    """The reference three-instruction program."""
    return EXAMPLE_PROGRAM


@pytest.fixture(autouse=True)
def restore_root_logging():
    """Undo logging.basicConfig(force=True) calls made by CLI tests."""
    root = logging.getLogger()
    handlers = root.handlers[:]
    level = root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)
