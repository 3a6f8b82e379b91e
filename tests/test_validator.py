# =============================================================================
# test_validator.py - Operand Validator Unit Tests
# =============================================================================
# Tests for operand classification and the batch validation checks.
#
# Test coverage includes:
#   - Hex literal recognition
#   - Operand classification against the label table
#   - Unknown labels, malformed literals, unknown mnemonics
#   - Label operands on non-branch mnemonics
#   - Batch reporting across the whole program
#   - Strict operand range checking
# =============================================================================

import pytest

from tracs_asm.assembler.normalizer import normalize_source
from tracs_asm.assembler.resolver import Program, resolve
from tracs_asm.assembler.validator import (
    OperandKind,
    classify_operand,
    is_hex_literal,
    literal_value,
    validate,
)
from tracs_asm.errors import (
    AssemblyFailedError,
    ErrorCollector,
    IllegalLabelOperandError,
    MalformedLiteralError,
    OperandRangeError,
    TooManyErrors,
    UndefinedLabelError,
    UnknownMnemonicError,
)


def resolve_source(source: str) -> Program:
    """Helper to normalize and resolve source in one step."""
    return resolve(normalize_source(source, "<test>"), "<test>")


def validation_errors(source: str, strict: bool = False) -> list:
    """Helper returning the errors collected while validating source."""
    program = resolve_source(source)
    with pytest.raises(AssemblyFailedError) as exc_info:
        validate(program, strict=strict)
    return exc_info.value.errors


# =============================================================================
# Classification Tests
# =============================================================================

class TestClassification:
    """Test operand classification."""

    @pytest.mark.parametrize("text", ["0x0", "0x05", "0xFF", "0xabc", "0x1F2e"])
    def test_hex_literals(self, text):
        assert is_hex_literal(text)

    @pytest.mark.parametrize("text", [None, "", "0x", "0xG1", "05", "x05", "0X05", "END"])
    def test_not_hex_literals(self, text):
        assert not is_hex_literal(text)

    def test_literal_value(self):
        assert literal_value("0x05") == 5
        assert literal_value("0xff") == 255

    def test_classify(self):
        program = resolve_source("END EOP")
        assert classify_operand(None, program) is OperandKind.NONE
        assert classify_operand("", program) is OperandKind.NONE
        assert classify_operand("0x10", program) is OperandKind.LITERAL
        assert classify_operand("END", program) is OperandKind.LABEL
        assert classify_operand("0xQ", program) is OperandKind.MALFORMED
        assert classify_operand("NOPE", program) is OperandKind.UNKNOWN

    def test_hex_prefix_wins_over_label(self):
        program = resolve_source("0x10 WB 0x01\n0xZZ ADD\nEOP")
        assert program.has_label("0x10")
        assert classify_operand("0x10", program) is OperandKind.LITERAL
        assert classify_operand("0xZZ", program) is OperandKind.MALFORMED

    def test_kind_str(self):
        assert str(OperandKind.LABEL) == "label"


# =============================================================================
# Valid Program Tests
# =============================================================================

class TestValidPrograms:
    """Programs that pass validation."""

    def test_example_program(self, example_source):
        validate(resolve(normalize_source(example_source)))

    def test_every_branch_takes_a_label(self):
        source = "TOP BR TOP\nBRE TOP\nBRNE TOP\nBRGT TOP\nBRLT TOP\nEOP"
        validate(resolve_source(source))

    def test_literal_on_any_mnemonic(self):
        validate(resolve_source("WB 0x01\nADD 0x02\nBR 0x00\nEOP"))

    def test_hex_named_label_does_not_capture_literal(self):
        validate(resolve_source("0x10 WB 0x01\nWB 0x10\nEOP"))

    def test_no_operand(self):
        validate(resolve_source("ADD\nSWAP\nEOP"))


# =============================================================================
# Error Detection Tests
# =============================================================================

class TestErrors:
    """Test each error kind."""

    def test_unknown_label(self):
        errors = validation_errors("WB FOO\nEOP")
        assert len(errors) == 1
        assert isinstance(errors[0], UndefinedLabelError)
        assert errors[0].label == "FOO"
        assert errors[0].location.line == 1
        assert errors[0].location.column == 4

    def test_unknown_label_suggestion(self):
        errors = validation_errors("BR EDN\nEND EOP")
        assert errors[0].similar_labels == ["END"]
        assert "did you mean 'END'?" in str(errors[0])

    def test_malformed_literal(self):
        errors = validation_errors("WB 0x1G\nWM 0x\nEOP")
        assert [type(e) for e in errors] == [MalformedLiteralError, MalformedLiteralError]
        assert [e.literal for e in errors] == ["0x1G", "0x"]

    def test_illegal_label_operand(self):
        errors = validation_errors("myLabel WB 0x01\nADD myLabel\nEOP")
        assert len(errors) == 1
        assert isinstance(errors[0], IllegalLabelOperandError)
        assert errors[0].mnemonic == "ADD"
        assert errors[0].label == "myLabel"

    def test_branch_with_same_label_is_fine(self):
        validate(resolve_source("myLabel WB 0x01\nBR myLabel\nEOP"))

    def test_encoded_non_branch_rejects_label(self):
        """WM has an encoded operand but is not a branch."""
        errors = validation_errors("HERE WM HERE\nEOP")
        assert isinstance(errors[0], IllegalLabelOperandError)

    def test_unknown_mnemonic(self):
        errors = validation_errors("START FOO 0x01\nEOP")
        assert len(errors) == 1
        assert isinstance(errors[0], UnknownMnemonicError)
        assert errors[0].mnemonic == "FOO"

    def test_unknown_mnemonic_suggestion(self):
        errors = validation_errors("START ADDD\nEOP")
        assert "ADD" in errors[0].similar_mnemonics

    def test_label_without_instruction(self):
        errors = validation_errors("LONELY\nEOP")
        assert isinstance(errors[0], UnknownMnemonicError)
        assert errors[0].mnemonic == ""
        assert "missing instruction" in str(errors[0])


# =============================================================================
# Batch Reporting Tests
# =============================================================================

class TestBatchReporting:
    """Every offending line is reported, not just the first."""

    def test_all_unknown_labels_reported(self):
        errors = validation_errors("BR A\nBR B\nBR C\nEOP")
        assert [e.label for e in errors] == ["A", "B", "C"]

    def test_mixed_errors_in_reporting_order(self):
        source = "A WB 0x01\nWB NOPE\nADD A\nXYZ Q\nEOP"
        errors = validation_errors(source)
        assert [type(e) for e in errors] == [
            UndefinedLabelError,
            IllegalLabelOperandError,
            UnknownMnemonicError,
        ]

    def test_report_message(self):
        program = resolve_source("BR A\nBR B\nEOP")
        with pytest.raises(AssemblyFailedError) as exc_info:
            validate(program)
        message = str(exc_info.value)
        assert "2 errors" in message
        assert "unknown label 'A'" in message
        assert "unknown label 'B'" in message

    def test_error_limit(self):
        source = "\n".join(f"BR L{i}" for i in range(10)) + "\nEOP"
        program = resolve_source(source)
        with pytest.raises(AssemblyFailedError) as exc_info:
            validate(program, max_errors=3)
        assert len(exc_info.value.errors) == 3


# =============================================================================
# Strict Range Tests
# =============================================================================

class TestStrictRange:
    """Operand range checks only apply in strict mode."""

    def test_wide_literal_allowed_by_default(self):
        validate(resolve_source("WB 0x1FF\nEOP"))

    def test_wide_literal_rejected_in_strict_mode(self):
        errors = validation_errors("WB 0x1FF\nEOP", strict=True)
        assert isinstance(errors[0], OperandRangeError)
        assert errors[0].value == 0x1FF

    def test_far_label_rejected_in_strict_mode(self):
        errors = validation_errors("ORG 0x100\nHERE BR HERE\nEOP", strict=True)
        assert isinstance(errors[0], OperandRangeError)
        assert errors[0].operand == "HERE"

    def test_byte_values_pass_strict_mode(self):
        validate(resolve_source("WB 0xFF\nEOP"), strict=True)


# =============================================================================
# Error Collector Tests
# =============================================================================

class TestErrorCollector:
    """Test batch error collection and its report."""

    def test_report_counts_errors(self):
        collector = ErrorCollector()
        collector.add(UndefinedLabelError("A"))
        collector.add(UndefinedLabelError("B"))
        report = collector.report()
        assert "unknown label 'A'" in report
        assert "unknown label 'B'" in report
        assert report.endswith("2 errors")
        assert "warning" not in report

    def test_raise_if_errors(self):
        collector = ErrorCollector()
        collector.raise_if_errors()
        collector.add(UndefinedLabelError("A"))
        with pytest.raises(AssemblyFailedError) as exc_info:
            collector.raise_if_errors()
        assert exc_info.value.errors[0].label == "A"
        assert "failed with 1 error:" in str(exc_info.value)
        assert str(exc_info.value).endswith("1 error")

    def test_limit(self):
        collector = ErrorCollector(max_errors=2)
        collector.add(UndefinedLabelError("A"))
        with pytest.raises(TooManyErrors):
            collector.add(UndefinedLabelError("B"))
        assert collector.error_count() == 2
