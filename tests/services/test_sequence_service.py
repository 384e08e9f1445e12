"""
Tests for counter-based code allocation.

Covers:
- First allocation on an empty counter, then strictly increasing values
- Keys are independent
- Code formatting (zero padding, no truncation)
- Unknown keys
- Bootstrapping from legacy codes, malformed codes ignored
- Reset and initialization
"""

import pytest

from cashbook_kernel.domain.rules import SequenceFormat
from cashbook_kernel.exceptions import UnknownSequenceKeyError
from cashbook_kernel.services.sequence_service import (
    AllocatedCode,
    SequenceCounter,
    SequenceService,
    extract_numeric_suffix,
    format_code,
)


class TestFormatting:
    def test_zero_padded(self):
        assert format_code(SequenceFormat("EXPENSE_CATEGORY", "CC", 4), 7) == "CC0007"

    def test_wider_value_not_truncated(self):
        assert format_code(SequenceFormat("X", "X", 3), 1234) == "X1234"

    @pytest.mark.parametrize(
        "code,expected",
        [
            ("CC0007", 7),
            ("CC12345", 12345),
            ("CC0NaN", None),
            ("CC", None),
            ("DH0001", None),
            ("CC-001", None),
            (None, None),
        ],
    )
    def test_extract_numeric_suffix(self, code, expected):
        assert extract_numeric_suffix(code, "CC") == expected

    def test_format_rejects_zero_width(self):
        with pytest.raises(ValueError):
            SequenceFormat("X", "X", 0)


class TestAllocate:
    def test_first_allocation_on_empty_counter(self, sequences):
        assert sequences.allocate(SequenceService.WORKSHOP_JOB) == AllocatedCode(1, "JG0001")

    def test_second_allocation(self, sequences):
        sequences.allocate(SequenceService.WORKSHOP_JOB)
        assert sequences.allocate(SequenceService.WORKSHOP_JOB) == AllocatedCode(2, "JG0002")

    def test_keys_are_independent(self, sequences):
        first = sequences.allocate(SequenceService.WORKSHOP_JOB)
        project = sequences.allocate(SequenceService.PROJECT)
        second = sequences.allocate(SequenceService.WORKSHOP_JOB)

        assert (first.value, second.value) == (1, 2)
        assert project == AllocatedCode(1, "DH00001")

    def test_values_strictly_increasing(self, sequences):
        values = [sequences.allocate(SequenceService.TRANSFER).value for _ in range(20)]
        assert values == list(range(1, 21))

    def test_unknown_key(self, sequences):
        with pytest.raises(UnknownSequenceKeyError) as exc_info:
            sequences.allocate("NOT_A_KEY")
        assert exc_info.value.sequence_key == "NOT_A_KEY"

    def test_next_value_without_format(self, sequences):
        assert sequences.next_value("AD_HOC") == 1
        assert sequences.next_value("AD_HOC") == 2

    def test_minimum_offsets_first_value(self, session):
        service = SequenceService(session, {"LEGACY": SequenceFormat("LEGACY", "L", 4, minimum=500)})
        assert service.allocate("LEGACY") == AllocatedCode(501, "L0501")

    def test_counter_row_persisted(self, session, sequences):
        sequences.allocate(SequenceService.INCOME_VOUCHER)
        counter = session.query(SequenceCounter).filter_by(key=SequenceService.INCOME_VOUCHER).one()
        assert counter.value == 1

    def test_allocation_logged(self, sequences, captured_logs):
        sequences.allocate(SequenceService.EXPENSE_VOUCHER)
        (entry,) = [r for r in captured_logs() if r["message"] == "sequence_allocated"]
        assert entry["sequence_key"] == SequenceService.EXPENSE_VOUCHER
        assert entry["code"] == "PC0001"


class TestCounterMaintenance:
    def test_current_value_absent(self, sequences):
        assert sequences.current_value(SequenceService.WORKSHOP_JOB) is None

    def test_reset(self, sequences):
        sequences.allocate(SequenceService.WORKSHOP_JOB)
        sequences.reset(SequenceService.WORKSHOP_JOB, 41)
        assert sequences.allocate(SequenceService.WORKSHOP_JOB).code == "JG0042"

    def test_initialize_sequences_is_idempotent(self, sequences, config):
        sequences.allocate(SequenceService.WORKSHOP_JOB)
        sequences.initialize_sequences()
        sequences.initialize_sequences()

        assert sequences.current_value(SequenceService.WORKSHOP_JOB) == 1
        for key in config.sequence_formats:
            assert sequences.current_value(key) is not None


class TestBootstrap:
    def test_seeds_from_highest_well_formed_code(self, sequences, captured_logs):
        value = sequences.bootstrap_from_codes(
            SequenceService.EXPENSE_CATEGORY,
            ["CC0003", "CC0NaN", "CC0012", None, "XX9999"],
        )

        assert value == 12
        assert sequences.allocate(SequenceService.EXPENSE_CATEGORY).code == "CC0013"
        (entry,) = [r for r in captured_logs() if r["message"] == "sequence_bootstrapped"]
        assert entry["skipped_codes"] == 3

    def test_never_moves_backwards(self, sequences):
        sequences.reset(SequenceService.EXPENSE_CATEGORY, 50)
        assert sequences.bootstrap_from_codes(SequenceService.EXPENSE_CATEGORY, ["CC0010"]) == 50

    def test_only_malformed_codes(self, sequences):
        assert sequences.bootstrap_from_codes(SequenceService.EXPENSE_CATEGORY, ["CC0NaN"]) == 0
        assert sequences.allocate(SequenceService.EXPENSE_CATEGORY).code == "CC0001"
