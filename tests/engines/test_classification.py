"""
Tests for income and expense classification.

Covers:
- Category code takes precedence over keywords
- Keyword fallback on category name, then on the note
- Deposit keywords checked before final-settlement keywords
- Expense classes
"""

import unicodedata
from datetime import date
from decimal import Decimal
from uuid import uuid4

import pytest

from cashbook_engines.classification import (
    ExpenseClass,
    IncomeClass,
    IncomeClassifier,
    classify_expense,
    classify_income,
)
from cashbook_kernel.domain.records import IncomeCategory, LedgerRecord, RecordKind
from cashbook_kernel.domain.rules import ClassificationRules


def _income(category: IncomeCategory | None = None, note: str | None = None) -> LedgerRecord:
    return LedgerRecord(
        id=uuid4(),
        kind=RecordKind.INCOME,
        amount=Decimal("1000000"),
        record_date=date(2024, 5, 1),
        wallet_id=uuid4(),
        income_category_id=category.id if category is not None else None,
        note=note,
    )


def _expense(**kwargs) -> LedgerRecord:
    return LedgerRecord(
        id=uuid4(),
        kind=RecordKind.EXPENSE,
        amount=Decimal("100"),
        record_date=date(2024, 5, 1),
        wallet_id=uuid4(),
        **kwargs,
    )


class TestIncomeClassificationByCode:
    """Stable category codes decide before any keyword."""

    @pytest.mark.parametrize(
        "code,expected",
        [
            ("DEPOSIT", IncomeClass.DEPOSIT),
            ("PAYMENT", IncomeClass.PAYMENT),
            ("FINAL", IncomeClass.FINAL),
        ],
    )
    def test_code_maps_to_class(self, code, expected):
        category = IncomeCategory(id=uuid4(), code=code, name="Anything")
        assert classify_income(_income(category), [category]) == expected

    def test_code_beats_contradicting_name(self):
        category = IncomeCategory(id=uuid4(), code="PAYMENT", name="Tiền đặt cọc")
        assert classify_income(_income(category), [category]) == IncomeClass.PAYMENT


class TestIncomeClassificationByKeyword:
    def test_category_name_deposit_keyword(self):
        category = IncomeCategory(id=uuid4(), code="THU01", name="Thu đặt cọc")
        assert classify_income(_income(category), [category]) == IncomeClass.DEPOSIT

    def test_category_name_final_keyword(self):
        category = IncomeCategory(id=uuid4(), code="THU02", name="Tất toán hợp đồng")
        assert classify_income(_income(category), [category]) == IncomeClass.FINAL

    def test_note_used_when_category_name_has_no_keyword(self):
        category = IncomeCategory(id=uuid4(), code="THU03", name="Thu khác")
        record = _income(category, note="Khách chuyển quyết toán")
        assert classify_income(record, [category]) == IncomeClass.FINAL

    def test_note_used_without_category(self):
        assert classify_income(_income(note="cọc lần 1")) == IncomeClass.DEPOSIT

    def test_keywords_are_case_insensitive(self):
        assert classify_income(_income(note="ĐẶT CỌC")) == IncomeClass.DEPOSIT

    def test_decomposed_diacritics_match(self):
        note = unicodedata.normalize("NFD", "Đặt cọc lần 1")
        assert note != "Đặt cọc lần 1"
        assert classify_income(_income(note=note)) == IncomeClass.DEPOSIT

    def test_decomposed_keywords_match_composed_note(self):
        rules = ClassificationRules(deposit_keywords=(unicodedata.normalize("NFD", "tạm ứng"),))
        classifier = IncomeClassifier(rules)
        assert classifier.classify(_income(note="Tạm ứng đợt 2")) == IncomeClass.DEPOSIT

    def test_deposit_checked_before_final(self):
        assert classify_income(_income(note="đặt cọc và tất toán")) == IncomeClass.DEPOSIT

    def test_default_is_payment(self):
        assert classify_income(_income(note="chuyển khoản")) == IncomeClass.PAYMENT

    def test_unknown_category_id_falls_back_to_note(self):
        ghost = IncomeCategory(id=uuid4(), code="DEPOSIT", name="Ghost")
        record = _income(ghost, note="tất toán")
        assert classify_income(record, []) == IncomeClass.FINAL

    def test_custom_rules(self):
        rules = ClassificationRules(deposit_keywords=("advance",), final_keywords=("settle",))
        classifier = IncomeClassifier(rules)
        assert classifier.classify(_income(note="Advance for cabinets")) == IncomeClass.DEPOSIT
        assert classifier.classify(_income(note="settlement")) == IncomeClass.FINAL
        assert classifier.classify(_income(note="đặt cọc")) == IncomeClass.PAYMENT

    def test_classifier_accepts_category_mapping(self):
        category = IncomeCategory(id=uuid4(), code="FINAL", name="Final")
        classifier = IncomeClassifier(categories={category.id: category})
        assert classifier.classify(_income(category)) == IncomeClass.FINAL


class TestExpenseClassification:
    def test_direct_by_default(self):
        assert classify_expense(_expense()) == ExpenseClass.DIRECT

    def test_common_cost(self):
        assert classify_expense(_expense(is_common_cost=True)) == ExpenseClass.COMMON

    def test_ads(self):
        assert classify_expense(_expense(is_ads=True, ads_platform="facebook")) == ExpenseClass.ADS

    def test_workshop_payment_wins(self):
        record = _expense(workshop_job_id=uuid4(), is_common_cost=True)
        assert classify_expense(record) == ExpenseClass.WORKSHOP_PAYMENT
