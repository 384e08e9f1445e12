"""
Module: cashbook_engines.classification
Responsibility:
    Assign reporting sub-types to ledger records.  Income records become
    DEPOSIT, PAYMENT or FINAL; expense records become DIRECT, COMMON,
    WORKSHOP_PAYMENT or ADS.

Architecture position:
    Engines -- pure calculation layer, zero I/O.  Keyword tables arrive as
    an immutable ``ClassificationRules`` value; this module never reads
    configuration itself.

Invariants enforced:
    - Both classifiers are total functions: every record gets exactly one
      class and nothing raises.
    - Income priority: (1) the category's stable code when it is one of
      the three classes; (2) keywords in the category display name;
      (3) keywords in the record note; (4) PAYMENT.
    - Within a keyword step, deposit keywords are checked before final
      keywords, so "quyết toán cọc" is a deposit.
    - Keyword matching is case-insensitive and runs on NFC-normalized text,
      so decomposed Vietnamese diacritics match their composed keywords.
    - Expense classes are mutually exclusive and exhaustive, checked in the
      order WORKSHOP_PAYMENT, ADS, COMMON, DIRECT.

Failure modes:
    - None.

Usage:
    from cashbook_engines.classification import IncomeClassifier

    classifier = IncomeClassifier(config.classification, categories)
    classifier.classify(record)   # "DEPOSIT" | "PAYMENT" | "FINAL"
"""

from __future__ import annotations

import unicodedata
from enum import Enum
from typing import Iterable, Mapping
from uuid import UUID

from cashbook_kernel.domain.records import IncomeCategory, LedgerRecord
from cashbook_kernel.domain.rules import (
    DEFAULT_CLASSIFICATION_RULES,
    INCOME_DEPOSIT,
    INCOME_FINAL,
    INCOME_PAYMENT,
    ClassificationRules,
)


class IncomeClass(str, Enum):
    DEPOSIT = INCOME_DEPOSIT
    PAYMENT = INCOME_PAYMENT
    FINAL = INCOME_FINAL


class ExpenseClass(str, Enum):
    DIRECT = "DIRECT"
    COMMON = "COMMON"
    WORKSHOP_PAYMENT = "WORKSHOP_PAYMENT"
    ADS = "ADS"


def _fold(text: str) -> str:
    return unicodedata.normalize("NFC", text).lower()


def _contains_any(text: str | None, keywords: Iterable[str]) -> bool:
    if not text:
        return False
    folded = _fold(text)
    return any(_fold(keyword) in folded for keyword in keywords)


class IncomeClassifier:
    """
    Classifies income records as DEPOSIT, PAYMENT or FINAL.

    Contract:
        Constructed once per report with the keyword rules and the income
        categories in scope; ``classify`` is then a pure lookup.
    """

    def __init__(
        self,
        rules: ClassificationRules = DEFAULT_CLASSIFICATION_RULES,
        categories: Iterable[IncomeCategory] | Mapping[UUID, IncomeCategory] = (),
    ):
        self._rules = rules
        if isinstance(categories, Mapping):
            self._categories = dict(categories)
        else:
            self._categories = {c.id: c for c in categories}
        self._by_code = {
            rules.deposit_code: IncomeClass.DEPOSIT,
            rules.payment_code: IncomeClass.PAYMENT,
            rules.final_code: IncomeClass.FINAL,
        }

    @property
    def rules(self) -> ClassificationRules:
        return self._rules

    def _from_keywords(self, text: str | None) -> IncomeClass | None:
        if _contains_any(text, self._rules.deposit_keywords):
            return IncomeClass.DEPOSIT
        if _contains_any(text, self._rules.final_keywords):
            return IncomeClass.FINAL
        return None

    def classify_parts(
        self,
        category: IncomeCategory | None,
        note: str | None,
    ) -> IncomeClass:
        if category is not None:
            by_code = self._by_code.get(category.code)
            if by_code is not None:
                return by_code
            by_name = self._from_keywords(category.name)
            if by_name is not None:
                return by_name
        by_note = self._from_keywords(note)
        if by_note is not None:
            return by_note
        return IncomeClass.PAYMENT

    def classify(self, record: LedgerRecord) -> IncomeClass:
        category = None
        if record.income_category_id is not None:
            category = self._categories.get(record.income_category_id)
        return self.classify_parts(category, record.note)


def classify_income(
    record: LedgerRecord,
    categories: Iterable[IncomeCategory] = (),
    rules: ClassificationRules = DEFAULT_CLASSIFICATION_RULES,
) -> IncomeClass:
    """One-off income classification; build an ``IncomeClassifier`` for batches."""
    return IncomeClassifier(rules, categories).classify(record)


def classify_expense(record: LedgerRecord) -> ExpenseClass:
    if record.workshop_job_id is not None:
        return ExpenseClass.WORKSHOP_PAYMENT
    if record.is_ads:
        return ExpenseClass.ADS
    if record.is_common_cost:
        return ExpenseClass.COMMON
    return ExpenseClass.DIRECT
