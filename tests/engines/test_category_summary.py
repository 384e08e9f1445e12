"""
Tests for income and expense category summaries.

Covers:
- Totals per category with whole-number percentages
- Unknown or missing categories grouped under the "other" label
- Wallet, project and common-cost filters
- Direct / common split
"""

from datetime import date
from decimal import Decimal
from uuid import uuid4

import pytest

from cashbook_engines.category_summary import (
    OTHER_LABEL,
    expense_summary,
    income_summary,
    percent_of,
)
from cashbook_engines.series import Granularity
from cashbook_kernel.domain.records import (
    ExpenseCategory,
    IncomeCategory,
    LedgerRecord,
    RecordKind,
)

WALLET = uuid4()
OTHER_WALLET = uuid4()


def _record(kind, amount, on=date(2024, 5, 1), wallet=WALLET, **kwargs) -> LedgerRecord:
    return LedgerRecord(
        id=uuid4(),
        kind=kind,
        amount=Decimal(amount),
        record_date=on,
        wallet_id=wallet,
        **kwargs,
    )


class TestPercent:
    def test_rounds_half_up(self):
        assert percent_of(Decimal("1"), Decimal("8")) == 13  # 12.5

    def test_zero_total(self):
        assert percent_of(Decimal("0"), Decimal("0")) == 0

    def test_thirds(self):
        assert percent_of(Decimal("1"), Decimal("3")) == 33
        assert percent_of(Decimal("2"), Decimal("3")) == 67


class TestIncomeSummary:
    @pytest.fixture
    def categories(self):
        return (
            IncomeCategory(id=uuid4(), code="DEPOSIT", name="Đặt cọc"),
            IncomeCategory(id=uuid4(), code="PAYMENT", name="Thanh toán"),
        )

    def test_by_category(self, categories):
        deposit, payment = categories
        records = [
            _record(RecordKind.INCOME, "300", income_category_id=deposit.id),
            _record(RecordKind.INCOME, "600", income_category_id=payment.id),
            _record(RecordKind.INCOME, "100"),
            _record(RecordKind.EXPENSE, "999"),
        ]

        summary = income_summary(records, categories)

        assert summary.total == Decimal("1000")
        assert [(c.name, c.amount, c.percent) for c in summary.by_category] == [
            ("Thanh toán", Decimal("600"), 60),
            ("Đặt cọc", Decimal("300"), 30),
            (OTHER_LABEL, Decimal("100"), 10),
        ]

    def test_unknown_category_grouped_with_missing(self, categories):
        records = [
            _record(RecordKind.INCOME, "10", income_category_id=uuid4()),
            _record(RecordKind.INCOME, "5"),
        ]
        summary = income_summary(records, categories, other_label="Khác")
        (row,) = summary.by_category
        assert row.category_id is None
        assert row.name == "Khác"
        assert row.amount == Decimal("15")

    def test_wallet_filter(self, categories):
        records = [
            _record(RecordKind.INCOME, "10"),
            _record(RecordKind.INCOME, "20", wallet=OTHER_WALLET),
        ]
        assert income_summary(records, categories, wallet_id=OTHER_WALLET).total == Decimal("20")

    def test_project_filter(self, categories):
        project_id = uuid4()
        records = [
            _record(RecordKind.INCOME, "10", project_id=project_id),
            _record(RecordKind.INCOME, "20"),
        ]
        assert income_summary(records, categories, project_id=project_id).total == Decimal("10")

    def test_series(self, categories):
        records = [
            _record(RecordKind.INCOME, "10", on=date(2024, 5, 1)),
            _record(RecordKind.INCOME, "20", on=date(2024, 6, 3)),
        ]
        summary = income_summary(records, categories, granularity=Granularity.MONTH)
        assert [(p.period_start, p.amount) for p in summary.series] == [
            (date(2024, 5, 1), Decimal("10")),
            (date(2024, 6, 1), Decimal("20")),
        ]

    def test_empty(self, categories):
        summary = income_summary([], categories)
        assert summary.total == Decimal("0")
        assert summary.by_category == ()
        assert summary.series == ()


class TestExpenseSummary:
    @pytest.fixture
    def rent(self):
        return ExpenseCategory(id=uuid4(), code="CC0001", name="Thuê xưởng")

    @pytest.fixture
    def records(self, rent):
        return [
            _record(RecordKind.EXPENSE, "700", expense_category_id=rent.id, is_common_cost=True),
            _record(RecordKind.EXPENSE, "300"),
            _record(RecordKind.INCOME, "5000"),
        ]

    def test_direct_common_split(self, rent, records):
        summary = expense_summary(records, [rent])
        assert summary.total == Decimal("1000")
        assert summary.common_total == Decimal("700")
        assert summary.direct_total == Decimal("300")
        assert summary.direct_total + summary.common_total == summary.total

    def test_common_cost_filter(self, rent, records):
        summary = expense_summary(records, [rent], is_common_cost=True)
        assert summary.total == Decimal("700")
        (row,) = summary.by_category
        assert row.name == "Thuê xưởng"
        assert row.percent == 100

    def test_direct_only_filter(self, rent, records):
        summary = expense_summary(records, [rent], is_common_cost=False)
        assert summary.total == Decimal("300")
        assert summary.common_total == Decimal("0")

    def test_percentages(self, rent, records):
        summary = expense_summary(records, [rent])
        assert [c.percent for c in summary.by_category] == [70, 30]
