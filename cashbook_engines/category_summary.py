"""
Module: cashbook_engines.category_summary
Responsibility:
    Income and expense breakdowns by category for the reports screen:
    total, per-category totals with their integer percentage share, and a
    per-period amount series.  The expense summary also splits direct from
    common costs.

Architecture position:
    Engines -- pure calculation layer, zero I/O.

Invariants enforced:
    - percent = ROUND_HALF_UP(share x 100) as an int; 0 when the total is 0.
      Percentages are rounded independently and need not sum to 100.
    - Records without a category, or whose category is not among
      ``categories``, are grouped under one "Other" row (category_id None).
    - Category rows are sorted by amount descending, ties by name.
    - expense direct_total counts records NOT flagged common;
      direct_total + common_total == total.

Failure modes:
    - None.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable
from uuid import UUID

from cashbook_engines.series import FlowPoint, Granularity, bucket_flows
from cashbook_engines.tracer import traced_engine
from cashbook_kernel.db.types import ZERO
from cashbook_kernel.domain.records import (
    ExpenseCategory,
    IncomeCategory,
    LedgerRecord,
    RecordKind,
)

OTHER_LABEL = "Other"

_HUNDRED = Decimal("100")


@dataclass(frozen=True)
class CategoryTotal:
    category_id: UUID | None
    name: str
    amount: Decimal
    percent: int


@dataclass(frozen=True)
class AmountPoint:
    period_start: date
    amount: Decimal


@dataclass(frozen=True)
class IncomeSummary:
    total: Decimal
    by_category: tuple[CategoryTotal, ...]
    series: tuple[AmountPoint, ...]


@dataclass(frozen=True)
class ExpenseSummary:
    total: Decimal
    direct_total: Decimal
    common_total: Decimal
    by_category: tuple[CategoryTotal, ...]
    series: tuple[AmountPoint, ...]


def percent_of(amount: Decimal, total: Decimal) -> int:
    if total == ZERO:
        return 0
    return int((amount * _HUNDRED / total).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def _by_category(
    records: list[LedgerRecord],
    category_of,
    names: dict[UUID, str],
    total: Decimal,
    other_label: str,
) -> tuple[CategoryTotal, ...]:
    amounts: dict[UUID | None, Decimal] = {}
    for record in records:
        category_id = category_of(record)
        if category_id not in names:
            category_id = None
        amounts[category_id] = amounts.get(category_id, ZERO) + record.amount

    rows = [
        CategoryTotal(
            category_id=category_id,
            name=names[category_id] if category_id is not None else other_label,
            amount=amount,
            percent=percent_of(amount, total),
        )
        for category_id, amount in amounts.items()
    ]
    rows.sort(key=lambda row: (-row.amount, row.name))
    return tuple(rows)


def _amount_series(records: list[LedgerRecord], granularity: Granularity) -> tuple[AmountPoint, ...]:
    points = bucket_flows(
        (FlowPoint(r.record_date, r.amount, ZERO) for r in records),
        granularity=granularity,
    )
    return tuple(AmountPoint(p.period_start, p.in_total) for p in points)


def _select(
    records: Iterable[LedgerRecord],
    kind: RecordKind,
    wallet_id: UUID | None,
    project_id: UUID | None,
) -> list[LedgerRecord]:
    return [
        r
        for r in records
        if r.kind == kind
        and (wallet_id is None or r.wallet_id == wallet_id)
        and (project_id is None or r.project_id == project_id)
    ]


@traced_engine("income_summary", "1.0", fingerprint_fields=("wallet_id", "project_id"))
def income_summary(
    records: Iterable[LedgerRecord],
    categories: Iterable[IncomeCategory],
    wallet_id: UUID | None = None,
    project_id: UUID | None = None,
    granularity: Granularity = Granularity.DAY,
    other_label: str = OTHER_LABEL,
) -> IncomeSummary:
    selected = _select(records, RecordKind.INCOME, wallet_id, project_id)
    total = ZERO
    for record in selected:
        total += record.amount
    names = {c.id: c.name for c in categories}
    return IncomeSummary(
        total=total,
        by_category=_by_category(
            selected, lambda r: r.income_category_id, names, total, other_label
        ),
        series=_amount_series(selected, granularity),
    )


@traced_engine(
    "expense_summary", "1.0", fingerprint_fields=("wallet_id", "project_id", "is_common_cost")
)
def expense_summary(
    records: Iterable[LedgerRecord],
    categories: Iterable[ExpenseCategory],
    wallet_id: UUID | None = None,
    project_id: UUID | None = None,
    is_common_cost: bool | None = None,
    granularity: Granularity = Granularity.DAY,
    other_label: str = OTHER_LABEL,
) -> ExpenseSummary:
    selected = _select(records, RecordKind.EXPENSE, wallet_id, project_id)
    if is_common_cost is not None:
        selected = [r for r in selected if r.is_common_cost == is_common_cost]

    total = direct = common = ZERO
    for record in selected:
        total += record.amount
        if record.is_common_cost:
            common += record.amount
        else:
            direct += record.amount

    names = {c.id: c.name for c in categories}
    return ExpenseSummary(
        total=total,
        direct_total=direct,
        common_total=common,
        by_category=_by_category(
            selected, lambda r: r.expense_category_id, names, total, other_label
        ),
        series=_amount_series(selected, granularity),
    )
