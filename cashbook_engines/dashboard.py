"""
Module: cashbook_engines.dashboard
Responsibility:
    The overview figures on the landing dashboard: revenue, expense and
    profit for the period, a revenue/expense series, ads spend per
    platform, and the largest customer and workshop debts.

Architecture position:
    Engines -- pure calculation layer, zero I/O.  Reuses the netting,
    series and workshop debt engines.

Invariants enforced:
    - revenue_total = sum of INCOME, expense_total = sum of EXPENSE (no
      classification); profit = revenue_total - expense_total.
      Transfers and adjustments move money between wallets and are not
      revenue or expense.
    - Customer debt = max(0, sum of the customer's project order totals
      - sum of INCOME on those projects).  Only customers with debt > 0
      are listed, largest first, at most ``top_n``; the total covers all
      of them, not just the listed ones.
    - Workshop debts come from ``workshop_debt_report`` with the same
      top-N / total split.
    - Debt figures are computed from ``debt_records`` when given (usually
      all-time records), period figures from ``records``.

Failure modes:
    - ValueError if ``top_n`` is negative.
"""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable
from uuid import UUID

from cashbook_engines.netting import net_amount, order_total
from cashbook_engines.series import FlowPoint, Granularity, SeriesPoint, bucket_flows
from cashbook_engines.tracer import traced_engine
from cashbook_engines.workshop_debt import WorkshopDebt, total_debt, workshop_debt_report
from cashbook_kernel.db.types import ZERO
from cashbook_kernel.domain.records import (
    Customer,
    LedgerRecord,
    Project,
    RecordKind,
    Workshop,
    WorkshopJob,
)

DEFAULT_TOP_N = 5


@dataclass(frozen=True)
class AdsSpend:
    platform: str
    amount: Decimal


@dataclass(frozen=True)
class CustomerDebt:
    customer_id: UUID
    customer_code: str
    customer_name: str
    phone: str | None
    order_total: Decimal
    paid_total: Decimal
    debt: Decimal


@dataclass(frozen=True)
class DashboardOverview:
    revenue_total: Decimal
    expense_total: Decimal
    profit: Decimal
    series: tuple[SeriesPoint, ...]
    ads_by_platform: tuple[AdsSpend, ...]
    customer_debt_total: Decimal
    customer_debts: tuple[CustomerDebt, ...]
    workshop_debt_total: Decimal
    workshop_debts: tuple[WorkshopDebt, ...]


def ads_by_platform(records: Iterable[LedgerRecord]) -> tuple[AdsSpend, ...]:
    spend: dict[str, Decimal] = defaultdict(lambda: ZERO)
    for record in records:
        if record.kind == RecordKind.EXPENSE and record.is_ads and record.ads_platform:
            spend[record.ads_platform] += record.amount
    rows = [AdsSpend(platform=p, amount=a) for p, a in spend.items()]
    rows.sort(key=lambda row: (-row.amount, row.platform))
    return tuple(rows)


def customer_debts(
    customers: Iterable[Customer],
    projects: Iterable[Project],
    records: Iterable[LedgerRecord],
) -> list[CustomerDebt]:
    """Every customer with outstanding debt, largest first (ties by name)."""
    project_owner: dict[UUID, UUID] = {}
    billed: dict[UUID, Decimal] = defaultdict(lambda: ZERO)
    for project in projects:
        if project.customer_id is None:
            continue
        project_owner[project.id] = project.customer_id
        billed[project.customer_id] += order_total(project.items, project.discount_amount)

    paid: dict[UUID, Decimal] = defaultdict(lambda: ZERO)
    for record in records:
        if record.kind != RecordKind.INCOME or record.project_id is None:
            continue
        owner = project_owner.get(record.project_id)
        if owner is not None:
            paid[owner] += record.amount

    rows: list[CustomerDebt] = []
    for customer in customers:
        total = billed.get(customer.id, ZERO)
        received = paid.get(customer.id, ZERO)
        debt = net_amount(total, received)
        if debt > ZERO:
            rows.append(
                CustomerDebt(
                    customer_id=customer.id,
                    customer_code=customer.code,
                    customer_name=customer.name,
                    phone=customer.phone,
                    order_total=total,
                    paid_total=received,
                    debt=debt,
                )
            )
    rows.sort(key=lambda row: (-row.debt, row.customer_name, row.customer_code))
    return rows


@traced_engine("dashboard", "1.0", fingerprint_fields=("top_n",))
def dashboard_overview(
    records: Iterable[LedgerRecord],
    projects: Iterable[Project],
    jobs: Iterable[WorkshopJob],
    workshops: Iterable[Workshop],
    customers: Iterable[Customer],
    top_n: int = DEFAULT_TOP_N,
    debt_records: Iterable[LedgerRecord] | None = None,
    granularity: Granularity = Granularity.DAY,
) -> DashboardOverview:
    if top_n < 0:
        raise ValueError(f"top_n must be >= 0, got {top_n}")

    records = tuple(records)
    debt_source = tuple(debt_records) if debt_records is not None else records

    revenue = expense = ZERO
    points: list[FlowPoint] = []
    for record in records:
        if record.kind == RecordKind.INCOME:
            revenue += record.amount
            points.append(FlowPoint(record.record_date, record.amount, ZERO))
        elif record.kind == RecordKind.EXPENSE:
            expense += record.amount
            points.append(FlowPoint(record.record_date, ZERO, record.amount))

    customers_owing = customer_debts(customers, projects, debt_source)
    workshops_owed = workshop_debt_report(jobs, debt_source, workshops)

    customer_total = ZERO
    for row in customers_owing:
        customer_total += row.debt

    return DashboardOverview(
        revenue_total=revenue,
        expense_total=expense,
        profit=revenue - expense,
        series=bucket_flows(points, granularity=granularity),
        ads_by_platform=ads_by_platform(records),
        customer_debt_total=customer_total,
        customer_debts=tuple(customers_owing[:top_n]),
        workshop_debt_total=total_debt(workshops_owed),
        workshop_debts=workshops_owed[:top_n],
    )
