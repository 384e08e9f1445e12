"""
Tests for the dashboard overview.

Covers:
- Revenue, expense and profit over the period records
- Ads spend per platform
- Customer and workshop debts from all-time records, truncated to top N
"""

from datetime import date
from decimal import Decimal
from uuid import uuid4

import pytest

from cashbook_engines.dashboard import ads_by_platform, customer_debts, dashboard_overview
from cashbook_kernel.domain.records import (
    Customer,
    LedgerRecord,
    OrderItem,
    Project,
    RecordKind,
    Workshop,
    WorkshopJob,
)

WALLET = uuid4()


def _record(kind, amount, on=date(2024, 5, 1), **kwargs) -> LedgerRecord:
    return LedgerRecord(
        id=uuid4(),
        kind=kind,
        amount=Decimal(amount),
        record_date=on,
        wallet_id=WALLET,
        **kwargs,
    )


def _project(customer: Customer | None, total: str, discount: str = "0") -> Project:
    project_id = uuid4()
    return Project(
        id=project_id,
        code="DH",
        name="P",
        stage="Lead",
        customer_id=customer.id if customer is not None else None,
        discount_amount=Decimal(discount),
        items=(
            OrderItem(
                id=uuid4(),
                project_id=project_id,
                planned_qty=Decimal("1"),
                planned_unit_price=Decimal(total),
            ),
        ),
    )


class TestTotals:
    def test_revenue_expense_profit(self):
        records = [
            _record(RecordKind.INCOME, "1000"),
            _record(RecordKind.EXPENSE, "400"),
            _record(RecordKind.TRANSFER, "999", counterparty_wallet_id=uuid4()),
            _record(RecordKind.ADJUSTMENT, "-50"),
        ]
        overview = dashboard_overview(records, [], [], [], [])

        assert overview.revenue_total == Decimal("1000")
        assert overview.expense_total == Decimal("400")
        assert overview.profit == Decimal("600")
        (point,) = overview.series
        assert point.net == Decimal("600")

    def test_negative_top_n_rejected(self):
        with pytest.raises(ValueError):
            dashboard_overview([], [], [], [], [], top_n=-1)


class TestAds:
    def test_grouped_by_platform_largest_first(self):
        records = [
            _record(RecordKind.EXPENSE, "100", is_ads=True, ads_platform="tiktok"),
            _record(RecordKind.EXPENSE, "250", is_ads=True, ads_platform="facebook"),
            _record(RecordKind.EXPENSE, "50", is_ads=True, ads_platform="tiktok"),
            _record(RecordKind.EXPENSE, "70", is_ads=True),
            _record(RecordKind.EXPENSE, "80"),
        ]
        assert [(a.platform, a.amount) for a in ads_by_platform(records)] == [
            ("facebook", Decimal("250")),
            ("tiktok", Decimal("150")),
        ]


class TestCustomerDebts:
    def test_debt_per_customer(self):
        lan = Customer(id=uuid4(), code="KH0001", name="Lan")
        minh = Customer(id=uuid4(), code="KH0002", name="Minh")
        lan_project = _project(lan, "1000", discount="100")
        minh_project = _project(minh, "500")
        records = [
            _record(RecordKind.INCOME, "400", project_id=lan_project.id),
            _record(RecordKind.INCOME, "500", project_id=minh_project.id),
        ]

        rows = customer_debts([lan, minh], [lan_project, minh_project], records)

        (row,) = rows
        assert row.customer_id == lan.id
        assert row.order_total == Decimal("900")
        assert row.paid_total == Decimal("400")
        assert row.debt == Decimal("500")

    def test_debts_sorted_and_truncated(self):
        customers = [Customer(id=uuid4(), code=f"KH{i}", name=f"C{i}") for i in range(4)]
        projects = [_project(c, str(100 * (i + 1))) for i, c in enumerate(customers)]

        overview = dashboard_overview([], projects, [], [], customers, top_n=2)

        assert overview.customer_debt_total == Decimal("1000")
        assert [d.customer_name for d in overview.customer_debts] == ["C3", "C2"]

    def test_debt_uses_all_time_records(self):
        customer = Customer(id=uuid4(), code="KH1", name="Lan")
        project = _project(customer, "1000")
        old_payment = _record(RecordKind.INCOME, "1000", on=date(2023, 1, 1), project_id=project.id)

        overview = dashboard_overview(
            [], [project], [], [], [customer], debt_records=[old_payment]
        )

        assert overview.customer_debt_total == Decimal("0")
        assert overview.revenue_total == Decimal("0")


class TestWorkshopDebts:
    def test_workshop_debt_total_counts_all_rows(self):
        shops = [Workshop(id=uuid4(), code=f"X{i}", name=f"W{i}") for i in range(3)]
        jobs = [
            WorkshopJob(
                id=uuid4(),
                project_id=uuid4(),
                workshop_id=shop.id,
                raw_amount=Decimal("100"),
            )
            for shop in shops
        ]

        overview = dashboard_overview([], [], jobs, shops, [], top_n=1)

        assert overview.workshop_debt_total == Decimal("300")
        assert len(overview.workshop_debts) == 1

    def test_top_n_zero(self):
        shop = Workshop(id=uuid4(), code="X1", name="W")
        job = WorkshopJob(id=uuid4(), project_id=uuid4(), workshop_id=shop.id, raw_amount=Decimal("1"))
        overview = dashboard_overview([], [], [job], [shop], [], top_n=0)
        assert overview.workshop_debts == ()
        assert overview.workshop_debt_total == Decimal("1")
