"""
Tests for ReportingService against a real database.

Covers:
- Project summary with acceptance overrides, jobs and classified income
- Soft-deleted rows never reach the reports
- Date-ranged cashflow and all-time workshop debts
- Kanban board from configured stages
- Dashboard and category summaries
"""

from datetime import date
from decimal import Decimal
from uuid import uuid4

import pytest

from cashbook_kernel.domain.records import DateRange, RecordKind
from cashbook_services.reporting_service import ReportingService


@pytest.fixture
def service(session, config) -> ReportingService:
    return ReportingService(session, config)


@pytest.fixture
def wallet(data):
    return data.wallet("Tiền mặt")


class TestProjectSummary:
    def test_full_scenario(self, data, service, wallet):
        deposit = data.income_category("DEPOSIT", "Đặt cọc")
        payment = data.income_category("PAYMENT", "Thanh toán")
        project = data.project(discount="500000")
        data.order_item(project, "2", "2000000")
        data.order_item(project, "1", "9000000", accepted_unit_price="5500000")
        job = data.job(project, data.workshop(), "4000000", "200000")
        data.record(RecordKind.EXPENSE, "300000", wallet, project=project)
        data.record(RecordKind.EXPENSE, "1000000", wallet, project=project, job=job)
        data.record(RecordKind.INCOME, "2000000", wallet, project=project, income_category=deposit)
        data.record(RecordKind.INCOME, "3000000", wallet, project=project, income_category=payment)

        summary = service.project_summary(project.id)

        assert summary.order_total == Decimal("9000000")
        assert summary.workshop_total == Decimal("3800000")
        assert summary.expense_total == Decimal("4100000")
        assert summary.profit == Decimal("4900000")
        assert summary.deposit_total == Decimal("2000000")
        assert summary.customer_debt == Decimal("4000000")

    def test_deleted_rows_excluded(self, data, service, wallet):
        project = data.project()
        live = data.order_item(project, "1", "1000")
        gone = data.order_item(project, "1", "5000")
        data.soft_delete(gone)
        job = data.job(project, data.workshop(), "300")
        data.soft_delete(job)
        income = data.record(RecordKind.INCOME, "400", wallet, project=project)
        data.soft_delete(data.record(RecordKind.INCOME, "600", wallet, project=project))

        summary = service.project_summary(project.id)

        assert live is not None and income is not None
        assert summary.order_total == Decimal("1000")
        assert summary.workshop_total == Decimal("0")
        assert summary.paid_total == Decimal("400")

    def test_date_range_limits_records(self, data, service, wallet):
        project = data.project()
        data.record(RecordKind.INCOME, "100", wallet, on=date(2024, 4, 30), project=project)
        data.record(RecordKind.INCOME, "200", wallet, on=date(2024, 5, 1), project=project)

        summary = service.project_summary(project.id, DateRange(start=date(2024, 5, 1)))

        assert summary.income_total == Decimal("200")

    def test_date_range_keeps_order_and_workshop_totals(self, data, service, wallet):
        project = data.project()
        data.order_item(project, "1", "1000")
        data.job(project, data.workshop(), "400")
        data.record(RecordKind.INCOME, "300", wallet, on=date(2024, 4, 30), project=project)
        data.record(RecordKind.INCOME, "200", wallet, on=date(2024, 5, 1), project=project)

        summary = service.project_summary(project.id, DateRange(start=date(2024, 5, 1)))

        assert summary.order_total == Decimal("1000")
        assert summary.workshop_total == Decimal("400")
        assert summary.paid_total == Decimal("200")
        assert summary.customer_debt == Decimal("800")

    def test_unknown_project_is_zero(self, service, config):
        summary = service.project_summary(uuid4())
        assert summary.order_total == Decimal("0")
        assert summary.stage == config.pipeline.first_stage

    def test_summaries_filtered_by_search(self, data, service):
        data.project(name="Tủ bếp")
        data.project(name="Kệ sách")
        summaries = service.project_summaries(search="kệ")
        assert [s.name for s in summaries] == ["Kệ sách"]


class TestWalletsAndWorkshops:
    def test_cashflow_in_range(self, data, service, wallet):
        bank = data.wallet("Ngân hàng", wallet_type="BANK")
        data.record(RecordKind.INCOME, "1000", wallet, on=date(2024, 5, 1))
        data.record(RecordKind.TRANSFER, "400", wallet, on=date(2024, 5, 2), counterparty=bank)
        data.record(RecordKind.EXPENSE, "999", wallet, on=date(2024, 6, 1))

        report = service.wallet_cashflow(DateRange(date(2024, 5, 1), date(2024, 5, 31)))

        rows = {r.wallet_name: r for r in report.wallets}
        assert rows["Tiền mặt"].net_change == Decimal("600")
        assert rows["Ngân hàng"].net_change == Decimal("400")
        assert report.totals.net_change == Decimal("1000")

    def test_cashflow_wallet_filter_includes_incoming_transfers(self, data, service, wallet):
        bank = data.wallet("Ngân hàng")
        data.record(RecordKind.TRANSFER, "400", wallet, counterparty=bank)

        report = service.wallet_cashflow(wallet_id=bank.id)

        (row,) = report.wallets
        assert row.transfer_in_total == Decimal("400")

    def test_workshop_debts(self, data, service, wallet):
        shop = data.workshop("Xưởng A")
        project = data.project()
        job = data.job(project, shop, "1000", "100")
        data.record(RecordKind.EXPENSE, "200", wallet, on=date(2020, 1, 1), project=project, job=job)

        (row,) = service.workshop_debts()

        assert row.workshop_id == shop.id
        assert row.debt == Decimal("700")

    def test_no_jobs_no_debts(self, service):
        assert service.workshop_debts() == ()


class TestKanban:
    def test_board_uses_configured_stages(self, data, service, config):
        data.project(name="A", stage="Thi công")
        data.project(name="B", stage="Không rõ")

        board = service.kanban()

        assert board.stages == config.pipeline.stages
        assert [c.name for c in board.column("Thi công").cards] == ["A"]
        assert [c.name for c in board.column(config.pipeline.first_stage).cards] == ["B"]

    def test_customer_filter(self, data, service):
        lan = data.customer("Lan")
        data.project(name="A", customer=lan)
        data.project(name="B")

        board = service.kanban(customer_id=lan.id)

        cards = [card for column in board.columns for card in column.cards]
        assert [c.name for c in cards] == ["A"]
        assert cards[0].customer_name == "Lan"


class TestDashboardAndCategories:
    def test_dashboard(self, data, service, wallet):
        customer = data.customer("Lan")
        project = data.project(customer=customer)
        data.order_item(project, "1", "1000")
        data.record(RecordKind.INCOME, "300", wallet, on=date(2023, 12, 31), project=project)
        data.record(RecordKind.INCOME, "200", wallet, on=date(2024, 5, 1), project=project)
        data.record(RecordKind.EXPENSE, "50", wallet, on=date(2024, 5, 2), is_ads=True, ads_platform="facebook")

        overview = service.dashboard(DateRange(date(2024, 1, 1), date(2024, 12, 31)))

        assert overview.revenue_total == Decimal("200")
        assert overview.expense_total == Decimal("50")
        assert overview.customer_debt_total == Decimal("500")
        assert [a.platform for a in overview.ads_by_platform] == ["facebook"]

    def test_income_summary_other_label_from_config(self, data, service, wallet, config):
        data.record(RecordKind.INCOME, "100", wallet)
        summary = service.income_summary()
        (row,) = summary.by_category
        assert row.name == config.reports.other_category_label

    def test_expense_summary_by_category(self, data, service, wallet):
        rent = data.expense_category("Thuê xưởng")
        data.record(RecordKind.EXPENSE, "700", wallet, expense_category=rent, is_common_cost=True)
        data.record(RecordKind.EXPENSE, "300", wallet)

        summary = service.expense_summary()

        assert summary.common_total == Decimal("700")
        assert summary.by_category[0].name == "Thuê xưởng"
        assert summary.by_category[0].percent == 70
