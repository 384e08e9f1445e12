"""
cashbook_services.reporting_service -- Report assembly over the ledger.

Responsibility:
    Fetch one ``LedgerSnapshot`` through ``LedgerSelector`` and run the pure
    aggregation engines over it: project summaries, wallet cashflow,
    workshop debts, the kanban board, category summaries and the dashboard.

Architecture position:
    Services -- read-only orchestration over kernel selectors + engines.
    Configuration (classification keywords, pipeline stages, report
    defaults) is injected as a ``CashbookConfig``.

Invariants enforced:
    - Read-only: never adds, flushes or commits.
    - All deletion filtering happens in the selector; engines only see
      live rows.
    - Debt figures (workshop debts, customer debts) are computed over
      all-time records; period figures over the requested date range.
    - Unknown ids produce zero / empty results, never NotFoundError.

Failure modes:
    - Database errors from the selector propagate unchanged.

Usage:
    service = ReportingService(session, get_active_config())
    summary = service.project_summary(project_id)
    board = service.kanban(search="DH000")
"""

from __future__ import annotations

from uuid import UUID

from sqlalchemy.orm import Session

from cashbook_config import get_active_config
from cashbook_config.schema import CashbookConfig
from cashbook_engines.cashflow import (
    CashflowReport,
    UnfilteredTransferDirection,
    wallet_cashflow_report,
)
from cashbook_engines.category_summary import (
    ExpenseSummary,
    IncomeSummary,
    expense_summary,
    income_summary,
)
from cashbook_engines.dashboard import DashboardOverview, dashboard_overview
from cashbook_engines.kanban import KanbanBoard, KanbanFilters, kanban_grouping
from cashbook_engines.project_summary import (
    ProjectFinancialSummary,
    project_financial_summaries,
    project_financial_summary,
)
from cashbook_engines.series import Granularity
from cashbook_engines.workshop_debt import WorkshopDebt, workshop_debt_report
from cashbook_kernel.domain.records import ALL_TIME, DateRange, Project
from cashbook_kernel.logging_config import get_logger
from cashbook_kernel.selectors.ledger_selector import LedgerSelector

logger = get_logger("services.reporting")


class ReportingService:
    """
    Read-side facade used by the API layer.

    Contract:
        Every method performs one selector read pass followed by pure
        engine calls.  Results are frozen dataclasses.
    """

    def __init__(self, session: Session, config: CashbookConfig | None = None):
        """
        Args:
            session: SQLAlchemy session; the caller owns its transaction.
            config: Runtime configuration.  Defaults to ``get_active_config()``.
        """
        self.session = session
        self.config = config or get_active_config()
        self.selector = LedgerSelector(session)

    # ------------------------------------------------------------------
    # Projects
    # ------------------------------------------------------------------

    def project_summary(
        self,
        project_id: UUID,
        date_range: DateRange = ALL_TIME,
    ) -> ProjectFinancialSummary:
        """
        Financial summary of one project.

        An unknown (or deleted) project yields an all-zero summary with
        empty code and name.

        ``date_range`` narrows the ledger records only, so income and
        direct expenses are for the range.  ``order_total`` and
        ``workshop_total`` come from the project lines and workshop jobs,
        which are not dated.  ``customer_debt`` is the full order total
        less the payments inside the range, so for a bounded range it is
        not the debt outstanding at the end of that range.
        """
        projects = self.selector.projects(project_ids=[project_id])
        project = projects[0] if projects else Project(
            id=project_id,
            code="",
            name="",
            stage=self.config.pipeline.first_stage,
        )
        records = self.selector.records(date_range=date_range, project_ids=[project_id])
        jobs = self.selector.workshop_jobs(project_ids=[project_id])

        return project_financial_summary(
            project,
            records,
            jobs,
            self.selector.income_categories(),
            self.config.classification,
        )

    def project_summaries(
        self,
        date_range: DateRange = ALL_TIME,
        stage: str | None = None,
        customer_id: UUID | None = None,
        search: str | None = None,
    ) -> tuple[ProjectFinancialSummary, ...]:
        """Summaries for every live project matching the filters."""
        projects = self.selector.projects(customer_id=customer_id, stage=stage)
        if search:
            filters = KanbanFilters(search=search)
            projects = tuple(p for p in projects if filters.matches(p))
        if not projects:
            return ()

        project_ids = [p.id for p in projects]
        return project_financial_summaries(
            projects,
            self.selector.records(date_range=date_range, project_ids=project_ids),
            self.selector.workshop_jobs(project_ids=project_ids),
            self.selector.income_categories(),
            self.config.classification,
        )

    def kanban(
        self,
        date_range: DateRange = ALL_TIME,
        customer_id: UUID | None = None,
        search: str | None = None,
    ) -> KanbanBoard:
        """
        The pipeline board.

        ``date_range`` selects projects by their last update; card totals
        cover all of a project's records.
        """
        projects = self.selector.projects(customer_id=customer_id)
        project_ids = [p.id for p in projects]
        filters = KanbanFilters(
            customer_id=customer_id,
            search=search,
            updated_range=date_range,
        )
        return kanban_grouping(
            projects,
            self.selector.records(project_ids=project_ids),
            self.selector.workshop_jobs(project_ids=project_ids),
            self.config.pipeline.stages,
            filters,
            self.selector.customers(),
        )

    # ------------------------------------------------------------------
    # Wallets and workshops
    # ------------------------------------------------------------------

    def wallet_cashflow(
        self,
        date_range: DateRange = ALL_TIME,
        wallet_id: UUID | None = None,
        transfer_direction: UnfilteredTransferDirection = UnfilteredTransferDirection.OUTGOING,
        granularity: Granularity = Granularity.DAY,
    ) -> CashflowReport:
        records = self.selector.records(date_range=date_range, wallet_id=wallet_id)
        wallets = self.selector.wallets(wallet_id=wallet_id)
        report = wallet_cashflow_report(
            records,
            wallets,
            wallet_id=wallet_id,
            transfer_direction=transfer_direction,
            granularity=granularity,
        )
        logger.info(
            "cashflow_report_built",
            extra={
                "wallet_id": wallet_id,
                "date_start": date_range.start,
                "date_end": date_range.end,
                "wallet_count": len(report.wallets),
            },
        )
        return report

    def workshop_debts(self, workshop_id: UUID | None = None) -> tuple[WorkshopDebt, ...]:
        jobs = self.selector.workshop_jobs(workshop_id=workshop_id)
        if not jobs:
            return ()
        records = self.selector.records(workshop_job_ids=[job.id for job in jobs])
        return workshop_debt_report(
            jobs,
            records,
            self.selector.workshops(workshop_id=workshop_id),
            workshop_id=workshop_id,
        )

    # ------------------------------------------------------------------
    # Category summaries and dashboard
    # ------------------------------------------------------------------

    def income_summary(
        self,
        date_range: DateRange = ALL_TIME,
        wallet_id: UUID | None = None,
        project_id: UUID | None = None,
        granularity: Granularity = Granularity.DAY,
    ) -> IncomeSummary:
        records = self.selector.records(
            date_range=date_range,
            project_ids=[project_id] if project_id is not None else None,
        )
        return income_summary(
            records,
            self.selector.income_categories(),
            wallet_id=wallet_id,
            project_id=project_id,
            granularity=granularity,
            other_label=self.config.reports.other_category_label,
        )

    def expense_summary(
        self,
        date_range: DateRange = ALL_TIME,
        wallet_id: UUID | None = None,
        project_id: UUID | None = None,
        is_common_cost: bool | None = None,
        granularity: Granularity = Granularity.DAY,
    ) -> ExpenseSummary:
        records = self.selector.records(
            date_range=date_range,
            project_ids=[project_id] if project_id is not None else None,
        )
        return expense_summary(
            records,
            self.selector.expense_categories(),
            wallet_id=wallet_id,
            project_id=project_id,
            is_common_cost=is_common_cost,
            granularity=granularity,
            other_label=self.config.reports.other_category_label,
        )

    def dashboard(
        self,
        date_range: DateRange = ALL_TIME,
        top_n: int | None = None,
    ) -> DashboardOverview:
        all_records = self.selector.records()
        if date_range.is_open:
            period_records = all_records
        else:
            period_records = tuple(r for r in all_records if date_range.contains(r.record_date))

        return dashboard_overview(
            period_records,
            self.selector.projects(),
            self.selector.workshop_jobs(),
            self.selector.workshops(),
            self.selector.customers(),
            top_n=self.config.reports.top_n if top_n is None else top_n,
            debt_records=all_records,
        )
