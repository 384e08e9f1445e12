"""
Module: cashbook_kernel.selectors.ledger_selector
Responsibility: The record-fetch step in front of the aggregation engines.
    Reads non-deleted ledger records, projects, workshop jobs and reference
    entities, applies the caller's filters in SQL, and returns frozen
    domain DTOs bundled as a ``LedgerSnapshot``.
Architecture position: Kernel > Selectors.  The ONLY place report inputs
    are read from the database; engines never touch a session.

Invariants enforced:
    - Every query filters ``deleted_at IS NULL``.  Engines perform no
      deletion filtering of their own.
    - Results are deterministically ordered so identical database state
      yields identical snapshots (records by date then code then id,
      projects by most recently updated first).

Failure modes:
    - Unknown ids simply match nothing; the selector never raises
      not-found errors.
"""

from collections.abc import Collection
from uuid import UUID

from sqlalchemy import or_, select

from cashbook_kernel.domain.records import (
    ALL_TIME,
    Customer,
    DateRange,
    ExpenseCategory,
    IncomeCategory,
    LedgerRecord,
    LedgerSnapshot,
    Project,
    RecordKind,
    Wallet,
    Workshop,
    WorkshopJob,
)
from cashbook_kernel.logging_config import get_logger
from cashbook_kernel.models.catalog import (
    CustomerModel,
    ExpenseCategoryModel,
    IncomeCategoryModel,
    WalletModel,
    WorkshopModel,
)
from cashbook_kernel.models.ledger import LedgerRecordModel
from cashbook_kernel.models.project import ProjectModel, WorkshopJobModel
from cashbook_kernel.selectors.base import BaseSelector

logger = get_logger("selectors.ledger")


class LedgerSelector(BaseSelector[LedgerRecordModel]):
    """
    Selector for report inputs.

    Contract:
        Each method returns a tuple of frozen DTOs for live rows matching
        the given filters.  ``None`` for a filter means "no restriction";
        an empty collection means "match nothing".
    """

    def records(
        self,
        date_range: DateRange = ALL_TIME,
        project_ids: Collection[UUID] | None = None,
        wallet_id: UUID | None = None,
        workshop_job_ids: Collection[UUID] | None = None,
        kinds: Collection[RecordKind] | None = None,
    ) -> tuple[LedgerRecord, ...]:
        """
        Live ledger records.

        ``wallet_id`` matches records whose source OR destination wallet is
        the given wallet, so both legs of a transfer are visible.
        """
        stmt = select(LedgerRecordModel).where(LedgerRecordModel.deleted_at.is_(None))

        if date_range.start is not None:
            stmt = stmt.where(LedgerRecordModel.record_date >= date_range.start)
        if date_range.end is not None:
            stmt = stmt.where(LedgerRecordModel.record_date <= date_range.end)
        if project_ids is not None:
            stmt = stmt.where(LedgerRecordModel.project_id.in_(list(project_ids)))
        if wallet_id is not None:
            stmt = stmt.where(
                or_(
                    LedgerRecordModel.wallet_id == wallet_id,
                    LedgerRecordModel.counterparty_wallet_id == wallet_id,
                )
            )
        if workshop_job_ids is not None:
            stmt = stmt.where(LedgerRecordModel.workshop_job_id.in_(list(workshop_job_ids)))
        if kinds is not None:
            stmt = stmt.where(LedgerRecordModel.kind.in_([k.value for k in kinds]))

        stmt = stmt.order_by(
            LedgerRecordModel.record_date,
            LedgerRecordModel.code,
            LedgerRecordModel.id,
        )
        rows = self.session.execute(stmt).scalars().all()
        return tuple(row.to_dto() for row in rows)

    def projects(
        self,
        project_ids: Collection[UUID] | None = None,
        customer_id: UUID | None = None,
        stage: str | None = None,
    ) -> tuple[Project, ...]:
        stmt = select(ProjectModel).where(ProjectModel.deleted_at.is_(None))
        if project_ids is not None:
            stmt = stmt.where(ProjectModel.id.in_(list(project_ids)))
        if customer_id is not None:
            stmt = stmt.where(ProjectModel.customer_id == customer_id)
        if stage is not None:
            stmt = stmt.where(ProjectModel.stage == stage)
        stmt = stmt.order_by(ProjectModel.updated_at.desc(), ProjectModel.code)
        rows = self.session.execute(stmt).scalars().all()
        return tuple(row.to_dto() for row in rows)

    def workshop_jobs(
        self,
        project_ids: Collection[UUID] | None = None,
        workshop_id: UUID | None = None,
    ) -> tuple[WorkshopJob, ...]:
        stmt = select(WorkshopJobModel).where(WorkshopJobModel.deleted_at.is_(None))
        if project_ids is not None:
            stmt = stmt.where(WorkshopJobModel.project_id.in_(list(project_ids)))
        if workshop_id is not None:
            stmt = stmt.where(WorkshopJobModel.workshop_id == workshop_id)
        stmt = stmt.order_by(WorkshopJobModel.code)
        rows = self.session.execute(stmt).scalars().all()
        return tuple(row.to_dto() for row in rows)

    def wallets(self, wallet_id: UUID | None = None) -> tuple[Wallet, ...]:
        stmt = select(WalletModel).where(WalletModel.deleted_at.is_(None))
        if wallet_id is not None:
            stmt = stmt.where(WalletModel.id == wallet_id)
        rows = self.session.execute(stmt.order_by(WalletModel.name)).scalars().all()
        return tuple(row.to_dto() for row in rows)

    def workshops(self, workshop_id: UUID | None = None) -> tuple[Workshop, ...]:
        stmt = select(WorkshopModel).where(WorkshopModel.deleted_at.is_(None))
        if workshop_id is not None:
            stmt = stmt.where(WorkshopModel.id == workshop_id)
        rows = self.session.execute(stmt.order_by(WorkshopModel.name)).scalars().all()
        return tuple(row.to_dto() for row in rows)

    def customers(self) -> tuple[Customer, ...]:
        stmt = select(CustomerModel).where(CustomerModel.deleted_at.is_(None))
        rows = self.session.execute(stmt.order_by(CustomerModel.name)).scalars().all()
        return tuple(row.to_dto() for row in rows)

    def income_categories(self) -> tuple[IncomeCategory, ...]:
        stmt = select(IncomeCategoryModel).where(IncomeCategoryModel.deleted_at.is_(None))
        rows = self.session.execute(stmt.order_by(IncomeCategoryModel.name)).scalars().all()
        return tuple(row.to_dto() for row in rows)

    def expense_categories(self) -> tuple[ExpenseCategory, ...]:
        stmt = select(ExpenseCategoryModel).where(ExpenseCategoryModel.deleted_at.is_(None))
        rows = self.session.execute(stmt.order_by(ExpenseCategoryModel.name)).scalars().all()
        return tuple(row.to_dto() for row in rows)

    def snapshot(
        self,
        date_range: DateRange = ALL_TIME,
        project_ids: Collection[UUID] | None = None,
        wallet_id: UUID | None = None,
        workshop_id: UUID | None = None,
        customer_id: UUID | None = None,
    ) -> LedgerSnapshot:
        """
        Fetch everything a report needs in one read pass.

        ``project_ids`` and ``customer_id`` restrict projects, their jobs
        and their records.  ``workshop_id`` restricts jobs and
        workshops; ``wallet_id`` restricts records and wallets.  Reference
        categories and customers are always returned in full.
        """
        projects = self.projects(project_ids=project_ids, customer_id=customer_id)
        scoped_project_ids = project_ids
        if customer_id is not None:
            scoped_project_ids = [p.id for p in projects]

        jobs = self.workshop_jobs(project_ids=scoped_project_ids, workshop_id=workshop_id)
        records = self.records(
            date_range=date_range,
            project_ids=scoped_project_ids,
            wallet_id=wallet_id,
        )

        snapshot = LedgerSnapshot(
            records=records,
            projects=projects,
            workshop_jobs=jobs,
            income_categories=self.income_categories(),
            expense_categories=self.expense_categories(),
            wallets=self.wallets(wallet_id=wallet_id),
            workshops=self.workshops(workshop_id=workshop_id),
            customers=self.customers(),
            date_range=date_range,
        )
        logger.debug(
            "ledger_snapshot_loaded",
            extra={
                "record_count": len(records),
                "project_count": len(projects),
                "job_count": len(jobs),
                "date_start": date_range.start,
                "date_end": date_range.end,
            },
        )
        return snapshot
