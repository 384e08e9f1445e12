"""
ORM model for money-movement records (``ledger_records``).

Responsibility
--------------
One table holds every kind of money movement -- INCOME, EXPENSE, TRANSFER
and ADJUSTMENT -- with nullable links to the project, workshop job,
category and counterparty wallet.  Aggregation reads these rows through
``LedgerSelector`` only.

Invariants enforced
-------------------
* Rows are never physically deleted; ``deleted_at`` is set instead.
* ``amount`` is stored positive for INCOME, EXPENSE and TRANSFER and signed
  for ADJUSTMENT.  The authoring collaborator enforces this.
* ``counterparty_wallet_id`` is populated only for TRANSFER.
"""

from datetime import date
from decimal import Decimal
from uuid import UUID

from sqlalchemy import Boolean, Date, ForeignKey, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from cashbook_kernel.db.base import TrackedBase
from cashbook_kernel.domain.records import LedgerRecord, RecordKind


class LedgerRecordModel(TrackedBase):
    """A single money movement in or between wallets."""

    __tablename__ = "ledger_records"

    __table_args__ = (
        Index("idx_ledger_kind_date", "kind", "record_date"),
        Index("idx_ledger_wallet", "wallet_id"),
        Index("idx_ledger_counterparty_wallet", "counterparty_wallet_id"),
        Index("idx_ledger_project", "project_id"),
        Index("idx_ledger_workshop_job", "workshop_job_id"),
    )

    kind: Mapped[str] = mapped_column(String(20), nullable=False)
    code: Mapped[str | None] = mapped_column(String(32), nullable=True)
    amount: Mapped[Decimal] = mapped_column(nullable=False)
    record_date: Mapped[date] = mapped_column(Date, nullable=False)

    wallet_id: Mapped[UUID] = mapped_column(ForeignKey("wallets.id"), nullable=False)
    counterparty_wallet_id: Mapped[UUID | None] = mapped_column(
        ForeignKey("wallets.id"), nullable=True
    )
    project_id: Mapped[UUID | None] = mapped_column(ForeignKey("projects.id"), nullable=True)
    workshop_job_id: Mapped[UUID | None] = mapped_column(
        ForeignKey("workshop_jobs.id"), nullable=True
    )
    income_category_id: Mapped[UUID | None] = mapped_column(
        ForeignKey("income_categories.id"), nullable=True
    )
    expense_category_id: Mapped[UUID | None] = mapped_column(
        ForeignKey("expense_categories.id"), nullable=True
    )

    is_common_cost: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    is_ads: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    ads_platform: Mapped[str | None] = mapped_column(String(50), nullable=True)
    note: Mapped[str | None] = mapped_column(String(4000), nullable=True)

    def to_dto(self) -> LedgerRecord:
        return LedgerRecord(
            id=self.id,
            kind=RecordKind(self.kind),
            amount=self.amount,
            record_date=self.record_date,
            wallet_id=self.wallet_id,
            counterparty_wallet_id=self.counterparty_wallet_id,
            project_id=self.project_id,
            workshop_job_id=self.workshop_job_id,
            income_category_id=self.income_category_id,
            expense_category_id=self.expense_category_id,
            is_common_cost=bool(self.is_common_cost),
            is_ads=bool(self.is_ads),
            ads_platform=self.ads_platform,
            note=self.note,
            code=self.code,
        )

    def __repr__(self) -> str:
        return f"<LedgerRecordModel {self.kind} {self.amount} {self.record_date}>"
