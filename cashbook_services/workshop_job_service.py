"""
cashbook_services.workshop_job_service -- Authoring of workshop jobs and their payments.

Responsibility:
    Create workshop jobs with an allocator-issued code, keep
    ``raw_amount`` in step with the job's line items, change the
    discount, and record payments to the workshop as EXPENSE records.

Architecture position:
    Services -- stateful orchestration over kernel models, validation and
    ``SequenceService``.

Invariants enforced:
    - Validation runs BEFORE anything is written: negative quantities,
      prices or amounts and a discount above the raw amount raise
      ``ValidationError`` subclasses.
    - raw_amount = sum of quantity x unit_price over the job's items,
      recomputed in the same transaction as every item change.
    - 0 <= discount_amount <= raw_amount holds after every operation.
    - Codes come from ``SequenceService`` (WORKSHOP_JOB for jobs,
      EXPENSE_VOUCHER for payments); allocation failures propagate and
      the document is not created.
    - Flushes but NEVER commits; the caller owns the transaction.

Failure modes:
    - ValidationError subclasses (see above).
    - ProjectNotFoundError, WorkshopNotFoundError, WorkshopJobNotFoundError,
      WalletNotFoundError for missing or soft-deleted references.
    - UnknownSequenceKeyError when the sequence formats lack a key.

Usage:
    sequences = SequenceService(session, config.sequence_formats)
    jobs = WorkshopJobService(session, sequences)
    job = jobs.create_job(project_id, workshop_id, items=[JobItemInput("Cabinet", 2, 1500000)])
    jobs.record_payment(job.id, Decimal("1000000"), date(2024, 5, 2), wallet_id)
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Sequence
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm import Session

from cashbook_kernel.db.types import ZERO, to_money
from cashbook_kernel.domain.records import LedgerRecord, RecordKind, WorkshopJob
from cashbook_kernel.domain.validation import validate_amount, validate_discount, validate_line
from cashbook_kernel.exceptions import (
    ProjectNotFoundError,
    WalletNotFoundError,
    WorkshopJobNotFoundError,
    WorkshopNotFoundError,
)
from cashbook_kernel.logging_config import LogContext, get_logger
from cashbook_kernel.models.catalog import WalletModel, WorkshopModel
from cashbook_kernel.models.ledger import LedgerRecordModel
from cashbook_kernel.models.project import (
    ProjectModel,
    WorkshopJobItemModel,
    WorkshopJobModel,
)
from cashbook_kernel.services.sequence_service import SequenceService

logger = get_logger("services.workshop_job")


@dataclass(frozen=True)
class JobItemInput:
    """One line of a workshop job as supplied by the caller."""

    product_name: str
    quantity: Decimal
    unit_price: Decimal
    unit: str | None = None

    @property
    def line_total(self) -> Decimal:
        return to_money(self.quantity) * to_money(self.unit_price)


def items_total(items: Sequence[JobItemInput]) -> Decimal:
    """Validate every line and return the sum of line totals."""
    total = ZERO
    for item in items:
        validate_line(to_money(item.quantity), to_money(item.unit_price))
        total += item.line_total
    return total


class WorkshopJobService:
    """Validated writes for workshop jobs."""

    def __init__(self, session: Session, sequences: SequenceService):
        self.session = session
        self.sequences = sequences

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def _live(self, model: type, entity_id: UUID):
        return self.session.execute(
            select(model).where(model.id == entity_id, model.deleted_at.is_(None))
        ).scalar_one_or_none()

    def _get_job(self, job_id: UUID) -> WorkshopJobModel:
        job = self._live(WorkshopJobModel, job_id)
        if job is None:
            raise WorkshopJobNotFoundError(job_id)
        return job

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def create_job(
        self,
        project_id: UUID,
        workshop_id: UUID,
        items: Sequence[JobItemInput] | None = None,
        raw_amount: Decimal | None = None,
        discount_amount: Decimal = ZERO,
        title: str | None = None,
        start_date: date | None = None,
        due_date: date | None = None,
        note: str | None = None,
    ) -> WorkshopJob:
        """
        Create a workshop job.

        When ``items`` are given, ``raw_amount`` is their total and any
        supplied ``raw_amount`` is ignored.  Without items the supplied
        ``raw_amount`` (default 0) is used.

        Raises:
            ValidationError: Invalid line, amount or discount.
            ProjectNotFoundError: Project missing or deleted.
            WorkshopNotFoundError: Workshop missing or deleted.
        """
        items = list(items or ())
        if items:
            raw = items_total(items)
        else:
            raw = validate_amount("raw_amount", to_money(raw_amount))
        discount = validate_discount(raw, to_money(discount_amount))

        if self._live(ProjectModel, project_id) is None:
            raise ProjectNotFoundError(project_id)
        if self._live(WorkshopModel, workshop_id) is None:
            raise WorkshopNotFoundError(workshop_id)

        allocated = self.sequences.allocate(SequenceService.WORKSHOP_JOB)
        with LogContext.bind(document_key=allocated.code):
            job = WorkshopJobModel(
                code=allocated.code,
                project_id=project_id,
                workshop_id=workshop_id,
                title=title,
                raw_amount=raw,
                discount_amount=discount,
                start_date=start_date,
                due_date=due_date,
                note=note,
                items=[self._item_model(item) for item in items],
            )
            self.session.add(job)
            self.session.flush()

            logger.info(
                "workshop_job_created",
                extra={
                    "job_id": job.id,
                    "project_id": project_id,
                    "workshop_id": workshop_id,
                    "raw_amount": raw,
                    "discount_amount": discount,
                },
            )
        return job.to_dto()

    def replace_items(self, job_id: UUID, items: Sequence[JobItemInput]) -> WorkshopJob:
        """
        Replace every line of a job and recompute ``raw_amount``.

        Raises:
            WorkshopJobNotFoundError: Job missing or deleted.
            ValidationError: Invalid line, or the existing discount now
                exceeds the new raw amount.
        """
        job = self._get_job(job_id)
        with LogContext.bind(document_key=job.code):
            raw = items_total(items)
            validate_discount(raw, job.discount_amount or ZERO)

            job.items = [self._item_model(item) for item in items]
            job.raw_amount = raw
            self.session.flush()

            logger.info(
                "workshop_job_items_replaced",
                extra={"job_id": job.id, "item_count": len(items), "raw_amount": raw},
            )
        return job.to_dto()

    def set_discount(self, job_id: UUID, discount_amount: Decimal) -> WorkshopJob:
        """
        Raises:
            WorkshopJobNotFoundError: Job missing or deleted.
            ValidationError: Discount negative or above the raw amount.
        """
        job = self._get_job(job_id)
        with LogContext.bind(document_key=job.code):
            discount = validate_discount(job.raw_amount or ZERO, to_money(discount_amount))
            job.discount_amount = discount
            self.session.flush()

            logger.info(
                "workshop_job_discount_set",
                extra={"job_id": job.id, "discount_amount": discount},
            )
        return job.to_dto()

    def record_payment(
        self,
        job_id: UUID,
        amount: Decimal,
        on: date,
        wallet_id: UUID,
        note: str | None = None,
    ) -> LedgerRecord:
        """
        Record money paid to the job's workshop.

        Writes an EXPENSE record linked to the job and its project, with an
        EXPENSE_VOUCHER code.

        Raises:
            NegativeAmountError: Negative amount.
            WorkshopJobNotFoundError: Job missing or deleted.
            WalletNotFoundError: Wallet missing or deleted.
        """
        amount = validate_amount("amount", to_money(amount))
        job = self._get_job(job_id)
        if self._live(WalletModel, wallet_id) is None:
            raise WalletNotFoundError(wallet_id)

        allocated = self.sequences.allocate(SequenceService.EXPENSE_VOUCHER)
        with LogContext.bind(document_key=allocated.code):
            record = LedgerRecordModel(
                kind=RecordKind.EXPENSE.value,
                code=allocated.code,
                amount=amount,
                record_date=on,
                wallet_id=wallet_id,
                project_id=job.project_id,
                workshop_job_id=job.id,
                note=note,
            )
            self.session.add(record)
            self.session.flush()

            logger.info(
                "workshop_payment_recorded",
                extra={
                    "job_id": job.id,
                    "job_code": job.code,
                    "amount": amount,
                    "wallet_id": wallet_id,
                },
            )
        return record.to_dto()

    @staticmethod
    def _item_model(item: JobItemInput) -> WorkshopJobItemModel:
        return WorkshopJobItemModel(
            product_name=item.product_name,
            unit=item.unit,
            quantity=to_money(item.quantity),
            unit_price=to_money(item.unit_price),
        )
