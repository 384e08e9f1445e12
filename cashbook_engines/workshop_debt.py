"""
Module: cashbook_engines.workshop_debt
Responsibility:
    What the business still owes each workshop: per job, the net job amount
    minus the expense payments recorded against it, summed per workshop.

Architecture position:
    Engines -- pure calculation layer, zero I/O.

Invariants enforced:
    - job_net  = net_amount(raw_amount, discount_amount)
    - job_paid = sum of EXPENSE records whose workshop_job_id is the job
    - job_debt = max(0, job_net - job_paid); overpaying one job never
      offsets the debt on another.
    - workshop debt = sum of its job debts.
    - Only workshops with debt strictly greater than zero are returned,
      sorted by debt descending, ties broken by workshop name then code.
    - Jobs whose workshop is not among ``workshops`` (deleted or filtered
      out by the caller) are not reported.

Failure modes:
    - None.  An unknown ``workshop_id`` yields an empty result.
"""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable, Sequence
from uuid import UUID

from cashbook_engines.netting import job_net, net_amount
from cashbook_engines.tracer import traced_engine
from cashbook_kernel.db.types import ZERO
from cashbook_kernel.domain.records import LedgerRecord, RecordKind, Workshop, WorkshopJob


@dataclass(frozen=True)
class JobDebt:
    job_id: UUID
    job_code: str
    project_id: UUID
    net_amount: Decimal
    paid_total: Decimal
    debt: Decimal


@dataclass(frozen=True)
class WorkshopDebt:
    workshop_id: UUID
    workshop_code: str
    workshop_name: str
    phone: str | None
    debt: Decimal
    jobs: tuple[JobDebt, ...]


def payments_by_job(records: Iterable[LedgerRecord]) -> dict[UUID, Decimal]:
    paid: dict[UUID, Decimal] = defaultdict(lambda: ZERO)
    for record in records:
        if record.kind == RecordKind.EXPENSE and record.workshop_job_id is not None:
            paid[record.workshop_job_id] += record.amount
    return paid


def job_debt(job: WorkshopJob, paid_total: Decimal) -> JobDebt:
    net = job_net(job)
    return JobDebt(
        job_id=job.id,
        job_code=job.code,
        project_id=job.project_id,
        net_amount=net,
        paid_total=paid_total,
        debt=net_amount(net, paid_total),
    )


def total_debt(rows: Iterable[WorkshopDebt]) -> Decimal:
    total = ZERO
    for row in rows:
        total += row.debt
    return total


@traced_engine("workshop_debt", "1.0", fingerprint_fields=("workshop_id",))
def workshop_debt_report(
    jobs: Iterable[WorkshopJob],
    records: Iterable[LedgerRecord],
    workshops: Iterable[Workshop],
    workshop_id: UUID | None = None,
) -> tuple[WorkshopDebt, ...]:
    """Workshops that are owed money, largest debt first."""
    paid = payments_by_job(records)

    jobs_by_workshop: dict[UUID, list[WorkshopJob]] = defaultdict(list)
    for job in jobs:
        if workshop_id is None or job.workshop_id == workshop_id:
            jobs_by_workshop[job.workshop_id].append(job)

    rows: list[WorkshopDebt] = []
    for workshop in workshops:
        if workshop_id is not None and workshop.id != workshop_id:
            continue
        workshop_jobs: Sequence[WorkshopJob] = jobs_by_workshop.get(workshop.id, ())
        breakdown = tuple(job_debt(job, paid.get(job.id, ZERO)) for job in workshop_jobs)
        debt = ZERO
        for item in breakdown:
            debt += item.debt
        if debt > ZERO:
            rows.append(
                WorkshopDebt(
                    workshop_id=workshop.id,
                    workshop_code=workshop.code,
                    workshop_name=workshop.name,
                    phone=workshop.phone,
                    debt=debt,
                    jobs=breakdown,
                )
            )

    rows.sort(key=lambda row: (-row.debt, row.workshop_name, row.workshop_code))
    return tuple(rows)
