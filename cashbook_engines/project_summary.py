"""
Module: cashbook_engines.project_summary
Responsibility:
    Per-project financial summary: income partitioned by classification,
    workshop and direct expenses, order total after discounts, profit and
    outstanding customer debt.

Architecture position:
    Engines -- pure calculation layer, zero I/O.  Inputs come from
    ``LedgerSelector``; records are already free of soft-deleted rows and
    already restricted to the caller's date range.

Invariants enforced:
    - income_total == deposit_total + payment_total + final_total.
    - workshop_total = sum of net_amount(raw, discount) over the project's
      workshop jobs; payments made to workshops are NOT added again.
    - direct_expense_total counts only EXPENSE records classified DIRECT.
      Common costs, ads spend and workshop payments are excluded.
    - expense_total == workshop_total + direct_expense_total.
    - order_total = net_amount(sum of effective line totals, project discount).
    - customer_debt == max(0, order_total - paid_total), paid_total being
      income_total.  Overpayment is not reported.
    - estimated_total is the gross item total and is NOT discount-netted.
    - Records and jobs of other projects are ignored.  Identical inputs
      give equal outputs.

Failure modes:
    - None.  A project with no records or jobs yields zero totals.

Usage:
    from cashbook_engines.project_summary import project_financial_summary

    summary = project_financial_summary(
        project, snapshot.records, snapshot.workshop_jobs,
        snapshot.income_categories, config.classification,
    )
    summary.customer_debt
"""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable, Sequence
from uuid import UUID

from cashbook_engines.classification import (
    ExpenseClass,
    IncomeClass,
    IncomeClassifier,
    classify_expense,
)
from cashbook_engines.netting import job_net, net_amount, order_gross_total, order_total
from cashbook_engines.tracer import traced_engine
from cashbook_kernel.db.types import ZERO
from cashbook_kernel.domain.records import (
    IncomeCategory,
    LedgerRecord,
    Project,
    RecordKind,
    WorkshopJob,
)
from cashbook_kernel.domain.rules import DEFAULT_CLASSIFICATION_RULES, ClassificationRules


@dataclass(frozen=True)
class IncomeBreakdown:
    deposit_total: Decimal = ZERO
    payment_total: Decimal = ZERO
    final_total: Decimal = ZERO

    @property
    def income_total(self) -> Decimal:
        return self.deposit_total + self.payment_total + self.final_total


@dataclass(frozen=True)
class ProjectFinancialSummary:
    """Financial position of one project."""

    project_id: UUID
    code: str
    name: str
    stage: str
    deposit_total: Decimal
    payment_total: Decimal
    final_total: Decimal
    income_total: Decimal
    workshop_total: Decimal
    direct_expense_total: Decimal
    expense_total: Decimal
    estimated_total: Decimal
    order_total: Decimal
    profit: Decimal
    paid_total: Decimal
    customer_debt: Decimal
    cash_profit: Decimal


def estimated_total(project: Project) -> Decimal:
    """Gross item total, without the project discount."""
    return order_gross_total(project.items)


def cash_profit(income_total: Decimal, expense_total: Decimal) -> Decimal:
    """Money received minus money committed to costs; may be negative."""
    return income_total - expense_total


def income_breakdown(
    records: Iterable[LedgerRecord],
    classifier: IncomeClassifier,
) -> IncomeBreakdown:
    totals = {cls: ZERO for cls in IncomeClass}
    for record in records:
        if record.kind != RecordKind.INCOME:
            continue
        totals[classifier.classify(record)] += record.amount
    return IncomeBreakdown(
        deposit_total=totals[IncomeClass.DEPOSIT],
        payment_total=totals[IncomeClass.PAYMENT],
        final_total=totals[IncomeClass.FINAL],
    )


def direct_expense_total(records: Iterable[LedgerRecord]) -> Decimal:
    total = ZERO
    for record in records:
        if record.kind == RecordKind.EXPENSE and classify_expense(record) == ExpenseClass.DIRECT:
            total += record.amount
    return total


def workshop_total(jobs: Iterable[WorkshopJob]) -> Decimal:
    total = ZERO
    for job in jobs:
        total += job_net(job)
    return total


def summarize_project(
    project: Project,
    records: Sequence[LedgerRecord],
    jobs: Sequence[WorkshopJob],
    classifier: IncomeClassifier,
) -> ProjectFinancialSummary:
    """
    Untraced core of ``project_financial_summary``.

    ``records`` and ``jobs`` must already be restricted to ``project``.
    """
    income = income_breakdown(records, classifier)
    workshop = workshop_total(jobs)
    direct = direct_expense_total(records)
    expense = workshop + direct
    total = order_total(project.items, project.discount_amount)
    paid = income.income_total

    return ProjectFinancialSummary(
        project_id=project.id,
        code=project.code,
        name=project.name,
        stage=project.stage,
        deposit_total=income.deposit_total,
        payment_total=income.payment_total,
        final_total=income.final_total,
        income_total=income.income_total,
        workshop_total=workshop,
        direct_expense_total=direct,
        expense_total=expense,
        estimated_total=estimated_total(project),
        order_total=total,
        profit=total - expense,
        paid_total=paid,
        customer_debt=net_amount(total, paid),
        cash_profit=cash_profit(income.income_total, expense),
    )


@traced_engine("project_summary", "1.0", fingerprint_fields=("project",))
def project_financial_summary(
    project: Project,
    records: Iterable[LedgerRecord],
    jobs: Iterable[WorkshopJob],
    categories: Iterable[IncomeCategory] = (),
    rules: ClassificationRules = DEFAULT_CLASSIFICATION_RULES,
) -> ProjectFinancialSummary:
    """
    Compute the financial summary of ``project``.

    Records and jobs belonging to other projects are ignored, so the whole
    snapshot may be passed in.
    """
    classifier = IncomeClassifier(rules, categories)
    own_records = [r for r in records if r.project_id == project.id]
    own_jobs = [j for j in jobs if j.project_id == project.id]
    return summarize_project(project, own_records, own_jobs, classifier)


def group_by_project(
    records: Iterable[LedgerRecord],
    jobs: Iterable[WorkshopJob],
) -> tuple[dict[UUID, list[LedgerRecord]], dict[UUID, list[WorkshopJob]]]:
    """Index records and jobs by project id; unlinked records are dropped."""
    records_by_project: dict[UUID, list[LedgerRecord]] = defaultdict(list)
    for record in records:
        if record.project_id is not None:
            records_by_project[record.project_id].append(record)
    jobs_by_project: dict[UUID, list[WorkshopJob]] = defaultdict(list)
    for job in jobs:
        jobs_by_project[job.project_id].append(job)
    return records_by_project, jobs_by_project


@traced_engine("project_summaries", "1.0")
def project_financial_summaries(
    projects: Iterable[Project],
    records: Iterable[LedgerRecord],
    jobs: Iterable[WorkshopJob],
    categories: Iterable[IncomeCategory] = (),
    rules: ClassificationRules = DEFAULT_CLASSIFICATION_RULES,
) -> tuple[ProjectFinancialSummary, ...]:
    """Summaries for many projects from one snapshot, in input order."""
    classifier = IncomeClassifier(rules, categories)
    records_by_project, jobs_by_project = group_by_project(records, jobs)
    return tuple(
        summarize_project(
            project,
            records_by_project.get(project.id, ()),
            jobs_by_project.get(project.id, ()),
            classifier,
        )
        for project in projects
    )
