"""
Module: cashbook_engines.kanban
Responsibility:
    Group projects into the fixed, ordered sales/production pipeline and
    attach per-project money figures to every card.

Architecture position:
    Engines -- pure calculation layer, zero I/O.  The pipeline stage list
    comes from ``cashbook_config`` (``PipelineConfig.stages``).

Invariants enforced:
    - Every pipeline stage appears in the board, in pipeline order, even
      when it holds no cards.
    - A project whose stage is not a pipeline member is shown in the FIRST
      stage; its card carries that fallback stage.
    - Cards within a stage keep the input order of ``projects``.
    - income_total, workshop_total and expense_total use the same formulas
      as the project summary.  estimated_total is the gross item total and
      is intentionally NOT discount-netted.
    - cash_profit = income_total - expense_total.

Failure modes:
    - ValueError if ``stages`` is empty.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Iterable, Sequence
from uuid import UUID

from cashbook_engines.project_summary import (
    cash_profit,
    direct_expense_total,
    estimated_total,
    group_by_project,
    workshop_total,
)
from cashbook_engines.tracer import traced_engine
from cashbook_kernel.db.types import ZERO
from cashbook_kernel.domain.records import (
    ALL_TIME,
    Customer,
    DateRange,
    LedgerRecord,
    Project,
    RecordKind,
    WorkshopJob,
)


@dataclass(frozen=True)
class KanbanFilters:
    """
    Optional board filters.

    ``search`` is a case-insensitive substring of project name or code.
    ``updated_range`` keeps projects last updated inside the range.
    """

    customer_id: UUID | None = None
    search: str | None = None
    updated_range: DateRange = ALL_TIME

    def matches(self, project: Project) -> bool:
        if self.customer_id is not None and project.customer_id != self.customer_id:
            return False
        if self.search:
            needle = self.search.strip().lower()
            if needle and needle not in project.name.lower() and needle not in project.code.lower():
                return False
        if not self.updated_range.is_open:
            if project.updated_at is None:
                return False
            if not self.updated_range.contains(project.updated_at.date()):
                return False
        return True


NO_FILTERS = KanbanFilters()


@dataclass(frozen=True)
class KanbanCard:
    project_id: UUID
    code: str
    name: str
    stage: str
    customer_id: UUID | None
    customer_name: str | None
    estimated_total: Decimal
    income_total: Decimal
    workshop_total: Decimal
    expense_total: Decimal
    cash_profit: Decimal
    updated_at: datetime | None


@dataclass(frozen=True)
class KanbanColumn:
    stage: str
    cards: tuple[KanbanCard, ...]


@dataclass(frozen=True)
class KanbanBoard:
    stages: tuple[str, ...]
    columns: tuple[KanbanColumn, ...]

    def column(self, stage: str) -> KanbanColumn:
        for column in self.columns:
            if column.stage == stage:
                return column
        raise KeyError(stage)


def resolve_stage(stage: str, stages: Sequence[str]) -> str:
    return stage if stage in stages else stages[0]


@traced_engine("kanban", "1.0", fingerprint_fields=("stages", "filters"))
def kanban_grouping(
    projects: Iterable[Project],
    records: Iterable[LedgerRecord],
    jobs: Iterable[WorkshopJob],
    stages: Sequence[str],
    filters: KanbanFilters = NO_FILTERS,
    customers: Iterable[Customer] = (),
) -> KanbanBoard:
    """Build the pipeline board for ``projects`` that pass ``filters``."""
    stages = tuple(stages)
    if not stages:
        raise ValueError("Kanban pipeline must define at least one stage")

    customer_names = {c.id: c.name for c in customers}
    records_by_project, jobs_by_project = group_by_project(records, jobs)
    cards: dict[str, list[KanbanCard]] = {stage: [] for stage in stages}

    for project in projects:
        if not filters.matches(project):
            continue
        own_records = records_by_project.get(project.id, ())
        income = ZERO
        for record in own_records:
            if record.kind == RecordKind.INCOME:
                income += record.amount
        workshop = workshop_total(jobs_by_project.get(project.id, ()))
        expense = workshop + direct_expense_total(own_records)
        stage = resolve_stage(project.stage, stages)

        cards[stage].append(
            KanbanCard(
                project_id=project.id,
                code=project.code,
                name=project.name,
                stage=stage,
                customer_id=project.customer_id,
                customer_name=customer_names.get(project.customer_id),
                estimated_total=estimated_total(project),
                income_total=income,
                workshop_total=workshop,
                expense_total=expense,
                cash_profit=cash_profit(income, expense),
                updated_at=project.updated_at,
            )
        )

    return KanbanBoard(
        stages=stages,
        columns=tuple(KanbanColumn(stage=s, cards=tuple(cards[s])) for s in stages),
    )
