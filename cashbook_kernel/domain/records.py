"""
Cashbook domain value objects (``cashbook_kernel.domain.records``).

Responsibility
--------------
Frozen dataclasses describing the snapshot the aggregation engines read:
ledger records, projects with their order items, workshop jobs, and the
small reference entities (wallets, workshops, customers, categories).

Architecture position
---------------------
**Kernel > Domain** -- pure data definitions with ZERO I/O.  Produced by
``LedgerSelector`` from ORM rows and consumed by ``cashbook_engines``.

Invariants enforced
-------------------
* All value objects are ``frozen=True``; collections are tuples, so a
  snapshot handed to an engine can be shared between threads.
* All monetary fields are ``Decimal`` -- NEVER ``float``.
* Order item pricing is a tagged variant: ``Planned`` or
  ``AcceptedOverride(qty, unit_price)``.  An override always carries both
  values (missing override fields are resolved from the plan when the
  snapshot is built), so "half an override" cannot be represented.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Union
from uuid import UUID


class RecordKind(str, Enum):
    """Kind of money movement."""

    INCOME = "INCOME"
    EXPENSE = "EXPENSE"
    TRANSFER = "TRANSFER"
    ADJUSTMENT = "ADJUSTMENT"


class WorkshopJobStatus(str, Enum):
    PENDING = "PENDING"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


@dataclass(frozen=True)
class LedgerRecord:
    """
    One non-deleted money movement.

    ``amount`` is positive for INCOME, EXPENSE and TRANSFER; only
    ADJUSTMENT amounts are signed.  ``counterparty_wallet_id`` is the
    destination wallet of a TRANSFER and is None for every other kind.
    """

    id: UUID
    kind: RecordKind
    amount: Decimal
    record_date: date
    wallet_id: UUID
    counterparty_wallet_id: UUID | None = None
    project_id: UUID | None = None
    workshop_job_id: UUID | None = None
    income_category_id: UUID | None = None
    expense_category_id: UUID | None = None
    is_common_cost: bool = False
    is_ads: bool = False
    ads_platform: str | None = None
    note: str | None = None
    code: str | None = None


@dataclass(frozen=True)
class Planned:
    """Order item priced from its plan."""


@dataclass(frozen=True)
class AcceptedOverride:
    """Order item re-priced at acceptance."""

    qty: Decimal
    unit_price: Decimal


Pricing = Union[Planned, AcceptedOverride]

PLANNED = Planned()


@dataclass(frozen=True)
class OrderItem:
    id: UUID
    project_id: UUID
    planned_qty: Decimal
    planned_unit_price: Decimal
    pricing: Pricing = PLANNED
    name: str = ""


@dataclass(frozen=True)
class Project:
    """A customer order with its (non-deleted) line items."""

    id: UUID
    code: str
    name: str
    stage: str
    customer_id: UUID | None = None
    discount_amount: Decimal = Decimal("0")
    items: tuple[OrderItem, ...] = ()
    updated_at: datetime | None = None


@dataclass(frozen=True)
class WorkshopJob:
    """
    A subcontracted production order.

    Net amount is deliberately not stored here; engines derive it from
    ``raw_amount`` and ``discount_amount`` on every read.
    """

    id: UUID
    project_id: UUID
    workshop_id: UUID
    raw_amount: Decimal
    discount_amount: Decimal = Decimal("0")
    status: WorkshopJobStatus = WorkshopJobStatus.PENDING
    code: str = ""


@dataclass(frozen=True)
class IncomeCategory:
    id: UUID
    code: str
    name: str


@dataclass(frozen=True)
class ExpenseCategory:
    id: UUID
    code: str
    name: str


@dataclass(frozen=True)
class Wallet:
    id: UUID
    code: str
    name: str
    wallet_type: str = "CASH"


@dataclass(frozen=True)
class Workshop:
    id: UUID
    code: str
    name: str
    phone: str | None = None


@dataclass(frozen=True)
class Customer:
    id: UUID
    code: str
    name: str
    phone: str | None = None


@dataclass(frozen=True)
class DateRange:
    """Inclusive date range; either bound may be open."""

    start: date | None = None
    end: date | None = None

    def __post_init__(self) -> None:
        if self.start is not None and self.end is not None and self.end < self.start:
            raise ValueError("DateRange end cannot be before start")

    def contains(self, value: date) -> bool:
        if self.start is not None and value < self.start:
            return False
        if self.end is not None and value > self.end:
            return False
        return True

    @property
    def is_open(self) -> bool:
        return self.start is None and self.end is None


ALL_TIME = DateRange()


@dataclass(frozen=True)
class LedgerSnapshot:
    """
    Everything one report needs, fetched in one read pass.

    Built by ``LedgerSelector.snapshot``; every collection already excludes
    soft-deleted rows.
    """

    records: tuple[LedgerRecord, ...] = ()
    projects: tuple[Project, ...] = ()
    workshop_jobs: tuple[WorkshopJob, ...] = ()
    income_categories: tuple[IncomeCategory, ...] = ()
    expense_categories: tuple[ExpenseCategory, ...] = ()
    wallets: tuple[Wallet, ...] = ()
    workshops: tuple[Workshop, ...] = ()
    customers: tuple[Customer, ...] = ()
    date_range: DateRange = field(default=ALL_TIME)
