"""
ORM models for projects (customer orders) and workshop jobs.

Responsibility
--------------
Persist projects with their order items and acceptance overrides, and the
workshop jobs subcontracted for them.  ``to_dto`` converts a row into the
frozen snapshot objects the engines read.

Invariants enforced
-------------------
* ``ProjectModel.code`` and ``WorkshopJobModel.code`` are unique and come
  from ``SequenceService``.
* An order item has at most one acceptance row
  (``uq_acceptance_order_item``).  ``to_dto`` resolves the row into the
  ``Planned`` / ``AcceptedOverride`` variant, filling any missing override
  field from the plan.
* ``WorkshopJobModel.raw_amount`` is recomputed from its items by
  ``WorkshopJobService`` whenever items change; the net amount is never
  stored.
"""

from datetime import date
from decimal import Decimal
from uuid import UUID

from sqlalchemy import Date, ForeignKey, Index, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from cashbook_kernel.db.base import TrackedBase
from cashbook_kernel.domain.records import (
    PLANNED,
    AcceptedOverride,
    OrderItem,
    Pricing,
    Project,
    WorkshopJob,
    WorkshopJobStatus,
)

DEFAULT_STAGE = "Lead"


class ProjectModel(TrackedBase):
    """
    A customer order.

    ``stage`` holds a kanban pipeline stage name; values outside the
    configured pipeline are tolerated and shown in the first stage.
    """

    __tablename__ = "projects"

    __table_args__ = (
        UniqueConstraint("code", name="uq_project_code"),
        Index("idx_project_stage", "stage"),
        Index("idx_project_customer", "customer_id"),
    )

    code: Mapped[str] = mapped_column(String(32), nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    stage: Mapped[str] = mapped_column(String(100), nullable=False, default=DEFAULT_STAGE)
    status: Mapped[str] = mapped_column(String(50), nullable=False, default="ACTIVE")
    customer_id: Mapped[UUID | None] = mapped_column(ForeignKey("customers.id"), nullable=True)
    discount_amount: Mapped[Decimal] = mapped_column(default=Decimal("0"))
    address: Mapped[str | None] = mapped_column(String(4000), nullable=True)
    deadline: Mapped[date | None] = mapped_column(Date, nullable=True)

    items: Mapped[list["OrderItemModel"]] = relationship(
        "OrderItemModel",
        back_populates="project",
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    def to_dto(self) -> Project:
        return Project(
            id=self.id,
            code=self.code,
            name=self.name,
            stage=self.stage,
            customer_id=self.customer_id,
            discount_amount=self.discount_amount or Decimal("0"),
            items=tuple(item.to_dto() for item in self.items if item.deleted_at is None),
            updated_at=self.updated_at,
        )

    def __repr__(self) -> str:
        return f"<ProjectModel {self.code} [{self.stage}]>"


class OrderItemModel(TrackedBase):
    """A planned order line: quantity x unit price."""

    __tablename__ = "order_items"

    __table_args__ = (
        Index("idx_order_item_project", "project_id"),
    )

    project_id: Mapped[UUID] = mapped_column(ForeignKey("projects.id"), nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    unit: Mapped[str | None] = mapped_column(String(50), nullable=True)
    planned_qty: Mapped[Decimal] = mapped_column(nullable=False)
    planned_unit_price: Mapped[Decimal] = mapped_column(nullable=False)

    project: Mapped["ProjectModel"] = relationship("ProjectModel", back_populates="items")
    acceptance: Mapped["AcceptanceItemModel | None"] = relationship(
        "AcceptanceItemModel",
        back_populates="order_item",
        uselist=False,
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    def pricing(self) -> Pricing:
        acc = self.acceptance
        if acc is None or acc.deleted_at is not None or (
            acc.accepted_qty is None and acc.accepted_unit_price is None
        ):
            return PLANNED
        return AcceptedOverride(
            qty=acc.accepted_qty if acc.accepted_qty is not None else self.planned_qty,
            unit_price=(
                acc.accepted_unit_price
                if acc.accepted_unit_price is not None
                else self.planned_unit_price
            ),
        )

    def to_dto(self) -> OrderItem:
        return OrderItem(
            id=self.id,
            project_id=self.project_id,
            planned_qty=self.planned_qty,
            planned_unit_price=self.planned_unit_price,
            pricing=self.pricing(),
            name=self.name,
        )


class AcceptanceItemModel(TrackedBase):
    """
    Post-hoc correction of an order item at acceptance.

    Either field may be NULL, meaning "keep the planned value".
    """

    __tablename__ = "order_acceptance_items"

    __table_args__ = (
        UniqueConstraint("order_item_id", name="uq_acceptance_order_item"),
    )

    order_item_id: Mapped[UUID] = mapped_column(ForeignKey("order_items.id"), nullable=False)
    accepted_qty: Mapped[Decimal | None] = mapped_column(nullable=True)
    accepted_unit_price: Mapped[Decimal | None] = mapped_column(nullable=True)
    note: Mapped[str | None] = mapped_column(String(4000), nullable=True)

    order_item: Mapped["OrderItemModel"] = relationship(
        "OrderItemModel", back_populates="acceptance"
    )


class WorkshopJobModel(TrackedBase):
    """A subcontracted production order for one project at one workshop."""

    __tablename__ = "workshop_jobs"

    __table_args__ = (
        UniqueConstraint("code", name="uq_workshop_job_code"),
        Index("idx_workshop_job_project", "project_id"),
        Index("idx_workshop_job_workshop", "workshop_id"),
    )

    code: Mapped[str] = mapped_column(String(32), nullable=False)
    project_id: Mapped[UUID] = mapped_column(ForeignKey("projects.id"), nullable=False)
    workshop_id: Mapped[UUID] = mapped_column(ForeignKey("workshops.id"), nullable=False)
    title: Mapped[str | None] = mapped_column(String(255), nullable=True)
    raw_amount: Mapped[Decimal] = mapped_column(default=Decimal("0"))
    discount_amount: Mapped[Decimal] = mapped_column(default=Decimal("0"))
    status: Mapped[str] = mapped_column(
        String(50), nullable=False, default=WorkshopJobStatus.PENDING.value
    )
    start_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    due_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    note: Mapped[str | None] = mapped_column(String(4000), nullable=True)

    items: Mapped[list["WorkshopJobItemModel"]] = relationship(
        "WorkshopJobItemModel",
        back_populates="job",
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    def to_dto(self) -> WorkshopJob:
        return WorkshopJob(
            id=self.id,
            project_id=self.project_id,
            workshop_id=self.workshop_id,
            raw_amount=self.raw_amount or Decimal("0"),
            discount_amount=self.discount_amount or Decimal("0"),
            status=WorkshopJobStatus(self.status),
            code=self.code,
        )

    def __repr__(self) -> str:
        return f"<WorkshopJobModel {self.code} [{self.status}]>"


class WorkshopJobItemModel(TrackedBase):
    __tablename__ = "workshop_job_items"

    __table_args__ = (
        Index("idx_workshop_job_item_job", "job_id"),
    )

    job_id: Mapped[UUID] = mapped_column(ForeignKey("workshop_jobs.id"), nullable=False)
    product_name: Mapped[str] = mapped_column(String(255), nullable=False)
    unit: Mapped[str | None] = mapped_column(String(50), nullable=True)
    quantity: Mapped[Decimal] = mapped_column(nullable=False)
    unit_price: Mapped[Decimal] = mapped_column(nullable=False)

    job: Mapped["WorkshopJobModel"] = relationship("WorkshopJobModel", back_populates="items")

    @property
    def line_total(self) -> Decimal:
        return self.quantity * self.unit_price
