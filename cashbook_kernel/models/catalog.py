"""
ORM models for reference entities: wallets, workshops, customers, and
income/expense categories.

Each carries an allocator-issued ``code`` (unique) and the soft-delete
marker from ``TrackedBase``.
"""

from sqlalchemy import Boolean, Index, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from cashbook_kernel.db.base import TrackedBase
from cashbook_kernel.domain.records import (
    Customer,
    ExpenseCategory,
    IncomeCategory,
    Wallet,
    Workshop,
)


class WalletModel(TrackedBase):
    """A cash box or bank account money moves through."""

    __tablename__ = "wallets"

    __table_args__ = (
        UniqueConstraint("code", name="uq_wallet_code"),
    )

    code: Mapped[str] = mapped_column(String(32), nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    wallet_type: Mapped[str] = mapped_column(String(50), nullable=False, default="CASH")
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    def to_dto(self) -> Wallet:
        return Wallet(id=self.id, code=self.code, name=self.name, wallet_type=self.wallet_type)

    def __repr__(self) -> str:
        return f"<WalletModel {self.code} {self.name}>"


class WorkshopModel(TrackedBase):
    """An external workshop that takes subcontracted jobs."""

    __tablename__ = "workshops"

    __table_args__ = (
        UniqueConstraint("code", name="uq_workshop_code"),
    )

    code: Mapped[str] = mapped_column(String(32), nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    phone: Mapped[str | None] = mapped_column(String(50), nullable=True)
    note: Mapped[str | None] = mapped_column(String(4000), nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    def to_dto(self) -> Workshop:
        return Workshop(id=self.id, code=self.code, name=self.name, phone=self.phone)

    def __repr__(self) -> str:
        return f"<WorkshopModel {self.code} {self.name}>"


class CustomerModel(TrackedBase):
    __tablename__ = "customers"

    __table_args__ = (
        UniqueConstraint("code", name="uq_customer_code"),
        Index("idx_customer_name", "name"),
    )

    code: Mapped[str] = mapped_column(String(32), nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    phone: Mapped[str | None] = mapped_column(String(50), nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    def to_dto(self) -> Customer:
        return Customer(id=self.id, code=self.code, name=self.name, phone=self.phone)


class IncomeCategoryModel(TrackedBase):
    """
    Income category.

    ``code`` is the stable identifier used by income classification
    (DEPOSIT / PAYMENT / FINAL); ``name`` is the display name that the
    keyword fallback inspects.
    """

    __tablename__ = "income_categories"

    __table_args__ = (
        UniqueConstraint("code", name="uq_income_category_code"),
    )

    code: Mapped[str] = mapped_column(String(32), nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    def to_dto(self) -> IncomeCategory:
        return IncomeCategory(id=self.id, code=self.code, name=self.name)


class ExpenseCategoryModel(TrackedBase):
    __tablename__ = "expense_categories"

    __table_args__ = (
        UniqueConstraint("code", name="uq_expense_category_code"),
    )

    code: Mapped[str] = mapped_column(String(32), nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    def to_dto(self) -> ExpenseCategory:
        return ExpenseCategory(id=self.id, code=self.code, name=self.name)

    def __repr__(self) -> str:
        return f"<ExpenseCategoryModel {self.code} {self.name}>"
