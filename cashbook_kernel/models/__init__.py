"""SQLAlchemy ORM models for the cashbook kernel."""

from cashbook_kernel.models.catalog import (
    CustomerModel,
    ExpenseCategoryModel,
    IncomeCategoryModel,
    WalletModel,
    WorkshopModel,
)
from cashbook_kernel.models.ledger import LedgerRecordModel
from cashbook_kernel.models.project import (
    AcceptanceItemModel,
    OrderItemModel,
    ProjectModel,
    WorkshopJobItemModel,
    WorkshopJobModel,
)

__all__ = [
    "AcceptanceItemModel",
    "CustomerModel",
    "ExpenseCategoryModel",
    "IncomeCategoryModel",
    "LedgerRecordModel",
    "OrderItemModel",
    "ProjectModel",
    "WalletModel",
    "WorkshopJobItemModel",
    "WorkshopJobModel",
    "WorkshopModel",
]
