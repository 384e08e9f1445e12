"""Cashbook domain layer - frozen value objects and input validation."""

from cashbook_kernel.domain.records import (
    ALL_TIME,
    PLANNED,
    AcceptedOverride,
    Customer,
    DateRange,
    ExpenseCategory,
    IncomeCategory,
    LedgerRecord,
    LedgerSnapshot,
    OrderItem,
    Planned,
    Pricing,
    Project,
    RecordKind,
    Wallet,
    Workshop,
    WorkshopJob,
    WorkshopJobStatus,
)
from cashbook_kernel.domain.rules import (
    DEFAULT_CLASSIFICATION_RULES,
    INCOME_CLASSES,
    INCOME_DEPOSIT,
    INCOME_FINAL,
    INCOME_PAYMENT,
    ClassificationRules,
    SequenceFormat,
)

__all__ = [
    "DEFAULT_CLASSIFICATION_RULES",
    "INCOME_CLASSES",
    "INCOME_DEPOSIT",
    "INCOME_FINAL",
    "INCOME_PAYMENT",
    "ClassificationRules",
    "SequenceFormat",
    "ALL_TIME",
    "PLANNED",
    "AcceptedOverride",
    "Customer",
    "DateRange",
    "ExpenseCategory",
    "IncomeCategory",
    "LedgerRecord",
    "LedgerSnapshot",
    "OrderItem",
    "Planned",
    "Pricing",
    "Project",
    "RecordKind",
    "Wallet",
    "Workshop",
    "WorkshopJob",
    "WorkshopJobStatus",
]
