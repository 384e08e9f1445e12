"""
Module: cashbook_engines
Responsibility:
    Package entrypoint that re-exports the public symbols of the pure
    aggregation engines.  This is the canonical import surface for
    cashbook_services.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import cashbook_kernel domain/db types and sibling engines.
    MUST NOT import cashbook_services or cashbook_config.

Invariants enforced:
    - Purity: engines NEVER call ``date.today()`` or touch a session.
      Dates and snapshots are passed in.
    - Decimal-only arithmetic.
    - Determinism: identical inputs always produce equal outputs.

Audit relevance:
    Every top-level engine invocation is traced via ``@traced_engine``
    (see ``cashbook_engines.tracer``), emitting CASHBOOK_ENGINE_TRACE.

Usage:
    from cashbook_engines import project_financial_summary, wallet_cashflow_report
    from cashbook_engines import workshop_debt_report, kanban_grouping
"""

from cashbook_kernel.logging_config import get_logger

logger = get_logger("engines")

from cashbook_engines.cashflow import (
    CashflowReport,
    CashflowTotals,
    UnfilteredTransferDirection,
    WalletCashflow,
    wallet_cashflow_report,
)
from cashbook_engines.category_summary import (
    OTHER_LABEL,
    AmountPoint,
    CategoryTotal,
    ExpenseSummary,
    IncomeSummary,
    expense_summary,
    income_summary,
)
from cashbook_engines.classification import (
    ExpenseClass,
    IncomeClass,
    IncomeClassifier,
    classify_expense,
    classify_income,
)
from cashbook_engines.dashboard import (
    AdsSpend,
    CustomerDebt,
    DashboardOverview,
    dashboard_overview,
)
from cashbook_engines.kanban import (
    KanbanBoard,
    KanbanCard,
    KanbanColumn,
    KanbanFilters,
    kanban_grouping,
)
from cashbook_engines.netting import (
    effective_line_total,
    job_net,
    net_amount,
    order_gross_total,
    order_total,
    sum_amounts,
)
from cashbook_engines.project_summary import (
    ProjectFinancialSummary,
    cash_profit,
    estimated_total,
    project_financial_summaries,
    project_financial_summary,
)
from cashbook_engines.series import (
    FlowPoint,
    Granularity,
    SeriesPoint,
    bucket_flows,
)
from cashbook_engines.tracer import traced_engine
from cashbook_engines.workshop_debt import (
    JobDebt,
    WorkshopDebt,
    workshop_debt_report,
)

__all__ = [
    "AdsSpend",
    "AmountPoint",
    "CashflowReport",
    "CashflowTotals",
    "CategoryTotal",
    "CustomerDebt",
    "DashboardOverview",
    "ExpenseClass",
    "ExpenseSummary",
    "FlowPoint",
    "Granularity",
    "IncomeClass",
    "IncomeClassifier",
    "IncomeSummary",
    "JobDebt",
    "KanbanBoard",
    "KanbanCard",
    "KanbanColumn",
    "KanbanFilters",
    "OTHER_LABEL",
    "ProjectFinancialSummary",
    "SeriesPoint",
    "UnfilteredTransferDirection",
    "WalletCashflow",
    "WorkshopDebt",
    "bucket_flows",
    "cash_profit",
    "classify_expense",
    "classify_income",
    "dashboard_overview",
    "effective_line_total",
    "estimated_total",
    "expense_summary",
    "income_summary",
    "job_net",
    "kanban_grouping",
    "net_amount",
    "order_gross_total",
    "order_total",
    "project_financial_summaries",
    "project_financial_summary",
    "sum_amounts",
    "traced_engine",
    "wallet_cashflow_report",
    "workshop_debt_report",
]
