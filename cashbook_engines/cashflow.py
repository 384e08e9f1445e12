"""
Module: cashbook_engines.cashflow
Responsibility:
    Per-wallet cashflow report: income, expense, transfers in and out,
    signed adjustments and net change for each wallet, report-wide totals,
    and a time series of money in and out.

Architecture position:
    Engines -- pure calculation layer, zero I/O.

Invariants enforced:
    - Per wallet:
        income_total       = sum of INCOME records from the wallet
        expense_total      = sum of EXPENSE records from the wallet
        transfer_in_total  = sum of TRANSFER records INTO the wallet
                             (counterparty_wallet_id == wallet)
        transfer_out_total = sum of TRANSFER records FROM the wallet
        adjustment_total   = signed sum of ADJUSTMENT records on the wallet
        net_change         = income_total + transfer_in_total
                             + adjustment_total
                             - expense_total - transfer_out_total

    - net_change equals the form that splits adjustments by sign.  For any
      adjustment amount ``a`` write ``a+ = max(a, 0)`` and
      ``a- = max(-a, 0)``; then ``a = a+ - a-`` holds for every ``a``
      (exactly one of the two is non-zero, or both are zero).  Summing over
      a wallet's adjustments gives ``adjustment_total = A+ - A-``, so

          income + t_in + A+ - expense - t_out - A-
        = income + t_in + (A+ - A-) - expense - t_out
        = income + t_in + adjustment_total - expense - t_out.

      The series relies on the same identity: it buckets each adjustment
      as inflow ``a+`` and outflow ``a-``, so the series net over a period
      equals the signed contribution of the adjustments in it.

    - Report totals sum every wallet row; totals.net_change therefore equals
      the sum of the rows' net changes.
    - Wallet rows are ordered by wallet name (then code).  A wallet with no
      records reports all zeros.  With ``wallet_id`` only that wallet is
      reported; an unknown id yields no rows and zero totals.
    - Series: with a wallet filter a transfer is an inflow when its
      destination is the wallet and an outflow otherwise.  Without a wallet
      filter the direction of a transfer is ambiguous (it is both), and the
      ``transfer_direction`` parameter decides: OUTGOING (default) buckets
      it as an outflow, EXCLUDE leaves it out of the series.

Failure modes:
    - None.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Iterable
from uuid import UUID

from cashbook_engines.series import FlowPoint, Granularity, SeriesPoint, bucket_flows
from cashbook_engines.tracer import traced_engine
from cashbook_kernel.db.types import ZERO
from cashbook_kernel.domain.records import LedgerRecord, RecordKind, Wallet
from cashbook_kernel.logging_config import get_logger

logger = get_logger("engines.cashflow")


class UnfilteredTransferDirection(str, Enum):
    """How transfers enter the series when no wallet filter is given."""

    OUTGOING = "OUTGOING"
    EXCLUDE = "EXCLUDE"


@dataclass(frozen=True)
class WalletCashflow:
    wallet_id: UUID
    wallet_code: str
    wallet_name: str
    wallet_type: str
    income_total: Decimal
    expense_total: Decimal
    transfer_in_total: Decimal
    transfer_out_total: Decimal
    adjustment_total: Decimal
    net_change: Decimal


@dataclass(frozen=True)
class CashflowTotals:
    income_total: Decimal = ZERO
    expense_total: Decimal = ZERO
    transfer_in_total: Decimal = ZERO
    transfer_out_total: Decimal = ZERO
    adjustment_total: Decimal = ZERO
    net_change: Decimal = ZERO


@dataclass(frozen=True)
class CashflowReport:
    wallets: tuple[WalletCashflow, ...]
    totals: CashflowTotals
    series: tuple[SeriesPoint, ...]


def compute_net_change(
    income_total: Decimal,
    expense_total: Decimal,
    transfer_in_total: Decimal,
    transfer_out_total: Decimal,
    adjustment_total: Decimal,
) -> Decimal:
    return (
        income_total
        + transfer_in_total
        + adjustment_total
        - expense_total
        - transfer_out_total
    )


def wallet_row(wallet: Wallet, records: Iterable[LedgerRecord]) -> WalletCashflow:
    income = expense = t_in = t_out = adjustment = ZERO
    for record in records:
        if record.kind == RecordKind.TRANSFER:
            if record.counterparty_wallet_id == wallet.id:
                t_in += record.amount
            if record.wallet_id == wallet.id:
                t_out += record.amount
            continue
        if record.wallet_id != wallet.id:
            continue
        if record.kind == RecordKind.INCOME:
            income += record.amount
        elif record.kind == RecordKind.EXPENSE:
            expense += record.amount
        elif record.kind == RecordKind.ADJUSTMENT:
            adjustment += record.amount

    return WalletCashflow(
        wallet_id=wallet.id,
        wallet_code=wallet.code,
        wallet_name=wallet.name,
        wallet_type=wallet.wallet_type,
        income_total=income,
        expense_total=expense,
        transfer_in_total=t_in,
        transfer_out_total=t_out,
        adjustment_total=adjustment,
        net_change=compute_net_change(income, expense, t_in, t_out, adjustment),
    )


def _sum_rows(rows: Iterable[WalletCashflow]) -> CashflowTotals:
    income = expense = t_in = t_out = adjustment = net = ZERO
    for row in rows:
        income += row.income_total
        expense += row.expense_total
        t_in += row.transfer_in_total
        t_out += row.transfer_out_total
        adjustment += row.adjustment_total
        net += row.net_change
    return CashflowTotals(
        income_total=income,
        expense_total=expense,
        transfer_in_total=t_in,
        transfer_out_total=t_out,
        adjustment_total=adjustment,
        net_change=net,
    )


def cashflow_points(
    records: Iterable[LedgerRecord],
    wallet_id: UUID | None = None,
    transfer_direction: UnfilteredTransferDirection = UnfilteredTransferDirection.OUTGOING,
) -> list[FlowPoint]:
    """Turn records into (date, inflow, outflow) points for the series."""
    points: list[FlowPoint] = []
    for record in records:
        amount = record.amount
        if record.kind == RecordKind.TRANSFER:
            if wallet_id is not None:
                # A self-transfer lands on both legs, matching wallet_row.
                if record.counterparty_wallet_id == wallet_id:
                    points.append(FlowPoint(record.record_date, amount, ZERO))
                if record.wallet_id == wallet_id:
                    points.append(FlowPoint(record.record_date, ZERO, amount))
            elif transfer_direction == UnfilteredTransferDirection.OUTGOING:
                points.append(FlowPoint(record.record_date, ZERO, amount))
            continue

        if wallet_id is not None and record.wallet_id != wallet_id:
            continue
        if record.kind == RecordKind.INCOME:
            points.append(FlowPoint(record.record_date, amount, ZERO))
        elif record.kind == RecordKind.EXPENSE:
            points.append(FlowPoint(record.record_date, ZERO, amount))
        elif record.kind == RecordKind.ADJUSTMENT:
            if amount > ZERO:
                points.append(FlowPoint(record.record_date, amount, ZERO))
            else:
                points.append(FlowPoint(record.record_date, ZERO, -amount))
    return points


@traced_engine("cashflow", "1.0", fingerprint_fields=("wallet_id", "transfer_direction"))
def wallet_cashflow_report(
    records: Iterable[LedgerRecord],
    wallets: Iterable[Wallet],
    wallet_id: UUID | None = None,
    transfer_direction: UnfilteredTransferDirection = UnfilteredTransferDirection.OUTGOING,
    granularity: Granularity = Granularity.DAY,
) -> CashflowReport:
    """
    Build the cashflow report over ``records``.

    ``records`` should already be restricted to the reporting period.
    """
    records = tuple(records)
    selected = [w for w in wallets if wallet_id is None or w.id == wallet_id]
    selected.sort(key=lambda w: (w.name, w.code))

    rows = tuple(wallet_row(wallet, records) for wallet in selected)
    totals = _sum_rows(rows)

    if wallet_id is not None and not selected:
        series: tuple[SeriesPoint, ...] = ()
    else:
        series = bucket_flows(
            cashflow_points(records, wallet_id, transfer_direction),
            granularity=granularity,
        )

    logger.debug(
        "cashflow_report_built",
        extra={
            "wallet_count": len(rows),
            "record_count": len(records),
            "wallet_id": wallet_id,
            "net_change": totals.net_change,
        },
    )
    return CashflowReport(wallets=rows, totals=totals, series=series)
