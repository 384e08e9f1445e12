"""
Module: cashbook_engines.netting
Responsibility:
    Discount netting and line totals.  Every place the cashbook turns a raw
    amount and a discount into a payable figure goes through ``net_amount``:
    workshop job totals, project order totals, and per-item effective totals.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import cashbook_kernel.domain and cashbook_kernel.db.types.

Invariants enforced:
    - ``net_amount`` never returns a negative value, whatever the inputs:
      a discount larger than the amount nets to zero, and a negative
      discount is treated as zero (it never increases the amount).
    - Decimal-only arithmetic.
    - Effective line totals honour acceptance overrides through the
      ``Planned | AcceptedOverride`` variant, never through nullable fields.

Failure modes:
    - None.  These functions are total over Decimal inputs.

Usage:
    from cashbook_engines.netting import net_amount, order_total

    net_amount(Decimal("4000000"), Decimal("200000"))   # Decimal("3800000")
    net_amount(Decimal("100"), Decimal("250"))          # Decimal("0")
"""

from __future__ import annotations

from decimal import Decimal
from typing import Iterable

from cashbook_kernel.db.types import ZERO
from cashbook_kernel.domain.records import AcceptedOverride, OrderItem, WorkshopJob


def net_amount(raw: Decimal, discount: Decimal) -> Decimal:
    """
    ``max(0, raw - max(0, discount))``.

    Postconditions:
        - Result >= 0.
        - Result <= max(raw, 0).
    """
    if discount < ZERO:
        discount = ZERO
    result = raw - discount
    return result if result > ZERO else ZERO


def effective_line_total(item: OrderItem) -> Decimal:
    """Quantity x unit price, using the acceptance override when present."""
    pricing = item.pricing
    if isinstance(pricing, AcceptedOverride):
        return pricing.qty * pricing.unit_price
    return item.planned_qty * item.planned_unit_price


def sum_amounts(values: Iterable[Decimal]) -> Decimal:
    total = ZERO
    for value in values:
        total += value
    return total


def order_gross_total(items: Iterable[OrderItem]) -> Decimal:
    """Sum of effective line totals, before the project discount."""
    return sum_amounts(effective_line_total(item) for item in items)


def order_total(items: Iterable[OrderItem], discount: Decimal) -> Decimal:
    """Gross order total netted by the project discount."""
    return net_amount(order_gross_total(items), discount)


def job_net(job: WorkshopJob) -> Decimal:
    """Net amount owed for a workshop job."""
    return net_amount(job.raw_amount, job.discount_amount)
