"""
Module: cashbook_engines.series
Responsibility:
    Time-series bucketing of money flows.  Groups ``(date, inflow, outflow)``
    points into ordered per-period totals at DAY, WEEK (ISO week, Monday
    start) or MONTH granularity.

Architecture position:
    Engines -- pure calculation layer, zero I/O.  Used by the cashflow,
    category summary and dashboard engines for their daily series.

Invariants enforced:
    - Output is sorted ascending by period start.
    - Without ``fill_gaps`` only periods that received at least one point
      appear.  With ``fill_gaps`` every period between the bounds appears,
      empty ones with zero totals.
    - net == in_total - out_total for every point.

Failure modes:
    - ValueError if ``fill_gaps`` is requested for an empty input with an
      open date range (there are no bounds to fill between).
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, timedelta
from decimal import Decimal
from enum import Enum
from typing import Iterable, NamedTuple

from cashbook_kernel.db.types import ZERO
from cashbook_kernel.domain.records import DateRange


class Granularity(str, Enum):
    DAY = "DAY"
    WEEK = "WEEK"
    MONTH = "MONTH"


class FlowPoint(NamedTuple):
    on: date
    inflow: Decimal
    outflow: Decimal


@dataclass(frozen=True)
class SeriesPoint:
    period_start: date
    in_total: Decimal
    out_total: Decimal
    net: Decimal


def period_start(value: date, granularity: Granularity = Granularity.DAY) -> date:
    """First day of the period containing ``value``."""
    if granularity == Granularity.WEEK:
        return value - timedelta(days=value.weekday())
    if granularity == Granularity.MONTH:
        return value.replace(day=1)
    return value


def next_period(start: date, granularity: Granularity = Granularity.DAY) -> date:
    if granularity == Granularity.WEEK:
        return start + timedelta(days=7)
    if granularity == Granularity.MONTH:
        if start.month == 12:
            return date(start.year + 1, 1, 1)
        return date(start.year, start.month + 1, 1)
    return start + timedelta(days=1)


def bucket_flows(
    flows: Iterable[FlowPoint | tuple[date, Decimal, Decimal]],
    granularity: Granularity = Granularity.DAY,
    fill_gaps: bool = False,
    date_range: DateRange | None = None,
) -> tuple[SeriesPoint, ...]:
    """
    Bucket flow points by period.

    With ``fill_gaps`` the series spans ``date_range`` where its bounds are
    set and the extent of the data otherwise.
    """
    buckets: dict[date, list[Decimal]] = {}
    for on, inflow, outflow in flows:
        key = period_start(on, granularity)
        bucket = buckets.get(key)
        if bucket is None:
            bucket = buckets[key] = [ZERO, ZERO]
        bucket[0] += inflow
        bucket[1] += outflow

    if fill_gaps:
        lower = date_range.start if date_range is not None else None
        upper = date_range.end if date_range is not None else None
        if lower is None:
            lower = min(buckets) if buckets else None
        if upper is None:
            upper = max(buckets) if buckets else None
        if lower is None or upper is None:
            raise ValueError("fill_gaps needs data or a bounded date range")
        cursor = period_start(lower, granularity)
        last = period_start(upper, granularity)
        while cursor <= last:
            buckets.setdefault(cursor, [ZERO, ZERO])
            cursor = next_period(cursor, granularity)

    return tuple(
        SeriesPoint(
            period_start=key,
            in_total=buckets[key][0],
            out_total=buckets[key][1],
            net=buckets[key][0] - buckets[key][1],
        )
        for key in sorted(buckets)
    )
