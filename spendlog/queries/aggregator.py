"""
Aggregation Engine

DESIGN DECISION: Aggregation is PURE and DETERMINISTIC.
These functions only see the records they are handed; they never
touch storage. The same records in any order give the same result:
sums use math.fsum (exactly rounded, so order-independent) and
category keys come back sorted.

Besides plain totals this module prepares chart-ready series
(per weekday, per day of month). Rendering them is somebody else's job.
"""

import calendar
import math
from collections import defaultdict
from datetime import datetime
from typing import Iterable, Optional

from spendlog.models.expense import Expense, ExpenseStats, MonthlySeries, WeeklySeries
from spendlog.queries.windows import to_local, week_bounds


WEEKDAY_LABELS = ["Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat"]


def _category_totals(expenses: Iterable[Expense]) -> dict[str, float]:
    grouped: dict[str, list[float]] = defaultdict(list)
    for expense in expenses:
        grouped[expense.category].append(expense.amount)
    return {name: math.fsum(grouped[name]) for name in sorted(grouped)}


def calculate_stats(expenses: Iterable[Expense]) -> ExpenseStats:
    """
    Compute total, count, average and per-category totals.

    Only categories present in the input appear in category_totals.
    The average of no records is 0.
    """
    expenses = list(expenses)
    count = len(expenses)
    total = math.fsum(expense.amount for expense in expenses)

    return ExpenseStats(
        total=total,
        count=count,
        average=total / count if count > 0 else 0.0,
        category_totals=_category_totals(expenses),
    )


def category_shares(stats: ExpenseStats) -> dict[str, float]:
    """Percent of the total per category; all zeros when the total is 0."""
    if not stats.total:
        return {name: 0.0 for name in stats.category_totals}
    return {
        name: amount / stats.total * 100.0
        for name, amount in stats.category_totals.items()
    }


def weekday_totals(
    expenses: Iterable[Expense],
    now: Optional[datetime] = None,
) -> WeeklySeries:
    """
    Bucket the current week's spending by weekday, Sunday first.

    Records outside the current week are ignored.
    """
    start, end = week_bounds(now)
    buckets: list[list[float]] = [[] for _ in WEEKDAY_LABELS]
    in_week = []

    for expense in expenses:
        moment = to_local(expense.date)
        if not start <= moment <= end:
            continue
        buckets[(moment - start).days].append(expense.amount)
        in_week.append(expense)

    stats = calculate_stats(in_week)
    return WeeklySeries(
        labels=list(WEEKDAY_LABELS),
        data=[math.fsum(bucket) for bucket in buckets],
        total=stats.total,
        daily_average=stats.total / len(WEEKDAY_LABELS),
        count=stats.count,
    )


def daily_trend(
    expenses: Iterable[Expense],
    now: Optional[datetime] = None,
) -> MonthlySeries:
    """
    Bucket the current month's spending by day of month.

    Also carries the month's category totals and their percentage shares.
    Records outside the current month are ignored.
    """
    now = to_local(now or datetime.now())
    days_in_month = calendar.monthrange(now.year, now.month)[1]
    buckets: list[list[float]] = [[] for _ in range(days_in_month)]
    in_month = []

    for expense in expenses:
        moment = to_local(expense.date)
        if (moment.year, moment.month) != (now.year, now.month):
            continue
        buckets[moment.day - 1].append(expense.amount)
        in_month.append(expense)

    stats = calculate_stats(in_month)
    return MonthlySeries(
        labels=[str(day) for day in range(1, days_in_month + 1)],
        data=[math.fsum(bucket) for bucket in buckets],
        category_totals=stats.category_totals,
        category_shares=category_shares(stats),
        total=stats.total,
        average=stats.average,
        count=stats.count,
    )
