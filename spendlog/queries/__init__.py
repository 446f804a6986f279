"""Query package: window filtering, aggregation and export."""

from spendlog.queries.aggregator import (
    WEEKDAY_LABELS,
    calculate_stats,
    category_shares,
    daily_trend,
    weekday_totals,
)
from spendlog.queries.export import (
    CSV_HEADER,
    expenses_to_csv,
    expenses_to_json,
    format_amount,
)
from spendlog.queries.windows import in_window, to_local, week_bounds

__all__ = [
    "CSV_HEADER",
    "WEEKDAY_LABELS",
    "calculate_stats",
    "category_shares",
    "daily_trend",
    "expenses_to_csv",
    "expenses_to_json",
    "format_amount",
    "in_window",
    "to_local",
    "week_bounds",
    "weekday_totals",
]
