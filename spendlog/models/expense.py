"""
Core Data Models for Spendlog

These models define the schemas for all records flowing through the engine.
They are designed to:
1. Give every record a single, typed shape
2. Be serializable for export and logging
3. Stay faithful to what was stored (no silent corrections)

DESIGN DECISION: Amounts are plain floats and are NOT range-validated.
A value that fails to parse becomes NaN and is stored as-is; hiding it
would make the stored data disagree with what the user typed.
"""

import math
import re
from datetime import datetime
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


# =============================================================================
# CONSTANTS
# =============================================================================

DEFAULT_CATEGORIES: tuple[str, ...] = (
    "Food",
    "Transport",
    "Bills",
    "Shopping",
    "Health",
    "Zakat/Charity",
    "Entertainment",
    "Other",
)

FALLBACK_CATEGORY = "Other"

DEFAULT_SETTINGS: dict[str, str] = {
    "theme": "light",
}

_NUMERIC_PREFIX = re.compile(r"^[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")


def coerce_amount(value: Any) -> float:
    """
    Coerce user input to a monetary float.

    Numbers pass through. Strings are read from their leading numeric
    prefix ("12.50 lunch" -> 12.5). Anything else yields NaN.
    """
    if isinstance(value, bool):
        return float("nan")
    if isinstance(value, (int, float)):
        try:
            return float(value)
        except OverflowError:
            return math.copysign(math.inf, value)
    if value is None:
        return float("nan")

    text = str(value).strip()
    if text.lstrip("+-").startswith("Infinity"):
        return float("-inf") if text.startswith("-") else float("inf")

    match = _NUMERIC_PREFIX.match(text)
    if not match:
        return float("nan")
    return float(match.group(0))


# =============================================================================
# ENUMS
# =============================================================================

class TimeWindow(str, Enum):
    """Named relative time ranges used to filter expenses."""
    DAY = "day"
    WEEK = "week"
    MONTH = "month"
    ALL = "all"

    @classmethod
    def parse(cls, value: "Optional[str | TimeWindow]") -> "TimeWindow":
        """Accept a member, its string value, or None (unfiltered)."""
        if value is None or value == "":
            return cls.ALL
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            allowed = ", ".join(w.value for w in cls)
            raise ValueError(f"Unknown time window: {value!r}. Allowed: {allowed}")


# =============================================================================
# STORED RECORDS
# =============================================================================

class Expense(BaseModel):
    """
    A single recorded expense.

    Records are created only by the store and are never mutated;
    the only other lifecycle event is deletion by id.
    """
    model_config = ConfigDict(frozen=True)

    id: int = Field(
        ...,
        description="Store-assigned identifier, never reused"
    )
    amount: float = Field(
        ...,
        allow_inf_nan=True,
        description="Monetary amount (NaN when the input did not parse)"
    )
    note: str = Field(
        default="",
        description="Free-text note, may be empty"
    )
    category: str = Field(
        default=FALLBACK_CATEGORY,
        description="Category name (not enforced against the category list)"
    )
    date: datetime = Field(
        ...,
        description="Creation time, timezone-aware"
    )
    timestamp: int = Field(
        ...,
        description="Creation time in epoch milliseconds"
    )

    def to_export_dict(self) -> dict:
        """
        Convert to a JSON-safe dict.

        NaN and infinities have no JSON spelling, so they export as null.
        """
        data = self.model_dump(mode="json")
        data["amount"] = self.amount if math.isfinite(self.amount) else None
        return data


class Category(BaseModel):
    """A spending category. Seeded categories carry is_default=True."""
    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(
        ...,
        min_length=1,
        max_length=100,
        description="Unique category name"
    )
    is_default: bool = Field(
        default=False,
        description="Part of the seed set created with the store"
    )


class Setting(BaseModel):
    """A key/value display preference."""

    key: str = Field(..., min_length=1)
    value: str


# =============================================================================
# DERIVED RESULTS
# =============================================================================

class ExpenseStats(BaseModel):
    """Totals over a sequence of expenses."""

    total: float = Field(default=0.0, allow_inf_nan=True)
    count: int = Field(default=0, ge=0)
    average: float = Field(default=0.0, allow_inf_nan=True)
    category_totals: dict[str, float] = Field(
        default_factory=dict,
        description="Summed amount per category present in the input"
    )


class WeeklySeries(BaseModel):
    """Per-weekday totals for the current week (Sunday first)."""

    labels: list[str]
    data: list[float]
    total: float = 0.0
    daily_average: float = 0.0
    count: int = 0


class MonthlySeries(BaseModel):
    """Per-day totals and category breakdown for the current month."""

    labels: list[str]
    data: list[float]
    category_totals: dict[str, float] = Field(default_factory=dict)
    category_shares: dict[str, float] = Field(
        default_factory=dict,
        description="Percent of the month total per category"
    )
    total: float = 0.0
    average: float = 0.0
    count: int = 0
