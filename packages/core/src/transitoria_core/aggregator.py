"""Booked vs. allocated time-shift series.

Folds transactions through the period allocator to compare, per month,
what was booked (by booking date) with what belongs to that month (by
allocated period). The series is a pure function of its inputs: it is
rebuilt in full on every call and keeps no state between calls.

Filtering (small amounts, period range) is the caller's job; see
``transitoria_core.filters``.
"""

from decimal import Decimal
from enum import Enum
from typing import Iterable

import structlog
from pydantic import BaseModel, ConfigDict, Field, computed_field

from .exceptions import InvalidPeriodFormat
from .models import Transaction
from .periods import allocate, parse_month_key

logger = structlog.get_logger()


class InvalidPeriodPolicy(str, Enum):
    """What to do with a transaction whose allocated period is malformed."""

    BOOKED_MONTH = "booked_month"
    """Treat it as unclassified: the allocation follows the booking date."""

    SKIP = "skip"
    """Leave it out of the allocated totals (it still counts as booked)."""


class TimeShiftPoint(BaseModel):
    """Booked and allocated totals for one month."""

    model_config = ConfigDict(frozen=True)

    month: str = Field(description="Month key (YYYY-MM)")
    booked: Decimal = Field(default=Decimal("0"), description="Sum of amounts booked in the month")
    allocated: Decimal = Field(default=Decimal("0"), description="Sum of amounts allocated to the month")

    @computed_field
    @property
    def shift(self) -> Decimal:
        """Allocated minus booked: positive when the month is under-booked."""
        return self.allocated - self.booked


class TimeShiftSeries(BaseModel):
    """The month-by-month comparison over a reporting horizon."""

    model_config = ConfigDict(frozen=True)

    points: list[TimeShiftPoint] = Field(default_factory=list)
    invalid_transaction_ids: list[str] = Field(
        default_factory=list,
        description="Transactions whose allocated period could not be parsed",
    )

    @computed_field
    @property
    def total_booked(self) -> Decimal:
        return sum((p.booked for p in self.points), Decimal("0"))

    @computed_field
    @property
    def total_allocated(self) -> Decimal:
        return sum((p.allocated for p in self.points), Decimal("0"))

    @property
    def months(self) -> list[str]:
        return [p.month for p in self.points]

    def point(self, month: str) -> TimeShiftPoint:
        """The point for ``month``.

        Raises:
            KeyError: If the month is outside the horizon.
        """
        for p in self.points:
            if p.month == month:
                return p
        raise KeyError(month)

    def as_rows(self) -> list[dict[str, object]]:
        """Rows for tabular display: month, booked, allocated."""
        return [
            {"month": p.month, "booked": p.booked, "allocated": p.allocated}
            for p in self.points
        ]


def _normalize_horizon(horizon: Iterable[str]) -> list[str]:
    months = set()
    for key in horizon:
        year, month = parse_month_key(key)
        months.add(f"{year:04d}-{month:02d}")
    return sorted(months)


def build_time_shift(
    transactions: Iterable[Transaction],
    horizon: Iterable[str],
    on_invalid_period: InvalidPeriodPolicy = InvalidPeriodPolicy.BOOKED_MONTH,
) -> TimeShiftSeries:
    """Build the booked vs. allocated series over ``horizon``.

    Args:
        transactions: Already-filtered transactions.
        horizon: Month keys to report on (conventionally the 12 months of
            one year). Duplicates are ignored.
        on_invalid_period: Handling of malformed allocated periods. A
            malformed period never prevents other transactions from
            contributing.

    Returns:
        TimeShiftSeries with one point per horizon month, ascending.

    Raises:
        InvalidPeriodFormat: If a horizon key is not a ``YYYY-MM`` month.
    """
    months = _normalize_horizon(horizon)
    booked = {m: Decimal("0") for m in months}
    allocated = {m: Decimal("0") for m in months}
    invalid: list[str] = []

    for txn in transactions:
        if txn.booked_month in booked:
            booked[txn.booked_month] += txn.amount

        try:
            contributions = allocate(txn.amount, txn.allocated_period, txn.date, months)
        except (InvalidPeriodFormat, ArithmeticError) as e:
            invalid.append(txn.id)
            logger.warning(
                "allocation_failed",
                transaction_id=txn.id,
                period=str(txn.allocated_period)[:40],
                error=str(e)[:80],
                error_type=type(e).__name__,
                policy=on_invalid_period.value,
            )
            if on_invalid_period is InvalidPeriodPolicy.SKIP:
                continue
            contributions = allocate(txn.amount, None, txn.date, months)

        for contribution in contributions:
            allocated[contribution.month] += contribution.amount

    return TimeShiftSeries(
        points=[
            TimeShiftPoint(month=m, booked=booked[m], allocated=allocated[m])
            for m in months
        ],
        invalid_transaction_ids=invalid,
    )
