"""Caller-side filters applied before building the time-shift series.

Two filters are offered by the dashboard:

- small-amount exclusion (``abs(amount) < threshold`` is dropped)
- a period range, either a preset covering the last 3, 6, 9 or 12 calendar
  months, or an explicit custom range
"""

import calendar
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Iterable, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .exceptions import ValidationError
from .models import Transaction

SMALL_AMOUNT_THRESHOLD = Decimal("50")


class PeriodPreset(str, Enum):
    """Period selector options."""

    THREE_MONTHS = "3M"
    SIX_MONTHS = "6M"
    NINE_MONTHS = "9M"
    ONE_YEAR = "1Y"
    CUSTOM = "CUSTOM"

    @property
    def months(self) -> Optional[int]:
        """Number of calendar months covered, None for CUSTOM."""
        return _PRESET_MONTHS.get(self)


_PRESET_MONTHS = {
    PeriodPreset.THREE_MONTHS: 3,
    PeriodPreset.SIX_MONTHS: 6,
    PeriodPreset.NINE_MONTHS: 9,
    PeriodPreset.ONE_YEAR: 12,
}


class DateRange(BaseModel):
    """An inclusive date range. Either bound may be open."""

    model_config = ConfigDict(frozen=True)

    start: Optional[date] = Field(default=None, description="First day (inclusive)")
    end: Optional[date] = Field(default=None, description="Last day (inclusive)")

    @field_validator("end")
    @classmethod
    def end_date_after_start_date(cls, v, info):
        """Validate that end is not before start."""
        start = info.data.get("start")
        if v is not None and start is not None and v < start:
            raise ValueError("end must be on or after start")
        return v

    def contains(self, value: date) -> bool:
        if self.start is not None and value < self.start:
            return False
        if self.end is not None and value > self.end:
            return False
        return True


def exclude_small_amounts(
    transactions: Iterable[Transaction],
    threshold: Decimal = SMALL_AMOUNT_THRESHOLD,
) -> list[Transaction]:
    """Keep transactions whose absolute amount is at least ``threshold``."""
    return [t for t in transactions if abs(t.amount) >= threshold]


def _first_of_month_back(reference: date, months_back: int) -> date:
    ordinal = reference.year * 12 + (reference.month - 1) - months_back
    year, month = divmod(ordinal, 12)
    return date(year, month + 1, 1)


def resolve_period_range(
    preset: PeriodPreset,
    reference_date: date,
    start: Optional[date] = None,
    end: Optional[date] = None,
) -> DateRange:
    """Turn a period selection into a concrete date range.

    A preset of N months covers the N calendar months ending with the month
    of ``reference_date``: from the first day of the earliest month up to the
    last day of the reference month. ``CUSTOM`` uses ``start`` and ``end``.

    Raises:
        ValidationError: If ``CUSTOM`` has no bounds or ``end < start``.
    """
    preset = PeriodPreset(preset)
    if preset is PeriodPreset.CUSTOM:
        if start is None and end is None:
            raise ValidationError(
                "Custom period requires a start or end date",
                field="period",
                constraint="start and/or end must be given",
            )
        if start is not None and end is not None and end < start:
            raise ValidationError(
                "Custom period ends before it starts",
                field="period",
                value=f"{start.isoformat()}..{end.isoformat()}",
                constraint="end must be on or after start",
            )
        return DateRange(start=start, end=end)

    last_day = calendar.monthrange(reference_date.year, reference_date.month)[1]
    return DateRange(
        start=_first_of_month_back(reference_date, preset.months - 1),
        end=date(reference_date.year, reference_date.month, last_day),
    )


def filter_by_period(
    transactions: Iterable[Transaction],
    preset: PeriodPreset,
    reference_date: Optional[date] = None,
    start: Optional[date] = None,
    end: Optional[date] = None,
) -> list[Transaction]:
    """Keep transactions booked inside the selected period.

    ``reference_date`` defaults to the latest booking date in the input, so
    a historic data set is filtered relative to its own last month.
    """
    items = list(transactions)
    if not items:
        return []
    if reference_date is None:
        reference_date = max(t.date for t in items)

    window = resolve_period_range(preset, reference_date, start=start, end=end)
    return [t for t in items if window.contains(t.date)]
