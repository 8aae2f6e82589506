"""Period allocation: spreading a posted amount over calendar months.

An allocated period label names the accounting period an amount belongs to:

- ``YYYY-MM``   a single month        -> full amount to that month
- ``YYYY-Qn``   quarter n (1..4)      -> amount / 3 to each month of the quarter
- ``YYYY-YEAR`` the full calendar year -> amount / 12 to each month

Rounding rule for the equal splits: every share is ``amount / parts``
truncated toward zero to the minimal unit (the cent, or the amount's own
precision when that is finer). The remainder ``amount - share * parts`` is
added to the last month of the period. Totals therefore reconcile exactly and
repeated runs give identical results.
"""

import re
from dataclasses import dataclass
from datetime import date
from decimal import ROUND_DOWN, Decimal, localcontext
from enum import Enum
from typing import Iterable, Optional, Sequence

from .exceptions import InvalidPeriodFormat

CENT = Decimal("0.01")

_MONTH_RE = re.compile(r"^(\d{4})-(0[1-9]|1[0-2])$")
_QUARTER_RE = re.compile(r"^(\d{4})-Q([1-4])$")
_YEAR_RE = re.compile(r"^(\d{4})-YEAR$")


class PeriodKind(str, Enum):
    """Granularity of an allocated period."""

    MONTH = "month"
    QUARTER = "quarter"
    YEAR = "year"


@dataclass(frozen=True)
class AllocatedPeriod:
    """A parsed allocated-period label.

    Attributes:
        kind: Month, quarter or year.
        year: Calendar year.
        index: Month number (1-12) for months, quarter number (1-4) for
            quarters, 0 for a full year.
    """

    kind: PeriodKind
    year: int
    index: int = 0

    @property
    def label(self) -> str:
        """Canonical label, e.g. ``2024-03``, ``2024-Q1`` or ``2024-YEAR``."""
        if self.kind is PeriodKind.MONTH:
            return f"{self.year:04d}-{self.index:02d}"
        if self.kind is PeriodKind.QUARTER:
            return f"{self.year:04d}-Q{self.index}"
        return f"{self.year:04d}-YEAR"

    @property
    def months(self) -> list[str]:
        """Month keys covered by this period, in chronological order."""
        if self.kind is PeriodKind.MONTH:
            return [self.label]
        if self.kind is PeriodKind.QUARTER:
            first = 3 * (self.index - 1) + 1
            return [f"{self.year:04d}-{m:02d}" for m in range(first, first + 3)]
        return year_horizon(self.year)

    def __str__(self) -> str:
        return self.label


@dataclass(frozen=True)
class MonthAllocation:
    """Amount contributed by one transaction to one month."""

    month: str
    amount: Decimal


def parse_period(label: str) -> AllocatedPeriod:
    """Parse an allocated-period label.

    Surrounding whitespace is ignored and the ``Q``/``YEAR`` markers are
    matched case-insensitively.

    Raises:
        InvalidPeriodFormat: If the label matches none of the grammars.
    """
    if not isinstance(label, str):
        raise InvalidPeriodFormat(label)

    text = label.strip().upper()

    match = _MONTH_RE.match(text)
    if match:
        return AllocatedPeriod(PeriodKind.MONTH, int(match.group(1)), int(match.group(2)))

    match = _QUARTER_RE.match(text)
    if match:
        return AllocatedPeriod(PeriodKind.QUARTER, int(match.group(1)), int(match.group(2)))

    match = _YEAR_RE.match(text)
    if match:
        return AllocatedPeriod(PeriodKind.YEAR, int(match.group(1)))

    raise InvalidPeriodFormat(label)


def is_valid_period(label: Optional[str]) -> bool:
    """Return True if ``label`` is a well-formed allocated period."""
    if label is None:
        return False
    try:
        parse_period(label)
    except InvalidPeriodFormat:
        return False
    return True


def month_key(value: date) -> str:
    """Truncate a date to its ``YYYY-MM`` month key."""
    return f"{value.year:04d}-{value.month:02d}"


def parse_month_key(key: str) -> tuple[int, int]:
    """Split a ``YYYY-MM`` key into ``(year, month)``.

    Raises:
        InvalidPeriodFormat: If ``key`` is not a month key.
    """
    period = parse_period(key) if isinstance(key, str) else None
    if period is None or period.kind is not PeriodKind.MONTH:
        raise InvalidPeriodFormat(key, field="month")
    return period.year, period.index


def year_horizon(year: int) -> list[str]:
    """The twelve month keys of a calendar year."""
    return [f"{year:04d}-{m:02d}" for m in range(1, 13)]


def rolling_horizon(end_month: str, months: int = 12) -> list[str]:
    """The ``months`` month keys ending with (and including) ``end_month``."""
    if months < 1:
        raise ValueError("months must be at least 1")
    year, month = parse_month_key(end_month)
    ordinal = year * 12 + (month - 1)
    keys = []
    for offset in range(months - 1, -1, -1):
        y, m = divmod(ordinal - offset, 12)
        keys.append(f"{y:04d}-{m + 1:02d}")
    return keys


def _minimal_unit(amount: Decimal) -> Decimal:
    exponent = amount.as_tuple().exponent
    if isinstance(exponent, int) and exponent < -2:
        return Decimal(1).scaleb(exponent)
    return CENT


def split_amount(amount: Decimal, parts: int) -> list[Decimal]:
    """Split ``amount`` into ``parts`` shares that sum exactly to ``amount``.

    Shares are truncated toward zero to the minimal unit; the remainder is
    added to the last share.

    Example:
        >>> split_amount(Decimal("100"), 3)
        [Decimal('33.33'), Decimal('33.33'), Decimal('33.34')]
    """
    if parts < 1:
        raise ValueError("parts must be at least 1")
    amount = Decimal(amount)
    if parts == 1:
        return [amount]

    unit = _minimal_unit(amount)
    with localcontext() as ctx:
        # Every digit down to the unit must fit, or quantize raises.
        ctx.prec = max(ctx.prec, amount.adjusted() - unit.as_tuple().exponent + 10)
        ctx.rounding = ROUND_DOWN
        share = (amount / parts).quantize(unit, rounding=ROUND_DOWN)
        shares = [share] * parts
        shares[-1] = amount - share * (parts - 1)
    return shares


def distribute(
    amount: Decimal,
    allocated_period: Optional[str],
    booked_date: date,
) -> list[MonthAllocation]:
    """Spread ``amount`` over the months of its allocated period.

    Without an allocated period the full amount stays in the booked month.
    No horizon is applied; the contributions always sum to ``amount``.

    Raises:
        InvalidPeriodFormat: If ``allocated_period`` is malformed.
    """
    if allocated_period is None:
        return [MonthAllocation(month_key(booked_date), Decimal(amount))]

    months = parse_period(allocated_period).months
    return [
        MonthAllocation(month, share)
        for month, share in zip(months, split_amount(amount, len(months)))
    ]


def allocate(
    amount: Decimal,
    allocated_period: Optional[str],
    booked_date: date,
    horizon: Iterable[str],
) -> list[MonthAllocation]:
    """Contributions of one transaction to the months of ``horizon``.

    Months outside the horizon are dropped.

    Raises:
        InvalidPeriodFormat: If ``allocated_period`` is malformed.
    """
    in_horizon = set(horizon)
    return [
        contribution
        for contribution in distribute(amount, allocated_period, booked_date)
        if contribution.month in in_horizon
    ]


def total(allocations: Sequence[MonthAllocation]) -> Decimal:
    """Sum of a list of contributions."""
    return sum((a.amount for a in allocations), Decimal("0"))
