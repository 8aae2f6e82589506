"""Tests for the booked vs. allocated time-shift series."""

from datetime import date
from decimal import Decimal, InvalidOperation

import pytest

from transitoria_core import aggregator
from transitoria_core.aggregator import InvalidPeriodPolicy, build_time_shift
from transitoria_core.demo import demo_transactions
from transitoria_core.exceptions import InvalidPeriodFormat
from transitoria_core.models import Transaction
from transitoria_core.periods import year_horizon


def make_transaction(id: str, booked: date, amount: str, period=None) -> Transaction:
    return Transaction(id=id, date=booked, description=f"Line {id}", amount=amount, allocated_period=period)


class TestBuildTimeShift:
    """Tests for build_time_shift over the demo ledger."""

    @pytest.fixture
    def series(self):
        return build_time_shift(demo_transactions(), year_horizon(2024))

    def test_one_point_per_month(self, series):
        """The series has twelve ascending months."""
        assert series.months == year_horizon(2024)

    def test_booked_follows_booking_date(self, series):
        """Booked totals use the booking month only."""
        assert series.point("2024-01").booked == Decimal("15500")
        assert series.point("2024-02").booked == Decimal("3650")
        assert series.point("2024-03").booked == Decimal("2500")
        assert series.point("2024-04").booked == Decimal("0")

    def test_allocated_follows_period(self, series):
        """Allocated totals spread each amount over its period."""
        assert series.point("2024-01").allocated == Decimal("6650")
        assert series.point("2024-02").allocated == Decimal("9350")
        assert series.point("2024-03").allocated == Decimal("6150")
        for month in year_horizon(2024)[3:]:
            assert series.point(month).allocated == Decimal("1000")

    def test_totals(self, series):
        """Amounts booked or allocated outside the horizon are excluded."""
        assert series.total_booked == Decimal("21650")
        assert series.total_allocated == Decimal("31150")

    def test_shift_is_allocated_minus_booked(self, series):
        point = series.point("2024-01")
        assert point.shift == Decimal("6650") - Decimal("15500")

    def test_unknown_month_raises_key_error(self, series):
        with pytest.raises(KeyError):
            series.point("2025-01")

    def test_rebuilding_gives_identical_series(self):
        """The series is a pure function of its inputs."""
        transactions = demo_transactions()
        first = build_time_shift(transactions, year_horizon(2024))
        second = build_time_shift(transactions, year_horizon(2024))
        assert first == second

    def test_empty_input(self):
        """No transactions yields a zero series, not an empty one."""
        series = build_time_shift([], year_horizon(2024))
        assert len(series.points) == 12
        assert series.total_booked == Decimal("0")
        assert series.total_allocated == Decimal("0")

    def test_horizon_is_sorted_and_deduplicated(self):
        series = build_time_shift([], ["2024-03", "2024-01", "2024-03"])
        assert series.months == ["2024-01", "2024-03"]

    def test_invalid_horizon_key_raises(self):
        with pytest.raises(InvalidPeriodFormat):
            build_time_shift([], ["2024-Q1"])

    def test_as_rows(self):
        series = build_time_shift(
            [make_transaction("a", date(2024, 1, 10), "100")],
            ["2024-01"],
        )
        assert series.as_rows() == [
            {"month": "2024-01", "booked": Decimal("100"), "allocated": Decimal("100")}
        ]


class TestConservation:
    """Allocated totals equal the sum of amounts whose periods fit the horizon."""

    def test_amounts_fully_inside_horizon_are_conserved(self):
        transactions = [
            make_transaction("1", date(2024, 1, 31), "100", "2024-Q1"),
            make_transaction("2", date(2024, 5, 2), "0.07", "2024-YEAR"),
            make_transaction("3", date(2024, 7, 9), "-1234.57", "2024-Q3"),
            make_transaction("4", date(2024, 9, 30), "99.99", None),
            make_transaction("5", date(2024, 12, 1), "333.33", "2024-11"),
        ]
        series = build_time_shift(transactions, year_horizon(2024))
        expected = sum((t.amount for t in transactions), Decimal("0"))
        assert series.total_allocated == expected
        assert series.total_booked == expected


class TestInvalidPeriodPolicy:
    """Tests for malformed allocated periods."""

    @pytest.fixture
    def transactions(self):
        return [
            make_transaction("good", date(2024, 5, 3), "300", "2024-Q2"),
            make_transaction("bad", date(2024, 5, 20), "100", "mei 2024"),
        ]

    def test_booked_month_policy_uses_booking_date(self, transactions):
        """By default the bad line is treated as unclassified."""
        series = build_time_shift(transactions, year_horizon(2024))
        assert series.point("2024-05").allocated == Decimal("200")
        assert series.invalid_transaction_ids == ["bad"]

    def test_skip_policy_drops_allocation(self, transactions):
        """SKIP leaves the bad line out of allocated totals only."""
        series = build_time_shift(transactions, year_horizon(2024), on_invalid_period=InvalidPeriodPolicy.SKIP)
        assert series.point("2024-05").allocated == Decimal("100")
        assert series.point("2024-05").booked == Decimal("400")
        assert series.invalid_transaction_ids == ["bad"]

    def test_bad_line_never_blocks_others(self, transactions):
        """Other transactions contribute regardless of the policy."""
        for policy in InvalidPeriodPolicy:
            series = build_time_shift(transactions, year_horizon(2024), on_invalid_period=policy)
            assert series.point("2024-04").allocated == Decimal("100")
            assert series.point("2024-06").allocated == Decimal("100")

    def test_long_precision_amount_allocates(self):
        """Amounts with more digits than the default context still split."""
        transactions = [
            make_transaction("plain", date(2024, 1, 10), "100", "2024-Q1"),
            make_transaction("long", date(2024, 1, 11), "0.1234567890123456789012345678901", "2024-Q1"),
        ]
        series = build_time_shift(transactions, year_horizon(2024))
        assert series.invalid_transaction_ids == []
        assert series.point("2024-01").allocated > Decimal("33.33")
        assert series.point("2024-03").allocated > Decimal("33.34")

    def test_arithmetic_failure_is_isolated(self, transactions, monkeypatch):
        """A line whose allocation fails is recorded and the rest still contribute."""
        real_allocate = aggregator.allocate

        def failing_allocate(amount, allocated_period, booked_date, horizon):
            if allocated_period == "2024-Q2" and amount == Decimal("300"):
                raise InvalidOperation([InvalidOperation])
            return real_allocate(amount, allocated_period, booked_date, horizon)

        monkeypatch.setattr(aggregator, "allocate", failing_allocate)
        transactions = transactions + [make_transaction("other", date(2024, 3, 1), "50", "2024-03")]

        series = build_time_shift(transactions, year_horizon(2024))
        assert series.invalid_transaction_ids == ["good", "bad"]
        assert series.point("2024-03").allocated == Decimal("50")
        assert series.point("2024-05").allocated == Decimal("400")

        series = build_time_shift(transactions, year_horizon(2024), on_invalid_period=InvalidPeriodPolicy.SKIP)
        assert series.point("2024-03").allocated == Decimal("50")
        assert series.point("2024-05").allocated == Decimal("0")
        assert series.point("2024-05").booked == Decimal("400")
