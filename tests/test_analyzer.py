"""Tests for monthly totals, sorted views and the dashboard report."""

from datetime import date
from decimal import Decimal

import pytest

from analyzer import (
    monthly_cost,
    monthly_total,
    run_analysis,
    sorted_view,
    upcoming_payments,
    yearly_total,
)
from models import SortOrder


def ids(subs):
    return [s.id for s in subs]


class TestMonthlyTotal:
    def test_empty_is_zero(self):
        assert monthly_total([]) == 0

    def test_single_monthly_equals_amount(self, make_sub):
        sub = make_sub(amount="15.49")
        assert monthly_total([sub]) == Decimal("15.49")

    def test_single_annual_is_twelfth(self, make_sub):
        sub = make_sub(amount="100", is_annual=True)
        assert monthly_total([sub]) == Decimal("100") / 12

    def test_mixed_cadences(self, make_sub):
        subs = [make_sub(amount="10"), make_sub(amount="120", is_annual=True)]
        assert monthly_total(subs) == Decimal("20")

    def test_no_rounding_during_accumulation(self, make_sub):
        subs = [make_sub(amount="10", is_annual=True) for _ in range(3)]
        assert monthly_total(subs) == sum((Decimal("10") / 12 for _ in range(3)), Decimal(0))
        assert monthly_total(subs) != Decimal("2.49")

    def test_yearly_total(self, make_sub):
        subs = [make_sub(amount="10"), make_sub(amount="120", is_annual=True)]
        assert yearly_total(subs) == Decimal("240")

    def test_monthly_cost(self, make_sub):
        assert monthly_cost(make_sub(amount="24", is_annual=True)) == Decimal("2")
        assert monthly_cost(make_sub(amount="24")) == Decimal("24")


@pytest.fixture
def collection(make_sub):
    return [
        make_sub(name="Spotify", amount="9.99", minutes=0),
        make_sub(name="Prime", amount="139.00", is_annual=True, minutes=10),
        make_sub(name="Netflix", amount="15.49", minutes=5),
        make_sub(name="Gym", amount="35.00", minutes=20),
    ]


class TestSortedView:
    def test_newest_first(self, collection):
        assert [s.name for s in sorted_view(collection, SortOrder.NEWEST_FIRST)] == [
            "Gym", "Prime", "Netflix", "Spotify",
        ]

    def test_oldest_first(self, collection):
        assert [s.name for s in sorted_view(collection, SortOrder.OLDEST_FIRST)] == [
            "Spotify", "Netflix", "Prime", "Gym",
        ]

    def test_highest_amount_uses_raw_amount(self, collection):
        # The annual plan ranks first although its monthly cost is ~11.58.
        assert [s.name for s in sorted_view(collection, SortOrder.HIGHEST_AMOUNT)] == [
            "Prime", "Gym", "Netflix", "Spotify",
        ]

    def test_lowest_amount(self, collection):
        assert [s.name for s in sorted_view(collection, SortOrder.LOWEST_AMOUNT)] == [
            "Spotify", "Netflix", "Gym", "Prime",
        ]

    @pytest.mark.parametrize("order", list(SortOrder))
    def test_is_permutation(self, collection, order):
        assert sorted(ids(sorted_view(collection, order))) == sorted(ids(collection))

    @pytest.mark.parametrize("order", list(SortOrder))
    def test_is_idempotent(self, collection, order):
        assert ids(sorted_view(collection, order)) == ids(sorted_view(collection, order))

    @pytest.mark.parametrize("order", list(SortOrder))
    def test_does_not_mutate_input(self, collection, order):
        before = ids(collection)
        result = sorted_view(collection, order)
        assert ids(collection) == before
        assert result is not collection

    def test_newest_reversed_equals_oldest(self, collection):
        newest = sorted_view(collection, SortOrder.NEWEST_FIRST)
        oldest = sorted_view(collection, SortOrder.OLDEST_FIRST)
        assert ids(reversed(newest)) == ids(oldest)

    @pytest.mark.parametrize("order", [SortOrder.HIGHEST_AMOUNT, SortOrder.LOWEST_AMOUNT])
    def test_ties_keep_insertion_order(self, make_sub, order):
        subs = [make_sub(name=n, amount="5.00", minutes=i) for i, n in enumerate("ABC")]
        assert [s.name for s in sorted_view(subs, order)] == ["A", "B", "C"]

    def test_accepts_raw_order_value(self, collection):
        assert ids(sorted_view(collection, "amount-lowest")) == ids(
            sorted_view(collection, SortOrder.LOWEST_AMOUNT)
        )

    def test_unknown_order_raises(self, collection):
        with pytest.raises(ValueError):
            sorted_view(collection, "alphabetical")


class TestUpcomingPayments:
    def test_window_and_order(self, make_sub):
        subs = [
            make_sub(name="Later", next_payment=date(2024, 3, 30)),
            make_sub(name="Soon", next_payment=date(2024, 3, 12)),
            make_sub(name="Outside", next_payment=date(2024, 5, 1)),
            make_sub(name="Past", next_payment=date(2024, 3, 1)),
        ]
        upcoming = upcoming_payments(subs, date(2024, 3, 10))
        assert [u["name"] for u in upcoming] == ["Soon", "Later"]
        assert upcoming[0]["days_until"] == 2


class TestRunAnalysis:
    def test_empty_report(self):
        report = run_analysis([], today=date(2024, 3, 10))
        assert report["subscription_count"] == 0
        assert report["total_monthly"] == "0.00"
        assert report["subscriptions"] == []

    def test_report_formats_money_and_orders_rows(self, collection):
        report = run_analysis(collection, SortOrder.LOWEST_AMOUNT, today=date(2024, 3, 10))
        assert report["sort"] == "amount-lowest"
        assert report["subscription_count"] == 4
        # 9.99 + 15.49 + 35.00 + 139/12
        assert report["total_monthly"] == "72.06"
        assert report["total_yearly"] == "864.76"
        assert [r["name"] for r in report["subscriptions"]] == ["Spotify", "Netflix", "Gym", "Prime"]
        assert report["subscriptions"][-1]["monthly_cost"] == "11.58"
        assert report["upcoming_payments_30d"][0]["amount"] == "9.99"
