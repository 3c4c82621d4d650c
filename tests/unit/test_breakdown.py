"""Tests for the account breakdown engine."""

from datetime import date
from decimal import Decimal

import pytest

from ledger_folio.analytics.breakdown import (
    compute_account_breakdowns,
    compute_breakdowns,
    discover_groups,
    postings_for_group,
)
from ledger_folio.analytics.classify import PostingClassifier

TODAY = date(2024, 1, 1)


@pytest.fixture
def portfolio(make_posting):
    """Three holdings across two asset classes, funded from checking."""
    return [
        make_posting("Assets:Equity:ABC", 1000, on=date(2023, 1, 1), commodity="ABC",
                     quantity=10, market_amount=1500, transaction_id="t1"),
        make_posting("Assets:Checking", -1000, on=date(2023, 1, 1), transaction_id="t1"),
        make_posting("Assets:Equity:XYZ", 2000, on=date(2023, 1, 1), commodity="XYZ",
                     quantity=20, market_amount=1800, transaction_id="t2"),
        make_posting("Assets:Checking", -2000, on=date(2023, 1, 1), transaction_id="t2"),
        make_posting("Assets:Gold", 500, on=date(2023, 1, 1), commodity="GOLD",
                     quantity=5, market_amount=600, transaction_id="t3"),
        make_posting("Assets:Checking", -500, on=date(2023, 1, 1), transaction_id="t3"),
        make_posting("Income:Salary", -5000, on=date(2022, 12, 31), transaction_id="t0"),
        make_posting("Assets:Checking", 5000, on=date(2022, 12, 31), transaction_id="t0"),
    ]


class TestDiscoverGroups:
    def test_leaves_only_without_rollup(self, classifier, make_posting):
        postings = [make_posting("Assets:Equity:Stock", 1)]
        assert discover_groups(postings, False, classifier) == {"Assets:Equity:Stock": True}

    def test_rollup_adds_ancestors(self, classifier, make_posting):
        postings = [make_posting("Assets:Equity:Stock", 1)]
        assert discover_groups(postings, True, classifier) == {
            "Assets": False,
            "Assets:Equity": False,
            "Assets:Equity:Stock": True,
        }

    def test_leaf_wins_over_prefix(self, classifier, make_posting):
        postings = [
            make_posting("Assets:Equity:Stock", 1),
            make_posting("Assets:Equity", 1),
        ]
        groups = discover_groups(postings, True, classifier)
        assert groups["Assets:Equity"] is True

        reversed_groups = discover_groups(list(reversed(postings)), True, classifier)
        assert reversed_groups["Assets:Equity"] is True

    def test_capital_gains_excluded(self, classifier, make_posting):
        postings = [make_posting("Income:CapitalGains:Equity:ABC", -10)]
        assert discover_groups(postings, True, classifier) == {}


class TestPostingsForGroup:
    def test_capital_gains_redirected(self, classifier, make_posting):
        asset = make_posting("Assets:Equity:ABC", 100)
        gain = make_posting("Income:CapitalGains:Equity:ABC", -10)
        other = make_posting("Assets:Equity:ABCD", 100)

        assert postings_for_group([asset, gain, other], "Assets:Equity:ABC", classifier) == [
            asset,
            gain,
        ]


class TestComputeBreakdowns:
    def test_single_buy_scenario(self, make_posting):
        buy = make_posting("Assets:Gold", 1000, on=date(2023, 1, 1), commodity="GOLD",
                           quantity=10, market_amount=1200)

        result = compute_breakdowns([buy], rollup=False, today=TODAY)

        b = result["Assets:Gold"]
        assert b.investment_amount == Decimal("1000")
        assert b.withdrawal_amount == Decimal("0")
        assert b.market_amount == Decimal("1200")
        assert b.gain_amount == Decimal("200")
        assert b.absolute_return == Decimal("0.2")
        assert b.balance_units == Decimal("10")
        assert b.xirr == Decimal("0.2")

    def test_sorted_by_group(self, portfolio):
        result = compute_account_breakdowns(portfolio, "Assets:%", rollup=True, today=TODAY)
        assert list(result) == sorted(result)
        assert "Income:Salary" not in result

    def test_rollup_consistency(self, portfolio):
        result = compute_account_breakdowns(portfolio, "Assets:%", rollup=True, today=TODAY)
        leaves = ["Assets:Equity:ABC", "Assets:Equity:XYZ", "Assets:Gold", "Assets:Checking"]

        for field in ("investment_amount", "withdrawal_amount", "market_amount"):
            equity = sum(getattr(result[g], field) for g in leaves[:2])
            assert getattr(result["Assets:Equity"], field) == equity
            total = sum(getattr(result[g], field) for g in leaves)
            assert getattr(result["Assets"], field) == total

    def test_rollup_values(self, portfolio):
        result = compute_account_breakdowns(portfolio, "Assets:%", rollup=True, today=TODAY)

        equity = result["Assets:Equity"]
        assert equity.investment_amount == Decimal("3000")
        assert equity.market_amount == Decimal("3300")
        assert equity.gain_amount == Decimal("300")
        assert equity.absolute_return == Decimal("0.1")

    def test_balance_units_leaf_only(self, portfolio):
        result = compute_account_breakdowns(portfolio, "Assets:%", rollup=True, today=TODAY)
        assert result["Assets:Equity:ABC"].balance_units == Decimal("10")
        assert result["Assets:Equity"].balance_units == Decimal("0")
        assert result["Assets:Checking"].balance_units == Decimal("0")

    def test_checking_has_zero_return(self, portfolio):
        result = compute_account_breakdowns(portfolio, "Assets:%", rollup=True, today=TODAY)
        checking = result["Assets:Checking"]
        assert checking.investment_amount == Decimal("0")
        assert checking.market_amount == Decimal("1500")
        assert checking.absolute_return == Decimal("0")

    def test_withdrawal_and_capital_gains(self, make_posting):
        postings = [
            make_posting("Assets:Equity:ABC", 1000, on=date(2023, 1, 1), commodity="ABC",
                         quantity=10, market_amount=1300),
            make_posting("Assets:Equity:ABC", -500, on=date(2023, 7, 1), commodity="ABC",
                         quantity=-5, market_amount=-650),
            make_posting("Assets:Checking", 600, on=date(2023, 7, 1)),
            make_posting("Income:CapitalGains:Equity:ABC", -100, on=date(2023, 7, 1)),
        ]

        result = compute_account_breakdowns(postings, "Assets:%", rollup=True, today=TODAY)

        abc = result["Assets:Equity:ABC"]
        assert abc.investment_amount == Decimal("1000")
        assert abc.withdrawal_amount == Decimal("500")
        assert abc.market_amount == Decimal("650")
        assert abc.gain_amount == Decimal("150")
        assert abc.balance_units == Decimal("5")
        assert "Income:CapitalGains:Equity:ABC" not in result

    def test_interest_and_split_excluded_from_investment(self, make_posting):
        journal = [
            make_posting("Assets:Debt:FD", 10000, on=date(2023, 1, 1), transaction_id="a"),
            make_posting("Assets:Checking", -10000, on=date(2023, 1, 1), transaction_id="a"),
            make_posting("Assets:Debt:FD", 700, on=date(2023, 12, 1), transaction_id="b"),
            make_posting("Income:Interest:FD", -700, on=date(2023, 12, 1), transaction_id="b"),
            make_posting("Assets:Equity:ABC", 1000, on=date(2023, 1, 1), commodity="ABC",
                         quantity=10, market_amount=1000, transaction_id="c"),
            make_posting("Assets:Equity:ABC", 0, on=date(2023, 6, 1), commodity="ABC",
                         quantity=10, market_amount=1000, transaction_id="d"),
        ]
        classifier = PostingClassifier(journal)

        result = compute_account_breakdowns(
            journal, "Assets:%", rollup=False, classifier=classifier, today=TODAY
        )

        fd = result["Assets:Debt:FD"]
        assert fd.investment_amount == Decimal("10000")
        assert fd.market_amount == Decimal("10700")
        assert fd.absolute_return == Decimal("0.07")

        abc = result["Assets:Equity:ABC"]
        assert abc.investment_amount == Decimal("1000")
        assert abc.balance_units == Decimal("20")
        assert abc.gain_amount == Decimal("1000")

    def test_empty_postings(self):
        assert compute_breakdowns([], rollup=True, today=TODAY) == {}
