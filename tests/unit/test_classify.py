"""Tests for posting classification."""

from decimal import Decimal

import pytest

from ledger_folio.analytics.classify import AccountRules, PostingClassifier


class TestPostingClassifier:
    def test_checking_account_and_descendants(self, classifier):
        assert classifier.is_checking_account("Assets:Checking")
        assert classifier.is_checking_account("Assets:Checking:HDFC")
        assert not classifier.is_checking_account("Assets:CheckingDeposit")

    def test_capital_gains_source_account(self, classifier, make_posting):
        gain = make_posting("Income:CapitalGains:Equity:ABC", -200)
        assert classifier.is_capital_gains(gain)
        assert classifier.effective_account(gain) == "Assets:Equity:ABC"

    def test_bare_capital_gains_account_maps_to_assets(self, classifier):
        assert classifier.capital_gains_source_account("Income:CapitalGains") == "Assets"

    def test_interest_needs_interest_leg_in_transaction(self, make_posting):
        deposit = make_posting("Assets:Debt:FD", 50, transaction_id="t1")
        income = make_posting("Income:Interest:FD", -50, transaction_id="t1")
        unrelated = make_posting("Assets:Debt:FD", 1000, transaction_id="t2")

        classifier = PostingClassifier([deposit, income, unrelated])

        assert classifier.is_interest(deposit)
        assert not classifier.is_interest(unrelated)
        assert not classifier.is_investment(deposit)
        assert classifier.is_investment(unrelated)

    def test_postings_without_transaction_id_are_never_interest(self, make_posting):
        income = make_posting("Income:Interest:FD", -50)
        deposit = make_posting("Assets:Debt:FD", 50)
        classifier = PostingClassifier([income, deposit])
        assert not classifier.is_interest(deposit)

    def test_stock_split(self, classifier, make_posting):
        split = make_posting("Assets:Equity:ABC", 0, commodity="ABC", quantity=10)
        assert classifier.is_stock_split(split)
        assert not classifier.is_investment(split)
        assert not classifier.is_withdrawal(split)

    def test_zero_currency_posting_is_not_a_split(self, classifier, make_posting):
        assert not classifier.is_stock_split(make_posting("Assets:Checking", 0))

    @pytest.mark.parametrize(
        "account, amount, investment, withdrawal",
        [
            ("Assets:Equity:ABC", 1000, True, False),
            ("Assets:Equity:ABC", -400, False, True),
            ("Assets:Checking", 1000, False, False),
            ("Assets:Checking", -1000, False, False),
            ("Income:CapitalGains:Equity:ABC", -200, False, False),
            ("Income:CapitalGains:Equity:ABC", 200, False, False),
        ],
    )
    def test_investment_and_withdrawal(
        self, classifier, make_posting, account, amount, investment, withdrawal
    ):
        posting = make_posting(account, amount)
        assert classifier.is_investment(posting) is investment
        assert classifier.is_withdrawal(posting) is withdrawal

    def test_custom_rules(self, make_posting):
        rules = AccountRules(default_currency="USD", checking_account="Assets:Bank")
        classifier = PostingClassifier(rules=rules)
        assert classifier.is_currency("USD")
        assert not classifier.is_currency("INR")
        assert not classifier.is_investment(
            make_posting("Assets:Bank", Decimal("10"), commodity="USD")
        )
