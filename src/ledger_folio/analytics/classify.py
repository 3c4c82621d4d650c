"""Posting classification rules used by the breakdown engine."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

from ledger_folio.core.models import ACCOUNT_SEPARATOR, Posting
from ledger_folio.ledger.accounts import is_same_or_parent


@dataclass(frozen=True)
class AccountRules:
    """Account-naming conventions of the journal."""

    default_currency: str = "INR"
    assets_account: str = "Assets"
    checking_account: str = "Assets:Checking"
    capital_gains_account: str = "Income:CapitalGains"
    interest_account: str = "Income:Interest"


class PostingClassifier:
    """Answers the classification questions the breakdown engine asks.

    Interest detection needs whole transactions, including legs outside
    the accounts being broken down, so the classifier is built from the
    full journal; the transaction ids carrying an interest leg are
    collected once up front. The instance is immutable after construction
    and safe to share across threads.
    """

    def __init__(
        self,
        journal: Iterable[Posting] = (),
        rules: AccountRules | None = None,
    ) -> None:
        self.rules = rules or AccountRules()
        self._interest_transactions = frozenset(
            p.transaction_id
            for p in journal
            if p.transaction_id
            and is_same_or_parent(p.account, self.rules.interest_account)
        )

    def is_currency(self, commodity: str) -> bool:
        return commodity == self.rules.default_currency

    def is_checking_account(self, account: str) -> bool:
        return is_same_or_parent(account, self.rules.checking_account)

    def is_capital_gains(self, posting: Posting) -> bool:
        return is_same_or_parent(posting.account, self.rules.capital_gains_account)

    def capital_gains_source_account(self, account: str) -> str:
        """Map ``Income:CapitalGains:X`` back to the asset account ``Assets:X``."""
        prefix = self.rules.capital_gains_account + ACCOUNT_SEPARATOR
        if account.startswith(prefix):
            return self.rules.assets_account + ACCOUNT_SEPARATOR + account[len(prefix):]
        return self.rules.assets_account

    def effective_account(self, posting: Posting) -> str:
        """Account a posting is attributed to for breakdown purposes."""
        if self.is_capital_gains(posting):
            return self.capital_gains_source_account(posting.account)
        return posting.account

    def is_interest(self, posting: Posting) -> bool:
        """A currency leg of a transaction that also books interest income."""
        return (
            self.is_currency(posting.commodity)
            and posting.transaction_id in self._interest_transactions
        )

    def is_stock_split(self, posting: Posting) -> bool:
        """Units received or removed at no cost."""
        return (
            not self.is_currency(posting.commodity)
            and posting.amount.is_zero()
            and not posting.quantity.is_zero()
        )

    def is_investment(self, posting: Posting) -> bool:
        return not (
            self.is_checking_account(posting.account)
            or posting.amount < 0
            or self.is_interest(posting)
            or self.is_stock_split(posting)
            or self.is_capital_gains(posting)
        )

    def is_withdrawal(self, posting: Posting) -> bool:
        if self.is_capital_gains(posting):
            return False
        return not (
            self.is_checking_account(posting.account)
            or posting.amount > 0
            or self.is_interest(posting)
            or self.is_stock_split(posting)
        )
