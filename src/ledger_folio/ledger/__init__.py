"""Ledger postings: CLI source, account filters, and market valuation."""

from ledger_folio.ledger.accounts import ancestors, depth, is_same_or_parent, leaf_name
from ledger_folio.ledger.journal import LedgerCLI, parse_postings, parse_prices
from ledger_folio.ledger.market import PriceHistory, populate_market_price
from ledger_folio.ledger.query import (
    CAPITAL_GAINS_PATTERN,
    account_like,
    balance_postings,
    filter_postings,
)
from ledger_folio.ledger.source import load_postings, sync_journal_prices

__all__ = [
    "LedgerCLI",
    "parse_postings",
    "parse_prices",
    "PriceHistory",
    "populate_market_price",
    "CAPITAL_GAINS_PATTERN",
    "account_like",
    "balance_postings",
    "filter_postings",
    "ancestors",
    "depth",
    "is_same_or_parent",
    "leaf_name",
    "load_postings",
    "sync_journal_prices",
]
