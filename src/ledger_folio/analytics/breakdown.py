"""Per-account breakdowns: invested capital, withdrawals, market value, returns.

Two passes over the postings:

1. Group discovery builds ``{group: is_leaf}``. Each account with a
   posting is a leaf; with rollup, each of its ancestors is added as a
   non-leaf group. Capital-gains postings take no part in discovery.
2. Aggregation reduces, per group, the postings whose (capital-gains
   redirected) account is the group or a descendant of it.

Everything here is a pure function of its arguments, so concurrent calls
need no synchronization.
"""

from __future__ import annotations

import logging
from datetime import date
from decimal import Decimal
from typing import Sequence

from ledger_folio.analytics.classify import PostingClassifier
from ledger_folio.analytics.xirr import xirr
from ledger_folio.core.models import AccountBreakdown, Posting
from ledger_folio.ledger.accounts import ancestors, is_same_or_parent
from ledger_folio.ledger.query import balance_postings

logger = logging.getLogger(__name__)


def discover_groups(
    postings: Sequence[Posting],
    rollup: bool,
    classifier: PostingClassifier,
) -> dict[str, bool]:
    """Map every group to be reported to whether it is a leaf account."""
    groups: dict[str, bool] = {}
    for p in postings:
        if classifier.is_capital_gains(p):
            continue
        if rollup:
            for parent in ancestors(p.account):
                groups.setdefault(parent, False)
        groups[p.account] = True
    return groups


def postings_for_group(
    postings: Sequence[Posting],
    group: str,
    classifier: PostingClassifier,
) -> list[Posting]:
    return [
        p for p in postings
        if is_same_or_parent(classifier.effective_account(p), group)
    ]


def compute_breakdown(
    postings: Sequence[Posting],
    group: str,
    leaf: bool,
    classifier: PostingClassifier,
    today: date,
) -> AccountBreakdown:
    """Metrics for one group over the postings that belong to it."""
    investment_amount = Decimal(0)
    withdrawal_amount = Decimal(0)
    market_amount = Decimal(0)
    balance_units = Decimal(0)

    for p in postings:
        if classifier.is_investment(p):
            investment_amount += p.amount
        if classifier.is_withdrawal(p):
            withdrawal_amount += -p.amount
        if not classifier.is_capital_gains(p):
            market_amount += p.market_amount
        if leaf and not classifier.is_currency(p.commodity):
            balance_units += p.quantity

    return AccountBreakdown.from_amounts(
        group=group,
        investment_amount=investment_amount,
        withdrawal_amount=withdrawal_amount,
        market_amount=market_amount,
        balance_units=balance_units,
        xirr=xirr(postings, classifier, today),
    )


def compute_breakdowns(
    postings: Sequence[Posting],
    rollup: bool,
    classifier: PostingClassifier | None = None,
    today: date | None = None,
) -> dict[str, AccountBreakdown]:
    """Breakdowns for every group found in ``postings``, keyed by group name.

    ``postings`` must already carry market amounts. When no classifier is
    given one is built from ``postings`` alone, which only detects interest
    if the interest legs are among them.
    """
    classifier = classifier or PostingClassifier(postings)
    on = today or date.today()

    groups = discover_groups(postings, rollup, classifier)
    result = {
        group: compute_breakdown(
            postings_for_group(postings, group, classifier),
            group,
            leaf,
            classifier,
            on,
        )
        for group, leaf in sorted(groups.items())
    }
    logger.debug("Computed %d breakdowns over %d postings", len(result), len(postings))
    return result


def compute_account_breakdowns(
    postings: Sequence[Posting],
    pattern: str,
    rollup: bool,
    classifier: PostingClassifier | None = None,
    today: date | None = None,
) -> dict[str, AccountBreakdown]:
    """Select the postings for an account pattern, then break them down.

    Postings matching ``pattern`` are taken together with the capital-gains
    legs that the breakdown attributes back to their asset accounts.
    """
    classifier = classifier or PostingClassifier(postings)
    selected = balance_postings(postings, pattern)
    return compute_breakdowns(selected, rollup, classifier, today)
