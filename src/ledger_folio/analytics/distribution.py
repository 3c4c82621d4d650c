"""Distribution of market value across first-level asset groups."""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Mapping, Sequence

from ledger_folio.analytics.breakdown import compute_account_breakdowns
from ledger_folio.analytics.classify import PostingClassifier
from ledger_folio.core.models import (
    ACCOUNT_SEPARATOR,
    AccountBreakdown,
    AccountDistribution,
    Posting,
)
from ledger_folio.ledger.accounts import depth, leaf_name

_HUNDRED = Decimal(100)


def distribution_from_breakdowns(
    breakdowns: Mapping[str, AccountBreakdown],
    root: str = "Assets",
) -> list[AccountDistribution]:
    """Share of each group one level below ``root`` in their combined value.

    The root group itself is not part of the total. Entries are sorted by
    amount descending; equal amounts are ordered by category name.
    """
    first_level: dict[str, AccountBreakdown] = {}
    for group, breakdown in breakdowns.items():
        if depth(group) == 2 and group.startswith(root + ACCOUNT_SEPARATOR):
            first_level[leaf_name(group)] = breakdown

    total = sum((b.market_amount for b in first_level.values()), Decimal(0))

    distribution = []
    for category, breakdown in first_level.items():
        percentage = Decimal(0)
        if not total.is_zero():
            percentage = breakdown.market_amount / total * _HUNDRED
        distribution.append(
            AccountDistribution(
                category=category,
                amount=breakdown.market_amount,
                percentage=percentage,
            )
        )

    distribution.sort(key=lambda d: d.category)
    distribution.sort(key=lambda d: d.amount, reverse=True)
    return distribution


def compute_distribution(
    postings: Sequence[Posting],
    root: str = "Assets",
    classifier: PostingClassifier | None = None,
    today: date | None = None,
) -> list[AccountDistribution]:
    """Rolled-up breakdowns under ``root``, reduced to a percentage split."""
    breakdowns = compute_account_breakdowns(
        postings,
        f"{root}{ACCOUNT_SEPARATOR}%",
        rollup=True,
        classifier=classifier,
        today=today,
    )
    return distribution_from_breakdowns(breakdowns, root)
