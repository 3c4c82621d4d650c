"""Dashboard: independent read-only computations run concurrently."""

from __future__ import annotations

import asyncio
import logging
import time
from datetime import date
from typing import Any, Callable, Sequence, TypeVar

from ledger_folio.analytics.breakdown import compute_account_breakdowns, compute_breakdowns
from ledger_folio.analytics.classify import PostingClassifier
from ledger_folio.analytics.distribution import compute_distribution
from ledger_folio.core.models import (
    ACCOUNT_SEPARATOR,
    AccountBreakdown,
    AccountDistribution,
    Posting,
)
from ledger_folio.ledger.query import balance_postings

logger = logging.getLogger(__name__)

T = TypeVar("T")

ASSETS_PATTERN = "Assets:%"


def checking_balance(
    postings: Sequence[Posting],
    classifier: PostingClassifier,
    today: date | None = None,
) -> dict[str, AccountBreakdown]:
    """The checking account and its sub-accounts, rolled up."""
    account = classifier.rules.checking_account
    selected = balance_postings(postings, account, account + ACCOUNT_SEPARATOR + "%")
    return compute_breakdowns(selected, True, classifier, today)


def asset_balance(
    postings: Sequence[Posting],
    classifier: PostingClassifier,
    today: date | None = None,
) -> dict[str, AccountBreakdown]:
    return compute_account_breakdowns(postings, ASSETS_PATTERN, True, classifier, today)


def asset_distribution(
    postings: Sequence[Posting],
    classifier: PostingClassifier,
    today: date | None = None,
) -> list[AccountDistribution]:
    return compute_distribution(
        postings, classifier.rules.assets_account, classifier, today
    )


async def _timed(name: str, fn: Callable[..., T], *args: Any) -> T:
    logger.debug("Computing %s", name)
    start = time.perf_counter()
    result = await asyncio.to_thread(fn, *args)
    logger.debug("Computed %s in %.3fs", name, time.perf_counter() - start)
    return result


async def build_dashboard(
    postings: Sequence[Posting],
    classifier: PostingClassifier | None = None,
    today: date | None = None,
) -> dict[str, Any]:
    """Checking balance, asset balance and asset distribution, in parallel.

    Each computation runs in a worker thread. They only read ``postings``
    and ``classifier``.
    """
    classifier = classifier or PostingClassifier(postings)
    on = today or date.today()

    checking, assets, distribution = await asyncio.gather(
        _timed("checking_balance", checking_balance, postings, classifier, on),
        _timed("asset_balance", asset_balance, postings, classifier, on),
        _timed("asset_distribution", asset_distribution, postings, classifier, on),
    )
    return {
        "checking_balance": checking,
        "asset_balance": assets,
        "asset_distribution": distribution,
    }
