"""Account pattern filtering over an in-memory posting list.

Patterns use SQL ``LIKE`` syntax: ``%`` matches any run of characters and
``_`` exactly one. Matching is case-insensitive, as in SQLite.
"""

from __future__ import annotations

import re
from functools import lru_cache
from typing import Iterable

from ledger_folio.core.models import Posting

CAPITAL_GAINS_PATTERN = "Income:CapitalGains:%"


@lru_cache(maxsize=128)
def like_to_regex(pattern: str) -> re.Pattern[str]:
    """Compile a LIKE pattern into an anchored regular expression."""
    parts: list[str] = []
    for ch in pattern:
        if ch == "%":
            parts.append(".*")
        elif ch == "_":
            parts.append(".")
        else:
            parts.append(re.escape(ch))
    return re.compile("^" + "".join(parts) + "$", re.IGNORECASE | re.DOTALL)


def account_like(account: str, pattern: str) -> bool:
    return like_to_regex(pattern).match(account) is not None


def filter_postings(postings: Iterable[Posting], *patterns: str) -> list[Posting]:
    """Postings whose account matches any of ``patterns``, ordered by date.

    The sort is stable, so postings on the same date keep journal order.
    With no patterns every posting is returned.
    """
    regexes = [like_to_regex(p) for p in patterns]
    selected = [
        p for p in postings
        if not regexes or any(r.match(p.account) for r in regexes)
    ]
    return sorted(selected, key=lambda p: p.date)


def balance_postings(postings: Iterable[Posting], *patterns: str) -> list[Posting]:
    """Postings for a balance query: ``patterns`` plus capital-gains legs.

    Capital-gains postings are pulled in so the breakdown engine can
    attribute realized gains back to the asset account they came from.
    """
    return filter_postings(postings, *patterns, CAPITAL_GAINS_PATTERN)
