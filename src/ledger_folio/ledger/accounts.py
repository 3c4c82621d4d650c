"""Account-name hierarchy helpers.

Accounts are colon-separated paths, e.g. ``Assets:Equity:Stock``.
"""

from __future__ import annotations

from ledger_folio.core.models import ACCOUNT_SEPARATOR


def is_same_or_parent(account: str, group: str) -> bool:
    """True if ``group`` is ``account`` or one of its ancestors."""
    if account == group:
        return True
    return account.startswith(group + ACCOUNT_SEPARATOR)


def ancestors(account: str) -> list[str]:
    """Every proper prefix of ``account``, shortest first.

    >>> ancestors("Assets:Equity:Stock")
    ['Assets', 'Assets:Equity']
    """
    parts = account.split(ACCOUNT_SEPARATOR)
    return [ACCOUNT_SEPARATOR.join(parts[:i]) for i in range(1, len(parts))]


def depth(account: str) -> int:
    return len(account.split(ACCOUNT_SEPARATOR))


def leaf_name(account: str) -> str:
    return account.rsplit(ACCOUNT_SEPARATOR, 1)[-1]
