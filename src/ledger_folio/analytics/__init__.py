"""Portfolio analytics: breakdowns, distribution, XIRR and the dashboard.

All engines are pure functions over already-priced postings; they share no
mutable state and may be called concurrently.
"""

from ledger_folio.analytics.breakdown import (
    compute_account_breakdowns,
    compute_breakdown,
    compute_breakdowns,
    discover_groups,
    postings_for_group,
)
from ledger_folio.analytics.classify import AccountRules, PostingClassifier
from ledger_folio.analytics.dashboard import (
    asset_balance,
    asset_distribution,
    build_dashboard,
    checking_balance,
)
from ledger_folio.analytics.distribution import (
    compute_distribution,
    distribution_from_breakdowns,
)
from ledger_folio.analytics.xirr import cash_flows, solve, xirr

__all__ = [
    # Classification
    "AccountRules",
    "PostingClassifier",
    # Breakdown
    "compute_account_breakdowns",
    "compute_breakdown",
    "compute_breakdowns",
    "discover_groups",
    "postings_for_group",
    # Distribution
    "compute_distribution",
    "distribution_from_breakdowns",
    # XIRR
    "cash_flows",
    "solve",
    "xirr",
    # Dashboard
    "asset_balance",
    "asset_distribution",
    "build_dashboard",
    "checking_balance",
]
