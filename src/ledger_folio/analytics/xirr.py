"""Internal rate of return over irregularly dated cash flows (XIRR)."""

from __future__ import annotations

import logging
from datetime import date
from decimal import Decimal
from typing import Sequence

import numpy as np
from scipy.optimize import brentq

from ledger_folio.analytics.classify import PostingClassifier
from ledger_folio.core.models import CashFlow, Posting

logger = logging.getLogger(__name__)

_LOWER_BOUND = -0.99
_UPPER_BOUND = 100.0
_DAYS_PER_YEAR = 365.0
_PLACES = Decimal("0.000001")


def cash_flows(
    postings: Sequence[Posting],
    classifier: PostingClassifier,
    today: date,
) -> list[CashFlow]:
    """Build the investor's cash flows for a group of postings.

    Investments are outflows and withdrawals inflows (the posting amount,
    negated). The current market value of the holding closes the series
    as an inflow dated ``today``.
    """
    flows: list[CashFlow] = []
    market_amount = Decimal(0)
    for p in postings:
        if classifier.is_capital_gains(p):
            continue
        market_amount += p.market_amount
        if classifier.is_investment(p) or classifier.is_withdrawal(p):
            flows.append(CashFlow(date=p.date, amount=-p.amount))
    flows.append(CashFlow(date=today, amount=market_amount))
    return flows


def solve(flows: Sequence[CashFlow]) -> Decimal:
    """Annualized rate ``r`` with Σ cᵢ / (1 + r)^(tᵢ / 365) = 0.

    ``tᵢ`` is the number of days since the earliest flow. Returns
    ``Decimal(0)`` when no such rate exists or cannot be bracketed: fewer
    than two non-zero flows, flows of a single sign, or a root outside
    (-99%, 10000%).
    """
    nonzero = [f for f in flows if not f.amount.is_zero()]
    if len(nonzero) < 2:
        return Decimal(0)
    if all(f.amount > 0 for f in nonzero) or all(f.amount < 0 for f in nonzero):
        return Decimal(0)

    start = min(f.date for f in nonzero)
    years = np.array([(f.date - start).days / _DAYS_PER_YEAR for f in nonzero])
    amounts = np.array([float(f.amount) for f in nonzero])

    def npv(rate: float) -> float:
        with np.errstate(over="ignore", divide="ignore", invalid="ignore"):
            return float(np.sum(amounts / np.power(1.0 + rate, years)))

    low, high = npv(_LOWER_BOUND), npv(_UPPER_BOUND)
    if not (np.isfinite(low) and np.isfinite(high)) or low * high > 0:
        logger.debug("XIRR root not bracketed (npv %s .. %s)", low, high)
        return Decimal(0)

    try:
        rate = brentq(npv, _LOWER_BOUND, _UPPER_BOUND, maxiter=200)
    except (RuntimeError, ValueError) as e:
        logger.debug("XIRR did not converge: %s", e)
        return Decimal(0)

    return Decimal(str(rate)).quantize(_PLACES)


def xirr(
    postings: Sequence[Posting],
    classifier: PostingClassifier,
    today: date,
) -> Decimal:
    return solve(cash_flows(postings, classifier, today))
