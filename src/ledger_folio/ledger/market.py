"""Annotate postings with their value at the current market price."""

from __future__ import annotations

import logging
from bisect import bisect_right
from collections import defaultdict
from datetime import date
from decimal import Decimal
from typing import Iterable

from ledger_folio.core.models import Posting, Price

logger = logging.getLogger(__name__)


class PriceHistory:
    """Per-commodity price histories with point-in-time lookup.

    Histories are keyed by commodity name. Several prices on one date are
    tolerated; the one stored last wins.
    """

    def __init__(self, prices: Iterable[Price]) -> None:
        grouped: dict[str, list[Price]] = defaultdict(list)
        for price in prices:
            grouped[price.commodity_name].append(price)

        self._dates: dict[str, list[date]] = {}
        self._values: dict[str, list[Decimal]] = {}
        for name, history in grouped.items():
            history.sort(key=lambda p: p.date)
            self._dates[name] = [p.date for p in history]
            self._values[name] = [p.value for p in history]

    def __contains__(self, commodity: object) -> bool:
        return commodity in self._dates

    def commodities(self) -> list[str]:
        return sorted(self._dates)

    def price_on(self, commodity: str, on: date) -> Decimal | None:
        """Latest price of ``commodity`` on or before ``on``, if any."""
        dates = self._dates.get(commodity)
        if not dates:
            return None
        idx = bisect_right(dates, on) - 1
        if idx < 0:
            return None
        return self._values[commodity][idx]


def populate_market_price(
    postings: Iterable[Posting],
    history: PriceHistory,
    default_currency: str,
    today: date | None = None,
) -> list[Posting]:
    """Return copies of ``postings`` with ``market_amount`` set.

    Currency postings are worth their amount. Commodity postings are worth
    quantity × the latest known price on or before ``today``; without a
    known price they fall back to their cost.
    """
    on = today or date.today()
    missing: set[str] = set()
    priced: list[Posting] = []
    for p in postings:
        market_amount = p.amount
        if p.commodity != default_currency:
            price = history.price_on(p.commodity, on)
            if price is None:
                missing.add(p.commodity)
            else:
                market_amount = p.quantity * price
        priced.append(p.model_copy(update={"market_amount": market_amount}))

    if missing:
        logger.warning(
            "No market price for %s; valuing at cost", ", ".join(sorted(missing))
        )
    return priced
