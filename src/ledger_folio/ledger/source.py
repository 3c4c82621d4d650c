"""Journal-backed posting source, priced from the price store."""

from __future__ import annotations

import logging
from datetime import date

from ledger_folio.core.models import CommodityType, Posting
from ledger_folio.ledger.journal import LedgerCLI
from ledger_folio.ledger.market import PriceHistory, populate_market_price
from ledger_folio.prices.store import PriceStore

logger = logging.getLogger(__name__)


async def sync_journal_prices(ledger: LedgerCLI, store: PriceStore) -> int:
    """Store the journal's own ``P`` directives as ``unknown``-type prices.

    Every previously stored ``unknown`` price is replaced.
    """
    prices = await ledger.prices()
    return await store.replace_by_type(CommodityType.UNKNOWN, prices)


async def load_postings(
    ledger: LedgerCLI,
    store: PriceStore,
    today: date | None = None,
) -> list[Posting]:
    """All journal postings, valued at the latest stored prices."""
    postings = await ledger.postings()
    history = PriceHistory(await store.get_prices())
    logger.debug(
        "Valuing %d postings against %d priced commodities",
        len(postings),
        len(history.commodities()),
    )
    return populate_market_price(postings, history, ledger.default_currency, today)
