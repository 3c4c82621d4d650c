"""Commodity price synchronization: concurrent fetch, single atomic replace."""

from __future__ import annotations

import asyncio
import logging
import random
import time
from typing import Sequence

from ledger_folio.core.models import Commodity, FetchResult, Price, SyncReport
from ledger_folio.prices.registry import ProviderRegistry
from ledger_folio.prices.store import DEFAULT_BATCH_SIZE, PriceStore

logger = logging.getLogger(__name__)


async def fetch_commodity(
    commodity: Commodity,
    registry: ProviderRegistry,
) -> tuple[FetchResult, Exception | None]:
    """Fetch one commodity's history and wrap it in a FetchResult.

    Never raises for a fetch problem: the error is logged and returned
    alongside a result with no prices.
    """
    name = commodity.name
    code = commodity.price.code
    logger.info("Fetching commodity %s", name)

    prices: list[Price] = []
    error: Exception | None = None
    try:
        provider = registry.get(commodity.price.provider)
        points = await provider.fetch(code, name)
        prices = [
            Price(
                commodity_type=commodity.type,
                commodity_id=code,
                commodity_name=name,
                date=point.date,
                value=point.value,
            )
            for point in points
        ]
    except Exception as e:
        logger.error(
            "Failed to fetch prices for %s via %s: %s",
            name,
            commodity.price.provider,
            e,
        )
        error = e

    result = FetchResult(
        commodity_type=commodity.type,
        name=name,
        code=code,
        prices=prices,
    )
    return result, error


async def sync_commodity_prices(
    commodities: Sequence[Commodity],
    registry: ProviderRegistry,
    store: PriceStore,
    *,
    batch_size: int = DEFAULT_BATCH_SIZE,
    shuffle: bool = True,
    rng: random.Random | None = None,
) -> SyncReport:
    """Refresh the stored price history of ``commodities``.

    One task per commodity fetches concurrently; once every task has
    finished, all results are written with a single
    :meth:`PriceStore.replace_results` call. A commodity whose fetch failed
    is written with an empty history, so its old rows are removed.

    Raises
    ------
    StorageError
        If the replace transaction fails. Nothing is changed in that case.
    """
    ordered = list(commodities)
    if shuffle:
        (rng or random.Random()).shuffle(ordered)

    logger.info("Fetching price history for %d commodities", len(ordered))
    fetch_start = time.perf_counter()

    async with asyncio.TaskGroup() as tg:
        tasks = [tg.create_task(fetch_commodity(c, registry)) for c in ordered]

    outcomes = [task.result() for task in tasks]
    results = [result for result, _ in outcomes]
    failed = sorted(result.name for result, error in outcomes if error is not None)

    fetch_seconds = time.perf_counter() - fetch_start
    logger.info("Fetched all commodities in %.2fs", fetch_seconds)
    if failed:
        logger.warning(
            "%d commodities failed to fetch and will have no prices: %s",
            len(failed),
            ", ".join(failed),
        )

    inserted = 0
    write_seconds = 0.0
    if results:
        write_start = time.perf_counter()
        inserted = await store.replace_results(results, batch_size=batch_size)
        write_seconds = time.perf_counter() - write_start
        logger.info("Stored %d prices in %.2fs", inserted, write_seconds)

    return SyncReport(
        commodities=len(results),
        prices_inserted=inserted,
        failed=failed,
        fetch_seconds=fetch_seconds,
        write_seconds=write_seconds,
    )
