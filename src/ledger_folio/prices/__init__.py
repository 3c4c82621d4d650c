"""Commodity price history: providers, storage, and synchronization.

Architecture
------------

    Commodity → ProviderRegistry → PriceProvider.fetch → FetchResult
              → sync_commodity_prices (fan-out / fan-in)
              → PriceStore.replace_results (one transaction)

Built-in providers:

- ``YahooFinancePriceProvider`` (``com-yahoo``): Yahoo Finance chart API.
- ``MFApiPriceProvider`` (``in-mfapi``): Indian mutual fund NAVs.
- ``CSVPriceProvider`` (``csv``): local CSV files.
"""

from ledger_folio.prices.csv_provider import CSVPriceAdapter, CSVPriceProvider
from ledger_folio.prices.mfapi import MFApiPriceProvider, parse_nav_history
from ledger_folio.prices.provider import PriceProvider
from ledger_folio.prices.registry import ProviderRegistry, build_registry
from ledger_folio.prices.store import (
    DEFAULT_BATCH_SIZE,
    PriceStore,
    SqlitePriceStore,
    create_store,
)
from ledger_folio.prices.sync import fetch_commodity, sync_commodity_prices
from ledger_folio.prices.yahoo import YahooChartAdapter, YahooFinancePriceProvider

__all__ = [
    # Protocols
    "PriceProvider",
    "PriceStore",
    # Registry
    "ProviderRegistry",
    "build_registry",
    # Providers
    "YahooChartAdapter",
    "YahooFinancePriceProvider",
    "MFApiPriceProvider",
    "parse_nav_history",
    "CSVPriceAdapter",
    "CSVPriceProvider",
    # Storage
    "DEFAULT_BATCH_SIZE",
    "SqlitePriceStore",
    "create_store",
    # Sync
    "fetch_commodity",
    "sync_commodity_prices",
]
