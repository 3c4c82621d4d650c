"""ledger_folio.core: Foundation types, config, and exceptions."""

from ledger_folio.core.config import (
    APIConfig,
    FolioConfig,
    LedgerConfig,
    MFApiConfig,
    StorageConfig,
    SyncConfig,
    YahooConfig,
    load_config,
)
from ledger_folio.core.exceptions import (
    ConfigError,
    FolioError,
    LedgerError,
    PriceFetchError,
    ProviderNotFoundError,
    StorageError,
)
from ledger_folio.core.models import (
    ACCOUNT_SEPARATOR,
    AccountBreakdown,
    AccountDistribution,
    AccountName,
    CashFlow,
    Commodity,
    CommodityName,
    CommodityType,
    FetchResult,
    Posting,
    Price,
    PricePoint,
    PriceSource,
    ProviderCode,
    SyncReport,
)

__all__ = [
    # Type aliases
    "AccountName",
    "CommodityName",
    "ProviderCode",
    "ACCOUNT_SEPARATOR",
    # Enums
    "CommodityType",
    # Commodity and price models
    "PriceSource",
    "Commodity",
    "PricePoint",
    "Price",
    "FetchResult",
    "SyncReport",
    # Ledger models
    "Posting",
    "CashFlow",
    # Analytics models
    "AccountBreakdown",
    "AccountDistribution",
    # Config
    "FolioConfig",
    "StorageConfig",
    "SyncConfig",
    "YahooConfig",
    "MFApiConfig",
    "LedgerConfig",
    "APIConfig",
    "load_config",
    # Exceptions
    "FolioError",
    "ConfigError",
    "PriceFetchError",
    "ProviderNotFoundError",
    "StorageError",
    "LedgerError",
]
