"""Provider registry: maps provider codes to provider instances."""

from __future__ import annotations

import logging

from ledger_folio.core.config import FolioConfig
from ledger_folio.core.exceptions import ProviderNotFoundError
from ledger_folio.core.models import ProviderCode
from ledger_folio.prices.csv_provider import CSVPriceProvider
from ledger_folio.prices.mfapi import MFApiPriceProvider
from ledger_folio.prices.provider import PriceProvider
from ledger_folio.prices.yahoo import YahooFinancePriceProvider

logger = logging.getLogger(__name__)


class ProviderRegistry:
    """Registry of available price providers, keyed by provider code."""

    def __init__(self) -> None:
        self._providers: dict[ProviderCode, PriceProvider] = {}

    def register(self, provider: PriceProvider) -> None:
        if provider.code in self._providers:
            raise ValueError(
                f"Provider '{provider.code}' is already registered. Use replace() to override."
            )
        self._providers[provider.code] = provider

    def replace(self, provider: PriceProvider) -> None:
        if provider.code not in self._providers:
            raise KeyError(f"Provider '{provider.code}' is not registered.")
        self._providers[provider.code] = provider

    def get(self, code: ProviderCode) -> PriceProvider:
        try:
            return self._providers[code]
        except KeyError:
            available = ", ".join(sorted(self._providers)) or "none"
            raise ProviderNotFoundError(
                f"Unknown price provider '{code}'. Available: {available}",
                context={"provider": code},
            ) from None

    def codes(self) -> list[ProviderCode]:
        return sorted(self._providers)

    def __contains__(self, code: object) -> bool:
        return code in self._providers


def build_registry(config: FolioConfig) -> ProviderRegistry:
    """Create a registry holding the built-in providers."""
    registry = ProviderRegistry()
    registry.register(YahooFinancePriceProvider(config.yahoo))
    registry.register(MFApiPriceProvider(config.mfapi))
    registry.register(CSVPriceProvider())
    logger.debug("Registered price providers: %s", registry.codes())
    return registry
