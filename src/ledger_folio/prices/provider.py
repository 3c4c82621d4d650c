"""Price provider protocol: the network boundary of the sync pipeline.

Architecture
------------
Each commodity names a provider code and a provider-side identifier in its
configuration. The sync pipeline looks the code up in a
:class:`~ledger_folio.prices.registry.ProviderRegistry` and calls
``fetch(code, name)`` on whatever it finds:

    Commodity → ProviderRegistry[code] → PriceProvider.fetch → list[PricePoint]

- A provider knows one upstream source and nothing about storage.
- Failures are raised, never swallowed; the pipeline decides that a failed
  fetch degrades to an empty history.
- Adding a source means writing one class and registering it under a code.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from ledger_folio.core.models import PricePoint, ProviderCode


@runtime_checkable
class PriceProvider(Protocol):
    """Consumer-facing interface for fetching a commodity's price history."""

    @property
    def code(self) -> ProviderCode:
        """Registry key for this provider (e.g. ``"in-mfapi"``)."""
        ...

    async def fetch(self, code: str, name: str) -> list[PricePoint]:
        """Fetch the full price history for one commodity.

        Parameters
        ----------
        code : str
            Provider-side identifier (ticker, scheme code, file path).
        name : str
            Commodity name as used in the journal, for logging and errors.

        Returns
        -------
        list[PricePoint]
            Sorted by date ascending. May be empty.

        Raises
        ------
        PriceFetchError
            When the upstream source cannot be read or parsed.
        """
        ...
