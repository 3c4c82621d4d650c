"""Yahoo Finance price provider: direct HTTP implementation.

Uses the unauthenticated ``/v8/finance/chart/`` endpoint via httpx and
keeps only the daily close of each bar.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any

import httpx
from aiolimiter import AsyncLimiter

from ledger_folio.core.config import YahooConfig
from ledger_folio.core.exceptions import PriceFetchError
from ledger_folio.core.models import PricePoint

logger = logging.getLogger(__name__)

_CHART_PATH = "/v8/finance/chart"
_USER_AGENT = "Mozilla/5.0 (compatible; ledger-folio/0.1)"
_HISTORY_RANGE = "50y"


class YahooChartAdapter:
    """Transforms a Yahoo Finance ``chart.result[0]`` object into PricePoints."""

    def adapt(self, raw_data: Any) -> list[PricePoint]:
        """Parse a chart result into daily closes.

        Bars whose close is null (holidays, missing data) are skipped.
        Timestamps are interpreted in UTC.
        """
        timestamps: list[int] = raw_data.get("timestamp", [])
        if not timestamps:
            return []

        quotes = raw_data.get("indicators", {}).get("quote", [{}])[0]
        closes: list[float | None] = quotes.get("close", [])

        points: list[PricePoint] = []
        for i, ts in enumerate(timestamps):
            close = closes[i] if i < len(closes) else None
            if close is None:
                continue
            points.append(
                PricePoint(
                    date=datetime.fromtimestamp(ts, tz=timezone.utc).date(),
                    value=Decimal(str(close)),
                )
            )

        return sorted(points, key=lambda p: p.date)


class YahooFinancePriceProvider:
    """Fetches daily price history from Yahoo Finance's chart API.

    Requests are rate-limited with an ``AsyncLimiter`` shared by every
    concurrent fetch going through this provider instance.

    Parameters
    ----------
    config : YahooConfig
        Rate limit, timeout and base URL.
    adapter : YahooChartAdapter | None
        Custom adapter instance. Uses default if None.
    """

    def __init__(
        self,
        config: YahooConfig | None = None,
        adapter: YahooChartAdapter | None = None,
    ) -> None:
        self._config = config or YahooConfig()
        self._limiter = AsyncLimiter(max_rate=self._config.max_rate, time_period=1.0)
        self._adapter = adapter or YahooChartAdapter()

    @property
    def code(self) -> str:
        return "com-yahoo"

    async def fetch(self, code: str, name: str) -> list[PricePoint]:
        url = f"{self._config.base_url}{_CHART_PATH}/{code}"
        params = {"interval": "1d", "range": _HISTORY_RANGE}
        context = {"provider": self.code, "code": code, "commodity": name}

        logger.debug("Fetching Yahoo chart for %s (%s)", name, code)
        try:
            async with self._limiter:
                async with httpx.AsyncClient(timeout=self._config.timeout) as client:
                    resp = await client.get(
                        url,
                        params=params,
                        headers={"User-Agent": _USER_AGENT},
                    )
                    resp.raise_for_status()
                    data = resp.json()
        except httpx.HTTPStatusError as e:
            raise PriceFetchError(
                f"Yahoo Finance HTTP {e.response.status_code} for {code}: "
                f"{e.response.text[:200]}",
                context=context,
            ) from e
        except httpx.RequestError as e:
            raise PriceFetchError(
                f"Yahoo Finance request error for {code}: {e}", context=context
            ) from e
        except ValueError as e:
            raise PriceFetchError(
                f"Yahoo Finance returned invalid JSON for {code}", context=context
            ) from e

        chart = data.get("chart", {})
        if chart.get("error"):
            err = chart["error"]
            raise PriceFetchError(
                f"Yahoo Finance API error for {code}: "
                f"{err.get('code')}: {err.get('description')}",
                context=context,
            )

        results = chart.get("result")
        if not results:
            raise PriceFetchError(
                f"Yahoo Finance returned no results for {code}", context=context
            )

        return self._adapter.adapt(results[0])
