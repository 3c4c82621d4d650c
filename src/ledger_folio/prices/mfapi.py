"""Indian mutual fund NAV history from mfapi.in."""

from __future__ import annotations

import logging
from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Any

import httpx

from ledger_folio.core.config import MFApiConfig
from ledger_folio.core.exceptions import PriceFetchError
from ledger_folio.core.models import PricePoint

logger = logging.getLogger(__name__)

_DATE_FORMAT = "%d-%m-%Y"


def parse_nav_history(raw_data: Any) -> list[PricePoint]:
    """Convert the ``data`` array of an mfapi response into PricePoints.

    mfapi lists NAVs newest first with ``dd-mm-yyyy`` dates and string
    values. Rows that fail to parse are skipped.
    """
    points: list[PricePoint] = []
    for row in raw_data.get("data") or []:
        try:
            points.append(
                PricePoint(
                    date=datetime.strptime(row["date"], _DATE_FORMAT).date(),
                    value=Decimal(row["nav"]),
                )
            )
        except (KeyError, TypeError, ValueError, InvalidOperation):
            logger.warning("Skipping unparseable NAV row: %s", row)
    return sorted(points, key=lambda p: p.date)


class MFApiPriceProvider:
    """Fetches the NAV history of a mutual fund scheme by scheme code."""

    def __init__(self, config: MFApiConfig | None = None) -> None:
        self._config = config or MFApiConfig()

    @property
    def code(self) -> str:
        return "in-mfapi"

    async def fetch(self, code: str, name: str) -> list[PricePoint]:
        url = f"{self._config.base_url}/mf/{code}"
        context = {"provider": self.code, "code": code, "commodity": name}

        logger.debug("Fetching NAV history for %s (scheme %s)", name, code)
        try:
            async with httpx.AsyncClient(timeout=self._config.timeout) as client:
                resp = await client.get(url)
                resp.raise_for_status()
                data = resp.json()
        except httpx.HTTPStatusError as e:
            raise PriceFetchError(
                f"mfapi HTTP {e.response.status_code} for scheme {code}",
                context=context,
            ) from e
        except httpx.RequestError as e:
            raise PriceFetchError(
                f"mfapi request error for scheme {code}: {e}", context=context
            ) from e
        except ValueError as e:
            raise PriceFetchError(
                f"mfapi returned invalid JSON for scheme {code}", context=context
            ) from e

        if str(data.get("status", "SUCCESS")).upper() != "SUCCESS":
            raise PriceFetchError(
                f"mfapi reported status {data.get('status')!r} for scheme {code}",
                context=context,
            )

        return parse_nav_history(data)
