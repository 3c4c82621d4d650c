"""CSV price provider: reads a price history from a local file.

The commodity's provider code is the path of a CSV file with a date column
and a value column. Column names are auto-detected from common aliases.
"""

from __future__ import annotations

import asyncio
import csv
import logging
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any

from ledger_folio.core.exceptions import PriceFetchError
from ledger_folio.core.models import PricePoint

logger = logging.getLogger(__name__)

_DATE_ALIASES = {"date", "Date", "DATE", "timestamp", "Timestamp"}
_VALUE_ALIASES = {"value", "Value", "close", "Close", "CLOSE", "nav", "NAV", "price", "Price"}


def _find_column(headers: list[str], aliases: set[str]) -> str | None:
    """Find the first header that matches any alias."""
    for h in headers:
        if h in aliases:
            return h
    return None


class CSVPriceAdapter:
    """Transforms CSV rows (dicts from csv.DictReader) into PricePoints.

    Parameters
    ----------
    date_col : str | None
        Name of the date column. Auto-detected if None.
    value_col : str | None
        Name of the value column. Auto-detected if None.
    date_format : str
        strptime fallback format when a date is not ISO-8601.
    """

    def __init__(
        self,
        date_col: str | None = None,
        value_col: str | None = None,
        date_format: str = "%d-%m-%Y",
    ) -> None:
        self._date_col = date_col
        self._value_col = value_col
        self._date_format = date_format

    def _parse_date(self, raw: str) -> date:
        try:
            return date.fromisoformat(raw)
        except ValueError:
            return datetime.strptime(raw, self._date_format).date()

    def adapt(self, raw_data: list[dict[str, Any]]) -> list[PricePoint]:
        """Parse rows into PricePoints sorted by date ascending.

        Raises ValueError when the date or value column cannot be found.
        Rows with an unparseable date or value are skipped.
        """
        if not raw_data:
            return []

        headers = list(raw_data[0].keys())
        date_col = self._date_col or _find_column(headers, _DATE_ALIASES)
        value_col = self._value_col or _find_column(headers, _VALUE_ALIASES)

        if date_col is None:
            raise ValueError(f"Cannot find date column in headers: {headers}")
        if value_col is None:
            raise ValueError(f"Cannot find value column in headers: {headers}")

        points: list[PricePoint] = []
        for row in raw_data:
            try:
                points.append(
                    PricePoint(
                        date=self._parse_date(row[date_col]),
                        value=Decimal(row[value_col]),
                    )
                )
            except (KeyError, TypeError, ValueError, InvalidOperation):
                logger.warning("Skipping unparseable CSV price row: %s", row)

        return sorted(points, key=lambda p: p.date)


class CSVPriceProvider:
    """Provider that treats the commodity code as a CSV file path."""

    def __init__(self, adapter: CSVPriceAdapter | None = None) -> None:
        self._adapter = adapter or CSVPriceAdapter()

    @property
    def code(self) -> str:
        return "csv"

    async def fetch(self, code: str, name: str) -> list[PricePoint]:
        context = {"provider": self.code, "code": code, "commodity": name}
        path = Path(code).expanduser()
        if not path.exists():
            raise PriceFetchError(f"CSV price file not found: {code}", context=context)

        try:
            rows = await asyncio.to_thread(self._read_rows, path)
            return self._adapter.adapt(rows)
        except (OSError, ValueError, csv.Error) as e:
            raise PriceFetchError(
                f"Failed to read CSV prices for {name} from {code}: {e}",
                context=context,
            ) from e

    @staticmethod
    def _read_rows(path: Path) -> list[dict[str, Any]]:
        with open(path, newline="") as f:
            return list(csv.DictReader(f))
