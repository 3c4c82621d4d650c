"""SQLite-backed price storage with all-or-nothing batch replacement.

The price table is only ever written in bulk: a sync cycle deletes the
rows of every commodity it attempted and inserts the freshly fetched
histories inside one explicit transaction, so readers see either the old
set or the new one.
"""

from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from datetime import date
from decimal import Decimal
from pathlib import Path
from typing import (
    Any,
    AsyncIterator,
    ClassVar,
    Iterator,
    Protocol,
    Sequence,
    runtime_checkable,
)

import aiosqlite

from ledger_folio.core.config import StorageConfig
from ledger_folio.core.exceptions import StorageError
from ledger_folio.core.models import CommodityType, FetchResult, Price

logger = logging.getLogger(__name__)

DEFAULT_BATCH_SIZE = 5000

_INSERT_SQL = """INSERT INTO prices
    (commodity_type, commodity_id, commodity_name, date, value)
    VALUES (?, ?, ?, ?, ?)"""


@runtime_checkable
class PriceStore(Protocol):
    """Protocol for price persistence backends."""

    async def replace_results(
        self, results: Sequence[FetchResult], batch_size: int = DEFAULT_BATCH_SIZE
    ) -> int: ...
    async def replace_by_type(
        self, commodity_type: CommodityType, prices: Sequence[Price], batch_size: int = 100_000
    ) -> int: ...
    async def get_prices(
        self,
        commodity_type: CommodityType | None = None,
        commodity_name: str | None = None,
        commodity_id: str | None = None,
    ) -> list[Price]: ...
    async def list_commodities(self) -> list[dict[str, Any]]: ...
    async def count(self) -> int: ...
    async def delete_all(self) -> None: ...
    async def initialize(self) -> None: ...
    async def close(self) -> None: ...
    async def health_check(self) -> bool: ...


def _chunks(rows: list[tuple], size: int) -> Iterator[list[tuple]]:
    for start in range(0, len(rows), size):
        yield rows[start : start + size]


class SqlitePriceStore:
    """SQLite implementation of the price store.

    The connection runs in autocommit mode (``isolation_level=None``) so
    every write path opens its own ``BEGIN`` and ends in ``COMMIT`` or
    ``ROLLBACK``; nothing relies on implicit transactions.

    One connection serves every caller, so statements are serialized with
    an ``asyncio.Lock``: a read waits for an open replace to commit or roll
    back and never sees its half-written rows.
    """

    _MIGRATIONS: ClassVar[dict[int, tuple[str, list[str]]]] = {
        1: (
            "Initial schema",
            [
                """CREATE TABLE IF NOT EXISTS schema_version (
                    version INTEGER PRIMARY KEY,
                    applied_at TEXT DEFAULT (datetime('now'))
                )""",
                """CREATE TABLE IF NOT EXISTS prices (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    commodity_type TEXT NOT NULL,
                    commodity_id TEXT NOT NULL,
                    commodity_name TEXT NOT NULL,
                    date TEXT NOT NULL,
                    value TEXT NOT NULL
                )""",
                """CREATE INDEX IF NOT EXISTS idx_prices_commodity
                   ON prices(commodity_type, commodity_name, commodity_id)""",
                "CREATE INDEX IF NOT EXISTS idx_prices_date ON prices(date)",
            ],
        ),
    }

    def __init__(self, config: StorageConfig) -> None:
        self._path = config.sqlite_path
        self._db: aiosqlite.Connection | None = None
        self._lock = asyncio.Lock()

    async def initialize(self) -> None:
        """Open connection, enable WAL, run migrations."""
        try:
            if self._path != ":memory:":
                Path(self._path).parent.mkdir(parents=True, exist_ok=True)
            self._db = await aiosqlite.connect(self._path, isolation_level=None)
            self._db.row_factory = aiosqlite.Row
            await self._db.execute("PRAGMA journal_mode=WAL")
            await self._db.execute("PRAGMA synchronous=NORMAL")
            await self._db.execute("BEGIN")
            try:
                current = await self._get_schema_version()
                await self._apply_migrations(current)
                await self._db.execute("COMMIT")
            except Exception:
                await self._db.execute("ROLLBACK")
                raise
        except Exception as e:
            raise StorageError(
                f"Failed to initialize SQLite price store: {e}",
                context={"operation": "initialize", "path": self._path},
            ) from e

    async def close(self) -> None:
        if self._db is not None:
            await self._db.close()
            self._db = None

    async def health_check(self) -> bool:
        if self._db is None:
            return False
        try:
            async with self._lock, self._db.execute("SELECT 1") as cursor:
                row = await cursor.fetchone()
            return row is not None
        except aiosqlite.Error:
            return False

    # --- Schema Migration ---

    async def _get_schema_version(self) -> int:
        try:
            async with self._db.execute(
                "SELECT MAX(version) FROM schema_version"
            ) as cursor:
                row = await cursor.fetchone()
            return row[0] if row[0] is not None else 0
        except aiosqlite.OperationalError:
            return 0

    async def _apply_migrations(self, current_version: int) -> None:
        for version in sorted(self._MIGRATIONS.keys()):
            if version <= current_version:
                continue
            desc, statements = self._MIGRATIONS[version]
            logger.info("Applying migration %d: %s", version, desc)
            for sql in statements:
                await self._db.execute(sql)
            await self._db.execute(
                "INSERT INTO schema_version (version) VALUES (?)", (version,)
            )

    # --- Writes ---

    @asynccontextmanager
    async def _transaction(
        self, message: str, context: dict[str, Any]
    ) -> AsyncIterator[None]:
        """Hold the lock for one BEGIN..COMMIT; failures become StorageError.

        ROLLBACK is only issued when this block's own BEGIN succeeded.
        """
        async with self._lock:
            began = False
            try:
                await self._db.execute("BEGIN")
                began = True
                yield
                await self._db.execute("COMMIT")
            except Exception as e:
                if began:
                    await self._db.execute("ROLLBACK")
                raise StorageError(f"{message}: {e}", context=context) from e

    async def replace_results(
        self,
        results: Sequence[FetchResult],
        batch_size: int = DEFAULT_BATCH_SIZE,
    ) -> int:
        """Replace the stored history of every commodity in ``results``.

        One transaction: a single DELETE matching every (type, name, code)
        triple in ``results``, then all fetched prices inserted in chunks of
        ``batch_size``. Any failure rolls back the deletes too.

        Returns the number of rows inserted.
        """
        rows = [self._price_to_row(p) for r in results for p in r.prices]
        identities = sorted({r.identity for r in results})

        async with self._transaction(
            "Failed to replace prices",
            {"operation": "replace", "table": "prices", "commodities": len(identities)},
        ):
            if identities:
                placeholders = ", ".join("(?, ?, ?)" for _ in identities)
                params = [str(v) for identity in identities for v in identity]
                await self._db.execute(
                    f"""DELETE FROM prices
                        WHERE (commodity_type, commodity_name, commodity_id)
                        IN (VALUES {placeholders})""",
                    params,
                )
            for chunk in _chunks(rows, batch_size):
                await self._insert_batch(chunk)

        logger.info(
            "Replaced prices for %d commodities (%d rows)", len(identities), len(rows)
        )
        return len(rows)

    async def replace_by_type(
        self,
        commodity_type: CommodityType,
        prices: Sequence[Price],
        batch_size: int = 100_000,
    ) -> int:
        """Replace every stored price of one commodity type in one transaction."""
        rows = [self._price_to_row(p) for p in prices]

        async with self._transaction(
            f"Failed to replace {commodity_type} prices",
            {"operation": "replace_by_type", "table": "prices"},
        ):
            await self._db.execute(
                "DELETE FROM prices WHERE commodity_type = ?", (str(commodity_type),)
            )
            for chunk in _chunks(rows, batch_size):
                await self._insert_batch(chunk)

        logger.info("Replaced %d %s prices", len(rows), commodity_type)
        return len(rows)

    async def _insert_batch(self, rows: list[tuple]) -> None:
        await self._db.executemany(_INSERT_SQL, rows)

    async def delete_all(self) -> None:
        try:
            async with self._lock:
                await self._db.execute("DELETE FROM prices")
        except Exception as e:
            raise StorageError(
                f"Failed to delete prices: {e}",
                context={"operation": "delete", "table": "prices"},
            ) from e

    # --- Reads ---

    async def get_prices(
        self,
        commodity_type: CommodityType | None = None,
        commodity_name: str | None = None,
        commodity_id: str | None = None,
    ) -> list[Price]:
        """Return stored prices matching the filters, ordered by date."""
        conditions: list[str] = []
        params: list[str] = []
        if commodity_type is not None:
            conditions.append("commodity_type = ?")
            params.append(str(commodity_type))
        if commodity_name is not None:
            conditions.append("commodity_name = ?")
            params.append(commodity_name)
        if commodity_id is not None:
            conditions.append("commodity_id = ?")
            params.append(commodity_id)

        sql = "SELECT * FROM prices"
        if conditions:
            sql += " WHERE " + " AND ".join(conditions)
        sql += " ORDER BY date, id"

        try:
            async with self._lock, self._db.execute(sql, params) as cursor:
                rows = await cursor.fetchall()
        except Exception as e:
            raise StorageError(
                f"Failed to query prices: {e}",
                context={"operation": "query", "table": "prices"},
            ) from e
        return [self._row_to_price(row) for row in rows]

    async def list_commodities(self) -> list[dict[str, Any]]:
        """Summarize stored histories per (type, name, code)."""
        try:
            async with self._lock, self._db.execute(
                """SELECT commodity_type, commodity_name, commodity_id,
                          COUNT(*) AS count, MIN(date) AS first_date,
                          MAX(date) AS last_date
                   FROM prices
                   GROUP BY commodity_type, commodity_name, commodity_id
                   ORDER BY commodity_type, commodity_name"""
            ) as cursor:
                rows = await cursor.fetchall()
        except Exception as e:
            raise StorageError(
                f"Failed to list commodities: {e}",
                context={"operation": "query", "table": "prices"},
            ) from e
        return [dict(row) for row in rows]

    async def count(self) -> int:
        async with self._lock, self._db.execute("SELECT COUNT(*) FROM prices") as cursor:
            row = await cursor.fetchone()
        return row[0]

    # --- Row mapping ---

    @staticmethod
    def _price_to_row(price: Price) -> tuple:
        return (
            str(price.commodity_type),
            price.commodity_id,
            price.commodity_name,
            price.date.isoformat(),
            str(price.value),
        )

    @staticmethod
    def _row_to_price(row: aiosqlite.Row) -> Price:
        return Price(
            commodity_type=CommodityType(row["commodity_type"]),
            commodity_id=row["commodity_id"],
            commodity_name=row["commodity_name"],
            date=date.fromisoformat(row["date"]),
            value=Decimal(row["value"]),
        )


async def create_store(config: StorageConfig) -> SqlitePriceStore:
    """Create and initialize the price store."""
    store = SqlitePriceStore(config)
    await store.initialize()
    return store
