"""Integration test fixtures: real files and SQLite, no network."""

from __future__ import annotations

from pathlib import Path

import pytest

from ledger_folio.core.config import FolioConfig, StorageConfig
from ledger_folio.prices.store import SqlitePriceStore

JOURNAL = """\
2023/01/01 Salary
    Assets:Checking                         10000 INR
    Income:Salary

2023/01/02 Buy gold
    Assets:Gold                   10 GOLD @ 100 INR
    Assets:Checking

2023/01/03 Buy index fund
    Assets:Equity:NIFTY          100 NIFTY @ 20 INR
    Assets:Checking

P 2023/06/01 GOLD 115 INR
"""


@pytest.fixture
def price_files(tmp_path: Path) -> dict[str, Path]:
    gold = tmp_path / "gold.csv"
    gold.write_text("date,value\n2023-01-02,100\n2023-12-29,120\n")
    nifty = tmp_path / "nifty.csv"
    nifty.write_text("Date,Close\n2023-01-03,20\n2023-12-29,25\n")
    return {"GOLD": gold, "NIFTY": nifty}


@pytest.fixture
def integration_config(tmp_path: Path, price_files) -> FolioConfig:
    journal = tmp_path / "main.ledger"
    journal.write_text(JOURNAL)
    return FolioConfig(
        journal_path=str(journal),
        storage=StorageConfig(sqlite_path=str(tmp_path / "integration.db")),
        commodities=[
            {
                "name": name,
                "type": "metal" if name == "GOLD" else "mutualfund",
                "price": {"provider": "csv", "code": str(path)},
            }
            for name, path in price_files.items()
        ],
    )


@pytest.fixture
async def integration_store(integration_config: FolioConfig) -> SqlitePriceStore:
    """An initialized file-backed SqlitePriceStore."""
    store = SqlitePriceStore(integration_config.storage)
    await store.initialize()
    yield store
    await store.close()
