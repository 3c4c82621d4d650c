"""Tests for the FastAPI REST API module."""

from __future__ import annotations

import asyncio
from datetime import date
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient

from ledger_folio.api.app import create_app
from ledger_folio.api.deps import get_postings
from ledger_folio.core.config import APIConfig, FolioConfig, StorageConfig
from ledger_folio.core.exceptions import LedgerError


# -- Fixtures --


def _make_config(tmp_path, api_key=None):
    gold = tmp_path / "gold.csv"
    gold.write_text("date,value\n2024-01-01,100\n2024-02-01,110\n")
    return FolioConfig(
        storage=StorageConfig(sqlite_path=str(tmp_path / "test.db")),
        api=APIConfig(api_key=api_key),
        commodities=[
            {"name": "GOLD", "type": "metal", "price": {"provider": "csv", "code": str(gold)}},
        ],
    )


@pytest.fixture
def postings(make_posting):
    return [
        make_posting("Assets:Checking", 4000, on=date(2023, 1, 1)),
        make_posting("Income:Salary", -4000, on=date(2023, 1, 1)),
        make_posting("Assets:Gold", 1000, on=date(2023, 1, 1), commodity="GOLD",
                     quantity=10, market_amount=1200),
    ]


@pytest.fixture
def app(tmp_path, postings):
    app = create_app(config=_make_config(tmp_path))
    app.dependency_overrides[get_postings] = lambda: postings
    return app


@pytest.fixture
def client(app):
    with TestClient(app) as c:
        yield c


@pytest.fixture
def authed_client(tmp_path):
    with TestClient(create_app(config=_make_config(tmp_path, api_key="test-secret-key"))) as c:
        yield c


# -- Health --


class TestHealth:
    def test_health(self, client):
        resp = client.get("/api/health")
        assert resp.status_code == 200
        data = resp.json()
        assert data["status"] == "ok"
        assert data["commodities"] == 1
        assert data["total_prices"] == 0


# -- Prices / Sync --


class TestPrices:
    def test_sync_then_list(self, client):
        resp = client.post("/api/sync")
        assert resp.status_code == 200
        report = resp.json()
        assert report["prices_inserted"] == 2
        assert report["failed"] == []

        resp = client.get("/api/prices", params={"commodity": "GOLD"})
        assert resp.status_code == 200
        data = resp.json()
        assert data["total"] == 2
        assert [item["date"] for item in data["items"]] == ["2024-01-01", "2024-02-01"]
        assert Decimal(data["items"][1]["value"]) == Decimal("110")

    def test_filter_by_type(self, client):
        client.post("/api/sync")
        assert client.get("/api/prices", params={"type": "stock"}).json()["total"] == 0
        assert client.get("/api/prices", params={"type": "metal"}).json()["total"] == 2

    def test_invalid_type_rejected(self, client):
        assert client.get("/api/prices", params={"type": "bond"}).status_code == 422


# -- Analytics --


class TestAnalytics:
    def test_balance(self, client):
        resp = client.get("/api/balance", params={"as_of": "2024-01-01"})
        assert resp.status_code == 200
        data = resp.json()
        assert data["as_of"] == "2024-01-01"
        assert list(data["breakdowns"]) == ["Assets", "Assets:Checking", "Assets:Gold"]
        gold = data["breakdowns"]["Assets:Gold"]
        assert Decimal(gold["gain_amount"]) == Decimal("200")
        assert Decimal(gold["absolute_return"]) == Decimal("0.2")

    def test_checking_balance(self, client):
        data = client.get("/api/balance", params={"checking": True}).json()
        assert "Assets:Gold" not in data["breakdowns"]
        assert Decimal(data["breakdowns"]["Assets:Checking"]["market_amount"]) == Decimal("4000")

    def test_distribution(self, client):
        data = client.get("/api/distribution").json()
        assert [d["category"] for d in data["items"]] == ["Checking", "Gold"]
        total = sum(Decimal(d["percentage"]) for d in data["items"])
        assert abs(total - 100) < Decimal("1e-6")

    @pytest.mark.parametrize(
        "path, computation",
        [
            ("/api/balance", "asset_balance"),
            ("/api/balance?checking=true", "checking_balance"),
            ("/api/distribution", "asset_distribution"),
        ],
    )
    def test_analytics_run_in_worker_thread(self, client, monkeypatch, path, computation):
        offloaded = []
        to_thread = asyncio.to_thread

        async def _recording(fn, *args, **kwargs):
            offloaded.append(fn.__name__)
            return await to_thread(fn, *args, **kwargs)

        monkeypatch.setattr(asyncio, "to_thread", _recording)

        assert client.get(path).status_code == 200
        assert offloaded == [computation]

    def test_dashboard(self, client):
        resp = client.get("/api/dashboard", params={"as_of": "2024-01-01"})
        assert resp.status_code == 200
        data = resp.json()
        assert set(data) == {"as_of", "checking_balance", "asset_balance", "asset_distribution"}
        assert Decimal(data["asset_balance"]["Assets"]["market_amount"]) == Decimal("5200")

    def test_ledger_failure_maps_to_502(self, app):
        def _broken():
            raise LedgerError("ledger binary 'ledger' not found")

        app.dependency_overrides[get_postings] = _broken
        with TestClient(app) as c:
            resp = c.get("/api/balance")
        assert resp.status_code == 502
        assert resp.json()["error"] == "LedgerError"


# -- Auth --


class TestApiKey:
    def test_health_exempt(self, authed_client):
        assert authed_client.get("/api/health").status_code == 200

    def test_missing_key_rejected(self, authed_client):
        resp = authed_client.get("/api/prices")
        assert resp.status_code == 401

    def test_valid_key_accepted(self, authed_client):
        resp = authed_client.get("/api/prices", headers={"X-API-Key": "test-secret-key"})
        assert resp.status_code == 200
