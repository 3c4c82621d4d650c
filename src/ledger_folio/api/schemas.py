"""API-specific request/response schemas (Pydantic v2)."""

from __future__ import annotations

from datetime import date
from decimal import Decimal

from pydantic import BaseModel

from ledger_folio.core.models import AccountBreakdown, AccountDistribution


# -- Error --


class ErrorResponse(BaseModel):
    """Standard error envelope."""

    error: str
    detail: str | None = None


# -- Prices --


class PriceResponse(BaseModel):
    """Single stored price in API response format."""

    commodity_type: str
    commodity_id: str
    commodity_name: str
    date: date
    value: Decimal


class PriceListResponse(BaseModel):
    total: int
    items: list[PriceResponse]


# -- Sync --


class SyncResponse(BaseModel):
    """Outcome of one price sync cycle."""

    commodities: int
    prices_inserted: int
    failed: list[str]
    fetch_seconds: float
    write_seconds: float


# -- Analytics --


class BalanceResponse(BaseModel):
    """Account breakdowns keyed by group, in group order."""

    as_of: date
    breakdowns: dict[str, AccountBreakdown]


class DistributionResponse(BaseModel):
    as_of: date
    items: list[AccountDistribution]


class DashboardResponse(BaseModel):
    """Checking balance, asset balance and asset distribution."""

    as_of: date
    checking_balance: dict[str, AccountBreakdown]
    asset_balance: dict[str, AccountBreakdown]
    asset_distribution: list[AccountDistribution]


# -- Health --


class HealthResponse(BaseModel):
    """Response for GET /api/health."""

    status: str = "ok"
    version: str
    commodities: int
    total_prices: int
