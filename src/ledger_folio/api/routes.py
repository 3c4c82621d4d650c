"""FastAPI route definitions for the Ledger Folio API."""

from __future__ import annotations

import asyncio
from datetime import date

from fastapi import APIRouter, Depends, Query

import ledger_folio
from ledger_folio.analytics import (
    PostingClassifier,
    asset_balance,
    asset_distribution,
    build_dashboard,
    checking_balance,
)
from ledger_folio.api.deps import (
    get_as_of,
    get_classifier,
    get_config,
    get_postings,
    get_registry,
    get_store,
)
from ledger_folio.api.schemas import (
    BalanceResponse,
    DashboardResponse,
    DistributionResponse,
    HealthResponse,
    PriceListResponse,
    PriceResponse,
    SyncResponse,
)
from ledger_folio.core.config import FolioConfig
from ledger_folio.core.models import CommodityType, Posting
from ledger_folio.prices.registry import ProviderRegistry
from ledger_folio.prices.store import SqlitePriceStore
from ledger_folio.prices.sync import sync_commodity_prices

router = APIRouter()


# -- Health --


@router.get("/health", response_model=HealthResponse)
async def health_check(
    store: SqlitePriceStore = Depends(get_store),
    config: FolioConfig = Depends(get_config),
):
    """Service version and price store size."""
    return HealthResponse(
        status="ok",
        version=ledger_folio.__version__,
        commodities=len(config.commodities),
        total_prices=await store.count(),
    )


# -- Prices --


@router.get("/prices", response_model=PriceListResponse)
async def list_prices(
    commodity: str | None = Query(None, description="Filter by commodity name"),
    commodity_type: CommodityType | None = Query(None, alias="type"),
    store: SqlitePriceStore = Depends(get_store),
):
    """Stored price history, ordered by date."""
    prices = await store.get_prices(
        commodity_type=commodity_type,
        commodity_name=commodity,
    )
    return PriceListResponse(
        total=len(prices),
        items=[
            PriceResponse(
                commodity_type=str(p.commodity_type),
                commodity_id=p.commodity_id,
                commodity_name=p.commodity_name,
                date=p.date,
                value=p.value,
            )
            for p in prices
        ],
    )


# -- Sync --


@router.post("/sync", response_model=SyncResponse)
async def sync_prices(
    config: FolioConfig = Depends(get_config),
    store: SqlitePriceStore = Depends(get_store),
    registry: ProviderRegistry = Depends(get_registry),
):
    """Fetch every configured commodity and replace its stored prices."""
    report = await sync_commodity_prices(
        config.commodities,
        registry,
        store,
        batch_size=config.sync.batch_size,
        shuffle=config.sync.shuffle,
    )
    return SyncResponse(**report.model_dump())


# -- Analytics --


@router.get("/balance", response_model=BalanceResponse)
async def balance(
    checking: bool = Query(False, description="Checking accounts instead of all assets"),
    as_of: date = Depends(get_as_of),
    postings: list[Posting] = Depends(get_postings),
    classifier: PostingClassifier = Depends(get_classifier),
):
    """Per-account investment, market value and returns."""
    compute = checking_balance if checking else asset_balance
    return BalanceResponse(
        as_of=as_of,
        breakdowns=await asyncio.to_thread(compute, postings, classifier, as_of),
    )


@router.get("/distribution", response_model=DistributionResponse)
async def distribution(
    as_of: date = Depends(get_as_of),
    postings: list[Posting] = Depends(get_postings),
    classifier: PostingClassifier = Depends(get_classifier),
):
    """Market value split across first-level asset groups."""
    return DistributionResponse(
        as_of=as_of,
        items=await asyncio.to_thread(asset_distribution, postings, classifier, as_of),
    )


@router.get("/dashboard", response_model=DashboardResponse)
async def dashboard(
    as_of: date = Depends(get_as_of),
    postings: list[Posting] = Depends(get_postings),
    classifier: PostingClassifier = Depends(get_classifier),
):
    """Balances and distribution computed concurrently."""
    result = await build_dashboard(postings, classifier, as_of)
    return DashboardResponse(as_of=as_of, **result)
