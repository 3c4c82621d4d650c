"""Dependency injection for FastAPI routes."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date

from fastapi import Depends, Query, Request
from fastapi.responses import JSONResponse

from ledger_folio.analytics.classify import AccountRules, PostingClassifier
from ledger_folio.core.config import FolioConfig
from ledger_folio.core.models import Posting
from ledger_folio.ledger.journal import LedgerCLI
from ledger_folio.ledger.source import load_postings
from ledger_folio.prices.registry import ProviderRegistry
from ledger_folio.prices.store import SqlitePriceStore


@dataclass
class AppState:
    """Shared application state, attached to app.state during lifespan."""

    config: FolioConfig
    store: SqlitePriceStore
    registry: ProviderRegistry
    ledger: LedgerCLI


def get_config(request: Request) -> FolioConfig:
    return request.app.state.app_state.config


def get_store(request: Request) -> SqlitePriceStore:
    return request.app.state.app_state.store


def get_registry(request: Request) -> ProviderRegistry:
    return request.app.state.app_state.registry


def get_as_of(
    as_of: date | None = Query(None, description="Valuation date. Default: today."),
) -> date:
    return as_of or date.today()


async def get_postings(
    request: Request,
    as_of: date = Depends(get_as_of),
) -> list[Posting]:
    """Dependency: journal postings valued at the stored prices."""
    state: AppState = request.app.state.app_state
    return await load_postings(state.ledger, state.store, as_of)


def get_classifier(
    postings: list[Posting] = Depends(get_postings),
    config: FolioConfig = Depends(get_config),
) -> PostingClassifier:
    return PostingClassifier(
        postings, AccountRules(default_currency=config.default_currency)
    )


EXEMPT_PATHS = {"/api/health"}


async def api_key_middleware(request: Request, call_next):  # type: ignore[no-untyped-def]
    """Middleware: validate X-API-Key header when authentication is enabled."""
    if request.url.path in EXEMPT_PATHS:
        return await call_next(request)

    config = request.app.state.app_state.config
    if config.api.api_key:
        api_key = request.headers.get("X-API-Key")
        if api_key != config.api.api_key:
            return JSONResponse(
                status_code=401,
                content={"error": "Unauthorized", "detail": "Invalid or missing API key"},
            )
    return await call_next(request)
