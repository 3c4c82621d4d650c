"""FastAPI application factory."""

from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

import ledger_folio
from ledger_folio.api.deps import AppState, api_key_middleware
from ledger_folio.api.routes import router
from ledger_folio.core.config import FolioConfig, load_config
from ledger_folio.core.exceptions import (
    ConfigError,
    FolioError,
    LedgerError,
    PriceFetchError,
    StorageError,
)
from ledger_folio.ledger.journal import LedgerCLI
from ledger_folio.prices.registry import build_registry
from ledger_folio.prices.store import create_store


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application startup/shutdown lifecycle."""
    config = app.state._pending_config or load_config()
    store = await create_store(config.storage)

    app.state.app_state = AppState(
        config=config,
        store=store,
        registry=build_registry(config),
        ledger=LedgerCLI(config.journal_path, config.default_currency, config.ledger),
    )

    yield

    await store.close()


def create_app(config: FolioConfig | None = None) -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        title="Ledger Folio API",
        description="Commodity price history and portfolio breakdowns",
        version=ledger_folio.__version__,
        lifespan=lifespan,
    )

    # Stash config so lifespan can retrieve it
    app.state._pending_config = config

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    if config and config.api.api_key:
        app.middleware("http")(api_key_middleware)

    app.include_router(router, prefix="/api")

    @app.exception_handler(FolioError)
    async def folio_exception_handler(request: Request, exc: FolioError):
        status_map = {
            ConfigError: 400,
            PriceFetchError: 502,
            LedgerError: 502,
            StorageError: 500,
        }
        status = status_map.get(type(exc), 500)
        return JSONResponse(
            status_code=status,
            content={"error": type(exc).__name__, "detail": str(exc)},
        )

    return app
