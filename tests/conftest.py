"""Shared pytest fixtures for ledger-folio."""

from datetime import date
from decimal import Decimal

import pytest

from ledger_folio.analytics.classify import PostingClassifier
from ledger_folio.core.models import (
    Commodity,
    CommodityType,
    FetchResult,
    Posting,
    Price,
    PricePoint,
    PriceSource,
)


@pytest.fixture
def make_commodity():
    """Factory for Commodity with overridable defaults."""

    def _make(name="GOLD", type=CommodityType.METAL, provider="com-yahoo", code="GC=F"):
        return Commodity(
            name=name,
            type=type,
            price=PriceSource(provider=provider, code=code),
        )

    return _make


@pytest.fixture
def make_price():
    """Factory for Price."""

    def _make(
        value,
        on=date(2024, 1, 1),
        name="GOLD",
        code="GC=F",
        type=CommodityType.METAL,
    ):
        return Price(
            commodity_type=type,
            commodity_id=code,
            commodity_name=name,
            date=on,
            value=Decimal(str(value)),
        )

    return _make


@pytest.fixture
def make_result(make_price):
    """Factory for FetchResult from (date, value) pairs."""

    def _make(name="GOLD", code="GC=F", type=CommodityType.METAL, points=()):
        return FetchResult(
            commodity_type=type,
            name=name,
            code=code,
            prices=[make_price(v, on=d, name=name, code=code, type=type) for d, v in points],
        )

    return _make


@pytest.fixture
def make_posting():
    """Factory for Posting. Amounts accept ints, strs or Decimals."""

    def _make(
        account,
        amount,
        on=date(2023, 1, 1),
        commodity="INR",
        quantity=None,
        market_amount=None,
        transaction_id="",
    ):
        amount = Decimal(str(amount))
        return Posting(
            date=on,
            account=account,
            commodity=commodity,
            quantity=Decimal(str(quantity)) if quantity is not None else amount,
            amount=amount,
            market_amount=(
                Decimal(str(market_amount)) if market_amount is not None else None
            ),
            transaction_id=transaction_id,
        )

    return _make


@pytest.fixture
def classifier() -> PostingClassifier:
    return PostingClassifier()


@pytest.fixture
def gold_points() -> list[PricePoint]:
    return [
        PricePoint(date=date(2024, 1, 1), value=Decimal("100")),
        PricePoint(date=date(2024, 2, 1), value=Decimal("110")),
    ]
