"""Pydantic data models: the system's type contracts."""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, field_validator, model_validator

# --- Type Aliases ---

AccountName = str
CommodityName = str
ProviderCode = str

ACCOUNT_SEPARATOR = ":"

# --- Enumerations ---


class CommodityType(StrEnum):
    """Kinds of commodities whose price history is tracked."""

    MUTUAL_FUND = "mutualfund"
    NPS = "nps"
    STOCK = "stock"
    METAL = "metal"
    UNKNOWN = "unknown"


# --- Commodity Models ---


class PriceSource(BaseModel):
    """Where a commodity's prices come from."""

    model_config = ConfigDict(frozen=True)

    provider: ProviderCode
    code: str

    @field_validator("provider", "code")
    @classmethod
    def not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("price provider and code must not be blank")
        return v.strip()


class Commodity(BaseModel):
    """A tradable instrument tracked for price history.

    Identity is (type, name). Loaded from configuration, never persisted.
    """

    model_config = ConfigDict(frozen=True)

    name: CommodityName
    type: CommodityType = CommodityType.UNKNOWN
    price: PriceSource

    @property
    def key(self) -> tuple[CommodityType, CommodityName]:
        return (self.type, self.name)


# --- Price Models ---


class PricePoint(BaseModel):
    """A single dated value as returned by a price provider."""

    model_config = ConfigDict(frozen=True)

    date: date
    value: Decimal


class Price(BaseModel):
    """A stored price record.

    Duplicate dates for the same commodity are allowed; consumers may only
    rely on ordering by date.
    """

    model_config = ConfigDict(frozen=True)

    commodity_type: CommodityType
    commodity_id: str
    commodity_name: CommodityName
    date: date
    value: Decimal


class FetchResult(BaseModel):
    """Output of one fetch task: the full price set for one commodity.

    An empty ``prices`` list is a valid result and means the fetch failed
    or the provider had no data.
    """

    model_config = ConfigDict(frozen=True)

    commodity_type: CommodityType
    name: CommodityName
    code: str
    prices: list[Price] = []

    @property
    def identity(self) -> tuple[CommodityType, CommodityName, str]:
        return (self.commodity_type, self.name, self.code)


class SyncReport(BaseModel):
    """Timing and count metrics for one sync cycle."""

    model_config = ConfigDict(frozen=True)

    commodities: int
    prices_inserted: int
    failed: list[CommodityName] = []
    fetch_seconds: float = 0.0
    write_seconds: float = 0.0


# --- Ledger Models ---


class Posting(BaseModel):
    """One dated leg of a ledger transaction.

    ``amount`` is the cost in the default currency, ``market_amount`` the
    value at the current market price. Postings are never mutated; the
    market annotator returns copies.
    """

    model_config = ConfigDict(frozen=True)

    date: date
    payee: str = ""
    account: AccountName
    commodity: CommodityName
    quantity: Decimal
    amount: Decimal
    market_amount: Decimal
    transaction_id: str = ""

    @model_validator(mode="before")
    @classmethod
    def default_market_amount(cls, data: Any) -> Any:
        if isinstance(data, dict) and data.get("market_amount") is None:
            data = {**data, "market_amount": data.get("amount")}
        return data

    @field_validator("account")
    @classmethod
    def account_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("account must not be blank")
        return v.strip()

    @property
    def account_parts(self) -> list[str]:
        return self.account.split(ACCOUNT_SEPARATOR)


class CashFlow(BaseModel):
    """A dated cash flow from the investor's perspective (outflow < 0)."""

    model_config = ConfigDict(frozen=True)

    date: date
    amount: Decimal


# --- Analytics Models ---


class AccountBreakdown(BaseModel):
    """Financial metrics for one account group.

    Recomputed on every request. ``gain_amount`` and ``absolute_return``
    are derived; use :meth:`from_amounts` to keep them consistent.
    """

    model_config = ConfigDict(frozen=True)

    group: AccountName
    investment_amount: Decimal = Decimal(0)
    withdrawal_amount: Decimal = Decimal(0)
    market_amount: Decimal = Decimal(0)
    balance_units: Decimal = Decimal(0)
    xirr: Decimal = Decimal(0)
    gain_amount: Decimal = Decimal(0)
    absolute_return: Decimal = Decimal(0)

    @classmethod
    def from_amounts(
        cls,
        group: AccountName,
        investment_amount: Decimal,
        withdrawal_amount: Decimal,
        market_amount: Decimal,
        balance_units: Decimal = Decimal(0),
        xirr: Decimal = Decimal(0),
    ) -> AccountBreakdown:
        net_investment = investment_amount - withdrawal_amount
        gain_amount = market_amount - net_investment
        absolute_return = Decimal(0)
        if not investment_amount.is_zero():
            absolute_return = gain_amount / investment_amount
        return cls(
            group=group,
            investment_amount=investment_amount,
            withdrawal_amount=withdrawal_amount,
            market_amount=market_amount,
            balance_units=balance_units,
            xirr=xirr,
            gain_amount=gain_amount,
            absolute_return=absolute_return,
        )

    @property
    def net_investment(self) -> Decimal:
        return self.investment_amount - self.withdrawal_amount


class AccountDistribution(BaseModel):
    """Share of one first-level account group in the root's market value."""

    model_config = ConfigDict(frozen=True)

    category: str
    amount: Decimal
    percentage: Decimal
