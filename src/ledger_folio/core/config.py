"""Configuration loading, validation, and access."""

from __future__ import annotations

import os
from pathlib import Path

import yaml
from pydantic import BaseModel, ConfigDict, field_validator, model_validator

from ledger_folio.core.exceptions import ConfigError
from ledger_folio.core.models import Commodity, CommodityType


class StorageConfig(BaseModel):
    """Price store configuration."""

    model_config = ConfigDict(frozen=True)

    sqlite_path: str = "./data/ledger_folio.db"


class SyncConfig(BaseModel):
    """Price synchronization settings."""

    model_config = ConfigDict(frozen=True)

    batch_size: int = 5000
    shuffle: bool = True

    @field_validator("batch_size")
    @classmethod
    def batch_size_positive(cls, v: int) -> int:
        if v < 1:
            raise ValueError("batch_size must be >= 1")
        return v


class YahooConfig(BaseModel):
    """Yahoo Finance chart API provider settings."""

    model_config = ConfigDict(frozen=True)

    max_rate: int = 5
    timeout: float = 15.0
    base_url: str = "https://query2.finance.yahoo.com"

    @field_validator("max_rate")
    @classmethod
    def max_rate_positive(cls, v: int) -> int:
        if v < 1:
            raise ValueError("max_rate must be >= 1")
        return v


class MFApiConfig(BaseModel):
    """mfapi.in mutual fund NAV provider settings."""

    model_config = ConfigDict(frozen=True)

    timeout: float = 30.0
    base_url: str = "https://api.mfapi.in"


class LedgerConfig(BaseModel):
    """External ledger CLI settings."""

    model_config = ConfigDict(frozen=True)

    binary: str = "ledger"
    timeout_seconds: int = 120


class APIConfig(BaseModel):
    """FastAPI server configuration."""

    model_config = ConfigDict(frozen=True)

    host: str = "0.0.0.0"
    port: int = 7500
    api_key: str | None = None


class FolioConfig(BaseModel):
    """Root configuration for ledger-folio."""

    model_config = ConfigDict(frozen=True)

    journal_path: str = "./main.ledger"
    default_currency: str = "INR"
    storage: StorageConfig = StorageConfig()
    sync: SyncConfig = SyncConfig()
    yahoo: YahooConfig = YahooConfig()
    mfapi: MFApiConfig = MFApiConfig()
    ledger: LedgerConfig = LedgerConfig()
    api: APIConfig = APIConfig()
    commodities: list[Commodity] = []

    @model_validator(mode="after")
    def commodities_unique(self) -> FolioConfig:
        seen: set[tuple[CommodityType, str]] = set()
        for commodity in self.commodities:
            if commodity.key in seen:
                raise ValueError(
                    f"duplicate commodity {commodity.name!r} of type {commodity.type}"
                )
            seen.add(commodity.key)
        return self


def load_config(
    config_path: str | None = None,
    env_prefix: str = "LEDGER_FOLIO_",
) -> FolioConfig:
    """Build the configuration from defaults, a YAML file and the environment.

    Environment variables win over the file. A double underscore descends
    one level, so ``LEDGER_FOLIO_SYNC__BATCH_SIZE=1000`` sets
    ``sync.batch_size``. Values stay strings; the models coerce them.
    The commodity list can only come from YAML.
    """
    path = _config_file(config_path)
    data = _read_yaml(path) if path is not None else {}
    for keys, value in _env_overrides(env_prefix):
        _set_nested(data, keys, value)

    try:
        return FolioConfig.model_validate(data)
    except ValueError as e:
        raise ConfigError(str(e), context={"source": "load_config"}) from e


def _config_file(explicit: str | None) -> Path | None:
    """The explicit path, then ``$LEDGER_FOLIO_CONFIG``, then ./ledger-folio.yml."""
    for source, candidate in (
        ("config_path", explicit),
        ("LEDGER_FOLIO_CONFIG", os.environ.get("LEDGER_FOLIO_CONFIG")),
    ):
        if candidate:
            if not Path(candidate).exists():
                raise ConfigError(
                    f"Config file not found: {candidate}",
                    context={"field": source, "value": candidate},
                )
            return Path(candidate)

    default = Path("ledger-folio.yml")
    return default if default.exists() else None


def _read_yaml(path: Path) -> dict:
    try:
        data = yaml.safe_load(path.read_text()) or {}
    except yaml.YAMLError as e:
        raise ConfigError(
            f"Failed to parse YAML config: {e}",
            context={"field": "config_file", "value": str(path)},
        ) from e
    if not isinstance(data, dict):
        raise ConfigError(
            f"YAML config must be a mapping, got {type(data).__name__}",
            context={"field": "config_file", "value": str(path)},
        )
    return data


def _env_overrides(prefix: str) -> list[tuple[list[str], str]]:
    overrides = []
    for key, value in sorted(os.environ.items()):
        if not key.startswith(prefix):
            continue
        keys = key[len(prefix) :].lower().split("__")
        if keys == ["config"] or keys[0] == "commodities":
            continue
        overrides.append((keys, value))
    return overrides


def _set_nested(data: dict, keys: list[str], value: str) -> None:
    for key in keys[:-1]:
        if not isinstance(data.get(key), dict):
            data[key] = {}
        data = data[key]
    data[keys[-1]] = value
