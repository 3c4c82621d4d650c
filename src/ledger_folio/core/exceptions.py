"""Custom exception hierarchy for ledger-folio."""

from typing import Any


class FolioError(Exception):
    """Base exception for all ledger-folio errors.

    All exceptions carry an optional `context` dict for structured error
    metadata that can be logged or serialized without parsing the message.
    """

    def __init__(self, message: str, context: dict[str, Any] | None = None):
        super().__init__(message)
        self.context = context or {}


class ConfigError(FolioError):
    """Invalid or missing configuration.

    Raised by load_config() during startup. Should be treated as fatal.

    Context keys:
        field: str - the config field that failed validation
        value: Any - the invalid value
    """


class PriceFetchError(FolioError):
    """A price provider could not return a history for a commodity.

    Policy: log and continue with an empty price list. Never aborts a
    sync cycle.

    Context keys:
        provider: str - provider code
        code: str - provider-side commodity identifier
        commodity: str - commodity name
    """


class ProviderNotFoundError(PriceFetchError):
    """No provider is registered under the requested code.

    Context keys:
        provider: str - the unknown provider code
    """


class StorageError(FolioError):
    """Database operation failed.

    Policy: raise immediately. A failed replace rolls back as a whole and
    fails the sync cycle.

    Context keys:
        operation: str - "replace", "query", "migrate", etc.
        table: str - the table involved
    """


class LedgerError(FolioError):
    """The external ledger CLI failed or produced unreadable output.

    Context keys:
        command: str - the ledger sub-command
        return_code: int | None - process exit status
    """
