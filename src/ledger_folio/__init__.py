"""ledger-folio: commodity price sync and portfolio breakdowns over a ledger journal."""

__version__ = "0.1.0"
