"""Posting source backed by the external ``ledger`` command-line tool.

The journal is never parsed here. ``ledger`` is run as a subprocess with a
custom output format using ASCII unit separators between fields, and the
resulting lines are turned into :class:`Posting` records.
"""

from __future__ import annotations

import asyncio
import logging
import re
from datetime import date, datetime
from decimal import Decimal, InvalidOperation

from ledger_folio.core.config import LedgerConfig
from ledger_folio.core.exceptions import LedgerError
from ledger_folio.core.models import CommodityType, Posting, Price

logger = logging.getLogger(__name__)

FIELD_SEPARATOR = "\x1f"

_POSTING_FIELDS = (
    "%(format_date(date, \"%Y-%m-%d\"))",
    "%(payee)",
    "%(display_account)",
    "%(commodity(scrub(display_amount)))",
    "%(quantity(scrub(display_amount)))",
    "%(quantity(scrub(market(amount, date, \"{currency}\"))))",
    "%(xact.filename):%(xact.beg_line)",
)

_NUMBER = re.compile(r"-?[\d,]*\.?\d+")
_PRICE_LINE = re.compile(
    r'^P\s+(\S+)(?:\s+\d{1,2}:\d{2}(?::\d{2})?)?\s+("[^"]+"|\S+)\s+(.+)$'
)


def posting_format(currency: str) -> str:
    return FIELD_SEPARATOR.join(_POSTING_FIELDS).replace("{currency}", currency) + "\n"


def _parse_date(raw: str) -> date:
    raw = raw.strip()
    for fmt in ("%Y-%m-%d", "%Y/%m/%d"):
        try:
            return datetime.strptime(raw, fmt).date()
        except ValueError:
            continue
    raise ValueError(f"Unrecognized date: {raw!r}")


def _parse_decimal(raw: str) -> Decimal:
    match = _NUMBER.search(raw.replace(" ", ""))
    if match is None:
        raise ValueError(f"No number in {raw!r}")
    return Decimal(match.group(0).replace(",", ""))


def parse_postings(output: str, default_currency: str) -> list[Posting]:
    """Parse ``ledger csv`` output produced with :func:`posting_format`."""
    postings: list[Posting] = []
    for lineno, line in enumerate(output.splitlines(), start=1):
        if not line.strip():
            continue
        fields = line.split(FIELD_SEPARATOR)
        if len(fields) != len(_POSTING_FIELDS):
            raise LedgerError(
                f"Unexpected ledger output on line {lineno}: {line[:200]!r}",
                context={"command": "csv", "line": lineno},
            )
        raw_date, payee, account, commodity, quantity, amount, xact_id = fields
        try:
            postings.append(
                Posting(
                    date=_parse_date(raw_date),
                    payee=payee.strip(),
                    account=account,
                    commodity=commodity.strip() or default_currency,
                    quantity=_parse_decimal(quantity),
                    amount=_parse_decimal(amount),
                    transaction_id=xact_id.strip(),
                )
            )
        except (ValueError, InvalidOperation) as e:
            raise LedgerError(
                f"Cannot parse posting on line {lineno}: {e}",
                context={"command": "csv", "line": lineno},
            ) from e
    return postings


def parse_prices(output: str) -> list[Price]:
    """Parse ``ledger pricedb`` output (``P <date> [time] <commodity> <value>``).

    Journal-declared prices are stored with type ``unknown`` and use the
    commodity name as their identifier.
    """
    prices: list[Price] = []
    for line in output.splitlines():
        match = _PRICE_LINE.match(line.strip())
        if match is None:
            continue
        raw_date, commodity, raw_value = match.groups()
        commodity = commodity.strip('"')
        try:
            prices.append(
                Price(
                    commodity_type=CommodityType.UNKNOWN,
                    commodity_id=commodity,
                    commodity_name=commodity,
                    date=_parse_date(raw_date),
                    value=_parse_decimal(raw_value),
                )
            )
        except (ValueError, InvalidOperation):
            logger.warning("Skipping unparseable price line: %s", line)
    return prices


async def _terminate(process: asyncio.subprocess.Process) -> None:
    """Kill a child that outlived its timeout and reap it."""
    try:
        process.kill()
    except ProcessLookupError:
        pass
    await process.wait()


class LedgerCLI:
    """Runs the ``ledger`` binary against a journal file.

    Parameters
    ----------
    journal_path : str
        Path of the journal passed with ``-f``.
    default_currency : str
        Commodity that amounts are valued in.
    config : LedgerConfig | None
        Binary name and subprocess timeout.
    """

    def __init__(
        self,
        journal_path: str,
        default_currency: str,
        config: LedgerConfig | None = None,
    ) -> None:
        self._journal = journal_path
        self._currency = default_currency
        self._config = config or LedgerConfig()

    @property
    def default_currency(self) -> str:
        return self._currency

    async def _run(self, *args: str) -> str:
        cmd = [self._config.binary, "-f", self._journal, *args]
        command = args[0] if args else ""
        try:
            process = await asyncio.create_subprocess_exec(
                *cmd,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
            stdout, stderr = await asyncio.wait_for(
                process.communicate(),
                timeout=self._config.timeout_seconds,
            )
        except asyncio.TimeoutError:
            await _terminate(process)
            raise LedgerError(
                f"ledger {command} timed out after {self._config.timeout_seconds}s",
                context={"command": command, "return_code": None},
            )
        except FileNotFoundError:
            raise LedgerError(
                f"ledger binary {self._config.binary!r} not found",
                context={"command": command, "return_code": None},
            )

        if process.returncode != 0:
            raise LedgerError(
                f"ledger {command} exited with code {process.returncode}: "
                f"{stderr.decode('utf-8', errors='replace')[:500]}",
                context={"command": command, "return_code": process.returncode},
            )
        return stdout.decode("utf-8")

    async def postings(self) -> list[Posting]:
        """All postings of the journal, in journal order."""
        output = await self._run("csv", "--csv-format", posting_format(self._currency))
        postings = parse_postings(output, self._currency)
        logger.info("Loaded %d postings from %s", len(postings), self._journal)
        return postings

    async def prices(self) -> list[Price]:
        """Prices declared in the journal with ``P`` directives."""
        output = await self._run("pricedb")
        prices = parse_prices(output)
        logger.info("Loaded %d journal prices from %s", len(prices), self._journal)
        return prices
